"""Precision, recall and F-scores for single-label multi-class predictions.

Every function takes parallel ``y_true``/``y_pred`` sequences and an
averaging mode:

- ``AvgType.NONE``: one value per class, as a dict.
- ``AvgType.MICRO``: pooled over all predictions. For single-label data
  precision, recall and F-score all equal the accuracy.
- ``AvgType.MACRO``: unweighted mean of the per-class values.

A per-class value that is undefined (precision of a class that was never
predicted, recall of a class that never occurs in ``y_true``) is reported
as ``nan`` rather than 0, and is left out of macro averages.
"""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

from .models import label_sort_key


class AvgType(str, Enum):
    """Averaging mode for the metric functions."""

    MICRO = "micro"
    MACRO = "macro"
    NONE = "none"


def _check_inputs(y_true: Sequence, y_pred: Sequence) -> None:
    if len(y_true) != len(y_pred):
        raise ValueError(
            f"y_true ({len(y_true)}) and y_pred ({len(y_pred)}) must have the same length"
        )
    if len(y_true) == 0:
        raise ValueError("Cannot evaluate empty label sequences")


def _classes(y_true: Sequence, y_pred: Sequence) -> list:
    return sorted(set(y_true) | set(y_pred), key=label_sort_key)


def _true_positives(y_true: Sequence, y_pred: Sequence) -> Counter:
    return Counter(t for t, p in zip(y_true, y_pred) if t == p)


def _mean_defined(values: dict) -> float:
    defined = [v for v in values.values() if not math.isnan(v)]
    return sum(defined) / len(defined) if defined else math.nan


def accuracy(y_true: Sequence, y_pred: Sequence) -> float:
    """Fraction of predictions equal to the true label."""
    _check_inputs(y_true, y_pred)
    return sum(_true_positives(y_true, y_pred).values()) / len(y_true)


def f_beta(precision: float, recall: float, beta: float = 1.0) -> float:
    """Weighted harmonic mean of precision and recall.

    ``beta > 1`` favours recall, ``beta < 1`` favours precision. Returns
    0.0 when both inputs are zero and ``nan`` when either is ``nan``.
    """
    if math.isnan(precision) or math.isnan(recall):
        return math.nan
    beta_sq = beta * beta
    denominator = beta_sq * precision + recall
    if denominator == 0:
        return 0.0
    return (1 + beta_sq) * precision * recall / denominator


def precision(
    y_true: Sequence,
    y_pred: Sequence,
    average: AvgType = AvgType.MICRO,
):
    """Precision of the predictions.

    Args:
        y_true: Ground truth labels.
        y_pred: Predicted labels.
        average: Averaging mode.

    Returns:
        A float, or a dict of class -> precision for ``AvgType.NONE``.

    Raises:
        ValueError: If the sequences differ in length or are empty.
    """
    _check_inputs(y_true, y_pred)
    average = AvgType(average)
    if average is AvgType.MICRO:
        return accuracy(y_true, y_pred)

    tp = _true_positives(y_true, y_pred)
    predicted = Counter(y_pred)
    per_class = {
        cls: tp[cls] / predicted[cls] if predicted[cls] else math.nan
        for cls in _classes(y_true, y_pred)
    }
    if average is AvgType.NONE:
        return per_class
    return _mean_defined(per_class)


def recall(
    y_true: Sequence,
    y_pred: Sequence,
    average: AvgType = AvgType.MICRO,
):
    """Recall of the predictions.

    Args:
        y_true: Ground truth labels.
        y_pred: Predicted labels.
        average: Averaging mode.

    Returns:
        A float, or a dict of class -> recall for ``AvgType.NONE``.

    Raises:
        ValueError: If the sequences differ in length or are empty.
    """
    _check_inputs(y_true, y_pred)
    average = AvgType(average)
    if average is AvgType.MICRO:
        return accuracy(y_true, y_pred)

    tp = _true_positives(y_true, y_pred)
    actual = Counter(y_true)
    per_class = {
        cls: tp[cls] / actual[cls] if actual[cls] else math.nan
        for cls in _classes(y_true, y_pred)
    }
    if average is AvgType.NONE:
        return per_class
    return _mean_defined(per_class)


def f_score(
    y_true: Sequence,
    y_pred: Sequence,
    average: AvgType = AvgType.MICRO,
    beta: float = 1.0,
):
    """F-beta score of the predictions.

    Micro precision and recall both equal the accuracy, and so does their
    F-beta mean for any beta. Per-class scores combine each class's own
    precision and recall; the macro score is their unweighted mean over
    classes where both are defined.
    """
    _check_inputs(y_true, y_pred)
    average = AvgType(average)
    if average is AvgType.MICRO:
        # f_beta(a, a) == a; returned directly so all three match bit for bit
        return accuracy(y_true, y_pred)

    per_precision = precision(y_true, y_pred, AvgType.NONE)
    per_recall = recall(y_true, y_pred, AvgType.NONE)
    per_class = {
        cls: f_beta(per_precision[cls], per_recall[cls], beta) for cls in per_precision
    }
    if average is AvgType.NONE:
        return per_class
    return _mean_defined(per_class)


# ---------------------------------------------------------------------------
# Report
# ---------------------------------------------------------------------------


@dataclass
class ClassificationReport:
    """All evaluation figures for one set of predictions.

    Attributes:
        micro_precision: Pooled precision (equals accuracy).
        micro_recall: Pooled recall (equals accuracy).
        micro_f_score: Pooled F-score (equals accuracy).
        macro_precision: Mean precision over predicted classes.
        macro_recall: Mean recall over true classes.
        macro_f_score: Mean F-score over classes where it is defined.
        per_class: Class -> {"precision", "recall", "f_score"}; undefined
            values are ``nan``.
        support: Class -> number of true samples.
        confusion_matrix: True class -> predicted class -> count.
        beta: The beta the F-scores were computed with.
    """

    micro_precision: float = 0.0
    micro_recall: float = 0.0
    micro_f_score: float = 0.0
    macro_precision: float = 0.0
    macro_recall: float = 0.0
    macro_f_score: float = 0.0
    per_class: dict = field(default_factory=dict)
    support: dict = field(default_factory=dict)
    confusion_matrix: dict = field(default_factory=dict)
    beta: float = 1.0

    def to_dict(self) -> dict:
        def _r(value: float):
            return None if math.isnan(value) else round(value, 4)

        def _name(cls) -> str:
            return cls.value if isinstance(cls, Enum) else str(cls)

        return {
            "micro": {
                "precision": _r(self.micro_precision),
                "recall": _r(self.micro_recall),
                "f_score": _r(self.micro_f_score),
            },
            "macro": {
                "precision": _r(self.macro_precision),
                "recall": _r(self.macro_recall),
                "f_score": _r(self.macro_f_score),
            },
            "per_class": {
                _name(cls): {k: _r(v) for k, v in values.items()}
                for cls, values in self.per_class.items()
            },
            "support": {_name(cls): n for cls, n in self.support.items()},
            "confusion_matrix": {
                _name(t): {_name(p): n for p, n in row.items()}
                for t, row in self.confusion_matrix.items()
            },
            "beta": self.beta,
        }

    def summary(self) -> str:
        """Human-readable summary of the report."""

        def _fmt(value: float) -> str:
            return f"{'n/a':>10}" if math.isnan(value) else f"{value:>10.4f}"

        lines = [
            f"{'':<12} {'Precision':>10} {'Recall':>10} {'F-score':>10}",
            f"{'Micro':<12} {_fmt(self.micro_precision)} {_fmt(self.micro_recall)} "
            f"{_fmt(self.micro_f_score)}",
            f"{'Macro':<12} {_fmt(self.macro_precision)} {_fmt(self.macro_recall)} "
            f"{_fmt(self.macro_f_score)}",
            "",
            f"{'Class':<12} {'Precision':>10} {'Recall':>10} {'F-score':>10} {'Support':>10}",
            "-" * 56,
        ]
        for cls, m in self.per_class.items():
            lines.append(
                f"{str(cls):<12} {_fmt(m['precision'])} {_fmt(m['recall'])} "
                f"{_fmt(m['f_score'])} {self.support.get(cls, 0):>10}"
            )
        return "\n".join(lines)


def classification_report(
    y_true: Sequence,
    y_pred: Sequence,
    beta: float = 1.0,
) -> ClassificationReport:
    """Compute micro, macro and per-class figures plus the confusion matrix.

    Raises:
        ValueError: If the sequences differ in length or are empty.
    """
    _check_inputs(y_true, y_pred)
    classes = _classes(y_true, y_pred)

    cm = {t: {p: 0 for p in classes} for t in classes}
    for t, p in zip(y_true, y_pred):
        cm[t][p] += 1

    per_precision = precision(y_true, y_pred, AvgType.NONE)
    per_recall = recall(y_true, y_pred, AvgType.NONE)
    per_f = f_score(y_true, y_pred, AvgType.NONE, beta)
    support = Counter(y_true)

    return ClassificationReport(
        micro_precision=precision(y_true, y_pred, AvgType.MICRO),
        micro_recall=recall(y_true, y_pred, AvgType.MICRO),
        micro_f_score=f_score(y_true, y_pred, AvgType.MICRO, beta),
        macro_precision=_mean_defined(per_precision),
        macro_recall=_mean_defined(per_recall),
        macro_f_score=_mean_defined(per_f),
        per_class={
            cls: {
                "precision": per_precision[cls],
                "recall": per_recall[cls],
                "f_score": per_f[cls],
            }
            for cls in classes
        },
        support={cls: support.get(cls, 0) for cls in classes},
        confusion_matrix=cm,
        beta=beta,
    )
