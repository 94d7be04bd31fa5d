"""Multinomial Naive Bayes text classifier with Laplace smoothing.

The classifier works directly on bag-of-terms samples (term -> count).
Fitting estimates class priors as relative frequencies and term likelihoods
from one aggregated "mega document" per class:

    p(term | class) = (count(term, class) + 1) / (terms_in_class + |V|)

where ``V`` is the vocabulary of the whole training set. Prediction sums log
probabilities to avoid underflow; a (term, class) pair that was never seen
during training contributes ``log(1 / |V|)``.

Models persist as flat text: one ``<class> <prior>`` line per class, a blank
line, then one ``<term> <class> <likelihood>`` line per stored pair. Floats
are written with ``repr`` so they are read back bit-identically.
"""

from __future__ import annotations

import io
import logging
import math
from collections import Counter, defaultdict
from collections.abc import Hashable, Sequence
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, TextIO

from .models import DocClass, DocumentSample, label_sort_key

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Multinomial Naive Bayes
# ---------------------------------------------------------------------------


class NaiveBayesClassifier:
    """Multinomial Naive Bayes classifier over term-count samples.

    The classifier is either untrained (empty tables) or fitted, through
    :meth:`fit` or by loading a persisted model.

    Ties between equally scored classes are broken in favour of the class
    that comes first in ``classes_`` (declaration order for enum labels,
    sorted order otherwise), so an empty sample is assigned the class with
    the highest prior.

    Example::

        clf = NaiveBayesClassifier().fit(samples, labels)
        clf.predict_single(DocumentSample({"oil": 2}))   # DocClass.CRUDE

    Args:
        prior: Optional prior table to start from (e.g. a loaded model).
        likelihood: Optional likelihood table matching ``prior``.
    """

    def __init__(
        self,
        prior: Optional[dict] = None,
        likelihood: Optional[dict[str, dict]] = None,
    ) -> None:
        self._prior: dict = {}
        self._likelihood: dict[str, dict] = {}
        self.classes_: list = []
        self.vocabulary: frozenset[str] = frozenset()
        if prior is not None:
            self._set_tables(prior, likelihood or {})

    def _set_tables(self, prior: dict, likelihood: dict[str, dict]) -> None:
        self.classes_ = sorted(prior, key=label_sort_key)
        self._prior = {cls: float(prior[cls]) for cls in self.classes_}
        self._likelihood = {
            term: dict(per_class) for term, per_class in likelihood.items()
        }
        self.vocabulary = frozenset(self._likelihood)

    @property
    def is_fitted(self) -> bool:
        return bool(self.classes_)

    def prior(self) -> dict:
        """Class prior probabilities, in class order."""
        return self._prior

    def likelihood(self) -> dict[str, dict]:
        """Smoothed ``p(term | class)`` for every (term, class) seen in training."""
        return self._likelihood

    def fit(
        self,
        x_train: Sequence[DocumentSample],
        y_train: Sequence,
    ) -> "NaiveBayesClassifier":
        """Estimate priors and likelihoods from labeled samples.

        Any previously fitted state is discarded.

        Args:
            x_train: Training samples.
            y_train: Class labels, parallel to ``x_train``.

        Returns:
            Self (for method chaining).

        Raises:
            ValueError: If the inputs differ in length or are empty.
        """
        if len(x_train) != len(y_train):
            raise ValueError(
                f"samples ({len(x_train)}) and labels ({len(y_train)}) must have same length"
            )
        if len(y_train) == 0:
            raise ValueError("Cannot fit a classifier on an empty training set")

        n_samples = len(y_train)
        class_counts = Counter(y_train)
        prior = {cls: count / n_samples for cls, count in class_counts.items()}

        # One aggregated document per class
        megadocs: dict = defaultdict(Counter)
        vocabulary: set[str] = set()
        for sample, cls in zip(x_train, y_train):
            megadoc = megadocs[cls]
            for term, count in sample.items():
                megadoc[term] += count
                vocabulary.add(term)

        vocab_size = len(vocabulary)
        likelihood: dict[str, dict] = defaultdict(dict)
        for cls, megadoc in megadocs.items():
            denominator = sum(megadoc.values()) + vocab_size
            for term, count in megadoc.items():
                likelihood[term][cls] = (count + 1) / denominator

        self._set_tables(prior, dict(likelihood))
        logger.info(
            "Fitted Naive Bayes on %d samples, %d classes, %d terms",
            n_samples, len(self.classes_), vocab_size,
        )
        return self

    def _check_fitted(self) -> None:
        if not self.is_fitted:
            raise RuntimeError("Classifier has not been fitted. Call fit() first.")

    def log_scores(self, sample: DocumentSample) -> dict:
        """Unnormalized log posterior of every class for one sample."""
        self._check_fitted()
        # With an empty vocabulary no term can match, the fallback is unused.
        fallback = -math.log(len(self.vocabulary)) if self.vocabulary else 0.0
        scores = {}
        for cls in self.classes_:
            score = math.log(self._prior[cls])
            for term, count in sample.items():
                per_class = self._likelihood.get(term)
                if per_class is not None and cls in per_class:
                    score += count * math.log(per_class[cls])
                else:
                    score += count * fallback
            scores[cls] = score
        return scores

    def predict_single(self, sample: DocumentSample):
        """Return the maximum a posteriori class of one sample."""
        scores = self.log_scores(sample)
        best = self.classes_[0]
        for cls in self.classes_[1:]:
            if scores[cls] > scores[best]:
                best = cls
        return best

    def predict(self, samples: Sequence[DocumentSample]) -> list:
        """Predict the class of every sample, preserving order.

        Raises:
            RuntimeError: If the classifier has not been fitted.
        """
        self._check_fitted()
        return [self.predict_single(sample) for sample in samples]

    def predict_proba(self, samples: Sequence[DocumentSample]) -> list[dict]:
        """Posterior class probabilities per sample (log-sum-exp normalized)."""
        self._check_fitted()
        probas = []
        for sample in samples:
            log_scores = self.log_scores(sample)
            max_score = max(log_scores.values())
            exp_scores = {cls: math.exp(s - max_score) for cls, s in log_scores.items()}
            total = sum(exp_scores.values())
            probas.append({cls: s / total for cls, s in exp_scores.items()})
        return probas

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def dump(self, fp: TextIO) -> None:
        """Write the model in the flat text format.

        Raises:
            RuntimeError: If the classifier has not been fitted.
        """
        self._check_fitted()
        for cls in self.classes_:
            fp.write(f"{_label_str(cls)} {self._prior[cls]!r}\n")
        fp.write("\n")
        for term in sorted(self._likelihood):
            per_class = self._likelihood[term]
            for cls in sorted(per_class, key=label_sort_key):
                fp.write(f"{term} {_label_str(cls)} {per_class[cls]!r}\n")

    def dumps(self) -> str:
        buf = io.StringIO()
        self.dump(buf)
        return buf.getvalue()

    def save(self, path: str | Path) -> None:
        """Save the model to a text file, creating parent directories."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            self.dump(f)
        logger.info("Saved model to %s", path)

    @classmethod
    def load(
        cls,
        fp: TextIO,
        parse_label: Callable[[str], Hashable] = DocClass,
    ) -> "NaiveBayesClassifier":
        """Read a model written by :meth:`dump`.

        Args:
            fp: Text stream positioned at the start of a model.
            parse_label: Converts a class name to a label.

        Raises:
            ValueError: If a line is malformed, names an unknown class or
                holds a probability outside (0, 1].
        """
        prior: dict = {}
        likelihood: dict[str, dict] = defaultdict(dict)
        in_prior_block = True

        for lineno, raw in enumerate(fp, 1):
            # Fields are split on single spaces only; terms may hold other whitespace
            line = raw.rstrip("\r\n")
            if in_prior_block:
                if not line:
                    in_prior_block = False
                    continue
                fields = line.split(" ")
                if len(fields) != 2 or not all(fields):
                    raise ValueError(f"Line {lineno}: expected '<class> <prior>', got {line!r}")
                label = _parse_label(parse_label, fields[0], lineno)
                prior[label] = _parse_probability(fields[1], lineno)
            else:
                if not line:
                    continue
                fields = line.split(" ")
                if len(fields) != 3 or not all(fields):
                    raise ValueError(
                        f"Line {lineno}: expected '<term> <class> <likelihood>', got {line!r}"
                    )
                label = _parse_label(parse_label, fields[1], lineno)
                likelihood[fields[0]][label] = _parse_probability(fields[2], lineno)

        if not prior:
            raise ValueError("Model contains no class priors")
        return cls(prior=prior, likelihood=dict(likelihood))

    @classmethod
    def loads(
        cls,
        text: str,
        parse_label: Callable[[str], Hashable] = DocClass,
    ) -> "NaiveBayesClassifier":
        return cls.load(io.StringIO(text), parse_label=parse_label)

    @classmethod
    def from_file(
        cls,
        path: str | Path,
        parse_label: Callable[[str], Hashable] = DocClass,
    ) -> "NaiveBayesClassifier":
        """Load a model saved with :meth:`save`.

        Raises:
            FileNotFoundError: If the model file does not exist.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Model file not found: {path}")
        with open(path, "r", encoding="utf-8") as f:
            return cls.load(f, parse_label=parse_label)


def _label_str(label) -> str:
    return label.value if isinstance(label, Enum) else str(label)


def _parse_label(parse_label: Callable[[str], Hashable], text: str, lineno: int):
    try:
        return parse_label(text)
    except ValueError as exc:
        raise ValueError(f"Line {lineno}: unknown class {text!r}") from exc


def _parse_probability(text: str, lineno: int) -> float:
    try:
        value = float(text)
    except ValueError as exc:
        raise ValueError(f"Line {lineno}: invalid number {text!r}") from exc
    if not 0.0 < value <= 1.0:
        raise ValueError(f"Line {lineno}: probability must be in (0, 1], got {text!r}")
    return value
