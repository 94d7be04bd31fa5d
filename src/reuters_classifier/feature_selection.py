"""Mutual-Information feature selection.

For a target class, the mutual information between the binary events
"term occurs in the document" and "document belongs to the class" is
computed from a 2x2 contingency table per term. The highest-scoring terms
per class are kept and every training document is pruned down to the top
terms of its own class before the classifier is fitted.
"""

from __future__ import annotations

import heapq
import logging
import math
from collections import defaultdict
from collections.abc import Hashable, Iterable, Mapping, Sequence
from typing import TypeVar

from .models import DocumentSample

logger = logging.getLogger(__name__)

Label = TypeVar("Label", bound=Hashable)


def _check_lengths(x: Sequence, y: Sequence) -> None:
    if len(x) != len(y):
        raise ValueError(
            f"samples ({len(x)}) and labels ({len(y)}) must have same length"
        )


def _term_documents(x: Sequence[DocumentSample]) -> dict[str, list[int]]:
    """Index from each term to the positions of the documents containing it."""
    index: dict[str, list[int]] = defaultdict(list)
    for i, sample in enumerate(x):
        for term in sample:
            index[term].append(i)
    return index


def contingency_mutual_info(table: Sequence[Sequence[int]]) -> float:
    """Mutual information (bits) of a 2x2 contingency table of counts.

    ``table[i][j]`` is the number of documents with term-event ``i`` and
    class-event ``j``. Cells with a zero count contribute nothing
    (0 log 0 = 0).
    """
    n = sum(sum(row) for row in table)
    if n == 0:
        return 0.0
    row_sums = [table[0][0] + table[0][1], table[1][0] + table[1][1]]
    col_sums = [table[0][0] + table[1][0], table[0][1] + table[1][1]]

    mi = 0.0
    for i in range(2):
        for j in range(2):
            n_ij = table[i][j]
            if n_ij == 0:
                continue
            mi += (n_ij / n) * math.log2((n * n_ij) / (row_sums[i] * col_sums[j]))
    # Rounding can leave a tiny negative value for independent events.
    return max(mi, 0.0)


def mutual_info(
    x: Sequence[DocumentSample],
    y: Sequence[Label],
    target: Label,
) -> dict[str, float]:
    """Compute the mutual information of every term with class ``target``.

    Args:
        x: Training samples.
        y: Gold labels, parallel to ``x``.
        target: The class to measure association with.

    Returns:
        Mapping of every term occurring in ``x`` to its MI score (>= 0).

    Raises:
        ValueError: If ``x`` and ``y`` have different lengths.
    """
    _check_lengths(x, y)
    n_samples = len(y)
    n_target = sum(1 for label in y if label == target)
    n_other = n_samples - n_target

    scores: dict[str, float] = {}
    for term, doc_ids in _term_documents(x).items():
        present_target = sum(1 for i in doc_ids if y[i] == target)
        present_other = len(doc_ids) - present_target
        # rows: term absent/present, columns: other/target class
        table = (
            (n_other - present_other, n_target - present_target),
            (present_other, present_target),
        )
        scores[term] = contingency_mutual_info(table)
    return scores


def top_k_terms(scores: Mapping[str, float], k: int) -> list[str]:
    """Return the ``k`` highest-scoring terms, sorted alphabetically.

    Uses a heap built in linear time and ``k`` pops. Ties on the score are
    resolved in favour of the alphabetically smaller term. Asking for more
    terms than exist returns all of them.
    """
    if k < 0:
        raise ValueError(f"k must be non-negative, got {k}")
    heap = [(-score, term) for term, score in scores.items()]
    heapq.heapify(heap)
    selected = [heapq.heappop(heap)[1] for _ in range(min(k, len(heap)))]
    return sorted(selected)


def get_top_words_per_class(
    x: Sequence[DocumentSample],
    y: Sequence[Label],
    classes: Iterable[Label],
    k: int,
) -> dict[Label, list[str]]:
    """Select the ``k`` most informative terms for each class.

    Args:
        x: Training samples.
        y: Gold labels, parallel to ``x``.
        classes: Classes to select terms for.
        k: Number of terms per class.

    Returns:
        Mapping of class to its top terms, each list sorted alphabetically.
        A class whose vocabulary is smaller than ``k`` gets every term.

    Raises:
        ValueError: If lengths differ or ``k`` is negative.
    """
    _check_lengths(x, y)
    if k < 0:
        raise ValueError(f"k must be non-negative, got {k}")

    top_words: dict[Label, list[str]] = {}
    for cls in classes:
        scores = mutual_info(x, y, cls)
        top_words[cls] = top_k_terms(scores, k)
        if len(top_words[cls]) < k:
            logger.info(
                "Class %s: requested %d features, vocabulary has only %d",
                cls, k, len(top_words[cls]),
            )
    return top_words


def remove_unimportant_words(
    x: Sequence[DocumentSample],
    y: Sequence[Label],
    top_words_per_class: Mapping[Label, Iterable[str]],
) -> list[DocumentSample]:
    """Prune every document down to the top terms of its gold class.

    The input samples are left untouched; new samples are returned in the
    same order. Documents whose class has no entry in
    ``top_words_per_class`` are copied unchanged.

    Raises:
        ValueError: If ``x`` and ``y`` have different lengths.
    """
    _check_lengths(x, y)
    keep_sets = {cls: frozenset(words) for cls, words in top_words_per_class.items()}

    pruned: list[DocumentSample] = []
    for sample, label in zip(x, y):
        keep = keep_sets.get(label)
        pruned.append(sample.copy() if keep is None else sample.restrict(keep))

    removed = sum(len(a) for a in x) - sum(len(b) for b in pruned)
    logger.debug("Feature selection removed %d term entries from %d documents", removed, len(x))
    return pruned
