"""Data models for news document classification."""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum


class DocClass(str, Enum):
    """Target topic categories of the Reuters-21578 corpus."""

    EARN = "earn"
    ACQ = "acq"
    MONEY_FX = "money-fx"
    GRAIN = "grain"
    CRUDE = "crude"
    OTHER = "other"

    @property
    def ordinal(self) -> int:
        """Declaration position, used for deterministic ordering."""
        return _CLASS_ORDINALS[self]

    @classmethod
    def from_topic(cls, topic: str) -> "DocClass":
        """Map a raw topic name to a class; unknown topics become OTHER."""
        try:
            return cls(topic.strip().lower())
        except ValueError:
            return cls.OTHER

    def __str__(self) -> str:
        return self.value


_CLASS_ORDINALS = {cls: i for i, cls in enumerate(DocClass)}


def label_sort_key(label: Hashable) -> tuple:
    """Sort key giving every label set one deterministic class order.

    ``DocClass`` labels sort by ordinal and other enums by declaration
    order, ahead of any non-enum label, which sorts by its string form.
    """
    if isinstance(label, DocClass):
        return (0, label.ordinal)
    if isinstance(label, Enum):
        return (0, type(label)._member_names_.index(label.name))
    return (1, str(label))


class DocType(str, Enum):
    """Train/test split membership given by the corpus."""

    TRAIN = "train"
    TEST = "test"
    OTHER = "other"


class DocumentSample:
    """Bag-of-terms representation of a single document.

    Maps each term to the number of times it occurs. Stored counts are
    always positive; querying an absent term yields 0. Iteration follows
    insertion order, so it is stable for a given construction sequence.

    Example::

        sample = DocumentSample.from_terms(["oil", "price", "oil"])
        sample["oil"]      # 2
        sample["wheat"]    # 0
        sample.total()     # 3
    """

    __slots__ = ("_counts",)

    def __init__(self, counts: Mapping[str, int] | None = None) -> None:
        self._counts: dict[str, int] = {}
        if counts:
            for term, count in counts.items():
                self.add(term, count)

    @classmethod
    def from_terms(cls, terms: Iterable[str]) -> "DocumentSample":
        """Build a sample by counting every occurrence in ``terms``."""
        sample = cls()
        for term in terms:
            sample.add(term)
        return sample

    def add(self, term: str, count: int = 1) -> None:
        """Increment the count of ``term`` by ``count``.

        Raises:
            ValueError: If ``term`` is empty or ``count`` is not positive.
        """
        if not term:
            raise ValueError("Terms must be non-empty strings")
        if count < 1:
            raise ValueError(f"Count for '{term}' must be >= 1, got {count}")
        self._counts[term] = self._counts.get(term, 0) + count

    def count(self, term: str) -> int:
        return self._counts.get(term, 0)

    def items(self) -> Iterator[tuple[str, int]]:
        return iter(self._counts.items())

    def terms(self) -> list[str]:
        return list(self._counts)

    def total(self) -> int:
        """Total number of term occurrences in the document."""
        return sum(self._counts.values())

    def restrict(self, keep: Iterable[str] | set[str]) -> "DocumentSample":
        """Return a new sample holding only the terms in ``keep``."""
        keep_set = keep if isinstance(keep, (set, frozenset)) else set(keep)
        pruned = DocumentSample()
        pruned._counts = {t: c for t, c in self._counts.items() if t in keep_set}
        return pruned

    def copy(self) -> "DocumentSample":
        clone = DocumentSample()
        clone._counts = dict(self._counts)
        return clone

    def to_dict(self) -> dict[str, int]:
        return dict(self._counts)

    def __getitem__(self, term: str) -> int:
        return self._counts.get(term, 0)

    def __contains__(self, term: object) -> bool:
        return term in self._counts

    def __iter__(self) -> Iterator[str]:
        return iter(self._counts)

    def __len__(self) -> int:
        return len(self._counts)

    def __bool__(self) -> bool:
        return bool(self._counts)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, DocumentSample):
            return self._counts == other._counts
        if isinstance(other, Mapping):
            return self._counts == dict(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"DocumentSample({self._counts!r})"


@dataclass
class RawDocument:
    """A document as extracted from the corpus markup."""

    doc_id: int
    text: str
    doc_type: DocType = DocType.OTHER
    topics: list[DocClass] = field(default_factory=list)

    def target_class(self) -> DocClass | None:
        """The single target topic of the document, if it has exactly one.

        OTHER topics are ignored; documents with no or several target
        topics cannot be used for training or evaluation.
        """
        targets = [t for t in self.topics if t is not DocClass.OTHER]
        return targets[0] if len(targets) == 1 else None


@dataclass
class LabeledDocument:
    """A normalized document paired with its single gold class."""

    doc_id: int
    sample: DocumentSample
    label: DocClass

    def to_dict(self) -> dict:
        return {
            "doc_id": self.doc_id,
            "label": self.label.value,
            "terms": self.sample.to_dict(),
        }
