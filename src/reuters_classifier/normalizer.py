"""Lexical normalization of raw news text into bags of terms.

The pipeline for every whitespace-delimited token is:

1. punctuation stripping (inner quotes/commas/angle brackets are dropped,
   any other non-alphanumeric run is trimmed from both ends),
2. ASCII case folding,
3. stopword filtering against an injected, immutable stopword list,
4. stemming with an injected stemmer (Porter by default).

Tokens that normalize to the empty string are discarded. The normalizer also
keeps corpus-wide frequency counts of raw tokens and normalized terms so that
top-N frequency reports can be produced after a corpus has been processed.
"""

from __future__ import annotations

import bisect
import logging
import re
from collections import Counter
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path

from .models import DocumentSample

logger = logging.getLogger(__name__)

DEFAULT_STOPWORD_PATH = Path(__file__).parent / "data" / "stopwords.txt"

# space, tab, newline, carriage return, vertical tab, form feed
_DELIMITER_RE = re.compile(r"[ \t\n\r\v\f]+")

_PLACEHOLDER = "'"
_INNER_PUNCT = '",<>'
_DROP_INNER = str.maketrans({ch: None for ch in _INNER_PUNCT + _PLACEHOLDER})
_ALNUM = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789")

Stemmer = Callable[[str], str]


# ---------------------------------------------------------------------------
# Stopwords
# ---------------------------------------------------------------------------


class StopwordList:
    """Immutable, sorted list of stopwords with binary-search lookup.

    Args:
        words: Stopwords. Entries are stripped and lowercased; blanks are
            ignored.

    Raises:
        ValueError: If no stopwords remain after cleaning.
    """

    __slots__ = ("_words",)

    def __init__(self, words: Iterable[str]) -> None:
        cleaned = {w.strip().lower() for w in words if w.strip()}
        if not cleaned:
            raise ValueError("Stopword list is empty")
        object.__setattr__(self, "_words", tuple(sorted(cleaned)))

    @classmethod
    def from_file(cls, path: str | Path) -> "StopwordList":
        """Load a whitespace-separated stopword file.

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If the file holds no stopwords.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Stopword file not found: {path}")
        words = path.read_text(encoding="utf-8").split()
        logger.debug("Loaded %d stopwords from %s", len(words), path)
        try:
            return cls(words)
        except ValueError as exc:
            raise ValueError(f"Stopword file {path} contains no entries") from exc

    @classmethod
    def default(cls) -> "StopwordList":
        """The English stopword list shipped with the package."""
        return cls.from_file(DEFAULT_STOPWORD_PATH)

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError("StopwordList is immutable")

    def __contains__(self, word: object) -> bool:
        if not isinstance(word, str):
            return False
        idx = bisect.bisect_left(self._words, word)
        return idx < len(self._words) and self._words[idx] == word

    def __iter__(self):
        return iter(self._words)

    def __len__(self) -> int:
        return len(self._words)

    def __repr__(self) -> str:
        return f"StopwordList({len(self._words)} words)"


def porter_stemmer() -> Stemmer:
    """Return the stem function of NLTK's Porter stemmer (original algorithm)."""
    from nltk.stem.porter import PorterStemmer

    stemmer = PorterStemmer(mode=PorterStemmer.ORIGINAL_ALGORITHM)
    return stemmer.stem


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------


@dataclass
class NormalizerStats:
    """Corpus-wide token statistics gathered while normalizing documents.

    Attributes:
        total_unnormalized_tokens: Raw tokens seen before normalization.
        total_normalized_tokens: Tokens surviving normalization.
        total_unnormalized_terms: Distinct raw tokens.
        total_normalized_terms: Distinct normalized terms.
        top_unnormalized_terms: Most frequent raw tokens with counts.
        top_normalized_terms: Most frequent normalized terms with counts.
    """

    total_unnormalized_tokens: int = 0
    total_normalized_tokens: int = 0
    total_unnormalized_terms: int = 0
    total_normalized_terms: int = 0
    top_unnormalized_terms: list[tuple[str, int]] = field(default_factory=list)
    top_normalized_terms: list[tuple[str, int]] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "total_unnormalized_tokens": self.total_unnormalized_tokens,
            "total_normalized_tokens": self.total_normalized_tokens,
            "total_unnormalized_terms": self.total_unnormalized_terms,
            "total_normalized_terms": self.total_normalized_terms,
            "top_unnormalized_terms": self.top_unnormalized_terms,
            "top_normalized_terms": self.top_normalized_terms,
        }


def _top_n(counter: Counter, n: int) -> list[tuple[str, int]]:
    return sorted(counter.items(), key=lambda x: (-x[1], x[0]))[:n]


# ---------------------------------------------------------------------------
# Normalizer
# ---------------------------------------------------------------------------


class TextNormalizer:
    """Turn raw document text into normalized terms.

    Example::

        normalizer = TextNormalizer()
        sample = normalizer.get_doc_terms("Oil prices rose, oil traders said.")
        sample["oil"]   # 2

    Args:
        stopwords: Stopword list to filter with. Defaults to the packaged
            English list.
        stemmer: Callable mapping a lowercase word to its stem. Defaults to
            the Porter stemmer.
    """

    def __init__(
        self,
        stopwords: StopwordList | None = None,
        stemmer: Stemmer | None = None,
    ) -> None:
        self.stopwords = stopwords if stopwords is not None else StopwordList.default()
        self.stemmer = stemmer if stemmer is not None else porter_stemmer()
        self._unnormalized_terms: Counter[str] = Counter()
        self._normalized_terms: Counter[str] = Counter()
        self._total_unnormalized_tokens = 0
        self._total_normalized_tokens = 0

    def tokenize(self, text: str) -> list[tuple[str, int]]:
        """Split text on whitespace into (token, position) pairs.

        Consecutive delimiters collapse, so no empty tokens are produced.
        """
        tokens = [t for t in _DELIMITER_RE.split(text) if t]
        return [(token, i) for i, token in enumerate(tokens)]

    @staticmethod
    def remove_punctuation(token: str) -> str:
        """Strip punctuation from a token.

        Double quotes, commas and angle brackets are removed wherever they
        occur (as are apostrophes); any other non-alphanumeric characters
        are trimmed from both ends only. ``"U.S."`` becomes ``"U.S"``,
        ``"1,000"`` becomes ``"1000"`` and ``"!!!"`` becomes ``""``.
        """
        result = token.translate(_DROP_INNER)
        start, end = 0, len(result)
        while start < end and result[start] not in _ALNUM:
            start += 1
        while end > start and result[end - 1] not in _ALNUM:
            end -= 1
        return result[start:end]

    def is_stopword(self, word: str) -> bool:
        return word in self.stopwords

    def normalize(self, token: str) -> str:
        """Normalize a single token; returns ``""`` if it should be dropped."""
        result = self.remove_punctuation(token).lower()
        if not result or self.is_stopword(result):
            return ""
        return self.stemmer(result)

    def normalize_all(self, tokens: Iterable[str]) -> list[str]:
        """Normalize every token and drop the ones that become empty."""
        normalized = (self.normalize(token) for token in tokens)
        return [term for term in normalized if term]

    def get_doc_positions(self, text: str) -> list[tuple[str, int]]:
        """Normalized (term, position) pairs of a document.

        Positions refer to the token index before normalization, so gaps
        show where stopwords and punctuation were removed. Updates the
        corpus statistics.
        """
        tokens = self.tokenize(text)
        self._unnormalized_terms.update(token for token, _ in tokens)
        self._total_unnormalized_tokens += len(tokens)

        positions = []
        for token, pos in tokens:
            term = self.normalize(token)
            if term:
                positions.append((term, pos))

        self._normalized_terms.update(term for term, _ in positions)
        self._total_normalized_tokens += len(positions)
        return positions

    def get_doc_terms(self, text: str) -> DocumentSample:
        """Normalize a raw document and count its terms."""
        return DocumentSample.from_terms(term for term, _ in self.get_doc_positions(text))

    def stats(self, top_n: int = 20) -> NormalizerStats:
        """Snapshot of the statistics accumulated so far."""
        return NormalizerStats(
            total_unnormalized_tokens=self._total_unnormalized_tokens,
            total_normalized_tokens=self._total_normalized_tokens,
            total_unnormalized_terms=len(self._unnormalized_terms),
            total_normalized_terms=len(self._normalized_terms),
            top_unnormalized_terms=_top_n(self._unnormalized_terms, top_n),
            top_normalized_terms=_top_n(self._normalized_terms, top_n),
        )

    def reset_stats(self) -> None:
        self._unnormalized_terms.clear()
        self._normalized_terms.clear()
        self._total_unnormalized_tokens = 0
        self._total_normalized_tokens = 0
