"""Reader for the Reuters-21578 SGML distribution.

Each ``reut2-NNN.sgm`` file holds a sequence of ``<REUTERS>`` elements. For
every element the parser extracts the document id (``NEWID``), the train/test
split (``LEWISSPLIT``), the topic list and the text, which is the title
followed by the body. Tags are scanned with Python's built-in
``html.parser`` module; no external dependencies required.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from html.parser import HTMLParser as StdHTMLParser
from pathlib import Path

from .models import DocClass, DocType, RawDocument

logger = logging.getLogger(__name__)

SGML_EXTENSION = ".sgm"

# Character references found in the corpus and their ASCII replacements
_SPECIAL_CHARS: dict[str, str] = {
    "&#1;": " ",
    "&#2;": " ",
    "&#3;": " ",
    "&#5;": "\x05",
    "&#22;": " ",
    "&#27;": " ",
    "&#30;": "\x1e",
    "&#31;": "\x1f",
    "&#127;": " ",
    "&amp;": "&",
    "&lt;": "<",
    "&gt;": ">",
}


def convert_html_special_chars(text: str) -> str:
    """Replace HTML character references with their ASCII equivalents.

    Each reference is replaced by spaces followed by the character, so the
    text keeps its length and token positions are not shifted.
    """
    for ref, char in _SPECIAL_CHARS.items():
        if ref in text:
            text = text.replace(ref, " " * (len(ref) - 1) + char)
    return text


class _ReutersExtractor(StdHTMLParser):
    """Collects the fields of every ``<REUTERS>`` element fed to it."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=False)
        self.documents: list[RawDocument] = []
        self._current: dict | None = None
        self._capture: str | None = None
        self._in_topics = False
        self._topic_parts: list[str] = []

    def handle_starttag(self, tag: str, attrs: list) -> None:
        if tag == "reuters":
            attr_map = dict(attrs)
            self._current = {
                "doc_id": _parse_id(attr_map.get("newid")),
                "doc_type": _parse_split(attr_map.get("lewissplit")),
                "topics": [],
                "title": [],
                "body": [],
            }
        elif self._current is None:
            return
        elif tag == "topics":
            self._in_topics = True
        elif tag == "d" and self._in_topics:
            self._topic_parts = []
            self._capture = "topic"
        elif tag in ("title", "body"):
            self._capture = tag

    def handle_endtag(self, tag: str) -> None:
        if self._current is None:
            return
        if tag == "reuters":
            self._finish_document()
        elif tag == "topics":
            self._in_topics = False
        elif tag == "d" and self._capture == "topic":
            topic = "".join(self._topic_parts).strip()
            if topic:
                self._current["topics"].append(DocClass.from_topic(topic))
            self._capture = None
        elif tag in ("title", "body") and self._capture == tag:
            self._capture = None

    def handle_data(self, data: str) -> None:
        self._append(data)

    def handle_charref(self, name: str) -> None:
        self._append(f"&#{name};")

    def handle_entityref(self, name: str) -> None:
        self._append(f"&{name};")

    def _append(self, data: str) -> None:
        if self._current is None or self._capture is None:
            return
        if self._capture == "topic":
            self._topic_parts.append(data)
        else:
            self._current[self._capture].append(data)

    def _finish_document(self) -> None:
        doc = self._current
        text = "".join(doc["title"]) + "\n" + "".join(doc["body"])
        self.documents.append(
            RawDocument(
                doc_id=doc["doc_id"],
                text=convert_html_special_chars(text),
                doc_type=doc["doc_type"],
                topics=doc["topics"],
            )
        )
        self._current = None
        self._capture = None
        self._in_topics = False


def _parse_id(value: str | None) -> int:
    if value is None or not value.strip().isdigit():
        raise ValueError(f"Invalid or missing NEWID attribute: {value!r}")
    return int(value)


def _parse_split(value: str | None) -> DocType:
    if value == "TRAIN":
        return DocType.TRAIN
    if value == "TEST":
        return DocType.TEST
    return DocType.OTHER


class ReutersParser:
    """Parser for Reuters-21578 ``.sgm`` files."""

    supported_extensions: tuple[str, ...] = (SGML_EXTENSION,)

    # The corpus is not valid UTF-8
    encoding = "latin-1"

    def can_handle(self, path: Path) -> bool:
        """Check if this parser can handle the given file."""
        return path.suffix.lower() in self.supported_extensions

    def parse_text(self, text: str) -> list[RawDocument]:
        """Parse SGML markup and return its documents in file order.

        Raises:
            ValueError: If a document lacks a numeric ``NEWID``.
        """
        extractor = _ReutersExtractor()
        extractor.feed(text)
        extractor.close()
        return extractor.documents

    def parse(self, path: str | Path) -> list[RawDocument]:
        """Parse one ``.sgm`` file.

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If the extension is unsupported or the markup is invalid.
        """
        path = Path(path)
        self._validate_path(path)
        documents = self.parse_text(path.read_text(encoding=self.encoding))
        logger.debug("Parsed %d documents from %s", len(documents), path.name)
        return documents

    def _validate_path(self, path: Path) -> None:
        """Validate that the file exists and has a supported extension."""
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        if not self.can_handle(path):
            raise ValueError(
                f"Unsupported file extension '{path.suffix}' for {self.__class__.__name__}. "
                f"Supported: {self.supported_extensions}"
            )


def get_data_file_list(directory: str | Path) -> list[Path]:
    """Sorted list of the ``.sgm`` files in ``directory``.

    Raises:
        FileNotFoundError: If the directory does not exist.
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise FileNotFoundError(f"Dataset directory not found: {directory}")
    return sorted(p for p in directory.iterdir() if p.suffix == SGML_EXTENSION and p.is_file())


def load_corpus(directory: str | Path) -> list[RawDocument]:
    """Parse every ``.sgm`` file of a dataset directory."""
    parser = ReutersParser()
    documents: list[RawDocument] = []
    for path in get_data_file_list(directory):
        documents.extend(parser.parse(path))
    logger.info("Loaded %d documents from %s", len(documents), directory)
    return documents


@dataclass
class CorpusSplit:
    """Documents usable for classification, grouped by split."""

    train: list[RawDocument] = field(default_factory=list)
    test: list[RawDocument] = field(default_factory=list)
    skipped: int = 0


def split_corpus(documents: list[RawDocument]) -> CorpusSplit:
    """Keep single-target documents and route them to train or test.

    Documents without exactly one target class, or outside the train and
    test splits, are counted in ``skipped``.
    """
    split = CorpusSplit()
    for doc in documents:
        if doc.target_class() is None:
            split.skipped += 1
        elif doc.doc_type is DocType.TRAIN:
            split.train.append(doc)
        elif doc.doc_type is DocType.TEST:
            split.test.append(doc)
        else:
            split.skipped += 1
    logger.info(
        "Corpus split: %d train, %d test, %d skipped",
        len(split.train), len(split.test), split.skipped,
    )
    return split
