"""Reading and writing normalized datasets as plain text.

Each document is written as a header line ``<id> <class>`` followed by one
``<term> <count>`` line per term, and is terminated by a blank line::

    17 earn
    profit 3
    quarter 1

    42 crude
    oil 2
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import TextIO

from .models import DocClass, DocumentSample, LabeledDocument

logger = logging.getLogger(__name__)


def write_dataset(fp: TextIO, documents: Iterable[LabeledDocument]) -> int:
    """Write documents to a text stream in ascending id order.

    Returns:
        Number of documents written.
    """
    written = 0
    for doc in sorted(documents, key=lambda d: d.doc_id):
        fp.write(f"{doc.doc_id} {doc.label.value}\n")
        for term, count in doc.sample.items():
            fp.write(f"{term} {count}\n")
        fp.write("\n")
        written += 1
    return written


def read_dataset(fp: TextIO) -> list[LabeledDocument]:
    """Read documents written by :func:`write_dataset`.

    Raises:
        ValueError: On malformed lines, unknown classes or duplicate ids.
    """
    documents: list[LabeledDocument] = []
    seen_ids: set[int] = set()
    current: LabeledDocument | None = None

    for lineno, raw in enumerate(fp, 1):
        line = raw.rstrip("\r\n")
        if not line:
            current = None
            continue

        # Fields are split on single spaces only; terms may hold other whitespace
        fields = line.split(" ")
        if len(fields) != 2 or not all(fields):
            raise ValueError(f"Line {lineno}: expected two fields, got {line!r}")
        first, second = fields

        if current is None:
            doc_id = _parse_int(first, lineno)
            if doc_id in seen_ids:
                raise ValueError(f"Line {lineno}: duplicate document id {doc_id}")
            try:
                label = DocClass(second)
            except ValueError as exc:
                raise ValueError(f"Line {lineno}: unknown class {second!r}") from exc
            seen_ids.add(doc_id)
            current = LabeledDocument(doc_id=doc_id, sample=DocumentSample(), label=label)
            documents.append(current)
        else:
            count = _parse_int(second, lineno)
            if count < 1:
                raise ValueError(f"Line {lineno}: count must be positive, got {count}")
            current.sample.add(first, count)

    return documents


def save_dataset(path: str | Path, documents: Iterable[LabeledDocument]) -> int:
    """Write a dataset file, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        written = write_dataset(f, documents)
    logger.info("Wrote %d documents to %s", written, path)
    return written


def load_dataset(path: str | Path) -> list[LabeledDocument]:
    """Read a dataset file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is malformed.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Dataset file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        documents = read_dataset(f)
    logger.info("Read %d documents from %s", len(documents), path)
    return documents


def split_xy(documents: Iterable[LabeledDocument]) -> tuple[list[DocumentSample], list[DocClass]]:
    """Separate documents into parallel sample and label lists."""
    x: list[DocumentSample] = []
    y: list[DocClass] = []
    for doc in documents:
        x.append(doc.sample)
        y.append(doc.label)
    return x, y


def _parse_int(text: str, lineno: int) -> int:
    try:
        return int(text)
    except ValueError as exc:
        raise ValueError(f"Line {lineno}: expected an integer, got {text!r}") from exc
