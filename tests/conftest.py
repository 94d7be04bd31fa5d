"""Shared test fixtures for reuters-classifier tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from reuters_classifier.models import DocClass, DocumentSample
from reuters_classifier.normalizer import StopwordList, TextNormalizer


SAMPLE_SGML = """<!DOCTYPE lewis SYSTEM "lewis.dtd">
<REUTERS TOPICS="YES" LEWISSPLIT="TRAIN" CGISPLIT="TRAINING-SET" OLDID="5544" NEWID="1">
<DATE>26-FEB-1987 15:01:01.79</DATE>
<TOPICS><D>earn</D></TOPICS>
<PLACES><D>usa</D></PLACES>
<TEXT>&#2;
<TITLE>ACME CORP REPORTS HIGHER QUARTER PROFIT</TITLE>
<DATELINE>    NEW YORK, Feb 26 - </DATELINE><BODY>Acme Corp said quarter profit rose
to 1,000 dlrs from 800 dlrs, and net profit per share rose too.
 Reuter
&#3;</BODY></TEXT>
</REUTERS>
<REUTERS TOPICS="YES" LEWISSPLIT="TRAIN" CGISPLIT="TRAINING-SET" OLDID="5545" NEWID="2">
<DATE>26-FEB-1987 15:02:20.00</DATE>
<TOPICS><D>crude</D><D>nat-gas</D></TOPICS>
<PLACES><D>usa</D></PLACES>
<TEXT>&#2;
<TITLE>OIL PRICES RISE ON &lt;OPEC> TALKS</TITLE>
<BODY>Crude oil prices rose sharply as OPEC ministers met, traders said.
 Reuter
&#3;</BODY></TEXT>
</REUTERS>
<REUTERS TOPICS="YES" LEWISSPLIT="TEST" CGISPLIT="TRAINING-SET" OLDID="5546" NEWID="3">
<DATE>26-FEB-1987 15:03:00.00</DATE>
<TOPICS><D>earn</D><D>acq</D></TOPICS>
<TEXT>&#2;
<TITLE>MERGER AND PROFIT NEWS</TITLE>
<BODY>Beta Inc agreed to acquire Gamma Co, and reported profit.
&#3;</BODY></TEXT>
</REUTERS>
<REUTERS TOPICS="NO" LEWISSPLIT="TEST" CGISPLIT="TRAINING-SET" OLDID="5547" NEWID="4">
<DATE>26-FEB-1987 15:04:00.00</DATE>
<TOPICS><D>grain</D></TOPICS>
<TEXT TYPE="BRIEF">&#2;
<TITLE>WHEAT HARVEST UP</TITLE>
&#3;</TEXT>
</REUTERS>
<REUTERS TOPICS="NO" LEWISSPLIT="NOT-USED" CGISPLIT="TRAINING-SET" OLDID="5548" NEWID="5">
<DATE>26-FEB-1987 15:05:00.00</DATE>
<TOPICS></TOPICS>
<TEXT>&#2;
<TITLE>NOTHING TO SEE</TITLE>
<BODY>No topics here.
&#3;</BODY></TEXT>
</REUTERS>
"""


@pytest.fixture
def stopwords() -> StopwordList:
    """A small stopword list for deterministic tests."""
    return StopwordList(["the", "a", "and", "to", "of", "said", "from", "as", "on"])


@pytest.fixture
def normalizer(stopwords: StopwordList) -> TextNormalizer:
    """Normalizer with the small stopword list and an identity stemmer."""
    return TextNormalizer(stopwords=stopwords, stemmer=lambda word: word)


@pytest.fixture
def sample_sgml() -> str:
    """Reuters-style SGML with five documents covering the split rules."""
    return SAMPLE_SGML


@pytest.fixture
def dataset_dir(tmp_path: Path, sample_sgml: str) -> Path:
    """Directory holding one .sgm file and an unrelated file."""
    directory = tmp_path / "Dataset"
    directory.mkdir()
    (directory / "reut2-000.sgm").write_text(sample_sgml, encoding="latin-1")
    (directory / "README.txt").write_text("not a corpus file", encoding="utf-8")
    return directory


@pytest.fixture
def two_class_data():
    """Two-document training set with disjoint vocabularies."""
    x = [
        DocumentSample({"buy": 2, "sell": 1}),
        DocumentSample({"rain": 3}),
    ]
    y = [DocClass.EARN, DocClass.GRAIN]
    return x, y


@pytest.fixture
def news_data():
    """Small multi-class training set of term-count samples."""
    x = [
        DocumentSample({"profit": 3, "quarter": 2, "share": 1}),
        DocumentSample({"profit": 1, "dividend": 2, "share": 2}),
        DocumentSample({"net": 2, "profit": 2, "quarter": 1}),
        DocumentSample({"acquir": 2, "merger": 1, "share": 1}),
        DocumentSample({"takeov": 2, "acquir": 1, "bid": 1}),
        DocumentSample({"oil": 4, "barrel": 2, "opec": 1}),
        DocumentSample({"crude": 2, "oil": 2, "price": 1}),
        DocumentSample({"wheat": 3, "tonn": 2, "harvest": 1}),
    ]
    y = [
        DocClass.EARN,
        DocClass.EARN,
        DocClass.EARN,
        DocClass.ACQ,
        DocClass.ACQ,
        DocClass.CRUDE,
        DocClass.CRUDE,
        DocClass.GRAIN,
    ]
    return x, y
