"""Command-line interface for the Reuters news classifier.

Provides ``construct``, ``fit`` and ``predict`` commands with rich terminal
output using the ``click`` and ``rich`` libraries.

Usage::

    reuters-classifier construct --dataset-dir Dataset
    reuters-classifier fit train.txt model.txt --num-features 50
    reuters-classifier predict test.txt model.txt
"""

from __future__ import annotations

import json
import logging
import math
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from . import config
from .classifier import NaiveBayesClassifier
from .dataset import load_dataset, save_dataset, split_xy
from .feature_selection import get_top_words_per_class, remove_unimportant_words
from .metrics import ClassificationReport, classification_report
from .models import LabeledDocument, label_sort_key
from .normalizer import NormalizerStats, StopwordList, TextNormalizer
from .parsers import load_corpus, split_corpus

console = Console()
err_console = Console(stderr=True)

_HANDLED_ERRORS = (OSError, ValueError, RuntimeError)


def _fail(error: Exception) -> None:
    err_console.print(f"[bold red]Error:[/] {error}")
    sys.exit(1)


@click.group()
@click.version_option(package_name="reuters-classifier")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def main(verbose: bool) -> None:
    """📰 Reuters news classifier: Naive Bayes with MI feature selection.

    Build normalized datasets from the Reuters-21578 corpus, fit a
    classifier and evaluate its predictions.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@main.command()
@click.option("--dataset-dir", "-d", type=click.Path(path_type=Path),
              default=config.DATASET_DIR, envvar=config.ENV_DATASET_DIR, show_default=True,
              help="Directory containing the .sgm files.")
@click.option("--stopwords", type=click.Path(path_type=Path),
              default=config.STOPWORD_PATH, envvar=config.ENV_STOPWORDS,
              help="Whitespace-separated stopword file.")
@click.option("--train-out", type=click.Path(path_type=Path),
              default=config.TRAIN_SET_PATH, envvar=config.ENV_TRAIN_SET, show_default=True,
              help="Where to write the training set.")
@click.option("--test-out", type=click.Path(path_type=Path),
              default=config.TEST_SET_PATH, envvar=config.ENV_TEST_SET, show_default=True,
              help="Where to write the test set.")
@click.option("--top-n", type=click.IntRange(min=0), default=config.TOP_TERM_COUNT,
              show_default=True, help="Number of most frequent terms to report.")
def construct(dataset_dir: Path, stopwords: Path, train_out: Path, test_out: Path,
              top_n: int) -> None:
    """Parse the corpus and write normalized train and test datasets.

    Example: reuters-classifier construct --dataset-dir Dataset
    """
    with err_console.status("[bold blue]Constructing train and test datasets...",
                            spinner="dots"):
        try:
            normalizer = TextNormalizer(stopwords=StopwordList.from_file(stopwords))
            split = split_corpus(load_corpus(dataset_dir))
            train_docs = [
                LabeledDocument(doc.doc_id, normalizer.get_doc_terms(doc.text), doc.target_class())
                for doc in split.train
            ]
            test_docs = [
                LabeledDocument(doc.doc_id, normalizer.get_doc_terms(doc.text), doc.target_class())
                for doc in split.test
            ]
            n_train = save_dataset(train_out, train_docs)
            n_test = save_dataset(test_out, test_docs)
        except _HANDLED_ERRORS as e:
            _fail(e)

    err_console.print(f"{n_train} documents written to the train dataset at {train_out}")
    err_console.print(f"{n_test} documents written to the test dataset at {test_out}")
    err_console.print()
    _render_stats(normalizer.stats(top_n))


@main.command()
@click.argument("train_set", type=click.Path(path_type=Path),
                default=config.TRAIN_SET_PATH, envvar=config.ENV_TRAIN_SET)
@click.argument("model_path", type=click.Path(path_type=Path),
                default=config.MODEL_PATH, envvar=config.ENV_MODEL)
@click.option("--num-features", "-k", type=click.IntRange(min=1), default=None,
              help="Keep the best N terms per class by Mutual Information. "
                   "All terms are used if not given.")
@click.option("--show-features/--hide-features", default=True,
              help="Print the selected terms of each class.")
def fit(train_set: Path, model_path: Path, num_features: int | None,
        show_features: bool) -> None:
    """Fit a Naive Bayes classifier and save the model.

    Example: reuters-classifier fit train.txt model.txt --num-features 50
    """
    with err_console.status("[bold blue]Fitting classifier...", spinner="dots"):
        try:
            x_train, y_train = split_xy(load_dataset(train_set))
            top_words = None
            if num_features is not None:
                classes = sorted(set(y_train), key=label_sort_key)
                top_words = get_top_words_per_class(x_train, y_train, classes, num_features)
                x_train = remove_unimportant_words(x_train, y_train, top_words)

            clf = NaiveBayesClassifier().fit(x_train, y_train)
            clf.save(model_path)
        except _HANDLED_ERRORS as e:
            _fail(e)

    if top_words and show_features:
        _render_top_words(top_words)
    err_console.print(
        f"Model with {len(clf.classes_)} classes and {len(clf.vocabulary)} terms "
        f"saved to {model_path}"
    )


@main.command()
@click.argument("test_set", type=click.Path(path_type=Path),
                default=config.TEST_SET_PATH, envvar=config.ENV_TEST_SET)
@click.argument("model_path", type=click.Path(path_type=Path),
                default=config.MODEL_PATH, envvar=config.ENV_MODEL)
@click.option("--output", "-o", type=click.Choice(["rich", "json"]), default="rich",
              help="Output format.")
@click.option("--beta", type=click.FloatRange(min=0, min_open=True), default=1.0,
              show_default=True, help="Beta of the F-score.")
def predict(test_set: Path, model_path: Path, output: str, beta: float) -> None:
    """Predict a test set with a saved model and report the scores.

    Example: reuters-classifier predict test.txt model.txt
    """
    with err_console.status("[bold blue]Predicting...", spinner="dots"):
        try:
            clf = NaiveBayesClassifier.from_file(model_path)
            documents = load_dataset(test_set)
            x_test, y_test = split_xy(documents)
            y_pred = clf.predict(x_test)
            report = classification_report(y_test, y_pred, beta=beta)
        except _HANDLED_ERRORS as e:
            _fail(e)

    if output == "json":
        click.echo(json.dumps({
            "predictions": [
                {"id": doc.doc_id, "test": true.value, "pred": pred.value}
                for doc, true, pred in zip(documents, y_test, y_pred)
            ],
            "report": report.to_dict(),
        }, indent=2))
        return

    for doc, true, pred in zip(documents, y_test, y_pred):
        click.echo(f"ID: {doc.doc_id:>5} | Test: {true.value:>10} | Pred: {pred.value:>10}")
    err_console.print()
    _render_report(report)


# ------------------------------------------------------------------
# Rich rendering helpers
# ------------------------------------------------------------------

def _fmt(value: float) -> str:
    return "n/a" if math.isnan(value) else f"{value:.4f}"


def _render_stats(stats: NormalizerStats) -> None:
    """Render normalizer statistics as rich tables."""
    totals = Table(title="Token Statistics")
    totals.add_column("", style="cyan")
    totals.add_column("Before normalization", justify="right")
    totals.add_column("After normalization", justify="right")
    totals.add_row("Tokens", str(stats.total_unnormalized_tokens),
                   str(stats.total_normalized_tokens))
    totals.add_row("Distinct terms", str(stats.total_unnormalized_terms),
                   str(stats.total_normalized_terms))
    err_console.print(totals)

    top = Table(title="Most Frequent Terms")
    top.add_column("#", justify="right", width=4)
    top.add_column("Unnormalized", style="white")
    top.add_column("Normalized", style="cyan")
    rows = max(len(stats.top_unnormalized_terms), len(stats.top_normalized_terms))
    for i in range(rows):
        raw = stats.top_unnormalized_terms[i] if i < len(stats.top_unnormalized_terms) else None
        norm = stats.top_normalized_terms[i] if i < len(stats.top_normalized_terms) else None
        top.add_row(
            str(i + 1),
            f"{raw[0]} ({raw[1]})" if raw else "",
            f"{norm[0]} ({norm[1]})" if norm else "",
        )
    err_console.print(top)


def _render_top_words(top_words: dict) -> None:
    """Render the selected features of each class."""
    for cls, words in top_words.items():
        err_console.print(f"[bold]{cls.value}[/]")
        err_console.print("-" * len(cls.value))
        for word in words:
            err_console.print(word, markup=False, highlight=False)
        err_console.print()


def _render_report(report: ClassificationReport) -> None:
    """Render a ClassificationReport as rich tables."""
    averaged = Table(title="Averaged Stats")
    averaged.add_column("", style="cyan")
    averaged.add_column("Precision", justify="right")
    averaged.add_column("Recall", justify="right")
    averaged.add_column(f"F{report.beta:g} score", justify="right")
    averaged.add_row("Micro", _fmt(report.micro_precision), _fmt(report.micro_recall),
                     _fmt(report.micro_f_score))
    averaged.add_row("Macro", _fmt(report.macro_precision), _fmt(report.macro_recall),
                     _fmt(report.macro_f_score))
    err_console.print(averaged)

    per_class = Table(title="Unaveraged Stats")
    per_class.add_column("Class", style="cyan")
    per_class.add_column("Precision", justify="right")
    per_class.add_column("Recall", justify="right")
    per_class.add_column(f"F{report.beta:g} score", justify="right")
    per_class.add_column("Support", justify="right")
    for cls, values in report.per_class.items():
        per_class.add_row(
            cls.value,
            _fmt(values["precision"]),
            _fmt(values["recall"]),
            _fmt(values["f_score"]),
            str(report.support.get(cls, 0)),
        )
    err_console.print(per_class)


if __name__ == "__main__":
    main()
