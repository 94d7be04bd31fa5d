"""Reuters news classifier -- Naive Bayes text classification."""

__version__ = "0.1.0"

from .classifier import NaiveBayesClassifier
from .dataset import load_dataset, read_dataset, save_dataset, split_xy, write_dataset
from .feature_selection import (
    contingency_mutual_info,
    get_top_words_per_class,
    mutual_info,
    remove_unimportant_words,
    top_k_terms,
)
from .metrics import (
    AvgType,
    ClassificationReport,
    accuracy,
    classification_report,
    f_beta,
    f_score,
    precision,
    recall,
)
from .models import (
    DocClass,
    DocType,
    DocumentSample,
    LabeledDocument,
    RawDocument,
    label_sort_key,
)
from .normalizer import NormalizerStats, StopwordList, TextNormalizer, porter_stemmer
from .parsers import (
    CorpusSplit,
    ReutersParser,
    convert_html_special_chars,
    get_data_file_list,
    load_corpus,
    split_corpus,
)

__all__ = [
    # Data model
    "DocClass",
    "DocType",
    "DocumentSample",
    "RawDocument",
    "LabeledDocument",
    "label_sort_key",
    # Normalization
    "TextNormalizer",
    "StopwordList",
    "NormalizerStats",
    "porter_stemmer",
    # Feature selection
    "mutual_info",
    "contingency_mutual_info",
    "top_k_terms",
    "get_top_words_per_class",
    "remove_unimportant_words",
    # Classification
    "NaiveBayesClassifier",
    # Evaluation
    "AvgType",
    "accuracy",
    "precision",
    "recall",
    "f_beta",
    "f_score",
    "ClassificationReport",
    "classification_report",
    # Corpus and datasets
    "ReutersParser",
    "CorpusSplit",
    "convert_html_special_chars",
    "get_data_file_list",
    "load_corpus",
    "split_corpus",
    "read_dataset",
    "write_dataset",
    "load_dataset",
    "save_dataset",
    "split_xy",
]
