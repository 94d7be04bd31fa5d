"""Default locations and settings.

Every default can be overridden on the command line; the path defaults can
also be set through the environment variables named below.
"""

from __future__ import annotations

from .normalizer import DEFAULT_STOPWORD_PATH

DATASET_DIR = "Dataset"
TRAIN_SET_PATH = "train.txt"
TEST_SET_PATH = "test.txt"
MODEL_PATH = "model.txt"
STOPWORD_PATH = str(DEFAULT_STOPWORD_PATH)

# Number of most frequent terms shown in normalizer statistics
TOP_TERM_COUNT = 20

ENV_DATASET_DIR = "REUTERS_DATASET_DIR"
ENV_STOPWORDS = "REUTERS_STOPWORDS"
ENV_TRAIN_SET = "REUTERS_TRAIN_SET"
ENV_TEST_SET = "REUTERS_TEST_SET"
ENV_MODEL = "REUTERS_MODEL"
