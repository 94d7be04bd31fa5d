"""Tests for the Multinomial Naive Bayes classifier."""

from __future__ import annotations

import math

import pytest

from reuters_classifier.classifier import NaiveBayesClassifier
from reuters_classifier.models import DocClass, DocumentSample


@pytest.fixture
def fitted(two_class_data) -> NaiveBayesClassifier:
    x, y = two_class_data
    return NaiveBayesClassifier().fit(x, y)


# ---------------------------------------------------------------------------
# Fitting
# ---------------------------------------------------------------------------

class TestFit:
    def test_returns_self(self, two_class_data):
        x, y = two_class_data
        clf = NaiveBayesClassifier()
        assert clf.fit(x, y) is clf
        assert clf.is_fitted

    def test_priors(self, fitted):
        assert fitted.prior() == {DocClass.EARN: 0.5, DocClass.GRAIN: 0.5}

    def test_priors_sum_to_one(self, news_data):
        x, y = news_data
        clf = NaiveBayesClassifier().fit(x, y)
        assert math.isclose(sum(clf.prior().values()), 1.0)
        assert clf.prior()[DocClass.EARN] == pytest.approx(3 / 8)

    def test_laplace_smoothed_likelihood(self, fitted):
        # |V| = 3, each class has 3 term occurrences
        likelihood = fitted.likelihood()
        assert likelihood["buy"][DocClass.EARN] == pytest.approx(3 / 6)
        assert likelihood["sell"][DocClass.EARN] == pytest.approx(2 / 6)
        assert likelihood["rain"][DocClass.GRAIN] == pytest.approx(4 / 6)
        assert DocClass.GRAIN not in likelihood["buy"]

    def test_likelihoods_are_probabilities(self, news_data):
        x, y = news_data
        clf = NaiveBayesClassifier().fit(x, y)
        for per_class in clf.likelihood().values():
            for value in per_class.values():
                assert 0.0 < value <= 1.0

    def test_classes_in_declaration_order(self, news_data):
        x, y = news_data
        clf = NaiveBayesClassifier().fit(x, y)
        assert clf.classes_ == [DocClass.EARN, DocClass.ACQ, DocClass.GRAIN, DocClass.CRUDE]

    def test_vocabulary(self, fitted):
        assert fitted.vocabulary == {"buy", "sell", "rain"}

    def test_refit_discards_previous_state(self, fitted, news_data):
        x, y = news_data
        fitted.fit(x, y)
        assert "buy" not in fitted.vocabulary
        assert "buy" not in fitted.likelihood()
        assert len(fitted.classes_) == 4

    def test_length_mismatch_raises(self, two_class_data):
        x, _ = two_class_data
        with pytest.raises(ValueError, match="same length"):
            NaiveBayesClassifier().fit(x, [DocClass.EARN])

    def test_empty_training_set_raises(self):
        with pytest.raises(ValueError, match="empty"):
            NaiveBayesClassifier().fit([], [])

    def test_string_labels(self, two_class_data):
        x, _ = two_class_data
        clf = NaiveBayesClassifier().fit(x, ["b", "a"])
        assert clf.classes_ == ["a", "b"]


# ---------------------------------------------------------------------------
# Prediction
# ---------------------------------------------------------------------------

class TestPredict:
    def test_discriminative_terms(self, fitted):
        assert fitted.predict_single(DocumentSample({"buy": 1})) is DocClass.EARN
        assert fitted.predict_single(DocumentSample({"rain": 1})) is DocClass.GRAIN

    def test_empty_sample_tie_goes_to_first_class(self, fitted):
        assert fitted.predict_single(DocumentSample()) is DocClass.EARN

    def test_unseen_term_tie_goes_to_first_class(self, fitted):
        assert fitted.predict_single(DocumentSample({"snow": 4})) is DocClass.EARN

    def test_empty_sample_gets_highest_prior(self, news_data):
        x, y = news_data
        clf = NaiveBayesClassifier().fit(x, y)
        assert clf.predict_single(DocumentSample()) is DocClass.EARN

    def test_predict_preserves_order(self, news_data):
        x, y = news_data
        clf = NaiveBayesClassifier().fit(x, y)
        samples = [
            DocumentSample({"oil": 1}),
            DocumentSample({"acquir": 1}),
            DocumentSample({"wheat": 2, "tonn": 1}),
            DocumentSample({"profit": 1, "quarter": 1}),
        ]
        assert clf.predict(samples) == [
            DocClass.CRUDE,
            DocClass.ACQ,
            DocClass.GRAIN,
            DocClass.EARN,
        ]

    def test_predict_empty_list(self, fitted):
        assert fitted.predict([]) == []

    def test_unfitted_raises(self):
        clf = NaiveBayesClassifier()
        with pytest.raises(RuntimeError, match="not been fitted"):
            clf.predict([DocumentSample({"oil": 1})])
        with pytest.raises(RuntimeError):
            clf.predict_single(DocumentSample())

    def test_log_scores(self, fitted):
        scores = fitted.log_scores(DocumentSample({"buy": 2}))
        assert scores[DocClass.EARN] == pytest.approx(math.log(0.5) + 2 * math.log(0.5))
        assert scores[DocClass.GRAIN] == pytest.approx(math.log(0.5) + 2 * math.log(1 / 3))

    def test_predict_proba(self, fitted):
        [proba] = fitted.predict_proba([DocumentSample({"buy": 1})])
        assert sum(proba.values()) == pytest.approx(1.0)
        assert proba[DocClass.EARN] > proba[DocClass.GRAIN]

    def test_long_documents_do_not_underflow(self, fitted):
        [proba] = fitted.predict_proba([DocumentSample({"rain": 5000})])
        assert proba[DocClass.GRAIN] == pytest.approx(1.0)
        assert fitted.predict_single(DocumentSample({"rain": 5000})) is DocClass.GRAIN


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------

class TestPersistence:
    def test_format(self, fitted):
        text = fitted.dumps()
        head, _, tail = text.partition("\n\n")
        assert head.splitlines() == ["earn 0.5", "grain 0.5"]
        assert tail.splitlines()[0].startswith("buy earn ")

    def test_round_trip_is_exact(self, news_data):
        x, y = news_data
        clf = NaiveBayesClassifier().fit(x, y)
        loaded = NaiveBayesClassifier.loads(clf.dumps())
        assert loaded.prior() == clf.prior()
        assert loaded.likelihood() == clf.likelihood()
        assert loaded.classes_ == clf.classes_
        assert loaded.vocabulary == clf.vocabulary

    def test_loaded_model_predicts_identically(self, news_data):
        x, y = news_data
        clf = NaiveBayesClassifier().fit(x, y)
        loaded = NaiveBayesClassifier.loads(clf.dumps())
        assert loaded.predict(x) == clf.predict(x)

    def test_save_and_from_file(self, fitted, tmp_path):
        path = tmp_path / "models" / "model.txt"
        fitted.save(path)
        assert path.exists()
        loaded = NaiveBayesClassifier.from_file(path)
        assert loaded.prior() == fitted.prior()

    def test_string_labels_round_trip(self, two_class_data):
        x, _ = two_class_data
        clf = NaiveBayesClassifier().fit(x, ["b", "a"])
        loaded = NaiveBayesClassifier.loads(clf.dumps(), parse_label=str)
        assert loaded.classes_ == ["a", "b"]
        assert loaded.likelihood() == clf.likelihood()

    @pytest.mark.parametrize("term", ["caf\xa0latte", "oil\x1fgas"])
    def test_terms_with_unusual_whitespace_round_trip(self, term, tmp_path):
        x = [DocumentSample({term: 1, "crude": 1}), DocumentSample({"wheat": 1})]
        clf = NaiveBayesClassifier().fit(x, [DocClass.CRUDE, DocClass.GRAIN])

        loaded = NaiveBayesClassifier.loads(clf.dumps())
        assert loaded.likelihood() == clf.likelihood()

        path = tmp_path / "model.txt"
        clf.save(path)
        from_disk = NaiveBayesClassifier.from_file(path)
        assert from_disk.likelihood() == clf.likelihood()
        assert from_disk.predict_single(DocumentSample({term: 1})) is DocClass.CRUDE

    @pytest.mark.parametrize(
        "text,line",
        [
            ("earn 1.0\ncrude 0.0\n\noil earn 0.5\n", "Line 2"),
            ("earn 1.5\n", "Line 1"),
            ("earn 1.0\n\noil earn 0.0\n", "Line 3"),
            ("earn 1.0\n\noil earn -0.5\n", "Line 3"),
            ("earn nan\n", "Line 1"),
        ],
    )
    def test_probability_out_of_range(self, text, line):
        with pytest.raises(ValueError, match=line) as exc_info:
            NaiveBayesClassifier.loads(text)
        assert "(0, 1]" in str(exc_info.value)

    def test_dump_unfitted_raises(self):
        with pytest.raises(RuntimeError):
            NaiveBayesClassifier().dumps()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            NaiveBayesClassifier.from_file(tmp_path / "nope.txt")

    def test_malformed_likelihood_line(self):
        with pytest.raises(ValueError, match="Line 3"):
            NaiveBayesClassifier.loads("earn 0.5\n\nbuy earn\n")

    def test_malformed_number(self):
        with pytest.raises(ValueError, match="invalid number"):
            NaiveBayesClassifier.loads("earn half\n")

    def test_unknown_class(self):
        with pytest.raises(ValueError, match="unknown class"):
            NaiveBayesClassifier.loads("cocoa 1.0\n")

    def test_empty_model(self):
        with pytest.raises(ValueError, match="no class priors"):
            NaiveBayesClassifier.loads("")
