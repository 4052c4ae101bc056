import pytest

pytest.importorskip("icu")

from docworker.classification.classifier import KeywordClassifier
from docworker.classification.lexicon import load_lexicon
from docworker.classification.models import Lexicon


@pytest.fixture(scope="module")
def classifier() -> KeywordClassifier:
    return KeywordClassifier(load_lexicon())


def _make_classifier(keyword_limit: int = 10, **categories: list[str]) -> KeywordClassifier:
    lexicon = Lexicon(fallback="other", categories=dict(categories), stopwords=frozenset({"the"}))
    return KeywordClassifier(lexicon, keyword_limit=keyword_limit)


class TestCategory:
    def test_vietnamese_medical_text(self, classifier: KeywordClassifier) -> None:
        result = classifier.classify("Bệnh viện tiếp nhận bệnh nhân, bác sĩ điều trị.")

        assert result.category == "quân y"
        assert result.scores["quân y"] == 4

    def test_matches_text_without_diacritics(self, classifier: KeywordClassifier) -> None:
        result = classifier.classify("xe tai van chuyen hang hoa tren tuyen duong")

        assert result.category == "vận tải"

    def test_matches_english_terms(self, classifier: KeywordClassifier) -> None:
        result = classifier.classify("Weapon maintenance and equipment repair log")

        assert result.category == "kỹ thuật"

    def test_no_hits_uses_fallback(self, classifier: KeywordClassifier) -> None:
        result = classifier.classify("Lorem ipsum dolor sit amet")

        assert result.category == "khác"
        assert result.total_hits == 0

    def test_empty_text_uses_fallback(self, classifier: KeywordClassifier) -> None:
        result = classifier.classify("")

        assert result.category == "khác"
        assert result.keywords == []

    def test_tie_goes_to_first_category(self) -> None:
        classifier = _make_classifier(alpha=["apple"], beta=["banana"])

        result = classifier.classify("banana apple")

        assert result.category == "alpha"

    def test_higher_score_wins_over_order(self) -> None:
        classifier = _make_classifier(alpha=["apple"], beta=["banana"])

        result = classifier.classify("banana apple banana")

        assert result.category == "beta"
        assert result.scores == {"alpha": 1, "beta": 2}
        assert result.total_hits == 3
        assert result.top_hits == 2

    def test_multi_word_terms(self) -> None:
        classifier = _make_classifier(ops=["fuel depot"])

        assert classifier.classify("the fuel depot").category == "ops"
        assert classifier.classify("depot fuel").category == "other"


class TestKeywords:
    def test_ordered_by_frequency_then_first_occurrence(self) -> None:
        classifier = _make_classifier(alpha=["apple"])

        result = classifier.classify("depot fuel truck truck fuel truck")

        assert result.keywords == ["truck", "fuel", "depot"]

    def test_keeps_original_form(self) -> None:
        classifier = _make_classifier(alpha=["apple"])

        result = classifier.classify("Xăng dầu, xăng")

        assert result.keywords == ["xăng", "dầu"]

    def test_skips_short_numeric_and_stopword_tokens(self) -> None:
        classifier = _make_classifier(alpha=["apple"])

        result = classifier.classify("the 2024 to be supply")

        assert result.keywords == ["supply"]

    def test_respects_limit(self) -> None:
        classifier = _make_classifier(keyword_limit=2, alpha=["apple"])

        result = classifier.classify("one two three four")

        assert result.keywords == ["one", "two"]

    def test_negative_limit_rejected(self) -> None:
        with pytest.raises(ValueError, match="keyword_limit"):
            _make_classifier(keyword_limit=-1, alpha=["apple"])

    def test_packaged_stopwords_are_excluded(self, classifier: KeywordClassifier) -> None:
        result = classifier.classify("Báo cáo của đơn vị về công tác hậu cần và hậu cần")

        assert "của" not in result.keywords
        assert result.keywords[0] == "hậu"


class TestDeterminism:
    def test_same_input_same_output(self, classifier: KeywordClassifier) -> None:
        text = "Kho quân nhu cấp phát lương thực và xăng dầu cho đơn vị vận tải."

        assert classifier.classify(text) == classifier.classify(text)


class TestFoldCache:
    def test_cache_stays_bounded(self) -> None:
        lexicon = Lexicon(fallback="other", categories={"alpha": ["apple"]}, stopwords=frozenset())
        classifier = KeywordClassifier(lexicon, fold_cache_size=32)

        for batch in range(20):
            classifier.classify(" ".join(f"token{batch}x{i}" for i in range(50)))

        assert classifier.fold_cache_size() == 32

    def test_eviction_keeps_results_stable(self) -> None:
        lexicon = Lexicon(fallback="other", categories={"alpha": ["apple"]}, stopwords=frozenset())
        classifier = KeywordClassifier(lexicon, fold_cache_size=2)

        first = classifier.classify("Apple apple Äpple pear")
        classifier.classify("one two three four five")

        assert classifier.classify("Apple apple Äpple pear") == first
        assert first.category == "alpha"
