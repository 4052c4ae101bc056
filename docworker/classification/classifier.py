"""Deterministic keyword classifier.

Tokens are folded to lowercase ASCII with ICU ("Any-Latin; Latin-ASCII;
Lower") so that "Quân Y", "quan y" and "QUÂN Y" all hit the same lexicon
term. Category = label with the most term hits; keywords = most frequent
content tokens in first-seen order for ties.
"""

import functools
import re
import threading
from collections import Counter
from typing import ClassVar

import icu  # type: ignore[import-untyped]

from docworker.classification.models import Classification, Lexicon
from docworker.processor.exceptions import ClassificationError


class KeywordClassifier:
    """Assigns a category and ordered keywords as a pure function of text."""

    _ICU_TRANSFORM: ClassVar[str] = "Any-Latin; Latin-ASCII; Lower"
    _TOKEN_RE: ClassVar[re.Pattern[str]] = re.compile(r"\w+")
    MIN_KEYWORD_LENGTH: ClassVar[int] = 3

    def __init__(
        self, lexicon: Lexicon, keyword_limit: int = 10, fold_cache_size: int = 4096
    ) -> None:
        if keyword_limit < 0:
            raise ValueError("keyword_limit must be >= 0")
        self._lexicon = lexicon
        self._keyword_limit = keyword_limit
        self._transliterator = icu.Transliterator.createInstance(self._ICU_TRANSFORM)
        self._fold_lock = threading.Lock()
        self._fold = functools.lru_cache(maxsize=fold_cache_size)(self._transliterate)
        self._stopwords = frozenset(self._fold(w) for w in lexicon.stopwords)
        self._terms: dict[str, list[tuple[str, ...]]] = {
            label: [self._fold_phrase(term) for term in terms]
            for label, terms in lexicon.categories.items()
        }

    def classify(self, text: str) -> Classification:
        """Classify cleaned text.

        Raises:
            ClassificationError: on any failure.
        """
        try:
            return self._run(text)
        except ClassificationError:
            raise
        except Exception as exc:
            raise ClassificationError(f"Classification failed: {exc}") from exc

    def _run(self, text: str) -> Classification:
        tokens = self._TOKEN_RE.findall(text.lower())
        folded = [self._fold(token) for token in tokens]

        scores = {label: self._count_hits(folded, terms) for label, terms in self._terms.items()}
        total_hits = sum(scores.values())

        category = self._lexicon.fallback
        best = 0
        for label, hits in scores.items():
            if hits > best:
                category, best = label, hits

        return Classification(
            category=category,
            keywords=self._keywords(tokens, folded),
            scores=scores,
            total_hits=total_hits,
        )

    @staticmethod
    def _count_hits(folded: list[str], terms: list[tuple[str, ...]]) -> int:
        hits = 0
        for term in terms:
            size = len(term)
            if size == 0:
                continue
            for i in range(len(folded) - size + 1):
                if tuple(folded[i : i + size]) == term:
                    hits += 1
        return hits

    def _keywords(self, tokens: list[str], folded: list[str]) -> list[str]:
        counts: Counter[str] = Counter()
        first_form: dict[str, str] = {}
        first_index: dict[str, int] = {}
        for index, (token, key) in enumerate(zip(tokens, folded, strict=True)):
            if len(key) < self.MIN_KEYWORD_LENGTH or key.isdigit() or key in self._stopwords:
                continue
            counts[key] += 1
            if key not in first_form:
                first_form[key] = token
                first_index[key] = index
        ranked = sorted(counts, key=lambda k: (-counts[k], first_index[k]))
        return [first_form[key] for key in ranked[: self._keyword_limit]]

    def fold_cache_size(self) -> int:
        """Number of folded tokens currently cached."""
        return self._fold.cache_info().currsize

    def _transliterate(self, token: str) -> str:
        # ICU transliterators are not safe for concurrent use.
        with self._fold_lock:
            return str(self._transliterator.transliterate(token))

    def _fold_phrase(self, phrase: str) -> tuple[str, ...]:
        return tuple(self._fold(t) for t in self._TOKEN_RE.findall(phrase.lower()))
