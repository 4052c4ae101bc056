import math
from dataclasses import dataclass
from typing import ClassVar

from docworker.classification.models import Classification
from docworker.processor.exceptions import ScoringError


@dataclass(frozen=True)
class Scores:
    """Advisory review metadata. Both values lie in [0, 1]."""

    quality: float
    confidence: float


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


class QualityScorer:
    """Scores extraction/cleaning fidelity and classification certainty.

    quality    = 0.4 * alphanumeric ratio of the cleaned text
               + 0.3 * retention (cleaned chars / extracted chars, capped at 1)
               + 0.3 * length adequacy (words / TARGET_WORDS, capped at 1)
    confidence = share of lexicon hits won by the chosen category,
                 damped while fewer than EVIDENCE_HITS terms matched.
    """

    TARGET_WORDS: ClassVar[int] = 50
    EVIDENCE_HITS: ClassVar[int] = 5

    def score(
        self,
        extracted_text: str,
        cleaned_text: str,
        classification: Classification,
    ) -> Scores:
        quality = self._quality(extracted_text, cleaned_text)
        confidence = self._confidence(classification)
        for name, value in (("quality", quality), ("confidence", confidence)):
            if not math.isfinite(value):
                raise ScoringError(f"{name} score is not a finite number: {value}")
        return Scores(
            quality=round(_clamp(quality), 4),
            confidence=round(_clamp(confidence), 4),
        )

    def _quality(self, extracted_text: str, cleaned_text: str) -> float:
        visible = [ch for ch in cleaned_text if not ch.isspace()]
        if not visible:
            return 0.0
        alnum_ratio = sum(1 for ch in visible if ch.isalnum()) / len(visible)
        retention = min(1.0, len(cleaned_text) / len(extracted_text)) if extracted_text else 0.0
        length_factor = min(1.0, len(cleaned_text.split()) / self.TARGET_WORDS)
        return 0.4 * alnum_ratio + 0.3 * retention + 0.3 * length_factor

    def _confidence(self, classification: Classification) -> float:
        if classification.total_hits <= 0:
            return 0.0
        share = classification.top_hits / classification.total_hits
        evidence = min(1.0, classification.total_hits / self.EVIDENCE_HITS)
        return share * evidence
