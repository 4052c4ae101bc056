from docworker.classification.classifier import KeywordClassifier
from docworker.cleaning.cleaner import TextCleaner
from docworker.extraction.base import BaseTextExtractor
from docworker.logging.logger import Log
from docworker.processor.exceptions import (
    ClassificationError,
    CleaningError,
    ExtractionError,
    FetchError,
    ScoringError,
)
from docworker.processor.pipeline import PipelineContext, PipelineStep
from docworker.scoring.scorer import QualityScorer
from docworker.storage.base import BaseStorage


def decode_text(data: bytes) -> str:
    """Decode a plain-text upload: UTF-8, BOM stripped, bad bytes replaced."""
    return data.decode("utf-8-sig", errors="replace")


class FetchStep(PipelineStep):
    stage = "fetch"
    error_type = FetchError

    def __init__(self, storage: BaseStorage) -> None:
        self._storage = storage

    def run(self, context: PipelineContext) -> PipelineContext:
        context.raw_bytes = self._storage.fetch(context.source_file.storage_key)
        Log.info(f"Fetched {len(context.raw_bytes)} bytes for file {context.source_file.id}")
        return context


class ExtractStep(PipelineStep):
    stage = "extraction"
    error_type = ExtractionError

    def __init__(self, extractor: BaseTextExtractor) -> None:
        self._extractor = extractor

    def run(self, context: PipelineContext) -> PipelineContext:
        source_file = context.source_file
        if source_file.ocr_required:
            context.extracted_text = self._extractor.extract(
                context.raw_bytes, source_file.file_type
            )
            method = "ocr"
        else:
            context.extracted_text = decode_text(context.raw_bytes)
            method = "decode"
        Log.info(
            f"Extracted {len(context.extracted_text)} chars from file {source_file.id} ({method})"
        )
        return context


class CleanStep(PipelineStep):
    stage = "cleaning"
    error_type = CleaningError

    def __init__(self, cleaner: TextCleaner) -> None:
        self._cleaner = cleaner

    def run(self, context: PipelineContext) -> PipelineContext:
        context.cleaning = self._cleaner.clean(context.extracted_text)
        Log.debug(
            f"Cleaned file {context.source_file.id}: steps={context.cleaning.ops.get('steps')}"
        )
        return context


class ClassifyStep(PipelineStep):
    stage = "classification"
    error_type = ClassificationError

    def __init__(self, classifier: KeywordClassifier) -> None:
        self._classifier = classifier

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.cleaning is None:
            raise ClassificationError("cleaned text must be set before classification")
        context.classification = self._classifier.classify(context.cleaning.cleaned_text)
        Log.info(
            f"Classified file {context.source_file.id} as '{context.classification.category}' "
            f"({context.classification.total_hits} lexicon hits)"
        )
        return context


class ScoreStep(PipelineStep):
    stage = "scoring"
    error_type = ScoringError

    def __init__(self, scorer: QualityScorer) -> None:
        self._scorer = scorer

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.cleaning is None or context.classification is None:
            raise ScoringError("cleaning and classification must run before scoring")
        context.scores = self._scorer.score(
            context.extracted_text,
            context.cleaning.cleaned_text,
            context.classification,
        )
        Log.debug(
            f"Scored file {context.source_file.id}: quality={context.scores.quality} "
            f"confidence={context.scores.confidence}"
        )
        return context
