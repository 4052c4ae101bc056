from pathlib import Path

from docworker.classification.classifier import KeywordClassifier
from docworker.classification.lexicon import load_lexicon
from docworker.cleaning.cleaner import TextCleaner
from docworker.config.settings import Settings
from docworker.extraction.base import BaseTextExtractor
from docworker.extraction.factory import TextExtractorFactory
from docworker.processor.pipeline import Pipeline
from docworker.processor.steps import ClassifyStep, CleanStep, ExtractStep, FetchStep, ScoreStep
from docworker.scoring.scorer import QualityScorer
from docworker.storage.base import BaseStorage
from docworker.storage.factory import StorageFactory


def build_pipeline(
    settings: Settings,
    storage: BaseStorage | None = None,
    extractor: BaseTextExtractor | None = None,
) -> Pipeline:
    """Build the fetch -> extraction -> cleaning -> classification -> scoring pipeline."""
    lexicon_path = (
        Path(settings.classification_lexicon_path)
        if settings.classification_lexicon_path
        else None
    )
    classifier = KeywordClassifier(
        load_lexicon(lexicon_path),
        keyword_limit=settings.keyword_limit,
    )
    return Pipeline(
        steps=[
            FetchStep(storage if storage is not None else StorageFactory.create(settings)),
            ExtractStep(extractor if extractor is not None else TextExtractorFactory.create(settings)),
            CleanStep(TextCleaner()),
            ClassifyStep(classifier),
            ScoreStep(QualityScorer()),
        ]
    )
