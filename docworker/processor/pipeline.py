from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from typing import ClassVar

from docworker.classification.models import Classification
from docworker.cleaning.cleaner import CleaningResult
from docworker.logging.logger import Log
from docworker.processor.exceptions import StageError
from docworker.processor.models import Err, Ok, PipelineOutcome, PipelineResult, SourceFile
from docworker.scoring.scorer import Scores


@dataclass(slots=True)
class PipelineContext:
    source_file: SourceFile
    raw_bytes: bytes = b""
    extracted_text: str = ""
    cleaning: CleaningResult | None = None
    classification: Classification | None = None
    scores: Scores | None = None

    def to_result(self) -> PipelineResult:
        if self.cleaning is None or self.classification is None or self.scores is None:
            raise ValueError("PipelineContext is incomplete; not every stage has run")
        return PipelineResult(
            extracted_text=self.extracted_text,
            cleaned_text=self.cleaning.cleaned_text,
            category=self.classification.category,
            keywords=list(self.classification.keywords),
            quality_score=self.scores.quality,
            confidence_score=self.scores.confidence,
            cleaning_ops=dict(self.cleaning.ops),
        )


class PipelineStep(ABC):
    """One pipeline stage. Unexpected exceptions are reported as ``error_type``."""

    stage: ClassVar[str]
    error_type: ClassVar[type[StageError]]

    @abstractmethod
    def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError


class Pipeline:
    """Runs the stages strictly in order and returns Ok(result) or Err(stage error)."""

    def __init__(self, steps: Sequence[PipelineStep]) -> None:
        if not steps:
            raise ValueError("Pipeline needs at least one step")
        self._steps = list(steps)

    @property
    def stages(self) -> list[str]:
        return [step.stage for step in self._steps]

    def run(self, source_file: SourceFile) -> PipelineOutcome:
        context = PipelineContext(source_file=source_file)
        for step in self._steps:
            try:
                context = step.run(context)
            except StageError as exc:
                return self._abort(source_file, exc)
            except Exception as exc:
                return self._abort(source_file, step.error_type(f"{type(exc).__name__}: {exc}"))

        try:
            result = context.to_result()
        except ValueError as exc:
            last = self._steps[-1]
            return self._abort(source_file, last.error_type(str(exc)))
        return Ok(result)

    @staticmethod
    def _abort(source_file: SourceFile, error: StageError) -> Err[StageError]:
        Log.error(f"Pipeline aborted for file {source_file.id}: {error.describe()}")
        return Err(error)
