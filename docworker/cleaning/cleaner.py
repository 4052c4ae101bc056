"""Deterministic text cleaning.

Processing flow:
1. Unicode NFC normalization (precomposed Vietnamese diacritics).
2. Control-character removal (keeps newlines and tabs).
3. De-hyphenation of words broken across line ends.
4. Noise-line removal: page markers, separator runs, lone punctuation.
5. Noise-token removal: repeated punctuation runs, stray symbols.
6. Whitespace collapse: single spaces within lines, at most one blank line.

The same input always yields the same output and the same ops metadata.
"""

import re
import unicodedata
from dataclasses import dataclass, field
from typing import Any, ClassVar

from docworker.processor.exceptions import CleaningError


@dataclass(frozen=True)
class CleaningResult:
    """Output of the cleaning step."""

    cleaned_text: str
    ops: dict[str, Any] = field(default_factory=dict)


class TextCleaner:
    """Turns extracted text into review-ready cleaned text."""

    _CONTROL_RE: ClassVar[re.Pattern[str]] = re.compile(r"[\x00-\x08\x0b-\x1f\x7f\u200b\ufeff]")
    _HYPHEN_BREAK_RE: ClassVar[re.Pattern[str]] = re.compile(r"(\w)-\n(\w)")
    _PAGE_MARKER_RE: ClassVar[re.Pattern[str]] = re.compile(
        r"^\s*(?:-\s*)?(?:page|trang|p\.)?\s*\d{1,4}(?:\s*(?:/|of|trên)\s*\d{1,4})?(?:\s*-)?\s*$",
        re.IGNORECASE,
    )
    _SEPARATOR_RE: ClassVar[re.Pattern[str]] = re.compile(r"^\s*[\W_]{3,}\s*$")
    _LONE_SYMBOL_LINE_RE: ClassVar[re.Pattern[str]] = re.compile(r"^\s*[^\w\s]\s*$")
    _NOISE_TOKEN_RE: ClassVar[re.Pattern[str]] = re.compile(
        r"(?<!\S)(?:[^\w\s]{3,}|[|~^`¦•·●▪■□◆◇※]+)(?!\S)"
    )
    _SPACES_RE: ClassVar[re.Pattern[str]] = re.compile(r"[ \t\u00a0]+")
    _BLANK_LINES_RE: ClassVar[re.Pattern[str]] = re.compile(r"\n{3,}")

    def clean(self, text: str) -> CleaningResult:
        """Clean *text* and describe the applied transformations.

        Raises:
            CleaningError: if *text* is not a string.
        """
        if not isinstance(text, str):
            raise CleaningError(f"Expected text, got {type(text).__name__}")

        steps: list[str] = []
        input_chars = len(text)

        normalized = unicodedata.normalize("NFC", text)
        if normalized != text:
            steps.append("normalized_unicode")

        unified = normalized.replace("\r\n", "\n").replace("\r", "\n")
        without_controls = self._CONTROL_RE.sub("", unified)
        if without_controls != unified:
            steps.append("removed_control_chars")

        dehyphenated = self._HYPHEN_BREAK_RE.sub(r"\1\2", without_controls)
        if dehyphenated != without_controls:
            steps.append("joined_hyphenated_words")

        kept_lines, removed_lines = self._drop_noise_lines(dehyphenated.split("\n"))
        if removed_lines:
            steps.append("removed_noise_lines")

        detokenized, removed_tokens = self._NOISE_TOKEN_RE.subn("", "\n".join(kept_lines))
        if removed_tokens:
            steps.append("removed_noise_tokens")

        cleaned = self._collapse_whitespace(detokenized)
        if cleaned != detokenized:
            steps.append("normalized_whitespace")

        return CleaningResult(
            cleaned_text=cleaned,
            ops={
                "steps": steps,
                "removed_lines": removed_lines,
                "removed_tokens": removed_tokens,
                "input_chars": input_chars,
                "output_chars": len(cleaned),
            },
        )

    def _drop_noise_lines(self, lines: list[str]) -> tuple[list[str], int]:
        kept: list[str] = []
        removed = 0
        for line in lines:
            if line.strip() and self._is_noise_line(line):
                removed += 1
                continue
            kept.append(line)
        return kept, removed

    def _is_noise_line(self, line: str) -> bool:
        return bool(
            self._PAGE_MARKER_RE.match(line)
            or self._SEPARATOR_RE.match(line)
            or self._LONE_SYMBOL_LINE_RE.match(line)
        )

    def _collapse_whitespace(self, text: str) -> str:
        lines = [self._SPACES_RE.sub(" ", line).strip() for line in text.split("\n")]
        joined = "\n".join(lines)
        return self._BLANK_LINES_RE.sub("\n\n", joined).strip()
