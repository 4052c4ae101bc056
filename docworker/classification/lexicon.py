import json
from pathlib import Path
from typing import Any

from docworker.classification.models import Lexicon
from docworker.processor.exceptions import ClassificationError

DEFAULT_LEXICON_PATH = Path(__file__).with_name("lexicon.json")


def load_lexicon(path: Path | None = None) -> Lexicon:
    """Load and validate a lexicon JSON file. Defaults to the packaged lexicon.

    Raises:
        ClassificationError: if the file is missing or malformed.
    """
    resolved = path or DEFAULT_LEXICON_PATH
    try:
        raw = json.loads(resolved.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ClassificationError(f"Cannot load lexicon {resolved}: {exc}") from exc
    return build_lexicon(raw)


def build_lexicon(raw: Any) -> Lexicon:
    if not isinstance(raw, dict):
        raise ClassificationError("Lexicon must be a JSON object")

    fallback = raw.get("fallback")
    if not fallback or not isinstance(fallback, str):
        raise ClassificationError("Lexicon 'fallback' must be a non-empty string")

    categories = raw.get("categories")
    if not isinstance(categories, dict) or not categories:
        raise ClassificationError("Lexicon 'categories' must be a non-empty object")
    for label, terms in categories.items():
        if not isinstance(terms, list) or not all(isinstance(t, str) and t.strip() for t in terms):
            raise ClassificationError(
                f"Lexicon category '{label}' must be a list of non-empty strings"
            )

    stopwords = raw.get("stopwords", [])
    if not isinstance(stopwords, list) or not all(isinstance(w, str) for w in stopwords):
        raise ClassificationError("Lexicon 'stopwords' must be a list of strings")

    return Lexicon(
        fallback=fallback,
        categories={label: list(terms) for label, terms in categories.items()},
        stopwords=frozenset(stopwords),
    )
