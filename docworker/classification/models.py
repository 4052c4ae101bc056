from dataclasses import dataclass, field


@dataclass(frozen=True)
class Lexicon:
    """Category vocabulary used by the keyword classifier.

    ``categories`` keeps file order; that order breaks score ties.
    """

    fallback: str
    categories: dict[str, list[str]]
    stopwords: frozenset[str] = frozenset()


@dataclass(frozen=True)
class Classification:
    """Output of the classification step."""

    category: str
    keywords: list[str]
    scores: dict[str, int] = field(default_factory=dict)
    total_hits: int = 0

    @property
    def top_hits(self) -> int:
        return self.scores.get(self.category, 0)
