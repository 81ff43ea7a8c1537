"""Template domain models."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class TemplateSource(Enum):
    """Provenance of a library template."""
    LUXALGO = "luxalgo"
    TRADINGVIEW_COMMUNITY = "tradingview-community"


@dataclass(frozen=True)
class Template:
    """Reference script from the curated library."""
    id: str
    name: str
    author: str
    source: TemplateSource
    keywords: tuple[str, ...]
    categories: tuple[str, ...]
    code: str
    description: str
    url: str = ""

    @property
    def max_possible(self) -> int:
        """Denominator base used to normalize match scores."""
        return len(self.keywords) + len(self.categories)


@dataclass(frozen=True)
class ScoredTemplate:
    """Template with its normalized relevance score."""
    template: Template
    score: float


@dataclass(frozen=True)
class MatchResult:
    """Result of matching a prompt against the library."""
    best_match: Optional[Template]
    score: float
    alternates: tuple[ScoredTemplate, ...] = field(default_factory=tuple)

    @property
    def matched(self) -> bool:
        return self.best_match is not None

    def to_dict(self) -> dict:
        return {
            "bestMatch": self.best_match.id if self.best_match else None,
            "score": self.score,
            "alternates": [
                {"id": s.template.id, "name": s.template.name, "score": s.score}
                for s in self.alternates
            ],
        }
