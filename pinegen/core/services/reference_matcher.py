"""Reference matcher - keyword scoring of prompts against the template library."""

import logging

from ..models.template import MatchResult, ScoredTemplate, Template
from .template_library import TemplateLibrary

logger = logging.getLogger(__name__)

MATCH_THRESHOLD = 0.05
NAME_BONUS = 5
PHRASE_POINTS = 3
WORD_POINTS = 2
PARTIAL_POINTS = 1
CATEGORY_POINTS = 1
MAX_ALTERNATES = 3


def score_template(template: Template, prompt: str) -> int:
    """Raw keyword/category/name overlap score of prompt for template."""
    normalized_prompt = prompt.lower().strip()
    prompt_words = normalized_prompt.split()

    score = 0

    for keyword in template.keywords:
        kw_lower = keyword.lower()
        if kw_lower in normalized_prompt:
            # Multi-word phrases are worth more
            score += PHRASE_POINTS if " " in kw_lower else WORD_POINTS
        else:
            for kw in kw_lower.split():
                if any(pw in kw or kw in pw for pw in prompt_words):
                    score += PARTIAL_POINTS

    for category in template.categories:
        if category.lower() in normalized_prompt:
            score += CATEGORY_POINTS

    if template.name.lower() in normalized_prompt:
        score += NAME_BONUS

    return score


def normalize_score(raw_score: int, template: Template) -> float:
    max_possible = template.max_possible
    if max_possible <= 0:
        return 0.0
    return min(raw_score / (max_possible * 2), 1.0)


class ReferenceMatcher:
    """Picks the library template that best fits a free-text prompt."""

    def __init__(self, library: TemplateLibrary, threshold: float = MATCH_THRESHOLD):
        self._library = library
        self._threshold = threshold

    @property
    def library(self) -> TemplateLibrary:
        return self._library

    def rank(self, prompt: str) -> list[ScoredTemplate]:
        """Score every template, best first (ties keep library order)."""
        scored = [
            ScoredTemplate(template=t, score=normalize_score(score_template(t, prompt), t))
            for t in self._library
        ]
        return sorted(scored, key=lambda s: s.score, reverse=True)

    def match(self, prompt: str) -> MatchResult:
        ranked = self.rank(prompt)
        if not ranked:
            return MatchResult(best_match=None, score=0.0)

        best = ranked[0]
        if best.score < self._threshold:
            logger.info(
                f"No reference match (top='{best.template.name}' "
                f"score={best.score:.3f}) for '{prompt[:50]}'"
            )
            return MatchResult(best_match=None, score=best.score)

        alternates = tuple(
            s for s in ranked[1:] if s.score >= self._threshold
        )[:MAX_ALTERNATES]

        logger.info(
            f"Reference match: '{best.template.name}' score={best.score:.3f} "
            f"alternates={[s.template.id for s in alternates]}"
        )
        return MatchResult(best_match=best.template, score=best.score, alternates=alternates)
