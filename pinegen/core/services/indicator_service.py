"""Indicator service - reference match, generation and post-processing."""

import logging
from typing import Optional

from ..models.indicator import IndicatorResult
from ..models.template import MatchResult
from ..protocols.llm import LLMProtocol
from .code_normalizer import CodeNormalizer
from .config_parser import parse_indicator_config
from .prompt_builder import INDICATOR_SYSTEM_PROMPT, build_indicator_prompt
from .reference_matcher import ReferenceMatcher

logger = logging.getLogger(__name__)


class IndicatorService:
    """Generates an indicator script plus JS preview from a user request."""

    def __init__(
        self,
        llm: LLMProtocol,
        matcher: ReferenceMatcher,
        normalizer: CodeNormalizer,
        default_model: str = "gpt-4o",
    ):
        """Initialize indicator service.

        Args:
            llm: Chat-completion provider.
            matcher: Reference template matcher.
            normalizer: Post-processor for model output.
            default_model: Model key reported when the caller names none.
        """
        self._llm = llm
        self._matcher = matcher
        self._normalizer = normalizer
        self._default_model = default_model

    def prepare(self, prompt: str) -> tuple[MatchResult, str]:
        """Match the prompt and build the augmented generation prompt."""
        if not prompt or not prompt.strip():
            raise ValueError("Prompt is required")

        match = self._matcher.match(prompt)
        return match, build_indicator_prompt(prompt, match)

    async def generate(self, prompt: str, model: Optional[str] = None) -> IndicatorResult:
        match, augmented = self.prepare(prompt)
        model_key = model or self._default_model

        raw_text = await self._llm.complete(
            system_prompt=INDICATOR_SYSTEM_PROMPT,
            user_prompt=augmented,
            model=model_key,
        )

        output = self._normalizer.normalize(raw_text)
        config = parse_indicator_config(output.primary_code) if output.primary_code else None

        reference = None
        if match.best_match is not None:
            reference = {
                "id": match.best_match.id,
                "name": match.best_match.name,
                "author": match.best_match.author,
                "score": round(match.score, 4),
            }

        logger.info(
            f"Generated indicator for '{prompt[:50]}': "
            f"code={'yes' if output.primary_code else 'no'} "
            f"reference={reference['id'] if reference else None}"
        )

        return IndicatorResult(
            code=output.primary_code,
            preview_code=output.preview_code,
            text_output=output.raw_text,
            config=config,
            model=model_key,
            reference_used=reference,
        )
