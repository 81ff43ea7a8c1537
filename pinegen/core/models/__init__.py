"""Domain models."""
from .chat import ChatMessage, ChatHistory
from .indicator import IndicatorConfig, IndicatorParam, IndicatorResult
from .output import BlockSlot, CodeBlock, NormalizedOutput
from .template import MatchResult, ScoredTemplate, Template, TemplateSource

__all__ = [
    "ChatMessage",
    "ChatHistory",
    "IndicatorConfig",
    "IndicatorParam",
    "IndicatorResult",
    "BlockSlot",
    "CodeBlock",
    "NormalizedOutput",
    "MatchResult",
    "ScoredTemplate",
    "Template",
    "TemplateSource",
]
