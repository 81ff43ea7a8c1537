"""Core business services."""
from .chat_service import ChatService
from .code_normalizer import CodeNormalizer
from .config_parser import parse_indicator_config
from .indicator_service import IndicatorService
from .reference_matcher import ReferenceMatcher
from .template_library import TemplateLibrary, TemplateLibraryError

__all__ = [
    "ChatService",
    "CodeNormalizer",
    "parse_indicator_config",
    "IndicatorService",
    "ReferenceMatcher",
    "TemplateLibrary",
    "TemplateLibraryError",
]
