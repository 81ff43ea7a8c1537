"""Code block classification strategies."""
from .classifiers import (
    BlockClassifier,
    ContentPatternClassifier,
    LanguageTagClassifier,
    default_classifiers,
)

__all__ = [
    "BlockClassifier",
    "ContentPatternClassifier",
    "LanguageTagClassifier",
    "default_classifiers",
]
