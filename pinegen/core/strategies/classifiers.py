import re
from abc import ABC, abstractmethod

from ..models.output import BlockSlot, CodeBlock

PRIMARY_TAG_MARKERS = ("pine",)
PREVIEW_TAGS = frozenset({"javascript", "js", "typescript", "ts"})

PRIMARY_CONTENT_PATTERNS = (
    re.compile(r"//\s*@version\s*=?\s*\d+"),
    re.compile(r"\b(?:indicator|strategy)\s*\("),
    re.compile(r"(?<![\w.])ta\.[a-z]\w*\s*\("),
)

PREVIEW_CONTENT_PATTERNS = (
    re.compile(r"\bfunction\s+calculate\b"),
    re.compile(r"\b(?:const|let|var)\s+calculate\b"),
    re.compile(r"(?<![\w.])(?:module\.)?exports(?:\.\w+)?\s*=(?!=)"),
)


class BlockClassifier(ABC):
    """Base class for code block classifiers."""

    by_tag = False

    def __init__(self, slot: BlockSlot):
        self.slot = slot

    @abstractmethod
    def matches(self, block: CodeBlock) -> bool:
        """Check whether block belongs in this classifier's slot."""
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.slot.value})"


class LanguageTagClassifier(BlockClassifier):
    """Classify by the language hint after the opening fence."""

    by_tag = True

    def __init__(
        self,
        slot: BlockSlot,
        tags: frozenset[str] = frozenset(),
        markers: tuple[str, ...] = (),
    ):
        """Initialize classifier.

        Args:
            slot: Slot filled on match.
            tags: Exact tags accepted.
            markers: Substrings accepted anywhere in the tag.
        """
        super().__init__(slot)
        self._tags = tags
        self._markers = markers

    def matches(self, block: CodeBlock) -> bool:
        if not block.language:
            return False
        if block.language in self._tags:
            return True
        return any(m in block.language for m in self._markers)


class ContentPatternClassifier(BlockClassifier):
    """Classify by regex heuristics over the block body."""

    def __init__(self, slot: BlockSlot, patterns: tuple[re.Pattern, ...]):
        super().__init__(slot)
        self._patterns = patterns

    def matches(self, block: CodeBlock) -> bool:
        return any(p.search(block.body) for p in self._patterns)


def default_classifiers() -> list[BlockClassifier]:
    """Classifiers in priority order: primary before preview, tag before content."""
    return [
        LanguageTagClassifier(BlockSlot.PRIMARY, markers=PRIMARY_TAG_MARKERS),
        ContentPatternClassifier(BlockSlot.PRIMARY, PRIMARY_CONTENT_PATTERNS),
        LanguageTagClassifier(BlockSlot.PREVIEW, tags=PREVIEW_TAGS),
        ContentPatternClassifier(BlockSlot.PREVIEW, PREVIEW_CONTENT_PATTERNS),
    ]
