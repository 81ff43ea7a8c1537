"""Normalized model output models."""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class BlockSlot(Enum):
    """Slot a fenced block can be assigned to."""
    PRIMARY = "primary"
    PREVIEW = "preview"


@dataclass(frozen=True)
class CodeBlock:
    """Fenced code block found in model output."""
    index: int
    language: str  # lower-cased, may be empty
    body: str      # trimmed


@dataclass(frozen=True)
class NormalizedOutput:
    """Cleaned code extracted from raw model text."""
    primary_code: Optional[str]
    preview_code: Optional[str]
    raw_text: str

    @property
    def has_primary(self) -> bool:
        return bool(self.primary_code)
