"""Indicator config and generation result models."""
from dataclasses import dataclass, field
from typing import Any, Optional

DEFAULT_INDICATOR_NAME = "Custom Indicator"
DEFAULT_INDICATOR_DESCRIPTION = "Generated PineScript Indicator"


@dataclass
class IndicatorParam:
    """Numeric input declared by a script."""
    default: float
    label: str
    min: Optional[float] = None
    max: Optional[float] = None
    step: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"default": self.default, "label": self.label}
        for key in ("min", "max", "step"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data


@dataclass
class IndicatorConfig:
    """Display metadata and parameter table derived from a script."""
    name: str = DEFAULT_INDICATOR_NAME
    description: str = DEFAULT_INDICATOR_DESCRIPTION
    overlay_type: str = "separate"  # "overlay" | "separate"
    params: dict[str, IndicatorParam] = field(default_factory=dict)

    @property
    def is_overlay(self) -> bool:
        return self.overlay_type == "overlay"

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "params": {k: p.to_dict() for k, p in self.params.items()},
            "overlayType": self.overlay_type,
        }


@dataclass
class IndicatorResult:
    """Outcome of one indicator generation request."""
    code: Optional[str]
    preview_code: Optional[str]
    text_output: str
    config: Optional[IndicatorConfig]
    model: str
    reference_used: Optional[dict[str, Any]] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": "completed",
            "code": self.code,
            "previewCode": self.preview_code,
            "textOutput": self.text_output,
            "config": self.config.to_dict() if self.config else None,
            "referenceUsed": self.reference_used,
            "model": self.model,
        }
