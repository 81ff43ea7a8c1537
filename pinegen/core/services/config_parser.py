"""Config parser - display metadata and numeric inputs from a PineScript body."""

import logging
import re
from typing import Optional

from ..models.indicator import IndicatorConfig, IndicatorParam

logger = logging.getLogger(__name__)

_TITLE_RE = re.compile(
    r"\b(?:indicator|strategy)\s*\(\s*(?:title\s*=\s*)?[\"']([^\"']+)[\"']"
)
_OVERLAY_RE = re.compile(r"overlay\s*=\s*(true|false)")
_INPUT_RE = re.compile(
    r"(\w+)\s*=\s*input(?:\.(int|float|bool|string|source|color))?\s*\(\s*"
    r"(?:defval\s*=\s*)?([^,)]+)"
)
_TITLE_KWARG_RE = re.compile(r"title\s*=\s*[\"']([^\"']+)[\"']")
_POSITIONAL_LABEL_RE = re.compile(r"^\s*,\s*[\"']([^\"']+)[\"']")
_LEADING_FLOAT_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_BOUND_RES = {
    "min": re.compile(r"minval\s*=\s*([0-9.]+)"),
    "max": re.compile(r"maxval\s*=\s*([0-9.]+)"),
    "step": re.compile(r"step\s*=\s*([0-9.]+)"),
}

NON_NUMERIC_INPUTS = frozenset({"bool", "color", "string", "source"})


def parse_leading_float(text: str) -> Optional[float]:
    """Parse the numeric prefix of text, None if there is none."""
    match = _LEADING_FLOAT_RE.match(text.strip())
    if not match:
        return None
    return float(match.group(0))


def _line_rest(code: str, pos: int) -> str:
    end = code.find("\n", pos)
    return code[pos:] if end == -1 else code[pos:end]


def _input_label(code: str, match: re.Match) -> Optional[str]:
    rest = _line_rest(code, match.end(3))
    title = _TITLE_KWARG_RE.search(rest)
    if title:
        return title.group(1)
    positional = _POSITIONAL_LABEL_RE.match(rest)
    if positional:
        return positional.group(1)
    return None


def _input_bounds(code: str, start: int) -> dict[str, float]:
    close = code.find(")", start)
    call = code[start:close + 1] if close != -1 else code[start:]
    bounds = {}
    for key, pattern in _BOUND_RES.items():
        m = pattern.search(call)
        if m:
            value = parse_leading_float(m.group(1))
            if value is not None:
                bounds[key] = value
    return bounds


def parse_indicator_config(code: str) -> IndicatorConfig:
    """Heuristically derive title, overlay flag and numeric inputs.

    Boolean, color, string and source inputs are left out of the parameter
    table; so is any input whose default does not start with a number.
    """
    config = IndicatorConfig()

    title = _TITLE_RE.search(code)
    if title:
        config.name = title.group(1)
        config.description = title.group(1)

    overlay = _OVERLAY_RE.search(code)
    if overlay and overlay.group(1) == "true":
        config.overlay_type = "overlay"

    for match in _INPUT_RE.finditer(code):
        var_name, input_type = match.group(1), match.group(2) or ""
        if input_type in NON_NUMERIC_INPUTS:
            continue

        default = parse_leading_float(match.group(3))
        if default is None:
            continue

        config.params[var_name] = IndicatorParam(
            default=default,
            label=_input_label(code, match) or var_name,
            **_input_bounds(code, match.start()),
        )

    logger.info(
        f"Parsed config '{config.name}' ({config.overlay_type}) "
        f"with {len(config.params)} param(s)"
    )
    return config
