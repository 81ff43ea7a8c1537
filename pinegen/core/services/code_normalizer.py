"""Code normalizer - extracts and cleans script blocks from raw model output.

Flow:
    1. Find every fenced block in the model text.
    2. Assign blocks to the primary (PineScript) and preview (JavaScript)
       slots with classifiers tried in priority order; first fit wins.
    3. Primary: single version directive, no credits, namespaced built-ins,
       ``color.rgb`` constructors. Preview: fences stripped only.
"""

import logging
import re
from typing import Optional

from ..models.output import BlockSlot, CodeBlock, NormalizedOutput
from ..strategies.classifiers import BlockClassifier, default_classifiers

logger = logging.getLogger(__name__)

VERSION_DIRECTIVE = "//@version=6"

_FENCED_BLOCK_RE = re.compile(r"```[ \t]*([\w+#.-]*)[^\S\n]*\n(.*?)```", re.DOTALL)
_OPEN_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*?\r?\n")
_CLOSE_FENCE_RE = re.compile(r"\r?\n```[\t ]*$")

# Covers both "//@version=5" and "// @version = 5"
_VERSION_LINE_RE = re.compile(r"^[ \t]*//[ \t]*@version[ \t]*=?[ \t]*\d+[ \t]*$", re.MULTILINE)
# Any line that starts with a directive, trailing text included
_VERSION_PREFIX_RE = re.compile(r"^[ \t]*//[ \t]*@version[ \t]*=?[ \t]*\d+.*\n?", re.MULTILINE)

_CREDIT_PATTERNS = (
    re.compile(r"^[ \t]*//[ \t]*@author.*$", re.MULTILINE),
    re.compile(r"^[ \t]*//[ \t]*©.*$", re.MULTILINE),
    re.compile(r"https?://(?:www\.)?(?:tradingview\.com|pinescriptpc\.com)\S*", re.IGNORECASE),
    re.compile(r"^[ \t]*//[ \t]*Source:.*$", re.MULTILINE),
)

_BARE_COLOR_RE = re.compile(r"(?<![\w.])color\s*\(\s*(\d)")

LEGACY_NAMESPACES: dict[str, str] = {
    # technical analysis
    "sma": "ta",
    "ema": "ta",
    "rsi": "ta",
    "atr": "ta",
    "stoch": "ta",
    "macd": "ta",
    "bb": "ta",
    "wma": "ta",
    "vwma": "ta",
    "swma": "ta",
    "alma": "ta",
    "hma": "ta",
    "rma": "ta",
    "mfi": "ta",
    "cci": "ta",
    "cmo": "ta",
    "cog": "ta",
    "dmi": "ta",
    "supertrend": "ta",
    "pivothigh": "ta",
    "pivotlow": "ta",
    "highest": "ta",
    "lowest": "ta",
    "highestbars": "ta",
    "lowestbars": "ta",
    "barssince": "ta",
    "crossover": "ta",
    "crossunder": "ta",
    "cross": "ta",
    "valuewhen": "ta",
    "change": "ta",
    "mom": "ta",
    "percentrank": "ta",
    "variance": "ta",
    "stdev": "ta",
    "correlation": "ta",
    "cum": "ta",
    "falling": "ta",
    "rising": "ta",
    "tr": "ta",
    "vwap": "ta",
    "sar": "ta",
    # math
    "abs": "math",
    "ceil": "math",
    "floor": "math",
    "log": "math",
    "log10": "math",
    "max": "math",
    "min": "math",
    "pow": "math",
    "round": "math",
    "sign": "math",
    "sqrt": "math",
    "avg": "math",
    "sum": "math",
    # strings
    "tostring": "str",
}

# One alternation, longest names first; a call qualifies only when the name
# is not preceded by "." or a word character.
_LEGACY_CALL_RE = re.compile(
    r"(?<![\w.])("
    + "|".join(re.escape(n) for n in sorted(LEGACY_NAMESPACES, key=len, reverse=True))
    + r")\s*\("
)


def strip_code_fences(text: str) -> str:
    """Remove a leading ```lang line and a trailing ``` line."""
    text = _OPEN_FENCE_RE.sub("", text, count=1)
    text = _CLOSE_FENCE_RE.sub("", text, count=1)
    return text.strip()


def strip_credits(code: str) -> str:
    """Drop author/copyright/source lines and links to script hosting sites."""
    for pattern in _CREDIT_PATTERNS:
        code = pattern.sub("", code)
    return code.strip()


def normalize_version(code: str) -> str:
    """Return code with exactly one version directive as its first line."""
    clean = strip_code_fences(code).replace("\r\n", "\n").strip()
    if not clean:
        return clean

    body = _VERSION_LINE_RE.sub("", clean).lstrip()
    body = strip_credits(body)
    return f"{VERSION_DIRECTIVE}\n{body}"


def rewrite_legacy_calls(code: str) -> str:
    """Qualify legacy built-in calls, e.g. ``sma(`` -> ``ta.sma(``."""
    return _LEGACY_CALL_RE.sub(
        lambda m: f"{LEGACY_NAMESPACES[m.group(1)]}.{m.group(1)}(", code
    )


def fix_color_constructors(code: str) -> str:
    """``color(255, ...)`` -> ``color.rgb(255, ...)``."""
    return _BARE_COLOR_RE.sub(r"color.rgb(\1", code)


def count_version_lines(code: str) -> int:
    """Lines starting with a version directive, malformed ones included."""
    return len(_VERSION_PREFIX_RE.findall(code))


def enforce_single_directive(code: str) -> str:
    """Drop every line starting with a directive and prepend the canonical one."""
    body = _VERSION_PREFIX_RE.sub("", code).lstrip()
    return f"{VERSION_DIRECTIVE}\n{body}"


def clean_primary(code: str) -> str:
    fixed = normalize_version(code)
    if not fixed:
        return fixed

    fixed = rewrite_legacy_calls(fixed)

    if count_version_lines(fixed) != 1 or not fixed.startswith(VERSION_DIRECTIVE + "\n"):
        logger.warning("Malformed version directive left after cleanup, re-normalizing")
        fixed = enforce_single_directive(fixed)

    return fix_color_constructors(fixed)


def clean_preview(code: str) -> str:
    return strip_code_fences(code)


def extract_code_blocks(text: str) -> list[CodeBlock]:
    """Fenced blocks with a non-empty body, in document order."""
    blocks = []
    for match in _FENCED_BLOCK_RE.finditer(text):
        body = match.group(2).strip()
        if not body:
            continue
        blocks.append(
            CodeBlock(index=len(blocks), language=match.group(1).lower(), body=body)
        )
    return blocks


def assign_slots(
    blocks: list[CodeBlock],
    classifiers: Optional[list[BlockClassifier]] = None,
) -> dict[BlockSlot, CodeBlock]:
    """Fill the primary and preview slots.

    Blocks are scanned in document order. Each block goes to the first
    classifier (priority order) whose slot is still empty and which accepts
    it, so a block fits at most one slot and the first fit per slot wins.
    A block whose tag names one slot is never claimed for the other.
    """
    classifiers = classifiers if classifiers is not None else default_classifiers()
    wanted = {c.slot for c in classifiers}
    slots: dict[BlockSlot, CodeBlock] = {}

    for block in blocks:
        if len(slots) == len(wanted):
            break

        tag_slot = next(
            (c.slot for c in classifiers if c.by_tag and c.matches(block)), None
        )
        for classifier in classifiers:
            if classifier.slot in slots:
                continue
            if tag_slot is not None and classifier.slot != tag_slot:
                continue
            if classifier.matches(block):
                slots[classifier.slot] = block
                logger.debug(f"Block {block.index} ({block.language or 'untagged'}) -> {classifier!r}")
                break

    return slots


class CodeNormalizer:
    """Turns raw model text into cleaned primary and preview code."""

    def __init__(self, classifiers: Optional[list[BlockClassifier]] = None):
        self._classifiers = classifiers if classifiers is not None else default_classifiers()

    def normalize(self, raw_text: str) -> NormalizedOutput:
        blocks = extract_code_blocks(raw_text)
        slots = assign_slots(blocks, self._classifiers)

        primary = slots.get(BlockSlot.PRIMARY)
        preview = slots.get(BlockSlot.PREVIEW)

        primary_code = clean_primary(primary.body) if primary else None
        preview_code = clean_preview(preview.body) if preview else None

        if primary_code is None:
            logger.warning(f"No primary code found in {len(blocks)} block(s)")
        else:
            logger.info(
                f"Normalized output: {len(blocks)} block(s), "
                f"primary={len(primary_code)} chars, "
                f"preview={'yes' if preview_code else 'no'}"
            )

        return NormalizedOutput(
            primary_code=primary_code or None,
            preview_code=preview_code or None,
            raw_text=raw_text,
        )
