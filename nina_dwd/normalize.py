"""Comparison keys for warning texts from differently formatted sources."""

import re
from typing import Optional

from .models import WarningItem

# Boilerplate in front of official headlines, e.g.
# "Amtliche Unwetterwarnung vor ORKANBÖEN" or "Official warning of Thunderstorm"
WARNING_PREFIX_REGEX = re.compile(
    r"^\s*(?:amtliche\s+(?:unwetter)?warnung\s+vor"
    r"|official\s+(?:severe\s+weather\s+)?warning\s+of)\s+",
    re.IGNORECASE,
)

_LINE_BREAK_TAG = re.compile(r"<br\s*/?>", re.IGNORECASE)
_CONTENT_NOISE = re.compile(r"[·•.;]")
_WHITESPACE = re.compile(r"\s+")


def normalize_key(text: Optional[str], prefix: Optional[re.Pattern] = WARNING_PREFIX_REGEX) -> str:
    """Grouping key for a headline: prefix stripped, whitespace collapsed, lower-cased."""
    if not text:
        return ""
    text = str(text)
    if prefix is not None:
        text = prefix.sub("", text, count=1)
    return _WHITESPACE.sub(" ", text).strip().lower()


def normalize_content(text: Optional[str]) -> str:
    """
    Comparison form of a description or instruction.

    NINA delivers bullet lists with line breaks and "·" markers where DWD
    uses semicolons, so all of these collapse to single spaces.
    """
    if not text:
        return ""
    text = _LINE_BREAK_TAG.sub(" ", str(text))
    text = _CONTENT_NOISE.sub(" ", text)
    return _WHITESPACE.sub(" ", text).strip().lower()


def content_matches(a: WarningItem, b: WarningItem, ignore_instructions: bool = False) -> bool:
    """True if two warnings carry the same description (and instruction)."""
    if normalize_content(a.description) != normalize_content(b.description):
        return False
    if ignore_instructions:
        return True
    return normalize_content(a.instruction) == normalize_content(b.instruction)


def content_key(warning: WarningItem) -> str:
    """Key of a warning's text, used for the translation cache."""
    return f"{warning.headline}|{warning.description or ''}|{warning.instruction or ''}"
