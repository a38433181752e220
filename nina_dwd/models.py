"""Data models for NINA and DWD warnings."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Union
import logging

from dateutil import parser as date_parser

logger = logging.getLogger(__name__)

DWD_SENDER = "Deutscher Wetterdienst"


@dataclass(frozen=True)
class NinaWarning:
    """A warning reported by a NINA binary sensor."""

    headline: str
    description: str = ""
    sender: str = ""
    entity_id: str = ""
    severity: str = "Unknown"  # Minor | Moderate | Severe | Extreme | Unknown
    start: Optional[str] = None
    expires: Optional[str] = None
    instruction: Optional[str] = None


@dataclass(frozen=True)
class DwdWarning:
    """A warning read from the attributes of a DWD warning level sensor."""

    headline: str
    description: str = ""
    entity_id: str = ""
    level: Optional[int] = None
    start: Optional[str] = None
    end: Optional[str] = None
    instruction: Optional[str] = None
    event_code: Optional[int] = None


WarningItem = Union[NinaWarning, DwdWarning]


@dataclass
class TranslationEntry:
    """Translated warning texts as stored in the translation cache."""

    headline: str
    description: str
    instruction: str
    timestamp: float


def is_dwd(warning: WarningItem) -> bool:
    return isinstance(warning, DwdWarning)


def end_of(warning: WarningItem) -> Optional[str]:
    """Return the end of the validity period ("expires" for NINA, "end" for DWD)."""
    if isinstance(warning, DwdWarning):
        return warning.end
    return warning.expires


def source_label(warning: WarningItem) -> str:
    """Name of the sender shown next to a warning."""
    if isinstance(warning, NinaWarning):
        return warning.sender or ""
    return DWD_SENDER


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """
    Parse a Home Assistant timestamp.

    Naive timestamps are read as UTC. Returns None for absent or
    unparsable values so callers can treat them as non-comparable.
    """
    if not value:
        return None
    try:
        parsed = date_parser.parse(str(value))
    except (ValueError, TypeError, OverflowError) as e:
        logger.debug(f"Failed to parse timestamp '{value}': {e}")
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
