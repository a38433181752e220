"""Severity scoring and display lookups for warnings."""

import logging
from typing import Dict, Optional

from .models import NinaWarning, DwdWarning, WarningItem

logger = logging.getLogger(__name__)

NINA_SEVERITY_SCORES = {
    "Extreme": 4,
    "Severe": 3,
    "Moderate": 2,
    "Minor": 1,
}

SEVERITY_COLORS = {
    0: "#c5e566",  # No warning
    1: "#ffeb3b",  # Minor
    2: "#fb8c00",  # Moderate
    3: "#e53935",  # Severe
    4: "#880e4f",  # Extreme
}

SEVERITY_NAMES = {
    0: "no_warning",
    1: "minor",
    2: "moderate",
    3: "severe",
    4: "extreme",
}

DEFAULT_ICON = "mdi:alert-circle-outline"

# DWD event codes (warning_<i>_type) to Material Design icons
EVENT_ICONS = {
    22: "mdi:snowflake-thermometer",  # frost
    24: "mdi:car-traction-control",  # black ice
    31: "mdi:weather-lightning",  # thunderstorm
    33: "mdi:weather-lightning-rainy",
    34: "mdi:weather-lightning-rainy",
    36: "mdi:weather-lightning-rainy",
    38: "mdi:weather-lightning-rainy",
    40: "mdi:weather-lightning-rainy",
    41: "mdi:weather-lightning-rainy",
    42: "mdi:weather-lightning-rainy",
    44: "mdi:weather-lightning-rainy",
    45: "mdi:weather-lightning-rainy",
    46: "mdi:weather-lightning-rainy",
    48: "mdi:weather-lightning-rainy",
    49: "mdi:weather-lightning-rainy",
    51: "mdi:weather-windy",  # wind gusts
    52: "mdi:weather-windy",
    53: "mdi:weather-windy",
    54: "mdi:weather-windy",
    55: "mdi:weather-windy",
    56: "mdi:weather-windy",
    57: "mdi:weather-windy-variant",
    58: "mdi:weather-windy-variant",
    59: "mdi:weather-fog",  # fog
    61: "mdi:weather-pouring",  # heavy rain
    62: "mdi:weather-pouring",
    63: "mdi:weather-pouring",
    64: "mdi:weather-pouring",
    65: "mdi:weather-pouring",
    66: "mdi:weather-pouring",
    70: "mdi:weather-snowy-heavy",  # snow
    71: "mdi:weather-snowy-heavy",
    72: "mdi:weather-snowy-heavy",
    73: "mdi:weather-snowy-heavy",
    74: "mdi:weather-snowy-heavy",
    75: "mdi:weather-snowy-heavy",
    76: "mdi:weather-snowy-heavy",
    79: "mdi:snowflake-alert",
    82: "mdi:snowflake-thermometer",
    84: "mdi:car-traction-control",
    85: "mdi:car-traction-control",
    86: "mdi:car-traction-control",
    87: "mdi:car-traction-control",
    88: "mdi:snowflake-melt",  # thaw
    89: "mdi:snowflake-melt",
    246: "mdi:weather-sunny-alert",  # UV
    247: "mdi:thermometer-alert",  # heat
    248: "mdi:thermometer-alert",
}

NTFY_PRIORITIES = {
    0: "min",
    1: "low",
    2: "default",
    3: "high",
    4: "urgent",
}


def score(warning: WarningItem) -> int:
    """
    Map a warning's native severity onto the common 0-4 scale.

    NINA severities map Extreme=4 .. Minor=1, anything else to 0.
    DWD warnings use their level directly (clamped to 0-4), 0 when absent.
    """
    if isinstance(warning, NinaWarning):
        return NINA_SEVERITY_SCORES.get(warning.severity, 0)
    if isinstance(warning, DwdWarning) and warning.level is not None:
        return max(0, min(4, warning.level))
    return 0


def severity_color(level: int, overrides: Optional[Dict[str, str]] = None) -> str:
    """Colour for a severity score, honouring configured overrides."""
    if level not in SEVERITY_COLORS:
        return "#999999"
    overrides = overrides or {}
    return overrides.get(SEVERITY_NAMES[level]) or SEVERITY_COLORS[level]


def warning_icon(warning: WarningItem) -> str:
    """Icon for a warning; only DWD warnings carry an event code."""
    if isinstance(warning, DwdWarning) and warning.event_code is not None:
        return EVENT_ICONS.get(warning.event_code, DEFAULT_ICON)
    return DEFAULT_ICON


def ntfy_priority(level: int) -> str:
    return NTFY_PRIORITIES.get(level, "default")
