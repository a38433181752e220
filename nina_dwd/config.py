"""Configuration loading and validation."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

import yaml

from .reconciler import ReconcileOptions

logger = logging.getLogger(__name__)

DEFAULT_MAX_WARNINGS = 5


class ConfigError(ValueError):
    """Raised for configuration that cannot be used."""


@dataclass
class Config:
    """Settings for one warnings run."""

    nina_entity_prefix: Optional[str] = None
    dwd_device: Optional[str] = None
    max_warnings: Optional[int] = DEFAULT_MAX_WARNINGS
    hide_on_level_below: Optional[int] = None
    ignore_instructions: bool = False
    separate_advance_warnings: bool = False
    color_overrides: Dict[str, str] = field(default_factory=dict)
    hass_url: str = "http://homeassistant.local:8123"
    hass_token: str = ""
    db_path: str = "data/nina_dwd.sqlite"
    translation_enabled: bool = False
    translation_language: str = "English"
    translation_entity_id: Optional[str] = None
    ntfy: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "Config":
        """Build a Config from the parsed YAML document."""
        if not isinstance(data, dict):
            raise ConfigError("Invalid configuration")

        app = data.get("app") or {}
        hass = data.get("homeassistant") or {}
        warnings = data.get("warnings") or {}
        translation = data.get("translation") or {}

        nina_prefix = warnings.get("nina_entity_prefix") or None
        dwd_device = warnings.get("dwd_device") or None
        if not nina_prefix and not dwd_device:
            raise ConfigError("You need to define at least one NINA or DWD entity.")

        max_warnings = _optional_int(warnings, "max_warnings", DEFAULT_MAX_WARNINGS)
        if max_warnings is not None and max_warnings < 0:
            raise ConfigError(f"max_warnings must not be negative, got {max_warnings}")
        hide_below = _optional_int(warnings, "hide_on_level_below", None)
        if hide_below is not None and not 0 <= hide_below <= 4:
            raise ConfigError(f"hide_on_level_below must be between 0 and 4, got {hide_below}")

        return cls(
            nina_entity_prefix=nina_prefix,
            dwd_device=dwd_device,
            # 0 means "no limit"
            max_warnings=max_warnings or None,
            hide_on_level_below=hide_below or None,
            ignore_instructions=bool(warnings.get("ignore_instructions", False)),
            separate_advance_warnings=bool(warnings.get("separate_advance_warnings", False)),
            color_overrides=dict(warnings.get("color_overrides") or {}),
            hass_url=hass.get("url") or cls.hass_url,
            hass_token=hass.get("token") or "",
            db_path=app.get("db_path", cls.db_path),
            translation_enabled=bool(translation.get("enabled", False)),
            translation_language=translation.get("language", cls.translation_language),
            translation_entity_id=translation.get("entity_id") or None,
            ntfy=dict(data.get("ntfy") or {}),
        )

    def reconcile_options(self) -> ReconcileOptions:
        return ReconcileOptions(
            hide_below_level=self.hide_on_level_below,
            max_count=self.max_warnings,
            ignore_instructions=self.ignore_instructions,
            drop_nina_from_dwd=True,
        )


def _optional_int(section: dict, key: str, default: Optional[int]) -> Optional[int]:
    value = section.get(key, default)
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (ValueError, TypeError):
        raise ConfigError(f"{key} must be an integer, got {value!r}")


def load_config(config_path: str) -> Config:
    """Load configuration from YAML file."""
    config_file = Path(config_path)
    if not config_file.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_file, "r") as f:
        data = yaml.safe_load(f)

    return Config.from_dict(data)
