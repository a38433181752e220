#!/usr/bin/env python3
"""Main entry point for the NINA/DWD warnings runner."""

import argparse
import logging
import sys
from pathlib import Path
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple
import yaml

from .collector import collect
from .config import Config, ConfigError, load_config
from .hass import HassClient, HassError
from .models import WarningItem, source_label
from .notify import notify_warnings
from .reconciler import build_sections
from .scoring import score, warning_icon
from .storage import MemoryStore, SqliteStore
from .translate import Translator
from .translation_cache import TranslationCache


def setup_logging(verbose: bool = False, log_file: Optional[str] = None):
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    handlers = [logging.StreamHandler(sys.stdout)]

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )


def load_snapshot(snapshot_path: str) -> Tuple[Dict[str, dict], Dict[str, dict]]:
    """
    Load states and entity registry from a YAML/JSON snapshot file.

    The file holds {"states": {entity_id: {state, attributes}},
    "entities": {entity_id: {device_id}}}.
    """
    snapshot_file = Path(snapshot_path)
    if not snapshot_file.exists():
        raise FileNotFoundError(f"Snapshot file not found: {snapshot_path}")

    with open(snapshot_file, "r") as f:
        data = yaml.safe_load(f) or {}

    return data.get("states") or {}, data.get("entities") or {}


def fetch_snapshot(client: HassClient, config: Config) -> Tuple[Dict[str, dict], List[str]]:
    """Fetch the states and DWD device entities from Home Assistant."""
    states = client.get_states()
    entities = client.device_entities(config.dwd_device) if config.dwd_device else []
    return states, entities


def log_section(name: str, warnings: List[WarningItem]):
    logger = logging.getLogger(__name__)
    logger.info(f"{name}: {len(warnings)} warnings")
    for warning in warnings:
        logger.info(
            f"  [{score(warning)}] {warning.headline} ({source_label(warning) or 'unknown sender'}, "
            f"{warning.start or '?'}, {warning_icon(warning)})"
        )


def run_once(
    config: Config,
    dry_run: bool = False,
    translate: bool = True,
    snapshot: Optional[str] = None,
) -> Dict[str, List[WarningItem]]:
    """Run one cycle of collecting, reconciling, translating and notifying."""
    logger = logging.getLogger(__name__)
    start_time = datetime.now(timezone.utc)

    logger.info("=" * 60)
    logger.info("Starting warnings cycle")
    logger.info("=" * 60)

    client = None
    if snapshot:
        states, entities = load_snapshot(snapshot)
    else:
        client = HassClient(config.hass_url, config.hass_token)
        states, entities = fetch_snapshot(client, config)

    collected = collect(
        states,
        entities,
        nina_prefix=config.nina_entity_prefix,
        dwd_device=config.dwd_device,
    )
    logger.info(f"NINA: {len(collected.nina)} warnings")
    logger.info(f"DWD current: {len(collected.dwd_current)} warnings")
    logger.info(f"DWD advance: {len(collected.dwd_advance)} warnings")

    sections = build_sections(
        collected,
        config.reconcile_options(),
        separate_advance=config.separate_advance_warnings,
    )

    store = MemoryStore() if dry_run else SqliteStore(config.db_path)

    if translate and config.translation_enabled:
        if client is None:
            client = HassClient(config.hass_url, config.hass_token)
        cache = TranslationCache(store)
        translator = Translator(
            client.generate_data,
            cache,
            config.translation_language,
            entity_id=config.translation_entity_id,
        )
        sections = {name: translator.translate(warnings) for name, warnings in sections.items()}

    for name, warnings in sections.items():
        log_section(name, warnings)

    topic = config.ntfy.get("topic")
    sent_count = 0
    if not topic:
        logger.warning("No ntfy topic configured, skipping notifications")
    else:
        for warnings in sections.values():
            sent_count += notify_warnings(
                warnings,
                store,
                base_url=config.ntfy.get("base_url", "https://ntfy.sh"),
                topic=topic,
                headers=config.ntfy.get("headers"),
                color_overrides=config.color_overrides,
                dry_run=dry_run,
            )

    end_time = datetime.now(timezone.utc)
    duration = (end_time - start_time).total_seconds()

    logger.info("=" * 60)
    logger.info("Cycle complete")
    logger.info(f"Duration: {duration:.2f}s")
    logger.info(f"Collected: {len(collected)}")
    logger.info(f"Shown: {sum(len(w) for w in sections.values())}")
    logger.info(f"Sent: {sent_count}")
    logger.info("=" * 60)

    return sections


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Merged NINA and DWD warnings from Home Assistant"
    )
    parser.add_argument(
        "--config",
        default="config.yaml",
        help="Path to config YAML file (default: config.yaml)",
    )
    parser.add_argument(
        "--snapshot",
        help="Read states and entities from a YAML/JSON file instead of Home Assistant",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print what would be sent without actually sending",
    )
    parser.add_argument(
        "--no-translate",
        action="store_true",
        help="Skip translation even if enabled in the config",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--log-file",
        help="Path to log file (default: logs/nina-dwd.log)",
    )

    args = parser.parse_args()

    log_file = args.log_file or "logs/nina-dwd.log"
    setup_logging(verbose=args.verbose, log_file=log_file)

    try:
        config = load_config(args.config)
    except (FileNotFoundError, ConfigError) as e:
        logging.error(f"Configuration error: {e}")
        sys.exit(1)
    except Exception as e:
        logging.error(f"Error loading config: {e}")
        sys.exit(1)

    try:
        run_once(
            config,
            dry_run=args.dry_run,
            translate=not args.no_translate,
            snapshot=args.snapshot,
        )
    except KeyboardInterrupt:
        logging.info("Interrupted by user")
        sys.exit(0)
    except HassError as e:
        logging.error(f"Home Assistant error: {e}")
        sys.exit(1)
    except Exception as e:
        logging.exception(f"Error during execution: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
