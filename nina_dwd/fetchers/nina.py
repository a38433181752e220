"""NINA warning fetcher."""

import logging
from typing import List, Mapping

from ..models import NinaWarning

logger = logging.getLogger(__name__)

MAX_NINA_ENTITIES = 10


def fetch_nina(states: Mapping[str, dict], prefix: str, max_entities: int = MAX_NINA_ENTITIES) -> List[NinaWarning]:
    """
    Read active warnings from the NINA binary sensors.

    The integration creates a fixed set of sensors named <prefix>_1 .. <prefix>_N;
    a sensor that is "on" carries one warning in its attributes.

    Args:
        states: Home Assistant states keyed by entity id
        prefix: Entity id prefix, e.g. "binary_sensor.nina_warnung"
        max_entities: Number of sensors to check

    Returns:
        List of NinaWarning objects
    """
    warnings = []
    if not prefix:
        return warnings

    for i in range(1, max_entities + 1):
        entity_id = f"{prefix}_{i}"
        state_obj = states.get(entity_id)

        # YAML snapshots load an unquoted `on` as True
        if not state_obj or state_obj.get("state") not in ("on", True):
            continue

        attributes = state_obj.get("attributes") or {}
        headline = attributes.get("headline")
        if not headline:
            logger.debug(f"Skipping {entity_id}: no headline")
            continue

        warnings.append(
            NinaWarning(
                headline=str(headline),
                description=attributes.get("description") or "",
                sender=attributes.get("sender") or "",
                entity_id=entity_id,
                severity=attributes.get("severity") or "Unknown",
                start=attributes.get("start"),
                expires=attributes.get("expires"),
                instruction=attributes.get("instruction") or attributes.get("recommended_actions"),
            )
        )

    logger.debug(f"Found {len(warnings)} active NINA warnings for {prefix}")
    return warnings
