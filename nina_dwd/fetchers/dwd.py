"""DWD warning fetcher."""

import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Union

from ..models import DwdWarning

logger = logging.getLogger(__name__)

MAX_DWD_WARNINGS = 20

CURRENT_SUFFIXES = ("_aktuelle_warnstufe", "_current_warning_level")
ADVANCE_SUFFIXES = ("_vorwarnstufe", "_advance_warning_level")


@dataclass
class DwdEntities:
    """Warning level sensors belonging to one DWD device."""

    current: Optional[str] = None
    advance: Optional[str] = None


def find_dwd_entities(
    entities: Union[Mapping[str, dict], Iterable[str]], device_id: str
) -> DwdEntities:
    """
    Find the current and advance warning level sensors of a DWD device.

    `entities` is either the entity registry (entity id -> entry with a
    "device_id") or a plain list of entity ids already known to belong to
    the device.
    """
    found = DwdEntities()
    if not device_id:
        return found

    if isinstance(entities, Mapping):
        entity_ids = [
            entity_id
            for entity_id, entry in entities.items()
            if (entry or {}).get("device_id") == device_id
        ]
    else:
        entity_ids = list(entities)

    for entity_id in entity_ids:
        if entity_id.endswith(CURRENT_SUFFIXES):
            found.current = entity_id
        elif entity_id.endswith(ADVANCE_SUFFIXES):
            found.advance = entity_id

    return found


def _to_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (ValueError, TypeError):
        return None


def fetch_dwd(
    states: Mapping[str, dict], entity_id: Optional[str], max_warnings: int = MAX_DWD_WARNINGS
) -> List[DwdWarning]:
    """
    Read warnings from the attributes of a DWD warning level sensor.

    The sensor state is the highest warning level, not the number of
    warnings; warnings are stored as warning_<i>_* attributes and the list
    ends at the first index without a headline.
    """
    warnings = []
    if not entity_id:
        return warnings

    state_obj = states.get(entity_id)
    if not state_obj or str(state_obj.get("state")) == "0":
        return warnings

    attributes = state_obj.get("attributes") or {}
    for i in range(1, max_warnings + 1):
        headline = attributes.get(f"warning_{i}_headline")
        if not headline:
            break

        warnings.append(
            DwdWarning(
                headline=str(headline),
                description=attributes.get(f"warning_{i}_description") or "",
                entity_id=entity_id,
                level=_to_int(attributes.get(f"warning_{i}_level")),
                start=attributes.get(f"warning_{i}_start"),
                end=attributes.get(f"warning_{i}_end"),
                instruction=attributes.get(f"warning_{i}_instruction"),
                event_code=_to_int(attributes.get(f"warning_{i}_type")),
            )
        )

    logger.debug(f"Found {len(warnings)} DWD warnings on {entity_id}")
    return warnings
