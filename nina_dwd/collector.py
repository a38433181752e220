"""Collect warnings from the NINA and DWD sources."""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Mapping, Optional, Union

from .models import DwdWarning, NinaWarning, WarningItem
from .fetchers.nina import fetch_nina
from .fetchers.dwd import fetch_dwd, find_dwd_entities

logger = logging.getLogger(__name__)


@dataclass
class CollectedWarnings:
    """Raw warnings per source, before reconciliation."""

    nina: List[NinaWarning] = field(default_factory=list)
    dwd_current: List[DwdWarning] = field(default_factory=list)
    dwd_advance: List[DwdWarning] = field(default_factory=list)

    def all_warnings(self) -> List[WarningItem]:
        return [*self.nina, *self.dwd_current, *self.dwd_advance]

    def __len__(self) -> int:
        return len(self.nina) + len(self.dwd_current) + len(self.dwd_advance)


def collect(
    states: Mapping[str, dict],
    entities: Union[Mapping[str, dict], Iterable[str], None] = None,
    nina_prefix: Optional[str] = None,
    dwd_device: Optional[str] = None,
) -> CollectedWarnings:
    """
    Gather raw warnings from a Home Assistant state snapshot.

    Args:
        states: Entity states keyed by entity id ({"state": ..., "attributes": {...}})
        entities: Entity registry or the entity ids of the DWD device
        nina_prefix: Prefix of the NINA binary sensors
        dwd_device: Device id of the DWD warning integration

    Returns:
        CollectedWarnings; missing entities or attributes simply yield fewer warnings
    """
    collected = CollectedWarnings()

    if nina_prefix:
        collected.nina = fetch_nina(states, nina_prefix)

    if dwd_device:
        dwd_entities = find_dwd_entities(entities or {}, dwd_device)
        if not dwd_entities.current and not dwd_entities.advance:
            logger.warning(f"No DWD warning level sensors found for device {dwd_device}")
        collected.dwd_current = fetch_dwd(states, dwd_entities.current)
        collected.dwd_advance = fetch_dwd(states, dwd_entities.advance)

    logger.debug(
        f"Collected {len(collected.nina)} NINA, {len(collected.dwd_current)} DWD current, "
        f"{len(collected.dwd_advance)} DWD advance warnings"
    )
    return collected
