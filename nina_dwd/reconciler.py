"""Merge, deduplicate, rank and filter warnings from both sources."""

import logging
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Sequence

from .collector import CollectedWarnings
from .models import DWD_SENDER, DwdWarning, NinaWarning, WarningItem, end_of, is_dwd, parse_timestamp
from .normalize import content_matches, normalize_key
from .scoring import score

logger = logging.getLogger(__name__)


@dataclass
class ReconcileOptions:
    """Display options applied by reconcile()."""

    hide_below_level: Optional[int] = None
    max_count: Optional[int] = None
    ignore_instructions: bool = False
    # Drop NINA warnings relayed from DWD when DWD warnings are shown directly
    drop_nina_from_dwd: bool = False


def _earlier(a: Optional[str], b: Optional[str]) -> Optional[str]:
    parsed_a, parsed_b = parse_timestamp(a), parse_timestamp(b)
    if parsed_b is None:
        return a or b
    if parsed_a is None:
        return b
    return b if parsed_b < parsed_a else a


def _later(a: Optional[str], b: Optional[str]) -> Optional[str]:
    parsed_a, parsed_b = parse_timestamp(a), parse_timestamp(b)
    if parsed_b is None:
        return a or b
    if parsed_a is None:
        return b
    return b if parsed_b > parsed_a else a


def _with_range(warning: WarningItem, start: Optional[str], end: Optional[str]) -> WarningItem:
    if isinstance(warning, DwdWarning):
        return replace(warning, start=start, end=end)
    return replace(warning, start=start, expires=end)


def merge_pair(representative: WarningItem, member: WarningItem) -> WarningItem:
    """
    Merge a content-identical member into a representative.

    The result spans the earliest start and the latest end of both. A DWD
    member replaces the identity of a NINA representative; otherwise the
    representative keeps its identity.
    """
    start = _earlier(representative.start, member.start)
    end = _later(end_of(representative), end_of(member))

    if isinstance(representative, NinaWarning) and isinstance(member, DwdWarning):
        base = member
    else:
        base = representative
    return _with_range(base, start, end)


def group_by_headline(warnings: Sequence[WarningItem]) -> Dict[str, List[WarningItem]]:
    """Group warnings by normalized headline, keeping input order."""
    groups: Dict[str, List[WarningItem]] = {}
    for warning in warnings:
        groups.setdefault(normalize_key(warning.headline), []).append(warning)
    return groups


def merge_group(members: Sequence[WarningItem], ignore_instructions: bool = False) -> List[WarningItem]:
    """Collapse the content-identical members of one headline group."""
    representatives: List[WarningItem] = []
    for member in members:
        for i, representative in enumerate(representatives):
            if content_matches(representative, member, ignore_instructions):
                representatives[i] = merge_pair(representative, member)
                break
        else:
            representatives.append(replace(member))
    return representatives


def drop_nina_from_dwd(warnings: Sequence[WarningItem], others: Sequence[WarningItem] = ()) -> List[WarningItem]:
    """Remove NINA warnings sent by DWD if DWD warnings are present."""
    if not any(is_dwd(w) for w in warnings) and not others:
        return list(warnings)
    return [w for w in warnings if not (isinstance(w, NinaWarning) and w.sender == DWD_SENDER)]


def reconcile(
    warnings: Sequence[WarningItem],
    options: Optional[ReconcileOptions] = None,
    others: Sequence[WarningItem] = (),
) -> List[WarningItem]:
    """
    Turn raw warnings into the ordered display list.

    Args:
        warnings: Raw warnings from the collector, in source order
        options: Filtering and merging options
        others: Warnings shown in another section; only used for the
            DWD sender check

    Returns:
        Merged warnings sorted by descending severity, filtered and truncated
    """
    options = options or ReconcileOptions()

    if options.drop_nina_from_dwd:
        warnings = drop_nina_from_dwd(warnings, others)

    merged: List[WarningItem] = []
    for members in group_by_headline(warnings).values():
        merged.extend(merge_group(members, options.ignore_instructions))

    # sorted() is stable, so equal scores keep their grouping order
    result = sorted(merged, key=score, reverse=True)

    if options.hide_below_level is not None:
        result = [w for w in result if score(w) >= options.hide_below_level]

    if options.max_count is not None:
        result = result[: options.max_count]

    logger.debug(f"Reconciled {len(warnings)} warnings into {len(result)}")
    return result


def build_sections(
    collected: CollectedWarnings,
    options: Optional[ReconcileOptions] = None,
    separate_advance: bool = False,
) -> Dict[str, List[WarningItem]]:
    """
    Reconcile collected warnings into display sections.

    Returns {"warnings": [...]} for the combined view, or
    {"current": [...], "advance": [...]} when advance warnings are shown separately.
    """
    if not separate_advance:
        return {"warnings": reconcile(collected.all_warnings(), options)}

    current_raw = [*collected.nina, *collected.dwd_current]
    advance_raw = list(collected.dwd_advance)
    return {
        "current": reconcile(current_raw, options, others=advance_raw),
        "advance": reconcile(advance_raw, options),
    }
