#!/usr/bin/env python3
"""Tests for merging, ranking and filtering warnings."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from nina_dwd.collector import CollectedWarnings
from nina_dwd.models import DwdWarning, NinaWarning
from nina_dwd.reconciler import ReconcileOptions, build_sections, merge_pair, reconcile
from nina_dwd.scoring import score

T0 = "2025-08-03T20:00:00+00:00"
T1 = "2025-08-03T22:00:00+00:00"
T2 = "2025-08-04T06:00:00+00:00"
T3 = "2025-08-04T09:00:00+00:00"


def test_nina_and_dwd_duplicate_merge_into_dwd_identity():
    """A NINA warning and an identical DWD warning become one DWD warning."""
    nina = NinaWarning(
        headline="STURMBÖEN",
        sender="Civil Protection",
        entity_id="binary_sensor.nina_warnung_1",
        start=T0,
    )
    dwd = DwdWarning(
        headline="STURMBÖEN",
        entity_id="sensor.berlin_current_warning_level",
        level=2,
        start=T0,
    )

    result = reconcile([nina, dwd])

    assert len(result) == 1
    assert isinstance(result[0], DwdWarning)
    assert result[0].entity_id == "sensor.berlin_current_warning_level"
    assert score(result[0]) == 2


def test_merge_widens_time_range():
    """Identical content merges into one entry spanning both periods."""
    first = NinaWarning(headline="Frost", description="Frost bis -5 °C.", severity="Minor", start=T1, expires=T2)
    second = NinaWarning(headline="Frost", description="Frost bis -5 °C.", severity="Minor", start=T0, expires=T3)

    result = reconcile([first, second])

    assert len(result) == 1
    assert result[0].start == T0
    assert result[0].expires == T3


def test_dwd_identity_keeps_widened_range():
    """The DWD identity wins but the NINA side can still contribute endpoints."""
    nina = NinaWarning(headline="Gewitter", description="Blitz.", severity="Severe", start=T0, expires=T3)
    dwd = DwdWarning(
        headline="Gewitter",
        description="Blitz",
        entity_id="sensor.x_current_warning_level",
        level=2,
        start=T1,
        end=T2,
        event_code=31,
    )

    merged = merge_pair(nina, dwd)

    assert isinstance(merged, DwdWarning)
    assert merged.event_code == 31
    assert merged.entity_id == "sensor.x_current_warning_level"
    assert merged.start == T0
    assert merged.end == T3


def test_first_representative_identity_kept_for_same_variant():
    a = DwdWarning(headline="Nebel", entity_id="sensor.a", level=1, start=T1, end=T2)
    b = DwdWarning(headline="Nebel", entity_id="sensor.b", level=1, start=T0, end=T2)

    result = reconcile([a, b])

    assert len(result) == 1
    assert result[0].entity_id == "sensor.a"
    assert result[0].start == T0


def test_different_description_stays_separate():
    a = DwdWarning(headline="Regen", description="Starkregen 25 l/m²", level=2)
    b = DwdWarning(headline="Regen", description="Dauerregen 60 l/m²", level=2)

    assert len(reconcile([a, b])) == 2


def test_different_instruction_respects_ignore_option():
    a = DwdWarning(headline="Hitze", description="Starke Hitze", instruction="Viel trinken", level=1)
    b = DwdWarning(headline="Hitze", description="Starke Hitze", instruction="Sonne meiden", level=1)

    assert len(reconcile([a, b])) == 2
    assert len(reconcile([a, b], ReconcileOptions(ignore_instructions=True))) == 1


def test_bullet_and_semicolon_instructions_merge():
    a = DwdWarning(headline="Sturm", description="Orkanböen.", instruction="Action 1; Action 2; Action 3", level=3)
    b = NinaWarning(
        headline="Amtliche Unwetterwarnung vor STURM",
        description="Orkanböen",
        instruction="Action 1\n · Action 2\n · Action 3",
        severity="Severe",
    )

    result = reconcile([b, a])

    assert len(result) == 1
    assert isinstance(result[0], DwdWarning)


def test_sorted_by_severity_stable():
    minor = NinaWarning(headline="Minor Warning", severity="Minor")
    severe = DwdWarning(headline="Severe Warning", level=3)
    extreme = NinaWarning(headline="Extreme Warning", severity="Extreme")
    other_minor = DwdWarning(headline="Other Minor", level=1)

    result = reconcile([minor, severe, extreme, other_minor])

    assert [w.headline for w in result] == [
        "Extreme Warning",
        "Severe Warning",
        "Minor Warning",
        "Other Minor",
    ]


def test_hide_below_level():
    warnings = [
        DwdWarning(headline="One", level=1),
        DwdWarning(headline="Three", level=3),
        DwdWarning(headline="Two", level=2),
    ]

    result = reconcile(warnings, ReconcileOptions(hide_below_level=2))

    assert [score(w) for w in result] == [3, 2]


def test_max_count_keeps_highest_ranked():
    warnings = [DwdWarning(headline=f"W{i}", level=i % 5) for i in range(8)]

    result = reconcile(warnings, ReconcileOptions(max_count=3))

    assert len(result) == 3
    assert [score(w) for w in result] == [4, 3, 2]


def test_malformed_timestamps_do_not_crash():
    a = NinaWarning(headline="X", start="unknown", expires="never")
    b = NinaWarning(headline="X", start=T1, expires=None)

    result = reconcile([a, b])

    assert len(result) == 1
    assert result[0].start == T1
    assert result[0].expires == "never"


def test_inputs_not_mutated_and_output_repeatable():
    nina = NinaWarning(headline="Glätte", severity="Moderate", start=T1, expires=T2)
    dwd = DwdWarning(headline="Glätte", level=2, start=T0, end=T1)
    warnings = [nina, dwd]

    first = reconcile(warnings)
    second = reconcile(warnings)

    assert first == second
    assert warnings == [nina, dwd]
    assert nina.start == T1
    assert dwd.end == T1


def test_nina_from_dwd_dropped_when_dwd_present():
    relayed = NinaWarning(headline="NINA-DWD Test Warning", sender="Deutscher Wetterdienst")
    direct = DwdWarning(headline="DWD Test Warning", level=1)
    options = ReconcileOptions(drop_nina_from_dwd=True)

    result = reconcile([relayed, direct], options)
    assert [w.headline for w in result] == ["DWD Test Warning"]

    # Without any DWD warning the relayed one is kept
    assert len(reconcile([relayed], options)) == 1
    assert len(reconcile([relayed], options, others=[direct])) == 0


def test_build_sections_separate_advance():
    collected = CollectedWarnings(
        nina=[NinaWarning(headline="Hochwasser", severity="Severe")],
        dwd_current=[DwdWarning(headline="Frost", level=1)],
        dwd_advance=[DwdWarning(headline="Orkan", level=4)],
    )

    combined = build_sections(collected)
    assert [w.headline for w in combined["warnings"]] == ["Orkan", "Hochwasser", "Frost"]

    sections = build_sections(collected, separate_advance=True)
    assert [w.headline for w in sections["current"]] == ["Hochwasser", "Frost"]
    assert [w.headline for w in sections["advance"]] == ["Orkan"]
