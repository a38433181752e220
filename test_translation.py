#!/usr/bin/env python3
"""Tests for the translation cache and translator."""

import json
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent))

from nina_dwd.models import DwdWarning, NinaWarning
from nina_dwd.normalize import content_key
from nina_dwd.storage import MemoryStore, SqliteStore
from nina_dwd.translate import TASK_NAME, TranslationError, Translator, parse_translation
from nina_dwd.translation_cache import CACHE_EXPIRY_SECONDS, CACHE_KEY, TranslationCache


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_cache_set_and_get():
    cache = TranslationCache(MemoryStore(), clock=FakeClock())
    cache.set("English", "key", "Frost", "Cold", "Stay inside")

    entry = cache.get("English", "key")

    assert entry is not None
    assert entry.headline == "Frost"
    assert entry.instruction == "Stay inside"
    assert cache.get("German", "key") is None


def test_cache_expires_after_24h():
    clock = FakeClock()
    cache = TranslationCache(MemoryStore(), clock=clock)
    cache.set("English", "key", "Frost", "Cold")

    clock.now += CACHE_EXPIRY_SECONDS - 1
    assert cache.get("English", "key") is not None

    clock.now += 2
    assert cache.get("English", "key") is None


def test_cache_persists_and_prunes_on_load():
    store = MemoryStore()
    clock = FakeClock()
    cache = TranslationCache(store, clock=clock)
    cache.set("English", "old", "Old", "Old")
    clock.now += CACHE_EXPIRY_SECONDS / 2
    cache.set("English", "new", "New", "New")

    clock.now += CACHE_EXPIRY_SECONDS / 2 + 1
    reloaded = TranslationCache(store, clock=clock)

    assert reloaded.get("English", "new") is not None
    stored = json.loads(store.get(CACHE_KEY))
    assert list(stored["English"]) == ["new"]


def test_cache_forced_expiry_by_timestamp():
    store = MemoryStore()
    clock = FakeClock()
    cache = TranslationCache(store, clock=clock)
    cache.set("English", "key", "Frost", "Cold")

    stored = json.loads(store.get(CACHE_KEY))
    stored["English"]["key"]["timestamp"] -= CACHE_EXPIRY_SECONDS + 1
    store.set(CACHE_KEY, json.dumps(stored).encode())

    reloaded = TranslationCache(store, clock=clock)

    assert reloaded.get("English", "key") is None
    assert json.loads(store.get(CACHE_KEY)) == {}


def test_cache_ignores_corrupt_data():
    store = MemoryStore()
    store.set(CACHE_KEY, b"{not json")

    cache = TranslationCache(store, clock=FakeClock())

    assert cache.get("English", "key") is None


def test_cache_clear():
    store = MemoryStore()
    cache = TranslationCache(store, clock=FakeClock())
    cache.set("English", "key", "Frost", "Cold")

    cache.clear()

    assert store.get(CACHE_KEY) is None
    assert cache.get("English", "key") is None


def test_sqlite_store_roundtrip(tmp_path):
    store = SqliteStore(str(tmp_path / "test.sqlite"))
    store.set("a", b"1")

    assert store.get("a") == b"1"
    assert store.get_count() == 1

    store.remove("a")
    assert store.get("a") is None


def test_parse_translation_fallback_order():
    expected = {"headline": "Frost", "description": "Cold", "instruction": ""}

    assert parse_translation(json.dumps(expected)) == expected
    assert parse_translation({"data": json.dumps(expected)}) == expected
    assert parse_translation({"data": expected}) == expected
    assert parse_translation(expected) == expected


def test_parse_translation_rejects_free_text():
    with pytest.raises(TranslationError):
        parse_translation("Frost: it is cold")
    with pytest.raises(TranslationError):
        parse_translation({"data": "nope"})
    with pytest.raises(TranslationError):
        parse_translation(["headline"])


def test_translator_uses_and_fills_cache():
    calls = []

    def call(instructions, task_name, entity_id):
        calls.append((task_name, entity_id))
        return {"data": {"headline": "Frost", "description": "Frost down to -5 °C", "instruction": "Stay inside"}}

    cache = TranslationCache(MemoryStore(), clock=FakeClock())
    translator = Translator(call, cache, "English", entity_id="ai_task.openai")
    warning = DwdWarning(headline="Frost", description="Frost bis -5 °C", instruction="Drinnen bleiben", level=1)

    first = translator.translate([warning])
    second = translator.translate([warning])

    assert calls == [(TASK_NAME, "ai_task.openai")]
    assert first == second
    assert first[0].description == "Frost down to -5 °C"
    assert first[0].level == 1
    assert cache.get("English", content_key(warning)).headline == "Frost"
    assert not translator.pending


def test_translator_failure_keeps_original():
    def call(instructions, task_name, entity_id):
        raise RuntimeError("service unavailable")

    cache = TranslationCache(MemoryStore(), clock=FakeClock())
    translator = Translator(call, cache, "English")
    warnings = [NinaWarning(headline="Hochwasser", severity="Severe"), NinaWarning(headline="Sturm")]

    assert translator.translate(warnings) == warnings
    assert cache.get("English", content_key(warnings[0])) is None


def test_translator_skips_pending_key():
    def call(instructions, task_name, entity_id):
        raise AssertionError("should not be called")

    warning = NinaWarning(headline="Sturm")
    translator = Translator(call, TranslationCache(MemoryStore(), clock=FakeClock()), "English")
    translator.pending.add(content_key(warning))

    assert translator.translate_one(warning) is warning


def test_cache_survives_store_read_failure():
    import sqlite3

    class LockedStore(MemoryStore):
        def get(self, key):
            raise sqlite3.OperationalError("database is locked")

    cache = TranslationCache(LockedStore(), clock=FakeClock())

    assert cache.get("English", "key") is None
    cache.set("English", "key", "Frost", "Cold")
    assert cache.get("English", "key").headline == "Frost"
