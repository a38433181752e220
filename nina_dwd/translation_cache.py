"""Expiring cache of translated warning texts."""

import json
import logging
import time
from typing import Callable, Dict, Optional

from .models import TranslationEntry
from .storage import KeyValueStore

logger = logging.getLogger(__name__)

CACHE_KEY = "nina_dwd_translations"
CACHE_EXPIRY_SECONDS = 24 * 60 * 60


class TranslationCache:
    """
    Translations keyed by (target language, content key).

    The whole cache is persisted as one JSON document
    {language: {content_key: {headline, description, instruction, timestamp}}}
    under CACHE_KEY in the given store. Entries expire 24 hours after they
    were written; expired entries are pruned when the cache is loaded.
    """

    def __init__(self, store: KeyValueStore, clock: Callable[[], float] = time.time):
        self.store = store
        self.clock = clock
        self._cache: Dict[str, Dict[str, dict]] = {}
        self._load()

    def _load(self):
        try:
            stored = self.store.get(CACHE_KEY)
            if stored:
                data = json.loads(stored)
                if not isinstance(data, dict):
                    raise ValueError(f"expected a JSON object, got {type(data).__name__}")
                self._cache = data
                self._prune()
        except Exception as e:
            logger.warning(f"Failed to load translation cache: {e}")
            self._cache = {}

    def _save(self):
        try:
            self.store.set(CACHE_KEY, json.dumps(self._cache).encode("utf-8"))
        except Exception as e:
            logger.warning(f"Failed to save translation cache: {e}")

    def _expired(self, entry: dict) -> bool:
        return self.clock() - entry.get("timestamp", 0) > CACHE_EXPIRY_SECONDS

    def _prune(self):
        changed = False
        for lang in list(self._cache):
            lang_cache = self._cache[lang]
            for key in list(lang_cache):
                if self._expired(lang_cache[key]):
                    del lang_cache[key]
                    changed = True
            if not lang_cache:
                del self._cache[lang]
                changed = True

        if changed:
            logger.debug("Pruned expired translations")
            self._save()

    def get(self, target_language: str, key: str) -> Optional[TranslationEntry]:
        entry = self._cache.get(target_language, {}).get(key)
        if entry is None or self._expired(entry):
            return None
        return TranslationEntry(
            headline=entry.get("headline", ""),
            description=entry.get("description", ""),
            instruction=entry.get("instruction", ""),
            timestamp=entry.get("timestamp", 0),
        )

    def set(self, target_language: str, key: str, headline: str, description: str, instruction: str = ""):
        self._cache.setdefault(target_language, {})[key] = {
            "headline": headline,
            "description": description,
            "instruction": instruction,
            "timestamp": self.clock(),
        }
        self._save()

    def clear(self):
        self._cache = {}
        self.store.remove(CACHE_KEY)
