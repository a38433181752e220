"""Translate warnings through an external AI task, with caching."""

import json
import logging
from dataclasses import replace
from typing import Any, Callable, List, Mapping, Optional, Sequence, Set

from .models import WarningItem
from .normalize import content_key
from .translation_cache import TranslationCache

logger = logging.getLogger(__name__)

TASK_NAME = "nina_dwd_translation"

# (instructions, task_name, entity_id) -> raw response
TranslateCall = Callable[[str, str, Optional[str]], Any]


class TranslationError(Exception):
    """Raised when a translation response cannot be used."""


def build_instructions(warning: WarningItem, language: str) -> str:
    """Prompt asking for the warning texts in the target language as JSON."""
    payload = {
        "headline": warning.headline,
        "description": warning.description or "",
        "instruction": warning.instruction or "",
    }
    return (
        f"Translate the following official weather/civil protection warning into {language}. "
        "Keep the meaning exact, keep HTML line breaks, and do not add anything. "
        'Reply only with a JSON object with the keys "headline", "description" and "instruction".\n\n'
        f"{json.dumps(payload, ensure_ascii=False)}"
    )


def parse_translation(response: Any) -> Mapping[str, Any]:
    """
    Extract the translated fields from a task response.

    Tries, in order: a JSON string, a mapping whose "data" is a JSON
    string, a mapping whose "data" is a mapping, and a plain mapping.
    """
    if isinstance(response, str):
        try:
            response = json.loads(response)
        except ValueError as e:
            raise TranslationError(f"Response is not JSON: {e}")

    if isinstance(response, Mapping) and "data" in response:
        data = response["data"]
        if isinstance(data, str):
            try:
                data = json.loads(data)
            except ValueError as e:
                raise TranslationError(f"Response data is not JSON: {e}")
        response = data

    if not isinstance(response, Mapping):
        raise TranslationError(f"Unexpected response type: {type(response).__name__}")
    if not response.get("headline"):
        raise TranslationError("Response has no headline")
    return response


class Translator:
    """
    Replaces warning texts with translations.

    Lookups go through the cache first. The translator owns the set of keys
    with a call in flight; a warning whose key is already pending keeps its
    original text instead of triggering a second call.
    """

    def __init__(
        self,
        call: TranslateCall,
        cache: TranslationCache,
        language: str,
        entity_id: Optional[str] = None,
    ):
        self.call = call
        self.cache = cache
        self.language = language
        self.entity_id = entity_id
        self.pending: Set[str] = set()

    def translate_one(self, warning: WarningItem) -> WarningItem:
        key = content_key(warning)

        cached = self.cache.get(self.language, key)
        if cached is not None:
            return replace(
                warning,
                headline=cached.headline,
                description=cached.description,
                instruction=cached.instruction or warning.instruction,
            )

        if key in self.pending:
            logger.debug(f"Translation already in progress: {warning.headline[:50]}")
            return warning

        self.pending.add(key)
        try:
            response = self.call(build_instructions(warning, self.language), TASK_NAME, self.entity_id)
            fields = parse_translation(response)
        except Exception as e:
            logger.error(f"Translation failed for '{warning.headline[:50]}': {e}")
            return warning
        finally:
            self.pending.discard(key)

        headline = str(fields.get("headline") or warning.headline)
        description = str(fields.get("description") or warning.description or "")
        instruction = str(fields.get("instruction") or warning.instruction or "")
        self.cache.set(self.language, key, headline, description, instruction)
        logger.info(f"Translated warning: {headline[:50]}")

        return replace(
            warning,
            headline=headline,
            description=description,
            instruction=instruction or warning.instruction,
        )

    def translate(self, warnings: Sequence[WarningItem]) -> List[WarningItem]:
        """Translate each warning; failures keep the original text."""
        return [self.translate_one(w) for w in warnings]
