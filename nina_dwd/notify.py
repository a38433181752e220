"""Send warning notifications via ntfy."""

import hashlib
import requests
import logging
from typing import Dict, List, Optional, Sequence

from .models import WarningItem, end_of, source_label
from .normalize import content_key
from .scoring import ntfy_priority, score, severity_color
from .storage import KeyValueStore

logger = logging.getLogger(__name__)


def send_ntfy(
    title: str,
    message: str,
    base_url: str,
    topic: str,
    tags: Optional[List[str]] = None,
    priority: str = "default",
    headers: Optional[dict] = None,
) -> bool:
    """
    Send a notification via ntfy.

    Args:
        title: Notification title
        message: Notification message/body
        base_url: ntfy server base URL (e.g., "https://ntfy.sh")
        topic: ntfy topic name
        tags: Optional list of tags
        priority: Priority level (min, low, default, high, urgent)
        headers: Optional additional headers (e.g., for auth)

    Returns:
        True if successful, False otherwise
    """
    notify_url = f"{base_url.rstrip('/')}/{topic}"

    notify_headers = {}
    if headers:
        notify_headers.update(headers)

    if priority:
        notify_headers["X-Priority"] = priority

    if tags:
        notify_headers["X-Tags"] = ",".join(tags)

    body = f"{title}\n\n{message}"

    try:
        response = requests.post(notify_url, headers=notify_headers, data=body.encode("utf-8"), timeout=10)
        response.raise_for_status()
        logger.info(f"Sent notification: {title[:50]}...")
        return True
    except requests.exceptions.RequestException as e:
        logger.error(f"Failed to send notification: {e}")
        return False


def warning_id(warning: WarningItem) -> str:
    """Stable ID of a warning's content and validity start."""
    key = f"{content_key(warning)}|{warning.start or ''}"
    return hashlib.sha256(key.encode()).hexdigest()


def format_message(warning: WarningItem, color_overrides: Optional[Dict[str, str]] = None) -> str:
    level = score(warning)
    lines = []
    if warning.description:
        lines.append(warning.description)
    if warning.instruction:
        lines.append(f"Recommended actions: {warning.instruction}")
    period = " - ".join(t for t in (warning.start, end_of(warning)) if t)
    if period:
        lines.append(f"Valid: {period}")
    sender = source_label(warning)
    if sender:
        lines.append(f"Source: {sender}")
    lines.append(f"Level {level} ({severity_color(level, color_overrides)})")
    return "\n\n".join(lines)


def notify_warnings(
    warnings: Sequence[WarningItem],
    store: KeyValueStore,
    base_url: str,
    topic: str,
    headers: Optional[dict] = None,
    color_overrides: Optional[Dict[str, str]] = None,
    dry_run: bool = False,
) -> int:
    """
    Send each warning that has not been sent before.

    Returns:
        Number of warnings sent (or that would be sent in a dry run)
    """
    sent_count = 0
    for warning in warnings:
        seen_key = f"seen:{warning_id(warning)}"
        if store.get(seen_key) is not None:
            logger.debug(f"Skipping already sent warning: {warning.headline[:50]}...")
            continue

        if dry_run:
            logger.info(f"[DRY RUN] Would send: {warning.headline[:60]} (level {score(warning)})")
            sent_count += 1
            continue

        success = send_ntfy(
            title=warning.headline,
            message=format_message(warning, color_overrides),
            base_url=base_url,
            topic=topic,
            tags=["warning"],
            priority=ntfy_priority(score(warning)),
            headers=headers,
        )
        if success:
            store.set(seen_key, b"1")
            sent_count += 1

    return sent_count
