"""Turn raw channel messages into per-author, time ordered check-in queues."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Dict, List, Tuple
from zoneinfo import ZoneInfo

from .models import CheckInEvent, RawMessage
from .quality import is_proper

logger = logging.getLogger(__name__)

AuthorTimeline = Dict[str, List[CheckInEvent]]


class MalformedTimestampError(ValueError):
    """Raised when a message instant cannot be placed in the reference timezone."""

    def __init__(self, author_id: str, value: object) -> None:
        super().__init__(f"Malformed timestamp {value!r} on message from {author_id}")
        self.author_id = author_id
        self.value = value


def parse_instant(message: RawMessage, tz: ZoneInfo) -> datetime:
    """Return the message instant as an aware UTC datetime."""

    value = message.instant
    if isinstance(value, datetime) and value.utcoffset() is None:
        raise MalformedTimestampError(message.author_id, value)
    try:
        if isinstance(value, datetime):
            instant = value.astimezone(timezone.utc)
        else:
            instant = datetime.fromtimestamp(float(value), tz=timezone.utc)
        # the reference conversion must succeed for classification later on
        instant.astimezone(tz)
    except (TypeError, ValueError, OverflowError, OSError) as exc:
        raise MalformedTimestampError(message.author_id, value) from exc
    return instant


def normalize_messages(messages: Iterable[RawMessage], tz: ZoneInfo) -> List[CheckInEvent]:
    """Build one check-in event per message.

    Messages whose instant is malformed are logged and left out.
    """

    events: List[CheckInEvent] = []
    for message in messages:
        try:
            instant = parse_instant(message, tz)
        except MalformedTimestampError as exc:
            logger.warning("Skipping check-in: %s", exc)
            continue
        events.append(
            CheckInEvent(
                author_id=message.author_id,
                instant=instant,
                proper=is_proper(message.body),
            )
        )
    return events


def build_timeline(events: Iterable[CheckInEvent]) -> Tuple[AuthorTimeline, set[str]]:
    """Group events per author and sort each group by instant.

    The sort is stable, so events sharing an instant keep their input order.
    """

    timeline: AuthorTimeline = {}
    for event in events:
        timeline.setdefault(event.author_id, []).append(event)
    for author_events in timeline.values():
        author_events.sort(key=lambda event: event.instant)
    return timeline, set(timeline)


__all__ = [
    "AuthorTimeline",
    "MalformedTimestampError",
    "parse_instant",
    "normalize_messages",
    "build_timeline",
]
