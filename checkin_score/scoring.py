"""Day classification and monthly aggregation of check-in events."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date, datetime, timezone
from typing import Dict, List, Optional, Tuple
from zoneinfo import ZoneInfo

from .config import ScoringRules
from .models import CheckInEvent, DayOutcome, MonthlyRecord, MonthScore
from .timeline import AuthorTimeline

logger = logging.getLogger(__name__)


class TimelineOrderError(RuntimeError):
    """Raised when an author's queue holds an event dated before the day being scored."""

    def __init__(self, author_id: str, event_day: date, target_day: date) -> None:
        super().__init__(
            f"Unprocessed check-in from {author_id} on {event_day.isoformat()} "
            f"precedes target day {target_day.isoformat()}"
        )
        self.author_id = author_id
        self.event_day = event_day
        self.target_day = target_day


def local_date(event: CheckInEvent, tz: ZoneInfo) -> date:
    return event.instant.astimezone(tz).date()


def take_day(
    queue: Sequence[CheckInEvent],
    position: int,
    day: date,
    tz: ZoneInfo,
) -> Tuple[Sequence[CheckInEvent], int]:
    """Return the events of ``day`` starting at ``position`` and the next position.

    ``queue`` must be sorted by instant and days must be requested in
    ascending order, so the run of events dated ``day`` is always a prefix of
    what remains.
    """

    if position < len(queue):
        head_day = local_date(queue[position], tz)
        if head_day < day:
            raise TimelineOrderError(queue[position].author_id, head_day, day)

    end = position
    while end < len(queue) and local_date(queue[end], tz) == day:
        end += 1
    return queue[position:end], end


def classify_day(events: Sequence[CheckInEvent], rules: ScoringRules) -> DayOutcome:
    """Classify one author's submissions for a single local date.

    A submission off the required minute is an infraction and counts toward
    no window, but it does not stop a later on-time submission that day from
    counting.
    """

    tz = rules.tz
    outcome = DayOutcome()
    for event in events:
        local = event.instant.astimezone(tz)
        if local.minute != rules.required_minute:
            outcome.infractions += 1
            continue

        if local.hour == rules.morning_hour:
            outcome.morning = True
            outcome.morning_proper = outcome.morning_proper or event.proper
        elif local.hour == rules.evening_hour:
            outcome.evening = True
            outcome.evening_proper = outcome.evening_proper or event.proper
        else:
            outcome.alternate = True
            outcome.alternate_proper = outcome.alternate_proper or event.proper
    return outcome


def _first_scored_positions(timeline: AuthorTimeline, rules: ScoringRules) -> Dict[str, int]:
    tz = rules.tz
    epoch = date(rules.start_year, 1, 1)
    positions: Dict[str, int] = {}
    for author_id, queue in timeline.items():
        if not queue:
            continue
        position = 0
        while position < len(queue) and local_date(queue[position], tz) < epoch:
            position += 1
        if position:
            logger.warning(
                "Ignoring %s check-ins from %s dated before %s", position, author_id, epoch.isoformat()
            )
        positions[author_id] = position
    return positions


def aggregate_months(
    timeline: AuthorTimeline,
    rules: ScoringRules,
    now: Optional[datetime] = None,
) -> List[MonthScore]:
    """Score every author day by day from the start year through today.

    Months are returned in chronological order. Nothing is returned until the
    first month in which any check-in was seen, and months starting after
    today are left out.
    """

    tz = rules.tz
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    today = now.astimezone(tz).date()

    positions = _first_scored_positions(timeline, rules)
    seen_check_in = False
    months: List[MonthScore] = []

    for year in range(rules.start_year, today.year + 1):
        for month in range(1, 13):
            score = MonthScore(year=year, month=month)
            for day_number in range(1, 32):
                try:
                    day = date(year, month, day_number)
                except ValueError:
                    continue
                if day > today:
                    break

                for author_id in positions:
                    events, positions[author_id] = take_day(
                        timeline[author_id], positions[author_id], day, tz
                    )
                    seen_check_in = seen_check_in or bool(events)
                    record = score.records.setdefault(author_id, MonthlyRecord())
                    record.fold(classify_day(events, rules))

            if not seen_check_in or date(year, month, 1) > today:
                continue
            months.append(score)

    return months


__all__ = [
    "TimelineOrderError",
    "local_date",
    "take_day",
    "classify_day",
    "aggregate_months",
]
