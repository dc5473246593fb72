"""Dataclasses representing Check-in Score domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class ReportMode(str, Enum):
    SUMMARY = "summary"
    FULL = "full"


@dataclass(frozen=True, slots=True)
class RawMessage:
    """A channel message as handed over by the event source.

    ``instant`` is either an aware ``datetime`` or a Slack style epoch
    timestamp (``"1709291220.000100"``); it is validated by the normalizer.
    """

    author_id: str
    body: str
    instant: datetime | str | float


@dataclass(frozen=True, slots=True)
class CheckInEvent:
    author_id: str
    instant: datetime
    proper: bool


@dataclass(slots=True)
class DayOutcome:
    """Classification of one author's submissions for a single local date."""

    morning: bool = False
    evening: bool = False
    alternate: bool = False
    morning_proper: bool = False
    evening_proper: bool = False
    alternate_proper: bool = False
    infractions: int = 0

    @property
    def missed(self) -> bool:
        return not (self.morning or self.evening or self.alternate)


@dataclass(slots=True)
class MonthlyRecord:
    morning_count: int = 0
    evening_count: int = 0
    proper_count: int = 0
    missed_days: int = 0
    infraction_count: int = 0
    alternate_count: int = 0

    def fold(self, outcome: DayOutcome) -> None:
        """Add one day's outcome to the running monthly counters."""

        self.infraction_count += outcome.infractions
        if outcome.missed:
            self.missed_days += 1
            return
        self.morning_count += int(outcome.morning)
        self.evening_count += int(outcome.evening)
        self.alternate_count += int(outcome.alternate)
        self.proper_count += sum(
            (outcome.morning_proper, outcome.evening_proper, outcome.alternate_proper)
        )


@dataclass(slots=True)
class MonthScore:
    year: int
    month: int
    records: dict[str, MonthlyRecord] = field(default_factory=dict)


__all__ = [
    "ReportMode",
    "RawMessage",
    "CheckInEvent",
    "DayOutcome",
    "MonthlyRecord",
    "MonthScore",
]
