"""Render monthly scores as a plain-text table."""

from __future__ import annotations

import calendar
from typing import List, Mapping, Optional, Sequence

from tabulate import tabulate

from .models import MonthScore, ReportMode

HEADERS = [
    "Month",
    "Morning",
    "Evening",
    "Proper",
    "Missed",
    "Infractions",
    "Alternate Time Zones",
]

Row = List[Optional[object]]


def month_label(year: int, month: int) -> str:
    return f"{calendar.month_name[month]}, {year}"


def build_rows(months: Sequence[MonthScore], names: Mapping[str, str]) -> List[Row]:
    """One header row per month, followed by a row per author scored that month.

    Authors without a resolved name are listed by their id.
    """

    rows: List[Row] = []
    for score in months:
        rows.append([month_label(score.year, score.month)] + [None] * (len(HEADERS) - 1))
        for author_id, record in score.records.items():
            rows.append(
                [
                    names.get(author_id, author_id),
                    record.morning_count,
                    record.evening_count,
                    record.proper_count,
                    record.missed_days,
                    record.infraction_count,
                    record.alternate_count,
                ]
            )
    return rows


def render_table(rows: Sequence[Row]) -> str:
    return tabulate(rows, headers=HEADERS, tablefmt="simple", missingval="")


def render_report(
    months: Sequence[MonthScore],
    names: Mapping[str, str],
    mode: ReportMode = ReportMode.SUMMARY,
    char_budget: int = 2000,
) -> str:
    """Render the score table.

    In summary mode the oldest rows are dropped until the table fits in
    ``char_budget`` characters. Dropping a leading row never lengthens the
    table, so the shortest cut that fits is found by bisection.
    """

    rows = build_rows(months, names)
    text = render_table(rows)
    if ReportMode(mode) is ReportMode.FULL or len(text) <= char_budget:
        return text

    # every cut below low is known to overflow the budget
    low, high = 1, len(rows)
    while low < high:
        middle = (low + high) // 2
        if len(render_table(rows[middle:])) <= char_budget:
            high = middle
        else:
            low = middle + 1
    return render_table(rows[low:])


__all__ = ["HEADERS", "month_label", "build_rows", "render_table", "render_report"]
