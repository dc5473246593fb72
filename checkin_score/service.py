"""Core orchestration logic for Check-in Score."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from contextlib import aclosing
from datetime import datetime
from typing import Dict, List, Mapping, Optional, Set, Tuple

from .config import ScoringRules, Settings
from .models import RawMessage, ReportMode
from .report import render_report
from .scoring import aggregate_months
from .slack_client import IdentityResolutionError, SlackClient
from .timeline import AuthorTimeline, build_timeline, normalize_messages

logger = logging.getLogger(__name__)


def build_check_in_timeline(
    events: Iterable[RawMessage],
    rules: ScoringRules,
) -> Tuple[AuthorTimeline, Set[str]]:
    """Normalize messages and group them into per-author timelines."""

    return build_timeline(normalize_messages(events, rules.tz))


def report_from_timeline(
    timeline: AuthorTimeline,
    mode: ReportMode = ReportMode.SUMMARY,
    names: Optional[Mapping[str, str]] = None,
    rules: Optional[ScoringRules] = None,
    now: Optional[datetime] = None,
) -> str:
    rules = rules or ScoringRules()
    months = aggregate_months(timeline, rules, now)
    logger.info(
        "Scored %s check-ins from %s authors over %s months",
        sum(len(events) for events in timeline.values()),
        len(timeline),
        len(months),
    )
    return render_report(months, names or {}, ReportMode(mode), rules.summary_char_budget)


def compute_report(
    events: Iterable[RawMessage],
    mode: ReportMode = ReportMode.SUMMARY,
    names: Optional[Mapping[str, str]] = None,
    rules: Optional[ScoringRules] = None,
    now: Optional[datetime] = None,
) -> str:
    """Score a complete set of channel messages and render the monthly table.

    The result only depends on the messages, the resolved ``names``, the
    scoring ``rules`` and ``now``.
    """

    rules = rules or ScoringRules()
    timeline, _ = build_check_in_timeline(events, rules)
    return report_from_timeline(timeline, mode, names, rules, now)


class ScoreService:
    """High-level service that pulls the channel history and produces score reports."""

    def __init__(self, settings: Settings, client: SlackClient) -> None:
        self.settings = settings
        self.client = client

    async def fetch_messages(self) -> List[RawMessage]:
        """Read the whole channel history into memory."""

        messages: List[RawMessage] = []
        async with aclosing(self.client.fetch_channel_history(self.settings.channel_id)) as history:
            async for message in history:
                user_id = message.get("user")
                if not user_id:
                    continue
                messages.append(
                    RawMessage(
                        author_id=user_id,
                        body=message.get("text", ""),
                        instant=message.get("ts", ""),
                    )
                )
        logger.info("Fetched %s messages from %s", len(messages), self.settings.channel_id)
        return messages

    async def resolve_names(self, author_ids: Iterable[str]) -> Dict[str, str]:
        """Look up display names concurrently.

        An author whose lookup fails keeps their id as the name, unless
        ``strict_identity`` is set, in which case the first failure is raised.
        """

        author_ids = sorted(set(author_ids))
        semaphore = asyncio.Semaphore(self.settings.name_lookup_concurrency)

        async def lookup(author_id: str) -> str:
            async with semaphore:
                return await self.client.resolve_display_name(author_id)

        results = await asyncio.gather(
            *(lookup(author_id) for author_id in author_ids),
            return_exceptions=True,
        )

        names: Dict[str, str] = {}
        for author_id, result in zip(author_ids, results):
            if isinstance(result, IdentityResolutionError):
                if self.settings.strict_identity:
                    raise result
                logger.warning("%s; listing by id", result)
                names[author_id] = author_id
            elif isinstance(result, BaseException):
                raise result
            else:
                names[author_id] = result
        return names

    async def score(self, mode: ReportMode = ReportMode.SUMMARY, now: Optional[datetime] = None) -> str:
        rules = self.settings.rules
        timeline, author_ids = build_check_in_timeline(await self.fetch_messages(), rules)
        names = await self.resolve_names(author_ids)
        return report_from_timeline(timeline, mode, names, rules, now)

    async def publish(self, mode: ReportMode = ReportMode.SUMMARY) -> None:
        """Score the channel and post the table back into it."""

        report = await self.score(mode)
        await self.client.post_message(self.settings.channel_id, f"```\n{report}\n```")


__all__ = ["ScoreService", "build_check_in_timeline", "compute_report", "report_from_timeline"]
