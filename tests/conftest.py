"""Shared fixtures and builders for Check-in Score tests."""

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from checkin_score.config import ScoringRules, Settings
from checkin_score.models import CheckInEvent, RawMessage

NEW_YORK = ZoneInfo("America/New_York")


def local(year, month, day, hour, minute):
    """Aware datetime in the default reference timezone."""
    return datetime(year, month, day, hour, minute, tzinfo=NEW_YORK)


def event(author_id, instant, proper=True):
    return CheckInEvent(author_id=author_id, instant=instant, proper=proper)


def message(author_id, instant, body="pants off"):
    return RawMessage(author_id=author_id, body=body, instant=instant)


def slack_message(user_id, instant, text="pants off"):
    """A `conversations.history` entry as Slack returns it."""
    return {"type": "message", "user": user_id, "text": text, "ts": f"{instant.timestamp():.6f}"}


@pytest.fixture
def rules():
    return ScoringRules(start_year=2024)


@pytest.fixture
def settings(rules):
    return Settings(
        slack_bot_token="xoxb-test",
        channel_id="C0PANTS",
        api_key="secret",
        rules=rules,
        score_on_startup=False,
    )
