"""Configuration helpers for Check-in Score."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv


@dataclass(frozen=True, slots=True)
class ScoringRules:
    """Constants that drive day classification and report rendering."""

    timezone_name: str = "America/New_York"
    required_minute: int = 7
    morning_hour: int = 6
    evening_hour: int = 18
    summary_char_budget: int = 2000
    start_year: int = 2020

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone_name)


@dataclass(slots=True)
class Settings:
    """Runtime configuration values loaded from environment variables."""

    slack_bot_token: str
    channel_id: str
    api_key: str
    rules: ScoringRules = field(default_factory=ScoringRules)
    name_lookup_concurrency: int = 8
    strict_identity: bool = False
    score_on_startup: bool = True


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}") from exc


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def load_rules() -> ScoringRules:
    """Read the scoring constants, validating ranges and the timezone name."""

    rules = ScoringRules(
        timezone_name=os.getenv("SCORE_TIMEZONE", "America/New_York"),
        required_minute=_env_int("SCORE_REQUIRED_MINUTE", 7),
        morning_hour=_env_int("SCORE_MORNING_HOUR", 6),
        evening_hour=_env_int("SCORE_EVENING_HOUR", 18),
        summary_char_budget=_env_int("SCORE_SUMMARY_CHAR_BUDGET", 2000),
        start_year=_env_int("SCORE_START_YEAR", 2020),
    )

    try:
        rules.tz
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise RuntimeError(f"SCORE_TIMEZONE is not a known timezone: {rules.timezone_name}") from exc
    if not 0 <= rules.required_minute <= 59:
        raise RuntimeError("SCORE_REQUIRED_MINUTE must be between 0 and 59")
    for name, hour in (("SCORE_MORNING_HOUR", rules.morning_hour), ("SCORE_EVENING_HOUR", rules.evening_hour)):
        if not 0 <= hour <= 23:
            raise RuntimeError(f"{name} must be between 0 and 23")
    if rules.summary_char_budget <= 0:
        raise RuntimeError("SCORE_SUMMARY_CHAR_BUDGET must be positive")
    return rules


def load_settings(env_file: str | None = None) -> Settings:
    """Load settings from the environment, optionally from a specific file."""

    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()

    slack_token = os.getenv("SLACK_BOT_TOKEN")
    channel_id = os.getenv("CHANNEL_ID")
    api_key = os.getenv("API_KEY")

    if not slack_token:
        raise RuntimeError("SLACK_BOT_TOKEN must be configured")
    if not channel_id:
        raise RuntimeError("CHANNEL_ID must be configured")
    if not api_key:
        raise RuntimeError("API_KEY must be configured")

    concurrency = _env_int("NAME_LOOKUP_CONCURRENCY", 8)
    if concurrency < 1:
        raise RuntimeError("NAME_LOOKUP_CONCURRENCY must be at least 1")

    return Settings(
        slack_bot_token=slack_token,
        channel_id=channel_id,
        api_key=api_key,
        rules=load_rules(),
        name_lookup_concurrency=concurrency,
        strict_identity=_env_bool("STRICT_IDENTITY", False),
        score_on_startup=_env_bool("SCORE_ON_STARTUP", True),
    )


__all__ = ["ScoringRules", "Settings", "load_rules", "load_settings"]
