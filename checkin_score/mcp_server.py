"""MCP server exposing Check-in Score reports as tools."""

from __future__ import annotations

import asyncio

from mcp.server.fastmcp import FastMCP

from .config import load_settings
from .models import ReportMode
from .service import ScoreService
from .slack_client import SlackClient

mcp = FastMCP("checkin-score")

_settings = load_settings()
_client = SlackClient(_settings.slack_bot_token)
_service = ScoreService(_settings, _client)
_score_lock = asyncio.Lock()


def _ensure_mode(mode: str) -> ReportMode:
    try:
        return ReportMode(mode.lower())
    except ValueError as exc:
        raise ValueError("mode must be one of: summary, full") from exc


@mcp.tool()
async def get_score_report(mode: str = "summary") -> dict:
    """Return the monthly check-in score table for the monitored channel."""

    report_mode = _ensure_mode(mode)
    async with _score_lock:
        report = await _service.score(report_mode)
    return {"mode": report_mode.value, "report": report}


__all__ = ["mcp", "get_score_report"]


if __name__ == "__main__":  # pragma: no cover
    mcp.run()
