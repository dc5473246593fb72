"""HTTP client for interacting with Slack Web API."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from typing import Any, Dict, Optional

import httpx

SLACK_API_BASE = "https://slack.com/api"


class SlackApiError(RuntimeError):
    """Raised when Slack returns an error response."""

    def __init__(self, method: str, error: str) -> None:
        super().__init__(f"Slack API error for {method}: {error}")
        self.method = method
        self.error = error


class IdentityResolutionError(RuntimeError):
    """Raised when an author id cannot be turned into a display name."""

    def __init__(self, author_id: str, reason: str) -> None:
        super().__init__(f"Could not resolve display name for {author_id}: {reason}")
        self.author_id = author_id
        self.reason = reason


class SlackClient:
    """Simple async wrapper around Slack Web API endpoints used by Check-in Score."""

    def __init__(
        self,
        token: str,
        timeout: float = 10.0,
        page_delay: float = 0.2,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._page_delay = page_delay
        self._client = httpx.AsyncClient(
            base_url=SLACK_API_BASE,
            headers={"Authorization": f"Bearer {token}"},
            timeout=timeout,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    def _check(self, method: str, response: httpx.Response) -> dict[str, Any]:
        response.raise_for_status()
        data = response.json()
        if not data.get("ok"):
            raise SlackApiError(method, data.get("error", "unknown_error"))
        return data

    async def fetch_channel_history(
        self,
        channel_id: str,
        *,
        oldest: Optional[str] = None,
        latest: Optional[str] = None,
        limit: int = 200,
    ) -> AsyncIterator[dict[str, Any]]:
        """Yield messages from `conversations.history`, newest first, with pagination."""

        cursor: Optional[str] = None
        while True:
            params: Dict[str, Any] = {"channel": channel_id, "limit": limit}
            if cursor:
                params["cursor"] = cursor
            if oldest:
                params["oldest"] = oldest
            if latest:
                params["latest"] = latest

            method = "conversations.history"
            data = self._check(method, await self._client.get(method, params=params))

            messages = data.get("messages", [])
            for message in messages:
                if message.get("subtype") == "channel_join":
                    continue
                yield message

            if not data.get("has_more"):
                break
            cursor = data.get("response_metadata", {}).get("next_cursor")
            if not cursor:
                break
            await asyncio.sleep(self._page_delay)

    async def fetch_user(self, user_id: str) -> dict[str, Any]:
        method = "users.info"
        data = self._check(method, await self._client.get(method, params={"user": user_id}))
        return data.get("user", {})

    async def resolve_display_name(self, user_id: str) -> str:
        """Return the name shown for ``user_id``, preferring the profile display name."""

        try:
            user = await self.fetch_user(user_id)
        except (SlackApiError, httpx.HTTPError) as exc:
            raise IdentityResolutionError(user_id, str(exc)) from exc
        profile = user.get("profile", {})
        name = profile.get("display_name") or profile.get("real_name") or user.get("real_name") or user.get("name")
        if not name:
            raise IdentityResolutionError(user_id, "user has no name")
        return name

    async def post_message(self, channel_id: str, text: str) -> dict[str, Any]:
        method = "chat.postMessage"
        response = await self._client.post(method, json={"channel": channel_id, "text": text})
        return self._check(method, response)


__all__ = ["SlackClient", "SlackApiError", "IdentityResolutionError"]
