"""
Tests for the Slack Web API client against a mocked transport.
"""

import json

import httpx
import pytest

from checkin_score.slack_client import IdentityResolutionError, SlackApiError, SlackClient


def make_client(handler):
    return SlackClient("xoxb-test", page_delay=0, transport=httpx.MockTransport(handler))


class TestFetchChannelHistory:
    """Paginated history retrieval."""

    @pytest.mark.asyncio
    async def test_follows_cursor_and_skips_joins(self):
        seen_cursors = []

        def handler(request):
            assert request.url.path == "/api/conversations.history"
            assert request.headers["Authorization"] == "Bearer xoxb-test"
            cursor = request.url.params.get("cursor")
            seen_cursors.append(cursor)
            if cursor is None:
                return httpx.Response(
                    200,
                    json={
                        "ok": True,
                        "messages": [
                            {"user": "U1", "text": "pants off", "ts": "2.0"},
                            {"user": "U2", "subtype": "channel_join", "ts": "1.5"},
                        ],
                        "has_more": True,
                        "response_metadata": {"next_cursor": "page2"},
                    },
                )
            return httpx.Response(
                200,
                json={"ok": True, "messages": [{"user": "U1", "text": "hi", "ts": "1.0"}], "has_more": False},
            )

        client = make_client(handler)
        messages = [m async for m in client.fetch_channel_history("C1")]
        await client.close()

        assert [m["ts"] for m in messages] == ["2.0", "1.0"]
        assert seen_cursors == [None, "page2"]

    @pytest.mark.asyncio
    async def test_closing_early_stops_paging(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(
                200,
                json={
                    "ok": True,
                    "messages": [{"user": "U1", "ts": "1.0"}],
                    "has_more": True,
                    "response_metadata": {"next_cursor": "more"},
                },
            )

        client = make_client(handler)
        history = client.fetch_channel_history("C1")
        first = await history.__anext__()
        await history.aclose()
        await client.close()

        assert first["ts"] == "1.0"
        assert len(requests) == 1

    @pytest.mark.asyncio
    async def test_error_response_raises(self):
        client = make_client(lambda request: httpx.Response(200, json={"ok": False, "error": "not_in_channel"}))

        with pytest.raises(SlackApiError) as info:
            [m async for m in client.fetch_channel_history("C1")]
        await client.close()

        assert info.value.method == "conversations.history"
        assert info.value.error == "not_in_channel"


class TestResolveDisplayName:
    """Display name lookup and its failure mode."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "user, expected",
        [
            ({"name": "alice", "real_name": "Alice A", "profile": {"display_name": "ally"}}, "ally"),
            ({"name": "alice", "real_name": "Alice A", "profile": {"display_name": ""}}, "Alice A"),
            ({"name": "alice", "profile": {}}, "alice"),
        ],
    )
    async def test_name_preference(self, user, expected):
        def handler(request):
            assert request.url.params["user"] == "U1"
            return httpx.Response(200, json={"ok": True, "user": user})

        client = make_client(handler)
        assert await client.resolve_display_name("U1") == expected
        await client.close()

    @pytest.mark.asyncio
    async def test_unknown_user(self):
        client = make_client(lambda request: httpx.Response(200, json={"ok": False, "error": "user_not_found"}))

        with pytest.raises(IdentityResolutionError) as info:
            await client.resolve_display_name("U404")
        await client.close()

        assert info.value.author_id == "U404"
        assert "user_not_found" in str(info.value)

    @pytest.mark.asyncio
    async def test_http_failure(self):
        client = make_client(lambda request: httpx.Response(500))

        with pytest.raises(IdentityResolutionError):
            await client.resolve_display_name("U1")
        await client.close()


class TestPostMessage:
    """Delivery of the rendered report."""

    @pytest.mark.asyncio
    async def test_posts_json_body(self):
        bodies = []

        def handler(request):
            assert request.method == "POST"
            assert request.url.path == "/api/chat.postMessage"
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json={"ok": True, "ts": "3.0"})

        client = make_client(handler)
        response = await client.post_message("C1", "hello")
        await client.close()

        assert response["ts"] == "3.0"
        assert bodies == [{"channel": "C1", "text": "hello"}]
