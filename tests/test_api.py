"""
Tests for the FastAPI surface.
"""

from fastapi.testclient import TestClient

from checkin_score.api import create_app
from checkin_score.slack_client import SlackApiError

from conftest import local, slack_message
from test_service import FakeSlackClient


class FailingHistoryClient(FakeSlackClient):
    async def fetch_channel_history(self, channel_id, **kwargs):
        raise SlackApiError("conversations.history", "channel_not_found")
        yield  # pragma: no cover


def make_client(settings, slack_client):
    return TestClient(create_app(settings, slack_client=slack_client))


class TestScoreEndpoints:
    """Authentication, mode validation and report payloads."""

    def test_healthcheck(self, settings):
        response = make_client(settings, FakeSlackClient()).get("/healthz")
        assert response.json() == {"status": "ok"}

    def test_rejects_bad_api_key(self, settings):
        response = make_client(settings, FakeSlackClient()).get("/api/score", headers={"X-API-Key": "nope"})
        assert response.status_code == 401

    def test_rejects_unknown_mode(self, settings):
        response = make_client(settings, FakeSlackClient()).get(
            "/api/score", params={"mode": "weekly"}, headers={"X-API-Key": "secret"}
        )
        assert response.status_code == 400

    def test_full_report(self, settings):
        slack = FakeSlackClient([slack_message("U1", local(2024, 3, 1, 6, 7))], names={"U1": "alice"})

        response = make_client(settings, slack).get(
            "/api/score", params={"mode": "full"}, headers={"X-API-Key": "secret"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["mode"] == "full"
        assert "March, 2024" in body["report"]
        assert "alice" in body["report"]

    def test_slack_failure_maps_to_bad_gateway(self, settings):
        response = make_client(settings, FailingHistoryClient()).get(
            "/api/score", headers={"X-API-Key": "secret"}
        )

        assert response.status_code == 502
        assert "channel_not_found" in response.json()["detail"]

    def test_publish(self, settings):
        slack = FakeSlackClient([slack_message("U1", local(2024, 3, 1, 6, 7))], names={"U1": "alice"})

        response = make_client(settings, slack).post("/api/score/publish", headers={"X-API-Key": "secret"})

        assert response.status_code == 204
        assert [channel for channel, _ in slack.posted] == ["C0PANTS"]
