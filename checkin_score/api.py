"""FastAPI application exposing the Check-in Score REST API."""

from __future__ import annotations

import logging
from typing import Optional

import httpx
from fastapi import Depends, FastAPI, Header, HTTPException, Response, status

from .config import Settings, load_settings
from .models import ReportMode
from .service import ScoreService
from .slack_client import IdentityResolutionError, SlackApiError, SlackClient

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    slack_client: Optional[SlackClient] = None,
) -> FastAPI:
    settings = settings or load_settings()
    slack_client = slack_client or SlackClient(settings.slack_bot_token)
    service = ScoreService(settings, slack_client)

    async def verify_api_key(x_api_key: str = Header(..., alias="X-API-Key")) -> None:
        if x_api_key != settings.api_key:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid api key")

    def mode_dependency(mode: str = ReportMode.SUMMARY.value) -> ReportMode:
        try:
            return ReportMode(mode)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail="mode must be one of: summary, full") from exc

    app = FastAPI(title="Check-in Score API", version="1.0.0")

    @app.on_event("startup")
    async def startup_event() -> None:  # pragma: no cover - io bound
        if not settings.score_on_startup:
            return
        try:
            report = await service.score(ReportMode.FULL)
        except (SlackApiError, IdentityResolutionError, httpx.HTTPError) as exc:
            logger.error("Startup scoring failed: %s", exc)
            return
        logger.info("Ran score:\n%s", report)

    @app.on_event("shutdown")
    async def shutdown_event() -> None:  # pragma: no cover - io bound
        await slack_client.close()

    def get_service() -> ScoreService:
        return service

    @app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/api/score")
    async def get_score(
        mode: ReportMode = Depends(mode_dependency),
        _: None = Depends(verify_api_key),
        svc: ScoreService = Depends(get_service),
    ) -> dict[str, object]:
        try:
            report = await svc.score(mode)
        except (SlackApiError, IdentityResolutionError) as exc:
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
        return {"mode": mode.value, "report": report}

    @app.post("/api/score/publish")
    async def publish_score(
        mode: ReportMode = Depends(mode_dependency),
        _: None = Depends(verify_api_key),
        svc: ScoreService = Depends(get_service),
    ) -> Response:
        try:
            await svc.publish(mode)
        except (SlackApiError, IdentityResolutionError) as exc:
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return app


__all__ = ["create_app"]
