"""Operations endpoints providing health checks and metrics."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Header, Response
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from hackmate.domain.common.errors import Forbidden
from hackmate.obs import health
from hackmate.settings import settings

router = APIRouter(prefix="", tags=["ops"])


async def require_metrics_access(
	x_metrics_token: Optional[str] = Header(default=None, alias="X-Metrics-Token"),
) -> None:
	if settings.obs_metrics_public or settings.is_dev():
		return
	if not settings.obs_metrics_token or x_metrics_token != settings.obs_metrics_token:
		raise Forbidden("metrics_forbidden")


@router.get("/health/live")
async def health_live() -> dict[str, str]:
	return await health.liveness()


@router.get("/health/ready")
async def health_ready() -> Response:
	status_code, payload = await health.readiness()
	return JSONResponse(content=payload, status_code=status_code)


@router.get("/metrics", dependencies=[Depends(require_metrics_access)])
async def metrics_endpoint() -> Response:
	return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
