from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from services.pool_service import PoolStatsService, build_default_service


templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))

_ENDPOINTS = (
    ("POST", "/report", "Submit worker report"),
    ("GET", "/stats", "Get pool statistics"),
    ("GET", "/health", "Health check"),
)


def get_service() -> PoolStatsService:
    return build_default_service()


router = APIRouter(include_in_schema=False)


@router.get("/", name="ui_index", response_class=HTMLResponse)
async def ui_index(
    request: Request,
    service: PoolStatsService = Depends(get_service),
) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "ui/index.html",
        {
            "endpoints": _ENDPOINTS,
            "window_minutes": service.aggregator.window_seconds // 60,
        },
    )
