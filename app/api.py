"""HTTP route definitions for the service."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import PlainTextResponse

from app.schemas import PoolStatsOut, ReportAccepted, StatsResponse, WorkerReportIn
from services.errors import StorageUnavailable, ValidationError
from services.pool_service import PoolStatsService, build_default_service

router = APIRouter()


def get_service() -> PoolStatsService:
    return build_default_service()


@router.post(
    "/report",
    status_code=status.HTTP_200_OK,
    response_model=ReportAccepted,
    summary="Submit a mining worker report.",
)
def post_report(
    payload: WorkerReportIn,
    service: PoolStatsService = Depends(get_service),
) -> ReportAccepted:
    try:
        service.submit(payload.to_record())
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=exc.message,
        ) from exc
    except StorageUnavailable as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to store report",
        ) from exc
    return ReportAccepted()


@router.get(
    "/stats",
    response_model=StatsResponse,
    summary="Aggregated pool statistics for the trailing window.",
)
def get_stats(
    service: PoolStatsService = Depends(get_service),
) -> StatsResponse:
    try:
        stats = service.query_stats()
    except StorageUnavailable as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to access reports",
        ) from exc
    return StatsResponse(
        pools={pool: PoolStatsOut.from_stats(entry) for pool, entry in stats.items()}
    )


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
    response_class=PlainTextResponse,
)
async def healthcheck() -> str:
    return "OK"
