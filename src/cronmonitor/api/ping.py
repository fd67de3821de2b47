"""Check-in endpoint hit by monitored jobs, e.g. ``curl https://host/ping/<id>``."""
from __future__ import annotations

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import PlainTextResponse

from cronmonitor.dependencies import PingServiceDep
from cronmonitor.utils.exceptions import (
    InvalidInputError,
    MonitorNotFoundError,
    StoreFailureError,
)

router = APIRouter()


@router.api_route("/", methods=["GET", "POST"], include_in_schema=False)
async def ping_missing_id() -> PlainTextResponse:
    """Reject pings without a monitor identifier."""
    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="Missing monitor ID",
    )


@router.api_route(
    "/{monitor_id}",
    methods=["GET", "POST"],
    name="ping_monitor",
    response_class=PlainTextResponse,
)
async def ping_monitor(
    monitor_id: str,
    service: PingServiceDep,
) -> PlainTextResponse:
    """Record a check-in for a monitor."""
    try:
        await service.ingest(monitor_id)
    except InvalidInputError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=exc.reason,
        ) from exc
    except MonitorNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Monitor not found",
        ) from exc
    except StoreFailureError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to record ping",
        ) from exc

    return PlainTextResponse("OK")
