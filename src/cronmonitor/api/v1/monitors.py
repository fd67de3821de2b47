from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request, status

from cronmonitor.dependencies import MonitorServiceDep, SettingsDep
from cronmonitor.models.monitor import Monitor
from cronmonitor.schemas.monitor import (
    MonitorCreate,
    MonitorDetail,
    MonitorList,
    MonitorResponse,
)
from cronmonitor.schemas.ping import PingResponse

router = APIRouter()


def _ping_url(request: Request, monitor: Monitor) -> str:
    return str(request.url_for("ping_monitor", monitor_id=monitor.id))


def _to_response(request: Request, monitor: Monitor) -> MonitorResponse:
    response = MonitorResponse.model_validate(monitor)
    response.ping_url = _ping_url(request, monitor)
    return response


@router.post(
    "/",
    response_model=MonitorResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_monitor(
    monitor_in: MonitorCreate,
    request: Request,
    service: MonitorServiceDep,
) -> MonitorResponse:
    """Create a new monitor and return its ping URL."""
    monitor = await service.create_monitor(monitor_in)
    return _to_response(request, monitor)


@router.get("/", response_model=MonitorList)
async def list_monitors(
    request: Request,
    service: MonitorServiceDep,
    skip: int = 0,
    limit: int = 100,
) -> MonitorList:
    """List monitors, newest first."""
    monitors, total = await service.list_monitors(skip=skip, limit=limit)
    return MonitorList(
        monitors=[_to_response(request, m) for m in monitors],
        total=total,
    )


@router.get("/{monitor_id}", response_model=MonitorDetail)
async def get_monitor(
    monitor_id: str,
    request: Request,
    service: MonitorServiceDep,
    settings: SettingsDep,
) -> MonitorDetail:
    """Get a monitor with its most recent pings."""
    monitor = await service.get_monitor(monitor_id)

    if monitor is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Monitor {monitor_id} not found",
        )

    pings = await service.list_recent_pings(monitor_id, limit=settings.recent_pings_limit)
    return MonitorDetail(
        **_to_response(request, monitor).model_dump(),
        recent_pings=[PingResponse.model_validate(p) for p in pings],
    )


@router.delete("/{monitor_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_monitor(
    monitor_id: str,
    service: MonitorServiceDep,
):
    """Delete a monitor and its ping history."""
    deleted = await service.delete_monitor_and_pings(monitor_id)

    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Monitor {monitor_id} not found",
        )
