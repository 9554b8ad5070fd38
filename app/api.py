"""HTTP route definitions for querying an ingested dataset."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from app.schemas import SensorCount, SensorListResponse, SensorRange, TotalCount
from datastore.sensor_registry import SensorRegistry
from models.errors import InvalidArgumentError, NotFoundError

router = APIRouter()


def get_registry(request: Request) -> SensorRegistry:
    registry = getattr(request.app.state, "registry", None)
    if registry is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Dataset has not been loaded.",
        )
    return registry


@router.get(
    "/sensors",
    response_model=SensorListResponse,
    summary="List sensors in canonical column order.",
)
async def list_sensors(registry: SensorRegistry = Depends(get_registry)) -> SensorListResponse:
    return SensorListResponse(sensors=list(registry.names))


@router.get(
    "/sensors/{name:path}/range",
    response_model=SensorRange,
    summary="Hourly span ingested for one sensor.",
)
async def get_sensor_range(
    name: str,
    registry: SensorRegistry = Depends(get_registry),
) -> SensorRange:
    try:
        series = registry.series(name)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return SensorRange(
        sensor=name,
        first_hour=series.first_hour,
        last_hour=series.last_hour,
        reading_count=len(series),
    )


@router.get(
    "/sensors/{name:path}/counts",
    response_model=SensorCount,
    summary="Count recorded by one sensor during an hour.",
)
async def get_sensor_count(
    name: str,
    hour: datetime = Query(..., description="Hour to look up, e.g. 2015-03-17T07:00."),
    registry: SensorRegistry = Depends(get_registry),
) -> SensorCount:
    try:
        count = registry.series(name).get(hour)
    except InvalidArgumentError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return SensorCount(sensor=name, hour=hour, count=count)


@router.get(
    "/totals",
    response_model=TotalCount,
    summary="Count summed over every sensor during an hour.",
)
async def get_total_count(
    hour: datetime = Query(..., description="Hour to look up, e.g. 2015-03-17T07:00."),
    registry: SensorRegistry = Depends(get_registry),
) -> TotalCount:
    try:
        count = registry.total_count_at_hour(hour)
    except InvalidArgumentError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return TotalCount(hour=hour, count=count, sensor_count=len(registry))


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}
