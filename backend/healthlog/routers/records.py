from __future__ import annotations

from typing import Any, Callable, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from ..dependencies import bearer_token, get_store
from ..errors import NotFound
from ..models import (
    ActivityInput,
    ActivityPatch,
    SleepInput,
    SleepPatch,
    WaterInput,
    WaterPatch,
)
from ..services import HealthStore

router = APIRouter(tags=["records"])


def _render(index: int, record: Any) -> dict:
    return {"id": str(index), **record.to_document()}


def _created(fetch: Callable[[str, int], Any], token: str, index: int) -> dict:
    try:
        record = fetch(token, index)
    except NotFound as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal error: no records after add",
        ) from exc
    return _render(index, record)


# -- waters -------------------------------------------------------------------


@router.post("/waters", status_code=status.HTTP_201_CREATED)
def add_water(payload: WaterInput, token: str = Depends(bearer_token), store: HealthStore = Depends(get_store)) -> dict:
    index = store.add_water(token, payload.timestamp, payload.amount_ml)
    return _created(store.get_water, token, index)


@router.get("/waters")
def list_waters(token: str = Depends(bearer_token), store: HealthStore = Depends(get_store)) -> List[dict]:
    return [_render(index, record) for index, record in enumerate(store.list_water(token))]


@router.get("/waters/summary")
def water_summary(
    goal_ml: Optional[float] = Query(default=None, alias="goalMl"),
    token: str = Depends(bearer_token),
    store: HealthStore = Depends(get_store),
) -> dict:
    summary = {"weeklyAverageMl": store.water_weekly_average(token)}
    if goal_ml is not None:
        summary["goalMl"] = goal_ml
        summary["goalMet"] = store.water_goal_met(token, goal_ml)
    return summary


@router.patch("/waters/{record_id}")
def update_water(
    record_id: int,
    payload: WaterPatch,
    token: str = Depends(bearer_token),
    store: HealthStore = Depends(get_store),
) -> dict:
    record = store.update_water(token, record_id, payload.timestamp, payload.amount_ml)
    return _render(record_id, record)


@router.delete("/waters/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_water(record_id: int, token: str = Depends(bearer_token), store: HealthStore = Depends(get_store)) -> Response:
    store.delete_water(token, record_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# -- sleeps -------------------------------------------------------------------


@router.post("/sleeps", status_code=status.HTTP_201_CREATED)
def add_sleep(payload: SleepInput, token: str = Depends(bearer_token), store: HealthStore = Depends(get_store)) -> dict:
    index = store.add_sleep(token, payload.timestamp, payload.hours)
    return _created(store.get_sleep, token, index)


@router.get("/sleeps")
def list_sleeps(token: str = Depends(bearer_token), store: HealthStore = Depends(get_store)) -> List[dict]:
    return [_render(index, record) for index, record in enumerate(store.list_sleep(token))]


@router.get("/sleeps/summary")
def sleep_summary(
    min_hours: Optional[float] = Query(default=None, alias="minHours"),
    token: str = Depends(bearer_token),
    store: HealthStore = Depends(get_store),
) -> dict:
    summary = {"lastSleepHours": store.last_sleep_hours(token)}
    if min_hours is not None:
        summary["minHours"] = min_hours
        summary["enough"] = store.sleep_enough(token, min_hours)
    return summary


@router.patch("/sleeps/{record_id}")
def update_sleep(
    record_id: int,
    payload: SleepPatch,
    token: str = Depends(bearer_token),
    store: HealthStore = Depends(get_store),
) -> dict:
    record = store.update_sleep(token, record_id, payload.timestamp, payload.hours)
    return _render(record_id, record)


@router.delete("/sleeps/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_sleep(record_id: int, token: str = Depends(bearer_token), store: HealthStore = Depends(get_store)) -> Response:
    store.delete_sleep(token, record_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# -- activities ---------------------------------------------------------------


@router.post("/activities", status_code=status.HTTP_201_CREATED)
def add_activity(
    payload: ActivityInput,
    token: str = Depends(bearer_token),
    store: HealthStore = Depends(get_store),
) -> dict:
    index = store.add_activity(token, payload.timestamp, payload.minutes, payload.intensity)
    return _created(store.get_activity, token, index)


@router.get("/activities")
def list_activities(token: str = Depends(bearer_token), store: HealthStore = Depends(get_store)) -> List[dict]:
    return [_render(index, record) for index, record in enumerate(store.list_activity(token))]


@router.patch("/activities/{record_id}")
def update_activity(
    record_id: int,
    payload: ActivityPatch,
    token: str = Depends(bearer_token),
    store: HealthStore = Depends(get_store),
) -> dict:
    record = store.update_activity(token, record_id, payload.timestamp, payload.minutes, payload.intensity)
    return _render(record_id, record)


@router.delete("/activities/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_activity(
    record_id: int,
    token: str = Depends(bearer_token),
    store: HealthStore = Depends(get_store),
) -> Response:
    store.delete_activity(token, record_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
