from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from ..dependencies import bearer_token, get_store
from ..errors import NotFound
from ..models import ProfileUpdate
from ..services import HealthStore

router = APIRouter(prefix="/user", tags=["user"])


@router.get("/profile")
def profile(token: str = Depends(bearer_token), store: HealthStore = Depends(get_store)) -> dict:
    return store.profile(token).to_document()


@router.patch("/profile")
def update_profile(
    payload: ProfileUpdate,
    token: str = Depends(bearer_token),
    store: HealthStore = Depends(get_store),
) -> dict:
    updated = store.update_profile(
        token,
        age=payload.age,
        weight_kg=payload.weight_kg,
        height_m=payload.height_m,
        gender=payload.gender,
        password=payload.password,
    )
    return updated.to_document()


@router.get("/bmi")
def bmi(token: str = Depends(bearer_token), store: HealthStore = Depends(get_store)) -> dict:
    value = store.bmi(token)
    # A non-positive BMI means the profile has no usable height or weight.
    if value <= 0:
        raise NotFound("Profile not found")
    return {"bmi": value}


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(token: str = Depends(bearer_token), store: HealthStore = Depends(get_store)) -> Response:
    store.delete_user(token)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
