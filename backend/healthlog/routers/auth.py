from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ..dependencies import get_store
from ..models import LoginRequest, RegisterRequest
from ..services import HealthStore

router = APIRouter(tags=["auth"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, store: HealthStore = Depends(get_store)) -> dict:
    store.register(
        payload.name,
        payload.age,
        payload.weight_kg,
        payload.height_m,
        payload.password,
        payload.gender,
    )
    return {"token": store.login(payload.name, payload.password)}


@router.post("/login")
def login(payload: LoginRequest, store: HealthStore = Depends(get_store)) -> dict:
    return {"token": store.login(payload.name, payload.password)}
