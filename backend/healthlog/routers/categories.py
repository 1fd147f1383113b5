from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Response, status

from ..config import CATEGORY_ITEM_PREFIX
from ..dependencies import bearer_token, get_store
from ..errors import ValidationError
from ..models import CategoryCreate, CategoryItem, CategoryItemInput, CategoryItemPatch
from ..services import HealthStore

router = APIRouter(prefix="/category", tags=["categories"])


def make_item_id(index: int) -> str:
    return f"{CATEGORY_ITEM_PREFIX}{index + 1}"


def parse_item_id(item_id: str) -> int:
    """Accept ``item-N`` (1-based) or a bare 0-based index."""

    try:
        if item_id.startswith(CATEGORY_ITEM_PREFIX):
            number = int(item_id[len(CATEGORY_ITEM_PREFIX):])
            if number < 1:
                raise ValueError(item_id)
            return number - 1
        index = int(item_id)
    except ValueError as exc:
        raise ValidationError("Invalid item id") from exc
    if index < 0:
        raise ValidationError("Invalid item id")
    return index


def _render_item(category: str, index: int, item: CategoryItem) -> dict:
    # value stays internal to the store.
    return {
        "id": make_item_id(index),
        "categoryId": category,
        "datetime": item.timestamp,
        "note": item.note,
    }


@router.get("/list")
def list_categories(token: str = Depends(bearer_token), store: HealthStore = Depends(get_store)) -> List[dict]:
    return [{"id": name, "categoryName": name} for name in store.list_categories(token)]


@router.post("/create", status_code=status.HTTP_201_CREATED)
def create_category(
    payload: CategoryCreate,
    token: str = Depends(bearer_token),
    store: HealthStore = Depends(get_store),
) -> dict:
    store.create_category(token, payload.category_name)
    return {"id": payload.category_name, "categoryName": payload.category_name}


@router.delete("/{category}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(category: str, token: str = Depends(bearer_token), store: HealthStore = Depends(get_store)) -> Response:
    store.delete_category(token, category)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{category}/list")
def list_items(category: str, token: str = Depends(bearer_token), store: HealthStore = Depends(get_store)) -> List[dict]:
    items = store.list_category_items(token, category)
    return [_render_item(category, index, item) for index, item in enumerate(items)]


@router.post("/{category}/add", status_code=status.HTTP_201_CREATED)
def add_item(
    category: str,
    payload: CategoryItemInput,
    token: str = Depends(bearer_token),
    store: HealthStore = Depends(get_store),
) -> dict:
    index = store.add_category_item(token, category, payload.timestamp, payload.note)
    return _render_item(category, index, store.get_category_item(token, category, index))


@router.patch("/{category}/{item_id}")
def update_item(
    category: str,
    item_id: str,
    payload: CategoryItemPatch,
    token: str = Depends(bearer_token),
    store: HealthStore = Depends(get_store),
) -> dict:
    index = parse_item_id(item_id)
    item = store.update_category_item(token, category, index, payload.timestamp, payload.note)
    return _render_item(category, index, item)


@router.delete("/{category}/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_item(
    category: str,
    item_id: str,
    token: str = Depends(bearer_token),
    store: HealthStore = Depends(get_store),
) -> Response:
    store.delete_category_item(token, category, parse_item_id(item_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
