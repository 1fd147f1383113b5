from __future__ import annotations

import math
from typing import Callable, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel

from .errors import NotFound, ValidationError
from .models import ActivityRecord, RecordKind, SleepRecord, UserRecord, WaterRecord

RecordT = TypeVar("RecordT", bound=BaseModel)


def check_water(record: WaterRecord) -> None:
    if not (math.isfinite(record.amount_ml) and record.amount_ml > 0):
        raise ValidationError("amountMl must be a finite number greater than 0")


def check_sleep(record: SleepRecord) -> None:
    if not math.isfinite(record.hours):
        raise ValidationError("hours must be a finite number")
    if not record.hours >= 0:
        raise ValidationError("hours must not be negative")


def check_activity(record: ActivityRecord) -> None:
    if not record.minutes > 0:
        raise ValidationError("minutes must be greater than 0")


class RecordCollection(Generic[RecordT]):
    """Index-addressed view over one ordered record list owned by a user.

    Records keep insertion order. Indices are 0-based and shift down after a
    delete. The collection never persists anything itself; callers flush.
    """

    def __init__(
        self,
        label: str,
        items: List[RecordT],
        check: Optional[Callable[[RecordT], None]] = None,
    ) -> None:
        self.label = label
        self._items = items
        self._check = check

    def __len__(self) -> int:
        return len(self._items)

    def _validate(self, record: RecordT) -> None:
        if self._check is not None:
            self._check(record)

    def _locate(self, index: int) -> int:
        if index < 0 or index >= len(self._items):
            raise NotFound(f"{self.label} record {index} not found")
        return index

    def add(self, record: RecordT) -> int:
        self._validate(record)
        self._items.append(record.model_copy())
        return len(self._items) - 1

    def list(self) -> List[RecordT]:
        return [record.model_copy() for record in self._items]

    def get(self, index: int) -> RecordT:
        return self._items[self._locate(index)].model_copy()

    def update(self, index: int, record: RecordT) -> RecordT:
        position = self._locate(index)
        self._validate(record)
        self._items[position] = record.model_copy()
        return record

    def delete(self, index: int) -> RecordT:
        return self._items.pop(self._locate(index))


_KIND_FIELDS: Dict[RecordKind, str] = {
    RecordKind.water: "waters",
    RecordKind.sleep: "sleeps",
    RecordKind.activity: "activities",
}

_KIND_CHECKS: Dict[RecordKind, Callable] = {
    RecordKind.water: check_water,
    RecordKind.sleep: check_sleep,
    RecordKind.activity: check_activity,
}


def collection_for(user: UserRecord, kind: RecordKind) -> RecordCollection:
    return RecordCollection(kind.value, getattr(user, _KIND_FIELDS[kind]), _KIND_CHECKS[kind])
