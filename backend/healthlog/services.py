from __future__ import annotations

import hmac
import logging
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel
from pydantic import ValidationError as SchemaError

from . import storage
from .config import STORAGE_PATH, WEEKLY_WINDOW
from .errors import InvalidCredentials, PersistenceError, UnknownSession, ValidationError
from .models import (
    ActivityRecord,
    CategoryItem,
    RecordKind,
    SleepRecord,
    UserProfile,
    UserRecord,
    WaterRecord,
)
from .records import RecordCollection
from .registry import UserRegistry
from .sessions import SessionManager

_logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _build(model: Type[ModelT], **fields: Any) -> ModelT:
    try:
        return model(**fields)
    except SchemaError as err:
        raise ValidationError(f"Invalid {model.__name__}: {err.errors()[0]['msg']}") from err


def _password_matches(expected: str, candidate: str) -> bool:
    # Plaintext comparison; stored credentials are not hashed.
    return bool(expected) and hmac.compare_digest(expected.encode("utf-8"), candidate.encode("utf-8"))


def _merge(current: ModelT, **changes: Any) -> ModelT:
    """Return a new record built from ``current`` with the non-None changes applied."""

    fields = current.model_dump()
    fields.update({key: value for key, value in changes.items() if value is not None})
    return _build(type(current), **fields)


class HealthStore:
    """Process-wide health data store.

    Owns the user registry and the session map. Every public call runs under one
    lock, and every mutation rewrites the storage file before the call returns.
    When that write fails the mutation is rolled back and ``PersistenceError`` is
    raised, so memory and disk never disagree after a call.
    """

    def __init__(
        self,
        path: Union[str, Path] = STORAGE_PATH,
        registry: Optional[UserRegistry] = None,
        sessions: Optional[SessionManager] = None,
    ) -> None:
        self.path = Path(path)
        self._registry = registry if registry is not None else UserRegistry()
        self._sessions = sessions if sessions is not None else SessionManager()
        self._lock = threading.RLock()

    @classmethod
    def open(cls, path: Union[str, Path] = STORAGE_PATH) -> "HealthStore":
        return cls(path, registry=storage.load(path))

    # -- plumbing -----------------------------------------------------------

    @contextmanager
    def _mutation(self) -> Iterator[None]:
        with self._lock:
            registry_backup = self._registry.copy()
            sessions_backup = self._sessions.copy()
            yield
            if not storage.save(self._registry, self.path):
                self._registry = registry_backup
                self._sessions = sessions_backup
                raise PersistenceError("Failed to write storage file")

    def _user_name(self, token: str) -> str:
        name = self._sessions.resolve(token)
        if name is None or name not in self._registry:
            raise UnknownSession()
        return name

    def _user(self, token: str) -> UserRecord:
        return self._registry.get(self._user_name(token))

    def _records(self, token: str, kind: RecordKind) -> RecordCollection:
        return self._registry.records(self._user_name(token), kind)

    def flush(self) -> bool:
        with self._lock:
            return storage.save(self._registry, self.path)

    def close(self) -> None:
        """Final best-effort flush at shutdown."""

        try:
            if not self.flush():
                _logger.warning("Final flush to %s failed", self.path)
        except Exception:  # noqa: BLE001
            _logger.exception("Final flush to %s raised", self.path)

    def snapshot(self) -> UserRegistry:
        with self._lock:
            return self._registry.copy()

    @property
    def session_count(self) -> int:
        with self._lock:
            return len(self._sessions)

    # -- users and auth -----------------------------------------------------

    def register(
        self,
        name: str,
        age: int,
        weight_kg: float,
        height_m: float,
        password: str,
        gender: str,
    ) -> UserProfile:
        with self._mutation():
            user = self._registry.register(name, age, weight_kg, height_m, password, gender)
        _logger.info("Registered user %s", name)
        return user.profile()

    def login(self, name: str, password: str) -> str:
        with self._lock:
            user = self._registry.find(name)
            if user is None or not _password_matches(user.password, password):
                _logger.info("Rejected login for %s", name)
                raise InvalidCredentials()
            return self._sessions.issue(name)

    def profile(self, token: str) -> UserProfile:
        with self._lock:
            return self._user(token).profile()

    def bmi(self, token: str) -> float:
        with self._lock:
            return self._user(token).bmi()

    def update_profile(
        self,
        token: str,
        *,
        age: Optional[int] = None,
        weight_kg: Optional[float] = None,
        height_m: Optional[float] = None,
        gender: Optional[str] = None,
        password: Optional[str] = None,
    ) -> UserProfile:
        with self._mutation():
            user = self._registry.update_profile(
                self._user_name(token),
                age=age,
                weight_kg=weight_kg,
                height_m=height_m,
                gender=gender,
                password=password,
            )
            return user.profile()

    def delete_user(self, token: str) -> int:
        """Remove the token's user and every session naming it. Returns revoked session count."""

        with self._mutation():
            name = self._user_name(token)
            self._registry.remove(name)
            revoked = self._sessions.revoke_user(name)
        _logger.info("Deleted user %s (%d session(s) revoked)", name, revoked)
        return revoked

    # -- generic record plumbing -------------------------------------------

    def _add(self, token: str, kind: RecordKind, record: BaseModel) -> int:
        with self._mutation():
            return self._records(token, kind).add(record)

    def _list(self, token: str, kind: RecordKind) -> List[Any]:
        with self._lock:
            return self._records(token, kind).list()

    def _get(self, token: str, kind: RecordKind, index: int) -> Any:
        with self._lock:
            return self._records(token, kind).get(index)

    def _update(self, token: str, kind: RecordKind, index: int, **changes: Any) -> Any:
        with self._mutation():
            collection = self._records(token, kind)
            record = _merge(collection.get(index), **changes)
            return collection.update(index, record)

    def _delete(self, token: str, kind: RecordKind, index: int) -> None:
        with self._mutation():
            self._records(token, kind).delete(index)

    # -- water --------------------------------------------------------------

    def add_water(self, token: str, timestamp: str, amount_ml: float) -> int:
        return self._add(token, RecordKind.water, _build(WaterRecord, timestamp=timestamp, amount_ml=amount_ml))

    def list_water(self, token: str) -> List[WaterRecord]:
        return self._list(token, RecordKind.water)

    def get_water(self, token: str, index: int) -> WaterRecord:
        return self._get(token, RecordKind.water, index)

    def update_water(
        self,
        token: str,
        index: int,
        timestamp: Optional[str] = None,
        amount_ml: Optional[float] = None,
    ) -> WaterRecord:
        return self._update(token, RecordKind.water, index, timestamp=timestamp, amount_ml=amount_ml)

    def delete_water(self, token: str, index: int) -> None:
        self._delete(token, RecordKind.water, index)

    # -- sleep --------------------------------------------------------------

    def add_sleep(self, token: str, timestamp: str, hours: float) -> int:
        return self._add(token, RecordKind.sleep, _build(SleepRecord, timestamp=timestamp, hours=hours))

    def list_sleep(self, token: str) -> List[SleepRecord]:
        return self._list(token, RecordKind.sleep)

    def get_sleep(self, token: str, index: int) -> SleepRecord:
        return self._get(token, RecordKind.sleep, index)

    def update_sleep(
        self,
        token: str,
        index: int,
        timestamp: Optional[str] = None,
        hours: Optional[float] = None,
    ) -> SleepRecord:
        return self._update(token, RecordKind.sleep, index, timestamp=timestamp, hours=hours)

    def delete_sleep(self, token: str, index: int) -> None:
        self._delete(token, RecordKind.sleep, index)

    # -- activity -----------------------------------------------------------

    def add_activity(self, token: str, timestamp: str, minutes: int, intensity: str) -> int:
        record = _build(ActivityRecord, timestamp=timestamp, minutes=minutes, intensity=intensity)
        return self._add(token, RecordKind.activity, record)

    def list_activity(self, token: str) -> List[ActivityRecord]:
        return self._list(token, RecordKind.activity)

    def get_activity(self, token: str, index: int) -> ActivityRecord:
        return self._get(token, RecordKind.activity, index)

    def update_activity(
        self,
        token: str,
        index: int,
        timestamp: Optional[str] = None,
        minutes: Optional[int] = None,
        intensity: Optional[str] = None,
    ) -> ActivityRecord:
        return self._update(
            token,
            RecordKind.activity,
            index,
            timestamp=timestamp,
            minutes=minutes,
            intensity=intensity,
        )

    def delete_activity(self, token: str, index: int) -> None:
        self._delete(token, RecordKind.activity, index)

    # -- summaries ----------------------------------------------------------

    def water_weekly_average(self, token: str) -> float:
        """Mean amount over the last ``WEEKLY_WINDOW`` water records, 0.0 when there are none."""

        with self._lock:
            recent = self._user(token).waters[-WEEKLY_WINDOW:]
            if not recent:
                return 0.0
            return sum(record.amount_ml for record in recent) / len(recent)

    def water_goal_met(self, token: str, daily_goal_ml: float) -> bool:
        return self.water_weekly_average(token) >= daily_goal_ml

    def last_sleep_hours(self, token: str) -> float:
        with self._lock:
            sleeps = self._user(token).sleeps
            return sleeps[-1].hours if sleeps else 0.0

    def sleep_enough(self, token: str, min_hours: float) -> bool:
        return self.last_sleep_hours(token) >= min_hours

    # -- categories ---------------------------------------------------------

    def list_categories(self, token: str) -> List[str]:
        with self._lock:
            return self._registry.categories(self._user_name(token)).names()

    def create_category(self, token: str, name: str) -> None:
        with self._mutation():
            self._registry.categories(self._user_name(token)).create(name)

    def delete_category(self, token: str, name: str) -> int:
        with self._mutation():
            return self._registry.categories(self._user_name(token)).delete(name)

    def add_category_item(
        self,
        token: str,
        category: str,
        timestamp: str,
        note: str,
        value: float = 0.0,
    ) -> int:
        item = _build(CategoryItem, timestamp=timestamp, note=note, value=value)
        with self._mutation():
            return self._registry.categories(self._user_name(token)).add_item(category, item)

    def list_category_items(self, token: str, category: str) -> List[CategoryItem]:
        with self._lock:
            return self._registry.categories(self._user_name(token)).items(category)

    def get_category_item(self, token: str, category: str, index: int) -> CategoryItem:
        with self._lock:
            return self._registry.categories(self._user_name(token)).get_item(category, index)

    def update_category_item(
        self,
        token: str,
        category: str,
        index: int,
        timestamp: Optional[str] = None,
        note: Optional[str] = None,
        value: Optional[float] = None,
    ) -> CategoryItem:
        with self._mutation():
            table = self._registry.categories(self._user_name(token))
            item = _merge(table.get_item(category, index), timestamp=timestamp, note=note, value=value)
            return table.update_item(category, index, item)

    def delete_category_item(self, token: str, category: str, index: int) -> None:
        with self._mutation():
            self._registry.categories(self._user_name(token)).delete_item(category, index)
