from __future__ import annotations

import math
from typing import Dict, Iterable, Iterator, List, Optional

from .categories import CategoryTable
from .errors import Conflict, NotFound, ValidationError
from .models import RecordKind, UserRecord
from .records import RecordCollection, collection_for


def _check_profile(age: int, weight_kg: float, height_m: float) -> None:
    if not age > 0:
        raise ValidationError("age must be greater than 0")
    if not (math.isfinite(weight_kg) and weight_kg > 0):
        raise ValidationError("weightKg must be a finite number greater than 0")
    if not (math.isfinite(height_m) and height_m > 0):
        raise ValidationError("heightM must be a finite number greater than 0")


class UserRegistry:
    """All users keyed by name, in registration order."""

    def __init__(self, users: Optional[Iterable[UserRecord]] = None) -> None:
        self._users: Dict[str, UserRecord] = {}
        for user in users or ():
            self.add(user)

    def __len__(self) -> int:
        return len(self._users)

    def __iter__(self) -> Iterator[UserRecord]:
        return iter(self._users.values())

    def __contains__(self, name: object) -> bool:
        return name in self._users

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UserRegistry):
            return NotImplemented
        return list(self._users.items()) == list(other._users.items())

    def names(self) -> List[str]:
        return list(self._users)

    def add(self, user: UserRecord) -> None:
        """Insert a user as-is. Used when loading; a repeated name replaces the earlier entry."""

        self._users[user.name] = user

    def register(
        self,
        name: str,
        age: int,
        weight_kg: float,
        height_m: float,
        password: str,
        gender: str,
    ) -> UserRecord:
        if not name:
            raise ValidationError("name must not be empty")
        if not password:
            raise ValidationError("password must not be empty")
        _check_profile(age, weight_kg, height_m)
        if name in self._users:
            raise Conflict(f"User '{name}' already exists")

        user = UserRecord(
            id=name,
            name=name,
            age=age,
            weight_kg=weight_kg,
            height_m=height_m,
            gender=gender,
            password=password,
        )
        self._users[name] = user
        return user

    def find(self, name: str) -> Optional[UserRecord]:
        return self._users.get(name)

    def get(self, name: str) -> UserRecord:
        user = self._users.get(name)
        if user is None:
            raise NotFound(f"User '{name}' not found")
        return user

    def remove(self, name: str) -> UserRecord:
        user = self._users.pop(name, None)
        if user is None:
            raise NotFound(f"User '{name}' not found")
        return user

    def update_profile(
        self,
        name: str,
        *,
        age: Optional[int] = None,
        weight_kg: Optional[float] = None,
        height_m: Optional[float] = None,
        gender: Optional[str] = None,
        password: Optional[str] = None,
    ) -> UserRecord:
        user = self.get(name)
        new_age = user.age if age is None else age
        new_weight = user.weight_kg if weight_kg is None else weight_kg
        new_height = user.height_m if height_m is None else height_m
        _check_profile(new_age, new_weight, new_height)
        if password is not None and not password:
            raise ValidationError("password must not be empty")

        user.age = new_age
        user.weight_kg = new_weight
        user.height_m = new_height
        if gender is not None:
            user.gender = gender
        if password is not None:
            user.password = password
        return user

    def records(self, name: str, kind: RecordKind) -> RecordCollection:
        return collection_for(self.get(name), kind)

    def categories(self, name: str) -> CategoryTable:
        return CategoryTable(self.get(name).categories)

    def copy(self) -> "UserRegistry":
        return UserRegistry(user.model_copy(deep=True) for user in self._users.values())
