from __future__ import annotations

import enum
import logging
from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator
from pydantic import ValidationError as SchemaError

_logger = logging.getLogger(__name__)


class StoredModel(BaseModel):
    """Base for everything written to the storage file.

    Attributes are snake_case in Python and camelCase on disk and on the wire.
    Every field carries a zero default so older or hand-edited files still load.
    """

    model_config = ConfigDict(populate_by_name=True)

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class RecordKind(str, enum.Enum):
    water = "water"
    sleep = "sleep"
    activity = "activity"


class WaterRecord(StoredModel):
    timestamp: str = Field(default="", alias="datetime")
    amount_ml: float = Field(default=0.0, alias="amountMl")


class SleepRecord(StoredModel):
    timestamp: str = Field(default="", alias="datetime")
    hours: float = 0.0


class ActivityRecord(StoredModel):
    timestamp: str = Field(default="", alias="datetime")
    minutes: int = 0
    # "low", "moderate" or "high" by convention; stored as given.
    intensity: str = ""


class CategoryItem(StoredModel):
    timestamp: str = Field(default="", alias="datetime")
    note: str = ""
    value: float = 0.0


class UserProfile(StoredModel):
    id: str = ""
    name: str = ""
    age: int = 0
    weight_kg: float = Field(default=0.0, alias="weightKg")
    height_m: float = Field(default=0.0, alias="heightM")
    gender: str = ""

    def bmi(self) -> float:
        """Weight over height squared, or 0.0 when either value is not positive."""

        if self.height_m <= 0 or self.weight_kg <= 0:
            return 0.0
        return self.weight_kg / (self.height_m * self.height_m)


_LIST_MODELS: Dict[str, Type[StoredModel]] = {
    "waters": WaterRecord,
    "sleeps": SleepRecord,
    "activities": ActivityRecord,
}


def _readable_items(label: str, items: Any, model: Type[StoredModel]) -> List[Any]:
    """Keep the entries of a stored list that parse as ``model``; log and drop the rest."""

    if not isinstance(items, list):
        return []
    kept: List[Any] = []
    for position, raw in enumerate(items):
        if isinstance(raw, model):
            kept.append(raw)
            continue
        if not isinstance(raw, dict):
            _logger.warning("Dropping %s[%d]: expected an object, got %r", label, position, raw)
            continue
        try:
            kept.append(model.model_validate(raw))
        except SchemaError as err:
            _logger.warning("Dropping %s[%d]: %s", label, position, err)
    return kept


class UserRecord(UserProfile):
    """A user aggregate: profile, credential and every record list it owns."""

    password: str = ""
    waters: List[WaterRecord] = Field(default_factory=list)
    sleeps: List[SleepRecord] = Field(default_factory=list)
    activities: List[ActivityRecord] = Field(default_factory=list)
    categories: Dict[str, List[CategoryItem]] = Field(default_factory=dict)

    @field_validator("waters", "sleeps", "activities", mode="before")
    @classmethod
    def _tolerate_bad_records(cls, value: Any, info: ValidationInfo) -> Any:
        model = _LIST_MODELS[info.field_name]
        return _readable_items(info.field_name, value, model)

    @field_validator("categories", mode="before")
    @classmethod
    def _tolerate_bad_categories(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return {}
        return {
            name: _readable_items(f"categories.{name}", items, CategoryItem)
            for name, items in value.items()
            if isinstance(items, list)
        }

    @model_validator(mode="after")
    def _default_id(self) -> "UserRecord":
        if not self.id:
            self.id = self.name
        return self

    def profile(self) -> UserProfile:
        return UserProfile(
            id=self.id,
            name=self.name,
            age=self.age,
            weight_kg=self.weight_kg,
            height_m=self.height_m,
            gender=self.gender,
        )


class RegisterRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    password: str
    age: int
    weight_kg: float = Field(alias="weightKg")
    height_m: float = Field(alias="heightM")
    gender: str


class LoginRequest(BaseModel):
    name: str
    password: str


class ProfileUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    age: Optional[int] = None
    weight_kg: Optional[float] = Field(default=None, alias="weightKg")
    height_m: Optional[float] = Field(default=None, alias="heightM")
    gender: Optional[str] = None
    password: Optional[str] = None


class WaterInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    timestamp: str = Field(alias="datetime")
    amount_ml: float = Field(alias="amountMl")


class WaterPatch(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    timestamp: Optional[str] = Field(default=None, alias="datetime")
    amount_ml: Optional[float] = Field(default=None, alias="amountMl")


class SleepInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    timestamp: str = Field(alias="datetime")
    hours: float


class SleepPatch(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    timestamp: Optional[str] = Field(default=None, alias="datetime")
    hours: Optional[float] = None


class ActivityInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    timestamp: str = Field(alias="datetime")
    minutes: int
    intensity: str


class ActivityPatch(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    timestamp: Optional[str] = Field(default=None, alias="datetime")
    minutes: Optional[int] = None
    intensity: Optional[str] = None


class CategoryCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    category_name: str = Field(alias="categoryName")


class CategoryItemInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    timestamp: str = Field(alias="datetime")
    note: str


class CategoryItemPatch(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    timestamp: Optional[str] = Field(default=None, alias="datetime")
    note: Optional[str] = None
