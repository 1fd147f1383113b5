from __future__ import annotations

from typing import Dict, List

from .errors import Conflict, NotFound, ValidationError
from .models import CategoryItem
from .records import RecordCollection


class CategoryTable:
    """Per-user mapping of category name to an ordered list of items.

    Categories are created explicitly. Adding an item to a missing category
    fails instead of creating it.
    """

    def __init__(self, categories: Dict[str, List[CategoryItem]]) -> None:
        self._categories = categories

    def __contains__(self, name: object) -> bool:
        return name in self._categories

    def names(self) -> List[str]:
        return list(self._categories)

    def create(self, name: str) -> None:
        if not name or not name.strip():
            raise ValidationError("Category name must not be empty")
        if name in self._categories:
            raise Conflict(f"Category '{name}' already exists")
        self._categories[name] = []

    def delete(self, name: str) -> int:
        """Drop a category with all of its items and return how many went with it."""

        items = self._categories.pop(name, None)
        if items is None:
            raise NotFound(f"Category '{name}' not found")
        return len(items)

    def collection(self, name: str) -> RecordCollection[CategoryItem]:
        items = self._categories.get(name)
        if items is None:
            raise NotFound(f"Category '{name}' not found")
        return RecordCollection(f"category '{name}'", items)

    def items(self, name: str) -> List[CategoryItem]:
        return self.collection(name).list()

    def get_item(self, name: str, index: int) -> CategoryItem:
        return self.collection(name).get(index)

    def add_item(self, name: str, item: CategoryItem) -> int:
        return self.collection(name).add(item)

    def update_item(self, name: str, index: int, item: CategoryItem) -> CategoryItem:
        return self.collection(name).update(index, item)

    def delete_item(self, name: str, index: int) -> CategoryItem:
        return self.collection(name).delete(index)
