"""CategoryTable: explicit creation, ordering and the no-auto-create guard."""

import pytest

from healthlog.categories import CategoryTable
from healthlog.errors import Conflict, NotFound, ValidationError
from healthlog.models import CategoryItem


def _item(note: str) -> CategoryItem:
    return CategoryItem(timestamp="2024-01-01T09:00:00Z", note=note)


def test_add_item_to_missing_category_does_not_create_it() -> None:
    backing: dict = {}
    table = CategoryTable(backing)

    with pytest.raises(NotFound):
        table.add_item("mood", _item("fine"))

    assert "mood" not in table
    assert backing == {}


def test_create_keeps_creation_order() -> None:
    table = CategoryTable({})
    for name in ["weight", "mood", "blood pressure"]:
        table.create(name)
    assert table.names() == ["weight", "mood", "blood pressure"]


@pytest.mark.parametrize("name", ["", "   "])
def test_create_rejects_blank_names(name: str) -> None:
    table = CategoryTable({})
    with pytest.raises(ValidationError):
        table.create(name)
    assert table.names() == []


def test_create_rejects_duplicates() -> None:
    table = CategoryTable({})
    table.create("mood")
    table.add_item("mood", _item("ok"))
    with pytest.raises(Conflict):
        table.create("mood")
    assert len(table.items("mood")) == 1


def test_delete_removes_items() -> None:
    table = CategoryTable({})
    table.create("mood")
    table.add_item("mood", _item("a"))
    table.add_item("mood", _item("b"))

    assert table.delete("mood") == 2
    assert table.names() == []
    with pytest.raises(NotFound):
        table.items("mood")
    with pytest.raises(NotFound):
        table.delete("mood")


def test_item_crud_is_index_based() -> None:
    table = CategoryTable({})
    table.create("mood")
    assert table.add_item("mood", _item("a")) == 0
    assert table.add_item("mood", _item("b")) == 1

    table.update_item("mood", 1, _item("B"))
    table.delete_item("mood", 0)

    assert [item.note for item in table.items("mood")] == ["B"]
    with pytest.raises(NotFound):
        table.get_item("mood", 1)
    with pytest.raises(NotFound):
        table.get_item("missing", 0)
