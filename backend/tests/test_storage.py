"""Persistence codec: document shape, tolerant loading and byte-stable saves."""

import json
import logging
from pathlib import Path

from healthlog import storage
from healthlog.models import ActivityRecord, CategoryItem, RecordKind, SleepRecord, WaterRecord
from healthlog.registry import UserRegistry


def _populated() -> UserRegistry:
    registry = UserRegistry()
    registry.register("alice", 30, 70.0, 1.75, "pw", "female")
    registry.register("bob", 41, 82.5, 1.8, "secret", "male")

    registry.records("alice", RecordKind.water).add(WaterRecord(timestamp="2024-01-01T08:00:00Z", amount_ml=250))
    registry.records("alice", RecordKind.sleep).add(SleepRecord(timestamp="2024-01-01T23:00:00Z", hours=7.5))
    registry.records("bob", RecordKind.activity).add(
        ActivityRecord(timestamp="2024-01-02T18:00:00Z", minutes=45, intensity="high")
    )

    categories = registry.categories("alice")
    categories.create("weight")
    categories.create("mood")
    categories.create("empty")
    categories.add_item("mood", CategoryItem(timestamp="2024-01-01T12:00:00Z", note="great", value=1.5))
    return registry


def test_document_has_every_field() -> None:
    document = storage.encode(_populated())
    alice = document["users"][0]

    assert list(alice) == [
        "id", "name", "age", "weightKg", "heightM", "gender", "password",
        "waters", "sleeps", "activities", "categories",
    ]
    assert alice["waters"] == [{"datetime": "2024-01-01T08:00:00Z", "amountMl": 250.0}]
    assert alice["sleeps"] == [{"datetime": "2024-01-01T23:00:00Z", "hours": 7.5}]
    assert alice["categories"]["mood"] == [{"datetime": "2024-01-01T12:00:00Z", "note": "great", "value": 1.5}]
    assert document["users"][1]["activities"] == [
        {"datetime": "2024-01-02T18:00:00Z", "minutes": 45, "intensity": "high"}
    ]


def test_categories_keep_creation_order_on_disk(tmp_path: Path) -> None:
    path = tmp_path / "storage.json"
    storage.save(_populated(), path)
    payload = json.loads(path.read_text(encoding="utf-8"))
    assert list(payload["users"][0]["categories"]) == ["weight", "mood", "empty"]


def test_saving_unchanged_registry_is_byte_stable(tmp_path: Path) -> None:
    registry = _populated()
    path = tmp_path / "storage.json"

    assert storage.save(registry, path)
    first = path.read_bytes()
    assert storage.save(registry, path)

    assert path.read_bytes() == first
    assert storage.dumps(registry) == storage.dumps(storage.load(path))


def test_round_trip_preserves_everything(tmp_path: Path) -> None:
    registry = _populated()
    registry.register("carol", 25, 55.0, 1.62, "pw3", "")
    path = tmp_path / "storage.json"

    storage.save(registry, path)
    loaded = storage.load(path)

    assert loaded == registry
    assert loaded.get("alice").categories["empty"] == []
    assert loaded.get("carol").waters == []


def test_missing_file_is_empty_registry(tmp_path: Path) -> None:
    assert len(storage.load(tmp_path / "absent.json")) == 0


def test_corrupt_file_is_empty_registry(tmp_path: Path, caplog) -> None:
    path = tmp_path / "storage.json"
    path.write_text("{ not json", encoding="utf-8")

    with caplog.at_level(logging.WARNING, logger="healthlog.storage"):
        registry = storage.load(path)

    assert len(registry) == 0
    assert "Failed to parse" in caplog.text


def test_document_without_users_list_is_empty(tmp_path: Path) -> None:
    path = tmp_path / "storage.json"
    path.write_text(json.dumps({"users": {"alice": {}}}), encoding="utf-8")
    assert len(storage.load(path)) == 0


def test_missing_fields_take_zero_defaults() -> None:
    registry = storage.decode(
        {
            "users": [
                {"name": "dora", "waters": [{"amountMl": 300}], "categories": {"mood": [{}]}},
            ]
        }
    )
    dora = registry.get("dora")

    assert dora.id == "dora"
    assert (dora.age, dora.weight_kg, dora.height_m, dora.gender, dora.password) == (0, 0.0, 0.0, "", "")
    assert dora.waters == [WaterRecord(timestamp="", amount_ml=300)]
    assert dora.sleeps == [] and dora.activities == []
    assert dora.categories["mood"] == [CategoryItem(timestamp="", note="", value=0.0)]


def test_unusable_entries_are_skipped() -> None:
    registry = storage.decode(
        {
            "users": [
                "not a user",
                {"age": 20},
                {"name": "eve", "age": "old"},
                {"name": "finn", "age": 22, "waters": "none", "categories": {"mood": "x"}},
            ]
        }
    )
    assert registry.names() == ["finn"]
    finn = registry.get("finn")
    assert finn.waters == []
    assert finn.categories == {}


def test_malformed_list_items_are_dropped_not_the_user(caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="healthlog.models"):
        registry = storage.decode(
            {
                "users": [
                    {
                        "name": "dora",
                        "age": 3,
                        "waters": [{"amountMl": 5}, 7, {"amountMl": "lots"}],
                        "sleeps": [None, {"hours": 8}],
                        "categories": {"mood": ["meh", {"note": "ok", "value": 2}]},
                    }
                ]
            }
        )

    assert registry.names() == ["dora"]
    dora = registry.get("dora")
    assert dora.age == 3
    assert dora.waters == [WaterRecord(timestamp="", amount_ml=5)]
    assert dora.sleeps == [SleepRecord(timestamp="", hours=8)]
    assert dora.categories["mood"] == [CategoryItem(timestamp="", note="ok", value=2)]
    assert "Dropping waters[1]" in caplog.text
    assert "Dropping waters[2]" in caplog.text
    assert "Dropping categories.mood[0]" in caplog.text


def test_save_failure_returns_false(tmp_path: Path, caplog) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")

    with caplog.at_level(logging.WARNING, logger="healthlog.storage"):
        assert storage.save(_populated(), blocker / "storage.json") is False

    assert "for writing" in caplog.text
