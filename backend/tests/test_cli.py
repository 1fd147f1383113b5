"""Storage console commands."""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from healthlog.cli import app
from healthlog.services import HealthStore

runner = CliRunner()


@pytest.fixture
def populated(storage_path: Path) -> Path:
    store = HealthStore(storage_path)
    store.register("alice", 30, 70.0, 1.75, "pw", "female")
    token = store.login("alice", "pw")
    store.add_water(token, "2024-01-01T08:00:00Z", 250)
    store.add_activity(token, "2024-01-02T07:00:00Z", 30, "moderate")
    store.create_category(token, "mood")
    store.add_category_item(token, "mood", "2024-01-01T12:00:00Z", "fine")
    return storage_path


def test_users_table(populated: Path) -> None:
    result = runner.invoke(app, ["--storage", str(populated), "users"])
    assert result.exit_code == 0
    assert "alice" in result.output
    assert "Waters" in result.output


def test_users_empty(tmp_path: Path) -> None:
    result = runner.invoke(app, ["--storage", str(tmp_path / "none.json"), "users"])
    assert result.exit_code == 0
    assert "No users stored." in result.output


def test_show_includes_bmi(populated: Path) -> None:
    result = runner.invoke(app, ["--storage", str(populated), "show", "alice"])
    assert result.exit_code == 0
    assert "bmi" in result.output
    assert "22.857" in result.output
    assert "pw" not in result.output


def test_show_unknown_user(populated: Path) -> None:
    result = runner.invoke(app, ["--storage", str(populated), "show", "nobody"])
    assert result.exit_code == 1


def test_records_by_kind(populated: Path) -> None:
    water = runner.invoke(app, ["--storage", str(populated), "records", "alice"])
    assert water.exit_code == 0
    assert "amountMl" in water.output and "250" in water.output

    activity = runner.invoke(app, ["--storage", str(populated), "records", "alice", "--kind", "activity"])
    assert "moderate" in activity.output

    sleep = runner.invoke(app, ["--storage", str(populated), "records", "alice", "-k", "sleep"])
    assert "(none)" in sleep.output


def test_categories(populated: Path) -> None:
    listing = runner.invoke(app, ["--storage", str(populated), "categories", "alice"])
    assert "mood" in listing.output

    items = runner.invoke(app, ["--storage", str(populated), "categories", "alice", "--category", "mood"])
    assert "fine" in items.output

    missing = runner.invoke(app, ["--storage", str(populated), "categories", "alice", "-c", "sleep"])
    assert missing.exit_code == 1
