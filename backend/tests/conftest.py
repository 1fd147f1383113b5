"""Shared fixtures: a store on a temp file, a registered user and an HTTP client."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from healthlog.main import create_app
from healthlog.services import HealthStore


@pytest.fixture
def storage_path(tmp_path: Path) -> Path:
    return tmp_path / "storage.json"


@pytest.fixture
def store(storage_path: Path) -> HealthStore:
    return HealthStore(storage_path)


@pytest.fixture
def alice(store: HealthStore) -> str:
    """Register alice and return a session token for her."""
    store.register("alice", 30, 70.0, 1.75, "pw", "female")
    return store.login("alice", "pw")


@pytest.fixture
def bob(store: HealthStore) -> str:
    store.register("bob", 41, 82.5, 1.8, "secret", "male")
    return store.login("bob", "secret")


@pytest.fixture
def client(store: HealthStore) -> Iterator[TestClient]:
    with TestClient(create_app(store)) as test_client:
        yield test_client