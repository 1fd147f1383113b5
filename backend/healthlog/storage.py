from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Union

from pydantic import ValidationError as SchemaError

from .models import UserRecord
from .registry import UserRegistry

_logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def encode(registry: UserRegistry) -> Dict[str, Any]:
    return {"users": [user.to_document() for user in registry]}


def dumps(registry: UserRegistry) -> str:
    return json.dumps(encode(registry), indent=2, ensure_ascii=False)


def decode(payload: Any) -> UserRegistry:
    registry = UserRegistry()
    users = payload.get("users") if isinstance(payload, dict) else None
    if not isinstance(users, list):
        _logger.warning("Storage document has no users list, starting empty")
        return registry

    for raw in users:
        if not isinstance(raw, dict) or not raw.get("name"):
            continue
        try:
            user = UserRecord.model_validate(raw)
        except SchemaError as err:
            _logger.warning("Skipping unreadable user entry %r: %s", raw.get("name"), err)
            continue
        registry.add(user)
    return registry


def load(path: PathLike) -> UserRegistry:
    """Read the storage file. A missing or corrupt file yields an empty registry."""

    path = Path(path)
    if not path.exists():
        _logger.info("No storage file at %s, starting empty", path)
        return UserRegistry()
    try:
        with path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
    except (OSError, ValueError) as err:
        _logger.warning("Failed to parse %s, starting empty: %s", path, err)
        return UserRegistry()

    registry = decode(payload)
    _logger.info("Loaded %d user(s) from %s", len(registry), path)
    return registry


def save(registry: UserRegistry, path: PathLike) -> bool:
    """Rewrite the storage file with the whole registry.

    The document goes to a sibling temp file first and is then moved over the
    target. Returns False, after logging, when the file cannot be written.
    """

    path = Path(path)
    payload = dumps(registry)
    staging = path.with_name(path.name + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with staging.open("w", encoding="utf-8") as handle:
            handle.write(payload)
        os.replace(staging, path)
    except OSError as err:
        _logger.warning("Failed to open %s for writing: %s", path, err)
        return False
    return True
