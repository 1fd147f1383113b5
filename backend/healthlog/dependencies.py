from __future__ import annotations

from typing import Optional

from fastapi import Header, Request

from .errors import UnknownSession
from .services import HealthStore

BEARER_PREFIX = "Bearer "


def get_store(request: Request) -> HealthStore:
    return request.app.state.store


def bearer_token(authorization: Optional[str] = Header(default=None)) -> str:
    """Extract ``<token>`` from ``Authorization: Bearer <token>``."""

    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise UnknownSession()
    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise UnknownSession()
    return token
