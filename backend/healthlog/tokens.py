from __future__ import annotations

import secrets

from .config import TOKEN_ALPHABET, TOKEN_LENGTH


def generate_token(length: int = TOKEN_LENGTH) -> str:
    """Return an opaque session token drawn uniformly from ``[0-9A-Za-z]``."""

    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(length))
