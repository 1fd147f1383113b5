from __future__ import annotations

import logging
from typing import Callable, Dict, Optional

from .tokens import generate_token

_logger = logging.getLogger(__name__)


class SessionManager:
    """Maps issued tokens to user names.

    Sessions never expire and there is no logout; tokens live until the user is
    deleted or the process stops. This mirrors the behaviour the clients rely
    on and is not a security recommendation.
    """

    def __init__(self, token_factory: Callable[[], str] = generate_token) -> None:
        self._token_factory = token_factory
        self._tokens: Dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._tokens)

    def issue(self, name: str) -> str:
        token = self._token_factory()
        while token in self._tokens:
            token = self._token_factory()
        self._tokens[token] = name
        _logger.debug("Issued session for %s", name)
        return token

    def resolve(self, token: str) -> Optional[str]:
        if not token:
            return None
        return self._tokens.get(token)

    def revoke_user(self, name: str) -> int:
        stale = [token for token, owner in self._tokens.items() if owner == name]
        for token in stale:
            del self._tokens[token]
        return len(stale)

    def copy(self) -> "SessionManager":
        clone = SessionManager(self._token_factory)
        clone._tokens = dict(self._tokens)
        return clone
