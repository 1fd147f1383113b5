"""Session token generation and the session map."""

import string

from healthlog.sessions import SessionManager
from healthlog.tokens import generate_token

ALPHANUMERIC = set(string.ascii_letters + string.digits)


def test_generate_token_is_32_alphanumeric_chars() -> None:
    token = generate_token()
    assert len(token) == 32
    assert set(token) <= ALPHANUMERIC


def test_generate_token_differs_between_calls() -> None:
    assert len({generate_token() for _ in range(50)}) == 50


def test_issue_redraws_on_collision() -> None:
    draws = iter(["same", "same", "other"])
    sessions = SessionManager(token_factory=lambda: next(draws))
    assert sessions.issue("alice") == "same"
    assert sessions.issue("bob") == "other"
    assert sessions.resolve("same") == "alice"
    assert sessions.resolve("other") == "bob"


def test_multiple_sessions_per_user_and_revoke() -> None:
    sessions = SessionManager()
    first = sessions.issue("alice")
    second = sessions.issue("alice")
    kept = sessions.issue("bob")

    assert first != second
    assert sessions.revoke_user("alice") == 2
    assert sessions.resolve(first) is None
    assert sessions.resolve(second) is None
    assert sessions.resolve(kept) == "bob"


def test_resolve_empty_token() -> None:
    assert SessionManager().resolve("") is None
