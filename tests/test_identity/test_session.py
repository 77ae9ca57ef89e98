"""Tests for identity session ownership and gated ledger operations."""

from __future__ import annotations

import json

import httpx
import pytest

from osintcafe.constants import ErrorKind
from osintcafe.identity.ledger import LedgerClient
from osintcafe.identity.session import ANONYMOUS, IdentityManager
from osintcafe.resilience.errors import LedgerError, UnauthenticatedError


class _Ledger:
    """Routes ledger method calls to canned JSON responses."""

    def __init__(self, responses: dict[str, httpx.Response]) -> None:
        self.responses = responses
        self.calls: list[tuple[str, dict[str, object]]] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        method = request.url.path.rsplit("/", 1)[-1]
        self.calls.append((method, json.loads(request.content)))
        return self.responses.get(
            method, httpx.Response(404, text="no such method")
        )

    def manager(self, base_url: str = "https://ledger.test") -> IdentityManager:
        client = LedgerClient(
            base_url, "canister-1", 5.0, transport=httpx.MockTransport(self)
        )
        return IdentityManager(client)


@pytest.fixture
def ledger() -> _Ledger:
    return _Ledger({
        "who_am_i": httpx.Response(
            200, json={"principal": "me-123", "trust_score": 77}
        ),
        "get_stats": httpx.Response(
            200, json=[["total_users", 5], ["verified_users", 2]]
        ),
        "update_trust_score": httpx.Response(
            200, json={"Ok": "Trust score updated"}
        ),
        "set_nickname": httpx.Response(200, json={"Ok": "Nickname set"}),
    })


class TestSessionLifecycle:
    def test_starts_anonymous(self, ledger: _Ledger) -> None:
        manager = ledger.manager()
        assert manager.is_authenticated is False
        assert manager.snapshot() == ANONYMOUS

    async def test_login_seeds_trust_from_ledger(self, ledger: _Ledger) -> None:
        manager = ledger.manager()

        session = await manager.login(" me-123 ")

        assert session.authenticated is True
        assert session.subject == "me-123"
        assert session.trust_score == 77
        assert ledger.calls[0] == ("who_am_i", {"caller": "me-123", "args": []})

    async def test_login_survives_ledger_failure(self) -> None:
        broken = _Ledger({})
        session = await broken.manager().login("me-123")
        assert session.authenticated is True
        assert session.trust_score is None

    async def test_login_without_ledger_makes_no_call(self) -> None:
        ledger = _Ledger({})
        session = await ledger.manager(base_url="").login("me-123")
        assert session.authenticated is True
        assert ledger.calls == []

    async def test_blank_subject_rejected(self, ledger: _Ledger) -> None:
        with pytest.raises(ValueError):
            await ledger.manager().login("   ")

    async def test_logout_clears_session(self, ledger: _Ledger) -> None:
        manager = ledger.manager()
        await manager.login("me-123")
        snapshot = manager.snapshot()

        manager.logout()

        assert manager.snapshot() == ANONYMOUS
        # Earlier snapshots are unaffected
        assert snapshot.authenticated is True


class TestGatedOperations:
    @pytest.mark.parametrize(
        ("operation", "args"),
        [
            ("who_am_i", ()),
            ("get_stats", ()),
            ("update_trust_score", (50,)),
            ("set_nickname", ("Kit",)),
        ],
    )
    async def test_require_session(
        self, ledger: _Ledger, operation: str, args: tuple[object, ...]
    ) -> None:
        manager = ledger.manager()
        with pytest.raises(UnauthenticatedError):
            await getattr(manager, operation)(*args)
        assert ledger.calls == []

    async def test_get_stats_pairs(self, ledger: _Ledger) -> None:
        manager = ledger.manager()
        await manager.login("me-123")
        assert await manager.get_stats() == {
            "total_users": 5,
            "verified_users": 2,
        }

    async def test_update_trust_score(self, ledger: _Ledger) -> None:
        manager = ledger.manager()
        await manager.login("me-123")

        message = await manager.update_trust_score(91)

        assert message == "Trust score updated"
        assert manager.snapshot().trust_score == 91
        assert ledger.calls[-1] == (
            "update_trust_score", {"caller": "me-123", "args": [91]}
        )

    async def test_update_trust_score_range(self, ledger: _Ledger) -> None:
        manager = ledger.manager()
        await manager.login("me-123")
        with pytest.raises(ValueError):
            await manager.update_trust_score(101)

    async def test_set_nickname(self, ledger: _Ledger) -> None:
        manager = ledger.manager()
        await manager.login("me-123")
        assert await manager.set_nickname(" Kit ") == "Nickname set"
        assert ledger.calls[-1][1]["args"] == ["Kit"]

    async def test_ledger_rejection_raises(self) -> None:
        ledger = _Ledger({
            "set_nickname": httpx.Response(200, json={"Err": "Taken"}),
        })
        manager = ledger.manager()
        await manager.login("me-123")
        with pytest.raises(LedgerError, match="Taken"):
            await manager.set_nickname("Kit")

    @pytest.mark.parametrize(
        "payload",
        [
            {"total_users": "lots"},
            [["total_users", 5, "extra"]],
            [["total_users", None]],
            ["total_users"],
        ],
    )
    async def test_malformed_stats_raise_ledger_error(
        self, payload: object
    ) -> None:
        ledger = _Ledger({"get_stats": httpx.Response(200, json=payload)})
        manager = ledger.manager()
        await manager.login("me-123")
        with pytest.raises(LedgerError) as excinfo:
            await manager.get_stats()
        assert excinfo.value.kind == ErrorKind.UNPARSEABLE
