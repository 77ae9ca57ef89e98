"""Identity session ownership and identity-gated ledger operations."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, cast

from osintcafe.constants import SCORE_MAX, SCORE_MIN, ErrorKind
from osintcafe.identity.ledger import LedgerClient
from osintcafe.resilience.errors import LedgerError, UnauthenticatedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IdentitySession:
    """Read-only snapshot of the current authentication state."""

    authenticated: bool = False
    subject: str | None = None
    trust_score: int | None = None


ANONYMOUS = IdentitySession()


class IdentityManager:
    """Owns one IdentitySession; callers only ever see snapshots.

    Remote operations require an active session and raise
    UnauthenticatedError before any network call otherwise.
    """

    def __init__(self, ledger: LedgerClient) -> None:
        self._ledger = ledger
        self._session = ANONYMOUS

    @property
    def is_authenticated(self) -> bool:
        return self._session.authenticated

    def snapshot(self) -> IdentitySession:
        return self._session

    async def login(self, subject: str) -> IdentitySession:
        """Start a session for a subject yielded by the login flow.

        Fetches the ledger profile best-effort to seed the trust
        score; an unreachable ledger still yields a valid session.
        """
        subject = subject.strip()
        if not subject:
            raise ValueError("subject must be a non-empty identifier")
        self._session = IdentitySession(authenticated=True, subject=subject)

        if self._ledger.configured:
            try:
                profile = await self.who_am_i()
            except LedgerError as exc:
                logger.warning(
                    "event=whoami_failed subject=%s reason=%s",
                    subject,
                    exc.kind,
                )
            else:
                trust = profile.get("trust_score")
                if isinstance(trust, int):
                    self._session = replace(
                        self._session,
                        trust_score=max(SCORE_MIN, min(SCORE_MAX, trust)),
                    )

        logger.info("event=identity_login subject=%s", subject)
        return self._session

    def logout(self) -> None:
        if self._session.authenticated:
            logger.info(
                "event=identity_logout subject=%s", self._session.subject
            )
        self._session = ANONYMOUS

    def _require_subject(self, operation: str) -> str:
        if not self._session.authenticated or not self._session.subject:
            raise UnauthenticatedError(operation)
        return self._session.subject

    async def who_am_i(self) -> dict[str, Any]:
        subject = self._require_subject("who_am_i")
        result = await self._ledger.call("who_am_i", subject)
        if not isinstance(result, dict):
            return {"principal": subject}
        return cast(dict[str, Any], result)

    async def update_trust_score(self, score: int) -> str:
        subject = self._require_subject("update_trust_score")
        if not SCORE_MIN <= score <= SCORE_MAX:
            raise ValueError("trust score must be within 0-100")
        result = await self._ledger.call(
            "update_trust_score", subject, [score]
        )
        self._session = replace(self._session, trust_score=score)
        return str(result)

    async def set_nickname(self, nickname: str) -> str:
        subject = self._require_subject("set_nickname")
        if not nickname.strip():
            raise ValueError("nickname must not be empty")
        result = await self._ledger.call(
            "set_nickname", subject, [nickname.strip()]
        )
        return str(result)

    async def get_stats(self) -> dict[str, int]:
        subject = self._require_subject("get_stats")
        result: Any = await self._ledger.call("get_stats", subject)
        stats: dict[str, int] = {}
        try:
            if isinstance(result, dict):
                items = cast(dict[str, Any], result).items()
                for key, value in items:
                    stats[str(key)] = int(value)
            elif isinstance(result, list):
                # Candid Vec<(Text, Nat64)> arrives as [[key, value], ...]
                for pair in cast(list[Any], result):
                    key, value = pair
                    stats[str(key)] = int(value)
        except (TypeError, ValueError, OverflowError) as exc:
            raise LedgerError(
                "get_stats", f"malformed stats: {exc}", ErrorKind.UNPARSEABLE
            ) from exc
        return stats
