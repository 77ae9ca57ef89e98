"""Typed application state and the identity session registry."""

from __future__ import annotations

import logging
import secrets
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass, field

from osintcafe.analysis.orchestrator import AnalysisOrchestrator
from osintcafe.config import Settings
from osintcafe.constants import SESSION_IDLE_SECONDS, SESSION_MAX_COUNT
from osintcafe.identity.ledger import LedgerClient
from osintcafe.identity.session import IdentityManager
from osintcafe.logger import AnalysisLogger
from osintcafe.providers.base import Provider

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    manager: IdentityManager
    last_seen: float


@dataclass
class SessionRegistry:
    """Maps opaque session tokens to per-user identity managers.

    Sessions idle longer than ``idle_seconds`` expire; past
    ``max_sessions`` the least recently used one is evicted.
    """

    ledger: LedgerClient
    idle_seconds: float = SESSION_IDLE_SECONDS
    max_sessions: int = SESSION_MAX_COUNT
    clock: Callable[[], float] = time.monotonic
    _entries: OrderedDict[str, _Entry] = field(
        default_factory=lambda: OrderedDict[str, _Entry]()
    )

    def __len__(self) -> int:
        return len(self._entries)

    def create(self) -> tuple[str, IdentityManager]:
        now = self.clock()
        self._expire(now)
        while len(self._entries) >= self.max_sessions:
            token, entry = self._entries.popitem(last=False)
            entry.manager.logout()
            logger.info("event=session_evicted token=%s", token[:8])
        token = secrets.token_hex(16)
        manager = IdentityManager(self.ledger)
        self._entries[token] = _Entry(manager, now)
        return token, manager

    def get(self, token: str | None) -> IdentityManager | None:
        if not token:
            return None
        now = self.clock()
        self._expire(now)
        entry = self._entries.get(token)
        if entry is None:
            return None
        entry.last_seen = now
        self._entries.move_to_end(token)
        return entry.manager

    def discard(self, token: str) -> None:
        entry = self._entries.pop(token, None)
        if entry is not None:
            entry.manager.logout()

    def _expire(self, now: float) -> None:
        # Entries are kept in last-seen order, oldest first
        while self._entries:
            token, entry = next(iter(self._entries.items()))
            if now - entry.last_seen < self.idle_seconds:
                break
            del self._entries[token]
            entry.manager.logout()


@dataclass
class AppState:
    """Typed container for app.state attributes."""

    settings: Settings
    orchestrator: AnalysisOrchestrator
    providers: dict[str, Provider]
    sessions: SessionRegistry
    logger: AnalysisLogger
