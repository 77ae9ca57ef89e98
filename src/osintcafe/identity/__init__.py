"""Identity sessions, ledger gateway, and local trust heuristics."""

from osintcafe.identity.ledger import LedgerClient
from osintcafe.identity.session import (
    ANONYMOUS,
    IdentityManager,
    IdentitySession,
)
from osintcafe.identity.trust import (
    calculate_trust_score,
    estimate_identity_age,
)

__all__ = [
    "ANONYMOUS",
    "IdentityManager",
    "IdentitySession",
    "LedgerClient",
    "calculate_trust_score",
    "estimate_identity_age",
]
