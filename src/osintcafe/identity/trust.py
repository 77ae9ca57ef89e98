"""Local trust heuristics used when the ledger cannot answer."""

from __future__ import annotations

import re

from osintcafe.constants import (
    IDENTITY_AGES,
    SCORE_MAX,
    TRUST_BASE_SCORE,
    TRUST_DIGIT_BONUS,
    TRUST_LONG_SUBJECT_BONUS,
    TRUST_LONG_SUBJECT_LENGTH,
    TRUST_PRINCIPAL_SHAPE_BONUS,
)

# Canonical self-authenticating principal text form
_PRINCIPAL_SHAPE = re.compile(
    r"[a-z0-9]{5}-[a-z0-9]{5}-[a-z0-9]{5}-[a-z0-9]{5}-[a-z0-9]{3}"
)


def calculate_trust_score(subject: str) -> int:
    """Score a subject identifier by its shape, capped at 100."""
    score = TRUST_BASE_SCORE
    if len(subject) > TRUST_LONG_SUBJECT_LENGTH:
        score += TRUST_LONG_SUBJECT_BONUS
    if any(ch.isdigit() for ch in subject):
        score += TRUST_DIGIT_BONUS
    if _PRINCIPAL_SHAPE.search(subject):
        score += TRUST_PRINCIPAL_SHAPE_BONUS
    return min(score, SCORE_MAX)


def _subject_hash(subject: str) -> int:
    """31-multiplier string hash wrapped to a signed 32-bit int."""
    acc = 0
    for ch in subject:
        acc = ((acc << 5) - acc + ord(ch)) & 0xFFFFFFFF
    return acc - (1 << 32) if acc & 0x80000000 else acc


def estimate_identity_age(subject: str) -> str:
    """Deterministic age bucket for a subject without ledger history."""
    return IDENTITY_AGES[abs(_subject_hash(subject)) % len(IDENTITY_AGES)]
