"""Validation verdicts and the rejection taxonomy.

Validators never raise. They return a Verdict: either accepted, or
rejected with exactly one RejectionKind tag and a human-readable reason.
A rejected record is permanently excluded from the ledger.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional


class RejectionKind(str, enum.Enum):
    """Why a record was rejected."""
    NOT_FOUND = "not_found"
    AUTHOR_MISMATCH = "author_mismatch"
    HOST_MISMATCH = "host_mismatch"
    CHALLENGER_MISMATCH = "challenger_mismatch"
    FORMAT_MISMATCH = "format_mismatch"
    HASH_MISMATCH = "hash_mismatch"
    REVEAL_HASH_MISMATCH = "reveal_hash_mismatch"
    INVALID_COMPONENT = "invalid_component"
    RESULT_MISMATCH = "result_mismatch"
    UNKNOWN_CHALLENGER = "unknown_challenger"
    UNKNOWN_IDENTITY = "unknown_identity"
    SELF_CHALLENGE = "self_challenge"


@dataclass(frozen=True)
class Verdict:
    """Outcome of validating one candidate record."""
    accepted: bool
    rejection: Optional[RejectionKind] = None
    reason: str = ""

    @staticmethod
    def accept() -> Verdict:
        return Verdict(accepted=True)

    @staticmethod
    def reject(kind: RejectionKind, reason: str) -> Verdict:
        return Verdict(accepted=False, rejection=kind, reason=reason)

    def __bool__(self) -> bool:
        return self.accepted
