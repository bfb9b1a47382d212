"""Collaborator contracts for the protocol core.

The validators never reach into a concrete store, identity registry or
config object. They depend only on these read-only interfaces, which
are injected at construction time. Any replica implementation that
satisfies them can run the validators.
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from roshambo.models.format import Format
from roshambo.models.records import Record
from roshambo.models.verdict import Verdict


class RecordNotFound(LookupError):
    """Raised when a content address does not resolve to a stored record."""

    def __init__(self, address: str, expected: str = "record") -> None:
        super().__init__(f"No {expected} found at {address}")
        self.address = address
        self.expected = expected


class ValidationRejected(Exception):
    """Raised by a ledger when a candidate record fails validation."""

    def __init__(self, verdict: Verdict) -> None:
        kind = verdict.rejection.value if verdict.rejection else "unknown"
        super().__init__(f"{kind}: {verdict.reason}")
        self.verdict = verdict


@runtime_checkable
class RecordSource(Protocol):
    """Read-only access to records already accepted onto the ledger."""

    def get(self, address: str) -> Record:
        """Return the record at ``address`` or raise RecordNotFound."""
        ...

    def author_of(self, address: str) -> str:
        """Identity that authored the record at ``address``.

        Raises RecordNotFound for unknown addresses.
        """
        ...


@runtime_checkable
class IdentityLookup(Protocol):
    """Directory of known agent identities."""

    def exists(self, identity: str) -> bool:
        ...


@runtime_checkable
class FormatCatalogue(Protocol):
    """Read-only lookup of game formats by id."""

    def format(self, format_id: str) -> Optional[Format]:
        ...
