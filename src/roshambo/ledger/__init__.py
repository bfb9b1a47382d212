"""Ledger layer — content-addressed record store, identities, collaborator interfaces."""

from roshambo.ledger.identity import IdentityDirectory
from roshambo.ledger.interfaces import (
    FormatCatalogue,
    IdentityLookup,
    RecordNotFound,
    RecordSource,
    ValidationRejected,
)
from roshambo.ledger.store import Ledger, LedgerEntry, address_of

__all__ = [
    "IdentityDirectory",
    "FormatCatalogue",
    "IdentityLookup",
    "RecordNotFound",
    "RecordSource",
    "ValidationRejected",
    "Ledger",
    "LedgerEntry",
    "address_of",
]
