"""Content-addressed ledger — one replica of the shared game ledger.

Records are appended, never modified or deleted. Each record is stored
under a content address derived from its type, author and canonical
content, so
a record cannot reference a successor: the successor's address is not
known until it exists. That is the only ordering primitive the protocol
relies on.

Every put is validated by the injected RecordValidator against the
records already held by this replica. Rejected records are never stored.

The ledger can be persisted to a JSONL file (one record per line) and
loaded back. Loading is fail-closed: every address is recomputed from
content (tamper check) and every record is re-validated in order.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from roshambo.crypto.commit import content_address
from roshambo.ledger.interfaces import RecordNotFound, ValidationRejected
from roshambo.models.records import (
    Commitment,
    Draw,
    EntryType,
    GameResult,
    Move,
    Offer,
    Record,
    Win,
    record_from_dict,
)
from roshambo.models.verdict import Verdict

if TYPE_CHECKING:
    from roshambo.engine.validators import RecordValidator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerEntry:
    """A stored record with its address and authoring identity."""
    address: str
    record: Record
    author: str

    @property
    def entry_type(self) -> EntryType:
        return self.record.entry_type


def address_of(record: Record, author: str) -> str:
    """Content address of a record as submitted by an author."""
    return content_address(record.entry_type.value, author, record.to_dict())


class Ledger:
    """Append-only, content-addressed record store with validation on put.

    Usage:
        ledger = Ledger(RecordValidator(identities, resolver))
        address = ledger.put(Offer(challenger_id="bob", format_id="classic"), "alice")
        offer = ledger.get_offer(address)
        ledger.author_of(address)  # "alice"
    """

    def __init__(
        self,
        validator: RecordValidator,
        storage_path: Optional[Path] = None,
    ) -> None:
        self._validator = validator
        self._storage_path = storage_path
        self._entries: dict[str, LedgerEntry] = {}
        self._order: list[str] = []

        if storage_path and storage_path.exists():
            self._load_from_file(storage_path)

    # ------------------------------------------------------------------
    # Store
    # ------------------------------------------------------------------

    def put(self, record: Record, author: str) -> str:
        """Validate and append a record. Returns its content address.

        Raises ValidationRejected if the record fails validation.
        Resubmitting a record already held for the same author yields
        the same address and stores nothing new.
        """
        verdict = self._validator.validate(record, author, self)
        if not verdict.accepted:
            raise ValidationRejected(verdict)

        address = address_of(record, author)
        if address in self._entries:
            return address

        entry = LedgerEntry(address=address, record=record, author=author)
        self._entries[address] = entry
        self._order.append(address)
        logger.debug("Accepted %s %s by %s", record.entry_type.value, address, author)

        if self._storage_path:
            self._append_to_file(entry)
        return address

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get(self, address: str) -> Record:
        entry = self._entries.get(address)
        if entry is None:
            raise RecordNotFound(address)
        return entry.record

    def author_of(self, address: str) -> str:
        entry = self._entries.get(address)
        if entry is None:
            raise RecordNotFound(address)
        return entry.author

    def contains(self, address: str) -> bool:
        return address in self._entries

    def get_offer(self, address: str) -> Offer:
        return self._typed(address, Offer, "offer")

    def get_commitment(self, address: str) -> Commitment:
        return self._typed(address, Commitment, "commitment")

    def get_move(self, address: str) -> Move:
        return self._typed(address, Move, "move")

    def get_result(self, address: str) -> GameResult:
        return self._typed(address, (Win, Draw), "game result")

    def entries(self, entry_type: Optional[EntryType] = None) -> list[LedgerEntry]:
        """Return entries in insertion order, optionally filtered by type."""
        result = [self._entries[a] for a in self._order]
        if entry_type is None:
            return result
        return [e for e in result if e.entry_type == entry_type]

    @property
    def count(self) -> int:
        return len(self._order)

    def count_by_type(self) -> dict[str, int]:
        counts = {t.value: 0 for t in EntryType}
        for entry in self._entries.values():
            counts[entry.entry_type.value] += 1
        return counts

    # ------------------------------------------------------------------
    # Replay and replication
    # ------------------------------------------------------------------

    def replay(self) -> list[tuple[str, Verdict]]:
        """Re-validate every stored record in insertion order.

        Validation is a pure function of already-durable predecessors,
        so every verdict on an untampered ledger is an acceptance.
        """
        return [
            (address, self._validator.validate(
                self._entries[address].record, self._entries[address].author, self,
            ))
            for address in self._order
        ]

    def replicate_to(self, other: Ledger) -> int:
        """Feed every record through another replica's validation.

        Returns the number of records new to ``other``. Raises
        ValidationRejected if the other replica rejects a record.
        """
        added = 0
        for address in self._order:
            entry = self._entries[address]
            if other.contains(address):
                continue
            other.put(entry.record, entry.author)
            added += 1
        return added

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _typed(self, address: str, expected: type | tuple, label: str):
        entry = self._entries.get(address)
        if entry is None or not isinstance(entry.record, expected):
            raise RecordNotFound(address, label)
        return entry.record

    def _append_to_file(self, entry: LedgerEntry) -> None:
        line = {
            "address": entry.address,
            "entry_type": entry.entry_type.value,
            "author": entry.author,
            "content": entry.record.to_dict(),
        }
        with self._storage_path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(line, sort_keys=True, ensure_ascii=False) + "\n")

    def _load_from_file(self, path: Path) -> None:
        """Load records with integrity verification and re-validation.

        Fail-closed: rejects tampered lines (address mismatch),
        duplicate addresses, and records that no longer validate.
        """
        with path.open("r", encoding="utf-8") as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                data = json.loads(line)

                entry_type = EntryType(data["entry_type"])
                expected_address = content_address(
                    entry_type.value, data["author"], data["content"],
                )
                if data["address"] != expected_address:
                    raise ValueError(
                        f"Integrity check failed (line {line_num}): stored address "
                        f"{data['address']} != computed {expected_address}"
                    )
                if expected_address in self._entries:
                    raise ValueError(
                        f"Duplicate address on recovery (line {line_num}): {expected_address}"
                    )

                record = record_from_dict(entry_type, data["content"])
                verdict = self._validator.validate(record, data["author"], self)
                if not verdict.accepted:
                    raise ValueError(
                        f"Validation failed on recovery (line {line_num}): "
                        f"{verdict.rejection.value}: {verdict.reason}"
                    )

                self._entries[expected_address] = LedgerEntry(
                    address=expected_address, record=record, author=data["author"],
                )
                self._order.append(expected_address)
