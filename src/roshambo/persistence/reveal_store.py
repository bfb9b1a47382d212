"""Private reveal store — the challenger's secret, kept off the ledger.

A Reveal (component + nonce) is created together with a Commitment and
must survive, privately, until the challenger publishes a GameResult.
Losing it makes the game unresolvable by that party. The store is local
to one agent and is never replicated.

Reveals are keyed by the address of the Commitment they open. The store
is rewritten atomically (temp file + rename) on every change.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Optional

from roshambo.models.records import Reveal


class RevealNotFound(LookupError):
    """Raised when no reveal is held for a commitment address."""


class RevealStore:
    """Local, optionally file-backed map of commitment address → Reveal."""

    def __init__(self, storage_path: Optional[Path] = None) -> None:
        self._storage_path = storage_path
        self._reveals: dict[str, Reveal] = {}

        if storage_path and storage_path.exists():
            with storage_path.open("r", encoding="utf-8") as f:
                data = json.load(f)
            self._reveals = {
                address: Reveal.from_dict(item) for address, item in data.items()
            }

    def save(self, commitment_address: str, reveal: Reveal) -> None:
        """Retain a reveal.

        Saving the reveal already held is a no-op. Raises ValueError if a
        different reveal is held for the address.
        """
        held = self._reveals.get(commitment_address)
        if held == reveal:
            return
        if held is not None:
            raise ValueError(f"Reveal already stored for {commitment_address}")
        self._reveals[commitment_address] = reveal
        self._flush()

    def get(self, commitment_address: str) -> Reveal:
        reveal = self._reveals.get(commitment_address)
        if reveal is None:
            raise RevealNotFound(f"No reveal held for commitment {commitment_address}")
        return reveal

    def holds(self, commitment_address: str) -> bool:
        return commitment_address in self._reveals

    def discard(self, commitment_address: str) -> None:
        """Forget a reveal once its result is on the ledger."""
        if self._reveals.pop(commitment_address, None) is not None:
            self._flush()

    def pending(self) -> list[str]:
        """Commitment addresses whose reveal has not yet been published."""
        return list(self._reveals)

    @property
    def count(self) -> int:
        return len(self._reveals)

    def _flush(self) -> None:
        if not self._storage_path:
            return
        data = {address: r.to_dict() for address, r in self._reveals.items()}
        tmp = self._storage_path.with_suffix(self._storage_path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as f:
            json.dump(data, f, sort_keys=True, indent=2)
        os.replace(tmp, self._storage_path)
