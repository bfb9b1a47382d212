"""Identity directory — the agents known to this ledger.

Append-only: identities can be registered but never removed, so a
record accepted because its author was known stays valid on replay.
Optionally persisted as JSONL, one identity per line.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional


class IdentityDirectory:
    """Registry of agent identities with optional file persistence."""

    def __init__(self, storage_path: Optional[Path] = None) -> None:
        self._identities: list[str] = []
        self._known: set[str] = set()
        self._storage_path = storage_path

        if storage_path and storage_path.exists():
            self._load_from_file(storage_path)

    def register(self, identity: str) -> str:
        """Register an identity. Returns the normalised id.

        Raises ValueError for blank or already-registered identities.
        """
        ident = identity.strip()
        if not ident:
            raise ValueError("Identity must not be blank")
        if ident in self._known:
            raise ValueError(f"Identity already registered: {ident}")

        self._identities.append(ident)
        self._known.add(ident)
        if self._storage_path:
            with self._storage_path.open("a", encoding="utf-8") as f:
                f.write(json.dumps({"identity": ident}) + "\n")
        return ident

    def exists(self, identity: str) -> bool:
        return identity in self._known

    def identities(self) -> list[str]:
        return list(self._identities)

    @property
    def count(self) -> int:
        return len(self._identities)

    def _load_from_file(self, path: Path) -> None:
        with path.open("r", encoding="utf-8") as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                ident = json.loads(line)["identity"]
                if ident in self._known:
                    raise ValueError(
                        f"Duplicate identity on recovery (line {line_num}): {ident}"
                    )
                self._identities.append(ident)
                self._known.add(ident)
