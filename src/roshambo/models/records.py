"""Ledger record models — the four stages of one game.

Protocol: Offer → Commitment → Move → GameResult.

Every record but the Offer references its predecessor by content
address. All records are frozen: once constructed (and once accepted
onto the ledger) they never change. The Reveal is never published on
its own; it only appears embedded inside a GameResult.

GameResult is a tagged union (Win | Draw) rather than a class
hierarchy. Consumers match on the ``outcome`` tag.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, ClassVar, Union

from roshambo.models.format import Component


class EntryType(str, enum.Enum):
    """Kinds of record stored on the ledger."""
    OFFER = "offer"
    COMMITMENT = "commitment"
    MOVE = "move"
    GAME_RESULT = "game_result"


@dataclass(frozen=True)
class Offer:
    """Host's invitation to a specific challenger under a named format."""
    challenger_id: str
    format_id: str

    entry_type: ClassVar[EntryType] = EntryType.OFFER

    def to_dict(self) -> dict[str, Any]:
        return {"challenger_id": self.challenger_id, "format_id": self.format_id}

    @staticmethod
    def from_dict(data: dict[str, Any]) -> Offer:
        return Offer(challenger_id=data["challenger_id"], format_id=data["format_id"])


@dataclass(frozen=True)
class Commitment:
    """Challenger's binding hash of a hidden move, accepting an Offer."""
    commit_hash: str
    offer_address: str
    host_id: str
    format_id: str

    entry_type: ClassVar[EntryType] = EntryType.COMMITMENT

    def to_dict(self) -> dict[str, Any]:
        return {
            "commit_hash": self.commit_hash,
            "offer_address": self.offer_address,
            "host_id": self.host_id,
            "format_id": self.format_id,
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> Commitment:
        return Commitment(
            commit_hash=data["commit_hash"],
            offer_address=data["offer_address"],
            host_id=data["host_id"],
            format_id=data["format_id"],
        )


@dataclass(frozen=True)
class Move:
    """Host's move, carrying a copy of the challenger's commit hash."""
    component: Component
    commitment_address: str
    challenger_id: str
    commit_hash: str
    format_id: str

    entry_type: ClassVar[EntryType] = EntryType.MOVE

    def to_dict(self) -> dict[str, Any]:
        return {
            "component": self.component.to_dict(),
            "commitment_address": self.commitment_address,
            "challenger_id": self.challenger_id,
            "commit_hash": self.commit_hash,
            "format_id": self.format_id,
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> Move:
        return Move(
            component=Component.from_dict(data["component"]),
            commitment_address=data["commitment_address"],
            challenger_id=data["challenger_id"],
            commit_hash=data["commit_hash"],
            format_id=data["format_id"],
        )


@dataclass(frozen=True)
class Reveal:
    """Challenger's plaintext move plus the nonce that hashes to the commitment."""
    component: Component
    nonce: str

    def to_dict(self) -> dict[str, Any]:
        return {"component": self.component.to_dict(), "nonce": self.nonce}

    @staticmethod
    def from_dict(data: dict[str, Any]) -> Reveal:
        return Reveal(
            component=Component.from_dict(data["component"]),
            nonce=data["nonce"],
        )


@dataclass(frozen=True)
class Win:
    """Decisive outcome."""
    reveal: Reveal
    move_address: str
    winner_id: str
    loser_id: str
    format_id: str

    entry_type: ClassVar[EntryType] = EntryType.GAME_RESULT
    outcome: ClassVar[str] = "win"

    def to_dict(self) -> dict[str, Any]:
        return {
            "outcome": self.outcome,
            "reveal": self.reveal.to_dict(),
            "move_address": self.move_address,
            "winner_id": self.winner_id,
            "loser_id": self.loser_id,
            "format_id": self.format_id,
        }


@dataclass(frozen=True)
class Draw:
    """Drawn outcome. ``players`` is (host, challenger)."""
    reveal: Reveal
    move_address: str
    players: tuple[str, str]
    format_id: str

    entry_type: ClassVar[EntryType] = EntryType.GAME_RESULT
    outcome: ClassVar[str] = "draw"

    def to_dict(self) -> dict[str, Any]:
        return {
            "outcome": self.outcome,
            "reveal": self.reveal.to_dict(),
            "move_address": self.move_address,
            "players": list(self.players),
            "format_id": self.format_id,
        }


GameResult = Union[Win, Draw]
Record = Union[Offer, Commitment, Move, Win, Draw]


def result_from_dict(data: dict[str, Any]) -> GameResult:
    """Decode a GameResult by its ``outcome`` tag."""
    outcome = data.get("outcome")
    reveal = Reveal.from_dict(data["reveal"])
    if outcome == Win.outcome:
        return Win(
            reveal=reveal,
            move_address=data["move_address"],
            winner_id=data["winner_id"],
            loser_id=data["loser_id"],
            format_id=data["format_id"],
        )
    if outcome == Draw.outcome:
        host_id, challenger_id = data["players"]
        return Draw(
            reveal=reveal,
            move_address=data["move_address"],
            players=(host_id, challenger_id),
            format_id=data["format_id"],
        )
    raise ValueError(f"Unknown game result outcome: {outcome!r}")


def record_from_dict(entry_type: EntryType, data: dict[str, Any]) -> Record:
    """Decode a stored record given its entry type."""
    if entry_type == EntryType.OFFER:
        return Offer.from_dict(data)
    if entry_type == EntryType.COMMITMENT:
        return Commitment.from_dict(data)
    if entry_type == EntryType.MOVE:
        return Move.from_dict(data)
    if entry_type == EntryType.GAME_RESULT:
        return result_from_dict(data)
    raise ValueError(f"Unknown entry type: {entry_type!r}")
