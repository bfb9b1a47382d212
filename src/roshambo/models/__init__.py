"""Core data models for the roshambo ledger."""

from roshambo.models.format import Component, Format
from roshambo.models.records import (
    Commitment,
    Draw,
    EntryType,
    GameResult,
    Move,
    Offer,
    Record,
    Reveal,
    Win,
    record_from_dict,
    result_from_dict,
)
from roshambo.models.verdict import RejectionKind, Verdict

__all__ = [
    "Component",
    "Format",
    "Commitment",
    "Draw",
    "EntryType",
    "GameResult",
    "Move",
    "Offer",
    "Record",
    "Reveal",
    "Win",
    "record_from_dict",
    "result_from_dict",
    "RejectionKind",
    "Verdict",
]
