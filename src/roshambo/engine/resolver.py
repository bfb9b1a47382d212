"""Outcome resolver — maps two revealed components to a game result.

Resolution is deterministic and total over any two components. The
check order is canonical:
1. Host's component beats the challenger's → host wins.
2. Challenger's component beats the host's → challenger wins.
3. Host's component lists the challenger's as beating it → challenger wins.
4. Challenger's component lists the host's as beating it → host wins.
5. Otherwise → draw.

Steps 3 and 4 are unreachable under a fully populated format. They keep
resolution correct when only one direction of the relation was recorded.

When a format is supplied, relations are read from the format's own
definition of each component name rather than from the submitted copy.
"""

from __future__ import annotations

import enum
from typing import Optional

from roshambo.models.format import Component, Format
from roshambo.models.records import Draw, GameResult, Move, Reveal, Win


class Outcome(str, enum.Enum):
    """Role-relative outcome of one game."""
    HOST_WINS = "host_wins"
    CHALLENGER_WINS = "challenger_wins"
    DRAW = "draw"


def resolve(
    host_component: Component,
    challenger_component: Component,
    fmt: Optional[Format] = None,
) -> Outcome:
    """Resolve the outcome of host vs. challenger."""
    host = _canonical(host_component, fmt)
    challenger = _canonical(challenger_component, fmt)

    if host.beats(challenger.name):
        return Outcome.HOST_WINS
    if challenger.beats(host.name):
        return Outcome.CHALLENGER_WINS
    if host.beaten_by(challenger.name):
        return Outcome.CHALLENGER_WINS
    if challenger.beaten_by(host.name):
        return Outcome.HOST_WINS
    return Outcome.DRAW


def build_result(
    reveal: Reveal,
    move_address: str,
    move: Move,
    host_id: str,
    fmt: Optional[Format] = None,
) -> GameResult:
    """Build the authoritative GameResult for a revealed move.

    Pure: every observer replaying this over the same public inputs
    derives the identical result.
    """
    challenger_id = move.challenger_id
    outcome = resolve(move.component, reveal.component, fmt)

    if outcome == Outcome.HOST_WINS:
        return Win(
            reveal=reveal,
            move_address=move_address,
            winner_id=host_id,
            loser_id=challenger_id,
            format_id=move.format_id,
        )
    if outcome == Outcome.CHALLENGER_WINS:
        return Win(
            reveal=reveal,
            move_address=move_address,
            winner_id=challenger_id,
            loser_id=host_id,
            format_id=move.format_id,
        )
    return Draw(
        reveal=reveal,
        move_address=move_address,
        players=(host_id, challenger_id),
        format_id=move.format_id,
    )


def _canonical(component: Component, fmt: Optional[Format]) -> Component:
    """Prefer the format's definition of a component name."""
    if fmt is None:
        return component
    defined = fmt.component(component.name)
    return defined if defined is not None else component
