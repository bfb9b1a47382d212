"""Record validators — per-record acceptance rules for the ledger.

Each record fully validates itself against the records it references,
so nothing accepted ever needs re-validating later:
- Offer:      challenger is a known identity (and not the host).
- Commitment: offer.author == host_id, author == offer.challenger_id,
              format ids match.
- Move:       author == commitment.host_id,
              commitment.author == challenger_id, commit hash copied
              exactly, format ids match, component is in the format.
- GameResult: commit(reveal) == move.commit_hash, format ids match,
              author is the challenger, revealed component is in the
              format, and the result equals the one recomputed from the
              public inputs.

Validators are pure functions of (candidate, author, predecessors).
They never raise. A failed check returns a rejected Verdict; the first
failing check wins.
"""

from __future__ import annotations

import logging
from typing import Optional

from roshambo.crypto.commit import verify
from roshambo.engine.resolver import build_result
from roshambo.ledger.interfaces import (
    FormatCatalogue,
    IdentityLookup,
    RecordNotFound,
    RecordSource,
)
from roshambo.models.format import Component
from roshambo.models.records import (
    Commitment,
    Draw,
    EntryType,
    GameResult,
    Move,
    Offer,
    Record,
    Win,
)
from roshambo.models.verdict import RejectionKind, Verdict

logger = logging.getLogger(__name__)


class RecordValidator:
    """Validates candidate records against the ledger they would join.

    Collaborators are injected read-only: an identity directory and a
    format catalogue. The record source is passed per call so the same
    validator can serve any number of replicas.
    """

    def __init__(
        self,
        identities: IdentityLookup,
        formats: FormatCatalogue,
        *,
        enforce_component_membership: bool = True,
        require_distinct_players: bool = True,
    ) -> None:
        self._identities = identities
        self._formats = formats
        self._enforce_membership = enforce_component_membership
        self._require_distinct = require_distinct_players

    def validate(self, record: Record, author: str, source: RecordSource) -> Verdict:
        """Validate any record kind. Dispatches on its entry type."""
        if not self._identities.exists(author):
            verdict = Verdict.reject(
                RejectionKind.UNKNOWN_IDENTITY, f"Unknown author identity: {author}",
            )
        elif record.entry_type == EntryType.OFFER:
            verdict = self.validate_offer(record, author)
        elif record.entry_type == EntryType.COMMITMENT:
            verdict = self.validate_commitment(record, author, source)
        elif record.entry_type == EntryType.MOVE:
            verdict = self.validate_move(record, author, source)
        else:
            verdict = self.validate_result(record, author, source)

        if not verdict.accepted:
            logger.info(
                "Rejected %s by %s: %s (%s)",
                record.entry_type.value, author, verdict.rejection.value, verdict.reason,
            )
        return verdict

    def validate_offer(self, offer: Offer, author: str) -> Verdict:
        if not self._identities.exists(offer.challenger_id):
            return Verdict.reject(
                RejectionKind.UNKNOWN_CHALLENGER,
                f"Challenger is not a known identity: {offer.challenger_id}",
            )
        if self._require_distinct and offer.challenger_id == author:
            return Verdict.reject(
                RejectionKind.SELF_CHALLENGE,
                f"Host {author} cannot challenge themself",
            )
        return Verdict.accept()

    def validate_commitment(
        self, commitment: Commitment, author: str, source: RecordSource,
    ) -> Verdict:
        try:
            offer, offer_author = _lookup(source, commitment.offer_address, Offer)
        except RecordNotFound as e:
            return Verdict.reject(RejectionKind.NOT_FOUND, str(e))

        if offer_author != commitment.host_id:
            return Verdict.reject(
                RejectionKind.HOST_MISMATCH,
                f"Offer author {offer_author} != commitment host {commitment.host_id}",
            )
        if author != offer.challenger_id:
            return Verdict.reject(
                RejectionKind.CHALLENGER_MISMATCH,
                f"Commitment author {author} != offer challenger {offer.challenger_id}",
            )
        if commitment.format_id != offer.format_id:
            return Verdict.reject(
                RejectionKind.FORMAT_MISMATCH, "Commitment format does not match offer",
            )
        return Verdict.accept()

    def validate_move(self, move: Move, author: str, source: RecordSource) -> Verdict:
        try:
            commitment, commitment_author = _lookup(
                source, move.commitment_address, Commitment,
            )
        except RecordNotFound as e:
            return Verdict.reject(RejectionKind.NOT_FOUND, str(e))

        if author != commitment.host_id:
            return Verdict.reject(
                RejectionKind.AUTHOR_MISMATCH,
                f"Move author {author} != commitment host {commitment.host_id}",
            )
        if commitment_author != move.challenger_id:
            return Verdict.reject(
                RejectionKind.AUTHOR_MISMATCH,
                f"Commitment author {commitment_author} != move challenger "
                f"{move.challenger_id}",
            )
        if move.commit_hash != commitment.commit_hash:
            return Verdict.reject(
                RejectionKind.HASH_MISMATCH, "Move hash does not match commitment",
            )
        if move.format_id != commitment.format_id:
            return Verdict.reject(
                RejectionKind.FORMAT_MISMATCH, "Move format does not match commitment",
            )
        bad_component = self._check_component(move.component, move.format_id)
        if bad_component is not None:
            return bad_component
        return Verdict.accept()

    def validate_result(
        self, result: GameResult, author: str, source: RecordSource,
    ) -> Verdict:
        try:
            move, move_author = _lookup(source, result.move_address, Move)
        except RecordNotFound as e:
            return Verdict.reject(RejectionKind.NOT_FOUND, str(e))

        if not verify(result.reveal, move.commit_hash):
            return Verdict.reject(
                RejectionKind.REVEAL_HASH_MISMATCH,
                "Move hash does not match hash of reveal",
            )
        if result.format_id != move.format_id:
            return Verdict.reject(
                RejectionKind.FORMAT_MISMATCH, "Format id does not match move",
            )
        if author != move.challenger_id:
            return Verdict.reject(
                RejectionKind.AUTHOR_MISMATCH,
                f"Result author {author} != move challenger {move.challenger_id}",
            )
        bad_component = self._check_component(result.reveal.component, move.format_id)
        if bad_component is not None:
            return bad_component

        expected = build_result(
            result.reveal,
            result.move_address,
            move,
            move_author,
            self._formats.format(move.format_id),
        )
        if result != expected:
            return Verdict.reject(
                RejectionKind.RESULT_MISMATCH,
                f"Claimed {_describe(result)} but recomputed {_describe(expected)}",
            )
        return Verdict.accept()

    def _check_component(self, component: Component, format_id: str) -> Optional[Verdict]:
        """Return a rejection if the component is not defined by the format."""
        if not self._enforce_membership:
            return None
        fmt = self._formats.format(format_id)
        if fmt is None:
            return Verdict.reject(
                RejectionKind.INVALID_COMPONENT, f"Unknown format: {format_id}",
            )
        if not fmt.contains(component):
            return Verdict.reject(
                RejectionKind.INVALID_COMPONENT,
                f"Component {component.name!r} is not defined by format {format_id}",
            )
        return None


def _lookup(source: RecordSource, address: str, expected: type) -> tuple:
    """Fetch a predecessor of the expected type together with its author."""
    label = expected.entry_type.value
    record = source.get(address)
    if not isinstance(record, expected):
        raise RecordNotFound(address, label)
    return record, source.author_of(address)


def _describe(result: GameResult) -> str:
    if isinstance(result, Win):
        return f"win({result.winner_id} over {result.loser_id})"
    if isinstance(result, Draw):
        return f"draw({', '.join(result.players)})"
    return repr(result)
