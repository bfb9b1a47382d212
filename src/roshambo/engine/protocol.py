"""Protocol operations — build and submit each stage of a game.

One GameProtocol is bound to one agent identity: every record it
submits is authored by that agent. The four stages:
1. Host:       new_offer(challenger_id, format_id)
2. Challenger: new_commitment(component, offer_address, host_id)
3. Host:       new_move(component, commitment_address, challenger_id)
4. Challenger: new_result(reveal, move_address, host_id)

Lookups raise RecordNotFound and submissions raise ValidationRejected;
both propagate unchanged. Nothing is retried: validation is
deterministic, so an invalid record stays invalid.
"""

from __future__ import annotations

from typing import Optional

from roshambo.crypto.commit import commit, generate_nonce
from roshambo.engine.resolver import build_result
from roshambo.ledger.interfaces import ValidationRejected
from roshambo.ledger.store import Ledger, address_of
from roshambo.models.format import Component
from roshambo.models.records import Commitment, GameResult, Move, Offer, Reveal
from roshambo.models.verdict import RejectionKind, Verdict
from roshambo.persistence.reveal_store import RevealStore
from roshambo.policy.resolver import PolicyResolver


class GameProtocol:
    """Submits game records to a ledger on behalf of one agent.

    Usage:
        host = GameProtocol(ledger, "alice", resolver)
        challenger = GameProtocol(ledger, "bob", resolver, reveals=RevealStore())

        offer = host.new_offer("bob", "classic")
        commitment = challenger.new_commitment(rock, offer, "alice")
        move = host.new_move(paper, commitment, "bob")
        result = challenger.new_result(None, move, "alice")  # reveal from store
    """

    def __init__(
        self,
        ledger: Ledger,
        agent_id: str,
        resolver: PolicyResolver,
        reveals: Optional[RevealStore] = None,
    ) -> None:
        self._ledger = ledger
        self._agent_id = agent_id
        self._resolver = resolver
        self._reveals = reveals if reveals is not None else RevealStore()

    @property
    def agent_id(self) -> str:
        return self._agent_id

    @property
    def reveals(self) -> RevealStore:
        return self._reveals

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def new_offer(self, challenger_id: str, format_id: str) -> str:
        offer = Offer(challenger_id=challenger_id, format_id=format_id)
        return self._ledger.put(offer, self._agent_id)

    def new_commitment(
        self,
        component: Component,
        offer_address: str,
        host_id: str,
        nonce: Optional[str] = None,
    ) -> str:
        """Commit to a hidden move in response to an offer.

        Generates a fresh nonce unless one is given. The Reveal is kept
        in the private store under the commitment's address before the
        commitment is published, and dropped again if the ledger rejects
        it. A component the offer's format does not define is refused
        with INVALID_COMPONENT.
        """
        offer = self._ledger.get_offer(offer_address)
        self._check_component(component, offer.format_id)
        if nonce is None:
            nonce = generate_nonce(self._resolver.nonce_length())
        reveal = Reveal(component=component, nonce=nonce)

        commitment = Commitment(
            commit_hash=commit(reveal),
            offer_address=offer_address,
            host_id=host_id,
            format_id=offer.format_id,
        )
        address = address_of(commitment, self._agent_id)
        if self._ledger.contains(address):
            return address
        held = self._reveals.holds(address)
        self._reveals.save(address, reveal)
        try:
            return self._ledger.put(commitment, self._agent_id)
        except ValidationRejected:
            if not held:
                self._reveals.discard(address)
            raise

    def new_move(
        self,
        component: Component,
        commitment_address: str,
        challenger_id: str,
    ) -> str:
        commitment = self._ledger.get_commitment(commitment_address)
        move = Move(
            component=component,
            commitment_address=commitment_address,
            challenger_id=challenger_id,
            commit_hash=commitment.commit_hash,
            format_id=commitment.format_id,
        )
        return self._ledger.put(move, self._agent_id)

    def new_result(
        self,
        reveal: Optional[Reveal],
        move_address: str,
        host_id: str,
    ) -> str:
        """Reveal the committed move and publish the resolved result.

        With reveal=None the reveal is loaded from the private store
        (RevealNotFound if it is not held). The stored reveal is
        discarded once the result is accepted.
        """
        move = self._ledger.get_move(move_address)
        if reveal is None:
            reveal = self._reveals.get(move.commitment_address)

        result = build_result(
            reveal,
            move_address,
            move,
            host_id,
            self._resolver.format(move.format_id),
        )
        address = self._ledger.put(result, self._agent_id)
        self._reveals.discard(move.commitment_address)
        return address

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_offer(self, address: str) -> Offer:
        return self._ledger.get_offer(address)

    def get_commitment(self, address: str) -> Commitment:
        return self._ledger.get_commitment(address)

    def get_move(self, address: str) -> Move:
        return self._ledger.get_move(address)

    def get_result(self, address: str) -> GameResult:
        return self._ledger.get_result(address)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _check_component(self, component: Component, format_id: str) -> None:
        if not self._resolver.enforce_component_membership():
            return
        fmt = self._resolver.format(format_id)
        if fmt is None or not fmt.contains(component):
            raise ValidationRejected(Verdict.reject(
                RejectionKind.INVALID_COMPONENT,
                f"Component {component.name!r} is not defined by format {format_id}",
            ))
