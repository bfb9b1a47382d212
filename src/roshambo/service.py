"""Roshambo service — unified facade for one agent playing over a ledger.

This is the primary interface for programmatic access. It orchestrates:
- Identity registration (the ledger's identity directory)
- The four protocol stages (offer, commitment, move, result)
- The agent's private reveal store
- The agent's audit event log
- Read accessors and status

All operations return a ServiceResult. Protocol failures (a missing
predecessor, a rejected record) become success=False with the rejection
tag in ``data["rejection"]``; they are never raised to the caller.
Rejected submissions are recorded in the audit log.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

from roshambo.engine.protocol import GameProtocol
from roshambo.engine.validators import RecordValidator
from roshambo.ledger.identity import IdentityDirectory
from roshambo.ledger.interfaces import RecordNotFound, ValidationRejected
from roshambo.ledger.store import Ledger
from roshambo.models.format import Component
from roshambo.models.records import (
    Commitment,
    EntryType,
    GameResult,
    Move,
    Offer,
    Reveal,
    Win,
)
from roshambo.models.verdict import RejectionKind
from roshambo.persistence.event_log import EventKind, EventLog, EventRecord
from roshambo.persistence.reveal_store import RevealNotFound, RevealStore
from roshambo.policy.resolver import PolicyResolver


@dataclass(frozen=True)
class ServiceResult:
    """Result of a service operation."""
    success: bool
    errors: list[str] = field(default_factory=list)
    data: dict[str, Any] = field(default_factory=dict)


def make_ledger(
    resolver: PolicyResolver,
    identities: IdentityDirectory,
    storage_path: Optional[Path] = None,
) -> Ledger:
    """Build a ledger replica whose validator follows the resolver's rules."""
    validator = RecordValidator(
        identities,
        resolver,
        enforce_component_membership=resolver.enforce_component_membership(),
        require_distinct_players=resolver.require_distinct_players(),
    )
    return Ledger(validator, storage_path=storage_path)


class RoshamboService:
    """Facade for one agent over a shared ledger.

    Usage:
        resolver = PolicyResolver.from_config_dir(config_dir)
        identities = IdentityDirectory()
        ledger = make_ledger(resolver, identities)

        alice = RoshamboService(resolver, ledger, identities, "alice")
        bob = RoshamboService(resolver, ledger, identities, "bob")
        alice.register_agent(); bob.register_agent()

        offer = alice.new_offer("bob", "classic").data["address"]
        commitment = bob.new_commitment("Rock", offer, "alice").data["address"]
        move = alice.new_move("Paper", commitment, "bob").data["address"]
        result = bob.new_result(move, "alice")

    Persistence (optional):
        service = RoshamboService(..., reveal_store=RevealStore(path),
                                  event_log=EventLog(path))
    """

    def __init__(
        self,
        resolver: PolicyResolver,
        ledger: Ledger,
        identities: IdentityDirectory,
        agent_id: str,
        reveal_store: Optional[RevealStore] = None,
        event_log: Optional[EventLog] = None,
    ) -> None:
        self._resolver = resolver
        self._ledger = ledger
        self._identities = identities
        self._agent_id = agent_id.strip()
        self._event_log = event_log
        self._protocol = GameProtocol(ledger, self._agent_id, resolver, reveal_store)
        # Initialize counter from persisted log to avoid ID collision on restart
        self._event_counter = event_log.count if event_log is not None else 0

    @property
    def agent_id(self) -> str:
        return self._agent_id

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    def register_agent(self) -> ServiceResult:
        """Register this service's agent in the identity directory."""
        try:
            ident = self._identities.register(self._agent_id)
        except ValueError as e:
            return ServiceResult(success=False, errors=[str(e)])
        warning = self._record_event(EventKind.AGENT_REGISTERED, {"identity": ident})
        return self._ok({"identity": ident}, warning)

    # ------------------------------------------------------------------
    # Protocol stages
    # ------------------------------------------------------------------

    def new_offer(self, challenger_id: str, format_id: str) -> ServiceResult:
        """Host: invite a challenger to a game under a format."""
        return self._submit(
            EventKind.OFFER_CREATED,
            EntryType.OFFER,
            lambda: self._protocol.new_offer(challenger_id, format_id),
            {"challenger_id": challenger_id, "format_id": format_id},
        )

    def new_commitment(
        self,
        component: Union[Component, str],
        offer_address: str,
        host_id: str,
        nonce: Optional[str] = None,
    ) -> ServiceResult:
        """Challenger: accept an offer by committing to a hidden component.

        A component given by name is looked up in the offer's format. A
        component outside the format, given by name or as an object, is
        refused before anything is committed (INVALID_COMPONENT). A
        reveal-store failure is reported as a failed result.
        """
        try:
            offer = self._protocol.get_offer(offer_address)
        except RecordNotFound as e:
            return self._not_found(e)
        resolved = self._resolve_component(component, offer.format_id)
        if isinstance(resolved, ServiceResult):
            return resolved

        try:
            return self._submit(
                EventKind.COMMITMENT_CREATED,
                EntryType.COMMITMENT,
                lambda: self._protocol.new_commitment(resolved, offer_address, host_id, nonce),
                {"offer_address": offer_address, "host_id": host_id},
            )
        except (ValueError, OSError) as e:
            return ServiceResult(success=False, errors=[f"Reveal store failure: {e}"])

    def new_move(
        self,
        component: Union[Component, str],
        commitment_address: str,
        challenger_id: str,
    ) -> ServiceResult:
        """Host: play a component against a challenger's commitment."""
        try:
            commitment = self._protocol.get_commitment(commitment_address)
        except RecordNotFound as e:
            return self._not_found(e)
        resolved = self._resolve_component(component, commitment.format_id)
        if isinstance(resolved, ServiceResult):
            return resolved

        return self._submit(
            EventKind.MOVE_CREATED,
            EntryType.MOVE,
            lambda: self._protocol.new_move(resolved, commitment_address, challenger_id),
            {"commitment_address": commitment_address, "challenger_id": challenger_id},
        )

    def new_result(
        self,
        move_address: str,
        host_id: str,
        reveal: Optional[Reveal] = None,
    ) -> ServiceResult:
        """Challenger: reveal the committed component and publish the result."""
        try:
            result = self._submit(
                EventKind.RESULT_CREATED,
                EntryType.GAME_RESULT,
                lambda: self._protocol.new_result(reveal, move_address, host_id),
                {"move_address": move_address, "host_id": host_id},
            )
        except RevealNotFound as e:
            return ServiceResult(success=False, errors=[str(e)])
        if result.success:
            outcome = self._protocol.get_result(result.data["address"])
            result.data.update(_describe_result(outcome))
        return result

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_offer(self, address: str) -> Optional[Offer]:
        return self._lookup(self._protocol.get_offer, address)

    def get_commitment(self, address: str) -> Optional[Commitment]:
        return self._lookup(self._protocol.get_commitment, address)

    def get_move(self, address: str) -> Optional[Move]:
        return self._lookup(self._protocol.get_move, address)

    def get_result(self, address: str) -> Optional[GameResult]:
        return self._lookup(self._protocol.get_result, address)

    def pending_reveals(self) -> list[str]:
        """Commitments this agent made whose result is not yet published.

        A game stays here indefinitely if the host never moves; there
        is no timeout or forfeit.
        """
        return self._protocol.reveals.pending()

    def status(self) -> dict[str, Any]:
        """Return an agent-level status summary."""
        return {
            "agent_id": self._agent_id,
            "protocol_version": self._resolver.protocol_version,
            "formats": self._resolver.format_ids(),
            "identities": self._identities.count,
            "ledger": {
                "records": self._ledger.count,
                "by_type": self._ledger.count_by_type(),
            },
            "awaiting_reveal": self.pending_reveals(),
            "audit_events": self._event_log.count if self._event_log is not None else 0,
        }

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _submit(self, kind, entry_type, action, payload: dict[str, Any]) -> ServiceResult:
        """Run a protocol submission and audit its outcome."""
        try:
            address = action()
        except RecordNotFound as e:
            return self._not_found(e)
        except ValidationRejected as e:
            rejection = e.verdict.rejection or RejectionKind.NOT_FOUND
            self._record_event(EventKind.RECORD_REJECTED, {
                **payload,
                "entry_type": entry_type.value,
                "rejection": rejection.value,
            })
            return ServiceResult(
                success=False,
                errors=[str(e)],
                data={"rejection": rejection.value},
            )

        warning = self._record_event(kind, {**payload, "address": address})
        return self._ok({"address": address}, warning)

    def _resolve_component(
        self, component: Union[Component, str], format_id: str,
    ) -> Union[Component, ServiceResult]:
        if isinstance(component, Component):
            return component
        fmt = self._resolver.format(format_id)
        defined = fmt.component(component) if fmt is not None else None
        if defined is None:
            return ServiceResult(
                success=False,
                errors=[f"Component {component!r} is not defined by format {format_id}"],
                data={"rejection": RejectionKind.INVALID_COMPONENT.value},
            )
        return defined

    def _lookup(self, getter, address: str):
        try:
            return getter(address)
        except RecordNotFound:
            return None

    def _next_event_id(self) -> str:
        """Generate a monotonically increasing unique event ID."""
        self._event_counter += 1
        return f"EVT-{self._event_counter:08d}"

    def _record_event(self, kind: EventKind, payload: dict[str, Any]) -> Optional[str]:
        """Append an audit event. Returns a warning string on failure.

        The ledger write has already happened and cannot be undone, so
        an audit failure is reported rather than rolled back.
        """
        if self._event_log is None:
            return None
        try:
            self._event_log.append(EventRecord.create(
                event_id=self._next_event_id(),
                event_kind=kind,
                actor_id=self._agent_id,
                payload=payload,
            ))
        except (ValueError, OSError) as e:
            return f"Event log failure: {e}"
        return None

    @staticmethod
    def _ok(data: dict[str, Any], warning: Optional[str]) -> ServiceResult:
        if warning:
            data["warning"] = warning
        return ServiceResult(success=True, data=data)

    @staticmethod
    def _not_found(error: RecordNotFound) -> ServiceResult:
        return ServiceResult(
            success=False,
            errors=[str(error)],
            data={"rejection": RejectionKind.NOT_FOUND.value},
        )


def _describe_result(result: GameResult) -> dict[str, Any]:
    if isinstance(result, Win):
        return {"outcome": "win", "winner_id": result.winner_id, "loser_id": result.loser_id}
    return {"outcome": "draw", "players": list(result.players)}
