"""Tests for RoshamboService — proves the facade orchestrates a game and audits it."""

import pytest
from pathlib import Path

from roshambo.ledger.identity import IdentityDirectory
from roshambo.ledger.store import Ledger
from roshambo.models.format import Component
from roshambo.models.records import Reveal, Win
from roshambo.persistence.event_log import EventKind, EventLog
from roshambo.persistence.reveal_store import RevealStore
from roshambo.policy.resolver import PolicyResolver
from roshambo.service import RoshamboService, make_ledger


MISSING = "sha256:" + "0" * 64


@pytest.fixture
def directory() -> IdentityDirectory:
    return IdentityDirectory()


@pytest.fixture
def shared(resolver: PolicyResolver, directory: IdentityDirectory) -> Ledger:
    return make_ledger(resolver, directory)


def _service(resolver, ledger, directory, agent_id: str) -> RoshamboService:
    service = RoshamboService(resolver, ledger, directory, agent_id, event_log=EventLog())
    assert service.register_agent().success
    return service


@pytest.fixture
def host(resolver, shared, directory) -> RoshamboService:
    return _service(resolver, shared, directory, "alice")


@pytest.fixture
def challenger(resolver, shared, directory) -> RoshamboService:
    return _service(resolver, shared, directory, "bob")


def _play_to_move(host: RoshamboService, challenger: RoshamboService,
                  committed: str, played: str) -> str:
    offer = host.new_offer("bob", "classic").data["address"]
    commitment = challenger.new_commitment(committed, offer, "alice").data["address"]
    return host.new_move(played, commitment, "bob").data["address"]


class TestRegistration:
    def test_register_records_event(self, host: RoshamboService) -> None:
        events = host._event_log.events(EventKind.AGENT_REGISTERED)
        assert len(events) == 1
        assert events[0].payload == {"identity": "alice"}

    def test_duplicate_register_fails(self, host: RoshamboService) -> None:
        result = host.register_agent()
        assert not result.success
        assert "already registered" in result.errors[0]

    def test_blank_agent_fails(self, resolver, shared, directory) -> None:
        service = RoshamboService(resolver, shared, directory, "  ")
        assert not service.register_agent().success


class TestFullGame:
    def test_challenger_wins(self, host: RoshamboService, challenger: RoshamboService) -> None:
        move = _play_to_move(host, challenger, "Paper", "Rock")
        result = challenger.new_result(move, "alice")
        assert result.success
        assert result.data["outcome"] == "win"
        assert result.data["winner_id"] == "bob"
        assert result.data["loser_id"] == "alice"

        stored = host.get_result(result.data["address"])
        assert isinstance(stored, Win)
        assert stored.winner_id == "bob"

    def test_draw(self, host: RoshamboService, challenger: RoshamboService) -> None:
        move = _play_to_move(host, challenger, "Scissors", "Scissors")
        result = challenger.new_result(move, "alice")
        assert result.success
        assert result.data["outcome"] == "draw"
        assert result.data["players"] == ["alice", "bob"]

    def test_explicit_nonce_and_reveal(
        self, host: RoshamboService, challenger: RoshamboService, rock, scissors,
    ) -> None:
        offer = host.new_offer("bob", "classic").data["address"]
        commitment = challenger.new_commitment(rock, offer, "alice", nonce="n1").data["address"]
        move = host.new_move("Scissors", commitment, "bob").data["address"]
        result = challenger.new_result(move, "alice", reveal=Reveal(rock, "n1"))
        assert result.data["winner_id"] == "bob"

    def test_audit_trail(self, host: RoshamboService, challenger: RoshamboService) -> None:
        move = _play_to_move(host, challenger, "Rock", "Paper")
        result = challenger.new_result(move, "alice")

        host_kinds = [e.event_kind for e in host._event_log.events()]
        assert host_kinds == [
            EventKind.AGENT_REGISTERED, EventKind.OFFER_CREATED, EventKind.MOVE_CREATED,
        ]
        challenger_kinds = [e.event_kind for e in challenger._event_log.events()]
        assert challenger_kinds == [
            EventKind.AGENT_REGISTERED,
            EventKind.COMMITMENT_CREATED,
            EventKind.RESULT_CREATED,
        ]
        assert challenger._event_log.events_for(result.data["address"])

    def test_event_ids_increase(self, host: RoshamboService, challenger: RoshamboService) -> None:
        _play_to_move(host, challenger, "Rock", "Paper")
        ids = [e.event_id for e in host._event_log.events()]
        assert ids == ["EVT-00000001", "EVT-00000002", "EVT-00000003"]


class TestRejections:
    def test_unknown_challenger(self, host: RoshamboService) -> None:
        result = host.new_offer("mallory", "classic")
        assert not result.success
        assert result.data["rejection"] == "unknown_challenger"
        rejected = host._event_log.events(EventKind.RECORD_REJECTED)
        assert rejected[0].payload["rejection"] == "unknown_challenger"
        assert rejected[0].payload["entry_type"] == "offer"

    def test_missing_offer(self, challenger: RoshamboService) -> None:
        result = challenger.new_commitment("Rock", MISSING, "alice")
        assert not result.success
        assert result.data["rejection"] == "not_found"

    def test_missing_commitment(self, host: RoshamboService) -> None:
        result = host.new_move("Rock", MISSING, "bob")
        assert result.data["rejection"] == "not_found"

    def test_missing_move(self, challenger: RoshamboService) -> None:
        result = challenger.new_result(MISSING, "alice")
        assert result.data["rejection"] == "not_found"

    def test_component_name_outside_format(
        self, host: RoshamboService, challenger: RoshamboService,
    ) -> None:
        offer = host.new_offer("bob", "classic").data["address"]
        result = challenger.new_commitment("Lizard", offer, "alice")
        assert not result.success
        assert result.data["rejection"] == "invalid_component"
        assert challenger.pending_reveals() == []

    def test_component_object_outside_format(
        self, host: RoshamboService, challenger: RoshamboService,
    ) -> None:
        offer = host.new_offer("bob", "classic").data["address"]
        lizard = Component("Lizard", ("Paper", "Spock"), ("Rock", "Scissors"))
        result = challenger.new_commitment(lizard, offer, "alice")
        assert not result.success
        assert result.data["rejection"] == "invalid_component"
        assert challenger.pending_reveals() == []

    def test_repeated_commitment_returns_result(
        self, host: RoshamboService, challenger: RoshamboService,
    ) -> None:
        offer = host.new_offer("bob", "classic").data["address"]
        first = challenger.new_commitment("Rock", offer, "alice", nonce="n1")
        second = challenger.new_commitment("Rock", offer, "alice", nonce="n1")
        assert first.success and second.success
        assert first.data["address"] == second.data["address"]
        assert challenger.pending_reveals() == [first.data["address"]]

    def test_same_offer_from_two_hosts(
        self, resolver, shared, directory, host: RoshamboService,
        challenger: RoshamboService,
    ) -> None:
        other_host = _service(resolver, shared, directory, "charlie")
        from_alice = host.new_offer("bob", "classic").data["address"]
        from_charlie = other_host.new_offer("bob", "classic").data["address"]
        assert from_alice != from_charlie
        assert challenger.new_commitment("Rock", from_charlie, "charlie").success

    def test_wrong_party_moves(self, host: RoshamboService, challenger: RoshamboService) -> None:
        offer = host.new_offer("bob", "classic").data["address"]
        commitment = challenger.new_commitment("Rock", offer, "alice").data["address"]
        result = challenger.new_move("Paper", commitment, "bob")
        assert result.data["rejection"] == "author_mismatch"

    def test_result_without_reveal(self, host: RoshamboService, challenger: RoshamboService) -> None:
        move = _play_to_move(host, challenger, "Rock", "Paper")
        result = host.new_result(move, "alice")
        assert not result.success
        assert "No reveal held" in result.errors[0]


class TestReadsAndStatus:
    def test_getters_return_none_when_missing(self, host: RoshamboService) -> None:
        assert host.get_offer(MISSING) is None
        assert host.get_commitment(MISSING) is None
        assert host.get_move(MISSING) is None
        assert host.get_result(MISSING) is None

    def test_getters(self, host: RoshamboService, challenger: RoshamboService) -> None:
        offer = host.new_offer("bob", "classic").data["address"]
        assert challenger.get_offer(offer).challenger_id == "bob"
        assert challenger.get_move(offer) is None

    def test_pending_reveals(self, host: RoshamboService, challenger: RoshamboService) -> None:
        offer = host.new_offer("bob", "classic").data["address"]
        commitment = challenger.new_commitment("Rock", offer, "alice").data["address"]
        assert challenger.pending_reveals() == [commitment]
        move = host.new_move("Rock", commitment, "bob").data["address"]
        challenger.new_result(move, "alice")
        assert challenger.pending_reveals() == []

    def test_status(self, host: RoshamboService, challenger: RoshamboService) -> None:
        offer = host.new_offer("bob", "classic").data["address"]
        commitment = challenger.new_commitment("Rock", offer, "alice").data["address"]
        status = challenger.status()
        assert status["agent_id"] == "bob"
        assert status["protocol_version"] == "0.1"
        assert status["formats"] == ["classic", "rpsls"]
        assert status["identities"] == 2
        assert status["ledger"]["records"] == 2
        assert status["ledger"]["by_type"]["commitment"] == 1
        assert status["awaiting_reveal"] == [commitment]
        assert status["audit_events"] == 2


class TestPersistence:
    def test_restart_resumes_game(self, tmp_path: Path, resolver: PolicyResolver) -> None:
        def build(agent_id: str) -> RoshamboService:
            directory = IdentityDirectory(storage_path=tmp_path / "identities.jsonl")
            ledger = make_ledger(resolver, directory, storage_path=tmp_path / "ledger.jsonl")
            return RoshamboService(
                resolver, ledger, directory, agent_id,
                reveal_store=RevealStore(tmp_path / f"reveals-{agent_id}.json"),
                event_log=EventLog(storage_path=tmp_path / f"events-{agent_id}.jsonl"),
            )

        build("alice").register_agent()
        build("bob").register_agent()
        offer = build("alice").new_offer("bob", "classic").data["address"]
        commitment = build("bob").new_commitment("Scissors", offer, "alice").data["address"]
        move = build("alice").new_move("Paper", commitment, "bob").data["address"]

        bob = build("bob")
        assert bob.pending_reveals() == [commitment]
        result = bob.new_result(move, "alice")
        assert result.success
        assert result.data["winner_id"] == "bob"
        assert [e.event_id for e in bob._event_log.events()][-1] == "EVT-00000003"
