"""Shared fixtures: config, a three-agent identity directory, one ledger replica."""

import pytest
from pathlib import Path

from roshambo.engine.protocol import GameProtocol
from roshambo.ledger.identity import IdentityDirectory
from roshambo.ledger.store import Ledger
from roshambo.models.format import Component, Format
from roshambo.policy.resolver import PolicyResolver
from roshambo.service import make_ledger


CONFIG_DIR = Path(__file__).resolve().parents[1] / "config"


@pytest.fixture
def resolver() -> PolicyResolver:
    return PolicyResolver.from_config_dir(CONFIG_DIR)


@pytest.fixture
def classic(resolver: PolicyResolver) -> Format:
    return resolver.format("classic")


@pytest.fixture
def rock(classic: Format) -> Component:
    return classic.component("Rock")


@pytest.fixture
def paper(classic: Format) -> Component:
    return classic.component("Paper")


@pytest.fixture
def scissors(classic: Format) -> Component:
    return classic.component("Scissors")


@pytest.fixture
def identities() -> IdentityDirectory:
    directory = IdentityDirectory()
    for agent in ("alice", "bob", "charlie"):
        directory.register(agent)
    return directory


@pytest.fixture
def ledger(resolver: PolicyResolver, identities: IdentityDirectory) -> Ledger:
    return make_ledger(resolver, identities)


@pytest.fixture
def alice(ledger: Ledger, resolver: PolicyResolver) -> GameProtocol:
    return GameProtocol(ledger, "alice", resolver)


@pytest.fixture
def bob(ledger: Ledger, resolver: PolicyResolver) -> GameProtocol:
    return GameProtocol(ledger, "bob", resolver)


@pytest.fixture
def charlie(ledger: Ledger, resolver: PolicyResolver) -> GameProtocol:
    return GameProtocol(ledger, "charlie", resolver)
