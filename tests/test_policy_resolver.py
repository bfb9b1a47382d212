"""Tests for the policy resolver — proves it loads formats and protocol params and rejects malformed formats."""

import json

import pytest
from pathlib import Path

from roshambo.ledger.interfaces import FormatCatalogue
from roshambo.models.format import Component, Format
from roshambo.policy.resolver import PolicyResolver, check_format


CONFIG_DIR = Path(__file__).resolve().parents[1] / "config"


def _format(*components: Component, format_id: str = "test") -> Format:
    return Format(format_id=format_id, components=tuple(components))


class TestShippedConfig:
    def test_is_a_format_catalogue(self, resolver: PolicyResolver) -> None:
        assert isinstance(resolver, FormatCatalogue)

    def test_formats_loaded(self, resolver: PolicyResolver) -> None:
        assert resolver.format_ids() == ["classic", "rpsls"]
        assert len(resolver.format("classic").components) == 3
        assert len(resolver.format("rpsls").components) == 5

    def test_unknown_format(self, resolver: PolicyResolver) -> None:
        assert resolver.format("chess") is None

    def test_protocol_params(self, resolver: PolicyResolver) -> None:
        assert resolver.protocol_version == "0.1"
        assert resolver.nonce_length() == 24
        assert resolver.enforce_component_membership() is True
        assert resolver.require_distinct_players() is True

    def test_shipped_formats_pass_strict_check(self, resolver: PolicyResolver) -> None:
        for fmt in resolver.formats():
            assert check_format(fmt, strict=True) == []

    def test_classic_relations(self, classic: Format) -> None:
        rock = classic.component("Rock")
        assert rock.beats("Scissors")
        assert rock.beaten_by("Paper")
        assert not rock.beats("Paper")


class TestFromConfigDir:
    def test_missing_formats_file(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="Missing format catalogue"):
            PolicyResolver.from_config_dir(tmp_path)

    def test_params_file_optional(self, tmp_path: Path) -> None:
        (tmp_path / "formats.json").write_text(
            (CONFIG_DIR / "formats.json").read_text(encoding="utf-8"), encoding="utf-8",
        )
        resolver = PolicyResolver.from_config_dir(tmp_path)
        assert resolver.nonce_length() == 24
        assert resolver.require_distinct_players() is True

    def test_partial_params_merge_with_defaults(self, tmp_path: Path) -> None:
        (tmp_path / "formats.json").write_text(
            (CONFIG_DIR / "formats.json").read_text(encoding="utf-8"), encoding="utf-8",
        )
        (tmp_path / "protocol_params.json").write_text(
            json.dumps({"rules": {"require_distinct_players": False}}), encoding="utf-8",
        )
        resolver = PolicyResolver.from_config_dir(tmp_path)
        assert resolver.require_distinct_players() is False
        assert resolver.enforce_component_membership() is True

    def test_short_nonce_rejected(self, classic: Format) -> None:
        with pytest.raises(ValueError, match="nonce.length"):
            PolicyResolver([classic], {"nonce": {"length": 8}})

    def test_duplicate_format_id(self, classic: Format) -> None:
        with pytest.raises(ValueError, match="Duplicate format id"):
            PolicyResolver([classic, classic])

    def test_malformed_format_rejected(self) -> None:
        bad = _format(Component("Rock", ("Rock",)))
        with pytest.raises(ValueError, match="Invalid format"):
            PolicyResolver([bad])


class TestParamDefaults:
    def test_overrides_do_not_leak_between_resolvers(self, classic: Format) -> None:
        relaxed = PolicyResolver([classic], {"rules": {"require_distinct_players": False}})
        default = PolicyResolver([classic])
        assert relaxed.require_distinct_players() is False
        assert default.require_distinct_players() is True


class TestCheckFormat:
    def test_empty(self) -> None:
        assert check_format(_format()) == ["format defines no components"]

    def test_blank_name(self) -> None:
        assert "component with blank name" in check_format(_format(Component("")))

    def test_duplicate_name(self) -> None:
        errors = check_format(_format(Component("Rock"), Component("Rock")))
        assert "duplicate component name: Rock" in errors

    def test_undefined_reference(self) -> None:
        errors = check_format(_format(Component("Rock", ("Scissors",))))
        assert "Rock references undefined component Scissors" in errors

    def test_related_to_itself(self) -> None:
        errors = check_format(_format(Component("Rock", (), ("Rock",))))
        assert "Rock cannot be related to itself" in errors

    def test_wins_and_loses_against_same(self) -> None:
        errors = check_format(_format(
            Component("Rock", ("Paper",), ("Paper",)),
            Component("Paper"),
        ))
        assert any("both wins and loses" in e for e in errors)

    def test_mutual_beats_reported_once(self) -> None:
        errors = check_format(_format(
            Component("Rock", ("Paper",)),
            Component("Paper", ("Rock",)),
        ))
        assert errors.count("Paper and Rock each beat the other") == 1

    def test_one_sided_relations_tolerated(self) -> None:
        fmt = _format(
            Component("Rock", ("Scissors",)),
            Component("Paper", ("Rock",)),
            Component("Scissors", ("Paper",)),
        )
        assert check_format(fmt) == []
        assert PolicyResolver([fmt]).format("test") == fmt

    def test_one_sided_relations_reported_strict(self) -> None:
        fmt = _format(
            Component("Rock", ("Scissors",)),
            Component("Paper", ("Rock",)),
            Component("Scissors", ("Paper",)),
        )
        errors = check_format(fmt, strict=True)
        assert len(errors) == 3
        assert all("does not list it in loses_against" in e for e in errors)
