"""Policy resolver — loads game formats and protocol parameters from config.

Config lives in a directory of JSON files:
- formats.json          the format catalogue
- protocol_params.json  nonce length and rule switches

Loading is fail-closed: a malformed format (duplicate names, references
to undefined components, a component beating itself, or a pair that
beats each other) raises ValueError. A format that records only one
direction of a relation is tolerated; the resolver handles it, and
check_format(strict=True) reports it.
"""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any, Iterable, Optional

from roshambo.crypto.commit import MIN_NONCE_LENGTH
from roshambo.models.format import Format

FORMATS_FILE = "formats.json"
PARAMS_FILE = "protocol_params.json"

_DEFAULT_PARAMS: dict[str, Any] = {
    "protocol_version": "0.1",
    "nonce": {"length": MIN_NONCE_LENGTH},
    "rules": {
        "enforce_component_membership": True,
        "require_distinct_players": True,
    },
}


class PolicyResolver:
    """Read-only view over formats and protocol parameters.

    Usage:
        resolver = PolicyResolver.from_config_dir(Path("config"))
        fmt = resolver.format("classic")
        resolver.nonce_length()  # 24
    """

    def __init__(
        self,
        formats: Iterable[Format],
        params: Optional[dict[str, Any]] = None,
    ) -> None:
        self._formats: dict[str, Format] = {}
        for fmt in formats:
            if fmt.format_id in self._formats:
                raise ValueError(f"Duplicate format id: {fmt.format_id}")
            errors = check_format(fmt)
            if errors:
                raise ValueError(f"Invalid format {fmt.format_id}: {'; '.join(errors)}")
            self._formats[fmt.format_id] = fmt

        self._params = _merge_params(params or {})
        if self.nonce_length() < MIN_NONCE_LENGTH:
            raise ValueError(
                f"nonce.length must be >= {MIN_NONCE_LENGTH}, got {self.nonce_length()}"
            )

    @classmethod
    def from_config_dir(cls, config_dir: Path) -> PolicyResolver:
        """Load formats.json and (optionally) protocol_params.json."""
        formats_path = config_dir / FORMATS_FILE
        if not formats_path.exists():
            raise ValueError(f"Missing format catalogue: {formats_path}")
        formats_data = _load_json(formats_path)

        params_path = config_dir / PARAMS_FILE
        params = _load_json(params_path) if params_path.exists() else {}

        formats = [Format.from_dict(f) for f in formats_data.get("formats", [])]
        return cls(formats, params)

    # ------------------------------------------------------------------
    # Formats
    # ------------------------------------------------------------------

    def format(self, format_id: str) -> Optional[Format]:
        return self._formats.get(format_id)

    def format_ids(self) -> list[str]:
        return list(self._formats)

    def formats(self) -> list[Format]:
        return list(self._formats.values())

    # ------------------------------------------------------------------
    # Protocol parameters
    # ------------------------------------------------------------------

    @property
    def protocol_version(self) -> str:
        return str(self._params["protocol_version"])

    def nonce_length(self) -> int:
        return int(self._params["nonce"]["length"])

    def enforce_component_membership(self) -> bool:
        return bool(self._params["rules"]["enforce_component_membership"])

    def require_distinct_players(self) -> bool:
        return bool(self._params["rules"]["require_distinct_players"])


def check_format(fmt: Format, strict: bool = False) -> list[str]:
    """Check a format's structure. Returns a list of errors, empty if valid.

    With strict=True, one-sided relations are also reported: if A wins
    against B, B must list A in loses_against, and vice versa.
    """
    errors: list[str] = []
    names = [c.name for c in fmt.components]

    if not names:
        errors.append("format defines no components")
    seen: set[str] = set()
    for name in names:
        if not name:
            errors.append("component with blank name")
        if name in seen:
            errors.append(f"duplicate component name: {name}")
        seen.add(name)

    for c in fmt.components:
        for other in (*c.wins_against, *c.loses_against):
            if other not in seen:
                errors.append(f"{c.name} references undefined component {other}")
        if c.name in c.wins_against or c.name in c.loses_against:
            errors.append(f"{c.name} cannot be related to itself")
        both = set(c.wins_against) & set(c.loses_against)
        if both:
            errors.append(f"{c.name} both wins and loses against {sorted(both)}")

    for c in fmt.components:
        for other_name in c.wins_against:
            other = fmt.component(other_name)
            if other is None:
                continue
            if c.name in other.wins_against and c.name < other.name:
                errors.append(f"{c.name} and {other.name} each beat the other")
            if strict and c.name not in other.loses_against:
                errors.append(
                    f"{c.name} wins against {other.name} but "
                    f"{other.name} does not list it in loses_against"
                )
        if strict:
            for other_name in c.loses_against:
                other = fmt.component(other_name)
                if other is not None and c.name not in other.wins_against:
                    errors.append(
                        f"{c.name} loses against {other.name} but "
                        f"{other.name} does not list it in wins_against"
                    )

    return errors


def _merge_params(params: dict[str, Any]) -> dict[str, Any]:
    merged = copy.deepcopy(_DEFAULT_PARAMS)
    for key, value in params.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key].update(value)
        else:
            merged[key] = value
    return merged


def _load_json(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)
