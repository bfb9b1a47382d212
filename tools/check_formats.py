#!/usr/bin/env python3
"""Roshambo config checks against the format catalogue and protocol params.

Runs the strict structural checks over config/formats.json without going
through PolicyResolver, so a broken catalogue is reported line by line
instead of failing on the first bad format.
"""

import json
import sys
from pathlib import Path

# Add src to path for roshambo imports
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from roshambo.crypto.commit import MIN_NONCE_LENGTH
from roshambo.models.format import Format
from roshambo.policy.resolver import check_format

FORMATS_PATH = ROOT / "config" / "formats.json"
PARAMS_PATH = ROOT / "config" / "protocol_params.json"


def load_json(path: Path) -> dict:
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def check() -> int:
    catalogue = load_json(FORMATS_PATH)
    params = load_json(PARAMS_PATH)
    errors: list[str] = []

    seen_ids: set[str] = set()
    for raw in catalogue.get("formats", []):
        fmt = Format.from_dict(raw)
        if fmt.format_id in seen_ids:
            errors.append(f"duplicate format id: {fmt.format_id}")
        seen_ids.add(fmt.format_id)
        for err in check_format(fmt, strict=True):
            errors.append(f"{fmt.format_id}: {err}")

    if not seen_ids:
        errors.append("format catalogue is empty")

    nonce_length = params.get("nonce", {}).get("length", MIN_NONCE_LENGTH)
    if nonce_length < MIN_NONCE_LENGTH:
        errors.append(f"nonce.length must be >= {MIN_NONCE_LENGTH}, got {nonce_length}")

    rules = params.get("rules", {})
    for flag in ("enforce_component_membership", "require_distinct_players"):
        if flag in rules and not isinstance(rules[flag], bool):
            errors.append(f"rules.{flag} must be a boolean")

    if errors:
        print("Config check failed:")
        for err in errors:
            print(f"- {err}")
        return 1

    print("Config check passed.")
    return 0


if __name__ == "__main__":
    raise SystemExit(check())
