"""Roshambo CLI — play commit-reveal games over a local ledger replica.

Usage:
    python -m roshambo.cli --as alice register
    python -m roshambo.cli --as bob register
    python -m roshambo.cli --as alice offer --challenger bob --format classic
    python -m roshambo.cli --as bob commit --offer <addr> --host alice --component Rock
    python -m roshambo.cli --as alice move --commitment <addr> --challenger bob --component Paper
    python -m roshambo.cli --as bob result --move <addr> --host alice
    python -m roshambo.cli show <addr>
    python -m roshambo.cli replay
    python -m roshambo.cli check-formats --strict

Defaults for --as, --data and --config may be set in a .env file
(ROSHAMBO_AGENT, ROSHAMBO_DATA_DIR, ROSHAMBO_CONFIG_DIR).
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from roshambo.ledger.identity import IdentityDirectory
from roshambo.ledger.interfaces import RecordNotFound
from roshambo.persistence.event_log import EventLog
from roshambo.persistence.reveal_store import RevealStore
from roshambo.policy.resolver import PolicyResolver, check_format
from roshambo.service import RoshamboService, ServiceResult, make_ledger


ROOT = Path(__file__).resolve().parents[2]
DEFAULT_CONFIG = ROOT / "config"
DEFAULT_DATA = ROOT / "data"


def _make_service(args: argparse.Namespace) -> RoshamboService:
    """Create a RoshamboService with durable persistence under the data dir."""
    if not args.agent:
        raise SystemExit("No agent identity: pass --as or set ROSHAMBO_AGENT")
    data_dir: Path = args.data
    data_dir.mkdir(parents=True, exist_ok=True)
    resolver = PolicyResolver.from_config_dir(args.config)
    identities = IdentityDirectory(storage_path=data_dir / "identities.jsonl")
    ledger = make_ledger(resolver, identities, storage_path=data_dir / "ledger.jsonl")
    return RoshamboService(
        resolver,
        ledger,
        identities,
        args.agent,
        reveal_store=RevealStore(data_dir / f"reveals-{args.agent}.json"),
        event_log=EventLog(storage_path=data_dir / f"events-{args.agent}.jsonl"),
    )


def _report(result: ServiceResult) -> int:
    if result.success:
        print(json.dumps(result.data, indent=2))
        return 0
    print(f"Failed: {'; '.join(result.errors)}", file=sys.stderr)
    return 1


def cmd_register(args: argparse.Namespace) -> int:
    return _report(_make_service(args).register_agent())


def cmd_offer(args: argparse.Namespace) -> int:
    return _report(_make_service(args).new_offer(args.challenger, args.format))


def cmd_commit(args: argparse.Namespace) -> int:
    service = _make_service(args)
    return _report(service.new_commitment(args.component, args.offer, args.host, args.nonce))


def cmd_move(args: argparse.Namespace) -> int:
    service = _make_service(args)
    return _report(service.new_move(args.component, args.commitment, args.challenger))


def cmd_result(args: argparse.Namespace) -> int:
    return _report(_make_service(args).new_result(args.move, args.host))


def cmd_show(args: argparse.Namespace) -> int:
    resolver = PolicyResolver.from_config_dir(args.config)
    identities = IdentityDirectory(storage_path=args.data / "identities.jsonl")
    ledger = make_ledger(resolver, identities, storage_path=args.data / "ledger.jsonl")
    try:
        record = ledger.get(args.address)
    except RecordNotFound as e:
        print(f"Failed: {e}", file=sys.stderr)
        return 1
    print(json.dumps({
        "address": args.address,
        "entry_type": record.entry_type.value,
        "author": ledger.author_of(args.address),
        "content": record.to_dict(),
    }, indent=2))
    return 0


def cmd_status(args: argparse.Namespace) -> int:
    print(json.dumps(_make_service(args).status(), indent=2))
    return 0


def cmd_replay(args: argparse.Namespace) -> int:
    """Re-validate every record on the local replica."""
    resolver = PolicyResolver.from_config_dir(args.config)
    identities = IdentityDirectory(storage_path=args.data / "identities.jsonl")
    ledger = make_ledger(resolver, identities, storage_path=args.data / "ledger.jsonl")
    rejected = [(address, v) for address, v in ledger.replay() if not v.accepted]
    for address, verdict in rejected:
        print(f"{address}: {verdict.rejection.value}: {verdict.reason}", file=sys.stderr)
    print(f"Replayed {ledger.count} records, {len(rejected)} rejected")
    return 1 if rejected else 0


def cmd_check_formats(args: argparse.Namespace) -> int:
    """Check every configured format's structure."""
    resolver = PolicyResolver.from_config_dir(args.config)
    failures = 0
    for fmt in resolver.formats():
        errors = check_format(fmt, strict=args.strict)
        if errors:
            failures += 1
            for err in errors:
                print(f"{fmt.format_id}: {err}", file=sys.stderr)
        else:
            print(f"{fmt.format_id}: ok ({len(fmt.components)} components)")
    return 1 if failures else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="roshambo",
        description="Commit-reveal rock/paper/scissors over a content-addressed ledger",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=Path(os.environ.get("ROSHAMBO_CONFIG_DIR", DEFAULT_CONFIG)),
        help="Path to config directory (default: config/)",
    )
    parser.add_argument(
        "--data",
        type=Path,
        default=Path(os.environ.get("ROSHAMBO_DATA_DIR", DEFAULT_DATA)),
        help="Path to data directory (default: data/)",
    )
    parser.add_argument(
        "--as", dest="agent",
        default=os.environ.get("ROSHAMBO_AGENT"),
        help="Agent identity acting (default: $ROSHAMBO_AGENT)",
    )
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("register", help="Register the acting agent")

    p_offer = sub.add_parser("offer", help="Host: offer a game")
    p_offer.add_argument("--challenger", required=True, help="Challenger identity")
    p_offer.add_argument("--format", required=True, help="Format id")

    p_commit = sub.add_parser("commit", help="Challenger: commit to a hidden move")
    p_commit.add_argument("--offer", required=True, help="Offer address")
    p_commit.add_argument("--host", required=True, help="Host identity")
    p_commit.add_argument("--component", required=True, help="Component name")
    p_commit.add_argument("--nonce", help="Explicit nonce (default: random)")

    p_move = sub.add_parser("move", help="Host: play a move")
    p_move.add_argument("--commitment", required=True, help="Commitment address")
    p_move.add_argument("--challenger", required=True, help="Challenger identity")
    p_move.add_argument("--component", required=True, help="Component name")

    p_result = sub.add_parser("result", help="Challenger: reveal and publish the result")
    p_result.add_argument("--move", required=True, help="Move address")
    p_result.add_argument("--host", required=True, help="Host identity")

    p_show = sub.add_parser("show", help="Show a record")
    p_show.add_argument("address", help="Content address")

    sub.add_parser("status", help="Show agent status")
    sub.add_parser("replay", help="Re-validate the local ledger")

    p_check = sub.add_parser("check-formats", help="Check configured formats")
    p_check.add_argument(
        "--strict", action="store_true",
        help="Also report relations recorded in only one direction",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    load_dotenv(ROOT / ".env")
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "register": cmd_register,
        "offer": cmd_offer,
        "commit": cmd_commit,
        "move": cmd_move,
        "result": cmd_result,
        "show": cmd_show,
        "status": cmd_status,
        "replay": cmd_replay,
        "check-formats": cmd_check_formats,
    }

    handler = commands.get(args.command)
    if handler is None:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1

    return handler(args)


if __name__ == "__main__":
    raise SystemExit(main())
