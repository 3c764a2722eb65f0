"""CLI entry point for Material Guard.

Usage:
    python -m material_guard --store-dir PATH status [--json]
    python -m material_guard --store-dir PATH audit [--json]
    python -m material_guard --store-dir PATH recover [--write-back] [--output FILE]
    python -m material_guard --store-dir PATH snapshot --input FILE [--tier TIER ...]
    python -m material_guard --store-dir PATH enable|disable
    python -m material_guard --store-dir PATH clear --yes
    python -m material_guard --log-json --log-file guard.log --store-dir PATH status

Commands:
    status    Show preservation flag, heartbeat and available tiers
    audit     Compare every tier's fingerprint
    recover   Select the best tier and print (or save) its materials
    snapshot  Write a materials JSON file to backup tiers
    enable    Turn preservation on
    disable   Turn preservation off
    clear     Delete every tier, the heartbeat and the restore counter

The session mirror is volatile and always empty from the CLI's point of view.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from material_guard import MaterialGuard, GuardConfig, DirectoryStore, MemoryStore, __version__
from material_guard.config import StorageTier
from material_guard.utils.logging import configure_root_logger


def setup_logging(verbose: bool = False, json_output: bool = False, log_file: str = None) -> None:
    """Configure logging for CLI output."""
    level = logging.DEBUG if verbose else logging.WARNING
    if json_output or log_file:
        configure_root_logger(level, json_output=json_output, log_file=log_file)
        return
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(message)s",
        datefmt="%H:%M:%S",
    )


def build_guard(args: argparse.Namespace) -> MaterialGuard:
    return MaterialGuard(
        DirectoryStore(Path(args.store_dir)),
        MemoryStore(),
        config=GuardConfig(key_prefix=args.prefix),
    )


def cmd_status(args: argparse.Namespace) -> int:
    """Handle the 'status' command.

    Returns:
        Exit code (0 for success)
    """
    status = build_guard(args).status()

    if args.json:
        print(json.dumps(status, indent=2, default=str))
        return 0

    print(f"Preservation: {'enabled' if status['enabled'] else 'DISABLED'}")
    print(f"Key prefix: {status['key_prefix']}")
    heartbeat = status["heartbeat"]
    if heartbeat:
        print(f"Heartbeat: {heartbeat['count']} materials, "
              f"fingerprint {heartbeat['fingerprint']}, "
              f"{status['heartbeat_age_seconds']:.0f}s old")
    else:
        print("Heartbeat: none")
    print(f"Restore attempts: {status['restore_attempts']}")
    print(f"Available tiers: {', '.join(status['available_tiers']) or 'none'}")
    print(f"Tiers consistent: {status['all_consistent']}")
    return 0


def cmd_audit(args: argparse.Namespace) -> int:
    """Handle the 'audit' command.

    Returns:
        Exit code (0 if consistent, 1 if tiers disagree)
    """
    report = build_guard(args).audit()
    data = report.to_dict()

    if args.json:
        print(json.dumps(data, indent=2))
    else:
        for tier, info in data["tiers"].items():
            if info is None:
                state = "unreadable" if tier in data["unreadable"] else "absent"
                print(f"  [{tier}] {state}")
            else:
                print(f"  [{tier}] {info['count']} materials, fingerprint {info['fingerprint']}"
                      f"{' (legacy)' if info['legacy'] else ''}")
        print()
        print(f"All consistent: {data['all_consistent']}")

    return 0 if report.all_consistent else 1


def cmd_recover(args: argparse.Namespace) -> int:
    """Handle the 'recover' command.

    Returns:
        Exit code (0 if a tier qualified, 1 otherwise)
    """
    guard = build_guard(args)
    result = guard.restore() if args.write_back else guard.recover()

    for tier, reason in result.skipped.items():
        print(f"  skipped {tier.value}: {reason}", file=sys.stderr)

    if not result.success:
        print("No recoverable materials found", file=sys.stderr)
        return 1

    payload = json.dumps(result.records, indent=2, ensure_ascii=False)
    if args.output:
        Path(args.output).write_text(payload, encoding="utf-8")
        print(f"Recovered {len(result.records)} materials from {result.source.value} "
              f"-> {args.output}")
    else:
        print(payload)
    return 0


def cmd_snapshot(args: argparse.Namespace) -> int:
    """Handle the 'snapshot' command.

    Returns:
        Exit code (0 if every tier was written)
    """
    try:
        records = json.loads(Path(args.input).read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        print(f"Error: cannot read materials from {args.input}: {e}", file=sys.stderr)
        return 1
    if not isinstance(records, list):
        print("Error: materials file must hold a JSON array", file=sys.stderr)
        return 1

    result = build_guard(args).snapshot(records, args.tier or None)
    if result.skipped:
        print("Preservation disabled - nothing written", file=sys.stderr)
        return 1

    print(f"Snapshot of {result.count} materials: "
          f"written {', '.join(t.value for t in result.written) or 'none'}")
    for tier, error in result.failed.items():
        print(f"  failed {tier.value}: {error}", file=sys.stderr)
    return 0 if result.success else 1


def cmd_enable(args: argparse.Namespace) -> int:
    build_guard(args).set_enabled(True)
    print("Preservation enabled")
    return 0


def cmd_disable(args: argparse.Namespace) -> int:
    build_guard(args).set_enabled(False)
    print("Preservation disabled")
    return 0


def cmd_clear(args: argparse.Namespace) -> int:
    if not args.yes:
        print("Refusing to clear without --yes", file=sys.stderr)
        return 1
    if build_guard(args).clear_all():
        print("All preservation data cleared")
        return 0
    print("Some keys could not be cleared", file=sys.stderr)
    return 1


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="material_guard",
        description="Material Guard - inspect and recover material snapshots",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose output")
    parser.add_argument("--log-json", action="store_true", help="Emit log records as JSON lines")
    parser.add_argument("--log-file", help="Also write logs to this file")
    parser.add_argument("--store-dir", required=True, help="Durable store directory")
    parser.add_argument("--prefix", default="materials", help="Storage key prefix (default: materials)")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    status_parser = subparsers.add_parser("status", help="Show preservation status")
    status_parser.add_argument("--json", action="store_true", help="Output as JSON")

    audit_parser = subparsers.add_parser("audit", help="Compare tiers")
    audit_parser.add_argument("--json", action="store_true", help="Output as JSON")

    recover_parser = subparsers.add_parser("recover", help="Recover materials from the best tier")
    recover_parser.add_argument(
        "--write-back", action="store_true",
        help="Also write the recovered materials back to the primary tier"
    )
    recover_parser.add_argument("--output", help="Write recovered materials to this file")

    snapshot_parser = subparsers.add_parser("snapshot", help="Write materials to backup tiers")
    snapshot_parser.add_argument("--input", required=True, help="JSON file holding a materials array")
    snapshot_parser.add_argument(
        "--tier", action="append", choices=[t.value for t in StorageTier],
        help="Tier to write (repeatable; default: backup-1, backup-2, emergency)"
    )

    subparsers.add_parser("enable", help="Turn preservation on")
    subparsers.add_parser("disable", help="Turn preservation off")

    clear_parser = subparsers.add_parser("clear", help="Delete all preservation data")
    clear_parser.add_argument("--yes", action="store_true", help="Confirm the deletion")

    return parser


def main(argv=None) -> int:
    """Main entry point for the CLI.

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    setup_logging(verbose=args.verbose, json_output=args.log_json, log_file=args.log_file)

    commands = {
        "status": cmd_status,
        "audit": cmd_audit,
        "recover": cmd_recover,
        "snapshot": cmd_snapshot,
        "enable": cmd_enable,
        "disable": cmd_disable,
        "clear": cmd_clear,
    }

    handler = commands.get(args.command)
    if handler:
        return handler(args)
    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
