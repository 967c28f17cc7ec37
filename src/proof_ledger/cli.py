"""
Command-line interface for proof-ledger.

Provides CLI commands for working with ledgers:
- seal: Build a fresh ledger from payload arguments and optionally snapshot it
- verify: Load a JSONL snapshot and check the whole chain
- config: Print the effective configuration

Usage:
    proof-ledger seal "temp=21.4" "temp=21.9" [--difficulty N] [--output FILE]
    proof-ledger verify ledger.jsonl [--difficulty N]
    proof-ledger config

Environment Variables:
    LEDGER_DIFFICULTY: Default difficulty (leading hex zeros, default: 2)
    LEDGER_MAX_ATTEMPTS: Bound on each nonce search (default: 0 = unbounded)
    LEDGER_LOG_LEVEL: Logging level for the CLI (default: INFO)
"""

import argparse
import sys

from proof_ledger import __version__
from proof_ledger.config import configure_logging, get_config, print_config_summary

# Exit codes
EXIT_OK = 0
EXIT_FAILED = 1
EXIT_UNREADABLE = 2


def cmd_seal(args: argparse.Namespace) -> int:
    """
    Seal each payload into a fresh ledger and print the resulting chain.

    Returns:
        0 on success, 1 if sealing, payload validation, or the snapshot
        write fails
    """
    from proof_ledger.ledger import (
        InvalidPayloadError,
        Ledger,
        SealingExhausted,
        SnapshotError,
        dump_jsonl,
    )

    try:
        ledger = Ledger(difficulty=args.difficulty, max_attempts=args.max_attempts)
        for payload in args.payloads:
            ledger.append(payload)
    except (InvalidPayloadError, SealingExhausted, ValueError) as e:
        print(f"Error sealing ledger: {e}", file=sys.stderr)
        return EXIT_FAILED

    for record in ledger:
        print(record.summary())

    result = ledger.verify()
    print(f"Ledger length: {len(ledger)}")
    print(f"Ledger is valid: {result.ok}")

    if args.output:
        try:
            path = dump_jsonl(ledger, args.output)
        except SnapshotError as e:
            print(f"Error writing snapshot: {e}", file=sys.stderr)
            return EXIT_FAILED
        print(f"Snapshot written to {path}")

    return EXIT_OK


def cmd_verify(args: argparse.Namespace) -> int:
    """
    Load a snapshot and verify it.

    Returns:
        0 if the chain is valid, 1 if verification fails, 2 if the file
        cannot be loaded
    """
    from proof_ledger.ledger import SnapshotError, load_jsonl

    try:
        ledger = load_jsonl(args.file, difficulty=args.difficulty)
    except (SnapshotError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_UNREADABLE

    result = ledger.verify()
    if result:
        print(f"valid ({len(ledger)} records)")
        return EXIT_OK

    print(
        f"INVALID at record #{result.failed_index}: {result.status} ({result.error_detail})",
        file=sys.stderr,
    )
    return EXIT_FAILED


def cmd_config(args: argparse.Namespace) -> int:
    """Print the effective configuration."""
    print_config_summary()
    return EXIT_OK


def _positive_int(value: str) -> int:
    """argparse type for strictly positive integers."""
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="proof-ledger",
        description="proof-ledger - append-only, proof-of-work sealed record chain",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # seal command
    seal_parser = subparsers.add_parser(
        "seal",
        help="Seal payloads into a new ledger",
        description=(
            "Create a ledger, append each payload in order, and print the chain. "
            "Use --output to write a JSONL snapshot."
        ),
    )
    seal_parser.add_argument("payloads", nargs="*", help="Payload strings to append")
    seal_parser.add_argument(
        "--difficulty",
        "-d",
        type=int,
        help="Leading hex zeros required (default: LEDGER_DIFFICULTY or config)",
    )
    seal_parser.add_argument(
        "--max-attempts",
        type=_positive_int,
        help="Give up sealing a record after this many nonces (default: unbounded)",
    )
    seal_parser.add_argument("--output", "-o", type=str, help="Write a JSONL snapshot here")
    seal_parser.set_defaults(func=cmd_seal)

    # verify command
    verify_parser = subparsers.add_parser(
        "verify",
        help="Verify a JSONL snapshot",
        description="Load a snapshot written by 'seal --output' and verify every record.",
    )
    verify_parser.add_argument("file", type=str, help="Snapshot file to verify")
    verify_parser.add_argument(
        "--difficulty",
        "-d",
        type=int,
        help="Difficulty the chain was sealed at (default: LEDGER_DIFFICULTY or config)",
    )
    verify_parser.set_defaults(func=cmd_verify)

    # config command
    config_parser = subparsers.add_parser("config", help="Show the effective configuration")
    config_parser.set_defaults(func=cmd_config)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_OK

    configure_logging(get_config())
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
