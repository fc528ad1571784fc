#!/usr/bin/env python3
"""
Poker Ledger CLI

Runs the ledger API and works with pasted game results from the command line.
Results files hold one player per line, e.g. "Alice: +25.50" or "Bob -10".

Usage:
    python poker_ledger.py serve --port 5001
    python poker_ledger.py preview results.txt
    python poker_ledger.py import results.txt --date 2026-10-17
    python poker_ledger.py push results.txt --server http://127.0.0.1:5001
    python poker_ledger.py export ledger.xlsx
    python poker_ledger.py check
"""

import argparse
import datetime as dt
import logging
import sys
from pathlib import Path

from pokerledger import (
    BulkValidationError,
    LedgerAPIError,
    LedgerClient,
    LedgerError,
    create_from_results,
    export_ledger_to_excel,
    open_database,
    parse_results,
    validate_ledger,
)
from pokerledger.bulk_import import rows_from_preview
from pokerledger.config import get_config, get_database_path
from pokerledger.logging_config import setup_logging
from pokerledger.server import run_server
from pokerledger.utils import save_json


def read_results(path: str) -> str:
    """Read results text from a file, or stdin for '-'."""
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text()


def open_configured_database():
    return open_database(get_database_path(), seed_demo_data=get_config().seed_demo_data)


def print_preview(result: dict) -> None:
    preview = result["preview"]
    print(f"Game date: {preview['gameDate']}")
    print(f"Players: {preview['playerCount']}")
    print(f"  Buy-ins:  {preview['totalBuyins']:.2f}")
    print(f"  Cash-outs: {preview['totalCashouts']:.2f}")
    print(f"  Discrepancy: {preview['discrepancy']:.2f}")

    print("\nMatched:")
    for m in result["matching"]["matched"]:
        print(
            f"  {m['parsedName']} -> {m['existingPlayer']['name']} "
            f"({m['similarity']:.0%}) {m['profit']:+.2f}"
        )

    print("\nNew players:")
    for u in result["matching"]["unmatched"]:
        hint = ", ".join(f"{s['name']} ({s['similarity']:.0%})" for s in u["suggestions"])
        print(f"  {u['parsedName']} {u['profit']:+.2f}" + (f"  did you mean: {hint}" if hint else ""))

    for warning in result["validation"]["warnings"]:
        print(f"\n⚠️  {warning}")


def print_summary(result: dict) -> None:
    summary = result["summary"]
    print(f"Created game {result['game']['id']} on {result['game']['date']}")
    print(f"  {summary['totalPlayers']} players, {summary['newPlayersCount']} new")
    print(f"  Buy-ins {summary['totalBuyins']:.2f}, cash-outs {summary['totalCashouts']:.2f}")


def cmd_serve(args) -> int:
    run_server(args.host, args.port)
    return 0


def cmd_preview(args) -> int:
    db = open_configured_database()
    try:
        result = parse_results(db, read_results(args.file), args.date)
    finally:
        db.close()
    print_preview(result)
    if args.json:
        save_json(args.json, result)
        print(f"\nPreview saved to {args.json}")
    return 0


def cmd_import(args) -> int:
    game_date = args.date or dt.date.today()
    db = open_configured_database()
    try:
        preview = parse_results(db, read_results(args.file), game_date)
        print_preview(preview)
        print()
        result = create_from_results(
            db, game_date, rows_from_preview(preview), create_new_players=not args.no_create
        )
    finally:
        db.close()
    print_summary(result)
    return 0


def cmd_push(args) -> int:
    game_date = args.date or dt.date.today()
    client = LedgerClient(args.server)
    print_summary(client.import_text(read_results(args.file), game_date))
    return 0


def cmd_export(args) -> int:
    db = open_configured_database()
    try:
        path = export_ledger_to_excel(db, args.output)
    finally:
        db.close()
    print(f"Ledger exported to {path}")
    return 0


def cmd_check(args) -> int:
    db = open_configured_database()
    try:
        errors, warnings = validate_ledger(db)
    finally:
        db.close()

    for warning in warnings:
        print(f"⚠️  {warning}")
    for error in errors:
        print(f"❌ {error}")
    if errors:
        return 1
    print("✓ Ledger totals are consistent")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Poker game ledger")
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log debug output",
    )
    parser.add_argument(
        "--no-log-file",
        action="store_true",
        help="Only log to the console",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=None, help="Interface to bind (default: from config)")
    serve.add_argument("--port", type=int, default=None, help="Port to bind (default: from config)")
    serve.set_defaults(func=cmd_serve)

    for name, func, help_text in (
        ("preview", cmd_preview, "Parse results and show matches without saving"),
        ("import", cmd_import, "Parse results and record the game"),
        ("push", cmd_push, "Send results to a running server"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("file", help="Results file, or - for stdin")
        sub.add_argument(
            "--date",
            type=dt.date.fromisoformat,
            default=None,
            help="Game date as YYYY-MM-DD (default: today)",
        )
        sub.set_defaults(func=func)
        if name == "preview":
            sub.add_argument("--json", default=None, help="Also save the preview as JSON")
        if name == "import":
            sub.add_argument(
                "--no-create",
                action="store_true",
                help="Fail instead of creating players for unmatched names",
            )
        if name == "push":
            sub.add_argument("--server", required=True, help="Server URL, e.g. http://127.0.0.1:5001")

    export = subparsers.add_parser("export", help="Write the ledger to an Excel workbook")
    export.add_argument("output", help="Output .xlsx path")
    export.set_defaults(func=cmd_export)

    check = subparsers.add_parser("check", help="Verify stored totals against game records")
    check.set_defaults(func=cmd_check)

    args = parser.parse_args(argv)

    setup_logging(
        level=logging.DEBUG if args.verbose else logging.INFO,
        log_to_file=not args.no_log_file,
    )

    try:
        return args.func(args)
    except BulkValidationError as e:
        print("❌ Invalid results:")
        for error in e.errors:
            print(f"   {error}")
        return 1
    except (LedgerError, LedgerAPIError) as e:
        print(f"❌ {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
