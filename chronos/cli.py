#!/usr/bin/env python3
"""Command-line interface for the local cognitive-state tracker."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Callable, List, Optional

from .config import get_settings
from .logging_config import configure_logging, logger
from .services import EventLog, PersistenceError, build_event_log, generate_stamp
from .sync_client import SyncError, push_records


def _emit(payload: Any) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def _cmd_init(log: EventLog, args: argparse.Namespace) -> int:
    result = log.init()
    _emit(result.to_document())
    return 0 if result.ok else 1


def _cmd_record(log: EventLog, args: argparse.Namespace) -> int:
    result = log.record(args.state, args.action, " ".join(args.description))
    _emit(result.to_document())
    return 0 if result.ok else 1


def _cmd_latest(log: EventLog, args: argparse.Namespace) -> int:
    result = log.latest()
    if not result.ok:
        _emit(result.to_document())
        return 1
    if result.record is None:
        print("No states recorded")
    elif args.json:
        _emit(result.record.to_document())
    else:
        print(result.record.stamp)
    return 0


def _cmd_list(log: EventLog, args: argparse.Namespace) -> int:
    result = log.query(state=args.state, action=args.action, limit=args.limit)
    if not result.ok:
        _emit(result.to_document())
        return 1
    for record in result.records:
        print(record.stamp)
    return 0


def _cmd_stats(log: EventLog, args: argparse.Namespace) -> int:
    result = log.stats()
    if not result.ok:
        _emit(result.to_document())
        return 1
    _emit(result.stats.to_document())
    return 0


def _cmd_export(log: EventLog, args: argparse.Namespace) -> int:
    result = log.export_csv(args.file)
    _emit(result.to_document())
    return 0 if result.ok else 1


def _cmd_stamp(log: EventLog, args: argparse.Namespace) -> int:
    # Standalone stamps share the tracker's counter and session marker
    stamp = generate_stamp(
        agent_name=log.agent_name,
        working_context=log.working_context,
        sequence_store=log.sequence_store,
        session_store=log.session_store,
        state=args.state,
        action=args.action,
        description=args.description,
        sequence=args.tick,
        session_id=args.session,
    )
    if args.json:
        _emit(stamp.as_dict())
    else:
        print(stamp.text)
    return 0


def _cmd_sync(log: EventLog, args: argparse.Namespace) -> int:
    settings = get_settings()
    url = args.url or settings.sync_url
    if not url:
        print("error: no aggregator URL given (pass one or set CHRONOS_SYNC_URL)", file=sys.stderr)
        return 1

    init_result = log.init()
    if not init_result.ok:
        _emit(init_result.to_document())
        return 1

    try:
        result = push_records(url, log.payload(), timeout=settings.sync_timeout)
    except SyncError as exc:
        logger.error("sync failed", extra={"error": str(exc), "url": url})
        _emit({"ok": False, "error": str(exc)})
        return 1
    _emit(result.to_document())
    return 0


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(prog="chronos", description="Cognitive state tracker")
    parser.add_argument("--dir", default=None, help="Working directory to track (default: current directory)")
    parser.add_argument("--agent", default=None, help=f"Agent name (default: {settings.agent_name})")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    init = sub.add_parser("init", help="Initialize the tracker in the working directory")
    init.set_defaults(handler=_cmd_init)

    record = sub.add_parser("record", help="Record a cognitive state")
    record.add_argument("state", nargs="?", default="Unknown")
    record.add_argument("action", nargs="?", default="event")
    record.add_argument("description", nargs="*", default=[])
    record.set_defaults(handler=_cmd_record)

    latest = sub.add_parser("latest", help="Show the latest recorded state")
    latest.add_argument("--json", action="store_true", help="Print the full record as JSON")
    latest.set_defaults(handler=_cmd_latest)

    listing = sub.add_parser("list", help="List recent states")
    listing.add_argument("limit", nargs="?", type=int, default=10)
    listing.add_argument("--state", default=None, help="Case-insensitive substring filter on state")
    listing.add_argument("--action", default=None, help="Exact action filter")
    listing.set_defaults(handler=_cmd_list)

    stats = sub.add_parser("stats", help="Show statistics")
    stats.set_defaults(handler=_cmd_stats)

    export = sub.add_parser("export", help="Export states to CSV")
    export.add_argument("file", nargs="?", default="cognitive-states.csv")
    export.set_defaults(handler=_cmd_export)

    stamp = sub.add_parser("stamp", help="Generate a standalone CHRONOS stamp")
    stamp.add_argument("--state", default="Unknown")
    stamp.add_argument("--action", default="event")
    stamp.add_argument("--description", default="")
    stamp.add_argument("--tick", type=int, default=None, help="Explicit tick instead of the counter")
    stamp.add_argument("--session", default=None, help="Explicit session id instead of the marker")
    stamp.add_argument("--json", action="store_true", help="Output as JSON instead of the plain stamp")
    stamp.set_defaults(handler=_cmd_stamp)

    sync = sub.add_parser("sync", help="Push recorded states to an aggregator")
    sync.add_argument("url", nargs="?", default=None)
    sync.set_defaults(handler=_cmd_sync)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging()
    if args.verbose:
        logger.setLevel("DEBUG")

    log = build_event_log(Path(args.dir) if args.dir else None, agent_name=args.agent)
    handler: Callable[[EventLog, argparse.Namespace], int] = args.handler
    try:
        return handler(log, args)
    except (PersistenceError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover - CLI invocation guard
    sys.exit(main())
