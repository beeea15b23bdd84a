#!/usr/bin/env python3
"""
Operate the hotel/service relational projection from the command line.
It packages schema setup, change replay, and service filtering so they can be run without the API.
Run it directly, and expect JSON on stdout and a non-zero exit code on failure.
"""
# ruff: noqa: E402

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from src.common.logging import configure_logging
from src.sync.ddl import apply_hotel_sync_ddl
from src.sync.dispatcher import ChangeDispatcher
from src.sync.errors import SyncError
from src.sync.replay import replay_changes
from src.sync.service_filter import ServiceFilterResolver
from src.sync.store import open_store
from src.sync.sync_config import load_sync_config


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Hotel/service projection utilities")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init-schema", help="Create the hotels, services, and hotels_services tables")

    apply_parser = subparsers.add_parser("apply", help="Replay a JSON-lines file of hotel change events")
    apply_parser.add_argument("path", type=Path, help="File with one change event per line, or '-' for stdin")

    filter_parser = subparsers.add_parser("filter", help="Print hotels offering every given service")
    filter_parser.add_argument("services", nargs="+", help="Required service names")
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    configure_logging()

    try:
        config = load_sync_config()
        if args.command == "init-schema":
            with open_store(config) as db:
                apply_hotel_sync_ddl(db.engine, db.tables)
            tables = [config.hotels_table_name, config.services_table_name, config.hotels_services_table_name]
            print(json.dumps({"schema": "ready", "tables": tables}, indent=2))
        elif args.command == "apply":
            dispatcher = ChangeDispatcher(config_loader=lambda: config)
            if str(args.path) == "-":
                counts = replay_changes(sys.stdin, dispatcher)
            else:
                with args.path.open("r", encoding="utf-8") as handle:
                    counts = replay_changes(handle, dispatcher)
            print(json.dumps(counts, indent=2))
        else:
            with open_store(config) as db:
                hotel_ids = ServiceFilterResolver(db=db).filter_hotels(args.services)
            print(json.dumps([{"hotel_id": hotel_id} for hotel_id in hotel_ids], indent=2))
    except SyncError as exc:
        print(json.dumps({"error_code": exc.error_code, "message": exc.message}), file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
