#!/usr/bin/env python3
"""
03_ingest_funeral.py — apply a funeral-parlor log to a game.

Prints the death report and optionally writes it as CSV for the record.

Usage:
  python 03_ingest_funeral.py --game K3X9QZ --input funeral.txt
  python 03_ingest_funeral.py --game K3X9QZ --input funeral.txt --report-csv out/funeral_report.csv
"""

from __future__ import annotations

import argparse
from pathlib import Path

import pandas as pd

from funeral_parse import apply_funeral_log
from registry_store import StoreError, add_store_args, store_from_args
from tracker_common import ConfigurationError, fail, ok, read_input_text, setup_logging

REPORT_COLUMNS = ["name", "city", "occupation", "dateTime", "cause", "lastWords", "found", "isNameChange"]


def main() -> int:
    ap = argparse.ArgumentParser()
    add_store_args(ap)
    ap.add_argument("--input", default=None, help="Funeral log file ('-' or omitted = stdin).")
    ap.add_argument("--report-csv", type=Path, default=None)
    ap.add_argument("--dry-run", action="store_true")
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args()

    setup_logging(args.verbose)
    store = store_from_args(args)

    try:
        raw = read_input_text(args.input)
        session = store.load(args.game)
        players, report = apply_funeral_log(session.players, raw, session.valid_cities)
    except (FileNotFoundError, StoreError, ConfigurationError) as e:
        fail(f"ERROR: {e}")
        return 2

    print("Funeral parsing complete!")
    print(f"Processed deaths: {report.processed}")
    print(f"Not found: {report.not_found}")
    print(f"Name changes: {report.name_changes}")
    if report.unparseable:
        print(f"Unparseable lines: {report.unparseable}")
    for d in report.deaths:
        tag = "NAME CHANGE" if d.is_name_change else ("dead" if d.found else "not found")
        line = f"  [{tag}] {d.name} ({d.city}, {d.occupation}) {d.date_time}: {d.cause}"
        if d.last_words:
            line += f' -- "{d.last_words}"'
        print(line)

    if args.report_csv:
        args.report_csv.parent.mkdir(parents=True, exist_ok=True)
        pd.DataFrame([d.to_dict() for d in report.deaths], columns=REPORT_COLUMNS).to_csv(
            args.report_csv, index=False
        )
        print(f"Wrote {args.report_csv}")

    if args.dry_run:
        ok("Dry run: nothing saved.")
        return 0

    session.players = players
    try:
        store.save(session)
    except StoreError as e:
        fail(f"Failed to save to store: {e}")
        return 2
    ok(f"Saved game {session.code}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
