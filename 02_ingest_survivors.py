#!/usr/bin/env python3
"""
02_ingest_survivors.py — overwrite whack / MHS survival counters.

Usage:
  python 02_ingest_survivors.py --game K3X9QZ --input survivors.txt
  python 02_ingest_survivors.py --game K3X9QZ --input survivors.txt --mhs-policy preserve
"""

from __future__ import annotations

import argparse

from registry_store import StoreError, add_store_args, store_from_args
from survivor_stats import MHS_OVERWRITE, MHS_POLICIES, apply_survivor_stats
from tracker_common import fail, join_names, ok, read_input_text, setup_logging


def main() -> int:
    ap = argparse.ArgumentParser()
    add_store_args(ap)
    ap.add_argument("--input", default=None, help="Survivor text file ('-' or omitted = stdin).")
    ap.add_argument("--mhs-policy", choices=MHS_POLICIES, default=MHS_OVERWRITE,
                    help="overwrite: missing MHS writes 0. preserve: missing MHS keeps the old value.")
    ap.add_argument("--dry-run", action="store_true")
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args()

    setup_logging(args.verbose)
    store = store_from_args(args)

    try:
        raw = read_input_text(args.input)
        session = store.load(args.game)
    except (FileNotFoundError, StoreError) as e:
        fail(f"ERROR: {e}")
        return 2

    players, report = apply_survivor_stats(session.players, raw, mhs_policy=args.mhs_policy)

    print("Survivor data updated!")
    print(f"Updated: {report.updated} players")
    print(f"Not found: {report.not_found} players")
    if report.not_found_names:
        print(f"  Not found: {join_names(report.not_found_names)}")

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
