#!/usr/bin/env python3
"""
01_ingest_roster.py — apply a roster scan to a game.

Reads the pasted scan (file or stdin), reconciles it against the game's
registry and last scan, and saves the whole session back.

Players named in the previous scan but missing from this one are marked dead,
so an accidental empty paste would kill everyone. The script refuses to save
a scan with zero accepted lines unless --allow-empty is given.

Usage:
  python 01_ingest_roster.py --game K3X9QZ --input scan.txt
  pbpaste | python 01_ingest_roster.py --game K3X9QZ
  python 01_ingest_roster.py --game K3X9QZ --input scan.txt --dry-run
"""

from __future__ import annotations

import argparse

from registry_qc import roster_stats
from registry_store import StoreError, add_store_args, store_from_args
from roster_reconcile import reconcile_roster
from tracker_common import ConfigurationError, fail, join_names, ok, read_input_text, setup_logging


def main() -> int:
    ap = argparse.ArgumentParser()
    add_store_args(ap)
    ap.add_argument("--input", default=None, help="Scan text file ('-' or omitted = stdin).")
    ap.add_argument("--dry-run", action="store_true", help="Report only; do not save.")
    ap.add_argument("--allow-empty", action="store_true",
                    help="Save even when no line was accepted (marks the whole last scan dead).")
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args()

    setup_logging(args.verbose)
    store = store_from_args(args)

    try:
        raw = read_input_text(args.input)
        session = store.load(args.game)
        players, scan, report = reconcile_roster(
            session.players, session.last_scan, raw, session.valid_cities
        )
    except (FileNotFoundError, StoreError, ConfigurationError) as e:
        fail(f"ERROR: {e}")
        return 2

    stats = roster_stats(players)
    print("Parsing complete!")
    print(f"Processed: {report.processed} lines")
    print(f"Skipped: {report.skipped} lines")
    if report.invalid_city:
        print(f"Invalid cities: {report.invalid_city} (check data format!)")
    print(f"Alive players: {stats['total']}")
    print(f"Combat Medics (Ever HD): {stats['cm']}")
    print(f"Died this scan: {len(report.died)}")
    print(f"New players: {len(report.new_players)}")
    if report.died:
        print(f"  Died: {join_names(report.died)}")
    if report.new_players:
        print(f"  New: {join_names(report.new_players)}")

    if args.dry_run:
        ok("Dry run: nothing saved.")
        return 0

    if report.processed == 0 and session.last_scan and not args.allow_empty:
        fail("Refusing to save: no roster line was accepted (use --allow-empty to force).")
        return 2

    session.players = players
    session.last_scan = sorted(scan)
    try:
        store.save(session)
    except StoreError as e:
        fail(f"Failed to save to store: {e}")
        return 2
    ok(f"Saved game {session.code}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
