#!/usr/bin/env python3
"""
05_export_registry.py — export a game's registry, or restore one from CSV.

Mode 1: --export (default)
  Writes out/mafia_matrix_<CODE>_<YYYY-MM-DD>.csv  (or .xlsx with --format xlsx)

Mode 2: --restore PATH
  Reads a CSV produced by --export and replaces the game's players with it.
  The last scan is left alone. Irreversible: export first if in doubt.

Usage:
  python 05_export_registry.py --game K3X9QZ
  python 05_export_registry.py --game K3X9QZ --format xlsx
  python 05_export_registry.py --game K3X9QZ --restore out/mafia_matrix_K3X9QZ_2025-06-27.csv
"""

from __future__ import annotations

import argparse
from pathlib import Path

from registry_export import read_registry_csv, write_registry_csv, write_registry_xlsx
from registry_qc import roster_stats
from registry_store import StoreError, add_store_args, store_from_args
from tracker_common import OUT, fail, ok, setup_logging, utc_now


def main() -> int:
    ap = argparse.ArgumentParser()
    add_store_args(ap)
    ap.add_argument("--format", choices=["csv", "xlsx"], default="csv")
    ap.add_argument("--out", type=Path, default=None)
    ap.add_argument("--restore", type=Path, default=None, help="CSV export to load into the game.")
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args()

    setup_logging(args.verbose)
    store = store_from_args(args)
    try:
        session = store.load(args.game)
    except StoreError as e:
        fail(f"ERROR: {e}")
        return 2

    if args.restore:
        try:
            players = read_registry_csv(args.restore)
        except (FileNotFoundError, ValueError) as e:
            fail(f"ERROR: {e}")
            return 2
        session.players = players
        try:
            store.save(session)
        except StoreError as e:
            fail(f"Failed to save to store: {e}")
            return 2
        ok(f"Restored {len(players)} players into game {session.code}")
        return 0

    stamp = utc_now().date().isoformat()
    out_path = args.out or (OUT / f"mafia_matrix_{session.code}_{stamp}.{args.format}")
    if args.format == "xlsx":
        write_registry_xlsx(session.players, out_path, stats=roster_stats(session.players))
    else:
        write_registry_csv(session.players, out_path)
    ok(f"Wrote {out_path} ({len(session.players)} players)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
