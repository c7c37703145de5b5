#!/usr/bin/env python3
"""
00_new_game.py — create a game session, or check that one exists.

Usage:
  python 00_new_game.py --create
  python 00_new_game.py --create --cities Beirut Chicago Auckland
  python 00_new_game.py --join K3X9QZ
"""

from __future__ import annotations

import argparse
import os
from pathlib import Path

from registry_store import StoreError, normalize_game_code, open_store
from tracker_common import DATA, DEFAULT_VALID_CITIES, ConfigurationError, fail, ok, setup_logging


def main() -> int:
    ap = argparse.ArgumentParser()
    mode = ap.add_mutually_exclusive_group(required=True)
    mode.add_argument("--create", action="store_true", help="Create a new game and print its code.")
    mode.add_argument("--join", metavar="CODE", help="Verify a game code exists.")
    ap.add_argument("--cities", nargs="+", default=list(DEFAULT_VALID_CITIES),
                    help="Valid city enumeration for a new game.")
    ap.add_argument("--data-dir", type=Path, default=DATA)
    ap.add_argument("--remote-url", default=os.environ.get("MAFIA_MATRIX_REMOTE_URL"))
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args()

    setup_logging(args.verbose)
    store = open_store(args.data_dir, args.remote_url)

    try:
        if args.create:
            session = store.create(valid_cities=args.cities)
            ok(f"Created new game: {session.code}")
            print(f"Valid cities: {', '.join(session.valid_cities)}")
            return 0

        code = normalize_game_code(args.join)
        if not store.exists(code):
            fail(f"Game not found: {code}")
        session = store.load(code)
        ok(f"Joined game: {code}")
        print(f"Players: {len(session.players)}  Last scan: {len(session.last_scan)} names")
        return 0
    except (StoreError, ConfigurationError) as e:
        fail(f"ERROR: {e}")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
