#!/usr/bin/env python3
"""
04_find_remakes.py — remake review list (dead player ↔ new player, same city).

Non-authoritative: this writes a CSV for a human to read. Nothing in the
game is changed. Fill human_decision (same / different) if you want to keep
a record of the review.

Outputs:
  out/remake_candidates_<CODE>.csv
"""

from __future__ import annotations

import argparse
from pathlib import Path

import pandas as pd

from registry_store import StoreError, add_store_args, store_from_args
from remake_detect import MIN_SIMILARITY, find_remakes
from tracker_common import OUT, fail, ok, setup_logging

OUT_COLUMNS = ["dead", "new", "similarity", "city", "human_decision", "notes"]


def main() -> int:
    ap = argparse.ArgumentParser()
    add_store_args(ap)
    ap.add_argument("--out_csv", type=Path, default=None)
    ap.add_argument("--threshold", type=float, default=MIN_SIMILARITY,
                    help="Report pairs scoring strictly above this.")
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args()

    setup_logging(args.verbose)
    store = store_from_args(args)
    try:
        session = store.load(args.game)
    except StoreError as e:
        fail(f"ERROR: {e}")
        return 2

    candidates = find_remakes(session.players, threshold=args.threshold)
    out_path = args.out_csv or (OUT / f"remake_candidates_{session.code}.csv")
    out_path.parent.mkdir(parents=True, exist_ok=True)

    rows = [dict(c.to_dict(), human_decision="", notes="") for c in candidates]
    pd.DataFrame(rows, columns=OUT_COLUMNS).to_csv(out_path, index=False)

    if not candidates:
        ok(f"No possible remakes found. Wrote empty {out_path}")
        return 0

    for c in candidates:
        print(f"  {c.dead} -> {c.new} ({c.city}) {c.similarity:.0%}")
    ok(f"Wrote {out_path} ({len(candidates)} candidates)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
