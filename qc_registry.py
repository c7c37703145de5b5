#!/usr/bin/env python3
"""
qc_registry.py — registry invariant QC for one game.

Writes out/qc/registry_issues_<CODE>.csv and exits non-zero when any
error-severity issue is found. Does NOT modify data.
"""

from __future__ import annotations

import argparse
import json

from registry_qc import check_registry, issues_frame, summarize_issues
from registry_store import StoreError, add_store_args, store_from_args
from tracker_common import OUT, ConfigurationError, fail, ok, setup_logging

QCDIR = OUT / "qc"


def main() -> int:
    ap = argparse.ArgumentParser()
    add_store_args(ap)
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args()

    setup_logging(args.verbose)
    store = store_from_args(args)
    try:
        session = store.load(args.game)
        issues = check_registry(session.players, session.valid_cities)
    except (StoreError, ConfigurationError) as e:
        fail(f"ERROR: {e}")
        return 2

    QCDIR.mkdir(parents=True, exist_ok=True)
    p = QCDIR / f"registry_issues_{session.code}.csv"
    issues_frame(issues).to_csv(p, index=False)

    summary = summarize_issues(issues)
    print(json.dumps(summary, indent=2))
    if summary["errors"]:
        fail(f"QC FAIL: {summary['errors']} errors. See {p}")
    ok("QC OK")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
