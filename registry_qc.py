"""
registry_qc.py — registry invariant checks and roster statistics.

Checks (all severity "error" unless noted):
  R01  dead player still flagged isCurrentlyHD
  R02  more than one current career entry
  R03  dead player with an open career entry
  R04  living player with no current career entry        (warn)
  R05  career entries out of start-date order
  R06  currentCity outside the configured enumeration
  R07  negative whack / MHS counter
  R08  isCurrentlyHD set without wasHD

Every check returns QCIssue objects; nothing here modifies the registry.
"""

from __future__ import annotations

from collections import Counter
from typing import Sequence

import pandas as pd

from registry_model import Registry
from tracker_common import resolve_valid_cities


class QCIssue:
    """Represents a single QC issue."""
    def __init__(
        self,
        check_id: str,
        severity: str,
        player: str,
        field: str,
        message: str,
        example_value: str = "",
    ):
        self.check_id = check_id
        self.severity = severity
        self.player = player
        self.field = field
        self.message = message
        self.example_value = example_value

    def to_dict(self) -> dict:
        return {
            "check_id": self.check_id,
            "severity": self.severity,
            "player": self.player,
            "field": self.field,
            "message": self.message,
            "example_value": self.example_value,
        }


def check_registry(registry: Registry, valid_cities: Sequence[str]) -> list[QCIssue]:
    cities = resolve_valid_cities(valid_cities)
    issues: list[QCIssue] = []

    for name, p in sorted(registry.items()):
        current = [e for e in p.career_history if e.is_current]

        if p.is_dead and p.is_currently_hd:
            issues.append(QCIssue("R01", "error", name, "isCurrentlyHD",
                                  "Dead player is still flagged as current HD"))
        if len(current) > 1:
            issues.append(QCIssue("R02", "error", name, "careerHistory",
                                  "More than one current career entry", str(len(current))))
        if p.is_dead and current:
            issues.append(QCIssue("R03", "error", name, "careerHistory",
                                  "Dead player has an open career entry", current[0].occupation))
        if not p.is_dead and p.career_history and not current:
            issues.append(QCIssue("R04", "warn", name, "careerHistory",
                                  "Living player has no current career entry"))

        starts = [e.start_date for e in p.career_history]
        if any(b < a for a, b in zip(starts, starts[1:])):
            issues.append(QCIssue("R05", "error", name, "careerHistory",
                                  "Career entries are not in start-date order"))

        if not p.is_dead and p.current_city not in cities:
            issues.append(QCIssue("R06", "error", name, "currentCity",
                                  "City is not in validCities", p.current_city))

        for fld, value in (("whacksSurvived", p.whacks_survived), ("mhsSurvived", p.mhs_survived)):
            if value < 0:
                issues.append(QCIssue("R07", "error", name, fld, "Negative counter", str(value)))

        if p.is_currently_hd and not p.was_hd:
            issues.append(QCIssue("R08", "error", name, "wasHD",
                                  "Currently HD but lifetime flag not set"))

    return issues


def issues_frame(issues: list[QCIssue]) -> pd.DataFrame:
    cols = ["check_id", "severity", "player", "field", "message", "example_value"]
    if not issues:
        return pd.DataFrame(columns=cols)
    return pd.DataFrame([i.to_dict() for i in issues], columns=cols)


def summarize_issues(issues: list[QCIssue]) -> dict:
    by_check = Counter(i.check_id for i in issues)
    by_sev = Counter(i.severity for i in issues)
    return {
        "total_issues": len(issues),
        "errors": by_sev.get("error", 0),
        "warnings": by_sev.get("warn", 0),
        "by_check": dict(sorted(by_check.items())),
    }


# ------------------------------------------------------------
# Statistics
# ------------------------------------------------------------
def roster_stats(registry: Registry) -> dict:
    alive = [p for p in registry.values() if not p.is_dead]
    return {
        "total": len(alive),
        "new": sum(1 for p in alive if p.is_new),
        "ops": sum(1 for p in alive if p.is_ops),
        "cm": sum(1 for p in alive if p.was_hd),
        "friendly": sum(1 for p in alive if p.is_friendly),
        "totalMhs": sum(p.mhs_survived for p in alive),
        "dead": len(registry) - len(alive),
    }


def city_breakdown(registry: Registry, valid_cities: Sequence[str]) -> pd.DataFrame:
    """Alive players per valid city with ops / CM counts, largest city first."""
    cities = resolve_valid_cities(valid_cities)
    rows = [
        {"city": p.current_city, "total": 1, "ops": int(p.is_ops), "cm": int(p.was_hd)}
        for p in registry.values()
        if not p.is_dead and p.current_city in cities
    ]
    if not rows:
        return pd.DataFrame(columns=["city", "total", "ops", "cm"])

    df = (
        pd.DataFrame(rows)
        .groupby("city", as_index=False)
        .agg(total=("total", "sum"), ops=("ops", "sum"), cm=("cm", "sum"))
    )
    return df.sort_values(["total", "city"], ascending=[False, True]).reset_index(drop=True)
