"""
tracker_common.py — shared configuration and CLI helpers.

Everything the stage scripts and the engine modules agree on lives here:
default paths, the valid-city enumeration, the Hospital-Director /
Combat-Medic occupation test, the clock, and the ok/fail exit helpers.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Optional

ROOT = Path(".")
DATA = ROOT / "data"
OUT = ROOT / "out"

# Seed for new game sessions only. The session's settings.validCities is authoritative.
DEFAULT_VALID_CITIES = ("Beirut", "Chicago", "Auckland")

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"


class ConfigurationError(ValueError):
    """City enumeration (or another required setting) is missing or unusable."""


def resolve_valid_cities(source: Any) -> tuple[str, ...]:
    """
    Accepts a session settings dict ({"validCities": [...]}) or any iterable of
    city names. Returns a tuple, order preserved, blanks and duplicates dropped.

    Raises ConfigurationError when nothing usable is left: an empty enumeration
    must never be read as "accept every city".
    """
    if source is None:
        raise ConfigurationError("validCities is not configured")

    if isinstance(source, dict):
        if "validCities" not in source:
            raise ConfigurationError("settings has no validCities entry")
        source = source["validCities"]

    if isinstance(source, str):
        source = [source]

    cities: list[str] = []
    for c in source or []:
        c = str(c).strip()
        if c and c not in cities:
            cities.append(c)

    if not cities:
        raise ConfigurationError("validCities is empty")
    return tuple(cities)


def is_hd_occupation(occupation: Optional[str]) -> bool:
    """Hospital Director or Combat Medic, case-insensitive containment."""
    low = (occupation or "").lower().strip()
    return ("hospital" in low and "director" in low) or ("combat" in low and "medic" in low)


def utc_now() -> datetime:
    # naive UTC keeps funeral timestamps (which carry no zone) comparable
    return datetime.now(timezone.utc).replace(tzinfo=None)


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler()],
    )


def read_input_text(path: Optional[str]) -> str:
    """Read a raw paste from a file path, or stdin when path is None or '-'."""
    if path is None or path == "-":
        return sys.stdin.read()
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Missing input file: {p}")
    return p.read_text(encoding="utf-8", errors="replace")


def join_names(names: Iterable[str], limit: int = 20) -> str:
    names = list(names)
    head = ", ".join(names[:limit])
    if len(names) > limit:
        head += f" (+{len(names) - limit} more)"
    return head


def fail(msg: str, code: int = 2) -> None:
    print(msg, file=sys.stderr)
    raise SystemExit(code)


def ok(msg: str = "OK") -> None:
    print(msg)
