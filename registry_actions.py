"""
registry_actions.py — the manual edits a human makes between scans.

Same contract as the parsers: take a registry, return a new one. Unknown
names raise KeyError, bad fields or values raise ValueError, and in both cases
the caller's registry is unchanged.

Deletion is irreversible; nothing here resurrects a removed player.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Sequence, Tuple

from registry_model import Player, Registry, clone_registry
from tracker_common import is_hd_occupation, resolve_valid_cities, utc_now

TOGGLE_FIELDS = {
    "isOps": "is_ops",
    "wasHD": "was_hd",
    "isFriendly": "is_friendly",
}

COMBAT_FIELDS = {
    "whacksSurvived": "whacks_survived",
    "mhsSurvived": "mhs_survived",
}


def _require(registry: Registry, name: str) -> Player:
    if name not in registry:
        raise KeyError(f"Unknown player: {name}")
    return registry[name]


def _attr(mapping: dict, field_name: str) -> str:
    # accept both the store key (isOps) and the attribute name (is_ops)
    if field_name in mapping:
        return mapping[field_name]
    if field_name in mapping.values():
        return field_name
    raise ValueError(f"Unsupported field: {field_name}. Must be one of {sorted(mapping)}")


def add_player(
    registry: Registry,
    name: str,
    occupation: str,
    rank: str,
    city: str,
    valid_cities: Sequence[str],
    now: Optional[datetime] = None,
) -> Registry:
    name = (name or "").strip()
    if not name or not (occupation or "").strip() or not (rank or "").strip():
        raise ValueError("name, occupation and rank are required")
    if city not in resolve_valid_cities(valid_cities):
        raise ValueError(f"Invalid city: {city}")
    if name in registry:
        raise ValueError(f"Player already exists: {name}")

    out = clone_registry(registry)
    out[name] = Player.first_appearance(occupation.strip(), rank.strip(), city, now or utc_now())
    return out


def delete_player(registry: Registry, name: str) -> Registry:
    _require(registry, name)
    out = clone_registry(registry)
    del out[name]
    return out


def remove_dead_players(registry: Registry) -> Tuple[Registry, int]:
    out = {n: p for n, p in clone_registry(registry).items() if not p.is_dead}
    return out, len(registry) - len(out)


def toggle_flag(registry: Registry, name: str, field_name: str) -> Registry:
    """Flip isOps / wasHD / isFriendly. A manual wasHD toggle is the only way it goes false."""
    _require(registry, name)
    attr = _attr(TOGGLE_FIELDS, field_name)
    out = clone_registry(registry)
    p = out[name]
    setattr(p, attr, not getattr(p, attr))
    return out


def bulk_toggle(registry: Registry, names: Iterable[str], field_name: str) -> Tuple[Registry, int]:
    """Flip field_name on every listed player that exists. Unknown names are ignored."""
    attr = _attr(TOGGLE_FIELDS, field_name)
    out = clone_registry(registry)
    count = 0
    for name in dict.fromkeys(names):
        p = out.get(name)
        if p is None:
            continue
        setattr(p, attr, not getattr(p, attr))
        count += 1
    return out, count


def set_notes(registry: Registry, name: str, notes: str) -> Registry:
    _require(registry, name)
    out = clone_registry(registry)
    out[name].notes = notes or ""
    return out


def set_city(registry: Registry, name: str, city: str, valid_cities: Sequence[str]) -> Registry:
    """Correct a mis-scanned city. Does not open a career entry."""
    _require(registry, name)
    if city not in resolve_valid_cities(valid_cities):
        raise ValueError(f"Invalid city: {city}")
    out = clone_registry(registry)
    out[name].current_city = city
    return out


def set_combat_stat(registry: Registry, name: str, field_name: str, value: int) -> Registry:
    _require(registry, name)
    attr = _attr(COMBAT_FIELDS, field_name)
    value = int(value)
    if value < 0:
        raise ValueError(f"{field_name} must be non-negative, got {value}")
    out = clone_registry(registry)
    setattr(out[name], attr, value)
    return out


def recalculate_cm_status(registry: Registry) -> Tuple[Registry, int]:
    """
    Re-derive wasHD from the current occupation and the whole career history.
    Upgrades only: a player already flagged stays flagged.
    """
    out = clone_registry(registry)
    changed = 0
    for p in out.values():
        hd = is_hd_occupation(p.current_occupation) or p.history_has_hd()
        if hd and not p.was_hd:
            p.was_hd = True
            changed += 1
    return out, changed
