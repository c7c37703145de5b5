"""
registry_store.py — game-session snapshots on disk or behind a REST store.

A game session record:

  {
    "createdAt": ISO, "lastUpdated": ISO,
    "players":  {name: player dict},
    "lastScan": [names in the most recent roster scan],
    "settings": {"validCities": [...]}
  }

Writes are whole-record snapshots; the last writer wins. There is no locking
and no merge: two people pasting scans into the same game at the same moment
will overwrite each other.

LocalSessionStore keeps one JSON file per game code and writes atomically
(temp file + os.replace). RemoteSessionStore speaks the realtime-database
REST dialect: GET/PUT <base>/games/<CODE>.json.
"""

from __future__ import annotations

import json
import logging
import os
import secrets
import string
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

import requests

from registry_model import Registry, parse_iso, registry_from_dict, registry_to_dict, to_iso
from tracker_common import DATA, DEFAULT_VALID_CITIES, resolve_valid_cities, utc_now

logger = logging.getLogger(__name__)

GAME_CODE_ALPHABET = string.ascii_uppercase + string.digits
GAME_CODE_LENGTH = 6


class StoreError(RuntimeError):
    """Game not found, unreadable snapshot, or the remote store refused a request."""


def generate_game_code() -> str:
    return "".join(secrets.choice(GAME_CODE_ALPHABET) for _ in range(GAME_CODE_LENGTH))


def normalize_game_code(code: str) -> str:
    code = (code or "").strip().upper()
    if not code or not all(ch in GAME_CODE_ALPHABET for ch in code):
        raise StoreError(f"Invalid game code: {code!r}")
    return code


@dataclass
class GameSession:
    code: str
    players: Registry = field(default_factory=dict)
    last_scan: List[str] = field(default_factory=list)
    created_at: Optional[datetime] = None
    last_updated: Optional[datetime] = None
    settings: dict = field(default_factory=lambda: {"validCities": list(DEFAULT_VALID_CITIES)})

    @property
    def valid_cities(self) -> tuple[str, ...]:
        return resolve_valid_cities(self.settings)

    def to_record(self) -> dict:
        return {
            "createdAt": to_iso(self.created_at),
            "lastUpdated": to_iso(self.last_updated),
            "players": registry_to_dict(self.players),
            "lastScan": sorted(self.last_scan),
            "settings": self.settings,
        }

    @classmethod
    def from_record(cls, code: str, record: dict) -> "GameSession":
        return cls(
            code=code,
            players=registry_from_dict(record.get("players")),
            last_scan=list(record.get("lastScan") or []),
            created_at=_parse_stamp(record.get("createdAt")),
            last_updated=_parse_stamp(record.get("lastUpdated")),
            settings=record.get("settings") or {},
        )


def _parse_stamp(v) -> Optional[datetime]:
    # server-side timestamps arrive as epoch milliseconds
    if isinstance(v, (int, float)):
        return datetime.fromtimestamp(v / 1000.0, tz=timezone.utc).replace(tzinfo=None)
    return parse_iso(v)


def new_session(code: Optional[str] = None, valid_cities=DEFAULT_VALID_CITIES,
                now: Optional[datetime] = None) -> GameSession:
    now = now or utc_now()
    return GameSession(
        code=normalize_game_code(code) if code else generate_game_code(),
        created_at=now,
        last_updated=now,
        settings={"validCities": list(resolve_valid_cities(valid_cities))},
    )


class LocalSessionStore:
    def __init__(self, base_dir: Path):
        self.base_dir = Path(base_dir)

    def _path(self, code: str) -> Path:
        return self.base_dir / "games" / f"{normalize_game_code(code)}.json"

    def exists(self, code: str) -> bool:
        return self._path(code).exists()

    def load(self, code: str) -> GameSession:
        code = normalize_game_code(code)
        p = self._path(code)
        if not p.exists():
            raise StoreError(f"Game not found: {code}")
        try:
            record = json.loads(p.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise StoreError(f"Unreadable snapshot for game {code}: {e}") from e
        return GameSession.from_record(code, record)

    def save(self, session: GameSession, now: Optional[datetime] = None) -> Path:
        """Write the whole session atomically to prevent corruption on interruption."""
        session.last_updated = now or utc_now()
        p = self._path(session.code)
        p.parent.mkdir(parents=True, exist_ok=True)
        tmp = p.with_suffix(".json.tmp")
        try:
            with tmp.open("w", encoding="utf-8") as f:
                json.dump(session.to_record(), f, indent=2, ensure_ascii=False)
            os.replace(tmp, p)
        except OSError:
            if tmp.exists():
                tmp.unlink()
            raise
        logger.info(f"Saved game {session.code} to {p}")
        return p

    def create(self, valid_cities=DEFAULT_VALID_CITIES, now: Optional[datetime] = None) -> GameSession:
        session = new_session(valid_cities=valid_cities, now=now)
        while self.exists(session.code):
            session.code = generate_game_code()
        self.save(session, now=session.created_at)
        return session


class RemoteSessionStore:
    def __init__(self, base_url: str, http: Optional[requests.Session] = None, timeout: float = 10):
        self.base_url = base_url.rstrip("/")
        self.http = http or requests.Session()
        self.timeout = timeout

    def _url(self, code: str) -> str:
        return f"{self.base_url}/games/{normalize_game_code(code)}.json"

    def _get(self, code: str) -> Optional[dict]:
        try:
            resp = self.http.get(self._url(code), timeout=self.timeout)
            resp.raise_for_status()
            return resp.json()
        except (requests.RequestException, ValueError) as e:
            raise StoreError(f"Failed to read game {code}: {e}") from e

    def exists(self, code: str) -> bool:
        return self._get(code) is not None

    def load(self, code: str) -> GameSession:
        code = normalize_game_code(code)
        record = self._get(code)
        if record is None:
            raise StoreError(f"Game not found: {code}")
        return GameSession.from_record(code, record)

    def save(self, session: GameSession, now: Optional[datetime] = None) -> None:
        session.last_updated = now or utc_now()
        try:
            resp = self.http.put(self._url(session.code), json=session.to_record(), timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Failed to save game {session.code}: {e}")
            raise StoreError(f"Failed to save game {session.code}: {e}") from e
        logger.info(f"Saved game {session.code} to {self.base_url}")

    def create(self, valid_cities=DEFAULT_VALID_CITIES, now: Optional[datetime] = None) -> GameSession:
        session = new_session(valid_cities=valid_cities, now=now)
        while self.exists(session.code):
            session.code = generate_game_code()
        self.save(session, now=session.created_at)
        return session


def open_store(data_dir: Path, remote_url: Optional[str] = None):
    if remote_url:
        return RemoteSessionStore(remote_url)
    return LocalSessionStore(data_dir)


def add_store_args(ap) -> None:
    """--game / --data-dir / --remote-url, shared by every stage script."""
    ap.add_argument("--game", required=True, help="Six-character game code.")
    ap.add_argument("--data-dir", type=Path, default=DATA,
                    help="Local snapshot directory (ignored with --remote-url).")
    ap.add_argument("--remote-url", default=os.environ.get("MAFIA_MATRIX_REMOTE_URL"),
                    help="Realtime-database base URL; overrides --data-dir.")


def store_from_args(args):
    return open_store(args.data_dir, args.remote_url)
