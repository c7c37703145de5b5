from __future__ import annotations

import importlib.util
import sys
from datetime import datetime
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from registry_model import Player  # noqa: E402

CITIES = ("Beirut", "Chicago", "Auckland")
T0 = datetime(2025, 6, 1, 12, 0, 0)
T1 = datetime(2025, 6, 2, 12, 0, 0)
T2 = datetime(2025, 6, 3, 12, 0, 0)
T3 = datetime(2025, 6, 4, 12, 0, 0)


def make_player(occupation="Baker", rank="Chief", city="Chicago", when=T0, **overrides) -> Player:
    p = Player.first_appearance(occupation, rank, city, when)
    for k, v in overrides.items():
        setattr(p, k, v)
    return p


def load_script(filename: str):
    """Import a numbered stage script (not a valid module name) by path."""
    path = ROOT / filename
    name = "stage_" + path.stem.replace("-", "_")
    spec = importlib.util.spec_from_file_location(name, path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture()
def cities():
    return CITIES
