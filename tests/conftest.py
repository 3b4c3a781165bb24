"""Shared fixtures for the scorebook test suite."""

import pathlib
import sys
from datetime import datetime, timezone

# Ensure tests can import from src/ without an installed package
ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import pytest

from volley_scorebook.models import LineupPlayer, SetRecord, SetScore
from volley_scorebook.service import MatchService
from volley_scorebook.storage import InMemoryMatchStore

JOINED_AT = datetime(2024, 3, 15, 18, 0, tzinfo=timezone.utc)


def make_player(index: int, rotation: int = 0) -> LineupPlayer:
    return LineupPlayer(
        player_id=f"p{index}",
        name=f"Player {index}",
        number=str(index),
        position="Outside Hitter",
        rotation_position=rotation,
        joined_at=JOINED_AT,
    )


def make_lineup(start: int = 1):
    return tuple(make_player(start + offset, offset + 1) for offset in range(6))


def scored_set(number: int, team: int, opponent: int) -> SetRecord:
    return SetRecord(
        number=number,
        lineup=make_lineup(),
        score=SetScore(team=team, opponent=opponent),
        substitutions=(),
    )


@pytest.fixture
def lineup():
    return make_lineup()


@pytest.fixture
def bench_player():
    return make_player(7)


@pytest.fixture
def service():
    return MatchService(InMemoryMatchStore())


ROSTER_CSV = """id,name,number,position
p1,Anna Berg,1,Setter
p2,Bea Kunz,2,Outside Hitter
p3,Clara Dorn,3,Middle Blocker
p4,Dana Eck,4,Opposite
p5,Eva Fink,5,Outside Hitter
p6,Fia Gross,6,Middle Blocker
p7,Gina Hahn,7,Libero
"""


@pytest.fixture
def roster_file(tmp_path):
    path = tmp_path / "roster.csv"
    path.write_text(ROSTER_CSV, encoding="utf-8")
    return path
