"""Roster loading and lineup snapshots."""
from __future__ import annotations

import csv
import logging
import re
import time
from dataclasses import dataclass
from datetime import datetime
from io import StringIO
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import requests

from .errors import NotFoundError
from .models import LineupPlayer, parse_timestamp, validate_lineup

LOGGER = logging.getLogger(__name__)

REQUEST_HEADERS = {
    "User-Agent": "volley_scorebook/1.0",
    "Accept": "text/csv",
}

# Column aliases: plain exports and the Volleyball Bundesliga roster export.
_COLUMN_ALIASES: Dict[str, Tuple[str, ...]] = {
    "id": ("id", "player_id"),
    "name": ("name", "Titel Vorname Nachname"),
    "number": ("number", "jersey", "Trikot"),
    "position": ("position", "Position/Funktion Offizieller"),
}


@dataclass(frozen=True, slots=True)
class RosterPlayer:
    player_id: str
    name: str
    number: str
    position: str

    def matches(self, key: str) -> bool:
        key = str(key).strip()
        return bool(key) and (key == self.player_id or key == self.number)

    def snapshot(self, rotation_position: int, joined_at: Optional[datetime] = None) -> LineupPlayer:
        return LineupPlayer(
            player_id=self.player_id,
            name=self.name,
            number=self.number,
            position=self.position,
            rotation_position=rotation_position,
            joined_at=parse_timestamp(joined_at),
        )


def _slugify(value: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower())
    return slug.strip("-")


def _column(row: Dict[str, str], field: str) -> str:
    for alias in _COLUMN_ALIASES[field]:
        value = row.get(alias)
        if value:
            return value.strip()
    return ""


def parse_roster(csv_text: str, *, delimiter: Optional[str] = None) -> List[RosterPlayer]:
    """Parse players from a roster CSV export.

    Rows without a numeric jersey number are team officials and are skipped.
    Missing ids are derived from jersey number and name.
    """

    if delimiter is None:
        header = csv_text.splitlines()[0] if csv_text.strip() else ""
        delimiter = ";" if header.count(";") > header.count(",") else ","
    reader = csv.DictReader(StringIO(csv_text), delimiter=delimiter, quotechar='"')
    players: List[RosterPlayer] = []
    for row in reader:
        name = _column(row, "name")
        number = _column(row, "number").replace(" ", "")
        if not name or not number.isdigit():
            continue
        player_id = _column(row, "id") or _slugify(f"{number}-{name}")
        players.append(
            RosterPlayer(
                player_id=player_id,
                name=name,
                number=number,
                position=_column(row, "position"),
            )
        )
    players.sort(key=lambda player: (int(player.number), player.name.lower()))
    return players


def load_roster_from_file(path: Path) -> List[RosterPlayer]:
    return parse_roster(path.read_text(encoding="utf-8"))


def fetch_roster(
    url: str,
    *,
    retries: int = 3,
    delay_seconds: float = 2.0,
    timeout: int = 30,
) -> List[RosterPlayer]:
    """Download and parse a roster CSV, retrying with exponential backoff."""

    for attempt in range(retries):
        try:
            response = requests.get(url, headers=REQUEST_HEADERS, timeout=timeout)
            response.raise_for_status()
            break
        except requests.RequestException as exc:
            if attempt == retries - 1:
                raise
            backoff = delay_seconds * (2 ** attempt)
            LOGGER.warning("Roster download from %s failed (%s), retrying in %.1fs", url, exc, backoff)
            time.sleep(backoff)
    else:
        raise ValueError("retries must be at least 1")
    encoding = response.encoding or "utf-8"
    return parse_roster(response.content.decode(encoding, errors="replace"))


def find_player(players: Sequence[RosterPlayer], key: str) -> RosterPlayer:
    for player in players:
        if player.matches(key):
            return player
    raise NotFoundError(f"Player {key} not found in roster")


def build_lineup(
    players: Sequence[RosterPlayer],
    order: Sequence[str],
    *,
    joined_at: Optional[datetime] = None,
) -> Tuple[LineupPlayer, ...]:
    """Snapshot the players named in ``order`` into rotation positions 1..6."""

    stamp = parse_timestamp(joined_at)
    lineup = tuple(
        find_player(players, key).snapshot(rotation, stamp)
        for rotation, key in enumerate(order, start=1)
    )
    validate_lineup(lineup)
    return lineup


__all__ = [
    "RosterPlayer",
    "build_lineup",
    "fetch_roster",
    "find_player",
    "load_roster_from_file",
    "parse_roster",
]
