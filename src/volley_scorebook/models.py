"""Data model for matches, sets, lineups and substitutions.

All records are frozen dataclasses.  Mapping conversion (``from_mapping`` /
``to_dict``) uses the camelCase document layout the stores and the HTTP API
exchange, and is the only place where loosely typed input is normalized.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from dateutil import parser

from .errors import ValidationError

STATUS_IN_PROGRESS = "in-progress"
STATUS_WIN = "win"
STATUS_LOSS = "loss"
MATCH_STATUSES: Tuple[str, ...] = (STATUS_IN_PROGRESS, STATUS_WIN, STATUS_LOSS)

SIDE_TEAM = "team"
SIDE_OPPONENT = "opponent"

LINEUP_SIZE = 6
ROTATION_POSITIONS: Tuple[int, ...] = tuple(range(1, LINEUP_SIZE + 1))


def parse_timestamp(value: object, *, default: Optional[datetime] = None) -> datetime:
    """Normalize a datetime or ISO string into an aware UTC ``datetime``.

    Naive values are assumed to be UTC.  ``None`` and empty strings resolve to
    ``default`` or the current time.
    """

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        try:
            parsed = parser.isoparse(value.strip())
        except ValueError as exc:
            raise ValidationError(f"Invalid timestamp: {value!r}") from exc
    elif value in (None, ""):
        parsed = default or datetime.now(tz=timezone.utc)
    else:
        raise ValidationError(f"Invalid timestamp: {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def parse_match_date(value: object) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return parser.isoparse(value.strip()).date()
        except ValueError as exc:
            raise ValidationError(f"Invalid match date: {value!r}") from exc
    raise ValidationError("A match date is required.")


_POINTS_RE = re.compile(r"-?[0-9]+")


def _coerce_points(value: object, label: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {label} score: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and _POINTS_RE.fullmatch(value.strip()):
        return int(value.strip())
    raise ValidationError(f"Invalid {label} score: {value!r}")


@dataclass(frozen=True, slots=True)
class SetScore:
    team: int
    opponent: int

    @property
    def winner(self) -> Optional[str]:
        """Side that won the set, ``None`` for a level (malformed) score."""

        if self.team > self.opponent:
            return SIDE_TEAM
        if self.opponent > self.team:
            return SIDE_OPPONENT
        return None

    @property
    def margin(self) -> int:
        return abs(self.team - self.opponent)

    @property
    def label(self) -> str:
        return f"{self.team}:{self.opponent}"

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, object]) -> "SetScore":
        return cls(
            team=_coerce_points(mapping.get("team"), "team"),
            opponent=_coerce_points(mapping.get("opponent"), "opponent"),
        )

    @classmethod
    def parse(cls, text: str) -> "SetScore":
        """Parse ``"25:20"`` or ``"25-20"``."""

        cleaned = text.strip().replace("-", ":")
        team, sep, opponent = cleaned.partition(":")
        if not sep:
            raise ValidationError(f"Invalid score {text!r}, expected TEAM:OPPONENT.")
        return cls(team=_coerce_points(team, "team"), opponent=_coerce_points(opponent, "opponent"))

    def to_dict(self) -> Dict[str, int]:
        return {"team": self.team, "opponent": self.opponent}


@dataclass(frozen=True, slots=True)
class LineupPlayer:
    """Snapshot of a roster player occupying a rotation position."""

    player_id: str
    name: str
    number: str
    position: str
    rotation_position: int
    joined_at: datetime

    def matches(self, key: str) -> bool:
        """Return ``True`` if ``key`` is this player's id or jersey number."""

        key = str(key).strip()
        return bool(key) and (key == self.player_id or key == self.number)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, object]) -> "LineupPlayer":
        rotation_raw = mapping.get("rotationPosition", 0)
        try:
            rotation = int(rotation_raw or 0)
        except (TypeError, ValueError):
            rotation = 0
        return cls(
            player_id=str(mapping.get("id", "") or "").strip(),
            name=str(mapping.get("name", "") or "").strip(),
            number=str(mapping.get("number", "") or "").strip(),
            position=str(mapping.get("position", "") or "").strip(),
            rotation_position=rotation,
            joined_at=parse_timestamp(mapping.get("joinedAt")),
        )

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.player_id,
            "name": self.name,
            "number": self.number,
            "position": self.position,
            "rotationPosition": self.rotation_position,
            "joinedAt": self.joined_at.isoformat(),
        }


@dataclass(frozen=True, slots=True)
class Substitution:
    out_player: LineupPlayer
    in_player: LineupPlayer
    current_score: SetScore

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, object]) -> "Substitution":
        out_raw = mapping.get("outPlayer")
        in_raw = mapping.get("inPlayer")
        score_raw = mapping.get("currentScore")
        if not isinstance(out_raw, Mapping) or not isinstance(in_raw, Mapping):
            raise ValidationError("A substitution needs both an outgoing and an incoming player.")
        score = (
            SetScore.from_mapping(score_raw)
            if isinstance(score_raw, Mapping)
            else SetScore(team=0, opponent=0)
        )
        return cls(
            out_player=LineupPlayer.from_mapping(out_raw),
            in_player=LineupPlayer.from_mapping(in_raw),
            current_score=score,
        )

    def to_dict(self) -> Dict[str, object]:
        return {
            "outPlayer": self.out_player.to_dict(),
            "inPlayer": self.in_player.to_dict(),
            "currentScore": self.current_score.to_dict(),
        }


@dataclass(frozen=True, slots=True)
class SetRecord:
    """One set of a match.

    ``lineup``, ``score`` and ``substitutions`` are ``None`` when a record is
    used as a partial update and the field was not supplied.  Records stored
    in a match always carry a lineup and a (possibly empty) substitution log.
    """

    number: int
    lineup: Optional[Tuple[LineupPlayer, ...]] = None
    score: Optional[SetScore] = None
    substitutions: Optional[Tuple[Substitution, ...]] = None

    @property
    def is_scored(self) -> bool:
        return self.score is not None

    @property
    def winner(self) -> Optional[str]:
        return self.score.winner if self.score is not None else None

    @property
    def substitution_count(self) -> int:
        return len(self.substitutions or ())

    def find_player(self, key: str) -> Optional[LineupPlayer]:
        for player in self.lineup or ():
            if player.matches(key):
                return player
        return None

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, object]) -> "SetRecord":
        number_raw = mapping.get("number")
        if isinstance(number_raw, str) and number_raw.strip().isdigit():
            number_raw = int(number_raw.strip())
        lineup_raw = mapping.get("lineup")
        lineup: Optional[Tuple[LineupPlayer, ...]] = None
        if isinstance(lineup_raw, Sequence) and not isinstance(lineup_raw, (str, bytes)):
            lineup = tuple(
                LineupPlayer.from_mapping(item) for item in lineup_raw if isinstance(item, Mapping)
            )
        score_raw = mapping.get("score")
        score = SetScore.from_mapping(score_raw) if isinstance(score_raw, Mapping) else None
        subs_raw = mapping.get("substitutions")
        substitutions: Optional[Tuple[Substitution, ...]] = None
        if isinstance(subs_raw, Sequence) and not isinstance(subs_raw, (str, bytes)):
            substitutions = tuple(
                Substitution.from_mapping(item) for item in subs_raw if isinstance(item, Mapping)
            )
        return cls(
            number=number_raw,  # type: ignore[arg-type]
            lineup=lineup,
            score=score,
            substitutions=substitutions,
        )

    def to_dict(self) -> Dict[str, object]:
        payload: Dict[str, object] = {
            "number": self.number,
            "lineup": [player.to_dict() for player in self.lineup or ()],
        }
        if self.score is not None:
            payload["score"] = self.score.to_dict()
        payload["substitutions"] = [sub.to_dict() for sub in self.substitutions or ()]
        return payload


@dataclass(frozen=True, slots=True)
class Match:
    match_id: str
    team_id: str
    opponent: str
    date: date
    sets: Tuple[SetRecord, ...] = field(default_factory=tuple)
    status: str = STATUS_IN_PROGRESS
    final_score: Optional[SetScore] = None

    @property
    def is_decided(self) -> bool:
        return self.status != STATUS_IN_PROGRESS

    def get_set(self, number: int) -> Optional[SetRecord]:
        for record in self.sets:
            if record.number == number:
                return record
        return None

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, object]) -> "Match":
        sets_raw = mapping.get("sets") or []
        sets: List[SetRecord] = []
        if isinstance(sets_raw, Iterable):
            sets = [SetRecord.from_mapping(item) for item in sets_raw if isinstance(item, Mapping)]
        final_raw = mapping.get("finalScore")
        status = str(mapping.get("status") or STATUS_IN_PROGRESS)
        if status not in MATCH_STATUSES:
            status = STATUS_IN_PROGRESS
        return cls(
            match_id=str(mapping.get("id", "") or ""),
            team_id=str(mapping.get("teamId", "") or ""),
            opponent=str(mapping.get("opponent", "") or "").strip(),
            date=parse_match_date(mapping.get("date")),
            sets=tuple(sorted(sets, key=lambda record: record.number)),
            status=status,
            final_score=SetScore.from_mapping(final_raw) if isinstance(final_raw, Mapping) else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.match_id,
            "teamId": self.team_id,
            "opponent": self.opponent,
            "date": self.date.isoformat(),
            "status": self.status,
            "sets": [record.to_dict() for record in self.sets],
        }
        if self.final_score is not None:
            payload["finalScore"] = self.final_score.to_dict()
        return payload


def validate_lineup(lineup: Sequence[LineupPlayer]) -> None:
    """Raise :class:`ValidationError` unless ``lineup`` is a legal starting six."""

    if len(lineup) != LINEUP_SIZE:
        raise ValidationError("Please select 6 players for the lineup.")
    player_ids = {player.player_id for player in lineup}
    if "" in player_ids or len(player_ids) != LINEUP_SIZE:
        raise ValidationError("A lineup needs 6 distinct players.")
    rotations = sorted(player.rotation_position for player in lineup)
    if tuple(rotations) != ROTATION_POSITIONS:
        raise ValidationError("Lineup players must occupy rotation positions 1 to 6.")


__all__ = [
    "LINEUP_SIZE",
    "LineupPlayer",
    "MATCH_STATUSES",
    "Match",
    "ROTATION_POSITIONS",
    "SIDE_OPPONENT",
    "SIDE_TEAM",
    "STATUS_IN_PROGRESS",
    "STATUS_LOSS",
    "STATUS_WIN",
    "SetRecord",
    "SetScore",
    "Substitution",
    "parse_match_date",
    "parse_timestamp",
    "validate_lineup",
]
