"""FastAPI application exposing match scoring."""
from __future__ import annotations

from typing import Any, Dict, NoReturn, Optional

from fastapi import Body, FastAPI, HTTPException

from .config import AppConfig
from .errors import (
    MatchAlreadyDecided,
    NotFoundError,
    ScorebookError,
    SubstitutionError,
    ValidationError,
)
from .models import LineupPlayer, SetRecord, SetScore, parse_match_date
from .service import MatchService
from .storage import JsonMatchStore


def _raise_http(exc: ScorebookError) -> NoReturn:
    """Translate engine errors into HTTP errors, keeping the message as detail."""

    if isinstance(exc, NotFoundError):
        status_code = 404
    elif isinstance(exc, (MatchAlreadyDecided, SubstitutionError)):
        status_code = 409
    elif isinstance(exc, ValidationError):
        status_code = 400
    else:  # pragma: no cover - every error has a subclass above
        status_code = 500
    raise HTTPException(status_code=status_code, detail=exc.message) from exc


def create_app(service: Optional[MatchService] = None) -> FastAPI:
    if service is None:
        config = AppConfig()
        service = MatchService(JsonMatchStore(config.storage.path, match_format=config.match_format))

    app = FastAPI(title="Volleyball Scorebook API")

    @app.post("/matches", status_code=201)
    def create_match(payload: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
        """Create a match without sets."""

        try:
            match = service.create_match(
                str(payload.get("teamId") or ""),
                str(payload.get("opponent") or ""),
                parse_match_date(payload.get("date")),
            )
        except ScorebookError as exc:
            _raise_http(exc)
        return match.to_dict()

    @app.get("/matches/{match_id}")
    def get_match(match_id: str) -> Dict[str, Any]:
        try:
            return service.get_match(match_id).to_dict()
        except ScorebookError as exc:
            _raise_http(exc)

    @app.put("/matches/{match_id}/sets/{set_number}")
    def update_set(
        match_id: str,
        set_number: int,
        payload: Dict[str, Any] = Body(...),
    ) -> Dict[str, Any]:
        """Add or update a set and return the recomputed match state."""

        try:
            update = SetRecord.from_mapping({**payload, "number": set_number})
            result = service.record_set(match_id, update)
        except ScorebookError as exc:
            _raise_http(exc)
        return result.to_dict()

    @app.post("/matches/{match_id}/sets/{set_number}/substitutions")
    def substitute(
        match_id: str,
        set_number: int,
        payload: Dict[str, Any] = Body(...),
    ) -> Dict[str, Any]:
        try:
            in_raw = payload.get("inPlayer")
            if not isinstance(in_raw, dict):
                raise ValidationError("An incoming player is required.")
            score_raw = payload.get("currentScore") or {"team": 0, "opponent": 0}
            if not isinstance(score_raw, dict):
                raise ValidationError("currentScore must be an object with team and opponent.")
            record = service.substitute(
                match_id,
                set_number,
                str(payload.get("outPlayer", "")),
                LineupPlayer.from_mapping(in_raw),
                SetScore.from_mapping(score_raw),
            )
        except ScorebookError as exc:
            _raise_http(exc)
        return record.to_dict()

    @app.get("/teams/{team_id}/statistics")
    def get_team_statistics(team_id: str) -> Dict[str, Any]:
        """Return aggregate statistics and the current streak of a team."""

        payload = service.team_statistics(team_id).to_dict()
        payload["currentStreak"] = service.team_streak(team_id).to_dict()
        return payload

    return app


app = create_app()
