"""Application layer tying the scoring engine to a match store."""
from __future__ import annotations

import logging
from datetime import date
from typing import List

from .engine import SetUpdateResult, apply_set_update
from .errors import NotFoundError
from .models import LineupPlayer, Match, SetRecord, SetScore
from .rules import MatchFormat
from .stats import Streak, TeamStatistics, current_streak, team_statistics
from .storage import MatchStore
from .substitutions import apply_substitution

LOGGER = logging.getLogger(__name__)


class MatchService:
    """Runs engine operations as read-modify-write cycles on a store."""

    def __init__(self, store: MatchStore) -> None:
        self.store = store

    @property
    def match_format(self) -> MatchFormat:
        return self.store.match_format

    def create_match(self, team_id: str, opponent: str, match_date: date) -> Match:
        return self.store.create_match(team_id, opponent, match_date)

    def get_match(self, match_id: str) -> Match:
        return self.store.get_match(match_id)

    def list_matches(self, team_id: str) -> List[Match]:
        return self.store.list_matches(team_id)

    def record_set(self, match_id: str, update: SetRecord) -> SetUpdateResult:
        with self.store.transaction():
            match = self.store.get_match(match_id)
            result = apply_set_update(match.sets, update, self.match_format)
            self.store.replace_match_sets(match_id, result.sets, result.status, result.final_score)
        LOGGER.info(
            "Recorded set %s for match %s: status=%s sets=%s",
            update.number,
            match_id,
            result.status,
            result.sets_won.label,
        )
        return result

    def substitute(
        self,
        match_id: str,
        set_number: int,
        out_player: str,
        in_player: LineupPlayer,
        current_score: SetScore,
    ) -> SetRecord:
        with self.store.transaction():
            match = self.store.get_match(match_id)
            record = match.get_set(set_number)
            if record is None:
                raise NotFoundError(f"Set {set_number} of match {match_id} not found")
            updated = apply_substitution(
                record, out_player, in_player, current_score, self.match_format
            )
            sets = tuple(updated if item.number == set_number else item for item in match.sets)
            self.store.replace_match_sets(match_id, sets, match.status, match.final_score)
        LOGGER.info(
            "Substitution in match %s set %s: %s for %s",
            match_id,
            set_number,
            in_player.name or in_player.player_id,
            out_player,
        )
        return updated

    def team_statistics(self, team_id: str) -> TeamStatistics:
        return team_statistics(self.store.list_matches(team_id))

    def team_streak(self, team_id: str) -> Streak:
        return current_streak(self.store.list_matches(team_id))


__all__ = ["MatchService"]
