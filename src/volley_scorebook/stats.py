"""Read-side aggregates over decided matches."""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, List, Optional, Sequence

from .models import STATUS_LOSS, STATUS_WIN, Match


@dataclass(frozen=True, slots=True)
class Streak:
    outcome: Optional[str]
    length: int

    def to_dict(self) -> Dict[str, object]:
        return {"outcome": self.outcome, "length": self.length}


@dataclass(frozen=True, slots=True)
class TeamStatistics:
    total_matches: int
    wins: int
    losses: int
    total_sets: int
    sets_won: int
    sets_lost: int
    average_points_per_set: float
    longest_win_streak: int
    longest_lose_streak: int

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


def _decided_in_order(matches: Sequence[Match]) -> List[Match]:
    decided = [match for match in matches if match.status in (STATUS_WIN, STATUS_LOSS)]
    decided.sort(key=lambda match: match.date)
    return decided


def current_streak(matches: Sequence[Match]) -> Streak:
    """Run of identical outcomes ending at the most recent decided match."""

    decided = _decided_in_order(matches)
    if not decided:
        return Streak(outcome=None, length=0)
    outcome = decided[-1].status
    length = 0
    for match in reversed(decided):
        if match.status != outcome:
            break
        length += 1
    return Streak(outcome=outcome, length=length)


def team_statistics(matches: Sequence[Match]) -> TeamStatistics:
    wins = losses = 0
    total_sets = sets_won = sets_lost = 0
    scored_sets = total_points = 0
    win_run = lose_run = longest_win = longest_lose = 0

    for match in _decided_in_order(matches):
        if match.status == STATUS_WIN:
            wins += 1
            win_run += 1
            lose_run = 0
        else:
            losses += 1
            lose_run += 1
            win_run = 0
        longest_win = max(longest_win, win_run)
        longest_lose = max(longest_lose, lose_run)

    for match in matches:
        for record in match.sets:
            total_sets += 1
            if record.score is None:
                continue
            scored_sets += 1
            total_points += record.score.team
            if record.score.team > record.score.opponent:
                sets_won += 1
            elif record.score.opponent > record.score.team:
                sets_lost += 1

    return TeamStatistics(
        total_matches=len(matches),
        wins=wins,
        losses=losses,
        total_sets=total_sets,
        sets_won=sets_won,
        sets_lost=sets_lost,
        average_points_per_set=round(total_points / scored_sets, 2) if scored_sets else 0.0,
        longest_win_streak=longest_win,
        longest_lose_streak=longest_lose,
    )


__all__ = ["Streak", "TeamStatistics", "current_streak", "team_statistics"]
