"""Match-format rules and set-score validation."""
from __future__ import annotations

from dataclasses import dataclass

from .errors import ValidationError
from .models import SetScore


@dataclass(frozen=True, slots=True)
class MatchFormat:
    """Parameters of a best-of-five volleyball match.

    ``min_sets_for_decision`` keeps a match open until that many sets carry a
    score, even if one side has already collected ``sets_to_win`` set wins.
    """

    max_sets: int = 5
    sets_to_win: int = 3
    min_sets_for_decision: int = 4
    set_points: int = 25
    breaker_points: int = 15
    min_margin: int = 2
    max_substitutions: int = 6

    def points_to_win(self, set_number: int) -> int:
        if set_number == self.max_sets:
            return self.breaker_points
        return self.set_points

    def is_breaker(self, set_number: int) -> bool:
        return set_number == self.max_sets


DEFAULT_FORMAT = MatchFormat()


def validate_set_number(number: object, match_format: MatchFormat = DEFAULT_FORMAT) -> int:
    if isinstance(number, bool) or not isinstance(number, int) or number < 1:
        raise ValidationError(f"Invalid set number: {number!r}")
    if number > match_format.max_sets:
        raise ValidationError(f"A match has at most {match_format.max_sets} sets.")
    return number


def validate_set_score(
    set_number: int,
    score: SetScore,
    match_format: MatchFormat = DEFAULT_FORMAT,
) -> SetScore:
    """Check that ``score`` is a completed set for ``set_number``."""

    if score.team < 0 or score.opponent < 0:
        raise ValidationError("Scores cannot be negative")
    threshold = match_format.points_to_win(set_number)
    if score.team < threshold and score.opponent < threshold:
        raise ValidationError(f"Sets must reach at least {threshold} points")
    if score.margin < match_format.min_margin:
        raise ValidationError(f"One team must win by {match_format.min_margin} points")
    return score


__all__ = [
    "DEFAULT_FORMAT",
    "MatchFormat",
    "validate_set_number",
    "validate_set_score",
]
