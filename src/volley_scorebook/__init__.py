"""Track volleyball matches set by set and derive their outcome."""

from .engine import SetUpdateResult, apply_set_update, determine_outcome, tally_sets
from .errors import (
    MatchAlreadyDecided,
    NotFoundError,
    PlayerAlreadyInLineup,
    PlayerNotInLineup,
    ScorebookError,
    SubstitutionError,
    SubstitutionLimitExceeded,
    ValidationError,
)
from .models import (
    STATUS_IN_PROGRESS,
    STATUS_LOSS,
    STATUS_WIN,
    LineupPlayer,
    Match,
    SetRecord,
    SetScore,
    Substitution,
)
from .rules import DEFAULT_FORMAT, MatchFormat, validate_set_score
from .stats import current_streak, team_statistics
from .substitutions import apply_substitution

__all__ = [
    "DEFAULT_FORMAT",
    "LineupPlayer",
    "Match",
    "MatchAlreadyDecided",
    "MatchFormat",
    "NotFoundError",
    "PlayerAlreadyInLineup",
    "PlayerNotInLineup",
    "STATUS_IN_PROGRESS",
    "STATUS_LOSS",
    "STATUS_WIN",
    "ScorebookError",
    "SetRecord",
    "SetScore",
    "SetUpdateResult",
    "Substitution",
    "SubstitutionError",
    "SubstitutionLimitExceeded",
    "ValidationError",
    "apply_set_update",
    "apply_substitution",
    "current_streak",
    "determine_outcome",
    "tally_sets",
    "team_statistics",
    "validate_set_score",
]
