"""Exception hierarchy shared by the scoring engine and its collaborators."""
from __future__ import annotations


class ScorebookError(Exception):
    """Base class for all errors raised by volley_scorebook."""

    @property
    def message(self) -> str:
        return str(self.args[0]) if self.args else self.__class__.__name__


class ValidationError(ScorebookError, ValueError):
    """A submitted set, lineup or score violates the match rules."""


class MatchAlreadyDecided(ValidationError):
    """A new set was submitted for a match that already has a result."""


class SubstitutionError(ScorebookError):
    """Base class for rejected substitutions."""


class SubstitutionLimitExceeded(SubstitutionError):
    pass


class PlayerNotInLineup(SubstitutionError):
    pass


class PlayerAlreadyInLineup(SubstitutionError):
    pass


class NotFoundError(ScorebookError, LookupError):
    """Raised by a store when a referenced match or set does not exist."""


__all__ = [
    "MatchAlreadyDecided",
    "NotFoundError",
    "PlayerAlreadyInLineup",
    "PlayerNotInLineup",
    "ScorebookError",
    "SubstitutionError",
    "SubstitutionLimitExceeded",
    "ValidationError",
]
