"""Merge set updates into a match and derive its outcome."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Sequence, Tuple

from .errors import MatchAlreadyDecided, ValidationError
from .models import (
    SIDE_OPPONENT,
    SIDE_TEAM,
    STATUS_IN_PROGRESS,
    STATUS_LOSS,
    STATUS_WIN,
    SetRecord,
    SetScore,
    validate_lineup,
)
from .rules import DEFAULT_FORMAT, MatchFormat, validate_set_number, validate_set_score
from .substitutions import check_substitution_log

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SetUpdateResult:
    sets: Tuple[SetRecord, ...]
    status: str
    final_score: Optional[SetScore]
    sets_won: SetScore

    @property
    def is_decided(self) -> bool:
        return self.status != STATUS_IN_PROGRESS

    def to_dict(self) -> Dict[str, object]:
        return {
            "sets": [record.to_dict() for record in self.sets],
            "status": self.status,
            "finalScore": self.final_score.to_dict() if self.final_score else None,
            "setsWon": self.sets_won.to_dict(),
        }


def tally_sets(sets: Iterable[SetRecord]) -> SetScore:
    """Count set wins per side; level scores count for neither."""

    team = opponent = 0
    for record in sets:
        winner = record.winner
        if winner == SIDE_TEAM:
            team += 1
        elif winner == SIDE_OPPONENT:
            opponent += 1
    return SetScore(team=team, opponent=opponent)


def determine_outcome(
    sets: Sequence[SetRecord],
    match_format: MatchFormat = DEFAULT_FORMAT,
) -> Tuple[str, Optional[SetScore]]:
    """Return ``(status, final_score)`` for a collection of sets."""

    scored = [record for record in sets if record.is_scored]
    sets_won = tally_sets(scored)
    if len(scored) < match_format.min_sets_for_decision:
        return STATUS_IN_PROGRESS, None
    if sets_won.team >= match_format.sets_to_win and sets_won.team > sets_won.opponent:
        return STATUS_WIN, sets_won
    if sets_won.opponent >= match_format.sets_to_win and sets_won.opponent > sets_won.team:
        return STATUS_LOSS, sets_won
    return STATUS_IN_PROGRESS, None


def _validate_update(update: SetRecord, match_format: MatchFormat) -> int:
    number = validate_set_number(update.number, match_format)
    if update.lineup is not None:
        validate_lineup(update.lineup)
    if update.score is not None:
        validate_set_score(number, update.score, match_format)
    if update.substitutions is not None and len(update.substitutions) > match_format.max_substitutions:
        raise ValidationError(
            f"A set allows at most {match_format.max_substitutions} substitutions."
        )
    return number


def _merge(prior: SetRecord, update: SetRecord) -> SetRecord:
    return SetRecord(
        number=prior.number,
        lineup=update.lineup if update.lineup is not None else prior.lineup,
        score=update.score if update.score is not None else prior.score,
        substitutions=(
            update.substitutions if update.substitutions is not None else prior.substitutions or ()
        ),
    )


def apply_set_update(
    existing_sets: Sequence[SetRecord],
    update: SetRecord,
    match_format: MatchFormat = DEFAULT_FORMAT,
) -> SetUpdateResult:
    """Merge ``update`` into ``existing_sets`` and recompute the match outcome.

    Fields left as ``None`` on ``update`` keep the values of the stored set with
    the same number.  A new set must follow the highest recorded set number,
    needs a lineup and is refused once the match has been decided.  A supplied
    lineup or substitution log must agree with the merged set's log.  Nothing is
    merged when validation fails; ``existing_sets`` is never modified.
    """

    number = _validate_update(update, match_format)
    by_number: Dict[int, SetRecord] = {record.number: record for record in existing_sets}
    previous_status, _ = determine_outcome(tuple(by_number.values()), match_format)

    prior = by_number.get(number)
    if prior is None:
        if previous_status != STATUS_IN_PROGRESS:
            raise MatchAlreadyDecided(
                f"The match is already decided ({previous_status}); set {number} cannot be added."
            )
        expected = max(by_number, default=0) + 1
        if number != expected:
            raise ValidationError(f"Sets must be recorded in order; expected set {expected}.")
        if update.lineup is None:
            raise ValidationError("Please select 6 players for the lineup.")
        merged = _merge(SetRecord(number=number, lineup=update.lineup, substitutions=()), update)
        LOGGER.debug("Adding set %s", number)
    else:
        merged = _merge(prior, update)
        LOGGER.debug("Updating set %s", number)

    if update.lineup is not None or update.substitutions is not None:
        check_substitution_log(merged.lineup or (), merged.substitutions or ())
    by_number[number] = merged
    sets = tuple(sorted(by_number.values(), key=lambda record: record.number))
    status, final_score = determine_outcome(sets, match_format)
    if status != previous_status:
        LOGGER.info(
            "Match status changed from %s to %s after set %s (final score %s)",
            previous_status,
            status,
            number,
            final_score.label if final_score else "-",
        )
    return SetUpdateResult(
        sets=sets,
        status=status,
        final_score=final_score,
        sets_won=tally_sets(sets),
    )


__all__ = [
    "SetUpdateResult",
    "apply_set_update",
    "determine_outcome",
    "tally_sets",
]
