"""Validate and apply substitutions to a set lineup."""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, Sequence

from .errors import (
    PlayerAlreadyInLineup,
    PlayerNotInLineup,
    SubstitutionLimitExceeded,
    ValidationError,
)
from .models import LineupPlayer, SetRecord, SetScore, Substitution
from .rules import DEFAULT_FORMAT, MatchFormat

LOGGER = logging.getLogger(__name__)


def apply_substitution(
    set_record: SetRecord,
    out_player: str,
    in_player: LineupPlayer,
    current_score: SetScore,
    match_format: MatchFormat = DEFAULT_FORMAT,
) -> SetRecord:
    """Return a copy of ``set_record`` with ``in_player`` replacing ``out_player``.

    ``out_player`` is a player id or jersey number.  The incoming player takes
    over the rotation position of the outgoing one.  ``current_score`` is the
    caller's snapshot of the running set score and is recorded as given.
    """

    if set_record.substitution_count >= match_format.max_substitutions:
        raise SubstitutionLimitExceeded(
            f"Set {set_record.number} already has {match_format.max_substitutions} substitutions."
        )
    outgoing = set_record.find_player(out_player)
    if outgoing is None:
        raise PlayerNotInLineup(f"Player {out_player} is not in the lineup of set {set_record.number}.")
    if not in_player.player_id:
        raise ValidationError("The incoming player needs an id.")
    lineup = set_record.lineup or ()
    if any(
        player.player_id == in_player.player_id
        or (in_player.number and player.number == in_player.number)
        for player in lineup
    ):
        raise PlayerAlreadyInLineup(
            f"Player {in_player.name or in_player.player_id} is already in the lineup of set {set_record.number}."
        )
    if current_score.team < 0 or current_score.opponent < 0:
        raise ValidationError("Scores cannot be negative")

    incoming = replace(in_player, rotation_position=outgoing.rotation_position)
    new_lineup = tuple(incoming if player is outgoing else player for player in lineup)
    event = Substitution(out_player=outgoing, in_player=incoming, current_score=current_score)
    LOGGER.debug(
        "Set %s: %s replaces %s at position %s (%s)",
        set_record.number,
        incoming.name,
        outgoing.name,
        outgoing.rotation_position,
        current_score.label,
    )
    return replace(
        set_record,
        lineup=new_lineup,
        substitutions=tuple(set_record.substitutions or ()) + (event,),
    )


def check_substitution_log(
    lineup: Sequence[LineupPlayer],
    substitutions: Sequence[Substitution],
) -> None:
    """Raise :class:`ValidationError` unless ``substitutions`` led to ``lineup``.

    ``lineup`` is the players currently on court.  The log is undone from the
    latest event backwards: each incoming player must be on court at that
    point and each outgoing player must not be.
    """

    on_court: Dict[str, LineupPlayer] = {player.player_id: player for player in lineup}
    for index in range(len(substitutions) - 1, -1, -1):
        event = substitutions[index]
        incoming = event.in_player.player_id
        outgoing = event.out_player.player_id
        if not incoming or not outgoing:
            raise ValidationError(f"Substitution {index + 1} needs player ids on both sides.")
        if incoming not in on_court:
            raise ValidationError(
                f"Substitution {index + 1} does not match the lineup: "
                f"{event.in_player.name or incoming} is not on court."
            )
        if outgoing in on_court:
            raise ValidationError(
                f"Substitution {index + 1} does not match the lineup: "
                f"{event.out_player.name or outgoing} is still on court."
            )
        del on_court[incoming]
        on_court[outgoing] = event.out_player


__all__ = ["apply_substitution", "check_substitution_log"]
