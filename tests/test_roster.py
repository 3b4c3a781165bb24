"""Tests for roster parsing and lineup snapshots."""

from datetime import datetime, timezone
from unittest import mock

import pytest
import requests

from volley_scorebook.errors import NotFoundError, ValidationError
from volley_scorebook.roster import (
    build_lineup,
    fetch_roster,
    find_player,
    load_roster_from_file,
    parse_roster,
)

VBL_EXPORT = (
    "Trikot;Titel Vorname Nachname;Position/Funktion Offizieller\n"
    "12;Lena Stein;Zuspiel\n"
    ";Max Trainer;Trainer\n"
    "3;Jana Vogt;Libera\n"
)


class TestParseRoster:

    def test_plain_csv(self, roster_file):
        players = load_roster_from_file(roster_file)
        assert len(players) == 7
        assert players[0].player_id == "p1"
        assert players[0].position == "Setter"

    def test_bundesliga_export(self):
        players = parse_roster(VBL_EXPORT)
        assert [player.name for player in players] == ["Jana Vogt", "Lena Stein"]
        assert players[0].player_id == "3-jana-vogt"
        assert players[1].position == "Zuspiel"

    def test_empty_text(self):
        assert parse_roster("") == []


class TestBuildLineup:

    def test_snapshots_use_rotation_order(self, roster_file):
        players = load_roster_from_file(roster_file)
        joined = datetime(2024, 3, 15, 18, 0, tzinfo=timezone.utc)
        lineup = build_lineup(players, ["6", "p1", "2", "3", "4", "5"], joined_at=joined)
        assert lineup[0].player_id == "p6"
        assert lineup[0].rotation_position == 1
        assert lineup[1].player_id == "p1"
        assert all(player.joined_at == joined for player in lineup)

    def test_unknown_player(self, roster_file):
        players = load_roster_from_file(roster_file)
        with pytest.raises(NotFoundError):
            find_player(players, "99")

    def test_short_lineup(self, roster_file):
        players = load_roster_from_file(roster_file)
        with pytest.raises(ValidationError):
            build_lineup(players, ["1", "2", "3"])


class TestFetchRoster:

    def test_downloads_and_parses(self):
        response = mock.Mock()
        response.content = VBL_EXPORT.encode("utf-8")
        response.encoding = "utf-8"
        with mock.patch("volley_scorebook.roster.requests.get", return_value=response) as get:
            players = fetch_roster("https://example.org/roster.csv")
        get.assert_called_once()
        assert len(players) == 2

    def test_retries_then_raises(self):
        with mock.patch(
            "volley_scorebook.roster.requests.get",
            side_effect=requests.ConnectionError("offline"),
        ) as get, mock.patch("volley_scorebook.roster.time.sleep") as sleep:
            with pytest.raises(requests.ConnectionError):
                fetch_roster("https://example.org/roster.csv", retries=3, delay_seconds=1.0)
        assert get.call_count == 3
        assert [call.args[0] for call in sleep.call_args_list] == [1.0, 2.0]
