"""Tests for the match stores."""

import json
from datetime import date

import pytest

from conftest import make_lineup, scored_set
from volley_scorebook.engine import apply_set_update
from volley_scorebook.errors import NotFoundError, ValidationError
from volley_scorebook.models import STATUS_IN_PROGRESS, STATUS_WIN, SetScore
from volley_scorebook.storage import InMemoryMatchStore, JsonMatchStore


@pytest.fixture(params=["memory", "json"])
def store(request, tmp_path):
    if request.param == "memory":
        return InMemoryMatchStore()
    return JsonMatchStore(tmp_path / "matches.json")


class TestMatchStore:

    def test_create_and_get(self, store):
        match = store.create_match("t1", "Opponent", date(2024, 3, 15))
        loaded = store.get_match(match.match_id)
        assert loaded == match
        assert loaded.status == STATUS_IN_PROGRESS
        assert loaded.sets == ()

    def test_create_requires_opponent(self, store):
        with pytest.raises(ValidationError):
            store.create_match("t1", "  ", date(2024, 3, 15))

    def test_missing_match(self, store):
        with pytest.raises(NotFoundError):
            store.get_match("missing")
        with pytest.raises(NotFoundError):
            store.replace_match_sets("missing", (), STATUS_IN_PROGRESS, None)
        with pytest.raises(NotFoundError):
            store.delete_match("missing")

    def test_replace_sets_round_trips(self, store):
        match = store.create_match("t1", "Opponent", date(2024, 3, 15))
        sets = ()
        for number, score in enumerate([(25, 20), (25, 22), (20, 25), (25, 23)], start=1):
            result = apply_set_update(sets, scored_set(number, *score))
            sets = result.sets
        store.replace_match_sets(match.match_id, result.sets, result.status, result.final_score)
        loaded = store.get_match(match.match_id)
        assert loaded.sets == result.sets
        assert loaded.status == STATUS_WIN
        assert loaded.final_score == SetScore(3, 1)

    def test_status_is_recomputed_on_load(self, store):
        match = store.create_match("t1", "Opponent", date(2024, 3, 15))
        store.replace_match_sets(match.match_id, (scored_set(1, 25, 20),), STATUS_WIN, SetScore(3, 0))
        loaded = store.get_match(match.match_id)
        assert loaded.status == STATUS_IN_PROGRESS
        assert loaded.final_score is None

    def test_unknown_status_is_rejected(self, store):
        match = store.create_match("t1", "Opponent", date(2024, 3, 15))
        with pytest.raises(ValueError):
            store.replace_match_sets(match.match_id, (), "draw", None)

    def test_list_filters_by_team(self, store):
        store.create_match("t1", "A", date(2024, 3, 20))
        store.create_match("t2", "B", date(2024, 3, 16))
        store.create_match("t1", "C", date(2024, 3, 10))
        matches = store.list_matches("t1")
        assert [match.opponent for match in matches] == ["C", "A"]
        assert len(store.list_matches()) == 3

    def test_delete(self, store):
        match = store.create_match("t1", "Opponent", date(2024, 3, 15))
        store.delete_match(match.match_id)
        with pytest.raises(NotFoundError):
            store.get_match(match.match_id)


class TestJsonMatchStore:

    def test_document_layout(self, tmp_path):
        path = tmp_path / "nested" / "matches.json"
        store = JsonMatchStore(path)
        match = store.create_match("t1", "Opponent", date(2024, 3, 15))
        store.replace_match_sets(
            match.match_id,
            apply_set_update((), scored_set(1, 25, 20)).sets,
            STATUS_IN_PROGRESS,
            None,
        )
        payload = json.loads(path.read_text(encoding="utf-8"))
        document = payload["matches"][0]
        assert document["teamId"] == "t1"
        assert document["date"] == "2024-03-15"
        assert document["sets"][0]["score"] == {"team": 25, "opponent": 20}
        assert document["sets"][0]["lineup"][0]["rotationPosition"] == 1
        assert document["sets"][0]["substitutions"] == []
        assert "finalScore" not in document

    def test_reads_string_and_timestamp_shapes(self, tmp_path):
        path = tmp_path / "matches.json"
        lineup = [player.to_dict() for player in make_lineup()]
        lineup[0]["joinedAt"] = "2024-03-15T18:00:00"
        lineup[1]["joinedAt"] = None
        path.write_text(
            json.dumps(
                {
                    "matches": [
                        {
                            "id": "m1",
                            "teamId": "t1",
                            "opponent": "Opponent",
                            "date": "2024-03-15",
                            "status": "in-progress",
                            "sets": [{"number": 1, "lineup": lineup}],
                        }
                    ]
                }
            ),
            encoding="utf-8",
        )
        match = JsonMatchStore(path).get_match("m1")
        first = match.sets[0].lineup[0]
        assert first.joined_at.tzinfo is not None
        assert first.joined_at.hour == 18
        assert match.sets[0].lineup[1].joined_at.tzinfo is not None

    def test_invalid_document(self, tmp_path):
        path = tmp_path / "matches.json"
        path.write_text("{\"games\": {}}", encoding="utf-8")
        with pytest.raises(ValueError):
            JsonMatchStore(path).list_matches()
