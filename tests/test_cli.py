"""Tests for the command line interface."""

import json

from volley_scorebook.__main__ import main


def _run(capsys, *args):
    code = main(list(args))
    captured = capsys.readouterr()
    return code, captured.out, captured.err


class TestCli:

    def test_full_match(self, tmp_path, capsys, roster_file):
        store = str(tmp_path / "matches.json")
        code, out, _ = _run(
            capsys, "--store", store, "create", "--team", "t1", "--opponent", "Opponent", "--date", "2024-03-15"
        )
        assert code == 0
        match_id = json.loads(out)["id"]

        lineup = "1,2,3,4,5,6"
        for number, score in enumerate(["25:20", "25:22", "20:25", "25:23"], start=1):
            code, out, err = _run(
                capsys,
                "--store", store,
                "set", match_id, str(number),
                "--roster", str(roster_file),
                "--lineup", lineup,
                "--score", score,
            )
            assert code == 0
        assert json.loads(out)["status"] == "win"
        assert "Match complete: win 3:1" in err

        code, out, _ = _run(capsys, "--store", store, "stats", "--team", "t1")
        assert code == 0
        assert json.loads(out)["wins"] == 1

    def test_substitution(self, tmp_path, capsys, roster_file):
        store = str(tmp_path / "matches.json")
        _, out, _ = _run(
            capsys, "--store", store, "create", "--team", "t1", "--opponent", "Opponent", "--date", "2024-03-15"
        )
        match_id = json.loads(out)["id"]
        _run(capsys, "--store", store, "set", match_id, "1", "--roster", str(roster_file), "--lineup", "1,2,3,4,5,6")
        code, out, _ = _run(
            capsys,
            "--store", store,
            "sub", match_id, "1",
            "--roster", str(roster_file),
            "--out", "3",
            "--in", "7",
            "--score", "4:6",
        )
        assert code == 0
        record = json.loads(out)
        assert record["lineup"][2]["id"] == "p7"
        assert record["substitutions"][0]["currentScore"] == {"team": 4, "opponent": 6}

    def test_validation_error_exit_code(self, tmp_path, capsys, roster_file):
        store = str(tmp_path / "matches.json")
        _, out, _ = _run(
            capsys, "--store", store, "create", "--team", "t1", "--opponent", "Opponent", "--date", "2024-03-15"
        )
        match_id = json.loads(out)["id"]
        code, _, err = _run(
            capsys,
            "--store", store,
            "set", match_id, "1",
            "--roster", str(roster_file),
            "--lineup", "1,2,3,4,5,6",
            "--score", "25:24",
        )
        assert code == 1
        assert "One team must win by 2 points" in err

    def test_unknown_match(self, tmp_path, capsys):
        code, _, err = _run(capsys, "--store", str(tmp_path / "matches.json"), "show", "missing")
        assert code == 1
        assert "not found" in err
