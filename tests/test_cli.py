import json

from playerratings.cli import main

AT = "2024-12-31T00:00:00+00:00"


def _generate(tmp_path, capsys):
    path = tmp_path / "league.json"
    args = ["generate", "--players", "10", "--tournaments", "2", "--rounds", "3"]
    assert main(args + ["--seed", "1", "-o", str(path)]) == 0
    capsys.readouterr()
    return str(path)


def test_generate_writes_dataset(tmp_path, capsys):
    path = _generate(tmp_path, capsys)
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    assert len(data["players"]) == 10
    assert len(data["tournaments"]) == 2


def test_ratings_as_json(tmp_path, capsys):
    path = _generate(tmp_path, capsys)
    assert main(["ratings", path, "--at", AT, "--json"]) == 0

    rows = json.loads(capsys.readouterr().out)
    assert isinstance(rows, list)
    assert [row["position"] for row in rows] == list(range(1, len(rows) + 1))


def test_history_and_report(tmp_path, capsys):
    path = _generate(tmp_path, capsys)
    assert main(["history", path, "p001", "--at", AT, "--now", AT, "--games"]) == 0
    assert "Player 001" in capsys.readouterr().out

    assert main(["report", path, "t01"]) == 0
    assert "SWA Monthly 1" in capsys.readouterr().out


def test_errors_give_exit_code_one(tmp_path, capsys):
    assert main(["ratings", str(tmp_path / "missing.json")]) == 1

    path = _generate(tmp_path, capsys)
    assert main(["--config", str(tmp_path / "nope.json"), "ratings", path]) == 1
    assert main(["history", path, "nobody", "--at", AT]) == 1
