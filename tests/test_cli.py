from __future__ import annotations

import pytest

from salvo import cli
from salvo.config import ServiceConfig
from salvo.contracts import BoardView, FireResponse
from salvo.engine.match import FireOutcome


def test_format_board_marks_ships_hits_and_misses() -> None:
    view = BoardView(owner="alice", ships=["A1", "A2"], hits=["A1"], misses=["B1"])
    lines = cli.format_board(view).splitlines()

    assert lines[0].split() == list("ABCDEFGHIJ")
    assert lines[1].split("|")[1].split()[:3] == ["X", "o", "."]
    assert lines[2].split("|")[1].split()[0] == "S"
    assert len(lines) == 11


def test_describe_shot() -> None:
    assert cli.describe_shot("You", "C3", FireResponse(outcome=FireOutcome.MISS)) == (
        "You fired at C3: miss"
    )
    sunk = FireResponse(outcome=FireOutcome.SUNK, ship_type_sunk="Destroyer")
    assert cli.describe_shot("Computer", "I2", sunk) == "Computer fired at I2: sank the Destroyer!"


def test_play_game_with_automatic_moves(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    def fake_input(prompt: str) -> str:
        return "n" if "manually" in prompt else "auto"

    monkeypatch.setattr("builtins.input", fake_input)
    cli.play_game(seed=11, config=ServiceConfig())

    out = capsys.readouterr().out
    assert "Welcome to Battleship!" in out
    assert "Congratulations, you won!" in out or "The computer won this time" in out


def test_quit_exits(monkeypatch: pytest.MonkeyPatch) -> None:
    answers = iter(["n", "q"])
    monkeypatch.setattr("builtins.input", lambda prompt: next(answers))
    with pytest.raises(SystemExit):
        cli.play_game(seed=1, config=ServiceConfig())


def test_target_prompt_rejects_bad_and_repeated_labels(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    answers = iter(["Z9", "a1", "b2"])
    monkeypatch.setattr("builtins.input", lambda prompt: next(answers))

    label = cli._prompt_for_target({"A1"}, strategy=None)

    assert label == "B2"
    out = capsys.readouterr().out
    assert "Invalid input" in out
    assert "already been targeted" in out


def test_main_wires_logging_and_telemetry(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: dict[str, object] = {}
    monkeypatch.setattr(cli, "configure_logging", lambda level: calls.setdefault("level", level))
    monkeypatch.setattr(cli, "init_telemetry", lambda: calls.setdefault("telemetry", True))
    monkeypatch.setattr(cli, "shutdown_telemetry", lambda: calls.setdefault("shutdown", True))
    monkeypatch.setattr(
        cli, "play_game", lambda seed, config: calls.setdefault("seed", seed)
    )

    cli.main(["--seed", "42", "--log-level", "DEBUG"])

    assert calls == {"level": "DEBUG", "telemetry": True, "seed": 42, "shutdown": True}


def test_main_uses_the_cached_service_config(monkeypatch: pytest.MonkeyPatch) -> None:
    config = ServiceConfig(log_level="ERROR")
    seen: dict[str, object] = {}
    monkeypatch.setattr(cli, "load_service_config", lambda: config)
    monkeypatch.setattr(cli, "configure_logging", lambda level: seen.setdefault("level", level))
    monkeypatch.setattr(cli, "init_telemetry", lambda: None)
    monkeypatch.setattr(cli, "shutdown_telemetry", lambda: None)
    monkeypatch.setattr(cli, "play_game", lambda seed, config: seen.setdefault("config", config))

    cli.main([])

    assert seen == {"level": "ERROR", "config": config}
