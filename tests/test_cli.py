from conftest import ScriptedDice
from soure.cli import handle_command, main
from soure.engine.game_state import GameState
from soure.engine.types import Phase


def test_hot_seat_session(capsys):
    dice = ScriptedDice(seed=2)
    state = GameState(game_id="local", rng=dice)

    assert handle_command(state, "join a Alice")
    assert handle_command(state, "join b Bob Jones")
    assert handle_command(state, "start")
    assert state.phase == Phase.ROLL

    dice.queue(1, 2)
    handle_command(state, "roll")
    assert "Rolled 1+2=3" in capsys.readouterr().out

    handle_command(state, "build 99 outpost")
    assert "Error: Invalid tile" in capsys.readouterr().out

    handle_command(state, "end")
    assert state.current_player().name == "Bob Jones"

    handle_command(state, "state")
    out = capsys.readouterr().out
    assert "Phase roll" in out
    assert "Alice [TL] @2" in out

    handle_command(state, "track")
    assert "corner TL (owner a)" in capsys.readouterr().out
    assert handle_command(state, "quit") is False


def test_unknown_and_malformed_commands(capsys):
    state = GameState(game_id="local")
    handle_command(state, "dance")
    handle_command(state, "build x outpost")
    handle_command(state, "tiles")
    out = capsys.readouterr().out
    assert "Unknown command" in out
    assert "Board not generated yet." in out


def test_main_runs_until_quit(monkeypatch, capsys):
    commands = iter(["join a Alice", "start", "quit"])
    monkeypatch.setattr("builtins.input", lambda prompt: next(commands))
    assert main(["--seed", "3"]) == 0
    assert "Soure CLI" in capsys.readouterr().out
