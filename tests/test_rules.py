import random

from conftest import ScriptedDice, to_main_phase
from soure.engine.game_state import GameState
from soure.engine.types import ErrorCode, Phase, ResourceType


def test_players_get_colors_corners_and_creator(lobby):
    assert lobby.creator_id == "a"
    assert [p.corner_id for p in lobby.players] == ["TL", "TR"]
    assert [p.color for p in lobby.players] == ["#ef4444", "#22c55e"]
    assert lobby.positions == {"a": 25, "b": 7}
    assert lobby.corner_owners == {"TL": "a", "TR": "b"}


def test_rejoin_is_idempotent(lobby):
    result = lobby.add_player("a", "Alice again")
    assert result.ok
    assert result.extra["rejoined"] is True
    assert len(lobby.players) == 2


def test_game_full(lobby):
    assert lobby.add_player("c", "Cara").ok
    assert lobby.add_player("d", "Dan").ok
    result = lobby.add_player("e", "Eve")
    assert result.code == ErrorCode.GAME_FULL
    assert [p.corner_id for p in lobby.players] == ["TL", "TR", "BR", "BL"]


def test_only_members_may_join_after_start(game):
    result = game.add_player("c", "Cara")
    assert result.code == ErrorCode.WRONG_PHASE
    assert game.add_player("b", "Bob").extra["rejoined"] is True


def test_start_requires_creator(lobby):
    result = lobby.start_match("b")
    assert result.code == ErrorCode.NOT_CREATOR
    assert lobby.phase == Phase.LOBBY


def test_start_requires_enough_players():
    state = GameState(game_id="solo", rng=random.Random(1), min_players=2)
    state.add_player("a", "Alice")
    result = state.start_match("a")
    assert result.code == ErrorCode.INSUFFICIENT_PLAYERS
    assert state.board is None


def test_single_player_match_allowed():
    state = GameState(game_id="solo", rng=random.Random(1))
    state.add_player("a", "Alice")
    assert state.start_match("a").ok


def test_start_match_reports_board_fallback(lobby, monkeypatch, caplog):
    monkeypatch.setattr("soure.engine.board.numbers_valid", lambda *args: False)

    with caplog.at_level("WARNING"):
        result = lobby.start_match("a")

    assert result.ok
    assert result.extra["boardConstraintSatisfied"] is False
    assert lobby.board.constraint_satisfied is False
    assert "without satisfying number spacing" in caplog.text


def test_start_match_deals_bundle_and_board(game, clock):
    assert game.phase == Phase.ROLL
    assert game.turn_seq == 1
    assert game.current_player().player_id == "a"
    assert game.board is not None
    assert game.match_start_time == int(clock.now * 1000)
    for ledger in game.ledgers.values():
        assert ledger.resources_dict() == {"stone": 1, "iron": 0, "food": 1, "water": 1, "gold": 0}
    assert game.start_match("a").code == ErrorCode.WRONG_PHASE


def test_roll_before_start(lobby):
    result = lobby.roll_dice("a")
    assert result.code == ErrorCode.WRONG_PHASE


def test_roll_out_of_turn(game):
    result = game.roll_dice("b")
    assert result.code == ErrorCode.NOT_YOUR_TURN


def test_second_roll_in_same_turn_rejected(game):
    to_main_phase(game)
    position = game.positions["a"]

    result = game.roll_dice("a")

    assert result.code == ErrorCode.ALREADY_ROLLED_THIS_TURN
    assert game.positions["a"] == position


def test_stale_turn_seq_rejected(game):
    result = game.roll_dice("a", turn_seq=5)
    assert result.code == ErrorCode.ALREADY_ROLLED_THIS_TURN
    assert game.last_roll is None


def test_roll_reports_dice_and_landing(game):
    game.rng.queue(1, 2)
    result = game.roll_dice("a", turn_seq=1)

    assert result.ok
    assert result.extra["roll"] == {"d1": 1, "d2": 2, "total": 3, "isDouble": False}
    assert result.extra["landing"]["toIndex"] == 2
    assert result.extra["breach"] is False
    assert game.phase == Phase.MAIN
    assert game.extra_turn is False


def test_end_turn_passes_to_next_player(game):
    to_main_phase(game)
    result = game.end_turn("a")

    assert result.ok
    assert result.extra["extraTurnUsed"] is False
    assert game.current_player().player_id == "b"
    assert game.turn_seq == 2
    assert game.phase == Phase.ROLL
    assert game.event_log.messages()[-1] == "Turn passed to Bob."


def test_end_turn_guards(game):
    assert game.end_turn("a").code == ErrorCode.WRONG_PHASE
    to_main_phase(game)
    assert game.end_turn("b").code == ErrorCode.NOT_YOUR_TURN


def test_doubles_grant_an_extra_turn(game):
    game.rng.queue(2, 2)
    assert game.roll_dice("a").ok
    assert game.extra_turn is True

    result = game.end_turn("a")

    assert result.extra["extraTurnUsed"] is True
    assert game.current_player().player_id == "a"
    assert game.turn_seq == 2
    assert game.extra_turn is False
    game.rng.queue(1, 2)
    assert game.roll_dice("a", turn_seq=2).ok


def test_corner_toll_over_several_turns(game):
    game.rng.queue(1, 2)
    assert game.roll_dice("a").ok
    assert game.positions["a"] == 2
    assert game.end_turn("a").ok

    game.rng.queue(3, 3)
    assert game.roll_dice("b").ok
    assert game.positions["b"] == 13
    assert game.ledgers["b"].resources[ResourceType.IRON] == 1
    assert game.end_turn("b").extra["extraTurnUsed"] is True

    game.rng.queue(6, 6)
    result = game.roll_dice("b")
    assert game.positions["b"] == 25
    assert result.extra["landing"]["tollPaid"] == "stone"
    assert result.extra["landing"]["tollOwner"] == "a"
    assert game.ledgers["b"].resources[ResourceType.STONE] == 0
    assert game.ledgers["a"].resources[ResourceType.STONE] == 2


def test_end_due_to_inactivity(game):
    assert game.end_due_to_inactivity().ok
    assert game.phase == Phase.ENDED
    assert game.current_player() is None
    assert game.event_log.messages()[-1] == "Game ended due to inactivity."

    assert game.end_due_to_inactivity().code == ErrorCode.GAME_ALREADY_ENDED
    assert game.roll_dice("a").code == ErrorCode.GAME_ALREADY_ENDED
    assert game.end_turn("a").code == ErrorCode.GAME_ALREADY_ENDED
    assert game.start_match("a").code == ErrorCode.GAME_ALREADY_ENDED
    assert game.add_player("c", "Cara").code == ErrorCode.GAME_ALREADY_ENDED


def test_snapshot_shape(game):
    snapshot = game.get_state()
    assert set(snapshot) == {
        "gameId",
        "phase",
        "players",
        "currentTurnPlayerId",
        "creatorId",
        "turnSeq",
        "extraTurn",
        "resources",
        "lastRoll",
        "eventLog",
        "board",
        "positionIndexByPlayerId",
        "cornerOwners",
        "track",
        "matchStartTime",
    }
    assert snapshot["phase"] == "roll"
    assert snapshot["currentTurnPlayerId"] == "a"
    assert snapshot["players"][1]["positionIndex"] == 7
    assert len(snapshot["board"]["tiles"]) == 19
    assert len(snapshot["track"]) == 26


def test_random_playthrough_keeps_ledgers_and_positions_valid():
    rng = ScriptedDice(seed=11)
    state = GameState(game_id="long", rng=rng)
    for pid in "abc":
        state.add_player(pid, pid.upper())
    assert state.start_match("a").ok
    picker = random.Random(99)
    kinds = ["outpost", "citadel", "capital", "bastion"]

    start = dict(state.positions)
    steps = {pid: 0 for pid in start}
    last_seq = state.turn_seq
    for _ in range(300):
        current = state.current_player().player_id
        result = state.roll_dice(current)
        assert result.ok
        steps[current] += result.extra["roll"]["total"]
        assert state.positions[current] == (start[current] + steps[current]) % 26
        for _ in range(3):
            state.place_building(current, picker.randrange(19), picker.choice(kinds))
        assert state.end_turn(current).ok
        assert state.turn_seq == last_seq + 1
        last_seq = state.turn_seq

        for ledger in state.ledgers.values():
            assert all(v >= 0 for v in ledger.resources.values())
            assert ledger.population.used <= ledger.population.max
        assert all(0 <= pos < 26 for pos in state.positions.values())
        assert len(state.event_log) <= 50
