from __future__ import annotations

import logging

from .board import standard_board
from .breach import BREACH_TOTAL, resolve_breach
from .economy import STARTING_BUNDLE, PlayerLedger
from .game_state import GameState, Player
from .movement import move_and_land
from .track import CORNER_IDS, CORNER_INDEX, TOKEN_PALETTE
from .types import ActionResult, DiceRoll, ErrorCode, Phase

logger = logging.getLogger(__name__)


def _game_over(state: GameState) -> ActionResult | None:
    if state.phase == Phase.ENDED:
        return ActionResult.failure(ErrorCode.GAME_ALREADY_ENDED, "Game has already ended")
    return None


def require_turn(state: GameState, user_id: str, phase: Phase, verb: str) -> ActionResult | None:
    """Shared guard: game running, expected phase, caller is the current player."""
    violation = _game_over(state)
    if violation is not None:
        return violation
    if state.phase != phase:
        return ActionResult.failure(
            ErrorCode.WRONG_PHASE, f"Can only {verb} during {phase.value} phase"
        )
    current = state.current_player()
    if current is None or current.player_id != user_id:
        return ActionResult.failure(
            ErrorCode.NOT_YOUR_TURN, f"Only the current player can {verb}"
        )
    return None


def add_player(state: GameState, player_id: str, name: str) -> ActionResult:
    if state.is_member(player_id):
        return ActionResult.success(rejoined=True)
    violation = _game_over(state)
    if violation is not None:
        return violation
    if state.phase != Phase.LOBBY:
        return ActionResult.failure(
            ErrorCode.WRONG_PHASE, "Game already started. Only existing players can rejoin."
        )
    if len(state.players) >= state.max_players:
        return ActionResult.failure(ErrorCode.GAME_FULL, "Game is full")

    used_colors = {p.color for p in state.players}
    color = next(c for c in TOKEN_PALETTE if c not in used_colors)
    corner_id = next(c for c in CORNER_IDS if c not in state.corner_owners)

    state.players.append(Player(player_id=player_id, name=name, color=color, corner_id=corner_id))
    state.ledgers[player_id] = PlayerLedger()
    state.positions[player_id] = CORNER_INDEX[corner_id]
    state.corner_owners[corner_id] = player_id
    if state.creator_id is None:
        state.creator_id = player_id
    state.event_log.add(f"{name} joined the game.")
    return ActionResult.success(rejoined=False, color=color, cornerId=corner_id)


def start_match(state: GameState, user_id: str) -> ActionResult:
    violation = _game_over(state)
    if violation is not None:
        return violation
    if state.phase != Phase.LOBBY:
        return ActionResult.failure(ErrorCode.WRONG_PHASE, "Game already started")
    if state.creator_id != user_id:
        return ActionResult.failure(ErrorCode.NOT_CREATOR, "Only the creator can start the match")
    if len(state.players) < state.min_players:
        return ActionResult.failure(
            ErrorCode.INSUFFICIENT_PLAYERS, f"Need at least {state.min_players} players to start"
        )

    state.board = standard_board(rng=state.rng, constraints=state.board_constraints)
    if not state.board.constraint_satisfied:
        logger.warning("game %s: board generated without satisfying number spacing", state.game_id)

    bundle = ", ".join(f"{amount} {res.value}" for res, amount in STARTING_BUNDLE.items())
    for player in state.players:
        state.ledgers[player.player_id].grant(STARTING_BUNDLE)
        state.event_log.add(f"{player.name} received starting resources: {bundle}.")

    state.phase = Phase.ROLL
    state.current_turn_index = 0
    state.match_start_time = state.now_ms()
    state.turn_seq = 1
    state.rolled_turn_seq = None
    first = state.players[0]
    state.event_log.add(f"Match started! Board generated. {first.name} goes first.")
    logger.info("game %s: match started with %d players", state.game_id, len(state.players))
    return ActionResult.success(
        turnSeq=state.turn_seq, boardConstraintSatisfied=state.board.constraint_satisfied
    )


def roll_dice(state: GameState, user_id: str, turn_seq: int | None = None) -> ActionResult:
    violation = _game_over(state)
    if violation is not None:
        return violation
    current = state.current_player()
    if current is not None and current.player_id == user_id:
        if state.rolled_turn_seq == state.turn_seq or (
            turn_seq is not None and turn_seq != state.turn_seq
        ):
            return ActionResult.failure(
                ErrorCode.ALREADY_ROLLED_THIS_TURN, "Already rolled this turn"
            )
    violation = require_turn(state, user_id, Phase.ROLL, "roll")
    if violation is not None:
        return violation

    roll = DiceRoll(state.rng.randint(1, 6), state.rng.randint(1, 6))
    state.last_roll = roll
    state.extra_turn = roll.is_double
    state.rolled_turn_seq = state.turn_seq
    logger.debug("game %s: %s rolled %d+%d", state.game_id, user_id, roll.d1, roll.d2)

    state.event_log.add(f"{current.name} rolled {roll.total} ({roll.d1}+{roll.d2}).")
    landing = move_and_land(state, current, roll.total)

    breach = None
    if roll.total == BREACH_TOTAL:
        state.phase = Phase.BREACH
        breach = resolve_breach(state, current)
    state.phase = Phase.MAIN

    if roll.is_double:
        state.event_log.add(f"Doubles! {current.name} gets an extra turn.")

    return ActionResult.success(
        roll=roll.to_dict(),
        landing=landing.to_dict(),
        breach=breach is not None,
        breachResult=breach.to_dict() if breach else None,
        turnSeq=state.turn_seq,
    )


def end_turn(state: GameState, user_id: str) -> ActionResult:
    violation = require_turn(state, user_id, Phase.MAIN, "end turn")
    if violation is not None:
        return violation

    current = state.current_player()
    state.turn_seq += 1
    state.phase = Phase.ROLL

    if state.extra_turn:
        state.extra_turn = False
        state.event_log.add(f"{current.name} ends extra turn. Rolling again.")
        return ActionResult.success(extraTurnUsed=True, turnSeq=state.turn_seq)

    state.current_turn_index = (state.current_turn_index + 1) % len(state.players)
    nxt = state.players[state.current_turn_index]
    state.event_log.add(f"Turn passed to {nxt.name}.")
    return ActionResult.success(extraTurnUsed=False, turnSeq=state.turn_seq)


def end_due_to_inactivity(state: GameState) -> ActionResult:
    violation = _game_over(state)
    if violation is not None:
        return violation
    state.phase = Phase.ENDED
    state.event_log.add("Game ended due to inactivity.")
    logger.info("game %s: ended due to inactivity", state.game_id)
    return ActionResult.success()
