from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from soure.engine.game_state import GameState
from soure.engine.track import TRACK
from soure.engine.types import ActionResult, FieldKind
from soure.utils.repro import make_rng

HELP_TEXT = """
Commands:
  help                         Show this help text
  join <id> <name>             Add a player (lobby only)
  start                        Start the match as the creator
  roll                         Roll dice as the current player
  build <tile_id> <type>       outpost | citadel | capital | bastion
  end                          End the current turn
  state                        Show current game state summary
  tiles                        List tiles (id, type, number, buildings)
  track                        List track fields and player tokens
  log                          Show the event log
  quit                         Exit
""".strip()


def _print_state(state: GameState) -> None:
    current = state.current_player()
    print(
        f"Phase {state.phase.value} | Turn seq {state.turn_seq} | "
        f"Current {current.name if current else '-'}"
    )
    if state.last_roll is not None:
        roll = state.last_roll
        print(f"Last roll: {roll.d1}+{roll.d2}={roll.total}{' (double)' if roll.is_double else ''}")
    for player in state.players:
        ledger = state.ledgers[player.player_id]
        resources = ", ".join(f"{k.value}:{v}" for k, v in ledger.resources.items())
        print(
            f"{player.name} [{player.corner_id}] @{state.positions[player.player_id]} | "
            f"DP {ledger.dominion_points} | DEF {ledger.defense_level} | "
            f"Pop {ledger.population.used}/{ledger.population.max} | {resources}"
        )


def _print_tiles(state: GameState) -> None:
    if state.board is None:
        print("Board not generated yet.")
        return
    for tile in state.board.tiles.values():
        blocked = "blocked" if tile.tile_id == state.board.blocked_tile_id else ""
        owners = ", ".join(f"{b.player_id}:{b.building_type.value}" for b in tile.buildings)
        print(f"Tile {tile.tile_id} | {tile.resource.value} | {tile.number_token} {owners} {blocked}".rstrip())


def _print_track(state: GameState) -> None:
    tokens = {}
    for player_id, index in state.positions.items():
        tokens.setdefault(index, []).append(player_id)
    for track_field in TRACK:
        if track_field.kind == FieldKind.CORNER:
            owner = state.corner_owners.get(track_field.corner_id, "-")
            label = f"corner {track_field.corner_id} (owner {owner})"
        else:
            label = track_field.resource_type.value
        here = " ".join(tokens.get(track_field.index, []))
        print(f"{track_field.index:2d} {track_field.field_id:<10} {label} {here}".rstrip())


def _report(result: ActionResult) -> None:
    if not result.ok:
        print(f"Error: {result.error}")
    elif "roll" in result.extra:
        roll = result.extra["roll"]
        print(f"Rolled {roll['d1']}+{roll['d2']}={roll['total']}")


def handle_command(state: GameState, raw: str) -> bool:
    """Run one command line against ``state``. Returns False when the session should stop."""
    parts = raw.split()
    if not parts:
        return True
    cmd = parts[0].lower()
    current = state.current_player()
    actor = current.player_id if current else state.creator_id

    if cmd == "help":
        print(HELP_TEXT)
    elif cmd == "join" and len(parts) >= 3:
        _report(state.add_player(parts[1], " ".join(parts[2:])))
    elif cmd == "start":
        _report(state.start_match(state.creator_id))
    elif cmd == "roll":
        _report(state.roll_dice(actor))
    elif cmd == "build" and len(parts) == 3:
        try:
            tile_id = int(parts[1])
        except ValueError:
            print("Tile id must be a number.")
            return True
        _report(state.place_building(actor, tile_id, parts[2].lower()))
    elif cmd in {"end", "pass"}:
        _report(state.end_turn(actor))
    elif cmd == "state":
        _print_state(state)
    elif cmd == "tiles":
        _print_tiles(state)
    elif cmd == "track":
        _print_track(state)
    elif cmd == "log":
        for message in state.event_log.messages():
            print(message)
    elif cmd == "quit":
        return False
    else:
        print("Unknown command. Type 'help'.")
    return True


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Play a local hot-seat game of Soure.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for dice and board")
    args = parser.parse_args(argv)

    state = GameState(game_id="local", rng=make_rng(args.seed))
    print("Soure CLI - type 'help' for commands")

    while True:
        current = state.current_player()
        prompt = f"{current.name if current else 'lobby'}:{state.phase.value}> "
        try:
            raw = input(prompt).strip()
        except (EOFError, KeyboardInterrupt):
            print("\nExiting")
            return 0
        if not handle_command(state, raw):
            return 0


if __name__ == "__main__":
    sys.exit(main())
