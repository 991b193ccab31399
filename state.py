"""
Battle state management for the cave combat simulation.

Holds the board, the completed-round counter and the event trail for one
battle, plus the config loading every entry point shares.

Defaults: 200 hit points and attack power 3 for every creature.
"""

from __future__ import annotations
import json
import os
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from board import Board, parse_board
from models import DEFAULT_ATTACK_POWER, DEFAULT_HIT_POINTS, Faction

DEFAULT_CONFIG: Dict[str, Any] = {
    'hit_points': DEFAULT_HIT_POINTS,
    'attack_power': DEFAULT_ATTACK_POWER,
    'max_rounds': 10000,
    'search_start_power': 4,
    'search_initial_upper': 100,
    'search_upper_step': 25,
    'search_verify_window': 2,
    'search_max_power': 1000,
}


@dataclass
class BattleState:
    """
    Complete state of one battle.

    rounds only counts rounds in which every creature alive at the start
    got its turn. log is None when the event trail is switched off.
    """
    board: Board
    battle_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    rounds: int = 0
    log: Optional[List[Dict[str, Any]]] = field(default_factory=list)

    @property
    def is_over(self) -> bool:
        return self.board.game_over

    def total_hit_points(self) -> int:
        return sum(self.board.remaining_hit_points().values())

    def score(self) -> int:
        """Completed rounds times the hit points of every survivor."""
        return self.rounds * self.total_hit_points()


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load config.json over the built-in defaults.

    Args:
        path: Config file to read (default: config.json next to this module)

    Returns:
        Dictionary of config values; defaults fill anything missing
    """
    config_path = path or os.path.join(os.path.dirname(__file__), 'config.json')
    config = dict(DEFAULT_CONFIG)

    try:
        with open(config_path, 'r') as f:
            loaded = json.load(f)
        if isinstance(loaded, dict):
            config.update(loaded)
    except (FileNotFoundError, json.JSONDecodeError):
        # Use defaults if config file is missing or invalid
        pass

    return config


def initialize_battle(
    map_text: str,
    elf_power: Optional[int] = None,
    goblin_power: Optional[int] = None,
    hit_points: Optional[int] = None,
    config: Optional[Dict[str, Any]] = None,
    record_log: bool = True,
) -> BattleState:
    """
    Parse a map into a fresh battle.

    Args:
        map_text: Map text ('#', '.', 'E', 'G')
        elf_power: Attack power for elves (default: config attack_power)
        goblin_power: Attack power for goblins (default: config attack_power)
        hit_points: Starting hit points (default: config hit_points)
        config: Config dict to use instead of loading config.json
        record_log: Keep an event trail on the state

    Returns:
        New BattleState at round 0
    """
    if config is None:
        config = load_config()
    base_power = config.get('attack_power', DEFAULT_ATTACK_POWER)

    board = parse_board(
        map_text,
        elf_power=base_power if elf_power is None else elf_power,
        goblin_power=base_power if goblin_power is None else goblin_power,
        hit_points=config.get('hit_points', DEFAULT_HIT_POINTS) if hit_points is None else hit_points,
    )

    state = BattleState(board=board, log=[] if record_log else None)
    if state.log is not None:
        state.log.append({
            'round': 0,
            'event': 'Battle started',
            'elves': board.creature_count[Faction.ELF],
            'goblins': board.creature_count[Faction.GOBLIN],
        })
    return state


def get_battle_summary(state: BattleState) -> Dict[str, Any]:
    """
    Get a summary of the battle for API responses.

    Args:
        state: Current battle state

    Returns:
        Dictionary with rounds, per-faction counts and hit points, creatures
        and the score
    """
    board = state.board
    hit_points = board.remaining_hit_points()
    return {
        'battle_id': state.battle_id,
        'rounds': state.rounds,
        'is_over': state.is_over,
        'factions': {
            faction.value: {
                'alive': board.creature_count[faction],
                'lost': board.losses(faction),
                'hit_points': hit_points[faction],
            }
            for faction in Faction
        },
        'creatures': [
            {
                'id': creature.id,
                'faction': creature.faction.value,
                'position': {'x': creature.position[0], 'y': creature.position[1]},
                'hit_points': creature.hit_points,
                'attack_power': creature.attack_power,
            }
            for creature in board.creatures()
        ],
        'map_size': (board.width, board.height),
        'score': state.score() if state.is_over else None,
    }
