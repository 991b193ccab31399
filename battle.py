"""
Battle controller: runs rounds until one faction is wiped out and scores
the result.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from models import Faction
from rounds import play_round
from state import BattleState, initialize_battle, load_config


class StalemateError(Exception):
    """Exception raised when a battle runs past the round limit without ending."""
    pass


@dataclass
class BattleOutcome:
    """Final result of a battle. Only built once the battle is over."""
    rounds: int
    hit_points: Dict[Faction, int]  # Remaining hit points per faction
    survivors: Dict[Faction, int]
    losses: Dict[Faction, int]
    winner: Optional[Faction]  # None when the map had no creatures at all

    @property
    def total_hit_points(self) -> int:
        return sum(self.hit_points.values())

    @property
    def score(self) -> int:
        return self.rounds * self.total_hit_points

    def to_dict(self) -> Dict[str, Any]:
        return {
            'rounds': self.rounds,
            'hit_points': {f.value: hp for f, hp in self.hit_points.items()},
            'total_hit_points': self.total_hit_points,
            'survivors': {f.value: n for f, n in self.survivors.items()},
            'losses': {f.value: n for f, n in self.losses.items()},
            'winner': self.winner.value if self.winner else None,
            'score': self.score,
        }


def get_outcome(state: BattleState) -> BattleOutcome:
    """
    Score a finished battle.

    Raises:
        ValueError: If both factions still have living creatures
    """
    board = state.board
    if not board.game_over:
        raise ValueError(f"Battle is still running after {state.rounds} rounds")

    winner = None
    for faction in Faction:
        if board.creature_count[faction] > 0:
            winner = faction

    return BattleOutcome(
        rounds=state.rounds,
        hit_points=board.remaining_hit_points(),
        survivors=dict(board.creature_count),
        losses={faction: board.losses(faction) for faction in Faction},
        winner=winner,
    )


def run_battle(
    state: BattleState,
    max_rounds: Optional[int] = None,
    stop_on_loss: Optional[Faction] = None,
) -> Optional[BattleOutcome]:
    """
    Play rounds until one faction has nobody left.

    Args:
        state: Battle to run, updated in place
        max_rounds: Round limit (default: config max_rounds)
        stop_on_loss: Give up as soon as this faction loses a creature

    Returns:
        The battle outcome, or None if stop_on_loss cut the battle short

    Raises:
        StalemateError: If the battle is still going after max_rounds rounds
    """
    if max_rounds is None:
        max_rounds = load_config().get('max_rounds', 10000)

    board = state.board
    while not board.game_over:
        if state.rounds >= max_rounds:
            raise StalemateError(f"Battle {state.battle_id} did not end within {max_rounds} rounds")
        play_round(state)
        if stop_on_loss is not None and board.losses(stop_on_loss) > 0:
            return None

    outcome = get_outcome(state)
    if state.log is not None:
        state.log.append({
            'round': state.rounds,
            'event': 'Battle over',
            'winner': outcome.winner.value if outcome.winner else None,
            'hit_points': outcome.total_hit_points,
            'score': outcome.score,
        })
    return outcome


def simulate(
    map_text: str,
    elf_power: Optional[int] = None,
    goblin_power: Optional[int] = None,
    hit_points: Optional[int] = None,
    config: Optional[Dict[str, Any]] = None,
) -> BattleOutcome:
    """
    Run a whole battle from map text.

    Args:
        map_text: Map text ('#', '.', 'E', 'G')
        elf_power: Attack power for elves (default: config attack_power)
        goblin_power: Attack power for goblins (default: config attack_power)
        hit_points: Starting hit points (default: config hit_points)
        config: Config dict to use instead of loading config.json

    Returns:
        The battle outcome
    """
    if config is None:
        config = load_config()
    state = initialize_battle(map_text, elf_power, goblin_power, hit_points,
                              config=config, record_log=False)
    return run_battle(state, max_rounds=config.get('max_rounds', 10000))
