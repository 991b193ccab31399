"""
Strength search: the smallest attack power that lets one faction win
without losing a single creature.

Every probe replays the whole battle from the map text. Probes stop as
soon as the watched faction loses someone, since that power has already
failed.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from battle import BattleOutcome, run_battle
from models import Faction
from state import initialize_battle, load_config


class SearchError(Exception):
    """Exception raised when no attack power lets the faction win without losses."""
    pass


@dataclass
class SearchResult:
    """The winning power, the battle it produced and every probe taken on the way."""
    faction: Faction
    attack_power: int
    outcome: BattleOutcome
    probes: Dict[int, bool] = field(default_factory=dict)  # power -> won without losses
    linear_fallback: bool = False  # True when the probes were not monotonic

    @property
    def score(self) -> int:
        return self.outcome.score

    def to_dict(self) -> Dict[str, Any]:
        return {
            'faction': self.faction.value,
            'attack_power': self.attack_power,
            'rounds': self.outcome.rounds,
            'score': self.score,
            'probes': {str(power): won for power, won in sorted(self.probes.items())},
            'linear_fallback': self.linear_fallback,
        }


def probe(
    map_text: str,
    faction: Faction,
    attack_power: int,
    config: Optional[Dict[str, Any]] = None,
) -> Optional[BattleOutcome]:
    """
    Run one battle with faction's attack power boosted.

    The other faction keeps the config attack_power. The battle is parsed
    fresh from map_text, so probes never share a board.

    Args:
        map_text: Map text ('#', '.', 'E', 'G')
        faction: Faction whose attack power is set
        attack_power: Attack power to try
        config: Config dict to use instead of loading config.json

    Returns:
        The outcome if faction won without losses, None otherwise

    Raises:
        SearchError: If the map has no creatures of faction
    """
    if config is None:
        config = load_config()
    powers = {Faction.ELF: None, Faction.GOBLIN: None}
    powers[faction] = attack_power
    state = initialize_battle(map_text, elf_power=powers[Faction.ELF], goblin_power=powers[Faction.GOBLIN],
                              config=config, record_log=False)
    if state.board.initial_count[faction] == 0:
        raise SearchError(f"Map has no {faction.name.lower()} creatures to search for")

    outcome = run_battle(state, max_rounds=config.get('max_rounds', 10000), stop_on_loss=faction)
    if outcome is None or outcome.winner is not faction:
        return None
    return outcome


def is_monotonic(probes: Dict[int, bool]) -> bool:
    """Check that no failing power sits above a winning one."""
    won = False
    for power in sorted(probes):
        if probes[power]:
            won = True
        elif won:
            return False
    return True


def find_minimal_power(
    map_text: str,
    faction: Faction = Faction.ELF,
    start_power: Optional[int] = None,
    config: Optional[Dict[str, Any]] = None,
) -> SearchResult:
    """
    Find the smallest attack power at which faction wins with no losses.

    Starts at start_power and raises an upper bound in steps until a probe
    wins, then bisects between the last failure and that bound. The next
    search_verify_window powers above the answer are probed too; if any of
    them fails the probes are not monotonic and the search falls back to
    trying every power upward from start_power.

    Args:
        map_text: Map text ('#', '.', 'E', 'G')
        faction: Faction whose attack power is searched
        start_power: Lowest power to try (default: config search_start_power)
        config: Config dict to use instead of loading config.json

    Returns:
        SearchResult with the winning power and its battle outcome

    Raises:
        SearchError: If no power up to search_max_power avoids losses
    """
    if config is None:
        config = load_config()
    start = config.get('search_start_power', 4) if start_power is None else start_power
    upper_step = max(1, config.get('search_upper_step', 25))
    verify_window = max(0, config.get('search_verify_window', 2))
    max_power = config.get('search_max_power', 1000)

    outcomes: Dict[int, Optional[BattleOutcome]] = {}

    def attempt(power: int) -> Optional[BattleOutcome]:
        if power not in outcomes:
            outcomes[power] = probe(map_text, faction, power, config)
        return outcomes[power]

    def probes() -> Dict[int, bool]:
        return {power: outcome is not None for power, outcome in outcomes.items()}

    if start > max_power:
        raise SearchError(f"Start power {start} is above the maximum {max_power}")

    if attempt(start) is not None:
        return SearchResult(faction, start, outcomes[start], probes())

    # Find a winning upper bound
    lower = start
    upper = min(max(config.get('search_initial_upper', 100), start + 1), max_power)
    while attempt(upper) is None:
        if upper >= max_power:
            raise SearchError(
                f"No attack power up to {max_power} lets the {faction.name.lower()} faction win without losses")
        lower = upper
        upper = min(upper + upper_step, max_power)

    # lower always fails, upper always wins
    while upper - lower > 1:
        middle = (lower + upper) // 2
        if attempt(middle) is None:
            lower = middle
        else:
            upper = middle

    # Bisection alone never sees a failure above a win, so check a few powers past the answer
    for power in range(upper + 1, min(upper + verify_window, max_power) + 1):
        attempt(power)

    if is_monotonic(probes()):
        return SearchResult(faction, upper, outcomes[upper], probes())

    for power in range(start, upper + 1):
        if attempt(power) is not None:
            return SearchResult(faction, power, outcomes[power], probes(), linear_fallback=True)

    # attempt(upper) won above, so the scan always returns
    raise SearchError(f"Linear scan found no winning power for the {faction.name.lower()} faction")
