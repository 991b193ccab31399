# Models for cave combat elements: factions, tiles, creatures and coordinates

from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple

# Position as (x, y), 1-based like the puzzle input: x is the column, y the row
Point = Tuple[int, int]

DEFAULT_HIT_POINTS = 200
DEFAULT_ATTACK_POWER = 3

# Neighbor offsets in reading order: up, left, right, down
NEIGHBOR_OFFSETS = [(0, -1), (-1, 0), (1, 0), (0, 1)]


class Faction(Enum):
    """The two opposing sides. The value is the map character."""
    ELF = "E"
    GOBLIN = "G"

    @property
    def enemy(self) -> "Faction":
        return Faction.GOBLIN if self is Faction.ELF else Faction.ELF


class Tile(Enum):
    """Static terrain of a cell."""
    OPEN = "."
    WALL = "#"


def reading_order(position: Point) -> Tuple[int, int]:
    """Sort key for reading order: top-to-bottom, then left-to-right."""
    x, y = position
    return (y, x)


def get_neighbors(position: Point) -> List[Point]:
    """
    Get the 4 orthogonal neighbors of a position in reading order.

    Bounds are not checked here; the board drops cells outside the map.
    """
    x, y = position
    return [(x + dx, y + dy) for dx, dy in NEIGHBOR_OFFSETS]


@dataclass
class Creature:
    """
    A single elf or goblin.

    The position is owned by the Board: it is rewritten on every move and
    the occupant at that cell is always this creature while it lives.
    """
    id: str  # Creature identifier (e.g., 'E1', 'G3'), numbered in reading order
    faction: Faction
    position: Point
    attack_power: int = DEFAULT_ATTACK_POWER
    hit_points: int = DEFAULT_HIT_POINTS

    @property
    def alive(self) -> bool:
        return self.hit_points > 0

    def is_enemy(self, other: "Creature") -> bool:
        """Check whether another creature belongs to the opposing faction."""
        return self.faction != other.faction

    def take_damage(self, amount: int) -> int:
        """Reduce hit points by amount, never below zero. Returns the new hit points."""
        self.hit_points = max(0, self.hit_points - amount)
        return self.hit_points
