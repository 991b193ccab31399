"""
Board management for the cave combat simulation.

The board is an arena: a numpy wall mask for the static map plus a flat,
row-major list of occupants. Every move, attack and removal goes through a
single method here so the occupied cells always match the living creatures.
"""

from typing import Dict, List, Optional, Union

import numpy as np

from models import (
    DEFAULT_ATTACK_POWER,
    DEFAULT_HIT_POINTS,
    Creature,
    Faction,
    Point,
    Tile,
    get_neighbors,
)


class MapParseError(Exception):
    """Exception raised when map text cannot be turned into a board."""
    pass


class BoardError(Exception):
    """Exception raised when a move or attack breaks the board's rules."""
    pass


class Board:
    """Static walls plus the creature occupying each open cell."""

    def __init__(self, walls: np.ndarray):
        self.walls = walls
        self.height, self.width = walls.shape
        self.occupants: List[Optional[Creature]] = [None] * (self.width * self.height)
        self.creature_count: Dict[Faction, int] = {faction: 0 for faction in Faction}
        self.initial_count: Dict[Faction, int] = {faction: 0 for faction in Faction}

    def index(self, position: Point) -> int:
        """Convert a 1-based (x, y) position to its row-major index."""
        if not self.in_bounds(position):
            raise BoardError(f"Position {position} is outside the {self.width}x{self.height} map")
        x, y = position
        return (x - 1) + (y - 1) * self.width

    def position(self, index: int) -> Point:
        """Convert a row-major index back to a 1-based (x, y) position."""
        return (index % self.width + 1, index // self.width + 1)

    def in_bounds(self, position: Point) -> bool:
        x, y = position
        return 1 <= x <= self.width and 1 <= y <= self.height

    def tile_at(self, position: Point) -> Union[Tile, Creature]:
        """Return the creature standing at position, or the bare tile."""
        occupant = self.occupants[self.index(position)]
        if occupant is not None:
            return occupant
        x, y = position
        return Tile.WALL if self.walls[y - 1, x - 1] else Tile.OPEN

    def creature_at(self, position: Point) -> Optional[Creature]:
        return self.occupants[self.index(position)]

    def is_open(self, position: Point) -> bool:
        """True for an in-bounds floor cell with nobody on it."""
        return self.in_bounds(position) and self.tile_at(position) is Tile.OPEN

    def neighbors(self, position: Point) -> List[Point]:
        """Orthogonal neighbors inside the map, in reading order."""
        return [p for p in get_neighbors(position) if self.in_bounds(p)]

    def adjacent_enemies(self, creature: Creature, position: Optional[Point] = None) -> List[Creature]:
        """Living enemies of creature next to position (default: where it stands), in reading order."""
        enemies = []
        for pos in self.neighbors(position or creature.position):
            other = self.creature_at(pos)
            if other is not None and creature.is_enemy(other):
                enemies.append(other)
        return enemies

    def place_creature(self, creature: Creature) -> None:
        """Put a new creature on the board at its own position."""
        if not self.is_open(creature.position):
            raise BoardError(f"Cannot place {creature.id} on {creature.position}: cell is not open")
        self.occupants[self.index(creature.position)] = creature
        self.creature_count[creature.faction] += 1
        self.initial_count[creature.faction] += 1

    def move_creature(self, from_pos: Point, to_pos: Point) -> Creature:
        """
        Move the creature at from_pos onto to_pos.

        Args:
            from_pos: Current position of the creature
            to_pos: Destination, which must be open floor with no occupant

        Returns:
            The creature that moved

        Raises:
            BoardError: If from_pos is empty or to_pos is not open
        """
        creature = self.creature_at(from_pos)
        if creature is None:
            raise BoardError(f"No creature at {from_pos} to move")
        if not self.is_open(to_pos):
            raise BoardError(f"{creature.id} cannot move to {to_pos}: cell is not open")

        self.occupants[self.index(from_pos)] = None
        self.occupants[self.index(to_pos)] = creature
        creature.position = to_pos
        return creature

    def remove_creature(self, position: Point) -> Creature:
        """Take the creature at position off the board and out of the counts."""
        creature = self.creature_at(position)
        if creature is None:
            raise BoardError(f"No creature at {position} to remove")
        self.occupants[self.index(position)] = None
        self.creature_count[creature.faction] -= 1
        return creature

    def attack(self, target_pos: Point, attack_power: int) -> Creature:
        """
        Strike the creature at target_pos, removing it if it dies.

        Returns:
            The creature that was struck (hit_points == 0 means it died)

        Raises:
            BoardError: If there is no creature at target_pos
        """
        target = self.creature_at(target_pos)
        if target is None:
            raise BoardError(f"No creature at {target_pos} to attack")
        if target.take_damage(attack_power) == 0:
            self.remove_creature(target_pos)
        return target

    def creatures(self) -> List[Creature]:
        """All living creatures in reading order."""
        return [c for c in self.occupants if c is not None]

    def remaining_hit_points(self) -> Dict[Faction, int]:
        """Total hit points left per faction."""
        totals = {faction: 0 for faction in Faction}
        for creature in self.creatures():
            totals[creature.faction] += creature.hit_points
        return totals

    def losses(self, faction: Faction) -> int:
        """Number of creatures the faction has lost so far."""
        return self.initial_count[faction] - self.creature_count[faction]

    @property
    def game_over(self) -> bool:
        """The battle ends as soon as either faction has nobody left."""
        return any(count == 0 for count in self.creature_count.values())

    def render(self, show_hit_points: bool = True) -> str:
        """
        Draw the board in map-text form.

        With show_hit_points, each row is followed by its creatures' hit
        points, e.g. '#G.E..#   G(200), E(131)'.
        """
        lines = []
        for y in range(1, self.height + 1):
            row = []
            stats = []
            for x in range(1, self.width + 1):
                tile = self.tile_at((x, y))
                if isinstance(tile, Creature):
                    row.append(tile.faction.value)
                    stats.append(f"{tile.faction.value}({tile.hit_points})")
                else:
                    row.append(tile.value)
            line = "".join(row)
            if show_hit_points and stats:
                line += "   " + ", ".join(stats)
            lines.append(line)
        return "\n".join(lines)


def parse_board(
    text: str,
    elf_power: int = DEFAULT_ATTACK_POWER,
    goblin_power: int = DEFAULT_ATTACK_POWER,
    hit_points: int = DEFAULT_HIT_POINTS,
) -> Board:
    """
    Build a board from map text.

    '#' is wall, '.' open floor, 'E' and 'G' open floor holding an elf or a
    goblin. The width is taken from the first line and every row must match.

    Args:
        text: Map text, one row per line
        elf_power: Attack power for every elf
        goblin_power: Attack power for every goblin
        hit_points: Starting hit points for every creature

    Returns:
        New Board with all creatures placed

    Raises:
        MapParseError: If the map is empty, ragged, or has an unknown character
    """
    rows = [line.rstrip("\r") for line in text.split("\n")]
    while rows and not rows[-1]:
        rows.pop()
    if not rows:
        raise MapParseError("Map is empty")

    width = len(rows[0])
    if width == 0:
        raise MapParseError("First map row is empty")

    walls = np.zeros((len(rows), width), dtype=bool)
    placements = []
    for y, row in enumerate(rows, 1):
        if len(row) != width:
            raise MapParseError(f"Row {y} has width {len(row)}, expected {width}")
        for x, ch in enumerate(row, 1):
            if ch == Tile.WALL.value:
                walls[y - 1, x - 1] = True
            elif ch == Tile.OPEN.value:
                continue
            elif ch in (Faction.ELF.value, Faction.GOBLIN.value):
                placements.append((Faction(ch), (x, y)))
            else:
                raise MapParseError(f"Unexpected character {ch!r} at ({x}, {y})")

    board = Board(walls)
    powers = {Faction.ELF: elf_power, Faction.GOBLIN: goblin_power}
    numbering = {faction: 0 for faction in Faction}
    for faction, position in placements:
        numbering[faction] += 1
        board.place_creature(Creature(
            id=f"{faction.value}{numbering[faction]}",
            faction=faction,
            position=position,
            attack_power=powers[faction],
            hit_points=hit_points,
        ))
    return board
