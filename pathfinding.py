"""
Movement and target selection for a single acting creature.

A creature already next to an enemy stays put and strikes. Otherwise a
breadth-first search over open floor finds the nearest cell next to any
enemy, ties going to the cell first in reading order, and the creature
takes one step along a shortest path towards it.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from board import Board
from models import Creature, Faction, Point, reading_order


@dataclass
class Instructions:
    """What a creature does this turn: an optional step and an optional strike."""
    move_to: Optional[Point] = None
    attack: Optional[Point] = None
    distance: Optional[int] = None  # Path length to the chosen destination, if one was found


def choose_target(board: Board, creature: Creature, position: Optional[Point] = None) -> Optional[Point]:
    """
    Pick the adjacent enemy to strike.

    The enemy with the fewest hit points wins; equal hit points go to the
    first in reading order.

    Args:
        board: Current board
        creature: The attacker
        position: Where the attacker will stand (default: its current position)

    Returns:
        Position of the enemy to attack, or None if no enemy is adjacent
    """
    enemies = board.adjacent_enemies(creature, position)
    if not enemies:
        return None
    weakest = min(enemies, key=lambda e: (e.hit_points, reading_order(e.position)))
    return weakest.position


def is_in_range(board: Board, position: Point, faction: Faction) -> bool:
    """Check whether position is orthogonally adjacent to a creature of faction's enemy."""
    for pos in board.neighbors(position):
        other = board.creature_at(pos)
        if other is not None and other.faction != faction:
            return True
    return False


def find_destination(board: Board, creature: Creature) -> Tuple[Optional[Point], Optional[Point], Optional[int]]:
    """
    Search outward from a creature for the nearest cell in range of an enemy.

    The search runs level by level, each level visited in reading order. A
    cell reached from several cells of the previous level keeps the parent
    whose path starts with the step first in reading order, so walking the
    parent chain back from the destination gives the step to take.

    Returns:
        (destination, first_step, distance), or (None, None, None) if no
        cell next to an enemy can be reached
    """
    start = creature.position
    parents: Dict[Point, Point] = {}
    first_steps: Dict[Point, Point] = {}
    distances: Dict[Point, int] = {}

    frontier = sorted((p for p in board.neighbors(start) if board.is_open(p)), key=reading_order)
    for pos in frontier:
        parents[pos] = start
        first_steps[pos] = pos
        distances[pos] = 1

    distance = 1
    while frontier:
        reachable = [pos for pos in frontier if is_in_range(board, pos, creature.faction)]
        if reachable:
            destination = min(reachable, key=reading_order)
            step = destination
            while parents[step] != start:
                step = parents[step]
            return destination, step, distance

        next_level: List[Point] = []
        for cell in frontier:
            for pos in board.neighbors(cell):
                if not board.is_open(pos):
                    continue
                if pos not in distances:
                    parents[pos] = cell
                    first_steps[pos] = first_steps[cell]
                    distances[pos] = distance + 1
                    next_level.append(pos)
                elif distances[pos] == distance + 1 and (
                    reading_order(first_steps[cell]) < reading_order(first_steps[pos])
                ):
                    parents[pos] = cell
                    first_steps[pos] = first_steps[cell]

        frontier = sorted(next_level, key=reading_order)
        distance += 1

    return None, None, None


def find_instructions(board: Board, creature: Creature) -> Instructions:
    """
    Decide a creature's move and attack for this turn.

    Args:
        board: Current board, not modified
        creature: The creature about to act

    Returns:
        Instructions with move_to and/or attack set, or both None if the
        creature has no enemies left or cannot reach any of them
    """
    if board.creature_count[creature.faction.enemy] == 0:
        return Instructions()

    target = choose_target(board, creature)
    if target is not None:
        return Instructions(attack=target, distance=0)

    destination, step, distance = find_destination(board, creature)
    if destination is None:
        return Instructions()

    # Only a one-step path lands in range this turn
    attack = choose_target(board, creature, step) if distance == 1 else None
    return Instructions(move_to=step, attack=attack, distance=distance)
