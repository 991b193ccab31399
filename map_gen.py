"""
Random cave map generation for the combat simulation.
Builds walled rectangular caves with seeded numpy randomness and scatters
elves and goblins on the open floor. Output is ordinary map text.
"""

from typing import Dict

import numpy as np

from models import Faction, Tile


def smooth_walls(walls: np.ndarray, threshold: int = 5) -> np.ndarray:
    """
    One cellular-automaton pass that clusters walls into ridges.

    A cell becomes wall when at least threshold of its 8 neighbors are
    walls, and floor when fewer than threshold - 1 are. The outer border
    stays wall.

    Args:
        walls: Boolean wall mask, border included
        threshold: Neighbor count that turns a cell into wall

    Returns:
        New wall mask
    """
    padded = np.pad(walls, 1, constant_values=True).astype(np.int8)
    height, width = walls.shape
    neighbor_count = np.zeros(walls.shape, dtype=np.int8)
    for dy in (-1, 0, 1):
        for dx in (-1, 0, 1):
            if dx == 0 and dy == 0:
                continue
            neighbor_count += padded[1 + dy:1 + dy + height, 1 + dx:1 + dx + width]

    smoothed = walls.copy()
    smoothed[neighbor_count >= threshold] = True
    smoothed[neighbor_count < threshold - 1] = False
    smoothed[0, :] = smoothed[-1, :] = True
    smoothed[:, 0] = smoothed[:, -1] = True
    return smoothed


def generate_map(
    width: int,
    height: int,
    seed: int,
    elves: int = 2,
    goblins: int = 3,
    wall_density: float = 0.2,
    smoothing_passes: int = 1,
) -> str:
    """
    Generate a random cave map.

    Args:
        width: Map width including the border walls (at least 3)
        height: Map height including the border walls (at least 3)
        seed: Random seed for reproducible generation
        elves: Number of elves to place
        goblins: Number of goblins to place
        wall_density: Chance that an interior cell starts as wall
        smoothing_passes: Cellular-automaton passes to cluster the walls

    Returns:
        Map text, one row per line

    Raises:
        ValueError: If the map is too small or has too little floor for the creatures
    """
    if width < 3 or height < 3:
        raise ValueError(f"Map must be at least 3x3, got {width}x{height}")

    rng = np.random.default_rng(seed)

    walls = rng.random((height, width)) < wall_density
    walls[0, :] = walls[-1, :] = True
    walls[:, 0] = walls[:, -1] = True
    for _ in range(smoothing_passes):
        walls = smooth_walls(walls)

    open_cells = np.flatnonzero(~walls)
    if len(open_cells) < elves + goblins:
        raise ValueError(f"Only {len(open_cells)} open cells for {elves + goblins} creatures")

    grid = np.where(walls, Tile.WALL.value, Tile.OPEN.value)
    chosen = rng.choice(open_cells, size=elves + goblins, replace=False)
    grid.flat[chosen[:elves]] = Faction.ELF.value
    grid.flat[chosen[elves:]] = Faction.GOBLIN.value

    return "\n".join("".join(row) for row in grid)


def map_stats(map_text: str) -> Dict[str, int]:
    """
    Count the cells of each kind in map text.

    Returns:
        Dictionary with width, height, walls, open, elves and goblins
    """
    rows = [row for row in map_text.splitlines() if row]
    counts = {ch: sum(row.count(ch) for row in rows) for ch in "#.EG"}
    return {
        'width': len(rows[0]) if rows else 0,
        'height': len(rows),
        'walls': counts['#'],
        'open': counts['.'] + counts['E'] + counts['G'],
        'elves': counts['E'],
        'goblins': counts['G'],
    }
