"""Shared test fixtures and sample maps."""

import pytest

from board import parse_board
from state import DEFAULT_CONFIG, initialize_battle

# --- Sample battles (map, rounds, remaining hit points) ---

SAMPLE_MAP = """\
#######
#.G...#
#...EG#
#.#.#G#
#..G#E#
#.....#
#######
"""

COMBAT_MAPS = [
    ("""\
#######
#G..#E#
#E#E.E#
#G.##.#
#...#E#
#...E.#
#######""", 37, 982),
    ("""\
#######
#E..EG#
#.#G.E#
#E.##E#
#G..#.#
#..E#.#
#######""", 46, 859),
    ("""\
#######
#E.G#.#
#.#G..#
#G.#.G#
#G..#.#
#...E.#
#######""", 35, 793),
    ("""\
#######
#.E...#
#.#..G#
#.###.#
#E#G#G#
#...#G#
#######""", 54, 536),
    ("""\
#########
#G......#
#.E.#...#
#..##..G#
#...##..#
#...#...#
#.G...G.#
#.....G.#
#########""", 20, 937),
]

MOVEMENT_MAP = """\
#########
#G..G..G#
#.......#
#.......#
#G..E..G#
#.......#
#.......#
#G..G..G#
#########"""


# --- Fixtures ---


@pytest.fixture
def config():
    """Built-in defaults, independent of config.json on disk."""
    return dict(DEFAULT_CONFIG)


@pytest.fixture
def sample_board():
    """The 27730 sample map at base attack power."""
    return parse_board(SAMPLE_MAP)


@pytest.fixture
def sample_battle(config):
    """Fresh battle on the 27730 sample map with the event log on."""
    return initialize_battle(SAMPLE_MAP, config=config)


@pytest.fixture
def api_client():
    """Flask test client."""
    from app import app

    app.config["TESTING"] = True
    with app.test_client() as client:
        yield client
