"""
Test suite for the attack power search.
"""

import pytest

import search
from battle import BattleOutcome, StalemateError
from map_gen import generate_map
from models import Faction
from search import SearchError, find_minimal_power, is_monotonic, probe
from tests.conftest import COMBAT_MAPS, SAMPLE_MAP


def fake_outcome(power):
    return BattleOutcome(
        rounds=power,
        hit_points={Faction.ELF: 100, Faction.GOBLIN: 0},
        survivors={Faction.ELF: 2, Faction.GOBLIN: 0},
        losses={Faction.ELF: 0, Faction.GOBLIN: 4},
        winner=Faction.ELF,
    )


@pytest.fixture
def fake_probe(monkeypatch):
    """Replace real battles with a table of winning powers."""
    calls = []

    def install(wins):
        def fake(map_text, faction, attack_power, config=None):
            calls.append(attack_power)
            return fake_outcome(attack_power) if wins(attack_power) else None
        monkeypatch.setattr(search, 'probe', fake)
        return calls

    return install


@pytest.fixture
def search_config(config):
    config.update({
        'search_start_power': 4,
        'search_initial_upper': 10,
        'search_upper_step': 5,
        'search_verify_window': 2,
        'search_max_power': 50,
    })
    return config


class TestProbe:
    def test_power_14_loses_an_elf(self, config):
        assert probe(SAMPLE_MAP, Faction.ELF, 14, config) is None

    def test_power_15_wins_without_losses(self, config):
        outcome = probe(SAMPLE_MAP, Faction.ELF, 15, config)
        assert outcome is not None
        assert outcome.rounds == 29
        assert outcome.total_hit_points == 172
        assert outcome.score == 4988
        assert outcome.losses[Faction.ELF] == 0

    def test_base_power_loses(self, config):
        assert probe(SAMPLE_MAP, Faction.ELF, 3, config) is None

    @pytest.mark.parametrize("power", [15, 20, 30, 200])
    def test_stays_winning_above_minimum(self, config, power):
        assert probe(SAMPLE_MAP, Faction.ELF, power, config) is not None

    def test_faction_missing(self, config):
        with pytest.raises(SearchError, match="no elf"):
            probe("#####\n#G.G#\n#####", Faction.ELF, 10, config)

    def test_probes_do_not_share_state(self, config):
        first = probe(SAMPLE_MAP, Faction.ELF, 15, config)
        second = probe(SAMPLE_MAP, Faction.ELF, 15, config)
        assert first == second


@pytest.mark.parametrize("seed", range(6))
def test_winning_stays_winning_on_random_caves(config, seed):
    """Once a power wins without losses, every higher power does too."""
    config["max_rounds"] = 500
    text = generate_map(10, 8, seed=seed, elves=2, goblins=3)
    try:
        wins = [probe(text, Faction.ELF, power, config) is not None for power in range(4, 41)]
    except StalemateError:
        pytest.skip("factions cannot reach each other")

    if True in wins:
        first = wins.index(True)
        assert all(wins[first:]), f"power {4 + wins.index(False, first)} lost after {4 + first} won"


class TestFindMinimalPower:
    def test_sample_map(self, config):
        result = find_minimal_power(SAMPLE_MAP, Faction.ELF, config=config)
        assert result.attack_power == 15
        assert result.score == 4988
        assert result.outcome.rounds == 29
        assert result.linear_fallback is False
        assert result.probes[14] is False
        assert result.probes[15] is True
        assert is_monotonic(result.probes)

    def test_wins_at_start_power(self, config):
        map_text = COMBAT_MAPS[1][0]
        result = find_minimal_power(map_text, Faction.ELF, config=config)
        assert result.attack_power == 4
        assert result.outcome.rounds == 33
        assert result.score == 31284
        assert result.probes == {4: True}

    def test_larger_map(self, config):
        map_text = COMBAT_MAPS[4][0]
        result = find_minimal_power(map_text, Faction.ELF, config=config)
        assert result.attack_power == 34
        assert result.score == 1140

    def test_start_power_override(self, config):
        result = find_minimal_power(SAMPLE_MAP, Faction.ELF, start_power=20, config=config)
        assert result.attack_power == 20

    def test_no_winning_power(self, config):
        config['search_max_power'] = 10
        with pytest.raises(SearchError, match="up to 10"):
            find_minimal_power(SAMPLE_MAP, Faction.ELF, config=config)

    def test_start_above_maximum(self, config):
        config['search_max_power'] = 3
        with pytest.raises(SearchError, match="above the maximum"):
            find_minimal_power(SAMPLE_MAP, Faction.ELF, config=config)

    def test_bisection_probes(self, fake_probe, search_config):
        calls = fake_probe(lambda power: power >= 12)
        result = find_minimal_power(SAMPLE_MAP, Faction.ELF, config=search_config)

        assert result.attack_power == 12
        assert result.linear_fallback is False
        # start, bound 10 fails, bound 15 wins, bisect 12 and 11, then verify 13 and 14
        assert calls == [4, 10, 15, 12, 11, 13, 14]

    def test_non_monotonic_falls_back_to_linear_scan(self, fake_probe, search_config):
        calls = fake_probe(lambda power: power in (5, 12) or power >= 14)
        result = find_minimal_power(SAMPLE_MAP, Faction.ELF, config=search_config)

        assert result.attack_power == 5
        assert result.linear_fallback is True
        assert result.probes[13] is False
        assert calls[-1] == 5

    def test_bound_grows_in_steps(self, fake_probe, search_config):
        calls = fake_probe(lambda power: power >= 23)
        result = find_minimal_power(SAMPLE_MAP, Faction.ELF, config=search_config)
        assert result.attack_power == 23
        assert calls[:4] == [4, 10, 15, 20]

    def test_to_dict(self, fake_probe, search_config):
        fake_probe(lambda power: power >= 12)
        data = find_minimal_power(SAMPLE_MAP, Faction.ELF, config=search_config).to_dict()
        assert data['faction'] == 'E'
        assert data['attack_power'] == 12
        assert data['probes']['11'] is False
        assert data['probes']['12'] is True


class TestIsMonotonic:
    def test_monotonic(self):
        assert is_monotonic({4: False, 10: False, 12: True, 20: True})
        assert is_monotonic({})
        assert is_monotonic({4: True})

    def test_failure_above_win(self):
        assert not is_monotonic({4: False, 5: True, 13: False, 14: True})
