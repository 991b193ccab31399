from flask import Flask, request, jsonify
from flask_cors import CORS
from board import BoardError, MapParseError
from battle import StalemateError, run_battle
from search import SearchError, find_minimal_power
from state import initialize_battle, get_battle_summary, load_config
from models import Faction
from typing import Any, Dict, Optional, Tuple

app = Flask(__name__)
CORS(app)  # Enable CORS for all routes


def _read_map(data: Dict[str, Any]) -> Tuple[Optional[str], Optional[Tuple[Any, int]]]:
    """Pull the map text out of a request body, or build the 400 response."""
    map_text = data.get('map')
    if not isinstance(map_text, str) or not map_text.strip():
        return None, (jsonify({'error': 'Request must include a non-empty map string'}), 400)
    return map_text, None


def _read_int(data: Dict[str, Any], key: str) -> Optional[int]:
    """Read an optional positive integer field; raises ValueError when invalid."""
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f'{key} must be an integer')
    try:
        value = int(value)
    except (ValueError, TypeError):
        raise ValueError(f'{key} must be an integer')
    if value < 1:
        raise ValueError(f'{key} must be at least 1')
    return value


@app.route('/api/battle/simulate', methods=['POST'])
def simulate_battle():
    """Run a battle to the end and return its summary, outcome and event log."""
    try:
        data = request.get_json(silent=True)
        if data is None:
            return jsonify({'error': 'Invalid JSON data'}), 400

        map_text, error = _read_map(data)
        if error:
            return error

        try:
            elf_power = _read_int(data, 'elf_power')
            goblin_power = _read_int(data, 'goblin_power')
            hit_points = _read_int(data, 'hit_points')
        except ValueError as e:
            return jsonify({'error': str(e)}), 400

        include_log = bool(data.get('include_log', False))
        config = load_config()
        state = initialize_battle(map_text, elf_power, goblin_power, hit_points,
                                  config=config, record_log=include_log)
        outcome = run_battle(state, max_rounds=config.get('max_rounds'))

        response = {
            'summary': get_battle_summary(state),
            'outcome': outcome.to_dict(),
        }
        if include_log:
            response['log'] = state.log
        return jsonify(response)

    except MapParseError as e:
        return jsonify({'error': f'Invalid map: {str(e)}'}), 400
    except StalemateError as e:
        return jsonify({'error': str(e)}), 422
    except BoardError as e:
        return jsonify({'error': f'Simulation failed: {str(e)}'}), 500


@app.route('/api/battle/search', methods=['POST'])
def search_power():
    """Find the smallest attack power that wins for a faction without losses."""
    try:
        data = request.get_json(silent=True)
        if data is None:
            return jsonify({'error': 'Invalid JSON data'}), 400

        map_text, error = _read_map(data)
        if error:
            return error

        faction_code = data.get('faction', Faction.ELF.value)
        try:
            faction = Faction(faction_code)
        except ValueError:
            return jsonify({'error': f'Invalid faction: {faction_code}'}), 400

        try:
            start_power = _read_int(data, 'start_power')
        except ValueError as e:
            return jsonify({'error': str(e)}), 400

        result = find_minimal_power(map_text, faction, start_power=start_power)
        return jsonify(result.to_dict())

    except MapParseError as e:
        return jsonify({'error': f'Invalid map: {str(e)}'}), 400
    except (SearchError, StalemateError) as e:
        return jsonify({'error': str(e)}), 422
    except BoardError as e:
        return jsonify({'error': f'Search failed: {str(e)}'}), 500


if __name__ == '__main__':
    app.run(debug=True, port=5000)
