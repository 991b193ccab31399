"""
Round execution: every living creature acts once, in reading order.

Moves and deaths land on the board immediately, so a creature acting later
in the round sees what the earlier ones did.
"""

from typing import List

from models import Creature
from pathfinding import Instructions, find_instructions
from state import BattleState


def log_event(state: BattleState, event: str, **kwargs) -> None:
    """
    Add an event to the battle log.

    Args:
        state: Current battle state (nothing is recorded when its log is off)
        event: Description of the event
        **kwargs: Additional event data to include
    """
    if state.log is None:
        return
    log_entry = {
        'round': state.rounds + 1,
        'event': event,
        **kwargs
    }
    state.log.append(log_entry)


def take_turn(state: BattleState, creature: Creature) -> Instructions:
    """
    Let one creature move and then attack.

    Args:
        state: Current battle state, updated in place
        creature: The acting creature, which must be alive

    Returns:
        The instructions that were carried out
    """
    board = state.board
    instructions = find_instructions(board, creature)

    if instructions.move_to is not None:
        origin = creature.position
        board.move_creature(origin, instructions.move_to)
        log_event(state, f'{creature.id} moves from {origin} to {instructions.move_to}',
                  creature_id=creature.id, origin=origin, destination=instructions.move_to)

    if instructions.attack is not None:
        target = board.attack(instructions.attack, creature.attack_power)
        log_event(state, f'{creature.id} hits {target.id} for {creature.attack_power}, '
                         f'{target.hit_points} hit points left',
                  attacker_id=creature.id, target_id=target.id,
                  damage=creature.attack_power, hit_points=target.hit_points)
        if not target.alive:
            log_event(state, f'{target.id} dies at {target.position}',
                      creature_id=target.id, faction=target.faction.value)

    return instructions


def play_round(state: BattleState) -> bool:
    """
    Play one round of the battle.

    The turn order is fixed at the start of the round from the board in
    reading order. A creature killed before its turn is skipped, and one
    that moved further along the scan still acts only once. When a creature
    finds no enemies left the round stops there and is not counted.

    Args:
        state: Current battle state, updated in place

    Returns:
        True if the round completed and was counted, False if the battle
        ended partway through it

    Raises:
        ValueError: If the battle is already over
    """
    board = state.board
    if board.game_over:
        raise ValueError(f"Battle is already over after {state.rounds} rounds")

    turn_order: List[Creature] = board.creatures()
    for creature in turn_order:
        if not creature.alive:
            continue
        if board.game_over:
            log_event(state, f'{creature.id} finds no enemies; round {state.rounds + 1} is not completed',
                      creature_id=creature.id)
            return False
        take_turn(state, creature)

    log_event(state, f'Round {state.rounds + 1} complete')
    state.rounds += 1
    return True
