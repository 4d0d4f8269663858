"""
Project lifecycle statechart.

The machine itself lives in phasegate.statechart.machine:
    from phasegate.statechart.machine import StateMachine, load_machine
"""

from phasegate.statechart.states import STATE_PHASES, Event, State
from phasegate.statechart.transitions import (
    TRANSITIONS,
    Transition,
    TransitionTable,
    build_transition_table,
    initial_state,
    state_after_discovery,
)

__all__ = [
    "STATE_PHASES",
    "Event",
    "State",
    "TRANSITIONS",
    "Transition",
    "TransitionTable",
    "build_transition_table",
    "initial_state",
    "state_after_discovery",
]
