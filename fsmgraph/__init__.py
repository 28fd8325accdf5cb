"""
A minimal finite-state machine runner that can trace its state transitions
to a DOT graph file.

States are named handlers returning the next state (or None to stop). The
machine runs them in turn and, when tracing is enabled, records every
transition with its step number and renders the history with Jinja2 into a
Graphviz-compatible ``.gv`` file.
"""

from .exceptions import (
    DuplicateStateError,
    ExporterStateError,
    FSMError,
    InvalidArgumentError,
    MachineAlreadyRunError,
    SinkCreationError,
    SinkError,
    SinkWriteError,
    StepLimitExceededError,
    UnknownStateError,
)
from .graph import ExporterStatus, GraphExporter, GraphOptions, render_dot, write_dot
from .history import END_STATE, START_STATE, Transition, TransitionHistory
from .machine import FiniteStateMachine, new_machine
from .states import State, StateRegistry, state

__version__ = "0.1.0"
__license__ = "MIT"

__all__ = [
    "FiniteStateMachine",
    "new_machine",
    "State",
    "StateRegistry",
    "state",
    "Transition",
    "TransitionHistory",
    "START_STATE",
    "END_STATE",
    "GraphExporter",
    "GraphOptions",
    "ExporterStatus",
    "render_dot",
    "write_dot",
    "FSMError",
    "InvalidArgumentError",
    "UnknownStateError",
    "DuplicateStateError",
    "MachineAlreadyRunError",
    "StepLimitExceededError",
    "ExporterStateError",
    "SinkError",
    "SinkCreationError",
    "SinkWriteError",
]
