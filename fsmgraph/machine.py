"""
Finite-state machine runner.

Each state is a named handler that returns the next state to run, or None
once a terminal state is reached. Failures are reported by raising.
"""

import logging
from typing import Optional, Union

from .exceptions import (
    InvalidArgumentError,
    MachineAlreadyRunError,
    SinkWriteError,
    StepLimitExceededError,
)
from .graph import GraphExporter, GraphOptions
from .history import END_STATE, START_STATE, Transition, TransitionHistory
from .states import Handler, State, StateRegistry, state as make_state

logger = logging.getLogger(__name__)


class FiniteStateMachine:
    """Runs states until one returns None or raises.

    When tracing is enabled with log_state_transition_graph(), every
    transition is recorded with its step number and the resulting graph is
    written out as a DOT file once the run is over.

    A machine is good for a single run.
    """

    def __init__(self, graph_options: Optional[GraphOptions] = None, max_steps: Optional[int] = None):
        if max_steps is not None and (isinstance(max_steps, bool) or not isinstance(max_steps, int) or max_steps < 1):
            raise InvalidArgumentError(f"max_steps must be a positive integer, got {max_steps!r}")
        self.max_steps = max_steps
        self.history = TransitionHistory()
        self.registry = StateRegistry()
        self._exporter = GraphExporter(graph_options)
        self._has_run = False

    @property
    def step(self) -> int:
        return self.history.step

    @property
    def tracing(self) -> bool:
        """True while transitions are being recorded for export."""
        return self._exporter.enabled

    @property
    def graph_path(self) -> Optional[str]:
        return self._exporter.path

    def log_state_transition_graph(self, path: str = "") -> str:
        """Enable tracing of states and transitions for this machine.

        A file named ``dot_graph.gv`` is created in ``path`` (the current
        directory when empty) and, once the machine reaches a terminal or
        error state, filled with a DOT description of every transition
        taken. Returns the path of the file.
        """
        return self._exporter.enable(path)

    def register(self, st: State) -> State:
        """Make ``st`` reachable by name from other handlers."""
        return self.registry.register(st)

    def state(self, func: Union[Handler, str, None] = None, *, name: Optional[str] = None):
        """Decorator version of register().

        Usage:
            @machine.state
            def wander():
                return "chase"
        """
        def decorator(f: Handler) -> State:
            return self.register(make_state(f, name=name))

        if isinstance(func, str):
            name, func = func, None
        if func is None:
            return decorator
        return decorator(func)

    def record_state_transition(self, source: str, destination: str) -> Optional[Transition]:
        """Record source -> destination; does nothing unless tracing."""
        if not self.tracing:
            return None
        transition = self.history.record(source, destination)
        logger.debug(f"  [{transition.step}] {source} -> {destination}")
        return transition

    def run(self, start: Union[State, str, None]) -> None:
        """Run the machine from ``start`` until a terminal state is reached.

        Raises whatever a state handler raised, unchanged. If tracing, the
        graph is written after the loop either way; a failure to write it
        is raised only when the run itself succeeded.

        A handler that raises has no next state, so its failing transition
        is always recorded as ``<state> -> end``.
        """
        start_state = self._resolve_start(start)
        if self._has_run:
            raise MachineAlreadyRunError("This machine has already run; create a new one")
        self._has_run = True
        tracing = self.tracing

        logger.debug(f"State machine starting at {start_state.name}")
        error: Optional[Exception] = None
        try:
            self._run(start_state)
        except Exception as e:
            error = e

        if tracing:
            try:
                self._exporter.render(self.history)
            except SinkWriteError as render_error:
                if error is None:
                    raise
                logger.error(f"Failed to write state graph after run error: {render_error}")

        if error is not None:
            raise error
        logger.debug(f"State machine complete after {self.step} transitions")

    def _run(self, start: State) -> None:
        self.record_state_transition(START_STATE, start.name)

        current: Optional[State] = start

        invocations = 0
        while current is not None:
            invocations += 1
            if self.max_steps is not None and invocations > self.max_steps:
                logger.error(f"State machine exceeded max steps ({self.max_steps})")
                raise StepLimitExceededError(self.max_steps, current.name)

            try:
                next_state = self.registry.resolve(current())
            except Exception as e:
                logger.error(f"Error in state {current.name}: {e}", exc_info=True)
                self.record_state_transition(current.name, END_STATE)
                raise

            self.record_state_transition(current.name, next_state.name if next_state is not None else END_STATE)
            current = next_state

    def _resolve_start(self, start: Union[State, str, None]) -> State:
        if start is None:
            raise InvalidArgumentError("start must not be None")
        if isinstance(start, State):
            return start
        if isinstance(start, str):
            return self.registry.get(start)
        raise InvalidArgumentError(
            f"start must be a State or a registered state name, got {type(start).__name__}"
        )


def new_machine(graph_options: Optional[GraphOptions] = None, max_steps: Optional[int] = None) -> FiniteStateMachine:
    """Return a fresh machine with an empty history and tracing disabled."""
    return FiniteStateMachine(graph_options=graph_options, max_steps=max_steps)
