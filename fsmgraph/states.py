"""
Named state handlers and the registry that resolves them by name.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Iterator, Optional, Union, overload

from .exceptions import DuplicateStateError, InvalidArgumentError, UnknownStateError
from .history import END_STATE, START_STATE

# What a handler may hand back: the next state, its registered name, or None
# for the terminal state.
NextState = Union["State", str, None]
Handler = Callable[[], NextState]


@dataclass(frozen=True)
class State:
    """A state of the machine: a handler paired with its display name.

    The name is what the recorder uses as the graph vertex, so it is fixed
    when the state is created rather than looked up from the function later.
    """

    name: str
    handler: Handler

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name:
            raise ValueError("State name must be a non-empty string")
        if self.name in (START_STATE, END_STATE):
            raise InvalidArgumentError(f"'{self.name}' is reserved for the graph's entry and exit vertices")
        if not callable(self.handler):
            raise TypeError(f"Handler for state '{self.name}' is not callable")

    def __call__(self) -> NextState:
        return self.handler()

    def __repr__(self) -> str:
        return f"State({self.name!r})"


@overload
def state(func: Handler) -> State: ...


@overload
def state(func: str) -> Callable[[Handler], State]: ...


@overload
def state(func: None = None, *, name: Optional[str] = None) -> Callable[[Handler], State]: ...


def state(func=None, *, name=None):
    """Decorator that turns a zero-argument function into a State.

    Usage:
        @state
        def wander():
            return chase

        @state("ReturnToBase")
        def return_to_base():
            return wander
    """
    if isinstance(func, str):
        name, func = func, None

    def decorator(f: Handler) -> State:
        return State(name or f.__name__, f)

    if func is None:
        return decorator
    return decorator(func)


class StateRegistry:
    """Maps state names to State objects so handlers can return names."""

    def __init__(self):
        self._states: Dict[str, State] = {}

    def register(self, st: State) -> State:
        """Register a state. Re-registering the same state is a no-op."""
        existing = self._states.get(st.name)
        if existing is not None and existing is not st:
            raise DuplicateStateError(st.name)
        self._states[st.name] = st
        return st

    def get(self, name: str) -> State:
        try:
            return self._states[name]
        except KeyError:
            raise UnknownStateError(name) from None

    def resolve(self, value: NextState) -> Optional[State]:
        """Turn a handler's return value into a State (or None when terminal)."""
        if value is None or isinstance(value, State):
            return value
        if isinstance(value, str):
            return self.get(value)
        raise TypeError(
            f"State handlers must return a State, a state name or None, got {type(value).__name__}"
        )

    def __contains__(self, name: object) -> bool:
        return name in self._states

    def __iter__(self) -> Iterator[str]:
        return iter(self._states)

    def __len__(self) -> int:
        return len(self._states)
