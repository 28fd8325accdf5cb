"""
Custom exceptions for the finite-state machine runner.
"""
from typing import Optional


class FSMError(Exception):
    """Base exception for finite-state machine errors."""

    pass


class InvalidArgumentError(FSMError, ValueError):
    """Raised when the machine is given an unusable start state."""

    pass


class UnknownStateError(InvalidArgumentError):
    """Raised when a state name cannot be resolved through the registry."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"No state registered under the name '{name}'")


class DuplicateStateError(InvalidArgumentError):
    """Raised when a different handler is registered under an existing name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"A different state is already registered as '{name}'")


class MachineAlreadyRunError(FSMError):
    """Raised when run() is invoked on a machine that has already run."""

    pass


class StepLimitExceededError(FSMError):
    """Raised when a run invokes more handlers than its max_steps allows."""

    def __init__(self, max_steps: int, state_name: str):
        self.max_steps = max_steps
        self.state_name = state_name
        super().__init__(
            f"State machine exceeded max steps ({max_steps}) at state '{state_name}'"
        )


class ExporterStateError(FSMError):
    """Raised on an illegal graph exporter lifecycle transition."""

    pass


class SinkError(FSMError):
    """Base class for failures of the graph output sink."""

    def __init__(self, message: str, path: str, original_exception: Optional[BaseException] = None):
        self.message = message
        self.path = path
        self.original_exception = original_exception
        super().__init__(self.message)


class SinkCreationError(SinkError):
    """Raised when the graph output file cannot be created."""

    pass


class SinkWriteError(SinkError):
    """Raised when writing the rendered graph to its sink fails."""

    pass
