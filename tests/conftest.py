"""
Shared fixtures for the state machine tests.
"""

import pytest

from fsmgraph import State, new_machine


@pytest.fixture
def traced_machine(tmp_path):
    """A machine tracing its transitions into tmp_path/dot_graph.gv."""
    machine = new_machine()
    machine.log_state_transition_graph(str(tmp_path))
    return machine


@pytest.fixture
def graph_file(tmp_path):
    return tmp_path / "dot_graph.gv"


@pytest.fixture
def make_chain():
    """Build a linear chain of n states; the last one returns None.

    Returns the first state and a list that collects the names of the
    states as they are invoked.
    """

    def _make_chain(n):
        calls = []
        next_state = None
        for i in reversed(range(n)):
            def handler(name=f"s{i}", target=next_state):
                calls.append(name)
                return target
            next_state = State(f"s{i}", handler)
        return next_state, calls

    return _make_chain
