#!/usr/bin/env python3
"""
Pacman ghost example.

A ghost wanders, chases, flees and returns to base at random until it eats
pacman (terminal state) or the game glitches (an error raised from a
state). The transitions are traced to ``examples/dot_graph.gv``.

Render the graph with:
    dot -Tpng examples/dot_graph.gv -o ghost.png
"""

import logging
import random
import sys

from fsmgraph import new_machine, state


class PacmanGlitch(Exception):
    """Raised when the game hits a glitch."""


def coin_flip() -> bool:
    return random.randint(0, 1) == 0


@state
def wander():
    if coin_flip():
        # Spotted pacman
        return chase
    # Pacman ate the power pellet
    return flee


@state
def chase():
    if coin_flip():
        if coin_flip():
            # Ate pacman, game over
            return None
        # Lost pacman
        return wander
    if coin_flip():
        raise PacmanGlitch("pacman glitch")
    return flee


@state("ReturnToBase")
def return_to_base():
    return wander


@state
def flee():
    if coin_flip():
        # Power pellet expired
        return wander
    # Eaten by pacman
    return return_to_base


def main() -> int:
    logging.basicConfig(
        level=logging.DEBUG,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    machine = new_machine()
    graph_path = machine.log_state_transition_graph("./examples")

    try:
        machine.run(wander)
    except PacmanGlitch as e:
        print(f"error: {e} (graph written to {graph_path})")
        return 1

    print(f"game over: ghost ate pacman after {machine.step} transitions")
    print(f"graph written to {graph_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
