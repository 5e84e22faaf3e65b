"""Cesaro estimate of pi, written as a State-capability program over a jax PRNG key."""

from __future__ import annotations

import math
from typing import Callable, Final

import jax

from .monads import StateMonad, StateResult

DRAW_MAX: Final[int] = 1_000_000

_CESARO_SOURCE = """
bind(first, rand);
bind(second, rand);
unit(gcd(first, second) == 1)
"""


def get_rand(key: jax.Array) -> StateResult:
    """Draw an integer in ``[1, DRAW_MAX]``; the state is the next PRNG key."""
    next_key, draw_key = jax.random.split(key)
    value = int(jax.random.randint(draw_key, (), 1, DRAW_MAX + 1))
    return StateResult(next_key, value)


_cesaro_program = StateMonad().evaluate(_CESARO_SOURCE, {"rand": get_rand, "gcd": math.gcd})


def cesaro(key: jax.Array) -> StateResult:
    """One trial: whether two fresh draws are coprime."""
    return _cesaro_program(key)


def monte_carlo(trials: int, experiment: Callable[[jax.Array], StateResult], seed: int = 0) -> float:
    """Fraction of ``trials`` runs of ``experiment`` whose value is truthy.

    The key is threaded from one trial to the next, so a seed always gives
    the same fraction.
    """
    if trials <= 0:
        raise ValueError(f"trials must be positive, got {trials}")
    key = jax.random.PRNGKey(seed)
    passed = 0
    for _ in range(trials):
        outcome = experiment(key)
        key = outcome.state
        if outcome.value:
            passed += 1
    return passed / trials


def estimate_pi(trials: int, seed: int = 0) -> float:
    # P(gcd(a, b) == 1) = 6 / pi**2
    fraction = monte_carlo(trials, cesaro, seed)
    if fraction == 0:
        raise ValueError(f"no coprime pair in {trials} trial(s); use more trials")
    return math.sqrt(6 / fraction)
