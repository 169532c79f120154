"""Bracketed root finding.

Arrival times are found by solving ``area(t) - target = 0`` where ``area``
is non-decreasing in ``t``. The Illinois variant of regula falsi keeps the
bracket (so it always converges) while converging superlinearly on the
smooth stretches of a rate profile.
"""

from dataclasses import dataclass
from typing import Callable


@dataclass
class RootResult:
    """Result of root finding.

    Attributes:
        root: The found root value.
        converged: Whether the bracket shrank below tolerance.
        iterations: Number of iterations used.
    """

    root: float
    converged: bool
    iterations: int


def find_root(
    f: Callable[[float], float],
    a: float,
    b: float,
    xtol: float = 1e-10,
    maxiter: int = 200,
) -> RootResult:
    """Find a root of ``f`` inside ``[a, b]``.

    Raises:
        ValueError: If ``f(a)`` and ``f(b)`` have the same sign.
    """
    fa, fb = f(a), f(b)
    if fa == 0.0:
        return RootResult(a, True, 0)
    if fb == 0.0:
        return RootResult(b, True, 0)
    if (fa > 0) == (fb > 0):
        raise ValueError(f"f(a) and f(b) must have opposite signs, got {fa} and {fb}")

    side = 0
    c = a
    for iteration in range(1, maxiter + 1):
        c = (a * fb - b * fa) / (fb - fa)
        # Fall back to bisection when interpolation lands on an endpoint.
        if not a < c < b and not b < c < a:
            c = (a + b) / 2.0
        fc = f(c)

        if fc == 0.0 or abs(b - a) <= xtol:
            return RootResult(c, True, iteration)

        if (fc > 0) == (fb > 0):
            b, fb = c, fc
            if side == -1:
                fa /= 2.0
            side = -1
        else:
            a, fa = c, fc
            if side == 1:
                fb /= 2.0
            side = 1

    return RootResult(c, abs(b - a) <= xtol, maxiter)
