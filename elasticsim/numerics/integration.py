"""Numerical integration of rate functions.

Adaptive Simpson's rule, evaluated with an explicit work stack instead of
recursion so that long horizons with sharp rate changes cannot hit the
interpreter's recursion limit.
"""

from collections.abc import Callable


def _simpson(fa: float, fm: float, fb: float, width: float) -> float:
    return width / 6.0 * (fa + 4.0 * fm + fb)


def integrate_adaptive_simpson(
    f: Callable[[float], float],
    a: float,
    b: float,
    tol: float = 1e-9,
    max_depth: int = 40,
    max_evaluations: int = 200_000,
) -> float:
    """Integrate ``f`` over ``[a, b]``.

    Args:
        f: Function to integrate.
        a: Lower bound.
        b: Upper bound. May be below ``a``, which negates the result.
        tol: Absolute error tolerance for the whole interval.
        max_depth: Maximum number of halvings of any sub-interval.
        max_evaluations: Once this many evaluations of ``f`` have been made,
            remaining sub-intervals are accepted without further refinement.

    Returns:
        The integral estimate.
    """
    if a == b:
        return 0.0
    if a > b:
        return -integrate_adaptive_simpson(f, b, a, tol, max_depth, max_evaluations)

    fa, fb = f(a), f(b)
    m = (a + b) / 2.0
    fm = f(m)
    stack = [(a, b, fa, fm, fb, _simpson(fa, fm, fb, b - a), tol, 0)]
    total = 0.0
    evaluations = 3

    while stack:
        lo, hi, flo, fmid, fhi, whole, eps, depth = stack.pop()
        mid = (lo + hi) / 2.0
        left_mid = (lo + mid) / 2.0
        right_mid = (mid + hi) / 2.0
        f_left_mid = f(left_mid)
        f_right_mid = f(right_mid)
        evaluations += 2
        left = _simpson(flo, f_left_mid, fmid, mid - lo)
        right = _simpson(fmid, f_right_mid, fhi, hi - mid)
        delta = left + right - whole

        if depth >= max_depth or evaluations >= max_evaluations or abs(delta) <= 15.0 * eps:
            total += left + right + delta / 15.0
            continue

        stack.append((mid, hi, fmid, f_right_mid, fhi, right, eps / 2.0, depth + 1))
        stack.append((lo, mid, flo, f_left_mid, fmid, left, eps / 2.0, depth + 1))

    return total
