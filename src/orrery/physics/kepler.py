# Kepler's equation and anomaly conversions for elliptic orbits

from __future__ import annotations

import math
from dataclasses import dataclass

from orrery.core.constants import (
    KEPLER_HIGH_ECCENTRICITY,
    KEPLER_MAX_ITER,
    KEPLER_TOLERANCE_RAD,
)
from orrery.core.errors import NonConvergence

TWO_PI = 2.0 * math.pi


def wrap_to_2pi(angle_rad: float) -> float:
    """Wrap angle to [0, 2π)."""
    return angle_rad % TWO_PI


@dataclass(frozen=True)
class KeplerSolution:
    """
    Outcome of one Newton-Raphson run.

    When `converged` is False, `eccentric_anomaly` is the last iterate, not a root.
    """
    eccentric_anomaly: float
    iterations: int
    converged: bool
    last_step: float


def _initial_guess(e: float, M: float) -> float:
    if e < KEPLER_HIGH_ECCENTRICITY:
        return M
    # pi within the same revolution as M; E0 = M stalls near periapsis for e -> 1
    return TWO_PI * math.floor(M / TWO_PI) + math.pi


def try_solve_eccentric_anomaly(e: float, M_rad: float,
                                tol: float = KEPLER_TOLERANCE_RAD,
                                max_iter: int = KEPLER_MAX_ITER) -> KeplerSolution:
    """
    Solve Kepler's equation
        M = E - e sin(E)
    with Newton-Raphson, without raising on non-convergence.

    M is used as given (no wrapping), so the returned E satisfies the
    equation for that exact M.

    Args:
        e: eccentricity (0 <= e < 1)
        M_rad: mean anomaly (rad)
        tol: stop once |dE| < tol
        max_iter: iteration cap

    Returns:
        KeplerSolution
    """
    E = _initial_guess(e, M_rad)
    dE = math.inf

    for i in range(1, max_iter + 1):
        fp = 1.0 - e * math.cos(E)
        if fp == 0.0:
            return KeplerSolution(E, i, False, dE)
        dE = (E - e * math.sin(E) - M_rad) / fp
        E -= dE
        if not math.isfinite(E):
            return KeplerSolution(E, i, False, dE)
        if abs(dE) < tol:
            return KeplerSolution(E, i, True, dE)

    return KeplerSolution(E, max_iter, False, dE)


def solve_eccentric_anomaly(e: float, M_rad: float,
                            tol: float = KEPLER_TOLERANCE_RAD,
                            max_iter: int = KEPLER_MAX_ITER) -> float:
    """
    Eccentric anomaly E (rad) for mean anomaly M.

    Raises:
        NonConvergence: tolerance not met within max_iter steps
    """
    solution = try_solve_eccentric_anomaly(e, M_rad, tol=tol, max_iter=max_iter)
    if not solution.converged:
        raise NonConvergence(e, M_rad, solution.iterations, solution.last_step)
    return solution.eccentric_anomaly


def true_anomaly_from_eccentric(e: float, E_rad: float) -> float:
    """ν = 2 atan2(sqrt(1+e) sin(E/2), sqrt(1-e) cos(E/2)), folded into (-π, π]."""
    nu = 2.0 * math.atan2(
        math.sqrt(1.0 + e) * math.sin(E_rad / 2.0),
        math.sqrt(1.0 - e) * math.cos(E_rad / 2.0),
    )
    # 2*atan2 spans (-2π, 2π] when E is outside (-π, π)
    return math.pi - ((math.pi - nu) % TWO_PI)


def radius_from_eccentric(a: float, e: float, E_rad: float) -> float:
    """r = a (1 - e cos(E)), always within [a(1-e), a(1+e)]."""
    return a * (1.0 - e * math.cos(E_rad))
