from __future__ import annotations

import math
from dataclasses import dataclass

from orrery.core.constants import DEFAULT_SPEED_FACTOR, KEPLER_MAX_ITER, KEPLER_TOLERANCE_RAD
from orrery.core.errors import InvalidEccentricity
from orrery.core.frames import Vector3, rot2
from orrery.physics.kepler import (
    radius_from_eccentric,
    solve_eccentric_anomaly,
    true_anomaly_from_eccentric,
    wrap_to_2pi,
)


@dataclass(frozen=True)
class OrbitalElements:
    """
    Simplified orbital elements of one body relative to its parent.

    Units:
        semi_major_axis: orbit scale (any length unit, consistent per simulation)
        eccentricity: 0 <= e < 1
        inclination_rad: tilt of the orbital plane (0 for planar orbits)
        true_anomaly_offset_rad: constant added to the computed true anomaly
        mean_anomaly_rate_rad_s: mean anomaly accrued per simulated second
        radius_offset: constant added to the Kepler radius
        name: display identifier only
    """
    semi_major_axis: float
    eccentricity: float
    inclination_rad: float = 0.0
    true_anomaly_offset_rad: float = 0.0
    mean_anomaly_rate_rad_s: float = 0.0
    radius_offset: float = 0.0
    name: str = ""

    def __post_init__(self):
        if not (0.0 <= self.eccentricity < 1.0):
            raise InvalidEccentricity(self.eccentricity)
        if not math.isfinite(self.semi_major_axis) or self.semi_major_axis < 0:
            raise ValueError(f"Semi-major axis must be finite and non-negative. Got: {self.semi_major_axis}")
        if not math.isfinite(self.inclination_rad):
            raise ValueError(f"Inclination must be finite. Got: {self.inclination_rad}")
        if not math.isfinite(self.true_anomaly_offset_rad):
            raise ValueError(f"True anomaly offset must be finite. Got: {self.true_anomaly_offset_rad}")
        if not math.isfinite(self.mean_anomaly_rate_rad_s):
            raise ValueError(f"Mean anomaly rate must be finite. Got: {self.mean_anomaly_rate_rad_s}")
        if not math.isfinite(self.radius_offset):
            raise ValueError(f"Radius offset must be finite. Got: {self.radius_offset}")


def mean_anomaly_rad(elements: OrbitalElements, t_s: float,
                     speed_factor: float = DEFAULT_SPEED_FACTOR) -> float:
    """M = rate * t * speed, unreduced."""
    return elements.mean_anomaly_rate_rad_s * t_s * speed_factor


def local_offset(elements: OrbitalElements, t_s: float,
                 speed_factor: float = DEFAULT_SPEED_FACTOR,
                 tol: float = KEPLER_TOLERANCE_RAD,
                 max_iter: int = KEPLER_MAX_ITER) -> Vector3:
    """
    Position of a body relative to its parent at simulated time t_s.

    M is reduced to [0, 2π) before solving; ν and r are 2π-periodic in E so
    the result is unchanged while sin/cos keep full precision on long runs.

    Raises:
        NonConvergence: propagated from the Kepler solver
    """
    a = elements.semi_major_axis
    e = elements.eccentricity

    M = wrap_to_2pi(mean_anomaly_rad(elements, t_s, speed_factor))
    E = solve_eccentric_anomaly(e, M, tol=tol, max_iter=max_iter)

    nu = true_anomaly_from_eccentric(e, E) + elements.true_anomaly_offset_rad
    r = radius_from_eccentric(a, e, E) + elements.radius_offset

    planar: Vector3 = (r * math.cos(nu), r * math.sin(nu), 0.0)
    if elements.inclination_rad == 0.0:
        return planar
    return rot2(elements.inclination_rad, planar)
