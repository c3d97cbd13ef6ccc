"""
Preset Sun and eight planets.

Table columns (distances in 10^9 m, angles in radians):
    a  semi-major axis
    e  eccentricity
    F  true anomaly offset
    M  mean anomaly rate (rad/s of simulated time)
    R  baseline distance from the parent, added to the Kepler radius
Colours and display radii are relative sizes for the viewer only.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from orrery.core.constants import PRESET_DISTANCE_SCALE
from orrery.objects.style import BodyStyle
from orrery.physics.orbit import OrbitalElements
from orrery.simulation.registry import BodySpec, SolarSystem

# name, a, color, e, F, M, parent, display radius, R
_TABLE: List[Tuple[str, float, str, float, float, float, Optional[str], float, float]] = [
    ("Sun",     0.0,        "yellow", 0.0,        0.0,    0.0, None,  8.0, 0.0),
    ("Mercury", 57.909176,  "gray",   0.20563069, 1.598,  2.0, "Sun", 3.0, 55.78),
    ("Venus",   108.20893,  "yellow", 0.00677323, 5.139,  1.5, "Sun", 3.0, 107.9),
    ("Earth",   149.597887, "blue",   0.01671022, 0.1185, 1.0, "Sun", 5.0, 147.1),
    ("Mars",    227.936637, "orange", 0.09341233, 0.8021, 0.5, "Sun", 5.0, 212.2),
    ("Jupiter", 778.412027, "brown",  0.048498,   3.091,  0.2, "Sun", 20.0, 816.2),
    ("Saturn",  1429.39,    "yellow", 0.05555,    2.907,  0.1, "Sun", 20.0, 1503.0),
    ("Uranus",  2875.04,    "cyan",   0.046381,   3.685,  0.1, "Sun", 20.0, 2983.0),
    ("Neptune", 4504.45,    "blue",   0.009456,   5.104,  0.1, "Sun", 20.0, 4481.0),
]


def solar_system_specs(scale: float = PRESET_DISTANCE_SCALE) -> List[BodySpec]:
    """(elements, parent_index) pairs for the preset, distances multiplied by `scale`."""
    if scale <= 0:
        raise ValueError(f"Scale must be positive. Got: {scale}")

    index: Dict[str, int] = {}
    specs: List[BodySpec] = []
    for i, (name, a, _color, e, F, M, parent, _size, R) in enumerate(_TABLE):
        elements = OrbitalElements(
            semi_major_axis=a * scale,
            eccentricity=e,
            true_anomaly_offset_rad=F,
            mean_anomaly_rate_rad_s=M,
            radius_offset=R * scale,
            name=name,
        )
        specs.append((elements, None if parent is None else index[parent]))
        index[name] = i
    return specs


def solar_system_styles() -> Dict[str, BodyStyle]:
    return {
        name: BodyStyle(color=color, display_radius=size)
        for (name, _a, color, _e, _F, _M, _parent, size, _R) in _TABLE
    }


def build_solar_system(scale: float = PRESET_DISTANCE_SCALE, **kwargs) -> SolarSystem:
    return SolarSystem.from_specs(solar_system_specs(scale), **kwargs)
