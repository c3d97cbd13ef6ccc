from __future__ import annotations

# Reference epoch for simulated time: 2000-01-01T12:00:00Z (J2000)
J2000_EPOCH_ISO: str = "2000-01-01T12:00:00+00:00"

# Simulation speed multiplier applied to every mean anomaly rate
DEFAULT_SPEED_FACTOR: float = 1.0

# Newton-Raphson stop criterion on |dE| (rad) and iteration cap
KEPLER_TOLERANCE_RAD: float = 1e-5
KEPLER_MAX_ITER: int = 100

# Above this eccentricity the solver seeds at pi instead of M
KEPLER_HIGH_ECCENTRICITY: float = 0.8

# Preset distances are tabulated in 10^9 m and drawn at 1/10 of that
PRESET_DISTANCE_SCALE: float = 0.1
