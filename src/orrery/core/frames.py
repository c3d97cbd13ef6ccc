from __future__ import annotations

import math
from typing import Tuple

Vector3 = Tuple[float, float, float]

ORIGIN: Vector3 = (0.0, 0.0, 0.0)


def rot2(angle_rad: float, v: Vector3) -> Vector3:
    """
    Rotate about the y axis so that a positive angle lifts +x toward +z.
    For a vector in the x-y plane this is the orbit tilt:
        x' = x cos(i), z' = x sin(i), y unchanged.
    """
    c = math.cos(angle_rad)
    s = math.sin(angle_rad)
    x, y, z = v
    return (c * x - s * z, y, s * x + c * z)


def add(a: Vector3, b: Vector3) -> Vector3:
    return (a[0]+b[0], a[1]+b[1], a[2]+b[2])


def sub(a: Vector3, b: Vector3) -> Vector3:
    return (a[0]-b[0], a[1]-b[1], a[2]-b[2])


def dot(a: Vector3, b: Vector3) -> float:
    return a[0]*b[0] + a[1]*b[1] + a[2]*b[2]


def norm(a: Vector3) -> float:
    return math.sqrt(dot(a, a))
