from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from orrery.core.constants import DEFAULT_SPEED_FACTOR, KEPLER_MAX_ITER, KEPLER_TOLERANCE_RAD
from orrery.core.frames import ORIGIN, Vector3, add
from orrery.physics.orbit import OrbitalElements, local_offset


@dataclass
class OrbitingBody:
    """
    A body on a fixed Keplerian orbit around an optional parent.

    `parent` is the index of the parent body inside the owning registry; the
    body never holds the parent object itself. `position` is derived state,
    overwritten on every update.
    """
    elements: OrbitalElements
    parent: Optional[int] = None

    position: Vector3 = ORIGIN
    last_t_s: Optional[float] = None

    @property
    def name(self) -> str:
        return self.elements.name

    def local_offset(self, t_s: float, speed_factor: float = DEFAULT_SPEED_FACTOR,
                     tol: float = KEPLER_TOLERANCE_RAD,
                     max_iter: int = KEPLER_MAX_ITER) -> Vector3:
        """Offset from the parent at t_s, ignoring where the parent is."""
        return local_offset(self.elements, t_s, speed_factor, tol=tol, max_iter=max_iter)

    def update_position(self, t_s: float, speed_factor: float = DEFAULT_SPEED_FACTOR,
                        parent_position: Optional[Vector3] = None,
                        tol: float = KEPLER_TOLERANCE_RAD,
                        max_iter: int = KEPLER_MAX_ITER) -> Vector3:
        """
        Recompute the absolute position at t_s (seconds since epoch).

        `parent_position` must already reflect the same t_s; None means the
        body sits around the origin. If the solver raises NonConvergence the
        stored position is left as it was.
        """
        offset = self.local_offset(t_s, speed_factor, tol=tol, max_iter=max_iter)
        self.position = add(offset, parent_position if parent_position is not None else ORIGIN)
        self.last_t_s = t_s
        return self.position
