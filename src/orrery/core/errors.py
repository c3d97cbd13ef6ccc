from __future__ import annotations

from typing import Optional


class InvalidEccentricity(ValueError):
    """Eccentricity outside the closed-ellipse range [0, 1)."""

    def __init__(self, eccentricity: float):
        self.eccentricity = eccentricity
        super().__init__(f"Eccentricity must be in range [0, 1). Got: {eccentricity}")


class ParentageError(ValueError):
    """Parent indices that do not form an ordered forest."""


class UnknownParent(ParentageError):
    pass


class CyclicParentage(ParentageError):
    pass


class ForwardParentReference(ParentageError):
    pass


class NonConvergence(RuntimeError):
    """
    Kepler solver hit its iteration cap without meeting tolerance.

    `body` is filled in by the registry when the failure belongs to a named body.
    """

    def __init__(self, eccentricity: float, mean_anomaly: float, iterations: int,
                 last_step: float, body: Optional[str] = None):
        self.eccentricity = eccentricity
        self.mean_anomaly = mean_anomaly
        self.iterations = iterations
        self.last_step = last_step
        self.body = body
        super().__init__(str(self))

    def __str__(self) -> str:
        where = f" for body '{self.body}'" if self.body else ""
        return (
            f"Kepler solver did not converge{where} within {self.iterations} iterations "
            f"(e={self.eccentricity}, M={self.mean_anomaly}, last dE={self.last_step})."
        )
