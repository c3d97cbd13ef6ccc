from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Protocol, Tuple

from orrery.core.constants import DEFAULT_SPEED_FACTOR
from orrery.core.frames import Vector3
from orrery.simulation.registry import BodyRegistry, TickReport

logger = logging.getLogger(__name__)


class System(Protocol):
    """
    Plugin interface for simulation systems.
    Each system runs per tick, after the registry has advanced, and can write to the log.
    """
    name: str

    def on_step(self, t_s: float, registry: BodyRegistry, log: "SimulationLog") -> None:
        ...


@dataclass
class SimulationLog:
    """
    Stores outputs from a simulation run.
    Keep it simple and serializable.
    """
    # Positions: body key -> list of (t, position)
    body_positions: Dict[str, List[Tuple[float, Vector3]]] = field(default_factory=dict)

    # Solver failures and other notable ticks
    events: List[Dict[str, Any]] = field(default_factory=list)

    def record_position(self, body_key: str, t_s: float, position: Vector3) -> None:
        self.body_positions.setdefault(body_key, []).append((t_s, position))

    def record_failures(self, report: TickReport) -> None:
        for body_key, exc in report.failures.items():
            self.events.append({
                "t_s": report.t_s,
                "type": "non_convergence",
                "body": body_key,
                "iterations": exc.iterations,
                "message": str(exc),
            })


@dataclass
class Engine:
    """
    Fixed-step driving clock for a body registry.
    Deterministic replay: given same registry + dt + speed + start/end => same output.
    """
    dt_s: float
    speed_factor: float = DEFAULT_SPEED_FACTOR
    systems: List[System] = field(default_factory=list)

    def run(self, registry: BodyRegistry, t_start_s: float, t_end_s: float) -> SimulationLog:
        if self.dt_s <= 0:
            raise ValueError("dt_s must be positive.")
        if t_end_s < t_start_s:
            raise ValueError("t_end_s must be >= t_start_s.")

        log = SimulationLog()
        t = t_start_s
        ticks = 0

        # Inclusive end if it lands exactly; otherwise last tick < end
        while t <= t_end_s + 1e-9:
            report = registry.advance(t, self.speed_factor)
            log.record_failures(report)

            for sys in self.systems:
                sys.on_step(t, registry, log)

            ticks += 1
            t = t_start_s + ticks * self.dt_s

        logger.debug("Ran %d ticks over [%s, %s] s with %d failure events",
                     ticks, t_start_s, t_end_s, len(log.events))
        return log
