from __future__ import annotations

from dataclasses import dataclass

from orrery.simulation.registry import BodyRegistry
from orrery.simulation.engine import SimulationLog


@dataclass
class StateRecorderSystem:
    name: str = "state_recorder"

    def on_step(self, t_s: float, registry: BodyRegistry, log: SimulationLog) -> None:
        for key, position in registry.positions().items():
            log.record_position(key, t_s, position)
