from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from orrery.core.constants import DEFAULT_SPEED_FACTOR, KEPLER_MAX_ITER, KEPLER_TOLERANCE_RAD
from orrery.core.errors import (
    CyclicParentage,
    ForwardParentReference,
    NonConvergence,
    UnknownParent,
)
from orrery.core.frames import Vector3
from orrery.objects.body import OrbitingBody
from orrery.physics.orbit import OrbitalElements

logger = logging.getLogger(__name__)

BodySpec = Tuple[OrbitalElements, Optional[int]]


@dataclass
class TickReport:
    """Outcome of one `advance` call."""
    t_s: float
    speed_factor: float
    updated: List[str] = field(default_factory=list)
    failures: Dict[str, NonConvergence] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures

    def raise_for_failures(self) -> None:
        for exc in self.failures.values():
            raise exc


def validate_parentage(parents: Sequence[Optional[int]]) -> None:
    """
    Check that parent indices form a forest listed parent-first.

    Raises:
        UnknownParent: index out of range
        CyclicParentage: a body reaches itself through its parents
        ForwardParentReference: a parent listed after its child
    """
    n = len(parents)
    for i, p in enumerate(parents):
        if p is None:
            continue
        if isinstance(p, bool) or not isinstance(p, int) or not (0 <= p < n):
            raise UnknownParent(f"Body {i} lists unknown parent index {p!r}.")
        if p == i:
            raise CyclicParentage(f"Body {i} lists itself as parent.")

    # Walk each chain; a chain longer than n must revisit a body
    for i in range(n):
        seen = {i}
        p = parents[i]
        while p is not None:
            if p in seen:
                raise CyclicParentage(f"Body {i} is its own ancestor via body {p}.")
            seen.add(p)
            p = parents[p]

    for i, p in enumerate(parents):
        if p is not None and p > i:
            raise ForwardParentReference(
                f"Body {i} lists parent {p}, which must appear before it."
            )


class BodyRegistry:
    """
    Ordered collection of bodies advanced as a unit once per tick.

    Every parent sits earlier in the sequence than its children, so a single
    forward pass in `advance` sees each parent already at the new time.
    """

    def __init__(self, tol: float = KEPLER_TOLERANCE_RAD, max_iter: int = KEPLER_MAX_ITER):
        if tol <= 0:
            raise ValueError("tol must be positive.")
        if max_iter < 1:
            raise ValueError("max_iter must be >= 1.")
        self.tol = tol
        self.max_iter = max_iter
        self._bodies: List[OrbitingBody] = []
        self._index_by_name: Dict[str, int] = {}

    @classmethod
    def from_specs(cls, specs: Iterable[BodySpec], **kwargs) -> "BodyRegistry":
        """Build from (elements, parent_index) pairs, validating the whole forest first."""
        specs = list(specs)
        validate_parentage([parent for (_elements, parent) in specs])

        registry = cls(**kwargs)
        for elements, parent in specs:
            registry.add(elements, parent)
        logger.debug("Built registry with %d bodies", len(registry))
        return registry

    def add(self, elements: OrbitalElements, parent: Optional[int] = None) -> int:
        """Append a body and return its index. The parent must already be registered."""
        index = len(self._bodies)
        if parent is not None:
            if isinstance(parent, bool) or not isinstance(parent, int) or parent < 0:
                raise UnknownParent(f"Body {index} lists unknown parent index {parent!r}.")
            if parent == index:
                raise CyclicParentage(f"Body {index} lists itself as parent.")
            if parent > index:
                raise ForwardParentReference(
                    f"Body {index} lists parent {parent}, which must appear before it."
                )
        if elements.name:
            if elements.name in self._index_by_name:
                raise ValueError(f"Duplicate body name: {elements.name}")
            self._index_by_name[elements.name] = index

        self._bodies.append(OrbitingBody(elements=elements, parent=parent))
        return index

    def __len__(self) -> int:
        return len(self._bodies)

    def __iter__(self) -> Iterator[OrbitingBody]:
        return iter(self._bodies)

    def __getitem__(self, index: int) -> OrbitingBody:
        return self._bodies[index]

    def key_of(self, index: int) -> str:
        """Name of the body, or '#<index>' when it has none."""
        return self._bodies[index].name or f"#{index}"

    def index_of(self, name: str) -> int:
        if name not in self._index_by_name:
            raise KeyError(f"No body named '{name}'")
        return self._index_by_name[name]

    def body(self, name: str) -> OrbitingBody:
        return self._bodies[self.index_of(name)]

    def parent_of(self, index: int) -> Optional[OrbitingBody]:
        parent = self._bodies[index].parent
        return None if parent is None else self._bodies[parent]

    def children_of(self, index: int) -> List[int]:
        return [i for i, b in enumerate(self._bodies) if b.parent == index]

    def depth_of(self, index: int) -> int:
        """0 for a root body, 1 for its satellites, and so on."""
        depth = 0
        parent = self._bodies[index].parent
        while parent is not None:
            depth += 1
            parent = self._bodies[parent].parent
        return depth

    def advance(self, t_s: float, speed_factor: float = DEFAULT_SPEED_FACTOR) -> TickReport:
        """
        Move every body to simulated time t_s.

        A body whose solver fails keeps its previous position and is listed in
        the report; the remaining bodies are still updated, and its children
        compose with that previous position.
        """
        report = TickReport(t_s=t_s, speed_factor=speed_factor)

        for i, body in enumerate(self._bodies):
            parent = self.parent_of(i)
            key = self.key_of(i)
            try:
                body.update_position(
                    t_s,
                    speed_factor,
                    parent_position=None if parent is None else parent.position,
                    tol=self.tol,
                    max_iter=self.max_iter,
                )
            except NonConvergence as exc:
                exc.body = key
                logger.warning("%s; keeping position %s", exc, body.position)
                report.failures[key] = exc
            else:
                report.updated.append(key)

        return report

    def positions(self) -> Dict[str, Vector3]:
        return {self.key_of(i): b.position for i, b in enumerate(self._bodies)}

    def position_of(self, name: str) -> Vector3:
        return self.body(name).position


# The collection is called a solar system throughout the presets and scripts
SolarSystem = BodyRegistry
