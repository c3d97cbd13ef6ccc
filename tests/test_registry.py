"""
Tests for hierarchical bodies and the registry that advances them.
"""
import logging
import math
import pytest

from orrery.core.errors import (
    CyclicParentage,
    ForwardParentReference,
    NonConvergence,
    ParentageError,
    UnknownParent,
)
from orrery.core.frames import add, sub
from orrery.objects.body import OrbitingBody
from orrery.physics.orbit import OrbitalElements
from orrery.simulation.registry import BodyRegistry, SolarSystem, validate_parentage


def assert_vec_close(a, b, tol=1e-9):
    for x, y in zip(a, b):
        assert math.isclose(x, y, abs_tol=tol)


@pytest.fixture
def star():
    return OrbitalElements(semi_major_axis=0.0, eccentricity=0.0, name="Star")


@pytest.fixture
def planet():
    return OrbitalElements(semi_major_axis=100.0, eccentricity=0.2, true_anomaly_offset_rad=0.4,
                           mean_anomaly_rate_rad_s=0.3, name="Planet")


@pytest.fixture
def moon():
    return OrbitalElements(semi_major_axis=10.0, eccentricity=0.05, inclination_rad=0.2,
                           mean_anomaly_rate_rad_s=2.0, radius_offset=1.5, name="Moon")


@pytest.fixture
def submoon():
    return OrbitalElements(semi_major_axis=1.0, eccentricity=0.0, mean_anomaly_rate_rad_s=9.0,
                           name="Submoon")


@pytest.fixture
def system(star, planet, moon, submoon):
    return BodyRegistry.from_specs([(star, None), (planet, 0), (moon, 1), (submoon, 2)])


class TestOrbitingBody:
    def test_starts_at_origin(self, planet):
        body = OrbitingBody(elements=planet)
        assert body.position == (0.0, 0.0, 0.0)
        assert body.last_t_s is None
        assert body.name == "Planet"

    def test_update_without_parent_is_local_offset(self, planet):
        body = OrbitingBody(elements=planet)
        pos = body.update_position(5.0, 1.0)
        assert pos == body.position
        assert body.last_t_s == 5.0
        assert_vec_close(pos, body.local_offset(5.0, 1.0))

    def test_update_adds_parent_position(self, moon):
        body = OrbitingBody(elements=moon, parent=0)
        pos = body.update_position(2.0, 1.0, parent_position=(10.0, -5.0, 1.0))
        assert_vec_close(pos, add(body.local_offset(2.0, 1.0), (10.0, -5.0, 1.0)))

    def test_non_convergence_keeps_position(self):
        body = OrbitingBody(elements=OrbitalElements(semi_major_axis=5.0, eccentricity=0.5,
                                                     mean_anomaly_rate_rad_s=1.0))
        body.update_position(0.0, 1.0)
        before = body.position
        with pytest.raises(NonConvergence):
            body.update_position(1.0, 1.0, max_iter=1)
        assert body.position == before
        assert body.last_t_s == 0.0


class TestValidation:
    def test_accepts_forest(self):
        validate_parentage([None, 0, 1, 0, None, 4])

    def test_rejects_self_parent(self):
        with pytest.raises(CyclicParentage, match="itself"):
            validate_parentage([None, 1])

    def test_rejects_two_cycle(self):
        with pytest.raises(CyclicParentage, match="own ancestor"):
            validate_parentage([None, 2, 1])

    def test_rejects_transitive_cycle(self):
        with pytest.raises(CyclicParentage):
            validate_parentage([1, 2, 3, 0])

    def test_rejects_forward_reference(self):
        with pytest.raises(ForwardParentReference, match="must appear before"):
            validate_parentage([None, 2, 0])

    def test_rejects_unknown_index(self):
        with pytest.raises(UnknownParent):
            validate_parentage([None, 5])
        with pytest.raises(UnknownParent):
            validate_parentage([None, -1])
        with pytest.raises(UnknownParent):
            validate_parentage([None, "0"])

    def test_parentage_errors_are_value_errors(self):
        with pytest.raises(ValueError):
            validate_parentage([0])
        assert issubclass(ParentageError, ValueError)

    def test_from_specs_rejects_cycle(self, star, planet, moon):
        with pytest.raises(CyclicParentage):
            BodyRegistry.from_specs([(star, None), (planet, 2), (moon, 1)])

    def test_add_rejects_forward_reference(self, star, planet):
        registry = BodyRegistry()
        registry.add(star)
        with pytest.raises(ForwardParentReference):
            registry.add(planet, parent=3)
        with pytest.raises(CyclicParentage):
            registry.add(planet, parent=1)

    def test_rejects_duplicate_names(self, star):
        with pytest.raises(ValueError, match="Duplicate body name"):
            BodyRegistry.from_specs([(star, None), (star, 0)])

    def test_unnamed_bodies_get_index_keys(self):
        anon = OrbitalElements(semi_major_axis=1.0, eccentricity=0.0)
        registry = BodyRegistry.from_specs([(anon, None), (anon, 0)])
        assert list(registry.positions().keys()) == ["#0", "#1"]

    def test_solver_settings_validated(self):
        with pytest.raises(ValueError, match="tol must be positive"):
            BodyRegistry(tol=0.0)
        with pytest.raises(ValueError, match="max_iter must be >= 1"):
            BodyRegistry(max_iter=0)


class TestBodyRegistry:
    def test_solar_system_alias(self):
        assert SolarSystem is BodyRegistry

    def test_lookup(self, system):
        assert len(system) == 4
        assert system.index_of("Moon") == 2
        assert system.body("Planet").parent == 0
        assert system.children_of(0) == [1]
        assert system.children_of(3) == []
        assert system.depth_of(3) == 3
        assert system.parent_of(0) is None
        assert system.parent_of(2) is system[1]
        with pytest.raises(KeyError):
            system.body("Pluto")

    def test_advance_reports_all_updated(self, system):
        report = system.advance(10.0, 1.0)
        assert report.ok
        assert report.updated == ["Star", "Planet", "Moon", "Submoon"]
        report.raise_for_failures()

    def test_child_is_local_offset_plus_parent(self, system):
        t, speed = 7.5, 2.0
        system.advance(t, speed)
        for name in ["Planet", "Moon", "Submoon"]:
            body = system.body(name)
            parent = system[body.parent]
            assert_vec_close(body.position, add(parent.position, body.local_offset(t, speed)))

    def test_parent_contribution_cancels(self, system):
        t = 123.0
        system.advance(t)
        moon = system.body("Moon")
        rel = sub(system.position_of("Moon"), system.position_of("Planet"))
        assert_vec_close(rel, moon.local_offset(t))

    def test_deep_chain_sums_offsets(self, system):
        t = 42.0
        system.advance(t)
        total = (0.0, 0.0, 0.0)
        for body in system:
            total = add(total, body.local_offset(t))
        assert_vec_close(system.position_of("Submoon"), total)

    def test_star_stays_at_origin(self, system):
        system.advance(1e5)
        assert system.position_of("Star") == (0.0, 0.0, 0.0)

    def test_advance_is_deterministic(self, system, star, planet, moon, submoon):
        system.advance(33.0, 3.0)
        first = system.positions()
        system.advance(99.0, 1.0)
        system.advance(33.0, 3.0)
        assert system.positions() == first

        fresh = BodyRegistry.from_specs([(star, None), (planet, 0), (moon, 1), (submoon, 2)])
        fresh.advance(33.0, 3.0)
        assert fresh.positions() == first

    def test_all_bodies_share_timestamp(self, system):
        system.advance(17.0)
        assert all(body.last_t_s == 17.0 for body in system)

    def test_non_convergence_is_per_body(self, star, caplog):
        hard = OrbitalElements(semi_major_axis=5.0, eccentricity=0.5, mean_anomaly_rate_rad_s=1.0,
                               name="Hard")
        easy = OrbitalElements(semi_major_axis=3.0, eccentricity=0.0, mean_anomaly_rate_rad_s=1.0,
                               name="Easy")
        child = OrbitalElements(semi_major_axis=1.0, eccentricity=0.0, mean_anomaly_rate_rad_s=1.0,
                                name="Child")
        registry = BodyRegistry.from_specs([(star, None), (hard, 0), (easy, 0), (child, 1)], max_iter=1)

        with caplog.at_level(logging.WARNING, logger="orrery.simulation.registry"):
            report = registry.advance(1.0)

        assert not report.ok
        assert list(report.failures) == ["Hard"]
        assert report.updated == ["Star", "Easy", "Child"]
        assert "Hard" in caplog.text

        # Last-known-good: never updated, so still at the origin
        assert registry.position_of("Hard") == (0.0, 0.0, 0.0)
        assert_vec_close(registry.position_of("Easy"), (3.0 * math.cos(1.0), 3.0 * math.sin(1.0), 0.0))
        # Child composes with the stale parent position
        assert_vec_close(registry.position_of("Child"), registry.body("Child").local_offset(1.0))

        with pytest.raises(NonConvergence, match="for body 'Hard'"):
            report.raise_for_failures()
