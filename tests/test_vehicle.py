from __future__ import annotations

import math
import random

import pytest

from maze_sim.geometry_utils import Quat, Vec3
from maze_sim.input import InputState
from maze_sim.vehicle import VehicleConfig, VehicleController, forward_vector, vehicle_descriptors


def _close(a: Vec3, b: Vec3, tol: float = 1e-9) -> bool:
    return all(math.isclose(p, q, abs_tol=tol) for p, q in zip(a.as_tuple(), b.as_tuple()))


def test_identity_forward_scenario() -> None:
    controller = VehicleController(VehicleConfig(forward_force=80.0, turn_torque=8.0))
    forces = controller.compute_forces(Quat.identity(), InputState(forward=True))
    assert _close(forces.impulse, Vec3(0.0, 0.0, -80.0))
    assert _close(forces.torque_impulse, Vec3(0.0, 0.0, 0.0))


def test_backward_negates_impulse() -> None:
    controller = VehicleController(VehicleConfig())
    forces = controller.compute_forces(Quat.identity(), InputState(backward=True))
    assert _close(forces.impulse, Vec3(0.0, 0.0, 80.0))


def test_opposite_inputs_cancel() -> None:
    controller = VehicleController(VehicleConfig())
    forces = controller.compute_forces(
        Quat.from_yaw(0.7),
        InputState(forward=True, backward=True, left=True, right=True),
    )
    assert _close(forces.impulse, Vec3())
    assert _close(forces.torque_impulse, Vec3())


def test_turn_torque_around_vertical_axis() -> None:
    controller = VehicleController(VehicleConfig(turn_torque=8.0))
    left = controller.compute_forces(Quat.identity(), InputState(left=True))
    right = controller.compute_forces(Quat.identity(), InputState(right=True))
    assert _close(left.torque_impulse, Vec3(0.0, 8.0, 0.0))
    assert _close(right.torque_impulse, Vec3(0.0, -8.0, 0.0))
    assert _close(left.impulse, Vec3())


def test_forward_follows_yaw() -> None:
    # Quarter turn to the left: -z rotates onto -x
    fwd = forward_vector(Quat.from_yaw(math.pi / 2.0))
    assert _close(fwd, Vec3(-1.0, 0.0, 0.0))


def test_forward_is_unit_for_random_orientations() -> None:
    rng = random.Random(0)
    for _ in range(200):
        q = Quat(rng.gauss(0, 1), rng.gauss(0, 1), rng.gauss(0, 1), rng.gauss(0, 1)).normalized()
        assert math.isclose(forward_vector(q).length(), 1.0, rel_tol=1e-9)


def test_denormalized_orientation_gives_no_impulse() -> None:
    # Half-length quaternion that collapses the rotated axis to zero
    q = Quat(0.5, 0.5, 0.0, 0.0)
    assert forward_vector(q) == Vec3(0.0, 0.0, 0.0)
    forces = VehicleController(VehicleConfig()).compute_forces(q, InputState(forward=True, left=True))
    assert _close(forces.impulse, Vec3())
    assert _close(forces.torque_impulse, Vec3(0.0, 8.0, 0.0))


def test_controller_is_stateless() -> None:
    controller = VehicleController(VehicleConfig())
    q = Quat.from_yaw(-1.2)
    inputs = InputState(forward=True, right=True)
    assert controller.compute_forces(q, inputs) == controller.compute_forces(q, inputs)


def test_vehicle_descriptors() -> None:
    cfg = VehicleConfig()
    body, collider = vehicle_descriptors(cfg, Vec3(1.0, 0.5, 2.0))
    assert body.kind == "dynamic"
    assert body.translation == Vec3(1.0, 0.5, 2.0)
    assert body.linear_damping == pytest.approx(0.5)
    assert body.angular_damping == pytest.approx(1.0)
    assert collider.half_extents == Vec3(1.0, 0.5, 1.5)
    assert collider.mass == pytest.approx(100.0)


def test_zero_quaternion_gives_no_impulse() -> None:
    q = Quat(0.0, 0.0, 0.0, 0.0)
    assert forward_vector(q) == Vec3(0.0, 0.0, 0.0)
    forces = VehicleController(VehicleConfig()).compute_forces(q, InputState(forward=True))
    assert forces.impulse == Vec3(0.0, 0.0, 0.0)
    assert forces.torque_impulse == Vec3(0.0, 0.0, 0.0)
