from __future__ import annotations

import asyncio
import math

import pytest

from maze_sim.geometry_utils import Quat, Vec3
from maze_sim.physics import ColliderDesc, PointMassBackend, PointMassWorld, RigidBodyDesc


def _car(world: PointMassWorld) -> int:
    body = world.create_rigid_body(RigidBodyDesc.dynamic(Vec3(0.0, 0.5, 0.0), linear_damping=0.5))
    world.create_collider(ColliderDesc(Vec3(1.0, 0.5, 1.5), mass=100.0), body)
    return body


def test_backend_init_returns_world() -> None:
    world = asyncio.run(PointMassBackend(dt=0.02).init(Vec3(0.0, -9.81, 0.0)))
    assert isinstance(world, PointMassWorld)
    assert world.dt == pytest.approx(0.02)
    assert world.body_count() == 0


def test_impulse_moves_body_with_damping() -> None:
    world = PointMassWorld(Vec3(0.0, -9.81, 0.0), dt=0.1)
    body = _car(world)
    world.apply_impulse(body, Vec3(0.0, 0.0, -80.0), True)
    assert world.velocity(body).z == pytest.approx(-0.8)

    world.step()
    expected_v = -0.8 / (1.0 + 0.1 * 0.5)
    assert world.velocity(body).z == pytest.approx(expected_v)
    assert world.translation(body).z == pytest.approx(expected_v * 0.1)
    assert world.translation(body).y == pytest.approx(0.5)


def test_torque_impulse_turns_body() -> None:
    world = PointMassWorld(Vec3(), dt=0.1)
    body = _car(world)
    world.apply_torque_impulse(body, Vec3(0.0, 8.0, 0.0), True)
    world.step()
    assert world.rotation(body).yaw() > 0.0


def test_fixed_body_ignores_impulses() -> None:
    world = PointMassWorld(Vec3())
    wall = world.create_rigid_body(RigidBodyDesc.fixed(Vec3(1.0, 2.0, 3.0)))
    world.create_collider(ColliderDesc(Vec3(0.5, 2.0, 0.5), friction=0.8), wall)
    world.apply_impulse(wall, Vec3(100.0, 0.0, 0.0), True)
    world.step()
    assert world.translation(wall) == Vec3(1.0, 2.0, 3.0)
    assert world.collider_count() == 1


def test_body_sleeps_and_wakes() -> None:
    world = PointMassWorld(Vec3(), dt=0.1)
    body = _car(world)
    world.step()
    world.apply_impulse(body, Vec3(10.0, 0.0, 0.0), False)
    assert world.velocity(body) == Vec3()
    world.apply_impulse(body, Vec3(10.0, 0.0, 0.0), True)
    assert world.velocity(body).x == pytest.approx(0.1)


def test_unknown_handle_raises() -> None:
    world = PointMassWorld(Vec3())
    with pytest.raises(KeyError):
        world.translation(99)


def test_initial_rotation_preserved() -> None:
    world = PointMassWorld(Vec3())
    body = world.create_rigid_body(RigidBodyDesc("dynamic", Vec3(), Quat.from_yaw(0.5)))
    assert math.isclose(world.rotation(body).yaw(), 0.5, rel_tol=1e-9)
