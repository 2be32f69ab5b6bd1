from __future__ import annotations

import asyncio
import math
import random
from typing import List, Sequence

import pytest

from maze_sim.config import SimulationConfig
from maze_sim.geometry_utils import Quat, Vec3
from maze_sim.input import InputSource, InputState
from maze_sim.maze import WALL
from maze_sim.physics import PhysicsBackend, PhysicsWorld, PointMassBackend
from maze_sim.simulation import RenderSink, Simulation, build_level
from telemetry.logger import TelemetryLogger, read_records


class FakeWorld(PhysicsWorld):
    def __init__(self, log: List[str]) -> None:
        self.log = log
        self.bodies = 0
        self.colliders = 0
        self.impulses: List[Vec3] = []
        self.torques: List[Vec3] = []

    def create_rigid_body(self, desc):
        self.log.append("create_rigid_body")
        self.bodies += 1
        return self.bodies - 1

    def create_collider(self, desc, body):
        self.colliders += 1

    def apply_impulse(self, body, impulse, wake):
        assert wake
        self.log.append("apply_impulse")
        self.impulses.append(impulse)

    def apply_torque_impulse(self, body, torque, wake):
        assert wake
        self.log.append("apply_torque_impulse")
        self.torques.append(torque)

    def step(self):
        self.log.append("step")

    def translation(self, body):
        self.log.append("translation")
        return Vec3()

    def rotation(self, body):
        self.log.append("rotation")
        return Quat.identity()


class FakeBackend(PhysicsBackend):
    def __init__(self, log: List[str]) -> None:
        self.log = log
        self.world = FakeWorld(log)

    async def init(self, gravity):
        await asyncio.sleep(0)
        self.log.append("init")
        return self.world


class ScriptedInput(InputSource):
    def __init__(self, log: List[str], states: Sequence[InputState]) -> None:
        self.log = log
        self.states = list(states)

    def snapshot(self) -> InputState:
        self.log.append("input")
        return self.states.pop(0) if self.states else InputState()


class RecordingRenderer(RenderSink):
    def __init__(self, log: List[str]) -> None:
        self.log = log
        self.walls = None
        self.stations = None
        self.vehicle_updates = 0

    def add_walls(self, instances):
        assert self.walls is None
        self.walls = list(instances)

    def add_stations(self, stations):
        assert self.stations is None
        self.stations = list(stations)

    def update_vehicle(self, position, rotation):
        self.log.append("render")
        self.vehicle_updates += 1


def _small_config() -> SimulationConfig:
    return SimulationConfig.from_dict({"seed": 3, "maze": {"width": 15, "height": 15}, "stations": {"count": 4}})


def test_build_level_is_reproducible() -> None:
    cfg = _small_config()
    a = build_level(cfg)
    b = build_level(cfg)
    assert a.grid == b.grid
    assert [s.cell for s in a.stations] == [s.cell for s in b.stations]
    assert len(a.layout) == a.grid.count(WALL)


def test_create_waits_for_physics_and_populates_world() -> None:
    log: List[str] = []
    backend = FakeBackend(log)
    renderer = RecordingRenderer(log)
    cfg = _small_config()
    sim = asyncio.run(Simulation.create(cfg, backend, ScriptedInput(log, []), renderer, rng=random.Random(1)))

    assert log.index("init") < log.index("create_rigid_body")
    walls = sim.level.grid.count(WALL)
    assert backend.world.bodies == walls + 1
    assert backend.world.colliders == walls + 1
    assert len(renderer.walls) == walls
    assert len(renderer.stations) == len(sim.level.stations)
    assert renderer.vehicle_updates == 1


def test_tick_order_is_fixed() -> None:
    log: List[str] = []
    backend = FakeBackend(log)
    cfg = _small_config()
    states = [InputState(forward=True), InputState(left=True)]
    sim = asyncio.run(Simulation.create(cfg, backend, ScriptedInput(log, states), RecordingRenderer(log)))
    log.clear()

    records = sim.run(2)

    one_tick = [
        "input",
        "rotation",
        "apply_impulse",
        "apply_torque_impulse",
        "step",
        "translation",
        "rotation",
        "render",
    ]
    assert log == one_tick * 2
    assert [r.frame for r in records] == [1, 2]
    assert backend.world.impulses[0] == Vec3(0.0, 0.0, -80.0)
    assert backend.world.torques[1] == Vec3(0.0, 8.0, 0.0)


def test_vehicle_spawns_on_spawn_cell_and_drives_forward() -> None:
    log: List[str] = []
    cfg = _small_config()
    held = [InputState(forward=True)] * 30
    sim = asyncio.run(
        Simulation.create(cfg, PointMassBackend(), ScriptedInput(log, held), RecordingRenderer(log))
    )
    start = sim.world.translation(sim.vehicle)
    assert (start.x, start.y, start.z) == (-7.5, 0.5, -7.5)

    last = sim.run(30)[-1]
    assert last.position.z < start.z
    assert math.isclose(last.position.x, start.x, abs_tol=1e-9)


def test_turning_left_increases_yaw() -> None:
    log: List[str] = []
    cfg = _small_config()
    held = [InputState(left=True)] * 20
    sim = asyncio.run(
        Simulation.create(cfg, PointMassBackend(), ScriptedInput(log, held), RecordingRenderer(log))
    )
    last = sim.run(20)[-1]
    assert last.rotation.yaw() > 0.0


def test_telemetry_written_per_tick(tmp_path) -> None:
    log: List[str] = []
    path = tmp_path / "runs" / "telemetry.jsonl"
    with TelemetryLogger(str(path)) as telemetry:
        sim = asyncio.run(
            Simulation.create(
                _small_config(),
                PointMassBackend(),
                ScriptedInput(log, [InputState(forward=True)]),
                RecordingRenderer(log),
                telemetry=telemetry,
            )
        )
        sim.run(5)
    records = read_records(str(path))
    assert [r["frame"] for r in records] == [1, 2, 3, 4, 5]
    assert records[0]["input"]["forward"] is True
    assert records[0]["impulse"] == pytest.approx([0.0, 0.0, -80.0])
