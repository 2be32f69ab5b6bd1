from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence
import logging
import random

from .config import SimulationConfig
from .geometry_utils import Quat, Vec3
from .input import InputSource, InputState
from .layout import WallInstance, WallLayout, build_walls, cell_to_world
from .maze import Grid, SPAWN_CELL, generate_maze
from .physics import BodyHandle, PhysicsBackend, PhysicsWorld
from .stations import PlacementResult, Station, place_stations
from .vehicle import VehicleController, VehicleForces, vehicle_descriptors
from telemetry.logger import TelemetryLogger


logger = logging.getLogger(__name__)


class RenderSink(ABC):
    """What the simulation hands to a renderer."""

    @abstractmethod
    def add_walls(self, instances: Sequence[WallInstance]) -> None:
        """Register the static wall batch (called once per level)."""

    @abstractmethod
    def add_stations(self, stations: Sequence[Station]) -> None:
        """Register station markers (called once per level)."""

    @abstractmethod
    def update_vehicle(self, position: Vec3, rotation: Quat) -> None:
        """Set the vehicle transform for the current frame."""


# ---------------------------------------------------------------------------
# Level
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Level:
    """Static content of one level, built once and read-only afterwards."""

    grid: Grid
    layout: WallLayout
    placement: PlacementResult

    @property
    def stations(self) -> Sequence[Station]:
        return self.placement.stations


def build_level(config: SimulationConfig, rng: Optional[random.Random] = None) -> Level:
    """Generate the maze, wall layout and stations from one random source."""
    if rng is None:
        rng = random.Random(config.seed) if config.seed is not None else random.Random()
    grid = generate_maze(config.maze.width, config.maze.height, rng)
    layout = build_walls(
        grid,
        wall_height=config.layout.wall_height,
        cell_size=config.layout.cell_size,
        friction=config.layout.friction,
    )
    st = config.stations
    placement = place_stations(
        grid,
        st.count,
        rng,
        min_spawn_distance=st.min_spawn_distance,
        min_spacing=st.min_spacing,
        max_attempts=st.max_attempts,
        marker_height=st.marker_height,
        cell_size=config.layout.cell_size,
    )
    logger.info(
        "Built %dx%d level: %d walls, %d/%d stations",
        grid.width,
        grid.height,
        len(layout),
        len(placement),
        placement.requested,
    )
    return Level(grid=grid, layout=layout, placement=placement)


# ---------------------------------------------------------------------------
# Simulation loop
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TickRecord:
    """What happened during one frame."""

    frame: int
    inputs: InputState
    forces: VehicleForces
    position: Vec3
    rotation: Quat

    def to_dict(self) -> Dict[str, Any]:
        return {
            "frame": self.frame,
            "input": self.inputs.to_dict(),
            **self.forces.to_dict(),
            "position": list(self.position.as_tuple()),
            "rotation": list(self.rotation.as_tuple()),
        }


class Simulation:
    """Owns one level and drives the vehicle through the physics world.

    Build instances with :meth:`create`, which waits for the physics backend
    before any body or collider is made.
    """

    def __init__(
        self,
        config: SimulationConfig,
        level: Level,
        world: PhysicsWorld,
        vehicle: BodyHandle,
        controller: VehicleController,
        input_source: InputSource,
        renderer: RenderSink,
        telemetry: Optional[TelemetryLogger] = None,
    ) -> None:
        self.config = config
        self.level = level
        self.world = world
        self.vehicle = vehicle
        self.controller = controller
        self.input_source = input_source
        self.renderer = renderer
        self.telemetry = telemetry
        self.frame = 0

    @classmethod
    async def create(
        cls,
        config: SimulationConfig,
        backend: PhysicsBackend,
        input_source: InputSource,
        renderer: RenderSink,
        level: Optional[Level] = None,
        rng: Optional[random.Random] = None,
        telemetry: Optional[TelemetryLogger] = None,
    ) -> "Simulation":
        """Build the level, initialize physics, and populate world and renderer."""
        if level is None:
            level = build_level(config, rng)

        world = await backend.init(Vec3(*config.physics.gravity))

        for desc in level.layout.colliders:
            body = world.create_rigid_body(desc.body)
            world.create_collider(desc.collider, body)
        logger.info("Created %d wall colliders", len(level.layout.colliders))

        spawn = cell_to_world(
            level.grid,
            SPAWN_CELL[0],
            SPAWN_CELL[1],
            config.physics.spawn_height,
            config.layout.cell_size,
        )
        body_desc, collider_desc = vehicle_descriptors(config.vehicle, spawn)
        vehicle = world.create_rigid_body(body_desc)
        world.create_collider(collider_desc, vehicle)
        logger.info("Vehicle body created at %s", spawn.as_tuple())

        renderer.add_walls(level.layout.instances)
        renderer.add_stations(level.stations)
        renderer.update_vehicle(world.translation(vehicle), world.rotation(vehicle))

        return cls(
            config=config,
            level=level,
            world=world,
            vehicle=vehicle,
            controller=VehicleController(config.vehicle),
            input_source=input_source,
            renderer=renderer,
            telemetry=telemetry,
        )

    def tick(self) -> TickRecord:
        """Run one frame: input, forces, physics step, transform hand-off."""
        inputs = self.input_source.snapshot()
        orientation = self.world.rotation(self.vehicle)

        forces = self.controller.compute_forces(orientation, inputs)
        self.world.apply_impulse(self.vehicle, forces.impulse, True)
        self.world.apply_torque_impulse(self.vehicle, forces.torque_impulse, True)

        self.world.step()

        position = self.world.translation(self.vehicle)
        rotation = self.world.rotation(self.vehicle)
        self.renderer.update_vehicle(position, rotation)

        self.frame += 1
        record = TickRecord(
            frame=self.frame,
            inputs=inputs,
            forces=forces,
            position=position,
            rotation=rotation,
        )
        if self.telemetry is not None:
            self.telemetry.log_step(record.to_dict())
        return record

    def run(self, frames: int) -> List[TickRecord]:
        """Tick ``frames`` times and return the records."""
        return [self.tick() for _ in range(frames)]
