from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import yaml

from .maze import MazeConfig
from .vehicle import VehicleConfig


@dataclass
class StationConfig:
    count: int = 12
    min_spawn_distance: float = 3.0
    min_spacing: float = 2.0
    max_attempts: int = 2000
    marker_height: float = 0.1


@dataclass
class LayoutConfig:
    wall_height: float = 4.0
    cell_size: float = 1.0
    friction: float = 0.8


@dataclass
class PhysicsConfig:
    gravity: tuple = (0.0, -9.81, 0.0)
    dt: float = 1.0 / 60.0
    spawn_height: float = 0.5


@dataclass
class RenderConfig:
    window_width: int = 800
    window_height: int = 800
    fps: int = 60
    show_trail: bool = True
    trail_max_length: int = 500


@dataclass
class SimulationConfig:
    """Everything needed to build a level and run the loop."""

    maze: MazeConfig = field(default_factory=MazeConfig)
    stations: StationConfig = field(default_factory=StationConfig)
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    vehicle: VehicleConfig = field(default_factory=VehicleConfig)
    physics: PhysicsConfig = field(default_factory=PhysicsConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
    telemetry_path: Optional[str] = None
    seed: Optional[int] = None

    @classmethod
    def from_dict(cls, cfg: Dict[str, Any]) -> "SimulationConfig":
        """Build config from a parsed YAML dict. Missing sections use defaults."""
        maze_cfg = cfg.get("maze", {})
        station_cfg = cfg.get("stations", {})
        layout_cfg = cfg.get("layout", {})
        vehicle_cfg = cfg.get("vehicle", {})
        physics_cfg = cfg.get("physics", {})
        render_cfg = cfg.get("render", {})
        logging_cfg = cfg.get("logging", {})
        seed = cfg.get("seed")

        width = int(maze_cfg.get("width", 50))
        height = int(maze_cfg.get("height", 50))
        if width < 1 or height < 1:
            raise ValueError(f"maze.width and maze.height must be >= 1, got {width}x{height}")

        vehicle_defaults = VehicleConfig()
        physics_defaults = PhysicsConfig()
        gravity = tuple(float(g) for g in physics_cfg.get("gravity", physics_defaults.gravity))
        if len(gravity) != 3:
            raise ValueError(f"physics.gravity must have 3 components, got {gravity}")

        return cls(
            maze=MazeConfig(
                width=width,
                height=height,
                seed=maze_cfg.get("seed", seed),
            ),
            stations=StationConfig(
                count=int(station_cfg.get("count", 12)),
                min_spawn_distance=float(station_cfg.get("min_spawn_distance", 3.0)),
                min_spacing=float(station_cfg.get("min_spacing", 2.0)),
                max_attempts=int(station_cfg.get("max_attempts", 2000)),
                marker_height=float(station_cfg.get("marker_height", 0.1)),
            ),
            layout=LayoutConfig(
                wall_height=float(layout_cfg.get("wall_height", 4.0)),
                cell_size=float(layout_cfg.get("cell_size", 1.0)),
                friction=float(layout_cfg.get("friction", 0.8)),
            ),
            vehicle=VehicleConfig(
                forward_force=float(vehicle_cfg.get("forward_force", vehicle_defaults.forward_force)),
                turn_torque=float(vehicle_cfg.get("turn_torque", vehicle_defaults.turn_torque)),
                linear_damping=float(vehicle_cfg.get("linear_damping", vehicle_defaults.linear_damping)),
                angular_damping=float(vehicle_cfg.get("angular_damping", vehicle_defaults.angular_damping)),
                half_extents=tuple(float(v) for v in vehicle_cfg.get("half_extents", vehicle_defaults.half_extents)),
                mass=float(vehicle_cfg.get("mass", vehicle_defaults.mass)),
                friction=float(vehicle_cfg.get("friction", vehicle_defaults.friction)),
                restitution=float(vehicle_cfg.get("restitution", vehicle_defaults.restitution)),
            ),
            physics=PhysicsConfig(
                gravity=gravity,
                dt=float(physics_cfg.get("dt", physics_defaults.dt)),
                spawn_height=float(physics_cfg.get("spawn_height", physics_defaults.spawn_height)),
            ),
            render=RenderConfig(
                window_width=int(render_cfg.get("window_width", 800)),
                window_height=int(render_cfg.get("window_height", 800)),
                fps=int(render_cfg.get("fps", 60)),
                show_trail=bool(render_cfg.get("show_trail", True)),
                trail_max_length=int(render_cfg.get("trail_max_length", 500)),
            ),
            telemetry_path=logging_cfg.get("telemetry_path"),
            seed=seed,
        )


def load_yaml(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_config(path: str) -> SimulationConfig:
    return SimulationConfig.from_dict(load_yaml(path))
