"""
Top-level package for the maze driving simulation.

Components:
- maze: recursive-backtracker maze generation and the Grid type
- layout: wall instances and static colliders built from a grid
- stations: waypoint placement by rejection sampling
- vehicle: input + orientation -> impulse / torque impulse
- simulation: level context and the per-frame loop
- physics: rigid-body capability interface and a planar reference backend
- input: input snapshots and keyboard tracking
- render: pygame-based top-down visualization
- geometry_utils: vector and quaternion value types
"""

from .maze import Grid, WALL, PATH, generate_maze
from .layout import WallInstance, ColliderDescriptor, WallLayout, build_walls
from .stations import Station, PlacementResult, PlacementStatus, place_stations
from .vehicle import VehicleConfig, VehicleController, VehicleForces, forward_vector
from .input import InputState, KeyboardInput
from .simulation import Level, Simulation, build_level

__all__ = [
    "Grid",
    "WALL",
    "PATH",
    "generate_maze",
    "WallInstance",
    "ColliderDescriptor",
    "WallLayout",
    "build_walls",
    "Station",
    "PlacementResult",
    "PlacementStatus",
    "place_stations",
    "VehicleConfig",
    "VehicleController",
    "VehicleForces",
    "forward_vector",
    "InputState",
    "KeyboardInput",
    "Level",
    "Simulation",
    "build_level",
]
