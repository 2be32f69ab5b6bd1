from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple
import logging

from .geometry_utils import Vec3
from .maze import Grid, WALL
from .physics import ColliderDesc, RigidBodyDesc


logger = logging.getLogger(__name__)

WALL_HEIGHT = 4.0
CELL_SIZE = 1.0
WALL_FRICTION = 0.8


@dataclass(frozen=True)
class WallInstance:
    """One wall block in world coordinates.

    Attributes
    ----------
    cell : tuple[int, int]
        Source grid cell (x, z).
    position : Vec3
        Center of the block.
    size : Vec3
        Full block extents (width, height, depth).
    """

    cell: Tuple[int, int]
    position: Vec3
    size: Vec3


@dataclass(frozen=True)
class ColliderDescriptor:
    """Static collision volume matching a :class:`WallInstance`."""

    body: RigidBodyDesc
    collider: ColliderDesc


@dataclass
class WallLayout:
    instances: List[WallInstance]
    colliders: List[ColliderDescriptor]

    def __len__(self) -> int:
        return len(self.instances)


def cell_to_world(
    grid: Grid,
    x: float,
    z: float,
    y: float = 0.0,
    cell_size: float = CELL_SIZE,
) -> Vec3:
    """Map grid coordinates to world space with the grid centered on the origin."""
    return Vec3(
        (x - grid.width / 2.0) * cell_size,
        y,
        (z - grid.height / 2.0) * cell_size,
    )


def build_walls(
    grid: Grid,
    wall_height: float = WALL_HEIGHT,
    cell_size: float = CELL_SIZE,
    friction: float = WALL_FRICTION,
) -> WallLayout:
    """
    Convert every WALL cell into a render instance and a fixed cuboid collider.

    Both output lists are in the same x-major cell order, so ``instances[i]``
    and ``colliders[i]`` describe the same block.
    """
    size = Vec3(cell_size, wall_height, cell_size)
    half = size.scale(0.5)
    instances: List[WallInstance] = []
    colliders: List[ColliderDescriptor] = []
    for x, z in grid.cells_of(WALL):
        pos = cell_to_world(grid, x, z, wall_height / 2.0, cell_size)
        instances.append(WallInstance(cell=(x, z), position=pos, size=size))
        colliders.append(
            ColliderDescriptor(
                body=RigidBodyDesc.fixed(pos),
                collider=ColliderDesc(half_extents=half, friction=friction),
            )
        )
    logger.debug("Built %d wall instances for %r", len(instances), grid)
    return WallLayout(instances=instances, colliders=colliders)
