"""
Waypoint station placement.

Stations are scattered over the open cells of a maze by rejection sampling:
random cells are drawn until enough of them satisfy the spawn clearance and
inter-station spacing, or the attempt budget runs out. Running out is a
normal outcome on small or crowded mazes and is reported through
:class:`PlacementResult` rather than raised.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Tuple
import logging
import math
import random

from .geometry_utils import Vec3
from .layout import CELL_SIZE, cell_to_world
from .maze import Grid, SPAWN_CELL


logger = logging.getLogger(__name__)

DEFAULT_STATION_COUNT = 12
MIN_SPAWN_DISTANCE = 3.0
MIN_SPACING = 2.0
MAX_ATTEMPTS = 2000
MARKER_HEIGHT = 0.1


@dataclass(frozen=True)
class Station:
    """A placed waypoint: its grid cell and the world position of its marker."""

    cell: Tuple[int, int]
    position: Vec3


class PlacementStatus(Enum):
    FULL = "full"
    PARTIAL = "partial"


@dataclass(frozen=True)
class PlacementResult:
    """Stations accepted by :func:`place_stations` and how many were asked for."""

    stations: Tuple[Station, ...]
    requested: int

    @property
    def status(self) -> PlacementStatus:
        if len(self.stations) >= self.requested:
            return PlacementStatus.FULL
        return PlacementStatus.PARTIAL

    @property
    def is_full(self) -> bool:
        return self.status is PlacementStatus.FULL

    @property
    def shortfall(self) -> int:
        return max(0, self.requested - len(self.stations))

    def __len__(self) -> int:
        return len(self.stations)

    def __iter__(self) -> Iterator[Station]:
        return iter(self.stations)

    def __getitem__(self, index: int) -> Station:
        return self.stations[index]


def _too_close(x: int, z: int, accepted: List[Tuple[int, int]], min_spacing: float) -> bool:
    for ax, az in accepted:
        if math.hypot(x - ax, z - az) < min_spacing:
            return True
    return False


def place_stations(
    grid: Grid,
    count: int = DEFAULT_STATION_COUNT,
    rng: Optional[random.Random] = None,
    min_spawn_distance: float = MIN_SPAWN_DISTANCE,
    min_spacing: float = MIN_SPACING,
    max_attempts: int = MAX_ATTEMPTS,
    marker_height: float = MARKER_HEIGHT,
    cell_size: float = CELL_SIZE,
) -> PlacementResult:
    """
    Pick up to ``count`` open cells for stations.

    A drawn cell is rejected if it is a wall, closer than
    ``min_spawn_distance`` to the spawn cell, or closer than ``min_spacing``
    to a station already accepted. Distances are Euclidean in cell units.
    At most ``max_attempts`` cells are drawn.
    """
    if count < 0:
        raise ValueError(f"Station count must be >= 0, got {count}")
    rng = rng or random.Random()

    sx, sz = SPAWN_CELL
    accepted: List[Tuple[int, int]] = []
    attempts = 0
    while len(accepted) < count and attempts < max_attempts:
        attempts += 1
        x = rng.randrange(grid.width)
        z = rng.randrange(grid.height)

        if not grid.is_path(x, z):
            continue
        if math.hypot(x - sx, z - sz) < min_spawn_distance:
            continue
        if _too_close(x, z, accepted, min_spacing):
            continue
        accepted.append((x, z))

    stations = tuple(
        Station(cell=(x, z), position=cell_to_world(grid, x, z, marker_height, cell_size))
        for x, z in accepted
    )
    result = PlacementResult(stations=stations, requested=count)
    if result.is_full:
        logger.info("Placed %d stations in %d attempts", len(result), attempts)
    else:
        logger.warning(
            "Placed only %d of %d stations after %d attempts",
            len(result),
            count,
            attempts,
        )
    return result
