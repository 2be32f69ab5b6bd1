"""
Procedural maze generation.

Mazes are carved with a recursive backtracker (stack-based depth-first search)
over a coordinate stride of 2: even cells are rooms, the odd cells between
them are walls that get knocked down when two rooms are joined. The result is
a perfect maze whose open cells form a spanning tree rooted at the spawn cell.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Tuple
import json
import os
import random

import numpy as np


WALL = 1
PATH = 0

SPAWN_CELL: Tuple[int, int] = (0, 0)

# (dx, dz) towards the neighboring room; the wall between is at half that step.
_DIRECTIONS: Tuple[Tuple[int, int], ...] = (
    (0, -2),  # north
    (2, 0),   # east
    (0, 2),   # south
    (-2, 0),  # west
)


# ---------------------------------------------------------------------------
# Grid
# ---------------------------------------------------------------------------


class Grid:
    """Rectangular grid of WALL / PATH cells indexed as ``cells[x, z]``.

    Parameters
    ----------
    cells : np.ndarray
        2D integer array of shape (width, height) holding WALL or PATH.
    """

    def __init__(self, cells: np.ndarray) -> None:
        raw = np.asarray(cells)
        if raw.ndim != 2 or raw.shape[0] < 1 or raw.shape[1] < 1:
            raise ValueError(f"Grid needs a non-empty 2D array, got shape {raw.shape}")
        if not np.isin(raw, (WALL, PATH)).all():
            bad = np.unique(raw[~np.isin(raw, (WALL, PATH))])
            raise ValueError(f"Grid cells must be WALL or PATH, got {bad.tolist()}")
        # Grid owns its cell array
        arr = np.array(raw, dtype=np.int8, copy=True)
        self.cells = arr

    @classmethod
    def filled(cls, width: int, height: int, state: int = WALL) -> "Grid":
        return cls(np.full((width, height), state, dtype=np.int8))

    @property
    def width(self) -> int:
        return int(self.cells.shape[0])

    @property
    def height(self) -> int:
        return int(self.cells.shape[1])

    def in_bounds(self, x: int, z: int) -> bool:
        return 0 <= x < self.width and 0 <= z < self.height

    def is_wall(self, x: int, z: int) -> bool:
        return bool(self.cells[x, z] == WALL)

    def is_path(self, x: int, z: int) -> bool:
        return bool(self.cells[x, z] == PATH)

    def count(self, state: int) -> int:
        """Number of cells holding ``state``."""
        return int(np.count_nonzero(self.cells == state))

    def cells_of(self, state: int) -> Iterator[Tuple[int, int]]:
        """Yield (x, z) of every cell holding ``state``, x-major order."""
        xs, zs = np.nonzero(self.cells == state)
        for x, z in zip(xs.tolist(), zs.tolist()):
            yield x, z

    def path_neighbors(self, x: int, z: int) -> List[Tuple[int, int]]:
        """Open cells 4-adjacent to (x, z)."""
        out: List[Tuple[int, int]] = []
        for dx, dz in ((0, -1), (1, 0), (0, 1), (-1, 0)):
            nx, nz = x + dx, z + dz
            if self.in_bounds(nx, nz) and self.is_path(nx, nz):
                out.append((nx, nz))
        return out

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return self.cells.shape == other.cells.shape and bool(np.array_equal(self.cells, other.cells))

    def __repr__(self) -> str:
        return f"Grid(width={self.width}, height={self.height}, walls={self.count(WALL)})"

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:
        """Serialize grid to a Python dict (rows are x columns)."""
        return {
            "width": self.width,
            "height": self.height,
            "cells": self.cells.tolist(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Grid":
        cells = np.asarray(data["cells"])
        width = int(data.get("width", cells.shape[0]))
        height = int(data.get("height", cells.shape[1] if cells.ndim == 2 else 0))
        if cells.shape != (width, height):
            raise ValueError(f"Cell array shape {cells.shape} does not match {width}x{height}")
        return cls(cells)


def save_grid(grid: Grid, path: str) -> None:
    """Write a grid to a JSON file."""
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(grid.to_dict(), f)


def load_grid(path: str) -> Grid:
    """Read a grid written by :func:`save_grid`."""
    with open(path, "r", encoding="utf-8") as f:
        return Grid.from_dict(json.load(f))


# ---------------------------------------------------------------------------
# Recursive backtracker
# ---------------------------------------------------------------------------


@dataclass
class MazeConfig:
    """Parameters for procedural maze generation."""

    width: int = 50
    height: int = 50
    seed: Optional[int] = None


def _unvisited_neighbors(
    x: int,
    z: int,
    visited: np.ndarray,
) -> List[Tuple[int, int, int, int]]:
    """Rooms two steps away that are in bounds and not yet visited.

    Returns (room_x, room_z, wall_x, wall_z) tuples.
    """
    width, height = visited.shape
    out: List[Tuple[int, int, int, int]] = []
    for dx, dz in _DIRECTIONS:
        nx, nz = x + dx, z + dz
        if 0 <= nx < width and 0 <= nz < height and not visited[nx, nz]:
            out.append((nx, nz, x + dx // 2, z + dz // 2))
    return out


def generate_maze(width: int, height: int, rng: Optional[random.Random] = None) -> Grid:
    """
    Generate a perfect maze with the recursive backtracker.

    Carving always starts at the spawn cell (0, 0), so spawn is open and every
    open cell is reachable from it. A fresh grid is returned on every call.

    Parameters
    ----------
    width, height : int
        Grid dimensions in cells, both >= 1.
    rng : random.Random, optional
        Random source; pass a seeded instance for reproducible mazes.
    """
    if width < 1 or height < 1:
        raise ValueError(f"Maze dimensions must be >= 1, got {width}x{height}")
    rng = rng or random.Random()

    grid = Grid.filled(width, height, WALL)
    visited = np.zeros((width, height), dtype=bool)

    sx, sz = SPAWN_CELL
    visited[sx, sz] = True
    grid.cells[sx, sz] = PATH
    stack: List[Tuple[int, int]] = [(sx, sz)]

    while stack:
        x, z = stack[-1]
        neighbors = _unvisited_neighbors(x, z, visited)
        if neighbors:
            nx, nz, wx, wz = rng.choice(neighbors)
            grid.cells[wx, wz] = PATH
            grid.cells[nx, nz] = PATH
            visited[nx, nz] = True
            stack.append((nx, nz))
        else:
            stack.pop()

    return grid



def generate_from_config(cfg: MazeConfig) -> Grid:
    """Build a maze from config, seeding the random source when a seed is set."""
    rng = random.Random(cfg.seed) if cfg.seed is not None else random.Random()
    return generate_maze(cfg.width, cfg.height, rng)
