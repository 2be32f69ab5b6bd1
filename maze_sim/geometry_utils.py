"""
Geometry utilities for the maze driving simulation.

Provides plain vector and quaternion value types plus the rotation helpers
used by the vehicle controller, the physics backend and the renderer. None of
these types depend on a physics or rendering engine.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple
import math


# ---------------------------------------------------------------------------
# Value types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Vec3:
    """Immutable 3D vector (x right, y up, z toward the viewer)."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __add__(self, other: "Vec3") -> "Vec3":
        return Vec3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Vec3") -> "Vec3":
        return Vec3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __neg__(self) -> "Vec3":
        return Vec3(-self.x, -self.y, -self.z)

    def scale(self, k: float) -> "Vec3":
        return Vec3(self.x * k, self.y * k, self.z * k)

    def dot(self, other: "Vec3") -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: "Vec3") -> "Vec3":
        return Vec3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    def length(self) -> float:
        return math.sqrt(self.dot(self))

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)


ZERO = Vec3(0.0, 0.0, 0.0)
UP = Vec3(0.0, 1.0, 0.0)
LOCAL_FORWARD = Vec3(0.0, 0.0, -1.0)


@dataclass(frozen=True)
class Quat:
    """Immutable rotation quaternion stored as (x, y, z, w)."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 1.0

    @classmethod
    def identity(cls) -> "Quat":
        return cls(0.0, 0.0, 0.0, 1.0)

    @classmethod
    def from_yaw(cls, yaw: float) -> "Quat":
        """Rotation around the vertical (+y) axis, CCW seen from above."""
        return cls(0.0, math.sin(yaw / 2.0), 0.0, math.cos(yaw / 2.0))

    def norm(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z + self.w * self.w)

    def normalized(self) -> "Quat":
        n = self.norm()
        if n < 1e-12:
            return Quat.identity()
        return Quat(self.x / n, self.y / n, self.z / n, self.w / n)

    def yaw(self) -> float:
        """Heading angle around +y, in radians."""
        siny = 2.0 * (self.w * self.y + self.z * self.x)
        cosy = 1.0 - 2.0 * (self.x * self.x + self.y * self.y)
        return math.atan2(siny, cosy)

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.x, self.y, self.z, self.w)


# ---------------------------------------------------------------------------
# Rotation helpers
# ---------------------------------------------------------------------------


def rotate_vector(q: Quat, v: Vec3) -> Vec3:
    """Rotate ``v`` by quaternion ``q``.

    Uses v' = v + 2w(u x v) + 2u x (u x v), with u the vector part of q.
    ``q`` is not renormalized, so a denormalized input scales the result.
    """
    u = Vec3(q.x, q.y, q.z)
    t = u.cross(v).scale(2.0)
    return v + t.scale(q.w) + u.cross(t)


def normalize_or_zero(v: Vec3, eps: float = 1e-6) -> Vec3:
    """Unit vector along ``v``, or the zero vector when ``|v| < eps``."""
    n = v.length()
    if n < eps:
        return ZERO
    return v.scale(1.0 / n)


def wrap_angle(theta: float) -> float:
    """Wrap angle to [-pi, pi] radians."""
    return (theta + math.pi) % (2.0 * math.pi) - math.pi

