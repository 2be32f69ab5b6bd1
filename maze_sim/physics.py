from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional
import asyncio
import logging

from .geometry_utils import Quat, Vec3, ZERO, wrap_angle


logger = logging.getLogger(__name__)

BodyHandle = int

DYNAMIC = "dynamic"
FIXED = "fixed"


# ---------------------------------------------------------------------------
# Descriptors
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RigidBodyDesc:
    """Engine-neutral rigid body description.

    Attributes
    ----------
    kind : str
        ``"dynamic"`` or ``"fixed"``.
    translation : Vec3
        Initial position in world coordinates.
    rotation : Quat
        Initial orientation.
    linear_damping : float
        Linear velocity damping coefficient (1/s).
    angular_damping : float
        Angular velocity damping coefficient (1/s).
    """

    kind: str
    translation: Vec3
    rotation: Quat = field(default_factory=Quat.identity)
    linear_damping: float = 0.0
    angular_damping: float = 0.0

    @classmethod
    def dynamic(cls, translation: Vec3, linear_damping: float = 0.0, angular_damping: float = 0.0) -> "RigidBodyDesc":
        return cls(DYNAMIC, translation, Quat.identity(), linear_damping, angular_damping)

    @classmethod
    def fixed(cls, translation: Vec3) -> "RigidBodyDesc":
        return cls(FIXED, translation)


@dataclass(frozen=True)
class ColliderDesc:
    """Axis-aligned cuboid collider attached to a body."""

    half_extents: Vec3
    friction: float = 0.5
    restitution: float = 0.0
    mass: Optional[float] = None


# ---------------------------------------------------------------------------
# Capability interfaces
# ---------------------------------------------------------------------------


class PhysicsWorld(ABC):
    """Narrow interface to an initialized rigid-body world."""

    @abstractmethod
    def create_rigid_body(self, desc: RigidBodyDesc) -> BodyHandle:
        """Create a body and return its handle."""

    @abstractmethod
    def create_collider(self, desc: ColliderDesc, body: BodyHandle) -> None:
        """Attach a collider to an existing body."""

    @abstractmethod
    def apply_impulse(self, body: BodyHandle, impulse: Vec3, wake: bool) -> None:
        """Add an instantaneous change of linear momentum."""

    @abstractmethod
    def apply_torque_impulse(self, body: BodyHandle, torque: Vec3, wake: bool) -> None:
        """Add an instantaneous change of angular momentum."""

    @abstractmethod
    def step(self) -> None:
        """Advance the simulation by one fixed timestep."""

    @abstractmethod
    def translation(self, body: BodyHandle) -> Vec3:
        """Current body position."""

    @abstractmethod
    def rotation(self, body: BodyHandle) -> Quat:
        """Current body orientation."""


class PhysicsBackend(ABC):
    """Engine entry point.

    Bodies and colliders can only be created on the world returned by
    :meth:`init`, so nothing can be created before initialization completes.
    """

    @abstractmethod
    async def init(self, gravity: Vec3) -> PhysicsWorld:
        """Perform one-time asynchronous setup and return a fresh world."""


# ---------------------------------------------------------------------------
# Reference backend
# ---------------------------------------------------------------------------


@dataclass
class _Body:
    kind: str
    position: Vec3
    yaw: float
    linear_damping: float
    angular_damping: float
    velocity: Vec3 = ZERO
    angular_velocity: float = 0.0
    mass: float = 0.0
    inertia: float = 0.0
    colliders: List[ColliderDesc] = field(default_factory=list)
    sleeping: bool = False


class PointMassWorld(PhysicsWorld):
    """Planar point-mass integrator used when no real engine is attached.

    Dynamic bodies move on the ground plane (y is held at its initial value)
    and rotate only around +y. Impulses change velocity by ``J / m``, torque
    impulses change yaw rate by ``T_y / I_y``. Velocities are damped with
    ``v *= 1 / (1 + dt * damping)`` each step. There is no collision detection.

    Parameters
    ----------
    gravity : Vec3
        Stored for reference only; vertical motion is not simulated.
    dt : float
        Fixed timestep in seconds.
    """

    def __init__(self, gravity: Vec3, dt: float = 1.0 / 60.0) -> None:
        self.gravity = gravity
        self.dt = float(dt)
        self._bodies: Dict[BodyHandle, _Body] = {}
        self._next_handle: BodyHandle = 0
        self.step_count = 0

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------
    def create_rigid_body(self, desc: RigidBodyDesc) -> BodyHandle:
        if desc.kind not in (DYNAMIC, FIXED):
            raise ValueError(f"Unknown rigid body kind: {desc.kind!r}")
        handle = self._next_handle
        self._next_handle += 1
        self._bodies[handle] = _Body(
            kind=desc.kind,
            position=desc.translation,
            yaw=desc.rotation.yaw(),
            linear_damping=desc.linear_damping,
            angular_damping=desc.angular_damping,
        )
        return handle

    def create_collider(self, desc: ColliderDesc, body: BodyHandle) -> None:
        b = self._get(body)
        b.colliders.append(desc)
        if b.kind != DYNAMIC:
            return
        he = desc.half_extents
        if desc.mass is not None:
            mass = float(desc.mass)
        else:
            # Unit density over the full box volume
            mass = 8.0 * he.x * he.y * he.z
        # Solid cuboid around y: m * (w^2 + d^2) / 12 with full extents
        inertia = mass * ((2.0 * he.x) ** 2 + (2.0 * he.z) ** 2) / 12.0
        b.mass += mass
        b.inertia += inertia

    # ------------------------------------------------------------------
    # Forces
    # ------------------------------------------------------------------
    def apply_impulse(self, body: BodyHandle, impulse: Vec3, wake: bool) -> None:
        b = self._get(body)
        if b.kind != DYNAMIC or b.mass <= 0.0:
            return
        if b.sleeping and not wake:
            return
        b.sleeping = False
        planar = Vec3(impulse.x, 0.0, impulse.z)
        b.velocity = b.velocity + planar.scale(1.0 / b.mass)

    def apply_torque_impulse(self, body: BodyHandle, torque: Vec3, wake: bool) -> None:
        b = self._get(body)
        if b.kind != DYNAMIC or b.inertia <= 0.0:
            return
        if b.sleeping and not wake:
            return
        b.sleeping = False
        b.angular_velocity += torque.y / b.inertia

    # ------------------------------------------------------------------
    # Integration
    # ------------------------------------------------------------------
    def step(self) -> None:
        dt = self.dt
        for b in self._bodies.values():
            if b.kind != DYNAMIC or b.sleeping:
                continue
            b.velocity = b.velocity.scale(1.0 / (1.0 + dt * b.linear_damping))
            b.angular_velocity /= 1.0 + dt * b.angular_damping
            b.position = b.position + b.velocity.scale(dt)
            b.yaw = wrap_angle(b.yaw + b.angular_velocity * dt)
            if b.velocity.length() < 1e-4 and abs(b.angular_velocity) < 1e-4:
                b.velocity = ZERO
                b.angular_velocity = 0.0
                b.sleeping = True
        self.step_count += 1

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def translation(self, body: BodyHandle) -> Vec3:
        return self._get(body).position

    def rotation(self, body: BodyHandle) -> Quat:
        return Quat.from_yaw(self._get(body).yaw)

    def velocity(self, body: BodyHandle) -> Vec3:
        return self._get(body).velocity

    def body_count(self) -> int:
        return len(self._bodies)

    def collider_count(self) -> int:
        return sum(len(b.colliders) for b in self._bodies.values())

    def _get(self, body: BodyHandle) -> _Body:
        try:
            return self._bodies[body]
        except KeyError:
            raise KeyError(f"Unknown body handle: {body}") from None


class PointMassBackend(PhysicsBackend):
    """Backend producing :class:`PointMassWorld` instances."""

    def __init__(self, dt: float = 1.0 / 60.0) -> None:
        self.dt = dt

    async def init(self, gravity: Vec3) -> PhysicsWorld:
        # Yield once so callers exercise the same await path as a real engine
        await asyncio.sleep(0)
        world = PointMassWorld(gravity=gravity, dt=self.dt)
        logger.info("Physics world initialized (gravity=%s, dt=%.4f)", gravity.as_tuple(), self.dt)
        return world
