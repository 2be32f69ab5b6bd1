from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Tuple

from .geometry_utils import LOCAL_FORWARD, UP, ZERO, Quat, Vec3, normalize_or_zero, rotate_vector
from .input import InputState
from .physics import ColliderDesc, RigidBodyDesc


@dataclass
class VehicleConfig:
    """Drive tuning and body parameters for the player vehicle.

    Attributes
    ----------
    forward_force : float
        Linear impulse magnitude per tick for forward/backward input.
    turn_torque : float
        Torque impulse magnitude around +y per tick for left/right input.
    linear_damping, angular_damping : float
        Body damping so the car does not slide or spin forever.
    half_extents : tuple[float, float, float]
        Cuboid collider half-extents (roughly a 2 x 1 x 3 car).
    mass, friction, restitution : float
        Collider material parameters.
    """

    forward_force: float = 80.0
    turn_torque: float = 8.0
    linear_damping: float = 0.5
    angular_damping: float = 1.0
    half_extents: Tuple[float, float, float] = (1.0, 0.5, 1.5)
    mass: float = 100.0
    friction: float = 0.8
    restitution: float = 0.1


@dataclass(frozen=True)
class VehicleForces:
    """Impulses to submit to the physics world for one tick."""

    impulse: Vec3
    torque_impulse: Vec3

    def to_dict(self) -> Dict[str, Any]:
        return {
            "impulse": list(self.impulse.as_tuple()),
            "torque_impulse": list(self.torque_impulse.as_tuple()),
        }


def forward_vector(orientation: Quat) -> Vec3:
    """World-space forward direction of a body with the given orientation.

    Local forward is -z. Returns the zero vector when the quaternion or the
    rotated axis is near zero length.
    """
    if orientation.norm() < 1e-6:
        return ZERO
    return normalize_or_zero(rotate_vector(orientation, LOCAL_FORWARD))


class VehicleController:
    """Stateless mapping from (orientation, input) to per-tick impulses."""

    def __init__(self, config: VehicleConfig) -> None:
        self.config = config

    def compute_forces(self, orientation: Quat, inputs: InputState) -> VehicleForces:
        """Sum the forward/backward impulse and the left/right torque impulse.

        Opposite inputs held together cancel out.
        """
        fwd = forward_vector(orientation)
        push = fwd.scale(self.config.forward_force)
        twist = UP.scale(self.config.turn_torque)

        impulse = ZERO
        if inputs.forward:
            impulse = impulse + push
        if inputs.backward:
            impulse = impulse - push

        torque = ZERO
        if inputs.left:
            torque = torque + twist
        if inputs.right:
            torque = torque - twist

        return VehicleForces(impulse=impulse, torque_impulse=torque)


def vehicle_descriptors(config: VehicleConfig, position: Vec3) -> Tuple[RigidBodyDesc, ColliderDesc]:
    """Dynamic body and box collider for the vehicle at ``position``."""
    body = RigidBodyDesc.dynamic(
        position,
        linear_damping=config.linear_damping,
        angular_damping=config.angular_damping,
    )
    collider = ColliderDesc(
        half_extents=Vec3(*config.half_extents),
        friction=config.friction,
        restitution=config.restitution,
        mass=config.mass,
    )
    return body, collider
