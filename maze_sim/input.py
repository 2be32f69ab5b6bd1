from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class InputState:
    """Snapshot of the four drive controls."""

    forward: bool = False
    backward: bool = False
    left: bool = False
    right: bool = False

    def to_dict(self) -> Dict[str, bool]:
        return {
            "forward": self.forward,
            "backward": self.backward,
            "left": self.left,
            "right": self.right,
        }


CONTROLS = ("forward", "backward", "left", "right")

# Host key names (lower-case, pygame.key.name style) -> control
KEY_MAP: Dict[str, str] = {
    "w": "forward",
    "up": "forward",
    "s": "backward",
    "down": "backward",
    "a": "left",
    "left": "left",
    "d": "right",
    "right": "right",
}


class InputSource(ABC):
    """Anything that can produce an InputState once per tick."""

    @abstractmethod
    def snapshot(self) -> InputState:
        """Return the current control state."""


class KeyboardInput(InputSource):
    """Tracks held drive keys from host key-down / key-up events."""

    def __init__(self, key_map: Optional[Dict[str, str]] = None) -> None:
        self.key_map = dict(KEY_MAP if key_map is None else key_map)
        unknown = set(self.key_map.values()) - set(CONTROLS)
        if unknown:
            raise ValueError(f"Unknown controls in key map: {sorted(unknown)}")
        self._held: Dict[str, bool] = {c: False for c in CONTROLS}

    def _action(self, key_name: str) -> Optional[str]:
        return self.key_map.get(key_name.lower())

    def key_down(self, key_name: str) -> bool:
        """Mark the control bound to ``key_name`` as held. Returns True if bound."""
        action = self._action(key_name)
        if action is None:
            return False
        self._held[action] = True
        return True

    def key_up(self, key_name: str) -> bool:
        action = self._action(key_name)
        if action is None:
            return False
        self._held[action] = False
        return True

    def release_all(self) -> None:
        for action in self._held:
            self._held[action] = False

    def snapshot(self) -> InputState:
        return InputState(**self._held)
