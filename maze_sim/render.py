from __future__ import annotations

from typing import List, Optional, Sequence, Tuple
import math

import pygame

from .geometry_utils import Quat, Vec3
from .layout import WallInstance
from .simulation import RenderSink
from .stations import Station


THEME = {
    "bg": (170, 255, 170),
    "wall_fill": (255, 182, 193),
    "wall_edge": (220, 140, 155),
    "station_fill": (255, 255, 136),
    "station_edge": (200, 200, 90),
    "car_fill": (255, 107, 107),
    "car_outline": (150, 50, 50),
    "car_arrow": (255, 255, 255),
    "trail": (120, 200, 120),
    "hud_bg": (28, 34, 48),
    "hud_border": (55, 65, 88),
    "hud_text": (200, 220, 255),
}

STATION_RADIUS = 1.5


class PygameRenderer(RenderSink):
    """Top-down 2D view of the maze, stations and vehicle.

    Coordinates:
    - World x maps to screen x, world z maps to screen y (both increasing).
    - The view covers ``[-extent_x/2, extent_x/2] x [-extent_z/2, extent_z/2]``
      plus a one-cell margin.
    """

    def __init__(
        self,
        extent_x: float,
        extent_z: float,
        window_width: int,
        window_height: int,
        show_trail: bool = True,
        trail_max_length: int = 500,
        vehicle_half_extents: Tuple[float, float, float] = (1.0, 0.5, 1.5),
    ) -> None:
        pygame.init()
        pygame.display.set_caption("Maze Drive")
        self.screen = pygame.display.set_mode((window_width, window_height))
        self.clock = pygame.time.Clock()

        self.window_width = window_width
        self.window_height = window_height
        self.show_trail = show_trail
        self.trail_max_length = trail_max_length
        self.trail: List[Tuple[float, float]] = []
        self.vehicle_half_extents = vehicle_half_extents

        margin = 1.0
        self.min_x = -extent_x / 2.0 - margin
        self.min_z = -extent_z / 2.0 - margin
        self.scale_x = window_width / (extent_x + 2.0 * margin)
        self.scale_z = window_height / (extent_z + 2.0 * margin)

        self.walls: List[WallInstance] = []
        self.stations: List[Station] = []
        self.vehicle: Optional[Tuple[Vec3, Quat]] = None

    # ------------------------------------------------------------------
    # RenderSink
    # ------------------------------------------------------------------
    def add_walls(self, instances: Sequence[WallInstance]) -> None:
        self.walls = list(instances)

    def add_stations(self, stations: Sequence[Station]) -> None:
        self.stations = list(stations)

    def update_vehicle(self, position: Vec3, rotation: Quat) -> None:
        self.vehicle = (position, rotation)
        if self.show_trail:
            self.trail.append((position.x, position.z))
            if len(self.trail) > self.trail_max_length:
                self.trail = self.trail[-self.trail_max_length :]

    # ------------------------------------------------------------------
    # Coordinate transforms
    # ------------------------------------------------------------------
    def _world_to_screen(self, x: float, z: float) -> Tuple[int, int]:
        sx = int((x - self.min_x) * self.scale_x)
        sy = int((z - self.min_z) * self.scale_z)
        return sx, sy

    def _meters_to_pixels(self, r: float) -> int:
        return int(r * 0.5 * (self.scale_x + self.scale_z))

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def draw(self, frame: int = 0, stations_total: int = 0, fps: float = 0.0) -> None:
        """Render one frame from the latest registered state."""
        self.screen.fill(THEME["bg"])

        for wall in self.walls:
            hx = wall.size.x / 2.0
            hz = wall.size.z / 2.0
            sx, sy = self._world_to_screen(wall.position.x - hx, wall.position.z - hz)
            sw = max(1, int(wall.size.x * self.scale_x))
            sh = max(1, int(wall.size.z * self.scale_z))
            rect = pygame.Rect(sx, sy, sw, sh)
            pygame.draw.rect(self.screen, THEME["wall_fill"], rect)
            pygame.draw.rect(self.screen, THEME["wall_edge"], rect, 1)

        r_station = max(2, self._meters_to_pixels(STATION_RADIUS))
        for station in self.stations:
            center = self._world_to_screen(station.position.x, station.position.z)
            pygame.draw.circle(self.screen, THEME["station_fill"], center, r_station)
            pygame.draw.circle(self.screen, THEME["station_edge"], center, r_station, 1)

        if self.show_trail and len(self.trail) >= 2:
            pts = [self._world_to_screen(x, z) for x, z in self.trail]
            pygame.draw.lines(self.screen, THEME["trail"], False, pts, 1)

        if self.vehicle is not None:
            self._draw_vehicle(*self.vehicle)

        self._draw_hud(frame, stations_total, fps)
        pygame.display.flip()

    def _draw_vehicle(self, position: Vec3, rotation: Quat) -> None:
        hx, _, hz = self.vehicle_half_extents
        yaw = rotation.yaw()
        # Body axes on the ground plane: forward is -z rotated by yaw
        fwd = (-math.sin(yaw), -math.cos(yaw))
        side = (math.cos(yaw), -math.sin(yaw))
        corners = []
        for sf, ss in ((1, 1), (1, -1), (-1, -1), (-1, 1)):
            cx = position.x + fwd[0] * hz * sf + side[0] * hx * ss
            cz = position.z + fwd[1] * hz * sf + side[1] * hx * ss
            corners.append(self._world_to_screen(cx, cz))
        pygame.draw.polygon(self.screen, THEME["car_fill"], corners)
        pygame.draw.polygon(self.screen, THEME["car_outline"], corners, 2)

        center = self._world_to_screen(position.x, position.z)
        tip = self._world_to_screen(position.x + fwd[0] * hz * 1.3, position.z + fwd[1] * hz * 1.3)
        pygame.draw.line(self.screen, THEME["car_arrow"], center, tip, 3)

    def _draw_hud(self, frame: int, stations_total: int, fps: float) -> None:
        pad = 10
        font = pygame.font.SysFont("monospace", 13)
        text = f"  frame={frame}   stations={stations_total}   FPS={fps:.1f}  "
        surf = font.render(text, True, THEME["hud_text"])
        r = surf.get_rect(topleft=(pad, pad))
        panel = r.inflate(pad, pad)
        pygame.draw.rect(self.screen, THEME["hud_bg"], panel)
        pygame.draw.rect(self.screen, THEME["hud_border"], panel, 1)
        self.screen.blit(surf, (panel.x + 4, panel.y + 4))

    def tick(self, target_fps: int) -> float:
        """Cap frame rate and return achieved FPS."""
        fps = self.clock.get_fps()
        self.clock.tick(target_fps)
        return fps

    def close(self) -> None:
        pygame.quit()
