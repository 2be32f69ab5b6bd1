from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

# Ensure project root is on path when running this script directly
_script_dir = Path(__file__).resolve().parent
_project_root = _script_dir.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import pygame

from maze_sim.config import load_config
from maze_sim.input import KeyboardInput
from maze_sim.maze import save_grid
from maze_sim.physics import PointMassBackend
from maze_sim.render import PygameRenderer
from maze_sim.simulation import Simulation, build_level
from telemetry.logger import TelemetryLogger


def main() -> None:
    parser = argparse.ArgumentParser(description="Drive through a procedurally generated maze.")
    parser.add_argument(
        "--config",
        type=str,
        default="configs/sim.yaml",
        help="Path to sim YAML config.",
    )
    parser.add_argument("--seed", type=int, default=None, help="Override the level seed.")
    parser.add_argument(
        "--dump-maze",
        type=str,
        default=None,
        help="Write the generated maze grid to this JSON path.",
    )
    parser.add_argument("--verbose", action="store_true", help="Log level-build details.")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%H:%M:%S",
    )

    cfg = load_config(args.config)
    if args.seed is not None:
        cfg.seed = args.seed

    level = build_level(cfg)
    if not level.placement.is_full:
        print(
            f"Only {len(level.placement)} of {level.placement.requested} stations fit this maze.",
            file=sys.stderr,
        )
    if args.dump_maze:
        save_grid(level.grid, args.dump_maze)
        print(f"Saved maze grid to {args.dump_maze}")

    cell = cfg.layout.cell_size
    keyboard = KeyboardInput()
    renderer: Optional[PygameRenderer] = None
    telemetry: Optional[TelemetryLogger] = None
    try:
        renderer = PygameRenderer(
            extent_x=level.grid.width * cell,
            extent_z=level.grid.height * cell,
            window_width=cfg.render.window_width,
            window_height=cfg.render.window_height,
            show_trail=cfg.render.show_trail,
            trail_max_length=cfg.render.trail_max_length,
            vehicle_half_extents=cfg.vehicle.half_extents,
        )
        if cfg.telemetry_path:
            telemetry = TelemetryLogger(cfg.telemetry_path)

        sim = asyncio.run(
            Simulation.create(
                cfg,
                PointMassBackend(dt=cfg.physics.dt),
                keyboard,
                renderer,
                level=level,
                telemetry=telemetry,
            )
        )

        print("Keyboard: W/S or arrows drive, A/D or arrows steer, ESC to quit.")

        running = True
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    else:
                        keyboard.key_down(pygame.key.name(event.key))
                elif event.type == pygame.KEYUP:
                    keyboard.key_up(pygame.key.name(event.key))
                elif event.type == pygame.WINDOWFOCUSLOST:
                    keyboard.release_all()

            sim.tick()
            fps = renderer.tick(cfg.render.fps)
            renderer.draw(frame=sim.frame, stations_total=len(level.stations), fps=fps)
    except KeyboardInterrupt:
        print("Stopping (KeyboardInterrupt).")
    finally:
        if renderer is not None:
            renderer.close()
        if telemetry is not None:
            telemetry.close()


if __name__ == "__main__":
    main()
