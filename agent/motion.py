"""Motion capability for the sandbox: walk near a voxel, turn toward a voxel."""
from __future__ import annotations

import asyncio
from typing import List, Optional

from engine import config
from world.sandbox import SandboxWorld
from world.voxel_grid import Coord

from . import nav_grid as ng
from .capabilities import MOTION_OK, MotionResult
from .transform import look_angles, voxel_center


class LocalMotion:
    def __init__(self, world: SandboxWorld, *, step_delay_s: Optional[float] = None,
                 max_iter: Optional[int] = None) -> None:
        self.world = world
        if step_delay_s is None:
            step_delay_s = config.get_float("agent.step_delay_s", 0.0)
        if max_iter is None:
            max_iter = int(config.get_float("agent.max_path_iter", 20000))
        self.step_delay_s = step_delay_s
        self.max_iter = max_iter
        self.last_path: List[Coord] = []

    async def approach(self, coord: Coord, radius: float) -> MotionResult:
        agent = self.world.agent
        start = ng.settle(self.world.grid, agent.feet_cell())
        if start is None:
            print(f"[motion] no footing under agent at {agent.feet_cell()}")
            return MotionResult(False, "Cannot reach target")

        path = ng.astar_near(self.world.grid, start, coord, radius, max_iter=self.max_iter)
        if not path:
            print(f"[motion] no path from {start} to within {radius} of {coord}")
            return MotionResult(False, "Cannot reach target")

        self.last_path = path
        for cell in path:
            # Stand in the middle of the cell.
            agent.x, agent.y, agent.z = cell[0] + 0.5, float(cell[1]), cell[2] + 0.5
            await asyncio.sleep(self.step_delay_s)
        return MOTION_OK

    async def orient(self, coord: Coord) -> MotionResult:
        agent = self.world.agent
        agent.yaw_rad, agent.pitch_rad = look_angles(agent.eye(), voxel_center(coord))
        return MOTION_OK
