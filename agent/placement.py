"""Placement Execution capability for the sandbox."""
from __future__ import annotations

import asyncio
from typing import Optional

from engine import config
from world.blocks import Block, is_empty
from world.sandbox import SandboxWorld
from world.voxel_grid import FACE_OFFSETS, Face, offset

from .capabilities import PLACE_OK, PlaceResult
from .transform import distance, forward_vector, voxel_center

# cos of the widest angle between the look direction and the target center
# that still counts as facing it.
FACING_MIN_DOT = 0.7

_UNIT_FACES = frozenset(FACE_OFFSETS.values())


class LocalPlacer:
    def __init__(self, world: SandboxWorld, *, block_name: Optional[str] = None,
                 reach: Optional[float] = None) -> None:
        self.world = world
        self.block_name = block_name or str(config.get("placement.block_name", "stone"))
        if reach is None:
            reach = config.get_float("agent.reach", 4.5)
        self.reach = reach

    def check(self, reference: Block, outward: Face) -> PlaceResult:
        """Validate a placement without changing the world."""
        outward = tuple(outward)
        if outward not in _UNIT_FACES:
            return PlaceResult(False, f"invalid face vector {outward}")
        if is_empty(self.world.block_at(reference.position)):
            return PlaceResult(False, f"no block to place against at {reference.position}")

        target = offset(reference.position, outward)
        if not self.world.grid.contains(*target):
            return PlaceResult(False, f"{target} is outside the world")
        if not is_empty(self.world.block_at(target)):
            return PlaceResult(False, f"{target} is already occupied")

        agent = self.world.agent
        if target in agent.body_cells():
            return PlaceResult(False, "agent is standing in the way")

        eye = agent.eye()
        center = voxel_center(target)
        dist = distance(eye, center)
        if dist > self.reach:
            return PlaceResult(False, f"target is out of reach ({dist:.2f} > {self.reach})")

        if dist > 1e-6:
            fx, fy, fz = forward_vector(agent.yaw_rad, agent.pitch_rad)
            dot = (fx * (center[0] - eye[0]) + fy * (center[1] - eye[1]) + fz * (center[2] - eye[2])) / dist
            if dot < FACING_MIN_DOT:
                return PlaceResult(False, "agent is not facing the target")
        return PLACE_OK

    async def place(self, reference: Block, outward: Face) -> PlaceResult:
        result = self.check(reference, outward)
        if not result.ok:
            return result
        # One tick for the world to acknowledge the placement.
        await asyncio.sleep(0)
        target = offset(reference.position, tuple(outward))
        self.world.set_block(target, self.block_name)
        return PLACE_OK
