"""Capabilities the placement planner drives, and their result types.

Each capability reports expected failures through its own result value so
the planner can react per call site: a rejected placement moves on to the
next face, an unreachable neighbor ends the attempt.
"""
from __future__ import annotations

from typing import NamedTuple, Optional, Protocol

from world.blocks import Block
from world.voxel_grid import Coord, Face


class MotionResult(NamedTuple):
    ok: bool
    reason: str = ""


class PlaceResult(NamedTuple):
    ok: bool
    reason: str = ""


MOTION_OK = MotionResult(True)
PLACE_OK = PlaceResult(True)


class WorldQuery(Protocol):
    def block_at(self, coord: Coord) -> Optional[Block]: ...

    def can_see(self, block: Block) -> bool: ...


class Motion(Protocol):
    async def approach(self, coord: Coord, radius: float) -> MotionResult: ...

    async def orient(self, coord: Coord) -> MotionResult: ...


class PlacementExecution(Protocol):
    async def place(self, reference: Block, outward: Face) -> PlaceResult: ...
