"""Placement planner: pick a solid neighbor to build against and place a block.

The planner owns no state between calls. One call checks that the target is
empty, walks the six neighbor faces in a fixed order (a preferred face goes
first), moves the agent only when a neighbor is out of sight, and stops at the
first placement the world accepts.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from engine import config
from world.blocks import is_empty
from world.voxel_grid import BASE_FACE_ORDER, DOWN, FACE_OFFSETS, Coord, negate, offset

from .capabilities import Motion, PlaceResult, PlacementExecution, WorldQuery

PLACED = "placed"
ALREADY_OCCUPIED = "already-occupied"
NO_REFERENCE = "no-reference"
ERROR = "error"


@dataclass(frozen=True)
class PlacementOutcome:
    kind: str
    message: str
    target: Coord
    face: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.kind == PLACED

    def to_dict(self) -> Dict[str, Any]:
        return {"success": self.success, "message": self.message}


def _fmt(coord: Coord) -> str:
    return f"({coord[0]}, {coord[1]}, {coord[2]})"


def _to_target(value: Any) -> Coord:
    """Coerce ``value`` to a voxel coordinate; fractional components are rejected."""
    if isinstance(value, (str, bytes)) or len(value) != 3:
        raise ValueError("Target must have exactly three components")
    coord = []
    for v in value:
        if isinstance(v, (bool, str, bytes)) or not float(v).is_integer():
            raise ValueError(f"Target component {v!r} is not a whole number")
        coord.append(int(v))
    return coord[0], coord[1], coord[2]


def parse_face(value: Any) -> Optional[str]:
    """Return ``value`` if it names one of the six faces, else None."""
    if isinstance(value, str) and value in FACE_OFFSETS:
        return value
    return None


def candidate_faces(preferred_face: Any = None) -> List[str]:
    faces = list(BASE_FACE_ORDER)
    preferred = parse_face(preferred_face)
    if preferred is not None and preferred != DOWN:
        faces.remove(preferred)
        faces.insert(0, preferred)
    return faces


def plan_candidates(target: Coord, preferred_face: Any = None) -> List[Tuple[str, Coord]]:
    """Ordered (face, reference coordinate) pairs to try for ``target``."""
    return [(face, offset(target, FACE_OFFSETS[face])) for face in candidate_faces(preferred_face)]


class PlacementPlanner:
    def __init__(self, world: WorldQuery, motion: Motion, placer: PlacementExecution,
                 approach_radius: Optional[float] = None) -> None:
        self.world = world
        self.motion = motion
        self.placer = placer
        if approach_radius is None:
            approach_radius = config.get_float("planner.approach_radius", 2.0)
        self.approach_radius = approach_radius

    async def place_block(self, target: Coord, preferred_face: Any = None) -> PlacementOutcome:
        try:
            target = _to_target(target)
        except (TypeError, ValueError) as exc:
            return PlacementOutcome(ERROR, f"Error placing block at {target!r}: {exc}", target)
        try:
            return await self._place(target, preferred_face)
        except Exception as exc:
            return PlacementOutcome(ERROR, f"Error placing block at {_fmt(target)}: {exc}", target)

    async def _place(self, target: Coord, preferred_face: Any) -> PlacementOutcome:
        existing = self.world.block_at(target)
        if not is_empty(existing):
            return PlacementOutcome(
                ALREADY_OCCUPIED,
                f"There's already a block ({existing.name}) at {_fmt(target)}",
                target,
            )

        for face, ref_pos in plan_candidates(target, preferred_face):
            reference = self.world.block_at(ref_pos)
            if is_empty(reference):
                continue

            if not self.world.can_see(reference):
                moved = await self.motion.approach(ref_pos, self.approach_radius)
                if not moved.ok:
                    return PlacementOutcome(
                        ERROR,
                        f"Error placing block at {_fmt(target)}: {moved.reason or 'Cannot reach target'}",
                        target,
                    )

            # Always aim at the empty cell being filled, not at the reference.
            looked = await self.motion.orient(target)
            if not looked.ok:
                return PlacementOutcome(
                    ERROR,
                    f"Error placing block at {_fmt(target)}: {looked.reason or 'Cannot look at target'}",
                    target,
                )

            try:
                result = await self.placer.place(reference, negate(FACE_OFFSETS[face]))
            except Exception as exc:
                # A placement that blows up is still just this face failing.
                result = PlaceResult(False, str(exc))
            if result.ok:
                return PlacementOutcome(
                    PLACED,
                    f"Placed block at {_fmt(target)} using {face} face",
                    target,
                    face=face,
                )
            print(f"[planner] Failed to place using {face} face: {result.reason}")

        return PlacementOutcome(
            NO_REFERENCE,
            f"Failed to place block at {_fmt(target)}: No suitable reference block found",
            target,
        )
