"""Voxel grid storage with fast indexed access.

Coordinates are integer (x, y, z) with y pointing up.
"""
from __future__ import annotations

from typing import Dict, Iterator, Sequence, Tuple

Coord = Tuple[int, int, int]
Face = Tuple[int, int, int]

UP = "up"
DOWN = "down"
NORTH = "north"
SOUTH = "south"
EAST = "east"
WEST = "west"

FACE_OFFSETS: Dict[str, Face] = {
    UP: (0, 1, 0),
    DOWN: (0, -1, 0),
    NORTH: (0, 0, -1),
    SOUTH: (0, 0, 1),
    EAST: (1, 0, 0),
    WEST: (-1, 0, 0),
}

# Order in which reference faces are tried when nothing is preferred.
BASE_FACE_ORDER: Tuple[str, ...] = (DOWN, NORTH, SOUTH, EAST, WEST, UP)


def offset(coord: Coord, delta: Face) -> Coord:
    return coord[0] + delta[0], coord[1] + delta[1], coord[2] + delta[2]


def negate(delta: Face) -> Face:
    return -delta[0], -delta[1], -delta[2]


class VoxelGrid:
    """Dense voxel storage optimized for tight loops."""

    __slots__ = ("size_x", "size_y", "size_z", "_default", "_data")

    def __init__(self, size_xyz: Sequence[int], default_block: int = 0) -> None:
        if len(size_xyz) != 3:
            raise ValueError("size_xyz must contain three integers")
        sx, sy, sz = (int(axis) for axis in size_xyz)
        if sx <= 0 or sy <= 0 or sz <= 0:
            raise ValueError("grid dimensions must be positive")

        self.size_x = sx
        self.size_y = sy
        self.size_z = sz
        self._default = int(default_block)

        volume = sx * sy * sz
        self._data = [self._default] * volume

    # Internal utilities -------------------------------------------------
    def _index(self, x: int, y: int, z: int) -> int:
        if not self.contains(x, y, z):
            raise IndexError("voxel coordinates out of range")
        return (z * self.size_y + y) * self.size_x + x

    # API ----------------------------------------------------------------
    def contains(self, x: int, y: int, z: int) -> bool:
        return 0 <= x < self.size_x and 0 <= y < self.size_y and 0 <= z < self.size_z

    def get(self, x: int, y: int, z: int) -> int:
        return self._data[self._index(x, y, z)]

    def set(self, x: int, y: int, z: int, block_id: int) -> None:
        self._data[self._index(x, y, z)] = int(block_id)

    def is_air(self, x: int, y: int, z: int) -> bool:
        return self.get(x, y, z) == 0

    def is_solid(self, x: int, y: int, z: int) -> bool:
        """Like ``not is_air`` but treats out-of-range cells as empty."""
        return self.contains(x, y, z) and self.get(x, y, z) != 0

    def iter_solid(self) -> Iterator[Tuple[int, int, int, int]]:
        for z in range(self.size_z):
            for y in range(self.size_y):
                for x in range(self.size_x):
                    block = self._data[(z * self.size_y + y) * self.size_x + x]
                    if block != 0:
                        yield x, y, z, block
