# agent/nav_grid.py
from __future__ import annotations
from typing import Dict, List, Optional, Tuple
import heapq
import math

from world.voxel_grid import Coord, VoxelGrid

# Walking agent two voxels tall. A cell is "standable" when the feet and head
# voxels are empty and the voxel underneath is solid. Moves are the four
# horizontal directions, stepping up or dropping down at most one block.

STEPS_XZ: Tuple[Tuple[int, int], ...] = ((1, 0), (-1, 0), (0, 1), (0, -1))


def _empty(grid: VoxelGrid, x: int, y: int, z: int) -> bool:
    # Above the grid counts as open sky; other out-of-range cells are walls.
    if y >= grid.size_y and 0 <= x < grid.size_x and 0 <= z < grid.size_z:
        return True
    return grid.contains(x, y, z) and grid.is_air(x, y, z)


def standable(grid: VoxelGrid, c: Coord) -> bool:
    x, y, z = c
    if not grid.contains(x, y, z):
        return False
    return _empty(grid, x, y, z) and _empty(grid, x, y + 1, z) and grid.is_solid(x, y - 1, z)


def neighbors(grid: VoxelGrid, c: Coord) -> List[Tuple[Coord, float]]:
    x, y, z = c
    res = []
    for dx, dz in STEPS_XZ:
        nx, nz = x + dx, z + dz
        if standable(grid, (nx, y, nz)):
            res.append(((nx, y, nz), 1.0))
            continue
        # Step up: need headroom above our own head to jump.
        if standable(grid, (nx, y + 1, nz)) and _empty(grid, x, y + 2, z):
            res.append(((nx, y + 1, nz), 1.5))
            continue
        # Drop down: the column we walk over must be clear at head height.
        if standable(grid, (nx, y - 1, nz)) and _empty(grid, nx, y + 1, nz):
            res.append(((nx, y - 1, nz), 1.5))
    return res


def settle(grid: VoxelGrid, c: Coord) -> Optional[Coord]:
    """
    Returns the standable cell at or below ``c`` in the same column, the way
    an agent would land if it stepped off here. None if nothing below.
    """
    x, y, z = c
    y = min(y, grid.size_y - 1)
    while y >= 1:
        if standable(grid, (x, y, z)):
            return (x, y, z)
        if not _empty(grid, x, y, z):
            return None
        y -= 1
    return None


def within(c: Coord, goal: Coord, radius: float) -> bool:
    dx = c[0] - goal[0]
    dy = c[1] - goal[1]
    dz = c[2] - goal[2]
    return dx * dx + dy * dy + dz * dz <= radius * radius


def astar_near(grid: VoxelGrid, start: Coord, goal: Coord, radius: float,
               max_iter: int = 20000) -> List[Coord]:
    """
    A* from ``start`` to any standable cell within ``radius`` of ``goal``.
    Returns the cell path including ``start``, or [] when no such cell is
    reachable within ``max_iter`` expansions.
    """
    if not standable(grid, start):
        return []

    def h(a: Coord) -> float:
        d = math.sqrt((a[0] - goal[0]) ** 2 + (a[1] - goal[1]) ** 2 + (a[2] - goal[2]) ** 2)
        return max(0.0, d - radius)

    openq: List[Tuple[float, int, Coord]] = []
    heapq.heappush(openq, (h(start), 0, start))
    came_from: Dict[Coord, Optional[Coord]] = {start: None}
    gscore: Dict[Coord, float] = {start: 0.0}

    it = 0
    tie = 0
    while openq and it < max_iter:
        _, _, cur = heapq.heappop(openq)
        it += 1
        if within(cur, goal, radius):
            path: List[Coord] = []
            k: Optional[Coord] = cur
            while k is not None:
                path.append(k)
                k = came_from[k]
            path.reverse()
            return path

        for nxt, step_cost in neighbors(grid, cur):
            cand = gscore[cur] + step_cost
            if cand < gscore.get(nxt, float("inf")):
                gscore[nxt] = cand
                came_from[nxt] = cur
                tie += 1
                heapq.heappush(openq, (cand + h(nxt), tie, nxt))

    return []
