"""In-process voxel world that answers block and line-of-sight queries.

Every solid voxel is mirrored as a static Bullet box so visibility can be
answered with a single ray test from the agent's eye.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from panda3d.core import BitMask32, LPoint3, NodePath, Vec3
from panda3d.bullet import BulletBoxShape, BulletRigidBodyNode, BulletWorld

from agent.transform import deg_to_rad, distance, voxel_center
from engine import config
from world.blocks import AIR, Block, BlockDef, BlockRegistry
from world.map_adapter import Scene
from world.voxel_grid import Coord, VoxelGrid

# In Panda3D+Bullet, ONLY the "into" mask is used for ray filtering.
MASK_SOLID = BitMask32.bit(0)

EPS_HIT = 1e-4


@dataclass
class AgentState:
    x: float
    y: float  # feet height
    z: float
    yaw_rad: float = 0.0
    pitch_rad: float = 0.0
    eye_height: float = 1.62

    def eye(self) -> Tuple[float, float, float]:
        return (self.x, self.y + self.eye_height, self.z)

    def feet_cell(self) -> Coord:
        return (int(math.floor(self.x)), int(math.floor(self.y)), int(math.floor(self.z)))

    def body_cells(self) -> Tuple[Coord, Coord]:
        fx, fy, fz = self.feet_cell()
        return (fx, fy, fz), (fx, fy + 1, fz)


class SandboxWorld:
    """World Query capability over a ``VoxelGrid``."""

    def __init__(self, grid: VoxelGrid, registry: Optional[BlockRegistry] = None,
                 agent: Optional[AgentState] = None, *, view_distance: Optional[float] = None) -> None:
        self.grid = grid
        self.registry: BlockRegistry = dict(registry or {})
        self._ids: Dict[str, int] = {bdef.name: bid for bid, bdef in self.registry.items()}
        if agent is None:
            agent = AgentState(grid.size_x * 0.5, float(grid.size_y), grid.size_z * 0.5)
        self.agent = agent
        if view_distance is None:
            view_distance = config.get_float("world.view_distance", 16.0)
        self.view_distance = float(view_distance)

        self._root = NodePath("sandbox")
        self.physics = BulletWorld()
        self._bodies: Dict[Coord, NodePath] = {}
        for x, y, z, _ in grid.iter_solid():
            self._attach_voxel((x, y, z))

    @classmethod
    def from_scene(cls, scene: Scene, **kwargs) -> "SandboxWorld":
        spawn = scene.agent
        agent = AgentState(
            x=spawn.pos[0], y=spawn.pos[1], z=spawn.pos[2],
            yaw_rad=deg_to_rad(spawn.yaw), pitch_rad=deg_to_rad(spawn.pitch),
            eye_height=config.get_float("agent.eye_height", 1.62),
        )
        return cls(scene.grid, scene.registry, agent, **kwargs)

    # ---------- Colliders ----------
    def _attach_voxel(self, coord: Coord) -> None:
        node = BulletRigidBodyNode(f"voxel_{coord[0]}_{coord[1]}_{coord[2]}")
        node.addShape(BulletBoxShape(Vec3(0.5, 0.5, 0.5)))
        node.setMass(0.0)
        node.setIntoCollideMask(MASK_SOLID)
        np = self._root.attachNewNode(node)
        np.setPos(*voxel_center(coord))
        np.setPythonTag("kind", "static")
        np.setPythonTag("voxel", coord)
        self.physics.attachRigidBody(node)
        self._bodies[coord] = np

    def _detach_voxel(self, coord: Coord) -> None:
        np = self._bodies.pop(coord, None)
        if np is None:
            return
        self.physics.removeRigidBody(np.node())
        np.removeNode()

    # ---------- World Query ----------
    def block_at(self, coord: Coord) -> Optional[Block]:
        x, y, z = coord
        if not self.grid.contains(x, y, z):
            return None
        block_id = self.grid.get(x, y, z)
        if block_id == 0:
            return Block(AIR, (x, y, z))
        bdef = self.registry.get(block_id)
        name = bdef.name if bdef is not None else f"block_{block_id}"
        return Block(name, (x, y, z))

    def first_hit(self, start: Tuple[float, float, float], end: Tuple[float, float, float]) -> Optional[Coord]:
        """Closest solid voxel crossed by the segment ``start -> end``."""
        best_frac = None
        best: Optional[Coord] = None
        res = self.physics.rayTestAll(LPoint3(*start), LPoint3(*end))
        for hit in res.getHits():
            np_hit = NodePath(hit.getNode())
            if np_hit.is_empty() or np_hit.getPythonTag("kind") != "static":
                continue
            frac = float(hit.getHitFraction())
            if frac <= EPS_HIT:
                continue
            if best_frac is None or frac < best_frac:
                best_frac = frac
                best = np_hit.getPythonTag("voxel")
        return best

    def can_see(self, block: Block) -> bool:
        eye = self.agent.eye()
        center = voxel_center(block.position)
        if distance(eye, center) > self.view_distance:
            return False
        return self.first_hit(eye, center) == tuple(block.position)

    # ---------- Mutation ----------
    def set_block(self, coord: Coord, name: str) -> None:
        x, y, z = coord
        if name == AIR:
            self.grid.set(x, y, z, 0)
            self._detach_voxel(coord)
            return
        block_id = self._ids.get(name)
        if block_id is None:
            block_id = max(self.registry, default=0) + 1
            self.registry[block_id] = BlockDef(name=name)
            self._ids[name] = block_id
        was_air = self.grid.is_air(x, y, z)
        self.grid.set(x, y, z, block_id)
        if was_air:
            self._attach_voxel(coord)

    def is_solid(self, coord: Coord) -> bool:
        return self.grid.is_solid(*coord)
