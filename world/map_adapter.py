"""Helpers for adapting authored scene files into voxel grids."""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from world.blocks import AIR, BlockDef, BlockRegistry
from world.voxel_grid import Coord, VoxelGrid


@dataclass
class AgentSpawn:
    pos: Tuple[float, float, float]
    yaw: float = 0.0    # degrees
    pitch: float = 0.0  # degrees


@dataclass
class Scene:
    grid: VoxelGrid
    registry: BlockRegistry
    agent: AgentSpawn


def _to_tuple(values: Any, expected_len: int, name: str, default: Optional[Tuple[float, ...]] = None) -> Tuple[float, ...]:
    """Convert a sequence into a tuple of floats of the given length."""
    if values is None:
        if default is None:
            raise ValueError(f"Missing required field '{name}'")
        return tuple(float(v) for v in default)
    if not isinstance(values, (list, tuple)) or len(values) != expected_len:
        raise ValueError(f"Field '{name}' must be a sequence of length {expected_len}")
    try:
        return tuple(float(values[i]) for i in range(expected_len))
    except Exception as exc:
        raise ValueError(f"Field '{name}' must contain numeric values") from exc


def _to_number(value: Any, name: str) -> float:
    """Convert a scalar field to float; null, bools and containers are rejected."""
    if value is None or isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ValueError(f"Field '{name}' must be numeric")
    try:
        return float(value)
    except ValueError as exc:
        raise ValueError(f"Field '{name}' must be numeric") from exc


def _to_coord(values: Any, name: str, default: Optional[Coord] = None) -> Coord:
    floats = _to_tuple(values, 3, name, default)
    if any(abs(v - round(v)) > 1e-9 for v in floats):
        raise ValueError(f"Field '{name}' must contain whole numbers")
    return int(round(floats[0])), int(round(floats[1])), int(round(floats[2]))


def _block_id(registry: BlockRegistry, ids: Dict[str, int], name: str) -> int:
    block_id = ids.get(name)
    if block_id is None:
        block_id = len(ids) + 1
        ids[name] = block_id
        registry[block_id] = BlockDef(name=name)
    return block_id


def scene_from_dict(data: Dict[str, Any]) -> Scene:
    """Build a Scene from a dictionary.

    ``blocks`` entries are ``{"pos": [x, y, z], "name": "stone"}``; an
    optional ``size`` fills a box starting at ``pos``. Blocks named ``air``
    clear cells written by earlier entries.
    """
    if not isinstance(data, dict):
        raise TypeError("Scene data must be a JSON object/dict")

    size = _to_coord(data.get("size"), "size")
    grid = VoxelGrid(size)
    registry: BlockRegistry = {}
    ids: Dict[str, int] = {}

    blocks_data = data.get("blocks", [])
    if not isinstance(blocks_data, list):
        raise ValueError("Field 'blocks' must be a list")

    for idx, node in enumerate(blocks_data):
        path = f"blocks[{idx}]"
        if not isinstance(node, dict):
            raise ValueError(f"{path} must be an object")
        name = node.get("name", "stone")
        if not isinstance(name, str) or not name:
            raise ValueError(f"{path}.name must be a non-empty string")
        ox, oy, oz = _to_coord(node.get("pos"), f"{path}.pos")
        sx, sy, sz = _to_coord(node.get("size"), f"{path}.size", (1, 1, 1))
        if sx <= 0 or sy <= 0 or sz <= 0:
            raise ValueError(f"{path}.size must be positive")

        block_id = 0 if name == AIR else _block_id(registry, ids, name)
        for x in range(ox, ox + sx):
            for y in range(oy, oy + sy):
                for z in range(oz, oz + sz):
                    if not grid.contains(x, y, z):
                        raise ValueError(f"{path} extends outside the scene size {size}")
                    grid.set(x, y, z, block_id)

    agent_data = data.get("agent")
    if agent_data is None:
        agent_data = {}
    if not isinstance(agent_data, dict):
        raise ValueError("Field 'agent' must be an object")
    default_pos = (size[0] * 0.5, float(size[1]), size[2] * 0.5)
    agent = AgentSpawn(
        pos=_to_tuple(agent_data.get("pos"), 3, "agent.pos", default_pos),
        yaw=_to_number(agent_data.get("yaw", 0.0), "agent.yaw"),
        pitch=_to_number(agent_data.get("pitch", 0.0), "agent.pitch"),
    )
    return Scene(grid=grid, registry=registry, agent=agent)


def load_scene(json_path: str) -> Scene:
    """Load a scene JSON file into a dense voxel grid."""
    with open(json_path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return scene_from_dict(data)


def scene_to_dict(scene: Scene) -> Dict[str, Any]:
    """Inverse of :func:`scene_from_dict`, one entry per solid voxel."""
    blocks: List[Dict[str, Any]] = [
        {"pos": [x, y, z], "name": scene.registry[block_id].name}
        for x, y, z, block_id in scene.grid.iter_solid()
    ]
    return {
        "size": [scene.grid.size_x, scene.grid.size_y, scene.grid.size_z],
        "blocks": blocks,
        "agent": {
            "pos": list(scene.agent.pos),
            "yaw": scene.agent.yaw,
            "pitch": scene.agent.pitch,
        },
    }
