"""Block descriptors returned by world queries."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

AIR = "air"


@dataclass(frozen=True)
class BlockDef:
    """Registry entry for a block id stored in a ``VoxelGrid``."""
    name: str


BlockRegistry = Dict[int, BlockDef]


@dataclass(frozen=True)
class Block:
    name: str
    position: Tuple[int, int, int]


def is_empty(block: Optional[Block]) -> bool:
    """Missing blocks and air both count as empty space."""
    return block is None or block.name == AIR
