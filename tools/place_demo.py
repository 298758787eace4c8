"""Load a scene, place one block with the planner, and report the outcome."""
from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from typing import List

from agent.motion import LocalMotion
from agent.placement import LocalPlacer
from agent.planner import PlacementPlanner
from engine import config
from world.map_adapter import load_scene, scene_to_dict
from world.sandbox import SandboxWorld


def _resolve_scene_path(path: str) -> str:
    if os.path.isabs(path) and os.path.exists(path):
        return path
    candidate = os.path.join("configs", "scenes", path)
    if os.path.exists(candidate):
        return candidate
    return path


def _parse_args(argv: List[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Place a single block in a sandbox scene")
    parser.add_argument("--scene", required=True, help="Scene json filename or path")
    parser.add_argument("--at", nargs=3, type=int, metavar=("X", "Y", "Z"), required=True)
    parser.add_argument("--face", default=None, help="Preferred reference face (up/down/north/south/east/west)")
    parser.add_argument("--block", default=None, help="Block name to place")
    parser.add_argument("--config", default=None, help="Settings json (defaults to configs/defaults.json)")
    parser.add_argument("--out", default=None, help="Write the resulting scene to this path")
    return parser.parse_args(argv)


async def _run(args: argparse.Namespace) -> int:
    scene = load_scene(_resolve_scene_path(args.scene))
    world = SandboxWorld.from_scene(scene)
    planner = PlacementPlanner(world, LocalMotion(world), LocalPlacer(world, block_name=args.block))

    outcome = await planner.place_block(tuple(args.at), args.face)
    print(json.dumps(outcome.to_dict()))

    if args.out:
        scene.registry = world.registry
        scene.agent.pos = (world.agent.x, world.agent.y, world.agent.z)
        with open(args.out, "w", encoding="utf-8") as f:
            json.dump(scene_to_dict(scene), f, indent=2)
    return 0 if outcome.success else 1


def main(argv: List[str]) -> int:
    args = _parse_args(argv)
    if args.config:
        config.load(args.config)
    return asyncio.run(_run(args))


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
