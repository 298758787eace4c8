import asyncio

import pytest

from agent.capabilities import MotionResult, PlaceResult
from agent.planner import (
    ALREADY_OCCUPIED,
    ERROR,
    NO_REFERENCE,
    PLACED,
    PlacementPlanner,
    candidate_faces,
    parse_face,
    plan_candidates,
)
from world.blocks import Block

TARGET = (1, 2, 3)

NEIGHBOR = {
    "down": (1, 1, 3),
    "north": (1, 2, 2),
    "south": (1, 2, 4),
    "east": (2, 2, 3),
    "west": (0, 2, 3),
    "up": (1, 3, 3),
}


class FakeWorld:
    def __init__(self, blocks=None, hidden=(), error=None):
        self.blocks = dict(blocks or {})
        self.hidden = set(hidden)
        self.error = error
        self.queries = []

    def block_at(self, coord):
        self.queries.append(coord)
        if self.error is not None:
            raise RuntimeError(self.error)
        return Block(self.blocks.get(coord, "air"), coord)

    def can_see(self, block):
        return block.position not in self.hidden


class FakeMotion:
    def __init__(self, approach_result=MotionResult(True), orient_result=MotionResult(True)):
        self.approach_result = approach_result
        self.orient_result = orient_result
        self.calls = []

    async def approach(self, coord, radius):
        self.calls.append(("approach", coord, radius))
        return self.approach_result

    async def orient(self, coord):
        self.calls.append(("orient", coord))
        return self.orient_result


class FakePlacer:
    def __init__(self, reject=(), explode=()):
        self.reject = set(reject)
        self.explode = set(explode)
        self.calls = []

    async def place(self, reference, outward):
        self.calls.append((reference.position, outward))
        if reference.position in self.explode:
            raise RuntimeError("Cannot place block")
        if reference.position in self.reject:
            return PlaceResult(False, "rejected")
        return PlaceResult(True)


def _run(world, motion=None, placer=None, preferred=None, target=TARGET):
    motion = motion or FakeMotion()
    placer = placer or FakePlacer()
    planner = PlacementPlanner(world, motion, placer, approach_radius=2)
    return asyncio.run(planner.place_block(target, preferred))


def test_already_occupied_stops_after_first_query():
    world = FakeWorld({TARGET: "stone"})
    placer = FakePlacer()
    outcome = _run(world, placer=placer)
    assert not outcome.success
    assert outcome.kind == ALREADY_OCCUPIED
    assert outcome.message == "There's already a block (stone) at (1, 2, 3)"
    assert world.queries == [TARGET]
    assert placer.calls == []


def test_places_against_down_neighbor():
    world = FakeWorld({NEIGHBOR["down"]: "dirt"})
    motion = FakeMotion()
    placer = FakePlacer()
    outcome = _run(world, motion, placer)
    assert outcome.to_dict() == {"success": True, "message": "Placed block at (1, 2, 3) using down face"}
    assert outcome.kind == PLACED
    assert outcome.face == "down"
    assert motion.calls == [("orient", TARGET)]
    assert placer.calls == [(NEIGHBOR["down"], (0, 1, 0))]


def test_falls_through_empty_down_to_north():
    world = FakeWorld({NEIGHBOR["north"]: "stone"})
    outcome = _run(world)
    assert outcome.success
    assert outcome.message.endswith("using north face")


@pytest.mark.parametrize("face", ["up", "down", "north", "south", "east", "west"])
def test_each_face_is_reported(face):
    world = FakeWorld({NEIGHBOR[face]: "stone"})
    outcome = _run(world)
    assert outcome.success
    assert outcome.face == face
    assert outcome.message == f"Placed block at (1, 2, 3) using {face} face"


@pytest.mark.parametrize("face", ["up", "down", "north", "south", "east", "west"])
def test_each_preferred_face_with_solid_neighbor(face):
    world = FakeWorld({NEIGHBOR[face]: "stone"})
    placer = FakePlacer()
    outcome = _run(world, placer=placer, preferred=face)
    assert outcome.message == f"Placed block at (1, 2, 3) using {face} face"
    assert len(placer.calls) == 1


def test_outward_vector_is_negated_offset():
    for face, ref in NEIGHBOR.items():
        placer = FakePlacer()
        _run(FakeWorld({ref: "stone"}), placer=placer)
        (called_ref, outward), = placer.calls
        assert called_ref == ref
        # reference + outward lands back on the target
        assert tuple(r + o for r, o in zip(ref, outward)) == TARGET


def test_preferred_face_goes_before_down():
    world = FakeWorld({NEIGHBOR["north"]: "stone", NEIGHBOR["down"]: "stone"})
    placer = FakePlacer()
    outcome = _run(world, placer=placer, preferred="north")
    assert outcome.face == "north"
    assert placer.calls[0][0] == NEIGHBOR["north"]
    assert world.queries[1] == NEIGHBOR["north"]


def test_down_is_default_priority():
    world = FakeWorld({n: "stone" for n in NEIGHBOR.values()})
    placer = FakePlacer()
    outcome = _run(world, placer=placer)
    assert outcome.face == "down"
    assert placer.calls == [(NEIGHBOR["down"], (0, 1, 0))]


def test_rejected_face_continues_to_next(capsys):
    world = FakeWorld({NEIGHBOR["down"]: "stone", NEIGHBOR["north"]: "stone"})
    placer = FakePlacer(reject={NEIGHBOR["down"]})
    outcome = _run(world, placer=placer)
    assert outcome.success
    assert outcome.message == "Placed block at (1, 2, 3) using north face"
    assert [c[0] for c in placer.calls] == [NEIGHBOR["down"], NEIGHBOR["north"]]
    assert "Failed to place using down face: rejected" in capsys.readouterr().out


def test_raising_placer_is_treated_as_rejection():
    world = FakeWorld({NEIGHBOR["down"]: "dirt"})
    outcome = _run(world, placer=FakePlacer(explode={NEIGHBOR["down"]}))
    assert outcome.kind == NO_REFERENCE
    assert outcome.message == "Failed to place block at (1, 2, 3): No suitable reference block found"


def test_each_face_tried_at_most_once():
    world = FakeWorld({n: "stone" for n in NEIGHBOR.values()})
    placer = FakePlacer(reject=set(NEIGHBOR.values()))
    outcome = _run(world, placer=placer, preferred="east")
    assert outcome.kind == NO_REFERENCE
    refs = [c[0] for c in placer.calls]
    assert len(refs) == 6 and len(set(refs)) == 6
    assert refs[0] == NEIGHBOR["east"]


def test_no_solid_neighbor():
    world = FakeWorld()
    motion = FakeMotion()
    outcome = _run(world, motion)
    assert not outcome.success
    assert outcome.kind == NO_REFERENCE
    assert outcome.message == "Failed to place block at (1, 2, 3): No suitable reference block found"
    # the target plus all six neighbors
    assert len(world.queries) == 7
    assert set(world.queries[1:]) == set(NEIGHBOR.values())
    assert motion.calls == []


def test_hidden_neighbor_triggers_approach():
    world = FakeWorld({NEIGHBOR["down"]: "dirt"}, hidden={NEIGHBOR["down"]})
    motion = FakeMotion()
    outcome = _run(world, motion)
    assert outcome.success
    assert motion.calls == [("approach", (1, 1, 3), 2), ("orient", TARGET)]


def test_visible_neighbor_skips_approach():
    motion = FakeMotion()
    _run(FakeWorld({NEIGHBOR["east"]: "stone"}), motion)
    assert [c[0] for c in motion.calls] == ["orient"]


def test_orient_always_targets_the_empty_cell():
    world = FakeWorld({NEIGHBOR["down"]: "stone", NEIGHBOR["west"]: "stone"})
    motion = FakeMotion()
    placer = FakePlacer(reject={NEIGHBOR["down"]})
    _run(world, motion, placer)
    assert motion.calls == [("orient", TARGET), ("orient", TARGET)]


def test_unreachable_neighbor_aborts_whole_attempt():
    world = FakeWorld(
        {NEIGHBOR["down"]: "dirt", NEIGHBOR["north"]: "stone"},
        hidden={NEIGHBOR["down"]},
    )
    placer = FakePlacer()
    motion = FakeMotion(approach_result=MotionResult(False, "Cannot reach target"))
    outcome = _run(world, motion, placer)
    assert not outcome.success
    assert outcome.kind == ERROR
    assert outcome.message == "Error placing block at (1, 2, 3): Cannot reach target"
    # north was reachable but never tried
    assert placer.calls == []


def test_failed_orientation_is_an_error():
    world = FakeWorld({NEIGHBOR["down"]: "dirt"})
    motion = FakeMotion(orient_result=MotionResult(False, "Cannot look at target"))
    outcome = _run(world, motion)
    assert outcome.kind == ERROR
    assert outcome.message == "Error placing block at (1, 2, 3): Cannot look at target"


def test_query_failure_becomes_error_outcome():
    outcome = _run(FakeWorld(error="Unexpected error"))
    assert not outcome.success
    assert outcome.message == "Error placing block at (1, 2, 3): Unexpected error"


def test_raising_motion_becomes_error_outcome():
    class Broken(FakeMotion):
        async def approach(self, coord, radius):
            raise RuntimeError("pathfinder crashed")

    world = FakeWorld({NEIGHBOR["down"]: "dirt"}, hidden={NEIGHBOR["down"]})
    outcome = _run(world, Broken())
    assert outcome.message == "Error placing block at (1, 2, 3): pathfinder crashed"


def test_missing_block_counts_as_empty():
    class SparseWorld(FakeWorld):
        def block_at(self, coord):
            self.queries.append(coord)
            name = self.blocks.get(coord)
            return Block(name, coord) if name else None

    outcome = _run(SparseWorld({NEIGHBOR["south"]: "sand"}))
    assert outcome.face == "south"


def test_unrecognized_preferred_face_is_ignored():
    world = FakeWorld({NEIGHBOR["down"]: "stone", NEIGHBOR["up"]: "stone"})
    outcome = _run(world, preferred="sideways")
    assert outcome.face == "down"


def test_candidate_ordering():
    base = ["down", "north", "south", "east", "west", "up"]
    assert candidate_faces() == base
    assert candidate_faces("down") == base
    assert candidate_faces("bogus") == base
    assert candidate_faces(7) == base
    assert candidate_faces("up") == ["up", "down", "north", "south", "east", "west"]
    assert candidate_faces("east") == ["east", "down", "north", "south", "west", "up"]


def test_plan_candidates_coordinates():
    plan = plan_candidates(TARGET, "west")
    assert plan[0] == ("west", (0, 2, 3))
    assert dict(plan) == NEIGHBOR


def test_parse_face():
    assert parse_face("north") == "north"
    assert parse_face("North") is None
    assert parse_face(None) is None


def test_fractional_target_is_an_error():
    world = FakeWorld({NEIGHBOR["down"]: "stone"})
    placer = FakePlacer()
    outcome = _run(world, placer=placer, target=(1.9, 2.7, 3.2))
    assert outcome.kind == ERROR
    assert outcome.message.startswith("Error placing block at (1.9, 2.7, 3.2): ")
    assert world.queries == []
    assert placer.calls == []


@pytest.mark.parametrize("target", [(1, 2), (1, 2, 3, 4), None, "123", (1, None, 3), (True, 2, 3)])
def test_malformed_target_returns_outcome(target):
    world = FakeWorld({NEIGHBOR["down"]: "stone"})
    outcome = _run(world, target=target)
    assert outcome.kind == ERROR
    assert not outcome.success
    assert world.queries == []


def test_whole_float_target_is_accepted():
    world = FakeWorld({NEIGHBOR["down"]: "stone"})
    outcome = _run(world, target=(1.0, 2.0, 3.0))
    assert outcome.success
    assert outcome.target == TARGET
    assert outcome.message == "Placed block at (1, 2, 3) using down face"


def test_failed_approach_without_reason_uses_default_message():
    world = FakeWorld({NEIGHBOR["down"]: "dirt"}, hidden={NEIGHBOR["down"]})
    outcome = _run(world, FakeMotion(approach_result=MotionResult(False)))
    assert outcome.kind == ERROR
    assert outcome.message == "Error placing block at (1, 2, 3): Cannot reach target"
