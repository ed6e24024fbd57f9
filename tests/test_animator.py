'''
Author: Elia Savino
github: github.com/EliaSavino

Happy Hacking!

Descr: Rotation animator state machine, driven by a manual clock.

'''
import math
import unittest

import numpy as np

from cubeturn.config import CubeConfig
from cubeturn.cube import CubeState
from cubeturn.errors import AnimationInProgress, InvalidToken
from cubeturn.moves import MoveDescriptor, resolve
from cubeturn.rotations import quarter_turn, rotation_about
from cubeturn.visualisation.animator import AnimatorState, RotationAnimator, ease_out
from cubeturn.visualisation.scene import ManualClock, SceneContext


class AnimatorTestCase(unittest.TestCase):

    def setUp(self):
        self.clock = ManualClock()
        self.context = SceneContext.create(CubeConfig(animation_ms=200.0), clock=self.clock)
        self.graph = self.context.graph
        self.cube = CubeState(self.graph, self.context.config)
        self.animator = RotationAnimator(self.cube)

    def tearDown(self):
        self.context.teardown()

    def _pivot(self):
        pivots = [n for n in self.graph.root.children if n.name == "pivot"]
        return pivots[0] if pivots else None

    def _run_frames(self, frame_ms: float = 1000 / 60, limit: int = 1000) -> int:
        frames = 0
        while self.animator.busy:
            self.clock.advance(frame_ms)
            self.context.loop.tick()
            frames += 1
            self.assertLess(frames, limit)
        return frames

    def _assert_handles_on_lattice(self):
        spacing = self.cube.config.position_offset
        for c in self.cube.cubies:
            self.assertIs(c.render_handle.parent, self.cube.group)
            R_, t = c.render_handle.world_transform()
            np.testing.assert_array_equal(R_, c.orientation)
            np.testing.assert_allclose(t, np.asarray(c.lattice_coord) * spacing, atol=1e-12)


class TestEase(unittest.TestCase):

    def test_ease_out_endpoints_and_monotonic(self):
        self.assertEqual(ease_out(0.0), 0.0)
        self.assertEqual(ease_out(1.0), 1.0)
        samples = [ease_out(p) for p in np.linspace(0, 1, 50)]
        self.assertTrue(all(b >= a for a, b in zip(samples, samples[1:])))


class TestStateMachine(AnimatorTestCase):

    def test_full_cycle(self):
        self.assertIs(self.animator.state, AnimatorState.IDLE)
        done = self.animator.animate_move("R")
        self.assertIs(self.animator.state, AnimatorState.ANIMATING)
        self.assertFalse(done.done())
        self.assertEqual(self.context.loop.pending, 1)

        pivot = self._pivot()
        self.assertIsNotNone(pivot)
        self.assertEqual(len(pivot.children), 9)

        frames = self._run_frames()
        self.assertGreater(frames, 1)
        self.assertIs(self.animator.state, AnimatorState.IDLE)
        self.assertTrue(done.done())
        self.assertEqual(done.result(), resolve("R"))
        self.assertIsNone(self._pivot())
        self.assertEqual(len(self.cube.group.children), 26)
        self.assertEqual(self.context.loop.pending, 0)
        self._assert_handles_on_lattice()

    def test_attach_keeps_world_transform(self):
        before = {id(c): c.render_handle.world_transform() for c in self.cube.cubies}
        self.animator.animate_move("F")
        for c in self.cube.cubies_in_layer("z", 1):
            R0, t0 = before[id(c)]
            R1, t1 = c.render_handle.world_transform()
            np.testing.assert_allclose(R1, R0, atol=1e-12)
            np.testing.assert_allclose(t1, t0, atol=1e-12)

    def test_incremental_rotation_follows_ease(self):
        self.animator.animate_move("U")
        pivot = self._pivot()
        for t in (50.0, 100.0, 150.0):
            self.clock.t = t
            self.context.loop.tick()
            expected = rotation_about("y", -math.pi / 2 * ease_out(t / 200.0))
            np.testing.assert_allclose(pivot.rotation, expected, atol=1e-12)
        # logical state only changes on commit
        self.assertTrue(self.cube.is_solved())

    def test_late_frame_still_converges(self):
        done = self.animator.animate_move("L2")
        self.clock.advance(60_000)
        self.context.loop.tick()
        self.assertTrue(done.done())
        self.assertIs(self.animator.state, AnimatorState.IDLE)
        self._assert_handles_on_lattice()

    def test_wrongly_oriented_handle_is_replaced(self):
        corner = self.cube.cubie_at((1, 1, 1))
        handle = corner.render_handle
        # same slot, turned a quarter about x: only the rotation disagrees
        self.graph.set_transform(handle, quarter_turn("x", 1), self.cube.world_position(corner))
        with self.assertLogs("cubeturn.visualisation.animator", level="WARNING") as logs:
            self.animator.animate_move("R")
            self._run_frames()
        self.assertEqual(len(logs.records), 1)
        np.testing.assert_array_equal(handle.rotation, corner.orientation)
        self._assert_handles_on_lattice()

    def test_zero_duration(self):
        animator = RotationAnimator(self.cube, duration_ms=0)
        done = animator.animate_move("B'")
        self.context.loop.tick()
        self.assertTrue(done.done())
        self._assert_handles_on_lattice()

    def test_negative_duration_rejected(self):
        with self.assertRaises(ValueError):
            RotationAnimator(self.cube, duration_ms=-1)

    def test_needs_a_scene(self):
        with self.assertRaises(ValueError):
            RotationAnimator(CubeState())


class TestRejections(AnimatorTestCase):

    def test_second_move_rejected_while_animating(self):
        self.animator.animate_move("R")
        before = self.cube.snapshot()
        with self.assertRaises(AnimationInProgress):
            self.animator.animate_move("U")
        self.assertEqual(self.cube.snapshot(), before)
        self._run_frames()
        self.assertEqual(self.cube.get_history()["move"].tolist(), ["R"])

    def test_invalid_token_fails_before_anything_starts(self):
        with self.assertRaises(InvalidToken):
            self.animator.animate_move("U3")
        self.assertIs(self.animator.state, AnimatorState.IDLE)
        self.assertIsNone(self._pivot())
        self.assertEqual(self.context.loop.pending, 0)

    def test_empty_layer_is_a_no_op(self):
        before = self.cube.snapshot()
        done = self.animator.animate_move(MoveDescriptor(token="R", axis="x", layer=5, quarter_turns=-1))
        self.assertTrue(done.done())
        self.assertIs(self.animator.state, AnimatorState.IDLE)
        self.assertEqual(self.context.loop.pending, 0)
        self.assertEqual(self.cube.snapshot(), before)
        self.assertEqual(len(self.cube.get_history()), 0)


class TestAnimatedSequences(AnimatorTestCase):

    def _animate(self, moves):
        for m in moves:
            self.animator.animate_move(m)
            self._run_frames(frame_ms=7.3)

    def test_animated_matches_instant(self):
        moves = ["R", "U", "R'", "U'", "F2", "B", "L'", "D2"]
        reference = CubeState()
        reference.apply_sequence(moves)
        self._animate(moves)
        self.assertEqual(self.cube.snapshot(), reference.snapshot())
        self._assert_handles_on_lattice()

    def test_inverse_cancellation_animated(self):
        start = self.cube.snapshot()
        for face in "UDLRFB":
            self._animate([face, face + "'"])
            self.assertEqual(self.cube.snapshot(), start)
            self._animate([face + "2", face + "2"])
            self.assertEqual(self.cube.snapshot(), start)
        self.assertTrue(self.cube.is_solved())
        self._assert_handles_on_lattice()

    def test_no_drift_over_long_sequences(self):
        moves = ["R", "U", "F'", "L2", "D", "B'"] * 20
        self._animate(moves)
        self.cube.assert_invariants()
        self._assert_handles_on_lattice()


if __name__ == "__main__":
    unittest.main()
