'''
Author: Elia Savino
github: github.com/EliaSavino

Happy Hacking!

Descr: Shuffle driver and the shuffle/reset controls.

'''
import random
import unittest
import warnings

import numpy as np

from cubeturn.config import CubeConfig
from cubeturn.errors import AnimationInProgress, InvalidToken
from cubeturn.moves import MOVES
from cubeturn.rotations import euler_degrees
from cubeturn.visualisation.scene import ManualClock, SceneContext
from cubeturn.visualisation.viewer import CubeController

FRAME_MS = 1000 / 60


def _controller(seed=None, **config_kwargs):
    context = SceneContext.create(CubeConfig(**config_kwargs), clock=ManualClock())
    return CubeController(context, seed=seed)


class TestShuffleDriver(unittest.TestCase):

    def setUp(self):
        self.controller = _controller(seed=42)
        self.shuffler = self.controller.shuffler
        self.animator = self.controller.animator
        self.cube = self.controller.cube

    def tearDown(self):
        self.controller.context.teardown()

    def test_issues_exactly_n_tokens_from_alphabet(self):
        done = self.shuffler.shuffle(20)
        self.assertTrue(self.shuffler.running)
        self.controller.run_until_idle(FRAME_MS)
        self.assertTrue(done.done())
        tokens = done.result()
        self.assertEqual(len(tokens), 20)
        self.assertTrue(set(tokens) <= set(MOVES))
        self.assertEqual(self.shuffler.issued, tokens)
        self.assertFalse(self.shuffler.running)

    def test_same_seed_same_sequence(self):
        other = _controller(seed=42)
        a = self.shuffler.shuffle(25)
        b = other.shuffler.shuffle(25)
        self.controller.run_until_idle(FRAME_MS)
        other.run_until_idle(FRAME_MS)
        self.assertEqual(a.result(), b.result())
        self.assertEqual(self.cube.snapshot(), other.cube.snapshot())
        other.context.teardown()

    def test_explicit_rng(self):
        rng = random.Random(9)
        face = random.Random(9).choice("UDLRFB")
        self.shuffler.rng = rng
        self.assertEqual(self.shuffler.random_move()[0], face)

    def test_moves_are_strictly_sequential(self):
        original = self.animator.animate_move
        starts = []
        busy_at_issue = []

        def checked(move):
            busy_at_issue.append(self.animator.busy)
            starts.append(move)
            return original(move)

        self.animator.animate_move = checked
        done = self.shuffler.shuffle(10)
        # only the first move is in flight before any frame runs
        self.assertEqual(len(starts), 1)
        self.controller.run_until_idle(FRAME_MS)
        self.assertEqual(starts, done.result())
        self.assertEqual(busy_at_issue, [False] * 10)

    def test_history_marks_shuffle_phase(self):
        self.cube.apply_move("R")
        self.shuffler.shuffle(5)
        self.controller.run_until_idle(FRAME_MS)
        self.cube.apply_move("U")
        hist = self.cube.get_history()
        self.assertEqual(hist["phase"].tolist(), ["manual"] + ["shuffle"] * 5 + ["manual"])

    def test_zero_moves(self):
        done = self.shuffler.shuffle(0)
        self.assertTrue(done.done())
        self.assertEqual(done.result(), [])
        self.assertFalse(self.shuffler.running)

    def test_negative_moves_rejected(self):
        with self.assertRaises(ValueError):
            self.shuffler.shuffle(-1)

    def test_second_shuffle_rejected(self):
        self.shuffler.shuffle(3)
        with self.assertRaises(AnimationInProgress):
            self.shuffler.shuffle(3)

    def test_orientations_stay_quantized(self):
        self.shuffler.shuffle(40)
        self.controller.run_until_idle(FRAME_MS)
        self.cube.assert_invariants()
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            for c in self.cube.cubies:
                angles = euler_degrees(c.orientation) / 90.0
                np.testing.assert_allclose(angles, np.round(angles), atol=1e-6)

    def test_play_sequence(self):
        done = self.shuffler.play("R U R' U'")
        self.controller.run_until_idle(FRAME_MS)
        self.assertEqual(done.result(), ["R", "U", "R'", "U'"])
        self.assertEqual(self.cube.get_history()["phase"].unique().tolist(), ["manual"])

    def test_play_rejects_bad_sequence_up_front(self):
        with self.assertRaises(InvalidToken):
            self.shuffler.play(["R", "Z"])
        self.assertFalse(self.shuffler.running)
        self.assertEqual(len(self.cube.get_history()), 0)


class TestControls(unittest.TestCase):

    def setUp(self):
        self.controller = _controller(seed=1, shuffle_moves=6)
        self.changes = []
        self.controller.add_listener(lambda c: self.changes.append(c.shuffle_enabled))

    def tearDown(self):
        self.controller.context.teardown()

    def test_controls_disabled_during_shuffle(self):
        done = self.controller.press_shuffle()
        self.assertIsNotNone(done)
        self.assertFalse(self.controller.shuffle_enabled)
        self.assertFalse(self.controller.reset_enabled)
        self.assertIsNone(self.controller.press_shuffle())
        self.assertFalse(self.controller.press_reset())

        self.controller.run_until_idle(FRAME_MS)
        self.assertEqual(len(done.result()), 6)
        self.assertTrue(self.controller.shuffle_enabled)
        self.assertTrue(self.controller.reset_enabled)
        self.assertEqual(self.changes, [False, True])

    def test_reset_after_shuffle(self):
        self.controller.press_shuffle()
        self.controller.run_until_idle(FRAME_MS)
        self.assertTrue(self.controller.press_reset())
        cube = self.controller.cube
        self.assertTrue(cube.is_solved())
        self.assertTrue(all(c.is_home for c in cube.cubies))
        self.assertEqual(len(cube.get_history()), 0)

    def test_reset_ignored_mid_move(self):
        self.controller.perform("R")
        self.assertFalse(self.controller.press_reset())
        self.controller.run_until_idle(FRAME_MS)
        self.assertTrue(self.controller.press_reset())

    def test_bad_sequence_leaves_controls_enabled(self):
        with self.assertRaises(InvalidToken):
            self.controller.play("R X")
        self.assertTrue(self.controller.shuffle_enabled)
        self.assertTrue(self.controller.reset_enabled)
        self.assertEqual(self.changes, [])
        self.assertFalse(self.controller.shuffler.running)
        self.assertIsNotNone(self.controller.play(["R", "U"]))

    def test_negative_shuffle_leaves_controls_enabled(self):
        with self.assertRaises(ValueError):
            self.controller.press_shuffle(-1)
        self.assertTrue(self.controller.shuffle_enabled)
        self.assertTrue(self.controller.reset_enabled)
        self.assertTrue(self.controller.press_reset())

    def test_failed_move_ends_the_shuffle(self):
        animator = self.controller.animator
        original = animator.animate_move
        calls = []

        def flaky(move):
            calls.append(move)
            if len(calls) == 3:
                raise RuntimeError("scene went away")
            return original(move)

        animator.animate_move = flaky
        done = self.controller.press_shuffle()
        self.controller.run_until_idle(FRAME_MS)
        self.assertIsInstance(done.exception(), RuntimeError)
        self.assertFalse(self.controller.shuffler.running)
        self.assertEqual(self.controller.cube.phase, "manual")
        self.assertEqual(len(self.controller.cube.get_history()), 2)
        self.assertTrue(self.controller.shuffle_enabled)
        self.assertTrue(self.controller.press_reset())

    def test_run_until_idle_needs_manual_clock(self):
        context = SceneContext.create()
        controller = CubeController(context)
        with self.assertRaises(ValueError):
            controller.run_until_idle(FRAME_MS)
        context.teardown()


if __name__ == "__main__":
    unittest.main()
