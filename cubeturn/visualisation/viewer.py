'''
Author: Elia Savino
github: github.com/EliaSavino

Happy Hacking!

Descr: Shuffle/reset controls and the matplotlib window that drives the
frame loop.

'''
from __future__ import annotations

import logging
from concurrent.futures import Future
from typing import Callable, List, Optional

import matplotlib.pyplot as plt
from matplotlib.animation import FuncAnimation, FFMpegWriter, PillowWriter
from matplotlib.widgets import Button

from cubeturn.cube import CubeState
from cubeturn.moves import parse_sequence
from cubeturn.shuffle import ShuffleDriver
from cubeturn.visualisation.animator import RotationAnimator
from cubeturn.visualisation.renderer import MatplotlibRenderer
from cubeturn.visualisation.scene import ManualClock, SceneContext

logger = logging.getLogger(__name__)


class CubeController:
    """
    Wires cube, animator and shuffle driver to the two UI controls.

    Both controls are disabled from the moment a shuffle starts until its last
    move is committed; a reset pressed meanwhile is ignored. Listeners are
    called whenever the enabled state changes.
    """

    def __init__(self, context: SceneContext, seed: Optional[int] = None):
        self.context = context
        self.cube = CubeState(context.graph, context.config)
        self.animator = RotationAnimator(self.cube)
        self.shuffler = ShuffleDriver(self.animator, seed=seed)
        self.shuffle_enabled = True
        self.reset_enabled = True
        self._listeners: List[Callable[["CubeController"], None]] = []

    def add_listener(self, callback: Callable[["CubeController"], None]) -> None:
        self._listeners.append(callback)

    def _set_controls(self, enabled: bool) -> None:
        self.shuffle_enabled = enabled
        self.reset_enabled = enabled
        for cb in self._listeners:
            cb(self)

    def press_shuffle(self, n: Optional[int] = None) -> Optional[Future]:
        """Start a shuffle of `n` moves (config default); None when disabled."""
        if not self.shuffle_enabled or self.animator.busy:
            return None
        n = self.context.config.shuffle_moves if n is None else n
        if n < 0:
            raise ValueError(f"n must be >= 0, got {n}")
        self._set_controls(False)
        done = self.shuffler.shuffle(n)
        done.add_done_callback(lambda _f: self._set_controls(True))
        return done

    def press_reset(self) -> bool:
        """Rebuild the solved cube; False (and nothing happens) when disabled or mid-move."""
        if not self.reset_enabled or self.animator.busy:
            logger.debug("Reset ignored while a move is running")
            return False
        self.cube.reset()
        logger.info("Cube reset")
        return True

    def play(self, sequence) -> Optional[Future]:
        """Animate a fixed sequence with the controls disabled, like a shuffle."""
        if not self.shuffle_enabled or self.animator.busy:
            return None
        tokens = parse_sequence(sequence) if isinstance(sequence, str) else parse_sequence(" ".join(sequence))
        self._set_controls(False)
        done = self.shuffler.play(tokens)
        done.add_done_callback(lambda _f: self._set_controls(True))
        return done

    def perform(self, move: str) -> Future:
        """Animate a single move."""
        return self.animator.animate_move(move)

    @property
    def idle(self) -> bool:
        return not self.shuffler.running and not self.animator.busy

    def tick(self, now: Optional[float] = None) -> None:
        """One frame: run frame callbacks, then render."""
        self.context.loop.tick(now)
        self.context.graph.render()

    def run_until_idle(self, frame_ms: float, max_frames: int = 100_000) -> int:
        """
        Step a ManualClock-driven context until nothing is animating.

        Returns:
            Number of frames stepped.
        """
        clock = self._manual_clock()
        frames = 0
        while not self.idle:
            if frames >= max_frames:
                raise RuntimeError(f"still animating after {max_frames} frames")
            clock.advance(frame_ms)
            self.tick()
            frames += 1
        return frames

    def _manual_clock(self) -> ManualClock:
        clock = self.context.loop.clock
        if not isinstance(clock, ManualClock):
            raise ValueError("stepping frames by hand needs a SceneContext created with a ManualClock")
        return clock


class CubeViewer:
    """
    Matplotlib window: the cube on a 3D axis plus Shuffle and Reset buttons.

    A FuncAnimation calls the controller once per frame, which advances the
    frame loop and redraws the scene.
    """

    def __init__(self, controller: CubeController, figsize=(6, 6.5)):
        self.controller = controller
        config = controller.context.config
        self.fig = plt.figure(figsize=figsize, facecolor=config.background)
        self.ax = self.fig.add_axes([0.0, 0.1, 1.0, 0.9], projection="3d")
        self.renderer = MatplotlibRenderer(config, ax=self.ax)
        controller.context.graph.renderer = self.renderer

        self.shuffle_button = Button(self.fig.add_axes([0.22, 0.02, 0.25, 0.06]), "Shuffle")
        self.reset_button = Button(self.fig.add_axes([0.53, 0.02, 0.25, 0.06]), "Reset")
        self.shuffle_button.on_clicked(lambda _event: controller.press_shuffle())
        self.reset_button.on_clicked(lambda _event: controller.press_reset())
        controller.add_listener(self._sync_buttons)

        self._anim: Optional[FuncAnimation] = None
        controller.context.graph.render()

    def _sync_buttons(self, controller: CubeController) -> None:
        for button, enabled in ((self.shuffle_button, controller.shuffle_enabled),
                                (self.reset_button, controller.reset_enabled)):
            color = "0.85" if enabled else "0.5"
            button.color = color
            button.hovercolor = "0.95" if enabled else color
            button.ax.set_facecolor(color)

    def _draw_frame(self, frame_idx: int):
        self.controller.tick()
        return []

    def show(self) -> None:
        fps = self.controller.context.config.fps
        self._anim = FuncAnimation(
            self.fig,
            self._draw_frame,
            interval=1000 / fps,
            blit=False,
            cache_frame_data=False,
        )
        plt.show()

    def record(self, outfile: str, frames: int) -> str:
        """
        Save `frames` frames to a .gif or .mp4, with simulated frame time so the
        animation speed does not depend on how long encoding takes.
        """
        fps = self.controller.context.config.fps
        clock = self.controller._manual_clock()
        if outfile.endswith(".mp4"):
            if not FFMpegWriter.isAvailable():
                raise ValueError("ffmpeg is not available, record to a .gif instead")
            writer = FFMpegWriter(fps=fps, bitrate=4000)
        elif outfile.endswith(".gif"):
            writer = PillowWriter(fps=fps)
        else:
            raise ValueError("outfile must end with .mp4 or .gif")

        def step(frame_idx: int):
            clock.advance(1000 / fps)
            return self._draw_frame(frame_idx)

        anim = FuncAnimation(self.fig, step, frames=frames, interval=1000 / fps, blit=False, repeat=False)
        anim.save(outfile, writer=writer)
        logger.info("Saved %d frames to %s", frames, outfile)
        return outfile
