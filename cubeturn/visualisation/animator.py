'''
Author: Elia Savino
github: github.com/EliaSavino

Happy Hacking!

Descr: Rotation animator: tweens one layer turn frame by frame, then snaps the
moved cubies and commits the exact turn into the cube state.

'''
from __future__ import annotations

import logging
from concurrent.futures import Future
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, List, Optional, Union

import numpy as np

from cubeturn.cube import CubeState
from cubeturn.cubies import Cubie
from cubeturn.errors import AnimationInProgress
from cubeturn.moves import MoveDescriptor, resolve
from cubeturn.rotations import lattice_of, snap_position, snap_rotation

logger = logging.getLogger(__name__)


def ease_out(p: float) -> float:
    """Quadratic ease-out, monotonic on [0, 1] with ease(0)=0 and ease(1)=1."""
    return p * (2.0 - p)


class AnimatorState(Enum):
    IDLE = auto()
    ANIMATING = auto()
    COMMITTING = auto()


@dataclass
class _ActiveTurn:
    move: MoveDescriptor
    cubies: List[Cubie]
    pivot: object
    start: float
    done: Future
    last_angle: float = 0.0
    frames: int = field(default=0)


class RotationAnimator:
    """
    Animate one layer turn at a time on top of a scene adapter.

    Lifecycle of a move: IDLE -> ANIMATING -> COMMITTING -> IDLE.

    While animating, the layer's render handles are attached to a temporary
    pivot that is rotated by the *increment* since the previous frame. Once
    progress reaches 1 each handle is attached back to the cube group, its
    position is rounded onto the lattice and its rotation onto the nearest cube
    rotation; then the exact integer turn is committed into the CubeState.

    Parameters
    ----------
    cube : CubeState
        Model to commit into; must have been built with a scene.
    duration_ms : float, optional
        Animation length; defaults to ``cube.config.animation_ms``.
    ease : callable, optional
        Easing curve applied to progress before scaling to the target angle.
    """

    def __init__(
        self,
        cube: CubeState,
        duration_ms: Optional[float] = None,
        ease: Callable[[float], float] = ease_out,
    ):
        if cube.scene is None:
            raise ValueError("RotationAnimator needs a CubeState built on a scene")
        self.cube = cube
        self.scene = cube.scene
        self.duration_ms = cube.config.animation_ms if duration_ms is None else float(duration_ms)
        if self.duration_ms < 0:
            raise ValueError(f"duration_ms must be >= 0, got {self.duration_ms}")
        self.ease = ease
        self.state = AnimatorState.IDLE
        self._active: Optional[_ActiveTurn] = None

    @property
    def busy(self) -> bool:
        return self.state is not AnimatorState.IDLE

    def animate_move(self, move: Union[str, MoveDescriptor]) -> Future:
        """
        Start animating a move.

        Args:
            move: Token such as "R'" or an already resolved descriptor.

        Returns:
            Future resolved with the MoveDescriptor once the turn is committed.

        Raises:
            InvalidToken: bad token; nothing starts.
            AnimationInProgress: another move is still running.
        """
        desc = move if isinstance(move, MoveDescriptor) else resolve(move, self.cube.half_extent)
        if self.busy:
            raise AnimationInProgress(f"cannot start {desc.token!r}: animator is {self.state.name}")

        done: Future = Future()
        done.set_running_or_notify_cancel()
        cubies = self.cube.cubies_in_layer(desc.axis, desc.layer)
        if not cubies:
            logger.debug("Move %s selects no cubies, skipping", desc.token)
            done.set_result(desc)
            return done

        pivot = self.scene.create_group("pivot")
        self.scene.add(self.scene.root, pivot)
        for cubie in cubies:
            self.scene.attach(pivot, cubie.render_handle)

        self._active = _ActiveTurn(desc, cubies, pivot, start=self.scene.now(), done=done)
        self.state = AnimatorState.ANIMATING
        logger.debug("Animating %s (%d cubies, axis=%s, quarter_turns=%d)",
                     desc.token, len(cubies), desc.axis, desc.quarter_turns)
        self.scene.request_frame(self._on_frame)
        return done

    def progress(self, now: float) -> float:
        turn = self._active
        if turn is None:
            return 0.0
        if self.duration_ms == 0:
            return 1.0
        return float(np.clip((now - turn.start) / self.duration_ms, 0.0, 1.0))

    def _on_frame(self, now: float) -> None:
        turn = self._active
        if turn is None:
            return
        p = self.progress(now)
        angle = turn.move.angle * self.ease(p)
        delta = angle - turn.last_angle
        self.scene.rotate_on_world_axis(turn.pivot, turn.move.axis_vector, delta)
        turn.last_angle = angle
        turn.frames += 1

        if p < 1.0:
            self.scene.request_frame(self._on_frame)
        else:
            self._commit()

    def _commit(self) -> None:
        turn = self._active
        self.state = AnimatorState.COMMITTING
        spacing = self.cube.config.position_offset

        for cubie in turn.cubies:
            handle = cubie.render_handle
            self.scene.attach(self.cube.group, handle)
            rotation, position = self.scene.get_transform(handle)
            self.scene.set_transform(handle, snap_rotation(rotation), snap_position(position, spacing))

        self.cube.commit_turn(turn.cubies, turn.move.axis, turn.move.quarter_turns, turn.move.token)

        for cubie in turn.cubies:
            rotation, position = self.scene.get_transform(cubie.render_handle)
            on_slot = lattice_of(position, spacing) == cubie.lattice_coord
            if not on_slot or not np.array_equal(rotation, cubie.orientation):
                logger.warning("Snapped %r to %s but the model says %s; re-placing",
                               cubie, lattice_of(position, spacing), cubie.lattice_coord)
                self.cube.place_handle(cubie)

        self.scene.remove(self.scene.root, turn.pivot)
        self._active = None
        self.state = AnimatorState.IDLE
        logger.debug("Committed %s after %d frames", turn.move.token, turn.frames)
        turn.done.set_result(turn.move)
