"""
Author: Elia Savino
github: github.com/EliaSavino

Happy Hacking!

Descr: Cube state: the explicit lattice model every move is committed into.

"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from functools import wraps
from itertools import product
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from cubeturn.config import CubeConfig
from cubeturn.cubies import Coord, Cubie, FACE_NAMES, home_stickers
from cubeturn.moves import MoveDescriptor, resolve
from cubeturn.rotations import AXES, AXIS_INDEX, is_cube_rotation

logger = logging.getLogger(__name__)

HISTORY_COLUMNS = ["step", "move", "axis", "quarter_turns", "n_cubies", "phase"]


def track_history(method: Callable[..., Any]) -> Callable[..., Any]:
    """
    Decorator for CubeState.commit_turn: records every committed turn unless
    history is disabled. Phase is taken from `self.phase` ("manual"/"shuffle").
    """
    @wraps(method)
    def wrapper(self, cubies, axis: str, quarter_turns: int, move: Optional[str] = None) -> Any:
        # state change first
        result = method(self, cubies, axis, quarter_turns, move)

        if self._history_enabled:
            self._history.append({
                "step": len(self._history),
                "move": move,
                "axis": axis,
                "quarter_turns": int(quarter_turns),
                "n_cubies": len(cubies),
                "phase": self.phase,
            })
        return result
    return wrapper


class CubeState:
    """
    Owner of every cubie and the single source of truth for the cube layout.

    Layer membership is answered from the integer `lattice_coord` of each
    cubie, never from render positions. A turn is committed as an exact
    quarter-turn matrix applied to coordinates and orientations, so any number
    of moves leaves the lattice intact.

    Attributes
    ----------
    cubies : list[Cubie]
        All cubies, in build order.
    group :
        Scene group holding the render handles (None when headless).

    Key methods
    ------------
    build() / reset()
        (Re)create the solved cube.
    cubies_in_layer(axis, layer)
        Cubies whose coordinate along `axis` equals `layer`.
    commit_turn(cubies, axis, quarter_turns)
        Integer update after a turn.
    apply_move(token)
        Instant, non-animated move.
    to_facelets(), print_net(), is_solved()
        Derived views.

    Notes
    -----
    Axes: +x = R, +y = U, +z = F. Face ids 0=U, 1=R, 2=F, 3=D, 4=L, 5=B.

    Example
    -------
        cube = CubeState()
        cube.apply_move("R")
        cube.print_net()
    """

    def __init__(self, scene: Any = None, config: Optional[CubeConfig] = None, parent: Any = None):
        self.config = (config or CubeConfig()).validate()
        self.scene = scene
        self.parent = parent if parent is not None or scene is None else getattr(scene, "root", None)
        self.group: Any = None
        self.cubies: List[Cubie] = []

        self._history: List[Dict[str, Any]] = []
        self._history_enabled = True
        self.phase = "manual"

        self.build()

    # ---------- lifecycle ----------
    @property
    def half_extent(self) -> int:
        return self.config.half_extent

    def lattice(self) -> List[Coord]:
        """Every slot of the cube, minus the core when it is omitted."""
        h = self.half_extent
        coords = [c for c in product(range(-h, h + 1), repeat=3)]
        if self.config.omit_core:
            coords.remove((0, 0, 0))
        return coords

    def build(self) -> None:
        """Create all cubies at their home slot with identity orientation, dropping the old ones."""
        if self.scene is not None and self.group is not None:
            self.scene.remove(self.parent, self.group)

        self.cubies = [
            Cubie(home_coord=c, lattice_coord=c, stickers=home_stickers(c, self.half_extent))
            for c in self.lattice()
        ]

        if self.scene is not None:
            self.group = self.scene.create_group("cube")
            for cubie in self.cubies:
                cubie.render_handle = self.scene.create_box(cubie.stickers, name=f"cubie{cubie.home_coord}")
                self.place_handle(cubie)
                self.scene.add(self.group, cubie.render_handle)
            self.scene.add(self.parent, self.group)

        logger.info("Built %dx%dx%d cube with %d cubies",
                    self.config.dimension, self.config.dimension, self.config.dimension, len(self.cubies))

    def reset(self) -> None:
        """Rebuild the solved cube and forget the move history."""
        self.build()
        self.clear_history()

    # ---------- queries ----------
    def cubies_in_layer(self, axis: str, layer: int) -> List[Cubie]:
        """
        Cubies whose lattice coordinate along `axis` equals `layer`.

        Returns an empty list for a layer outside [-h, h].
        """
        i = AXIS_INDEX[axis]
        return [c for c in self.cubies if c.lattice_coord[i] == layer]

    def world_position(self, cubie: Cubie) -> np.ndarray:
        return cubie.world_position(self.config.position_offset)

    def cubie_at(self, coord: Coord) -> Optional[Cubie]:
        for c in self.cubies:
            if c.lattice_coord == tuple(coord):
                return c
        return None

    def snapshot(self) -> Tuple[Tuple[Coord, Coord, Tuple[int, ...]], ...]:
        """Hashable state: (home, current slot, flattened orientation) per cubie."""
        return tuple(sorted(
            (c.home_coord, c.lattice_coord, tuple(int(v) for v in c.orientation.ravel()))
            for c in self.cubies
        ))

    # ---------- mutation ----------
    @track_history
    def commit_turn(self, cubies: Sequence[Cubie], axis: str, quarter_turns: int,
                    move: Optional[str] = None) -> None:
        """
        Re-seat `cubies` after a turn of `quarter_turns` about `axis`.

        Pure integer update: coordinates are rotated by the exact quarter-turn
        matrix and orientations are composed with it. Render handles are not
        touched.

        Args:
            cubies: The cubies of the turned layer.
            axis: "x", "y" or "z".
            quarter_turns: Signed quarter turns, right-hand rule about +axis.
            move: Token the turn came from, for the history.
        """
        if axis not in AXES:
            raise ValueError(f"axis must be one of {AXES}, got {axis!r}")
        for cubie in cubies:
            cubie.turn(axis, quarter_turns)

    def apply_move(self, move: str | MoveDescriptor) -> MoveDescriptor:
        """
        Apply a move instantly (no animation) and place the render handles.

        Raises:
            InvalidToken: before anything is changed.
        """
        desc = move if isinstance(move, MoveDescriptor) else resolve(move, self.half_extent)
        layer = self.cubies_in_layer(desc.axis, desc.layer)
        if not layer:
            return desc
        self.commit_turn(layer, desc.axis, desc.quarter_turns, desc.token)
        for cubie in layer:
            self.place_handle(cubie)
        return desc

    def apply_sequence(self, moves: Sequence[str]) -> None:
        for m in moves:
            self.apply_move(m)

    def place_handle(self, cubie: Cubie) -> None:
        """Put the render handle exactly at the cubie's lattice transform."""
        if self.scene is None or cubie.render_handle is None:
            return
        self.scene.set_transform(cubie.render_handle, cubie.orientation, self.world_position(cubie))

    # ---------- history ----------
    @contextmanager
    def history_phase(self, phase: str):
        """
        Temporarily set the history 'phase' for recorded moves ('manual' or 'shuffle').
        Usage:
            with cube.history_phase('shuffle'):
                cube.apply_move('R'); cube.apply_move("U'")
        """
        prev = self.phase
        self.phase = phase
        try:
            yield
        finally:
            self.phase = prev

    @contextmanager
    def no_history(self):
        """Temporarily disable history recording."""
        prev = self._history_enabled
        self._history_enabled = False
        try:
            yield
        finally:
            self._history_enabled = prev

    def clear_history(self) -> None:
        self._history = []

    def get_history(self) -> pd.DataFrame:
        """
        Return the committed turns as a DataFrame.

        Columns:
            step (int)           : 0-based turn index
            move (str)           : token, e.g. "R'" (None when committed without one)
            axis (str)           : 'x', 'y' or 'z'
            quarter_turns (int)  : signed quarter turns
            n_cubies (int)       : cubies in the turned layer
            phase (str)          : 'manual' or 'shuffle'
        """
        return pd.DataFrame(self._history, columns=HISTORY_COLUMNS)

    # ---------- views ----------
    def facelet_index(self, face: int, coord: Coord) -> Tuple[int, int]:
        """(row, col) of the sticker of the cubie at `coord` on `face`, seen from outside."""
        h = self.half_extent
        x, y, z = coord
        if face == 0:    # U, F edge at the bottom
            return z + h, x + h
        if face == 1:    # R
            return h - y, h - z
        if face == 2:    # F
            return h - y, x + h
        if face == 3:    # D, F edge at the top
            return h - z, x + h
        if face == 4:    # L
            return h - y, z + h
        return h - y, h - x  # B, mirrored on x

    def to_facelets(self) -> np.ndarray:
        """
        Sticker colours as a 6xNxN array (face order U, R, F, D, L, B).

        Built from lattice coordinates and orientations only.
        """
        n = self.config.dimension
        F = np.full((6, n, n), -1, dtype=int)
        for cubie in self.cubies:
            for face, coord, color in cubie.sticker_placements():
                r, c = self.facelet_index(face, coord)
                F[face, r, c] = color
        return F

    def is_solved(self) -> bool:
        F = self.to_facelets()
        return bool(np.all(F == np.arange(6)[:, None, None]))

    def print_net(self, use_color: bool = True) -> None:
        """
        Print a compact text-based cube net to the terminal.

              [U]
        [L] [F] [R] [B]
              [D]
        """
        F = self.to_facelets()
        layout = {
            0: (0, 1),
            4: (1, 0),
            2: (1, 1),
            1: (1, 2),
            5: (1, 3),
            3: (2, 1),
        }
        COLOR_CODES = {
            0: "\033[97m",
            1: "\033[91m",
            2: "\033[94m",
            3: "\033[93m",
            4: "\033[95m",
            5: "\033[92m",
        }
        RESET = "\033[0m"

        scale = self.config.dimension
        grid = [[" " for _ in range(4 * scale)] for _ in range(3 * scale)]
        for face_id, (rt, ct) in layout.items():
            for r in range(scale):
                for c in range(scale):
                    val = int(F[face_id, r, c])
                    label = FACE_NAMES[val]
                    grid[rt * scale + r][ct * scale + c] = (
                        f"{COLOR_CODES[val]}{label}{RESET}" if use_color else label
                    )

        for row in grid:
            print(" ".join(row))

    # quick sanity
    def assert_invariants(self) -> None:
        """
        Verify lattice closure and orientation validity.

        Raises:
            AssertionError: if a slot is duplicated or missing, or an
                            orientation is not one of the 24 cube rotations.
        """
        coords = sorted(c.lattice_coord for c in self.cubies)
        assert coords == sorted(self.lattice()), "lattice closure violated"
        bad = [c for c in self.cubies if not is_cube_rotation(c.orientation)]
        assert not bad, bad
