'''
Author: Elia Savino
github: github.com/EliaSavino

Happy Hacking!

Descr: Cubie dataclass and the face/sticker tables it relies on.

'''

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Tuple

import numpy as np

from cubeturn.config import INNER
from cubeturn.rotations import AXIS_INDEX, IDENTITY, quarter_turn

Coord = Tuple[int, int, int]

# Face ids: 0=U, 1=R, 2=F, 3=D, 4=L, 5=B
FACE_NAMES = "URFDLB"

# Box face order used by the renderer: +x, -x, +y, -y, +z, -z
BOX_FACE_NORMALS: Tuple[Coord, ...] = (
    (1, 0, 0),
    (-1, 0, 0),
    (0, 1, 0),
    (0, -1, 0),
    (0, 0, 1),
    (0, 0, -1),
)

# outward normal -> face id
NORMAL2FACE: Dict[Coord, int] = {
    (0, 1, 0): 0,
    (1, 0, 0): 1,
    (0, 0, 1): 2,
    (0, -1, 0): 3,
    (-1, 0, 0): 4,
    (0, 0, -1): 5,
}

_KIND_BY_STICKERS = {0: "Core", 1: "Center", 2: "Edge", 3: "Corner"}


def home_stickers(coord: Coord, half_extent: int) -> Tuple[int, ...]:
    """
    Sticker colours of the cubie built at `coord`, in BOX_FACE_NORMALS order.

    A box face gets its face colour when it points out of the cube from the
    home slot, and the inner colour otherwise.
    """
    stickers = []
    for normal in BOX_FACE_NORMALS:
        axis = int(np.flatnonzero(normal)[0])
        outward = coord[axis] * normal[axis] == half_extent
        stickers.append(NORMAL2FACE[normal] if outward else INNER)
    return tuple(stickers)


@dataclass(eq=False)
class Cubie:
    """
    A single cubie of the puzzle.

    Its logical state is integer only:
        - `lattice_coord`: the slot it currently occupies, in [-h, h]^3
        - `orientation`: accumulated turns as an exact 3x3 integer rotation,
          always one of the 24 cube rotations
    `home_coord` and `stickers` never change after the cube is built.
    `render_handle` is the scene node that draws this cubie; the model never
    reads logical state back from it.
    """
    home_coord: Coord
    lattice_coord: Coord
    stickers: Tuple[int, ...]
    orientation: np.ndarray = field(default_factory=IDENTITY.copy)
    render_handle: Any = None

    @property
    def kind(self) -> str:
        n = sum(1 for s in self.stickers if s != INNER)
        return _KIND_BY_STICKERS.get(n, "Cubie")

    @property
    def is_home(self) -> bool:
        return self.lattice_coord == self.home_coord and np.array_equal(self.orientation, IDENTITY)

    def coord_along(self, axis: str) -> int:
        return self.lattice_coord[AXIS_INDEX[axis]]

    def turn(self, axis: str, quarter_turns: int) -> None:
        """
        Re-seat this cubie after a layer turn and compose its orientation.

        Args:
            axis: Turn axis ("x", "y" or "z").
            quarter_turns: Signed quarter turns, right-hand rule about +axis.
        """
        q = quarter_turn(axis, quarter_turns)
        x, y, z = q @ np.asarray(self.lattice_coord, dtype=np.int64)
        self.lattice_coord = (int(x), int(y), int(z))
        self.orientation = q @ self.orientation

    def world_position(self, spacing: float) -> np.ndarray:
        return np.asarray(self.lattice_coord, dtype=float) * spacing

    def sticker_placements(self) -> Iterator[Tuple[int, Coord, int]]:
        """
        Yield where each visible sticker of this cubie currently points.

        Yields:
            (face_id, lattice_coord, color): the face the sticker lies on,
            the cubie slot, and the sticker colour.
        """
        for normal, color in zip(BOX_FACE_NORMALS, self.stickers):
            if color == INNER:
                continue
            nx, ny, nz = self.orientation @ np.asarray(normal, dtype=np.int64)
            yield NORMAL2FACE[(int(nx), int(ny), int(nz))], self.lattice_coord, color

    def __repr__(self) -> str:
        return f"{self.kind}: home={self.home_coord} at={self.lattice_coord} ori={self.orientation.tolist()}"
