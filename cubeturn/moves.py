'''
Author: Elia Savino
github: github.com/EliaSavino

Happy Hacking!

Descr: Move notation: token -> (axis, layer, signed quarter turns).

'''
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Tuple

import numpy as np

from cubeturn.errors import InvalidToken
from cubeturn.rotations import AXIS_VECTORS

FACES = "UDLRFB"
MODIFIERS = ("", "'", "2")
MOVES = [f + m for f in FACES for m in MODIFIERS]

# face -> (axis, side of the layer, base direction)
# The base direction makes every plain turn clockwise when looking at the face
# from outside the cube.
FACE_TABLE: Dict[str, Tuple[str, int, int]] = {
    "U": ("y", +1, -1),
    "D": ("y", -1, +1),
    "R": ("x", +1, -1),
    "L": ("x", -1, +1),
    "F": ("z", +1, -1),
    "B": ("z", -1, +1),
}


@dataclass(frozen=True)
class MoveDescriptor:
    """
    Resolved move.

    Attributes
    ----------
    token : str
        The notation it came from, e.g. "R'".
    axis : str
        Turn axis, "x", "y" or "z".
    layer : int
        Lattice coordinate along `axis` selecting the turning cubies.
    quarter_turns : int
        Signed quarter turns about +axis (right-hand rule), in {-2, -1, 1, 2}.
    """
    token: str
    axis: str
    layer: int
    quarter_turns: int

    @property
    def axis_vector(self) -> np.ndarray:
        return AXIS_VECTORS[self.axis].astype(float)

    @property
    def angle(self) -> float:
        """Total turn angle in radians."""
        return self.quarter_turns * math.pi / 2


def resolve(token: str, half_extent: int = 1) -> MoveDescriptor:
    """
    Parse a move token.

    Args:
        token: Face letter in "UDLRFB", optionally followed by "'" (inverse)
            or "2" (half turn).
        half_extent: Layer value of an outer face (dimension // 2).

    Returns:
        The matching MoveDescriptor.

    Raises:
        InvalidToken: unknown face letter, unknown modifier, or wrong length.
    """
    if not isinstance(token, str) or not 1 <= len(token) <= 2:
        raise InvalidToken(token, "move must be a face letter plus an optional modifier")
    face, modifier = token[0], token[1:]
    if face not in FACE_TABLE:
        raise InvalidToken(token, "unknown face")
    if modifier not in MODIFIERS:
        raise InvalidToken(token, "unknown modifier")

    axis, side, direction = FACE_TABLE[face]
    if modifier == "'":
        direction = -direction
    elif modifier == "2":
        direction *= 2
    return MoveDescriptor(token=token, axis=axis, layer=side * half_extent, quarter_turns=direction)


def parse_sequence(sequence: str) -> List[str]:
    """
    Split a whitespace separated sequence ("R U R' U'") into validated tokens.

    Raises:
        InvalidToken: on the first bad token; nothing is returned in that case.
    """
    tokens = sequence.split()
    for tok in tokens:
        resolve(tok)
    return tokens


def invert_move(token: str) -> str:
    """Inverse token: R -> R', R' -> R, R2 -> R2."""
    resolve(token)
    face, modifier = token[0], token[1:]
    if modifier == "'":
        return face
    if modifier == "2":
        return token
    return face + "'"
