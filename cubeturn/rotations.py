'''
Author: Elia Savino
github: github.com/EliaSavino

Happy Hacking!

Descr: Discrete rotation group of the cube and the snapping helpers used
after an animated turn.

'''
from __future__ import annotations

from typing import Sequence, Tuple, Union

import numpy as np
from scipy.spatial.transform import Rotation

AXES = ("x", "y", "z")
AXIS_INDEX = {"x": 0, "y": 1, "z": 2}
AXIS_VECTORS = {
    "x": np.array([1, 0, 0]),
    "y": np.array([0, 1, 0]),
    "z": np.array([0, 0, 1]),
}

# +90 deg about each axis, right-handed
_QUARTER_TURNS = {
    "x": np.array([[1, 0, 0], [0, 0, -1], [0, 1, 0]], dtype=np.int64),
    "y": np.array([[0, 0, 1], [0, 1, 0], [-1, 0, 0]], dtype=np.int64),
    "z": np.array([[0, -1, 0], [1, 0, 0], [0, 0, 1]], dtype=np.int64),
}

# the 24 proper rotations of the cube (octahedral group)
CUBE_GROUP = Rotation.create_group("O")
CUBE_ROTATIONS = np.rint(CUBE_GROUP.as_matrix()).astype(np.int64)

IDENTITY = np.eye(3, dtype=np.int64)

Vector = Union[Sequence[float], np.ndarray]


def quarter_turn(axis: str, quarter_turns: int) -> np.ndarray:
    """
    Exact integer matrix for `quarter_turns` * 90 deg about a lattice axis.

    Args:
        axis: One of "x", "y", "z".
        quarter_turns: Signed number of quarter turns (right-hand rule).

    Returns:
        3x3 int64 matrix.
    """
    return np.linalg.matrix_power(_QUARTER_TURNS[axis], quarter_turns % 4)


def rotate_coord(coord: Tuple[int, int, int], axis: str, quarter_turns: int) -> Tuple[int, int, int]:
    x, y, z = quarter_turn(axis, quarter_turns) @ np.asarray(coord, dtype=np.int64)
    return int(x), int(y), int(z)


def rotation_about(axis: Union[str, Vector], angle: float) -> np.ndarray:
    """Float rotation matrix for `angle` radians about `axis` (name or unit vector)."""
    vec = AXIS_VECTORS[axis] if isinstance(axis, str) else np.asarray(axis, dtype=float)
    norm = np.linalg.norm(vec)
    if norm == 0:
        raise ValueError("rotation axis must be non-zero")
    return Rotation.from_rotvec(vec / norm * angle).as_matrix()


def is_cube_rotation(matrix: np.ndarray) -> bool:
    m = np.asarray(matrix)
    return any(np.array_equal(m, g) for g in CUBE_ROTATIONS)


def snap_rotation(matrix: np.ndarray) -> np.ndarray:
    """
    Return the cube rotation closest to a (drifted) rotation matrix.

    Rounding Euler angles one by one goes wrong near gimbal lock, where the
    first and third angle are only defined up to their sum, so the distance is
    measured on the whole rotation instead.

    Args:
        matrix: 3x3 rotation matrix, possibly off by floating point drift.

    Returns:
        Exact integer 3x3 matrix, one of CUBE_ROTATIONS.
    """
    r = Rotation.from_matrix(np.asarray(matrix, dtype=float))
    idx = int(np.argmin((CUBE_GROUP * r.inv()).magnitude()))
    return CUBE_ROTATIONS[idx].copy()


def snap_position(position: Vector, spacing: float) -> np.ndarray:
    """Round each coordinate to the nearest multiple of the lattice spacing."""
    return np.rint(np.asarray(position, dtype=float) / spacing) * spacing


def lattice_of(position: Vector, spacing: float) -> Tuple[int, int, int]:
    x, y, z = np.rint(np.asarray(position, dtype=float) / spacing).astype(int)
    return int(x), int(y), int(z)


def euler_degrees(matrix: np.ndarray, seq: str = "xyz") -> np.ndarray:
    """Euler angles (degrees) of a rotation matrix, for inspection and tests."""
    return Rotation.from_matrix(np.asarray(matrix, dtype=float)).as_euler(seq, degrees=True)
