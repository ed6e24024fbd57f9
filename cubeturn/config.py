'''
Author: Elia Savino
github: github.com/EliaSavino

Happy Hacking!

Descr: Cube geometry, animation and palette settings.

'''
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict


# Face ids: 0=U, 1=R, 2=F, 3=D, 4=L, 5=B
INNER = 6


def _default_face_colors() -> Dict[int, str]:
    return {
        0: "#ffffff",  # U white
        1: "#cc0000",  # R red
        2: "#0046ad",  # F blue
        3: "#ffd500",  # D yellow
        4: "#ff5800",  # L orange
        5: "#009b48",  # B green
    }


@dataclass
class CubeConfig:
    """
    Settings shared by the cube model, the animator and the viewer.

    Geometry is expressed in scene units: a cubie is `cubie_size` wide and
    neighbouring cubies are `cubie_gap` apart, so lattice coordinate k sits at
    k * position_offset along each axis.
    """

    dimension: int = 3
    # Cubies per edge. Must be odd so that a face layer sits at +-dimension//2.

    cubie_size: float = 1.0
    # Edge length of a single cubie box.

    cubie_gap: float = 0.05
    # Spacing between neighbouring cubies.

    omit_core: bool = True
    # Skip the invisible centre cubie (26 cubies instead of 27 for a 3x3x3).

    animation_ms: float = 200.0
    # Duration of a single move animation, quarter or half turn alike.

    shuffle_moves: int = 15
    # Moves issued by the shuffle control.

    fps: int = 60
    # Target frame rate for the viewer and for recordings.

    face_colors: Dict[int, str] = field(default_factory=_default_face_colors)
    # Sticker colour per face id.

    inner_color: str = "#000000"
    # Colour of the hidden box faces.

    background: str = "#121212"
    # Figure/axes background.

    @property
    def half_extent(self) -> int:
        """Largest lattice coordinate, i.e. the layer value of an outer face."""
        return self.dimension // 2

    @property
    def position_offset(self) -> float:
        """Distance between neighbouring lattice points in scene units."""
        return self.cubie_size + self.cubie_gap

    def color_of(self, sticker: int) -> str:
        if sticker == INNER:
            return self.inner_color
        return self.face_colors[sticker]

    def validate(self) -> "CubeConfig":
        if self.dimension < 3 or self.dimension % 2 == 0:
            raise ValueError(f"dimension must be an odd number >= 3, got {self.dimension}")
        if self.cubie_size <= 0:
            raise ValueError(f"cubie_size must be > 0, got {self.cubie_size}")
        if self.cubie_gap < 0:
            raise ValueError(f"cubie_gap must be >= 0, got {self.cubie_gap}")
        if self.animation_ms < 0:
            raise ValueError(f"animation_ms must be >= 0, got {self.animation_ms}")
        if self.shuffle_moves < 0:
            raise ValueError(f"shuffle_moves must be >= 0, got {self.shuffle_moves}")
        if self.fps <= 0:
            raise ValueError(f"fps must be > 0, got {self.fps}")
        missing = set(range(6)) - set(self.face_colors)
        if missing:
            raise ValueError(f"face_colors is missing face ids {sorted(missing)}")
        return self
