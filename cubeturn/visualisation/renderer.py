'''
Author: Elia Savino
github: github.com/EliaSavino

Happy Hacking!

Descr: Draws the scene graph's boxes on a matplotlib 3D axis.

'''

from typing import List, Optional, Tuple

import numpy as np
import matplotlib.pyplot as plt
from mpl_toolkits.mplot3d.art3d import Poly3DCollection

from cubeturn.config import INNER, CubeConfig

# scene is y-up, matplotlib is z-up: (x, y, z) -> (x, -z, y)
_SCENE_TO_PLOT = np.array([[1, 0, 0], [0, 0, -1], [0, 1, 0]], dtype=float)


def _unit_cubie_quads(size: float = 1.0) -> List[np.ndarray]:
    """
    Axis-aligned box at the origin; returns 6 face quads (4x3 each) in box
    face order +x, -x, +y, -y, +z, -z.
    """
    s = size / 2.0
    quads = {
        'U': np.array([[-s, +s, +s], [+s, +s, +s], [+s, +s, -s], [-s, +s, -s]]),
        'D': np.array([[-s, -s, -s], [+s, -s, -s], [+s, -s, +s], [-s, -s, +s]]),
        'F': np.array([[-s, -s, +s], [+s, -s, +s], [+s, +s, +s], [-s, +s, +s]]),
        'B': np.array([[+s, -s, -s], [-s, -s, -s], [-s, +s, -s], [+s, +s, -s]]),
        'R': np.array([[+s, -s, +s], [+s, -s, -s], [+s, +s, -s], [+s, +s, +s]]),
        'L': np.array([[-s, -s, -s], [-s, -s, +s], [-s, +s, +s], [-s, +s, -s]]),
    }
    return [quads[k] for k in "RLUDFB"]


class MatplotlibRenderer:
    """
    Renders every box under a scene root as coloured quads.

    Args:
        config: Palette and geometry.
        ax: 3D axis to draw on; a new figure is created when omitted.
        draw_inner: Also draw the black inner faces.
        edgecolor: Outline colour of each quad.
    """

    def __init__(
        self,
        config: CubeConfig,
        ax: Optional[plt.Axes] = None,
        figsize: Tuple[int, int] = (6, 6),
        draw_inner: bool = False,
        edgecolor: str = "k",
    ):
        self.config = config
        self.draw_inner = draw_inner
        self.edgecolor = edgecolor
        if ax is None:
            self.fig = plt.figure(figsize=figsize, facecolor=config.background)
            ax = self.fig.add_subplot(111, projection="3d")
        else:
            self.fig = ax.figure
        self.ax = ax
        self._quads = _unit_cubie_quads(config.cubie_size)
        self.frames_drawn = 0

    def polygons(self, root) -> Tuple[List[np.ndarray], List[str]]:
        """World-space quads and their colours for every box under `root`."""
        polys, colors = [], []
        for box in root.iter_boxes():
            R, t = box.world_transform()
            for quad, sticker in zip(self._quads, box.stickers):
                if sticker == INNER and not self.draw_inner:
                    continue
                polys.append((quad @ R.T + t) @ _SCENE_TO_PLOT.T)
                colors.append(self.config.color_of(sticker))
        return polys, colors

    def draw(self, root) -> None:
        ax = self.ax
        ax.clear()
        ax.set_facecolor(self.config.background)
        ax.set_box_aspect([1, 1, 1])

        polys, colors = self.polygons(root)
        if polys:
            coll = Poly3DCollection(polys, facecolors=colors, edgecolors=self.edgecolor, linewidths=0.5)
            ax.add_collection3d(coll)

        lim = (self.config.half_extent + 0.5) * self.config.position_offset + 0.5
        ax.set_xlim(-lim, lim)
        ax.set_ylim(-lim, lim)
        ax.set_zlim(-lim, lim)
        ax.set_axis_off()
        self.frames_drawn += 1

    def close(self) -> None:
        plt.close(self.fig)
