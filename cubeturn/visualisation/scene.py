'''
Author: Elia Savino
github: github.com/EliaSavino

Happy Hacking!

Descr: Scene adapter used by the move engine: a small numpy scene graph,
a frame-callback loop and the context object bundling them.

'''
from __future__ import annotations

import logging
import time
from typing import Any, Callable, Iterator, List, Optional, Protocol, Sequence, Tuple, runtime_checkable

import numpy as np

from cubeturn.config import CubeConfig
from cubeturn.rotations import rotation_about

logger = logging.getLogger(__name__)

FrameCallback = Callable[[float], None]


@runtime_checkable
class SceneAdapter(Protocol):
    """
    Everything the engine needs from a rendering library.

    Contract of `attach`: the object changes parent but its world transform
    (position and rotation) stays exactly what it was. `root` is the top-level
    group temporary pivots are added to.
    """

    root: Any

    def create_group(self, name: str = "") -> Any: ...

    def create_box(self, stickers: Sequence[int], name: str = "") -> Any: ...

    def add(self, parent: Any, obj: Any) -> None: ...

    def remove(self, parent: Any, obj: Any) -> None: ...

    def attach(self, parent: Any, obj: Any) -> None: ...

    def rotate_on_world_axis(self, obj: Any, axis: np.ndarray, angle: float) -> None: ...

    def get_transform(self, obj: Any) -> Tuple[np.ndarray, np.ndarray]: ...

    def set_transform(self, obj: Any, rotation: np.ndarray, position: np.ndarray) -> None: ...

    def request_frame(self, callback: FrameCallback) -> None: ...

    def now(self) -> float: ...

    def render(self) -> None: ...


class SceneNode:
    """
    Node of the scene graph: a local rigid transform plus children.

    Boxes carry `stickers` (six colour ids, +x -x +y -y +z -z); groups have
    `stickers is None`.
    """

    def __init__(self, name: str = "", stickers: Optional[Sequence[int]] = None):
        self.name = name
        self.stickers = tuple(stickers) if stickers is not None else None
        self.position = np.zeros(3)
        self.rotation = np.eye(3)
        self.parent: Optional[SceneNode] = None
        self.children: List[SceneNode] = []

    @property
    def is_box(self) -> bool:
        return self.stickers is not None

    def world_transform(self) -> Tuple[np.ndarray, np.ndarray]:
        """(R, t) mapping local coordinates of this node to world coordinates."""
        if self.parent is None:
            return self.rotation.copy(), self.position.copy()
        Rp, tp = self.parent.world_transform()
        return Rp @ self.rotation, Rp @ self.position + tp

    def iter_boxes(self) -> Iterator["SceneNode"]:
        if self.is_box:
            yield self
        for child in self.children:
            yield from child.iter_boxes()

    def __repr__(self) -> str:
        kind = "Box" if self.is_box else "Group"
        return f"{kind}({self.name!r}, children={len(self.children)})"


class ManualClock:
    """Millisecond clock advanced by hand; used for recordings and tests."""

    def __init__(self, start: float = 0.0):
        self.t = float(start)

    def advance(self, ms: float) -> float:
        self.t += ms
        return self.t

    def __call__(self) -> float:
        return self.t


def _perf_ms() -> float:
    return time.perf_counter() * 1000.0


class FrameLoop:
    """
    requestAnimationFrame-style scheduler.

    Callbacks requested now run on the next `tick`, each called once with the
    frame timestamp in milliseconds. Callbacks requested during a tick wait for
    the following one.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self._clock = clock or _perf_ms
        self._pending: List[FrameCallback] = []

    @property
    def clock(self) -> Callable[[], float]:
        return self._clock

    def now(self) -> float:
        return float(self._clock())

    def request_frame(self, callback: FrameCallback) -> None:
        self._pending.append(callback)

    @property
    def pending(self) -> int:
        return len(self._pending)

    def tick(self, now: Optional[float] = None) -> int:
        """Run the callbacks queued so far; returns how many ran."""
        callbacks, self._pending = self._pending, []
        stamp = self.now() if now is None else float(now)
        for cb in callbacks:
            cb(stamp)
        return len(callbacks)

    def clear(self) -> None:
        self._pending.clear()


class SceneGraph(SceneAdapter):
    """
    Minimal scene graph implementing SceneAdapter with numpy transforms.

    Args:
        loop: Frame loop used for `request_frame` and `now`.
        renderer: Optional object with `draw(root)`; `render()` is a no-op
            without one, which is how the engine runs headless.
    """

    def __init__(self, loop: Optional[FrameLoop] = None, renderer: Any = None):
        self.loop = loop or FrameLoop()
        self.renderer = renderer
        self.root = SceneNode("scene")

    def create_group(self, name: str = "") -> SceneNode:
        return SceneNode(name)

    def create_box(self, stickers: Sequence[int], name: str = "") -> SceneNode:
        if len(stickers) != 6:
            raise ValueError(f"a box needs 6 face materials, got {len(stickers)}")
        return SceneNode(name, stickers=stickers)

    def add(self, parent: SceneNode, obj: SceneNode) -> None:
        """Re-parent keeping the local transform (world transform may change)."""
        if obj.parent is not None:
            obj.parent.children.remove(obj)
        obj.parent = parent
        parent.children.append(obj)

    def remove(self, parent: SceneNode, obj: SceneNode) -> None:
        if obj in parent.children:
            parent.children.remove(obj)
            obj.parent = None

    def attach(self, parent: SceneNode, obj: SceneNode) -> None:
        """Re-parent keeping the world transform."""
        Rw, tw = obj.world_transform()
        Rp, tp = parent.world_transform()
        obj.rotation = Rp.T @ Rw
        obj.position = Rp.T @ (tw - tp)
        self.add(parent, obj)

    def rotate_on_world_axis(self, obj: SceneNode, axis: np.ndarray, angle: float) -> None:
        """Rotate `obj` about its own origin by `angle` around a world-space axis."""
        local_axis = np.asarray(axis, dtype=float)
        if obj.parent is not None:
            Rp, _ = obj.parent.world_transform()
            local_axis = Rp.T @ local_axis
        obj.rotation = rotation_about(local_axis, angle) @ obj.rotation

    def get_transform(self, obj: SceneNode) -> Tuple[np.ndarray, np.ndarray]:
        """Local (rotation, position) of `obj` relative to its parent."""
        return obj.rotation.copy(), obj.position.copy()

    def set_transform(self, obj: SceneNode, rotation: np.ndarray, position: np.ndarray) -> None:
        obj.rotation = np.asarray(rotation, dtype=float).copy()
        obj.position = np.asarray(position, dtype=float).copy()

    def request_frame(self, callback: FrameCallback) -> None:
        self.loop.request_frame(callback)

    def now(self) -> float:
        return self.loop.now()

    def render(self) -> None:
        if self.renderer is not None:
            self.renderer.draw(self.root)

    def clear(self) -> None:
        for child in list(self.root.children):
            self.remove(self.root, child)


class SceneContext:
    """
    Owns the scene graph, the frame loop and the renderer.

    Use `SceneContext.create(...)` and hand the context to the engine instead
    of keeping scene/renderer state in module globals; `teardown()` drops the
    scene and any pending frame callbacks.
    """

    def __init__(self, graph: SceneGraph, config: CubeConfig):
        self.graph = graph
        self.config = config
        self.alive = True

    @classmethod
    def create(
        cls,
        config: Optional[CubeConfig] = None,
        clock: Optional[Callable[[], float]] = None,
        renderer: Any = None,
    ) -> "SceneContext":
        config = (config or CubeConfig()).validate()
        graph = SceneGraph(loop=FrameLoop(clock), renderer=renderer)
        logger.debug("Scene context created (renderer=%s)", type(renderer).__name__ if renderer else None)
        return cls(graph, config)

    @property
    def loop(self) -> FrameLoop:
        return self.graph.loop

    def teardown(self) -> None:
        if not self.alive:
            return
        self.graph.loop.clear()
        self.graph.clear()
        close = getattr(self.graph.renderer, "close", None)
        if callable(close):
            close()
        self.alive = False
        logger.debug("Scene context torn down")
