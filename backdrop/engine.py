"""Surface controllers driving the two background styles.

A controller binds to a render target, owns the surface size and the
population, receives the pointer events and produces one :class:`Frame` per
:meth:`tick`. Both styles share the same life cycle::

    uninitialized --initialize()--> running --destroy()--> destroyed
          \\--(target missing)--> inert

``resize`` never touches the population directly. The new size is stored
and applied, together with a full repopulation, at the start of the next
tick so a frame is never computed with a half replaced particle set.
"""

from __future__ import annotations

import random
import sys
from typing import Callable, List, Mapping, Optional, Sequence, Tuple

from .control.config import merge_config
from .particles import Link, Particle, PointerState, build_links, spawn_particles, step_particle
from .render import Frame, render_network, render_shapes
from .shapes import Shape, advance_shape, spawn_shapes

__all__ = [
    "UNINITIALIZED",
    "RUNNING",
    "INERT",
    "DESTROYED",
    "SurfaceController",
    "ParticleNetwork",
    "GeometricBackground",
    "create_background",
]

UNINITIALIZED = "uninitialized"
RUNNING = "running"
INERT = "inert"
DESTROYED = "destroyed"

TargetResolver = Callable[[str], Optional[object]]


def _debug(message: str) -> None:
    print(f"[Backdrop][DEBUG] {message}", flush=True)


def _warn(message: str) -> None:
    print(f"[Backdrop][WARN] {message}", file=sys.stderr)


class SurfaceController:
    """Life cycle shared by the particle network and the shapes background.

    Subclasses implement :meth:`_populate`, :meth:`_advance` and
    :meth:`_render`.
    """

    def __init__(
        self,
        config: Optional[Mapping[str, object]] = None,
        *,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.config = merge_config(None, config)
        self.rng = rng or random.Random()
        self.state = UNINITIALIZED
        self.width = 0
        self.height = 0
        self.visible = True
        self.target: Optional[object] = None
        self.surface_id: Optional[str] = None
        self._scheduler: Optional[object] = None
        self._pending_size: Optional[Tuple[int, int]] = None
        self._dark_source: Callable[[], bool] = lambda: False
        self.last_frame: Optional[Frame] = None

    # ------------------------------------------------------------------ state
    @property
    def running(self) -> bool:
        return self.state == RUNNING

    @property
    def narrow(self) -> bool:
        return self.width < int(self.config["system"]["narrowBreakpoint"])

    @property
    def opacity(self) -> float:
        return 1.0 if self.visible else 0.0

    @property
    def pending_size(self) -> Optional[Tuple[int, int]]:
        return self._pending_size

    # ------------------------------------------------------------- life cycle
    def initialize(
        self,
        surface_id: str,
        resolver: TargetResolver,
        scheduler: Optional[object] = None,
        dark_source: Optional[Callable[[], bool]] = None,
    ) -> bool:
        """Bind to the render target called ``surface_id``.

        ``resolver`` maps an id to a target exposing ``width()`` and
        ``height()``. When no target is found the controller stays inert and
        ``False`` is returned; nothing is raised to the host.

        Every callback of ``scheduler`` ticks the simulation with the flag
        returned by ``dark_source`` at that moment, stores the result in
        :attr:`last_frame` and asks the target to repaint. Painting never
        steps the simulation, so a hidden target keeps moving.
        """

        if self.state != UNINITIALIZED:
            _warn(f"initialize() called on a {self.state} background, ignored.")
            return self.running
        target = resolver(surface_id)
        if target is None:
            _warn(f"Render target {surface_id!r} not found, background disabled.")
            self.state = INERT
            return False
        self.target = target
        self.surface_id = surface_id
        self.width, self.height = self._target_size(target)
        self._pending_size = None
        self._populate()
        self.state = RUNNING
        if dark_source is not None:
            self._dark_source = dark_source
        self._scheduler = scheduler
        if scheduler is not None:
            scheduler.start(self._request_frame)
        _debug(f"{type(self).__name__} bound to {surface_id!r} ({self.width}x{self.height})")
        return True

    def stop(self) -> None:
        """Cancel the frame task; the current population is kept."""

        if self._scheduler is not None:
            self._scheduler.stop()

    def resume(self) -> None:
        if self.running and self._scheduler is not None:
            self._scheduler.start(self._request_frame)

    def destroy(self) -> None:
        self.stop()
        self._scheduler = None
        self.target = None
        self._pending_size = None
        self.last_frame = None
        self._clear()
        self.state = DESTROYED

    # ------------------------------------------------------------------ input
    def resize(self, width: int, height: int) -> None:
        size = (max(0, int(width)), max(0, int(height)))
        if self.state == UNINITIALIZED:
            self.width, self.height = size
            return
        if self.state != RUNNING:
            return
        self._pending_size = size

    def set_visible(self, visible: bool) -> None:
        # Hidden pages only fade out; the simulation keeps running.
        self.visible = bool(visible)

    def pointer_move(self, x: float, y: float) -> None:
        del x, y

    def pointer_leave(self) -> None:
        return

    def touch_move(self, points: Sequence[Tuple[float, float]]) -> None:
        if points:
            x, y = points[0]
            self.pointer_move(x, y)

    def touch_end(self) -> None:
        self.pointer_leave()

    # ------------------------------------------------------------------ frame
    def tick(self, dark_mode: bool = False) -> Frame:
        """Advance the simulation by one frame and return what to draw."""

        if not self.running:
            return Frame(width=self.width, height=self.height, opacity=0.0, dark_mode=bool(dark_mode))
        if self._pending_size is not None:
            self.width, self.height = self._pending_size
            self._pending_size = None
            self._populate()
        self._advance()
        return self._render(bool(dark_mode))

    # ---------------------------------------------------------------- helpers
    def _request_frame(self) -> None:
        self.last_frame = self.tick(bool(self._dark_source()))
        request = getattr(self.target, "update", None)
        if callable(request):
            request()

    @staticmethod
    def _target_size(target: object) -> Tuple[int, int]:
        width = getattr(target, "width", 0)
        height = getattr(target, "height", 0)
        if callable(width):
            width = width()
        if callable(height):
            height = height()
        return max(0, int(width)), max(0, int(height))

    def _populate(self) -> None:
        raise NotImplementedError

    def _clear(self) -> None:
        raise NotImplementedError

    def _advance(self) -> None:
        raise NotImplementedError

    def _render(self, dark_mode: bool) -> Frame:
        raise NotImplementedError


class ParticleNetwork(SurfaceController):
    """Particles pushed away by the pointer and linked when close."""

    def __init__(
        self,
        config: Optional[Mapping[str, object]] = None,
        *,
        rng: Optional[random.Random] = None,
    ) -> None:
        super().__init__(config, rng=rng)
        network = self.config["network"]
        self.particles: List[Particle] = []
        self.links: List[Link] = []
        self.pointer = PointerState(radius=float(network["influenceRadius"]))

    @property
    def particle_count(self) -> int:
        network = self.config["network"]
        key = "narrowParticleCount" if self.narrow else "particleCount"
        return int(network[key])

    @property
    def link_distance(self) -> float:
        return float(self.config["network"]["linkDistance"])

    def pointer_move(self, x: float, y: float) -> None:
        self.pointer.move(x, y)

    def pointer_leave(self) -> None:
        self.pointer.clear()

    def _populate(self) -> None:
        network = self.config["network"]
        self.particles = spawn_particles(
            self.particle_count,
            self.width,
            self.height,
            self.rng,
            speed=float(network["speed"]),
            size_min=float(network["sizeMin"]),
            size_range=float(network["sizeRange"]),
            density_min=float(network["densityMin"]),
            density_range=float(network["densityRange"]),
        )
        self.links = []
        _debug(f"spawned {len(self.particles)} particles for {self.width}x{self.height}")

    def _clear(self) -> None:
        self.particles = []
        self.links = []
        self.pointer.clear()

    def _advance(self) -> None:
        network = self.config["network"]
        near_decay = float(network["nearDecay"])
        far_decay = float(network["farDecay"])
        for particle in self.particles:
            step_particle(
                particle,
                self.pointer,
                self.width,
                self.height,
                near_decay=near_decay,
                far_decay=far_decay,
            )
        self.links = build_links(self.particles, self.link_distance)

    def _render(self, dark_mode: bool) -> Frame:
        return render_network(
            self.particles,
            self.links,
            dark_mode,
            width=self.width,
            height=self.height,
            opacity=self.opacity,
            appearance=self.config["appearance"],
        )


class GeometricBackground(SurfaceController):
    """Rotating outlines wrapping around the surface; ignores the pointer."""

    def __init__(
        self,
        config: Optional[Mapping[str, object]] = None,
        *,
        rng: Optional[random.Random] = None,
    ) -> None:
        super().__init__(config, rng=rng)
        self.shapes: List[Shape] = []

    @property
    def shape_count(self) -> int:
        shapes = self.config["shapes"]
        key = "narrowShapeCount" if self.narrow else "shapeCount"
        return int(shapes[key])

    def _populate(self) -> None:
        cfg = self.config["shapes"]
        self.shapes = spawn_shapes(
            self.shape_count,
            self.width,
            self.height,
            self.rng,
            size_min=float(cfg["sizeMin"]),
            size_range=float(cfg["sizeRange"]),
            speed=float(cfg["speed"]),
            rotation_speed=float(cfg["rotationSpeed"]),
            opacity_min=float(cfg["opacityMin"]),
            opacity_range=float(cfg["opacityRange"]),
        )
        _debug(f"spawned {len(self.shapes)} shapes for {self.width}x{self.height}")

    def _clear(self) -> None:
        self.shapes = []

    def _advance(self) -> None:
        for shape in self.shapes:
            advance_shape(shape, self.width, self.height)

    def _render(self, dark_mode: bool) -> Frame:
        return render_shapes(
            self.shapes,
            dark_mode,
            width=self.width,
            height=self.height,
            opacity=self.opacity,
            appearance=self.config["appearance"],
        )


def create_background(
    config: Optional[Mapping[str, object]] = None,
    *,
    rng: Optional[random.Random] = None,
) -> SurfaceController:
    """Return the controller selected by ``system.style``."""

    merged = merge_config(None, config)
    if merged["system"]["style"] == "shapes":
        return GeometricBackground(merged, rng=rng)
    return ParticleNetwork(merged, rng=rng)
