"""Particle network simulation: point records, force model and proximity links.

The particles are plain records. All the motion is computed by the
module-level functions below so the convergence and bounds invariants can be
checked without a GUI:

* :func:`apply_pointer` pushes a particle away from the pointer or lets it
  ease back toward its rest position;
* :func:`advance_rest` drifts the rest position and bounces it on the surface
  bounds;
* :func:`step_particle` chains both for one frame;
* :func:`build_links` lists the pairs of particles close enough to be joined
  by a line.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

__all__ = [
    "Particle",
    "PointerState",
    "Link",
    "spawn_particle",
    "spawn_particles",
    "apply_pointer",
    "advance_rest",
    "step_particle",
    "build_links",
    "link_opacity",
]

DEFAULT_INFLUENCE_RADIUS = 150.0
DEFAULT_LINK_DISTANCE = 120.0
NEAR_DECAY = 10.0
FAR_DECAY = 20.0


# ---------------------------------------------------------------------------
# Data structures


@dataclass
class Particle:
    """A simulated point and its drifting rest anchor."""

    x: float
    y: float
    base_x: float
    base_y: float
    speed_x: float
    speed_y: float
    size: float
    density: float

    @property
    def position(self) -> Tuple[float, float]:
        return self.x, self.y

    @property
    def rest(self) -> Tuple[float, float]:
        return self.base_x, self.base_y

    def offset(self) -> Tuple[float, float]:
        return self.x - self.base_x, self.y - self.base_y


@dataclass
class PointerState:
    """Pointer position in surface coordinates, ``None`` when absent."""

    x: Optional[float] = None
    y: Optional[float] = None
    radius: float = DEFAULT_INFLUENCE_RADIUS

    @property
    def active(self) -> bool:
        return self.x is not None and self.y is not None

    def move(self, x: float, y: float) -> None:
        self.x = float(x)
        self.y = float(y)

    def clear(self) -> None:
        self.x = None
        self.y = None


@dataclass(frozen=True)
class Link:
    """An unordered pair of particle indices closer than the link threshold."""

    i: int
    j: int
    distance: float
    opacity: float


# ---------------------------------------------------------------------------
# Population


def spawn_particle(
    width: float,
    height: float,
    rng: Optional[random.Random] = None,
    *,
    speed: float = 0.5,
    size_min: float = 1.0,
    size_range: float = 3.0,
    density_min: float = 1.0,
    density_range: float = 30.0,
) -> Particle:
    rng = rng or random
    x = rng.random() * width
    y = rng.random() * height
    size = rng.random() * size_range + size_min
    density = rng.random() * density_range + density_min
    speed_x = (rng.random() - 0.5) * speed
    speed_y = (rng.random() - 0.5) * speed
    return Particle(
        x=x,
        y=y,
        base_x=x,
        base_y=y,
        speed_x=speed_x,
        speed_y=speed_y,
        size=size,
        density=density,
    )


def spawn_particles(
    count: int,
    width: float,
    height: float,
    rng: Optional[random.Random] = None,
    **kwargs: float,
) -> List[Particle]:
    """Return ``count`` freshly seeded particles spread over the surface."""

    return [spawn_particle(width, height, rng, **kwargs) for _ in range(max(0, int(count)))]


# ---------------------------------------------------------------------------
# Force model


def _relax(particle: Particle, divisor: float) -> None:
    if particle.x != particle.base_x:
        particle.x -= (particle.x - particle.base_x) / divisor
    if particle.y != particle.base_y:
        particle.y -= (particle.y - particle.base_y) / divisor


def apply_pointer(
    particle: Particle,
    pointer: PointerState,
    *,
    near_decay: float = NEAR_DECAY,
    far_decay: float = FAR_DECAY,
) -> None:
    """Move ``particle`` according to the pointer.

    Inside the influence radius the particle is pushed away from the pointer
    by ``unit * force * density`` with ``force = (radius - d) / radius``.
    A present but distant pointer lets the particle return by a tenth of its
    offset per frame, a missing pointer by a twentieth.
    """

    if not pointer.active:
        _relax(particle, far_decay)
        return

    dx = pointer.x - particle.x  # type: ignore[operator]
    dy = pointer.y - particle.y  # type: ignore[operator]
    distance = math.hypot(dx, dy)
    if distance >= pointer.radius:
        _relax(particle, near_decay)
        return
    if distance == 0.0:
        # No direction to push along: leave the particle where it is.
        return

    force = (pointer.radius - distance) / pointer.radius
    particle.x -= dx / distance * force * particle.density
    particle.y -= dy / distance * force * particle.density


def advance_rest(particle: Particle, width: float, height: float) -> None:
    """Drift the rest position, bounce on the bounds and clamp it inside."""

    particle.base_x += particle.speed_x
    particle.base_y += particle.speed_y

    if particle.base_x < 0 or particle.base_x > width:
        particle.speed_x = -particle.speed_x
    if particle.base_y < 0 or particle.base_y > height:
        particle.speed_y = -particle.speed_y

    particle.base_x = max(0.0, min(float(width), particle.base_x))
    particle.base_y = max(0.0, min(float(height), particle.base_y))


def step_particle(
    particle: Particle,
    pointer: PointerState,
    width: float,
    height: float,
    *,
    near_decay: float = NEAR_DECAY,
    far_decay: float = FAR_DECAY,
) -> None:
    apply_pointer(particle, pointer, near_decay=near_decay, far_decay=far_decay)
    advance_rest(particle, width, height)


# ---------------------------------------------------------------------------
# Proximity graph


def link_opacity(distance: float, threshold: float) -> float:
    return 1.0 - distance / threshold


def build_links(particles: Sequence[Particle], threshold: float = DEFAULT_LINK_DISTANCE) -> List[Link]:
    """Return every pair of particles closer than ``threshold``.

    The scan is quadratic in the number of particles, which stays fine for
    the few dozen particles a background holds.
    """

    links: List[Link] = []
    count = len(particles)
    for i in range(count):
        a = particles[i]
        for j in range(i + 1, count):
            b = particles[j]
            distance = math.hypot(a.x - b.x, a.y - b.y)
            if distance < threshold:
                links.append(Link(i, j, distance, link_opacity(distance, threshold)))
    return links
