"""Geometric shapes background: rotating outlines drifting across the surface."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import List, Optional, Tuple

__all__ = ["SHAPE_KINDS", "Shape", "spawn_shape", "spawn_shapes", "advance_shape", "shape_outline"]

SHAPE_KINDS = ("triangle", "square", "hexagon")


@dataclass
class Shape:
    x: float
    y: float
    size: float
    rotation: float
    rotation_speed: float
    speed_x: float
    speed_y: float
    kind: str
    opacity: float


def spawn_shape(
    width: float,
    height: float,
    rng: Optional[random.Random] = None,
    *,
    size_min: float = 50.0,
    size_range: float = 100.0,
    speed: float = 0.5,
    rotation_speed: float = 0.01,
    opacity_min: float = 0.1,
    opacity_range: float = 0.3,
) -> Shape:
    rng = rng or random
    return Shape(
        x=rng.random() * width,
        y=rng.random() * height,
        size=rng.random() * size_range + size_min,
        rotation=rng.random() * math.pi * 2,
        rotation_speed=(rng.random() - 0.5) * rotation_speed,
        speed_x=(rng.random() - 0.5) * speed,
        speed_y=(rng.random() - 0.5) * speed,
        kind=SHAPE_KINDS[min(int(rng.random() * len(SHAPE_KINDS)), len(SHAPE_KINDS) - 1)],
        opacity=rng.random() * opacity_range + opacity_min,
    )


def spawn_shapes(
    count: int,
    width: float,
    height: float,
    rng: Optional[random.Random] = None,
    **kwargs: float,
) -> List[Shape]:
    return [spawn_shape(width, height, rng, **kwargs) for _ in range(max(0, int(count)))]


def advance_shape(shape: Shape, width: float, height: float) -> None:
    """Move and rotate ``shape`` for one frame, wrapping around the edges.

    A shape leaves the surface completely (by its own size) before it
    reappears on the opposite side.
    """

    shape.x += shape.speed_x
    shape.y += shape.speed_y
    shape.rotation += shape.rotation_speed

    if shape.x < -shape.size:
        shape.x = width + shape.size
    if shape.x > width + shape.size:
        shape.x = -shape.size
    if shape.y < -shape.size:
        shape.y = height + shape.size
    if shape.y > height + shape.size:
        shape.y = -shape.size


def _local_outline(kind: str, size: float) -> List[Tuple[float, float]]:
    half = size / 2.0
    if kind == "triangle":
        return [(0.0, -half), (half, half), (-half, half)]
    if kind == "square":
        return [(-half, -half), (half, -half), (half, half), (-half, half)]
    if kind == "hexagon":
        return [(math.cos(math.pi / 3 * i) * half, math.sin(math.pi / 3 * i) * half) for i in range(6)]
    raise ValueError(f"unknown shape kind: {kind!r}")


def shape_outline(shape: Shape) -> List[Tuple[float, float]]:
    """Return the closed outline of ``shape`` in surface coordinates."""

    cos_r = math.cos(shape.rotation)
    sin_r = math.sin(shape.rotation)
    return [
        (shape.x + px * cos_r - py * sin_r, shape.y + px * sin_r + py * cos_r)
        for px, py in _local_outline(shape.kind, shape.size)
    ]
