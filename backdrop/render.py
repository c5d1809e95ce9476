"""Theme aware conversion of the simulation state into drawing primitives.

Rendering is split in two steps. The functions of this module turn the
current particles, links or shapes into a :class:`Frame` made of plain
records, choosing one of the two palettes from the ``dark_mode`` flag given
for that frame. :func:`backdrop.view.view_widget.paint_frame` then draws the
frame with a ``QPainter``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Sequence, Tuple

from .particles import Link, Particle
from .shapes import Shape, shape_outline

__all__ = [
    "Color",
    "Disc",
    "Segment",
    "Outline",
    "Frame",
    "Palette",
    "palette_for",
    "render_network",
    "render_shapes",
]

RGB = Tuple[int, int, int]

LIGHT_RGB: RGB = (54, 133, 251)
DARK_RGB: RGB = (255, 255, 255)


@dataclass(frozen=True)
class Color:
    r: int
    g: int
    b: int
    a: float = 1.0

    def css(self) -> str:
        return f"rgba({self.r}, {self.g}, {self.b}, {self.a:g})"


@dataclass(frozen=True)
class Disc:
    """Filled particle disc with a soft glow of ``glow`` pixels."""

    x: float
    y: float
    radius: float
    color: Color
    glow: float = 0.0


@dataclass(frozen=True)
class Segment:
    x1: float
    y1: float
    x2: float
    y2: float
    color: Color
    width: float = 1.0


@dataclass(frozen=True)
class Outline:
    points: Tuple[Tuple[float, float], ...]
    color: Color
    width: float = 2.0


@dataclass
class Frame:
    """Everything drawn for one refresh, back to front: segments, outlines, discs."""

    width: int = 0
    height: int = 0
    opacity: float = 1.0
    dark_mode: bool = False
    discs: List[Disc] = field(default_factory=list)
    segments: List[Segment] = field(default_factory=list)
    outlines: List[Outline] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not (self.discs or self.segments or self.outlines)


@dataclass(frozen=True)
class Palette:
    base: RGB
    particle_alpha: float = 0.8
    link_alpha: float = 0.3
    glow: float = 10.0
    link_width: float = 1.0
    shape_width: float = 2.0

    def color(self, alpha: float) -> Color:
        r, g, b = self.base
        return Color(r, g, b, clamp01(alpha))


def clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def _hex_to_rgb(value: str, fallback: RGB) -> RGB:
    value = value.strip().lstrip("#")
    if len(value) == 3:
        value = "".join(ch * 2 for ch in value)
    try:
        number = int(value, 16)
    except ValueError:
        return fallback
    return (number >> 16) & 255, (number >> 8) & 255, number & 255


def palette_for(dark_mode: bool, appearance: Optional[Mapping[str, object]] = None) -> Palette:
    """Return the light (accent blue) or dark (white) palette."""

    appearance = appearance or {}
    if dark_mode:
        base = _hex_to_rgb(str(appearance.get("darkColor", "#FFFFFF")), DARK_RGB)
    else:
        base = _hex_to_rgb(str(appearance.get("lightColor", "#3685FB")), LIGHT_RGB)
    return Palette(
        base=base,
        particle_alpha=float(appearance.get("particleAlpha", 0.8)),  # type: ignore[arg-type]
        link_alpha=float(appearance.get("linkAlpha", 0.3)),  # type: ignore[arg-type]
        glow=float(appearance.get("glowBlur", 10.0)),  # type: ignore[arg-type]
        link_width=float(appearance.get("linkWidth", 1.0)),  # type: ignore[arg-type]
        shape_width=float(appearance.get("shapeWidth", 2.0)),  # type: ignore[arg-type]
    )


def render_network(
    particles: Sequence[Particle],
    links: Sequence[Link],
    dark_mode: bool,
    *,
    width: int = 0,
    height: int = 0,
    opacity: float = 1.0,
    appearance: Optional[Mapping[str, object]] = None,
) -> Frame:
    palette = palette_for(dark_mode, appearance)
    disc_color = palette.color(palette.particle_alpha)
    frame = Frame(width=width, height=height, opacity=clamp01(opacity), dark_mode=dark_mode)
    frame.discs = [Disc(p.x, p.y, p.size, disc_color, palette.glow) for p in particles]
    for link in links:
        a = particles[link.i]
        b = particles[link.j]
        frame.segments.append(
            Segment(a.x, a.y, b.x, b.y, palette.color(link.opacity * palette.link_alpha), palette.link_width)
        )
    return frame


def render_shapes(
    shapes: Sequence[Shape],
    dark_mode: bool,
    *,
    width: int = 0,
    height: int = 0,
    opacity: float = 1.0,
    appearance: Optional[Mapping[str, object]] = None,
) -> Frame:
    palette = palette_for(dark_mode, appearance)
    frame = Frame(width=width, height=height, opacity=clamp01(opacity), dark_mode=dark_mode)
    frame.outlines = [
        Outline(tuple(shape_outline(shape)), palette.color(shape.opacity), palette.shape_width)
        for shape in shapes
    ]
    return frame
