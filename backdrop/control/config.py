"""Default parameters of the background and helpers to merge user overrides."""

from __future__ import annotations

import copy
import json
import math
import sys
from pathlib import Path
from typing import Mapping, Optional, Union

__all__ = ["DEFAULTS", "TOOLTIPS", "STYLES", "default_config", "merge_config", "load_config"]

STYLES = ("particles", "shapes")

DEFAULTS = dict(
    network=dict(
        particleCount=80, narrowParticleCount=40,
        linkDistance=120.0, influenceRadius=150.0,
        speed=0.5,
        sizeMin=1.0, sizeRange=3.0,
        densityMin=1.0, densityRange=30.0,
        nearDecay=10.0, farDecay=20.0,
    ),
    shapes=dict(
        shapeCount=15, narrowShapeCount=8,
        sizeMin=50.0, sizeRange=100.0,
        speed=0.5, rotationSpeed=0.01,
        opacityMin=0.1, opacityRange=0.3,
    ),
    appearance=dict(
        lightColor="#3685FB", darkColor="#FFFFFF",
        particleAlpha=0.8, linkAlpha=0.3, glowBlur=10.0,
        linkWidth=1.0, shapeWidth=2.0,
    ),
    system=dict(
        style="particles", frameIntervalMs=16, narrowBreakpoint=768,
        transparent=True, showHint=True, surfaceId="backgroundCanvas",
    ),
)

TOOLTIPS = {
    "network.particleCount": "Number of particles on a regular surface.",
    "network.narrowParticleCount": "Number of particles when the surface is narrower than the breakpoint.",
    "network.linkDistance": "Maximum distance (px) at which two particles are linked by a line.",
    "network.influenceRadius": "Distance (px) under which the pointer pushes particles away.",
    "network.speed": "Amplitude of the drift velocity of the rest positions.",
    "network.sizeMin": "Smallest particle radius.",
    "network.sizeRange": "Random spread added to the smallest radius.",
    "network.densityMin": "Smallest repulsion scale of a particle.",
    "network.densityRange": "Random spread added to the smallest repulsion scale.",
    "network.nearDecay": "Return divisor when the pointer is present but out of range.",
    "network.farDecay": "Return divisor when no pointer is present.",
    "shapes.shapeCount": "Number of shapes on a regular surface.",
    "shapes.narrowShapeCount": "Number of shapes on a narrow surface.",
    "shapes.sizeMin": "Smallest shape size.",
    "shapes.sizeRange": "Random spread added to the smallest shape size.",
    "shapes.speed": "Amplitude of the linear velocity of the shapes.",
    "shapes.rotationSpeed": "Amplitude of the angular velocity (rad/frame).",
    "shapes.opacityMin": "Lowest outline opacity.",
    "shapes.opacityRange": "Random spread added to the lowest outline opacity.",
    "appearance.lightColor": "Accent colour used with the light theme.",
    "appearance.darkColor": "Colour used with the dark theme.",
    "appearance.particleAlpha": "Opacity of the particle discs.",
    "appearance.linkAlpha": "Opacity of a link between two touching particles.",
    "appearance.glowBlur": "Blur radius of the particle glow.",
    "appearance.linkWidth": "Stroke width of the links.",
    "appearance.shapeWidth": "Stroke width of the shape outlines.",
    "system.style": "Background style: 'particles' or 'shapes'.",
    "system.frameIntervalMs": "Delay between two frames in milliseconds.",
    "system.narrowBreakpoint": "Surface width (px) under which the narrow counts apply.",
    "system.transparent": "Paint on a transparent window background.",
    "system.showHint": "Show the interaction hint when the view starts.",
    "system.surfaceId": "Object name of the widget the background binds to.",
}


def default_config() -> dict:
    return copy.deepcopy(DEFAULTS)


def _coerce_like(default: object, value: object) -> object:
    """Return ``value`` converted to the type of ``default``.

    Raises ``ValueError`` when the conversion is not possible.
    """

    if isinstance(default, bool):
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in {"1", "true", "yes", "on"}:
            return True
        if isinstance(value, str) and value.strip().lower() in {"0", "false", "no", "off"}:
            return False
        if isinstance(value, (int, float)):
            return bool(value)
        raise ValueError(f"not a boolean: {value!r}")
    if isinstance(default, int):
        if isinstance(value, bool):
            raise ValueError(f"not an integer: {value!r}")
        try:
            return int(float(value))  # type: ignore[arg-type]
        except (TypeError, ValueError, OverflowError) as exc:
            raise ValueError(f"not an integer: {value!r}") from exc
    if isinstance(default, float):
        if isinstance(value, bool):
            raise ValueError(f"not a number: {value!r}")
        try:
            number = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError, OverflowError) as exc:
            raise ValueError(f"not a number: {value!r}") from exc
        if not math.isfinite(number):
            raise ValueError(f"not a finite number: {value!r}")
        return number
    if isinstance(default, str):
        if value is None:
            raise ValueError("empty value")
        return str(value)
    return value


def _validate(config: dict) -> None:
    system = config["system"]
    if system["style"] not in STYLES:
        print(
            f"[Backdrop][WARN] Unknown style {system['style']!r}, using {DEFAULTS['system']['style']!r}.",
            file=sys.stderr,
        )
        system["style"] = DEFAULTS["system"]["style"]
    for section, key in (
        ("network", "linkDistance"),
        ("network", "influenceRadius"),
        ("network", "nearDecay"),
        ("network", "farDecay"),
    ):
        if config[section][key] <= 0:
            print(
                f"[Backdrop][WARN] {section}.{key} must be positive, using {DEFAULTS[section][key]}.",
                file=sys.stderr,
            )
            config[section][key] = DEFAULTS[section][key]
    for section, key in (
        ("network", "particleCount"),
        ("network", "narrowParticleCount"),
        ("shapes", "shapeCount"),
        ("shapes", "narrowShapeCount"),
    ):
        config[section][key] = max(0, config[section][key])
    system["frameIntervalMs"] = max(0, system["frameIntervalMs"])


def merge_config(base: Optional[Mapping[str, object]], payload: Optional[Mapping[str, object]]) -> dict:
    """Return a copy of ``base`` updated section by section with ``payload``.

    Unknown sections and keys are ignored. Values are coerced to the type of
    the default; invalid values keep the previous value and emit a warning.
    """

    out = copy.deepcopy(dict(base)) if base is not None else default_config()
    for section, defaults in DEFAULTS.items():
        if not isinstance(out.get(section), dict):
            out[section] = copy.deepcopy(defaults)
    if not isinstance(payload, Mapping):
        return out
    for section, values in payload.items():
        if section not in DEFAULTS:
            print(f"[Backdrop][WARN] Ignoring unknown config section {section!r}.", file=sys.stderr)
            continue
        if not isinstance(values, Mapping):
            continue
        for key, value in values.items():
            if key not in DEFAULTS[section]:
                print(f"[Backdrop][WARN] Ignoring unknown setting {section}.{key}.", file=sys.stderr)
                continue
            try:
                out[section][key] = _coerce_like(DEFAULTS[section][key], value)
            except ValueError as exc:
                print(f"[Backdrop][WARN] Invalid value for {section}.{key}: {exc}.", file=sys.stderr)
    _validate(out)
    return out


def load_config(path: Optional[Union[str, Path]]) -> dict:
    """Load a JSON override file on top of :data:`DEFAULTS`.

    A missing or unreadable file is not fatal: a warning is printed and the
    defaults are returned.
    """

    if path is None:
        return default_config()
    source = Path(path)
    try:
        payload = json.loads(source.read_text(encoding="utf-8"))
    except FileNotFoundError:
        print(f"[Backdrop][WARN] Config file {source} not found, using defaults.", file=sys.stderr)
        return default_config()
    except (OSError, ValueError) as exc:
        print(f"[Backdrop][WARN] Unable to read config file {source}: {exc}.", file=sys.stderr)
        return default_config()
    if not isinstance(payload, dict):
        print(f"[Backdrop][WARN] Config file {source} must contain an object.", file=sys.stderr)
        return default_config()
    return merge_config(None, payload)
