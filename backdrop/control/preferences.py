"""Persistence of the theme preference, the only state kept between runs."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Optional

__all__ = ["DARK", "LIGHT", "ThemePreferences"]

DARK = "dark"
LIGHT = "light"


class ThemePreferences:
    """Read and write ``{"theme": "dark" | "light"}`` in a small JSON file."""

    KEY = "theme"

    def __init__(self, storage_path: Optional[Path] = None):
        base_dir = Path.home() / ".backdrop"
        self.path = Path(storage_path) if storage_path is not None else (base_dir / "theme.json")

    def load(self) -> str:
        if not self.path.exists():
            return LIGHT
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            print(f"[Backdrop][WARN] Unable to read {self.path}: {exc}.", file=sys.stderr)
            return LIGHT
        if isinstance(payload, dict) and payload.get(self.KEY) == DARK:
            return DARK
        return LIGHT

    def load_dark(self) -> bool:
        return self.load() == DARK

    def save(self, theme: str) -> None:
        if theme not in (DARK, LIGHT):
            raise ValueError(f"Unknown theme: {theme!r}")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                json.dumps({self.KEY: theme}, ensure_ascii=False, indent=2, sort_keys=True),
                encoding="utf-8",
            )
        except OSError as exc:
            print(f"[Backdrop][WARN] Unable to save theme preference: {exc}.", file=sys.stderr)

    def save_dark(self, dark: bool) -> None:
        self.save(DARK if dark else LIGHT)
