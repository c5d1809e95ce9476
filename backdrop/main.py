# -*- coding: utf-8 -*-
"""Open the animated background in its own window.

Usage::

    python -m backdrop.main [--style particles|shapes] [--dark | --light]
                            [--config FILE] [--backend opengl|raster]
                            [--windowed] [--debug] [--list-settings]

``Esc`` closes the window and ``T`` toggles the theme.
"""

from __future__ import annotations

import argparse
import io
import sys
from pathlib import Path
from typing import List, NoReturn, Optional, Sequence


_QT_LIBRARY_HINTS = {
    "libGL.so.1": "the Mesa/OpenGL runtime (libGL) is missing",
    "libEGL.so.1": "the EGL runtime (libEGL) is missing",
    "libxcb": "the X11 xcb libraries used by the Qt platform plugin are missing",
}


def _handle_qt_import_error(exc: ImportError) -> NoReturn:
    details = str(exc)
    lines = ["Backdrop needs PyQt5 and could not import it."]
    lines += [f"Hint: {hint}." for name, hint in _QT_LIBRARY_HINTS.items() if name in details]
    lines.append(f"ImportError: {details}")
    raise SystemExit("\n".join(lines)) from exc


try:
    from PyQt5 import QtCore, QtGui, QtWidgets
    from PyQt5.QtCore import Qt
except ImportError as exc:  # pragma: no cover - environment dependent
    _handle_qt_import_error(exc)

from .control.config import DEFAULTS, STYLES, TOOLTIPS, load_config, merge_config
from .control.preferences import ThemePreferences
from .control.theme import ThemeState
from .view import BackdropViewWidget

DEBUG_MARKER = "[Backdrop][DEBUG]"
HINT_TEXT = "Move your mouse to interact with particles"
HINT_DURATION_MS = 4000


class _DebugSilencer(io.TextIOBase):
    """Line filter dropping the ``[Backdrop][DEBUG]`` traces from a stream.

    Output is held back until a full line is known, so a trace written in
    several ``write`` calls is still recognised.
    """

    def __init__(self, stream: io.TextIOBase, marker: str) -> None:
        super().__init__()
        self._stream = stream
        self._marker = marker
        self._pending = ""

    def write(self, text: str) -> int:  # type: ignore[override]
        chunks = (self._pending + text).splitlines(keepends=True)
        self._pending = ""
        if chunks and not chunks[-1].endswith(("\n", "\r")):
            self._pending = chunks.pop()
        self._stream.write("".join(line for line in chunks if self._marker not in line))
        return len(text)

    def flush(self) -> None:  # type: ignore[override]
        tail, self._pending = self._pending, ""
        if tail and self._marker not in tail:
            self._stream.write(tail)
        self._stream.flush()

    def __getattr__(self, name):
        return getattr(self._stream, name)


def _install_debug_silencer(marker: str = DEBUG_MARKER) -> None:
    for name in ("stdout", "stderr"):
        stream = getattr(sys, name)
        if not isinstance(stream, _DebugSilencer):
            setattr(sys, name, _DebugSilencer(stream, marker))


class HintLabel(QtWidgets.QLabel):
    """Pill shaped hint fading in and out once at the bottom of the view."""

    def __init__(self, text: str, parent: QtWidgets.QWidget) -> None:
        super().__init__(text, parent)
        self.setAttribute(Qt.WA_TransparentForMouseEvents, True)
        self.setStyleSheet(
            "background: rgba(0, 0, 0, 0.7);"
            "color: white;"
            "border-radius: 16px;"
            "padding: 8px 16px;"
            "font-size: 11pt;"
        )
        self.adjustSize()
        self._effect = QtWidgets.QGraphicsOpacityEffect(self)
        self._effect.setOpacity(0.0)
        self.setGraphicsEffect(self._effect)
        self._animation = QtCore.QPropertyAnimation(self._effect, b"opacity", self)
        self._animation.setDuration(HINT_DURATION_MS)
        self._animation.setEasingCurve(QtCore.QEasingCurve.InOutQuad)
        self._animation.setKeyValueAt(0.0, 0.0)
        self._animation.setKeyValueAt(0.1, 1.0)
        self._animation.setKeyValueAt(0.9, 1.0)
        self._animation.setKeyValueAt(1.0, 0.0)
        self._animation.finished.connect(self.hide)

    def play(self) -> None:
        self.reposition()
        self.show()
        self.raise_()
        self._animation.start()

    def reposition(self) -> None:
        parent = self.parentWidget()
        if parent is None:
            return
        x = (parent.width() - self.width()) // 2
        y = parent.height() - self.height() - 20
        self.move(max(0, x), max(0, y))


class ViewWindow(QtWidgets.QMainWindow):
    def __init__(
        self,
        config: dict,
        theme: ThemeState,
        *,
        force_backend: Optional[str] = None,
    ):
        super().__init__(None)
        self.setWindowTitle("Backdrop")
        self.config = config
        self.theme = theme
        self.view = BackdropViewWidget(
            self,
            config=config,
            dark_source=theme.is_dark,
            force_backend=force_backend,
        )

        w = QtWidgets.QWidget()
        w.setAttribute(Qt.WA_NoSystemBackground, True)
        w.setAutoFillBackground(False)
        lay = QtWidgets.QVBoxLayout(w)
        lay.setContentsMargins(0, 0, 0, 0)
        lay.addWidget(self.view)
        self.setCentralWidget(w)

        self.hint: Optional[HintLabel] = None
        if config["system"]["showHint"] and config["system"]["style"] == "particles":
            self.hint = HintLabel(HINT_TEXT, self.view)

        QtWidgets.QShortcut(Qt.Key_Escape, self, activated=self.close)
        QtWidgets.QShortcut(Qt.Key_T, self, activated=self.theme.toggle)
        self.theme.darkModeChanged.connect(self._on_theme_changed)

        transparent = bool(config["system"]["transparent"])
        self.setAttribute(Qt.WA_TranslucentBackground, transparent)
        self.setAttribute(Qt.WA_NoSystemBackground, transparent)
        self._started = False

    def start(self) -> bool:
        """Bind the background to its surface. Safe to call more than once."""

        if self._started:
            return self.view.engine.running
        self._started = True
        ok = self.view.initialize_background(self.config["system"]["surfaceId"], self)
        if ok and self.hint is not None:
            self.hint.play()
        return ok

    def _on_theme_changed(self, dark: bool) -> None:
        del dark
        self.view.update()

    def showEvent(self, event: QtGui.QShowEvent) -> None:  # type: ignore[override]
        super().showEvent(event)
        self.view.set_page_visible(True)
        QtCore.QTimer.singleShot(0, self.start)

    def hideEvent(self, event: QtGui.QHideEvent) -> None:  # type: ignore[override]
        self.view.set_page_visible(False)
        super().hideEvent(event)

    def changeEvent(self, event: QtCore.QEvent) -> None:  # type: ignore[override]
        if event.type() == QtCore.QEvent.WindowStateChange:
            self.view.set_page_visible(not self.isMinimized())
        super().changeEvent(event)

    def resizeEvent(self, event: QtGui.QResizeEvent) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        if self.hint is not None:
            self.hint.reposition()

    def closeEvent(self, event: QtGui.QCloseEvent) -> None:  # type: ignore[override]
        self.view.destroy_background()
        super().closeEvent(event)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Animated particle network / geometric shapes background.")
    parser.add_argument("--style", choices=STYLES, help="Background style (default: particles).")
    theme = parser.add_mutually_exclusive_group()
    theme.add_argument("--dark", dest="dark", action="store_true", default=None, help="Start with the dark theme.")
    theme.add_argument("--light", dest="dark", action="store_false", default=None, help="Start with the light theme.")
    parser.add_argument("--config", type=Path, help="JSON file overriding the default settings.")
    parser.add_argument("--backend", choices=("opengl", "raster"), help="Force a rendering backend.")
    parser.add_argument("--windowed", action="store_true", help="Open a window instead of going fullscreen.")
    parser.add_argument("--debug", action="store_true", help="Print the engine debug traces.")
    parser.add_argument("--list-settings", action="store_true", help="Print every setting with its default and exit.")
    return parser.parse_args(argv)


def describe_settings() -> List[str]:
    lines = []
    for section, values in DEFAULTS.items():
        for key, value in values.items():
            name = f"{section}.{key}"
            lines.append(f"{name:<30} {value!r:<20} {TOOLTIPS.get(name, '')}")
    return lines


def build_config(args: argparse.Namespace) -> dict:
    config = load_config(args.config)
    if args.style:
        config = merge_config(config, {"system": {"style": args.style}})
    return config


def main(headless: bool = False, argv: Optional[Sequence[str]] = None) -> int:
    """Start the application and return the exit code.

    When ``headless`` is True the arguments and the configuration are checked
    and 0 is returned without instantiating any Qt objects.
    """

    args = parse_args(argv)
    if not args.debug:
        _install_debug_silencer()
    if args.list_settings:
        print("\n".join(describe_settings()))
        return 0
    config = build_config(args)
    if headless:
        return 0

    QtWidgets.QApplication.setAttribute(QtCore.Qt.AA_EnableHighDpiScaling, True)
    QtWidgets.QApplication.setAttribute(QtCore.Qt.AA_UseHighDpiPixmaps, True)
    app = QtWidgets.QApplication(sys.argv[:1])
    theme = ThemeState(ThemePreferences(), dark=args.dark)

    view_win = ViewWindow(config, theme, force_backend=args.backend)
    if args.windowed:
        geometry = app.primaryScreen().availableGeometry()
        width = int(geometry.width() * 0.8)
        height = int(geometry.height() * 0.8)
        view_win.setGeometry(
            geometry.left() + (geometry.width() - width) // 2,
            geometry.top() + (geometry.height() - height) // 2,
            width,
            height,
        )
        view_win.show()
    else:
        view_win.showFullScreen()
    return app.exec_()


if __name__ == "__main__":
    sys.exit(main())
