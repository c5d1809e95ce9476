"""Qt widgets hosting the animated background.

The simulation lives in :mod:`backdrop.engine` and knows nothing about Qt.
This module only wires it to a widget:

* :class:`FrameTask` is the cancellable repeating task that requests a new
  frame every ``frameIntervalMs``;
* mouse, touch and resize events are forwarded to the controller;
* every :class:`FrameTask` callback runs ``engine.tick(dark_mode)`` with the
  flag read from the theme source at that moment;
* ``paintEvent``/``paintGL`` only hand the last computed frame to
  :func:`paint_frame`.

:func:`BackdropViewWidget` returns an OpenGL widget when a GL context can be
created and falls back to a raster ``QWidget`` otherwise. Both expose the
same API.
"""

from __future__ import annotations

import os
import sys
from typing import Callable, Mapping, Optional

from PyQt5 import QtCore, QtGui, QtWidgets

from ..engine import SurfaceController, create_background
from ..render import Color, Frame

__all__ = ["BackdropViewWidget", "FrameTask", "find_surface", "paint_frame"]

LIGHT_BACKGROUND = "#FFFFFF"
DARK_BACKGROUND = "#121212"


def _qcolor(color: Color) -> QtGui.QColor:
    qcolor = QtGui.QColor(color.r, color.g, color.b)
    qcolor.setAlphaF(max(0.0, min(1.0, color.a)))
    return qcolor


def paint_frame(painter: QtGui.QPainter, frame: Frame) -> None:
    """Draw ``frame`` with ``painter``: links and outlines first, discs on top."""

    if frame.opacity <= 0.0 or frame.empty:
        return
    painter.save()
    try:
        painter.setRenderHint(QtGui.QPainter.Antialiasing, True)
        painter.setOpacity(frame.opacity)
        painter.setBrush(QtCore.Qt.NoBrush)
        for segment in frame.segments:
            pen = QtGui.QPen(_qcolor(segment.color), segment.width)
            painter.setPen(pen)
            painter.drawLine(QtCore.QLineF(segment.x1, segment.y1, segment.x2, segment.y2))
        for outline in frame.outlines:
            pen = QtGui.QPen(_qcolor(outline.color), outline.width)
            pen.setJoinStyle(QtCore.Qt.MiterJoin)
            painter.setPen(pen)
            polygon = QtGui.QPolygonF([QtCore.QPointF(x, y) for x, y in outline.points])
            painter.drawPolygon(polygon)
        painter.setPen(QtCore.Qt.NoPen)
        for disc in frame.discs:
            center = QtCore.QPointF(disc.x, disc.y)
            color = _qcolor(disc.color)
            if disc.glow > 0.0:
                outer = disc.radius + disc.glow
                halo = QtGui.QRadialGradient(center, outer)
                inner = QtGui.QColor(color)
                inner.setAlphaF(color.alphaF() * 0.5)
                clear = QtGui.QColor(color)
                clear.setAlphaF(0.0)
                halo.setColorAt(0.0, inner)
                halo.setColorAt(disc.radius / outer, inner)
                halo.setColorAt(1.0, clear)
                painter.setBrush(QtGui.QBrush(halo))
                painter.drawEllipse(center, outer, outer)
            painter.setBrush(color)
            painter.drawEllipse(center, disc.radius, disc.radius)
    finally:
        painter.restore()


def find_surface(root: Optional[QtCore.QObject], surface_id: str) -> Optional[QtWidgets.QWidget]:
    """Return the widget named ``surface_id`` under ``root`` (``root`` included)."""

    if root is None:
        return None
    if isinstance(root, QtWidgets.QWidget) and root.objectName() == surface_id:
        return root
    return root.findChild(QtWidgets.QWidget, surface_id)


# ---------------------------------------------------------------------------
# Frame scheduling


class FrameTask(QtCore.QObject):
    """Repeating frame request bound to a ``QTimer``.

    Callbacks run on the GUI thread one after the other, so a frame is never
    started while the previous one is still being computed.
    """

    def __init__(self, interval_ms: int = 16, parent: Optional[QtCore.QObject] = None) -> None:
        super().__init__(parent)
        self._timer = QtCore.QTimer(self)
        self._timer.setTimerType(QtCore.Qt.PreciseTimer)
        self._timer.timeout.connect(self.fire)
        self._interval_ms = max(int(interval_ms), 0)
        self._callback: Optional[Callable[[], None]] = None

    @property
    def active(self) -> bool:
        return self._timer.isActive()

    @property
    def interval_ms(self) -> int:
        return self._interval_ms

    def start(self, callback: Callable[[], None]) -> None:
        self._callback = callback
        if self._interval_ms <= 0:
            return
        self._timer.start(self._interval_ms)

    def stop(self) -> None:
        if self._timer.isActive():
            self._timer.stop()

    def fire(self) -> None:
        """Run the callback once, as the timer does on every timeout."""

        if self._callback is not None:
            self._callback()


# ---------------------------------------------------------------------------
# Widgets


class _ViewWidgetBase:
    """Common behaviour shared by both the OpenGL and raster backends."""

    def _init_view_widget(
        self,
        config: Optional[Mapping[str, object]] = None,
        dark_source: Optional[Callable[[], bool]] = None,
        engine: Optional[SurfaceController] = None,
    ) -> None:
        self.engine = engine if engine is not None else create_background(config)
        system = self.engine.config["system"]
        self.setObjectName(str(system["surfaceId"]))
        self.setAttribute(QtCore.Qt.WA_NoSystemBackground, True)
        self.setAttribute(QtCore.Qt.WA_TranslucentBackground, True)
        self.setAttribute(QtCore.Qt.WA_OpaquePaintEvent, False)
        self.setAttribute(QtCore.Qt.WA_AcceptTouchEvents, True)
        self.setAutoFillBackground(False)
        self.setMouseTracking(True)
        self._dark_source: Callable[[], bool] = dark_source or (lambda: False)
        self._transparent = bool(system["transparent"])
        self.frame_task = FrameTask(int(system["frameIntervalMs"]), self)

    # ------------------------------------------------------------------ API
    def initialize_background(self, surface_id: Optional[str] = None, root: Optional[QtCore.QObject] = None) -> bool:
        """Bind the controller to the widget called ``surface_id`` and start the frames."""

        if surface_id is None:
            surface_id = self.objectName()
        search_root = root if root is not None else self.window()
        return self.engine.initialize(
            surface_id,
            lambda name: find_surface(search_root, name),
            self.frame_task,
            dark_source=self.dark_mode,
        )

    def set_dark_source(self, source: Callable[[], bool]) -> None:
        self._dark_source = source

    def dark_mode(self) -> bool:
        return bool(self._dark_source())

    @property
    def last_frame(self) -> Optional[Frame]:
        """Frame computed by the latest frame task callback, painted as is."""

        return self.engine.last_frame

    def set_page_visible(self, visible: bool) -> None:
        self.engine.set_visible(visible)

    def stop(self) -> None:
        self.engine.stop()

    def destroy_background(self) -> None:
        self.engine.destroy()
        self.update()

    # ------------------------------------------------------------------ events
    def _forward_event(self, event: QtCore.QEvent) -> bool:
        kind = event.type()
        if kind in (QtCore.QEvent.TouchBegin, QtCore.QEvent.TouchUpdate):
            points = [(p.pos().x(), p.pos().y()) for p in event.touchPoints()]
            self.engine.touch_move(points)
            event.accept()
            return True
        if kind in (QtCore.QEvent.TouchEnd, QtCore.QEvent.TouchCancel):
            self.engine.touch_end()
            event.accept()
            return True
        return False

    def _handle_mouse_move(self, event: QtGui.QMouseEvent) -> None:
        pos = event.localPos()
        self.engine.pointer_move(pos.x(), pos.y())

    def _handle_leave(self) -> None:
        self.engine.pointer_leave()

    def _handle_resize(self) -> None:
        self.engine.resize(self.width(), self.height())

    # ------------------------------------------------------------------ rendering
    def _background_color(self, dark: bool) -> QtGui.QColor:
        return QtGui.QColor(DARK_BACKGROUND if dark else LIGHT_BACKGROUND)

    def _render_with_painter(self, painter: QtGui.QPainter) -> None:
        dark = self.dark_mode()
        if self._transparent:
            painter.setCompositionMode(QtGui.QPainter.CompositionMode_Source)
            painter.fillRect(self.rect(), QtCore.Qt.transparent)
            painter.setCompositionMode(QtGui.QPainter.CompositionMode_SourceOver)
        else:
            painter.fillRect(self.rect(), self._background_color(dark))
        frame = self.last_frame
        if frame is not None:
            paint_frame(painter, frame)


class _OpenGLViewWidget(QtWidgets.QOpenGLWidget, _ViewWidgetBase):
    """OpenGL-backed renderer when the system can create a GL context."""

    def __init__(
        self,
        parent: Optional[QtWidgets.QWidget] = None,
        *,
        config: Optional[Mapping[str, object]] = None,
        dark_source: Optional[Callable[[], bool]] = None,
        engine: Optional[SurfaceController] = None,
    ) -> None:
        QtWidgets.QOpenGLWidget.__init__(self, parent)
        self._init_view_widget(config, dark_source, engine)

    def event(self, event: QtCore.QEvent) -> bool:  # type: ignore[override]
        if self._forward_event(event):
            return True
        return super().event(event)

    def mouseMoveEvent(self, event: QtGui.QMouseEvent) -> None:  # type: ignore[override]
        self._handle_mouse_move(event)
        super().mouseMoveEvent(event)

    def leaveEvent(self, event: QtCore.QEvent) -> None:  # type: ignore[override]
        self._handle_leave()
        super().leaveEvent(event)

    def paintGL(self) -> None:  # pragma: no cover - requires GUI context
        painter = QtGui.QPainter(self)
        try:
            self._render_with_painter(painter)
        finally:
            painter.end()

    def resizeEvent(self, event: QtGui.QResizeEvent) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        self._handle_resize()
        self.update()


class _RasterViewWidget(QtWidgets.QWidget, _ViewWidgetBase):
    """Fallback renderer using the traditional raster ``QWidget`` backend."""

    def __init__(
        self,
        parent: Optional[QtWidgets.QWidget] = None,
        *,
        config: Optional[Mapping[str, object]] = None,
        dark_source: Optional[Callable[[], bool]] = None,
        engine: Optional[SurfaceController] = None,
    ) -> None:
        QtWidgets.QWidget.__init__(self, parent)
        self._init_view_widget(config, dark_source, engine)

    def event(self, event: QtCore.QEvent) -> bool:  # type: ignore[override]
        if self._forward_event(event):
            return True
        return super().event(event)

    def mouseMoveEvent(self, event: QtGui.QMouseEvent) -> None:  # type: ignore[override]
        self._handle_mouse_move(event)
        super().mouseMoveEvent(event)

    def leaveEvent(self, event: QtCore.QEvent) -> None:  # type: ignore[override]
        self._handle_leave()
        super().leaveEvent(event)

    def paintEvent(self, event: QtGui.QPaintEvent) -> None:  # type: ignore[override]
        del event
        painter = QtGui.QPainter(self)
        try:
            self._render_with_painter(painter)
        finally:
            painter.end()

    def resizeEvent(self, event: QtGui.QResizeEvent) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        self._handle_resize()
        self.update()


def _should_use_opengl(force_backend: Optional[str]) -> bool:
    if force_backend == "raster":
        return False
    if force_backend == "opengl":
        return True

    env_backend = os.environ.get("BACKDROP_FORCE_BACKEND", "").strip().lower()
    if env_backend == "raster":
        return False
    if env_backend == "opengl":
        return True
    return hasattr(QtWidgets, "QOpenGLWidget")


def BackdropViewWidget(
    parent: Optional[QtWidgets.QWidget] = None,
    *,
    config: Optional[Mapping[str, object]] = None,
    dark_source: Optional[Callable[[], bool]] = None,
    engine: Optional[SurfaceController] = None,
    force_backend: Optional[str] = None,
) -> QtWidgets.QWidget:
    """Factory returning the best available background widget.

    Parameters
    ----------
    parent:
        Parent widget used by Qt for ownership.
    config:
        Overrides merged on top of :data:`backdrop.control.config.DEFAULTS`.
    dark_source:
        Callable returning the current dark mode flag, read once per frame.
    engine:
        Controller to drive instead of the one built from ``config``.
    force_backend:
        ``"opengl"`` forces the OpenGL widget while ``"raster"`` selects the
        pure QWidget implementation.
    """

    kwargs = dict(config=config, dark_source=dark_source, engine=engine)
    if _should_use_opengl(force_backend):
        try:
            widget = _OpenGLViewWidget(parent, **kwargs)
            setattr(widget, "backend_name", "opengl")
            setattr(widget, "uses_opengl", True)
            return widget
        except Exception as exc:
            print(
                f"[Backdrop][WARN] Unable to initialise OpenGL backend ({exc!r}). Using raster widget instead.",
                file=sys.stderr,
            )
    widget = _RasterViewWidget(parent, **kwargs)
    setattr(widget, "backend_name", "raster")
    setattr(widget, "uses_opengl", False)
    return widget
