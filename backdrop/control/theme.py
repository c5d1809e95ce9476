"""Dark mode flag shared between the window, the renderer and the saved preference."""

from typing import Optional

from PyQt5.QtCore import QObject, pyqtSignal, pyqtSlot

from .preferences import ThemePreferences

__all__ = ["ThemeState"]


class ThemeState(QObject):
    """Dark mode flag owned by the host and polled by the renderer each frame."""

    darkModeChanged = pyqtSignal(bool)

    def __init__(
        self,
        preferences: Optional[ThemePreferences] = None,
        *,
        dark: Optional[bool] = None,
        parent=None,
    ):
        super().__init__(parent)
        self._preferences = preferences
        if dark is None:
            dark = preferences.load_dark() if preferences is not None else False
        self._dark = bool(dark)

    def is_dark(self) -> bool:
        return self._dark

    @pyqtSlot(bool)
    def set_dark(self, enabled: bool) -> None:
        enabled = bool(enabled)
        if enabled == self._dark:
            return
        self._dark = enabled
        if self._preferences is not None:
            self._preferences.save_dark(enabled)
        self.darkModeChanged.emit(enabled)

    @pyqtSlot()
    def toggle(self) -> None:
        self.set_dark(not self._dark)
