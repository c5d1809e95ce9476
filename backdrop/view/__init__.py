from .view_widget import BackdropViewWidget, FrameTask

__all__ = ["BackdropViewWidget", "FrameTask"]
