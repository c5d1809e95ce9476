"""Animated portfolio background: particle network and geometric shapes."""

__version__ = "1.0.0"
