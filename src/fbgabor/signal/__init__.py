"""Signal processing utilities."""

from .window import fir_window, prepare_window

__all__ = ["fir_window", "prepare_window"]
