"""User interaction helpers."""

from .progress import ProgressObserver, ProgressState

__all__ = ["ProgressObserver", "ProgressState"]
