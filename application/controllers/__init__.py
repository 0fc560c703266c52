"""Application controllers."""

from .debugging_controller import DebuggingController

__all__ = ["DebuggingController"]
