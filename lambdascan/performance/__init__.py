"""Performance helpers for data-parallel analysis passes."""

from .parallel import ParallelExecutor

__all__ = ["ParallelExecutor"]
