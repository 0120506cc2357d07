"""lambdascan - Find where a Java library can use lambda expressions, and what is new."""

__version__ = "0.1.0"

from .core.signatures import MethodSignature
from .core.baseline import BaselineIndex
from .core.analysis import LibraryAnalyser

__all__ = ["MethodSignature", "BaselineIndex", "LibraryAnalyser", "__version__"]
