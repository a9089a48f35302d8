"""
Interface Layer - Abstract interfaces for dependency injection.

This layer defines contracts that infrastructure implementations must fulfill.
Services depend on these interfaces, not concrete implementations.
"""

from .engine import IRecognitionEngine

__all__ = [
    "IRecognitionEngine",
]
