"""
Vosk Infrastructure - Vosk speech recognition integration.

This module provides:
- VoskEngine: vosk Python bindings adapter (implements IRecognitionEngine)
"""

from .engine import VoskEngine, get_vosk_engine

__all__ = [
    "VoskEngine",
    "get_vosk_engine",
]
