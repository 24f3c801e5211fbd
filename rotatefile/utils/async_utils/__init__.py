"""
Background execution helpers.

This package provides the single-slot debounced worker that runs retention
passes off the write path.
"""

from .debounced_worker import DebouncedWorker

__all__ = [
    'DebouncedWorker'
]
