"""Utility functions for DerivCheck package."""

from .batch import batch_size, get_batch_element
from .distance import element_distance

__all__ = [
    "batch_size",
    "get_batch_element",
    "element_distance",
]
