"""Distance between two model results.

The batch consistency check compares results of arbitrary type. This
module provides the default distance used there. Any callable with the
signature of :data:`ResultDistance` can be passed instead.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, TypeAlias

import numpy as np

__all__ = [
    "ResultDistance",
    "element_distance",
]

ResultDistance: TypeAlias = Callable[[Any, Any], float]


def _is_integer(x: Any) -> bool:
    return isinstance(x, (int, np.integer)) and not isinstance(x, (bool, np.bool_))


def element_distance(a: Any, b: Any) -> float:
    """Returns a non-negative distance between two results.

    * integer scalars (e.g. class labels): absolute difference,
    * real scalars: absolute difference,
    * mappings with identical keys, tuples and lists: square root of the sum
      of squared distances of the components,
    * anything else: Euclidean norm of the difference of the arrays.

    Args:
        a: First result.
        b: Second result.

    Returns:
        The distance as a float.

    Raises:
        ValueError: If the two results do not have the same structure or shape.
    """
    if _is_integer(a) and _is_integer(b):
        return float(abs(int(a) - int(b)))

    if isinstance(a, Mapping) or isinstance(b, Mapping):
        if not (isinstance(a, Mapping) and isinstance(b, Mapping)):
            raise ValueError("Cannot compare a mapping with a non-mapping result.")
        if set(a) != set(b):
            raise ValueError(
                f"Results have different keys: {sorted(map(str, a))} vs {sorted(map(str, b))}."
            )
        return float(np.sqrt(sum(element_distance(a[k], b[k]) ** 2 for k in a)))

    if isinstance(a, (tuple, list)) and isinstance(b, (tuple, list)):
        if len(a) != len(b):
            raise ValueError(f"Results have different lengths: {len(a)} vs {len(b)}.")
        return float(np.sqrt(sum(element_distance(x, y) ** 2 for x, y in zip(a, b))))

    a_arr = np.asarray(a, dtype=float)
    b_arr = np.asarray(b, dtype=float)
    if a_arr.shape != b_arr.shape:
        raise ValueError(f"Results have different shapes: {a_arr.shape} vs {b_arr.shape}.")
    if a_arr.ndim == 0:
        return float(abs(a_arr - b_arr))
    return float(np.linalg.norm((a_arr - b_arr).ravel()))
