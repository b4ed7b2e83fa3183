# tree_palette/errors.py
from __future__ import annotations

"""
Error types for caller contract violations.

Both are programmer errors: they surface immediately and are not meant to be
caught and retried. Querying an empty palette is not an error and returns None.
"""


class InvalidDimension(IndexError):
    """Axis index outside [0, dimensions), or points of different dimensionality."""


class InvalidQuery(ValueError):
    """Search called with no query point against a non-empty tree."""


__all__ = ["InvalidDimension", "InvalidQuery"]
