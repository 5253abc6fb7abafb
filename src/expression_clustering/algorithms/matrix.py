"""
Adapter for the numeric matrices both engines consume.

Input matrices come from external readers in a few shapes: numpy arrays,
nested lists, or reader objects exposing ``rows()``, ``columns()`` and
``get(row, col)``. ``as_named_matrix`` normalises all of them into a dense
``NamedMatrix`` where missing values are NaN.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

import numpy as np

from ..errors import InvalidInputError
from .distance import Leaf
from .linkage import LinkageStrategy


@dataclass
class NamedMatrix:
    """
    Dense float64 matrix with optional row and column names.

    Names are for presentation only; the algorithms work on indices.
    """

    values: np.ndarray
    row_names: Optional[List[str]] = None
    col_names: Optional[List[str]] = None

    def __post_init__(self):
        """Coerce values and check name lengths."""
        self.values = np.asarray(self.values, dtype=np.float64)
        if self.values.ndim != 2:
            raise InvalidInputError(
                f"Matrix must be 2-D, got shape {self.values.shape}"
            )
        if self.row_names is not None and len(self.row_names) != self.n_rows:
            raise InvalidInputError(
                f"{len(self.row_names)} row names for {self.n_rows} rows"
            )
        if self.col_names is not None and len(self.col_names) != self.n_cols:
            raise InvalidInputError(
                f"{len(self.col_names)} column names for {self.n_cols} columns"
            )

    @property
    def n_rows(self) -> int:
        return self.values.shape[0]

    @property
    def n_cols(self) -> int:
        return self.values.shape[1]

    @property
    def shape(self) -> tuple:
        return self.values.shape

    def get(self, row: int, col: int) -> float:
        return float(self.values[row, col])

    def set(self, row: int, col: int, value: Optional[float]) -> None:
        self.values[row, col] = np.nan if value is None else value

    def row(self, i: int) -> np.ndarray:
        """View of row *i* (writes go through to the matrix)."""
        return self.values[i]

    def row_name(self, i: int) -> Optional[str]:
        return self.row_names[i] if self.row_names is not None else None

    def col_name(self, j: int) -> Optional[str]:
        return self.col_names[j] if self.col_names is not None else None


def _from_reader(obj: Any) -> NamedMatrix:
    n_rows = obj.rows()
    n_cols = obj.columns()
    values = np.empty((n_rows, n_cols), dtype=np.float64)
    for i in range(n_rows):
        for j in range(n_cols):
            v = obj.get(i, j)
            values[i, j] = np.nan if v is None else v

    row_names = None
    col_names = None
    if hasattr(obj, "get_row_name"):
        row_names = [obj.get_row_name(i) for i in range(n_rows)]
    if hasattr(obj, "get_col_name"):
        col_names = [obj.get_col_name(j) for j in range(n_cols)]
    return NamedMatrix(values, row_names, col_names)


def as_named_matrix(obj: Any) -> NamedMatrix:
    """
    Coerce *obj* into a NamedMatrix.

    Accepts:
    - NamedMatrix -> returned as-is
    - reader objects with ``rows()``, ``columns()``, ``get(row, col)`` and
      optionally ``get_row_name(i)`` / ``get_col_name(j)``
    - anything ``np.asarray`` turns into a 2-D array (``None`` -> NaN)

    Raises:
        InvalidInputError: If the result is not 2-D or not numeric
    """
    if isinstance(obj, NamedMatrix):
        return obj
    if all(hasattr(obj, attr) for attr in ("rows", "columns", "get")):
        return _from_reader(obj)
    try:
        values = np.array(obj, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"Cannot interpret input as a numeric matrix: {e}") from e
    return NamedMatrix(values)


def leaves_from_rows(
    matrix: Any,
    linkage: LinkageStrategy,
    rows: Optional[Sequence[int]] = None,
) -> List[Leaf]:
    """
    One Leaf per matrix row, valued by a copy of that row.

    Args:
        matrix: Anything ``as_named_matrix`` accepts
        linkage: Linkage shared by the leaves
        rows: Subset of row indices to use (default: all rows)

    Returns:
        Leaves numbered 0..len(rows)-1 and labelled with the row names
    """
    m = as_named_matrix(matrix)
    row_ids = range(m.n_rows) if rows is None else rows
    return [
        Leaf(m.row(r).copy(), linkage, index=i, label=m.row_name(r))
        for i, r in enumerate(row_ids)
    ]
