"""
CSV dataset loading.

`load_csv` reads a numeric, comma-separated file where one column holds the
label and every other column a feature, and returns tensors laid out for
`Sequential.fit`: one sample per batch.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Tuple, Union

import numpy as np

from ...domain._errors import ConfigurationError
from ..tensor._tensor import Tensor


def _has_header(path: Path) -> bool:
    with path.open("r", encoding="utf-8") as fh:
        first = fh.readline()
    for cell in first.strip().split(","):
        try:
            float(cell)
        except ValueError:
            return True
    return False


def load_csv(
    path: Union[str, Path],
    label_column: int = 0,
    skip_header: Optional[bool] = None,
) -> Tuple[Tensor, Tensor]:
    """
    Load a labelled numeric CSV file.

    Parameters
    ----------
    path : str | Path
        CSV file path.
    label_column : int, optional
        Index of the label column (negative indices count from the right).
    skip_header : bool, optional
        Whether the first line is a header. Detected from the first line
        when omitted.

    Returns
    -------
    Tuple[Tensor, Tensor]
        Features shaped ``(N, 1, 1, F)`` and labels shaped ``(N, 1, 1, 1)``.

    Raises
    ------
    FileNotFoundError
        If ``path`` does not exist.
    ConfigurationError
        If the file holds no rows, a non-numeric cell, or too few columns.
    """
    p = Path(path)
    if skip_header is None:
        skip_header = _has_header(p)
    try:
        table = np.loadtxt(p, delimiter=",", skiprows=1 if skip_header else 0, ndmin=2)
    except ValueError as e:
        raise ConfigurationError(f"{p} contains non-numeric data: {e}") from e

    if table.size == 0:
        raise ConfigurationError(f"{p} contains no data rows.")
    rows, cols = table.shape
    if cols < 2:
        raise ConfigurationError(f"{p} needs a label column and at least one feature.")
    if not -cols <= label_column < cols:
        raise ConfigurationError(f"label_column {label_column} outside {cols} columns.")

    label_index = label_column % cols
    labels = table[:, label_index]
    features = np.delete(table, label_index, axis=1)
    return (
        Tensor.from_data((rows, 1, 1, cols - 1), features.reshape(-1)),
        Tensor.from_data((rows, 1, 1, 1), labels),
    )
