"""Loading of the temperature series from CSV."""

from pathlib import Path
from typing import Optional, Union

import numpy as np
import pandas as pd

from inference.data import TemperatureSeries


def load_temperature_csv(
    csv_path: Union[str, Path],
    value_col: str = "temperature",
    time_col: Optional[str] = "year",
) -> TemperatureSeries:
    """
    Read, clean and sort a temperature series.

    Rows with a missing or non-numeric value are dropped. When ``time_col``
    is given the rows are sorted by it and it becomes the series labels.

    Raises
    ------
    ValueError
        If a requested column is missing or too few rows remain.
    OSError
        If the file cannot be read.
    """
    df = pd.read_csv(csv_path)
    for col in (value_col, time_col):
        if col is not None and col not in df.columns:
            raise ValueError(
                f"Column {col!r} not found in {csv_path}. Columns: {list(df.columns)}"
            )

    df[value_col] = pd.to_numeric(df[value_col], errors="coerce")
    df = df.dropna(subset=[value_col]).copy()

    labels = None
    if time_col is not None:
        df = df.sort_values(time_col)
        labels = df[time_col].to_numpy()
        if np.issubdtype(labels.dtype, np.floating) and np.all(labels == np.round(labels)):
            labels = labels.astype(np.int64)

    return TemperatureSeries(df[value_col].to_numpy(), labels=labels, name=value_col)
