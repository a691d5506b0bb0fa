"""Utilities to work with Pandas data frames"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

import pandas as pd


def infer_datatype(series: pd.Series) -> str:
    """Maps the dtype of a data frame column to the datatype names used by value expressions.

    Columns that cannot be mapped to one of the more specific types are treated as *string* columns.
    """
    if pd.api.types.is_bool_dtype(series):
        return "boolean"
    if pd.api.types.is_numeric_dtype(series):
        return "number"
    if pd.api.types.is_datetime64_any_dtype(series):
        return "date"
    return "string"


def df_rows(df: pd.DataFrame) -> list[tuple[Any, ...]]:
    """Extracts all rows of a data frame as plain tuples, converting missing values to *None*."""
    cleaned = df.astype(object).where(pd.notna(df), None)
    return [tuple(row) for row in cleaned.itertuples(index=False, name=None)]


def as_df(columns: Sequence[str], rows: Iterable[Sequence[Any]]) -> pd.DataFrame:
    """Generates a new Pandas `DataFrame` from a list of column names and a collection of rows.

    Each row has to contain exactly one value per column. If no rows are supplied, an empty data frame with the requested
    columns is returned.
    """
    return pd.DataFrame([list(row) for row in rows], columns=list(columns))
