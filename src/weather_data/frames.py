"""
Measurement Tables

pandas adapters between tabular weather measurements and the batch
processor. Raw tables go in as (identifier, readings) records; batch results
come back out as a numeric table.
"""
from typing import Any, Hashable, List, Optional, Sequence, Tuple
import logging
import os

import pandas as pd

from src.batch.records import BatchResult

logger = logging.getLogger(__name__)

ID_COLUMNS = ("longitude", "latitude")
OUTPUT_COLUMN = "apparent_temperature"


def _identifier(row: dict, id_columns: Sequence[str]) -> Hashable:
    if len(id_columns) == 1:
        return row[id_columns[0]]
    return tuple(row[c] for c in id_columns)


def records_from_frame(
    df: pd.DataFrame,
    id_columns: Sequence[str] = ID_COLUMNS,
    variables: Optional[Sequence[str]] = None
) -> List[Tuple[Hashable, dict]]:
    """
    Convert a measurement table to batch records

    Args:
        df: One row per site; identifier columns plus one column per variable
        id_columns: Columns forming the record identifier
        variables: Columns to pass as readings (default: every non-id column)

    Returns:
        List of (identifier, readings) pairs in row order
    """
    if df.empty:
        return []

    missing = [c for c in id_columns if c not in df.columns]
    if missing:
        raise ValueError(f"Measurement table is missing identifier columns: {missing}")

    if variables is None:
        variables = [c for c in df.columns if c not in id_columns]

    records = []
    for row in df.to_dict(orient="records"):
        # Absent variable columns surface as missing fields in the batch
        readings = {name: row.get(name) for name in variables}
        records.append((_identifier(row, id_columns), readings))

    return records


def read_measurements_csv(path: str) -> pd.DataFrame:
    """
    Read a measurement CSV with every column kept as text

    Numeric parsing is left to the batch processor so that malformed cells
    become skipped records instead of a failed read.
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Measurement file not found: {path}")

    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    df.columns = [c.strip() for c in df.columns]
    logger.info(f"Loaded {len(df)} measurement rows from {path}")
    return df


def results_to_frame(
    result: BatchResult,
    id_columns: Sequence[str] = ID_COLUMNS,
    value_column: str = OUTPUT_COLUMN
) -> pd.DataFrame:
    """
    Build a result table from a batch result

    Values stay numeric; undefined results are NaN.
    """
    columns: List[Any] = list(id_columns) + [value_column, "matched"]
    if not result.results:
        return pd.DataFrame(columns=columns)

    data = []
    for record in result.results:
        identifier = record.identifier
        ids = identifier if isinstance(identifier, tuple) else (identifier,)
        if len(ids) != len(id_columns):
            raise ValueError(
                f"Identifier {identifier!r} does not match id columns {list(id_columns)}"
            )
        row = dict(zip(id_columns, ids))
        row[value_column] = float("nan") if record.value is None else record.value
        row["matched"] = record.matched
        data.append(row)

    df = pd.DataFrame(data, columns=columns)
    df[value_column] = df[value_column].astype(float)
    return df


def site_kinds_from_frame(
    df: pd.DataFrame,
    id_columns: Sequence[str] = ID_COLUMNS,
    kind_column: str = "type"
) -> dict:
    """
    identifier -> site kind ("urban"/"rural") lookup from a measurement table

    Rows with a blank or missing kind are left out of the lookup.
    """
    if df.empty or kind_column not in df.columns:
        return {}
    kinds = {}
    for row in df.to_dict(orient="records"):
        kind = row[kind_column]
        if pd.isna(kind):
            continue
        kind = str(kind).strip().lower()
        if kind:
            kinds[_identifier(row, id_columns)] = kind
    return kinds
