"""Delimited-text import and CSV export for datasets."""

from __future__ import annotations

import io
import math
from dataclasses import dataclass, field
from typing import Any, Sequence

import pandas as pd

from graphly.dataset import Dataset, DatasetConfig
from graphly.stats import RawRow

FIELD_SEPARATOR: str = r"[,;\t]"


@dataclass(frozen=True, slots=True)
class Table:
    headers: list[str] = field(default_factory=list)
    rows: list[dict[str, Any]] = field(default_factory=list)


def _cells(column: pd.Series) -> list[Any]:
    """Finite numbers become floats, everything else a trimmed string."""
    text = column.astype(str).str.strip()
    numeric = pd.to_numeric(text, errors="coerce")
    return [
        float(num) if not pd.isna(num) and math.isfinite(num) else raw
        for raw, num in zip(text, numeric)
    ]


def parse_delimited(text: str) -> Table:
    """Parse header + rows separated by commas, semicolons or tabs.

    Rows with too many fields, or with missing or empty fields, are skipped.
    """
    if not text.strip():
        return Table()
    # header=None pins the column count to the header line, so longer rows
    # are bad lines and shorter ones come back padded with NaN
    frame = pd.read_csv(
        io.StringIO(text.strip()),
        sep=FIELD_SEPARATOR,
        engine="python",
        header=None,
        dtype=str,
        skipinitialspace=True,
        on_bad_lines="skip",
    )
    headers = [str(h).strip() for h in frame.iloc[0]]
    body = frame.iloc[1:].dropna(how="any")
    columns = [_cells(body[col]) for col in body.columns]
    rows = [dict(zip(headers, values)) for values in zip(*columns)]
    return Table(headers, rows)


def dataset_from_table(table: Table, name: str = "Imported Data") -> Dataset:
    """Scatter dataset plotting the second column against the first."""
    if not table.rows:
        raise ValueError("table has no data rows")
    x_key = table.headers[0] if table.headers else "x"
    y_key = table.headers[1] if len(table.headers) > 1 else x_key
    return Dataset(
        name=name,
        rows=tuple(table.rows),
        config=DatasetConfig(kind="scatter", x_key=x_key, y_key=y_key),
    )


def _export_value(row: RawRow, key: str) -> str:
    value = row.get(key)
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _export_frame(ds: Dataset) -> pd.DataFrame:
    keys = (ds.config.x_key, ds.config.y_key)
    return pd.DataFrame(
        [[_export_value(row, key) for key in keys] for row in ds.rows],
        columns=[f"{ds.name} ({key})" for key in keys],
        dtype=object,
    )


def export_csv(datasets: Sequence[Dataset]) -> str:
    """Two columns per dataset side by side, padded to the longest one."""
    if not datasets:
        return ""
    frame = pd.concat([_export_frame(ds) for ds in datasets], axis=1)
    return frame.to_csv(index=False, na_rep="", lineterminator="\r\n")
