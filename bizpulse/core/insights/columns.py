"""
Column Model — Boundary Validation & Numeric Coercion
=======================================================
Raw tabular input arrives as loosely-typed descriptors
({name, type, values}) or as a pandas DataFrame. It is validated and coerced
here exactly once; everything downstream works on immutable `Column`
records whose numeric view is already extracted.

  Column.from_raw()        — one descriptor → Column
  build_columns()          — list of descriptors → List[Column]
  columns_from_dataframe() — DataFrame → List[Column] with inferred types
  columns_from_records()   — list of row dicts → List[Column]
"""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import pandas as pd

logger = logging.getLogger(__name__)

# Share of non-null cells that must coerce for a column to count as numeric/date
TYPE_INFERENCE_RATIO = 0.8
# Distinct-value ratio under which a string column is treated as categorical
CATEGORICAL_UNIQUE_RATIO = 0.5


class ColumnValidationError(ValueError):
    """Malformed column descriptor rejected at the boundary."""


class ColumnType(str, Enum):
    NUMERIC = "numeric"
    DATE = "date"
    CATEGORICAL = "categorical"
    TEXT = "text"

    @classmethod
    def parse(cls, raw: Any) -> 'ColumnType':
        if isinstance(raw, ColumnType):
            return raw
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            allowed = ", ".join(t.value for t in cls)
            raise ColumnValidationError(f"Unknown column type {raw!r} (expected one of: {allowed})")


def is_null(value: Any) -> bool:
    """None, empty string and float NaN count as missing cells."""
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, float):
        return math.isnan(value)
    return False


def to_number(value: Any) -> Optional[float]:
    """Finite float for numbers and numeric strings, else None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        # numpy scalars and Decimal
        try:
            number = float(value)
        except (TypeError, ValueError):
            return None
    return number if math.isfinite(number) else None


@dataclass(frozen=True)
class Column:
    """A named, typed, read-only sequence of raw cells plus its numeric view."""
    name: str
    column_type: ColumnType
    values: Tuple[Any, ...]
    numeric_values: Tuple[Optional[float], ...] = field(repr=False)

    @classmethod
    def from_raw(cls, name: Any, column_type: Any, values: Optional[Iterable[Any]]) -> 'Column':
        if not isinstance(name, str) or not name.strip():
            raise ColumnValidationError(f"Column name must be a non-empty string, got {name!r}")
        ctype = ColumnType.parse(column_type)
        if values is None:
            values = ()
        elif isinstance(values, (str, bytes, dict)):
            raise ColumnValidationError(f"Column '{name}' values must be a sequence of cells")
        frozen = tuple(values)

        if ctype == ColumnType.DATE:
            numeric = tuple(None for _ in frozen)
        else:
            numeric = tuple(to_number(v) for v in frozen)

        return cls(name=name, column_type=ctype, values=frozen, numeric_values=numeric)

    @property
    def total_cells(self) -> int:
        return len(self.values)

    @property
    def non_null_cells(self) -> int:
        return sum(1 for v in self.values if not is_null(v))

    @property
    def has_numeric(self) -> bool:
        return any(v is not None for v in self.numeric_values)


def build_columns(descriptors: Sequence[Dict[str, Any]]) -> List[Column]:
    """Validate a list of {name, type, values} descriptors."""
    columns: List[Column] = []
    seen = set()
    for i, desc in enumerate(descriptors or []):
        if not isinstance(desc, dict):
            raise ColumnValidationError(f"Column descriptor #{i} must be an object")
        col = Column.from_raw(desc.get("name"), desc.get("type", "numeric"), desc.get("values"))
        if col.name in seen:
            raise ColumnValidationError(f"Duplicate column name '{col.name}'")
        seen.add(col.name)
        columns.append(col)
    return columns


# ═══════════════════════════════════════════════════════════════
# PANDAS ADAPTERS
# ═══════════════════════════════════════════════════════════════

def infer_column_type(series: pd.Series) -> ColumnType:
    """Infer numeric / date / categorical / text from a pandas Series."""
    if pd.api.types.is_bool_dtype(series):
        return ColumnType.CATEGORICAL
    if pd.api.types.is_numeric_dtype(series):
        return ColumnType.NUMERIC
    if pd.api.types.is_datetime64_any_dtype(series):
        return ColumnType.DATE

    non_null = series.dropna()
    non_null = non_null[non_null.astype(str).str.strip() != ""]
    if non_null.empty:
        return ColumnType.TEXT

    numeric = pd.to_numeric(non_null, errors="coerce")
    if numeric.notna().mean() >= TYPE_INFERENCE_RATIO:
        return ColumnType.NUMERIC

    try:
        dates = pd.to_datetime(non_null.astype(str), errors="coerce", format="mixed")
    except (TypeError, ValueError):
        dates = pd.Series([pd.NaT] * len(non_null))
    if dates.notna().mean() >= TYPE_INFERENCE_RATIO:
        return ColumnType.DATE

    if non_null.nunique() / len(non_null) <= CATEGORICAL_UNIQUE_RATIO:
        return ColumnType.CATEGORICAL
    return ColumnType.TEXT


def columns_from_dataframe(df: pd.DataFrame,
                           type_hints: Optional[Dict[str, str]] = None) -> List[Column]:
    """Convert a DataFrame to Columns, inferring types unless hinted."""
    type_hints = type_hints or {}
    columns: List[Column] = []
    for name in df.columns:
        series = df[name]
        raw = series.astype(object).tolist()
        nested = next((v for v in raw if not pd.api.types.is_scalar(v)), None)
        if nested is not None:
            raise ColumnValidationError(
                f"Column '{name}' holds a non-scalar cell ({type(nested).__name__}); "
                f"cells must be numbers, strings, dates or null"
            )
        ctype = type_hints.get(str(name)) or infer_column_type(series)
        cells = [None if pd.isna(v) else v for v in raw]
        columns.append(Column.from_raw(str(name), ctype, cells))
    logger.debug(f"Built {len(columns)} columns from DataFrame shape={df.shape}")
    return columns


def columns_from_records(rows: Sequence[Dict[str, Any]],
                         type_hints: Optional[Dict[str, str]] = None) -> List[Column]:
    """Convert row dicts (as parsed from CSV/JSON uploads) to Columns."""
    if not rows:
        return []
    return columns_from_dataframe(pd.DataFrame.from_records(list(rows)), type_hints)
