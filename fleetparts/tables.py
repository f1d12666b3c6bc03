"""Readers for the raw roster and maintenance log tables."""

import logging
from pathlib import Path
from typing import Any, List, Sequence, Union

import pandas as pd

logger = logging.getLogger(__name__)

CSV_SUFFIXES = (".csv",)
EXCEL_SUFFIXES = (".xlsx", ".xls")

# Cells past this column are never read by derivation.
MAX_COLUMNS = 64


def _truncate_line(fields: List[str]) -> List[str]:
    logger.warning("Row with %d cells truncated to %d", len(fields), MAX_COLUMNS)
    return fields[:MAX_COLUMNS]


def _is_padding(cell: Any, blank_is_padding: bool) -> bool:
    return pd.isna(cell) or (blank_is_padding and cell == "")


def _row_cells(values: Sequence[Any], blank_is_padding: bool = False) -> List[str]:
    """
    Row as text cells, without the padding pandas adds past the row's end.

    CSV cells present in the file but empty stay as "". Worksheets have no
    such distinction, so trailing blank cells are dropped there
    (`blank_is_padding`), as a spreadsheet export does.
    """
    cells = list(values)
    while cells and _is_padding(cells[-1], blank_is_padding):
        cells.pop()
    return ["" if pd.isna(cell) else str(cell) for cell in cells]


def load_rows(filename: Union[str, Path], sheet_name: Union[str, int] = 0) -> List[List[str]]:
    """
    Read a table as rows of string cells, header row included.

    Every cell is read as text with no NA conversion. Rows keep their own
    length: short rows are not padded and long rows are not rejected, so
    row-length checks see the same shape a spreadsheet export would. An
    empty file yields no rows.
    """
    path = Path(filename)
    if not path.exists():
        raise FileNotFoundError(f"Table file not found: {path}")

    suffix = path.suffix.lower()
    try:
        if suffix in CSV_SUFFIXES:
            df = pd.read_csv(
                path,
                header=None,
                names=list(range(MAX_COLUMNS)),
                dtype=str,
                keep_default_na=False,
                engine="python",
                on_bad_lines=_truncate_line,
            )
        elif suffix in EXCEL_SUFFIXES:
            df = pd.read_excel(
                path, sheet_name=sheet_name, header=None, dtype=str, keep_default_na=False
            )
        else:
            raise ValueError(f"Unsupported table format: {path.suffix}")
    except pd.errors.EmptyDataError:
        logger.warning("Table %s is empty", path)
        return []

    blank_is_padding = suffix in EXCEL_SUFFIXES
    rows = [_row_cells(row, blank_is_padding) for row in df.values.tolist()]
    logger.info("Read %d rows from %s", len(rows), path)
    return rows
