"""
Row projection: (row-set, row index, column name) -> Cell.

Row-sets store raw API values (epoch seconds, tag lists, optional floats).
Conversion to cells happens here and only here:

- timestamps: epoch seconds -> microseconds (``seconds * 1_000_000``)
- alert tags: joined into one comma-separated string (a tag that itself
  contains a comma cannot be told apart afterwards)
- ``None`` -> ``Cell.null()`` regardless of the column type
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from weather_tables.cells import Cell, CellKind
from weather_tables.errors import RowIndexOutOfBounds, UnknownColumn

if TYPE_CHECKING:
    from weather_tables.columns import Column
    from weather_tables.rowsets import RowSet

TAG_SEPARATOR = ","


def to_cell(kind: CellKind, raw: Any) -> Cell:
    """Convert one raw row-set value to a cell of the column's kind."""
    if raw is None:
        return Cell.null()
    if kind is CellKind.FLOAT64:
        return Cell.float64(raw)
    if kind is CellKind.INT64:
        return Cell.int64(raw)
    if kind is CellKind.TIMESTAMP:
        return Cell.from_epoch_seconds(raw)
    if kind is CellKind.STRING:
        if isinstance(raw, Sequence) and not isinstance(raw, str):
            return Cell.string(TAG_SEPARATOR.join(raw))
        return Cell.string(str(raw))
    return Cell.null()


def lookup_column(rowset: RowSet, column_name: str) -> Column:
    """
    Find a column in the row-set's fixed catalog.

    Raises:
        UnknownColumn: If the endpoint has no such column.
    """
    column = rowset.column_map().get(column_name)
    if column is None:
        table = rowset.kind.value
        msg = f"unknown column '{column_name}' for {table} endpoint"
        raise UnknownColumn(msg, column=column_name, table=table)
    return column


def check_row_index(rowset: RowSet, row_index: int) -> None:
    """Raise :class:`RowIndexOutOfBounds` unless ``0 <= row_index < row_count``."""
    count = rowset.row_count()
    if row_index < 0 or row_index >= count:
        msg = (
            f"row index {row_index} out of bounds for {rowset.kind.value} "
            f"({count} row{'s' if count != 1 else ''})"
        )
        raise RowIndexOutOfBounds(msg, row_index=row_index, row_count=count)


def project(rowset: RowSet, row_index: int, column_name: str) -> Cell:
    """
    Return the cell at ``row_index`` for ``column_name``.

    Raises:
        RowIndexOutOfBounds: If the index is past the end of the row-set.
        UnknownColumn: If the column is not part of the endpoint's column set.
    """
    check_row_index(rowset, row_index)
    column = lookup_column(rowset, column_name)
    return to_cell(column.kind, rowset.raw_value(row_index, column))


def resolve_columns(rowset: RowSet, columns: Sequence[str] | None) -> list[Column]:
    """Resolve requested names (or all columns when None) to catalog entries."""
    if columns is None:
        return list(rowset.COLUMNS)
    return [lookup_column(rowset, name) for name in columns]


def project_row(
    rowset: RowSet, row_index: int, columns: Sequence[str] | None = None
) -> tuple[Cell, ...]:
    """Project every requested column at ``row_index``, in request order."""
    check_row_index(rowset, row_index)
    return tuple(
        to_cell(column.kind, rowset.raw_value(row_index, column))
        for column in resolve_columns(rowset, columns)
    )


def row_as_dict(
    rowset: RowSet, row_index: int, columns: Sequence[str] | None = None
) -> dict[str, Any]:
    """Project a row into ``{column: python value}``."""
    names = [c.name for c in resolve_columns(rowset, columns)]
    cells = project_row(rowset, row_index, names)
    return {name: cell.to_python() for name, cell in zip(names, cells, strict=True)}
