"""Column catalog entries shared by row-sets, the projector and the DDL renderer."""

from __future__ import annotations

from dataclasses import dataclass

from weather_tables.cells import SQL_TYPES, CellKind


@dataclass(frozen=True)
class Column:
    """
    One output column of a table.

    ``source`` names the row-set attribute (or alert record attribute) the
    value is read from. ``per_row`` columns index into a parallel sequence;
    the others repeat one scalar on every row.
    """

    name: str
    kind: CellKind
    source: str
    per_row: bool = True
    nullable: bool = False

    @property
    def sql_type(self) -> str:
        return SQL_TYPES[self.kind]


def numeric(name: str, source: str | None = None, **kwargs: bool) -> Column:
    return Column(name, CellKind.FLOAT64, source or name, **kwargs)


def bigint(name: str, source: str | None = None, **kwargs: bool) -> Column:
    return Column(name, CellKind.INT64, source or name, **kwargs)


def text(name: str, source: str | None = None, **kwargs: bool) -> Column:
    return Column(name, CellKind.STRING, source or name, **kwargs)


def timestamp(name: str, source: str | None = None, **kwargs: bool) -> Column:
    return Column(name, CellKind.TIMESTAMP, source or name, **kwargs)


#: Coordinates repeated on every row.
LOCATION_COLUMNS = (
    numeric("latitude", per_row=False),
    numeric("longitude", per_row=False),
)
