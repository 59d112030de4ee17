"""
Foreign table DDL for every endpoint.

Statements are rendered from the same column catalogs the projector reads, so
a generated table can never declare a column that projection would reject.

Usage::

    from weather_tables.ddl import render_foreign_tables

    for statement in render_foreign_tables("openweather_server", schema="weather"):
        print(statement + ";")
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import TYPE_CHECKING

import jinja2

from weather_tables.endpoints import resolve, table_names
from weather_tables.errors import ConfigurationError
from weather_tables.rowsets import rowset_type

if TYPE_CHECKING:
    from collections.abc import Sequence

_TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"
# SQL text, not HTML: no autoescaping
_jinja_env = jinja2.Environment(
    loader=jinja2.FileSystemLoader(str(_TEMPLATE_DIR)),
    autoescape=False,
    keep_trailing_newline=False,
)

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _check_identifier(kind: str, value: str) -> str:
    if not _IDENTIFIER_RE.match(value):
        msg = f"{kind} '{value}' is not a plain SQL identifier"
        raise ConfigurationError(msg, setting=kind)
    return value


def render_foreign_table(table_name: str, server_name: str, schema: str | None = None) -> str:
    """
    Render one ``create foreign table`` statement (without trailing ``;``).

    Raises:
        UnsupportedEndpoint: If ``table_name`` is not a known table.
        ConfigurationError: If the server or schema name is not a plain identifier.
    """
    descriptor = resolve(table_name)
    _check_identifier("server", server_name)
    qualified = table_name
    if schema is not None:
        qualified = f"{_check_identifier('schema', schema)}.{table_name}"

    return (
        _jinja_env.get_template("foreign_table.sql.j2")
        .render(
            description=descriptor.description,
            qualified_name=qualified,
            table_name=table_name,
            server_name=server_name,
            columns=rowset_type(descriptor.kind).COLUMNS,
        )
        .strip()
    )


def render_foreign_tables(
    server_name: str,
    schema: str | None = None,
    tables: Sequence[str] | None = None,
) -> list[str]:
    """Render statements for ``tables`` (all eight, in registry order, by default)."""
    names = list(tables) if tables is not None else table_names()
    return [render_foreign_table(name, server_name, schema) for name in names]
