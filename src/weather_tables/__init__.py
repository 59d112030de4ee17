"""weather-tables - the OpenWeather One Call 3.0 API as read-only tables.

Architecture::

    endpoints.py    Table name -> endpoint descriptor (8 tables, 4 API paths)
    parameters.py   Predicate list -> validated QueryParameters
    request.py      Descriptor + parameters + credentials -> outbound GET
    decoders.py     JSON document -> typed row-set, one routine per endpoint
    rowsets.py      Row-set dataclasses and their column catalogs
    projector.py    (row-set, row, column) -> Cell
    scan.py         ScanContext: begin / next / end / rescan
    services/       Shared HTTP session with retry and timeout
    ddl.py          Foreign table definitions rendered from the column catalogs
    cli.py          ``weather-tables`` command

Data flow: endpoints -> parameters -> request -> (HTTP) -> decoders -> projector,
driven by scan.ScanContext.

Adding a table
--------------
1. Add an ``EndpointKind`` case and descriptor in ``endpoints.py``.
2. Add a row-set dataclass with its ``COLUMNS`` in ``rowsets.py``.
3. Add a ``decode_*`` function in ``decoders.py`` and register it in ``DECODERS``.
4. Add a JSON fixture and decoder tests under ``tests/``.
"""

__version__ = "0.1.0"

from weather_tables.cells import Cell, CellKind
from weather_tables.config import Settings, get_settings
from weather_tables.errors import ErrorKind, WeatherTableError
from weather_tables.parameters import Predicate
from weather_tables.scan import ScanContext, scan

__all__ = [
    "Cell",
    "CellKind",
    "ErrorKind",
    "Predicate",
    "ScanContext",
    "Settings",
    "WeatherTableError",
    "__version__",
    "get_settings",
    "scan",
]
