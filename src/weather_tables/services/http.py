"""
HTTP transport: a retrying ``requests.Session`` behind a one-method protocol.

The scan engine only ever needs one blocking ``GET`` that yields a status code
and a body. :class:`SessionTransport` provides that on top of a session built
by :func:`create_session`, which retries transient failures (429, 502-504,
connection resets) with exponential backoff and injects a default timeout.

Usage::

    from weather_tables.services.http import SessionTransport

    transport = SessionTransport()
    resp = transport.get("https://api.openweathermap.org/data/3.0/onecall", params)
    print(resp.status_code, len(resp.body))

Tests and embedding hosts can pass any object with a matching ``get`` method.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from weather_tables import __version__
from weather_tables.errors import TransportError

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)

#: Default retry strategy for transient upstream errors.
DEFAULT_RETRY = Retry(
    total=4,
    backoff_factor=2,  # 0s, 2s, 4s, 8s between retries
    status_forcelist=[429, 502, 503, 504],
    allowed_methods=["GET", "HEAD", "OPTIONS"],
    raise_on_status=False,  # final status is checked by the scan
)

DEFAULT_TIMEOUT = 30  # seconds

DEFAULT_USER_AGENT = f"weather-tables/{__version__}"


@dataclass(frozen=True)
class HttpResponse:
    """Status code and decoded body of one response."""

    status_code: int
    body: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class Transport(Protocol):
    """A single blocking ``GET``."""

    def get(self, url: str, params: Sequence[tuple[str, str]]) -> HttpResponse: ...


def create_session(
    retry: Retry | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    user_agent: str = DEFAULT_USER_AGENT,
) -> requests.Session:
    """
    Build a ``requests.Session`` with retry adapter mounted.

    Args:
        retry: Custom retry strategy (defaults to ``DEFAULT_RETRY``).
        timeout: Default timeout applied to every request.
        user_agent: ``User-Agent`` header value.
    """
    s = requests.Session()
    adapter = HTTPAdapter(max_retries=retry or DEFAULT_RETRY)
    s.mount("https://", adapter)
    s.mount("http://", adapter)
    s.headers["User-Agent"] = user_agent
    s.headers["Accept"] = "application/json"

    # Wrap send so every request gets a timeout unless the caller overrides it.
    _original_send = s.send

    def _send_with_timeout(
        prepared: requests.PreparedRequest, **kwargs: object
    ) -> requests.Response:
        kwargs.setdefault("timeout", timeout)
        return _original_send(prepared, **kwargs)  # type: ignore[arg-type]

    s.send = _send_with_timeout  # type: ignore[method-assign]
    return s


class SessionTransport:
    """:class:`Transport` backed by a ``requests.Session``."""

    def __init__(self, session: requests.Session | None = None) -> None:
        self.session = session or create_session()

    def get(self, url: str, params: Sequence[tuple[str, str]]) -> HttpResponse:
        """
        Issue the request and return whatever the server answered.

        Non-2xx statuses are returned, not raised; the caller decides.

        Raises:
            TransportError: On connection failures, timeouts and exhausted
                retries.
        """
        try:
            resp = self.session.get(url, params=list(params))
        except requests.RequestException as e:
            msg = f"request to {url} failed: {e}"
            raise TransportError(msg, url=url) from e
        logger.debug("GET %s -> %d", url, resp.status_code)
        return HttpResponse(status_code=resp.status_code, body=resp.text)

    def close(self) -> None:
        self.session.close()
