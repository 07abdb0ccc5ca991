"""Read-only request view consumed by the verifier.

The verifier never touches a framework request directly. Anything that
provides ``method``, ``path``, ``query_string`` and a case-insensitive,
multi-valued ``get_header`` can be verified; the helpers below build one
from common request types.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Protocol, Tuple, Union
from urllib.parse import quote, urlsplit

import httpx

HeaderItems = Union[Mapping[str, str], Iterable[Tuple[str, str]]]


class RequestView(Protocol):
    """What the verifier needs to know about a request."""

    method: str
    path: str
    query_string: str

    def get_header(self, name: str) -> List[str]:
        ...


def _header_pairs(headers: HeaderItems) -> Tuple[Tuple[str, str], ...]:
    if isinstance(headers, Mapping):
        headers = headers.items()
    return tuple((str(name), str(value)) for name, value in headers)


@dataclass(frozen=True)
class Request:
    """A plain request view.

    Headers are kept as ``(name, value)`` pairs in the order they were
    received, so repeated headers keep their transmission order.
    """

    method: str
    path: str
    query_string: str = ""
    headers: Tuple[Tuple[str, str], ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "headers", _header_pairs(self.headers))

    def get_header(self, name: str) -> List[str]:
        """Return every value of ``name``, case-insensitively, in order."""
        name = name.lower()
        return [value for key, value in self.headers if key.lower() == name]

    @classmethod
    def from_url(cls, method: str, url: str, headers: HeaderItems = ()) -> "Request":
        """Build a request view from a method, a URL and its headers.

        Args:
            method: HTTP method (GET, POST, etc.)
            url: Full URL or origin-form target, e.g. ``/foo?a=b``
            headers: Dict or list of ``(name, value)`` pairs

        Returns:
            Request view with path and query split out of the URL.
        """
        parsed = urlsplit(url)
        return cls(
            method=method,
            path=parsed.path or "/",
            query_string=parsed.query,
            headers=headers,
        )


# -------------------------------------------------------------------------
# Framework adapters
# -------------------------------------------------------------------------


def _wsgi_raw_path(environ: Dict[str, Any]) -> str:
    # PATH_INFO is percent-decoded; prefer the target as sent on the wire
    raw_uri = environ.get("RAW_URI") or environ.get("REQUEST_URI")
    if raw_uri:
        path = raw_uri.partition("?")[0]
        if "://" in path:
            # Absolute-form target
            path = urlsplit(path).path
        return path or "/"

    path = environ.get("SCRIPT_NAME", "") + environ.get("PATH_INFO", "")
    return quote(path.encode("latin-1"), safe="/;=,:@!$&'()*+~") or "/"


def from_wsgi_environ(environ: Dict[str, Any]) -> Request:
    """Build a request view from a WSGI environ."""
    headers: List[Tuple[str, str]] = []
    for key, value in environ.items():
        if key.startswith("HTTP_"):
            # HTTP_CONTENT_MD5 -> content-md5
            headers.append((key[5:].replace("_", "-").lower(), value))
        elif key == "CONTENT_TYPE" and value:
            headers.append(("content-type", value))
        elif key == "CONTENT_LENGTH" and value:
            headers.append(("content-length", value))

    return Request(
        method=environ.get("REQUEST_METHOD", "GET"),
        path=_wsgi_raw_path(environ),
        query_string=environ.get("QUERY_STRING", ""),
        headers=headers,
    )


def from_starlette_request(request: Any) -> Request:
    """Build a request view from a Starlette (or FastAPI) request.

    Uses the raw path as sent on the wire when the server provides it.
    """
    raw_path = request.scope.get("raw_path")
    path = raw_path.decode("latin-1") if raw_path else request.url.path
    return Request(
        method=request.method,
        path=path,
        query_string=request.url.query,
        headers=request.headers.items(),
    )


def from_httpx_request(request: httpx.Request) -> Request:
    """Build a request view from an ``httpx.Request``."""
    target = request.url.raw_path.decode("ascii")
    path, _, query = target.partition("?")
    return Request(
        method=request.method,
        path=path or "/",
        query_string=query,
        headers=request.headers.multi_items(),
    )
