"""ASGI middleware for HTTP signature verification (FastAPI/Starlette)."""

import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Union

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from .request import from_starlette_request
from .signing import extract_key_id, locate_signature_header, parse_signature_header, verify
from .types import Error, Forbidden, VerificationOutcome

logger = logging.getLogger(__name__)

KeyMaterial = Optional[Union[bytes, str]]
KeyResolver = Callable[[str], Union[KeyMaterial, Awaitable[KeyMaterial]]]

DECISION_HEADER = "X-Signature-Decision"


def _header_error(view) -> Error:
    """Explain why no keyId could be extracted."""
    header = locate_signature_header(view)
    if isinstance(header, Error):
        return header
    return parse_signature_header(header)


class HTTPSignatureMiddleware(BaseHTTPMiddleware):
    """
    ASGI middleware for HTTP signature verification.

    Attaches the outcome to ``request.state.http_signature`` (``None`` when
    the signer's key could not be resolved).

    Args:
        app: ASGI application
        key_resolver: Called with the ``keyId``; returns key material or None
            if the key is unknown. May be a coroutine function; use one for
            lookups that do I/O so the event loop is not blocked.
        require_verified: If True (default), answer 401 for missing or
            malformed signatures and unknown keys, 403 for bad signatures.
            If False, operate in observe mode - attach state but allow all.

    Example (FastAPI):
        >>> app = FastAPI()
        >>> app.add_middleware(HTTPSignatureMiddleware, key_resolver=keys.get)
        >>>
        >>> @app.post("/inbox")
        >>> async def inbox(request: Request):
        ...     outcome = request.state.http_signature
    """

    def __init__(
        self,
        app: Any,
        key_resolver: KeyResolver,
        require_verified: bool = True,
    ):
        super().__init__(app)
        self.key_resolver = key_resolver
        self.require_verified = require_verified

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Any],
    ) -> Response:
        view = from_starlette_request(request)

        outcome: Optional[VerificationOutcome]
        key_id = extract_key_id(view)
        key_material = await self._resolve(key_id) if key_id is not None else None

        if key_id is None:
            outcome = _header_error(view)
        elif not key_material:
            logger.info("Unknown keyId=%s for %s %s", key_id, request.method, view.path)
            outcome = None
        else:
            outcome = verify(view, key_material)

        request.state.http_signature = outcome

        if outcome is not None and outcome.ok:
            response = await call_next(request)
            response.headers[DECISION_HEADER] = "allow"
            return response

        if self.require_verified:
            return self._deny(request, outcome, key_id)

        response = await call_next(request)
        response.headers[DECISION_HEADER] = "observe"
        return response

    async def _resolve(self, key_id: str) -> KeyMaterial:
        key_material = self.key_resolver(key_id)
        if inspect.isawaitable(key_material):
            key_material = await key_material
        return key_material

    def _deny(
        self,
        request: Request,
        outcome: Optional[VerificationOutcome],
        key_id: Optional[str],
    ) -> Response:
        if isinstance(outcome, Forbidden):
            status_code, error = 403, "Signature verification failed"
        elif isinstance(outcome, Error):
            status_code, error = 401, outcome.reason.message
        else:
            status_code, error = 401, f"Unknown keyId: {key_id}"

        logger.info(
            "Denied %s %s (keyId=%s): %s", request.method, request.url.path, key_id, error
        )
        headers = {DECISION_HEADER: "deny"}
        if status_code == 401:
            headers["WWW-Authenticate"] = 'Signature realm="httpsign"'
        return JSONResponse(status_code=status_code, content={"error": error}, headers=headers)
