"""HTTP Signatures verification.

Implements signature verification per draft-cavage-http-signatures-09:

    1. Find the signature parameters in ``Authorization: Signature ...`` or
       ``Signature: ...``.
    2. Rebuild the signing string from the ``headers`` parameter.
    3. Verify the base64 decoded ``signature`` with ``algorithm`` and the
       caller's key material.

Each step returns an ``Error`` instead of raising, so ``verify`` can stop at
the first failure and report why.
"""

import base64
import binascii
import logging
import re
from typing import Optional, Sequence, Union

from .crypto import Algorithm, verify_signature
from .request import RequestView
from .types import (
    DEFAULT_HEADERS,
    Error,
    Forbidden,
    InvalidBase64,
    MalformedHeader,
    MissingSignatureHeader,
    SignatureParameters,
    VerificationOutcome,
    Verified,
)

logger = logging.getLogger(__name__)

AUTHORIZATION_SCHEME = "Signature "
REQUEST_TARGET = "(request-target)"

REQUIRED_PARAMS = ("keyId", "algorithm", "signature")


def locate_signature_header(request: RequestView) -> Union[str, Error]:
    """Find the raw signature parameters string.

    ``Authorization`` wins over ``Signature`` if both are sent, since that
    is the order the draft lists them in.
    """
    authorization = request.get_header("authorization")
    if len(authorization) == 1 and authorization[0].startswith(AUTHORIZATION_SCHEME):
        return authorization[0][len(AUTHORIZATION_SCHEME):]

    signature = request.get_header("signature")
    if len(signature) == 1:
        return signature[0]

    return Error(MissingSignatureHeader())


def _get_param(header: str, param: str) -> Optional[str]:
    # If a parameter is duplicated, the last one MUST be used
    values = re.findall(rf'{re.escape(param)}="([^"]+)"', header)
    if not values:
        return None
    return values[-1]


def parse_signature_header(header: str) -> Union[SignatureParameters, Error]:
    """Parse ``keyId``, ``algorithm``, ``headers`` and ``signature``.

    Args:
        header: Signature parameters, e.g. ``keyId="Test",algorithm="rsa-sha256",...``

    Returns:
        SignatureParameters, or an Error naming the missing parameter or
        reporting an undecodable signature.
    """
    params = {}
    for name in REQUIRED_PARAMS:
        value = _get_param(header, name)
        if value is None:
            return Error(MalformedHeader(name))
        params[name] = value

    headers = _get_param(header, "headers")
    # Header names are split verbatim, no lowercasing
    header_names = tuple(headers.split(" ")) if headers else DEFAULT_HEADERS

    try:
        signature = base64.b64decode(params["signature"], validate=True)
    except binascii.Error:
        return Error(InvalidBase64())

    return SignatureParameters(
        key_id=params["keyId"],
        algorithm=params["algorithm"],
        signature=signature,
        headers=header_names,
    )


def _header_line(request: RequestView, name: str) -> str:
    if name == REQUEST_TARGET:
        # The "?" is always present, even without a query string
        return f"{REQUEST_TARGET}: {request.method.lower()} {request.path}?{request.query_string}"

    # Missing headers produce an empty value rather than an error
    values = [value.strip() for value in request.get_header(name)]
    return f"{name}: {', '.join(values)}"


def build_signing_string(headers: Sequence[str], request: RequestView) -> bytes:
    """Rebuild the string the client signed.

    One ``name: value`` line per entry in ``headers``, in that order, joined
    with ``\\n`` and no trailing newline. Repeated headers are joined with
    ``", "`` in the order they were received.
    """
    return "\n".join(_header_line(request, name) for name in headers).encode("utf-8")


def extract_key_id(request: RequestView) -> Optional[str]:
    """Extract the ``keyId`` so the caller can look up key material."""
    header = locate_signature_header(request)
    if isinstance(header, Error):
        return None
    params = parse_signature_header(header)
    if isinstance(params, Error):
        return None
    return params.key_id


def verify(request: RequestView, key_material: Union[bytes, str]) -> VerificationOutcome:
    """Verify the signature of an HTTP request.

    Args:
        request: Request view (see ``httpsign.request``)
        key_material: Public key (PEM or DER) or shared secret for ``keyId``

    Returns:
        ``Verified(request)`` if the signature is valid, ``Forbidden()`` if it
        does not match, ``Error(reason)`` if it could not be checked.

    Raises:
        ValueError: If key_material is empty.
    """
    if isinstance(key_material, str):
        key_material = key_material.encode("utf-8")
    if not key_material:
        raise ValueError("key_material must not be empty")

    header = locate_signature_header(request)
    if isinstance(header, Error):
        return _reject(header)

    params = parse_signature_header(header)
    if isinstance(params, Error):
        return _reject(params)

    algorithm = Algorithm.from_token(params.algorithm)
    if isinstance(algorithm, Error):
        return _reject(algorithm, params.key_id)

    signing_string = build_signing_string(params.headers, request)

    result = verify_signature(algorithm, signing_string, params.signature, key_material)
    if isinstance(result, Error):
        return _reject(result, params.key_id)
    if not result:
        logger.debug("Signature mismatch for keyId=%s", params.key_id)
        return Forbidden()

    return Verified(request)


def _reject(error: Error, key_id: Optional[str] = None) -> Error:
    logger.debug("Signature rejected (keyId=%s): %s", key_id, error.reason.message)
    return error
