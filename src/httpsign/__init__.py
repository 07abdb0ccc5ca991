"""httpsign - HTTP Signatures verification.

Verifies requests signed per draft-cavage-http-signatures-09.
Supported algorithms are rsa-sha256, hmac-sha256 and ecdsa-sha256.
"""

from .crypto import Algorithm, load_public_key, verify_signature
from .request import (
    Request,
    RequestView,
    from_httpx_request,
    from_starlette_request,
    from_wsgi_environ,
)
from .signing import (
    build_signing_string,
    extract_key_id,
    locate_signature_header,
    parse_signature_header,
    verify,
)
from .types import (
    Error,
    Forbidden,
    ForbiddenError,
    InvalidBase64,
    KeyLoadError,
    MalformedHeader,
    MissingSignatureHeader,
    SignatureError,
    SignatureParameters,
    UnsupportedAlgorithm,
    VerificationOutcome,
    Verified,
)

__version__ = "0.1.1"
__all__ = [
    # Verification
    "verify",
    "extract_key_id",
    # Pipeline steps
    "locate_signature_header",
    "parse_signature_header",
    "build_signing_string",
    "verify_signature",
    "load_public_key",
    "Algorithm",
    # Request views
    "Request",
    "RequestView",
    "from_wsgi_environ",
    "from_starlette_request",
    "from_httpx_request",
    # Types
    "SignatureParameters",
    "VerificationOutcome",
    "Verified",
    "Forbidden",
    "Error",
    "MissingSignatureHeader",
    "MalformedHeader",
    "InvalidBase64",
    "UnsupportedAlgorithm",
    "KeyLoadError",
    "SignatureError",
    "ForbiddenError",
]

# Middleware requires starlette (optional extra)
try:
    from .middleware import HTTPSignatureMiddleware
    __all__.append("HTTPSignatureMiddleware")
except ImportError:
    pass
