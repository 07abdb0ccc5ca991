"""Type definitions for httpsign.

Every verification attempt ends in exactly one outcome: ``Verified``,
``Forbidden`` or ``Error``. Expected failures are values, not exceptions.
"""

from dataclasses import dataclass
from typing import Any, Tuple, Union

DEFAULT_HEADERS = ("date",)


@dataclass(frozen=True)
class SignatureParameters:
    """Parameters parsed from a Signature or Authorization header."""

    key_id: str
    algorithm: str
    signature: bytes  # Base64-decoded
    headers: Tuple[str, ...] = DEFAULT_HEADERS


# -------------------------------------------------------------------------
# Error reasons
# -------------------------------------------------------------------------


@dataclass(frozen=True)
class MissingSignatureHeader:
    """Neither an ``Authorization: Signature`` nor a ``Signature`` header."""

    @property
    def message(self) -> str:
        return "No signature header found"


@dataclass(frozen=True)
class MalformedHeader:
    """A required signature parameter was not specified."""

    param: str

    @property
    def message(self) -> str:
        return f"Invalid header, [{self.param}] was not specified"


@dataclass(frozen=True)
class InvalidBase64:
    @property
    def message(self) -> str:
        return "Signature is not valid base64"


@dataclass(frozen=True)
class UnsupportedAlgorithm:
    token: str

    @property
    def message(self) -> str:
        return f"Unsupported algorithm, {self.token}"


@dataclass(frozen=True)
class KeyLoadError:
    """Key material could not be loaded as a key for the algorithm."""

    detail: str = ""

    @property
    def message(self) -> str:
        if self.detail:
            return f"Unable to load key: {self.detail}"
        return "Unable to load key"


Reason = Union[
    MissingSignatureHeader,
    MalformedHeader,
    InvalidBase64,
    UnsupportedAlgorithm,
    KeyLoadError,
]


# -------------------------------------------------------------------------
# Outcomes
# -------------------------------------------------------------------------


@dataclass(frozen=True)
class Verified:
    """The signature is valid. Carries the request, untouched."""

    request: Any

    ok = True

    def raise_for_outcome(self) -> None:
        return None


@dataclass(frozen=True)
class Forbidden:
    """The header was well formed but the signature does not match."""

    ok = False

    def raise_for_outcome(self) -> None:
        raise ForbiddenError("Signature verification failed")


@dataclass(frozen=True)
class Error:
    """Verification could not be attempted."""

    reason: Reason

    ok = False

    def raise_for_outcome(self) -> None:
        raise SignatureError(self.reason.message, reason=self.reason)


VerificationOutcome = Union[Verified, Forbidden, Error]


# -------------------------------------------------------------------------
# Exceptions
# -------------------------------------------------------------------------


class SignatureError(Exception):
    """Signature header could not be verified."""

    def __init__(self, message: str, reason: Any = None):
        self.message = message
        self.reason = reason
        super().__init__(f"SignatureError: {message}")


class ForbiddenError(SignatureError):
    """Signature did not match the signed headers."""
