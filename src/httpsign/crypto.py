"""Signature verification for the supported algorithms.

Supported algorithms are ``rsa-sha256``, ``hmac-sha256`` and ``ecdsa-sha256``.
The math is done by ``cryptography``; this module only loads keys and maps
algorithm tokens to the right check.
"""

import enum
from typing import Callable, Dict, Union

from cryptography import exceptions as crypto_exceptions
from cryptography.hazmat.primitives import hashes, hmac, serialization
from cryptography.hazmat.primitives.asymmetric import ec, padding, rsa

from .types import Error, KeyLoadError, UnsupportedAlgorithm


class Algorithm(enum.Enum):
    """The closed set of signature algorithms a ``algorithm`` token can name."""

    RSA = "rsa-sha256"
    HMAC = "hmac-sha256"
    ECDSA = "ecdsa-sha256"

    @classmethod
    def from_token(cls, token: str) -> Union["Algorithm", Error]:
        """Look up an algorithm token. Tokens are case-sensitive."""
        try:
            return cls(token)
        except ValueError:
            return Error(UnsupportedAlgorithm(token))


def load_public_key(key_material: bytes):
    """Load a PEM or DER encoded public key.

    Raises:
        ValueError: If the key material is not a public key.
    """
    try:
        if key_material.lstrip().startswith(b"-----BEGIN"):
            return serialization.load_pem_public_key(key_material)
        return serialization.load_der_public_key(key_material)
    except crypto_exceptions.UnsupportedAlgorithm as e:
        raise ValueError(str(e)) from e


def _verify_rsa(message: bytes, signature: bytes, key_material: bytes) -> Union[bool, Error]:
    try:
        public_key = load_public_key(key_material)
    except ValueError as e:
        return Error(KeyLoadError(str(e)))
    if not isinstance(public_key, rsa.RSAPublicKey):
        return Error(KeyLoadError("not an RSA public key"))

    try:
        public_key.verify(signature, message, padding.PKCS1v15(), hashes.SHA256())
        return True
    except crypto_exceptions.InvalidSignature:
        return False


def _verify_ecdsa(message: bytes, signature: bytes, key_material: bytes) -> Union[bool, Error]:
    try:
        public_key = load_public_key(key_material)
    except ValueError as e:
        return Error(KeyLoadError(str(e)))
    if not isinstance(public_key, ec.EllipticCurvePublicKey):
        return Error(KeyLoadError("not an EC public key"))

    # Signature is DER encoded (r, s); the curve comes from the key
    try:
        public_key.verify(signature, message, ec.ECDSA(hashes.SHA256()))
        return True
    except crypto_exceptions.InvalidSignature:
        return False


def _verify_hmac(message: bytes, signature: bytes, key_material: bytes) -> Union[bool, Error]:
    h = hmac.HMAC(key_material, hashes.SHA256())
    h.update(message)
    try:
        h.verify(signature)  # Constant-time comparison
        return True
    except crypto_exceptions.InvalidSignature:
        return False


_VERIFIERS: Dict[Algorithm, Callable[[bytes, bytes, bytes], Union[bool, Error]]] = {
    Algorithm.RSA: _verify_rsa,
    Algorithm.HMAC: _verify_hmac,
    Algorithm.ECDSA: _verify_ecdsa,
}


def verify_signature(
    algorithm: Algorithm,
    message: bytes,
    signature: bytes,
    key_material: bytes,
) -> Union[bool, Error]:
    """Check a signature over a message.

    Args:
        algorithm: Algorithm to verify with
        message: The signing string
        signature: Decoded signature bytes
        key_material: Public key (PEM or DER) for RSA/ECDSA, shared secret for HMAC

    Returns:
        True if the signature matches, False if it does not, or an
        ``Error(KeyLoadError)`` if the key material cannot be used.
    """
    return _VERIFIERS[algorithm](message, signature, key_material)
