"""Tests for algorithm dispatch and key loading."""

import pytest
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, padding, rsa

from httpsign import Algorithm, Error, KeyLoadError, UnsupportedAlgorithm, load_public_key, verify_signature

MESSAGE = b"date: Sun, 05 Jan 2014 21:31:40 GMT"


@pytest.mark.parametrize(
    "token, algorithm",
    [
        ("rsa-sha256", Algorithm.RSA),
        ("hmac-sha256", Algorithm.HMAC),
        ("ecdsa-sha256", Algorithm.ECDSA),
    ],
)
def test_from_token(token, algorithm):
    assert Algorithm.from_token(token) is algorithm


@pytest.mark.parametrize("token", ["dsa-sha1", "rsa-sha1", "hmac-sha512", "Rsa-Sha256", "rsa_sha256", ""])
def test_from_token_unsupported(token):
    assert Algorithm.from_token(token) == Error(UnsupportedAlgorithm(token))


@pytest.mark.parametrize("algorithm", ["rsa-sha256", "hmac-sha256", "ecdsa-sha256"])
def test_verify_signature(signers, algorithm):
    signature, key = signers[algorithm](MESSAGE)

    assert verify_signature(Algorithm(algorithm), MESSAGE, signature, key) is True
    assert verify_signature(Algorithm(algorithm), MESSAGE + b"x", signature, key) is False


def test_hmac_wrong_secret(signers):
    signature, _ = signers["hmac-sha256"](MESSAGE)
    assert verify_signature(Algorithm.HMAC, MESSAGE, signature, b"another secret") is False


def test_hmac_truncated_signature(signers):
    signature, key = signers["hmac-sha256"](MESSAGE)
    assert verify_signature(Algorithm.HMAC, MESSAGE, signature[:16], key) is False


def test_rsa_der_key(private_key):
    der = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )

    signature = private_key.sign(MESSAGE, padding.PKCS1v15(), hashes.SHA256())

    assert verify_signature(Algorithm.RSA, MESSAGE, signature, der) is True


def test_rsa_pkcs1_pem_key(private_key, signers):
    pkcs1 = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.PKCS1,
    )
    signature, _ = signers["rsa-sha256"](MESSAGE)

    assert verify_signature(Algorithm.RSA, MESSAGE, signature, pkcs1) is True


def test_ecdsa_p384_key():
    key = ec.generate_private_key(ec.SECP384R1())
    signature = key.sign(MESSAGE, ec.ECDSA(hashes.SHA256()))
    pem = key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )

    assert verify_signature(Algorithm.ECDSA, MESSAGE, signature, pem) is True


@pytest.mark.parametrize("algorithm", [Algorithm.RSA, Algorithm.ECDSA])
@pytest.mark.parametrize(
    "key_material",
    [
        b"not a key",
        b"-----BEGIN PUBLIC KEY-----\nAAAA\n-----END PUBLIC KEY-----\n",
    ],
)
def test_malformed_key(algorithm, key_material):
    result = verify_signature(algorithm, MESSAGE, b"sig", key_material)

    assert isinstance(result, Error)
    assert isinstance(result.reason, KeyLoadError)


def test_wrong_key_type_for_algorithm(signers):
    signature, ec_key = signers["ecdsa-sha256"](MESSAGE)
    _, rsa_key = signers["rsa-sha256"](MESSAGE)

    assert verify_signature(Algorithm.RSA, MESSAGE, signature, ec_key) == Error(
        KeyLoadError("not an RSA public key")
    )
    assert verify_signature(Algorithm.ECDSA, MESSAGE, signature, rsa_key) == Error(
        KeyLoadError("not an EC public key")
    )


def test_private_key_is_not_a_public_key():
    pem = rsa.generate_private_key(public_exponent=65537, key_size=2048).private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    with pytest.raises(ValueError):
        load_public_key(pem)
