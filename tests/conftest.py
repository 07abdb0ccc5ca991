"""Shared fixtures: draft Appendix C vectors and request helpers."""

import base64
import json
from pathlib import Path

import pytest
from cryptography.hazmat.primitives import hashes, hmac, serialization
from cryptography.hazmat.primitives.asymmetric import ec, padding

from httpsign import Request

VECTORS_DIR = Path(__file__).resolve().parent.parent / "test_vectors"


def load_vector(name: str) -> dict:
    path = VECTORS_DIR / name
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def vector():
    return load_vector("draft_cavage_09.json")


@pytest.fixture
def public_key_pem(vector):
    return vector["public_key_pem"].encode()


@pytest.fixture
def private_key(vector):
    return serialization.load_pem_private_key(vector["private_key_pem"].encode(), password=None)


@pytest.fixture
def signature_params():
    """Build a signature parameters string."""

    def _build(signature, key_id="Test", algorithm="rsa-sha256", headers=None):
        if isinstance(signature, bytes):
            signature = base64.b64encode(signature).decode()
        parts = [f'keyId="{key_id}"', f'algorithm="{algorithm}"']
        if headers is not None:
            parts.append(f'headers="{headers}"')
        parts.append(f'signature="{signature}"')
        return ",".join(parts)

    return _build


@pytest.fixture
def make_request(vector):
    """Build the Appendix C request with extra headers appended."""

    def _make(*extra, headers=None):
        pairs = list((headers if headers is not None else vector["headers"]).items())
        pairs.extend(extra)
        return Request.from_url(vector["method"], vector["url"], pairs)

    return _make


@pytest.fixture
def signers(private_key):
    """Sign a message with each algorithm. Returns (signature, key_material)."""
    ec_key = ec.generate_private_key(ec.SECP256R1())
    ec_public_pem = ec_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    rsa_public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    secret = b"correct horse battery staple"

    def _hmac(message):
        h = hmac.HMAC(secret, hashes.SHA256())
        h.update(message)
        return h.finalize(), secret

    return {
        "rsa-sha256": lambda message: (
            private_key.sign(message, padding.PKCS1v15(), hashes.SHA256()),
            rsa_public_pem,
        ),
        "hmac-sha256": _hmac,
        "ecdsa-sha256": lambda message: (
            ec_key.sign(message, ec.ECDSA(hashes.SHA256())),
            ec_public_pem,
        ),
    }
