"""
pkitrust_core.crypto
--------------------
Key and certificate primitives used by the trust core, all delegated to
the `cryptography` package:

- RSA key generation and PEM (de)serialization of private keys
- DER/PEM certificate decoding
- Certificate thumbprints (SHA-1 over the DER encoding)
- Issuer signature verification

Nothing here implements a primitive itself.
"""

from __future__ import annotations
from typing import Optional
import os

from cryptography import x509
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from .constants import ALLOWED_KEY_BITS
from .utils import sha1


# --------- RSA keys ----------
def rsa_generate(bits: int) -> rsa.RSAPrivateKey:
    if bits not in ALLOWED_KEY_BITS:
        raise ValueError(f"Unsupported RSA key length: {bits}")
    return rsa.generate_private_key(public_exponent=65537, key_size=bits)


def private_key_to_pem(key: rsa.RSAPrivateKey) -> bytes:
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    )


def write_private_key(path: str, key: rsa.RSAPrivateKey) -> None:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "wb") as f:
        f.write(private_key_to_pem(key))
    os.chmod(path, 0o600)


def load_private_key(path: str, password: Optional[bytes] = None) -> rsa.RSAPrivateKey:
    with open(path, "rb") as f:
        return serialization.load_pem_private_key(f.read(), password=password)


# --------- Certificates ----------
def decode_certificate(data: bytes) -> x509.Certificate:
    # PEM first, then DER
    try:
        return x509.load_pem_x509_certificate(data)
    except ValueError:
        return x509.load_der_x509_certificate(data)


def certificate_to_der(cert: x509.Certificate) -> bytes:
    return cert.public_bytes(serialization.Encoding.DER)


def certificate_to_pem(cert: x509.Certificate) -> bytes:
    return cert.public_bytes(serialization.Encoding.PEM)


def csr_to_pem(csr: x509.CertificateSigningRequest) -> bytes:
    return csr.public_bytes(serialization.Encoding.PEM)


def make_thumbprint(der: bytes) -> str:
    """
    Compute the thumbprint of a DER encoded certificate.

    - Input: raw DER bytes
    - Output: lowercase hex SHA-1 digest (40 chars)

    The thumbprint is the primary key of every trust decision; two
    certificates with identical bytes always share it.
    """
    return sha1(der)


def verify_issued_by(cert: x509.Certificate, issuer: x509.Certificate) -> bool:
    try:
        cert.verify_directly_issued_by(issuer)
        return True
    except (ValueError, TypeError, InvalidSignature):
        return False
