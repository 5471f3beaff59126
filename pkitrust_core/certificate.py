# pkitrust_core/certificate.py
from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from cryptography import x509

from .crypto import certificate_to_der, decode_certificate, make_thumbprint
from .errors import SecurityChecksFailed
from .utils import ensure_utc, pem_encode


@dataclass(frozen=True)
class Certificate:
    """
    Immutable view of a peer certificate.

    `der` is the identity of the certificate: the thumbprint is derived from
    it and nothing else. The parsed fields are informational and only feed
    the validity-window and URI checks.
    """
    der: bytes
    not_before: datetime
    not_after: datetime
    subject_application_uri: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "not_before", ensure_utc(self.not_before))
        object.__setattr__(self, "not_after", ensure_utc(self.not_after))

    @property
    def thumbprint(self) -> str:
        return make_thumbprint(self.der)

    def to_pem(self) -> bytes:
        return pem_encode(self.der)

    @classmethod
    def from_x509(cls, cert: x509.Certificate) -> "Certificate":
        return cls(
            der=certificate_to_der(cert),
            not_before=cert.not_valid_before_utc,
            not_after=cert.not_valid_after_utc,
            subject_application_uri=application_uri_of(cert),
        )

    @classmethod
    def load(cls, data: bytes) -> "Certificate":
        """Parse PEM or DER bytes; undecodable input is a failed security check."""
        try:
            return cls.from_x509(decode_certificate(data))
        except (ValueError, x509.DuplicateExtension) as e:
            raise SecurityChecksFailed(f"Unable to decode certificate: {e}") from e

    @classmethod
    def from_file(cls, path: str) -> "Certificate":
        with open(path, "rb") as f:
            return cls.load(f.read())


def application_uri_of(cert: x509.Certificate) -> Optional[str]:
    try:
        san = cert.extensions.get_extension_for_class(x509.SubjectAlternativeName).value
    except x509.ExtensionNotFound:
        return None
    uris = san.get_values_for_type(x509.UniformResourceIdentifier)
    return uris[0] if uris else None


CertificateLike = Union[Certificate, x509.Certificate, bytes]


def as_certificate(value: Optional[CertificateLike]) -> Optional[Certificate]:
    """Coerce caller input into a Certificate; empty input stays None."""
    if value is None or isinstance(value, Certificate):
        return value
    if isinstance(value, x509.Certificate):
        try:
            return Certificate.from_x509(value)
        except (ValueError, x509.DuplicateExtension) as e:
            raise SecurityChecksFailed(f"Unable to decode certificate: {e}") from e
    if isinstance(value, (bytes, bytearray)):
        if not value:
            return None
        return Certificate.load(bytes(value))
    raise SecurityChecksFailed(f"Unsupported certificate type: {type(value).__name__}")
