"""
pkitrust_core.generation
------------------------
Certificate Generation Service.

The trust core only consumes certificates; producing them is delegated to a
service with four operations:

    generate_key_pair(bits)                -> private key
    create_csr(private_key, params)        -> certificate signing request
    self_sign(csr, private_key, validity)  -> certificate
    sign_with_ca(csr, validity)            -> certificate

Every request parameter travels in an explicit CertificateParams object.
CryptographyGenerationService is the default backend; signed certificates
are always checked against their issuer before they are handed back.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional
import ipaddress

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

from .constants import (
    DEFAULT_COMMON_NAME,
    DEFAULT_DURATION_DAYS,
    DEFAULT_KEY_BITS,
    MAX_APPLICATION_URI_LENGTH,
)
from .crypto import certificate_to_pem, rsa_generate, verify_issued_by
from .errors import GenerationError
from .logger import get_logger
from .utils import ensure_utc, now_utc

log = get_logger("PKI.Generation")


@dataclass(frozen=True)
class Validity:
    not_before: datetime
    not_after: datetime

    @classmethod
    def starting(cls, not_before: Optional[datetime] = None,
                 duration_days: int = DEFAULT_DURATION_DAYS) -> "Validity":
        start = ensure_utc(not_before) if not_before is not None else now_utc()
        return cls(not_before=start, not_after=start + timedelta(days=duration_days))


@dataclass
class CertificateParams:
    """
    Subject and validity parameters for a generation request.

    `private_key_ref` names a PEM key file; when unset the caller's own key
    is used.
    """
    application_uri: str
    private_key_ref: Optional[str] = None
    dns_names: List[str] = field(default_factory=list)
    ip_addresses: List[str] = field(default_factory=list)
    not_before: Optional[datetime] = None
    duration_days: int = DEFAULT_DURATION_DAYS
    common_name: str = DEFAULT_COMMON_NAME

    def __post_init__(self):
        if not isinstance(self.application_uri, str) or not self.application_uri:
            raise ValueError("application_uri is required")
        if len(self.application_uri) > MAX_APPLICATION_URI_LENGTH:
            raise ValueError(
                f"application_uri longer than {MAX_APPLICATION_URI_LENGTH} characters: {self.application_uri}"
            )
        if self.duration_days <= 0:
            raise ValueError("duration_days must be positive")

    def validity(self) -> Validity:
        return Validity.starting(self.not_before, self.duration_days)

    def subject_alt_names(self) -> List[x509.GeneralName]:
        names: List[x509.GeneralName] = [x509.UniformResourceIdentifier(self.application_uri)]
        names += [x509.DNSName(d) for d in self.dns_names]
        names += [x509.IPAddress(ipaddress.ip_address(ip)) for ip in self.ip_addresses]
        return names


class CertificateGenerationService:
    def generate_key_pair(self, bits: int = DEFAULT_KEY_BITS) -> rsa.RSAPrivateKey:
        raise NotImplementedError

    def create_csr(self, private_key: rsa.RSAPrivateKey,
                   params: CertificateParams) -> x509.CertificateSigningRequest:
        raise NotImplementedError

    def self_sign(self, csr: x509.CertificateSigningRequest, private_key: rsa.RSAPrivateKey,
                  validity: Validity, is_ca: bool = False) -> x509.Certificate:
        raise NotImplementedError

    def sign_with_ca(self, csr: x509.CertificateSigningRequest, validity: Validity) -> x509.Certificate:
        raise NotImplementedError


class CryptographyGenerationService(CertificateGenerationService):
    def __init__(self, ca_key: Optional[rsa.RSAPrivateKey] = None,
                 ca_certificate: Optional[x509.Certificate] = None):
        if (ca_key is None) != (ca_certificate is None):
            raise ValueError("ca_key and ca_certificate must be given together")
        self.ca_key = ca_key
        self.ca_certificate = ca_certificate

    def generate_key_pair(self, bits: int = DEFAULT_KEY_BITS) -> rsa.RSAPrivateKey:
        try:
            return rsa_generate(bits)
        except ValueError as e:
            raise GenerationError(str(e)) from e

    def create_csr(self, private_key, params):
        subject = x509.Name([
            x509.NameAttribute(NameOID.COMMON_NAME, params.common_name),
        ])
        try:
            return (x509.CertificateSigningRequestBuilder()
                    .subject_name(subject)
                    .add_extension(x509.SubjectAlternativeName(params.subject_alt_names()), critical=False)
                    .sign(private_key, hashes.SHA256()))
        except (ValueError, TypeError) as e:
            raise GenerationError(f"Cannot create certificate signing request: {e}") from e

    def self_sign(self, csr, private_key, validity, is_ca=False):
        self._check_request(csr)
        cert = self._build(csr, csr.subject, private_key, validity, is_ca)
        self._verify(cert, cert)
        log.info(f"[GEN] self-signed {cert.subject.rfc4514_string()} until {validity.not_after.isoformat()}")
        return cert

    def sign_with_ca(self, csr, validity):
        if self.ca_key is None:
            raise GenerationError("No certificate authority configured")
        self._check_request(csr)
        cert = self._build(csr, self.ca_certificate.subject, self.ca_key, validity, is_ca=False)
        self._verify(cert, self.ca_certificate)
        log.info(f"[GEN] CA signed {cert.subject.rfc4514_string()} until {validity.not_after.isoformat()}")
        return cert

    # ---------------------------
    # Helpers
    # ---------------------------
    @staticmethod
    def _check_request(csr: x509.CertificateSigningRequest) -> None:
        if not csr.is_signature_valid:
            raise GenerationError("Certificate signing request signature is invalid")

    @staticmethod
    def _build(csr, issuer_name, signing_key, validity, is_ca):
        try:
            builder = (x509.CertificateBuilder()
                       .subject_name(csr.subject)
                       .issuer_name(issuer_name)
                       .public_key(csr.public_key())
                       .serial_number(x509.random_serial_number())
                       .not_valid_before(validity.not_before)
                       .not_valid_after(validity.not_after))
            for extension in csr.extensions:
                # basic constraints are decided by the signer, not the requester
                if isinstance(extension.value, x509.BasicConstraints):
                    continue
                builder = builder.add_extension(extension.value, critical=extension.critical)
            builder = builder.add_extension(x509.BasicConstraints(ca=is_ca, path_length=None), critical=True)
            return builder.sign(signing_key, hashes.SHA256())
        except (ValueError, TypeError) as e:
            raise GenerationError(f"Cannot sign certificate: {e}") from e

    @staticmethod
    def _verify(cert: x509.Certificate, issuer: x509.Certificate) -> None:
        if not verify_issued_by(cert, issuer):
            raise GenerationError(
                f"Certificate {cert.subject.rfc4514_string()} does not verify against "
                f"{issuer.subject.rfc4514_string()}"
            )


def build_certificate_chain(certificate: x509.Certificate, ca_certificate: x509.Certificate) -> bytes:
    """PEM bundle of the certificate followed by its issuing CA certificate."""
    return certificate_to_pem(certificate) + certificate_to_pem(ca_certificate)
