# pkitrust_core/errors.py
from __future__ import annotations


class PKIError(Exception):
    """Base class for every error raised by the trust core."""
    status_code: str = "BadInternalError"

    def __init__(self, message: str = ""):
        super().__init__(message or self.status_code)


class CertificateError(PKIError):
    """A certificate failed one of the validation checks."""
    pass


class SecurityChecksFailed(CertificateError):
    status_code = "BadSecurityChecksFailed"


class CertificateTimeInvalid(CertificateError):
    status_code = "BadCertificateTimeInvalid"


class CertificateUntrusted(CertificateError):
    status_code = "BadCertificateUntrusted"


class CertificateRevoked(CertificateError):
    status_code = "BadCertificateRevoked"


class CertificateIssuerRevoked(CertificateError):
    status_code = "BadCertificateIssuerRevoked"


class CertificateUriInvalid(CertificateError):
    status_code = "BadCertificateUriInvalid"


class StoreIOError(PKIError):
    """Filesystem failure while scanning, writing or moving store entries."""
    status_code = "BadInternalError"


class GenerationError(PKIError):
    """The certificate generation service could not produce an artifact."""
    status_code = "BadCertificateInvalid"
