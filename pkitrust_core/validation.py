"""
pkitrust_core.validation
------------------------
Ordered, fail-fast certificate validation.

Each check is a plain function of a CheckContext returning None when it
passes or a rejecting ValidationResult when it does not. The pipeline runs
them in order and returns the first rejection unchanged; a certificate is
accepted only if every check passes.

Checks only read the trust store through `status`. In particular an unknown
certificate is reported as untrusted here without being written to the
rejected partition; that demotion belongs to `classify`.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Optional, Protocol, Sequence

from .certificate import Certificate, CertificateLike, as_certificate
from .errors import (
    CertificateIssuerRevoked,
    CertificateRevoked,
    CertificateTimeInvalid,
    CertificateUntrusted,
    CertificateUriInvalid,
    SecurityChecksFailed,
)
from .logger import get_logger
from .storage.models import TrustStatus
from .storage.provider import TrustView
from .utils import ensure_utc, now_utc

log = get_logger("PKI.Validation")


class RejectReason(str, Enum):
    SECURITY_CHECKS_FAILED = SecurityChecksFailed.status_code
    CERTIFICATE_TIME_INVALID = CertificateTimeInvalid.status_code
    CERTIFICATE_UNTRUSTED = CertificateUntrusted.status_code
    CERTIFICATE_REVOKED = CertificateRevoked.status_code
    CERTIFICATE_ISSUER_REVOKED = CertificateIssuerRevoked.status_code
    CERTIFICATE_URI_INVALID = CertificateUriInvalid.status_code


_ERRORS = {
    RejectReason.SECURITY_CHECKS_FAILED: SecurityChecksFailed,
    RejectReason.CERTIFICATE_TIME_INVALID: CertificateTimeInvalid,
    RejectReason.CERTIFICATE_UNTRUSTED: CertificateUntrusted,
    RejectReason.CERTIFICATE_REVOKED: CertificateRevoked,
    RejectReason.CERTIFICATE_ISSUER_REVOKED: CertificateIssuerRevoked,
    RejectReason.CERTIFICATE_URI_INVALID: CertificateUriInvalid,
}


@dataclass(frozen=True)
class ValidationResult:
    reason: Optional[RejectReason] = None
    detail: str = ""

    @property
    def accepted(self) -> bool:
        return self.reason is None

    @classmethod
    def accept(cls) -> "ValidationResult":
        return cls()

    @classmethod
    def reject(cls, reason: RejectReason, detail: str = "") -> "ValidationResult":
        return cls(reason=reason, detail=detail)

    def raise_for_status(self) -> None:
        if self.reason is not None:
            raise _ERRORS[self.reason](self.detail)


class RevocationChecker(Protocol):
    """Revocation source (e.g. a CRL reader). None means nothing is ever revoked."""

    def is_revoked(self, certificate: Certificate) -> bool: ...
    def is_issuer_revoked(self, certificate: Certificate) -> bool: ...


@dataclass(frozen=True)
class CheckContext:
    certificate: Optional[Certificate]
    now: datetime
    trust_view: TrustView
    expected_uri: Optional[str] = None
    revocation_checker: Optional[RevocationChecker] = None
    enforce_application_uri: bool = False


Check = Callable[[CheckContext], Optional[ValidationResult]]


# --------- Checks ----------
def check_certificate_present(ctx: CheckContext) -> Optional[ValidationResult]:
    if ctx.certificate is None:
        return ValidationResult.reject(RejectReason.SECURITY_CHECKS_FAILED, "missing certificate")
    return None


def check_not_yet_valid(ctx: CheckContext) -> Optional[ValidationResult]:
    if ctx.now < ctx.certificate.not_before:
        return ValidationResult.reject(
            RejectReason.CERTIFICATE_TIME_INVALID,
            f"certificate is not active yet (not before {ctx.certificate.not_before.isoformat()})",
        )
    return None


def check_not_expired(ctx: CheckContext) -> Optional[ValidationResult]:
    if ctx.now >= ctx.certificate.not_after:
        return ValidationResult.reject(
            RejectReason.CERTIFICATE_TIME_INVALID,
            f"certificate has expired (not after {ctx.certificate.not_after.isoformat()})",
        )
    return None


def check_trust_status(ctx: CheckContext) -> Optional[ValidationResult]:
    status = ctx.trust_view.status(ctx.certificate)
    if status is TrustStatus.TRUSTED:
        return None
    return ValidationResult.reject(
        RejectReason.CERTIFICATE_UNTRUSTED,
        f"certificate {ctx.certificate.thumbprint} is {status.value}",
    )


def check_not_revoked(ctx: CheckContext) -> Optional[ValidationResult]:
    checker = ctx.revocation_checker
    if checker is not None and checker.is_revoked(ctx.certificate):
        return ValidationResult.reject(RejectReason.CERTIFICATE_REVOKED, "certificate revoked by issuer")
    return None


def check_issuer_not_revoked(ctx: CheckContext) -> Optional[ValidationResult]:
    checker = ctx.revocation_checker
    if checker is not None and checker.is_issuer_revoked(ctx.certificate):
        return ValidationResult.reject(RejectReason.CERTIFICATE_ISSUER_REVOKED, "issuer certificate revoked")
    return None


def check_application_uri(ctx: CheckContext) -> Optional[ValidationResult]:
    if not ctx.enforce_application_uri or ctx.expected_uri is None:
        return None
    if ctx.certificate.subject_application_uri != ctx.expected_uri:
        return ValidationResult.reject(
            RejectReason.CERTIFICATE_URI_INVALID,
            f"expected {ctx.expected_uri!r}, certificate has {ctx.certificate.subject_application_uri!r}",
        )
    return None


DEFAULT_CHECKS: Sequence[Check] = (
    check_certificate_present,
    check_not_yet_valid,
    check_not_expired,
    check_trust_status,
    check_not_revoked,
    check_issuer_not_revoked,
    check_application_uri,
)


class ValidationPipeline:
    def __init__(
        self,
        trust_view: TrustView,
        revocation_checker: Optional[RevocationChecker] = None,
        enforce_application_uri: bool = False,
        checks: Sequence[Check] = DEFAULT_CHECKS,
    ):
        self.trust_view = trust_view
        self.revocation_checker = revocation_checker
        self.enforce_application_uri = enforce_application_uri
        self.checks = tuple(checks)

    def validate(
        self,
        certificate: Optional[CertificateLike],
        now: Optional[datetime] = None,
        expected_uri: Optional[str] = None,
    ) -> ValidationResult:
        try:
            cert = as_certificate(certificate)
        except SecurityChecksFailed as e:
            log.info(f"[VALIDATE] rejected: {RejectReason.SECURITY_CHECKS_FAILED.value} ({e})")
            return ValidationResult.reject(RejectReason.SECURITY_CHECKS_FAILED, str(e))

        ctx = CheckContext(
            certificate=cert,
            now=ensure_utc(now) if now is not None else now_utc(),
            trust_view=self.trust_view,
            expected_uri=expected_uri,
            revocation_checker=self.revocation_checker,
            enforce_application_uri=self.enforce_application_uri,
        )

        for check in self.checks:
            result = check(ctx)
            if result is not None:
                log.info(f"[VALIDATE] rejected by {check.__name__}: {result.reason.value} ({result.detail})")
                return result

        log.debug(f"[VALIDATE] accepted {cert.thumbprint}")
        return ValidationResult.accept()
