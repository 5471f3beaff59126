import os
from datetime import datetime, timezone

import pytest

from pkitrust_core import certificate as certificate_module
from pkitrust_core.config import rejected_dir
from pkitrust_core.errors import CertificateTimeInvalid, CertificateUntrusted
from pkitrust_core.generation import CertificateParams
from pkitrust_core.storage import TrustStatus
from pkitrust_core.validation import RejectReason, ValidationPipeline, ValidationResult


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


class StubRevocation:
    def __init__(self, revoked=False, issuer_revoked=False):
        self.revoked = revoked
        self.issuer_revoked = issuer_revoked

    def is_revoked(self, certificate):
        return self.revoked

    def is_issuer_revoked(self, certificate):
        return self.issuer_revoked


class RecordingView:
    """TrustView exposing status only; anything else would raise AttributeError."""

    def __init__(self, status):
        self._status = status
        self.calls = 0

    def status(self, certificate):
        self.calls += 1
        return self._status


def test_missing_certificate_fails_security_checks(memory_store):
    pipeline = ValidationPipeline(memory_store)
    assert pipeline.validate(None).reason is RejectReason.SECURITY_CHECKS_FAILED
    assert pipeline.validate(b"").reason is RejectReason.SECURITY_CHECKS_FAILED


def test_undecodable_bytes_fail_security_checks(memory_store):
    result = ValidationPipeline(memory_store).validate(b"definitely not a certificate")
    assert not result.accepted
    assert result.reason is RejectReason.SECURITY_CHECKS_FAILED


@pytest.mark.parametrize("now, expected", [
    (utc(2019, 12, 31), RejectReason.CERTIFICATE_TIME_INVALID),
    (utc(2021, 1, 2), RejectReason.CERTIFICATE_TIME_INVALID),
    (utc(2021, 1, 1), RejectReason.CERTIFICATE_TIME_INVALID),
    (utc(2020, 6, 1), None),
    (utc(2020, 1, 1), None),
])
def test_time_window(memory_store, fake_certificate, now, expected):
    cert = fake_certificate()
    memory_store.trust(cert)

    result = ValidationPipeline(memory_store).validate(cert, now=now)
    assert result.reason is expected


def test_naive_now_is_read_as_utc(memory_store, fake_certificate):
    cert = fake_certificate()
    memory_store.trust(cert)
    assert ValidationPipeline(memory_store).validate(cert, now=datetime(2020, 6, 1)).accepted


def test_rejected_certificate_is_untrusted_even_when_time_valid(memory_store, fake_certificate):
    cert = fake_certificate()
    memory_store.classify(cert)

    result = ValidationPipeline(memory_store).validate(cert, now=utc(2020, 6, 1))
    assert result.reason is RejectReason.CERTIFICATE_UNTRUSTED


def test_time_check_runs_before_trust_check(fake_certificate):
    view = RecordingView(TrustStatus.REJECTED)
    result = ValidationPipeline(view).validate(fake_certificate(), now=utc(2022, 1, 1))

    assert result.reason is RejectReason.CERTIFICATE_TIME_INVALID
    assert view.calls == 0


def test_unknown_certificate_is_untrusted_without_being_recorded(store, pki_config, fake_certificate):
    cert = fake_certificate()

    result = ValidationPipeline(store).validate(cert, now=utc(2020, 6, 1))

    assert result.reason is RejectReason.CERTIFICATE_UNTRUSTED
    assert os.listdir(rejected_dir(pki_config)) == []
    assert store.status(cert) is TrustStatus.UNKNOWN


def test_pipeline_only_needs_a_read_only_view(fake_certificate):
    view = RecordingView(TrustStatus.TRUSTED)
    result = ValidationPipeline(view).validate(fake_certificate(), now=utc(2020, 6, 1))

    assert result.accepted
    assert view.calls == 1


def test_revocation_extension_points(fake_certificate):
    view = RecordingView(TrustStatus.TRUSTED)
    cert = fake_certificate()
    now = utc(2020, 6, 1)

    assert ValidationPipeline(view, revocation_checker=StubRevocation()).validate(cert, now=now).accepted

    revoked = ValidationPipeline(view, revocation_checker=StubRevocation(revoked=True, issuer_revoked=True))
    assert revoked.validate(cert, now=now).reason is RejectReason.CERTIFICATE_REVOKED

    issuer = ValidationPipeline(view, revocation_checker=StubRevocation(issuer_revoked=True))
    assert issuer.validate(cert, now=now).reason is RejectReason.CERTIFICATE_ISSUER_REVOKED


def test_application_uri_is_advisory_by_default(fake_certificate):
    view = RecordingView(TrustStatus.TRUSTED)
    cert = fake_certificate(uri="urn:peer:a")

    result = ValidationPipeline(view).validate(cert, now=utc(2020, 6, 1), expected_uri="urn:peer:b")
    assert result.accepted


def test_application_uri_enforced_when_enabled(fake_certificate):
    view = RecordingView(TrustStatus.TRUSTED)
    cert = fake_certificate(uri="urn:peer:a")
    pipeline = ValidationPipeline(view, enforce_application_uri=True)
    now = utc(2020, 6, 1)

    assert pipeline.validate(cert, now=now, expected_uri="urn:peer:b").reason is RejectReason.CERTIFICATE_URI_INVALID
    assert pipeline.validate(cert, now=now, expected_uri="urn:peer:a").accepted
    assert pipeline.validate(cert, now=now).accepted


def test_real_certificate_accepted_once_trusted(store, make_certificate):
    cert = make_certificate()
    pipeline = ValidationPipeline(store)

    assert pipeline.validate(cert.der).reason is RejectReason.CERTIFICATE_UNTRUSTED
    store.trust(cert)
    assert pipeline.validate(cert.to_pem()).accepted


def test_not_yet_valid_real_certificate(store, make_certificate):
    cert = make_certificate(not_before=utc(2099, 1, 1))
    store.trust(cert)
    assert ValidationPipeline(store).validate(cert).reason is RejectReason.CERTIFICATE_TIME_INVALID


def test_raise_for_status():
    ValidationResult.accept().raise_for_status()

    with pytest.raises(CertificateUntrusted):
        ValidationResult.reject(RejectReason.CERTIFICATE_UNTRUSTED).raise_for_status()
    with pytest.raises(CertificateTimeInvalid) as exc:
        ValidationResult.reject(RejectReason.CERTIFICATE_TIME_INVALID, "expired").raise_for_status()
    assert str(exc.value) == "expired"


def test_rejection_is_logged(memory_store, fake_certificate, caplog):
    ValidationPipeline(memory_store).validate(fake_certificate(), now=utc(2020, 6, 1))
    assert "BadCertificateUntrusted" in caplog.text


def test_unreadable_x509_object_fails_security_checks(memory_store, generator, peer_key, monkeypatch):
    params = CertificateParams(application_uri="urn:peer")
    x509_cert = generator.self_sign(generator.create_csr(peer_key, params), peer_key, params.validity())

    def unreadable(cert):
        raise ValueError("invalid extension encoding")

    monkeypatch.setattr(certificate_module.Certificate, "from_x509", unreadable)

    result = ValidationPipeline(memory_store).validate(x509_cert)
    assert result.reason is RejectReason.SECURITY_CHECKS_FAILED
