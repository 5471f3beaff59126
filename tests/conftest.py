from datetime import datetime, timezone
import pytest

from pkitrust_core.certificate import Certificate
from pkitrust_core.config import PKIConfig
from pkitrust_core.generation import CertificateParams, CryptographyGenerationService
from pkitrust_core.storage import FileSystemTrustStore, InMemoryTrustStore


@pytest.fixture(scope="session")
def generator():
    return CryptographyGenerationService()


@pytest.fixture(scope="session")
def peer_key(generator):
    return generator.generate_key_pair(2048)


@pytest.fixture
def make_certificate(generator, peer_key):
    """Real self-signed peer certificates; every call yields a new thumbprint."""
    def _make(uri="urn:peer:application", not_before=None, duration_days=365):
        params = CertificateParams(
            application_uri=uri,
            dns_names=["localhost"],
            ip_addresses=["127.0.0.1"],
            not_before=not_before,
            duration_days=duration_days,
        )
        csr = generator.create_csr(peer_key, params)
        return Certificate.from_x509(generator.self_sign(csr, peer_key, params.validity()))
    return _make


@pytest.fixture
def fake_certificate():
    """Certificates with synthetic DER bytes, for checks that never parse them."""
    def _make(tag: bytes = b"peer", not_before=datetime(2020, 1, 1, tzinfo=timezone.utc),
              not_after=datetime(2021, 1, 1, tzinfo=timezone.utc), uri=None):
        return Certificate(der=b"\x30\x82" + tag, not_before=not_before,
                           not_after=not_after, subject_application_uri=uri)
    return _make


@pytest.fixture
def pki_config(tmp_path):
    return PKIConfig(root=str(tmp_path / "pki"))


@pytest.fixture
def store(pki_config):
    s = FileSystemTrustStore(pki_config)
    s.initialize()
    return s


@pytest.fixture
def memory_store():
    return InMemoryTrustStore()
