# pkitrust_core/manager.py
from __future__ import annotations
from datetime import datetime
from typing import Optional
import os

from .certificate import CertificateLike, as_certificate
from .config import (
    PKIConfig,
    own_certs_dir,
    own_dir,
    own_private_dir,
    private_key_path,
    self_signed_certificate_path,
)
from .constants import DEFAULT_KEY_BITS
from .crypto import certificate_to_pem, csr_to_pem, load_private_key, write_private_key
from .errors import GenerationError, SecurityChecksFailed, StoreIOError
from .generation import (
    CertificateGenerationService,
    CertificateParams,
    CryptographyGenerationService,
)
from .logger import get_logger
from .storage.models import TrustStatus
from .storage.provider import TrustStoreProvider
from .storage.providers.filesystem_provider import FileSystemTrustStore
from .utils import now_millis
from .validation import RevocationChecker, ValidationPipeline, ValidationResult

log = get_logger("PKI.Manager")


class CertificateManager:
    """
    Endpoint-side PKI: owns the PKI root, the endpoint's own key, the peer
    trust store and the validation pipeline.

        PKI
          +---> trusted
          +---> rejected
          +---> own
                 +---> certs
                 +---> private
    """

    def __init__(
        self,
        location: Optional[str] = None,
        config: Optional[PKIConfig] = None,
        generator: Optional[CertificateGenerationService] = None,
        trust_store: Optional[TrustStoreProvider] = None,
        revocation_checker: Optional[RevocationChecker] = None,
        enforce_application_uri: bool = False,
    ):
        if config is None:
            config = PKIConfig(root=location) if location else PKIConfig.from_env()
        self.config = config
        self.generator = generator or CryptographyGenerationService()
        self.trust_store = trust_store or FileSystemTrustStore(config)
        self.pipeline = ValidationPipeline(
            self.trust_store,
            revocation_checker=revocation_checker,
            enforce_application_uri=enforce_application_uri,
        )

    def initialize(self, key_bits: int = DEFAULT_KEY_BITS) -> None:
        """Create the PKI tree and the own private key. Safe to call repeatedly."""
        for folder in (self.config.root, own_dir(self.config),
                       own_certs_dir(self.config), own_private_dir(self.config)):
            try:
                os.makedirs(folder, exist_ok=True)
            except OSError as e:
                raise StoreIOError(f"Cannot create {folder}: {e}") from e
        self.trust_store.initialize()

        key_path = private_key_path(self.config)
        if os.path.exists(key_path):
            log.debug("[INIT] private key already exists ... skipping")
            return

        log.info(f"[INIT] generating {key_bits} bit private key")
        key = self.generator.generate_key_pair(key_bits)
        try:
            write_private_key(key_path, key)
        except OSError as e:
            raise StoreIOError(f"Cannot write {key_path}: {e}") from e

    # ------------------------------------------------------------------
    # Own certificates
    # ------------------------------------------------------------------
    def create_self_signed_certificate(self, params: CertificateParams, force: bool = False) -> str:
        """Self-sign the own key into own/certs/self_signed_certificate.pem."""
        target = self_signed_certificate_path(self.config)
        if os.path.exists(target) and not force:
            log.info(f"[OWN] {target} already exists => do not overwrite")
            return target

        key = self._load_key(params)
        csr = self.generator.create_csr(key, params)
        cert = self.generator.self_sign(csr, key, params.validity())
        self._write(target, certificate_to_pem(cert))
        return target

    def create_certificate_request(self, params: CertificateParams) -> str:
        """Write a CSR for the own key and return its path."""
        key = self._load_key(params)
        csr = self.generator.create_csr(key, params)
        csr_file = os.path.join(own_certs_dir(self.config), f"certificate_{now_millis()}.csr")
        self._write(csr_file, csr_to_pem(csr))
        return csr_file

    # ------------------------------------------------------------------
    # Peer certificates
    # ------------------------------------------------------------------
    def get_certificate_status(self, certificate: CertificateLike) -> TrustStatus:
        return self.trust_store.classify(self._require(certificate))

    def trust_certificate(self, certificate: CertificateLike) -> None:
        self.trust_store.trust(self._require(certificate))

    def reject_certificate(self, certificate: CertificateLike) -> None:
        self.trust_store.reject(self._require(certificate))

    def verify_certificate(
        self,
        certificate: Optional[CertificateLike],
        now: Optional[datetime] = None,
        expected_uri: Optional[str] = None,
    ) -> ValidationResult:
        return self.pipeline.validate(certificate, now=now, expected_uri=expected_uri)

    # ---------------------------
    # Helpers
    # ---------------------------
    @staticmethod
    def _require(certificate: CertificateLike):
        cert = as_certificate(certificate)
        if cert is None:
            raise SecurityChecksFailed("missing certificate")
        return cert

    def _load_key(self, params: CertificateParams):
        key_path = params.private_key_ref or private_key_path(self.config)
        if not os.path.exists(key_path):
            raise GenerationError(f"Private key not found: {key_path} (initialize() first)")
        try:
            return load_private_key(key_path)
        except OSError as e:
            raise StoreIOError(f"Cannot read {key_path}: {e}") from e
        except (ValueError, TypeError) as e:
            raise GenerationError(f"Unusable private key {key_path}: {e}") from e

    @staticmethod
    def _write(path: str, data: bytes) -> None:
        try:
            os.makedirs(os.path.dirname(path), exist_ok=True)
            with open(path, "wb") as f:
                f.write(data)
        except OSError as e:
            raise StoreIOError(f"Cannot write {path}: {e}") from e
