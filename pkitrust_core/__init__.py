"""
PKITrust Core Package
=====================
Peer certificate trust management for a secure endpoint.

Provides:
- Content-addressed trust store (trusted / rejected partitions on disk)
- Fail-fast, default-deny certificate validation pipeline
- Certificate generation service interface (cryptography backend)
- CertificateManager tying the pieces to one PKI directory
"""

from .certificate import Certificate
from .config import PKIConfig
from .errors import (
    CertificateTimeInvalid,
    CertificateUntrusted,
    GenerationError,
    PKIError,
    SecurityChecksFailed,
    StoreIOError,
)
from .generation import CertificateParams, CryptographyGenerationService, Validity
from .manager import CertificateManager
from .storage import FileSystemTrustStore, InMemoryTrustStore, TrustStatus, load_trust_store
from .validation import RejectReason, ValidationPipeline, ValidationResult

__all__ = [
    "Certificate",
    "PKIConfig",
    "PKIError",
    "CertificateTimeInvalid",
    "CertificateUntrusted",
    "SecurityChecksFailed",
    "StoreIOError",
    "GenerationError",
    "CertificateParams",
    "CryptographyGenerationService",
    "Validity",
    "CertificateManager",
    "FileSystemTrustStore",
    "InMemoryTrustStore",
    "TrustStatus",
    "load_trust_store",
    "RejectReason",
    "ValidationPipeline",
    "ValidationResult",
]
