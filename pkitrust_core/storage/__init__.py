# pkitrust_core/storage/__init__.py

from .models import IndexSnapshot, TrustStatus
from .provider import TrustStoreProvider, TrustView
from .providers.memory_provider import InMemoryTrustStore
from .providers.filesystem_provider import FileSystemTrustStore
from pkitrust_core.config import PKIConfig
import os


def load_trust_store(config: dict | None = None) -> TrustStoreProvider:
    """
    Factory resolver for selecting the runtime trust store backend.

    For now:
        - filesystem (default)
        - memory
    """
    config = config or {}
    provider = config.get("provider") or os.getenv("PKI_TRUST_PROVIDER", "filesystem")

    if provider == "memory":
        return InMemoryTrustStore()

    if provider == "filesystem":
        store = FileSystemTrustStore(PKIConfig.from_dict(config))
        store.initialize()
        return store

    raise ValueError(f"Unknown trust store provider: {provider}")


__all__ = [
    "IndexSnapshot",
    "TrustStatus",
    "TrustStoreProvider",
    "TrustView",
    "InMemoryTrustStore",
    "FileSystemTrustStore",
    "load_trust_store",
]
