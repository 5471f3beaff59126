from typing import Dict
from pkitrust_core.certificate import Certificate
from pkitrust_core.storage.models import IndexSnapshot, TrustStatus
from pkitrust_core.storage.provider import TrustStoreProvider


class InMemoryTrustStore(TrustStoreProvider):
    """Volatile store for tests and embedded use; same semantics as the filesystem store."""

    def __init__(self):
        super().__init__()
        self.entries: Dict[str, TrustStatus] = {}
        self.pems: Dict[str, bytes] = {}

    def initialize(self):
        pass

    def _scan(self):
        # writers mutate entries under the lock; copy before iterating
        with self._lock:
            items = list(self.entries.items())
        return IndexSnapshot(
            trusted=frozenset(t for t, s in items if s is TrustStatus.TRUSTED),
            rejected=frozenset(t for t, s in items if s is TrustStatus.REJECTED),
        )

    def _persist_rejected(self, certificate: Certificate):
        self.entries[certificate.thumbprint] = TrustStatus.REJECTED
        self.pems[certificate.thumbprint] = certificate.to_pem()

    def _relocate(self, thumbprint, source, target):
        self.entries[thumbprint] = target
