# pkitrust_core/storage/provider.py
from __future__ import annotations
from typing import List, Protocol
import threading

from pkitrust_core.certificate import Certificate
from pkitrust_core.logger import get_logger
from pkitrust_core.storage.models import IndexSnapshot, TrustStatus

log = get_logger("PKI.TrustStore")


class TrustView(Protocol):
    """Read-only slice of a trust store, as seen by the validation pipeline."""

    def status(self, certificate: Certificate) -> TrustStatus: ...


class TrustStoreProvider:
    """
    Shared trust store behaviour.

    Providers supply the backing medium through three hooks:
      - _scan()              -> fresh IndexSnapshot of the medium
      - _persist_rejected()  -> store a first-seen certificate as rejected
      - _relocate()          -> move an entry between partitions

    The in-memory index is only ever replaced as a whole, and writes are
    serialized through one re-entrant lock per instance.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._index = IndexSnapshot()

    # Interface
    def initialize(self) -> None: ...
    def _scan(self) -> IndexSnapshot: ...
    def _persist_rejected(self, certificate: Certificate) -> None: ...
    def _relocate(self, thumbprint: str, source: TrustStatus, target: TrustStatus) -> None: ...

    @property
    def index(self) -> IndexSnapshot:
        return self._index

    def rebuild_index(self) -> IndexSnapshot:
        snapshot = self._scan()
        for thumbprint in snapshot.conflicts():
            log.warning(f"[STORE] {thumbprint} present in both partitions; treating as rejected")
        with self._lock:
            self._index = snapshot
        return snapshot

    def status(self, certificate: Certificate) -> TrustStatus:
        return self.rebuild_index().lookup(certificate.thumbprint)

    def classify(self, certificate: Certificate) -> TrustStatus:
        with self._lock:
            status = self.status(certificate)
            if status is not TrustStatus.UNKNOWN:
                return status

            thumbprint = certificate.thumbprint
            self._persist_rejected(certificate)
            self._index = self._index.with_added(TrustStatus.REJECTED, thumbprint)
            log.info(f"[STORE] first seen {thumbprint} -> rejected")
            return TrustStatus.REJECTED

    def trust(self, certificate: Certificate) -> None:
        self._move(certificate, TrustStatus.TRUSTED)

    def reject(self, certificate: Certificate) -> None:
        self._move(certificate, TrustStatus.REJECTED)

    def list_certificates(self, status: TrustStatus) -> List[str]:
        return sorted(self.rebuild_index().members(status))

    def _move(self, certificate: Certificate, target: TrustStatus) -> None:
        with self._lock:
            current = self.classify(certificate)
            thumbprint = certificate.thumbprint
            if current is target:
                log.debug(f"[STORE] {thumbprint} already {target.value}")
                return

            # index is only touched once the medium has accepted the move
            self._relocate(thumbprint, current, target)
            self._index = self._index.moved(thumbprint, current, target)
            log.info(f"[STORE] {thumbprint} {current.value} -> {target.value}")
