from __future__ import annotations
from typing import FrozenSet
import os

from pkitrust_core.certificate import Certificate
from pkitrust_core.config import PKIConfig, certificate_path, partition_dir
from pkitrust_core.constants import PEM_SUFFIX
from pkitrust_core.errors import StoreIOError
from pkitrust_core.logger import get_logger
from pkitrust_core.storage.models import IndexSnapshot, TrustStatus
from pkitrust_core.storage.provider import TrustStoreProvider
from pkitrust_core.utils import is_thumbprint

log = get_logger("PKI.TrustStore.FS")


class FileSystemTrustStore(TrustStoreProvider):
    """
    Directory-backed trust store.

    Each partition is a directory of `<thumbprint>.pem` files and the file
    names are the whole state: there is no separate index file, and the
    in-memory index is rebuilt from a directory listing before every query.
    """

    def __init__(self, config: PKIConfig):
        super().__init__()
        self.config = config

    def initialize(self) -> None:
        for status in (TrustStatus.TRUSTED, TrustStatus.REJECTED):
            folder = partition_dir(self.config, status)
            try:
                os.makedirs(folder, exist_ok=True)
            except OSError as e:
                raise StoreIOError(f"Cannot create partition {folder}: {e}") from e

    def _scan(self) -> IndexSnapshot:
        return IndexSnapshot(
            trusted=self._scan_partition(TrustStatus.TRUSTED),
            rejected=self._scan_partition(TrustStatus.REJECTED),
        )

    def _scan_partition(self, status: TrustStatus) -> FrozenSet[str]:
        folder = partition_dir(self.config, status)
        found = set()
        try:
            with os.scandir(folder) as it:
                for entry in it:
                    if not entry.name.endswith(PEM_SUFFIX) or not entry.is_file():
                        continue
                    stem = entry.name[:-len(PEM_SUFFIX)]
                    if not is_thumbprint(stem):
                        log.debug(f"[SCAN] ignoring {entry.path}")
                        continue
                    found.add(stem)
        except FileNotFoundError:
            # partition not created yet: nothing classified there
            return frozenset()
        except OSError as e:
            raise StoreIOError(f"Cannot scan partition {folder}: {e}") from e
        return frozenset(found)

    def _persist_rejected(self, certificate: Certificate) -> None:
        path = certificate_path(self.config, TrustStatus.REJECTED, certificate.thumbprint)
        tmp = path + ".tmp"
        try:
            os.makedirs(os.path.dirname(path), exist_ok=True)
            with open(tmp, "wb") as f:
                f.write(certificate.to_pem())
            # tmp name does not end in .pem, so a crash never leaves a half-written entry
            os.replace(tmp, path)
        except OSError as e:
            raise StoreIOError(f"Cannot write {path}: {e}") from e

    def _relocate(self, thumbprint: str, source: TrustStatus, target: TrustStatus) -> None:
        src = certificate_path(self.config, source, thumbprint)
        dest = certificate_path(self.config, target, thumbprint)
        try:
            os.makedirs(os.path.dirname(dest), exist_ok=True)
            os.replace(src, dest)
        except OSError as e:
            raise StoreIOError(f"Cannot move {src} to {dest}: {e}") from e
