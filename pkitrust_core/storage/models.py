# pkitrust_core/storage/models.py
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet

from pkitrust_core.constants import REJECTED, TRUSTED


class TrustStatus(str, Enum):
    TRUSTED = TRUSTED
    REJECTED = REJECTED
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class IndexSnapshot:
    """
    Point-in-time membership of the two partitions.

    Snapshots are never mutated; every change produces a new one, so a
    reader holding a snapshot always sees a consistent pair of sets.
    """
    trusted: FrozenSet[str] = field(default_factory=frozenset)
    rejected: FrozenSet[str] = field(default_factory=frozenset)

    def lookup(self, thumbprint: str) -> TrustStatus:
        # rejected wins if both partitions hold the thumbprint
        if thumbprint in self.rejected:
            return TrustStatus.REJECTED
        if thumbprint in self.trusted:
            return TrustStatus.TRUSTED
        return TrustStatus.UNKNOWN

    def conflicts(self) -> FrozenSet[str]:
        return self.trusted & self.rejected

    def members(self, status: TrustStatus) -> FrozenSet[str]:
        if status is TrustStatus.TRUSTED:
            return self.trusted
        if status is TrustStatus.REJECTED:
            return self.rejected
        raise ValueError(f"No partition for status: {status}")

    def with_added(self, status: TrustStatus, thumbprint: str) -> "IndexSnapshot":
        if status is TrustStatus.TRUSTED:
            return IndexSnapshot(self.trusted | {thumbprint}, self.rejected)
        return IndexSnapshot(self.trusted, self.rejected | {thumbprint})

    def moved(self, thumbprint: str, source: TrustStatus, target: TrustStatus) -> "IndexSnapshot":
        trusted = set(self.trusted)
        rejected = set(self.rejected)
        (trusted if source is TrustStatus.TRUSTED else rejected).discard(thumbprint)
        (trusted if target is TrustStatus.TRUSTED else rejected).add(thumbprint)
        return IndexSnapshot(frozenset(trusted), frozenset(rejected))
