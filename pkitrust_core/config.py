"""
pkitrust_core.config
--------------------
PKI layout configuration and the path derivations over it.

    <root>/
      own/certs/
      own/private/private_key.pem
      trusted/<thumbprint>.pem
      rejected/<thumbprint>.pem

Paths are always computed from an explicit PKIConfig; nothing is cached
on the objects that use them.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Optional
import os

from .constants import DEFAULT_PKI_ROOT, OWN, PEM_SUFFIX, REJECTED, TRUSTED


@dataclass(frozen=True)
class PKIConfig:
    root: str = DEFAULT_PKI_ROOT
    trusted_name: str = TRUSTED
    rejected_name: str = REJECTED
    own_name: str = OWN

    @classmethod
    def from_env(cls) -> "PKIConfig":
        return cls(
            root=os.getenv("PKI_ROOT", DEFAULT_PKI_ROOT),
            trusted_name=os.getenv("PKI_TRUSTED_DIR", TRUSTED),
            rejected_name=os.getenv("PKI_REJECTED_DIR", REJECTED),
        )

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]] = None) -> "PKIConfig":
        data = data or {}
        env = cls.from_env()
        return cls(
            root=str(data.get("pki_root") or env.root),
            trusted_name=data.get("trusted_dir") or env.trusted_name,
            rejected_name=data.get("rejected_dir") or env.rejected_name,
        )


def trusted_dir(config: PKIConfig) -> str:
    return os.path.join(config.root, config.trusted_name)


def rejected_dir(config: PKIConfig) -> str:
    return os.path.join(config.root, config.rejected_name)


def partition_dir(config: PKIConfig, status: str) -> str:
    # TrustStatus is a str enum, so members compare equal to their values
    if status == TRUSTED:
        return trusted_dir(config)
    if status == REJECTED:
        return rejected_dir(config)
    raise ValueError(f"No partition directory for status: {status}")


def certificate_path(config: PKIConfig, status: str, thumbprint: str) -> str:
    return os.path.join(partition_dir(config, status), thumbprint + PEM_SUFFIX)


def own_dir(config: PKIConfig) -> str:
    return os.path.join(config.root, config.own_name)


def own_certs_dir(config: PKIConfig) -> str:
    return os.path.join(own_dir(config), "certs")


def own_private_dir(config: PKIConfig) -> str:
    return os.path.join(own_dir(config), "private")


def private_key_path(config: PKIConfig) -> str:
    return os.path.join(own_private_dir(config), "private_key.pem")


def self_signed_certificate_path(config: PKIConfig) -> str:
    return os.path.join(own_certs_dir(config), "self_signed_certificate.pem")
