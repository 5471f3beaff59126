import os

import pytest

from pkitrust_core.config import (
    PKIConfig,
    certificate_path,
    own_private_dir,
    partition_dir,
    private_key_path,
)
from pkitrust_core.storage import TrustStatus


def test_paths_derive_from_config():
    config = PKIConfig(root="/srv/pki")
    tp = "a" * 40

    assert certificate_path(config, TrustStatus.TRUSTED, tp) == os.path.join("/srv/pki", "trusted", tp + ".pem")
    assert certificate_path(config, TrustStatus.REJECTED, tp) == os.path.join("/srv/pki", "rejected", tp + ".pem")
    assert private_key_path(config) == os.path.join("/srv/pki", "own", "private", "private_key.pem")
    assert own_private_dir(config) == os.path.join("/srv/pki", "own", "private")


def test_unknown_has_no_partition():
    with pytest.raises(ValueError):
        partition_dir(PKIConfig(), TrustStatus.UNKNOWN)


def test_custom_partition_names(monkeypatch):
    monkeypatch.setenv("PKI_ROOT", "/tmp/x")
    monkeypatch.setenv("PKI_TRUSTED_DIR", "allow")
    monkeypatch.setenv("PKI_REJECTED_DIR", "deny")
    config = PKIConfig.from_env()

    assert partition_dir(config, TrustStatus.TRUSTED) == os.path.join("/tmp/x", "allow")
    assert partition_dir(config, TrustStatus.REJECTED) == os.path.join("/tmp/x", "deny")
    assert PKIConfig.from_dict({"pki_root": "/other"}).trusted_name == "allow"
