"""
pkitrust_core.utils
-------------------
Lightweight helpers for timestamps, thumbprints and PEM armouring.
Certificate identity everywhere in the store is the thumbprint computed here.
"""

from __future__ import annotations
import base64, hashlib, re, time
from datetime import datetime, timezone

from .constants import THUMBPRINT_LENGTH

_THUMBPRINT_RE = re.compile(r"^[0-9a-f]{%d}$" % THUMBPRINT_LENGTH)


def b64e(b: bytes) -> str:
    return base64.b64encode(b).decode("ascii")


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def now_millis() -> int:
    return int(time.time() * 1000)


def ensure_utc(dt: datetime) -> datetime:
    # naive datetimes are taken to be UTC already
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def sha1(data: bytes) -> str:
    return hashlib.sha1(data).hexdigest()


def is_thumbprint(value: str) -> bool:
    return bool(_THUMBPRINT_RE.match(value))


def pem_encode(der: bytes, label: str = "CERTIFICATE") -> bytes:
    body = b64e(der)
    lines = [body[i:i + 64] for i in range(0, len(body), 64)]
    pem = "-----BEGIN %s-----\n%s\n-----END %s-----\n" % (label, "\n".join(lines), label)
    return pem.encode("ascii")
