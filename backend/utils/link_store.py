"""Expiring in-memory store for share-link payloads."""

from typing import Callable, Dict, Any, Optional
from datetime import datetime, timedelta, UTC
import hashlib
import string

BASE62_ALPHABET = string.digits + string.ascii_letters


def base62(data: bytes) -> str:
    """Base62 text for `data` read as a big-endian integer."""
    n = int.from_bytes(data, "big")
    if n == 0:
        return BASE62_ALPHABET[0]
    out = []
    while n:
        n, rem = divmod(n, 62)
        out.append(BASE62_ALPHABET[rem])
    return "".join(reversed(out))


def content_key(payload: str, length: int = 10) -> str:
    """Short key derived from the payload, so identical payloads share a key."""
    digest = hashlib.sha256(payload.encode("utf-8")).digest()
    return base62(digest)[:length]


class ShareLinkStore:
    """Keeps payloads by content-derived key until they expire."""

    def __init__(
        self,
        ttl: timedelta = timedelta(hours=48),
        key_length: int = 10,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ):
        self.ttl = ttl
        self.key_length = key_length
        self.clock = clock
        self.links: Dict[str, Dict[str, Any]] = {}

    def put(self, payload: str) -> str:
        """Store `payload` and return its key. Storing it again renews the expiry.

        Expired entries are dropped first, so the store only holds live links.
        """
        self.purge_expired()
        key = content_key(payload, self.key_length)
        now = self.clock()
        self.links[key] = {
            "key": key,
            "payload": payload,
            "created_at": now.isoformat(),
            "expires_at": now + self.ttl,
        }
        return key

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        """Entry for `key`, or None when unknown or expired."""
        entry = self.links.get(key)
        if entry is None:
            return None
        if entry["expires_at"] <= self.clock():
            del self.links[key]
            return None
        return entry

    def purge_expired(self) -> int:
        """Drop every expired entry; returns how many were removed."""
        now = self.clock()
        expired = [k for k, v in self.links.items() if v["expires_at"] <= now]
        for key in expired:
            del self.links[key]
        return len(expired)

    def __len__(self) -> int:
        return len(self.links)
