"""Share service - short links for encoded graph snapshots."""

from typing import Any, Dict, Optional, Tuple
from urllib.parse import urlencode
import logging

from SCHEMA2ERD.share import SHARE_QUERY_PARAM, restore_graph
from backend.utils.link_store import ShareLinkStore

logger = logging.getLogger(__name__)


class PayloadTooLargeError(ValueError):
    """Payload exceeds the configured size limit."""


class ShareService:
    """Stores opaque snapshot payloads and resolves short keys."""

    def __init__(self, store: ShareLinkStore, base_url: str, max_payload_chars: int = 500_000):
        self.store = store
        self.base_url = base_url.rstrip("/")
        self.max_payload_chars = max_payload_chars

    def short_url(self, key: str) -> str:
        return f"{self.base_url}/erd/s/{key}"

    async def shorten(self, payload: str) -> Tuple[str, str]:
        """Store `payload`; returns (key, url)."""
        if len(payload) > self.max_payload_chars:
            raise PayloadTooLargeError(
                f"payload has {len(payload)} characters, limit is {self.max_payload_chars}"
            )
        key = self.store.put(payload)
        logger.info(f"Stored share link {key} ({len(payload)} chars)")
        return key, self.short_url(key)

    async def resolve(self, key: str) -> Optional[Dict[str, Any]]:
        """`{key, payload, graph}` for a live key, None when missing or expired.

        `graph` is the decoded snapshot graph, or None if the payload does
        not decode (the page then falls back to its empty state).
        """
        entry = self.store.get(key)
        if entry is None:
            logger.info(f"Share link {key} is missing or expired")
            return None
        payload = entry["payload"]
        graph = restore_graph(None, urlencode({SHARE_QUERY_PARAM: payload}))
        return {"key": key, "payload": payload, "graph": graph}
