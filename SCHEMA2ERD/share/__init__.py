"""Share-link encoding and restore."""

from .codec import (
    ShareDecodeError,
    decode_payload,
    decode_snapshot,
    encode_payload,
    encode_snapshot,
)
from .restore import SHARE_QUERY_PARAM, restore_graph

__all__ = [
    "ShareDecodeError",
    "decode_payload",
    "decode_snapshot",
    "encode_payload",
    "encode_snapshot",
    "SHARE_QUERY_PARAM",
    "restore_graph",
]
