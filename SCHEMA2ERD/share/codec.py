"""Compact, URL-safe encoding of graph snapshots.

Wire format: UTF-8 JSON (no whitespace) -> raw DEFLATE at level 9 (no zlib
header) -> base64url with the `=` padding stripped.
"""

from __future__ import annotations

import base64
import json
import zlib
from typing import Any, Dict, Optional, Union

from SCHEMA2ERD.ir.models import Graph

RAW_DEFLATE_WBITS = -15


class ShareDecodeError(ValueError):
    """A token that is not valid base64url / raw deflate / JSON."""


def _b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def _b64url_decode(token: str) -> bytes:
    padded = token + "=" * (-len(token) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii"))


def encode_payload(obj: Any) -> str:
    text = json.dumps(obj, separators=(",", ":"), ensure_ascii=False)
    compressor = zlib.compressobj(9, zlib.DEFLATED, RAW_DEFLATE_WBITS)
    deflated = compressor.compress(text.encode("utf-8")) + compressor.flush()
    return _b64url_encode(deflated)


def decode_payload(token: str) -> Any:
    """Inverse of `encode_payload`; raises `ShareDecodeError` on any malformed layer."""
    if not isinstance(token, str) or not token.strip():
        raise ShareDecodeError("empty share token")
    try:
        raw = _b64url_decode(token.strip())
        inflated = zlib.decompress(raw, RAW_DEFLATE_WBITS)
        return json.loads(inflated.decode("utf-8"))
    except (ValueError, zlib.error) as e:
        # binascii.Error, UnicodeDecodeError and JSONDecodeError are all ValueErrors
        raise ShareDecodeError(str(e)) from e


def encode_snapshot(graph: Union[Graph, Dict[str, Any]], schema: Optional[str] = "") -> str:
    """Encode `{graph, schema}` the way share links carry it."""
    if isinstance(graph, Graph):
        graph = graph.to_dict()
    return encode_payload({"graph": graph, "schema": schema or ""})


def decode_snapshot(token: str) -> Dict[str, Any]:
    """Decode a share token into `{graph, schema}`.

    Raises `ShareDecodeError` when the token does not decode to an object
    with a `graph` object.
    """
    data = decode_payload(token)
    if not isinstance(data, dict) or not isinstance(data.get("graph"), dict):
        raise ShareDecodeError("share payload has no graph object")
    schema = data.get("schema")
    return {"graph": data["graph"], "schema": schema if isinstance(schema, str) else ""}
