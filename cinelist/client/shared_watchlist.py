# cinelist/client/shared_watchlist.py
from __future__ import annotations

"""
Stateless share links for the personal watchlist.

The link carries the whole list: `/shared?data=<base64(JSON [{id, type}])>`.
Nothing is stored server side, so the only bound is URL length.
"""

import asyncio
import base64
import binascii
import json
import logging
from typing import Any, Iterable, List, Optional
from urllib.parse import parse_qs, urlencode, urlparse

from pydantic import ValidationError

from cinelist.core.config import settings
from cinelist.core.exceptions import AppException, DecodeError
from cinelist.schemas.content import ContentDetails, ContentItem, ContentRef

logger = logging.getLogger(__name__)

__all__ = [
    "encode_shared_watchlist",
    "decode_shared_watchlist",
    "shared_data_from_url",
    "resolve_shared_watchlist",
]


def encode_shared_watchlist(items: Iterable[ContentItem | ContentRef], *, base_url: Optional[str] = None) -> str:
    payload = [{"id": item.id, "type": item.media_type.value} for item in items]
    data = base64.b64encode(json.dumps(payload, separators=(",", ":")).encode("utf-8")).decode("ascii")
    base = (base_url or settings.public_base_url_str).rstrip("/")
    return f"{base}/shared?{urlencode({'data': data})}"


def shared_data_from_url(url: str) -> str:
    data = parse_qs(urlparse(url).query).get("data", [""])[0]
    if not data:
        raise DecodeError("Shared link has no data")
    return data


def decode_shared_watchlist(data: str) -> List[ContentRef]:
    """Decode a `data` parameter into content refs; anything malformed raises `DecodeError`."""
    if not data:
        raise DecodeError("Shared link has no data")
    try:
        raw: Any = json.loads(base64.b64decode(data.encode("ascii"), validate=True).decode("utf-8"))
    except (binascii.Error, UnicodeError, ValueError) as exc:
        raise DecodeError("Shared link is not valid base64 JSON") from exc
    if not isinstance(raw, list):
        raise DecodeError("Shared link payload must be a list")
    try:
        return [
            ContentRef(id=entry["id"], media_type=entry["type"])
            for entry in raw
        ]
    except (KeyError, TypeError, ValidationError) as exc:
        raise DecodeError("Shared link entries must be {id, type}", details={"error": str(exc)}) from exc


async def resolve_shared_watchlist(content, refs: Iterable[ContentRef]) -> List[ContentDetails]:
    """Fetch details for every ref concurrently; entries whose lookup fails are skipped."""
    refs = list(refs)
    results = await asyncio.gather(
        *(content.get_details(ref.id, ref.media_type) for ref in refs),
        return_exceptions=True,
    )
    resolved: List[ContentDetails] = []
    for ref, result in zip(refs, results):
        if isinstance(result, AppException):
            logger.warning("Shared item %s/%s could not be resolved: %s", ref.media_type.value, ref.id, result.message)
            continue
        if isinstance(result, BaseException):
            raise result
        resolved.append(result)
    return resolved
