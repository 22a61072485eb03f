"""
Serve object bytes over HTTP with Range support.

Only the single-range form ``bytes=<start>-<end?>`` is honored; anything else
is served as a full 200 response.
"""

import logging
import re
from typing import Dict, Optional
from urllib.parse import quote

from flask import Response, stream_with_context
from werkzeug.http import http_date

from pairing.rules import final_segment
from shared.constants import CONTENT_CACHE_CONTROL, DEFAULT_AUDIO_CONTENT_TYPE
from shared.errors import RangeNotSatisfiableError
from shared.models import PartialObjectResult, RangeSpec
from storage.storage_provider import ObjectStore

logger = logging.getLogger(__name__)

RANGE_PATTERN = re.compile(r'^bytes=(\d+)-(\d+)?$')


def parse_range(header: Optional[str]) -> Optional[RangeSpec]:
    """
    Parse a Range header.

    Returns:
        RangeSpec, or None when the header is absent or malformed
    """
    if not header:
        return None
    m = RANGE_PATTERN.match(header.strip())
    if not m:
        return None
    start = int(m.group(1))
    if m.group(2) is None:
        return RangeSpec(offset=start)
    end = int(m.group(2))
    if end < start:
        return None
    return RangeSpec(offset=start, length=end - start + 1)


def content_disposition(key: str) -> str:
    filename = final_segment(key)
    try:
        filename.encode('ascii')
    except UnicodeEncodeError:
        fallback = filename.encode('ascii', 'replace').decode('ascii').replace('"', '')
        return f"inline; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"
    return f'inline; filename="{filename.replace(chr(34), "")}"'


def build_headers(result: PartialObjectResult, key: str) -> Dict[str, str]:
    """Response headers for a (possibly ranged) object read."""
    headers = {
        'Content-Type': result.content_type or DEFAULT_AUDIO_CONTENT_TYPE,
        'Accept-Ranges': 'bytes',
        'Cache-Control': CONTENT_CACHE_CONTROL,
        'Content-Length': str(result.content_length),
        'ETag': result.etag or '',
        'Content-Disposition': content_disposition(key),
    }
    if result.last_modified is not None:
        headers['Last-Modified'] = http_date(result.last_modified)
    if result.applied_range is not None:
        applied = result.applied_range
        headers['Content-Range'] = f"bytes {applied.offset}-{applied.end}/{result.total_size}"
    return headers


def serve_object(store: ObjectStore, key: str, range_header: Optional[str] = None,
                 head: bool = False) -> Response:
    """
    Build the response for one object, honoring an optional Range header.

    HEAD requests read metadata only and carry no body.
    """
    range_spec = parse_range(range_header)
    try:
        if head:
            result = store.head_object(key, range_spec)
        else:
            result = store.get_object(key, range_spec)
    except RangeNotSatisfiableError as e:
        return Response(status=416, headers={'Content-Range': f"bytes */{e.total_size}"})

    if result is None:
        return Response("Not found", status=404, mimetype='text/plain')

    status = 206 if result.applied_range is not None else 200
    headers = build_headers(result, key)

    if head or result.body is None:
        return Response(None, status=status, headers=headers)

    body = result.body
    return Response(stream_with_context(body), status=status, headers=headers,
                    direct_passthrough=True)
