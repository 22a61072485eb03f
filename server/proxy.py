"""
Byte pass-through for remote audio: /proxy?src=<https://...mp3>

The client's Range header is forwarded upstream and the upstream status and
media headers are relayed as-is.
"""

import logging
from typing import Dict, Optional

import requests
from flask import Response, jsonify, stream_with_context

from shared.constants import CONTENT_CACHE_CONTROL, DEFAULT_AUDIO_CONTENT_TYPE, STREAM_CHUNK_SIZE, DEFAULT_NETWORK_TIMEOUT
from playlist.urls import is_absolute_url

logger = logging.getLogger(__name__)

RELAYED_HEADERS = ('Accept-Ranges', 'Content-Range', 'Content-Length', 'ETag', 'Last-Modified')


def relay_headers(upstream: requests.Response) -> Dict[str, str]:
    headers = {
        'Content-Type': upstream.headers.get('Content-Type') or DEFAULT_AUDIO_CONTENT_TYPE,
        'Accept-Ranges': upstream.headers.get('Accept-Ranges') or 'bytes',
        'Cache-Control': CONTENT_CACHE_CONTROL,
    }
    for name in RELAYED_HEADERS:
        value = upstream.headers.get(name)
        if value:
            headers[name] = value
    return headers


def _iter_upstream(upstream: requests.Response):
    try:
        for chunk in upstream.iter_content(chunk_size=STREAM_CHUNK_SIZE):
            if chunk:
                yield chunk
    finally:
        upstream.close()


def proxy_audio(src: Optional[str], range_header: Optional[str] = None, head: bool = False,
                timeout: int = DEFAULT_NETWORK_TIMEOUT, session: Optional[requests.Session] = None):
    """Fetch ``src`` and stream it back verbatim."""
    if not src:
        return jsonify({"error": "Missing src"}), 400
    if not is_absolute_url(src) or not src.lower().startswith(('http://', 'https://')):
        return jsonify({"error": "src must be an absolute http(s) URL"}), 400

    http = session or requests
    # Raw bytes only, so the relayed Content-Length stays truthful
    upstream_headers = {'Accept-Encoding': 'identity'}
    if range_header:
        upstream_headers['Range'] = range_header
    try:
        upstream = http.request(
            'HEAD' if head else 'GET', src,
            headers=upstream_headers, stream=True, timeout=timeout,
            allow_redirects=True,
        )
    except requests.RequestException as e:
        logger.warning(f"Proxy fetch failed for {src}: {e}")
        return jsonify({"error": "Upstream unavailable"}), 502

    headers = relay_headers(upstream)
    if head:
        upstream.close()
        return Response(None, status=upstream.status_code, headers=headers)

    return Response(stream_with_context(_iter_upstream(upstream)),
                    status=upstream.status_code, headers=headers, direct_passthrough=True)
