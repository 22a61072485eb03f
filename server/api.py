"""
HTTP API: playlist resolution, manifest generation, content streaming and proxy.
"""

import logging
import random
from typing import Optional

from flask import Flask, request, jsonify
from flask_cors import CORS

from pairing.rules import DEFAULT_RULES
from playlist.generator import ManifestGenerator
from playlist.resolver import ManifestResolver, PlaylistRequest
from shared.config import ServiceConfig
from shared.constants import (
    CONTENT_ROUTE,
    CORS_ALLOWED_METHODS,
    CORS_EXPOSE_HEADERS,
    LEGACY_CONTENT_ROUTE,
    LEGACY_PROXY_ROUTE,
    PLAYLIST_CACHE_CONTROL,
    PROXY_ROUTE,
    TRUTHY_FLAGS,
)
from shared.errors import StoreNotConfiguredError, StoreUnavailableError
from storage.provider_factory import connect_store
from storage.storage_provider import ObjectStore
from .auth import admin_ok
from .proxy import proxy_audio
from .range_server import serve_object

logger = logging.getLogger(__name__)

ENDPOINTS = [
    '/playlist?originals=&remixes=&shuffle=1&mode=auto',
    '/playlist/generate?dryrun=1',
    '/content/<key>',
    '/proxy?src=…',
    '/health',
]


def _flag(name: str) -> bool:
    return (request.args.get(name) or '').strip().lower() in TRUTHY_FLAGS


def create_app(config: Optional[ServiceConfig] = None, store: Optional[ObjectStore] = None,
               rng: Optional[random.Random] = None) -> Flask:
    """
    Build the Flask application.

    Args:
        config: Service configuration (default: loaded from .env / environment)
        store: Object store to use instead of the one described by config
        rng: Random source for playlist shuffling
    """
    config = config or ServiceConfig.from_env()
    if store is None:
        store = connect_store(config)

    rules = DEFAULT_RULES.with_filler_tokens(config.filler_tokens)
    resolver = ManifestResolver(store, config.manifest_key, rules, rng) if store else None
    generator = ManifestGenerator(store, config.manifest_key, rules) if store else None

    app = Flask(__name__)
    CORS(app, methods=CORS_ALLOWED_METHODS, expose_headers=CORS_EXPOSE_HEADERS, send_wildcard=True)
    app.extensions['remixbank'] = {'config': config, 'store': store}

    def require_store() -> ObjectStore:
        if store is None:
            raise StoreNotConfiguredError("Object store not configured")
        return store

    @app.errorhandler(StoreNotConfiguredError)
    def store_not_configured(e):
        return jsonify({"error": str(e)}), 503

    @app.errorhandler(StoreUnavailableError)
    def store_unavailable(e):
        logger.error(f"Store error on {request.path}: {e}")
        return jsonify({"error": "Object store unavailable"}), 503

    @app.route('/health', methods=['GET', 'HEAD'])
    def health_check():
        return jsonify({"ok": True, "store": store is not None})

    @app.route('/playlist', methods=['GET', 'HEAD'])
    def get_playlist():
        require_store()
        playlist_request = PlaylistRequest(
            originals_prefix=request.args.get('originals') or config.originals_prefix,
            remixes_prefix=request.args.get('remixes') or config.remixes_prefix,
            force_recompute=(request.args.get('mode') or '').strip().lower() == 'auto',
            shuffle=_flag('shuffle'),
            base_url=request.url_root.rstrip('/'),
        )
        pairs = resolver.resolve(playlist_request)
        response = jsonify({"pairs": [pair.to_dict() for pair in pairs]})
        response.headers['Cache-Control'] = PLAYLIST_CACHE_CONTROL
        return response

    @app.route('/playlist/generate', methods=['GET', 'POST'])
    def generate_playlist():
        require_store()
        outcome = generator.generate(
            originals_prefix=request.args.get('originals') or config.originals_prefix,
            remixes_prefix=request.args.get('remixes') or config.remixes_prefix,
            base_url=request.url_root.rstrip('/'),
            authenticated=admin_ok(request, config.admin_token),
            dry_run=_flag('dryrun'),
        )
        return jsonify(outcome.to_dict())

    @app.route(f'{CONTENT_ROUTE}<path:key>', methods=['GET', 'HEAD'])
    @app.route(f'{LEGACY_CONTENT_ROUTE}<path:key>', methods=['GET', 'HEAD'])
    def get_content(key):
        return serve_object(require_store(), key,
                            range_header=request.headers.get('Range'),
                            head=request.method == 'HEAD')

    @app.route(PROXY_ROUTE, methods=['GET', 'HEAD'])
    @app.route(LEGACY_PROXY_ROUTE, methods=['GET', 'HEAD'])
    def proxy():
        return proxy_audio(request.args.get('src'),
                           range_header=request.headers.get('Range'),
                           head=request.method == 'HEAD',
                           timeout=config.proxy_timeout)

    @app.route('/')
    def home():
        return jsonify({"ok": True, "endpoints": ENDPOINTS})

    return app
