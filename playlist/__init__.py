"""
Playlist manifests: resolution and generation.
"""

from .generator import GenerateOutcome, ManifestGenerator
from .manifest import ManifestLoadResult, ManifestShape, ManifestStatus, load_manifest, parse_manifest
from .resolver import ManifestResolver, PlaylistRequest
from .urls import content_url, normalize_url

__all__ = [
    'GenerateOutcome',
    'ManifestGenerator',
    'ManifestLoadResult',
    'ManifestShape',
    'ManifestStatus',
    'load_manifest',
    'parse_manifest',
    'ManifestResolver',
    'PlaylistRequest',
    'content_url',
    'normalize_url',
]
