"""
Reading the stored manifest.

Parsing never raises: an unusable document is reported as a ``malformed``
result so the resolver can fall back to computing pairs. Store failures are
not parse failures and do propagate.
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from storage.storage_provider import ObjectStore

logger = logging.getLogger(__name__)


class ManifestStatus(Enum):
    MISSING = "missing"
    LOADED = "loaded"
    MALFORMED = "malformed"


class ManifestShape(Enum):
    PAIRS = "pairs"
    BANKS = "banks"


@dataclass
class ManifestLoadResult:
    status: ManifestStatus
    shape: Optional[ManifestShape] = None
    document: Optional[Dict[str, Any]] = None
    reason: str = ""

    @property
    def usable(self) -> bool:
        return self.status == ManifestStatus.LOADED


PAIR_TEXT_FIELDS = ('title', 'originalLabel', 'remixLabel', 'originalUrl', 'remixUrl')


def _is_pair_entry(entry: Any) -> bool:
    if not isinstance(entry, dict):
        return False
    return all(entry.get(name) is None or isinstance(entry[name], str) for name in PAIR_TEXT_FIELDS)


def _is_bank_entry(entry: Any) -> bool:
    if isinstance(entry, str):
        return True
    return isinstance(entry, dict) and isinstance(entry.get('url'), str)


def parse_manifest(text: str) -> ManifestLoadResult:
    """Parse and classify a manifest document."""
    try:
        document = json.loads(text)
    except ValueError as e:
        return ManifestLoadResult(ManifestStatus.MALFORMED, reason=f"invalid JSON: {e}")

    if not isinstance(document, dict):
        return ManifestLoadResult(ManifestStatus.MALFORMED, reason="document is not an object")

    pairs = document.get('pairs')
    if isinstance(pairs, list) and pairs:
        if not all(_is_pair_entry(p) for p in pairs):
            return ManifestLoadResult(ManifestStatus.MALFORMED,
                                      reason="pairs entries must be objects with text fields")
        return ManifestLoadResult(ManifestStatus.LOADED, ManifestShape.PAIRS, document)

    originals = document.get('originals')
    remixes = document.get('remixes')
    if isinstance(originals, list) and isinstance(remixes, list):
        if not all(_is_bank_entry(e) for e in originals + remixes):
            return ManifestLoadResult(ManifestStatus.MALFORMED, reason="bank entries need a url")
        return ManifestLoadResult(ManifestStatus.LOADED, ManifestShape.BANKS, document)

    return ManifestLoadResult(ManifestStatus.MALFORMED, reason="neither pairs nor banks present")


def load_manifest(store: ObjectStore, key: str) -> ManifestLoadResult:
    """
    Read and classify the manifest stored under ``key``.

    Raises:
        StoreUnavailableError: If the store cannot be read
    """
    try:
        text = store.download_json(key)
    except UnicodeDecodeError as e:
        return ManifestLoadResult(ManifestStatus.MALFORMED, reason=f"not UTF-8: {e}")
    if text is None:
        return ManifestLoadResult(ManifestStatus.MISSING, reason=f"'{key}' not found")

    result = parse_manifest(text)
    if not result.usable:
        logger.debug(f"load_manifest: '{key}' unusable ({result.reason})")
    return result
