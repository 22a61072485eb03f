"""
Manifest resolver: decide where the playlist's pairs come from.

Priority A: the stored manifest (its ``pairs`` array is authoritative and
returned in stored order; a bank-only manifest is paired by index).
Priority B: pairs computed from the current store listing.

Shuffle policy: a uniform random shuffle per request. Every shuffled
response is independent, so playlist responses are never cacheable.
"""

import logging
import random
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from pairing.engine import pair_keys
from pairing.rules import DEFAULT_RULES, MatchRules
from shared.constants import (
    DEFAULT_ORIGINALS_PREFIX,
    DEFAULT_REMIXES_PREFIX,
    MANIFEST_KEY,
    ORIGINAL_LABEL,
    REMIX_LABEL,
)
from shared.models import TrackPair
from storage.key_lister import list_banks
from storage.storage_provider import ObjectStore
from .manifest import ManifestShape, load_manifest
from .urls import content_url, normalize_url

logger = logging.getLogger(__name__)


@dataclass
class PlaylistRequest:
    """Parameters of one playlist resolution."""
    originals_prefix: str = DEFAULT_ORIGINALS_PREFIX
    remixes_prefix: str = DEFAULT_REMIXES_PREFIX
    force_recompute: bool = False
    shuffle: bool = False
    base_url: str = ""

    @property
    def prefixes(self):
        return (self.originals_prefix, self.remixes_prefix)


def _bank_url(entry: Any) -> str:
    return entry if isinstance(entry, str) else entry['url']


def _stored_index(value: Any, position: int) -> int:
    if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
        return value
    return position


class ManifestResolver:
    """Resolves a playlist request to an ordered list of TrackPair."""

    def __init__(self, store: ObjectStore, manifest_key: str = MANIFEST_KEY,
                 rules: MatchRules = DEFAULT_RULES, rng: Optional[random.Random] = None):
        self.store = store
        self.manifest_key = manifest_key
        self.rules = rules
        self.rng = rng or random.Random()

    def resolve(self, request: PlaylistRequest) -> List[TrackPair]:
        """
        Produce the wire-ready pair sequence for ``request``.

        Raises:
            StoreUnavailableError: If the store cannot be read or listed
        """
        pairs = None
        if not request.force_recompute:
            pairs = self._from_manifest(request)
        if pairs is None:
            pairs = self.compute_pairs(request)

        if request.shuffle:
            self.rng.shuffle(pairs)
        return pairs

    def _from_manifest(self, request: PlaylistRequest) -> Optional[List[TrackPair]]:
        result = load_manifest(self.store, self.manifest_key)
        if not result.usable:
            return None

        if result.shape == ManifestShape.PAIRS:
            pairs = [self._normalize_pair(entry, i, request)
                     for i, entry in enumerate(result.document['pairs'])]
            logger.debug(f"resolve: {len(pairs)} pairs from stored manifest")
            return pairs

        originals = result.document['originals']
        remixes = result.document['remixes']
        pairs = [
            TrackPair.generic(
                i,
                normalize_url(_bank_url(o), request.prefixes),
                normalize_url(_bank_url(r), request.prefixes),
            )
            for i, (o, r) in enumerate(zip(originals, remixes))
        ]
        logger.debug(f"resolve: {len(pairs)} pairs from stored banks")
        return pairs

    def _normalize_pair(self, entry: Dict[str, Any], position: int,
                        request: PlaylistRequest) -> TrackPair:
        return TrackPair(
            index=_stored_index(entry.get('index'), position),
            title=entry.get('title') or '',
            original_label=entry.get('originalLabel') or ORIGINAL_LABEL,
            remix_label=entry.get('remixLabel') or REMIX_LABEL,
            original_url=normalize_url(entry.get('originalUrl') or '', request.prefixes),
            remix_url=normalize_url(entry.get('remixUrl') or '', request.prefixes),
        )

    def compute_pairs(self, request: PlaylistRequest) -> List[TrackPair]:
        """Pair the current store contents, with generic titles and labels."""
        originals, remixes = list_banks(self.store, request.originals_prefix, request.remixes_prefix)
        matched = pair_keys(originals, remixes, self.rules)
        return [
            TrackPair.generic(i, content_url(o, request.base_url), content_url(r, request.base_url))
            for i, (o, r) in enumerate(matched)
        ]
