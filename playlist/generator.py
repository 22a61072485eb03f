"""
Manifest generator: snapshot the current store contents as playlist.json.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from pairing.engine import pair_keys
from pairing.rules import DEFAULT_RULES, MatchRules, final_segment, leading_number_sort_key
from shared.constants import MANIFEST_KEY
from shared.models import BankEntry, Manifest, TrackPair
from storage.key_lister import list_banks
from storage.storage_provider import ObjectStore
from .urls import content_url

logger = logging.getLogger(__name__)


@dataclass
class GenerateOutcome:
    """Result of a generate request: a preview, or a committed write."""
    wrote: bool
    manifest: Manifest
    dryrun: bool = False
    key: Optional[str] = None
    bytes: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        if not self.wrote:
            return {"wrote": False, "dryrun": self.dryrun, "manifest": self.manifest.to_dict()}
        return {
            "wrote": True,
            "key": self.key,
            "bytes": self.bytes,
            "manifest": self.manifest.to_dict(),
        }


class ManifestGenerator:
    """Builds manifests from the store listing and persists them."""

    def __init__(self, store: ObjectStore, manifest_key: str = MANIFEST_KEY,
                 rules: MatchRules = DEFAULT_RULES):
        self.store = store
        self.manifest_key = manifest_key
        self.rules = rules

    def build(self, originals_prefix: str, remixes_prefix: str, base_url: str = "") -> Manifest:
        """
        Build a manifest from the current listing.

        Banks name entries by their real filename; pairs use generic labels.
        """
        originals, remixes = list_banks(self.store, originals_prefix, remixes_prefix)

        def bank(keys):
            return [BankEntry(name=final_segment(k), url=content_url(k, base_url))
                    for k in sorted(keys, key=leading_number_sort_key)]

        pairs = [
            TrackPair.generic(i, content_url(o, base_url), content_url(r, base_url))
            for i, (o, r) in enumerate(pair_keys(originals, remixes, self.rules))
        ]
        return Manifest(originals=bank(originals), remixes=bank(remixes), pairs=pairs)

    def commit(self, manifest: Manifest) -> int:
        """
        Overwrite the stored manifest.

        Returns:
            Number of bytes written
        """
        written = self.store.upload_json(manifest.to_json(), self.manifest_key)
        logger.info(f"Wrote manifest '{self.manifest_key}': {len(manifest.pairs)} pairs, {written} bytes")
        return written

    def generate(self, originals_prefix: str, remixes_prefix: str, base_url: str = "",
                 authenticated: bool = False, dry_run: bool = False) -> GenerateOutcome:
        """Build a manifest and commit it when the caller is authenticated and not dry-running."""
        manifest = self.build(originals_prefix, remixes_prefix, base_url)
        if not authenticated or dry_run:
            return GenerateOutcome(wrote=False, manifest=manifest, dryrun=dry_run)

        written = self.commit(manifest)
        return GenerateOutcome(wrote=True, manifest=manifest, key=self.manifest_key, bytes=written)
