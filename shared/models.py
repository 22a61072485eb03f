"""
Data models for track pairs, manifests, and object store reads.

This module defines the core data structures shared by the pairing engine,
the manifest resolver/generator, the storage providers and the HTTP layer.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Optional, Any, Iterator
from enum import Enum
from datetime import datetime
import json

from shared.constants import LABEL_NUMBER_WIDTH, TITLE_LABEL, ORIGINAL_LABEL, REMIX_LABEL
from shared.errors import RangeNotSatisfiableError


class StorageProvider(Enum):
    """Supported object store backends."""
    CLOUDFLARE_R2 = "r2"
    AWS_S3 = "s3"
    GENERIC_S3 = "generic"
    LOCAL = "local"


def generic_label(label: str, position: int) -> str:
    """Label for the pair at a zero-based position, e.g. ``Track 01``."""
    return f"{label} {str(position + 1).zfill(LABEL_NUMBER_WIDTH)}"


@dataclass
class TrackPair:
    """
    A matched original/remix pair as sent to clients.

    Attributes:
        index: Position of the pair in the ordered sequence (stable once persisted)
        title: Display title
        original_label: Label for the original version
        remix_label: Label for the remix version
        original_url: Playback URL of the original
        remix_url: Playback URL of the remix
    """
    index: int
    title: str
    original_label: str
    remix_label: str
    original_url: str
    remix_url: str

    @classmethod
    def generic(cls, position: int, original_url: str, remix_url: str) -> 'TrackPair':
        """Create a pair whose title and labels do not reveal filenames."""
        return cls(
            index=position,
            title=generic_label(TITLE_LABEL, position),
            original_label=generic_label(ORIGINAL_LABEL, position),
            remix_label=generic_label(REMIX_LABEL, position),
            original_url=original_url,
            remix_url=remix_url,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the camelCase wire shape."""
        return {
            "index": self.index,
            "title": self.title,
            "originalLabel": self.original_label,
            "remixLabel": self.remix_label,
            "originalUrl": self.original_url,
            "remixUrl": self.remix_url,
        }


@dataclass
class BankEntry:
    """One entry of a manifest bank (``originals`` or ``remixes``)."""
    name: str
    url: str

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "url": self.url}


@dataclass
class Manifest:
    """
    The persisted playlist document.

    When ``pairs`` is non-empty it is authoritative: readers return it in
    stored order and never re-derive it from the banks.
    """
    originals: List[BankEntry] = field(default_factory=list)
    remixes: List[BankEntry] = field(default_factory=list)
    pairs: List[TrackPair] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "originals": [entry.to_dict() for entry in self.originals],
            "remixes": [entry.to_dict() for entry in self.remixes],
            "pairs": [pair.to_dict() for pair in self.pairs],
        }

    def to_json(self, indent: int = 2) -> str:
        """
        Serialize the manifest to a JSON string.

        Args:
            indent: JSON indentation level

        Returns:
            JSON string representation
        """
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)


@dataclass
class AppliedRange:
    """Byte range actually served: ``length`` bytes starting at ``offset``."""
    offset: int
    length: int

    @property
    def end(self) -> int:
        """Inclusive last byte position."""
        return self.offset + self.length - 1


@dataclass
class RangeSpec:
    """
    A requested byte range.

    Attributes:
        offset: First byte requested (non-negative)
        length: Number of bytes requested, or None for "to end of object"
    """
    offset: int
    length: Optional[int] = None

    def to_header(self) -> str:
        """Render as an HTTP ``Range`` header value."""
        if self.length is None:
            return f"bytes={self.offset}-"
        return f"bytes={self.offset}-{self.offset + self.length - 1}"

    def resolve(self, total_size: int) -> AppliedRange:
        """
        Compute the range that will be served for an object of ``total_size`` bytes.

        The end is clamped to the object size.

        Raises:
            RangeNotSatisfiableError: If the range starts at or beyond the end
        """
        if self.offset >= total_size:
            raise RangeNotSatisfiableError(total_size)
        available = total_size - self.offset
        length = available if self.length is None else min(self.length, available)
        return AppliedRange(offset=self.offset, length=length)


@dataclass
class PartialObjectResult:
    """
    Result of a (possibly ranged) object read.

    ``body`` yields byte chunks and is None for metadata-only reads.
    ``applied_range`` is None when the whole object is returned.
    """
    total_size: int
    content_type: str
    etag: str
    body: Optional[Iterator[bytes]] = None
    applied_range: Optional[AppliedRange] = None
    last_modified: Optional[datetime] = None

    @property
    def content_length(self) -> int:
        if self.applied_range is not None:
            return self.applied_range.length
        return self.total_size

    def read(self) -> bytes:
        """Drain the body into memory. Only for small objects such as the manifest."""
        if self.body is None:
            return b""
        return b"".join(self.body)


@dataclass
class KeyPage:
    """One page of a prefix listing. ``cursor`` is None when the listing is complete."""
    keys: List[str]
    cursor: Optional[str] = None
