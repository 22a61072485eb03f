"""
Local filesystem storage provider.
Implements the ObjectStore interface on top of a directory tree.
"""

import logging
import mimetypes
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Dict, Iterator, List

from shared.constants import DEFAULT_AUDIO_CONTENT_TYPE, DEFAULT_LIST_PAGE_SIZE, STREAM_CHUNK_SIZE
from shared.errors import StoreUnavailableError
from shared.models import KeyPage, PartialObjectResult, RangeSpec
from .storage_provider import ObjectStore

logger = logging.getLogger(__name__)


def _iter_file(path: Path, offset: int, length: int,
               chunk_size: int = STREAM_CHUNK_SIZE) -> Iterator[bytes]:
    with open(path, 'rb') as f:
        f.seek(offset)
        remaining = length
        while remaining > 0:
            chunk = f.read(min(chunk_size, remaining))
            if not chunk:
                break
            remaining -= len(chunk)
            yield chunk


class LocalStorageProvider(ObjectStore):
    """
    Storage provider that uses the local filesystem.
    Useful for self-hosting on a NAS or local drive, and for development.
    Keys map to paths relative to the bucket root.
    """

    def __init__(self, base_path: Optional[str] = None, page_size: int = DEFAULT_LIST_PAGE_SIZE):
        self.base_path: Optional[Path] = Path(base_path).expanduser().absolute() if base_path else None
        self.bucket_name: Optional[str] = None
        self.page_size = page_size

    def authenticate(self, credentials: Dict[str, str]) -> bool:
        """
        'Authenticate' by setting the base path.
        In local mode, 'base_path' (or 'endpoint') is the root directory and
        'bucket' an optional subdirectory.
        """
        path = credentials.get('base_path') or credentials.get('endpoint')
        if not path:
            return False

        self.base_path = Path(path).expanduser().absolute()
        self.bucket_name = credentials.get('bucket') or None
        try:
            self._root().mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Local storage unavailable at {self.base_path}: {e}")
            return False
        return True

    def _root(self) -> Path:
        if self.base_path is None:
            raise StoreUnavailableError("Local storage path not set")
        if self.bucket_name in (None, ".", "", "default"):
            return self.base_path
        return self.base_path / self.bucket_name

    def _get_path(self, key: str) -> Optional[Path]:
        """Absolute path for a key, or None if the key would escape the root."""
        root = self._root().resolve()
        path = (root / key).resolve()
        if path != root and root not in path.parents:
            return None
        return path

    def _all_keys(self) -> List[str]:
        root = self._root()
        if not root.exists():
            return []
        keys = []
        for dirpath, _, filenames in os.walk(root):
            for filename in filenames:
                rel_path = (Path(dirpath) / filename).relative_to(root)
                keys.append(rel_path.as_posix())
        return keys

    def list_page(self, prefix: str, cursor: Optional[str] = None) -> KeyPage:
        """Keys are served in sorted order; the cursor is the last key of the page."""
        try:
            keys = sorted(k for k in self._all_keys() if k.startswith(prefix))
        except OSError as e:
            raise StoreUnavailableError(f"Listing '{prefix}' failed: {e}") from e

        if cursor:
            keys = [k for k in keys if k > cursor]
        page = keys[:self.page_size]
        next_cursor = page[-1] if len(keys) > len(page) else None
        return KeyPage(keys=page, cursor=next_cursor)

    def _stat(self, key: str, range_spec: Optional[RangeSpec]) -> Optional[PartialObjectResult]:
        path = self._get_path(key)
        if path is None or not path.is_file():
            return None
        try:
            stat = path.stat()
        except OSError as e:
            raise StoreUnavailableError(f"Reading '{key}' failed: {e}") from e

        content_type, _ = mimetypes.guess_type(path.name)
        return PartialObjectResult(
            total_size=stat.st_size,
            content_type=content_type or DEFAULT_AUDIO_CONTENT_TYPE,
            etag=f'"{stat.st_size:x}-{stat.st_mtime_ns:x}"',
            applied_range=range_spec.resolve(stat.st_size) if range_spec is not None else None,
            last_modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
        )

    def get_object(self, key: str,
                   range_spec: Optional[RangeSpec] = None) -> Optional[PartialObjectResult]:
        result = self._stat(key, range_spec)
        if result is None:
            return None
        if result.applied_range is not None:
            offset, length = result.applied_range.offset, result.applied_range.length
        else:
            offset, length = 0, result.total_size
        result.body = _iter_file(self._get_path(key), offset, length)
        return result

    def head_object(self, key: str,
                    range_spec: Optional[RangeSpec] = None) -> Optional[PartialObjectResult]:
        return self._stat(key, range_spec)

    def put_object(self, key: str, data: bytes,
                   content_type: Optional[str] = None,
                   cache_control: Optional[str] = None) -> int:
        path = self._get_path(key)
        if path is None:
            raise ValueError(f"Key escapes storage root: {key}")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = path.with_name(path.name + ".tmp")
            tmp_path.write_bytes(data)
            os.replace(tmp_path, path)
        except OSError as e:
            raise StoreUnavailableError(f"Writing '{key}' failed: {e}") from e
        logger.debug(f"Local - wrote {len(data)} bytes to {path}")
        return len(data)
