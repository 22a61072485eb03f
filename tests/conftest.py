from datetime import datetime, timezone
from typing import Dict, List, Optional

import pytest

from shared.config import ServiceConfig
from shared.errors import StoreUnavailableError
from shared.models import KeyPage, PartialObjectResult, RangeSpec
from storage.storage_provider import ObjectStore


class MemoryStore(ObjectStore):
    """In-memory ObjectStore that records what it was asked to do."""

    def __init__(self, objects: Optional[Dict[str, bytes]] = None, page_size: int = 1000):
        self.objects: Dict[str, bytes] = dict(objects or {})
        self.content_types: Dict[str, str] = {}
        self.page_size = page_size
        self.list_calls: List[tuple] = []
        self.reads: List[tuple] = []
        self.heads: List[tuple] = []
        self.writes: List[str] = []
        self.last_modified = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    def authenticate(self, credentials):
        return True

    def list_page(self, prefix, cursor=None):
        self.list_calls.append((prefix, cursor))
        keys = sorted(k for k in self.objects if k.startswith(prefix))
        start = int(cursor) if cursor else 0
        page = keys[start:start + self.page_size]
        end = start + len(page)
        return KeyPage(keys=page, cursor=str(end) if end < len(keys) else None)

    def _result(self, key, range_spec):
        data = self.objects[key]
        applied = range_spec.resolve(len(data)) if range_spec is not None else None
        return PartialObjectResult(
            total_size=len(data),
            content_type=self.content_types.get(key, "audio/mpeg"),
            etag=f'"etag-{len(data)}"',
            applied_range=applied,
            last_modified=self.last_modified,
        )

    def get_object(self, key, range_spec: Optional[RangeSpec] = None):
        self.reads.append((key, range_spec))
        if key not in self.objects:
            return None
        result = self._result(key, range_spec)
        data = self.objects[key]
        if result.applied_range is not None:
            data = data[result.applied_range.offset:result.applied_range.end + 1]
        result.body = iter([data[i:i + 10] for i in range(0, len(data), 10)])
        return result

    def head_object(self, key, range_spec: Optional[RangeSpec] = None):
        self.heads.append((key, range_spec))
        if key not in self.objects:
            return None
        return self._result(key, range_spec)

    def put_object(self, key, data, content_type=None, cache_control=None):
        self.writes.append(key)
        self.objects[key] = data
        if content_type:
            self.content_types[key] = content_type
        return len(data)


class BrokenStore(MemoryStore):
    """Store whose every call fails as if the backend were unreachable."""

    def list_page(self, prefix, cursor=None):
        raise StoreUnavailableError("connection refused")

    def get_object(self, key, range_spec=None):
        raise StoreUnavailableError("connection refused")

    def head_object(self, key, range_spec=None):
        raise StoreUnavailableError("connection refused")


def audio_objects(*keys: str) -> Dict[str, bytes]:
    return {key: f"audio:{key}".encode() for key in keys}


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def config():
    return ServiceConfig(admin_token="s3cret")
