"""
Abstract base class for object store backends.

This module defines the interface every backend must implement, allowing the
service to work with Cloudflare R2, AWS S3, any other S3-compatible service,
or a plain local directory.
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Optional, Dict, Any

from shared.constants import MANIFEST_CACHE_CONTROL, MANIFEST_CONTENT_TYPE
from shared.models import KeyPage, PartialObjectResult, RangeSpec

logger = logging.getLogger(__name__)


class ObjectStore(ABC):
    """
    Abstract base class for object store backends.

    Missing keys are an expected outcome and are reported as None, never as
    an exception. Any other failure raises ``StoreUnavailableError``.
    """

    @abstractmethod
    def authenticate(self, credentials: Dict[str, str]) -> bool:
        """
        Bind the backend to its credentials.

        Args:
            credentials: Dictionary with access_key_id, secret_access_key,
                        endpoint, bucket, base_path, etc.

        Returns:
            True if the backend is usable, False otherwise
        """
        pass

    @abstractmethod
    def list_page(self, prefix: str, cursor: Optional[str] = None) -> KeyPage:
        """
        List one page of keys under a prefix.

        Args:
            prefix: Key prefix to scope the listing
            cursor: Continuation token from the previous page, None for the first

        Returns:
            KeyPage whose cursor is None once the listing is complete

        Raises:
            StoreUnavailableError: If the store cannot be listed
        """
        pass

    @abstractmethod
    def get_object(self, key: str,
                   range_spec: Optional[RangeSpec] = None) -> Optional[PartialObjectResult]:
        """
        Read an object, optionally a byte range of it.

        Args:
            key: Object key
            range_spec: Optional byte range

        Returns:
            PartialObjectResult with a streaming body, or None if the key is absent

        Raises:
            RangeNotSatisfiableError: If the range starts beyond the object
            StoreUnavailableError: If the store cannot be read
        """
        pass

    @abstractmethod
    def head_object(self, key: str,
                    range_spec: Optional[RangeSpec] = None) -> Optional[PartialObjectResult]:
        """
        Same as ``get_object`` but reads metadata only; the result has no body.
        """
        pass

    @abstractmethod
    def put_object(self, key: str, data: bytes,
                   content_type: Optional[str] = None,
                   cache_control: Optional[str] = None) -> int:
        """
        Write an object, replacing any previous version wholesale.

        Returns:
            Number of bytes written

        Raises:
            StoreUnavailableError: If the write fails
        """
        pass

    def download_json(self, key: str) -> Optional[str]:
        """
        Read a small JSON document.

        Returns:
            The decoded text, or None if the key does not exist
        """
        result = self.get_object(key)
        if result is None:
            return None
        return result.read().decode('utf-8')

    def upload_json(self, data: Any, key: str) -> int:
        """
        Write a JSON document.

        Args:
            data: A JSON string, or any JSON-serializable value
            key: Destination key

        Returns:
            Number of bytes written
        """
        if not isinstance(data, str):
            data = json.dumps(data, indent=2, ensure_ascii=False)
        payload = data.encode('utf-8')
        written = self.put_object(
            key, payload,
            content_type=MANIFEST_CONTENT_TYPE,
            cache_control=MANIFEST_CACHE_CONTROL,
        )
        logger.debug(f"upload_json: wrote {written} bytes to '{key}'")
        return written
