"""
Cloudflare R2 storage provider implementation.

Cloudflare R2 is S3-compatible and offers zero egress fees, making it ideal
for music streaming use cases. The same provider serves AWS S3 and generic
S3-compatible stores when given their endpoint.
"""

import logging
import re
from typing import Optional, Dict, Any, Iterator

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from shared.constants import STREAM_CHUNK_SIZE, DEFAULT_AUDIO_CONTENT_TYPE
from shared.errors import RangeNotSatisfiableError, StoreUnavailableError
from shared.models import AppliedRange, KeyPage, PartialObjectResult, RangeSpec
from .storage_provider import ObjectStore

logger = logging.getLogger(__name__)

NOT_FOUND_CODES = {'NoSuchKey', 'NotFound', '404'}
CONTENT_RANGE_PATTERN = re.compile(r'^bytes (\d+)-(\d+)/(\d+|\*)$')


def _error_code(error: ClientError) -> str:
    return str(error.response.get('Error', {}).get('Code', ''))


def _iter_body(body, chunk_size: int = STREAM_CHUNK_SIZE) -> Iterator[bytes]:
    """Yield chunks from a botocore StreamingBody and close it when done or abandoned."""
    try:
        for chunk in body.iter_chunks(chunk_size):
            yield chunk
    finally:
        body.close()


def parse_content_range(value: Optional[str]) -> Optional[tuple]:
    """Parse ``bytes <start>-<end>/<total>`` into (AppliedRange, total or None)."""
    if not value:
        return None
    m = CONTENT_RANGE_PATTERN.match(value.strip())
    if not m:
        return None
    start, end = int(m.group(1)), int(m.group(2))
    total = None if m.group(3) == '*' else int(m.group(3))
    return AppliedRange(offset=start, length=end - start + 1), total


class CloudflareR2Provider(ObjectStore):
    """
    Cloudflare R2 storage implementation using boto3 S3 client.

    R2 is S3-compatible and provides zero egress costs, making it perfect
    for streaming applications.
    """

    def __init__(self, client=None, bucket_name: Optional[str] = None,
                 page_size: Optional[int] = None):
        self.s3_client = client
        self.bucket_name = bucket_name
        self.endpoint_url = None
        self.page_size = page_size

    def authenticate(self, credentials: Dict[str, str]) -> bool:
        """
        Create the S3 client for R2.

        Args:
            credentials: Must contain:
                - access_key_id: R2 access key ID
                - secret_access_key: R2 secret access key
                - endpoint: R2 endpoint (derived from the account ID)
                - bucket: Bucket name
        """
        try:
            self.endpoint_url = credentials.get('endpoint') or None
            self.bucket_name = credentials['bucket']
            if not self.bucket_name:
                logger.error("R2 authentication failed: no bucket configured")
                return False

            self.s3_client = boto3.client(
                's3',
                endpoint_url=self.endpoint_url,
                aws_access_key_id=credentials['access_key_id'],
                aws_secret_access_key=credentials['secret_access_key'],
                region_name=credentials.get('region') or 'auto'  # R2 uses 'auto' region
            )
            return True

        except (BotoCoreError, KeyError) as e:
            logger.error(f"R2 authentication failed: {e}")
            return False

    def list_page(self, prefix: str, cursor: Optional[str] = None) -> KeyPage:
        """List one page of keys via ListObjectsV2."""
        kwargs: Dict[str, Any] = {'Bucket': self.bucket_name, 'Prefix': prefix}
        if cursor:
            kwargs['ContinuationToken'] = cursor
        if self.page_size:
            kwargs['MaxKeys'] = self.page_size

        try:
            response = self.s3_client.list_objects_v2(**kwargs)
        except (ClientError, BotoCoreError) as e:
            raise StoreUnavailableError(f"Listing '{prefix}' failed: {e}") from e

        keys = [obj['Key'] for obj in response.get('Contents', [])]
        next_cursor = response.get('NextContinuationToken') if response.get('IsTruncated') else None
        return KeyPage(keys=keys, cursor=next_cursor)

    def get_object(self, key: str,
                   range_spec: Optional[RangeSpec] = None) -> Optional[PartialObjectResult]:
        """Stream an object, letting R2 apply the byte range."""
        kwargs = {'Bucket': self.bucket_name, 'Key': key}
        if range_spec is not None:
            kwargs['Range'] = range_spec.to_header()

        try:
            response = self.s3_client.get_object(**kwargs)
        except ClientError as e:
            code = _error_code(e)
            if code in NOT_FOUND_CODES:
                return None
            if code == 'InvalidRange':
                head = self.head_object(key)
                if head is None:
                    return None
                raise RangeNotSatisfiableError(head.total_size) from e
            raise StoreUnavailableError(f"Reading '{key}' failed: {e}") from e
        except BotoCoreError as e:
            raise StoreUnavailableError(f"Reading '{key}' failed: {e}") from e

        applied_range = None
        total_size = response.get('ContentLength', 0)
        parsed = parse_content_range(response.get('ContentRange'))
        if parsed is not None:
            applied_range, total = parsed
            if total is not None:
                total_size = total

        return PartialObjectResult(
            total_size=total_size,
            content_type=response.get('ContentType') or DEFAULT_AUDIO_CONTENT_TYPE,
            etag=response.get('ETag', ''),
            body=_iter_body(response['Body']),
            applied_range=applied_range,
            last_modified=response.get('LastModified'),
        )

    def head_object(self, key: str,
                    range_spec: Optional[RangeSpec] = None) -> Optional[PartialObjectResult]:
        """Read object metadata only; the applied range is computed from the size."""
        try:
            response = self.s3_client.head_object(Bucket=self.bucket_name, Key=key)
        except ClientError as e:
            if _error_code(e) in NOT_FOUND_CODES:
                return None
            raise StoreUnavailableError(f"Reading metadata of '{key}' failed: {e}") from e
        except BotoCoreError as e:
            raise StoreUnavailableError(f"Reading metadata of '{key}' failed: {e}") from e

        total_size = response.get('ContentLength', 0)
        return PartialObjectResult(
            total_size=total_size,
            content_type=response.get('ContentType') or DEFAULT_AUDIO_CONTENT_TYPE,
            etag=response.get('ETag', ''),
            applied_range=range_spec.resolve(total_size) if range_spec is not None else None,
            last_modified=response.get('LastModified'),
        )

    def put_object(self, key: str, data: bytes,
                   content_type: Optional[str] = None,
                   cache_control: Optional[str] = None) -> int:
        """Upload bytes directly."""
        kwargs = {'Bucket': self.bucket_name, 'Key': key, 'Body': data}
        if content_type:
            kwargs['ContentType'] = content_type
        if cache_control:
            kwargs['CacheControl'] = cache_control

        try:
            self.s3_client.put_object(**kwargs)
        except (ClientError, BotoCoreError) as e:
            raise StoreUnavailableError(f"Writing '{key}' failed: {e}") from e
        return len(data)
