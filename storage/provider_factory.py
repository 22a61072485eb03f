"""
Factory for creating object store instances.

Simplifies provider selection and initialization.
"""

import logging
from typing import Optional

from shared.config import ServiceConfig
from shared.models import StorageProvider
from .storage_provider import ObjectStore
from .cloudflare_r2 import CloudflareR2Provider
from .local_provider import LocalStorageProvider

logger = logging.getLogger(__name__)


class StorageProviderFactory:
    """Factory for creating object store instances."""

    @staticmethod
    def create(provider_type: StorageProvider) -> ObjectStore:
        """
        Create a storage provider instance.

        Args:
            provider_type: Type of provider to create

        Returns:
            Storage provider instance

        Raises:
            ValueError: If provider type is not supported
        """
        if provider_type in (StorageProvider.CLOUDFLARE_R2,
                             StorageProvider.AWS_S3,
                             StorageProvider.GENERIC_S3):
            # All S3-compatible; they differ only by endpoint
            return CloudflareR2Provider()

        elif provider_type == StorageProvider.LOCAL:
            return LocalStorageProvider()

        else:
            raise ValueError(f"Unknown provider type: {provider_type}")

    @staticmethod
    def get_provider_name(provider_type: StorageProvider) -> str:
        """Get human-readable provider name."""
        names = {
            StorageProvider.CLOUDFLARE_R2: "Cloudflare R2",
            StorageProvider.AWS_S3: "Amazon S3",
            StorageProvider.GENERIC_S3: "Generic S3-Compatible",
            StorageProvider.LOCAL: "Local Directory",
        }
        return names.get(provider_type, "Unknown")


def connect_store(config: ServiceConfig) -> Optional[ObjectStore]:
    """
    Build and authenticate the store described by ``config``.

    Returns:
        The store, or None when no provider is configured or authentication failed
    """
    if not config.has_store:
        return None

    store = StorageProviderFactory.create(config.provider)
    if not store.authenticate(config.store_credentials()):
        logger.error(f"Could not bind {StorageProviderFactory.get_provider_name(config.provider)} store")
        return None
    return store
