"""
Object store backends and key listing.
"""

from .storage_provider import ObjectStore
from .cloudflare_r2 import CloudflareR2Provider
from .local_provider import LocalStorageProvider
from .provider_factory import StorageProviderFactory, connect_store
from .key_lister import list_keys, list_banks, is_directory_marker

__all__ = [
    'ObjectStore',
    'CloudflareR2Provider',
    'LocalStorageProvider',
    'StorageProviderFactory',
    'connect_store',
    'list_keys',
    'list_banks',
    'is_directory_marker',
]
