"""
Service configuration.

Values come from a ``.env`` file (python-dotenv) with the process environment
as fallback, and are handed to the application factory as one explicit
``ServiceConfig`` value.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Tuple, Mapping

from dotenv import dotenv_values

from shared.constants import (
    AWS_S3_ENDPOINT_TEMPLATE,
    CLOUDFLARE_R2_ENDPOINT_TEMPLATE,
    DEFAULT_NETWORK_TIMEOUT,
    DEFAULT_ORIGINALS_PREFIX,
    DEFAULT_REMIXES_PREFIX,
    MANIFEST_KEY,
)
from shared.errors import ConfigurationError
from shared.models import StorageProvider


@dataclass
class ServiceConfig:
    """
    Everything the service needs to know about its environment.

    ``provider`` is None when no object store is bound; requests that need
    the store then answer 503.
    """
    provider: Optional[StorageProvider] = None
    bucket: str = ""
    account_id: str = ""
    access_key_id: str = ""
    secret_access_key: str = ""
    endpoint: str = ""
    region: str = "auto"
    base_path: str = ""
    admin_token: str = ""
    originals_prefix: str = DEFAULT_ORIGINALS_PREFIX
    remixes_prefix: str = DEFAULT_REMIXES_PREFIX
    manifest_key: str = MANIFEST_KEY
    filler_tokens: Tuple[str, ...] = field(default_factory=tuple)
    proxy_timeout: int = DEFAULT_NETWORK_TIMEOUT

    @property
    def has_store(self) -> bool:
        return self.provider is not None

    def resolved_endpoint(self) -> str:
        """Explicit endpoint, else one derived from the R2 account id or the AWS region."""
        if self.endpoint:
            return self.endpoint
        if self.provider == StorageProvider.CLOUDFLARE_R2 and self.account_id:
            return CLOUDFLARE_R2_ENDPOINT_TEMPLATE.format(account_id=self.account_id)
        if self.provider == StorageProvider.AWS_S3 and self.region not in ("", "auto"):
            return AWS_S3_ENDPOINT_TEMPLATE.format(region=self.region)
        return ""

    def store_credentials(self) -> Dict[str, str]:
        """Credentials dictionary in the shape ``ObjectStore.authenticate`` expects."""
        return {
            'access_key_id': self.access_key_id,
            'secret_access_key': self.secret_access_key,
            'account_id': self.account_id,
            'endpoint': self.resolved_endpoint(),
            'region': self.region,
            'bucket': self.bucket,
            'base_path': self.base_path,
        }

    @classmethod
    def from_mapping(cls, values: Mapping[str, Optional[str]]) -> 'ServiceConfig':
        """
        Build a config from environment-style variables.

        Raises:
            ConfigurationError: If a value cannot be interpreted
        """
        def get(name: str, default: str = "") -> str:
            value = values.get(name)
            return value.strip() if value else default

        provider = None
        raw_provider = get("STORAGE_PROVIDER").lower()
        if raw_provider:
            try:
                provider = StorageProvider(raw_provider)
            except ValueError:
                raise ConfigurationError(f"Unknown STORAGE_PROVIDER: {raw_provider}")

        raw_timeout = get("PROXY_TIMEOUT", str(DEFAULT_NETWORK_TIMEOUT))
        try:
            proxy_timeout = int(raw_timeout)
        except ValueError:
            raise ConfigurationError(f"PROXY_TIMEOUT must be an integer, got {raw_timeout!r}")

        tokens = tuple(t.strip() for t in get("FILLER_TOKENS").split(",") if t.strip())

        return cls(
            provider=provider,
            bucket=get("R2_BUCKET_NAME"),
            account_id=get("R2_ACCOUNT_ID"),
            access_key_id=get("R2_ACCESS_KEY_ID"),
            secret_access_key=get("R2_SECRET_ACCESS_KEY"),
            endpoint=get("S3_ENDPOINT_URL"),
            region=get("S3_REGION", "auto"),
            base_path=get("LOCAL_STORAGE_PATH"),
            admin_token=get("PLAYLIST_WRITE_TOKEN"),
            originals_prefix=get("ORIGINALS_PREFIX", DEFAULT_ORIGINALS_PREFIX),
            remixes_prefix=get("REMIXES_PREFIX", DEFAULT_REMIXES_PREFIX),
            manifest_key=get("MANIFEST_KEY", MANIFEST_KEY),
            filler_tokens=tokens,
            proxy_timeout=proxy_timeout,
        )

    @classmethod
    def from_env(cls, env_path: Optional[Path] = None) -> 'ServiceConfig':
        """Load from a .env file (default: ./.env), falling back to the process environment."""
        env_path = Path(env_path) if env_path else Path.cwd() / ".env"
        env_vars = dotenv_values(env_path) if env_path.exists() else {}
        merged = dict(os.environ)
        merged.update({k: v for k, v in env_vars.items() if v is not None})
        return cls.from_mapping(merged)
