"""
Shared constants used across the platform.
"""

# Manifest
MANIFEST_KEY = "playlist.json"
MANIFEST_CONTENT_TYPE = "application/json"
MANIFEST_CACHE_CONTROL = "no-store"

# Bank prefixes
DEFAULT_ORIGINALS_PREFIX = "originals/"
DEFAULT_REMIXES_PREFIX = "remixes/"

# Generic labels (never expose real filenames in pairs)
TITLE_LABEL = "Track"
ORIGINAL_LABEL = "Original"
REMIX_LABEL = "Remix"
LABEL_NUMBER_WIDTH = 2

# Playback routes
CONTENT_ROUTE = "/content/"
LEGACY_CONTENT_ROUTE = "/r2/"
PROXY_ROUTE = "/proxy"
LEGACY_PROXY_ROUTE = "/audio"

# Content serving
DEFAULT_AUDIO_CONTENT_TYPE = "audio/mpeg"
CONTENT_CACHE_CONTROL = "public, max-age=3600"
PLAYLIST_CACHE_CONTROL = "no-store"
STREAM_CHUNK_SIZE = 64 * 1024  # bytes

CORS_ALLOWED_METHODS = ["GET", "HEAD", "POST", "OPTIONS"]
CORS_EXPOSE_HEADERS = [
    "Content-Length", "Content-Range", "Accept-Ranges",
    "Content-Type", "ETag", "Last-Modified",
]

# Query flag values treated as "on"
TRUTHY_FLAGS = ("1", "true", "yes")

# S3 Provider endpoints
CLOUDFLARE_R2_ENDPOINT_TEMPLATE = "https://{account_id}.r2.cloudflarestorage.com"
AWS_S3_ENDPOINT_TEMPLATE = "https://s3.{region}.amazonaws.com"

# Listing
DEFAULT_LIST_PAGE_SIZE = 1000

# Network Settings
DEFAULT_NETWORK_TIMEOUT = 30  # seconds
DEFAULT_SERVER_PORT = 8787
