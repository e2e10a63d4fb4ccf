"""Project-wide constants (cache policy, backend defaults, response headers)."""

DEFAULT_MIME_TYPE: str = "application/octet-stream"

TELEGRAM_API_BASE: str = "https://api.telegram.org"

BACKEND_TIMEOUT_SECONDS: float = 30.0

FILE_CACHE_CONTROL: str = "public, max-age=31536000"  # one year

EDGE_CACHE_MAX_ENTRIES: int = 512

EDGE_CACHE_MAX_BYTES: int = 256 * 1024 * 1024

EDGE_CACHE_MAX_ENTRY_BYTES: int = 20 * 1024 * 1024  # Bot API download ceiling

AUTH_COOKIE_NAME: str = "auth_token"

CREATED_AT_OFFSET_HOURS: int = 8
