"""Runtime settings read from the environment at import time."""

import os

# Sources
DEFAULT_SOURCE = os.getenv("DEFAULT_SOURCE", "coingecko").lower()
PAGE_SIZE = int(os.getenv("PAGE_SIZE", "100"))

# HTTP / throttle / retry
HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "10"))
USER_AGENT = os.getenv("USER_AGENT", "cryptotracker/0.1.0")
MIN_REQUEST_INTERVAL_MS = int(os.getenv("MIN_REQUEST_INTERVAL_MS", "1000"))
RETRY_BASE_DELAY_MS = int(os.getenv("RETRY_BASE_DELAY_MS", "1000"))
MAX_RETRIES = int(os.getenv("MAX_RETRIES", "3"))

# Cache
CACHE_TTL_SECONDS = float(os.getenv("CACHE_TTL_SECONDS", "300"))

# Search
SEARCH_DEBOUNCE_MS = int(os.getenv("SEARCH_DEBOUNCE_MS", "500"))
SEARCH_MIN_CHARS = int(os.getenv("SEARCH_MIN_CHARS", "2"))
SEARCH_MAX_CANDIDATES = int(os.getenv("SEARCH_MAX_CANDIDATES", "5"))

# Periodic refresh (0 disables)
REFRESH_INTERVAL_SECONDS = float(os.getenv("REFRESH_INTERVAL_SECONDS", "60"))

# Logos
PLACEHOLDER_LOGO_URL = os.getenv(
    "PLACEHOLDER_LOGO_URL",
    "https://via.placeholder.com/64?text=%3F",
)
COINLORE_LOGO_TEMPLATE = os.getenv(
    "COINLORE_LOGO_TEMPLATE",
    "https://assets.coincap.io/assets/icons/{symbol}@2x.png",
)

# Web surface
FRONTEND_ORIGINS = os.getenv("FRONTEND_ORIGINS", "http://localhost:3000")

# Build metadata for /version
GIT_SHA = os.getenv("GIT_SHA", "dev")
BUILT_AT = os.getenv("BUILT_AT", "")
