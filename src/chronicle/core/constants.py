"""Application-wide constants.

This module defines constants used throughout the application
to avoid magic numbers and ensure consistency.
"""

# Slug generation
MAX_SLUG_LENGTH = 63
SLUG_SUFFIX_LENGTH = 6
TENANT_SLUG_ATTEMPTS = 5

# Hash lengths
SHA256_HEX_LENGTH = 64

# String field lengths
MAX_EMAIL_LENGTH = 255
MAX_NAME_LENGTH = 255
MAX_IPV6_LENGTH = 45
MAX_EVENT_TYPE_LENGTH = 200
MAX_EVENT_SOURCE_LENGTH = 200

# Password requirements
MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_LENGTH = 128
BCRYPT_ROUNDS = 12

# Pagination defaults
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

# Token settings
REFRESH_TOKEN_BYTES = 64  # 512 bits of entropy
UNKNOWN_IP_ADDRESS = "unknown"

# API keys
API_KEY_PREFIX = "ch_live_"
API_KEY_SECRET_BYTES = 32
API_KEY_DISPLAY_PREFIX_LENGTH = 20

# Secret key requirements
MIN_SECRET_KEY_LENGTH = 32

# Keys whose values are redacted from log events
SENSITIVE_LOG_KEYS = frozenset(
    {
        "password",
        "password_hash",
        "token",
        "access_token",
        "refresh_token",
        "api_key",
        "plaintext_key",
        "secret",
        "secret_key",
        "authorization",
        "cookie",
    }
)
