"""API token settings."""

from drive.settings.components import config

# Seconds of inactivity after which a token stops working
API_TOKEN_TTL = config('API_TOKEN_TTL', cast=int, default=7 * 24 * 3600)

# Tokens kept per user; logging in past the limit evicts the oldest
API_TOKEN_LIMIT = config('API_TOKEN_LIMIT', cast=int, default=5)
