"""
Configuration constants for md2medium.

This module centralizes the defaults used by the conversion pipeline and the
Medium client. Values can be overridden by:
1. Passing a ConversionConfig subclass or instance to the API functions
2. CLI arguments (--gfm, --image-size, --publish-status)
"""


class ConversionConfig:
    """Default configuration values for Markdown-to-Medium conversion."""

    # === Markdown Parsing ===
    ENABLE_GFM = False  # Tables, strikethrough and autolinks via marko's GFM extension

    # === Extension Priorities (lower value runs first / wins) ===
    IMAGE_SIZE_TRANSFORM_PRIORITY = 500
    IMAGE_ASSET_TRANSFORM_PRIORITY = 999
    IMAGE_RENDERER_PRIORITY = 500

    # === Image Assets ===
    # Destinations with these prefixes are never treated as local assets
    REMOTE_URL_PREFIXES = ('http://', 'https://')
    IMAGE_DIMENSIONS = False  # Add width/height attributes read from local files

    # === Medium API ===
    MEDIUM_API_URL = 'https://api.medium.com/v1'
    HTTP_TIMEOUT = 30  # Seconds per request
    TOKEN_ENV_VAR = 'MEDIUM_INTEGRATION_TOKEN'
    PUBLISH_STATUSES = ('public', 'draft', 'unlisted')
    DEFAULT_PUBLISH_STATUS = 'draft'

    # === Security Limits ===
    MAX_INPUT_FILE_SIZE = 10 * 1024 * 1024  # 10 MB max Markdown input


# Global default config instance
DEFAULT_CONFIG = ConversionConfig()
