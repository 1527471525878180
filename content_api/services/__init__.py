"""
Services package - Persistence behind the content routes
"""
from content_api.services.content_provider import (
    ContentProvider,
    ProviderError,
    SqlContentProvider,
    get_content_provider,
)

__all__ = [
    "ContentProvider",
    "ProviderError",
    "SqlContentProvider",
    "get_content_provider",
]
