"""
Database models for the content blocks service
"""
from content_api.models.content_block import ContentBlock

__all__ = [
    "ContentBlock",
]
