"""Fetcher module for Gmail messages and labels."""

from .client import MailClient
from .labels import CacheState, LabelCache
from .messages import MessageMetadata, extract_message_metadata

__all__ = [
    "CacheState",
    "LabelCache",
    "MailClient",
    "MessageMetadata",
    "extract_message_metadata",
]
