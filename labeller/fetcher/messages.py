"""Gmail message metadata extraction."""

from dataclasses import dataclass, field
from typing import Any

# Headers requested when fetching in "metadata" format.
METADATA_HEADERS = ["From", "To", "Cc", "Subject"]


@dataclass(frozen=True)
class MessageMetadata:
    """Headers and label IDs of one fetched message."""

    message_id: str
    headers: list[tuple[str, str]] = field(default_factory=list)
    label_ids: list[str] = field(default_factory=list)


def extract_message_metadata(message: dict[str, Any]) -> MessageMetadata:
    """
    Extract headers and label IDs from a Gmail API message response.

    Args:
        message: Raw message resource fetched with format="metadata".

    Returns:
        MessageMetadata with headers in the order Gmail returned them.
    """
    payload = message.get("payload", {})
    headers = [
        (header.get("name", ""), header.get("value", ""))
        for header in payload.get("headers", [])
    ]

    return MessageMetadata(
        message_id=message.get("id", ""),
        headers=headers,
        label_ids=list(message.get("labelIds", [])),
    )
