"""Gmail API calls used by the classification run."""

from typing import Iterable

from googleapiclient.discovery import Resource
from googleapiclient.errors import HttpError

from labeller.errors import TransportError

from .messages import METADATA_HEADERS, MessageMetadata, extract_message_metadata

# Errors raised by the HTTP layer underneath the Google client.
TRANSPORT_ERRORS = (HttpError, OSError)


class MailClient:
    """
    The mail provider operations labeller needs, on top of a Gmail service.

    Every failed request is raised as a TransportError naming the operation.
    """

    def __init__(self, service: Resource, user_id: str = "me"):
        """
        Initialize the client.

        Args:
            service: Authenticated Gmail API service.
            user_id: Gmail userId, "me" is the authenticated user.
        """
        self.service = service
        self.user_id = user_id

    def list_labels(self) -> list[tuple[str, str]]:
        """Return (name, id) for every label, user and system."""
        try:
            results = self.service.users().labels().list(userId=self.user_id).execute()
        except TRANSPORT_ERRORS as e:
            raise TransportError("list labels", e) from e

        return [
            (label.get("name", ""), label.get("id", ""))
            for label in results.get("labels", [])
        ]

    def create_label(self, name: str) -> str:
        """Create a label and return its ID."""
        label_body = {
            "name": name,
            "labelListVisibility": "labelShow",
            "messageListVisibility": "show",
        }
        try:
            result = (
                self.service.users()
                .labels()
                .create(userId=self.user_id, body=label_body)
                .execute()
            )
        except TRANSPORT_ERRORS as e:
            raise TransportError(f"create label {name!r}", e) from e

        label_id = result.get("id")
        if not label_id:
            raise TransportError(f"create label {name!r}", "response carried no label ID")
        return label_id

    def list_messages(
        self,
        query: str,
        max_results: int | None = None,
        page_size: int = 500,
    ) -> list[str]:
        """
        List message IDs matching a Gmail search query.

        Args:
            query: Gmail search query, e.g. 'is:unread -has:userlabels'.
            max_results: Stop after this many IDs. All pages when omitted.
            page_size: Maximum results per API page (max 500).

        Returns:
            Message IDs in the order Gmail returned them.
        """
        message_ids: list[str] = []
        page_token = None

        while True:
            try:
                results = (
                    self.service.users()
                    .messages()
                    .list(
                        userId=self.user_id,
                        q=query,
                        maxResults=page_size,
                        pageToken=page_token,
                    )
                    .execute()
                )
            except TRANSPORT_ERRORS as e:
                raise TransportError(f"list messages {query!r}", e) from e

            message_ids.extend(m["id"] for m in results.get("messages", []))

            if max_results is not None and len(message_ids) >= max_results:
                return message_ids[:max_results]

            page_token = results.get("nextPageToken")
            if not page_token:
                return message_ids

    def fetch_message_metadata(self, message_id: str) -> MessageMetadata:
        """
        Fetch the headers and label IDs of a message.

        Only "metadata" is requested rather than the complete message, which
        might be several megabytes in size.
        """
        try:
            message = (
                self.service.users()
                .messages()
                .get(
                    userId=self.user_id,
                    id=message_id,
                    format="metadata",
                    metadataHeaders=METADATA_HEADERS,
                )
                .execute()
            )
        except TRANSPORT_ERRORS as e:
            raise TransportError(f"fetch message {message_id}", e) from e

        return extract_message_metadata(message)

    def modify_message_labels(
        self,
        message_id: str,
        add_ids: Iterable[str] = (),
        remove_ids: Iterable[str] = (),
    ) -> None:
        """Add and/or remove labels on a single message."""
        body = {}
        add_ids = sorted(add_ids)
        remove_ids = sorted(remove_ids)
        if add_ids:
            body["addLabelIds"] = add_ids
        if remove_ids:
            body["removeLabelIds"] = remove_ids

        try:
            self.service.users().messages().modify(
                userId=self.user_id,
                id=message_id,
                body=body,
            ).execute()
        except TRANSPORT_ERRORS as e:
            raise TransportError(f"modify labels of message {message_id}", e) from e
