"""Fact records: what a rule script knows about a message."""

from dataclasses import dataclass
from typing import Any, Callable

from labeller.errors import MalformedAddress, UnknownLabelId
from labeller.fetcher import LabelCache, MessageMetadata

from .addresses import parse_address, parse_address_list


@dataclass(frozen=True)
class FactRecord:
    """
    Read-only summary of one message, handed to the rule script.

    A message might have multiple recipients, so the To and Cc addresses are
    kept as parallel tuples: to[i], to_local_part[i] and to_domain[i] always
    describe the same recipient.
    """

    message_id: str
    sender: str = ""
    sender_local_part: str = ""
    sender_domain: str = ""
    to: tuple[str, ...] = ()
    to_local_part: tuple[str, ...] = ()
    to_domain: tuple[str, ...] = ()
    subject: str = ""
    labels: tuple[str, ...] = ()

    def __post_init__(self):
        if not len(self.to) == len(self.to_local_part) == len(self.to_domain):
            raise ValueError("to, to_local_part and to_domain must have the same length")

    def as_dict(self) -> dict[str, Any]:
        """The record under the field names rule scripts are written against."""
        return {
            "to": list(self.to),
            "toPart": list(self.to_local_part),
            "toDomain": list(self.to_domain),
            "from": self.sender,
            "fromPart": self.sender_local_part,
            "fromDomain": self.sender_domain,
            "subject": self.subject,
            "labels": list(self.labels),
        }


class FactRecordBuilder:
    """Build fact records from fetched message metadata."""

    def __init__(
        self,
        cache: LabelCache,
        log: Callable[[str, str], None] | None = None,
    ):
        """
        Initialize the builder.

        Args:
            cache: Label cache used to name the labels already on a message.
            log: Optional callback receiving (level, message) diagnostics.
        """
        self.cache = cache
        self.log = log or _ignore

    def build(self, metadata: MessageMetadata) -> FactRecord:
        """
        Derive the fact record of a message.

        A malformed address or an unknown label ID only drops that value;
        it never fails the record.
        """
        message_id = metadata.message_id
        labels = self._label_names(message_id, metadata.label_ids)

        sender = ("", "", "")
        to: list[str] = []
        to_local_part: list[str] = []
        to_domain: list[str] = []
        subject = ""

        for name, value in metadata.headers:
            if name == "From" and "@" in value:
                try:
                    sender = tuple(parse_address(value))
                except MalformedAddress as e:
                    self.log("warning", f"Message {message_id}: dropping From header, {e}")

            # Cc is treated as synonymous with To.
            elif name in ("To", "Cc") and "@" in value:
                addresses, errors = parse_address_list(value)
                for address in addresses:
                    to.append(address.full)
                    to_local_part.append(address.local_part)
                    to_domain.append(address.domain)
                for error in errors:
                    self.log("warning", f"Message {message_id}: dropping {name} recipient, {error}")

            elif name == "Subject":
                subject = value

        return FactRecord(
            message_id=message_id,
            sender=sender[0],
            sender_local_part=sender[1],
            sender_domain=sender[2],
            to=tuple(to),
            to_local_part=tuple(to_local_part),
            to_domain=tuple(to_domain),
            subject=subject,
            labels=tuple(labels),
        )

    def _label_names(self, message_id: str, label_ids: list[str]) -> list[str]:
        names = []
        for label_id in label_ids:
            try:
                name = self.cache.resolve_to_name(label_id)
            except UnknownLabelId as e:
                self.log("warning", f"Message {message_id}: omitting label, {e}")
                continue
            self.log("info", f"\tLabel on message: {name}")
            names.append(name)
        return names


def _ignore(level: str, message: str) -> None:
    pass
