"""Mailbox address parsing."""

from dataclasses import dataclass
from email.utils import getaddresses, parseaddr

from labeller.errors import MalformedAddress


@dataclass(frozen=True)
class Address:
    """A bare mailbox address and its two halves."""

    full: str
    local_part: str
    domain: str

    def __iter__(self):
        return iter((self.full, self.local_part, self.domain))


def parse_address(header_value: str) -> Address:
    """
    Turn one header-encoded mailbox into its parts.

    So '"Steve Kemp" <foo@example.com>' becomes foo@example.com, foo and
    example.com.

    Raises:
        MalformedAddress: If the value is not exactly one mailbox with a
            local part and a domain.
    """
    # getaddresses() sees "a@b@c.com" as more than one entry, where
    # parseaddr() would quietly keep a prefix of it.
    if len(getaddresses([header_value])) != 1:
        raise MalformedAddress(header_value)

    _, address = parseaddr(header_value)
    local_part, at, domain = address.partition("@")
    if not at or not local_part or not domain or not _is_bare(address, local_part):
        raise MalformedAddress(header_value)
    return Address(full=address, local_part=local_part, domain=domain)


def _is_bare(address: str, local_part: str) -> bool:
    # A display name left glued to the mailbox, e.g. '"x" y@z.com'.
    if any(c.isspace() for c in address):
        return False
    if '"' in local_part:
        return len(local_part) > 1 and local_part[0] == local_part[-1] == '"'
    return True


def parse_address_list(header_value: str) -> tuple[list[Address], list[MalformedAddress]]:
    """
    Parse every mailbox of a To/Cc style header.

    Each comma-separated entry is parsed on its own, so one bad entry never
    costs the others. Commas inside quoted display names, angle brackets and
    comments do not split an entry.

    Returns:
        The parsed addresses in header order, and one error per entry that
        could not be parsed.
    """
    addresses: list[Address] = []
    errors: list[MalformedAddress] = []

    for entry in split_address_list(header_value):
        try:
            addresses.append(parse_address(entry))
        except MalformedAddress as e:
            errors.append(e)

    return addresses, errors


def split_address_list(header_value: str) -> list[str]:
    """Split a header value on the commas that separate mailboxes."""
    entries: list[str] = []
    current: list[str] = []
    quoted = escaped = False
    angle = comment = 0

    for char in header_value:
        if escaped:
            escaped = False
        elif char == "\\":
            escaped = True
        elif quoted:
            quoted = char != '"'
        elif char == '"':
            quoted = True
        elif char == "<":
            angle += 1
        elif char == ">":
            angle = max(angle - 1, 0)
        elif char == "(":
            comment += 1
        elif char == ")":
            comment = max(comment - 1, 0)
        elif char == "," and not angle and not comment:
            entries.append("".join(current))
            current = []
            continue
        current.append(char)

    entries.append("".join(current))
    return [entry.strip() for entry in entries if entry.strip()]
