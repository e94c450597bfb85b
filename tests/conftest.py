"""Shared fixtures: an in-memory stand-in for the Gmail-backed MailClient."""

import pytest

from labeller.errors import TransportError
from labeller.fetcher import MessageMetadata


class FakeMailClient:
    """Implements the MailClient operations against plain dictionaries."""

    def __init__(self, labels=None, messages=None):
        self.labels = dict(labels or {})
        self.messages = dict(messages or {})
        self.created = []
        self.modifications = []
        self.list_label_calls = 0
        self.fail_list_labels = False
        self.fail_list_messages = False
        self.fail_fetch = set()
        self.fail_create = set()
        self.fail_modify = set()
        self._next_id = 1

    def list_labels(self):
        self.list_label_calls += 1
        if self.fail_list_labels:
            raise TransportError("list labels", "connection reset")
        return list(self.labels.items())

    def create_label(self, name):
        if name in self.fail_create:
            raise TransportError(f"create label {name!r}", "invalid label name")
        label_id = f"Label_new_{self._next_id}"
        self._next_id += 1
        self.labels[name] = label_id
        self.created.append(name)
        return label_id

    def list_messages(self, query, max_results=None):
        if self.fail_list_messages:
            raise TransportError(f"list messages {query!r}", "quota exceeded")
        ids = list(self.messages)
        if max_results is not None:
            ids = ids[:max_results]
        return ids

    def fetch_message_metadata(self, message_id):
        if message_id in self.fail_fetch:
            raise TransportError(f"fetch message {message_id}", "not found")
        return self.messages[message_id]

    def modify_message_labels(self, message_id, add_ids=(), remove_ids=()):
        if message_id in self.fail_modify:
            raise TransportError(f"modify labels of message {message_id}", "forbidden")
        self.modifications.append((message_id, set(add_ids), set(remove_ids)))


def make_message(message_id, headers=(), label_ids=()):
    """Build fetched metadata from (name, value) header pairs."""
    return MessageMetadata(
        message_id=message_id,
        headers=list(headers),
        label_ids=list(label_ids),
    )


@pytest.fixture
def system_labels():
    """A typical label listing: system labels plus two user labels."""
    return {
        "INBOX": "INBOX",
        "UNREAD": "UNREAD",
        "IMPORTANT": "IMPORTANT",
        "Work": "Label_1",
        "example-com": "Label_2",
    }


@pytest.fixture
def client(system_labels):
    """A fake mail client holding the standard label listing."""
    return FakeMailClient(labels=system_labels)


class LogRecorder:
    """Collects (level, message) diagnostics."""

    def __init__(self):
        self.records = []

    def __call__(self, level, message):
        self.records.append((level, message))

    def messages(self, level):
        return [message for lvl, message in self.records if lvl == level]


@pytest.fixture
def log():
    """A diagnostics callback that remembers what it was told."""
    return LogRecorder()
