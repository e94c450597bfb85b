"""Label name/ID resolution with create-on-miss."""

import threading
from enum import Enum

from labeller.errors import UnknownLabelId

from .client import MailClient


class CacheState(Enum):
    UNINITIALIZED = "uninitialized"
    LOADED = "loaded"


class LabelCache:
    """
    Bidirectional mapping between label names and Gmail label IDs.

    The full label listing is fetched once, on first use. Names that are
    not known yet are created on the provider and added to both mappings,
    so a name and an ID always map to each other.
    """

    def __init__(self, client: MailClient):
        """
        Initialize an empty cache.

        Args:
            client: Mail client used to list and create labels.
        """
        self.client = client
        self.state = CacheState.UNINITIALIZED
        self._name_to_id: dict[str, str] = {}
        self._id_to_name: dict[str, str] = {}
        self._lock = threading.Lock()

    def ensure_loaded(self) -> None:
        """
        Fetch every label once. Calling again is a no-op.

        Raises:
            TransportError: If the listing fails; the cache stays uninitialized.
        """
        if self.state is CacheState.LOADED:
            return

        labels = self.client.list_labels()

        self._name_to_id = {}
        self._id_to_name = {}
        for name, label_id in labels:
            self._insert(name, label_id)

        self.state = CacheState.LOADED

    def resolve_to_id(self, name: str) -> str:
        """
        Get the ID of a label, creating the label if it is absent.

        Raises:
            TransportError: If loading or creating the label fails.
        """
        with self._lock:
            self.ensure_loaded()

            label_id = self._name_to_id.get(name)
            if label_id:
                return label_id

            label_id = self.client.create_label(name)
            self._insert(name, label_id)
            return label_id

    def resolve_to_name(self, label_id: str) -> str:
        """
        Get the human-readable name of a label ID.

        Raises:
            UnknownLabelId: If the ID is not in the listing. Nothing is created.
            TransportError: If loading the listing fails.
        """
        self.ensure_loaded()

        name = self._id_to_name.get(label_id)
        if name is None:
            raise UnknownLabelId(label_id)
        return name

    def _insert(self, name: str, label_id: str) -> None:
        # Drop any stale pairing first so neither side keeps two counterparts.
        old_id = self._name_to_id.pop(name, None)
        if old_id is not None:
            self._id_to_name.pop(old_id, None)
        old_name = self._id_to_name.pop(label_id, None)
        if old_name is not None:
            self._name_to_id.pop(old_name, None)

        self._name_to_id[name] = label_id
        self._id_to_name[label_id] = name

    def names(self) -> list[str]:
        """Known label names, sorted case-insensitively."""
        return sorted(self._name_to_id, key=str.lower)

    def __contains__(self, name: object) -> bool:
        return name in self._name_to_id

    def __len__(self) -> int:
        return len(self._name_to_id)
