"""Host functions that let a rule script add and remove labels by name."""

from dataclasses import asdict, dataclass
from typing import Any, Callable

from labeller.errors import ScriptArgumentError, TransportError
from labeller.fetcher import LabelCache, MailClient

ADD = "add"
REMOVE = "remove"


@dataclass(frozen=True)
class LabelMutation:
    """One add/remove request made by a script."""

    message_id: str
    action: str
    label_name: str
    label_id: str | None = None
    applied: bool = False
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class RuleBridge:
    """
    Turns label names from scripts into Gmail label mutations.

    The bridge holds no per-message state; bind() gives each evaluation its
    own LabelRequests carrying the message ID.
    """

    def __init__(
        self,
        client: MailClient,
        cache: LabelCache,
        dry_run: bool = False,
        log: Callable[[str, str], None] | None = None,
    ):
        """
        Initialize the bridge.

        Args:
            client: Mail client used to modify messages.
            cache: Label cache used to resolve (and create) labels.
            dry_run: If True, record requests without touching Gmail.
            log: Optional callback receiving (level, message) diagnostics.
        """
        self.client = client
        self.cache = cache
        self.dry_run = dry_run
        self.log = log or (lambda level, message: None)

    def bind(self, message_id: str) -> "LabelRequests":
        """Create the host functions for one evaluation of one message."""
        return LabelRequests(self, message_id)

    def request(self, message_id: str, action: str, name: str) -> LabelMutation:
        """
        Resolve a label name and apply it to, or remove it from, a message.

        Each call sends its own modify request immediately. Failures are
        reported and recorded on the returned mutation, never raised.
        """
        if action == ADD:
            self.log("info", f"\tAdding label [{name}] to message {message_id}")
        else:
            self.log("info", f"\tRemoving label [{name}] from message {message_id}")

        if self.dry_run:
            return LabelMutation(message_id=message_id, action=action, label_name=name)

        try:
            label_id = self.cache.resolve_to_id(name)
        except TransportError as e:
            self.log("warning", f"failed to find/create label '{name}' - {e}")
            return LabelMutation(
                message_id=message_id, action=action, label_name=name, error=str(e)
            )

        add_ids = {label_id} if action == ADD else set()
        remove_ids = {label_id} if action == REMOVE else set()

        try:
            self.client.modify_message_labels(message_id, add_ids, remove_ids)
        except TransportError as e:
            if action == ADD:
                self.log("error", f"unable to add label [{name}] to message {message_id} - {e}")
            else:
                self.log("error", f"unable to remove label [{name}] from message {message_id} - {e}")
            return LabelMutation(
                message_id=message_id,
                action=action,
                label_name=name,
                label_id=label_id,
                error=str(e),
            )

        return LabelMutation(
            message_id=message_id,
            action=action,
            label_name=name,
            label_id=label_id,
            applied=True,
        )


class LabelRequests:
    """The add() and remove() functions for one message under evaluation."""

    def __init__(self, bridge: RuleBridge, message_id: str):
        self.bridge = bridge
        self.message_id = message_id
        self.mutations: list[LabelMutation] = []

    def add(self, *args: Any) -> None:
        """add(name): attach the named label, creating it if needed."""
        self._request(ADD, args)

    def remove(self, *args: Any) -> None:
        """remove(name): detach the named label."""
        self._request(REMOVE, args)

    def functions(self) -> dict[str, Callable[..., None]]:
        return {ADD: self.add, REMOVE: self.remove}

    def _request(self, action: str, args: tuple[Any, ...]) -> None:
        if len(args) != 1:
            raise ScriptArgumentError(
                f"one argument required to {action}() - received {len(args)}"
            )
        self.mutations.append(self.bridge.request(self.message_id, action, str(args[0])))
