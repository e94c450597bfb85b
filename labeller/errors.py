"""Exception types raised by labeller."""


class LabellerError(Exception):
    """Base class for all labeller errors."""


class TransportError(LabellerError):
    """A call to the mail provider failed."""

    def __init__(self, operation: str, error: Exception | str):
        self.operation = operation
        self.error = error
        super().__init__(f"{operation} failed: {error}")


class MalformedAddress(LabellerError, ValueError):
    """A header value holds no usable mailbox address."""

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"no parseable address in {value!r}")


class UnknownLabelId(LabellerError, KeyError):
    """A label ID is missing from the loaded label listing."""

    def __init__(self, label_id: str):
        self.label_id = label_id
        super().__init__(label_id)

    def __str__(self) -> str:
        return f"unknown label ID {self.label_id!r}"


class ScriptLoadError(LabellerError):
    """The rule script could not be read or parsed."""


class ScriptEvaluationError(LabellerError):
    """The rule script failed while evaluating a message."""


class ScriptArgumentError(ScriptEvaluationError):
    """A host function was called with the wrong number of arguments."""
