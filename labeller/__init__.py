"""labeller - label Gmail messages with a user rule script."""

__version__ = "0.1.0"
