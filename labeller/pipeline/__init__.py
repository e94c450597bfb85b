"""Classification pipeline."""

from .runner import DEFAULT_QUERY, classify_messages, collect_facts, get_default_query

__all__ = [
    "DEFAULT_QUERY",
    "classify_messages",
    "collect_facts",
    "get_default_query",
]
