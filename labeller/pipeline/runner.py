"""Run a rule script over the messages matching a query."""

import os
from typing import Any, Callable

from labeller.errors import ScriptEvaluationError, TransportError
from labeller.fetcher import LabelCache, MailClient
from labeller.rules import FactRecord, FactRecordBuilder, RuleBridge, RuleScript

DEFAULT_QUERY = "is:unread -has:userlabels"


def get_default_query() -> str:
    """Get the search query from environment."""
    return os.getenv("LABELLER_FILTER", DEFAULT_QUERY)


def classify_messages(
    client: MailClient,
    script: RuleScript,
    query: str | None = None,
    cache: LabelCache | None = None,
    dry_run: bool = False,
    max_messages: int | None = None,
    log: Callable[[str, str], None] | None = None,
    progress_callback: Callable[[int, int], None] | None = None,
) -> dict[str, Any]:
    """
    Evaluate a rule script against every message matching a query.

    Messages are processed one at a time, in the order Gmail lists them. A
    message whose fetch or script evaluation fails is skipped; labels the
    script already changed on it stay changed.

    Args:
        client: Mail client for the authenticated account.
        script: Loaded rule script.
        query: Gmail search query. Defaults to LABELLER_FILTER.
        cache: Label cache. Created if not provided.
        dry_run: If True, record label requests without applying them.
        max_messages: Process at most this many messages.
        log: Optional callback receiving (level, message) diagnostics.
        progress_callback: Optional callback for progress updates (current, total).

    Returns:
        Dictionary with run results.

    Raises:
        TransportError: If the label listing or the message search fails.
    """
    if query is None:
        query = get_default_query()

    if cache is None:
        cache = LabelCache(client)

    log = log or (lambda level, message: None)

    cache.ensure_loaded()
    message_ids = client.list_messages(query, max_results=max_messages)
    log("info", f"The filter search returned {len(message_ids)} messages")
    log("info", f"Known labels ({len(cache)}): {', '.join(cache.names())}")

    builder = FactRecordBuilder(cache, log=log)
    bridge = RuleBridge(client, cache, dry_run=dry_run, log=log)

    processed = 0
    skipped = 0
    script_errors = 0
    mutations = []
    errors = []
    total = len(message_ids)

    for index, message_id in enumerate(message_ids, start=1):
        log("info", f"\tProcessing message {message_id}")

        try:
            metadata = client.fetch_message_metadata(message_id)
        except TransportError as e:
            log("error", f"Could not retrieve message {message_id} - {e}")
            skipped += 1
            errors.append({"message_id": message_id, "stage": "fetch", "error": str(e)})
            _report_progress(progress_callback, index, total)
            continue

        facts = builder.build(metadata)
        requests = bridge.bind(message_id)

        try:
            script.evaluate(facts, requests.functions())
        except ScriptEvaluationError as e:
            log("error", f"Error executing script on message {message_id}: {e}")
            script_errors += 1
            errors.append({"message_id": message_id, "stage": "script", "error": str(e)})
        else:
            processed += 1

        mutations.extend(m.to_dict() for m in requests.mutations)
        _report_progress(progress_callback, index, total)

    failed_mutations = sum(1 for m in mutations if m["error"])

    return {
        "success": not errors and not failed_mutations,
        "query": query,
        "total": total,
        "processed": processed,
        "skipped": skipped,
        "script_errors": script_errors,
        "failed_mutations": failed_mutations,
        "mutations": mutations,
        "errors": errors,
        "dry_run": dry_run,
    }


def collect_facts(
    client: MailClient,
    query: str | None = None,
    cache: LabelCache | None = None,
    max_messages: int | None = None,
    log: Callable[[str, str], None] | None = None,
) -> list[FactRecord]:
    """
    Build the fact records of the messages matching a query, without a script.

    Messages that cannot be fetched are reported and left out.

    Raises:
        TransportError: If the label listing or the message search fails.
    """
    if query is None:
        query = get_default_query()

    if cache is None:
        cache = LabelCache(client)

    log = log or (lambda level, message: None)

    cache.ensure_loaded()
    builder = FactRecordBuilder(cache, log=log)

    records = []
    for message_id in client.list_messages(query, max_results=max_messages):
        try:
            metadata = client.fetch_message_metadata(message_id)
        except TransportError as e:
            log("error", f"Could not retrieve message {message_id} - {e}")
            continue
        records.append(builder.build(metadata))

    return records


def _report_progress(
    progress_callback: Callable[[int, int], None] | None,
    current: int,
    total: int,
) -> None:
    if progress_callback:
        progress_callback(current, total)
