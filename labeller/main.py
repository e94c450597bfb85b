"""CLI entrypoint for labeller."""

import sys

import click
from dotenv import load_dotenv

from labeller import __version__
from labeller.errors import ScriptLoadError, TransportError
from labeller.fetcher import LabelCache, MailClient
from labeller.pipeline import classify_messages, collect_facts, get_default_query
from labeller.rules import RuleScript
from labeller.ui.cli import (
    confirm_action,
    create_progress,
    make_logger,
    print_error,
    print_fact_records,
    print_header,
    print_info,
    print_mutations,
    print_run_summary,
    print_success,
    print_warning,
)

# Load environment variables
load_dotenv()


def _connect() -> MailClient | None:
    """Authenticate and wrap the Gmail service, printing any failure."""
    from labeller.auth import get_gmail_service

    try:
        return MailClient(get_gmail_service())
    except FileNotFoundError as e:
        print_error(str(e))
    except Exception as e:
        print_error(f"Unable to create Gmail client: {e}")
    return None


@click.group()
@click.version_option(version=__version__)
def cli():
    """labeller - add and remove Gmail labels with a rule script."""
    pass


@cli.command()
@click.option("--filter", "query", default=None, help="The search we perform to find messages to modify.")
@click.option("--script", "script_path", default=None, help="The script we execute against messages.")
@click.option("--limit", default=None, type=int, help="Maximum messages to process")
@click.option("--dry-run", is_flag=True, help="Show label changes without applying them")
@click.option("--verbose", "-v", is_flag=True, help="Should we be more verbose?")
def run(query: str | None, script_path: str | None, limit: int | None, dry_run: bool, verbose: bool):
    """Run the rule script over matching messages."""
    print_header("labeller")

    if query is None:
        query = get_default_query()

    try:
        script = RuleScript.from_file(script_path)
    except ScriptLoadError as e:
        print_error(f"Error loading user-script: {e}")
        sys.exit(1)

    client = _connect()
    if client is None:
        sys.exit(1)

    log = make_logger(verbose)
    print_info(f"Searching for: {query}")
    if dry_run:
        print_warning("DRY RUN - No labels will be created or changed")

    with create_progress() as progress:
        task = progress.add_task("Labelling...", total=None)

        def update_progress(current: int, total: int):
            progress.update(task, completed=current, total=total)

        try:
            result = classify_messages(
                client,
                script,
                query=query,
                cache=LabelCache(client),
                dry_run=dry_run,
                max_messages=limit,
                log=log,
                progress_callback=update_progress,
            )
        except TransportError as e:
            print_error(f"Failed to find messages: {e}")
            sys.exit(1)

    print_run_summary(result)
    if verbose or dry_run:
        print_mutations(result["mutations"])

    if result["success"]:
        print_success(f"Processed {result['processed']} of {result['total']} messages")
    else:
        print_warning(
            f"Processed {result['processed']} of {result['total']} messages "
            f"with {len(result['errors']) + result['failed_mutations']} problem(s)"
        )


@cli.command()
@click.option("--script", "script_path", default=None, help="The script to check.")
def check(script_path: str | None):
    """Check a rule script for syntax errors."""
    try:
        script = RuleScript.from_file(script_path)
    except ScriptLoadError as e:
        print_error(str(e))
        sys.exit(1)

    print_success(f"{script.path}: {len(script)} rule(s) OK")


@cli.command()
@click.option("--filter", "query", default=None, help="The search we perform to find messages.")
@click.option("--limit", default=10, help="Maximum messages to show")
def facts(query: str | None, limit: int):
    """Show what a rule script would see for matching messages."""
    client = _connect()
    if client is None:
        sys.exit(1)

    try:
        records = collect_facts(client, query=query, max_messages=limit, log=make_logger())
    except TransportError as e:
        print_error(str(e))
        sys.exit(1)

    if not records:
        print_info("No messages matched.")
        return

    print_fact_records([record.as_dict() for record in records])


@cli.command()
def auth():
    """Authenticate with Gmail (or re-authenticate)."""
    print_header("Gmail Authentication")

    from labeller.auth import revoke_credentials
    from labeller.auth.credentials import load_credentials

    existing = load_credentials()
    if existing and existing.valid:
        if confirm_action("Already authenticated. Re-authenticate?"):
            revoke_credentials()
        else:
            print_info("Keeping existing authentication")
            return

    print_info("Opening browser for Google authentication...")

    client = _connect()
    if client is None:
        return

    try:
        profile = client.service.users().getProfile(userId=client.user_id).execute()
        print_success(f"Authenticated as {profile.get('emailAddress')}")
    except Exception as e:
        print_error(f"Authentication failed: {e}")


if __name__ == "__main__":
    cli()
