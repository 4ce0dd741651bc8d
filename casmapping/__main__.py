import asyncio
import logging
import logging.config as log_config
import sys

import click
from dotenv import load_dotenv

from casmapping.logging_config import get_logging_config
from casmapping.modules.config import get_config
from casmapping.modules.mapping import MappingStore, MappingStoreError
from casmapping.modules.storage import StorageModule

logger = logging.getLogger("casmapping.cli")


async def _run(operation):
    """Connect, run one operation against a MappingStore, disconnect."""
    config = get_config()
    storage = StorageModule.from_config(config)
    redis_client = await storage.connect()
    try:
        store = MappingStore(
            redis_client,
            ttl=config.get("mapping_ttl"),
            session_namespace=config.get("session_namespace"),
        )
        return await operation(store)
    finally:
        await storage.disconnect()


def _execute(operation):
    try:
        return asyncio.run(_run(operation))
    except MappingStoreError as e:
        logger.error(f"Store operation failed: {e}")
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@click.group()
@click.option("--log-level", "log_level", default=None, help="Overrides LOG_LEVEL")
def main(log_level):
    """Inspect and maintain CAS ticket to session mappings."""
    load_dotenv()
    config = get_config()
    log_config.dictConfig(
        get_logging_config(
            level=(log_level or config.get("log_level")).upper(),
            mask_tickets=config.get("mask_tickets", True),
        )
    )


@main.command()
@click.argument("mapping_id")
@click.argument("session_id")
def add(mapping_id: str, session_id: str):
    """Map MAPPING_ID (ticket) to SESSION_ID."""
    _execute(lambda store: store.add(mapping_id, session_id))
    click.echo(f"Mapped session {session_id}")


@main.command()
@click.option("--session", "session_id", default=None, help="Look up the ticket for a session")
@click.option("--ticket", "mapping_id", default=None, help="Look up the session for a ticket")
def lookup(session_id: str, mapping_id: str):
    """Show the other side of a mapping."""
    if bool(session_id) == bool(mapping_id):
        raise click.UsageError("Pass exactly one of --session or --ticket")

    if session_id:
        found = _execute(lambda store: store.get_mapping_id(session_id))
    else:
        found = _execute(lambda store: store.get_session_id(mapping_id))

    click.echo(found if found else "no mapping")


@main.command("remove-session")
@click.argument("session_id")
def remove_session(session_id: str):
    """Remove the mapping and session records for SESSION_ID."""
    _execute(lambda store: store.remove_by_session_id(session_id))
    click.echo(f"Removed session {session_id}")


@main.command("remove-ticket")
@click.argument("mapping_id")
def remove_ticket(mapping_id: str):
    """Remove the mapping for MAPPING_ID and its session."""
    session_id = _execute(lambda store: store.remove_by_mapping_id(mapping_id))
    click.echo(session_id if session_id else "no mapping")


if __name__ == "__main__":
    main()
