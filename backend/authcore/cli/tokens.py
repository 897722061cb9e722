"""Flask CLI commands for token housekeeping."""

from __future__ import annotations

import logging
from datetime import UTC, datetime

import click
from flask import current_app
from flask.cli import with_appcontext

from authcore.core.extensions import get_revocation_store
from authcore.infra.sql.sqlalchemy_refresh_token_store import SQLAlchemyRefreshTokenStore
from authcore.services._shared.errors import StoreUnavailableError

LOGGER = logging.getLogger(__name__)


@click.group("tokens")
@click.option("--verbose", is_flag=True, help="Enable verbose logging.")
def tokens_cli(verbose: bool) -> None:
    """Refresh-token and revocation-list maintenance."""
    LOGGER.setLevel(logging.DEBUG if verbose else logging.INFO)


@tokens_cli.command("sweep")
@with_appcontext
def sweep_command() -> None:
    """Delete refresh tokens whose expiry has passed."""
    store = SQLAlchemyRefreshTokenStore(key=current_app.config["TOKEN_SECRET"])
    try:
        deleted = store.sweep_expired(datetime.now(UTC))
    except StoreUnavailableError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Deleted {deleted} expired refresh token(s).")


@tokens_cli.command("revoke-jti")
@click.argument("jti")
@click.option(
    "--ttl",
    type=click.IntRange(min=1),
    default=None,
    help="Seconds to keep the entry (defaults to ACCESS_TOKEN_TTL).",
)
@with_appcontext
def revoke_jti_command(jti: str, ttl: int | None) -> None:
    """Put an access-token jti on the revocation list."""
    ttl_seconds = ttl or int(current_app.config["ACCESS_TOKEN_TTL"])
    get_revocation_store().add(jti, ttl_seconds)
    LOGGER.info("revoked jti via CLI", extra={"jti": jti})
    click.echo(f"Revoked {jti} for {ttl_seconds}s.")


@tokens_cli.command("unrevoke-jti")
@click.argument("jti")
@with_appcontext
def unrevoke_jti_command(jti: str) -> None:
    """Remove an access-token jti from the revocation list."""
    get_revocation_store().remove(jti)
    LOGGER.info("removed jti via CLI", extra={"jti": jti})
    click.echo(f"Removed {jti}.")
