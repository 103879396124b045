"""Command-line interface for sharepoint_docid."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click

from sharepoint_docid import (
    AuthenticationError,
    AuthMode,
    Classification,
    DocIdClient,
    DocIdError,
    SessionManager,
    classify,
)
from sharepoint_docid.config import Settings

AUTH_MODE_CHOICES = [mode.value for mode in AuthMode]


def _fail(message: str) -> None:
    click.echo(click.style(message, fg="red"), err=True)
    sys.exit(1)


def get_session_manager(
    client_id: str | None = None,
    tenant_id: str | None = None,
    auth_mode: str | None = None,
    cache_dir: Path | None = None,
) -> SessionManager:
    """Create a SessionManager from command-line options, falling back to the environment."""
    settings = Settings.from_env()
    return SessionManager(
        client_id or settings.client_id,
        tenant_id=tenant_id or settings.tenant_id,
        auth_mode=AuthMode(auth_mode) if auth_mode else settings.auth_mode,
        cache_dir=cache_dir or settings.cache_dir,
        timeout=settings.timeout,
        device_code_callback=lambda message: click.echo(message, err=True),
    )


def auth_options(func):  # type: ignore[no-untyped-def]
    """Sign-in options shared by the commands that connect to SharePoint."""
    func = click.option(
        "--cache-dir",
        type=click.Path(file_okay=False, path_type=Path),
        default=None,
        help="Token cache and session directory (default: ~/.sp-docid)",
    )(func)
    func = click.option(
        "--tenant-id",
        default=None,
        help="Entra ID tenant used to sign in (default: organizations)",
    )(func)
    func = click.option("--client-id", default=None, help="Entra ID application (client) id")(func)
    func = click.option(
        "--auth-mode",
        "-a",
        type=click.Choice(AUTH_MODE_CHOICES),
        default=None,
        help="Sign-in flow (default: interactive)",
    )(func)
    return func


@click.group()
@click.version_option(package_name="sharepoint-docid")
@click.option("--verbose", "-v", is_flag=True, help="Log classification and request details")
def main(verbose: bool) -> None:
    """SharePoint Document ID CLI - resolve permanent links to documents."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


@main.command()
@click.argument("url")
@click.option("--tenant-url", "-t", default=None, help="Tenant base URL overriding the host of URL")
@auth_options
def resolve(
    url: str,
    tenant_url: str | None,
    auth_mode: str | None,
    client_id: str | None,
    tenant_id: str | None,
    cache_dir: Path | None,
) -> None:
    """Print the permanent Document ID URL of a document.

    URL: Link to the document (library path or sharing link)

    Examples:

        sp-docid resolve "https://contoso.sharepoint.com/sites/Finance/Shared%20Documents/Budget.xlsx"

        sp-docid resolve "/sites/Finance/Shared Documents/Budget.xlsx" -t https://contoso.sharepoint.com
    """
    try:
        manager = get_session_manager(client_id, tenant_id, auth_mode, cache_dir)
        with DocIdClient(manager, tenant_url=tenant_url) as client:
            permanent_url = client.get_permanent_url(url)
        click.echo(permanent_url)
    except AuthenticationError as e:
        _fail(f"Authentication failed: {e}")
    except DocIdError as e:
        _fail(str(e))
    except Exception as e:
        _fail(f"Error: {e}")


def _describe(classification: Classification) -> dict[str, object]:
    return {
        "shape": classification.shape.kind.value,
        "site_segment": classification.shape.site_segment,
        "site": classification.site.base_url,
        "path": classification.candidate_path.path,
        "reliable": classification.candidate_path.reliable,
    }


@main.command("classify")
@click.argument("url")
@click.option("--tenant-url", "-t", default=None, help="Tenant base URL overriding the host of URL")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
def classify_url(url: str, tenant_url: str | None, as_json: bool) -> None:
    """Show how a link is classified, without signing in.

    URL: Link to the document (library path or sharing link)
    """
    try:
        info = _describe(classify(url, tenant_url=tenant_url))
    except DocIdError as e:
        _fail(str(e))
        return

    if as_json:
        click.echo(json.dumps(info, indent=2))
        return

    click.echo(f"Shape:    {info['shape']}")
    click.echo(f"Site:     {info['site']}")
    click.echo(f"Path:     {info['path']}")
    if info["reliable"]:
        click.echo("Reliable: yes")
    else:
        click.echo(click.style("Reliable: no (sharing link, path is a guess)", fg="yellow"))


@main.command()
@click.argument("site_url")
@auth_options
def login(
    site_url: str,
    auth_mode: str | None,
    client_id: str | None,
    tenant_id: str | None,
    cache_dir: Path | None,
) -> None:
    """Sign in to a site and remember the session.

    SITE_URL: Site collection URL, e.g. https://contoso.sharepoint.com/sites/Finance
    """
    try:
        manager = get_session_manager(client_id, tenant_id, auth_mode, cache_dir)
        try:
            session = manager.connect(site_url)
            who = f" as {session.account}" if session.account else ""
            click.echo(click.style(f"Connected to {session.site.base_url}{who}", fg="green"))
        finally:
            manager.close()
    except AuthenticationError as e:
        _fail(f"Login failed: {e}")
    except Exception as e:
        _fail(f"Error: {e}")


@main.command()
@click.option(
    "--cache-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Token cache and session directory (default: ~/.sp-docid)",
)
def logout(cache_dir: Path | None) -> None:
    """Sign out: forget the remembered session and cached tokens."""
    try:
        get_session_manager(cache_dir=cache_dir).disconnect()
        click.echo("Session cleared.")
    except Exception as e:
        _fail(f"Error: {e}")


if __name__ == "__main__":
    main()
