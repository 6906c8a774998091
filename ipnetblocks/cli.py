"""Click CLI with Rich output."""

from __future__ import annotations

import json as json_lib
import logging

import click
import requests
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from . import __version__, options
from .client import Client
from .config import (
    API_KEY_ENV,
    BASE_URL_ENV,
    DEFAULT_BASE_URL,
    REQUEST_TIMEOUT,
    load_api_key,
    save_api_key,
)
from .errors import ArgError, IPNetblocksError
from .models import IPNetblocksResponse, format_time

console = Console()
err_console = Console(stderr=True)


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--api-key",
    envvar=API_KEY_ENV,
    help=f"API key. Falls back to ${API_KEY_ENV}, then the key saved by 'set-key'.",
)
@click.option(
    "--base-url",
    envvar=BASE_URL_ENV,
    default=DEFAULT_BASE_URL,
    show_default=True,
    help="IP Netblocks API endpoint.",
)
@click.option(
    "--timeout",
    type=float,
    default=REQUEST_TIMEOUT,
    show_default=True,
    help="Request timeout in seconds.",
)
@click.option("-v", "--verbose", is_flag=True, help="Log HTTP requests to stderr.")
@click.pass_context
def cli(ctx, api_key: str | None, base_url: str, timeout: float, verbose: bool):
    """ipnetblocks — Look up IP netblock ownership by IP, CIDR, ASN, or organization."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=err_console, show_path=False)],
        )
    ctx.obj = {"api_key": api_key, "base_url": base_url, "timeout": timeout}


def _get_client(ctx: click.Context) -> Client:
    settings = ctx.find_root().obj
    api_key = settings["api_key"] or load_api_key()
    if not api_key:
        raise click.UsageError(
            f"No API key. Pass --api-key, set ${API_KEY_ENV}, or run 'ipnetblocks set-key'."
        )
    client = Client(api_key, base_url=settings["base_url"], timeout=settings["timeout"])
    ctx.call_on_close(client.close)
    return client


_LOOKUP_OPTIONS = [
    click.option(
        "--limit",
        "limit_",
        type=click.IntRange(1, 1000),
        help="Maximum number of netblocks to return (service default: 100).",
    ),
    click.option(
        "--from",
        "cursor",
        metavar="NETBLOCK",
        help="Start after this netblock (the 'next' value of a previous page).",
    ),
    click.option("--json", "as_json", is_flag=True, help="Output as JSON."),
    click.option("--raw", is_flag=True, help="Print the undecoded response body."),
    click.option(
        "--format",
        "fmt",
        type=click.Choice(["JSON", "XML"], case_sensitive=False),
        help="Response format for --raw. Parsed output always uses JSON.",
    ),
]


def _lookup_options(func):
    """Options shared by the four lookup commands."""
    for option in reversed(_LOOKUP_OPTIONS):
        func = option(func)
    return func


def _run_lookup(
    ctx: click.Context,
    kind: str,
    key,
    limit_: int | None,
    cursor: str | None,
    as_json: bool,
    raw: bool,
    fmt: str | None,
) -> None:
    client = _get_client(ctx)

    opts = []
    if limit_ is not None:
        opts.append(options.limit(limit_))
    opts.append(options.from_(cursor))
    if fmt:
        if not raw:
            err_console.print("[dim]--format only applies to --raw; using JSON.[/dim]")
        opts.append(options.output_format(fmt))

    try:
        if raw:
            response = getattr(client, f"get_raw_by_{kind}")(key, *opts)
            click.echo(response.text)
            return
        result, _ = getattr(client, f"get_by_{kind}")(key, *opts)
    except ArgError as exc:
        raise click.BadParameter(str(exc)) from exc
    except IPNetblocksError as exc:
        err_console.print(f"[red bold]Error:[/red bold] {escape(str(exc))}")
        if raw and exc.response is not None and exc.response.body:
            click.echo(exc.response.text)
        ctx.exit(1)
    except requests.RequestException as exc:
        err_console.print(f"[red bold]Request failed:[/red bold] {escape(str(exc))}")
        ctx.exit(1)

    if as_json:
        click.echo(json_lib.dumps(result.model_dump(by_alias=True, mode="json"), indent=2))
        return

    _print_result(result)


def _print_result(response: IPNetblocksResponse) -> None:
    result = response.result

    if response.error:
        err_console.print(f"[yellow]Warning:[/yellow] {escape(response.error)}")

    if not result.inetnums:
        console.print(
            f"[green]No netblocks found[/green] for [bold]{escape(response.search)}[/bold]."
        )
        return

    console.print(
        f"[bold]{escape(response.search)}[/bold]: "
        f"{result.count} netblock(s) (limit {result.limit})\n"
    )

    table = Table(show_header=True, header_style="bold")
    table.add_column("Netblock")
    table.add_column("Netname")
    table.add_column("ASN")
    table.add_column("AS Name")
    table.add_column("Organization")
    table.add_column("Country")
    table.add_column("Source")
    table.add_column("Modified")

    for inetnum in result.inetnums:
        asys = inetnum.autonomous_system
        table.add_row(
            escape(inetnum.inetnum),
            escape(inetnum.netname),
            str(asys.asn) if asys.asn else "—",
            escape(asys.name) or "—",
            escape(inetnum.org.name) or "—",
            inetnum.country or "—",
            inetnum.source,
            format_time(inetnum.modified)[:10] or "—",
        )

    console.print(table)

    if result.next:
        console.print(f"\n[dim]Next page:[/dim] --from {escape(result.next)}")


@cli.command()
@click.argument("address")
@_lookup_options
@click.pass_context
def ip(ctx, address: str, **kwargs):
    """Look up netblocks containing an IPv4 or IPv6 ADDRESS."""
    _run_lookup(ctx, "ip", address, **kwargs)


@cli.command()
@click.argument("network")
@_lookup_options
@click.pass_context
def cidr(ctx, network: str, **kwargs):
    """Look up netblocks within a CIDR NETWORK, e.g. 8.8.0.0/16."""
    _run_lookup(ctx, "cidr", network, **kwargs)


def _parse_asn(ctx, param, value: str) -> int:
    text = value.strip()
    if text.upper().startswith("AS"):
        text = text[2:]
    try:
        return int(text)
    except ValueError:
        raise click.BadParameter(f"{value!r} is not an autonomous system number") from None


@cli.command()
@click.argument("number", callback=_parse_asn)
@_lookup_options
@click.pass_context
def asn(ctx, number: int, **kwargs):
    """Look up netblocks announced by autonomous system NUMBER (15169 or AS15169)."""
    _run_lookup(ctx, "asn", number, **kwargs)


@cli.command()
@click.argument("name")
@_lookup_options
@click.pass_context
def org(ctx, name: str, **kwargs):
    """Look up netblocks whose organization or description matches NAME."""
    _run_lookup(ctx, "org", name, **kwargs)


@cli.command("set-key")
@click.argument("key")
def set_key(key: str):
    """Save the API KEY for later runs."""
    path = save_api_key(key)
    console.print(f"[green]API key saved[/green] to {path}")
