"""claimreg CLI — the command-line front end for the claim registry."""

import logging

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from claimreg import __version__

console = Console()


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--home",
    envvar="CLAIMREG_HOME",
    default=None,
    help="Data directory (default: ~/.claimreg)",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, home: str | None, verbose: bool):
    """claimreg — owner-gated title claims.

    Claim a title, then read, re-stamp or release it. Only the account
    that made a claim may touch it afterwards. Every accepted operation
    is recorded with the current block number.
    """
    from claimreg.config import load_settings

    settings = load_settings(home=home)
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level,
        format="%(levelname)s:%(name)s:%(message)s",
    )
    ctx.obj = settings


def _runtime(ctx: click.Context):
    from claimreg.runtime import build_runtime

    return build_runtime(ctx.obj)


# ── Claim operations ─────────────────────────────────────────────────


def _run_operation(ctx: click.Context, operation: str, key: str, account: str, as_hex: bool):
    from claimreg.auth.origin import Caller
    from claimreg.registry.errors import RegistryError
    from claimreg.registry.models import parse_key

    try:
        claim_key = parse_key(key, as_hex=as_hex)
    except ValueError as e:
        console.print(f"[red]Invalid key:[/] {e}")
        raise SystemExit(2)

    try:
        caller = Caller(account)
    except ValueError as e:
        console.print(f"[red]Invalid account:[/] {escape(str(e))}")
        raise SystemExit(2)

    registry = _runtime(ctx).registry
    try:
        entry = getattr(registry, operation)(caller, claim_key)
    except RegistryError as e:
        console.print(f"[red]{operation} failed[/] ({e.code}) {escape(str(e))}")
        raise SystemExit(1)

    console.print(
        f"[green]{operation}[/] {escape(entry.key_text)} "
        f"owner=[cyan]{escape(entry.owner)}[/] block={entry.sequence}"
    )


def _operation_command(name: str, help_text: str):
    @main.command(name=name, help=help_text)
    @click.argument("key")
    @click.option("--as", "account", required=True, help="Account performing the operation")
    @click.option("--hex", "as_hex", is_flag=True, help="Interpret KEY as hex bytes")
    @click.pass_context
    def command(ctx: click.Context, key: str, account: str, as_hex: bool):
        _run_operation(ctx, name, key, account, as_hex)

    return command


create = _operation_command("create", "Claim KEY for an account at the current block.")
read = _operation_command("read", "Show the claim on KEY (owner only).")
update = _operation_command("update", "Re-stamp the claim on KEY with the current block (owner only).")
remove = _operation_command("remove", "Release the claim on KEY (owner only).")


# ── Inspection ───────────────────────────────────────────────────────


@main.command(name="list")
@click.pass_context
def list_entries(ctx: click.Context):
    """List every claim in the registry."""
    entries = _runtime(ctx).registry.entries()

    if not entries:
        console.print("[yellow]No claims yet.[/]")
        return

    table = Table(title=f"Claims ({len(entries)})")
    table.add_column("Key", style="cyan")
    table.add_column("Owner")
    table.add_column("Block", justify="right", style="green")

    for entry in sorted(entries, key=lambda e: e.key):
        table.add_row(escape(entry.key_text), escape(entry.owner), str(entry.sequence))

    console.print(table)


@main.command()
@click.option("--advance", "-a", type=int, default=0, help="Advance the counter by N blocks")
@click.pass_context
def block(ctx: click.Context, advance: int):
    """Show (or advance) the current block number."""
    blocks = _runtime(ctx).blocks
    if advance:
        try:
            blocks.advance(advance)
        except ValueError as e:
            console.print(f"[red]{e}[/]")
            raise SystemExit(2)
    console.print(f"Block [green]{blocks.current()}[/]")


@main.command()
@click.option("--caller", "-c", default=None, help="Only events by this account")
@click.option(
    "--kind",
    "-k",
    default=None,
    type=click.Choice(["created", "read", "updated", "removed"]),
)
@click.option("--limit", "-n", default=50, help="Maximum number of events")
@click.pass_context
def events(ctx: click.Context, caller: str | None, kind: str | None, limit: int):
    """Show the audit log of accepted operations, newest first."""
    from claimreg.registry.models import display_key

    audit = _runtime(ctx).audit
    if audit is None:
        console.print("[yellow]Audit log is disabled.[/]")
        return

    records = audit.get_events(caller=caller, kind=kind, limit=limit)
    if not records:
        console.print("[yellow]No events recorded.[/]")
        return

    table = Table(title=f"Events ({len(records)})")
    table.add_column("Time", style="dim")
    table.add_column("Kind", style="cyan")
    table.add_column("Caller")
    table.add_column("Key")

    for r in records:
        key = display_key(bytes.fromhex(r.key)) if r.key is not None else ""
        table.add_row(r.timestamp, r.kind, escape(r.caller), escape(key))

    console.print(table)


# ── Server ───────────────────────────────────────────────────────────


@main.command()
@click.option("--host", default="127.0.0.1", help="Interface to bind")
@click.option("--port", default=8000, type=int, help="Port to listen on")
@click.pass_context
def serve(ctx: click.Context, host: str, port: int):
    """Serve the claim registry HTTP API."""
    import os

    import uvicorn

    os.environ["CLAIMREG_HOME"] = str(ctx.obj.home)
    console.print(f"\n[bold blue]claimreg[/] — serving on http://{host}:{port}\n")
    uvicorn.run("web.backend.app.main:app", host=host, port=port)


if __name__ == "__main__":
    main()
