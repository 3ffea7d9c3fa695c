"""Click-based CLI for beancount-prices.

Thin wrapper around library modules. Zero business logic — every operation
delegates to the config loader, the sources, or the pipeline driver.
"""

from __future__ import annotations

import asyncio
import logging
import sys

import click
from rich.console import Console
from rich.table import Table

console = Console(stderr=True)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run_async(coro):
    """Run an async coroutine from synchronous Click code."""
    return asyncio.run(coro)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


def _load_config(ctx: click.Context):
    """Load config lazily, caching on first call. Exits 1 on ConfigError."""
    if "config" not in ctx.obj:
        from beancount_prices.core import ConfigError, load_config

        try:
            ctx.obj["config"] = load_config(config_path=ctx.obj.get("config_path"))
        except ConfigError as exc:
            console.print(f"[red]Configuration error:[/red] {exc}")
            raise SystemExit(1) from exc
    return ctx.obj["config"]


def _print_error_chain(exc: BaseException) -> None:
    """Print an error and every ``__cause__`` below it."""
    console.print(f"[red]Error:[/red] {exc}")
    cause = exc.__cause__
    while cause is not None:
        console.print(f"  [red]caused by:[/red] {cause}")
        cause = cause.__cause__


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False),
    envvar="BEANCOUNT_PRICES_CONFIG",
    default=None,
    help="Path to beancount-prices.yml config file.",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Enable verbose output.",
)
@click.version_option(package_name="beancount-prices")
@click.pass_context
def cli(ctx: click.Context, config: str | None, verbose: bool) -> None:
    """Beancount Prices: export crypto and fiat price histories as beancount price directives."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = verbose
    ctx.obj["console"] = console
    _configure_logging(verbose)


# ---------------------------------------------------------------------------
# export
# ---------------------------------------------------------------------------


@cli.command()
@click.option(
    "--keep-going",
    "-k",
    is_flag=True,
    default=False,
    help="Continue with the remaining assets when one fails.",
)
@click.pass_context
def export(ctx: click.Context, keep_going: bool) -> None:
    """Fetch histories and write one price file per configured asset."""
    config = _load_config(ctx)

    if not config.currencies:
        console.print("[yellow]No currencies configured. Nothing to do.[/yellow]")
        return

    async def _run():
        from beancount_prices.pipeline import PipelineDriver
        from beancount_prices.sources import CoincapPriceSource, FrankfurterRateSource

        async with CoincapPriceSource(config.coincap) as prices, FrankfurterRateSource(
            config.exchange_rates
        ) as rates:
            driver = PipelineDriver(config, prices, rates)
            return await driver.run(continue_on_error=True if keep_going else None)

    from beancount_prices.core import BeancountPricesError

    try:
        report = _run_async(_run())
    except BeancountPricesError as exc:
        _print_error_chain(exc)
        raise SystemExit(1) from exc

    _output_report(report)

    if not report.ok:
        raise SystemExit(1)


def _output_report(report) -> None:
    """Render per-asset results as a Rich table."""
    table = Table(title="Price Export")
    table.add_column("Asset", style="bold")
    table.add_column("File")
    table.add_column("Prices", justify="right")
    table.add_column("Status")

    for r in report.results:
        table.add_row(
            r.asset_id,
            r.path,
            str(r.records_written),
            "[green]ok[/green]" if r.ok else f"[red]{r.error}[/red]",
        )

    console.print(table)
    console.print(
        f"[green]✓[/green] Wrote {report.records_written} prices "
        f"for {len(report.succeeded)} assets"
        + (f" ({len(report.failed)} failed)" if report.failed else "")
    )


# ---------------------------------------------------------------------------
# assets
# ---------------------------------------------------------------------------


@cli.command()
@click.pass_context
def assets(ctx: click.Context) -> None:
    """Validate the config and list the configured assets."""
    config = _load_config(ctx)

    table = Table(title=f"Assets (base {config.base_currency}, from {config.start})")
    table.add_column("Type", style="bold")
    table.add_column("Commodity")
    table.add_column("Source id")
    table.add_column("Precision", justify="right")
    table.add_column("File")

    for asset in config.currencies:
        table.add_row(
            str(asset.type),
            asset.commodity,
            asset.asset_id,
            str(config.precision_for(asset)),
            str(asset.path),
        )

    console.print(table)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
