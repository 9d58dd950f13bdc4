"""
logstash_exporter entry point.

Usage:
    logstash_exporter                                         Serve /metrics on :9198
    logstash_exporter --logstash.endpoint http://ls:9600      Point at another node
    logstash_exporter scrape                                  One-shot scrape, printed as a table
"""

from __future__ import annotations

import logging

import click

from logstash_exporter import __version__
from logstash_exporter.collector import build_collectors
from logstash_exporter.config import (
    DEFAULT_ENDPOINT,
    DEFAULT_LISTEN_ADDRESS,
    LOG_LEVELS,
    ExporterConfig,
    parse_listen_address,
)
from logstash_exporter.exposition import make_app, make_registry, serve
from logstash_exporter.orchestrator import Orchestrator


log = logging.getLogger("logstash_exporter")


def _check_listen_address(ctx, param, value):
    try:
        parse_listen_address(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc
    return value


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="logstash_exporter")
@click.option("--logstash.endpoint", "endpoint", default=DEFAULT_ENDPOINT, show_default=True,
              help="The protocol, host and port on which the Logstash metrics API listens")
@click.option("--web.listen-address", "listen_address", default=DEFAULT_LISTEN_ADDRESS,
              show_default=True, callback=_check_listen_address,
              help="Address on which to expose metrics")
@click.option("--log.level", "log_level", type=click.Choice(LOG_LEVELS), default="info",
              show_default=True, help="Only log messages at or above this level")
@click.pass_context
def cli(ctx, endpoint: str, listen_address: str, log_level: str):
    """Export Logstash node statistics in the Prometheus format."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    ctx.obj = ExporterConfig(endpoint=endpoint, listen_address=listen_address, log_level=log_level)

    if ctx.invoked_subcommand is None:
        orchestrator = Orchestrator(build_collectors(endpoint))
        log.info("starting logstash exporter %s, collectors: %s",
                 __version__, ", ".join(orchestrator.names) or "none")
        try:
            serve(make_app(make_registry(orchestrator)), listen_address)
        finally:
            orchestrator.close()


@cli.command()
@click.pass_obj
def scrape(config: ExporterConfig):
    """Run every collector once and print what happened."""
    from rich.console import Console
    from rich.table import Table

    orchestrator = Orchestrator(build_collectors(config.endpoint))
    try:
        result = orchestrator.collect()
    finally:
        orchestrator.close()

    console = Console()
    table = Table(show_header=True, header_style="bold", title=f"Scrape of {config.endpoint}")
    table.add_column("Collector")
    table.add_column("Source", overflow="fold")
    table.add_column("Result", justify="center", no_wrap=True)
    table.add_column("Duration", justify="right")

    for name in orchestrator.names:
        outcome = result.outcomes[name]
        color = "green" if outcome.ok else "red"
        table.add_row(
            name,
            orchestrator.collectors[name].name(),
            f"[{color}]{outcome.result}[/{color}]",
            f"{outcome.duration * 1000:.1f} ms",
        )

    console.print(table)
    console.print(f"{len(result.samples)} samples")

    if result.failed or not result.outcomes:
        raise SystemExit(1)


if __name__ == "__main__":
    cli()
