"""
Command line interface for the Infinispan exporter.

Usage:
    infinispan-exporter serve [--port PORT]
    infinispan-exporter collect [--output text|table]
    infinispan-exporter check
"""

from __future__ import annotations

import argparse
import sys
import time
from typing import Sequence

import structlog
from prometheus_client import generate_latest, start_http_server
from prometheus_client.core import Metric
from rich.console import Console
from rich.table import Table

from infinispan_exporter.collector import ResourceDiscoverer
from infinispan_exporter.collector.assembler import FailurePolicy
from infinispan_exporter.config import Settings, load_settings
from infinispan_exporter.errors import main_with_error_handling
from infinispan_exporter.exporter import build_registry, create_client, create_collector
from infinispan_exporter.logging import configure_logging
from infinispan_exporter.management.object_name import unquote

logger = structlog.get_logger()

console = Console()


def _settings_from_args(args: argparse.Namespace) -> Settings:
    settings = load_settings(
        args.config,
        jolokia_url=args.jolokia_url,
        log_level=args.log_level,
        failure_policy=args.failure_policy,
        listen_address=getattr(args, "address", None),
        listen_port=getattr(args, "port", None),
    )
    configure_logging(settings.log_level, json_output=settings.log_json)
    return settings


@main_with_error_handling()
def serve_command(args: argparse.Namespace) -> int:
    """Serve metrics over HTTP until interrupted."""
    settings = _settings_from_args(args)
    client = create_client(settings)
    try:
        registry = build_registry(client, settings)
        start_http_server(settings.listen_port, addr=settings.listen_address, registry=registry)
        logger.info(
            "exporter_started",
            address=settings.listen_address,
            port=settings.listen_port,
            jolokia_url=settings.jolokia_url,
            failure_policy=settings.failure_policy.value,
        )
        while True:
            time.sleep(1)
    finally:
        client.close()


@main_with_error_handling()
def collect_command(args: argparse.Namespace) -> int:
    """Run a single collection pass and print the result."""
    settings = _settings_from_args(args)
    with create_client(settings) as client:
        if args.output == "table":
            families, report = create_collector(client, settings).collect_with_report()
            _print_table(families)
            if report is not None and report.skipped:
                console.print(f"[yellow]Skipped {report.skipped} resource(s)[/yellow]")
            return 0

        registry = build_registry(client, settings)
        sys.stdout.write(generate_latest(registry).decode("utf-8"))
    return 0


@main_with_error_handling()
def check_command(args: argparse.Namespace) -> int:
    """Verify the management interface is reachable and list caches."""
    settings = _settings_from_args(args)
    with create_client(settings) as client:
        version = client.version()
        console.print(
            f"[green]✓[/green] Connected to Jolokia {version.get('agent', 'unknown')} "
            f"at {settings.jolokia_url}"
        )
        resources = ResourceDiscoverer(client).discover()

    console.print(f"Found {len(resources)} cache statistics resource(s)")
    for resource in sorted(resources, key=lambda name: name.canonical):
        name = unquote(resource.key_property("name") or "")
        manager = unquote(resource.key_property("manager") or "")
        console.print(f"  • {manager}/{name}")
    return 0


def _print_table(families: list[Metric]) -> None:
    if not families:
        console.print("[dim]No cache statistics found[/dim]")
        return

    table = Table(title="Infinispan caches")
    table.add_column("Manager")
    table.add_column("Cache")
    for family in families:
        table.add_column(family.documentation, justify="right")

    # Samples at the same index describe the same cache in every family.
    for row in zip(*(family.samples for family in families)):
        labels = row[0].labels
        table.add_row(
            labels["manager"],
            labels["name"],
            *(f"{sample.value:g}" for sample in row),
        )
    console.print(table)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="infinispan-exporter",
        description="Prometheus exporter for Infinispan cache statistics",
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", help="Path to YAML config file")
    common.add_argument("--jolokia-url", help="Jolokia agent URL")
    common.add_argument("--log-level", help="Log level (DEBUG, INFO, WARNING, ERROR)")
    common.add_argument(
        "--failure-policy",
        choices=[policy.value for policy in FailurePolicy],
        help="How to handle a cache whose statistics cannot be read",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", parents=[common], help="Serve metrics over HTTP")
    serve_parser.add_argument("--address", help="Listen address")
    serve_parser.add_argument("--port", type=int, help="Listen port")
    serve_parser.set_defaults(func=serve_command)

    collect_parser = subparsers.add_parser(
        "collect", parents=[common], help="Collect once and print the metrics"
    )
    collect_parser.add_argument(
        "--output", choices=["text", "table"], default="text", help="Output format"
    )
    collect_parser.set_defaults(func=collect_command)

    check_parser = subparsers.add_parser(
        "check", parents=[common], help="Check connectivity and list discovered caches"
    )
    check_parser.set_defaults(func=check_command)

    return parser


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
