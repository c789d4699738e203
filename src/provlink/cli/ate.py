"""CLI for issuing provisioning calls from a test station.

This module provides the ``provlink-ate`` command, which lets an
operator run single Provisioning Appliance calls by hand, e.g. to check
a station's connectivity or a SKU's configuration.

Example:
    $ provlink-ate -t pa.line3.local:5001 create-key-and-cert --sku abc123 --serial 0011aabb
    $ provlink-ate -c station.yaml endorse-certs -r endorse.yaml --json
    $ provlink-ate derive-symmetric-keys -r derive.yaml --sku abc123
"""

import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

import click
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from provlink.ate import AteClient, AteClientConfig, Outcome
from provlink.exceptions import ConfigurationError
from provlink.pa.models import DeriveSymmetricKeysRequest, EndorseCertsRequest

console = Console()


def setup_logging(verbose: bool = False) -> None:
    """Set up logging with Rich handler."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _fail(message: str) -> None:
    console.print(f"[red]Error:[/red] {message}")
    sys.exit(1)


def _load_request(path: Path, request_type: Any, sku: Optional[str]):
    """Load a request message from a YAML file, optionally overriding its SKU."""
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        _fail(f"Invalid YAML in {path}: {e}")

    if not isinstance(data, dict):
        _fail(f"{path} must contain a mapping")

    try:
        request = request_type.from_dict(data)
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        _fail(f"Invalid {request_type.__name__} in {path}: {e}")

    if sku is not None:
        request.sku = sku
    return request


def _open_client(ctx: click.Context) -> AteClient:
    try:
        return AteClient.from_config(ctx.obj["config"])
    except ConfigurationError as e:
        _fail(str(e))


def _report(outcome: Outcome, json_output: bool, render) -> None:
    """Print the outcome and exit non-zero on failure."""
    if not outcome.ok:
        status = outcome.status
        console.print(f"[red]Failed:[/red] {status.code.name}")
        if status.message:
            console.print(f"  Details: {status.message}")
        if status.is_local:
            console.print("  [yellow]Request was rejected locally and not sent.[/yellow]")
        sys.exit(1)

    if json_output:
        click.echo(json.dumps(outcome.response.to_dict(), indent=2))
    else:
        render(outcome.response)


@click.group()
@click.option("-t", "--target", default=None, help="Provisioning Appliance address (host:port)")
@click.option("--timeout", type=float, default=None, help="Call deadline in seconds")
@click.option(
    "-c", "--config",
    type=click.Path(exists=True, path_type=Path),
    help="YAML configuration file",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.pass_context
def cli(
    ctx: click.Context,
    target: Optional[str],
    timeout: Optional[float],
    config: Optional[Path],
    verbose: bool,
) -> None:
    """Provisioning Appliance client for test stations.

    Sends one provisioning call per command and prints the response.
    """
    ctx.ensure_object(dict)
    setup_logging(verbose)

    try:
        client_config = AteClientConfig.from_yaml(config) if config else AteClientConfig.from_env()
    except ConfigurationError as e:
        _fail(str(e))

    if target:
        client_config.target = target
    if timeout is not None:
        client_config.timeout = timeout
    ctx.obj["config"] = client_config


@cli.command("create-key-and-cert")
@click.option("--sku", required=True, help="Product SKU")
@click.option("--serial", default="", help="Device serial number in hex")
@click.option("--json", "json_output", is_flag=True, help="Print response as JSON")
@click.pass_context
def create_key_and_cert(ctx: click.Context, sku: str, serial: str, json_output: bool) -> None:
    """Issue keys and certificates for a device."""
    try:
        serial_bytes = bytes.fromhex(serial)
    except ValueError:
        _fail(f"Invalid serial hex: {serial}")

    with _open_client(ctx) as client:
        outcome = client.create_key_and_cert(sku, serial_bytes)

    def render(response) -> None:
        table = Table(title=f"Issued keys for {sku}")
        table.add_column("#", justify="right")
        table.add_column("Certificate", justify="right")
        table.add_column("Wrapped key", justify="right")
        for i, key in enumerate(response.keys):
            cert = f"{len(key.cert.blob)} bytes" if key.cert else "-"
            table.add_row(str(i), cert, f"{len(key.wrapped_key)} bytes")
        console.print(table)

    _report(outcome, json_output, render)


@cli.command("endorse-certs")
@click.option(
    "-r", "--request", "request_path",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help="YAML file with the EndorseCerts request",
)
@click.option("--sku", default=None, help="Override the request SKU")
@click.option("--json", "json_output", is_flag=True, help="Print response as JSON")
@click.pass_context
def endorse_certs(
    ctx: click.Context, request_path: Path, sku: Optional[str], json_output: bool
) -> None:
    """Endorse TBS certificates."""
    request = _load_request(request_path, EndorseCertsRequest, sku)

    with _open_client(ctx) as client:
        outcome = client.endorse_certs(request)

    def render(response) -> None:
        table = Table(title=f"Endorsed certificates for {request.sku}")
        table.add_column("#", justify="right")
        table.add_column("Size", justify="right")
        for i, cert in enumerate(response.certs):
            table.add_row(str(i), f"{len(cert.blob)} bytes")
        console.print(table)

    _report(outcome, json_output, render)


@cli.command("derive-symmetric-keys")
@click.option(
    "-r", "--request", "request_path",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help="YAML file with the DeriveSymmetricKeys request",
)
@click.option("--sku", default=None, help="Override the request SKU")
@click.option("--json", "json_output", is_flag=True, help="Print response as JSON")
@click.pass_context
def derive_symmetric_keys(
    ctx: click.Context, request_path: Path, sku: Optional[str], json_output: bool
) -> None:
    """Derive symmetric keys."""
    request = _load_request(request_path, DeriveSymmetricKeysRequest, sku)

    with _open_client(ctx) as client:
        outcome = client.derive_symmetric_keys(request)

    def render(response) -> None:
        # Key material is not echoed in table form
        table = Table(title=f"Derived keys for {request.sku}")
        table.add_column("#", justify="right")
        table.add_column("Size", justify="right")
        for i, key in enumerate(response.keys):
            table.add_row(str(i), f"{len(key) * 8} bits")
        console.print(table)

    _report(outcome, json_output, render)


def main() -> None:
    """Entry point for provlink-ate."""
    cli(obj={})


if __name__ == "__main__":
    main()
