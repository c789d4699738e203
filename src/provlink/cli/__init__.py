"""CLI commands for provlink.

Example:
    $ provlink-ate --target pa.line3.local:5001 create-key-and-cert --sku abc123
"""

from provlink.cli.ate import cli, main

__all__ = ["cli", "main"]
