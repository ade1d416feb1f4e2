"""Common utility functions for helm-packager."""

import shlex
import sys
from pathlib import Path
from typing import Optional

import click
import yaml

CHART_FILE = "Chart.yaml"


def log(message: str, verbose: bool = False):
    """Print message only if verbose mode is enabled."""
    if verbose:
        print(message, file=sys.stderr)


def info(message: str):
    """Print an informational message to stderr regardless of verbosity."""
    click.echo(message, err=True)


def error(message: str):
    """Print an error message to stderr."""
    click.echo(f"Error: {message}", err=True)


def format_command(argv: list[str]) -> str:
    """Render an argument vector as a shell-quoted command line for logging."""
    return " ".join(shlex.quote(arg) for arg in argv)


def read_chart_metadata(chart_dir: Path) -> dict:
    """
    Load Chart.yaml from a chart directory.

    Returns:
        Parsed chart metadata, or an empty dict if the file is empty
    """
    with open(chart_dir / CHART_FILE) as f:
        return yaml.safe_load(f) or {}


def read_chart_version(chart_dir: Path, verbose: bool = False) -> Optional[str]:
    """Return the `version` field of a chart's Chart.yaml, or None if unset."""
    try:
        metadata = read_chart_metadata(chart_dir)
    except yaml.YAMLError as e:
        log(f"Warning: Failed to parse {chart_dir / CHART_FILE}: {e}", verbose)
        return None

    version = metadata.get("version") if isinstance(metadata, dict) else None
    if version is None:
        return None
    return str(version)
