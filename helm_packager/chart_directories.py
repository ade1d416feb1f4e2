"""Locate chart directories below the configured chart roots."""

from fnmatch import fnmatch
from pathlib import Path
from typing import Iterable, Iterator

from .errors import ConfigurationError
from .utils import log, CHART_FILE

# Subdirectories helm uses for dependencies; charts found there are not ours.
DEPENDENCY_DIRS = {"charts", "tmpcharts"}


def is_excluded(chart_dir: Path, excludes: Iterable[str]) -> bool:
    """Check if a chart directory matches any exclude glob pattern."""
    path = chart_dir.as_posix()
    return any(fnmatch(path, pattern) for pattern in excludes)


def _is_dependency(chart_dir: Path, root: Path) -> bool:
    """Check if the directory sits in a dependency folder of a parent chart."""
    relative = chart_dir.relative_to(root)
    return any(part in DEPENDENCY_DIRS and (root / Path(*relative.parts[:i]) / CHART_FILE).exists()
               for i, part in enumerate(relative.parts))


def find_chart_directories(roots: Iterable[Path], excludes: Iterable[str] = (), verbose: bool = False) -> Iterator[Path]:
    """
    Yield every directory containing a Chart.yaml below the given roots.

    Roots are visited in the given order; charts within a root are yielded in
    lexicographic order. Dependency charts inside a parent chart's charts/
    directory and directories matching an exclude pattern are skipped.

    Args:
        roots: Chart root directories
        excludes: Glob patterns matched against the chart directory path
        verbose: Enable verbose logging

    Raises:
        ConfigurationError: If a root directory does not exist
    """
    excludes = list(excludes)
    seen = set()

    for root in roots:
        root = Path(root)
        if not root.is_dir():
            raise ConfigurationError(f"Chart directory {root} does not exist")

        log(f"Searching charts in {root}", verbose)
        chart_files = sorted(root.rglob(CHART_FILE), key=lambda p: p.parent.as_posix())

        for chart_file in chart_files:
            chart_dir = chart_file.parent
            if not chart_file.is_file() or chart_dir in seen:
                continue
            if _is_dependency(chart_dir, root):
                log(f"Skipping dependency chart {chart_dir}", verbose)
                continue
            if is_excluded(chart_dir, excludes):
                log(f"Skipping excluded chart {chart_dir}", verbose)
                continue

            seen.add(chart_dir)
            yield chart_dir
