"""Placeholder artifact standing in for the chart in the build graph."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

from .errors import PlaceholderWriteError
from .utils import log, error

PLACEHOLDER_TEXT = """\
This is NOT the file you are looking for!

To take advantage of the build graph, we want to publish metadata for this artifact.
But the build graph isn't the right solution for managing Helm dependencies.

Please check your appropriate Helm repository for the {identity} chart instead!
"""


class ModuleArtifact:
    """
    The artifact slot of the module being built.

    Downstream stages resolve this module through `file`. It can be written
    to a small YAML manifest so another process can pick it up.
    """

    def __init__(self, identity: str, file: Optional[Path] = None):
        self.identity = identity
        self.file = file

    def save(self, manifest_path: Path):
        """Write identity and artifact file to a YAML manifest."""
        manifest_path.parent.mkdir(parents=True, exist_ok=True)
        with open(manifest_path, "w") as f:
            yaml.safe_dump(
                {"identity": self.identity, "file": str(self.file) if self.file else None},
                f,
                default_flow_style=False,
                sort_keys=False
            )

    @classmethod
    def load(cls, manifest_path: Path) -> "ModuleArtifact":
        """Read a manifest written by save()."""
        with open(manifest_path) as f:
            data = yaml.safe_load(f) or {}
        file = data.get("file")
        return cls(data.get("identity", ""), Path(file) if file else None)

    def __repr__(self) -> str:
        return f"ModuleArtifact(identity={self.identity!r}, file={self.file!r})"


@dataclass(frozen=True)
class PlaceholderResult:
    """Outcome of writing the placeholder. Callers are free to ignore it."""
    path: Path
    written: bool
    error: Optional[PlaceholderWriteError] = None


def write_placeholder(path: Path, module_identity: str, artifact: ModuleArtifact, verbose: bool = False) -> PlaceholderResult:
    """
    Write the placeholder file and register it as the module's artifact.

    Write failures are logged and returned, never raised: the packaged charts
    are the deliverable, the placeholder is bookkeeping.

    Args:
        path: Placeholder file location (overwritten if present)
        module_identity: Artifact identifier mentioned in the file body
        artifact: Artifact slot receiving the file
        verbose: Enable verbose logging
    """
    result = PlaceholderResult(path=path, written=True)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            f.write(PLACEHOLDER_TEXT.format(identity=module_identity))
        log(f"Wrote placeholder artifact {path}", verbose)
    except OSError as e:
        failure = PlaceholderWriteError(f"Could not create placeholder artifact file {path}: {e}")
        error(str(failure))
        result = PlaceholderResult(path=path, written=False, error=failure)

    artifact.file = path
    return result
