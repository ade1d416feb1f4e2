"""Package Helm charts with `helm package`."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional

from .chart_directories import find_chart_directories
from .chart_version import resolve_chart_version, is_snapshot
from .config import PackageConfig
from .helm_executable import HelmCommand, STDIN_SENTINEL, global_flags
from .placeholder import ModuleArtifact, PlaceholderResult, write_placeholder
from .utils import log, info, error, read_chart_version


class PackageStatus(Enum):
    SKIPPED = "skipped"
    DONE = "done"


@dataclass
class PackageOutcome:
    """Result of a package run."""
    status: PackageStatus
    chart_version: Optional[str] = None
    packaged: list[Path] = field(default_factory=list)
    placeholder: Optional[PlaceholderResult] = None


def build_package_command(config: PackageConfig, chart_dir: Path, chart_version: Optional[str]) -> HelmCommand:
    """
    Build the `helm package` command for one chart directory.

    Signing flags are added only with both keyring and key; the passphrase is
    passed on stdin with ``--passphrase-file -``, never on the command line.
    """
    helm = (
        HelmCommand(
            executable=config.helm_executable,
            global_flags=global_flags(
                config.debug,
                config.registry_config,
                config.repository_cache,
                config.repository_config,
            ),
        )
        .arguments("package", chart_dir)
        .flag("destination", config.output_directory)
        .flag("version", chart_version)
        .flag("app-version", config.app_version)
    )

    if config.signing_enabled:
        info("Enable signing")
        helm = helm.flag("sign").flag("keyring", config.keyring).flag("key", config.key)
        if config.passphrase:
            helm = helm.flag("passphrase-file", STDIN_SENTINEL).with_stdin(config.passphrase)

    return helm


def _chart_version_for(config: PackageConfig, chart_dir: Path, version: Optional[str], now: datetime) -> Optional[str]:
    """Timestamp a SNAPSHOT version from Chart.yaml when no version is configured."""
    if version is not None or not config.timestamp_on_snapshot:
        return version

    metadata_version = read_chart_version(chart_dir, config.verbose)
    if not is_snapshot(metadata_version):
        return None

    resolved = resolve_chart_version(None, metadata_version, True, config.timestamp_format, now)
    info(f"Setting chart version of {chart_dir} to {resolved}")
    return resolved


def package_charts(config: PackageConfig, now: Optional[datetime] = None, artifact: Optional[ModuleArtifact] = None) -> PackageOutcome:
    """
    Package every chart below the configured chart directories.

    Charts are packaged one after another in discovery order. The first
    failing chart aborts the run; charts already packaged are left in place.
    Once all charts are packaged, the placeholder artifact is written.

    Args:
        config: Finished packaging configuration
        now: Invocation time used for SNAPSHOT timestamps (default: now)
        artifact: Artifact slot of the module (default: new slot for config.artifact_id)

    Returns:
        PackageOutcome describing what was done

    Raises:
        ConfigurationError: If a chart directory does not exist
        LaunchError: If helm cannot be started
        ExternalToolError: If helm package fails for a chart
    """
    if config.skip or config.skip_package:
        info("Skip package")
        return PackageOutcome(status=PackageStatus.SKIPPED)

    now = now or datetime.now()
    artifact = artifact or ModuleArtifact(config.artifact_id)

    chart_version = resolve_chart_version(
        config.chart_version,
        None,
        config.timestamp_on_snapshot,
        config.timestamp_format,
        now,
    )
    if chart_version is not None:
        info(f"Setting chart version to {chart_version}")

    outcome = PackageOutcome(status=PackageStatus.DONE, chart_version=chart_version)

    for chart_dir in find_chart_directories(config.chart_directories, config.excludes, config.verbose):
        info(f"Packaging chart {chart_dir}...")
        version = _chart_version_for(config, chart_dir, chart_version, now)
        helm = build_package_command(config, chart_dir, version)
        helm.execute(f"Unable to package chart at {chart_dir}", config.verbose)
        outcome.packaged.append(chart_dir)

    if not outcome.packaged:
        info(f"No charts detected - no Chart.yaml files found below "
             f"{', '.join(str(d) for d in config.chart_directories)}")
        return outcome

    outcome.placeholder = write_placeholder(
        config.placeholder_artifact_path, config.artifact_id, artifact, config.verbose
    )
    if config.artifact_manifest:
        try:
            artifact.save(config.artifact_manifest)
            log(f"Artifact manifest written to {config.artifact_manifest}", config.verbose)
        except OSError as e:
            error(f"Could not write artifact manifest {config.artifact_manifest}: {e}")

    return outcome
