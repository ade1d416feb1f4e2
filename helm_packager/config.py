"""Packaging configuration: defaults, YAML config file and validation."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from .chart_version import DEFAULT_TIMESTAMP_FORMAT, TimestampFormat
from .errors import ConfigurationError

DEFAULT_CHART_DIRECTORY = Path("src/main/helm")
DEFAULT_OUTPUT_DIRECTORY = Path("target/helm/repo")
DEFAULT_PLACEHOLDER_PATH = Path("target/helm.placeholder.txt")

# Config file key -> PackageConfig field
CONFIG_KEYS = {
    "chartDirectory": "chart_directories",
    "excludes": "excludes",
    "outputDirectory": "output_directory",
    "skip": "skip",
    "skipPackage": "skip_package",
    "chartVersion": "chart_version",
    "appVersion": "app_version",
    "keyring": "keyring",
    "key": "key",
    "passphrase": "passphrase",
    "timestampOnSnapshot": "timestamp_on_snapshot",
    "timestampFormat": "timestamp_format",
    "placeholderArtifactPath": "placeholder_artifact_path",
    "artifactId": "artifact_id",
    "artifactManifest": "artifact_manifest",
    "helmExecutable": "helm_executable",
    "debug": "debug",
    "registryConfig": "registry_config",
    "repositoryCache": "repository_cache",
    "repositoryConfig": "repository_config",
}

BOOLEAN_FIELDS = {"skip", "skip_package", "timestamp_on_snapshot", "debug"}
PATH_FIELDS = {
    "output_directory", "placeholder_artifact_path", "artifact_manifest",
    "registry_config", "repository_cache", "repository_config",
}


@dataclass(frozen=True)
class PackageConfig:
    """Finished configuration consumed by the packager. Paths are absolute."""
    chart_directories: list[Path]
    output_directory: Path
    placeholder_artifact_path: Path
    artifact_id: str
    excludes: list[str] = field(default_factory=list)
    skip: bool = False
    skip_package: bool = False
    chart_version: Optional[str] = None
    app_version: Optional[str] = None
    keyring: Optional[str] = None
    key: Optional[str] = None
    passphrase: Optional[str] = field(default=None, repr=False)
    timestamp_on_snapshot: bool = False
    timestamp_format: TimestampFormat = field(default_factory=lambda: TimestampFormat(DEFAULT_TIMESTAMP_FORMAT))
    artifact_manifest: Optional[Path] = None
    helm_executable: str = "helm"
    debug: bool = False
    registry_config: Optional[Path] = None
    repository_cache: Optional[Path] = None
    repository_config: Optional[Path] = None
    verbose: bool = False

    @property
    def signing_enabled(self) -> bool:
        """Signing needs both a keyring and a key name."""
        return bool(self.keyring) and bool(self.key)


def load_config_file(path: Path) -> dict:
    """
    Load a YAML config file and map its keys to PackageConfig field names.

    Raises:
        ConfigurationError: If the file is not a mapping or has unknown keys
    """
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid config file {path}: {e}")

    if not isinstance(data, dict):
        raise ConfigurationError(f"Invalid config file {path}: mapping expected")

    values = {}
    for key, value in data.items():
        if key not in CONFIG_KEYS:
            raise ConfigurationError(
                f"Invalid config file {path}: unknown key '{key}'. "
                f"Known keys: {', '.join(CONFIG_KEYS)}"
            )
        values[CONFIG_KEYS[key]] = value
    return values


def _resolve(workdir: Path, value) -> Path:
    path = Path(value)
    return path if path.is_absolute() else workdir / path


def _as_list(value) -> list:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def build_config(workdir: Path, options: dict, file_values: Optional[dict] = None, verbose: bool = False) -> PackageConfig:
    """
    Merge defaults, config file values and command-line options.

    Command-line options win when set (not None / not empty); boolean
    switches are enabled if either source enables them.

    Args:
        workdir: Base directory for relative paths
        options: Values from the command line, keyed by PackageConfig field
        file_values: Values from load_config_file()
        verbose: Enable verbose logging

    Raises:
        ConfigurationError: If the timestamp format is malformed or the
            placeholder path is missing
    """
    merged = dict(file_values or {})
    for name, value in options.items():
        if name in BOOLEAN_FIELDS:
            merged[name] = bool(value) or bool(merged.get(name, False))
        elif value is not None and value != () and value != []:
            merged[name] = value

    chart_directories = _as_list(merged.get("chart_directories")) or [DEFAULT_CHART_DIRECTORY]

    if "placeholder_artifact_path" in merged and not merged["placeholder_artifact_path"]:
        raise ConfigurationError("placeholderArtifactPath must not be empty")
    placeholder = merged.get("placeholder_artifact_path") or DEFAULT_PLACEHOLDER_PATH

    paths = {}
    for name in PATH_FIELDS:
        if merged.get(name):
            paths[name] = _resolve(workdir, merged[name])

    return PackageConfig(
        chart_directories=[_resolve(workdir, d) for d in chart_directories],
        output_directory=paths.get("output_directory", workdir / DEFAULT_OUTPUT_DIRECTORY),
        placeholder_artifact_path=_resolve(workdir, placeholder),
        artifact_id=str(merged.get("artifact_id") or workdir.name),
        excludes=[str(e) for e in _as_list(merged.get("excludes"))],
        skip=bool(merged.get("skip", False)),
        skip_package=bool(merged.get("skip_package", False)),
        chart_version=_optional_str(merged.get("chart_version")),
        app_version=_optional_str(merged.get("app_version")),
        keyring=_optional_str(merged.get("keyring")),
        key=_optional_str(merged.get("key")),
        passphrase=_optional_str(merged.get("passphrase")),
        timestamp_on_snapshot=bool(merged.get("timestamp_on_snapshot", False)),
        timestamp_format=TimestampFormat(str(merged.get("timestamp_format") or DEFAULT_TIMESTAMP_FORMAT)),
        artifact_manifest=paths.get("artifact_manifest"),
        helm_executable=str(merged.get("helm_executable") or "helm"),
        debug=bool(merged.get("debug", False)),
        registry_config=paths.get("registry_config"),
        repository_cache=paths.get("repository_cache"),
        repository_config=paths.get("repository_config"),
        verbose=verbose,
    )


def _optional_str(value) -> Optional[str]:
    """Normalize empty values to None; YAML numbers like 1.0 become strings."""
    if value is None or value == "":
        return None
    return str(value)
