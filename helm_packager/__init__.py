"""
helm-packager - Package Helm charts as part of a build pipeline.
Resolves chart versions, runs `helm package` and publishes a placeholder artifact.
"""

from pathlib import Path
import click

from .config import build_config, load_config_file
from .errors import HelmPackagerError
from .packager import package_charts, PackageStatus
from .utils import log

__version__ = "0.1.0"


@click.group()
@click.version_option(version=__version__, prog_name='helm-packager')
def cli():
    """helm-packager - Package Helm charts as part of a build pipeline.

    Finds charts below the chart directories, resolves the chart version
    (optionally timestamping SNAPSHOT versions) and runs helm package for
    each of them.
    """
    pass


@cli.command()
@click.option(
    '--workdir',
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help='Base directory for relative paths (default: current directory)'
)
@click.option(
    '--config',
    'config_file',
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help='YAML config file; command-line options take precedence'
)
@click.option(
    '--chart-directory',
    multiple=True,
    type=click.Path(file_okay=False, path_type=Path),
    help='Root directory to search for charts (repeatable, default: src/main/helm)'
)
@click.option(
    '--exclude',
    multiple=True,
    help='Glob pattern of chart directories to skip (repeatable)'
)
@click.option(
    '--output-directory',
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help='Directory receiving packaged charts (default: target/helm/repo)'
)
@click.option('--skip', is_flag=True, envvar='HELM_SKIP', help='Skip all helm goals')
@click.option('--skip-package', is_flag=True, envvar='HELM_PACKAGE_SKIP', help='Skip packaging')
@click.option('--chart-version', envvar='HELM_CHART_VERSION', default=None, help='Chart version (default: version from Chart.yaml)')
@click.option('--app-version', envvar='HELM_APP_VERSION', default=None, help='App version, needn\'t be SemVer')
@click.option('--keyring', envvar='HELM_PACKAGE_KEYRING', default=None, help='Path to gpg secret keyring for signing')
@click.option('--key', envvar='HELM_PACKAGE_KEY', default=None, help='Name of gpg key in keyring')
@click.option(
    '--passphrase',
    envvar='HELM_PACKAGE_PASSPHRASE',
    default=None,
    help='Passphrase for gpg key, passed to helm on stdin (prefer the environment variable)'
)
@click.option('--timestamp-on-snapshot', is_flag=True, help='Replace SNAPSHOT in -SNAPSHOT versions by a timestamp')
@click.option('--timestamp-format', default=None, help='Timestamp pattern (default: yyyyMMddHHmmss)')
@click.option(
    '--placeholder-artifact-path',
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help='Placeholder artifact written after packaging (default: target/helm.placeholder.txt)'
)
@click.option('--artifact-id', default=None, help='Artifact identifier of the module (default: workdir name)')
@click.option(
    '--artifact-manifest',
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help='Write the registered module artifact to this YAML file'
)
@click.option('--helm-executable', envvar='HELM_EXECUTABLE', default=None, help='Helm executable (default: helm)')
@click.option('--debug', is_flag=True, help='Pass --debug to helm')
@click.option('--registry-config', type=click.Path(path_type=Path), default=None, help='Path to helm registry config file')
@click.option('--repository-cache', type=click.Path(path_type=Path), default=None, help='Path to helm repository cache directory')
@click.option('--repository-config', type=click.Path(path_type=Path), default=None, help='Path to helm repositories file')
@click.option('--verbose', is_flag=True, help='Enable verbose output')
def package(workdir, config_file, chart_directory, exclude, output_directory, skip, skip_package,
            chart_version, app_version, keyring, key, passphrase, timestamp_on_snapshot, timestamp_format,
            placeholder_artifact_path, artifact_id, artifact_manifest, helm_executable, debug,
            registry_config, repository_cache, repository_config, verbose):
    """Package charts with helm package.

    Examples:

      helm-packager package

      helm-packager package --chart-version 1.2.0-SNAPSHOT --timestamp-on-snapshot

      HELM_PACKAGE_PASSPHRASE=secret helm-packager package --keyring ~/.gnupg/secring.gpg --key ci
    """
    workdir = workdir.resolve() if workdir else Path.cwd()
    log(f"Working directory: {workdir}", verbose)

    options = dict(
        chart_directories=chart_directory,
        excludes=exclude,
        output_directory=output_directory,
        skip=skip,
        skip_package=skip_package,
        chart_version=chart_version,
        app_version=app_version,
        keyring=keyring,
        key=key,
        passphrase=passphrase,
        timestamp_on_snapshot=timestamp_on_snapshot,
        timestamp_format=timestamp_format,
        placeholder_artifact_path=placeholder_artifact_path,
        artifact_id=artifact_id,
        artifact_manifest=artifact_manifest,
        helm_executable=helm_executable,
        debug=debug,
        registry_config=registry_config,
        repository_cache=repository_cache,
        repository_config=repository_config,
    )

    try:
        file_values = None
        if config_file:
            log(f"Loading {config_file}...", verbose)
            file_values = load_config_file(config_file)
        config = build_config(workdir, options, file_values, verbose)
        outcome = package_charts(config)
    except HelmPackagerError as e:
        raise click.ClickException(str(e))

    if outcome.status is PackageStatus.DONE:
        log(f"Packaged {len(outcome.packaged)} chart(s) to {config.output_directory}", verbose)


__all__ = ["cli", "package_charts", "build_config", "load_config_file"]
