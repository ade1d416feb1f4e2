"""Tests for HelmCommand argument building and execution."""

import sys
from pathlib import Path
import subprocess
import pytest

# Add parent directory to path to import the main module
sys.path.insert(0, str(Path(__file__).parent.parent))

from helm_packager.helm_executable import HelmCommand, STDIN_SENTINEL, global_flags
from helm_packager.errors import ExternalToolError, LaunchError


def test_flags_render_in_call_order():
    helm = (
        HelmCommand()
        .arguments("package", Path("charts/a"))
        .flag("destination", Path("/out"))
        .flag("version", "0.1.0")
    )

    assert helm.argv() == ["helm", "package", "charts/a", "--destination", "/out", "--version", "0.1.0"]


@pytest.mark.parametrize("value", [None, "", False])
def test_empty_flags_are_omitted(value):
    """No `--flag` and no empty `--flag=` is emitted for unset values."""
    helm = HelmCommand().arguments("package", "chart").flag("app-version", value)
    assert helm.argv() == ["helm", "package", "chart"]


def test_boolean_flag_renders_without_value():
    helm = HelmCommand().arguments("package", "chart").flag("sign").flag("key", "ci")
    assert helm.argv() == ["helm", "package", "chart", "--sign", "--key", "ci"]


def test_builder_is_immutable():
    """Each call returns a new command; the base stays untouched."""
    base = HelmCommand().arguments("package")
    first = base.arguments("a").flag("version", "1")
    second = base.arguments("b")

    assert base.argv() == ["helm", "package"]
    assert first.argv() == ["helm", "package", "a", "--version", "1"]
    assert second.argv() == ["helm", "package", "b"]


def test_argv_is_deterministic():
    helm = HelmCommand().arguments("package", "c").flag("destination", "/o").flag("version", "1").flag("sign")
    assert helm.argv() == helm.argv()


def test_global_flags_come_before_subcommand():
    flags = global_flags(debug=True, repository_config=Path("/r.yaml"))
    helm = HelmCommand(executable="/usr/bin/helm", global_flags=flags).arguments("package", "c")

    assert helm.argv() == ["/usr/bin/helm", "--debug", "--repository-config", "/r.yaml", "package", "c"]


def test_global_flags_empty_by_default():
    assert global_flags() == ()


def test_execute_returns_result(fake_popen):
    result = HelmCommand().arguments("package", "chart").execute("Unable to package")

    assert result.exit_code == 0
    assert "Successfully" in result.output
    assert fake_popen.argvs == [["helm", "package", "chart"]]
    assert fake_popen.calls[0]["stdin"] is None
    assert fake_popen.calls[0]["kwargs"]["stdin"] == subprocess.DEVNULL


def test_execute_feeds_stdin(fake_popen):
    """The secret goes to stdin; argv only carries the '-' sentinel."""
    helm = (
        HelmCommand()
        .arguments("package", "chart")
        .flag("passphrase-file", STDIN_SENTINEL)
        .with_stdin("s3cret")
    )
    helm.execute("Unable to package")

    call = fake_popen.calls[0]
    assert call["stdin"] == "s3cret"
    assert call["kwargs"]["stdin"] == subprocess.PIPE
    assert call["argv"][-2:] == ["--passphrase-file", "-"]
    assert "s3cret" not in " ".join(call["argv"])


def test_stdin_not_in_repr():
    helm = HelmCommand().with_stdin("s3cret")
    assert "s3cret" not in repr(helm)


def test_non_zero_exit_raises_external_tool_error(fake_popen):
    fake_popen.fail_on["broken"] = (1, "Error: Chart.yaml file is missing\n")

    with pytest.raises(ExternalToolError) as exc_info:
        HelmCommand().arguments("package", "charts/broken").execute("Unable to package chart at charts/broken")

    error = exc_info.value
    assert error.exit_code == 1
    assert "Chart.yaml file is missing" in error.output
    assert "Unable to package chart at charts/broken" in str(error)
    assert "exit code 1" in str(error)


def test_missing_executable_raises_launch_error(fake_popen):
    fake_popen.launch_error = FileNotFoundError(2, "No such file or directory")

    with pytest.raises(LaunchError) as exc_info:
        HelmCommand(executable="helm-missing").arguments("package", "chart").execute("Unable to package")

    assert exc_info.value.executable == "helm-missing"
    assert "helm is installed" in str(exc_info.value)


def test_launch_error_with_real_subprocess(tmp_path):
    """A non-existent executable fails to launch with the real Popen."""
    missing = tmp_path / "no-such-helm"

    with pytest.raises(LaunchError):
        HelmCommand(executable=str(missing)).arguments("version").execute("Unable to run helm")
