"""Global pytest configuration and fixtures for all tests."""

import sys
from pathlib import Path
import pytest

# Add parent directory to path to import the main module
sys.path.insert(0, str(Path(__file__).parent.parent))

from helm_packager import helm_executable


class FakeProcess:
    """Stand-in for subprocess.Popen recording argv and stdin."""

    def __init__(self, recorder, cmd, **kwargs):
        self.recorder = recorder
        self.cmd = cmd
        self.kwargs = kwargs
        self.returncode = None

    def communicate(self, input=None):
        self.recorder.calls.append({"argv": list(self.cmd), "stdin": input, "kwargs": self.kwargs})
        self.returncode, output = self.recorder.result_for(self.cmd)
        return output, None


class PopenRecorder:
    """
    Records every helm invocation.

    `fail_on` maps a substring of an argument to (exit_code, output); the
    first invocation containing it exits with that code.
    """

    def __init__(self):
        self.calls = []
        self.fail_on = {}
        self.launch_error = None

    def __call__(self, cmd, **kwargs):
        if self.launch_error is not None:
            raise self.launch_error
        return FakeProcess(self, cmd, **kwargs)

    def result_for(self, cmd):
        for needle, result in self.fail_on.items():
            if any(needle in arg for arg in cmd):
                return result
        return 0, "Successfully packaged chart\n"

    @property
    def argvs(self):
        return [call["argv"] for call in self.calls]


@pytest.fixture
def fake_popen(monkeypatch):
    """Replace subprocess.Popen used by HelmCommand with a recorder."""
    recorder = PopenRecorder()
    monkeypatch.setattr(helm_executable.subprocess, "Popen", recorder)
    return recorder


def make_chart(root: Path, relative: str, version: str = "0.1.0") -> Path:
    """Create a minimal chart directory with a Chart.yaml."""
    chart_dir = root / relative
    chart_dir.mkdir(parents=True, exist_ok=True)
    (chart_dir / "Chart.yaml").write_text(
        f"apiVersion: v2\nname: {chart_dir.name}\nversion: {version}\n"
    )
    return chart_dir


@pytest.fixture
def chart_factory(tmp_path):
    """Create charts below tmp_path: chart_factory("charts/a", version="1.0.0")."""
    def factory(relative: str, version: str = "0.1.0") -> Path:
        return make_chart(tmp_path, relative, version)
    return factory
