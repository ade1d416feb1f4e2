"""Exceptions raised while packaging Helm charts."""


class HelmPackagerError(Exception):
    """Base exception for helm-packager errors."""
    pass


class ConfigurationError(HelmPackagerError, ValueError):
    """Raised when the packaging configuration is invalid."""
    pass


class ExternalToolError(HelmPackagerError, RuntimeError):
    """Raised when the helm executable exits with a non-zero code."""

    def __init__(self, message: str, exit_code: int, output: str = ""):
        self.message = message
        self.exit_code = exit_code
        self.output = output
        super().__init__(message)

    def __str__(self) -> str:
        text = f"{self.message} (exit code {self.exit_code})"
        if self.output.strip():
            text += f":\n{self.output.rstrip()}"
        return text


class LaunchError(HelmPackagerError, RuntimeError):
    """Raised when the helm executable cannot be started at all."""

    def __init__(self, executable: str, cause: OSError):
        self.executable = executable
        self.cause = cause
        super().__init__(
            f"Unable to run '{executable}': {cause.strerror or cause}. "
            "Check that helm is installed and executable, or set --helm-executable."
        )


class PlaceholderWriteError(HelmPackagerError, OSError):
    """Placeholder artifact could not be written. Reported, never raised."""
    pass
