class BuildxSetupError(Exception):
    """Base exception for all application-specific errors."""

    pass


# --- 1. Errors related to inputs and to what the current mode allows ---
class ConfigurationError(BuildxSetupError):
    """Base class for errors in the resolved inputs or in what they ask for."""

    pass


class ConfigFileMissingError(ConfigurationError):
    """Raised when a referenced file (inputs file, buildkitd config) cannot be found."""

    pass


class ConfigParsingError(ConfigurationError):
    """Raised when a YAML inputs file is syntactically incorrect."""

    pass


class ConfigValidationError(ConfigurationError):
    """Raised when the inputs fail structural validation (e.g., Pydantic)."""

    pass


class UnsupportedModeError(ConfigurationError):
    """Raised when a feature needs the Docker CLI but the run is standalone."""

    pass


# --- 2. Errors raised by external commands during setup ---
class ExternalCommandError(BuildxSetupError):
    """Raised when an invoked command exits non-zero or cannot be understood."""

    def __init__(self, message: str, exit_code: int | None = None, stderr: str = ""):
        super().__init__(message)
        self.exit_code = exit_code
        self.stderr = stderr


class ToolInstallError(ExternalCommandError):
    """Raised when buildx cannot be downloaded, built or placed."""

    pass


class InspectError(ExternalCommandError):
    """Raised when a builder cannot be inspected."""

    pass


# --- 3. Errors that are logged and swallowed ---
class DiagnosticError(BuildxSetupError):
    """Raised by best-effort diagnostics; callers downgrade it to a warning."""

    pass


# --- 4. Errors related to the cross-phase state ---
class StateError(BuildxSetupError):
    """Raised when the cross-phase state is misused (e.g., a key written twice)."""

    pass
