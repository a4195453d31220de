"""Error types and formatting utilities for consistent error messages.

Every fatal condition raised by the install engine derives from
``FoundryupError``. Commands catch it at the edge, print a single line and
exit with status 1.

Error Style Guide:
- User-facing errors use 'Error: ' prefix
- Use present tense: 'is not installed', 'is running'
- Name the failing operation or binary
- Include actionable hints where helpful
"""


class FoundryupError(Exception):
    """Base class for all fatal installer errors."""


class UsageError(FoundryupError):
    """Bad or conflicting command line flags."""


class MissingCommandError(FoundryupError):
    """A required external command is not available on PATH."""

    def __init__(self, command: str):
        self.command = command
        super().__init__(f"need '{command}' (command not found)")


class UnsupportedTargetError(FoundryupError):
    """The host platform cannot be mapped to a release target."""


class NetworkError(FoundryupError):
    """A download failed. Names the operation that was attempted."""

    def __init__(self, operation: str, url: str, detail: str = ""):
        self.operation = operation
        self.url = url
        message = f"{operation} failed: {url}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class VerificationError(FoundryupError):
    """One or more installed binaries did not match their attested hash."""

    def __init__(self, failed: list[str]):
        self.failed = list(failed)
        super().__init__(
            f"attestation verification failed for: {', '.join(self.failed)}"
        )


class BuildError(FoundryupError):
    """A source checkout or native build step failed."""


class ArchiveError(FoundryupError):
    """A downloaded archive could not be extracted."""


class ConflictError(FoundryupError):
    """A managed binary is currently running and cannot be overwritten."""

    def __init__(self, running: list[str]):
        self.running = list(running)
        super().__init__(
            f"the following binaries are currently running: {', '.join(self.running)}"
        )


class NotInstalledError(FoundryupError):
    """The requested version is not present in the version store."""

    def __init__(self, tag: str):
        self.tag = tag
        super().__init__(f"version {tag} is not installed")


def format_error(message: str) -> str:
    """Format an error message with consistent prefix.

    Examples:
        >>> format_error("version v1.0.0 is not installed")
        'Error: version v1.0.0 is not installed'
    """
    return f"Error: {message}"


def format_suggestion(message: str, suggestion: str) -> str:
    """Format an error message with a helpful suggestion.

    Examples:
        >>> format_suggestion("version v9.9.9 is not installed", "run 'foundryup --list'")
        "Error: version v9.9.9 is not installed. Hint: run 'foundryup --list'"
    """
    return f"{format_error(message)}. Hint: {suggestion}"


HINTS: dict[type, str] = {
    NotInstalledError: "run 'foundryup --list' to see installed versions",
    ConflictError: "stop the running processes and try again",
    VerificationError: "re-run with --force to skip verification",
    MissingCommandError: "install it and make sure it is on your PATH",
}


def render_error(error: FoundryupError) -> str:
    """Render an installer error as the single line shown to the user."""
    hint = HINTS.get(type(error))
    if hint:
        return format_suggestion(str(error), hint)
    return format_error(str(error))


__all__ = [
    "FoundryupError",
    "UsageError",
    "MissingCommandError",
    "UnsupportedTargetError",
    "NetworkError",
    "VerificationError",
    "BuildError",
    "ArchiveError",
    "ConflictError",
    "NotInstalledError",
    "format_error",
    "format_suggestion",
    "render_error",
]
