"""Exceptions raised by the snapshot pipeline.

Every error carries a stable code, a short and a long description, and a
list of remedies that the CLI prints verbatim on stderr.
"""

import re
from typing import List, Optional

_EMAIL_RE = re.compile(r"^[a-z0-9._%+\-]+@[a-z0-9.\-]+\.[a-z]{2,}$", re.IGNORECASE)


class KanvasSnapshotError(Exception):
    """Base class for all user-facing plugin errors.

    Attributes:
        code: Stable error code (e.g. ``kubectl-kanvas-snapshot-1007``)
        short_description: One-line summary of what failed
        long_description: Probable causes
        remedies: Hints telling the user how to recover
    """

    code = "kubectl-kanvas-snapshot-1000"
    long_description = ""
    remedies: List[str] = []

    def __init__(
        self,
        message: str,
        long_description: Optional[str] = None,
        remedies: Optional[List[str]] = None,
    ) -> None:
        """Initialize the error.

        Args:
            message: Short description of the failure
            long_description: Overrides the class-level long description
            remedies: Overrides the class-level remedies
        """
        super().__init__(message)
        self.short_description = message
        if long_description is not None:
            self.long_description = long_description
        self.remedies = list(remedies) if remedies is not None else list(type(self).remedies)


class ManifestReadError(KanvasSnapshotError):
    """Raised when manifest files cannot be found or read."""

    code = "kubectl-kanvas-snapshot-1007"
    long_description = "Failed to read the specified Kubernetes manifest file"
    remedies = [
        "Ensure the file exists and has correct permissions",
        "Verify the path to the manifest file is correct",
    ]

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(f"error reading manifest file: {message}")
        self.path = path


class PayloadEncodingError(KanvasSnapshotError):
    """Raised when the design request cannot be serialized."""

    code = "kubectl-kanvas-snapshot-1001"
    long_description = "The design request could not be encoded for the Meshery API"
    remedies = [
        "Check that meshery.payload_format is one of: file, manifest, pattern",
        "Ensure the manifest files are valid UTF-8 text",
    ]


class HTTPRequestError(KanvasSnapshotError):
    """Raised when a request to Meshery fails or is rejected.

    Attributes:
        status_code: HTTP status of the response, if one was received
    """

    code = "kubectl-kanvas-snapshot-1002"
    long_description = "Failed to connect to Meshery API server, or the server rejected the request"
    remedies = [
        "Ensure Meshery API server is running and accessible",
        "Check network connectivity to the Meshery server",
        "Verify if the Meshery server URL is correct in the configuration",
        "Check if your MESHERY_TOKEN is valid",
    ]

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(f"error making HTTP request: {message}")
        self.status_code = status_code


class ResponseDecodingError(KanvasSnapshotError):
    """Raised when no design identifier can be extracted from a response."""

    code = "kubectl-kanvas-snapshot-1003"
    long_description = "Invalid or unexpected response format from Meshery API"
    remedies = [
        "Ensure Meshery API server is running the correct version",
        "Check if the response format has changed in the Meshery API",
    ]

    def __init__(self, message: str, body: str = "") -> None:
        super().__init__(f"error decoding API response: {message}")
        self.body = body


class DesignCreationError(KanvasSnapshotError):
    """Raised when a design could not be created in Meshery.

    The lower-level error is available as ``cause`` and ``__cause__``.
    """

    code = "kubectl-kanvas-snapshot-1004"
    long_description = "Failed to create a new design in Meshery"
    remedies = [
        "Verify the manifest file is valid Kubernetes YAML",
        "Check if you have permissions to create designs in Meshery",
        "Ensure Meshery server is running the latest version",
    ]

    def __init__(self, cause: Exception) -> None:
        super().__init__(f"error creating Meshery design: {cause}")
        self.cause = cause
        if isinstance(cause, KanvasSnapshotError):
            self.remedies = self.remedies + [r for r in cause.remedies if r not in self.remedies]


class InvalidEmailFormatError(KanvasSnapshotError):
    code = "kubectl-kanvas-snapshot-1005"
    long_description = "The provided email address format is not valid"
    remedies = ["Provide a valid email address in the format user@example.com"]

    def __init__(self, email: str) -> None:
        super().__init__(f"invalid email format for '{email}'")
        self.email = email


class SnapshotTriggerError(KanvasSnapshotError):
    """Raised when the snapshot workflow could not be dispatched."""

    code = "kubectl-kanvas-snapshot-1006"
    long_description = "Failed to trigger snapshot generation workflow"
    remedies = [
        "Check if GitHub access token is provided and valid",
        "Verify network connectivity to GitHub API",
        "Verify --repo-owner, --repo-name and --workflow point to an existing workflow",
    ]

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(f"error generating snapshot: {message}")
        self.status_code = status_code


class ConfigError(KanvasSnapshotError):
    code = "kubectl-kanvas-snapshot-1008"
    long_description = "The plugin configuration file could not be loaded"
    remedies = [
        "Check that the config file is valid YAML",
        "Check that numeric settings such as defaults.timeout_seconds are numbers",
        "Remove the file to fall back to built-in defaults",
    ]

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(f"error loading configuration: {message}")
        self.path = path


class OutputWriteError(KanvasSnapshotError):
    """Raised when the downloaded design cannot be written locally."""

    code = "kubectl-kanvas-snapshot-1009"
    long_description = "Failed to write the design to the output file"
    remedies = [
        "Check the --output path: its directory must exist and be writable",
        "Omit --output to write <name>.yaml in the current directory",
    ]

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(f"error writing design file: {message}")
        self.path = path


def is_valid_email(email: str) -> bool:
    """Return True if ``email`` looks like ``user@example.com``."""
    if not email:
        return False
    return _EMAIL_RE.match(email) is not None


def format_error(error: KanvasSnapshotError) -> str:
    """Render an error with its description and remedies for stderr."""
    lines = [f"Error [{error.code}]: {error.short_description}"]
    if error.long_description:
        lines.append(f"  Probable cause: {error.long_description}")
    if error.remedies:
        lines.append("  Suggested remediation:")
        lines.extend(f"    - {remedy}" for remedy in error.remedies)
    return "\n".join(lines)
