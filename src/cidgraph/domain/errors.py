"""Errors raised while resolving content-addressed graphs."""

from __future__ import annotations


class GraphError(RuntimeError):
    """Base class for resolution, materialization and comparison failures."""


class InvalidReferenceError(GraphError, ValueError):
    """Raised when a string does not parse as a content reference."""

    def __init__(self, reference: str) -> None:
        super().__init__(f"Invalid content reference: {reference!r}")
        self.reference = reference


class NetworkError(GraphError):
    """Raised when content could not be fetched from the gateway."""

    def __init__(
        self,
        message: str,
        *,
        reference: str,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.reference = reference
        self.status_code = status_code


class RateLimitedError(NetworkError):
    """Raised when the gateway kept answering 429 until retries ran out."""


class FetchFailedError(GraphError):
    """Raised when the root of a materialization run could not be fetched."""

    def __init__(self, reference: str) -> None:
        super().__init__(f"Failed to fetch root reference: {reference}")
        self.reference = reference


class InsufficientInputsError(GraphError, ValueError):
    """Raised when fewer than two roots are handed to the comparator."""


class ManifestError(GraphError):
    """Raised when the schema manifest cannot be loaded."""


class UnsafeFilenameError(GraphError, ValueError):
    """Raised when a file name would place output outside its directory."""

    def __init__(self, filename: str) -> None:
        super().__init__(f"Refusing to write outside the output directory: {filename!r}")
        self.filename = filename
