"""module-bom exception hierarchy.

Every error is fatal to the build that raised it. Each carries the name of
the operation that failed and chains the underlying cause, so the message
can be surfaced as-is in the build log.
"""


class ModuleBOMError(Exception):
    """Base exception for all module-bom errors."""

    def __init__(self, operation: str, cause: object | None = None):
        self.operation = operation
        self.cause = cause
        message = f"{operation}: {cause}" if cause is not None else operation
        super().__init__(message)


class ResolutionError(ModuleBOMError):
    """Raised when a dependency cannot be found for the requested id, version and stack."""


class ProvisionError(ModuleBOMError):
    """Raised when fetching or installing a dependency into a layer fails."""


class ToolExecutionError(ModuleBOMError):
    """Raised when the analysis tool cannot be spawned or exits non-zero."""


class ReportNotFoundError(ModuleBOMError):
    """Raised when the tool ran but its report file cannot be opened."""


class ReportFormatError(ModuleBOMError):
    """Raised when the report is not valid JSON or has an unexpected shape."""


class CleanupError(ModuleBOMError):
    """Raised when the report file cannot be removed after decoding."""


class ResultWriteError(ModuleBOMError):
    """Raised when the build result cannot be written into the layers directory."""
