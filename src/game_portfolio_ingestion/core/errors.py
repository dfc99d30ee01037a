"""Exception hierarchy for the ingestion pipeline.

Every fatal condition the pipeline can hit is an ``IngestError`` subclass so
the CLI can report it from a single handler.
"""


class IngestError(Exception):
    """Base class for all fatal ingestion errors."""


class InputError(IngestError):
    """Missing or invalid operator input (paths, ids, field values)."""


class StructureError(IngestError):
    """The package cannot be read or holds no playable content."""


class ExternalToolError(IngestError):
    """The external build SDK is missing or its build failed.

    Attributes:
        diagnostics: Captured output of the failed subprocess, if any
    """

    def __init__(self, message: str, diagnostics: str = ""):
        super().__init__(message)
        self.diagnostics = diagnostics


class CatalogError(IngestError):
    """The catalog document could not be read, validated or written."""
