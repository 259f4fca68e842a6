"""Exception hierarchy for the production pipeline."""


class StudioError(Exception):
    """Base class for all production errors."""


class ValidationError(StudioError):
    """Raised before any remote call when an entry point's preconditions fail."""


class StudioBusyError(ValidationError):
    """Raised when an operation is requested while a conflicting one is in flight."""


class RemoteGenerationError(StudioError):
    """A generation service failed or returned an empty or unparseable result."""


class VideoJobTimeout(RemoteGenerationError):
    """A video job did not finish within the allowed number of polls."""


class VideoJobCancelled(RemoteGenerationError):
    """Polling of a video job was cancelled by the caller."""


class PackagingError(StudioError):
    """Archive assembly failed."""
