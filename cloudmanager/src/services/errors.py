"""
Errors raised by the Cloud Manager client.
"""

from typing import Optional

class CloudManagerError(Exception):
    """Base class for client errors."""
    pass

class NotFound(CloudManagerError):
    """A program, pipeline, environment or step is absent."""
    pass

class GateNotFound(NotFound):
    pass

class NotCancellable(CloudManagerError):
    pass

class NotAdvanceable(CloudManagerError):
    pass

class UnsupportedTransition(CloudManagerError):
    pass

class RequestFailed(CloudManagerError):
    """Raised on a non-2xx response."""

    def __init__(self, message: str, url: str = "", status: Optional[int] = None, reason: str = ""):
        self.url = url
        self.status = status
        self.reason = reason
        if url:
            message = f"{message}: {url} ({status} {reason})"
        super().__init__(message)

class TransitionFailed(RequestFailed):
    pass

class ExecutionAlreadyRunning(RequestFailed):
    pass

class LogNotFound(RequestFailed):
    pass

class TailRequestFailed(RequestFailed):
    pass

class NoTailableLog(CloudManagerError):
    pass

class DownloadResolutionFailed(CloudManagerError):
    pass

class DecompressionFailed(CloudManagerError):
    pass
