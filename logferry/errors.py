"""Error kinds raised at the collaborator boundaries."""


class LogFerryError(Exception):
    """Base class for every error this package raises."""


class ValidationError(LogFerryError):
    """Raised when a log call has malformed arguments."""


class ConnectivityProbeError(LogFerryError):
    """Raised when the network status source cannot be read."""


class RemoteSendError(LogFerryError):
    """Raised when the remote sink rejects or cannot receive a send."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class StorageError(LogFerryError):
    """Raised when the persistent store cannot read, write or remove the buffer."""
