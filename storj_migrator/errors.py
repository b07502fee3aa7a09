class MigrationError(Exception):
    """Base error for storj_migrator.

    Carries the failing operation, the object or file it concerned and the
    underlying cause so the entry point can log it before exiting.
    """

    fatal = True

    def __init__(self, operation, key=None, cause=None, message=None):
        self.operation = operation
        self.key = key
        self.cause = cause
        parts = [message or self.__class__.__name__, f"operation={operation}"]
        if key:
            parts.append(f"key={key}")
        if cause is not None:
            parts.append(f"cause={cause}")
        super().__init__(' '.join(parts))


class ConfigLoadError(MigrationError):
    """Configuration file missing or unreadable."""


class StoreConnectionError(MigrationError):
    """Source or destination endpoint unreachable."""


class ScopeError(MigrationError):
    """Access scope could not be parsed, derived or restricted."""


class ListingError(MigrationError):
    """Source enumeration failed."""


class ChunkReadError(MigrationError):
    """Range read of a source object failed or stalled."""


class UploadError(MigrationError):
    """A chunk could not be written to the destination."""


class VerifyError(MigrationError):
    """Download or read failure during verification; logged and skipped."""

    fatal = False
