"""Error types raised at the storage, codec and export boundaries."""


class MomentsError(Exception):
    """Base class for all family-moments errors."""


class StorageError(MomentsError):
    """A key-value slot could not be read or written."""

    def __init__(self, message: str, key: str | None = None):
        super().__init__(message)
        self.key = key


class MomentDecodeError(MomentsError):
    """The durable blob does not hold a valid moment list."""


class MomentEncodeError(MomentsError):
    """The moment list could not be serialized."""


class ExportError(MomentsError):
    """The PDF document could not be rendered."""
