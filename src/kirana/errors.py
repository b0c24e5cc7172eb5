"""Custom exceptions for kirana."""


class KiranaError(Exception):
    """Base exception for all kirana errors."""

    pass


class OpenError(KiranaError):
    """Raised when the record store cannot be opened."""

    def __init__(self, path: str, reason: str | None = None):
        self.path = path
        self.reason = reason
        msg = f"Failed to open database at {path}"
        if reason:
            msg = f"{msg} ({reason})"
        super().__init__(msg)


class VersionBlockedError(OpenError):
    """Raised when the database on disk was upgraded past the requested version."""

    def __init__(self, path: str, found: int, requested: int):
        self.found = found
        self.requested = requested
        super().__init__(
            path,
            f"database is at version {found}, this handle requires version {requested}",
        )


class UnknownPartitionError(KiranaError):
    """Raised when a partition name is not part of the schema."""

    def __init__(self, partition: str):
        self.partition = partition
        super().__init__(f"Unknown partition: {partition}")


class ReadError(KiranaError):
    """Raised when reading from a partition fails."""

    def __init__(self, partition: str, reason: str | None = None):
        self.partition = partition
        msg = f"Failed to get data from {partition}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class WriteError(KiranaError):
    """Raised when writing to a partition fails."""

    def __init__(self, partition: str, reason: str | None = None):
        self.partition = partition
        msg = f"Failed to save data to {partition}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class DeleteError(KiranaError):
    """Raised when deleting from a partition fails."""

    def __init__(self, partition: str, reason: str | None = None):
        self.partition = partition
        msg = f"Failed to delete data from {partition}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class RecordNotFoundError(KiranaError):
    """Raised when a record ID doesn't exist in a partition."""

    def __init__(self, partition: str, key: str):
        self.partition = partition
        self.key = key
        super().__init__(f"Record not found in {partition}: {key}")


class ValidationError(KiranaError):
    """Raised when input is missing, malformed or references a missing record."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid {field}: {reason}")


class NetworkError(KiranaError):
    """Raised when the assistant's API call fails."""

    def __init__(self, reason: str, status_code: int | None = None):
        self.reason = reason
        self.status_code = status_code
        msg = f"API Error: {reason}"
        if status_code is not None:
            msg = f"API Error: {status_code} {reason}".rstrip()
        super().__init__(msg)
