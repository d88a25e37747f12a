"""Domain-specific exceptions — framework-independent."""


class ValidationError(Exception):
    """Returned (not raised) by the inspection factory for bad user input."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(message)


class NotFoundError(Exception):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id '{entity_id}' not found")


class DuplicateIdError(Exception):
    """Raised when inserting an entity whose id is already stored."""

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id '{entity_id}' already exists")


class RemoteSyncError(Exception):
    """Base class for failures talking to the remote inspection service.

    Always recoverable: the record stays pending and is retried later.
    """


class NetworkError(RemoteSyncError):
    """Transport-level failure — connection refused, DNS, timeout, dropped stream."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class RemoteRejectedError(RemoteSyncError):
    """The remote answered with a non-2xx status."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"[remote] {status_code}: {message}")
