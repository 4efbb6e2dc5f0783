"""Custom exceptions for the RBS pipeline.

Content-level problems (a malformed chat line, a bad CSV cell, an invalid
listing field) are never raised; they come back inside result objects.
The exceptions here cover structural failures and misuse of the API.
"""


class PipelineError(Exception):
    """Base exception for pipeline operations."""

    pass


class ImportFileError(PipelineError):
    """Raised when an uploaded file cannot be used at all (empty, undecodable)."""

    def __init__(self, file_name: str, reason: str):
        self.file_name = file_name
        self.reason = reason
        super().__init__(f"Cannot import '{file_name}': {reason}")


class EntityDataMismatchError(PipelineError):
    """Raised when an entity payload's discriminator disagrees with its entity type."""

    def __init__(self, entity_type: str, data_type: str):
        self.entity_type = entity_type
        self.data_type = data_type
        super().__init__(
            f"Entity of type {entity_type} cannot carry {data_type} data"
        )


class SyncSourceNotFoundError(PipelineError):
    """Raised when a sync source id is unknown."""

    def __init__(self, source_id: str):
        self.source_id = source_id
        super().__init__(f"Sync source '{source_id}' not found")


class SyncSourceInactiveError(PipelineError):
    """Raised when a sync is requested for a deactivated source."""

    def __init__(self, source_id: str):
        self.source_id = source_id
        super().__init__(f"Sync source '{source_id}' is inactive")


class SyncFetchError(PipelineError):
    """Raised when fetching rows from an external source fails or times out."""

    def __init__(self, source_id: str, message: str = ""):
        self.source_id = source_id
        super().__init__(message or f"Fetch failed for sync source: {source_id}")
