"""Error taxonomy for todo-list extraction.

Only ConfigurationError and UpstreamFetchError reach the caller; per-page
and persistence failures are absorbed into metadata or logs.
"""


class ExtractionError(Exception):
    """Base class for extraction failures surfaced over HTTP."""

    status_code: int = 500
    error_type: str = "server_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(ExtractionError):
    """The todo list cannot be extracted as configured (missing database or credential)."""

    status_code = 400
    error_type = "configuration"


class TodoListNotFoundError(ConfigurationError):
    status_code = 404
    error_type = "not_found"

    def __init__(self, todo_list_id: str):
        super().__init__(f"No todo list found: {todo_list_id}")
        self.todo_list_id = todo_list_id


class UpstreamFetchError(ExtractionError):
    """A Notion pagination request failed."""

    status_code = 502
    error_type = "upstream"

    def __init__(self, endpoint: str, resource_id: str, cause: Exception):
        super().__init__(f"Notion {endpoint} request failed for {resource_id}: {cause}")
        self.endpoint = endpoint
        self.resource_id = resource_id
        self.cause = cause


class PerParentProcessingError(Exception):
    """One page's child fetch failed; recorded in metadata, never raised past the scheduler."""

    def __init__(self, page_id: str, cause: Exception):
        super().__init__(f"Failed to fetch blocks for page {page_id}: {cause}")
        self.page_id = page_id
        self.cause = cause


class PersistenceError(Exception):
    """Writing extraction results back to the database failed."""
