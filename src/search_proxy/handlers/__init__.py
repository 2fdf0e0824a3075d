"""Handler layer for HTTP endpoints.

Handlers convert between DTOs (API contracts) and service calls.
Domain errors propagate to the exception handlers registered on the app,
which render them as ``{error, details}`` envelopes.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)
"""

from .search_handler import SearchHandler
from .status_handler import StatusHandler

__all__ = [
    "SearchHandler",
    "StatusHandler",
]
