"""Search Proxy - LLM search proxy with key failover and response caching.

This package provides a layered architecture:

Layers:
    - protocols: Interface contracts (CacheStore, UpstreamClient)
    - repositories: In-memory cache store, httpx completion client
    - services: Classifier, configuration selector, cache, dispatcher, search
    - handlers: HTTP endpoint handlers
    - dto: Data transfer objects (API contracts)
    - entities: Domain models (internal)

Usage:
    ```python
    from search_proxy import ServiceContext

    context = ServiceContext.create()
    outcome = await context.search.search("What is the capital of France?")
    ```

For HTTP API:
    ```python
    from search_proxy.api.app import app
    ```
"""

from search_proxy.config import Settings, get_settings, load_credentials
from search_proxy.context import ServiceContext
from search_proxy.entities import (
    ComplexityClass,
    Credential,
    DispatchResult,
    FailoverPolicy,
    RequestConfiguration,
)
from search_proxy.errors import (
    AllCredentialsExhausted,
    ConfigurationError,
    MalformedUpstreamResponse,
    NoCredentialsConfigured,
    SearchProxyError,
    UpstreamFailure,
    UpstreamRateLimited,
    UpstreamTimeout,
    ValidationError,
)
from search_proxy.formatting import format_response
from search_proxy.protocols import CacheStore, UpstreamClient
from search_proxy.repositories import HttpxCompletionClient, InMemoryCacheRepository
from search_proxy.services import (
    CacheService,
    ConfigurationSelector,
    KeyFailoverDispatcher,
    QueryClassifier,
    SearchService,
    classify,
)

__all__ = [
    # Configuration
    "Settings",
    "get_settings",
    "load_credentials",
    "ServiceContext",
    # Protocols (interfaces)
    "CacheStore",
    "UpstreamClient",
    # Services (business logic)
    "CacheService",
    "ConfigurationSelector",
    "KeyFailoverDispatcher",
    "QueryClassifier",
    "SearchService",
    "classify",
    "format_response",
    # Repositories (data access)
    "HttpxCompletionClient",
    "InMemoryCacheRepository",
    # Entities (domain models)
    "ComplexityClass",
    "Credential",
    "DispatchResult",
    "FailoverPolicy",
    "RequestConfiguration",
    # Errors
    "SearchProxyError",
    "ValidationError",
    "ConfigurationError",
    "NoCredentialsConfigured",
    "UpstreamFailure",
    "UpstreamRateLimited",
    "UpstreamTimeout",
    "AllCredentialsExhausted",
    "MalformedUpstreamResponse",
]
