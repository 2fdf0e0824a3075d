"""Service context built once at startup.

Everything a request handler needs lives on one object stored in
``app.state``, instead of module-level globals. Tests build their own
context with fake clients and stores.
"""

import time
from dataclasses import dataclass, field

from search_proxy.config import Settings, get_settings
from search_proxy.entities import Credential, ServiceMetrics
from search_proxy.protocols import CacheStore, UpstreamClient
from search_proxy.repositories import HttpxCompletionClient, InMemoryCacheRepository
from search_proxy.services import (
    CacheService,
    ConfigurationSelector,
    KeyFailoverDispatcher,
    QueryClassifier,
    SearchService,
)


@dataclass
class ServiceContext:
    """Long-lived services shared by all requests."""

    settings: Settings
    client: UpstreamClient
    cache: CacheService
    classifier: QueryClassifier
    selector: ConfigurationSelector
    dispatcher: KeyFailoverDispatcher
    search: SearchService
    metrics: ServiceMetrics
    started_at: float = field(default_factory=time.monotonic)

    @classmethod
    def create(
        cls,
        settings: Settings | None = None,
        client: UpstreamClient | None = None,
        store: CacheStore | None = None,
        credentials: tuple[Credential, ...] | None = None,
    ) -> "ServiceContext":
        """Wire up all layers.

        Args:
            settings: Application settings. Defaults to get_settings().
            client: Upstream client. Defaults to an HttpxCompletionClient.
            store: Cache backing store. Defaults to an InMemoryCacheRepository.
            credentials: Override for settings.credentials.

        Returns:
            Ready-to-use ServiceContext
        """
        settings = settings or get_settings()
        client = client or HttpxCompletionClient(
            url=settings.upstream_url,
            timeout=settings.upstream_timeout,
        )
        store = store or InMemoryCacheRepository(max_entries=settings.cache_max_entries)
        credentials = settings.credentials if credentials is None else credentials

        metrics = ServiceMetrics()
        cache = CacheService(repository=store)
        classifier = QueryClassifier()
        selector = ConfigurationSelector(models=settings.models)
        dispatcher = KeyFailoverDispatcher(
            client=client,
            credentials=credentials,
            policy=settings.policy,
            timeout=settings.upstream_timeout,
            system_prompt=settings.system_prompt,
        )
        search = SearchService(
            classifier=classifier,
            selector=selector,
            cache=cache,
            dispatcher=dispatcher,
            metrics=metrics,
        )
        return cls(
            settings=settings,
            client=client,
            cache=cache,
            classifier=classifier,
            selector=selector,
            dispatcher=dispatcher,
            search=search,
            metrics=metrics,
        )

    @property
    def uptime(self) -> float:
        """Seconds since the context was created."""
        return time.monotonic() - self.started_at

    async def aclose(self) -> None:
        await self.client.close()
