"""HTTP handlers for service status and credential diagnostics."""

from typing import Any

from search_proxy.config import VERSION
from search_proxy.context import ServiceContext
from search_proxy.dto import HealthResponse, KeyTestRequest, StatsResponse
from search_proxy.entities import ComplexityClass
from search_proxy.entities.credential import redact
from search_proxy.utils import utc_timestamp

# env-check always lists at least this many slots, set or not
EXPECTED_SLOTS = 2
ENV_CHECK_PREVIEW_LENGTH = 12

ROUTES = [
    "GET /",
    "GET /api/health",
    "GET /api/stats",
    "DELETE /api/cache",
    "HEAD /api/search",
    "POST /api/search",
    "POST /api/search/stream",
    "POST /api/debug-search",
    "POST /api/env-check",
    "POST /api/key-test",
]


class StatusHandler:
    """HTTP handlers for health, statistics and credential diagnostics.

    None of these responses ever contain a full credential.
    """

    def __init__(self, context: ServiceContext) -> None:
        self._context = context

    async def root(self) -> dict[str, Any]:
        """Handle GET / requests."""
        return {
            "name": "Search Proxy API",
            "version": VERSION,
            "status": "running",
            "timestamp": utc_timestamp(),
            "endpoints": {
                "health": "/api/health",
                "search": "/api/search (POST)",
                "stream": "/api/search/stream (POST)",
                "debug-search": "/api/debug-search (POST)",
                "env-check": "/api/env-check (POST)",
                "key-test": "/api/key-test (POST)",
                "stats": "/api/stats",
                "docs": "/docs",
            },
            "apiKeys": len(self._context.dispatcher.credentials),
        }

    async def health(self) -> HealthResponse:
        """Handle GET /api/health requests.

        Status is "degraded" when no credentials are configured: the process
        is up but every uncached search will fail.
        """
        credentials = self._context.dispatcher.credentials
        cache_healthy = self._context.cache.is_healthy()
        healthy = bool(credentials) and cache_healthy

        return HealthResponse(
            status="healthy" if healthy else "degraded",
            timestamp=utc_timestamp(),
            version=VERSION,
            uptime=round(self._context.uptime, 3),
            available_keys=len(credentials),
            key_previews=[credential.preview for credential in credentials],
            models={c.value: model for c, model in self._context.selector.models.items()},
            cache_healthy=cache_healthy,
        )

    async def stats(self) -> StatsResponse:
        """Handle GET /api/stats requests."""
        return StatsResponse(
            requests=self._context.metrics.to_dict(),
            cache=self._context.cache.get_stats(),
        )

    async def clear_cache(self) -> dict[str, Any]:
        """Handle DELETE /api/cache requests."""
        count = self._context.cache.clear()
        return {
            "success": True,
            "deletedCount": count,
            "message": "Cache cleared successfully",
        }

    async def env_check(self) -> dict[str, Any]:
        """Handle POST /api/env-check requests.

        Lists every credential slot with a redacted preview or "NOT SET".
        """
        settings = self._context.settings
        credentials = {c.slot: c for c in self._context.dispatcher.credentials}
        last_slot = max([EXPECTED_SLOTS, *credentials])
        provider = settings.credential_provider.upper()

        variables = {}
        for slot in range(1, last_slot + 1):
            credential = credentials.get(slot)
            name = f"{provider}_API_KEY_{slot}"
            variables[name] = redact(credential.token, ENV_CHECK_PREVIEW_LENGTH) if credential else "NOT SET"

        return {
            "apiKeysConfigured": len(credentials),
            "keyPreviews": [
                redact(c.token, ENV_CHECK_PREVIEW_LENGTH) for c in self._context.dispatcher.credentials
            ],
            "environmentVariables": variables,
            "failoverPolicy": settings.failover_policy,
            "timestamp": utc_timestamp(),
        }

    async def key_test(self, request: KeyTestRequest | None = None) -> dict[str, Any]:
        """Handle POST /api/key-test requests.

        Probes every credential with a tiny prompt and reports each outcome.
        """
        dispatcher = self._context.dispatcher
        if not dispatcher.credentials:
            return {
                "success": False,
                "error": "No API keys configured",
                "timestamp": utc_timestamp(),
            }

        model = (request.model if request else None) or self._context.selector.models[ComplexityClass.SIMPLE]
        results = await dispatcher.probe(model=model)
        working = [result for result in results if result["success"]]

        return {
            "success": bool(working),
            "model": model,
            "workingKeys": len(working),
            "totalKeysTested": len(results),
            "results": results,
            "timestamp": utc_timestamp(),
        }

    @staticmethod
    def not_found(method: str, path: str) -> dict[str, Any]:
        """Body for requests that match no route."""
        return {
            "error": "Route not found",
            "method": method,
            "path": path,
            "availableRoutes": ROUTES,
            "timestamp": utc_timestamp(),
        }
