"""Prometheus counters for request load and cache effectiveness."""

from prometheus_client import CollectorRegistry, Counter, make_asgi_app


class Metrics:
    """Per-operation request and cache-hit counters.

    Each instance owns its registry, so tests can build independent
    instances without colliding on metric names.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry or CollectorRegistry()
        self.requests = Counter(
            "app_translation_requests_total",
            "Total number of generation requests by operation",
            ["type"],
            registry=self.registry,
        )
        self.cache_hits = Counter(
            "app_translation_cache_hits_total",
            "Total number of cache hits by operation",
            ["type"],
            registry=self.registry,
        )

    def record_request(self, operation: str) -> None:
        self.requests.labels(type=operation).inc()

    def record_cache_hit(self, operation: str) -> None:
        self.cache_hits.labels(type=operation).inc()

    def request_count(self, operation: str) -> float:
        """Current request counter value for ``operation``."""
        value = self.registry.get_sample_value(
            "app_translation_requests_total", {"type": operation}
        )
        return value or 0.0

    def cache_hit_count(self, operation: str) -> float:
        """Current cache-hit counter value for ``operation``."""
        value = self.registry.get_sample_value(
            "app_translation_cache_hits_total", {"type": operation}
        )
        return value or 0.0

    def asgi_app(self):
        """ASGI app serving this registry in the Prometheus text format."""
        return make_asgi_app(registry=self.registry)
