"""
Tests for the text cache API.
"""

from dataclasses import replace

import pytest
from fastapi.testclient import TestClient

from fakes import StubGenerator
from textcache.api.app import create_app
from textcache.errors import EmptyGenerationError, GenerationUnavailableError
from textcache.services import TokenBucketRateLimiter


@pytest.fixture
def client(settings, store, generator, metrics):
    """Create a test client backed by in-memory doubles."""
    app = create_app(settings, repository=store, generator=generator, metrics=metrics)
    with TestClient(app) as test_client:
        yield test_client


def make_client(settings, store, generator, metrics, **kwargs):
    app = create_app(settings, repository=store, generator=generator, metrics=metrics, **kwargs)
    return TestClient(app)


def test_root(client):
    """Test root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Text Cache API"
    assert "translate" in data["endpoints"]


def test_health(client, generator):
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {
        "status": "healthy",
        "cache_healthy": True,
        "generator_healthy": True,
    }

    generator.available = False
    assert client.get("/health").json()["status"] == "unhealthy"


def test_translate_then_cached(client, generator, metrics):
    """A repeated translation is served without calling the backend."""
    params = {"keyword": "hello", "context": "greeting"}

    first = client.get("/translate", params=params)
    second = client.get("/translate", params=params)

    assert first.status_code == 200
    assert first.json() == {"result": "你好"}
    assert second.json() == {"result": "你好"}
    assert len(generator.calls) == 1
    assert metrics.cache_hit_count("translate") == 1


def test_translate_without_context(client, generator):
    response = client.get("/translate", params={"keyword": "hello"})

    assert response.status_code == 200
    assert generator.calls[0][1] == ("translate: hello",)


@pytest.mark.parametrize("path", ["/format", "/summarize"])
def test_uncached_endpoints(client, store, generator, path):
    """format and summarize ignore context and never touch storage."""
    response = client.get(path, params={"keyword": "some text", "context": "ignored"})

    assert response.status_code == 200
    assert response.json() == {"result": "你好"}
    assert "ignored" not in generator.calls[0][1][0]
    assert store.lookup_calls == []
    assert store.inserted == []


@pytest.mark.parametrize("path", ["/translate", "/format", "/summarize"])
def test_missing_keyword(client, generator, path):
    """A missing keyword is a 400 with an error body, before any backend call."""
    response = client.get(path)

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "BAD_REQUEST"
    assert "keyword" in response.json()["detail"]["message"]
    assert generator.calls == []


def test_oversized_parameter(client, store):
    response = client.get("/translate", params={"keyword": "x" * 1025})

    assert response.status_code == 400
    assert store.lookup_calls == []


def test_oversized_url(client, store):
    """Request targets past the URL limit are rejected before routing."""
    response = client.get("/translate", params={"keyword": "x", "context": "y" * 5000})

    assert response.status_code == 400
    assert response.json()["detail"]["details"] == {"max_length": 4096}
    assert store.lookup_calls == []


def test_storage_lookup_failure(client, store, generator):
    store.fail_lookup = True

    response = client.get("/translate", params={"keyword": "hello"})

    assert response.status_code == 500
    assert response.json()["detail"]["code"] == "STORAGE_ERROR"
    assert generator.calls == []


def test_storage_insert_failure_still_succeeds(client, store):
    store.fail_insert = True

    response = client.get("/translate", params={"keyword": "hello"})

    assert response.status_code == 200
    assert response.json() == {"result": "你好"}


def test_backend_unavailable(settings, store, metrics):
    generator = StubGenerator(error=GenerationUnavailableError())
    with make_client(settings, store, generator, metrics) as client:
        response = client.get("/translate", params={"keyword": "hello"})

    assert response.status_code == 503
    assert response.json()["detail"]["code"] == "GENERATION_UNAVAILABLE"
    assert store.inserted == []


def test_empty_generation(settings, store, metrics):
    generator = StubGenerator(error=EmptyGenerationError())
    with make_client(settings, store, generator, metrics) as client:
        response = client.get("/summarize", params={"keyword": "hello"})

    assert response.status_code == 500
    assert response.json()["detail"]["code"] == "EMPTY_GENERATION"


def test_api_endpoint_selects_operation(client, generator):
    response = client.get("/api", params={"operation": "summarize", "keyword": "long text"})

    assert response.status_code == 200
    assert generator.calls[0][1] == ("summarize: long text",)


def test_api_endpoint_caches_translate(client, generator):
    params = {"operation": "translate", "keyword": "hello", "context": "greeting"}

    client.get("/api", params=params)
    client.get("/translate", params={"keyword": "hello", "context": "greeting"})

    assert len(generator.calls) == 1


@pytest.mark.parametrize("operation", ["transliterate", ""])
def test_api_endpoint_invalid_operation(client, generator, operation):
    response = client.get("/api", params={"operation": operation, "keyword": "hello"})

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "INVALID_OPERATION"
    assert generator.calls == []


def test_rate_limit(settings, store, generator, metrics):
    """With burst 2 and a negligible refill, the third request is rejected."""
    limited = replace(settings, rate_limit_enabled=True)
    limiter = TokenBucketRateLimiter(rate=0.001, burst=2)

    with make_client(limited, store, generator, metrics, rate_limiter=limiter) as client:
        statuses = [
            client.get("/translate", params={"keyword": "hello"}).status_code for _ in range(3)
        ]
        rejected = client.get("/format", params={"keyword": "hello"})

    assert statuses == [200, 200, 429]
    assert rejected.status_code == 429
    assert rejected.json()["detail"]["code"] == "RATE_LIMITED"


def test_rate_limit_rejects_before_validation(settings, store, generator, metrics):
    """Rejected requests never reach validation, storage or the backend."""
    limited = replace(settings, rate_limit_enabled=True)
    limiter = TokenBucketRateLimiter(rate=0.001, burst=1)

    with make_client(limited, store, generator, metrics, rate_limiter=limiter) as client:
        client.get("/translate", params={"keyword": "hello"})
        response = client.get("/translate")

    assert response.status_code == 429
    assert store.lookup_calls == [("hello", "")]


def test_health_is_not_rate_limited(settings, store, generator, metrics):
    limited = replace(settings, rate_limit_enabled=True)
    limiter = TokenBucketRateLimiter(rate=0.001, burst=1)

    with make_client(limited, store, generator, metrics, rate_limiter=limiter) as client:
        statuses = [client.get("/health").status_code for _ in range(3)]

    assert statuses == [200, 200, 200]


def test_lifespan_closes_resources(settings, store, generator, metrics):
    with make_client(settings, store, generator, metrics) as client:
        client.get("/")
        assert not store.closed

    assert store.closed
    assert generator.closed
