"""
Shared fixtures for the text cache test suite.
"""

import pytest

from fakes import InMemoryCacheStore, StubGenerator
from textcache.config import Settings
from textcache.metrics import Metrics


@pytest.fixture
def settings():
    """Settings with deterministic prompts and rate limiting disabled."""
    return Settings(
        llm_api_key="test-key",
        llm_base_url="http://llm.test/v1",
        llm_model="test-model",
        llm_timeout=5.0,
        prompt_system="SYSTEM",
        prompt_translate="translate: {}",
        prompt_translate_on_context="context: {} | keyword: {}",
        prompt_format="format: {}",
        prompt_summarize="summarize: {}",
        rate_limit_enabled=False,
        max_param_length=1024,
        max_url_length=4096,
    )


@pytest.fixture
def store():
    return InMemoryCacheStore()


@pytest.fixture
def generator():
    return StubGenerator(result="你好")


@pytest.fixture
def metrics():
    return Metrics()
