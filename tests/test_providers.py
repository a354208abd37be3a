"""Search and fetch providers with an injected HTTP requester."""

import asyncio

import httpx
import pytest

from lead_engine.core.config import Settings
from lead_engine.errors import ProviderConfigError, ProviderError
from lead_engine.services.providers import (
    FirecrawlFetchProvider,
    FirecrawlSearchProvider,
    GoogleSearchProvider,
    HttpFetchProvider,
    build_fetch_provider,
    build_search_provider,
)


pytestmark = pytest.mark.unit


class RecordingRequester:
    def __init__(self, status=200, payload=None, exc=None):
        self.status = status
        self.payload = payload
        self.exc = exc
        self.calls = []

    async def __call__(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        if self.exc is not None:
            raise self.exc
        return self.status, self.payload


def make_settings(**overrides):
    values = dict(
        DATABASE_URL="postgresql+asyncpg://u:p@localhost/db",
        FIRECRAWL_API_KEY=None,
        GOOGLE_CSE_API_KEY=None,
        GOOGLE_CSE_CX=None,
        DISCOVERY_DIRECT_FETCH=False,
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


def test_firecrawl_search_parses_results():
    requester = RecordingRequester(
        payload={"data": [{"url": "https://acme.com", "title": "Acme"}, {"url": ""}, {"url": "https://b.com"}]}
    )
    provider = FirecrawlSearchProvider("key", "https://api.example.dev/v1/", requester)

    results = asyncio.run(provider.search("boston biotech", 5, 10.0))

    assert [r.url for r in results] == ["https://acme.com", "https://b.com"]
    method, url, kwargs = requester.calls[0]
    assert (method, url) == ("POST", "https://api.example.dev/v1/search")
    assert kwargs["headers"]["Authorization"] == "Bearer key"
    assert kwargs["json_body"] == {"query": "boston biotech", "limit": 5}


def test_google_search_clamps_page_size():
    requester = RecordingRequester(payload={"items": [{"link": "https://acme.com", "snippet": "Acme makes things"}]})
    provider = GoogleSearchProvider("key", "cx-1", requester)

    results = asyncio.run(provider.search("acme", 25, 10.0))

    assert results[0].description == "Acme makes things"
    assert requester.calls[0][2]["params"]["num"] == 10


def test_firecrawl_fetch_prefers_html():
    requester = RecordingRequester(
        payload={"data": {"html": "<html>hi</html>", "markdown": "hi", "metadata": {"title": "Acme"}}}
    )
    provider = FirecrawlFetchProvider("key", "https://api.example.dev/v1", requester)

    page = asyncio.run(provider.fetch("acme.com/about/", 10.0))

    assert page.url == "https://acme.com/about"
    assert page.content == "<html>hi</html>"
    assert page.title == "Acme"


def test_non_2xx_raises_provider_error():
    provider = HttpFetchProvider(RecordingRequester(status=503, payload="down"))
    with pytest.raises(ProviderError) as excinfo:
        asyncio.run(provider.fetch("https://acme.com", 5.0))
    assert excinfo.value.status_code == 503


def test_transport_errors_become_provider_errors():
    provider = HttpFetchProvider(RecordingRequester(exc=httpx.ConnectTimeout("slow")))
    with pytest.raises(ProviderError, match="timeout"):
        asyncio.run(provider.fetch("https://acme.com", 5.0))

    provider = HttpFetchProvider(RecordingRequester(exc=httpx.ConnectError("refused")))
    with pytest.raises(ProviderError, match="transport error"):
        asyncio.run(provider.fetch("https://acme.com", 5.0))


def test_provider_selection_from_settings():
    assert isinstance(build_search_provider(make_settings(FIRECRAWL_API_KEY="k")), FirecrawlSearchProvider)
    google = make_settings(GOOGLE_CSE_API_KEY="k", GOOGLE_CSE_CX="cx")
    assert isinstance(build_search_provider(google), GoogleSearchProvider)
    assert isinstance(build_fetch_provider(make_settings(DISCOVERY_DIRECT_FETCH=True)), HttpFetchProvider)


def test_missing_credentials_raise_config_error():
    with pytest.raises(ProviderConfigError) as excinfo:
        build_search_provider(make_settings(GOOGLE_CSE_API_KEY="k"))
    assert excinfo.value.provider == "search"
    with pytest.raises(ProviderConfigError):
        build_fetch_provider(make_settings())
