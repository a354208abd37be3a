"""
Search and fetch collaborators for discovery.

Search: query -> [SearchResult]. Fetch: url -> FetchedPage. Both are async,
take an explicit timeout, and raise ProviderError on transport failures or
non-2xx responses so the orchestrator can count and skip them. The HTTP call
is injectable (``requester``) so tests never touch the network.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Optional, Tuple

import httpx

from lead_engine.core.config import Settings
from lead_engine.errors import ProviderConfigError, ProviderError
from lead_engine.utils.url_canonicalizer import canonicalize_url

logger = logging.getLogger(__name__)

USER_AGENT = "lead-engine/0.1 (+discovery)"

# (method, url, json_body, params, headers, timeout) -> (status, payload)
Requester = Callable[..., Awaitable[Tuple[int, Any]]]


@dataclass
class SearchResult:
    url: str
    title: str = ""
    description: str = ""


@dataclass
class FetchedPage:
    url: str
    content: str
    title: str = ""


async def http_request(
    method: str,
    url: str,
    *,
    json_body: Optional[dict] = None,
    params: Optional[dict] = None,
    headers: Optional[dict] = None,
    timeout: float = 20.0,
    expect_json: bool = True,
) -> Tuple[int, Any]:
    """Single HTTP call; returns (status, parsed JSON or text)."""
    async with httpx.AsyncClient(timeout=httpx.Timeout(timeout), follow_redirects=True) as client:
        resp = await client.request(method, url, json=json_body, params=params, headers=headers)
    if not expect_json:
        return resp.status_code, resp.text
    try:
        return resp.status_code, resp.json()
    except ValueError:
        return resp.status_code, {"text": resp.text}


class SearchProvider:
    key: str

    async def search(self, query: str, limit: int, timeout: float) -> List[SearchResult]:  # pragma: no cover - interface
        raise NotImplementedError


class FetchProvider:
    key: str

    async def fetch(self, url: str, timeout: float) -> FetchedPage:  # pragma: no cover - interface
        raise NotImplementedError


class _ProviderBase:
    key = "provider"

    def __init__(self, requester: Optional[Requester] = None):
        self.requester = requester or http_request

    async def _call(self, method: str, url: str, **kwargs) -> Any:
        try:
            status, payload = await self.requester(method, url, **kwargs)
        except httpx.TimeoutException as exc:
            raise ProviderError(self.key, f"timeout: {url}") from exc
        except httpx.HTTPError as exc:
            raise ProviderError(self.key, f"transport error: {exc.__class__.__name__}") from exc
        if status < 200 or status >= 300:
            raise ProviderError(self.key, f"HTTP {status}", status_code=status)
        return payload


class FirecrawlSearchProvider(_ProviderBase, SearchProvider):
    key = "firecrawl_search"

    def __init__(self, api_key: str, base_url: str, requester: Optional[Requester] = None):
        super().__init__(requester)
        self.api_key = api_key
        self.endpoint = f"{base_url.rstrip('/')}/search"

    async def search(self, query: str, limit: int, timeout: float) -> List[SearchResult]:
        payload = await self._call(
            "POST",
            self.endpoint,
            json_body={"query": query, "limit": limit},
            headers={"Authorization": f"Bearer {self.api_key}"},
            timeout=timeout,
        )
        items = payload.get("data") or [] if isinstance(payload, dict) else []
        results: List[SearchResult] = []
        for item in items[:limit]:
            url = str(item.get("url") or "").strip()
            if url:
                results.append(
                    SearchResult(url=url, title=item.get("title") or "", description=item.get("description") or "")
                )
        return results


class GoogleSearchProvider(_ProviderBase, SearchProvider):
    """Google Custom Search JSON API."""

    key = "google_cse"
    endpoint = "https://www.googleapis.com/customsearch/v1"

    def __init__(self, api_key: str, cx: str, requester: Optional[Requester] = None):
        super().__init__(requester)
        self.api_key = api_key
        self.cx = cx

    async def search(self, query: str, limit: int, timeout: float) -> List[SearchResult]:
        params = {"q": query, "num": max(1, min(limit, 10)), "key": self.api_key, "cx": self.cx, "gl": "us"}
        payload = await self._call("GET", self.endpoint, params=params, timeout=timeout)
        items = payload.get("items") or [] if isinstance(payload, dict) else []
        results: List[SearchResult] = []
        for item in items[:limit]:
            url = str(item.get("link") or "").strip()
            if url:
                results.append(
                    SearchResult(url=url, title=item.get("title") or "", description=item.get("snippet") or "")
                )
        return results


class FirecrawlFetchProvider(_ProviderBase, FetchProvider):
    key = "firecrawl_scrape"

    def __init__(self, api_key: str, base_url: str, requester: Optional[Requester] = None):
        super().__init__(requester)
        self.api_key = api_key
        self.endpoint = f"{base_url.rstrip('/')}/scrape"

    async def fetch(self, url: str, timeout: float) -> FetchedPage:
        target = canonicalize_url(url)
        payload = await self._call(
            "POST",
            self.endpoint,
            # html keeps JSON-LD and meta tags for classification and geography
            json_body={"url": target, "formats": ["html", "markdown"], "onlyMainContent": False},
            headers={"Authorization": f"Bearer {self.api_key}"},
            timeout=timeout,
        )
        data = payload.get("data") or {} if isinstance(payload, dict) else {}
        content = data.get("html") or data.get("markdown") or ""
        metadata = data.get("metadata") or {}
        return FetchedPage(url=target, content=content, title=metadata.get("title") or "")


class HttpFetchProvider(_ProviderBase, FetchProvider):
    """Direct page fetch, used when no scraping service is configured."""

    key = "http_fetch"

    async def fetch(self, url: str, timeout: float) -> FetchedPage:
        target = canonicalize_url(url)
        content = await self._call(
            "GET",
            target,
            headers={"User-Agent": USER_AGENT},
            timeout=timeout,
            expect_json=False,
        )
        return FetchedPage(url=target, content=content if isinstance(content, str) else "")


def build_search_provider(settings: Settings, requester: Optional[Requester] = None) -> SearchProvider:
    """Firecrawl when keyed, else Google CSE; ProviderConfigError when neither is configured."""
    if settings.FIRECRAWL_API_KEY:
        return FirecrawlSearchProvider(settings.FIRECRAWL_API_KEY, settings.FIRECRAWL_BASE_URL, requester)
    if settings.GOOGLE_CSE_API_KEY and settings.GOOGLE_CSE_CX:
        return GoogleSearchProvider(settings.GOOGLE_CSE_API_KEY, settings.GOOGLE_CSE_CX, requester)
    raise ProviderConfigError("search", ["FIRECRAWL_API_KEY", "GOOGLE_CSE_API_KEY/GOOGLE_CSE_CX"])


def build_fetch_provider(settings: Settings, requester: Optional[Requester] = None) -> FetchProvider:
    if settings.FIRECRAWL_API_KEY:
        return FirecrawlFetchProvider(settings.FIRECRAWL_API_KEY, settings.FIRECRAWL_BASE_URL, requester)
    if settings.DISCOVERY_DIRECT_FETCH:
        return HttpFetchProvider(requester)
    raise ProviderConfigError("fetch", ["FIRECRAWL_API_KEY", "DISCOVERY_DIRECT_FETCH"])
