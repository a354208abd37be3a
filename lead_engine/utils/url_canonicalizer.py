"""URL and domain canonicalization utilities for discovery dedup."""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import urlsplit, urlunsplit


def canonicalize_url(raw_url: str, default_scheme: str = "https") -> str:
    """Return a normalized, deterministic URL for deduping.

    Rules:
    - Add a default scheme when missing.
    - Lowercase scheme/host.
    - Drop query/params/fragment.
    - Remove default ports (80/443) and collapse duplicate slashes.
    - Normalize path to a stable representation without trailing slash (except root).
    """
    if not raw_url or not raw_url.strip():
        raise ValueError("empty_url")

    url_text = raw_url.strip()
    parsed = urlsplit(url_text)

    # Handle bare hosts without scheme (e.g., example.com/path)
    if not parsed.scheme and not parsed.netloc and parsed.path:
        parsed = urlsplit(f"{default_scheme}://{url_text}")

    scheme = (parsed.scheme or default_scheme).lower()
    host = (parsed.hostname or "").lower()
    if not host or "." not in host:
        raise ValueError("invalid_host")

    port = parsed.port
    netloc = host
    if port and not (scheme == "http" and port == 80) and not (scheme == "https" and port == 443):
        netloc = f"{host}:{port}"

    path = re.sub(r"/+", "/", parsed.path or "/")
    if not path.startswith("/"):
        path = f"/{path}"
    if path != "/":
        path = path.rstrip("/") or "/"

    return urlunsplit((scheme, netloc, path, "", ""))


def normalize_domain(value: Optional[str]) -> Optional[str]:
    """Reduce a URL or bare host to a dedup domain: lowercase, no ``www.``, no port.

    Returns None when nothing host-like can be recovered.
    """
    if not value or not str(value).strip():
        return None
    try:
        canonical = canonicalize_url(str(value))
    except ValueError:
        return None
    host = urlsplit(canonical).hostname or ""
    if host.startswith("www."):
        host = host[4:]
    return host or None


def derive_domain(domain: Optional[str], website: Optional[str]) -> Optional[str]:
    """Prefer the stored domain, otherwise derive one from the website URL."""
    return normalize_domain(domain) or normalize_domain(website)


def domain_matches(domain: Optional[str], candidates) -> bool:
    """True when ``domain`` equals, or is a subdomain of, any candidate domain."""
    if not domain:
        return False
    for candidate in candidates:
        candidate = (candidate or "").strip().lower()
        if not candidate:
            continue
        if domain == candidate or domain.endswith("." + candidate):
            return True
    return False


def url_path(url: str) -> str:
    try:
        return urlsplit(canonicalize_url(url)).path.lower()
    except ValueError:
        return ""
