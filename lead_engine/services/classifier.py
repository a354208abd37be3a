"""
Employer entity classification, industry inference and display-name extraction.

All functions are pure over (inputs, EngineConfig, PatternTables) and never
raise on malformed pages: anything unverifiable resolves to a rejection.
"""

import html as html_lib
import re
from dataclasses import dataclass, field
from typing import List, Optional

from bs4 import BeautifulSoup

from lead_engine.core.tables import PatternTables
from lead_engine.schemas.engine_config import EngineConfig
from lead_engine.utils.company_names import canonical_company_name, clean_page_title
from lead_engine.utils.url_canonicalizer import domain_matches, url_path

EMPLOYER = "employer"
EXCLUDED_VENDOR = "excluded_vendor"
EXCLUDED_EDU = "excluded_edu"
EXCLUDED_GOV = "excluded_gov"
EXCLUDED_GENERIC = "excluded_generic"

_ORG_NAME = re.compile(
    r"\"@type\"\s*:\s*\"(?:Organization|Corporation|LocalBusiness|MedicalOrganization|[A-Za-z]*Business)\""
    r"[^{}]{0,400}?\"name\"\s*:\s*\"([^\"]{2,120})\"",
    re.I | re.S,
)
_ORG_NAME_FIRST = re.compile(
    r"\"name\"\s*:\s*\"([^\"]{2,120})\"[^{}]{0,400}?"
    r"\"@type\"\s*:\s*\"(?:Organization|Corporation|LocalBusiness|MedicalOrganization|[A-Za-z]*Business)\"",
    re.I | re.S,
)
_SITE_NAME = re.compile(
    r"<meta[^>]+(?:property|name)=[\"'](?:og:site_name|application-name)[\"'][^>]*content=[\"']([^\"']{2,120})[\"']",
    re.I,
)
_SITE_NAME_REVERSED = re.compile(
    r"<meta[^>]+content=[\"']([^\"']{2,120})[\"'][^>]*(?:property|name)=[\"'](?:og:site_name|application-name)[\"']",
    re.I,
)
_TITLE_TAG = re.compile(r"<title[^>]*>(.*?)</title>", re.I | re.S)


@dataclass
class ClassificationResult:
    outcome: str
    reason: Optional[str] = None
    evidence: List[str] = field(default_factory=list)

    @property
    def is_employer(self) -> bool:
        return self.outcome == EMPLOYER


def page_text(raw: str) -> str:
    """Visible text of an HTML page; markdown or plain text passes through."""
    if not raw:
        return ""
    if "<" not in raw or ">" not in raw:
        return " ".join(raw.split())
    soup = BeautifulSoup(raw, "html.parser")
    for element in soup(["script", "style", "noscript", "svg", "template"]):
        element.decompose()
    return " ".join(soup.get_text(" ").split())


def extract_display_name(raw: str, fallback_title: str = "") -> Optional[str]:
    """Organization metadata name, then site-name meta tag, then cleaned page title."""
    if raw:
        for pattern in (_ORG_NAME, _ORG_NAME_FIRST, _SITE_NAME, _SITE_NAME_REVERSED):
            match = pattern.search(raw)
            if match:
                name = html_lib.unescape(match.group(1)).strip()
                if name:
                    return name
        title_match = _TITLE_TAG.search(raw)
        if title_match:
            title = clean_page_title(html_lib.unescape(title_match.group(1)))
            if title:
                return title
    title = clean_page_title(fallback_title)
    return title or None


def is_generic_domain(domain: Optional[str], tables: PatternTables) -> bool:
    return domain_matches(domain, tables.generic_domains)


def is_news_domain(domain: Optional[str], tables: PatternTables) -> bool:
    return domain_matches(domain, tables.news_domains)


def is_document_url(url: str, tables: PatternTables) -> bool:
    return url_path(url).endswith(tables.document_extensions)


def is_article_url(url: str, tables: PatternTables) -> bool:
    """Article/resource path that is not also a careers/about/contact path."""
    path = url_path(url)
    return bool(tables.article_path.search(path)) and not tables.site_path.search(path)


def employer_evidence(name: str, raw: str, text: str, tables: PatternTables) -> List[str]:
    evidence: List[str] = []
    if raw and tables.org_metadata.search(raw):
        evidence.append("org_metadata")
    if name and tables.legal_suffix.search(name.strip()):
        evidence.append("legal_suffix")
    for key, pattern in tables.verification_patterns.items():
        if pattern.search(text):
            evidence.append(key)
    return evidence


def classify_entity(
    name: str,
    domain: Optional[str],
    raw: str,
    config: EngineConfig,
    tables: PatternTables,
    text: Optional[str] = None,
) -> ClassificationResult:
    """Decide whether a fetched page is a legitimate in-scope employer.

    Precedence: blacklist, carrier and other exclusion rules, .edu/.gov handling,
    generic domains, then the page-quality gate (length, listicle templates,
    minimum employer evidence).
    """
    name = name or ""
    domain = (domain or "").lower() or None
    text = page_text(raw) if text is None else text
    canonical = canonical_company_name(name)

    if domain_matches(domain, config.blacklist_domains):
        return ClassificationResult(EXCLUDED_VENDOR, "blacklist_domain")
    blacklisted_names = {canonical_company_name(n) for n in config.blacklist_names}
    if canonical and canonical in blacklisted_names:
        return ClassificationResult(EXCLUDED_VENDOR, "blacklist_name")

    name_blob = f"{name} {domain or ''}"
    for rule in tables.exclusion_rules:
        if rule.allow_toggle and getattr(config, rule.allow_toggle, False):
            continue
        haystack = name_blob if rule.scope == "name" else text
        if rule.pattern.search(haystack):
            return ClassificationResult(rule.outcome, f"{rule.scope}_pattern")

    if domain and domain.endswith(".edu") and not config.allow_edu:
        return ClassificationResult(EXCLUDED_EDU, "edu_domain")
    if domain and domain.endswith(".gov") and not config.allow_gov:
        return ClassificationResult(EXCLUDED_GOV, "gov_domain")

    if is_generic_domain(domain, tables) or is_news_domain(domain, tables):
        return ClassificationResult(EXCLUDED_GENERIC, "generic_domain")

    if len(text) < tables.min_page_text_chars:
        return ClassificationResult(EXCLUDED_GENERIC, "page_too_short")

    head = f"{name} {text[:600]}"
    for pattern in tables.template_patterns:
        if pattern.search(head):
            return ClassificationResult(EXCLUDED_GENERIC, "template_page")

    evidence = employer_evidence(name, raw, text, tables)
    if len(evidence) < 2:
        return ClassificationResult(EXCLUDED_GENERIC, "unverified_employer", evidence)

    return ClassificationResult(EMPLOYER, None, evidence)


def infer_industry(name: str, domain: Optional[str], text: str, tables: PatternTables) -> Optional[str]:
    """First matching row of the industry table, or None.

    Name and domain are tried before the page lead, and the lead before the
    full text, so a passing mention deep in a page cannot outrank identity.
    """
    text = text or ""
    for blob in (f"{name or ''} {domain or ''}", text[:2000], text):
        for pattern, key in tables.industry_patterns:
            if pattern.search(blob):
                return key
    return None
