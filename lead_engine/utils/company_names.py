"""Company name normalization used for account dedup."""

import re

_LEGAL_SUFFIX = re.compile(
    r"(,?\s+(inc|incorporated|llc|co|corp|corporation|ltd|lp|llp|plc|pllc|pc|pa|dba|group|holdings|enterprises)\.?)+\s*$",
    re.IGNORECASE,
)
_TITLE_CHROME = re.compile(
    r"\s*[-–—|:·]\s*(home|homepage|welcome|official site|official website|about us|careers|contact us)?\s*$",
    re.IGNORECASE,
)


def canonical_company_name(name: str) -> str:
    """Strip legal suffixes and punctuation, collapse whitespace, lowercase."""
    if not name:
        return ""
    stripped = _LEGAL_SUFFIX.sub("", name.strip())
    stripped = re.sub(r"[^a-zA-Z0-9\s]", "", stripped)
    return re.sub(r"\s+", " ", stripped).strip().lower()


def normalize_title(title: str) -> str:
    """Normalize a page/search title for loose comparison against account names."""
    if not title:
        return ""
    first = re.split(r"\s+[-–—|:·]\s+", title.strip())[0]
    return canonical_company_name(first)


def clean_page_title(title: str, max_length: int = 80) -> str:
    """Drop trailing site chrome ("| Home", "- Careers") and truncate to a sane length."""
    cleaned = " ".join((title or "").split())
    previous = None
    while previous != cleaned:
        previous = cleaned
        cleaned = _TITLE_CHROME.sub("", cleaned).strip()
    parts = re.split(r"\s+[-–—|·]\s+", cleaned)
    if len(parts) > 1:
        cleaned = min(parts, key=len) if len(parts[0]) > 40 else parts[0]
    if len(cleaned) > max_length:
        cleaned = cleaned[:max_length].rsplit(" ", 1)[0]
    return cleaned.strip()


def _trigrams(value: str) -> set:
    return {value[i:i + 3] for i in range(len(value) - 2)}


def fuzzy_match(a: str, b: str) -> float:
    """Jaccard similarity on character trigrams, 0..1."""
    if a == b:
        return 1.0
    ta, tb = _trigrams(a), _trigrams(b)
    if not ta and not tb:
        return 1.0
    intersection = len(ta & tb)
    return intersection / (len(ta) + len(tb) - intersection)
