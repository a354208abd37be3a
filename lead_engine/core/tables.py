"""
Declarative pattern tables for classification and signal extraction.

Each table is an ordered list of (pattern, outcome) pairs. Order is precedence:
the first matching row wins. Tables are compiled once into a PatternTables
object so the classifier and detector stay pure functions of (text, tables).
Bump TABLES_VERSION whenever a row changes; the version is stamped into run
summaries so a result can be traced back to the rules that produced it.
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Pattern

TABLES_VERSION = "2025.06.1"


# ---------------------------------------------------------------------------
# Industry inference (closed set)
# ---------------------------------------------------------------------------

INDUSTRY_LABELS = {
    "biotech_life_sciences": "Biotech & Life Sciences",
    "tech_pst": "Tech / Professional, Scientific & Technical",
    "advanced_mfg_med_devices": "Advanced Manufacturing & Medical Devices",
    "healthcare_social_assistance": "Healthcare & Social Assistance",
    "professional_services": "Professional Services",
    "financial_services": "Financial Services",
    "construction": "Construction & Trades",
    "hospitality": "Hospitality",
    "higher_ed_nonprofit": "Higher Education & Nonprofit",
    "cannabis": "Cannabis",
    "government": "Government",
}

INDUSTRY_PATTERNS = [
    (r"\b(cannabis|marijuana|dispensar(y|ies)|hemp|thc|cbd)\b", "cannabis"),
    (
        r"\b(biotech\w*|life\s*sciences?|pharma\w*|biopharma\w*|biolog(y|ics|ical)|genomics?|therapeutics"
        r"|drug discovery|gene therapy|cell therapy|clinical[- ]stage)\b",
        "biotech_life_sciences",
    ),
    (
        r"\b(manufactur\w*|medical devices?|med[- ]?tech|precision (machining|engineering)|aerospace"
        r"|defen[cs]e contractor|industrial automation|fabricat\w*|injection molding|cnc machining)\b",
        "advanced_mfg_med_devices",
    ),
    (
        r"\b(health\s*care|clinics?|home health|behavioral health|mental health|social (assistance|services?)"
        r"|elder\s*care|nursing|physical therapy|dental|hospice|urgent care|primary care)\b",
        "healthcare_social_assistance",
    ),
    (
        r"\b(software|saas|tech|technology|it services|information technology|cyber\s*security|cloud"
        r"|data analytics|fintech|edtech|computer|scientific (and|&) technical)\b",
        "tech_pst",
    ),
    (
        r"\b(consulting|consultancy|law firm|attorneys|accounting|cpa firm|staffing|marketing agency"
        r"|architecture firm|engineering firm|professional services)\b",
        "professional_services",
    ),
    (
        r"\b(bank|banking|credit union|wealth management|financial services|insurance (agency|brokerage)"
        r"|investment advis\w*)\b",
        "financial_services",
    ),
    (r"\b(construction|general contractor|builders?|hvac|plumbing|electrical contractor|roofing)\b", "construction"),
    (r"\b(hospitality|hotels?|restaurants?|catering|resorts?)\b", "hospitality"),
    (r"\b(municipal government|state agency|government agency|public sector agency|town hall)\b", "government"),
    (r"\b(higher ed\w*|university|college|non-?profit|foundation|education)\b", "higher_ed_nonprofit"),
]

# Fit points per industry. Unknown industries fall back to a configured floor.
INDUSTRY_SCORES = {
    "healthcare_social_assistance": 25,
    "biotech_life_sciences": 25,
    "tech_pst": 22,
    "advanced_mfg_med_devices": 22,
    "professional_services": 20,
    "financial_services": 18,
    "construction": 15,
    "higher_ed_nonprofit": 12,
    "hospitality": 10,
}

DEPRIORITIZED_INDUSTRIES = ("cannabis", "government")


# ---------------------------------------------------------------------------
# Entity exclusion rules, in precedence order.
# (pattern, outcome, scope, allow_toggle)
#   scope "name" matches against company name + domain, "text" against page text.
#   allow_toggle names the EngineConfig flag that disables the rule.
# ---------------------------------------------------------------------------

EXCLUSION_RULES = [
    (
        r"\b(blue cross|blue shield|bcbs|aetna|cigna|unitedhealth\w*|united ?healthcare|humana|anthem"
        r"|harvard pilgrim|tufts health plan|point32health|kaiser permanente|health plan|mutual insurance"
        r"|insurance carrier|life insurance company)\b",
        "excluded_vendor",
        "name",
        None,
    ),
    (
        r"\b(is|are) (a|an|the) (leading |regional |national )?(health )?(insurance carrier|health plan|health insurer)\b",
        "excluded_vendor",
        "text",
        None,
    ),
    (r"\b(hospitals?|medical center|health ?system|healthcare system)\b", "excluded_hospital", "name", "allow_hospital_systems"),
    (r"\b(academic medical center|teaching hospital|our hospitals)\b", "excluded_hospital", "text", "allow_hospital_systems"),
    (
        r"\b(research (institute|center|centre|labs?|laboratory)|laboratory (at|of)|institute of technology)\b",
        "excluded_research_lab",
        "name",
        "allow_university_research",
    ),
    (
        r"\b(university|college)\b.{0,40}\b(research (lab|labs|center|institute)|laboratory)\b",
        "excluded_research_lab",
        "text",
        "allow_university_research",
    ),
    (
        r"\b(association|chamber of commerce|council|accelerator|incubator|venture capital|ventures"
        r"|capital partners|job board|jobs board|consortium)\b",
        "excluded_ecosystem",
        "name",
        None,
    ),
    (
        r"\b(we are|we're) an? (trade association|industry association|startup accelerator|accelerator|incubator"
        r"|venture capital firm|job board)\b",
        "excluded_ecosystem",
        "text",
        None,
    ),
]

# Social, document, aggregator and spam domains: never employers.
GENERIC_DOMAINS = (
    "linkedin.com", "facebook.com", "twitter.com", "x.com", "instagram.com", "youtube.com", "tiktok.com",
    "pinterest.com", "reddit.com", "medium.com", "wikipedia.org", "crunchbase.com", "glassdoor.com",
    "indeed.com", "ziprecruiter.com", "monster.com", "simplyhired.com", "builtin.com", "builtinboston.com",
    "yelp.com", "bbb.org", "zoominfo.com", "dnb.com", "manta.com", "yellowpages.com", "mapquest.com",
    "opencorporates.com", "bizapedia.com", "owler.com", "craft.co", "rocketreach.co", "apollo.io",
    "docs.google.com", "drive.google.com", "scribd.com", "slideshare.net", "issuu.com", "dropbox.com",
    "github.com", "apps.apple.com", "play.google.com",
)

# News outlets and wire services: dropped before fetch.
NEWS_DOMAINS = (
    "bostonglobe.com", "bizjournals.com", "boston.com", "wbur.org", "masslive.com", "prnewswire.com",
    "businesswire.com", "globenewswire.com", "techcrunch.com", "forbes.com", "bloomberg.com", "reuters.com",
    "fiercebiotech.com", "patch.com", "nytimes.com", "wsj.com", "cnbc.com", "axios.com", "yahoo.com",
    "news.google.com",
)

DOCUMENT_EXTENSIONS = (".pdf", ".doc", ".docx", ".ppt", ".pptx", ".xls", ".xlsx", ".csv")

ARTICLE_PATH_PATTERN = (
    r"/(blog|news|articles?|insights|resources|press|stories|posts?|library|guides?|whitepapers?"
    r"|webinars?|events|lists?|rankings?)(/|$)"
)
SITE_PATH_PATTERN = r"/(careers?|jobs|about(-us)?|company|contact(-us)?|who-we-are)(/|$)"

TEMPLATE_PATTERNS = [
    r"\btop\s+\d+\s+\w*\s*(companies|employers|startups|firms|businesses|places)\b",
    r"\bbest places to work\b",
    r"\b\d+\s+(best|top|largest|fastest[- ]growing)\s+\w*\s*(companies|employers|startups|firms)\b",
    r"\blist of (companies|employers|businesses)\b",
    r"\b(largest|fastest[- ]growing) (companies|employers) in\b",
]

LEGAL_SUFFIX_PATTERN = r"\b(inc|incorporated|llc|l\.l\.c|corp|corporation|co|company|ltd|lp|llp|plc|pllc|pc|pa)\.?\s*$"

# Employer verification evidence; at least two must be present.
VERIFICATION_PATTERNS = {
    "about_section": r"\b(about (us|the company|our company)|our (story|mission|team)|who we are)\b",
    "contact_section": (
        r"\b(contact us|get in touch)\b|\b\d{1,5}\s+[A-Za-z0-9 .]{2,40}\s(street|st|avenue|ave|road|rd|boulevard"
        r"|blvd|drive|dr|way|lane|ln|place|pl|suite)\b|\b(phone|tel)\s*[:.]\s*\(?\d{3}"
    ),
    "careers_section": r"\b(careers|join our team|we['’]?re hiring|open positions|job openings|work with us)\b",
    "products_section": r"\b(our (products|services|solutions|platform)|products\s*(&|and)\s*services|what we do)\b",
}

ORG_METADATA_PATTERN = (
    r"\"@type\"\s*:\s*\"(Organization|Corporation|LocalBusiness|MedicalOrganization|[A-Za-z]*Business)\""
    r"|itemtype=\"https?://schema\.org/(Organization|Corporation|LocalBusiness)\""
)

MIN_PAGE_TEXT_CHARS = 400


# ---------------------------------------------------------------------------
# Signal detection
# ---------------------------------------------------------------------------

HIRING_COUNT_PATTERNS = [
    r"(\d{1,4})\+?\s*open\s*(positions|roles|jobs|openings)\b",
    r"(\d{1,4})\+?\s*(jobs|positions|roles) available\b",
]
HIRING_PHRASE_PATTERNS = [
    r"\bwe['’]?re hiring\b",
    r"\bnow hiring\b",
    r"\bjoin our (growing )?team\b",
    r"\bcareer opportunities\b",
    r"\bjob openings\b",
]
DEFAULT_HIRING_MAGNITUDE = 5

FUNDING_PATTERNS = [
    (r"\bseries\s+([a-e])\b", "series"),
    (r"\bseed (round|funding)\b", "Seed"),
    (r"\braised\s+\$\s?[\d,.]+\s*(million|billion|m|b)?\b", "Growth"),
    (r"\b(funding round|growth equity|venture funding|capital raise)\b", "Growth"),
    (r"\b(new office|new location|expanding to)\b", "Expansion"),
]
DEFAULT_FUNDING_MONTHS_AGO = 3

APPOINTMENT_PATTERN = (
    r"\b(appoint(s|ed)?|names?|named|hires?|hired|welcomes?|promot(es|ed)|join(s|ed)|announc(es|ed)"
    r"|new (hire|head|leader|chief|vp|vice president|director|controller|ceo|cfo|coo|chro))\b"
)
APPOINTMENT_WINDOW = 80

HR_LEADER_PATTERN = (
    r"\b(chief people officer|chief human resources officer|chro|head of (people|hr|human resources|talent)"
    r"|vp,? (of )?(people|human resources|hr|finance)|vice president,? (of )?(people|human resources|finance)"
    r"|director of (hr|human resources|people operations|benefits|total rewards|finance)|controller)\b"
)
DEFAULT_LEADERSHIP_DAYS_AGO = 30

# Title or department words that make a leadership change count toward timing
ROLE_CHANGE_KEYWORD_PATTERN = (
    r"\b(hr|chro|human resources|benefits|people ops|people operations|people|finance|financial"
    r"|controller|payroll|total rewards|talent)\b"
)

CSUITE_PATTERN = (
    r"\b(ceo|cfo|coo|cto|cio|cmo|chief (executive|financial|operating|technology|information|marketing) officer)\b"
)
CSUITE_ROLE_ALIASES = {
    "chief executive officer": "CEO",
    "chief financial officer": "CFO",
    "chief operating officer": "COO",
    "chief technology officer": "CTO",
    "chief information officer": "CIO",
    "chief marketing officer": "CMO",
}

PRESS_PATTERN = r"\b(press release|for immediate release|today announced|announces|announced)\b"
NEWS_EVENT_PATTERN = r"\b(acquisition|acquires|acquired|merger|partnership|expands|expansion|opens|new location)\b"


@dataclass(frozen=True)
class ExclusionRule:
    pattern: Pattern
    outcome: str
    scope: str
    allow_toggle: Optional[str]


@dataclass(frozen=True)
class PatternTables:
    """Compiled, immutable view of the pattern tables."""

    version: str
    industry_patterns: tuple
    exclusion_rules: tuple
    generic_domains: tuple
    news_domains: tuple
    document_extensions: tuple
    article_path: Pattern
    site_path: Pattern
    template_patterns: tuple
    legal_suffix: Pattern
    verification_patterns: dict
    org_metadata: Pattern
    min_page_text_chars: int
    hiring_count_patterns: tuple
    hiring_phrase_patterns: tuple
    funding_patterns: tuple
    appointment: Pattern
    hr_leader: Pattern
    csuite: Pattern
    press: Pattern
    news_event: Pattern


def _c(pattern: str) -> Pattern:
    return re.compile(pattern, re.IGNORECASE)


@lru_cache(maxsize=1)
def load_pattern_tables() -> PatternTables:
    """Compile the module tables once per process."""
    return PatternTables(
        version=TABLES_VERSION,
        industry_patterns=tuple((_c(p), key) for p, key in INDUSTRY_PATTERNS),
        exclusion_rules=tuple(
            ExclusionRule(_c(p), outcome, scope, toggle) for p, outcome, scope, toggle in EXCLUSION_RULES
        ),
        generic_domains=GENERIC_DOMAINS,
        news_domains=NEWS_DOMAINS,
        document_extensions=DOCUMENT_EXTENSIONS,
        article_path=_c(ARTICLE_PATH_PATTERN),
        site_path=_c(SITE_PATH_PATTERN),
        template_patterns=tuple(_c(p) for p in TEMPLATE_PATTERNS),
        legal_suffix=_c(LEGAL_SUFFIX_PATTERN),
        verification_patterns={key: _c(p) for key, p in VERIFICATION_PATTERNS.items()},
        org_metadata=_c(ORG_METADATA_PATTERN),
        min_page_text_chars=MIN_PAGE_TEXT_CHARS,
        hiring_count_patterns=tuple(_c(p) for p in HIRING_COUNT_PATTERNS),
        hiring_phrase_patterns=tuple(_c(p) for p in HIRING_PHRASE_PATTERNS),
        funding_patterns=tuple((_c(p), stage) for p, stage in FUNDING_PATTERNS),
        appointment=_c(APPOINTMENT_PATTERN),
        hr_leader=_c(HR_LEADER_PATTERN),
        csuite=_c(CSUITE_PATTERN),
        press=_c(PRESS_PATTERN),
        news_event=_c(NEWS_EVENT_PATTERN),
    )
