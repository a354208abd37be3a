"""Rotating discovery themes, geography terms and query templates."""

# Keyed by datetime.weekday(): Monday = 0 ... Sunday = 6
DAY_THEMES = {
    0: {
        "key": "biotech_life_sciences",
        "label": "Life Sciences / Biotech",
        "industries": ["biotech", "life sciences", "pharmaceuticals", "genomics"],
        "sub_sectors": [
            "gene therapy", "contract research", "diagnostics", "clinical trials", "drug discovery",
            "biologics", "mRNA", "cell therapy", "precision medicine", "bioinformatics", "proteomics",
            "immunotherapy", "reagents",
        ],
    },
    1: {
        "key": "tech_pst",
        "label": "Tech / SaaS",
        "industries": ["technology", "SaaS", "software", "IT services"],
        "sub_sectors": [
            "cybersecurity", "fintech", "edtech", "healthtech", "proptech", "martech", "cloud infrastructure",
            "AI platform", "data analytics", "DevOps", "enterprise software", "B2B SaaS", "robotics software",
        ],
    },
    2: {
        "key": "advanced_mfg_med_devices",
        "label": "Manufacturing / Med Devices",
        "industries": ["manufacturing", "medical devices", "precision engineering"],
        "sub_sectors": [
            "medtech engineering", "CNC machining", "injection molding", "electronics manufacturing",
            "defense contractor", "aerospace parts", "semiconductor equipment", "industrial automation",
            "additive manufacturing", "quality systems",
        ],
    },
    3: {
        "key": "healthcare_social_assistance",
        "label": "Healthcare / Clinics / Providers",
        "industries": ["healthcare", "clinics", "medical providers", "behavioral health"],
        "sub_sectors": [
            "urgent care", "dental group", "physical therapy", "home health", "mental health", "hospice",
            "primary care network", "community health center", "surgical center", "telehealth",
        ],
    },
    4: {
        "key": "professional_services",
        "label": "Professional Services / Financial Services",
        "industries": ["professional services", "consulting", "financial services"],
        "sub_sectors": [
            "accounting firm", "law firm", "staffing agency", "marketing agency", "wealth management",
            "architecture firm", "engineering consulting", "IT consulting", "management consulting",
        ],
    },
    5: {
        "key": "hiring_sweep",
        "label": "Hiring Velocity Sweep",
        "industries": ["company"],
        "sub_sectors": [
            "rapid growth", "scaling company", "talent acquisition", "workforce expansion", "new office",
            "high growth startup",
        ],
    },
    6: {
        "key": "trigger_sweep",
        "label": "Leadership / Funding / Carrier Triggers",
        "industries": ["company"],
        "sub_sectors": [
            "executive transition", "funding round", "benefits renewal", "carrier change", "M&A activity",
        ],
    },
}

# Operator-facing industry keys for manual runs -> search terms
PANEL_INDUSTRIES = {
    "biotech_life_sciences": ["biotech", "life sciences"],
    "healthcare_social_assistance": ["healthcare", "clinic", "behavioral health"],
    "tech_pst": ["software", "SaaS", "technology"],
    "advanced_mfg_med_devices": ["manufacturing", "medical devices"],
    "professional_services": ["professional services", "consulting firm"],
    "financial_services": ["financial services", "wealth management"],
    "construction": ["construction", "general contractor"],
    "hospitality": ["hospitality", "hotel group"],
    "higher_ed_nonprofit": ["nonprofit", "education"],
}

PRIMARY_GEO_TERMS = [
    "Boston", "Cambridge", "Worcester", "Waltham", "Lowell", "Andover", "New Bedford", "Springfield",
    "North Shore MA", "South Shore MA", "Cape Cod", "Western Massachusetts", "Central Massachusetts",
    "Framingham", "Quincy", "Newton", "Somerville", "Brockton", "Needham", "Burlington MA",
    "Lexington MA", "Bedford MA", "Route 128 corridor", "MetroWest",
]

SECONDARY_GEO_TERMS = {
    "CT": ["Hartford CT", "New Haven CT", "Stamford CT"],
    "RI": ["Providence RI"],
    "ME": ["Portland ME"],
    "NH": ["Manchester NH", "Nashua NH"],
    "VT": ["Burlington VT"],
}

PRIMARY_MARKET_LABEL = "Massachusetts"

TRIGGER_KEYWORDS = {
    "funding": ["raises $", "Series A", "Series B", "funding round", "venture funding", "growth equity"],
    "hr_leader": ["Chief People Officer", "VP People", "CHRO", "VP Human Resources", "Head of People"],
    "csuite": ["new CEO", "new CFO", "new COO", "executive appointment", "names new CEO"],
    "carrier_change": ["switches benefits carrier", "benefits renewal", "new health plan"],
    "hiring": ["we're hiring", "open roles", "careers", "join our team", "now hiring", "job openings"],
    "pr_news": ["announces", "press release", "expands", "new location", "partnership", "acquisition"],
}

QUERY_TEMPLATES = [
    "{geo} {industry} company",
    "{geo} {subsector}",
    "Massachusetts {industry} {trigger}",
    "Boston MA {subsector} {trigger}",
    "HQ Massachusetts {industry}",
    "{industry} company careers MA",
    "{geo} {industry} about us",
    "{subsector} company {geo} contact",
    "{industry} {trigger} Massachusetts",
    "New England {subsector} company",
]

FILL_QUERY_TEMPLATES = [
    "{geo} {industry} company",
    "{industry} company headquartered in {geo}",
    "{geo} {industry} careers",
]
