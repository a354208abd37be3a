"""Unit tests for headquarters geography resolution and region bucketing."""

import pytest

from lead_engine.services.classifier import page_text
from lead_engine.services.geography import normalize_state, region_bucket, resolve_geography, resolve_page_geography


pytestmark = pytest.mark.unit


def test_structured_address_wins():
    raw = '{"@type":"PostalAddress","addressLocality":"Waltham","addressRegion":"Massachusetts","addressCountry":"US"}'
    geo = resolve_geography(raw + " Offices in Hartford, CT")
    assert geo.state == "MA"
    assert geo.city == "Waltham"
    assert geo.method == "structured"


def test_city_state_pattern():
    geo = resolve_geography("Visit us at 12 Main Street, Portsmouth, NH 03801")
    assert geo.state == "NH"
    assert geo.city.endswith("Portsmouth")
    assert geo.method == "city_state"


def test_full_state_name_fallback():
    geo = resolve_geography("Proudly headquartered in Rhode Island since 1998")
    assert geo.state == "RI"
    assert geo.method == "state_name"


def test_foreign_country_is_not_operating_country():
    raw = '"addressRegion":"ON","addressCountry":"Canada"'
    geo = resolve_geography(raw)
    assert not geo.resolved
    assert not geo.in_operating_country


def test_unresolved_page_is_empty_result():
    geo = resolve_geography("no address here")
    assert not geo.resolved
    assert geo.in_operating_country
    assert resolve_geography("").state is None


def test_region_buckets():
    assert region_bucket("MA") == "primary"
    assert region_bucket("massachusetts") == "primary"
    assert region_bucket("VT") == "secondary"
    assert region_bucket("NY") == "other"
    assert region_bucket(None) == "other"
    assert normalize_state("New Hampshire") == "NH"
    assert normalize_state("ZZ") is None


def test_page_geography_reads_visible_text_only():
    html = (
        "<html><head><style>body{font-family: Georgia, serif}</style>"
        "<script>var branch = 'Austin, TX';</script></head>"
        "<body><p>10 Main Street, Boston, Massachusetts 02110</p></body></html>"
    )
    geo = resolve_page_geography(html, page_text(html))
    assert (geo.state, geo.city, geo.method) == ("MA", "Boston", "state_name")

    structured = '<script type="application/ld+json">{"addressRegion":"NH","addressLocality":"Nashua"}</script>'
    geo = resolve_page_geography(structured, page_text(structured))
    assert (geo.state, geo.city, geo.method) == ("NH", "Nashua", "structured")
