"""Unit tests for employer classification and industry inference."""

import pytest

from fakes import FILLER, employer_page
from lead_engine.schemas.engine_config import EngineConfig
from lead_engine.services.classifier import (
    classify_entity,
    extract_display_name,
    infer_industry,
    is_article_url,
    page_text,
)


pytestmark = pytest.mark.unit


def test_real_employer_page_is_kept(tables, engine_config):
    raw = employer_page("Acme Precision Manufacturing Inc")
    result = classify_entity("Acme Precision Manufacturing Inc", "acmeprecision.com", raw, engine_config, tables)
    assert result.is_employer
    assert "org_metadata" in result.evidence
    assert "about_section" in result.evidence


def test_listicle_is_rejected_as_generic(tables, engine_config):
    raw = f"<html><body><h1>Top 25 Employers in Boston</h1><p>{FILLER * 3}</p></body></html>"
    result = classify_entity("Top 25 Employers in Boston", "bostonlists.com", raw, engine_config, tables)
    assert result.outcome == "excluded_generic"
    assert result.reason == "template_page"


def test_carrier_is_excluded_vendor(tables, engine_config):
    raw = employer_page("Harvard Pilgrim Health Care")
    result = classify_entity("Harvard Pilgrim Health Care", "harvardpilgrim.org", raw, engine_config, tables)
    assert result.outcome == "excluded_vendor"


def test_blacklists_take_precedence(tables, engine_config):
    raw = employer_page("Rival Brokerage LLC")
    assert classify_entity("Rival Brokerage LLC", "rival.com", raw, engine_config, tables).reason == "blacklist_name"
    assert (
        classify_entity("Anything", "sub.competitor-benefits.com", raw, engine_config, tables).reason
        == "blacklist_domain"
    )


def test_gov_domain_respects_toggle(tables):
    raw = employer_page("Town Services")
    assert classify_entity("Town Services", "town.gov", raw, EngineConfig(), tables).outcome == "excluded_gov"
    allowed = EngineConfig(allow_gov=True)
    assert classify_entity("Town Services", "town.gov", raw, allowed, tables).outcome != "excluded_gov"


def test_thin_page_is_rejected(tables, engine_config):
    result = classify_entity("Tiny Co", "tiny.com", "<p>Welcome</p>", engine_config, tables)
    assert result.outcome == "excluded_generic"
    assert result.reason == "page_too_short"


def test_single_evidence_is_not_enough(tables, engine_config):
    raw = f"<html><body><p>{FILLER * 3}</p><p>About us</p></body></html>"
    result = classify_entity("Plain Widgets", "plainwidgets.com", raw, engine_config, tables)
    assert result.reason == "unverified_employer"


def test_display_name_sources():
    assert extract_display_name(employer_page("Acme Precision Manufacturing Inc")) == "Acme Precision Manufacturing Inc"
    meta = '<meta property="og:site_name" content="Northwind Labs">'
    assert extract_display_name(meta) == "Northwind Labs"
    assert extract_display_name("<title>Bluefin Robotics | Careers</title>") == "Bluefin Robotics"
    assert extract_display_name("", "Harbor Dental - Home") == "Harbor Dental"


def test_industry_prefers_identity_over_body(tables):
    text = "We sell software to dental clinics."
    assert infer_industry("Harbor Biotech", "harborbio.com", text, tables) == "biotech_life_sciences"
    assert infer_industry("Harbor Group", "harbor.com", text, tables) == "healthcare_social_assistance"
    assert infer_industry("Plain", "plain.com", "", tables) is None


def test_article_path_allows_site_sections(tables):
    assert is_article_url("https://acme.com/blog/top-firms", tables)
    assert not is_article_url("https://acme.com/about", tables)


def test_page_text_drops_scripts():
    text = page_text("<html><script>var x = 1;</script><p>Hello   world</p></html>")
    assert text == "Hello world"
