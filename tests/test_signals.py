"""Unit tests for buying-signal detection."""

import pytest

from lead_engine.services.signals import (
    detect_signals,
    high_intent,
    merge_triggers,
    new_strong_signals,
    proximity_match,
)


pytestmark = pytest.mark.unit


def test_hiring_count_and_phrase(tables, engine_config):
    found = detect_signals("We have 14 open positions across our Lowell plant.", engine_config, tables)
    assert found["hiring"]["open_roles_60d"] == 14
    assert found["hiring"]["count_found"] is True

    found = detect_signals("We're hiring! Come build with us.", engine_config, tables)
    assert found["hiring"]["open_roles_60d"] == 5
    assert found["hiring"]["count_found"] is False


def test_funding_series_stage(tables, engine_config):
    found = detect_signals("The company closed its Series B to expand production.", engine_config, tables)
    assert found["funding"]["stage"] == "Series B"
    assert found["funding"]["months_ago"] == 3


def test_leadership_needs_appointment_context(tables, engine_config):
    found = detect_signals("Acme appointed Dana Ruiz as Chief People Officer this spring.", engine_config, tables)
    assert "leadership_change" in found

    found = detect_signals("Questions? Email the Chief People Officer desk.", engine_config, tables)
    assert "leadership_change" not in found


def test_csuite_role_alias(tables, engine_config):
    found = detect_signals("Board names Sam Lee chief financial officer.", engine_config, tables)
    assert found["csuite_change"]["role"] == "CFO"


def test_vendor_change_proximity(tables, engine_config):
    text = "Last quarter we switched to Harvard Pilgrim for all employee plans."
    found = detect_signals(text, engine_config, tables)
    assert found["vendor_change"]["vendor"] == "Harvard Pilgrim"
    assert found["vendor_change"]["recent"] is True

    far = "Harvard Pilgrim " + ("lorem ipsum " * 20) + " switched to"
    assert proximity_match(far, ["Harvard Pilgrim"], ["switched to"]) is None


def test_absent_categories_are_omitted(tables, engine_config):
    assert detect_signals("", engine_config, tables) == {}
    assert detect_signals("We make fine furniture by hand.", engine_config, tables) == {}


def test_merge_and_intent():
    merged = merge_triggers({"hiring": {"open_roles_60d": 2}, "news": {"keywords": []}}, {"hiring": {"open_roles_60d": 9}})
    assert merged["hiring"]["open_roles_60d"] == 9
    assert "news" in merged

    intent, reasons = high_intent(merged)
    assert intent is True
    assert reasons == ["hiring_velocity"]
    assert new_strong_signals(merged, {}) == ["hiring"]
    assert new_strong_signals({"hiring": {"open_roles_60d": 5}}, {}) == []
    assert high_intent({}) == (False, [])


def test_only_newly_detected_strong_signals_count():
    stored = {"funding": {"stage": "Series B", "months_ago": 3}, "hiring": {"open_roles_60d": 12}}
    assert new_strong_signals({"funding": {"stage": "Series B", "months_ago": 3}}, stored) == []
    assert new_strong_signals({"funding": {"stage": "Series C", "months_ago": 3}}, stored) == ["funding"]
    assert new_strong_signals({"csuite_change": {"role": "CFO"}}, stored) == ["csuite_change"]
    assert new_strong_signals({"news": {"strong": True}}, None) == []


def test_new_alone_is_not_an_appointment(tables, engine_config):
    found = detect_signals("Our Controller team rolled out the new HR portal.", engine_config, tables)
    assert "leadership_change" not in found
    found = detect_signals("A message from our CEO about the new HR portal.", engine_config, tables)
    assert "csuite_change" not in found

    found = detect_signals("Meet our new CFO Jordan Blake.", engine_config, tables)
    assert found["csuite_change"]["role"] == "CFO"
