"""Engine configuration layering and the batch CLI argument surface."""

from datetime import date

import pytest
from pydantic import ValidationError

from lead_engine.core.config import Settings
from lead_engine.schemas.engine_config import EngineConfig
from lead_engine.workers.engine_cli import build_parser


pytestmark = pytest.mark.unit


def test_stored_rows_override_settings_defaults():
    settings = Settings(_env_file=None, DATABASE_URL="postgresql+asyncpg://u:p@localhost/db", REPEAT_SUPPRESSION_DAYS=14)
    config = EngineConfig.from_sources(
        settings,
        keyword_rows={"carrier_names": ["Aetna", " Aetna ", ""], "unknown_category": ["x"]},
        setting_rows={"allow_gov": True, "sweep_size": 25, "not_a_setting": 1},
    )
    assert config.repeat_window_days == 14
    assert config.carrier_names == ["Aetna"]
    assert config.allow_gov is True
    assert config.sweep_size == 25



def test_invalid_stored_setting_falls_back_to_defaults(caplog):
    settings = Settings(_env_file=None, DATABASE_URL="postgresql+asyncpg://u:p@localhost/db", DISCOVERY_CANDIDATE_CAP=40)
    with caplog.at_level("WARNING", logger="lead_engine.schemas.engine_config"):
        config = EngineConfig.from_sources(
            settings,
            setting_rows={"sweep_size": "lots", "allow_gov": "maybe", "diversity_cap_share": 0.3},
        )
    assert config.sweep_size == 40
    assert config.allow_gov is False
    assert config.diversity_cap_share == 0.3
    assert "allow_gov, sweep_size" in caplog.text

def test_config_is_frozen_and_validated():
    config = EngineConfig()
    with pytest.raises(ValidationError):
        config.sweep_size = 5
    with pytest.raises(ValidationError):
        EngineConfig(diversity_cap_share=1.5)


def test_cli_arguments():
    parser = build_parser()
    args = parser.parse_args(["discover", "--mode", "manual", "--industries", "tech_pst, construction", "--states", "nh"])
    assert args.industries == ["tech_pst", "construction"]
    assert args.states == ["nh"]
    assert args.override_geography is False

    args = parser.parse_args(["score", "--run-date", "2025-06-04", "--dry-run"])
    assert args.run_date == date(2025, 6, 4)
    assert args.dry_run is True
