from __future__ import annotations

import importlib.util
import json
from pathlib import Path

import pytest
from sqlalchemy.orm import sessionmaker

from app.core.config import settings
from app.models.job import JobType, LogisticsJob


def _load_script():
    path = Path(__file__).resolve().parents[1] / "scripts" / "migrate_job_types.py"
    spec = importlib.util.spec_from_file_location("migrate_job_types", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def script(engine, monkeypatch):
    module = _load_script()
    monkeypatch.setattr(module, "SessionLocal", sessionmaker(autocommit=False, autoflush=False, bind=engine))
    return module


def test_script_migrates_and_prints_summary(script, make_job, fixed_year, db_session, capsys):
    legacy = make_job("AF-2024-001", JobType.AIR_FREIGHT)

    exit_code = script.main([])

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "Migrated job AF-2024-001 -> AAL-AI-24-001 (AIR_FREIGHT -> AIR_FREIGHT_IMPORT)" in out
    assert "migrated=1 skipped=0 failed=0" in out
    db_session.expire_all()
    assert db_session.get(LogisticsJob, legacy.id).job_number == "AAL-AI-24-001"


def test_script_json_output_with_map_and_year(script, make_job, capsys):
    make_job("SF-2022-014", JobType.SEA_FREIGHT)

    exit_code = script.main(["--json", "--year", "2023", "--map", "SEA_FREIGHT=SEA_FREIGHT_EXPORT"])

    report = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert report["entries"][0]["new_job_number"] == "AAL-SE-23-001"


def test_script_rejects_bad_map(script, capsys):
    assert script.main(["--map", "AIR_FREIGHT"]) == 2
    assert "Invalid --map" in capsys.readouterr().err


def test_script_rejects_malformed_configured_map(script, make_job, monkeypatch, capsys):
    monkeypatch.setattr(settings, "JOB_TYPE_MIGRATION_MAP", "ROAD_FREIGHT=TRUCK")
    make_job("RF-2024-001", JobType.ROAD_FREIGHT)

    assert script.main([]) == 2
    assert "Invalid JOB_TYPE_MIGRATION_MAP" in capsys.readouterr().err
