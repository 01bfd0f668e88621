from __future__ import annotations

import logging

from app.core import config
from app.core.config import settings
from app.core.flow_logging import flow_info


def test_as_bool_and_as_int_fall_back_to_defaults():
    assert config._as_bool(None, True) is True
    assert config._as_bool(" Yes ", False) is True
    assert config._as_bool("off", True) is False
    assert config._as_int("5", 3) == 5
    assert config._as_int("five", 3) == 3


def test_normalize_csv_drops_blank_entries():
    assert config._normalize_csv(" AIR_FREIGHT=AIR_FREIGHT_EXPORT , ,SEA_FREIGHT=SEA_FREIGHT_IMPORT ") == (
        "AIR_FREIGHT=AIR_FREIGHT_EXPORT,SEA_FREIGHT=SEA_FREIGHT_IMPORT"
    )
    assert config._normalize_csv(None) == ""


def test_flow_info_respects_category_toggles(monkeypatch, caplog):
    logger = logging.getLogger("tests.flow")
    caplog.set_level(logging.INFO, logger="tests.flow")
    monkeypatch.setattr(settings, "FLOW_LOGS_ENABLED", True)
    monkeypatch.setattr(settings, "FLOW_LOGS_MIGRATION_ENABLED", False)

    flow_info(logger, "numbering id=%s", 1, category="job_numbering")
    flow_info(logger, "migration id=%s", 2, category="job_migration")

    messages = [record.getMessage() for record in caplog.records]
    assert messages == ["numbering id=1"]


def test_flow_info_master_switch(monkeypatch, caplog):
    logger = logging.getLogger("tests.flow")
    caplog.set_level(logging.INFO, logger="tests.flow")
    monkeypatch.setattr(settings, "FLOW_LOGS_ENABLED", False)

    flow_info(logger, "anything")

    assert caplog.records == []
