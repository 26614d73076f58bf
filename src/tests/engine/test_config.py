import os

import pytest
from pydantic import ValidationError

from chainrules.config import EngineConfig, get_engine_config


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in (
        "CHAINRULES_EXPAND_DEPENDENTS_IN_BATCH",
        "CHAINRULES_LOG_LEVEL",
        "CHAINRULES_RECORD_REPORTS",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    cfg = get_engine_config()
    assert cfg == EngineConfig()
    assert cfg.expand_dependents_in_batch is False
    assert cfg.log_level == "WARNING"
    assert cfg.record_reports is True


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("CHAINRULES_EXPAND_DEPENDENTS_IN_BATCH", "yes")
    monkeypatch.setenv("CHAINRULES_LOG_LEVEL", "debug")
    monkeypatch.setenv("CHAINRULES_RECORD_REPORTS", "0")

    cfg = get_engine_config()

    assert cfg.expand_dependents_in_batch is True
    assert cfg.log_level == "DEBUG"
    assert cfg.record_reports is False


def test_reads_dotenv_file(tmp_path):
    (tmp_path / ".env").write_text("CHAINRULES_EXPAND_DEPENDENTS_IN_BATCH=true\n")
    try:
        assert get_engine_config().expand_dependents_in_batch is True
    finally:
        # load_dotenv writes os.environ directly, outside monkeypatch bookkeeping.
        os.environ.pop("CHAINRULES_EXPAND_DEPENDENTS_IN_BATCH", None)


def test_dotenv_values_do_not_outlive_the_test():
    assert "CHAINRULES_EXPAND_DEPENDENTS_IN_BATCH" not in os.environ
    assert get_engine_config().expand_dependents_in_batch is False


def test_invalid_flag_is_rejected(monkeypatch):
    monkeypatch.setenv("CHAINRULES_RECORD_REPORTS", "maybe")
    with pytest.raises(ValueError, match="CHAINRULES_RECORD_REPORTS"):
        get_engine_config()


def test_invalid_log_level_is_rejected():
    with pytest.raises(ValidationError):
        EngineConfig(log_level="chatty")
