from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, field_validator


_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


class EngineConfig(BaseModel):
    # Batch evaluation does not activate dependents of fired rules unless this is set.
    expand_dependents_in_batch: bool = False
    log_level: str = "WARNING"
    # Keep an EvaluationReport for the last pass on the rule set.
    record_reports: bool = True

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        level = (value or "").strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value!r}")
        return level


def get_engine_config(env_file: str | Path | None = None) -> EngineConfig:
    """
    Load engine configuration from environment variables.

    Values from `env_file` (default: the nearest `.env` above the working
    directory) are loaded first; variables already set in the environment win.

    Reads:
      CHAINRULES_EXPAND_DEPENDENTS_IN_BATCH, CHAINRULES_LOG_LEVEL, CHAINRULES_RECORD_REPORTS
    """
    load_dotenv(env_file or find_dotenv(usecwd=True))
    defaults = EngineConfig()
    return EngineConfig(
        expand_dependents_in_batch=_env_flag(
            "CHAINRULES_EXPAND_DEPENDENTS_IN_BATCH", defaults.expand_dependents_in_batch
        ),
        log_level=os.getenv("CHAINRULES_LOG_LEVEL", defaults.log_level),
        record_reports=_env_flag("CHAINRULES_RECORD_REPORTS", defaults.record_reports),
    )


def configure_logging(level: str = "WARNING") -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean flag, got {raw!r}.")
