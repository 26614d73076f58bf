from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class EvaluationStatus(str, Enum):
    PASS = "PASS"
    FAIL = "FAIL"


class EvaluationMode(str, Enum):
    # Working set built from one asserted value's type.
    TARGETED = "TARGETED"
    # Working set built from every type present in the fact store.
    BATCH = "BATCH"


class RuleCheckFailure(BaseModel):
    rule_name: str
    message: str


class EvaluationReport(BaseModel):
    run_id: str
    mode: EvaluationMode
    started_at: datetime
    finished_at: Optional[datetime] = None

    status: EvaluationStatus = EvaluationStatus.PASS
    num_evaluated: int = 0
    num_executed: int = 0
    fired: List[str] = Field(default_factory=list)
    rule_check_failures: List[RuleCheckFailure] = Field(default_factory=list)
    stopped: bool = False
    error: Optional[str] = None


class RuleSummary(BaseModel):
    name: str
    priority: int = 0
    required_types: List[str] = Field(default_factory=list)
    num_conditions: int = 0
    num_consequences: int = 0


class RuleSetSummary(BaseModel):
    types: List[str] = Field(default_factory=list)
    facts: Dict[str, int] = Field(default_factory=dict)
    rules: List[RuleSummary] = Field(default_factory=list)
    dependencies: Dict[str, List[RuleSummary]] = Field(default_factory=dict)
