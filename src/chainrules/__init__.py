"""Forward-chaining rule engine.

Facts are stored by semantic type; rules declare the types they need, guard
conditions and consequences. `RuleSet` fires the highest-priority matching
rule until nothing matches or a consequence stops the pass.
"""

from .config import EngineConfig, get_engine_config
from .context import BindingContext
from .definitions import FactDefinition, RuleBuilder, RuleDefinition
from .dependencies import DependencyRegistry
from .engine import RuleSet
from .errors import (
    RuleCheckError,
    RuleConsequenceError,
    RulesEngineError,
    UndeclaredTypeError,
    UnknownFactTypeError,
    UnknownRuleError,
)
from .fact_types import TypeRegistry
from .facts import FactCollection, FactStore
from .models import EvaluationMode, EvaluationReport, EvaluationStatus, RuleSetSummary
from .rule import Rule

PASS = EvaluationStatus.PASS
FAIL = EvaluationStatus.FAIL

__all__ = [
    "BindingContext",
    "DependencyRegistry",
    "EngineConfig",
    "EvaluationMode",
    "EvaluationReport",
    "EvaluationStatus",
    "FAIL",
    "FactCollection",
    "FactDefinition",
    "FactStore",
    "PASS",
    "Rule",
    "RuleBuilder",
    "RuleCheckError",
    "RuleConsequenceError",
    "RuleDefinition",
    "RuleSet",
    "RuleSetSummary",
    "RulesEngineError",
    "TypeRegistry",
    "UndeclaredTypeError",
    "UnknownFactTypeError",
    "UnknownRuleError",
    "get_engine_config",
]
