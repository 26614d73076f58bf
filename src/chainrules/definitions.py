"""Plain records and a fluent builder for declaring facts and rules.

Loaders for external rule sources produce `FactDefinition` / `RuleDefinition`
records and hand them to `RuleSet.load`; code can use the builder instead:

    rules.rule("pm", priority=5).requires("hour").when(lambda c: 12 < c.hour.val < 24).then(say_pm).declare()
    rules.extend("pm").with_rule("late pm", conditions=[lambda c: c.hour.val > 20], consequences=[say_late])
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, List, Optional, Sequence

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from .engine import RuleSet
    from .rule import Rule


class FactDefinition(BaseModel):
    name: str
    producer: Callable[[], Any]


class RuleDefinition(BaseModel):
    name: str
    priority: int = 0
    required_types: List[str] = Field(default_factory=list)
    conditions: List[Callable[..., Any]] = Field(default_factory=list)
    consequences: List[Callable[..., Any]] = Field(default_factory=list)
    # When set, the rule is declared as a dependent of this parent rule.
    extends: Optional[str] = None


class RuleBuilder:
    def __init__(self, target: "RuleSet", name: str, priority: int = 0, *, extends: Optional[str] = None):
        self._target = target
        self._definition = RuleDefinition(name=name, priority=priority, extends=extends)

    def requires(self, *type_names: str) -> "RuleBuilder":
        self._definition.required_types.extend(type_names)
        return self

    def when(self, *conditions: Callable[..., Any]) -> "RuleBuilder":
        self._definition.conditions.extend(conditions)
        return self

    def then(self, *consequences: Callable[..., Any]) -> "RuleBuilder":
        self._definition.consequences.extend(consequences)
        return self

    def definition(self) -> RuleDefinition:
        d = self._definition
        return d.model_copy(
            update={
                "required_types": list(d.required_types),
                "conditions": list(d.conditions),
                "consequences": list(d.consequences),
            }
        )

    def declare(self) -> "Rule":
        return self._target.declare_definition(self.definition())


class Extension:
    """Declares dependents of one explicitly named parent rule."""

    def __init__(self, target: "RuleSet", parent_name: str):
        self._target = target
        self.parent_name = parent_name

    def with_rule(
        self,
        name: str,
        priority: int = 0,
        required_types: Sequence[str] = (),
        conditions: Sequence[Callable[..., Any]] = (),
        consequences: Sequence[Callable[..., Any]] = (),
    ) -> "Rule":
        return self._target.declare_definition(
            RuleDefinition(
                name=name,
                priority=priority,
                required_types=list(required_types),
                conditions=list(conditions),
                consequences=list(consequences),
                extends=self.parent_name,
            )
        )

    def rule(self, name: str, priority: int = 0) -> RuleBuilder:
        return RuleBuilder(self._target, name, priority, extends=self.parent_name)
