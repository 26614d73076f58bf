from __future__ import annotations

from typing import Any, Callable, Collection, Iterable, Optional, Sequence, Tuple

from .context import BindingContext
from .errors import RuleCheckError, RuleConsequenceError, UndeclaredTypeError
from .fact_types import canonical_name
from .facts import FactStore
from .models import RuleSummary

Condition = Callable[[BindingContext], Any]
Consequence = Callable[[BindingContext], Any]


class Rule:
    """A named, prioritized set of guards and actions.

    Rules compare by identity: the engine removes exactly the instance that
    fired or failed from its working set.
    """

    __slots__ = ("_name", "_priority", "_required_types", "_conditions", "_consequences")

    def __init__(
        self,
        name: str,
        priority: int = 0,
        required_types: Iterable[str] = (),
        conditions: Iterable[Condition] = (),
        consequences: Iterable[Consequence] = (),
        *,
        known_types: Optional[Collection[str]] = None,
    ):
        self._name = canonical_name(name)
        self._priority = int(priority or 0)
        self._required_types = _dedupe(canonical_name(t) for t in required_types)
        self._conditions: Tuple[Condition, ...] = tuple(conditions)
        self._consequences: Tuple[Consequence, ...] = tuple(consequences)

        for fn in self._conditions + self._consequences:
            if not callable(fn):
                raise TypeError(f"Rule '{self._name}': conditions and consequences must be callables, got {fn!r}")

        if known_types is not None:
            unknown = [t for t in self._required_types if t not in known_types]
            if unknown:
                raise UndeclaredTypeError(self._name, unknown)

    @property
    def name(self) -> str:
        return self._name

    @property
    def priority(self) -> int:
        return self._priority

    @property
    def required_types(self) -> Tuple[str, ...]:
        return self._required_types

    @property
    def conditions(self) -> Tuple[Condition, ...]:
        return self._conditions

    @property
    def consequences(self) -> Tuple[Consequence, ...]:
        return self._consequences

    def matches_types(self, facts: FactStore) -> bool:
        return all(facts.has_values(t) for t in self._required_types)

    def applies_to_type(self, type_name: str) -> bool:
        return not self._required_types or type_name in self._required_types

    def matches_conditions(self, ctx: BindingContext) -> bool:
        for index, condition in enumerate(self._conditions):
            try:
                if not condition(ctx):
                    return False
            except Exception as exc:
                raise RuleCheckError(self, f"condition #{index + 1} raised {exc!r}") from exc
        return True

    def fire(self, ctx: BindingContext) -> None:
        for consequence in self._consequences:
            try:
                consequence(ctx)
            except Exception as exc:
                raise RuleConsequenceError(self, exc) from exc

    def summary(self) -> RuleSummary:
        return RuleSummary(
            name=self._name,
            priority=self._priority,
            required_types=list(self._required_types),
            num_conditions=len(self._conditions),
            num_consequences=len(self._consequences),
        )

    def __repr__(self) -> str:
        return f"Rule(name={self._name!r}, priority={self._priority})"


def _dedupe(names: Iterable[str]) -> Tuple[str, ...]:
    seen: list[str] = []
    for name in names:
        if name not in seen:
            seen.append(name)
    return tuple(seen)


def sort_by_priority(rules: Sequence[Rule]) -> list[Rule]:
    # sorted() is stable, so equal priorities keep declaration order.
    return sorted(rules, key=lambda r: r.priority, reverse=True)
