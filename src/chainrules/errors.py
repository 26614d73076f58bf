from __future__ import annotations

from typing import Any, Sequence


class RulesEngineError(Exception):
    """Base class for every error raised by the engine."""


class RuleCheckError(RulesEngineError):
    """A rule could not be checked against the current facts.

    `rule` is the offending `Rule` during evaluation, or the rule name when the
    failure happens while the rule is being constructed.
    """

    def __init__(self, rule: Any, message: str = ""):
        self.rule = rule
        self.message = message
        super().__init__(f"rule '{_rule_name(rule)}': {message}" if message else f"rule '{_rule_name(rule)}'")

    @property
    def rule_name(self) -> str:
        return _rule_name(self.rule)


class UndeclaredTypeError(RuleCheckError):
    def __init__(self, rule: Any, unknown_types: Sequence[str]):
        self.unknown_types = tuple(unknown_types)
        super().__init__(rule, f"undeclared required type(s): {', '.join(self.unknown_types)}")


class RuleConsequenceError(RulesEngineError):
    """Wraps an error raised by a consequence while its rule was firing."""

    def __init__(self, rule: Any, inner_error: BaseException):
        self.rule = rule
        self.inner_error = inner_error
        super().__init__(f"rule '{_rule_name(rule)}' consequence failed: {inner_error!r}")

    @property
    def rule_name(self) -> str:
        return _rule_name(self.rule)


class UnknownFactTypeError(RulesEngineError, LookupError):
    def __init__(self, value: Any):
        self.value = value
        super().__init__(f"no registered fact type matches value of class {type(value).__name__}")


class UnknownRuleError(RulesEngineError, KeyError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(name)

    def __str__(self) -> str:
        return f"unknown rule: {self.name}"


def _rule_name(rule: Any) -> str:
    return str(getattr(rule, "name", rule))
