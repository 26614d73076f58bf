from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Set, Union

from .config import EngineConfig
from .context import BindingContext, build_context
from .definitions import Extension, FactDefinition, RuleBuilder, RuleDefinition
from .dependencies import DependencyRegistry
from .errors import RuleCheckError, RuleConsequenceError, UndeclaredTypeError, UnknownFactTypeError, UnknownRuleError
from .fact_types import Classifier, TypeRegistry, canonical_name
from .facts import FactCollection, FactStore
from .models import EvaluationMode, EvaluationReport, EvaluationStatus, RuleCheckFailure, RuleSetSummary
from .rule import Condition, Consequence, Rule, sort_by_priority


logger = logging.getLogger(__name__)


class RuleSet:
    """Forward-chaining rule engine over a typed fact store.

    Each pass repeatedly scans the working set in priority order and fires the
    first rule whose conditions hold, restarting from the top after every
    firing, until a scan matches nothing or a consequence calls `stop`/`fail`.
    """

    PASS = EvaluationStatus.PASS
    FAIL = EvaluationStatus.FAIL

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()
        self._types = TypeRegistry()
        self._facts = FactStore(self._types)
        self._fact_names: Set[str] = set()
        self._rules: Dict[str, Rule] = {}
        self._dependencies = DependencyRegistry()

        self._status = EvaluationStatus.PASS
        self._asserting = False
        self._num_evaluated = 0
        self._num_executed = 0
        self._last_report: Optional[EvaluationReport] = None

    # ------------------------------------------------------------------
    # Declarations
    # ------------------------------------------------------------------

    def declare_type(self, name: str, classifier: Classifier) -> str:
        return self._types.register(name, classifier)

    def register_class(self, cls: type, name: Optional[str] = None) -> str:
        return self._types.register_class(cls, name)

    def declare_fact(self, name: str, producer: Callable[[], Any]) -> FactCollection:
        collection = self._facts.declare(name, producer)
        self._fact_names.add(collection.name)
        return collection

    def declare_rule(
        self,
        name: str,
        priority: int = 0,
        required_types: Iterable[str] = (),
        conditions: Iterable[Condition] = (),
        consequences: Iterable[Consequence] = (),
    ) -> Rule:
        rule = Rule(
            name,
            priority,
            required_types,
            conditions,
            consequences,
            known_types=self._known_types(),
        )
        if self._rules.pop(rule.name, None) is not None:
            logger.debug("replacing rule %s", rule.name)
        self._rules[rule.name] = rule
        return rule

    def declare_dependency(self, parent_name: str, child: Union[Rule, RuleDefinition]) -> Rule:
        if isinstance(child, RuleDefinition):
            rule = Rule(
                child.name,
                child.priority,
                child.required_types,
                child.conditions,
                child.consequences,
                known_types=self._known_types(),
            )
        else:
            known = self._known_types()
            unknown = [t for t in child.required_types if t not in known]
            if unknown:
                raise UndeclaredTypeError(child.name, unknown)
            rule = child
        self._dependencies.register(parent_name, rule)
        logger.debug("rule %s extends %s", rule.name, canonical_name(parent_name))
        return rule

    def declare_definition(self, definition: RuleDefinition) -> Rule:
        if definition.extends:
            return self.declare_dependency(definition.extends, definition)
        return self.declare_rule(
            definition.name,
            definition.priority,
            definition.required_types,
            definition.conditions,
            definition.consequences,
        )

    def load(self, definitions: Iterable[Union[FactDefinition, RuleDefinition]]) -> None:
        """Register definitions produced by an external loader, in order."""
        for definition in definitions:
            if isinstance(definition, FactDefinition):
                self.declare_fact(definition.name, definition.producer)
            elif isinstance(definition, RuleDefinition):
                self.declare_definition(definition)
            else:
                raise TypeError(f"Expected FactDefinition or RuleDefinition, got {type(definition).__name__}")

    def rule(self, name: str, priority: int = 0) -> RuleBuilder:
        return RuleBuilder(self, name, priority)

    def extend(self, parent_name: str) -> Extension:
        return Extension(self, canonical_name(parent_name))

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def assert_facts(self, *values: Any) -> EvaluationStatus:
        for value in values:
            self._facts.add(value)
        return self.evaluate()

    assert_ = assert_facts

    def assert_one(self, value: Any) -> EvaluationStatus:
        """Evaluate only the rules that apply to `value`'s type; `value` is not stored."""
        try:
            type_name: Optional[str] = self._types.classify(value)
        except UnknownFactTypeError:
            type_name = None

        def context() -> BindingContext:
            return build_context(self._facts.snapshot(), control=self, subject_type=type_name, subject=value)

        def eligible(rule: Rule) -> bool:
            return rule.applies_to_type(type_name)

        working = [rule for rule in self._rules.values() if eligible(rule)]
        return self._run(EvaluationMode.TARGETED, working, context, eligible, expand=True)

    def evaluate(self) -> EvaluationStatus:
        def context() -> BindingContext:
            return build_context(self._facts.snapshot(), control=self)

        def eligible(rule: Rule) -> bool:
            return rule.matches_types(self._facts)

        return self._run(
            EvaluationMode.BATCH,
            self._relevant_rules(),
            context,
            eligible,
            expand=self.config.expand_dependents_in_batch,
        )

    def clear_facts(self) -> None:
        self._facts.clear()

    delete_facts = clear_facts

    def stop(self, message: Optional[str] = None) -> None:
        """End the current pass without changing its status."""
        if message:
            logger.info("stop: %s", message)
        self._asserting = False

    def fail(self, message: Optional[str] = None) -> None:
        """End the current pass and mark it failed."""
        if message:
            logger.info("fail: %s", message)
        self._status = EvaluationStatus.FAIL
        self._asserting = False

    def _relevant_rules(self) -> List[Rule]:
        # Nothing is relevant to an empty store, not even rules without requirements.
        if not self._facts:
            return []
        relevant = [rule for rule in self._rules.values() if rule.matches_types(self._facts)]
        for rule in relevant:
            logger.debug("%s is relevant", rule.name)
        return relevant

    def _run(
        self,
        mode: EvaluationMode,
        rules: List[Rule],
        context: Callable[[], BindingContext],
        eligible: Callable[[Rule], bool],
        *,
        expand: bool,
    ) -> EvaluationStatus:
        self._status = EvaluationStatus.PASS
        self._asserting = True
        self._num_evaluated = 0
        self._num_executed = 0
        report = EvaluationReport(
            run_id=str(uuid.uuid4()),
            mode=mode,
            started_at=datetime.now(timezone.utc),
        )

        working = sort_by_priority(rules)
        # Rules already in (or fired from) this pass's working set.
        admitted = {id(rule) for rule in working}
        failure: Optional[RuleConsequenceError] = None

        try:
            while True:
                matched = False
                ctx = context()
                for rule in list(working):
                    self._num_evaluated += 1
                    logger.debug("evaluating: %s", rule.name)
                    try:
                        if not rule.matches_conditions(ctx):
                            continue
                    except RuleCheckError as exc:
                        logger.warning("removing rule %s from working set: %s", exc.rule_name, exc.message)
                        if exc.rule in working:
                            working.remove(exc.rule)
                        self._status = EvaluationStatus.FAIL
                        report.rule_check_failures.append(
                            RuleCheckFailure(rule_name=exc.rule_name, message=exc.message)
                        )
                        continue

                    logger.debug("rule %s matched", rule.name)
                    matched = True
                    working.remove(rule)
                    if expand:
                        dependents = [
                            child
                            for child in self._dependencies.dependents_of(rule.name)
                            if id(child) not in admitted and eligible(child)
                        ]
                        if dependents:
                            admitted.update(id(child) for child in dependents)
                            working = sort_by_priority(working + dependents)

                    logger.debug("executing rule %s", rule.name)
                    rule.fire(ctx)
                    self._num_executed += 1
                    report.fired.append(rule.name)
                    # Restart from the highest-priority rule.
                    break

                if not (matched and self._asserting):
                    break
        except RuleConsequenceError as exc:
            logger.warning("rule %s consequence failed: %r", exc.rule_name, exc.inner_error)
            self._status = EvaluationStatus.FAIL
            report.error = repr(exc.inner_error)
            failure = exc
        finally:
            report.stopped = not self._asserting
            self._asserting = False
            self._finish(report)

        if failure is not None:
            raise failure.inner_error
        return self._status

    def _finish(self, report: EvaluationReport) -> None:
        report.status = self._status
        report.num_evaluated = self._num_evaluated
        report.num_executed = self._num_executed
        report.finished_at = datetime.now(timezone.utc)
        if self.config.record_reports:
            self._last_report = report
        logger.info(
            "%s pass finished: status=%s evaluated=%d executed=%d",
            report.mode.value.lower(),
            report.status.value,
            report.num_evaluated,
            report.num_executed,
        )

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def status(self) -> EvaluationStatus:
        return self._status

    @property
    def num_evaluated(self) -> int:
        return self._num_evaluated

    @property
    def num_executed(self) -> int:
        return self._num_executed

    @property
    def last_report(self) -> Optional[EvaluationReport]:
        return self._last_report

    @property
    def rules(self) -> Dict[str, Rule]:
        return dict(self._rules)

    @property
    def facts(self) -> FactStore:
        return self._facts

    @property
    def dependencies(self) -> DependencyRegistry:
        return self._dependencies

    @property
    def types(self) -> TypeRegistry:
        return self._types

    def get_rule(self, name: str) -> Rule:
        try:
            return self._rules[canonical_name(name)]
        except KeyError:
            raise UnknownRuleError(name) from None

    def summary(self) -> RuleSetSummary:
        return RuleSetSummary(
            types=self._types.names(),
            facts={collection.name: len(collection) for collection in self._facts},
            rules=[rule.summary() for rule in self._rules.values()],
            dependencies={
                parent: [child.summary() for child in self._dependencies.dependents_of(parent)]
                for parent in self._dependencies.parents()
            },
        )

    def _known_types(self) -> Set[str]:
        return set(self._types.names()) | self._fact_names
