import os
import sys


SRC_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "../.."))
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)

from dataclasses import dataclass

import pytest

from chainrules.config import EngineConfig
from chainrules.engine import RuleSet


@dataclass
class Hour:
    val: int


@dataclass
class Person:
    name: str
    marital_status: str
    age: int


class Recorder:
    """Collects what consequences did, in order."""

    def __init__(self):
        self.calls: list[str] = []

    def record(self, label: str):
        def _consequence(ctx):
            self.calls.append(label)

        return _consequence


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def make_ruleset():
    def _make(*, config: EngineConfig | None = None, classes=(Hour, Person)) -> RuleSet:
        rules = RuleSet(config=config)
        for cls in classes:
            rules.register_class(cls)
        return rules

    return _make


@pytest.fixture
def ruleset(make_ruleset) -> RuleSet:
    return make_ruleset()


@pytest.fixture
def hour_type() -> type:
    return Hour


@pytest.fixture
def person_type() -> type:
    return Person
