import json
import sys
import types

import pytest
import yaml

from chainrules.catalog import build_catalog, load_ruleset, main
from chainrules.engine import RuleSet


def _sample_rules() -> RuleSet:
    rules = RuleSet()
    rules.register_class(int, "Hour")
    rules.declare_rule("Greater", 1, required_types=["hour"], conditions=[lambda c: c.hour > 24])
    rules.extend("greater").with_rule("Late", consequences=[lambda c: None])
    return rules


@pytest.fixture
def sample_module(monkeypatch):
    module = types.ModuleType("sample_rules")
    module.RULES = _sample_rules()
    module.build_rules = _sample_rules
    module.NOT_RULES = 42
    monkeypatch.setitem(sys.modules, "sample_rules", module)
    return module


def test_load_ruleset_accepts_instance_or_factory(sample_module):
    assert load_ruleset("sample_rules:RULES") is sample_module.RULES
    assert isinstance(load_ruleset("sample_rules:build_rules"), RuleSet)


def test_load_ruleset_rejects_bad_targets(sample_module):
    with pytest.raises(SystemExit):
        load_ruleset("sample_rules")
    with pytest.raises(SystemExit):
        load_ruleset("sample_rules:NOT_RULES")


def test_build_catalog_lists_rules_and_dependencies():
    catalog = build_catalog(_sample_rules())
    assert catalog["types"] == ["hour"]
    assert catalog["rules"][0]["name"] == "greater"
    assert catalog["rules"][0]["priority"] == 1
    assert [c["name"] for c in catalog["dependencies"]["greater"]] == ["late"]


def test_main_prints_json(sample_module, capsys):
    main(["sample_rules:RULES", "--format", "json"])
    out = json.loads(capsys.readouterr().out)
    assert [r["name"] for r in out["rules"]] == ["greater"]


def test_main_prints_yaml(sample_module, capsys):
    main(["sample_rules:build_rules"])
    out = yaml.safe_load(capsys.readouterr().out)
    assert out["rules"][0]["required_types"] == ["hour"]
