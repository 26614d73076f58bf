from __future__ import annotations

import argparse
import importlib
import json
from typing import Any, Dict

import yaml

from .config import configure_logging, get_engine_config
from .engine import RuleSet


def load_ruleset(target: str) -> RuleSet:
    """Resolve `package.module:attribute` to a RuleSet (or a zero-arg factory returning one)."""
    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        raise SystemExit(f"Expected 'module:attribute', got {target!r}.")
    module = importlib.import_module(module_name)
    obj: Any = module
    for part in attr.split("."):
        obj = getattr(obj, part)
    if callable(obj) and not isinstance(obj, RuleSet):
        obj = obj()
    if not isinstance(obj, RuleSet):
        raise SystemExit(f"{target} is not a RuleSet (got {type(obj).__name__}).")
    return obj


def build_catalog(rules: RuleSet) -> Dict[str, Any]:
    return rules.summary().model_dump()


def _dump_json(catalog: Dict[str, Any]) -> str:
    return json.dumps(catalog, indent=2, sort_keys=True)


def _dump_yaml(catalog: Dict[str, Any]) -> str:
    return yaml.safe_dump(catalog, sort_keys=True)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Describe the types, facts, rules and dependencies of a rule set.")
    parser.add_argument("target", help="Rule set to describe, as 'package.module:attribute'.")
    parser.add_argument(
        "--format",
        choices=("yaml", "json"),
        default="yaml",
        help="Output format (default: yaml).",
    )
    args = parser.parse_args(argv)

    configure_logging(get_engine_config().log_level)
    catalog = build_catalog(load_ruleset(args.target))
    if args.format == "json":
        print(_dump_json(catalog))
    else:
        print(_dump_yaml(catalog))


if __name__ == "__main__":
    main()
