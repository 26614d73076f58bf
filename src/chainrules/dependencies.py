from __future__ import annotations

from typing import Dict, Iterator, List

from .fact_types import canonical_name
from .rule import Rule


class DependencyRegistry:
    """Parent rule name -> rules that become eligible once the parent fires."""

    def __init__(self):
        self._dependents: Dict[str, List[Rule]] = {}

    def register(self, parent_name: str, child: Rule) -> None:
        self._dependents.setdefault(canonical_name(parent_name), []).append(child)

    def dependents_of(self, parent_name: str) -> List[Rule]:
        return list(self._dependents.get(parent_name.strip().lower(), []))

    def parents(self) -> List[str]:
        return list(self._dependents.keys())

    def __contains__(self, parent_name: object) -> bool:
        return isinstance(parent_name, str) and parent_name.strip().lower() in self._dependents

    def __iter__(self) -> Iterator[str]:
        return iter(self._dependents)

    def __len__(self) -> int:
        return sum(len(children) for children in self._dependents.values())
