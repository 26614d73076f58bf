from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional

from .fact_types import TypeRegistry, canonical_name


logger = logging.getLogger(__name__)


@dataclass
class FactCollection:
    name: str
    values: List[Any] = field(default_factory=list)

    @property
    def value(self) -> Any:
        # A single fact is exposed as a scalar so guards can compare it directly.
        if len(self.values) == 1:
            return self.values[0]
        return self.values

    def __len__(self) -> int:
        return len(self.values)


class FactStore:
    """Named fact collections keyed by case-folded semantic type name."""

    def __init__(self, types: TypeRegistry):
        self._types = types
        self._collections: Dict[str, FactCollection] = {}

    def declare(self, type_name: str, producer: Callable[[], Any]) -> FactCollection:
        key = canonical_name(type_name)
        produced = producer()
        if isinstance(produced, (list, tuple, set, frozenset)):
            values = list(produced)
        else:
            values = [produced]
        collection = FactCollection(name=key, values=values)
        self._collections[key] = collection
        logger.debug("declared facts %s (%d value(s))", key, len(values))
        return collection

    def add(self, value: Any) -> Optional[str]:
        """Store `value` under its semantic type; returns the type name, or None if it could not be stored."""
        try:
            key = self._types.classify(value)
            existing = self._collections.get(key)
            if existing is not None:
                logger.debug("adding to facts: %s", key)
                existing.values.append(value)
            else:
                logger.debug("creating facts: %s", key)
                self._collections[key] = FactCollection(name=key, values=[value])
            return key
        except Exception as exc:
            logger.warning("could not store fact %r: %s", value, exc)
            return None

    def value_of(self, type_name: str) -> Any:
        return self._collections[canonical_name(type_name)].value

    def get(self, type_name: str) -> Optional[FactCollection]:
        return self._collections.get(canonical_name(type_name))

    def has_values(self, type_name: str) -> bool:
        collection = self._collections.get(type_name.strip().lower())
        return collection is not None and len(collection) > 0

    def type_names(self) -> List[str]:
        return list(self._collections.keys())

    def snapshot(self) -> Dict[str, Any]:
        return {name: collection.value for name, collection in self._collections.items()}

    def clear(self) -> None:
        self._collections.clear()

    def __contains__(self, type_name: object) -> bool:
        return isinstance(type_name, str) and type_name.strip().lower() in self._collections

    def __iter__(self) -> Iterator[FactCollection]:
        return iter(list(self._collections.values()))

    def __len__(self) -> int:
        return len(self._collections)
