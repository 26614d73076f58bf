from __future__ import annotations

from typing import Any, Callable, Dict, Iterator, List, Optional, Union

from .errors import UnknownFactTypeError


Classifier = Union[type, Callable[[Any], bool]]


def canonical_name(name: Any) -> str:
    """Case-folded key used for rule names, type names and fact names."""
    key = str(name).strip().lower()
    if not key:
        raise ValueError("Name must be a non-empty string")
    return key


class TypeRegistry:
    """Ordered mapping of semantic type name -> classifier.

    A classifier is either a class (values match by isinstance) or a predicate.
    The first registered type whose classifier accepts a value wins, so more
    specific types should be registered before broader ones.
    """

    def __init__(self):
        self._types: Dict[str, Classifier] = {}

    def register(self, name: str, classifier: Classifier) -> str:
        if not callable(classifier):
            raise TypeError(f"Classifier for type '{name}' must be a class or a callable")
        key = canonical_name(name)
        self._types[key] = classifier
        return key

    def register_class(self, cls: type, name: Optional[str] = None) -> str:
        return self.register(name or cls.__name__, cls)

    def classify(self, value: Any) -> str:
        for name, classifier in self._types.items():
            if _accepts(classifier, value):
                return name
        raise UnknownFactTypeError(value)

    def names(self) -> List[str]:
        return list(self._types.keys())

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.strip().lower() in self._types

    def __iter__(self) -> Iterator[str]:
        return iter(self._types)

    def __len__(self) -> int:
        return len(self._types)


def _accepts(classifier: Classifier, value: Any) -> bool:
    if isinstance(classifier, type):
        return isinstance(value, classifier)
    return bool(classifier(value))
