from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Mapping, Optional, Protocol

from .fact_types import canonical_name


class EvaluationControl(Protocol):
    def stop(self, message: Optional[str] = None) -> None:
        ...

    def fail(self, message: Optional[str] = None) -> None:
        ...


@dataclass(frozen=True)
class BindingContext(Mapping[str, Any]):
    """What guards and consequences see: fact values by type name plus stop/fail.

    Lookups are case-insensitive and available both as `ctx["hour"]` and `ctx.hour`.
    """

    bindings: Dict[str, Any] = field(default_factory=dict)
    control: Optional[EvaluationControl] = None
    # The value passed to `assert_one`, if any.
    subject: Any = None

    def __getitem__(self, name: str) -> Any:
        return self.bindings[canonical_name(name)]

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self.bindings[name.lower()]
        except KeyError:
            raise AttributeError(f"no fact bound as '{name}'") from None

    def __iter__(self) -> Iterator[str]:
        return iter(self.bindings)

    def __len__(self) -> int:
        return len(self.bindings)

    def stop(self, message: Optional[str] = None) -> None:
        if self.control is not None:
            self.control.stop(message)

    def fail(self, message: Optional[str] = None) -> None:
        if self.control is not None:
            self.control.fail(message)


def build_context(
    facts: Mapping[str, Any],
    *,
    control: Optional[EvaluationControl] = None,
    subject_type: Optional[str] = None,
    subject: Any = None,
) -> BindingContext:
    bindings = dict(facts)
    if subject_type is not None:
        bindings[subject_type] = subject
    return BindingContext(bindings=bindings, control=control, subject=subject)
