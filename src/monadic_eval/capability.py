"""The contract a computation type implements to be driven by the evaluator."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Callable

from .errors import (
    BindNotImplementedError,
    CombineNotImplementedError,
    DoNotImplementedError,
    InvariantViolationError,
    OperationNotImplementedError,
    ZeroNotImplementedError,
)
from .evaluator import evaluate

_OPTIONAL_OPERATIONS = ("combine", "delay", "run")


@dataclass(frozen=True)
class CapabilityFlags:
    has_combine: bool
    has_delay: bool
    has_run: bool


def _overrides(cls: type, name: str) -> bool:
    return getattr(cls, name) is not getattr(Capability, name)


class Capability(ABC):
    """Base class for concrete computation types.

    ``unit`` is required. ``bind`` and ``monad_do`` are required by any code
    that uses them, and the defaults raise at the point of use. ``combine``,
    ``delay`` and ``run`` are optional: a subclass implements one by
    overriding it, and the presence of each is recorded once in ``flags``.
    Subclasses that define ``__init__`` must call ``super().__init__()``.
    """

    def __init__(self) -> None:
        cls = type(self)
        present = {name: _overrides(cls, name) for name in _OPTIONAL_OPERATIONS}
        self.flags = CapabilityFlags(
            has_combine=present["combine"],
            has_delay=present["delay"],
            has_run=present["run"],
        )
        if self.flags.has_combine and not self.flags.has_delay:
            raise InvariantViolationError(
                f"{cls.__name__} implements combine() and must also implement delay()"
            )

    @abstractmethod
    def unit(self, value):
        """Promote a plain value to the wrapped type."""

    def unit2(self, wrapped):
        return wrapped

    def bind(self, wrapped, continuation: Callable[[object], object]):
        raise BindNotImplementedError(f"{type(self).__name__} does not implement bind(), which bind(...) statements require")

    def monad_do(self, wrapped, continuation: Callable[[], object]):
        raise DoNotImplementedError(f"{type(self).__name__} does not implement monad_do(), which do(...) statements require")

    def zero(self):
        raise ZeroNotImplementedError(
            f"{type(self).__name__} does not implement zero(); the last statement must be unit(...) or unit2(...)"
        )

    def combine(self, first, rest):
        raise CombineNotImplementedError(
            f"{type(self).__name__} does not implement combine(); unit(...) and unit2(...) may only appear as the last statement"
        )

    def delay(self, thunk: Callable[[], object]):
        raise OperationNotImplementedError(f"{type(self).__name__} does not implement delay()")

    def run(self, delayed):
        raise OperationNotImplementedError(f"{type(self).__name__} does not implement run()")

    def prelude(self) -> dict[str, object]:
        """Names made visible to every program evaluated with this capability."""
        return {}

    def evaluate(self, source: str, bindings: Mapping[str, object] | None = None):
        return evaluate(source, bindings, self)
