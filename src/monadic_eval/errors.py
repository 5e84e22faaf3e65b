"""Structured error types for parser/runtime separation."""

from __future__ import annotations


class MonadEvalError(Exception):
    """Base class for structured monadic-eval errors."""


class ParseError(MonadEvalError, SyntaxError):
    """Malformed source text; raised before any statement is evaluated."""

    def __init__(
        self,
        message: str,
        start: int,
        end: int,
        expected: tuple[str, ...] = (),
        found: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.start = start
        self.end = end
        self.expected = expected
        self.found = found

    @property
    def position(self) -> int:
        return self.start

    @property
    def reason(self) -> str:
        return self.message

    def __str__(self) -> str:
        expected_text = ""
        if self.expected:
            expected_text = f"; expected {', '.join(self.expected)}"
        found_text = ""
        if self.found is not None:
            found_text = f"; found {self.found}"
        return f"{self.message} at span [{self.start}, {self.end}){expected_text}{found_text}"


class EmptySequenceError(MonadEvalError):
    """The dispatcher was handed a statement sequence with no units."""


class ReservedNameError(MonadEvalError):
    """Embedded code tried to bind one of the engine's reserved names."""

    def __init__(self, name: str, reserved: frozenset[str]) -> None:
        listed = ", ".join(sorted(reserved))
        super().__init__(f"Cannot bind reserved name {name!r}; reserved names are: {listed}")
        self.name = name


class InvariantViolationError(MonadEvalError):
    """A capability was constructed with an inconsistent set of operations."""


class OperationNotImplementedError(MonadEvalError, NotImplementedError):
    """A capability lacks an operation that the evaluated code needs."""


class ZeroNotImplementedError(OperationNotImplementedError):
    pass


class CombineNotImplementedError(OperationNotImplementedError):
    pass


class BindNotImplementedError(OperationNotImplementedError):
    pass


class DoNotImplementedError(OperationNotImplementedError):
    pass


class EvaluationError(MonadEvalError):
    """Runtime failure of an embedded expression after a successful parse."""


class UndefinedNameError(EvaluationError, NameError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Undefined name {name!r}")
        self.name = name


class UnsupportedCombineError(MonadEvalError, TypeError):
    """Additive combine was asked to merge payloads that are not numbers."""
