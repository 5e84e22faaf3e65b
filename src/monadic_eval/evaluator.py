"""Evaluator and combinator dispatcher for the embedded statement language."""

from __future__ import annotations

import logging
import operator
import os
from collections.abc import Mapping
from functools import lru_cache
from typing import TYPE_CHECKING, Callable, Final

from .ast import (
    BindForm,
    Call,
    ConditionalGroup,
    DoForm,
    Expr,
    ExprStatement,
    Index,
    Infix,
    LetForm,
    ListExpr,
    Literal,
    Member,
    Name,
    Prefix,
    Program,
    StatementUnit,
    Template,
    Unit2Form,
    UnitForm,
)
from .errors import (
    CombineNotImplementedError,
    EmptySequenceError,
    EvaluationError,
    ReservedNameError,
    UndefinedNameError,
)
from .parser import parse_program
from .values import Bind, Do, Let, Marker, Unit, Unit2

if TYPE_CHECKING:
    from .capability import Capability

logger = logging.getLogger(__name__)

RESERVED_NAMES: Final[frozenset[str]] = frozenset({"_code", "_context", "_head", "_result"})

_PARSE_CACHE_MAX: Final[int] = max(1, int(os.environ.get("MONADIC_EVAL_PARSE_CACHE_MAX", "256")))
_USE_PARSE_CACHE: Final[bool] = os.environ.get("MONADIC_EVAL_DISABLE_PARSE_CACHE", "0") != "1"


@lru_cache(maxsize=_PARSE_CACHE_MAX)
def _parse_program_cached(source: str) -> Program:
    return parse_program(source)


def _load_program(source: str | Program) -> Program:
    if isinstance(source, Program):
        return source
    if _USE_PARSE_CACHE:
        return _parse_program_cached(source)
    logger.debug("parse cache disabled; parsing %d character(s)", len(source))
    return parse_program(source)


class Scope(Mapping[str, object]):
    """Read-only name bindings; ``extend`` returns a child and never mutates ``self``."""

    def __init__(self, data: Mapping[str, object] | None = None, parent: "Scope | None" = None) -> None:
        self.data: dict[str, object] = {} if data is None else dict(data)
        self.parent = parent

    def _chain(self):
        current: Scope | None = self
        while current is not None:
            yield current
            current = current.parent

    def __getitem__(self, key: str) -> object:
        for scope in self._chain():
            if key in scope.data:
                return scope.data[key]
        raise KeyError(key)

    def __contains__(self, key: object) -> bool:
        return any(key in scope.data for scope in self._chain())

    def __iter__(self):
        seen: set[str] = set()
        for scope in self._chain():
            for name in scope.data:
                if name not in seen:
                    seen.add(name)
                    yield name

    def __len__(self) -> int:
        return sum(1 for _ in self.__iter__())

    def extend(self, name: str, value: object) -> "Scope":
        if name in RESERVED_NAMES:
            raise ReservedNameError(name, RESERVED_NAMES)
        return Scope({name: value}, parent=self)


# Expressions


def _logical_not(value) -> bool:
    return not value


_PREFIX_OPS: Final[dict[str, Callable[[object], object]]] = {
    "-": operator.neg,
    "+": operator.pos,
    "!": _logical_not,
}

_INFIX_OPS: Final[dict[str, Callable[[object, object], object]]] = {
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "/": operator.truediv,
    "%": operator.mod,
    "==": operator.eq,
    "===": operator.eq,
    "!=": operator.ne,
    "!==": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}


def _template_text(value) -> str:
    if value is None:
        return "null"
    if value is True:
        return "true"
    if value is False:
        return "false"
    return str(value)


def _lookup_member(value, attr: str):
    if isinstance(value, Mapping):
        if attr in value:
            return value[attr]
    elif hasattr(value, attr):
        return getattr(value, attr)
    raise EvaluationError(f"{type(value).__name__} value has no member {attr!r}")


def _eval_expr(expr: Expr, scope: Scope) -> object:
    if isinstance(expr, Literal):
        return expr.value

    if isinstance(expr, Name):
        try:
            return scope[expr.value]
        except KeyError:
            raise UndefinedNameError(expr.value) from None

    if isinstance(expr, ListExpr):
        return [_eval_expr(item, scope) for item in expr.items]

    if isinstance(expr, Template):
        return "".join(part if isinstance(part, str) else _template_text(_eval_expr(part, scope)) for part in expr.parts)

    if isinstance(expr, Prefix):
        return _PREFIX_OPS[expr.op](_eval_expr(expr.right, scope))

    if isinstance(expr, Infix):
        left = _eval_expr(expr.left, scope)
        if expr.op == "&&":
            return _eval_expr(expr.right, scope) if left else left
        if expr.op == "||":
            return left if left else _eval_expr(expr.right, scope)
        right = _eval_expr(expr.right, scope)
        return _INFIX_OPS[expr.op](left, right)

    if isinstance(expr, Call):
        func = _eval_expr(expr.func, scope)
        if not callable(func):
            raise EvaluationError(f"{type(func).__name__} value is not callable")
        args = [_eval_expr(arg, scope) for arg in expr.args]
        return func(*args)

    if isinstance(expr, Member):
        return _lookup_member(_eval_expr(expr.value, scope), expr.attr)

    if isinstance(expr, Index):
        container = _eval_expr(expr.value, scope)
        key = _eval_expr(expr.index, scope)
        try:
            return container[key]
        except (LookupError, TypeError) as exc:
            raise EvaluationError(f"Cannot index {type(container).__name__} value with {key!r}") from exc

    raise TypeError(f"Unsupported expression node: {type(expr)!r}")


# Statement units


def _select_body(group: ConditionalGroup, scope: Scope) -> tuple[StatementUnit, ...] | None:
    for branch in group.branches:
        if _eval_expr(branch.predicate, scope):
            return branch.body
    return group.otherwise


def _eval_body(units: tuple[StatementUnit, ...], scope: Scope) -> Marker:
    if not units:
        return None
    local = scope
    for unit in units[:-1]:
        marker = _eval_unit(unit, local)
        if isinstance(marker, Let):
            local = local.extend(marker.name, marker.value)
        elif marker is not None:
            raise EvaluationError(f"{type(marker).__name__} marker is only allowed as the last statement of a branch")
    return _eval_unit(units[-1], local)


def _eval_unit(unit: StatementUnit, scope: Scope) -> Marker:
    if isinstance(unit, ExprStatement):
        _eval_expr(unit.expr, scope)
        return None
    if isinstance(unit, LetForm):
        return Let(name=unit.name, value=_eval_expr(unit.value, scope))
    if isinstance(unit, UnitForm):
        return Unit(value=_eval_expr(unit.value, scope))
    if isinstance(unit, Unit2Form):
        return Unit2(value=_eval_expr(unit.value, scope))
    if isinstance(unit, BindForm):
        return Bind(name=unit.name, value=_eval_expr(unit.value, scope))
    if isinstance(unit, DoForm):
        return Do(value=_eval_expr(unit.value, scope))
    if isinstance(unit, ConditionalGroup):
        body = _select_body(unit, scope)
        return None if body is None else _eval_body(body, scope)
    raise TypeError(f"Unsupported statement unit: {type(unit)!r}")


# Dispatch


def _finish(capability: "Capability"):
    # The sequence ended without unit()/unit2().
    return capability.zero()


def _resume(units: tuple[StatementUnit, ...], index: int, scope: Scope, capability: "Capability"):
    if index == len(units):
        return _finish(capability)
    return _run_units(units, index, scope, capability)


def _run_units(units: tuple[StatementUnit, ...], start: int, scope: Scope, capability: "Capability"):
    """Evaluate ``units[start:]``; let and plain statements loop instead of recursing."""
    if start >= len(units):
        raise EmptySequenceError("Cannot evaluate an empty statement sequence")

    last = len(units) - 1
    index = start
    while True:
        marker = _eval_unit(units[index], scope)
        rest = index + 1

        if isinstance(marker, Let):
            scope = scope.extend(marker.name, marker.value)
            if index == last:
                return _finish(capability)
            index = rest
            continue

        if isinstance(marker, Bind):
            if marker.name in RESERVED_NAMES:
                raise ReservedNameError(marker.name, RESERVED_NAMES)
            bound_scope, name = scope, marker.name

            def bind_continuation(value):
                return _resume(units, rest, bound_scope.extend(name, value), capability)

            return capability.bind(marker.value, bind_continuation)

        if isinstance(marker, Do):
            do_scope = scope

            def do_continuation():
                return _resume(units, rest, do_scope, capability)

            return capability.monad_do(marker.value, do_continuation)

        if isinstance(marker, (Unit, Unit2)):
            if isinstance(marker, Unit):
                wrapped = capability.unit(marker.value)
            else:
                wrapped = capability.unit2(marker.value)
            if index == last:
                return wrapped
            if not capability.flags.has_combine:
                raise CombineNotImplementedError(
                    f"{type(capability).__name__} does not implement combine(); "
                    "unit(...) and unit2(...) may only appear as the last statement"
                )
            rest_scope = scope
            delayed = capability.delay(lambda: _run_units(units, rest, rest_scope, capability))
            return capability.combine(wrapped, delayed)

        if marker is not None:
            raise TypeError(f"Unsupported marker: {marker!r}")
        if index == last:
            return _finish(capability)
        index = rest


def evaluate(source: str | Program, bindings: Mapping[str, object] | None, capability: "Capability"):
    """Run embedded code against ``capability`` and return the composed value.

    ``bindings`` overlay the capability's prelude. A capability that
    implements ``delay`` sees the whole evaluation passed through it once,
    and one that implements ``run`` has ``run`` applied to the outcome.
    """
    program = _load_program(source)
    seed: dict[str, object] = dict(capability.prelude())
    if bindings is not None:
        seed.update(bindings)
    scope = Scope(seed)
    units = program.units
    flags = capability.flags

    logger.debug(
        "evaluating %d statement unit(s) with %s (delay=%s, run=%s)",
        len(units),
        type(capability).__name__,
        flags.has_delay,
        flags.has_run,
    )

    def run_program():
        return _run_units(units, 0, scope, capability)

    result = capability.delay(run_program) if flags.has_delay else run_program()
    if flags.has_run:
        result = capability.run(result)
    return result
