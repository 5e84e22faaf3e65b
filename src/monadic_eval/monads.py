"""Concrete capabilities: list, optional, result, state, lazy sequence and coroutine step."""

from __future__ import annotations

import numbers
from dataclasses import dataclass
from typing import Callable, ClassVar, Final, Union

from .capability import Capability
from .errors import UnsupportedCombineError


# Sum types


@dataclass(frozen=True)
class Some:
    value: object


@dataclass(frozen=True)
class _Nothing:
    def __repr__(self) -> str:
        return "NOTHING"


NOTHING: Final = _Nothing()
Option = Union[Some, _Nothing]


@dataclass(frozen=True)
class Ok:
    value: object


@dataclass(frozen=True)
class Err:
    error: object


Result = Union[Ok, Err]


@dataclass(frozen=True)
class StateResult:
    """Outcome of one stateful step: the updated state and the step's value."""

    state: object
    value: object


StateFn = Callable[[object], StateResult]


@dataclass(frozen=True)
class SeqItem:
    item: object
    next: "Sequence"


# A sequence is a thunk returning Some(SeqItem) for a node, or NOTHING at the end.
Sequence = Callable[[], Option]


@dataclass(frozen=True)
class Done:
    value: object


@dataclass(frozen=True)
class Paused:
    next: "Coroutine"


Coroutine = Callable[[], Union[Done, Paused]]


def _is_number(value: object) -> bool:
    return isinstance(value, numbers.Number) and not isinstance(value, bool)


def _add_payloads(left, right, *, where: str):
    # Only numeric payloads have a defined sum; anything else is left unsupported.
    if not (_is_number(left) and _is_number(right)):
        raise UnsupportedCombineError(
            f"{where} adds payloads and only supports numbers, got {type(left).__name__} and {type(right).__name__}"
        )
    return left + right


# List


class ListMonad(Capability):
    """Multi-result composition: ``bind`` runs the rest once per element.

    Example:
        ListMonad().evaluate("bind(x, [1, 2]); bind(y, [10, 20]); unit(x + y)")
        # [11, 21, 12, 22]
    """

    def unit(self, value):
        return [value]

    def bind(self, wrapped, continuation):
        out: list[object] = []
        for item in wrapped:
            out.extend(continuation(item))
        return out

    def monad_do(self, wrapped, continuation):
        return self.bind(wrapped, lambda _: continuation())

    def zero(self):
        return []

    def combine(self, first, rest):
        return [*first, *rest]

    def delay(self, thunk):
        return thunk()


# Optional


class OptionalMonad(Capability):
    """Short-circuits to ``NOTHING`` as soon as a bound value is absent."""

    def unit(self, value):
        return Some(value)

    def bind(self, wrapped, continuation):
        if isinstance(wrapped, Some):
            return continuation(wrapped.value)
        if wrapped is NOTHING:
            return NOTHING
        raise TypeError(f"OptionalMonad expects Some or NOTHING, got {type(wrapped).__name__}")

    def monad_do(self, wrapped, continuation):
        return self.bind(wrapped, lambda _: continuation())

    def zero(self):
        return NOTHING

    def combine(self, first, rest):
        if isinstance(first, Some) and isinstance(rest, Some):
            return Some(_add_payloads(first.value, rest.value, where="OptionalMonad.combine"))
        if isinstance(first, Some):
            return first
        return rest

    def delay(self, thunk):
        return thunk()

    def prelude(self) -> dict[str, object]:
        return {"Some": Some, "NOTHING": NOTHING}


# Result


class ResultMonad(Capability):
    """Short-circuits on the first ``Err``; ``Ok`` payloads are unwrapped."""

    neutral_error: ClassVar[object] = 0

    def unit(self, value):
        return Ok(value)

    def bind(self, wrapped, continuation):
        if isinstance(wrapped, Ok):
            return continuation(wrapped.value)
        if isinstance(wrapped, Err):
            return wrapped
        raise TypeError(f"ResultMonad expects Ok or Err, got {type(wrapped).__name__}")

    def monad_do(self, wrapped, continuation):
        return self.bind(wrapped, lambda _: continuation())

    def zero(self):
        return Err(self.neutral_error)

    def combine(self, first, rest):
        if isinstance(first, Ok) and isinstance(rest, Ok):
            return Ok(_add_payloads(first.value, rest.value, where="ResultMonad.combine"))
        if isinstance(first, Err) and isinstance(rest, Err):
            return Err(_add_payloads(first.error, rest.error, where="ResultMonad.combine"))
        return first if isinstance(first, Err) else rest

    def delay(self, thunk):
        return thunk()

    def prelude(self) -> dict[str, object]:
        return {"Ok": Ok, "Err": Err}


# State


def get_state() -> StateFn:
    """Step that reads the current state as its value."""
    return lambda state: StateResult(state, state)


def set_state(new_state) -> StateFn:
    """Step that replaces the state and yields no value."""
    return lambda _state: StateResult(new_state, None)


class StateMonad(Capability):
    """Composes ``state -> StateResult`` functions, threading the state left to right.

    The evaluated program is itself a state function; apply it to the
    initial state to run it.
    """

    def unit(self, value):
        return lambda state: StateResult(state, value)

    def bind(self, wrapped, continuation):
        def step(state):
            first = wrapped(state)
            return continuation(first.value)(first.state)

        return step

    def monad_do(self, wrapped, continuation):
        return self.bind(wrapped, lambda _: continuation())

    def prelude(self) -> dict[str, object]:
        return {"get_state": get_state, "set_state": set_state}


# Lazy sequence


def empty_seq() -> Option:
    return NOTHING


def seq_unit(value) -> Sequence:
    return lambda: Some(SeqItem(value, empty_seq))


def cons(item, rest: Sequence) -> Sequence:
    return lambda: Some(SeqItem(item, rest))


def seq_take(count: int, seq: Sequence) -> Sequence:
    """Lazily keep the first ``count`` items; never forces the item after them."""

    def taken() -> Option:
        if count <= 0:
            return NOTHING
        node = seq()
        if isinstance(node, Some):
            return Some(SeqItem(node.value.item, seq_take(count - 1, node.value.next)))
        return node

    return taken


def seq_items(seq: Sequence):
    node = seq()
    while isinstance(node, Some):
        yield node.value.item
        node = node.value.next()


def seq_iter(f: Callable[[object], object], seq: Sequence) -> None:
    for item in seq_items(seq):
        f(item)


class SequenceMonad(Capability):
    """Lazy sequences; several ``unit``/``unit2`` statements concatenate.

    ``delay`` defers the rest of the program until the sequence built so far
    is exhausted, so a program may end by recursing into itself to describe
    an infinite sequence.
    """

    def unit(self, value):
        return seq_unit(value)

    def combine(self, first, rest):
        def combined() -> Option:
            node = first()
            if isinstance(node, Some):
                return Some(SeqItem(node.value.item, self.combine(node.value.next, rest)))
            return rest()

        return combined

    def delay(self, thunk):
        return lambda: thunk()()

    def prelude(self) -> dict[str, object]:
        return {"empty_seq": empty_seq, "cons": cons}


_COUNTER_SOURCE = """
if (start > end) {
    unit2(empty_seq)
} else if (start == end) {
    unit(start)
} else {
    unit2(cons(start, counter(start + 1, end)))
}
"""


def counter(start: int, end: int) -> Sequence:
    """The integers ``start..end`` inclusive, produced lazily."""
    return SequenceMonad().evaluate(_COUNTER_SOURCE, {"start": start, "end": end, "counter": counter})


# Coroutine step


def pause(value=None) -> Coroutine:
    """A step that yields control once and then finishes with ``value``."""
    return lambda: Paused(lambda: Done(value))


class CoroutineMonad(Capability):
    """Resumable computations; each call of a coroutine runs it to its next pause."""

    def unit(self, value):
        return lambda: Done(value)

    def bind(self, wrapped, continuation):
        def step():
            outcome = wrapped()
            if isinstance(outcome, Done):
                return continuation(outcome.value)()
            return Paused(self.bind(outcome.next, continuation))

        return step

    def monad_do(self, wrapped, continuation):
        return self.bind(wrapped, lambda _: continuation())

    def prelude(self) -> dict[str, object]:
        return {"pause": pause}


def race(first: Coroutine, second: Coroutine) -> tuple[int, object]:
    """Step both coroutines in turn until one is done.

    Returns ``(0, value)`` or ``(1, value)`` for the winner. Both are stepped
    every round and the first coroutine is checked first.
    """
    while True:
        first_step = first()
        second_step = second()
        if isinstance(first_step, Done):
            return 0, first_step.value
        if isinstance(second_step, Done):
            return 1, second_step.value
        first, second = first_step.next, second_step.next
