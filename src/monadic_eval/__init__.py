"""monadic-eval public API."""

from .capability import Capability, CapabilityFlags
from .errors import (
    BindNotImplementedError,
    CombineNotImplementedError,
    DoNotImplementedError,
    EmptySequenceError,
    EvaluationError,
    InvariantViolationError,
    MonadEvalError,
    OperationNotImplementedError,
    ParseError,
    ReservedNameError,
    UndefinedNameError,
    UnsupportedCombineError,
    ZeroNotImplementedError,
)
from .evaluator import RESERVED_NAMES, Scope, evaluate
from .monads import (
    NOTHING,
    CoroutineMonad,
    Done,
    Err,
    ListMonad,
    Ok,
    OptionalMonad,
    Paused,
    ResultMonad,
    SeqItem,
    SequenceMonad,
    Some,
    StateMonad,
    StateResult,
    cons,
    counter,
    empty_seq,
    get_state,
    pause,
    race,
    seq_items,
    seq_iter,
    seq_take,
    seq_unit,
    set_state,
)
from .parser import parse, parse_expression, parse_program

try:
    from .montecarlo import cesaro, estimate_pi, get_rand, monte_carlo
except ModuleNotFoundError as exc:
    if exc.name and exc.name.startswith("jax"):
        _jax_import_error = exc

        def get_rand(*_args, **_kwargs):
            raise ModuleNotFoundError(
                "jax is required for get_rand(). Install runtime deps first."
            ) from _jax_import_error

        def cesaro(*_args, **_kwargs):
            raise ModuleNotFoundError(
                "jax is required for cesaro(). Install runtime deps first."
            ) from _jax_import_error

        def monte_carlo(*_args, **_kwargs):
            raise ModuleNotFoundError(
                "jax is required for monte_carlo(). Install runtime deps first."
            ) from _jax_import_error

        def estimate_pi(*_args, **_kwargs):
            raise ModuleNotFoundError(
                "jax is required for estimate_pi(). Install runtime deps first."
            ) from _jax_import_error

    else:
        raise

__all__ = [
    "RESERVED_NAMES",
    "NOTHING",
    "BindNotImplementedError",
    "Capability",
    "CapabilityFlags",
    "CombineNotImplementedError",
    "CoroutineMonad",
    "DoNotImplementedError",
    "Done",
    "EmptySequenceError",
    "Err",
    "EvaluationError",
    "InvariantViolationError",
    "ListMonad",
    "MonadEvalError",
    "Ok",
    "OperationNotImplementedError",
    "OptionalMonad",
    "ParseError",
    "Paused",
    "ReservedNameError",
    "ResultMonad",
    "Scope",
    "SeqItem",
    "SequenceMonad",
    "Some",
    "StateMonad",
    "StateResult",
    "UndefinedNameError",
    "UnsupportedCombineError",
    "ZeroNotImplementedError",
    "cesaro",
    "cons",
    "counter",
    "empty_seq",
    "estimate_pi",
    "evaluate",
    "get_rand",
    "get_state",
    "monte_carlo",
    "parse",
    "parse_expression",
    "parse_program",
    "pause",
    "race",
    "seq_items",
    "seq_iter",
    "seq_take",
    "seq_unit",
    "set_state",
]
