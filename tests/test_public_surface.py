from __future__ import annotations

import os
import unittest

import monadic_eval
from monadic_eval import ListMonad, OptionalMonad, ParseError, Some
from monadic_eval import evaluator


class PublicSurfaceTests(unittest.TestCase):
    def test_all_names_resolve(self) -> None:
        for name in monadic_eval.__all__:
            with self.subTest(name=name):
                self.assertTrue(hasattr(monadic_eval, name))

    def test_reserved_names(self) -> None:
        self.assertEqual(monadic_eval.RESERVED_NAMES, frozenset({"_code", "_context", "_head", "_result"}))

    def test_preludes_expose_constructors(self) -> None:
        self.assertEqual(set(OptionalMonad().prelude()), {"Some", "NOTHING"})
        self.assertEqual(set(monadic_eval.ResultMonad().prelude()), {"Ok", "Err"})
        self.assertEqual(set(monadic_eval.StateMonad().prelude()), {"get_state", "set_state"})
        self.assertEqual(set(monadic_eval.CoroutineMonad().prelude()), {"pause"})

    def test_bindings_shadow_prelude(self) -> None:
        self.assertEqual(OptionalMonad().evaluate("unit2(Some(1))", {"Some": lambda v: Some(v * 10)}), Some(10))

    def test_parse_errors_surface_before_evaluation(self) -> None:
        calls: list[object] = []
        with self.assertRaises(ParseError):
            ListMonad().evaluate("record(1); unit(", {"record": calls.append})
        self.assertEqual(calls, [])

    @unittest.skipIf(os.environ.get("MONADIC_EVAL_DISABLE_PARSE_CACHE") == "1", "parse cache disabled")
    def test_repeated_sources_reuse_the_parse_cache(self) -> None:
        source = "bind(x, xs); unit(x + 100)"
        ListMonad().evaluate(source, {"xs": [1]})
        before = evaluator._parse_program_cached.cache_info().hits
        self.assertEqual(ListMonad().evaluate(source, {"xs": [2, 3]}), [102, 103])
        self.assertEqual(evaluator._parse_program_cached.cache_info().hits, before + 1)

    def test_evaluation_logs_at_debug(self) -> None:
        with self.assertLogs("monadic_eval.evaluator", level="DEBUG") as logs:
            ListMonad().evaluate("unit(1)")
        self.assertTrue(any("ListMonad" in line for line in logs.output))


if __name__ == "__main__":
    unittest.main()
