from __future__ import annotations

import unittest

from monadic_eval import (
    Capability,
    CapabilityFlags,
    CoroutineMonad,
    InvariantViolationError,
    ListMonad,
    OperationNotImplementedError,
    OptionalMonad,
    ResultMonad,
    SequenceMonad,
    StateMonad,
)


class CapabilityContractTests(unittest.TestCase):
    def test_unit_is_required(self) -> None:
        class Empty(Capability):
            pass

        with self.assertRaises(TypeError):
            Empty()

    def test_combine_without_delay_fails_at_construction(self) -> None:
        evaluated: list[str] = []

        class Broken(Capability):
            def unit(self, value):
                return value

            def combine(self, first, rest):
                return first

            def evaluate(self, source, bindings=None):
                evaluated.append(source)
                return super().evaluate(source, bindings)

        with self.assertRaises(InvariantViolationError):
            Broken()
        self.assertEqual(evaluated, [])

    def test_flags_follow_overrides_through_inheritance(self) -> None:
        class Base(Capability):
            def unit(self, value):
                return value

            def delay(self, thunk):
                return thunk()

        class Child(Base):
            def combine(self, first, rest):
                return first

            def run(self, delayed):
                return delayed

        self.assertEqual(Base().flags, CapabilityFlags(has_combine=False, has_delay=True, has_run=False))
        self.assertEqual(Child().flags, CapabilityFlags(has_combine=True, has_delay=True, has_run=True))

    def test_builtin_capability_flags(self) -> None:
        cases = {
            ListMonad: (True, True, False),
            OptionalMonad: (True, True, False),
            ResultMonad: (True, True, False),
            StateMonad: (False, False, False),
            SequenceMonad: (True, True, False),
            CoroutineMonad: (False, False, False),
        }
        for cls, (has_combine, has_delay, has_run) in cases.items():
            with self.subTest(capability=cls.__name__):
                self.assertEqual(cls().flags, CapabilityFlags(has_combine, has_delay, has_run))

    def test_default_operations_raise_not_implemented(self) -> None:
        class UnitOnly(Capability):
            def unit(self, value):
                return value

        cap = UnitOnly()
        self.assertEqual(cap.unit2("w"), "w")
        self.assertEqual(cap.prelude(), {})
        for call in (
            lambda: cap.bind(1, lambda v: v),
            lambda: cap.monad_do(1, lambda: 0),
            cap.zero,
            lambda: cap.combine(1, 2),
            lambda: cap.delay(lambda: 0),
            lambda: cap.run(0),
        ):
            with self.assertRaises(OperationNotImplementedError):
                call()
        with self.assertRaises(NotImplementedError):
            cap.zero()


if __name__ == "__main__":
    unittest.main()
