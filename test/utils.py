"""
Tests for the internal helpers (Unset sentinel, coalesce, rename, mirror).

Scope
- Unset: singleton identity, falsy semantics, copy/pickle identity, finality.
- coalesce: only Unset is replaced.
- rename: both call forms, and rejection of bad arguments.
- mirror: read-only properties that hand out copies of containers.
"""
import copy
import pickle
import unittest
from unittest import TestCase

from argy.utils import *


class UnsetTest(TestCase):
    """Behavioral tests for the Unset sentinel."""

    def testSingleton(self) -> None:
        self.assertIs(UnsetType(), Unset)
        self.assertIs(UnsetType(), UnsetType())

    def testFalsy(self) -> None:
        self.assertFalse(Unset)

    def testDistinctFromOtherFalsyValues(self) -> None:
        self.assertIsNot(Unset, None)
        self.assertNotEqual(Unset, None)
        self.assertNotEqual(Unset, 0)
        self.assertNotEqual(Unset, "")

    def testRepr(self) -> None:
        self.assertEqual(repr(Unset), "Unset")

    def testCopyDeepcopyPreserveSingleton(self) -> None:
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)
        self.assertIs(copy.deepcopy([Unset])[0], Unset)

    def testPickleRoundTrip(self) -> None:
        self.assertIs(pickle.loads(pickle.dumps(Unset)), Unset)

    def testFinalClass(self) -> None:
        with self.assertRaises(TypeError):
            type("UnsetSubtype", (UnsetType,), {})

    def testUnionWithTypes(self) -> None:
        self.assertIsInstance("text", str | Unset)
        self.assertIsInstance(Unset, str | Unset)
        self.assertNotIsInstance(1, str | Unset)


class CoalesceTest(TestCase):
    """coalesce() replaces Unset and nothing else."""

    def testUnsetReplaced(self) -> None:
        self.assertEqual(coalesce(Unset, 10), 10)

    def testDefaultDefaultsToNone(self) -> None:
        self.assertIsNone(coalesce(Unset))

    def testFalsyValuesPreserved(self) -> None:
        for value in (0, "", [], None, False):
            with self.subTest(value=value):
                self.assertIs(coalesce(value, 10), value)


class RenameTest(TestCase):
    """rename() as a function and as a decorator."""

    def testFunctionForm(self) -> None:
        def function():
            pass

        self.assertIs(rename(function, "other"), function)
        self.assertEqual(function.__name__, "other")
        self.assertEqual(function.__qualname__, "other")

    def testDecoratorForm(self) -> None:
        @rename("validator")
        def function():
            pass

        self.assertEqual(function.__name__, "validator")

    def testRejectsNonCallable(self) -> None:
        with self.assertRaises(TypeError):
            rename(42, "name")

    def testRejectsNonStringName(self) -> None:
        with self.assertRaises(TypeError):
            rename(lambda: None, 42)
        with self.assertRaises(TypeError):
            rename(42)

    def testRejectsWrongArity(self) -> None:
        with self.assertRaises(TypeError):
            rename()
        with self.assertRaises(TypeError):
            rename(lambda: None, "a", "b")


class MirrorTest(TestCase):
    """mirror() exposes private fields read-only, copying containers."""

    class Record:
        values = mirror("values")
        names = mirror("names", frozen=True)
        count = mirror("count")

        def __init__(self):
            self._values = [1, 2]
            self._names = ["a", "b"]
            self._count = 3

    def testScalarPassThrough(self) -> None:
        self.assertEqual(self.Record().count, 3)

    def testListCopiedOnRead(self) -> None:
        record = self.Record()
        values = record.values
        values.append(3)
        self.assertEqual(record.values, [1, 2])
        self.assertIsNot(record.values, record.values)

    def testFrozenReturnsTuple(self) -> None:
        self.assertEqual(self.Record().names, ("a", "b"))

    def testReadOnly(self) -> None:
        with self.assertRaises(AttributeError):
            self.Record().count = 4

    def testRejectsNonStringName(self) -> None:
        with self.assertRaises(TypeError):
            mirror(42)


if __name__ == '__main__':
    unittest.main()
