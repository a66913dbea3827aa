"""
Tests for the Unset sentinel and coalesce().

Scope
- Singleton identity, falsy semantics and stable repr of Unset.
- Copy/pickle keep the singleton.
- coalesce() only replaces the sentinel, never other falsey values.

Conventions
- Test method names follow CamelCase per project convention.
"""
import copy
import pickle
import unittest
from unittest import TestCase

from flagbind.utils import Unset, UnsetType, coalesce


class TestUnset(TestCase):
    """Behavioral tests for the Unset sentinel."""

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)
        self.assertIs(UnsetType(), UnsetType())

    def testFalsy(self):
        self.assertFalse(Unset)

    def testNotEqualToOtherFalseyValues(self):
        self.assertIsNot(Unset, None)
        self.assertNotEqual(Unset, "")
        self.assertNotEqual(Unset, 0)

    def testRepr(self):
        self.assertEqual(repr(Unset), "Unset")

    def testCopyAndPicklePreserveIdentity(self):
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)
        self.assertIs(pickle.loads(pickle.dumps(Unset)), Unset)

    def testSubclassingRejected(self):
        with self.assertRaises(TypeError):
            type("Derived", (UnsetType,), {})


class TestCoalesce(TestCase):
    """Behavioral tests for coalesce()."""

    def testUnsetIsReplaced(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")

    def testUnsetDefaultsToNone(self):
        self.assertIsNone(coalesce(Unset))

    def testFalseyValuesArePreserved(self):
        self.assertEqual(coalesce("", "fallback"), "")
        self.assertEqual(coalesce(0, "fallback"), 0)
        self.assertIsNone(coalesce(None, "fallback"))


if __name__ == "__main__":
    unittest.main()
