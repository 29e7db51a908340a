# python
"""
Parameters module behavioral tests.

Scope
- Validate the parameter kinds (FlagParameter, StringParameter, ChoiceParameter):
  construction, normalization, and derived names.
- Validate metadata constraints (long/short name shapes, scope shape, empty
  strings, choice alternatives and defaults).

Conventions
- Test method names follow CamelCase per project convention.
- Never pass explicit None for any parameter; omit instead.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from scopeline import SCOPING_GROUP, ChoiceParameter, FlagParameter, Parameter, StringParameter


class TestFlagParameter(TestCase):
    """Behavioral tests for presence-only flags."""

    def testFlagIsNeverRequiredAndDefaultsToFalse(self):
        flag = FlagParameter("--verbose", "-v")
        self.assertFalse(flag.required)
        self.assertIs(flag.default, False)
        self.assertFalse(flag.takes_value)
        self.assertEqual(flag.kind, "flag")

    def testFlagOptionalMetadataDefaultsToNone(self):
        flag = FlagParameter("--verbose")
        self.assertIsNone(flag.short_name)
        self.assertIsNone(flag.scope)
        self.assertIsNone(flag.group)
        self.assertIsNone(flag.description)

    def testFlagInScopingGroupIsScoping(self):
        self.assertTrue(FlagParameter("--scoping", group=SCOPING_GROUP).scoping)
        self.assertFalse(FlagParameter("--other", group="misc").scoping)

    def testFlagExplicitNoneRejected(self):
        with self.assertRaises(TypeError):
            FlagParameter("--verbose", None)  # type: ignore[arg-type]


class TestStringParameter(TestCase):
    """Behavioral tests for value-bearing string parameters."""

    def testQualifiedNameOfScopedParameter(self):
        parameter = StringParameter("--arg", "-a", scope="scope1", argument_name="ARG")
        self.assertEqual(parameter.name, "arg")
        self.assertEqual(parameter.qualified_name, "--scope1:arg")

    def testQualifiedNameOfUnscopedParameterIsLongName(self):
        parameter = StringParameter("--short1", "-s")
        self.assertEqual(parameter.qualified_name, "--short1")

    def testArgumentNameDefaultsToValue(self):
        self.assertEqual(StringParameter("--output").argument_name, "VALUE")

    def testRequiredAndDefault(self):
        parameter = StringParameter("--output", required=True, default="out")
        self.assertTrue(parameter.required)
        self.assertEqual(parameter.default, "out")
        self.assertTrue(parameter.takes_value)
        self.assertIsNone(StringParameter("--other").default)

    def testNamesAreStripped(self):
        parameter = StringParameter("  --output ", " -o ")
        self.assertEqual(parameter.long_name, "--output")
        self.assertEqual(parameter.short_name, "-o")

    def testMalformedLongNameRejected(self):
        for name in ("output", "-output", "--1st", "--out--put", "--", "--out_put"):
            with self.subTest(name=name), self.assertRaises(ValueError):
                StringParameter(name)

    def testNonStringLongNameRejected(self):
        with self.assertRaises(TypeError):
            StringParameter(3)  # type: ignore[arg-type]

    def testMalformedShortNameRejected(self):
        for name in ("s", "-ab", "--s", "-1"):
            with self.subTest(name=name), self.assertRaises(ValueError):
                StringParameter("--value", name)

    def testMalformedScopeRejected(self):
        for scope in ("", "scope 1", "1scope", "scope:inner"):
            with self.subTest(scope=scope), self.assertRaises(ValueError):
                StringParameter("--value", scope=scope)

    def testEmptyGroupAndDescriptionRejected(self):
        with self.assertRaises(ValueError):
            StringParameter("--value", group="  ")
        with self.assertRaises(ValueError):
            StringParameter("--value", description="")

    def testLowerCaseArgumentNameRejected(self):
        with self.assertRaises(ValueError):
            StringParameter("--value", argument_name="arg")

    def testNonStringDefaultRejected(self):
        with self.assertRaises(TypeError):
            StringParameter("--value", default=3)  # type: ignore[arg-type]

    def testReprUsesTypename(self):
        self.assertTrue(repr(StringParameter("--value")).startswith("string-parameter("))

    def testAnyTokenIsAccepted(self):
        self.assertTrue(StringParameter("--value").accepts("-anything"))


class TestChoiceParameter(TestCase):
    """Behavioral tests for choice parameters."""

    def testAlternativesAndArgumentName(self):
        parameter = ChoiceParameter("--mode", alternatives=("fast", "safe"))
        self.assertEqual(parameter.alternatives, ("fast", "safe"))
        self.assertEqual(parameter.argument_name, "{fast,safe}")
        self.assertTrue(parameter.accepts("fast"))
        self.assertFalse(parameter.accepts("slow"))

    def testDefaultMustBeAnAlternative(self):
        self.assertEqual(ChoiceParameter("--mode", alternatives=("a", "b"), default="b").default, "b")
        with self.assertRaises(ValueError):
            ChoiceParameter("--mode", alternatives=("a", "b"), default="c")

    def testInvalidAlternativesRejected(self):
        with self.assertRaises(ValueError):
            ChoiceParameter("--mode", alternatives=())
        with self.assertRaises(ValueError):
            ChoiceParameter("--mode", alternatives=("a", "a"))
        with self.assertRaises(TypeError):
            ChoiceParameter("--mode", alternatives="ab")
        with self.assertRaises(TypeError):
            ChoiceParameter("--mode", alternatives=("a", 1))  # type: ignore[arg-type]


class TestParameterKinds(TestCase):
    """Behavioral tests for the kind contract."""

    def testSubclassWithoutKindRejected(self):
        with self.assertRaises(TypeError):
            class Unnamed(Parameter):  # NOQA: F-841
                pass

    def testParameterHoldsNoValue(self):
        parameter = StringParameter("--value")
        self.assertFalse(hasattr(parameter, "value"))


if __name__ == "__main__":
    unittest.main()
