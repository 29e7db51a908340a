# python
"""
Scoped actions behavioral tests (two phases around the "--" separator).

Scope
- ScopedAction definition rules (selectors, scoped hook).
- LazyRegistry one-time transition.
- ScopingController phases, gate, and state machine.
- Phase-2 ambiguity judged independently of phase 1.
- Names shared between the two tiers.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from collections import deque
from unittest import TestCase

from scopeline import (
    SCOPING_GROUP,
    Action,
    AmbiguousParameterError,
    Built,
    DefinitionConflictError,
    DefinitionError,
    LazyRegistry,
    MissingRequiredParameterError,
    MissingScopeError,
    ParameterRegistry,
    ParseContext,
    Phase,
    ScopedAction,
    ScopingController,
    Unbuilt,
    UnexpectedTokenError,
    UnknownParameterError,
)


def _unscoped(provider):
    provider.define_flag_parameter("--scoping", group=SCOPING_GROUP)
    provider.define_flag_parameter("--verbose", "-v")


def _scoped_action(required=False, calls=None):
    def scoped(provider, namespace):
        if calls is not None:
            calls.append(namespace)
        provider.define_string_parameter("--arg", "-a", scope="scope1", required=required)
        provider.define_string_parameter("--arg", "-a", scope="scope2")
        provider.define_string_parameter("--non-conflicting-arg", "-a", scope="scope")

    action = ScopedAction(
        name="scoped-action",
        define_parameters=_unscoped,
        define_scoped_parameters=scoped,
    )
    action.build()
    return action


def _run(action, *tokens):
    context = ParseContext(action)
    controller = ScopingController(action, context, index=2)
    controller.run(deque(tokens))
    return controller, context


class TestScopedActionDefinition(TestCase):
    """Behavioral tests for ScopedAction definition rules."""

    def testScopedActionWithoutSelectorRejected(self):
        action = ScopedAction(
            name="broken",
            define_parameters=lambda provider: provider.define_flag_parameter("--verbose"),
            define_scoped_parameters=lambda provider, namespace: None,
        )
        with self.assertRaises(DefinitionError):
            action.build()

    def testScopedActionWithoutScopedHookRejected(self):
        action = ScopedAction(name="broken", define_parameters=_unscoped)
        with self.assertRaises(DefinitionError):
            action.build()

    def testHooksAttachedByDecorator(self):
        action = ScopedAction(name="decorated")

        @action.define_parameters
        def unscoped(provider):
            _unscoped(provider)

        @action.define_scoped_parameters
        def scoped(provider, namespace):
            provider.define_flag_parameter("--deep")

        action.build()
        self.assertEqual([parameter.long_name for parameter in action.selectors], ["--scoping"])

    def testHooksCannotBeOverridden(self):
        action = ScopedAction(name="once", define_parameters=_unscoped)
        with self.assertRaises(TypeError):
            action.define_parameters(_unscoped)

    def testHooksCannotBeAttachedAfterBuild(self):
        action = Action(name="plain")
        action.build()
        with self.assertRaises(RuntimeError):
            action.define_parameters(_unscoped)


class TestLazyRegistry(TestCase):
    """Behavioral tests for the Unbuilt | Built transition."""

    def testBuilderRunsOnce(self):
        calls = []

        def builder():
            calls.append(True)
            return ParameterRegistry("scoped").finalize()

        lazy = LazyRegistry(builder)
        self.assertIsInstance(lazy.state, Unbuilt)
        self.assertFalse(lazy.built)
        first = lazy.get()
        self.assertIs(lazy.get(), first)
        self.assertIsInstance(lazy.state, Built)
        self.assertEqual(len(calls), 1)

    def testBuilderMustReturnAFinalizedRegistry(self):
        with self.assertRaises(RuntimeError):
            LazyRegistry(lambda: ParameterRegistry("scoped")).get()

    def testBuilderMustBeCallable(self):
        with self.assertRaises(TypeError):
            LazyRegistry("registry")  # type: ignore[arg-type]


class TestScopingController(TestCase):
    """Behavioral tests for the two-phase controller."""

    def testInitialState(self):
        action = _scoped_action()
        controller = ScopingController(action, ParseContext(action))
        self.assertIs(controller.state, Phase.INIT)
        self.assertFalse(controller.scoped.built)

    def testBothPhasesResolve(self):
        action = _scoped_action()
        controller, context = _run(action, "--scoping", "-v", "--", "--scope1:arg", "x", "--non-conflicting-arg", "y")
        self.assertIs(controller.state, Phase.DONE)
        namespace = context.namespace()
        self.assertTrue(namespace.scoped)
        self.assertIs(namespace["--verbose"], True)
        self.assertEqual(namespace["--scope1:arg"], "x")
        self.assertEqual(namespace["--non-conflicting-arg"], "y")
        self.assertIsNone(namespace["--scope2:arg"])

    def testSharedAliasInPhaseTwoListsAllOwners(self):
        action = _scoped_action()
        with self.assertRaises(AmbiguousParameterError) as context:
            _run(action, "--scoping", "--", "-a")
        fault = context.exception
        self.assertEqual(
            set(fault.options["candidates"]),
            {"--scope1:arg", "--scope2:arg", "--scope:non-conflicting-arg"},
        )
        self.assertEqual(fault.options["tier"], "scoped")
        self.assertIn("fourth position", str(fault))

    def testSeparatorWithoutSelectorIsMissingScope(self):
        action = _scoped_action()
        context = ParseContext(action)
        controller = ScopingController(action, context, index=2)
        with self.assertRaises(MissingScopeError) as raised:
            controller.run(deque(["-v", "--", "--scope1:arg", "x"]))
        self.assertIs(controller.state, Phase.FAILED)
        self.assertEqual(raised.exception.options["selectors"], ("--scoping",))
        self.assertEqual(raised.exception.options["index"], 3)
        self.assertFalse(controller.scoped.built)

    def testNoSeparatorNoSelectorSkipsScopedTier(self):
        action = _scoped_action(required=True)
        controller, context = _run(action, "-v")
        self.assertIs(controller.state, Phase.DONE)
        self.assertFalse(controller.scoped.built)
        self.assertEqual(len(context.registries), 1)

    def testNoSeparatorWithSelectorReportsRequiredScopedParameters(self):
        action = _scoped_action(required=True)
        with self.assertRaises(MissingRequiredParameterError) as context:
            _run(action, "--scoping")
        self.assertEqual(context.exception.options["tier"], "scoped")
        self.assertEqual(context.exception.options["unmet"], ("--scope1:arg",))

    def testNoSeparatorWithSelectorAndNothingRequiredSucceeds(self):
        action = _scoped_action()
        controller, context = _run(action, "--scoping")
        namespace = context.namespace()
        self.assertFalse(namespace.scoped)
        self.assertIsNone(namespace["--scope1:arg"])
        self.assertIs(controller.state, Phase.DONE)

    def testScopedHookSeesUnscopedValues(self):
        calls = []
        action = _scoped_action(calls=calls)
        _run(action, "--scoping", "-v", "--")
        self.assertEqual(len(calls), 1)
        self.assertIs(calls[0]["--scoping"], True)
        self.assertIs(calls[0]["--verbose"], True)

    def testScopedTierIsRebuiltForEveryParse(self):
        calls = []
        action = _scoped_action(calls=calls)
        _, first = _run(action, "--scoping", "--", "--scope1:arg", "x")
        _, second = _run(action, "--scoping", "--")
        self.assertEqual(len(calls), 2)
        self.assertIsNot(first.registries[1], second.registries[1])
        self.assertIsNone(second.namespace()["--scope1:arg"])

    def testScopedParametersAreUnknownBeforeTheSeparator(self):
        action = _scoped_action()
        with self.assertRaises(UnknownParameterError):
            _run(action, "--scoping", "--scope1:arg", "x")

    def testSecondSeparatorIsUnexpected(self):
        action = _scoped_action()
        with self.assertRaises(UnexpectedTokenError):
            _run(action, "--scoping", "--", "--")

    def testControllerRunsOnce(self):
        action = _scoped_action()
        controller, _ = _run(action, "--scoping")
        with self.assertRaises(RuntimeError):
            controller.run(deque())


class TestNamesAcrossTiers(TestCase):
    """Short aliases and long names appearing in both tiers."""

    def _action(self, unscoped, scoped):
        action = ScopedAction(
            name="scoped-action",
            define_parameters=unscoped,
            define_scoped_parameters=lambda provider, namespace: scoped(provider),
        )
        action.build()
        return action

    def testScopedTierReusesTheSelectorAlias(self):
        action = self._action(
            lambda provider: provider.define_flag_parameter("--scoping", "-s", group=SCOPING_GROUP),
            lambda provider: provider.define_string_parameter("--count", "-s"),
        )
        controller, context = _run(action, "-s", "--", "-s", "3")
        self.assertIs(controller.state, Phase.DONE)
        namespace = context.namespace()
        self.assertIs(namespace["--scoping"], True)
        self.assertEqual(namespace["--count"], "3")
        self.assertEqual(namespace.string_map(), {"--scoping": "true", "--count": "3"})

    def testAliasOwnedByBothTiersIsAmbiguousInTheNamespace(self):
        action = self._action(
            lambda provider: provider.define_flag_parameter("--scoping", "-s", group=SCOPING_GROUP),
            lambda provider: provider.define_string_parameter("--count", "-s"),
        )
        _, context = _run(action, "-s", "--", "-s", "3")
        with self.assertRaises(AmbiguousParameterError) as raised:
            context.namespace()["-s"]
        self.assertEqual(
            raised.exception.options["candidates"],
            ("--scoping (unscoped)", "--count (scoped)"),
        )

    def testScopedTierCannotRedefineAnUnscopedName(self):
        def unscoped(provider):
            provider.define_flag_parameter("--scoping", group=SCOPING_GROUP)
            provider.define_string_parameter("--name")

        action = self._action(unscoped, lambda provider: provider.define_string_parameter("--name"))
        context = ParseContext(action)
        controller = ScopingController(action, context, index=2)
        with self.assertRaises(DefinitionConflictError):
            controller.run(deque(["--scoping", "--name", "A", "--", "--name", "B"]))
        self.assertIs(controller.state, Phase.FAILED)
        self.assertFalse(controller.scoped.built)

    def testScopedTierMayQualifyAnUnscopedName(self):
        def unscoped(provider):
            provider.define_flag_parameter("--scoping", group=SCOPING_GROUP)
            provider.define_string_parameter("--name")

        action = self._action(unscoped, lambda provider: provider.define_string_parameter("--name", scope="inner"))
        _, context = _run(action, "--scoping", "--name", "A", "--", "--inner:name", "B")
        self.assertEqual(
            context.namespace().string_map(),
            {"--scoping": "true", "--name": "A", "--inner:name": "B"},
        )
        self.assertEqual(context.namespace()["--name"], "A")


if __name__ == "__main__":
    unittest.main()
