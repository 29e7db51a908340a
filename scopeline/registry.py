"""
scopeline parameter registry: definition, indexing, and ambiguity detection.

A ParameterRegistry owns the parameters of one provider: the unscoped tier of
an action, or the scoped tier of a scoped action. It has two strictly
sequential phases:

- definition: define(...) (or the define_*_parameter helpers) registers
  parameters in order. A duplicate (scope, long name) pair is rejected right
  away with DefinitionConflictError.
- resolution: after finalize() the registry is frozen and three indices answer
  lookups:
    • short index     "-s"          → [parameters sharing the alias]
    • long index      "arg"         → [(scope, parameter), ...]
    • qualified index "scope1:arg"  → parameter (unique by construction)

Ambiguity is a parse-time concern only: sharing an alias or reusing a long name
across scopes is legal, and fails only when the shared form is invoked
unqualified.
"""
import difflib
from collections import defaultdict

from .faults import *
from .parameters import *
from .utils import *


class ParameterRegistry:
    """
    Ordered collection of parameters with lookup indices.

    Parameters
    - tier: str
      Label used in fault messages ("unscoped" / "scoped").
    """

    def __init__(self, tier="unscoped", /):
        if not isinstance(tier, str):
            raise TypeError("parameter registry 'tier' must be a string")
        self._tier = tier
        self._parameters = []
        self._keys = set()
        self._finalized = False
        self._short_index = {}
        self._long_index = {}
        self._qualified_index = {}

    tier = mirror("tier")
    parameters = mirror("parameters")
    finalized = mirror("finalized")

    def __len__(self):
        return len(self._parameters)

    def __iter__(self):
        return iter(tuple(self._parameters))

    def __contains__(self, parameter):
        return parameter in self._parameters

    def __repr__(self):
        return f"parameter-registry(tier={self._tier!r}, parameters={len(self._parameters)}, finalized={self._finalized!r})"

    # ── definition ──────────────────────────────────────────────────────────

    def define(self, parameter, /):
        """
        Register a parameter; returns it so hooks can keep a handle.

        Raises
        - TypeError: when 'parameter' is not a Parameter.
        - RuntimeError: when the registry is already finalized.
        - DefinitionConflictError: when (scope, long name) is already taken.
        """
        if not isinstance(parameter, Parameter):
            raise TypeError("define() argument must be a parameter")
        if self._finalized:
            raise RuntimeError(f"{self._tier} parameter registry is finalized, no more parameters can be defined")
        if (key := (parameter.scope, parameter.long_name)) in self._keys:
            raise DefinitionConflictError(
                f"{self._tier} parameter {parameter.qualified_name!r} is already defined"
            )
        self._keys.add(key)
        self._parameters.append(parameter)
        return parameter

    def define_flag_parameter(self, *args, **kwargs):
        return self.define(FlagParameter(*args, **kwargs))

    def define_string_parameter(self, *args, **kwargs):
        return self.define(StringParameter(*args, **kwargs))

    def define_choice_parameter(self, *args, **kwargs):
        return self.define(ChoiceParameter(*args, **kwargs))

    def finalize(self):
        """
        Close the definition phase and build the lookup indices.

        An unscoped parameter may not share its long name with a scoped one:
        the unscoped parameter has no qualified form, so every reference to
        that name would be ambiguous and it could never be set.
        """
        if self._finalized:
            return self

        short_index = defaultdict(list)
        long_index = defaultdict(list)
        qualified_index = {}

        for parameter in self._parameters:
            if parameter.short_name is not None:
                short_index[parameter.short_name].append(parameter)
            long_index[parameter.name].append((parameter.scope, parameter))
            if parameter.scope is not None:
                qualified_index[f"{parameter.scope}{SCOPE_SEPARATOR}{parameter.name}"] = parameter

        for name, entries in long_index.items():
            if len(entries) > 1 and any(scope is None for scope, _ in entries):
                raise DefinitionConflictError(
                    f"{self._tier} parameter '--{name}' is defined both with and without a scope"
                )

        self._short_index = dict(short_index)
        self._long_index = dict(long_index)
        self._qualified_index = qualified_index
        self._finalized = True
        return self

    # ── resolution ──────────────────────────────────────────────────────────

    def _ensure_finalized(self):
        if not self._finalized:
            raise RuntimeError(f"{self._tier} parameter registry must be finalized before resolving")

    def _suggest(self, input):
        names = set()
        for parameter in self._parameters:
            names.add(parameter.long_name)
            names.add(parameter.qualified_name)
            if parameter.short_name is not None:
                names.add(parameter.short_name)
        return difflib.get_close_matches(input, sorted(names), 5)

    def _unknown(self, input, index):
        suggestions = self._suggest(input)
        try:
            hint = "did you mean %r?" % suggestions[0]
        except IndexError:
            hint = "check the spelling against the parameters this action defines"
        trigger(UnknownParameterError(
            "unknown parameter %r%s" % (input, _at(index)),
            title="unknown parameter",
            code=FaultCode.UNKNOWN_PARAMETER,
            input=input,
            index=index,
            tier=self._tier,
            suggestions=tuple(suggestions),
            hint=hint,
            docs=getdoc(FaultCode.UNKNOWN_PARAMETER),
        ))

    def _ambiguous(self, input, index, candidates, kind):
        candidates = tuple(sorted(candidates))
        trigger(AmbiguousParameterError(
            "ambiguous %s %r%s matches %d parameters" % (kind, input, _at(index), len(candidates)),
            title="ambiguous parameter",
            code=FaultCode.AMBIGUOUS_PARAMETER,
            input=input,
            index=index,
            tier=self._tier,
            candidates=candidates,
            hint="use one of %s instead" % ", ".join(candidates),
            docs=getdoc(FaultCode.AMBIGUOUS_PARAMETER),
        ))

    def resolve_short(self, alias, /, *, index=Unset):
        """
        Resolve a short alias ("-s") to its single owner.

        Raises
        - AmbiguousParameterError: two or more parameters share the alias; the
          fault lists the qualified long forms to use instead.
        - UnknownParameterError: nobody owns the alias.
        """
        self._ensure_finalized()
        match self._short_index.get(alias, []):
            case [parameter]:
                return parameter
            case []:
                self._unknown(alias, index)
            case owners:
                self._ambiguous(alias, index, (owner.qualified_name for owner in owners), "short name")

    def resolve_long(self, token, /, *, index=Unset):
        """
        Resolve "--name" or "--scope:name" to its parameter.

        - qualified form: exact lookup in the qualified index.
        - plain form: unique long name → that parameter, whatever its scope;
          a name shared by two or more scopes is ambiguous.
        """
        self._ensure_finalized()
        body = token[2:] if token.startswith("--") else token
        scope, separator, name = body.rpartition(SCOPE_SEPARATOR)

        if separator:
            try:
                return self._qualified_index[f"{scope}{SCOPE_SEPARATOR}{name}"]
            except KeyError:
                self._unknown(token, index)

        match self._long_index.get(name, []):
            case [(_, parameter)]:
                return parameter
            case []:
                self._unknown(token, index)
            case entries:
                self._ambiguous(token, index, (parameter.qualified_name for _, parameter in entries), "long name")


def _at(index):
    return " at %s position" % ordinal(index) if index else ""


__all__ = (
    "ParameterRegistry",
)
