"""
scopeline per-invocation state.

- ParseContext: caller-owned value store for exactly one parse. Every parse
  starts from a fresh context, so no value ever carries over between two
  parses of the same action. The context is threaded through the router, the
  registries, and the resolver; nothing is kept at module level.
- Namespace: read-only mapping view handed to the action once the whole parse
  succeeded. A failed parse never produces a Namespace.
"""
from collections.abc import Mapping

from .faults import *
from .utils import *


class ParseContext:
    """
    Mutable state of one parse.

    Attributes
    - action: the routed action.
    - registries: tiers built during this parse, in build order.
    - scoped: True once the scoped phase ran.
    - faults: non-fatal faults (warnings) collected while parsing.
    """

    def __init__(self, action, /):
        self._action = action
        self._values = {}
        self._registries = []
        self._faults = []
        self._scoped = False

    action = mirror("action")
    registries = mirror("registries")
    faults = mirror("faults")
    scoped = mirror("scoped")

    def attach(self, registry, /, *, scoped=False):
        """
        record a registry taking part in this parse.
        """
        if registry not in self._registries:
            self._registries.append(registry)
        self._scoped |= bool(scoped)
        return registry

    def assign(self, parameter, value, /, *, input=Unset, index=Unset):
        """
        set the value of a parameter; the last assignment wins.

        an overwrite records an OverriddenValueWarning so the host can tell the
        user that an earlier occurrence was ignored.
        """
        if parameter in self._values:
            self._faults.append(OverriddenValueWarning(
                "parameter %r%s was already provided; the last value wins" % (
                    coalesce(input, parameter.qualified_name),
                    " at %s position" % ordinal(index) if index else "",
                ),
                title="overridden value",
                code=FaultCode.OVERRIDDEN_VALUE,
                input=coalesce(input, parameter.qualified_name),
                index=index,
                previous=self._values[parameter],
                value=value,
                hint="keep a single %s to avoid surprises" % parameter.qualified_name,
                docs=getdoc(FaultCode.OVERRIDDEN_VALUE),
            ))
        self._values[parameter] = value

    def value(self, parameter, /):
        """
        the assigned value of a parameter, or Unset when it was not assigned.
        """
        return self._values.get(parameter, Unset)

    def assigned(self, parameter, /):
        return parameter in self._values

    def namespace(self):
        return Namespace(self._action, self._registries, self._values, scoped=self._scoped)

    def __repr__(self):
        return f"parse-context(action={getattr(self._action, 'name', None)!r}, assigned={len(self._values)})"


class Namespace(Mapping):
    """
    Read-only result of a successful parse.

    Keys
    - a Parameter object,
    - a long form ("--short1"), a qualified form ("--scope1:arg"), or a short
      form ("-s"). String keys follow the same resolution rules as the command
      line, so an ambiguous key raises AmbiguousParameterError. A form owned
      by both tiers (a short alias reused after "--") is ambiguous as well.
      An exact qualified name always wins.

    Unassigned parameters yield their default (False for flags, None for value
    kinds without a default).
    """

    def __init__(self, action, registries, values, /, *, scoped=False):
        self._action = action
        self._registries = tuple(registries)
        self._values = dict(values)
        self._scoped = bool(scoped)

    action = mirror("action")
    scoped = mirror("scoped")

    def _parameters(self):
        for registry in self._registries:
            yield from registry.parameters

    def _resolve(self, key):
        if not isinstance(key, str):
            if any(key in registry for registry in self._registries):
                return key
            raise KeyError(key)
        if not key.startswith("-"):
            raise KeyError(key)
        # qualified names are unique across tiers
        for parameter in self._parameters():
            if parameter.qualified_name == key:
                return parameter

        matches = []
        for registry in self._registries:
            try:
                if key.startswith("--"):
                    matches.append((registry, registry.resolve_long(key)))
                else:
                    matches.append((registry, registry.resolve_short(key)))
            except UnknownParameterError:
                continue

        match matches:
            case [(_, parameter)]:
                return parameter
            case []:
                raise KeyError(key)
            case _:
                # one form owned by several tiers ("-s" before and after "--")
                candidates = tuple(
                    "%s (%s)" % (parameter.qualified_name, registry.tier) for registry, parameter in matches
                )
                trigger(AmbiguousParameterError(
                    "ambiguous key %r matches %d parameters across tiers" % (key, len(matches)),
                    title="ambiguous parameter",
                    code=FaultCode.AMBIGUOUS_PARAMETER,
                    input=key,
                    candidates=candidates,
                    hint="use the long form of one of %s instead" % ", ".join(candidates),
                    docs=getdoc(FaultCode.AMBIGUOUS_PARAMETER),
                ))

    def __getitem__(self, key):
        parameter = self._resolve(key)
        return self._values.get(parameter, parameter.default)

    def __contains__(self, key):
        try:
            self._resolve(key)
        except KeyError:
            return False
        return True

    def __iter__(self):
        return self._parameters()

    def __len__(self):
        return sum(len(registry) for registry in self._registries)

    def assigned(self, key, /):
        """
        whether the parameter was given on the command line (defaults do not count).
        """
        return self._resolve(key) in self._values

    def string_map(self):
        """
        {qualified name: str | None} for every parameter of every built tier.

        flags render as "true"/"false"; unassigned value kinds without default as None.
        """
        result = {}
        for parameter in self._parameters():
            value = self._values.get(parameter, parameter.default)
            if isinstance(value, bool):
                value = "true" if value else "false"
            result[parameter.qualified_name] = value
        return result

    def __repr__(self):
        return "namespace(%s)" % ", ".join(
            "%s=%r" % (name, value) for name, value in self.string_map().items()
        )


__all__ = (
    "ParseContext",
    "Namespace",
)
