"""
scopeline actions: named subcommands and their parameter hooks.

What this module provides
- Action: a name, one unscoped parameter tier, and a callback executed with the
  Namespace of a successful parse.
- ScopedAction: an action with a second, scoped tier. The scoped tier is
  defined lazily, after the scoping separator "--" is reached and one of the
  scoping selectors (parameters in SCOPING_GROUP) is set.
- action(...) / scoped_action(...): decorator factories wrapping a callback.

Hooks
- define_parameters(provider): defines the unscoped tier. It runs once, when
  the action is registered on a router, so definition mistakes surface at
  registration and never at first use.
- define_scoped_parameters(provider, namespace): defines the scoped tier. It
  runs once per parse, on a brand-new registry, and receives the Namespace of
  the unscoped tier so the definitions may depend on the selected scope.

Both hooks can be passed to the constructor or attached with the decorator
methods of the same name (only once, and only before registration):

    @scoped_action(name="deploy")
    def deploy(namespace): ...

    @deploy.define_parameters
    def _(provider):
        provider.define_flag_parameter("--production", group=SCOPING_GROUP)

    @deploy.define_scoped_parameters
    def _(provider, namespace):
        provider.define_string_parameter("--region", "-r", required=True)
"""
import inspect
import re

from rich.text import Text

from .faults import *
from .parameters import *
from .registry import ParameterRegistry
from .resolver import TokenResolver
from .scoping import ScopingController
from .utils import *

_ACTION_NAME = re.compile(r"[^\W\d_](?:[-:]?[^\W_]+)*")


class ActionBase:
    """
    Shared identity, unscoped tier, and execution of every action variant.

    Variants are tagged by 'variant' ("plain" / "scoped"); the parser never
    inspects the tag, it only calls parse() and execute().
    """
    variant = Unset

    def __init__(
            self,
            callback=Unset,
            /,
            name=Unset,
            *,
            summary=Unset,
            documentation=Unset,
            define_parameters=Unset,
    ):
        if not callable(callback) and callback is not Unset:
            raise TypeError(f"{self.variant} action 'callback' must be callable")
        if define_parameters is not Unset and not callable(define_parameters):
            raise TypeError(f"{self.variant} action 'define_parameters' must be callable")

        if name is Unset:
            if callback is Unset:
                raise TypeError(f"{self.variant} action must have a name or a named callback")
            name = callback.__name__.replace("_", "-")
        if not isinstance(name, str):
            raise TypeError(f"{self.variant} action 'name' must be a string")
        elif not _ACTION_NAME.fullmatch(name := name.strip()):
            raise ValueError(f"{self.variant} action 'name' must be words joined by '-' or ':' (got {name!r})")

        if summary is Unset and callback is not Unset:
            summary = (inspect.getdoc(callback) or "").partition("\n")[0] or Unset
        for field, value in (("summary", summary), ("documentation", documentation)):
            if not isinstance(value, str | Text | Unset):
                raise TypeError(f"{self.variant} action {field!r} must be a string")
            elif isinstance(value, str) and not value.strip():
                raise ValueError(f"{self.variant} action {field!r} cannot be empty")

        self._name = name
        self._summary = coalesce(summary)
        self._documentation = coalesce(documentation)
        self._callback = callback
        self._define_parameters = define_parameters
        self._registry = Unset

    name = mirror("name")
    summary = mirror("summary")
    documentation = mirror("documentation")

    @property
    def built(self):
        return self._registry is not Unset

    @property
    def registry(self):
        """
        the finalized unscoped tier (only after build()).
        """
        if self._registry is Unset:
            raise RuntimeError(f"{self.variant} action {self._name!r} is not built yet")
        return self._registry

    def define_parameters(self, hook, /):
        """
        Attach the unscoped definition hook; usable as a decorator.
        """
        if not callable(hook):
            raise TypeError(f"{self.variant} action 'define_parameters' must be callable")
        if self._define_parameters is not Unset:
            raise TypeError(f"{self.variant} action 'define_parameters' cannot be overridden")
        if self.built:
            raise RuntimeError(f"{self.variant} action {self._name!r} is already built")
        self._define_parameters = hook
        return hook

    def build(self):
        """
        Run the unscoped hook on a fresh registry and finalize it (once).
        """
        if self._registry is not Unset:
            return self._registry
        registry = ParameterRegistry("unscoped")
        if self._define_parameters is not Unset:
            self._define_parameters(registry)
        self._validate(registry)
        self._registry = registry.finalize()
        return self._registry

    def _validate(self, registry):
        pass

    def parse(self, tokens, context, /, *, index=1):
        raise NotImplementedError

    def execute(self, namespace, /):
        """
        Run the callback with the parse result; a callback-less action is a no-op.
        """
        if self._callback is Unset:
            return None
        return self._callback(namespace)

    def __repr__(self):
        return f"{self.variant}-action(name={self._name!r}, summary={self._summary!r}, built={self.built!r})"


class Action(ActionBase):
    """
    Plain action: a single, unscoped parameter tier.
    """
    variant = "plain"

    def parse(self, tokens, context, /, *, index=1):
        registry = context.attach(self.registry)
        TokenResolver(registry, context, index=index).resolve(tokens)


class ScopedAction(ActionBase):
    """
    Scoped action: an unscoped tier, then a scoped tier after "--".

    The unscoped tier must define at least one scoping selector (a parameter in
    SCOPING_GROUP); a scoped action without one is a DefinitionError at build
    time.
    """
    variant = "scoped"

    def __init__(
            self,
            callback=Unset,
            /,
            name=Unset,
            *,
            summary=Unset,
            documentation=Unset,
            define_parameters=Unset,
            define_scoped_parameters=Unset,
    ):
        super().__init__(
            callback,
            name,
            summary=summary,
            documentation=documentation,
            define_parameters=define_parameters,
        )
        if define_scoped_parameters is not Unset and not callable(define_scoped_parameters):
            raise TypeError("scoped action 'define_scoped_parameters' must be callable")
        self._define_scoped_parameters = define_scoped_parameters

    @property
    def selectors(self):
        """
        the scoping selectors of the unscoped tier.
        """
        return tuple(parameter for parameter in self.registry.parameters if parameter.scoping)

    def define_scoped_parameters(self, hook, /):
        """
        Attach the scoped definition hook; usable as a decorator.
        """
        if not callable(hook):
            raise TypeError("scoped action 'define_scoped_parameters' must be callable")
        if self._define_scoped_parameters is not Unset:
            raise TypeError("scoped action 'define_scoped_parameters' cannot be overridden")
        if self.built:
            raise RuntimeError(f"scoped action {self._name!r} is already built")
        self._define_scoped_parameters = hook
        return hook

    def _validate(self, registry):
        if not any(parameter.scoping for parameter in registry.parameters):
            raise DefinitionError(
                f"scoped action {self._name!r} must define at least one parameter in the {SCOPING_GROUP!r} group"
            )
        if self._define_scoped_parameters is Unset:
            raise DefinitionError(f"scoped action {self._name!r} must define its scoped parameters")

    def build_scoped(self, namespace, /):
        """
        Define and finalize a brand-new scoped tier for one parse.

        A scoped parameter may reuse a short alias of the unscoped tier, but not
        its qualified name: both values would land under the same key of the
        Namespace.
        """
        registry = ParameterRegistry("scoped")
        self._define_scoped_parameters(registry, namespace)
        taken = {parameter.qualified_name for parameter in self.registry.parameters}
        for parameter in registry.parameters:
            if parameter.qualified_name in taken:
                raise DefinitionConflictError(
                    f"scoped parameter {parameter.qualified_name!r} of {self._name!r} is already defined unscoped"
                )
        return registry.finalize()

    def parse(self, tokens, context, /, *, index=1):
        ScopingController(self, context, index=index).run(tokens)


def action(source=Unset, /, *args, **kwargs):
    """
    Create an Action or return a decorator to build it later.

    - action(callback, name="x", ...) -> Action
    - @action(name="x", ...) def callback(namespace): ...
    """
    @rename("action")
    def wrapper(source, /):
        if not callable(source):
            raise TypeError("@action() must be applied to a callable")
        return Action(source, *args, **kwargs)

    return wrapper(source) if source is not Unset else wrapper


def scoped_action(source=Unset, /, *args, **kwargs):
    """
    Create a ScopedAction or return a decorator to build it later.
    """
    @rename("scoped_action")
    def wrapper(source, /):
        if not callable(source):
            raise TypeError("@scoped_action() must be applied to a callable")
        return ScopedAction(source, *args, **kwargs)

    return wrapper(source) if source is not Unset else wrapper


__all__ = (
    "ActionBase",
    "Action",
    "ScopedAction",
    "action",
    "scoped_action",
)
