"""
scopeline two-phase parsing for scoped actions.

    <action> [unscoped parameters...] -- [scoped parameters...]

Phases
- PHASE1: the unscoped tier is resolved until the separator "--" or the end of
  the stream.
- gate: at least one scoping selector must hold a truthy value before the
  scoped tier may be parsed; otherwise MissingScopeError.
- PHASE2: the scoped tier is defined on demand (LazyRegistry) and resolved over
  every remaining token. Ambiguity in this tier is judged on its own, with no
  regard to the unscoped tier.

Without a separator no scoped token is ever read; the scoped tier is still
built when a selector is set, so that its required parameters are reported.
"""
from enum import Enum

from .faults import *
from .resolver import SEPARATOR, TokenResolver
from .utils import *


class Phase(Enum):
    INIT = "init"
    PHASE1 = "phase1"
    PHASE2 = "phase2"
    DONE = "done"
    FAILED = "failed"


class Unbuilt:
    """
    lazy tier not built yet; holds the zero-argument builder.
    """
    __slots__ = ("builder",)
    __match_args__ = ("builder",)

    def __init__(self, builder, /):
        self.builder = builder

    def __repr__(self):
        return "unbuilt(builder=%r)" % self.builder


class Built:
    """
    lazy tier built; holds the finalized registry.
    """
    __slots__ = ("registry",)
    __match_args__ = ("registry",)

    def __init__(self, registry, /):
        self.registry = registry

    def __repr__(self):
        return "built(registry=%r)" % self.registry


class LazyRegistry:
    """
    Unbuilt(builder) | Built(registry), transitioned exactly once by get().
    """

    def __init__(self, builder, /):
        if not callable(builder):
            raise TypeError("lazy registry 'builder' must be callable")
        self._state = Unbuilt(builder)

    state = mirror("state")

    @property
    def built(self):
        return isinstance(self._state, Built)

    def get(self):
        match self._state:
            case Built(registry):
                return registry
            case Unbuilt(builder):
                registry = builder()
                if not registry.finalized:
                    raise RuntimeError("lazy registry builder must return a finalized registry")
                self._state = Built(registry)
                return registry

    def __repr__(self):
        return "lazy-registry(%r)" % self._state


class ScopingController:
    """
    Runs one scoped action over one token stream.

    Parameters
    - action: a built ScopedAction.
    - context: the ParseContext of this parse.
    - index: 1-based position of the first token after the action name.

    'state' walks INIT → PHASE1 → PHASE2 → DONE; any fault moves it to FAILED
    and propagates unchanged.
    """

    def __init__(self, action, context, /, *, index=1):
        self._action = action
        self._context = context
        self._index = index
        self._state = Phase.INIT
        self._scoped = LazyRegistry(lambda: action.build_scoped(context.namespace()))

    action = mirror("action")
    state = mirror("state")

    @property
    def scoped(self):
        """
        the LazyRegistry of the scoped tier.
        """
        return self._scoped

    def _selected(self, registry):
        return tuple(
            parameter for parameter in registry.parameters
            if parameter.scoping and self._context.value(parameter)
        )

    def run(self, tokens, /):
        """
        consume 'tokens' (a deque) for both tiers.
        """
        if self._state is not Phase.INIT:
            raise RuntimeError("scoping controller can only run once")
        context = self._context
        try:
            self._state = Phase.PHASE1
            unscoped = context.attach(self._action.registry)
            resolver = TokenResolver(unscoped, context, index=self._index, separator=True)
            separated = resolver.resolve(tokens)

            selected = self._selected(unscoped)
            if separated:
                if not selected:
                    self._missing_scope(unscoped, resolver.index - 1)
                self._state = Phase.PHASE2
                scoped = context.attach(self._scoped.get(), scoped=True)
                TokenResolver(scoped, context, index=resolver.index).resolve(tokens)
            elif selected:
                scoped = context.attach(self._scoped.get())
                TokenResolver(scoped, context, index=resolver.index).check_required()
        except Exception:
            self._state = Phase.FAILED
            raise
        self._state = Phase.DONE

    def _missing_scope(self, registry, index):
        selectors = tuple(parameter.qualified_name for parameter in registry.parameters if parameter.scoping)
        trigger(MissingScopeError(
            "scoped action %r reached %r at %s position without a scope" % (
                self._action.name, SEPARATOR, ordinal(index)
            ),
            title="missing scope",
            code=FaultCode.MISSING_SCOPE,
            input=SEPARATOR,
            index=index,
            selectors=selectors,
            hint="pass %s before %r" % (" or ".join(selectors), SEPARATOR),
            docs=getdoc(FaultCode.MISSING_SCOPE),
        ))

    def __repr__(self):
        return f"scoping-controller(action={self._action.name!r}, state={self._state.value!r})"


__all__ = (
    "Phase",
    "Unbuilt",
    "Built",
    "LazyRegistry",
    "ScopingController",
)
