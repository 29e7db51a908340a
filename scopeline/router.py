"""
scopeline action router: exact-name dispatch of the first token.
"""
import difflib

from .actions import ActionBase
from .faults import *
from .utils import *


class ActionRouter:
    """
    Registered actions, looked up by exact name.

    Registration builds the action (its unscoped hook runs and the tier is
    finalized), so any definition mistake raises here.
    """

    def __init__(self):
        self._actions = {}

    @property
    def actions(self):
        """
        the registered actions, in registration order.
        """
        return tuple(self._actions.values())

    @property
    def names(self):
        return tuple(self._actions.keys())

    def __contains__(self, name):
        return name in self._actions

    def __len__(self):
        return len(self._actions)

    def __repr__(self):
        return f"action-router(names={self.names!r})"

    def register(self, action, /):
        if not isinstance(action, ActionBase):
            raise TypeError("register() argument must be an action")
        if action.name in self._actions:
            raise DefinitionConflictError(f"action {action.name!r} is already registered")
        action.build()
        self._actions[action.name] = action
        return action

    def route(self, token=Unset, /, *, index=1):
        """
        Return the action named exactly 'token'.

        An Unset token (empty command line) and every miss are
        UnknownActionError; the fault lists the registered names.
        """
        if token is not Unset:
            try:
                return self._actions[token]
            except KeyError:
                pass

        names = self.names
        if token is Unset:
            message = "no action was given"
            suggestions = []
        else:
            message = "unknown action %r at %s position" % (token, ordinal(index))
            suggestions = difflib.get_close_matches(token, names, 5)

        available = ", ".join(names) if names else "none"
        try:
            hint = "did you mean %r? available actions: %s" % (suggestions[0], available)
        except IndexError:
            hint = "available actions: %s" % available

        trigger(UnknownActionError(
            message,
            title="unknown action",
            code=FaultCode.UNKNOWN_ACTION,
            input=coalesce(token),
            index=index if token is not Unset else None,
            names=names,
            suggestions=tuple(suggestions),
            hint=hint,
            docs=getdoc(FaultCode.UNKNOWN_ACTION),
        ))


__all__ = (
    "ActionRouter",
)
