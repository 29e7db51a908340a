"""
scopeline command-line parser: the host-facing entry point.

What this module provides
- CommandLineParser: owns an ActionRouter, turns an argument vector into one
  action plus a Namespace, and runs the action's callback.
  • execute_without_error_handling(argv): faults propagate as exceptions.
  • execute(argv): faults are written to the sink; returns True/False.

Parsing is all-or-nothing: every invocation gets a fresh ParseContext, the
Namespace is produced only once both tiers resolved, and the callback runs
only after that. A failed parse leaves no values behind.

Quick start
    from scopeline import CommandLineParser, SCOPING_GROUP, scoped_action

    parser = CommandLineParser("tool")

    @parser.scoped_action(name="deploy")
    def deploy(namespace):
        print(namespace.string_map())

    @deploy.define_parameters
    def _(provider):
        provider.define_flag_parameter("--production", "-p", group=SCOPING_GROUP)

    @deploy.define_scoped_parameters
    def _(provider, namespace):
        provider.define_string_parameter("--region", "-r", required=True)

    parser.add_action(deploy)
    parser.execute("deploy --production -- --region eu-west")
"""
import os.path
import shlex
import sys
from collections import deque
from collections.abc import Iterable

from .actions import *
from .context import ParseContext
from .faults import *
from .router import ActionRouter
from .terminal import ConsoleSink, Severity
from .utils import *


class CommandLineParser:
    """
    Host-facing parser over a set of actions.

    Parameters
    - name: str | Unset
      Program name used in rendered faults; defaults to basename(sys.argv[0]).
    - sink: object with write(message, severity) | Unset
      Receives faults from execute() and warnings from every run. Without a
      sink, errors go to a ConsoleSink and warnings through warnings.warn.
    - colorful / fancy: rendering switches forwarded to faults.
    """

    def __init__(self, name=Unset, /, *, sink=Unset, colorful=False, fancy=False):
        if not isinstance(name, str | Unset):
            raise TypeError("command line parser 'name' must be a string")
        if sink is not Unset and not callable(getattr(sink, "write", None)):
            raise TypeError("command line parser 'sink' must provide a write(message, severity) method")

        self._name = coalesce(name, os.path.basename(sys.argv[0]))
        self._sink = sink
        self._colorful = bool(colorful)
        self._fancy = bool(fancy)
        self._router = ActionRouter()
        self._selected_action = None
        self._running = False

    name = mirror("name")
    router = mirror("router")
    colorful = mirror("colorful")
    fancy = mirror("fancy")
    selected_action = mirror("selected_action")

    @property
    def sink(self):
        return coalesce(self._sink)

    @property
    def actions(self):
        return self._router.actions

    def add_action(self, action, /):
        """
        Register an action; definition errors raise right away.
        """
        return self._router.register(action)

    def action(self, source=Unset, /, *args, **kwargs):
        """
        Create an Action (or a decorator producing one) without registering it.

        Hooks may still be attached; pass the result to add_action() once done.
        """
        return action(source, *args, **kwargs)

    def scoped_action(self, source=Unset, /, *args, **kwargs):
        """
        Create a ScopedAction (or a decorator producing one) without registering it.
        """
        return scoped_action(source, *args, **kwargs)

    def _tokenize(self, argv):
        if argv is Unset:
            return deque(sys.argv[1:])
        if isinstance(argv, str):
            return deque(shlex.split(argv))
        if isinstance(argv, Iterable):
            tokens = deque()
            for item in argv:
                if not isinstance(item, str):
                    raise TypeError("execute() argument must be a string or an iterable of strings")
                tokens.append(item)
            return tokens
        raise TypeError("execute() argument must be a string or an iterable of strings")

    def _enrich(self, fault):
        return fault.__replace__(tool=self._name, colorful=self._colorful, fancy=self._fancy)

    def _flush(self, context):
        for warning in context.faults:
            if self._sink is Unset:
                trigger(warning, tool=self._name, colorful=self._colorful, fancy=self._fancy)
            else:
                self._sink.write(self._enrich(warning), Severity.WARNING)

    def parse(self, argv=Unset, /):
        """
        Route and resolve 'argv' into a Namespace without running any callback.

        Raises the first CommandLineException met; a failed parse returns nothing.
        """
        self._ensure_idle()
        tokens = self._tokenize(argv)
        self._selected_action = None

        self._running = True
        try:
            selected = self._router.route(tokens.popleft() if tokens else Unset, index=1)
            context = ParseContext(selected)
            try:
                selected.parse(tokens, context, index=2)
            finally:
                self._flush(context)
        finally:
            self._running = False

        self._selected_action = selected
        return context.namespace()

    def _ensure_idle(self):
        if self._running:
            raise RuntimeError(f"command line parser {self._name!r} is already executing")

    def execute_without_error_handling(self, argv=Unset, /):
        """
        Parse 'argv' and run the selected action with the resulting Namespace.

        Returns whatever the callback returns. Parse faults propagate.
        """
        self._ensure_idle()
        namespace = self.parse(argv)
        self._running = True
        try:
            return namespace.action.execute(namespace)
        finally:
            self._running = False

    def execute(self, argv=Unset, /):
        """
        Parse 'argv' and run the selected action, reporting faults to the sink.

        Returns True on success and False when parsing failed. Errors raised by
        the callback itself are not faults and propagate.
        """
        try:
            self.execute_without_error_handling(argv)
        except CommandLineException as fault:
            sink = coalesce(self._sink, ConsoleSink(colorful=self._colorful))
            sink.write(self._enrich(fault), Severity.ERROR)
            return False
        return True

    def __invoke__(self, prompt=Unset):
        return self.execute(prompt)

    def __repr__(self):
        return f"command-line-parser(name={self._name!r}, actions={self._router.names!r})"


def invoke(object, prompt=Unset, /):
    """
    Run a parser (anything implementing __invoke__) with 'prompt'.

    - prompt: Unset (sys.argv[1:]), a shell-like string, or an iterable of strings.
    """
    if hasattr(object, "__invoke__") and callable(object.__invoke__):
        return object.__invoke__(prompt)
    target = "argument" if prompt is Unset else "first argument"
    raise TypeError(f"invoke() {target} must implement __invoke__ method") from None


__all__ = (
    "CommandLineParser",
    "invoke",
)
