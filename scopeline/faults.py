"""
scopeline faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing parse
  issue. Codes are grouped by domain to keep copy consistent and make
  logs/searches predictable.
- CommandLineException / CommandLineWarning: base types that carry a message +
  options and know how to render themselves in a friendly, lowercased, and
  actionable way (rich __rich__ protocol).
- DefinitionError / DefinitionConflictError: programmer errors raised while
  defining parameters or registering actions. They are plain ValueErrors and
  are never rendered for end users.
- trigger(): central entry point to surface a fault (raise or warn).
- getdoc(): optional description lookup for a code from the host application.

UX goals
- Position-first messages (“at third position”) so users can learn by trying.
- Short titles, one-sentence bodies, a single clear hint.
- Lowercased tone with readable styling (configurable via __styles__ in __main__).
"""
import inspect
import warnings
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset


class FaultCode(IntEnum):
    """
    canonical fault codes used across the parser (stable identifiers).

    grouping (by high-level domain)
    - routing (1110x)
      • UNKNOWN_ACTION
    - parameters (1111x / 1112x)
      • UNKNOWN_PARAMETER, AMBIGUOUS_PARAMETER, MISSING_ARGUMENT,
        FLAG_ASSIGNMENT, INVALID_CHOICE, MISSING_REQUIRED_PARAMETERS,
        UNEXPECTED_TOKEN
    - scoping (1113x)
      • MISSING_SCOPE
    - warnings (12xxx)
      • OVERRIDDEN_VALUE

    normalize() allows host remapping to custom labels while keeping code-stability.
    """
    # --- routing errors (11xxx) ---
    UNKNOWN_ACTION              = 11101

    # --- parameter errors (11xxx) ---
    UNKNOWN_PARAMETER           = 11111
    AMBIGUOUS_PARAMETER         = 11112
    MISSING_ARGUMENT            = 11113
    FLAG_ASSIGNMENT             = 11114
    INVALID_CHOICE              = 11115
    MISSING_REQUIRED_PARAMETERS = 11121
    UNEXPECTED_TOKEN            = 11122

    # --- scoping errors (11xxx) ---
    MISSING_SCOPE               = 11131

    # --- warnings (12xxx) ---
    OVERRIDDEN_VALUE            = 12111

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _render(fault, palette, title_style, message_style):
    """
    shared rich rendering for exceptions and warnings.
    """
    main = __import__("__main__")
    options = fault.options
    colorful = options.get("colorful", False)

    styles = defaultdict(str, palette | getattr(main, "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), style)

    prog = text(getattr(main, "__prog__", options.get("tool", "")) or "", styler("prog-name"))
    code = options.get("code")

    header = Text.assemble(
        "[ ",
        prog,
        " — ",
        text(code.normalize() if isinstance(code, FaultCode) else "", styler("code")),
        " | ",
        text(str(options.get("title", "")).title(), styler(title_style)),
        " ]"
    )
    message = text(fault.message, styler(message_style))
    hint = Text.assemble(text(" → ", styler("hint-arrow")), text(options.get("hint", ""), styler("hint")))

    if options.get("fancy", False):
        return Panel(Group(message, hint), title=header, title_align="left")

    return Group(header, message, hint)


class CommandLineException(Exception):
    """
    base type of every parse-time fault.

    - message: one-sentence, lowercased description (also the str() of the fault).
    - options: read-only mapping with at least title/code/hint plus any
      fault-specific payload (input, index, candidates, unmet, suggestions, ...).
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(*(message,) if message else ())
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        return _render(self, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        }, "error-title", "error-message")

    def __str__(self):
        return self.message or ""

    def __trigger__(self):
        raise self from None

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnknownActionError(CommandLineException): ...
class UnknownParameterError(CommandLineException): ...
class AmbiguousParameterError(CommandLineException): ...
class MissingArgumentError(CommandLineException): ...
class FlagAssignmentError(CommandLineException): ...
class InvalidChoiceError(CommandLineException): ...
class MissingRequiredParameterError(CommandLineException): ...
class UnexpectedTokenError(CommandLineException): ...
class MissingScopeError(CommandLineException): ...


class CommandLineWarning(Warning):
    """
    base type of every non-fatal parse-time fault.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(*(message,) if message else ())
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        return _render(self, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #FFB400",  # amber fault code for warnings
            "warning-title": "bold #FFC2E0",  # softer pinky title for warnings

            # body
            "warning-message": "#D6D6DE",  # slightly lighter gray body
            "hint-arrow": "#B8EFAF dim",  # softer green arrow
            "hint": "italic #B8EFAF",  # softer green hint text
        }, "warning-title", "warning-message")

    def __str__(self):
        return self.message or ""

    def __trigger__(self):
        warnings.warn(self, stacklevel=len(inspect.stack()))

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class OverriddenValueWarning(CommandLineWarning): ...


class DefinitionError(ValueError):
    """
    a parameter or action was defined incorrectly (programmer error).
    """


class DefinitionConflictError(DefinitionError):
    """
    a definition collides with an existing one: duplicate action name, or a
    duplicate (scope, long name) pair inside one parameter provider.
    """


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via __replace__(**options) before triggering.
    - exceptions are raised; warnings go through warnings.warn.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "FaultCode",
    "CommandLineException",
    "UnknownActionError",
    "UnknownParameterError",
    "AmbiguousParameterError",
    "MissingArgumentError",
    "FlagAssignmentError",
    "InvalidChoiceError",
    "MissingRequiredParameterError",
    "UnexpectedTokenError",
    "MissingScopeError",
    "CommandLineWarning",
    "OverriddenValueWarning",
    "DefinitionError",
    "DefinitionConflictError",
    "trigger",
    "getdoc",
)
