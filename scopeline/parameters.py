r"""
scopeline parameter definitions.

Overview
- Kinds
  • FlagParameter: presence-only switch (no payload), e.g. --verbose / -v.
  • StringParameter: value-bearing parameter; the next token is taken verbatim.
  • ChoiceParameter: value-bearing parameter restricted to fixed alternatives
    (the value is still the raw string; nothing is converted).

- Naming
  • long name: "--" + hyphen-separated words, e.g. "--non-conflicting-arg".
  • short name: "-" + one letter, e.g. "-s". Aliases may be shared between
    parameters; sharing only matters when the alias is actually invoked.
  • scope: optional namespace, e.g. "scope1"; the qualified form of a scoped
    parameter is "--scope1:arg".

- Introspection & representation
  • ParameterType metaclass provides stable __repr__/__rich_repr__ and exposes
    the fields declared in __introspectable__ as read-only properties.

Metadata (sanitized on construction)
- Shared: long_name, short_name, scope, group, description.
- Value-bearing only: argument_name, required, default.
- Choice only: alternatives (non-empty, duplicates rejected).

Validation highlights
- Wrong types raise TypeError; malformed names or empty strings raise ValueError.
- Flags are never required and always default to False.
- A choice default must be one of its alternatives.

Quick example:
    >>> from scopeline.parameters import StringParameter, FlagParameter
    >>> StringParameter("--arg", "-a", scope="scope1", argument_name="ARG").qualified_name
    '--scope1:arg'
"""
import functools
import operator
import re

from rich.text import Text

from .utils import *

SCOPING_GROUP = "scoping"
"""
group tag marking the selectors of a scoped action.

a scoped action must define at least one parameter in this group on its
unscoped tier, and one of them must be set before the scoping separator.
"""

SCOPE_SEPARATOR = ":"

_LONG_NAME = re.compile(r"--[^\W\d_](-?[^\W_]+)*")
_SHORT_NAME = re.compile(r"-[^\W\d_]")
_SCOPE = re.compile(r"[^\W\d_](-?[^\W_]+)*")
_ARGUMENT_NAME = re.compile(r"[A-Z][A-Z0-9_]*")


class ParameterType(type):
    """
    Metaclass wiring introspection for parameter kinds.

    Responsibilities
    - Derive __typename__ from the class name ("StringParameter" → "string-parameter").
    - Expose every name listed in __introspectable__ as a read-only property
      backed by "_{name}".
    - Provide stable __repr__/__rich_repr__ implementations.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}(%s)" % ", ".join(
                map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__())
            )
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: validate and normalize metadata shared by every parameter kind.

    - long_name: required, must match "--word(-word)*".
    - short_name: Unset or "-x" (single letter); Unset becomes None.
    - scope: Unset or "word(-word)*"; Unset becomes None.
    - group: Unset or a non-empty string; Unset becomes None.
    - description: Unset or a non-empty string/Text; Unset becomes None.
    """
    if not isinstance(long_name := metadata["long_name"], str):
        raise TypeError(f"{cls.__typename__} 'long_name' must be a string")
    elif not _LONG_NAME.fullmatch(long_name := long_name.strip()):
        raise ValueError(f"{cls.__typename__} 'long_name' must look like '--name' (got {long_name!r})")
    metadata["long_name"] = long_name

    if not isinstance(short_name := metadata["short_name"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'short_name' must be a string")
    elif isinstance(short_name, str) and not _SHORT_NAME.fullmatch(short_name := short_name.strip()):
        raise ValueError(f"{cls.__typename__} 'short_name' must be a dash and a single letter (got {short_name!r})")
    metadata["short_name"] = coalesce(short_name)

    if not isinstance(scope := metadata["scope"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'scope' must be a string")
    elif isinstance(scope, str) and not _SCOPE.fullmatch(scope := scope.strip()):
        raise ValueError(f"{cls.__typename__} 'scope' must be hyphen-separated words (got {scope!r})")
    metadata["scope"] = coalesce(scope)

    if not isinstance(group := metadata["group"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'group' must be a string")
    elif isinstance(group, str) and not (group := group.strip()):
        raise ValueError(f"{cls.__typename__} 'group' cannot be empty")
    metadata["group"] = coalesce(group)

    if not isinstance(description := metadata["description"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'description' must be a string")
    elif isinstance(description, str) and not (description := description.strip()):
        raise ValueError(f"{cls.__typename__} 'description' cannot be empty")
    metadata["description"] = coalesce(description)


def _sanitize_valued_metadata(cls, metadata, /):
    """
    Internal: validate and normalize metadata for value-bearing kinds.

    - argument_name: Unset or upper-case label ("ARG", "OUTPUT_DIR"); defaults to "VALUE".
    - required: coerced to bool.
    - default: Unset or a string; Unset becomes None.
    """
    if not isinstance(argument_name := metadata["argument_name"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'argument_name' must be a string")
    elif isinstance(argument_name, str) and not _ARGUMENT_NAME.fullmatch(argument_name := argument_name.strip()):
        raise ValueError(f"{cls.__typename__} 'argument_name' must be upper-case (got {argument_name!r})")
    metadata["argument_name"] = coalesce(argument_name, "VALUE")

    metadata["required"] = bool(metadata["required"])

    if not isinstance(default := metadata["default"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'default' must be a string")
    metadata["default"] = coalesce(default)


class Parameter(metaclass=ParameterType):
    """
    Base of every parameter kind.

    A parameter is an immutable descriptor: it never stores the parsed value.
    Values live in the per-invocation ParseContext, so the same parameter can be
    parsed any number of times without carry-over.
    """
    kind = Unset

    @property
    def name(self):
        """
        the long name without its leading dashes ("--short1" → "short1").
        """
        return self.long_name[2:]

    @property
    def qualified_name(self):
        """
        "--scope:name" for scoped parameters, the plain long name otherwise.
        """
        if self.scope is None:
            return self.long_name
        return f"--{self.scope}{SCOPE_SEPARATOR}{self.name}"

    @property
    def takes_value(self):
        return True

    @property
    def scoping(self):
        """
        True when this parameter selects the scope of a scoped action.
        """
        return self.group == SCOPING_GROUP

    def accepts(self, value, /):
        """
        whether a raw token is a valid value for this parameter.
        """
        return True

    def __init_subclass__(cls, **options):
        super().__init_subclass__(**options)
        if cls.kind is Unset:
            raise TypeError(f"{cls.__typename__} must declare a 'kind'")


class FlagParameter(Parameter):
    """
    Named, presence-only parameter.

    Its value is True once the flag appears on the command line and False
    otherwise. Flags consume no following token and can never be required.
    """
    kind = "flag"

    __introspectable__ = (
        "long_name",
        "short_name",
        "scope",
        "group",
        "description",
    )

    def __init__(
            self,
            long_name,
            short_name=Unset,
            /,
            *,
            scope=Unset,
            group=Unset,
            description=Unset,
    ):
        metadata = {
            "long_name": long_name,
            "short_name": short_name,
            "scope": scope,
            "group": group,
            "description": description,
        }
        _sanitize_metadata(type(self), metadata)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    @property
    def required(self):
        return False

    @property
    def default(self):
        return False

    @property
    def takes_value(self):
        return False


class StringParameter(Parameter):
    """
    Named, value-bearing parameter.

    The token right after the parameter reference (or the inline part of
    "--name=value") is taken verbatim as its value.
    """
    kind = "string"

    __introspectable__ = (
        "long_name",
        "short_name",
        "scope",
        "argument_name",
        "required",
        "default",
        "group",
        "description",
    )

    def __init__(
            self,
            long_name,
            short_name=Unset,
            /,
            *,
            scope=Unset,
            argument_name=Unset,
            required=False,
            default=Unset,
            group=Unset,
            description=Unset,
    ):
        metadata = {
            "long_name": long_name,
            "short_name": short_name,
            "scope": scope,
            "argument_name": argument_name,
            "required": required,
            "default": default,
            "group": group,
            "description": description,
        }
        _sanitize_metadata(type(self), metadata)
        _sanitize_valued_metadata(type(self), metadata)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)


class ChoiceParameter(Parameter):
    """
    Named, value-bearing parameter restricted to a fixed set of alternatives.
    """
    kind = "choice"

    __introspectable__ = (
        "long_name",
        "short_name",
        "scope",
        "alternatives",
        "required",
        "default",
        "group",
        "description",
    )

    def __init__(
            self,
            long_name,
            short_name=Unset,
            /,
            *,
            alternatives,
            scope=Unset,
            required=False,
            default=Unset,
            group=Unset,
            description=Unset,
    ):
        metadata = {
            "long_name": long_name,
            "short_name": short_name,
            "scope": scope,
            "argument_name": Unset,
            "required": required,
            "default": default,
            "group": group,
            "description": description,
        }
        _sanitize_metadata(type(self), metadata)
        _sanitize_valued_metadata(type(self), metadata)

        if isinstance(alternatives, str):
            raise TypeError(f"{type(self).__typename__} 'alternatives' must be an iterable of strings")
        sanitized = []
        for alternative in alternatives:
            if not isinstance(alternative, str):
                raise TypeError(f"{type(self).__typename__} 'alternatives' must be an iterable of strings")
            elif alternative in sanitized:
                raise ValueError(f"{type(self).__typename__} 'alternatives' cannot contain duplicates")
            sanitized.append(alternative)
        if not sanitized:
            raise ValueError(f"{type(self).__typename__} 'alternatives' cannot be empty")
        metadata["alternatives"] = sanitized

        if metadata["default"] is not None and metadata["default"] not in sanitized:
            raise ValueError(f"{type(self).__typename__} 'default' must be one of its alternatives")

        del metadata["argument_name"]
        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    @property
    def argument_name(self):
        return "{%s}" % ",".join(self._alternatives)

    def accepts(self, value, /):
        return value in self._alternatives


__all__ = (
    "SCOPING_GROUP",
    "SCOPE_SEPARATOR",
    "Parameter",
    "FlagParameter",
    "StringParameter",
    "ChoiceParameter",
)
