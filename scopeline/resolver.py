"""
scopeline token resolver.

The resolver walks the tokens that follow the action name against one
finalized ParameterRegistry and assigns values into the ParseContext.

States
- SCANNING: expecting a parameter reference ("--long", "--scope:long", "-s")
  or, when allowed, the scoping separator "--".
- PARSE_PARAM: the previous reference was a value kind; the current token is
  taken verbatim as its value.

Rules
- flags consume no token; their presence assigns True.
- "--name=value" assigns inline without consuming the next token; flags
  cannot take an inline value.
- the separator "--" is never a parameter reference and never a value.
- repeated parameters overwrite (last occurrence wins).
- once the stream (or phase) ends, every required parameter without a value
  and without a default is reported at once.
"""
from enum import Enum

from .faults import *
from .utils import *

SEPARATOR = "--"


class State(Enum):
    SCANNING = "scanning"
    PARSE_PARAM = "parse-param"


class TokenResolver:
    """
    One-shot resolver for one registry inside one parse.

    Parameters
    - registry: finalized ParameterRegistry to resolve against.
    - context: ParseContext receiving the values.
    - index: 1-based position of the first token this resolver will read
      (used for position-first messages).
    - separator: when True, the resolver stops right after consuming "--" and
      leaves the rest of the stream untouched; otherwise "--" is an
      unexpected token.
    """

    def __init__(self, registry, context, /, *, index=1, separator=False):
        if not registry.finalized:
            raise RuntimeError("token resolver requires a finalized registry")
        self._registry = registry
        self._context = context
        self._index = index
        self._separator = bool(separator)
        self._state = State.SCANNING
        self._pending = Unset

    state = mirror("state")
    index = mirror("index")
    registry = mirror("registry")

    def resolve(self, tokens, /):
        """
        consume tokens from the left of 'tokens' (a deque).

        returns True when the scan stopped on the separator, False when the
        stream was exhausted. required parameters are checked in both cases.
        """
        context = self._context
        separated = False

        while tokens:
            token = tokens.popleft()
            index = self._index
            self._index += 1

            if self._state is State.PARSE_PARAM:
                parameter, input, start = self._pending
                if token == SEPARATOR:
                    self._missing_argument(parameter, input, start)
                self._assign(parameter, token, input, start)
                self._state = State.SCANNING
                self._pending = Unset
                continue

            if token == SEPARATOR:
                if self._separator:
                    separated = True
                    break
                trigger(UnexpectedTokenError(
                    "unexpected separator %r at %s position" % (token, ordinal(index)),
                    title="unexpected token",
                    code=FaultCode.UNEXPECTED_TOKEN,
                    input=token,
                    index=index,
                    hint="the separator is only meaningful once, for scoped actions",
                    docs=getdoc(FaultCode.UNEXPECTED_TOKEN),
                ))

            if not token.startswith("-") or token == "-":
                trigger(UnexpectedTokenError(
                    "unexpected token %r at %s position" % (token, ordinal(index)),
                    title="unexpected token",
                    code=FaultCode.UNEXPECTED_TOKEN,
                    input=token,
                    index=index,
                    hint="values must follow the parameter they belong to",
                    docs=getdoc(FaultCode.UNEXPECTED_TOKEN),
                ))

            input, equals, value = token.partition("=")
            if input.startswith("--"):
                parameter = self._registry.resolve_long(input, index=index)
            else:
                parameter = self._registry.resolve_short(input, index=index)

            if not parameter.takes_value:
                if equals:
                    trigger(FlagAssignmentError(
                        "flag %r at %s position cannot have a value" % (input, ordinal(index)),
                        title="flag cannot take a value",
                        code=FaultCode.FLAG_ASSIGNMENT,
                        input=input,
                        index=index,
                        parameter=parameter,
                        hint="remove everything from '=' (for example: %s)" % input,
                        docs=getdoc(FaultCode.FLAG_ASSIGNMENT),
                    ))
                context.assign(parameter, True, input=input, index=index)
            elif equals:
                self._assign(parameter, value, input, index)
            else:
                self._state = State.PARSE_PARAM
                self._pending = (parameter, input, index)

        if self._state is State.PARSE_PARAM:
            self._missing_argument(*self._pending)

        self.check_required()
        return separated

    def _assign(self, parameter, value, input, index):
        if not parameter.accepts(value):
            trigger(InvalidChoiceError(
                "invalid value %r for %r at %s position" % (value, input, ordinal(index)),
                title="invalid choice",
                code=FaultCode.INVALID_CHOICE,
                input=input,
                index=index,
                value=value,
                alternatives=tuple(parameter.alternatives),
                hint="pick one of %s" % ", ".join(parameter.alternatives),
                docs=getdoc(FaultCode.INVALID_CHOICE),
            ))
        self._context.assign(parameter, value, input=input, index=index)

    def _missing_argument(self, parameter, input, index):
        trigger(MissingArgumentError(
            "parameter %r at %s position expects a value" % (input, ordinal(index)),
            title="missing argument",
            code=FaultCode.MISSING_ARGUMENT,
            input=input,
            index=index,
            parameter=parameter,
            hint="pass it right after the parameter (for example: %s %s)" % (input, parameter.argument_name),
            docs=getdoc(FaultCode.MISSING_ARGUMENT),
        ))

    def check_required(self):
        """
        report every required parameter left without a value and without a default.
        """
        unmet = tuple(
            parameter for parameter in self._registry.parameters
            if parameter.required and not self._context.assigned(parameter) and parameter.default is None
        )
        if not unmet:
            return
        names = tuple(parameter.qualified_name for parameter in unmet)
        label = "%s %s" % (self._registry.tier, "parameter" if len(unmet) == 1 else pluralize("parameter"))
        trigger(MissingRequiredParameterError(
            "missing required %s: %s" % (label, ", ".join(names)),
            title="missing required parameters",
            code=FaultCode.MISSING_REQUIRED_PARAMETERS,
            tier=self._registry.tier,
            unmet=names,
            parameters=unmet,
            hint="add %s" % " ".join("%s %s" % (parameter.qualified_name, parameter.argument_name) for parameter in unmet),
            docs=getdoc(FaultCode.MISSING_REQUIRED_PARAMETERS),
        ))


__all__ = (
    "SEPARATOR",
    "State",
    "TokenResolver",
)
