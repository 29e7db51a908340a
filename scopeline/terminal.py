"""
scopeline terminal sinks.

A sink is any host object accepting write(message, severity). The parser only
depends on that contract; how a message is rendered or persisted is the sink's
business. Two reference sinks are provided:

- ConsoleSink: prints through a rich Console (stderr by default). Messages that
  know how to render themselves (faults expose __rich__) are printed as-is;
  plain strings are styled by severity.
- MemorySink: records (text, severity) pairs, handy for hosts that forward
  diagnostics elsewhere and for tests.
"""
from enum import StrEnum

from rich.console import Console
from rich.text import Text

from .utils import *


class Severity(StrEnum):
    """
    severity levels understood by every sink.
    """
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class ConsoleSink:
    """
    Sink printing through a rich Console.

    Parameters
    - console: Console | Unset
      Target console; defaults to a fresh Console(stderr=True).
    - colorful: bool
      Style plain-string messages by severity (ignored for self-rendering messages).
    """

    def __init__(self, console=Unset, /, *, colorful=True):
        if not isinstance(console, Console | Unset):
            raise TypeError("console sink 'console' must be a rich console")
        self.console = coalesce(console, Console(stderr=True))
        self.colorful = bool(colorful)

    def write(self, message, severity=Severity.INFO, /):
        severity = Severity(severity)
        if hasattr(message, "__rich__"):
            return self.console.print(message)
        style = {
            Severity.ERROR: "bold #FF4DA6",
            Severity.WARNING: "#FFB400",
            Severity.INFO: "",
        }[severity] if self.colorful else ""
        self.console.print(Text(str(message), style))

    def __repr__(self):
        return f"console-sink(colorful={self.colorful!r})"


class MemorySink:
    """
    Sink keeping every written message in memory, in order.
    """

    def __init__(self):
        self._records = []

    records = mirror("records")

    def write(self, message, severity=Severity.INFO, /):
        self._records.append((str(message), Severity(severity)))

    def messages(self, severity=Unset, /):
        """
        Return the recorded texts, optionally filtered by severity.
        """
        if severity is Unset:
            return [text for text, _ in self._records]
        severity = Severity(severity)
        return [text for text, level in self._records if level is severity]

    def clear(self):
        self._records.clear()

    def __len__(self):
        return len(self._records)

    def __repr__(self):
        return f"memory-sink(records={len(self._records)})"


__all__ = (
    "Severity",
    "ConsoleSink",
    "MemorySink",
)
