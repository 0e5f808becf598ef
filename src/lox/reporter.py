"""Diagnostic and message sinks shared by every pipeline stage."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Protocol

from .errors import SourceLocation


#every stage reports through this instead of raising language-level errors
class Reporter(Protocol):
    def add_diagnostic(self, start: SourceLocation, end: SourceLocation, message: str) -> None: ...

    def add_message(self, message: str) -> None: ...

    def has_diagnostics(self) -> bool: ...


#position-tagged problem recorded by `CollectingReporter`
@dataclass(frozen=True, slots=True)
class Diagnostic:
    start: SourceLocation
    end: SourceLocation
    message: str


#keeps everything in memory so tests and tooling can inspect it afterwards
@dataclass(slots=True)
class CollectingReporter:
    diagnostics: List[Diagnostic] = field(default_factory=list)
    messages: List[str] = field(default_factory=list)

    def add_diagnostic(self, start: SourceLocation, end: SourceLocation, message: str) -> None:
        self.diagnostics.append(Diagnostic(start=start, end=end, message=message))

    def add_message(self, message: str) -> None:
        self.messages.append(message)

    def has_diagnostics(self) -> bool:
        return bool(self.diagnostics)

    def has_diagnostic(self, message: str) -> bool:
        return any(diagnostic.message == message for diagnostic in self.diagnostics)

    def has_message(self, message: str) -> bool:
        return message in self.messages

    def reset(self) -> None:
        self.diagnostics.clear()
        self.messages.clear()


#prints with the `Diagnostic:`/`Message:` prefixes the command line expects
class ConsoleReporter:
    def __init__(self) -> None:
        self._has_errors = False

    def add_diagnostic(self, start: SourceLocation, end: SourceLocation, message: str) -> None:
        self._has_errors = True
        print(f"Diagnostic: [{start.line}:{start.column} {end.line}:{end.column}] {message}")

    def add_message(self, message: str) -> None:
        print(f"Message: {message}")

    def has_diagnostics(self) -> bool:
        return self._has_errors

    def reset(self) -> None:
        self._has_errors = False


__all__ = ["CollectingReporter", "ConsoleReporter", "Diagnostic", "Reporter"]
