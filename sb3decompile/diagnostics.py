"""Diagnostic messages for the blocks-to-code converter.

Generation never prints. Unresolved references, unsupported opcodes and
structural problems are recorded against the actor being converted and
reported by the caller once the whole project has been processed.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class DiagnosticLevel(Enum):
    """Severity level for diagnostic messages."""
    ERROR = "Error"
    WARNING = "Warning"
    INFO = "Info"


@dataclass
class Diagnostic:
    """A single diagnostic message."""
    level: DiagnosticLevel
    message: str
    actor: str
    block_id: Optional[str] = None

    def __str__(self) -> str:
        loc = f"Actor '{self.actor}'"
        if self.block_id is not None:
            loc += f" Block '{self.block_id}'"
        return f"{self.level.value}: {self.message}: {loc}"


@dataclass
class DiagnosticContext:
    """Diagnostics collected while converting one actor."""
    actor_name: str = "Stage"
    diagnostics: List[Diagnostic] = field(default_factory=list)

    def add(self, level: DiagnosticLevel, message: str, block_id: Optional[str] = None) -> None:
        self.diagnostics.append(Diagnostic(
            level=level,
            message=message,
            actor=self.actor_name,
            block_id=block_id,
        ))

    def error(self, message: str, block_id: Optional[str] = None) -> None:
        self.add(DiagnosticLevel.ERROR, message, block_id)

    def warning(self, message: str, block_id: Optional[str] = None) -> None:
        self.add(DiagnosticLevel.WARNING, message, block_id)

    def info(self, message: str, block_id: Optional[str] = None) -> None:
        self.add(DiagnosticLevel.INFO, message, block_id)

    def has_errors(self) -> bool:
        return any(d.level == DiagnosticLevel.ERROR for d in self.diagnostics)

    def get_errors(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.level == DiagnosticLevel.ERROR]

    def get_warnings(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.level == DiagnosticLevel.WARNING]


def summarize(diagnostics: List[Diagnostic]) -> str:
    errors = sum(1 for d in diagnostics if d.level == DiagnosticLevel.ERROR)
    warnings = sum(1 for d in diagnostics if d.level == DiagnosticLevel.WARNING)
    parts = []
    if errors:
        parts.append(f"{errors} error{'s' if errors != 1 else ''}")
    if warnings:
        parts.append(f"{warnings} warning{'s' if warnings != 1 else ''}")
    return ", ".join(parts) if parts else "No issues"


class DiagnosticCollector:
    """Collector for diagnostics across every actor of a project."""

    def __init__(self) -> None:
        self.all_diagnostics: List[Diagnostic] = []

    def add_context_diagnostics(self, ctx: DiagnosticContext) -> None:
        self.all_diagnostics.extend(ctx.diagnostics)

    def has_errors(self) -> bool:
        return any(d.level == DiagnosticLevel.ERROR for d in self.all_diagnostics)

    def reportable(self, include_info: bool = False) -> List[Diagnostic]:
        if include_info:
            return list(self.all_diagnostics)
        return [d for d in self.all_diagnostics if d.level != DiagnosticLevel.INFO]

    def print_all(self, include_info: bool = False) -> None:
        """Print diagnostics to stdout."""
        for diag in self.reportable(include_info):
            print(diag)

    def summary(self) -> str:
        return summarize(self.all_diagnostics)
