"""
Common diagnostic structure for parser/resolver/lint passes.

This is deliberately minimal: a message plus optional code, phase, span and
notes. Findings produced by the effect analysis are converted into this shape
before they reach the CLI.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .span import Span


@dataclass
class Diagnostic:
	"""Represents a tool diagnostic (error/warning/etc.)."""

	message: str
	code: str | None = None
	# Optional diagnostic phase label ("parser", "resolve", "lint").
	#
	# The driver collects diagnostics from several phases into one list; an
	# explicit phase keeps JSON output and test expectations unambiguous.
	phase: str | None = None
	severity: str = "error"
	span: Span = field(default_factory=Span)  # Source location (Span() denotes unknown).
	notes: list[str] = field(default_factory=list)

	def __post_init__(self) -> None:
		# Normalize missing spans to the sentinel Span() so downstream tooling
		# can rely on a structured object instead of None.
		if self.span is None:  # type: ignore[unreachable]
			self.span = Span()


def report(
	diagnostics: Optional[list[Diagnostic]],
	message: str,
	*,
	span: Span | None = None,
	phase: str | None = None,
	severity: str = "error",
	code: str | None = None,
	notes: Optional[list[str]] = None,
) -> None:
	"""Append a diagnostic if a sink is provided, otherwise raise RuntimeError."""
	if diagnostics is not None:
		diagnostics.append(
			Diagnostic(
				message=message,
				code=code,
				phase=phase,
				severity=severity,
				span=span or Span(),
				notes=notes or [],
			)
		)
	else:
		raise RuntimeError(message)


def has_errors(diagnostics: list[Diagnostic]) -> bool:
	return any(d.severity == "error" for d in diagnostics)


__all__ = ["Diagnostic", "report", "has_errors"]
