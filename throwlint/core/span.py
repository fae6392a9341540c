# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lightweight source span representation used by diagnostics and findings.

A Span carries best-effort file/line/column info plus the character offsets
of the node in its source text. Offsets let ignore-comment filtering and tests
pin a finding to an exact source range without re-deriving positions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Span:
	"""Represents a source span (file/line/column plus start/end offsets)."""

	file: Optional[str] = None
	line: Optional[int] = None
	column: Optional[int] = None
	end_line: Optional[int] = None
	end_column: Optional[int] = None
	offset: Optional[int] = None
	end_offset: Optional[int] = None

	@property
	def length(self) -> Optional[int]:
		if self.offset is None or self.end_offset is None:
			return None
		return self.end_offset - self.offset

	def with_file(self, file: Optional[str]) -> "Span":
		"""Return a copy of this span pinned to `file`."""
		return Span(
			file=file,
			line=self.line,
			column=self.column,
			end_line=self.end_line,
			end_column=self.end_column,
			offset=self.offset,
			end_offset=self.end_offset,
		)

	@classmethod
	def from_meta(cls, meta: Any, file: Optional[str] = None) -> "Span":
		"""
		Construct a Span from a lark `Meta` (or any object with the same fields).

		Lark leaves `meta` empty for rules that matched no tokens; those map to
		the unknown Span().
		"""
		if meta is None or getattr(meta, "empty", False):
			return cls(file=file)
		return cls(
			file=file,
			line=getattr(meta, "line", None),
			column=getattr(meta, "column", None),
			end_line=getattr(meta, "end_line", None),
			end_column=getattr(meta, "end_column", None),
			offset=getattr(meta, "start_pos", None),
			end_offset=getattr(meta, "end_pos", None),
		)

	def __str__(self) -> str:
		parts = []
		if self.file:
			parts.append(self.file)
		if self.line is not None:
			col = self.column if self.column is not None else 0
			parts.append(f"{self.line}:{col}")
		return ":".join(parts) if parts else "<unknown location>"


__all__ = ["Span"]
