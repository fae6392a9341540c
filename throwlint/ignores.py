# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
`// ignore:` and `// ignore_for_file:` comment handling.

  foo(); // ignore: unhandled_exception_call        same line
  // ignore: unhandled_exception_call                the next line
  foo();
  // ignore_for_file: throws_info_lost_in_assignment whole file
  // ignore_for_file: type=lint                     every lint code

Only real comments count: the directives are read from the comment tokens the
lexer collected (`HUnit.comments`), so the same text inside a string literal
is ignored. Codes are comma separated and case-insensitive. Diagnostics are
matched by the line their span starts on.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Set

from throwlint.core.diagnostics import Diagnostic
from throwlint.hir import hir_nodes as H

_IGNORE_RE = re.compile(r"//\s*ignore:\s*(?P<codes>.*)$")
_IGNORE_FOR_FILE_RE = re.compile(r"//\s*ignore_for_file:\s*(?P<codes>.*)$")
_CODE_RE = re.compile(r"[A-Za-z_][\w=]*")

ALL_LINTS = "type=lint"


def _codes(raw: str) -> Set[str]:
	out: Set[str] = set()
	for part in raw.split(","):
		m = _CODE_RE.match(part.strip())
		if m:
			out.add(m.group(0).lower())
	return out


@dataclass
class IgnoreInfo:
	"""Ignore comments of one source file."""

	file_codes: Set[str] = field(default_factory=set)
	line_codes: Dict[int, Set[str]] = field(default_factory=dict)  # 1-based line

	@classmethod
	def from_comments(cls, comments: Iterable[H.Comment]) -> "IgnoreInfo":
		"""Collect ignore directives from the `//` comments of a parsed unit."""
		info = cls()
		for comment in comments:
			m = _IGNORE_FOR_FILE_RE.match(comment.text)
			if m:
				info.file_codes |= _codes(m.group("codes"))
				continue
			m = _IGNORE_RE.match(comment.text)
			if not m or comment.loc.line is None:
				continue
			target = comment.loc.line + 1 if comment.own_line else comment.loc.line
			info.line_codes.setdefault(target, set()).update(_codes(m.group("codes")))
		return info

	@classmethod
	def of(cls, unit: H.HUnit) -> "IgnoreInfo":
		return cls.from_comments(unit.comments)

	def is_ignored(self, code: str, line: int | None, *, is_lint: bool = True) -> bool:
		code = code.lower()
		if code in self.file_codes or (is_lint and ALL_LINTS in self.file_codes):
			return True
		if line is None:
			return False
		codes = self.line_codes.get(line, ())
		return code in codes or (is_lint and ALL_LINTS in codes)


def filter_ignored(diagnostics: Iterable[Diagnostic], info: IgnoreInfo) -> List[Diagnostic]:
	"""Drop coded diagnostics suppressed by `info`; uncoded ones always stay."""
	kept: List[Diagnostic] = []
	for diag in diagnostics:
		if diag.code is not None and info.is_ignored(diag.code, diag.span.line, is_lint=diag.phase == "lint"):
			continue
		kept.append(diag)
	return kept


__all__ = ["IgnoreInfo", "filter_ignored", "ALL_LINTS"]
