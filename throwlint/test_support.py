# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Shared helpers for tests: lint or resolve small in-memory programs and pick
nodes out of the resulting trees.

Keeping these next to the pipeline keeps test harnesses from drifting away
from what the driver actually does.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Mapping, Optional, Tuple, Type, TypeVar

from throwlint.core.diagnostics import Diagnostic
from throwlint.driver import LintConfig, LintResult, lint_sources
from throwlint.effects import EffectAnalysis, Finding
from throwlint.hir import hir_nodes as H
from throwlint.hir.hir_utils import walk
from throwlint.parser import parse_source
from throwlint.resolver import ResolvedProgram, resolve_workspace
from throwlint.sdk import sdk_sources

MAIN = "lib/main.dart"
THROWABLE_IMPORT = "import 'package:throwable/throwable.dart';\n"

N = TypeVar("N", bound=H.HNode)


def lint(
	source: str,
	*,
	extra: Optional[Mapping[str, str]] = None,
	config: Optional[LintConfig] = None,
) -> LintResult:
	"""Lint `source` as `lib/main.dart`, plus any `extra` libraries."""
	sources: Dict[str, str] = {MAIN: source}
	sources.update(extra or {})
	return lint_sources(sources, config)


def findings(source: str, **kwargs) -> List[Finding]:
	return lint(source, **kwargs).findings[MAIN]


def messages(source: str, **kwargs) -> List[str]:
	return [f.message for f in findings(source, **kwargs)]


def resolve(sources: Mapping[str, str]) -> Tuple[ResolvedProgram, Dict[str, H.HUnit], List[Diagnostic]]:
	"""Parse + resolve `sources` with the bundled SDK; raises on syntax errors."""
	all_sources = dict(sdk_sources())
	all_sources.update(sources)
	units: Dict[str, H.HUnit] = {}
	for uri, text in all_sources.items():
		unit, diags = parse_source(text, uri)
		if unit is None:
			raise AssertionError(f"{uri} does not parse: {diags[0].message}")
		units[uri] = unit
	program, diagnostics = resolve_workspace(list(units.values()))
	user_units = {uri: units[uri] for uri in sources}
	return program, user_units, [d for d in diagnostics if d.span.file in sources]


def analysis_for(source: str) -> Tuple[EffectAnalysis, H.HUnit]:
	program, units, _ = resolve({MAIN: source})
	return EffectAnalysis(program), units[MAIN]


def find_node(root: H.HNode, kind: Type[N], predicate: Callable[[N], bool] = lambda _n: True) -> N:
	"""First node of `kind` (pre-order) matching `predicate`."""
	for node in walk(root):
		if isinstance(node, kind) and predicate(node):
			return node
	raise AssertionError(f"no {kind.__name__} matching predicate")


def find_function(root: H.HNode, name: str) -> H.HFunctionDecl:
	return find_node(root, H.HFunctionDecl, lambda fn: fn.name == name)


def find_call(root: H.HNode, callee: str) -> H.HCall:
	"""First call whose callee is the name or member `callee`."""

	def _matches(call: H.HCall) -> bool:
		return isinstance(call.callee, (H.HName, H.HMember)) and call.callee.name == callee

	return find_node(root, H.HCall, _matches)


__all__ = [
	"MAIN",
	"THROWABLE_IMPORT",
	"lint",
	"findings",
	"messages",
	"resolve",
	"analysis_for",
	"find_node",
	"find_function",
	"find_call",
]
