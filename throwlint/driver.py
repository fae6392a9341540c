# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Workspace driver: parse → resolve → analyze → filter ignores.

The bundled SDK libraries are parsed alongside the user's sources (a user
source with the same uri replaces the bundled one). Only user sources are
analyzed and only their diagnostics are returned.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Union

from throwlint.core.diagnostics import Diagnostic, has_errors
from throwlint.effects import EffectAnalysis, Finding, IntrinsicTable, LINT_CODES, default_intrinsics
from throwlint.hir import hir_nodes as H
from throwlint.ignores import IgnoreInfo, filter_ignored
from throwlint.parser import parse_source
from throwlint.resolver import ResolvedProgram, resolve_workspace
from throwlint.sdk import sdk_sources

logger = logging.getLogger(__name__)


@dataclass
class LintConfig:
	"""Knobs for one lint run."""

	disabled: FrozenSet[str] = frozenset()
	# Extra intrinsic entries, overlaid on the bundled SDK table.
	intrinsics: Optional[IntrinsicTable] = None
	use_sdk_intrinsics: bool = True

	def intrinsic_table(self) -> IntrinsicTable:
		base = default_intrinsics() if self.use_sdk_intrinsics else IntrinsicTable.empty()
		return base.merged(self.intrinsics) if self.intrinsics is not None else base

	def enabled_codes(self) -> FrozenSet[str]:
		return frozenset(code for code in LINT_CODES if code not in self.disabled)


@dataclass
class LintResult:
	diagnostics: List[Diagnostic] = field(default_factory=list)
	findings: Dict[str, List[Finding]] = field(default_factory=dict)
	units: Dict[str, H.HUnit] = field(default_factory=dict)
	program: Optional[ResolvedProgram] = None

	@property
	def has_errors(self) -> bool:
		return has_errors(self.diagnostics)

	@property
	def has_findings(self) -> bool:
		return any(self.findings.values())


def lint_sources(sources: Mapping[str, str], config: Optional[LintConfig] = None) -> LintResult:
	"""Lint in-memory sources keyed by library uri."""
	config = config or LintConfig()
	result = LintResult()
	units: List[H.HUnit] = []
	for uri, text in sdk_sources().items():
		if uri in sources:
			continue
		unit, diags = parse_source(text, uri)
		if diags:
			logger.warning("bundled library %s does not parse: %s", uri, diags[0].message)
		if unit is not None:
			units.append(unit)
	parse_diags: List[Diagnostic] = []
	for uri, text in sources.items():
		unit, diags = parse_source(text, uri)
		parse_diags.extend(diags)
		if unit is not None:
			units.append(unit)
			result.units[uri] = unit
	program, resolve_diags = resolve_workspace(units)
	result.program = program
	analysis = EffectAnalysis(program, intrinsics=config.intrinsic_table(), enabled=config.enabled_codes())
	ignores = {uri: IgnoreInfo.of(unit) for uri, unit in result.units.items()}
	lint_diags: List[Diagnostic] = []
	for uri, unit in result.units.items():
		info = ignores[uri]
		kept = [f for f in analysis.analyze(unit) if not info.is_ignored(f.code, f.span.line)]
		result.findings[uri] = kept
		lint_diags.extend(f.to_diagnostic() for f in kept)
	user_resolve = [d for d in resolve_diags if d.span.file in sources]
	for uri, info in ignores.items():
		here = [d for d in user_resolve if d.span.file == uri]
		result.diagnostics.extend(filter_ignored(here, info))
	result.diagnostics[:0] = parse_diags
	result.diagnostics.extend(lint_diags)
	logger.debug(
		"linted %d source(s): %d finding(s), %d diagnostic(s)",
		len(sources),
		sum(len(f) for f in result.findings.values()),
		len(result.diagnostics),
	)
	return result


def lint_paths(paths: Iterable[Union[str, Path]], config: Optional[LintConfig] = None) -> LintResult:
	"""Lint files on disk; each file's library uri is its path as given."""
	sources: Dict[str, str] = {}
	for path in paths:
		path = Path(path)
		sources[path.as_posix()] = path.read_text(encoding="utf-8")
	return lint_sources(sources, config)


__all__ = ["LintConfig", "LintResult", "lint_sources", "lint_paths"]
