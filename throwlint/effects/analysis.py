# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Effect analysis pass.

Entry point:
  EffectAnalysis(program).analyze(unit) -> list[Finding]

For every node of the unit (pre-order, source order), each candidate effect
occurrence is vetoed by the scope handling checker and then by the
declaration propagation checker; whatever survives becomes a finding.
Assignments and initialized declarations are additionally checked for effect
loss.

One `EffectAnalysis` is one pass: it owns the registry memo, so build a new
instance after the program was re-resolved.
"""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, List, Optional, Set

from throwlint.core.elements import Element
from throwlint.core.types_core import TypeId
from throwlint.core.types_protocol import ProgramView
from throwlint.hir import hir_nodes as H
from throwlint.hir.hir_utils import children

from . import assignment, handling, propagation
from .extractor import CandidateOccurrence, EffectExtractor, OriginKind
from .findings import (
	LINT_CODES,
	THROWS_INFO_LOST_IN_ASSIGNMENT,
	UNHANDLED_EXCEPTION_CALL,
	UNHANDLED_THROW_IN_BODY,
	Finding,
	lost_in_assignment,
	violation,
)
from .intrinsics import IntrinsicTable
from .registry import EffectRegistry

logger = logging.getLogger(__name__)


def _code_for(origin: OriginKind) -> str:
	if origin in (OriginKind.DIRECT_RAISE, OriginKind.RE_RAISE):
		return UNHANDLED_THROW_IN_BODY
	return UNHANDLED_EXCEPTION_CALL


def _analyzed_nodes(root: H.HNode) -> Iterator[H.HNode]:
	"""Pre-order traversal that leaves metadata arguments alone."""
	stack = [root]
	while stack:
		node = stack.pop()
		yield node
		stack.extend(reversed([c for c in children(node) if not isinstance(c, H.HAnnotation)]))


class EffectAnalysis:
	"""Checked-effect analysis over one resolved program."""

	def __init__(
		self,
		program: ProgramView,
		*,
		intrinsics: Optional[IntrinsicTable] = None,
		enabled: Optional[Iterable[str]] = None,
	) -> None:
		self.program = program
		self.registry = EffectRegistry(program, intrinsics)
		self.extractor = EffectExtractor(program, self.registry)
		self.enabled = frozenset(enabled) if enabled is not None else frozenset(LINT_CODES)

	def analyze(self, unit: H.HUnit) -> List[Finding]:
		findings: List[Finding] = []
		for node in _analyzed_nodes(unit):
			# one finding per effect type and site, even when several invoked
			# elements (getter and setter of `x++`) declare it
			reported: Set[TypeId] = set()
			for candidate in self.extractor.candidates(node):
				if _code_for(candidate.origin) not in self.enabled or candidate.effect_type in reported:
					continue
				if self._survives(candidate):
					reported.add(candidate.effect_type)
					findings.append(violation(candidate, self.display_name(candidate.effect_type)))
			if THROWS_INFO_LOST_IN_ASSIGNMENT in self.enabled and isinstance(node, (H.HAssign, H.HVarDecl)):
				for ty in self.lost_effects(node):
					findings.append(lost_in_assignment(node, ty, self.display_name(ty)))
		logger.debug("%s: %d finding(s)", unit.uri, len(findings))
		return findings

	# --- reusable queries --------------------------------------------------------------

	def effective_effects(self, element: Optional[Element]) -> List[TypeId]:
		return self.registry.effective_effects(element)

	def is_handled_locally(self, site: H.HNode, effect_type: TypeId) -> bool:
		return handling.is_handled_locally(self.program, site, effect_type)

	def is_declared_by_enclosing(self, site: H.HNode, effect_type: TypeId) -> bool:
		return propagation.is_declared_by_enclosing(self.program, self.registry, site, effect_type)

	def lost_effects(self, node: H.HNode) -> List[TypeId]:
		return assignment.lost_effects(self.program, self.registry, self.extractor, node)

	def unhandled_effects(self, site: H.HNode) -> List[TypeId]:
		"""Effect types produced at `site` that are neither handled nor declared."""
		out: List[TypeId] = []
		for candidate in self.extractor.candidates(site):
			if candidate.effect_type not in out and self._survives(candidate):
				out.append(candidate.effect_type)
		return out

	def first_unhandled_effect(self, site: H.HNode) -> Optional[TypeId]:
		remaining = self.unhandled_effects(site)
		return remaining[0] if remaining else None

	def display_name(self, ty: TypeId) -> str:
		return self.program.type_system.display_name(ty)

	def _survives(self, candidate: CandidateOccurrence) -> bool:
		if self.is_handled_locally(candidate.site, candidate.effect_type):
			return False
		if self.is_declared_by_enclosing(candidate.site, candidate.effect_type):
			return False
		return True


__all__ = ["EffectAnalysis"]
