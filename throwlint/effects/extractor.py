# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Effect extractor: candidate effect occurrences of a single node.

Each expression kind has exactly one arm in `_ARMS`; kinds that cannot
produce effects map to `_none` explicitly so a new node kind shows up as a
missing entry rather than silently falling through. Statements and
declarations produce nothing themselves; their expressions are visited by the
analysis pass.

Origins:

  DIRECT_RAISE         `throw e`, typed by the static type of `e`
  RE_RAISE             `rethrow`, typed by the enclosing catch clause
  CALL                 any resolved invocation (call, getter, setter, operator,
                       index, constructor)
  PARAMETER_INVOCATION calling a parameter whose declaration carries @Throws
  VARIABLE_INVOCATION  calling a variable/field whose declaration carries @Throws
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Type

from throwlint.core.elements import (
	Element,
	ElementKind,
	ExecutableElement,
	ParameterElement,
	VariableElement,
)
from throwlint.core.types_core import TypeId
from throwlint.core.types_protocol import ProgramView
from throwlint.hir import hir_nodes as H

from .registry import EffectRegistry


class OriginKind(Enum):
	DIRECT_RAISE = "throw"
	RE_RAISE = "rethrow"
	CALL = "call"
	PARAMETER_INVOCATION = "parameter invocation"
	VARIABLE_INVOCATION = "variable invocation"


@dataclass(frozen=True, eq=False)
class CandidateOccurrence:
	"""An effect type a site may produce, and where the information came from."""

	site: H.HNode
	effect_type: TypeId
	origin: OriginKind
	source: Optional[Element] = None


_INCDEC = ("++", "--")
_TEAR_OFF_KINDS = (ElementKind.FUNCTION, ElementKind.LOCAL_FUNCTION, ElementKind.METHOD)


class EffectExtractor:
	"""Classifies nodes into candidate occurrences using one program's side tables."""

	def __init__(self, program: ProgramView, registry: EffectRegistry) -> None:
		self._program = program
		self._registry = registry
		self._types = program.type_system

	def candidates(self, node: H.HNode) -> List[CandidateOccurrence]:
		arm = _ARMS.get(type(node))
		if arm is None:
			return []
		return arm(self, node)

	# --- arms ------------------------------------------------------------------------

	def _none(self, node: H.HNode) -> List[CandidateOccurrence]:
		return []

	def _throw(self, node: H.HThrow) -> List[CandidateOccurrence]:
		ty = self._program.static_type(node.value)
		if ty is None or not self.is_effect_relevant(ty):
			return []
		return [CandidateOccurrence(node, ty, OriginKind.DIRECT_RAISE)]

	def _rethrow(self, node: H.HRethrow) -> List[CandidateOccurrence]:
		ty = self.rethrown_type(node)
		if ty is None:
			return []
		return [CandidateOccurrence(node, ty, OriginKind.RE_RAISE)]

	def _call(self, node: H.HCall) -> List[CandidateOccurrence]:
		out = self._calls(node)
		for target in self._program.element_of(node.callee):
			if isinstance(target, ParameterElement):
				origin = OriginKind.PARAMETER_INVOCATION
			elif isinstance(target, VariableElement):
				origin = OriginKind.VARIABLE_INVOCATION
			else:
				continue
			for ty in self._registry.effective_effects(target):
				out.append(CandidateOccurrence(node, ty, origin, target))
		return out

	def _calls(self, node: H.HNode) -> List[CandidateOccurrence]:
		out: List[CandidateOccurrence] = []
		for element in self.invoked_elements(node):
			for ty in self._registry.effective_effects(element):
				out.append(CandidateOccurrence(node, ty, OriginKind.CALL, element))
		return out

	# --- queries -------------------------------------------------------------------------

	def invoked_elements(self, node: H.HNode) -> List[ExecutableElement]:
		"""Executables evaluating `node` invokes, deduplicated, in resolution order."""
		program = self._program
		found: List[Optional[object]] = []
		if isinstance(node, H.HCall):
			found.extend(program.element_of(node))
		elif isinstance(node, (H.HName, H.HMember)):
			if not _is_callee(node) and not _is_write_target(node):
				found.extend(e for e in program.element_of(node) if e.kind is ElementKind.GETTER)
		elif isinstance(node, H.HIndex):
			if not _is_write_target(node):
				found.append(program.operator_element(node))
		elif isinstance(node, (H.HBinary, H.HUnary)):
			found.append(program.operator_element(node))
			if isinstance(node, H.HUnary) and node.op in _INCDEC:
				found.append(program.read_element(node))
				found.append(program.write_element(node))
		elif isinstance(node, H.HAssign):
			found.append(program.write_element(node))
			if node.op != "=":
				found.append(program.read_element(node))
				found.append(program.operator_element(node))
		out: List[ExecutableElement] = []
		for element in found:
			if isinstance(element, ExecutableElement) and all(e is not element for e in out):
				out.append(element)
		return out

	def source_effects(self, expr: H.HExpr) -> List[TypeId]:
		"""
		Effects carried by a value expression: a parameter or variable whose
		declaration carries @Throws, or a tear-off of a routine.
		"""
		if not isinstance(expr, (H.HName, H.HMember)) or _is_callee(expr):
			return []
		out: List[TypeId] = []
		for element in self._program.element_of(expr):
			carries = isinstance(element, (ParameterElement, VariableElement)) or (
				isinstance(element, ExecutableElement) and element.kind in _TEAR_OFF_KINDS
			)
			if not carries:
				continue
			for ty in self._registry.effective_effects(element):
				if ty not in out:
					out.append(ty)
		return out

	def rethrown_type(self, node: H.HRethrow) -> Optional[TypeId]:
		"""Type of the enclosing catch clause, `Object` for untyped clauses."""
		clause = enclosing_catch(node)
		if clause is None:
			return None
		ty = self._program.catch_type(clause)
		return ty if ty is not None else self._types.object_type()

	def is_effect_relevant(self, ty: TypeId) -> bool:
		"""Only subtypes of `Exception` or `Error` are effects."""
		for root in ("Exception", "Error"):
			root_ty = self._types.core_type(root)
			if root_ty is not None and self._types.is_subtype(ty, root_ty):
				return True
		return False


def enclosing_catch(node: H.HNode) -> Optional[H.HCatch]:
	"""Nearest catch clause around `node` within the same function body."""
	cur = node.parent
	while cur is not None and not isinstance(cur, (H.HFunctionDecl, H.HLambda)):
		if isinstance(cur, H.HCatch):
			return cur
		cur = cur.parent
	return None


def _is_callee(node: H.HNode) -> bool:
	parent = node.parent
	return isinstance(parent, H.HCall) and parent.callee is node


def _is_write_target(node: H.HNode) -> bool:
	parent = node.parent
	if isinstance(parent, H.HAssign):
		return parent.target is node
	if isinstance(parent, H.HUnary) and parent.op in _INCDEC:
		return parent.operand is node
	return False


_Arm = Callable[[EffectExtractor, H.HNode], List[CandidateOccurrence]]

_ARMS: Dict[Type[H.HNode], _Arm] = {
	H.HThrow: EffectExtractor._throw,
	H.HRethrow: EffectExtractor._rethrow,
	H.HCall: EffectExtractor._call,
	H.HName: EffectExtractor._calls,
	H.HMember: EffectExtractor._calls,
	H.HIndex: EffectExtractor._calls,
	H.HBinary: EffectExtractor._calls,
	H.HUnary: EffectExtractor._calls,
	H.HAssign: EffectExtractor._calls,
	H.HLiteral: EffectExtractor._none,
	H.HListLiteral: EffectExtractor._none,
	H.HThis: EffectExtractor._none,
	H.HLambda: EffectExtractor._none,
}  # type: ignore[dict-item]


__all__ = ["OriginKind", "CandidateOccurrence", "EffectExtractor", "enclosing_catch"]
