# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Constant evaluation of metadata entries.

Only the constant forms annotations actually use are supported: const
constructor invocations (field formal arguments become instance fields),
const variables, list literals, type literals and primitive literals.
Anything else evaluates to None. A list item that cannot be evaluated is kept
as an untyped placeholder so the remaining items stay usable.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Set

from throwlint.core.elements import (
	ClassElement,
	ConstValue,
	ElementKind,
	ExecutableElement,
	VariableElement,
)
from throwlint.hir import hir_nodes as H
from throwlint.hir.hir_nodes import NodeId

from .program import ResolvedProgram


class ConstEvaluator:
	"""Evaluates annotations against a resolved program, memoized per node."""

	def __init__(self, program: ResolvedProgram) -> None:
		self._program = program
		self._annotations: Dict[NodeId, Optional[ConstValue]] = {}
		self._active: Set[int] = set()

	def evaluate_annotation(self, annotation: H.HAnnotation) -> Optional[ConstValue]:
		if annotation.node_id in self._annotations:
			return self._annotations[annotation.node_id]
		value = self._evaluate_annotation(annotation)
		self._annotations[annotation.node_id] = value
		return value

	def _evaluate_annotation(self, annotation: H.HAnnotation) -> Optional[ConstValue]:
		targets = self._program.element_of(annotation)
		if not targets:
			return None
		target = targets[0]
		if isinstance(target, ExecutableElement) and target.kind is ElementKind.CONSTRUCTOR:
			if annotation.args is None:
				return None
			return self._instantiate(target, annotation.args)
		if isinstance(target, VariableElement) and annotation.args is None:
			return self._variable_value(target)
		return None

	def evaluate(self, expr: H.HExpr) -> Optional[ConstValue]:
		"""Evaluate a constant expression; None when it is not a supported constant."""
		program = self._program
		if isinstance(expr, H.HLiteral):
			return ConstValue(type_id=program.static_type(expr), value=expr.value)
		if isinstance(expr, H.HListLiteral):
			items = []
			for item in expr.items:
				value = self.evaluate(item)
				items.append(value if value is not None else ConstValue(type_id=None))
			return ConstValue(type_id=program.static_type(expr), items=tuple(items))
		if isinstance(expr, H.HName):
			targets = program.element_of(expr)
			if not targets:
				return None
			target = targets[0]
			if isinstance(target, ClassElement):
				return ConstValue(type_id=program.static_type(expr), type_value=target.type_id)
			if isinstance(target, VariableElement):
				return self._variable_value(target)
			return None
		if isinstance(expr, H.HCall):
			invoked = program.element_of(expr)
			if len(invoked) == 1 and isinstance(invoked[0], ExecutableElement) and invoked[0].kind is ElementKind.CONSTRUCTOR:
				return self._instantiate(invoked[0], expr.args)
		return None

	def _variable_value(self, var: VariableElement) -> Optional[ConstValue]:
		decl = var.declaration
		if not var.is_const or not isinstance(decl, H.HVarDecl) or decl.init is None:
			return None
		if var.element_id in self._active:
			return None
		self._active.add(var.element_id)
		try:
			return self.evaluate(decl.init)
		finally:
			self._active.discard(var.element_id)

	def _instantiate(self, ctor: ExecutableElement, args: List[H.HExpr]) -> Optional[ConstValue]:
		cls = ctor.enclosing_class
		if cls is None or not ctor.is_const:
			return None
		fields: Dict[str, ConstValue] = {}
		for param, arg in zip(ctor.params, args):
			if not param.is_field_formal:
				continue
			value = self.evaluate(arg)
			if value is not None:
				fields[param.name] = value
		return ConstValue(type_id=cls.type_id, fields=fields)


__all__ = ["ConstEvaluator"]
