# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Resolved program: HIR units plus the side tables produced by the resolver.

`ResolvedProgram` is the reference `ProgramView` implementation. All tables are
keyed by NodeId; a node the resolver could not resolve is simply absent, which
every query reports as "no information".
"""

from __future__ import annotations

from typing import Dict, List, Optional

from throwlint.core.elements import (
	ClassElement,
	ConstValue,
	Element,
	ExecutableElement,
	LibraryElement,
	ParameterElement,
)
from throwlint.core.types_core import TypeId, TypeTable
from throwlint.hir import hir_nodes as H
from throwlint.hir.hir_nodes import NodeId


class ResolvedProgram:
	"""Libraries, elements and node side tables of one resolved workspace."""

	def __init__(self, types: TypeTable) -> None:
		self.types = types
		self.units: Dict[str, H.HUnit] = {}
		self.libraries: Dict[str, LibraryElement] = {}
		self.classes_by_type: Dict[TypeId, ClassElement] = {}
		self.elements: Dict[NodeId, List[Element]] = {}
		self.read_elements: Dict[NodeId, Element] = {}
		self.write_elements: Dict[NodeId, Element] = {}
		self.operators: Dict[NodeId, ExecutableElement] = {}
		self.declared: Dict[NodeId, Element] = {}
		self.expr_types: Dict[NodeId, TypeId] = {}
		self.arg_params: Dict[NodeId, ParameterElement] = {}
		self.catch_types: Dict[NodeId, TypeId] = {}
		# Set by the resolver once the workspace is linked; evaluates annotations lazily.
		self.const_evaluator = None

	# --- ProgramView ------------------------------------------------------------

	@property
	def type_system(self) -> TypeTable:
		return self.types

	def static_type(self, expr: H.HExpr) -> Optional[TypeId]:
		return self.expr_types.get(expr.node_id)

	def element_of(self, node: H.HNode) -> List[Element]:
		return list(self.elements.get(node.node_id, ()))

	def read_element(self, node: H.HNode) -> Optional[Element]:
		return self.read_elements.get(node.node_id)

	def write_element(self, node: H.HNode) -> Optional[Element]:
		return self.write_elements.get(node.node_id)

	def operator_element(self, node: H.HNode) -> Optional[ExecutableElement]:
		return self.operators.get(node.node_id)

	def declared_element(self, decl: H.HNode) -> Optional[Element]:
		return self.declared.get(decl.node_id)

	def corresponding_parameter(self, arg: H.HExpr) -> Optional[ParameterElement]:
		return self.arg_params.get(arg.node_id)

	def catch_type(self, clause: H.HCatch) -> Optional[TypeId]:
		return self.catch_types.get(clause.node_id)

	def constant_value(self, annotation: H.HAnnotation) -> Optional[ConstValue]:
		if self.const_evaluator is None:
			return None
		return self.const_evaluator.evaluate_annotation(annotation)

	def lookup_type(self, name: str, library: LibraryElement) -> Optional[TypeId]:
		"""
		Resolve a bare class name as seen from `library`: its export namespace
		first, then each imported library, then each exported library.
		"""
		candidates = [library.export_namespace()]
		candidates.extend(imported.export_namespace() for imported in library.imports)
		candidates.extend(exported.export_namespace() for exported in library.exports)
		for namespace in candidates:
			found = namespace.get(name)
			if isinstance(found, ClassElement):
				return found.type_id
		return None

	# --- helpers ------------------------------------------------------------------

	def class_of_type(self, ty: Optional[TypeId]) -> Optional[ClassElement]:
		if ty is None:
			return None
		return self.classes_by_type.get(ty)

	def library(self, uri: str) -> Optional[LibraryElement]:
		return self.libraries.get(uri)

	def record(self, node: H.HNode, *elements: Element) -> None:
		"""Append resolved elements for `node`, keeping each element once."""
		bucket = self.elements.setdefault(node.node_id, [])
		for element in elements:
			if all(existing is not element for existing in bucket):
				bucket.append(element)


__all__ = ["ResolvedProgram"]
