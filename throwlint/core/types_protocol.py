# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Host protocols consumed by the effect analysis.

The analysis never imports the resolver directly. It talks to a `ProgramView`
(resolved tree side tables) and a `TypeSystem` (subtype relation and names).
`throwlint.resolver.ResolvedProgram` and `throwlint.core.types_core.TypeTable`
are the reference implementations; tests may substitute their own.

Every query answers "no information" (None / empty) instead of raising when a
node cannot be resolved.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Protocol

from .types_core import TypeId

if TYPE_CHECKING:
	from throwlint.core.elements import ConstValue, Element, ExecutableElement, LibraryElement, ParameterElement
	from throwlint.hir.hir_nodes import HAnnotation, HCatch, HExpr, HNode


class TypeSystem(Protocol):
	"""Subtype relation and display names over opaque TypeIds."""

	def is_subtype(self, sub: TypeId, sup: TypeId) -> bool:
		"""Reflexive, transitive subtype predicate."""
		...

	def display_name(self, ty: TypeId) -> str:
		...

	def object_type(self) -> Optional[TypeId]:
		"""The universal top type (`Object`), if the host has one."""
		...

	def core_type(self, name: str) -> Optional[TypeId]:
		"""Well-known core classes by name (`Exception`, `Error`, ...)."""
		...

	def library_of(self, ty: TypeId) -> Optional[str]:
		"""Declaring library uri of a class type; None for other types."""
		...


class ProgramView(Protocol):
	"""
	Read-only view over one resolved program.

	Node-keyed queries accept any HIR node; kinds that do not apply answer None
	(or an empty list).
	"""

	@property
	def type_system(self) -> TypeSystem:
		...

	def static_type(self, expr: "HExpr") -> Optional[TypeId]:
		"""Static type of an expression."""
		...

	def element_of(self, node: "HNode") -> List["Element"]:
		"""
		Declarations a reference/invocation node resolves to: the callee of an
		`HCall`, the target of an `HName`/`HMember` (getter, method tear-off,
		variable, parameter), or the constructor of an instance creation.
		"""
		...

	def read_element(self, node: "HNode") -> Optional["Element"]:
		"""Read accessor used by a compound assignment / increment target."""
		...

	def write_element(self, node: "HNode") -> Optional["Element"]:
		"""Write accessor / written variable of an assignment target."""
		...

	def operator_element(self, node: "HNode") -> Optional["ExecutableElement"]:
		"""User-definable operator invoked by a binary/unary/index/assign node."""
		...

	def declared_element(self, decl: "HNode") -> Optional["Element"]:
		"""Element declared by a function/variable/parameter/class declaration node."""
		...

	def corresponding_parameter(self, arg: "HExpr") -> Optional["ParameterElement"]:
		"""Formal parameter an argument expression is bound to."""
		...

	def catch_type(self, clause: "HCatch") -> Optional[TypeId]:
		"""Resolved type of a catch clause; None for untyped or unresolvable clauses."""
		...

	def constant_value(self, annotation: "HAnnotation") -> Optional["ConstValue"]:
		"""Evaluate a metadata entry; None when it cannot be evaluated."""
		...

	def lookup_type(self, name: str, library: "LibraryElement") -> Optional[TypeId]:
		"""Visible-name resolution of a bare type name from `library`."""
		...


__all__ = ["TypeSystem", "ProgramView"]
