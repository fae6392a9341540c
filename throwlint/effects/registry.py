# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Effect registry: the effective effect set of a declaration or binding.

  effective_effects(subject) =
    declared_effects(subject)              if non-empty
    intrinsic table entry for subject      otherwise, if present
    []                                     otherwise

Declared effects come from `@Throws([...])` metadata (the `Throws` class of
`package:throwable/throwable.dart`). Entries that cannot be evaluated, and
list items that are not type literals, are skipped. Nothing here raises:
missing information degrades to "no known effects".

A registry instance belongs to one analysis pass. Its memo is keyed by
`element_id` and must not outlive the pass.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from throwlint.core.elements import ConstValue, Element, ElementKind, ExecutableElement
from throwlint.core.types_core import TypeId
from throwlint.core.types_protocol import ProgramView

from .intrinsics import IntrinsicTable, default_intrinsics

THROWS_CLASS = "Throws"
THROWS_LIBRARY = "package:throwable/throwable.dart"


def member_name(element: Element) -> str:
	"""
	Qualified member name: `Class.member` inside a class, plain name otherwise.

	Constructors use `Class.new` for the unnamed one and `Class.name` for named
	ones.
	"""
	cls = element.enclosing_class
	if element.kind is ElementKind.CONSTRUCTOR:
		owner = cls.name if cls is not None else "?"
		return f"{owner}.{element.name or 'new'}"
	if cls is not None:
		return f"{cls.name}.{element.name}"
	return element.name


class EffectRegistry:
	"""Per-pass effect lookups over one program."""

	def __init__(self, program: ProgramView, intrinsics: Optional[IntrinsicTable] = None) -> None:
		self._program = program
		self._types = program.type_system
		self._intrinsics = intrinsics if intrinsics is not None else default_intrinsics()
		self._memo: Dict[int, Tuple[TypeId, ...]] = {}

	@property
	def intrinsics(self) -> IntrinsicTable:
		return self._intrinsics

	def effective_effects(self, element: Optional[Element]) -> List[TypeId]:
		if element is None:
			return []
		cached = self._memo.get(element.element_id)
		if cached is None:
			declared = self.declared_effects(element)
			cached = tuple(declared) if declared else tuple(self.intrinsic_effects(element))
			self._memo[element.element_id] = cached
		return list(cached)

	def declared_effects(self, element: Element) -> List[TypeId]:
		"""Types listed by every `@Throws` entry on `element`, in order, each once."""
		result: List[TypeId] = []
		for annotation in element.metadata:
			value = self._program.constant_value(annotation)
			if value is None or not self._is_throws(value):
				continue
			types_field = value.get_field("types")
			items = types_field.to_list() if types_field is not None else None
			if items is None:
				continue
			for item in items:
				ty = item.to_type_value()
				if ty is not None and ty not in result:
					result.append(ty)
		return result

	def intrinsic_effects(self, element: Element) -> List[TypeId]:
		"""Effects from the intrinsic table, resolved from the element's library."""
		if not isinstance(element, ExecutableElement) or element.library is None:
			return []
		names = self._intrinsics.lookup(element.library.uri, member_name(element))
		result: List[TypeId] = []
		for name in names:
			ty = self._program.lookup_type(name, element.library)
			if ty is not None and ty not in result:
				result.append(ty)
		return result

	def covers(self, effect: TypeId, declared: List[TypeId]) -> bool:
		"""True when some declared type is a supertype of (or equal to) `effect`."""
		return any(self._types.is_subtype(effect, d) for d in declared)

	def _is_throws(self, value: ConstValue) -> bool:
		if value.type_id is None:
			return False
		if self._types.display_name(value.type_id) != THROWS_CLASS:
			return False
		library = self._types.library_of(value.type_id)
		return library is not None and THROWS_LIBRARY in library


__all__ = ["EffectRegistry", "member_name", "THROWS_CLASS", "THROWS_LIBRARY"]
