# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Minimal nominal type core shared by the resolver and the effect analysis.

TypeIds are opaque ints indexing into a TypeTable. TypeKind keeps the universe
small: nominal class types, structural function types, and the handful of
special types (dynamic/void/Never/unknown). Subtyping is nominal for classes
(reflexive, transitive over declared superclasses and interfaces) with the
registered `Object` class acting as the universal top type.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, List, Optional, Tuple


TypeId = int  # opaque handle into the TypeTable


class TypeKind(Enum):
	"""Kinds of types understood by the type core."""

	CLASS = auto()
	FUNCTION = auto()
	DYNAMIC = auto()
	VOID = auto()
	NEVER = auto()
	UNKNOWN = auto()


@dataclass(frozen=True)
class TypeDef:
	"""Definition of a type stored in the TypeTable."""

	kind: TypeKind
	name: str
	param_types: Tuple[TypeId, ...] = ()
	return_type: TypeId | None = None  # only meaningful for TypeKind.FUNCTION
	library: str | None = None  # declaring library uri for CLASS types


@dataclass
class _ClassInfo:
	supertypes: List[TypeId] = field(default_factory=list)


class TypeTable:
	"""
	Type table that owns TypeIds and answers subtype queries.

	Class types are registered first and linked to their supertypes in a
	second step (`set_supertypes`) so class headers can refer to classes
	declared later in the same library.
	"""

	def __init__(self) -> None:
		self._defs: Dict[TypeId, TypeDef] = {}
		self._classes: Dict[TypeId, _ClassInfo] = {}
		self._next_id: TypeId = 1  # reserve 0 for "invalid"
		self._object_type: TypeId | None = None
		self._core: Dict[str, TypeId] = {}
		self._fn_cache: Dict[Tuple[Tuple[TypeId, ...], TypeId], TypeId] = {}

	def new_class(self, name: str, library: str | None = None) -> TypeId:
		"""Register a nominal class type and return its TypeId."""
		ty = self._add(TypeDef(kind=TypeKind.CLASS, name=name, library=library))
		self._classes[ty] = _ClassInfo()
		return ty

	def set_supertypes(self, ty: TypeId, supertypes: List[TypeId]) -> None:
		"""Record the direct supertypes (superclass first, then interfaces) of a class."""
		info = self._classes[ty]
		info.supertypes = [s for s in supertypes if s != ty]

	def supertypes(self, ty: TypeId) -> List[TypeId]:
		"""Direct supertypes of a class type (empty for non-class types)."""
		info = self._classes.get(ty)
		return list(info.supertypes) if info is not None else []

	def all_supertypes(self, ty: TypeId) -> List[TypeId]:
		"""Every transitive supertype of `ty` in breadth-first order, excluding `ty`."""
		seen: set[TypeId] = {ty}
		out: List[TypeId] = []
		queue: deque[TypeId] = deque(self.supertypes(ty))
		while queue:
			cur = queue.popleft()
			if cur in seen:
				continue
			seen.add(cur)
			out.append(cur)
			queue.extend(self.supertypes(cur))
		if self._object_type is not None and self._object_type not in seen and self.get(ty).kind is TypeKind.CLASS:
			out.append(self._object_type)
		return out

	def mark_object(self, ty: TypeId) -> None:
		"""Declare `ty` as the universal top class (`Object`)."""
		self._object_type = ty

	def register_core(self, name: str, ty: TypeId) -> None:
		"""Remember a well-known core class (Object, Exception, Error, ...) by name."""
		self._core[name] = ty

	def ensure_dynamic(self) -> TypeId:
		"""Return a stable `dynamic` TypeId, creating it once."""
		return self._ensure_special("_dynamic_type", TypeKind.DYNAMIC, "dynamic")

	def ensure_void(self) -> TypeId:
		"""Return a stable `void` TypeId, creating it once."""
		return self._ensure_special("_void_type", TypeKind.VOID, "void")

	def ensure_never(self) -> TypeId:
		"""Return a stable `Never` TypeId, creating it once."""
		return self._ensure_special("_never_type", TypeKind.NEVER, "Never")

	def ensure_unknown(self) -> TypeId:
		"""Return a stable Unknown TypeId, creating it once."""
		return self._ensure_special("_unknown_type", TypeKind.UNKNOWN, "Unknown")

	def new_function(self, param_types: List[TypeId], return_type: TypeId) -> TypeId:
		"""Register (or reuse) a function type `return_type Function(params)`."""
		key = (tuple(param_types), return_type)
		cached = self._fn_cache.get(key)
		if cached is not None:
			return cached
		ty = self._add(
			TypeDef(kind=TypeKind.FUNCTION, name="Function", param_types=tuple(param_types), return_type=return_type)
		)
		self._fn_cache[key] = ty
		return ty

	def get(self, ty: TypeId) -> TypeDef:
		"""Fetch the TypeDef for a given TypeId."""
		return self._defs[ty]

	def find_class(self, name: str, library: str | None = None) -> TypeId | None:
		"""Find a class type by name (and optionally declaring library)."""
		for ty, td in self._defs.items():
			if td.kind is TypeKind.CLASS and td.name == name and (library is None or td.library == library):
				return ty
		return None

	# --- TypeSystem protocol -------------------------------------------------

	def object_type(self) -> TypeId | None:
		return self._object_type

	def core_type(self, name: str) -> TypeId | None:
		return self._core.get(name)

	def library_of(self, ty: TypeId) -> str | None:
		td = self._defs.get(ty)
		return td.library if td is not None else None

	def display_name(self, ty: TypeId) -> str:
		td = self._defs.get(ty)
		if td is None:
			return "<invalid>"
		if td.kind is TypeKind.FUNCTION:
			params = ", ".join(self.display_name(p) for p in td.param_types)
			ret = self.display_name(td.return_type) if td.return_type is not None else "dynamic"
			return f"{ret} Function({params})"
		return td.name

	def is_subtype(self, sub: TypeId, sup: TypeId) -> bool:
		"""
		Subtype predicate: reflexive, transitive, `Object`/`dynamic`/`void` on top,
		`Never` at the bottom, nominal for classes, structural for functions.
		"""
		if sub == sup:
			return True
		sub_def = self._defs.get(sub)
		sup_def = self._defs.get(sup)
		if sub_def is None or sup_def is None:
			return False
		if sup_def.kind in (TypeKind.DYNAMIC, TypeKind.VOID) or sup == self._object_type:
			return True
		if sub_def.kind is TypeKind.NEVER:
			return True
		if sub_def.kind is TypeKind.FUNCTION:
			if sup_def.kind is TypeKind.CLASS:
				return sup_def.name == "Function" and sup == self._core.get("Function")
			if sup_def.kind is not TypeKind.FUNCTION:
				return False
			if len(sub_def.param_types) != len(sup_def.param_types):
				return False
			if sub_def.return_type is not None and sup_def.return_type is not None:
				if not self.is_subtype(sub_def.return_type, sup_def.return_type):
					return False
			return all(self.is_subtype(b, a) for a, b in zip(sub_def.param_types, sup_def.param_types))
		if sub_def.kind is not TypeKind.CLASS or sup_def.kind is not TypeKind.CLASS:
			return False
		return sup in self.all_supertypes(sub)

	# --- internals -----------------------------------------------------------

	def _ensure_special(self, attr: str, kind: TypeKind, name: str) -> TypeId:
		existing: Optional[TypeId] = getattr(self, attr, None)
		if existing is None:
			existing = self._add(TypeDef(kind=kind, name=name))
			setattr(self, attr, existing)
		return existing

	def _add(self, td: TypeDef) -> TypeId:
		ty_id = self._next_id
		self._next_id += 1
		self._defs[ty_id] = td
		return ty_id


__all__ = ["TypeId", "TypeKind", "TypeDef", "TypeTable"]
