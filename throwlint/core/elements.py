# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Resolved declaration model ("elements").

The HIR stays purely syntactic; name resolution produces elements and links
nodes to them through side tables owned by the resolver. Elements are what the
effect analysis reasons about: they carry the declaration's metadata entries
(annotations), its declaring library and enclosing class, and the resolved
types of its signature.

Every element gets a process-unique `element_id`. The effect registry uses it
as the memo key, so two structurally identical declarations never share a
cached effect set.
"""

from __future__ import annotations

import itertools
from collections import deque
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING, Dict, Iterator, List, Mapping, Optional, Tuple

from .span import Span
from .types_core import TypeId

if TYPE_CHECKING:
	from throwlint.hir.hir_nodes import HAnnotation, HNode


_element_ids = itertools.count(1)


class ElementKind(Enum):
	"""Kinds of resolved declarations."""

	LIBRARY = auto()
	CLASS = auto()
	FUNCTION = auto()
	LOCAL_FUNCTION = auto()
	METHOD = auto()
	GETTER = auto()
	SETTER = auto()
	OPERATOR = auto()
	CONSTRUCTOR = auto()
	PARAMETER = auto()
	FIELD = auto()
	TOP_LEVEL_VARIABLE = auto()
	LOCAL_VARIABLE = auto()


EXECUTABLE_KINDS = frozenset(
	{
		ElementKind.FUNCTION,
		ElementKind.LOCAL_FUNCTION,
		ElementKind.METHOD,
		ElementKind.GETTER,
		ElementKind.SETTER,
		ElementKind.OPERATOR,
		ElementKind.CONSTRUCTOR,
	}
)

VARIABLE_KINDS = frozenset({ElementKind.FIELD, ElementKind.TOP_LEVEL_VARIABLE, ElementKind.LOCAL_VARIABLE})


@dataclass(eq=False)
class Element:
	"""Base class for resolved declarations."""

	name: str
	kind: ElementKind
	library: Optional["LibraryElement"] = None
	enclosing: Optional["Element"] = None
	metadata: List["HAnnotation"] = field(default_factory=list)
	declaration: Optional["HNode"] = None
	span: Span = field(default_factory=Span)
	element_id: int = field(default_factory=lambda: next(_element_ids))

	@property
	def is_private(self) -> bool:
		return self.name.startswith("_")

	@property
	def enclosing_class(self) -> Optional["ClassElement"]:
		return self.enclosing if isinstance(self.enclosing, ClassElement) else None

	def __repr__(self) -> str:
		return f"{type(self).__name__}({self.kind.name} {self.name!r} #{self.element_id})"


@dataclass(eq=False, repr=False)
class ParameterElement(Element):
	"""Formal parameter of a function, method, constructor, setter or lambda."""

	type_id: TypeId | None = None
	index: int = 0
	is_field_formal: bool = False


@dataclass(eq=False, repr=False)
class VariableElement(Element):
	"""Field, top-level variable or local variable (catch binders included)."""

	type_id: TypeId | None = None
	is_final: bool = False
	is_const: bool = False
	is_late: bool = False
	is_static: bool = False


@dataclass(eq=False, repr=False)
class ExecutableElement(Element):
	"""Function, method, accessor, operator or constructor."""

	params: List[ParameterElement] = field(default_factory=list)
	return_type: TypeId | None = None
	type_id: TypeId | None = None  # function type of the executable
	is_static: bool = False
	is_abstract: bool = False
	is_const: bool = False

	@property
	def is_accessor(self) -> bool:
		return self.kind in (ElementKind.GETTER, ElementKind.SETTER)


@dataclass(eq=False, repr=False)
class ClassElement(Element):
	"""
	Class declaration with its member tables.

	Getter/setter tables hold either explicit accessors or fields (a field acts
	as both an implicit getter and, unless final, an implicit setter).
	"""

	type_id: TypeId | None = None
	is_abstract: bool = False
	superclass: Optional["ClassElement"] = None
	interfaces: List["ClassElement"] = field(default_factory=list)
	methods: Dict[str, ExecutableElement] = field(default_factory=dict)
	getters: Dict[str, Element] = field(default_factory=dict)
	setters: Dict[str, Element] = field(default_factory=dict)
	constructors: Dict[str, ExecutableElement] = field(default_factory=dict)

	def hierarchy(self) -> Iterator["ClassElement"]:
		"""This class, then superclasses and interfaces breadth-first (each once)."""
		seen: set[int] = set()
		queue: deque[ClassElement] = deque([self])
		while queue:
			cls = queue.popleft()
			if cls.element_id in seen:
				continue
			seen.add(cls.element_id)
			yield cls
			if cls.superclass is not None:
				queue.append(cls.superclass)
			queue.extend(cls.interfaces)

	def lookup_method(self, name: str, *, static: bool | None = None) -> ExecutableElement | None:
		return _lookup(self, "methods", name, static)  # type: ignore[return-value]

	def lookup_getter(self, name: str, *, static: bool | None = None) -> Element | None:
		return _lookup(self, "getters", name, static)

	def lookup_setter(self, name: str, *, static: bool | None = None) -> Element | None:
		return _lookup(self, "setters", name, static)


@dataclass(eq=False, repr=False)
class LibraryElement(Element):
	"""
	A library (one compilation unit). `scope` holds its own top-level
	declarations; `imports`/`exports` are linked by the resolver.
	"""

	uri: str = ""
	scope: Dict[str, Element] = field(default_factory=dict)
	imports: List["LibraryElement"] = field(default_factory=list)
	exports: List["LibraryElement"] = field(default_factory=list)

	def export_namespace(self) -> Dict[str, Element]:
		"""Public declarations visible to importers: own public names, then re-exports."""
		out: Dict[str, Element] = {}
		seen: set[int] = set()

		def _collect(lib: LibraryElement) -> None:
			if lib.element_id in seen:
				return
			seen.add(lib.element_id)
			for name, element in lib.scope.items():
				if not name.startswith("_"):
					out.setdefault(name, element)
			for exported in lib.exports:
				_collect(exported)

		_collect(self)
		return out


@dataclass(frozen=True, eq=False)
class ConstValue:
	"""
	Result of evaluating a constant expression (annotations only).

	`type_id` is the static type of the value; list values carry `items`, type
	literals carry `type_value`, instances carry named `fields`, primitive
	literals carry their Python `value`.
	"""

	type_id: TypeId | None
	value: object = None
	fields: Mapping[str, "ConstValue"] = field(default_factory=dict)
	items: Optional[Tuple["ConstValue", ...]] = None
	type_value: TypeId | None = None

	def get_field(self, name: str) -> Optional["ConstValue"]:
		return self.fields.get(name)

	def to_list(self) -> Optional[Tuple["ConstValue", ...]]:
		return self.items

	def to_type_value(self) -> TypeId | None:
		return self.type_value


def _lookup(cls: ClassElement, table: str, name: str, static: bool | None) -> Element | None:
	for owner in cls.hierarchy():
		found = getattr(owner, table).get(name)
		if found is None:
			continue
		if static is not None and getattr(found, "is_static", False) != static:
			continue
		return found
	return None


__all__ = [
	"ElementKind",
	"EXECUTABLE_KINDS",
	"VARIABLE_KINDS",
	"Element",
	"ParameterElement",
	"VariableElement",
	"ExecutableElement",
	"ClassElement",
	"LibraryElement",
	"ConstValue",
]
