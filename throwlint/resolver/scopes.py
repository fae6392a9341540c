# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lexical scopes used while resolving bodies.

Name lookup order from inside a body is: enclosing block scopes (innermost
first), then members of the enclosing class (inherited ones included), then
the library's own top-level declarations, then the export namespaces of the
imported libraries in import order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from throwlint.core.elements import ClassElement, Element, LibraryElement


class Scope:
	"""Chain of block scopes holding locals, parameters and local functions."""

	def __init__(self, parent: Optional["Scope"] = None) -> None:
		self.parent = parent
		self.names: Dict[str, Element] = {}

	def declare(self, name: str, element: Element) -> None:
		self.names[name] = element

	def lookup(self, name: str) -> Optional[Element]:
		scope: Optional[Scope] = self
		while scope is not None:
			found = scope.names.get(name)
			if found is not None:
				return found
			scope = scope.parent
		return None

	def child(self) -> "Scope":
		return Scope(self)


@dataclass(frozen=True)
class BodyContext:
	"""Where a body (or initializer/annotation) is being resolved."""

	library: LibraryElement
	cls: Optional[ClassElement] = None
	is_static: bool = False


def lookup_library_name(library: LibraryElement, name: str) -> Optional[Element]:
	"""Top-level lookup: own declarations first, then imports' export namespaces."""
	found = library.scope.get(name)
	if found is not None:
		return found
	for imported in library.imports:
		found = imported.export_namespace().get(name)
		if found is not None:
			return found
	return None


__all__ = ["Scope", "BodyContext", "lookup_library_name"]
