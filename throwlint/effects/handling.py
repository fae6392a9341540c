# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Scope handling checker.

A site is handled locally when some `try` between it and its declaration
boundary protects it (the site is inside the try *body*, not inside a catch
or finally block) and one of that try's clauses matches the effect type.
Clauses are scanned in source order; an untyped clause is a catch-all, and
so is a clause whose type could not be resolved.

Function literals end the search as well: a handler around a closure does not
protect the closure's later execution.
"""

from __future__ import annotations

from typing import Optional

from throwlint.core.types_core import TypeId
from throwlint.core.types_protocol import ProgramView
from throwlint.hir import hir_nodes as H


def is_handler_boundary(node: H.HNode) -> bool:
	return isinstance(node, (H.HFunctionDecl, H.HLambda))


def clause_matches(program: ProgramView, clause: H.HCatch, effect_type: TypeId) -> bool:
	if clause.exception_type is None:
		return True
	clause_type = program.catch_type(clause)
	if clause_type is None:
		return True
	return program.type_system.is_subtype(effect_type, clause_type)


def handling_clause(program: ProgramView, site: H.HNode, effect_type: TypeId) -> Optional[H.HCatch]:
	"""The first clause that handles `effect_type` raised at `site`, if any."""
	previous = site
	current = site.parent
	while current is not None and not is_handler_boundary(current):
		if isinstance(current, H.HTry) and current.body is previous:
			for clause in current.catches:
				if clause_matches(program, clause, effect_type):
					return clause
		previous = current
		current = current.parent
	return None


def is_handled_locally(program: ProgramView, site: H.HNode, effect_type: TypeId) -> bool:
	return handling_clause(program, site, effect_type) is not None


__all__ = ["is_handled_locally", "handling_clause", "clause_matches", "is_handler_boundary"]
