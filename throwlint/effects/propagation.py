# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Declaration propagation checker.

An effect is declared when the nearest enclosing routine declaration (the
declaration boundary) lists a supertype of it. Inside a function literal
passed directly as an argument, the parameter it is bound to counts as an
alternative declaration: the literal may produce whatever the parameter's
@Throws promises.
"""

from __future__ import annotations

from typing import Optional

from throwlint.core.types_core import TypeId
from throwlint.core.types_protocol import ProgramView
from throwlint.hir import hir_nodes as H

from .registry import EffectRegistry


def declaration_boundary(node: H.HNode) -> Optional[H.HFunctionDecl]:
	"""Nearest enclosing routine declaration; None for top-level/field initializers."""
	cur = node.parent
	while cur is not None:
		if isinstance(cur, H.HFunctionDecl):
			return cur
		cur = cur.parent
	return None


def enclosing_lambda(node: H.HNode) -> Optional[H.HLambda]:
	"""Nearest function literal around `node` inside its declaration boundary."""
	cur = node.parent
	while cur is not None and not isinstance(cur, H.HFunctionDecl):
		if isinstance(cur, H.HLambda):
			return cur
		cur = cur.parent
	return None


def is_declared_by_enclosing(
	program: ProgramView, registry: EffectRegistry, site: H.HNode, effect_type: TypeId
) -> bool:
	lam = enclosing_lambda(site)
	if lam is not None:
		param = program.corresponding_parameter(lam)
		if param is not None and registry.covers(effect_type, registry.effective_effects(param)):
			return True
	boundary = declaration_boundary(site)
	if boundary is None:
		return False
	element = program.declared_element(boundary)
	return registry.covers(effect_type, registry.effective_effects(element))


__all__ = ["is_declared_by_enclosing", "declaration_boundary", "enclosing_lambda"]
