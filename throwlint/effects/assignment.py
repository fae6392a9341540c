# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Assignment-loss checker.

Moving an effect-carrying value (a parameter or variable declared with
@Throws, or a routine tear-off) into a binding whose own declaration does not
cover those effects hides them from everyone who later calls through that
binding. `lost_effects` lists the effect types that would be hidden.
"""

from __future__ import annotations

from typing import List, Optional, Union

from throwlint.core.elements import Element, ParameterElement, VariableElement
from throwlint.core.types_core import TypeId
from throwlint.core.types_protocol import ProgramView
from throwlint.hir import hir_nodes as H

from .extractor import EffectExtractor
from .registry import EffectRegistry

# Compound arithmetic forms (`+=`) never store the right-hand value itself.
_STORING_OPS = ("=", "??=")

AssignmentSite = Union[H.HAssign, H.HVarDecl]


def assigned_value(node: H.HNode) -> Optional[H.HExpr]:
	if isinstance(node, H.HAssign):
		return node.value if node.op in _STORING_OPS else None
	if isinstance(node, H.HVarDecl):
		return node.init
	return None


def assignment_target(program: ProgramView, node: H.HNode) -> Optional[Element]:
	"""
	The binding that receives the value. Writes through an explicit setter or
	`operator []=` have none.
	"""
	if isinstance(node, H.HAssign):
		written = program.write_element(node)
		return written if isinstance(written, (VariableElement, ParameterElement)) else None
	if isinstance(node, H.HVarDecl):
		return program.declared_element(node)
	return None


def lost_effects(
	program: ProgramView, registry: EffectRegistry, extractor: EffectExtractor, node: H.HNode
) -> List[TypeId]:
	value = assigned_value(node)
	if value is None:
		return []
	source = extractor.source_effects(value)
	if not source:
		return []
	target = assignment_target(program, node)
	declared = registry.effective_effects(target) if target is not None else []
	return [ty for ty in source if not registry.covers(ty, declared)]


__all__ = ["lost_effects", "assignment_target", "assigned_value", "AssignmentSite"]
