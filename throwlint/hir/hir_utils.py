# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
HIR tree utilities shared by the parser, resolver, effect analysis and tests.

`assign_node_ids` gives every node a NodeId so typed side tables can key off
nodes without relying on Python object identity; `link_parents` sets the
`parent` back-pointers the effect analysis walks.
"""

from __future__ import annotations

from dataclasses import fields, is_dataclass
from typing import Iterator, Optional, Type, TypeVar

from throwlint.hir import hir_nodes as H

N = TypeVar("N", bound=H.HNode)


def children(node: H.HNode) -> Iterator[H.HNode]:
	"""Direct child nodes in source (field declaration) order."""
	if not is_dataclass(node):
		return
	for f in fields(node):
		val = getattr(node, f.name)
		if isinstance(val, H.HNode):
			yield val
		elif isinstance(val, (list, tuple)):
			for item in val:
				if isinstance(item, H.HNode):
					yield item


def walk(root: H.HNode) -> Iterator[H.HNode]:
	"""Pre-order traversal of `root` and all of its descendants."""
	stack = [root]
	while stack:
		node = stack.pop()
		yield node
		stack.extend(reversed(list(children(node))))


def assign_node_ids(root: H.HNode, *, start: int = 1) -> int:
	"""
	Assign NodeIds to all HIR nodes reachable from `root`.

	Returns the next available NodeId after traversal.
	"""
	next_id = start
	for node in walk(root):
		node.node_id = next_id
		next_id += 1
	return next_id


def link_parents(root: H.HNode) -> None:
	"""Set `parent` on every node below `root` (the root keeps its own parent)."""
	for node in walk(root):
		for child in children(node):
			child.parent = node


def ancestors(node: H.HNode) -> Iterator[H.HNode]:
	"""Strict ancestors of `node`, innermost first."""
	cur = node.parent
	while cur is not None:
		yield cur
		cur = cur.parent


def enclosing(node: H.HNode, kind: Type[N]) -> Optional[N]:
	"""Nearest strict ancestor of the given node type, or None."""
	for anc in ancestors(node):
		if isinstance(anc, kind):
			return anc
	return None


__all__ = ["children", "walk", "assign_node_ids", "link_parents", "ancestors", "enclosing"]
