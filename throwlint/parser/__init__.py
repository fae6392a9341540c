# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Parser entry points.

`parse_source` is the only function the driver needs: it parses one file,
builds its HIR, assigns NodeIds and parent links, and reports syntax problems
as parser-phase diagnostics instead of raising.
The unit keeps its `//` comments (`HUnit.comments`) for ignore handling.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from lark.exceptions import UnexpectedInput

from throwlint.core.diagnostics import Diagnostic
from throwlint.core.span import Span
from throwlint.hir import hir_nodes as H
from throwlint.hir.hir_utils import assign_node_ids, link_parents

from .parser import ParseError, build_unit, parse_tree

logger = logging.getLogger(__name__)

# NodeIds stay unique across every unit parsed by this process so resolver
# side tables can hold several units at once.
_next_node_id = 1


def parse_source(text: str, uri: str = "<memory>") -> Tuple[Optional[H.HUnit], List[Diagnostic]]:
	"""
	Parse one compilation unit.

	Returns `(unit, diagnostics)`; `unit` is None when the source does not parse.
	"""
	global _next_node_id
	diagnostics: List[Diagnostic] = []
	try:
		tree, comments = parse_tree(text)
		unit = build_unit(tree, uri, comments, text)
	except UnexpectedInput as err:
		span = Span(
			file=uri,
			line=getattr(err, "line", None),
			column=getattr(err, "column", None),
			offset=getattr(err, "pos_in_stream", None),
		)
		diagnostics.append(Diagnostic(message=_syntax_message(err, text), code="syntax_error", phase="parser", span=span))
		return None, diagnostics
	except ParseError as err:
		span = err.loc.with_file(uri) if err.loc is not None else Span(file=uri)
		diagnostics.append(Diagnostic(message=str(err), code="syntax_error", phase="parser", span=span))
		return None, diagnostics
	_next_node_id = assign_node_ids(unit, start=_next_node_id)
	link_parents(unit)
	logger.debug("parsed %s: %d declarations", uri, len(unit.declarations))
	return unit, diagnostics


def _syntax_message(err: UnexpectedInput, text: str) -> str:
	"""First line of lark's message plus the offending source line context."""
	head = str(err).strip().splitlines()[0] if str(err).strip() else "syntax error"
	context = err.get_context(text).rstrip()
	return f"{head}\n{context}" if context else head


__all__ = ["parse_source", "ParseError"]
