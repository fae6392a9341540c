# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
throwlint.resolver: reference host for the effect analysis.

Links parsed units into libraries and elements, computes static types over
the nominal TypeTable, and evaluates metadata constants. The result,
`ResolvedProgram`, implements the `ProgramView` protocol the engine consumes.
"""

from .const_eval import ConstEvaluator
from .program import ResolvedProgram
from .resolve import Resolver, resolve_workspace
from .scopes import BodyContext, Scope, lookup_library_name

__all__ = [
	"ConstEvaluator",
	"ResolvedProgram",
	"Resolver",
	"resolve_workspace",
	"BodyContext",
	"Scope",
	"lookup_library_name",
]
