# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
throwlint.effects: the checked-effect analysis engine.

Pipeline placement:
  resolved program (ProgramView) → extractor → handling / propagation vetoes → findings

The engine only talks to `throwlint.core.types_protocol.ProgramView`; it
never imports the parser or resolver.
"""

from .analysis import EffectAnalysis
from .assignment import lost_effects
from .extractor import CandidateOccurrence, EffectExtractor, OriginKind
from .findings import (
	LINT_CODES,
	THROWS_INFO_LOST_IN_ASSIGNMENT,
	UNHANDLED_EXCEPTION_CALL,
	UNHANDLED_THROW_IN_BODY,
	Finding,
)
from .handling import is_handled_locally
from .intrinsics import IntrinsicTable, IntrinsicTableError, default_intrinsics
from .propagation import declaration_boundary, is_declared_by_enclosing
from .registry import EffectRegistry, member_name

__all__ = [
	"EffectAnalysis",
	"EffectRegistry",
	"EffectExtractor",
	"CandidateOccurrence",
	"OriginKind",
	"Finding",
	"LINT_CODES",
	"UNHANDLED_THROW_IN_BODY",
	"UNHANDLED_EXCEPTION_CALL",
	"THROWS_INFO_LOST_IN_ASSIGNMENT",
	"IntrinsicTable",
	"IntrinsicTableError",
	"default_intrinsics",
	"is_handled_locally",
	"is_declared_by_enclosing",
	"declaration_boundary",
	"lost_effects",
	"member_name",
]
