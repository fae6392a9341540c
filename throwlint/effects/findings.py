# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Findings produced by the effect analysis, their lint codes and messages.

A `Finding` is the engine's output record; `to_diagnostic` turns it into the
shared `Diagnostic` shape so the driver can merge it with parser and resolver
diagnostics.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from throwlint.core.diagnostics import Diagnostic
from throwlint.core.elements import Element
from throwlint.core.span import Span
from throwlint.core.types_core import TypeId
from throwlint.hir import hir_nodes as H

from .extractor import CandidateOccurrence, OriginKind
from .registry import member_name

UNHANDLED_THROW_IN_BODY = "unhandled_throw_in_body"
UNHANDLED_EXCEPTION_CALL = "unhandled_exception_call"
THROWS_INFO_LOST_IN_ASSIGNMENT = "throws_info_lost_in_assignment"

LINT_CODES = (UNHANDLED_THROW_IN_BODY, UNHANDLED_EXCEPTION_CALL, THROWS_INFO_LOST_IN_ASSIGNMENT)

_THROW_MESSAGE = "Unhandled throw of '{type}'. Catch it or declare it with @Throws."
_RETHROW_MESSAGE = "Unhandled rethrow of '{type}'. Declare it with @Throws."
_CALL_MESSAGE = "Unhandled '{type}' from call to '{callee}'. Catch it or declare it with @Throws."
_LOST_MESSAGE = "Assignment loses @Throws({type}) info. Add @Throws annotation to the target variable."


@dataclass
class Finding:
	"""One surviving effect at one site."""

	code: str
	site: H.HNode
	effect_type: TypeId
	effect_name: str
	message: str
	origin: Optional[OriginKind] = None  # None for assignment-loss findings
	origin_description: str = ""
	span: Span = field(default_factory=Span)

	def to_diagnostic(self) -> Diagnostic:
		return Diagnostic(
			message=self.message,
			code=self.code,
			phase="lint",
			severity="warning",
			span=self.span,
		)


def describe_origin(candidate: CandidateOccurrence) -> str:
	"""
	Human description of where an effect comes from: the qualified member
	name for calls, the invoked name for parameter/variable invocations.
	"""
	if candidate.origin in (OriginKind.DIRECT_RAISE, OriginKind.RE_RAISE):
		return candidate.origin.value
	if candidate.origin is OriginKind.CALL:
		return member_name(candidate.source) if isinstance(candidate.source, Element) else "<unknown>"
	site = candidate.site
	callee = site.callee if isinstance(site, H.HCall) else None
	if isinstance(callee, (H.HName, H.HMember)):
		return callee.name
	return "<callback>"


def violation(candidate: CandidateOccurrence, effect_name: str) -> Finding:
	"""Finding for a candidate that is neither handled nor declared."""
	origin = describe_origin(candidate)
	if candidate.origin is OriginKind.DIRECT_RAISE:
		code, message = UNHANDLED_THROW_IN_BODY, _THROW_MESSAGE.format(type=effect_name)
	elif candidate.origin is OriginKind.RE_RAISE:
		code, message = UNHANDLED_THROW_IN_BODY, _RETHROW_MESSAGE.format(type=effect_name)
	else:
		code, message = UNHANDLED_EXCEPTION_CALL, _CALL_MESSAGE.format(type=effect_name, callee=origin)
	return Finding(
		code=code,
		site=candidate.site,
		effect_type=candidate.effect_type,
		effect_name=effect_name,
		message=message,
		origin=candidate.origin,
		origin_description=origin,
		span=getattr(candidate.site, "loc", Span()),
	)


def lost_in_assignment(site: H.HNode, effect_type: TypeId, effect_name: str) -> Finding:
	return Finding(
		code=THROWS_INFO_LOST_IN_ASSIGNMENT,
		site=site,
		effect_type=effect_type,
		effect_name=effect_name,
		message=_LOST_MESSAGE.format(type=effect_name),
		origin_description="assignment",
		span=getattr(site, "loc", Span()),
	)


__all__ = [
	"Finding",
	"LINT_CODES",
	"UNHANDLED_THROW_IN_BODY",
	"UNHANDLED_EXCEPTION_CALL",
	"THROWS_INFO_LOST_IN_ASSIGNMENT",
	"describe_origin",
	"violation",
	"lost_in_assignment",
]
