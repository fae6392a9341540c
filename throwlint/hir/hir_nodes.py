# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
High-level Intermediate Representation (HIR) of the analyzed surface language.

Pipeline placement:
  source → lark tree (parser/grammar.lark) → HIR (this file) → resolver side tables → effect analysis

Guiding rules:
- Nodes are purely syntactic; no type or symbol resolution is embedded here.
  The resolver attaches elements and static types through side tables keyed by
  `node_id`.
- Every node knows its `parent` once `hir_utils.link_parents` ran. The
  effect analysis only ever walks *up* the tree from a site.
- Declarations are statements too, so local functions and local variables sit
  in blocks like any other statement.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Union

from throwlint.core.span import Span

# Stable identifiers for HIR nodes (used by resolver side tables).
NodeId = int


# Base node kinds

class HNode:
	"""Base class for all HIR nodes."""
	node_id: NodeId = 0
	parent: Optional["HNode"] = None


class HExpr(HNode):
	"""Base class for all HIR expressions."""
	pass


class HStmt(HNode):
	"""Base class for all HIR statements."""
	pass


class HDecl(HStmt):
	"""Base class for declarations (top-level, class members, locals)."""
	pass


# Types and metadata

@dataclass
class HTypeRef(HNode):
	"""Named type reference (`int`, `FormatException`, `String?`)."""
	name: str
	nullable: bool = False
	loc: Span = field(default_factory=Span)


@dataclass
class HFunctionTypeRef(HNode):
	"""Function type reference: `R Function(A, B)`."""
	return_type: Optional["TypeRef"]
	params: List["TypeRef"] = field(default_factory=list)
	nullable: bool = False
	loc: Span = field(default_factory=Span)


TypeRef = Union[HTypeRef, HFunctionTypeRef]


@dataclass
class HAnnotation(HNode):
	"""
	Metadata entry `@name` or `@name(args)`.

	`args` is None for the bare form. Annotations are evaluated lazily by the
	resolver's constant evaluator.
	"""
	name: str
	args: Optional[List[HExpr]] = None
	loc: Span = field(default_factory=Span)


# Expressions

@dataclass
class HName(HExpr):
	"""Bare identifier reference (local, parameter, member via implicit `this`, top-level, class)."""
	name: str
	loc: Span = field(default_factory=Span)


@dataclass
class HLiteral(HExpr):
	"""Literal value. `kind` is one of int/double/string/bool/null."""
	value: object
	kind: str
	loc: Span = field(default_factory=Span)


@dataclass
class HListLiteral(HExpr):
	items: List[HExpr]
	is_const: bool = False
	loc: Span = field(default_factory=Span)


@dataclass
class HThis(HExpr):
	loc: Span = field(default_factory=Span)


@dataclass
class HMember(HExpr):
	"""Property access / method selection: `target.name`."""
	target: HExpr
	name: str
	loc: Span = field(default_factory=Span)


@dataclass
class HCall(HExpr):
	"""
	Invocation: `callee(args...)`.

	The callee may name a function, a method (`HMember`), a class or named
	constructor (instance creation), or any callable value (parameter, variable).
	`is_new` / `is_const` record an explicit `new A()` / `const A()` creation.
	"""
	callee: HExpr
	args: List[HExpr]
	is_const: bool = False
	is_new: bool = False
	loc: Span = field(default_factory=Span)


@dataclass
class HIndex(HExpr):
	"""Index read `target[index]` (or write target when under HAssign)."""
	target: HExpr
	index: HExpr
	loc: Span = field(default_factory=Span)


@dataclass
class HBinary(HExpr):
	"""Binary operator; `op` is the surface spelling (`+`, `==`, `&&`, ...)."""
	op: str
	left: HExpr
	right: HExpr
	loc: Span = field(default_factory=Span)


@dataclass
class HUnary(HExpr):
	"""Unary operator; `prefix` is False for postfix `x++`/`x--`."""
	op: str
	operand: HExpr
	prefix: bool = True
	loc: Span = field(default_factory=Span)


@dataclass
class HAssign(HExpr):
	"""Assignment `target op value` where `op` is `=` or a compound form (`+=`)."""
	op: str
	target: HExpr
	value: HExpr
	loc: Span = field(default_factory=Span)


@dataclass
class HThrow(HExpr):
	"""Raise expression: `throw value`."""
	value: HExpr
	loc: Span = field(default_factory=Span)


@dataclass
class HRethrow(HExpr):
	"""Re-raise of the exception bound by the enclosing catch clause."""
	loc: Span = field(default_factory=Span)


@dataclass
class HLambda(HExpr):
	"""Function literal `(params) { ... }` or `(params) => expr`."""
	params: List["HParam"]
	body: Union["HBlock", HExpr]
	loc: Span = field(default_factory=Span)


# Statements

@dataclass
class HBlock(HStmt):
	statements: List[HStmt] = field(default_factory=list)
	loc: Span = field(default_factory=Span)


@dataclass
class HExprStmt(HStmt):
	expr: HExpr
	loc: Span = field(default_factory=Span)


@dataclass
class HReturn(HStmt):
	value: Optional[HExpr] = None
	loc: Span = field(default_factory=Span)


@dataclass
class HIf(HStmt):
	cond: HExpr
	then_block: HBlock
	else_block: Optional[HBlock] = None
	loc: Span = field(default_factory=Span)


@dataclass
class HWhile(HStmt):
	cond: HExpr
	body: HBlock
	loc: Span = field(default_factory=Span)


@dataclass
class HBreak(HStmt):
	loc: Span = field(default_factory=Span)


@dataclass
class HContinue(HStmt):
	loc: Span = field(default_factory=Span)


@dataclass
class HCatch(HNode):
	"""
	Single catch clause inside an HTry.

	  on T catch (e, s) { ... }   exception_type=T, binder=e, stack_binder=s
	  on T { ... }                exception_type=T, no binder
	  catch (e) { ... }           catch-all (exception_type=None)
	"""
	exception_type: Optional[TypeRef]
	binder: Optional[str]
	body: HBlock
	stack_binder: Optional[str] = None
	loc: Span = field(default_factory=Span)


@dataclass
class HTry(HStmt):
	"""
	try/catch/finally statement.

	Clauses are matched in source order; only `body` is protected by them.
	The finally block is never a handler.
	"""
	body: HBlock
	catches: List[HCatch] = field(default_factory=list)
	finally_block: Optional[HBlock] = None
	loc: Span = field(default_factory=Span)


# Declarations

@dataclass
class HParam(HDecl):
	"""Formal parameter; `is_field_formal` marks constructor `this.x` parameters."""
	name: str
	type: Optional[TypeRef] = None
	is_field_formal: bool = False
	metadata: List[HAnnotation] = field(default_factory=list)
	loc: Span = field(default_factory=Span)


@dataclass
class HVarDecl(HDecl):
	"""
	Variable declaration. `kind` is `top`, `field` or `local`.

	One declaration declares exactly one binding.
	"""
	name: str
	kind: str
	type: Optional[TypeRef] = None
	init: Optional[HExpr] = None
	is_final: bool = False
	is_const: bool = False
	is_late: bool = False
	is_static: bool = False
	metadata: List[HAnnotation] = field(default_factory=list)
	loc: Span = field(default_factory=Span)


@dataclass
class HFunctionDecl(HDecl):
	"""
	Routine-like declaration: the declaration boundary of the effect analysis.

	kind: function | local | method | getter | setter | operator | constructor
	name: declared name; for constructors the suffix after `Class.` ("" for the
	unnamed constructor); for operators the operator spelling (`[]`, `+`,
	`unary-`).
	body: HBlock, an expression for `=> expr` bodies, or None (abstract/external).
	"""
	name: str
	kind: str
	params: List[HParam] = field(default_factory=list)
	return_type: Optional[TypeRef] = None
	body: Optional[Union[HBlock, HExpr]] = None
	is_static: bool = False
	is_external: bool = False
	is_const: bool = False
	metadata: List[HAnnotation] = field(default_factory=list)
	loc: Span = field(default_factory=Span)

	@property
	def is_abstract(self) -> bool:
		return self.body is None and not self.is_external and self.kind != "constructor"


@dataclass
class HClassDecl(HDecl):
	name: str
	members: List[HDecl] = field(default_factory=list)
	superclass: Optional[HTypeRef] = None
	interfaces: List[HTypeRef] = field(default_factory=list)
	is_abstract: bool = False
	metadata: List[HAnnotation] = field(default_factory=list)
	loc: Span = field(default_factory=Span)


@dataclass
class HImport(HNode):
	uri: str
	loc: Span = field(default_factory=Span)


@dataclass
class HExport(HNode):
	uri: str
	loc: Span = field(default_factory=Span)


@dataclass(frozen=True)
class Comment:
	"""
	A `//` comment of a unit. Not an HNode: comments are not part of the tree
	and never get a NodeId.

	`own_line` is set when only whitespace precedes the comment on its line.
	"""
	text: str
	loc: Span
	own_line: bool = False


@dataclass
class HUnit(HNode):
	"""One compilation unit (library)."""
	uri: str
	directives: List[Union[HImport, HExport]] = field(default_factory=list)
	declarations: List[HDecl] = field(default_factory=list)
	comments: List[Comment] = field(default_factory=list)
	loc: Span = field(default_factory=Span)


__all__ = [
	"NodeId",
	"HNode",
	"HExpr",
	"HStmt",
	"HDecl",
	"HTypeRef",
	"HFunctionTypeRef",
	"TypeRef",
	"HAnnotation",
	"HName",
	"HLiteral",
	"HListLiteral",
	"HThis",
	"HMember",
	"HCall",
	"HIndex",
	"HBinary",
	"HUnary",
	"HAssign",
	"HThrow",
	"HRethrow",
	"HLambda",
	"HBlock",
	"HExprStmt",
	"HReturn",
	"HIf",
	"HWhile",
	"HBreak",
	"HContinue",
	"HCatch",
	"HTry",
	"HParam",
	"HVarDecl",
	"HFunctionDecl",
	"HClassDecl",
	"HImport",
	"HExport",
	"HUnit",
	"Comment",
]
