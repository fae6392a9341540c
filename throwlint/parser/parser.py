# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
lark-based parser for the analyzed surface language.

The grammar lives next to this file (`grammar.lark`). Parsing produces a lark
tree which the `_build_*` functions below turn into HIR (`throwlint.hir`).
The builders never resolve names: they only shape syntax.
"""

from __future__ import annotations

import codecs
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Set, Tuple

from lark import Lark, Token, Tree

from throwlint.core.span import Span
from throwlint.hir import hir_nodes as H
from throwlint.hir.hir_utils import walk

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()


class ParseError(ValueError):
	"""
	User-facing error raised by the tree builders for shapes the grammar accepts
	but the language rejects (e.g. assigning to a call result).

	`parse_source` converts this into a pinned parser-phase diagnostic.
	"""

	def __init__(self, message: str, *, loc: Span | None) -> None:
		super().__init__(message)
		self.loc = loc


class ExpressionMarker:
	"""
	Post-lexer that retags tokens whose meaning depends on expression context.

	- The `(` opening a function literal becomes `LAMBDA_LPAR`. A `(` opens a
	  function literal when the token before it can only precede an expression
	  and its matching `)` is immediately followed by `=>` or `{`. Without this,
	  `(x) => x` and `(x)` share a prefix the LALR parser cannot tell apart.
	- A `const` that can only precede an expression and is followed by
	  `Name(` or `Name.name(` becomes `CONST_CREATE`. Elsewhere `const` stays a
	  declaration modifier (`const A();` in a class body is a constructor).
	"""

	always_accept = ()

	EXPR_PRECEDERS = {
		"(",
		",",
		"[",
		":",
		"=",
		"=>",
		"return",
		"+=",
		"-=",
		"*=",
		"/=",
		"%=",
		"&=",
		"|=",
		"^=",
		"<<=",
		">>=",
		"??=",
	}

	def process(self, stream: Iterable[Token]) -> Iterator[Token]:
		tokens = list(stream)
		lambda_opens = self._lambda_opens(tokens)
		for idx, tok in enumerate(tokens):
			if idx in lambda_opens:
				yield Token.new_borrow_pos("LAMBDA_LPAR", tok.value, tok)
			elif tok.type == "CONST" and self._starts_creation(tokens, idx):
				yield Token.new_borrow_pos("CONST_CREATE", tok.value, tok)
			else:
				yield tok

	def _lambda_opens(self, tokens: List[Token]) -> Set[int]:
		opens: Set[int] = set()
		stack: List[int] = []
		for idx, tok in enumerate(tokens):
			if tok.value == "(":
				stack.append(idx)
			elif tok.value == ")" and stack:
				start = stack.pop()
				if start == 0 or tokens[start - 1].value not in self.EXPR_PRECEDERS:
					continue
				nxt = tokens[idx + 1].value if idx + 1 < len(tokens) else None
				if nxt in ("=>", "{"):
					opens.add(start)
		return opens

	def _starts_creation(self, tokens: List[Token], idx: int) -> bool:
		if idx == 0 or tokens[idx - 1].value not in self.EXPR_PRECEDERS | {"throw"}:
			return False
		shape = [t.type if t.type == "NAME" else t.value for t in tokens[idx + 1 : idx + 5]]
		return shape[:2] == ["NAME", "("] or shape == ["NAME", ".", "NAME", "("]


class _CommentCollector:
	"""lark lexer callback that keeps the `//` comments of the current parse."""

	def __init__(self) -> None:
		self.tokens: List[Token] = []

	def __call__(self, tok: Token) -> Token:
		self.tokens.append(tok)
		return tok


_COMMENTS = _CommentCollector()

_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	lexer="basic",
	start="start",
	propagate_positions=True,
	maybe_placeholders=False,
	postlex=ExpressionMarker(),
	lexer_callbacks={"LINE_COMMENT": _COMMENTS},
)


def parse_tree(source: str) -> Tuple[Tree, List[Token]]:
	"""
	Parse `source` into a raw lark tree (raises lark `UnexpectedInput`).

	Also returns the `//` comment tokens seen by the lexer, in source order.
	"""
	_COMMENTS.tokens = []
	tree = _PARSER.parse(source)
	comments, _COMMENTS.tokens = _COMMENTS.tokens, []
	return tree, comments


def build_unit(tree: Tree, uri: str, comments: Iterable[Token] = (), source: str = "") -> H.HUnit:
	"""Build an `HUnit` from the lark tree of a whole file and its comment tokens."""
	directives: List[H.HImport | H.HExport] = []
	decls: List[H.HDecl] = []
	for child in tree.children:
		if not isinstance(child, Tree):
			continue
		kind = _name(child)
		if kind == "import_directive":
			directives.append(H.HImport(uri=_decode_string_token(_token(child, "STRING")), loc=_loc(child)))
		elif kind == "export_directive":
			directives.append(H.HExport(uri=_decode_string_token(_token(child, "STRING")), loc=_loc(child)))
		else:
			decls.append(_build_decl(child, context="top", class_name=None))
	unit = H.HUnit(
		uri=uri,
		directives=directives,
		declarations=decls,
		comments=[_build_comment(tok, source, uri) for tok in comments],
		loc=_loc(tree),
	)
	_pin_file(unit, uri)
	return unit


def _build_comment(tok: Token, source: str, uri: str) -> H.Comment:
	line_start = source.rfind("\n", 0, tok.start_pos) + 1
	return H.Comment(
		text=tok.value,
		loc=_loc(tok).with_file(uri),
		own_line=not source[line_start : tok.start_pos].strip(),
	)


# --- declarations -----------------------------------------------------------


def _build_decl(tree: Tree, *, context: str, class_name: Optional[str]) -> H.HDecl:
	kind = _name(tree)
	if kind == "class_decl":
		return _build_class(tree)
	if kind == "var_decl":
		return _build_var_decl(tree, context=context)
	if kind == "function_decl":
		return _build_function(tree, context=context, class_name=class_name)
	if kind == "local_function":
		return _build_function(tree, context="local", class_name=None)
	if kind == "getter_decl":
		return _build_accessor(tree, kind="getter")
	if kind == "setter_decl":
		return _build_accessor(tree, kind="setter")
	if kind == "operator_decl":
		return _build_operator(tree)
	if kind == "named_constructor":
		return _build_named_constructor(tree, class_name=class_name)
	raise ParseError(f"unsupported declaration '{kind}'", loc=_loc(tree))


def _build_class(tree: Tree) -> H.HClassDecl:
	metadata = _metadata(tree)
	name = _token(tree, "NAME").value
	is_abstract = any(isinstance(c, Token) and c.type == "ABSTRACT" for c in tree.children)
	superclass: Optional[H.HTypeRef] = None
	interfaces: List[H.HTypeRef] = []
	members: List[H.HDecl] = []
	for child in tree.children:
		if not isinstance(child, Tree):
			continue
		kind = _name(child)
		if kind == "superclass":
			tok = _token(child, "NAME")
			superclass = H.HTypeRef(name=tok.value, loc=_loc(tok))
		elif kind == "interfaces":
			interfaces = [H.HTypeRef(name=t.value, loc=_loc(t)) for t in _tokens(child, "NAME")]
		elif kind != "metadata":
			members.append(_build_decl(child, context="class", class_name=name))
	return H.HClassDecl(
		name=name,
		members=members,
		superclass=superclass,
		interfaces=interfaces,
		is_abstract=is_abstract,
		metadata=metadata,
		loc=_loc(tree),
	)


def _build_var_decl(tree: Tree, *, context: str) -> H.HVarDecl:
	mods = _modifiers(tree)
	init_node = _child(tree, "var_init")
	init = _build_expr(next(c for c in init_node.children if isinstance(c, Tree))) if init_node is not None else None
	kind = {"top": "top", "class": "field"}.get(context, "local")
	return H.HVarDecl(
		name=_token(tree, "NAME").value,
		kind=kind,
		type=_type_child(tree),
		init=init,
		is_final="FINAL" in mods,
		is_const="CONST" in mods,
		is_late="LATE" in mods,
		is_static="STATIC" in mods,
		metadata=_metadata(tree),
		loc=_loc(tree),
	)


def _build_function(tree: Tree, *, context: str, class_name: Optional[str]) -> H.HFunctionDecl:
	mods = _modifiers(tree)
	name = _token(tree, "NAME").value
	if context == "class":
		kind = "constructor" if name == class_name else "method"
	elif context == "local":
		kind = "local"
	else:
		kind = "function"
	return H.HFunctionDecl(
		name="" if kind == "constructor" else name,
		kind=kind,
		params=_build_params(_child(tree, "params")),
		return_type=_type_child(tree),
		body=_build_fn_body(tree),
		is_static="STATIC" in mods,
		is_external="EXTERNAL" in mods,
		is_const="CONST" in mods,
		metadata=_metadata(tree),
		loc=_loc(tree),
	)


def _build_accessor(tree: Tree, *, kind: str) -> H.HFunctionDecl:
	mods = _modifiers(tree)
	params_node = _child(tree, "params")
	params = _build_params(params_node) if params_node is not None else []
	if kind == "setter" and len(params) != 1:
		raise ParseError("setters must declare exactly one parameter", loc=_loc(tree))
	return H.HFunctionDecl(
		name=_token(tree, "NAME").value,
		kind=kind,
		params=params,
		return_type=_type_child(tree),
		body=_build_fn_body(tree),
		is_static="STATIC" in mods,
		is_external="EXTERNAL" in mods,
		metadata=_metadata(tree),
		loc=_loc(tree),
	)


def _build_operator(tree: Tree) -> H.HFunctionDecl:
	mods = _modifiers(tree)
	op_node = _child(tree, "operator_name")
	op = "".join(t.value for t in op_node.children if isinstance(t, Token))
	params = _build_params(_child(tree, "params"))
	if op == "-" and not params:
		op = "unary-"
	return H.HFunctionDecl(
		name=op,
		kind="operator",
		params=params,
		return_type=_type_child(tree),
		body=_build_fn_body(tree),
		is_static="STATIC" in mods,
		is_external="EXTERNAL" in mods,
		metadata=_metadata(tree),
		loc=_loc(tree),
	)


def _build_named_constructor(tree: Tree, *, class_name: Optional[str]) -> H.HFunctionDecl:
	mods = _modifiers(tree)
	owner, name = _tokens(tree, "NAME")[:2]
	if owner.value != class_name:
		raise ParseError(
			f"constructor '{owner.value}.{name.value}' must be named after its class '{class_name}'",
			loc=_loc(owner),
		)
	return H.HFunctionDecl(
		name=name.value,
		kind="constructor",
		params=_build_params(_child(tree, "params")),
		body=_build_fn_body(tree),
		is_external="EXTERNAL" in mods,
		is_const="CONST" in mods,
		metadata=_metadata(tree),
		loc=_loc(tree),
	)


def _build_params(tree: Optional[Tree]) -> List[H.HParam]:
	if tree is None:
		return []
	return [_build_param(c) for c in tree.children if isinstance(c, Tree)]


def _build_param(tree: Tree) -> H.HParam:
	return H.HParam(
		name=_tokens(tree, "NAME")[-1].value,
		type=_type_child(tree),
		is_field_formal=_name(tree) == "field_formal",
		metadata=_metadata(tree),
		loc=_loc(tree),
	)


def _build_fn_body(tree: Tree) -> Optional[H.HBlock | H.HExpr]:
	body = tree.children[-1]
	if not isinstance(body, Tree):
		return None
	kind = _name(body)
	if kind == "block":
		return _build_block(body)
	if kind == "expr_body":
		return _build_expr(body.children[0])
	return None


def _metadata(tree: Tree) -> List[H.HAnnotation]:
	node = _child(tree, "metadata")
	if node is None:
		return []
	out: List[H.HAnnotation] = []
	for ann in node.children:
		args_node = _child(ann, "args")
		out.append(
			H.HAnnotation(
				name=_token(ann, "NAME").value,
				args=_build_args(args_node) if args_node is not None else None,
				loc=_loc(ann),
			)
		)
	return out


def _modifiers(tree: Tree) -> Set[str]:
	node = _child(tree, "modifiers")
	if node is None:
		return set()
	return {t.type for t in node.children if isinstance(t, Token)}


# --- types ------------------------------------------------------------------


def _type_child(tree: Tree) -> Optional[H.TypeRef]:
	node = next(
		(c for c in tree.children if isinstance(c, Tree) and _name(c) in ("simple_type", "function_type")),
		None,
	)
	return _build_type(node) if node is not None else None


def _build_type(tree: Tree) -> H.TypeRef:
	nullable = any(isinstance(c, Token) and c.type == "QMARK" for c in tree.children)
	if _name(tree) == "simple_type":
		return H.HTypeRef(name=_token(tree, "NAME").value, nullable=nullable, loc=_loc(tree))
	ret: Optional[H.TypeRef] = None
	params: List[H.TypeRef] = []
	seen_fn = False
	for child in tree.children:
		if isinstance(child, Token):
			seen_fn = seen_fn or child.type == "FUNCTION"
			continue
		if seen_fn:
			params.append(_build_type(child))
		else:
			ret = _build_type(child)
	return H.HFunctionTypeRef(return_type=ret, params=params, nullable=nullable, loc=_loc(tree))


# --- statements -------------------------------------------------------------


def _build_block(tree: Tree) -> H.HBlock:
	return H.HBlock(statements=[_build_stmt(c) for c in tree.children if isinstance(c, Tree)], loc=_loc(tree))


def _build_stmt(tree: Tree) -> H.HStmt:
	kind = _name(tree)
	if kind == "block":
		return _build_block(tree)
	if kind == "expr_stmt":
		return H.HExprStmt(expr=_build_expr(tree.children[0]), loc=_loc(tree))
	if kind == "return_stmt":
		value = next((c for c in tree.children if isinstance(c, Tree)), None)
		return H.HReturn(value=_build_expr(value) if value is not None else None, loc=_loc(tree))
	if kind == "if_stmt":
		return _build_if(tree)
	if kind == "while_stmt":
		cond, body = [c for c in tree.children if isinstance(c, Tree)]
		return H.HWhile(cond=_build_expr(cond), body=_build_block(body), loc=_loc(tree))
	if kind == "try_stmt":
		return _build_try(tree)
	if kind == "rethrow_stmt":
		tok = _token(tree, "RETHROW")
		return H.HExprStmt(expr=H.HRethrow(loc=_loc(tok)), loc=_loc(tree))
	if kind == "break_stmt":
		return H.HBreak(loc=_loc(tree))
	if kind == "continue_stmt":
		return H.HContinue(loc=_loc(tree))
	if kind in ("var_decl", "local_function"):
		return _build_decl(tree, context="local", class_name=None)
	raise ParseError(f"unsupported statement '{kind}'", loc=_loc(tree))


def _build_if(tree: Tree) -> H.HIf:
	parts = [c for c in tree.children if isinstance(c, Tree)]
	cond, then_node = parts[0], parts[1]
	else_block: Optional[H.HBlock] = None
	if len(parts) > 2:
		else_node = parts[2]
		if _name(else_node) == "if_stmt":
			nested = _build_if(else_node)
			else_block = H.HBlock(statements=[nested], loc=nested.loc)
		else:
			else_block = _build_block(else_node)
	return H.HIf(cond=_build_expr(cond), then_block=_build_block(then_node), else_block=else_block, loc=_loc(tree))


def _build_try(tree: Tree) -> H.HTry:
	body: Optional[H.HBlock] = None
	catches: List[H.HCatch] = []
	finally_block: Optional[H.HBlock] = None
	for child in tree.children:
		if not isinstance(child, Tree):
			continue
		kind = _name(child)
		if kind == "block":
			body = _build_block(child)
		elif kind in ("on_clause", "catch_all_clause"):
			catches.append(_build_catch(child))
		elif kind == "finally_clause":
			finally_block = _build_block(_child(child, "block"))
	if body is None:
		raise ParseError("try statement without a body", loc=_loc(tree))
	if not catches and finally_block is None:
		raise ParseError("try statement needs at least one catch clause or a finally block", loc=_loc(tree))
	return H.HTry(body=body, catches=catches, finally_block=finally_block, loc=_loc(tree))


def _build_catch(tree: Tree) -> H.HCatch:
	exc_type: Optional[H.TypeRef] = None
	binder: Optional[str] = None
	stack_binder: Optional[str] = None
	type_node = next(
		(c for c in tree.children if isinstance(c, Tree) and _name(c) in ("simple_type", "function_type")),
		None,
	)
	if type_node is not None:
		exc_type = _build_type(type_node)
	binders = _child(tree, "catch_binders")
	if binders is not None:
		names = [t.value for t in _tokens(binders, "NAME")]
		binder = names[0]
		stack_binder = names[1] if len(names) > 1 else None
	return H.HCatch(
		exception_type=exc_type,
		binder=binder,
		body=_build_block(_child(tree, "block")),
		stack_binder=stack_binder,
		loc=_loc(tree),
	)


# --- expressions ------------------------------------------------------------

_ASSIGNABLE = (H.HName, H.HMember, H.HIndex)


def _build_expr(node: Tree | Token) -> H.HExpr:
	if isinstance(node, Token):
		raise ParseError(f"unexpected token '{node.value}'", loc=_loc(node))
	kind = _name(node)
	loc = _loc(node)
	if kind == "name":
		return H.HName(name=node.children[0].value, loc=loc)
	if kind == "this":
		return H.HThis(loc=loc)
	if kind == "int_lit":
		text = node.children[0].value
		return H.HLiteral(value=int(text, 16) if text[:2] in ("0x", "0X") else int(text), kind="int", loc=loc)
	if kind == "double_lit":
		return H.HLiteral(value=float(node.children[0].value), kind="double", loc=loc)
	if kind == "string_lit":
		return H.HLiteral(value=_decode_string_token(node.children[0]), kind="string", loc=loc)
	if kind in ("true_lit", "false_lit"):
		return H.HLiteral(value=kind == "true_lit", kind="bool", loc=loc)
	if kind == "null_lit":
		return H.HLiteral(value=None, kind="null", loc=loc)
	if kind == "list_lit":
		return H.HListLiteral(items=[_build_expr(c) for c in node.children if isinstance(c, Tree)], loc=loc)
	if kind == "member":
		target, name = node.children
		return H.HMember(target=_build_expr(target), name=name.value, loc=loc)
	if kind == "call":
		callee, args = node.children
		return H.HCall(callee=_build_expr(callee), args=_build_args(args), loc=loc)
	if kind == "creation":
		keyword = node.children[0]
		names = _tokens(node, "NAME")
		callee: H.HExpr = H.HName(name=names[0].value, loc=_loc(names[0]))
		if len(names) > 1:
			span = Span(
				line=names[0].line,
				column=names[0].column,
				end_line=names[1].end_line,
				end_column=names[1].end_column,
				offset=names[0].start_pos,
				end_offset=names[1].end_pos,
			)
			callee = H.HMember(target=callee, name=names[1].value, loc=span)
		return H.HCall(
			callee=callee,
			args=_build_args(node.children[-1]),
			is_new=keyword.type == "NEW",
			is_const=keyword.type == "CONST_CREATE",
			loc=loc,
		)
	if kind == "index":
		target, index = node.children
		return H.HIndex(target=_build_expr(target), index=_build_expr(index), loc=loc)
	if kind == "binary":
		left, op, right = node.children
		return H.HBinary(op=op.value, left=_build_expr(left), right=_build_expr(right), loc=loc)
	if kind == "prefix_op":
		op, operand = node.children
		return H.HUnary(op=op.value, operand=_incdec_operand(op, operand), prefix=True, loc=loc)
	if kind == "postfix_op":
		operand, op = node.children
		return H.HUnary(op=op.value, operand=_incdec_operand(op, operand), prefix=False, loc=loc)
	if kind == "assignment":
		target_node, op, value = node.children
		target = _build_expr(target_node)
		if not isinstance(target, _ASSIGNABLE):
			raise ParseError("invalid assignment target", loc=target.loc)
		return H.HAssign(op=op.value, target=target, value=_build_expr(value), loc=loc)
	if kind == "throw_expr":
		return H.HThrow(value=_build_expr(node.children[-1]), loc=loc)
	if kind == "lambda":
		params = [_build_param(c) for c in node.children if isinstance(c, Tree) and _name(c) in ("param", "field_formal")]
		body_node = node.children[-1]
		body: H.HBlock | H.HExpr
		if isinstance(body_node, Tree) and _name(body_node) == "block":
			body = _build_block(body_node)
		else:
			body = _build_expr(body_node)
		if any(p.is_field_formal for p in params):
			raise ParseError("field formal parameters are only allowed in constructors", loc=loc)
		return H.HLambda(params=params, body=body, loc=loc)
	raise ParseError(f"unsupported expression '{kind}'", loc=loc)


def _incdec_operand(op: Token, operand: Tree | Token) -> H.HExpr:
	expr = _build_expr(operand)
	if op.type == "INCDEC" and not isinstance(expr, _ASSIGNABLE):
		raise ParseError(f"invalid operand for '{op.value}'", loc=expr.loc)
	return expr


def _build_args(tree: Tree) -> List[H.HExpr]:
	return [_build_expr(c) for c in tree.children if isinstance(c, Tree)]


# --- helpers ----------------------------------------------------------------


def _decode_string_token(tok: Token) -> str:
	"""Strip quotes and interpret backslash escapes (best effort)."""
	content = tok.value[1:-1]
	if "\\" not in content:
		return content
	try:
		return codecs.decode(content, "unicode_escape")
	except UnicodeError:
		return content


def _pin_file(unit: H.HUnit, uri: str) -> None:
	for node in walk(unit):
		loc = getattr(node, "loc", None)
		if isinstance(loc, Span):
			node.loc = loc.with_file(uri)


def _child(tree: Tree, name: str) -> Optional[Tree]:
	return next((c for c in tree.children if isinstance(c, Tree) and _name(c) == name), None)


def _token(tree: Tree, type_name: str) -> Token:
	tok = next((c for c in tree.children if isinstance(c, Token) and c.type == type_name), None)
	if tok is None:
		raise ParseError(f"expected {type_name} in '{_name(tree)}'", loc=_loc(tree))
	return tok


def _tokens(tree: Tree, type_name: str) -> List[Token]:
	return [c for c in tree.children if isinstance(c, Token) and c.type == type_name]


def _loc(node: Tree | Token) -> Span:
	if isinstance(node, Token):
		return Span(
			line=node.line,
			column=node.column,
			end_line=node.end_line,
			end_column=node.end_column,
			offset=node.start_pos,
			end_offset=node.end_pos,
		)
	return Span.from_meta(node.meta)


def _name(node: Tree | Token) -> str:
	if isinstance(node, Tree):
		data = node.data
		if isinstance(data, Token):
			return data.value
		return data
	if isinstance(node, Token):
		return node.type
	return str(node)


__all__ = ["ParseError", "ExpressionMarker", "parse_tree", "build_unit"]
