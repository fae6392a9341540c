# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Workspace resolver.

Turns parsed units into a `ResolvedProgram`: library/class/member elements,
a nominal TypeTable, and per-node side tables (resolved elements, static
types, accessors and operators, argument-to-parameter binding, catch clause
types).

Resolution runs in phases over the whole workspace so that declarations may
refer to each other regardless of file or declaration order:

  1. declare libraries and their top-level declarations
  2. link imports/exports (`dart:core` is imported implicitly)
  3. link class headers (superclass/interfaces; `Object` by default)
  4. declare class members (a class without constructors gets a default one)
  5. resolve signatures (parameter/return/field types)
  6. resolve initializers, annotations and bodies with lexical scopes

Problems are reported as resolve-phase warnings; resolution always continues
and unresolved nodes simply stay out of the side tables.
"""

from __future__ import annotations

import logging
import posixpath
from typing import Dict, List, Optional, Tuple

from throwlint.core.diagnostics import Diagnostic, report
from throwlint.core.elements import (
	ClassElement,
	Element,
	ElementKind,
	ExecutableElement,
	LibraryElement,
	ParameterElement,
	VariableElement,
)
from throwlint.core.span import Span
from throwlint.core.types_core import TypeId, TypeKind, TypeTable
from throwlint.hir import hir_nodes as H
from throwlint.sdk import CORE_URI

from .const_eval import ConstEvaluator
from .program import ResolvedProgram
from .scopes import BodyContext, Scope, lookup_library_name

logger = logging.getLogger(__name__)

_CORE_CLASSES = (
	"Object",
	"Null",
	"bool",
	"num",
	"int",
	"double",
	"String",
	"Type",
	"StackTrace",
	"Exception",
	"Error",
	"Iterable",
	"List",
	"Map",
)

_DECL_KINDS = {
	"function": ElementKind.FUNCTION,
	"local": ElementKind.LOCAL_FUNCTION,
	"method": ElementKind.METHOD,
	"getter": ElementKind.GETTER,
	"setter": ElementKind.SETTER,
	"operator": ElementKind.OPERATOR,
	"constructor": ElementKind.CONSTRUCTOR,
}

_LITERAL_TYPES = {"int": "int", "double": "double", "string": "String", "bool": "bool", "null": "Null"}


def resolve_workspace(units: List[H.HUnit]) -> Tuple[ResolvedProgram, List[Diagnostic]]:
	"""Resolve a set of parsed units (SDK units included) into one program."""
	diagnostics: List[Diagnostic] = []
	program = Resolver(diagnostics).resolve(units)
	return program, diagnostics


class Resolver:
	"""Phase-ordered resolver; one instance per workspace."""

	def __init__(self, diagnostics: List[Diagnostic]) -> None:
		self.diagnostics = diagnostics
		self.types = TypeTable()
		self.program = ResolvedProgram(self.types)
		self._dynamic = self.types.ensure_dynamic()
		self._void = self.types.ensure_void()
		self._never = self.types.ensure_never()
		self._unknown = self.types.ensure_unknown()
		self._object_class: Optional[ClassElement] = None

	def resolve(self, units: List[H.HUnit]) -> ResolvedProgram:
		units = [u for u in units if self._declare_library(u)]
		for unit in units:
			self._link_directives(unit)
		self._register_core()
		for unit in units:
			self._link_class_headers(unit)
		for unit in units:
			self._declare_members(unit)
		for unit in units:
			self._resolve_signatures(unit)
		self.program.const_evaluator = ConstEvaluator(self.program)
		for unit in units:
			self._resolve_bodies(unit)
		logger.debug(
			"resolved %d libraries, %d typed expressions",
			len(self.program.libraries),
			len(self.program.expr_types),
		)
		return self.program

	# --- phase 1: libraries and top-level declarations ---------------------------

	def _declare_library(self, unit: H.HUnit) -> bool:
		if unit.uri in self.program.libraries:
			self._warn(f"Duplicate library '{unit.uri}' ignored.", unit.loc, code="duplicate_library")
			return False
		lib = LibraryElement(name=unit.uri, kind=ElementKind.LIBRARY, declaration=unit, span=unit.loc, uri=unit.uri)
		lib.library = lib
		self.program.units[unit.uri] = unit
		self.program.libraries[unit.uri] = lib
		for decl in unit.declarations:
			element = self._declare_top(decl, lib)
			key = f"{decl.name}=" if isinstance(decl, H.HFunctionDecl) and decl.kind == "setter" else decl.name
			if key in lib.scope:
				self._warn(f"The name '{decl.name}' is already defined.", decl.loc, code="duplicate_definition")
				continue
			lib.scope[key] = element
			self.program.declared[decl.node_id] = element
		return True

	def _declare_top(self, decl: H.HDecl, lib: LibraryElement) -> Element:
		if isinstance(decl, H.HClassDecl):
			cls = ClassElement(
				name=decl.name,
				kind=ElementKind.CLASS,
				library=lib,
				enclosing=lib,
				metadata=decl.metadata,
				declaration=decl,
				span=decl.loc,
				type_id=self.types.new_class(decl.name, lib.uri),
				is_abstract=decl.is_abstract,
			)
			self.program.classes_by_type[cls.type_id] = cls
			return cls
		if isinstance(decl, H.HFunctionDecl):
			return self._new_executable(decl, lib, lib)
		assert isinstance(decl, H.HVarDecl)
		return self._new_variable(decl, lib, lib, ElementKind.TOP_LEVEL_VARIABLE)

	def _new_executable(self, decl: H.HFunctionDecl, lib: LibraryElement, enclosing: Optional[Element]) -> ExecutableElement:
		return ExecutableElement(
			name=decl.name,
			kind=_DECL_KINDS[decl.kind],
			library=lib,
			enclosing=enclosing,
			metadata=decl.metadata,
			declaration=decl,
			span=decl.loc,
			is_static=decl.is_static,
			is_abstract=decl.is_abstract,
			is_const=decl.is_const,
		)

	def _new_variable(
		self, decl: H.HVarDecl, lib: LibraryElement, enclosing: Optional[Element], kind: ElementKind
	) -> VariableElement:
		return VariableElement(
			name=decl.name,
			kind=kind,
			library=lib,
			enclosing=enclosing,
			metadata=decl.metadata,
			declaration=decl,
			span=decl.loc,
			is_final=decl.is_final,
			is_const=decl.is_const,
			is_late=decl.is_late,
			is_static=decl.is_static,
		)

	# --- phase 2: directives -------------------------------------------------------

	def _link_directives(self, unit: H.HUnit) -> None:
		lib = self.program.libraries[unit.uri]
		for directive in unit.directives:
			target = self.program.libraries.get(self._directive_uri(directive.uri, lib.uri))
			if target is None:
				self._warn(f"Target of URI doesn't exist: '{directive.uri}'.", directive.loc, code="uri_does_not_exist")
				continue
			bucket = lib.imports if isinstance(directive, H.HImport) else lib.exports
			if all(existing is not target for existing in bucket):
				bucket.append(target)
		core = self.program.libraries.get(CORE_URI)
		if core is not None and core is not lib and all(i is not core for i in lib.imports):
			lib.imports.append(core)

	def _directive_uri(self, uri: str, importer: str) -> str:
		"""Absolute uris (`dart:`, `package:`) as written; others relative to the importer."""
		if ":" in uri or uri in self.program.libraries:
			return uri
		return posixpath.normpath(posixpath.join(posixpath.dirname(importer), uri))

	def _register_core(self) -> None:
		core = self.program.libraries.get(CORE_URI)
		if core is None:
			logger.debug("no %s library in the workspace; core types unavailable", CORE_URI)
			return
		for name in _CORE_CLASSES:
			cls = core.scope.get(name)
			if isinstance(cls, ClassElement):
				self.types.register_core(name, cls.type_id)
		obj = core.scope.get("Object")
		if isinstance(obj, ClassElement):
			self._object_class = obj
			self.types.mark_object(obj.type_id)

	# --- phase 3: class headers ------------------------------------------------------

	def _link_class_headers(self, unit: H.HUnit) -> None:
		lib = self.program.libraries[unit.uri]
		for decl in unit.declarations:
			if not isinstance(decl, H.HClassDecl):
				continue
			cls = self.program.declared.get(decl.node_id)
			if not isinstance(cls, ClassElement):
				continue
			superclass: Optional[ClassElement] = None
			if decl.superclass is not None:
				superclass = self._class_named(decl.superclass, lib)
			if superclass is None and self._object_class is not None and cls is not self._object_class:
				superclass = self._object_class
			cls.superclass = superclass
			cls.interfaces = [c for c in (self._class_named(ref, lib) for ref in decl.interfaces) if c is not None]
			supers = ([superclass] if superclass is not None else []) + cls.interfaces
			self.types.set_supertypes(cls.type_id, [s.type_id for s in supers])

	def _class_named(self, ref: H.HTypeRef, lib: LibraryElement) -> Optional[ClassElement]:
		found = lookup_library_name(lib, ref.name)
		if isinstance(found, ClassElement):
			return found
		self._warn(f"Undefined class '{ref.name}'.", ref.loc, code="undefined_class")
		return None

	# --- phase 4: members --------------------------------------------------------------

	def _declare_members(self, unit: H.HUnit) -> None:
		lib = self.program.libraries[unit.uri]
		for decl in unit.declarations:
			if not isinstance(decl, H.HClassDecl):
				continue
			cls = self.program.declared.get(decl.node_id)
			if not isinstance(cls, ClassElement):
				continue
			for member in decl.members:
				self._declare_member(member, cls, lib)
			if not cls.constructors:
				cls.constructors[""] = ExecutableElement(
					name="",
					kind=ElementKind.CONSTRUCTOR,
					library=lib,
					enclosing=cls,
					span=decl.loc,
					return_type=cls.type_id,
				)

	def _declare_member(self, member: H.HDecl, cls: ClassElement, lib: LibraryElement) -> None:
		element: Element
		if isinstance(member, H.HVarDecl):
			element = self._new_variable(member, lib, cls, ElementKind.FIELD)
			if not self._add_member(cls.getters, member.name, element, member):
				return
			if not (member.is_final or member.is_const):
				cls.setters[member.name] = element
		elif isinstance(member, H.HFunctionDecl):
			element = self._new_executable(member, lib, cls)
			table = {
				"getter": cls.getters,
				"setter": cls.setters,
				"constructor": cls.constructors,
			}.get(member.kind, cls.methods)
			if not self._add_member(table, member.name, element, member):
				return
		else:
			self._warn("Classes cannot be nested.", member.loc, code="nested_class")
			return
		self.program.declared[member.node_id] = element

	def _add_member(self, table: Dict[str, Element], name: str, element: Element, node: H.HDecl) -> bool:
		if name in table:
			label = name or "<unnamed constructor>"
			self._warn(f"The name '{label}' is already defined.", node.loc, code="duplicate_definition")
			return False
		table[name] = element
		return True

	# --- phase 5: signatures ------------------------------------------------------------

	def _resolve_signatures(self, unit: H.HUnit) -> None:
		lib = self.program.libraries[unit.uri]
		for decl in unit.declarations:
			element = self.program.declared.get(decl.node_id)
			if isinstance(decl, H.HClassDecl) and isinstance(element, ClassElement):
				fields = [m for m in decl.members if isinstance(m, H.HVarDecl)]
				routines = [m for m in decl.members if isinstance(m, H.HFunctionDecl)]
				for member in fields:
					var = self.program.declared.get(member.node_id)
					if isinstance(var, VariableElement):
						var.type_id = self._type(member.type, lib)
				for member in routines:
					fn = self.program.declared.get(member.node_id)
					if isinstance(fn, ExecutableElement):
						self._signature(fn, member, lib, element)
				synthetic = element.constructors.get("")
				if synthetic is not None and synthetic.declaration is None:
					synthetic.type_id = self.types.new_function([], element.type_id)
			elif isinstance(decl, H.HFunctionDecl) and isinstance(element, ExecutableElement):
				self._signature(element, decl, lib, None)
			elif isinstance(decl, H.HVarDecl) and isinstance(element, VariableElement):
				element.type_id = self._type(decl.type, lib)

	def _signature(
		self, fn: ExecutableElement, decl: H.HFunctionDecl, lib: LibraryElement, cls: Optional[ClassElement]
	) -> None:
		params: List[ParameterElement] = []
		for idx, param in enumerate(decl.params):
			ty = self._param_type(param, lib, cls)
			element = ParameterElement(
				name=param.name,
				kind=ElementKind.PARAMETER,
				library=lib,
				enclosing=fn,
				metadata=param.metadata,
				declaration=param,
				span=param.loc,
				type_id=ty,
				index=idx,
				is_field_formal=param.is_field_formal,
			)
			self.program.declared[param.node_id] = element
			params.append(element)
		fn.params = params
		if decl.kind == "constructor" and cls is not None:
			ret = cls.type_id
		elif decl.kind == "setter":
			ret = self._void
		else:
			ret = self._type(decl.return_type, lib)
		fn.return_type = ret
		fn.type_id = self.types.new_function([p.type_id for p in params], ret)

	def _param_type(self, param: H.HParam, lib: LibraryElement, cls: Optional[ClassElement]) -> TypeId:
		if param.is_field_formal and param.type is None:
			field = cls.getters.get(param.name) if cls is not None else None
			if isinstance(field, VariableElement) and field.enclosing is cls:
				return field.type_id if field.type_id is not None else self._dynamic
			self._warn(f"'{param.name}' isn't a field in the enclosing class.", param.loc, code="invalid_field_formal")
			return self._dynamic
		return self._type(param.type, lib)

	def _type(self, ref: Optional[H.TypeRef], lib: LibraryElement) -> TypeId:
		if ref is None:
			return self._dynamic
		if isinstance(ref, H.HFunctionTypeRef):
			ret = self._type(ref.return_type, lib)
			return self.types.new_function([self._type(p, lib) for p in ref.params], ret)
		if ref.name == "dynamic":
			return self._dynamic
		if ref.name == "void":
			return self._void
		if ref.name == "Never":
			return self._never
		found = lookup_library_name(lib, ref.name)
		if isinstance(found, ClassElement):
			return found.type_id
		self._warn(f"Undefined class '{ref.name}'.", ref.loc, code="undefined_class")
		return self._unknown

	# --- phase 6: bodies ------------------------------------------------------------------

	def _resolve_bodies(self, unit: H.HUnit) -> None:
		lib = self.program.libraries[unit.uri]
		ctx = BodyContext(library=lib)
		for decl in unit.declarations:
			if isinstance(decl, H.HVarDecl):
				self._resolve_variable(decl, Scope(), ctx)
		for decl in unit.declarations:
			cls = self.program.declared.get(decl.node_id)
			if not isinstance(decl, H.HClassDecl) or not isinstance(cls, ClassElement):
				continue
			self._resolve_metadata(decl.metadata, Scope(), ctx)
			for member in decl.members:
				if isinstance(member, H.HVarDecl):
					self._resolve_variable(member, Scope(), BodyContext(lib, cls, is_static=member.is_static))
			for member in decl.members:
				fn = self.program.declared.get(member.node_id)
				if isinstance(member, H.HFunctionDecl) and isinstance(fn, ExecutableElement):
					self._resolve_function(member, fn, Scope(), BodyContext(lib, cls, is_static=member.is_static))
		for decl in unit.declarations:
			fn = self.program.declared.get(decl.node_id)
			if isinstance(decl, H.HFunctionDecl) and isinstance(fn, ExecutableElement):
				self._resolve_function(decl, fn, Scope(), ctx)

	def _resolve_variable(self, decl: H.HVarDecl, scope: Scope, ctx: BodyContext) -> None:
		self._resolve_metadata(decl.metadata, scope, ctx)
		var = self.program.declared.get(decl.node_id)
		if decl.init is not None:
			init_type = self._expr(decl.init, scope, ctx)
			if isinstance(var, VariableElement) and decl.type is None:
				var.type_id = init_type

	def _resolve_function(self, decl: H.HFunctionDecl, fn: ExecutableElement, outer: Scope, ctx: BodyContext) -> None:
		self._resolve_metadata(decl.metadata, outer, ctx)
		scope = outer.child()
		for param, element in zip(decl.params, fn.params):
			self._resolve_metadata(param.metadata, outer, ctx)
			if not param.is_field_formal:
				scope.declare(param.name, element)
		if isinstance(decl.body, H.HBlock):
			self._block(decl.body, scope, ctx)
		elif decl.body is not None:
			self._expr(decl.body, scope, ctx)

	def _resolve_metadata(self, annotations: List[H.HAnnotation], scope: Scope, ctx: BodyContext) -> None:
		for ann in annotations:
			target = self._lookup_read(ann.name, scope, ctx)
			if isinstance(target, ClassElement):
				ctor = target.constructors.get("")
				if ctor is not None:
					self.program.record(ann, ctor)
			elif isinstance(target, VariableElement):
				self.program.record(ann, target)
			else:
				self._warn(f"Undefined name '{ann.name}' used as an annotation.", ann.loc, code="undefined_annotation")
			for arg in ann.args or []:
				self._expr(arg, scope, ctx)

	# --- statements ------------------------------------------------------------------------

	def _block(self, block: H.HBlock, scope: Scope, ctx: BodyContext) -> None:
		inner = scope.child()
		for stmt in block.statements:
			self._stmt(stmt, inner, ctx)

	def _stmt(self, stmt: H.HStmt, scope: Scope, ctx: BodyContext) -> None:
		if isinstance(stmt, H.HBlock):
			self._block(stmt, scope, ctx)
		elif isinstance(stmt, H.HExprStmt):
			self._expr(stmt.expr, scope, ctx)
		elif isinstance(stmt, H.HReturn):
			if stmt.value is not None:
				self._expr(stmt.value, scope, ctx)
		elif isinstance(stmt, H.HIf):
			self._expr(stmt.cond, scope, ctx)
			self._block(stmt.then_block, scope, ctx)
			if stmt.else_block is not None:
				self._block(stmt.else_block, scope, ctx)
		elif isinstance(stmt, H.HWhile):
			self._expr(stmt.cond, scope, ctx)
			self._block(stmt.body, scope, ctx)
		elif isinstance(stmt, H.HTry):
			self._try(stmt, scope, ctx)
		elif isinstance(stmt, H.HVarDecl):
			var = self._new_variable(stmt, ctx.library, None, ElementKind.LOCAL_VARIABLE)
			var.type_id = self._type(stmt.type, ctx.library) if stmt.type is not None else self._dynamic
			self.program.declared[stmt.node_id] = var
			self._resolve_variable(stmt, scope, ctx)
			scope.declare(stmt.name, var)
		elif isinstance(stmt, H.HFunctionDecl):
			fn = self._new_executable(stmt, ctx.library, None)
			self._signature(fn, stmt, ctx.library, None)
			self.program.declared[stmt.node_id] = fn
			scope.declare(stmt.name, fn)
			self._resolve_function(stmt, fn, scope, BodyContext(ctx.library, ctx.cls, is_static=ctx.is_static))
		elif isinstance(stmt, (H.HBreak, H.HContinue)):
			pass
		else:
			self._warn(f"Unsupported statement '{type(stmt).__name__}'.", getattr(stmt, "loc", Span()), code="unsupported")

	def _try(self, stmt: H.HTry, scope: Scope, ctx: BodyContext) -> None:
		self._block(stmt.body, scope, ctx)
		for clause in stmt.catches:
			clause_scope = scope.child()
			binder_type = self._object_type()
			if clause.exception_type is not None:
				ty = self._type(clause.exception_type, ctx.library)
				if ty != self._unknown:
					self.program.catch_types[clause.node_id] = ty
					binder_type = ty
			if clause.binder is not None:
				clause_scope.declare(clause.binder, self._local(clause.binder, binder_type, clause, ctx))
			if clause.stack_binder is not None:
				trace = self.types.core_type("StackTrace")
				clause_scope.declare(
					clause.stack_binder,
					self._local(clause.stack_binder, trace if trace is not None else self._dynamic, clause, ctx),
				)
			self._block(clause.body, clause_scope, ctx)
		if stmt.finally_block is not None:
			self._block(stmt.finally_block, scope, ctx)

	def _local(self, name: str, ty: TypeId, node: H.HNode, ctx: BodyContext) -> VariableElement:
		return VariableElement(
			name=name,
			kind=ElementKind.LOCAL_VARIABLE,
			library=ctx.library,
			declaration=node,
			span=getattr(node, "loc", Span()),
			type_id=ty,
			is_final=True,
		)

	# --- expressions -------------------------------------------------------------------------

	def _expr(self, node: H.HExpr, scope: Scope, ctx: BodyContext) -> TypeId:
		if isinstance(node, H.HName):
			ty = self._name(node, scope, ctx)
		elif isinstance(node, H.HLiteral):
			ty = self._core_or_dynamic(_LITERAL_TYPES[node.kind])
		elif isinstance(node, H.HListLiteral):
			for item in node.items:
				self._expr(item, scope, ctx)
			ty = self._core_or_dynamic("List")
		elif isinstance(node, H.HThis):
			ty = ctx.cls.type_id if ctx.cls is not None and not ctx.is_static else self._unknown
		elif isinstance(node, H.HMember):
			ty = self._member(node, scope, ctx)
		elif isinstance(node, H.HCall):
			ty = self._call(node, scope, ctx)
		elif isinstance(node, H.HIndex):
			target = self._expr(node.target, scope, ctx)
			self._expr(node.index, scope, ctx)
			ty = self._apply_operator(node, target, "[]")
		elif isinstance(node, H.HBinary):
			ty = self._binary(node, scope, ctx)
		elif isinstance(node, H.HUnary):
			ty = self._unary(node, scope, ctx)
		elif isinstance(node, H.HAssign):
			ty = self._assign(node, scope, ctx)
		elif isinstance(node, H.HThrow):
			self._expr(node.value, scope, ctx)
			ty = self._never
		elif isinstance(node, H.HRethrow):
			ty = self._never
		elif isinstance(node, H.HLambda):
			ty = self._lambda(node, scope, ctx)
		else:
			ty = self._unknown
		self.program.expr_types[node.node_id] = ty
		return ty

	def _name(self, node: H.HName, scope: Scope, ctx: BodyContext) -> TypeId:
		element = self._lookup_read(node.name, scope, ctx)
		if element is None:
			self._warn(f"Undefined name '{node.name}'.", node.loc, code="undefined_identifier")
			return self._unknown
		self.program.record(node, element)
		return self._type_of(element)

	def _member(self, node: H.HMember, scope: Scope, ctx: BodyContext) -> TypeId:
		static_cls = self._class_target(node.target, scope, ctx)
		if static_cls is not None:
			element = static_cls.lookup_getter(node.name, static=True) or static_cls.lookup_method(node.name, static=True)
		else:
			cls = self.program.class_of_type(self._expr(node.target, scope, ctx))
			element = None
			if cls is not None:
				element = cls.lookup_getter(node.name, static=False) or cls.lookup_method(node.name, static=False)
		if element is None:
			logger.debug("unresolved member '%s' at %s", node.name, node.loc)
			return self._dynamic
		self.program.record(node, element)
		return self._type_of(element)

	def _call(self, node: H.HCall, scope: Scope, ctx: BodyContext) -> TypeId:
		callee = node.callee
		invoked: Optional[ExecutableElement] = None
		callable_type: Optional[TypeId] = None
		result = self._dynamic
		if isinstance(callee, (H.HName, H.HMember)):
			target = self._callee_element(callee, scope, ctx)
			if isinstance(target, ClassElement):
				invoked = target.constructors.get("")
				result = target.type_id
			elif isinstance(target, ExecutableElement):
				invoked = target
				if target.kind is ElementKind.CONSTRUCTOR and target.enclosing_class is not None:
					result = target.enclosing_class.type_id
				elif target.kind is ElementKind.GETTER:
					callable_type = target.return_type
				else:
					result = target.return_type if target.return_type is not None else self._dynamic
			elif target is not None:
				callable_type = self._type_of(target)
		else:
			callable_type = self._expr(callee, scope, ctx)
		params: List[ParameterElement] = []
		if invoked is not None:
			self.program.record(node, invoked)
			if invoked.kind is not ElementKind.GETTER:
				params = invoked.params
		if callable_type is not None:
			td = self.types.get(callable_type)
			if td.kind is TypeKind.FUNCTION and td.return_type is not None:
				result = td.return_type
		for idx, arg in enumerate(node.args):
			if idx < len(params):
				self.program.arg_params[arg.node_id] = params[idx]
			self._expr(arg, scope, ctx)
		return result

	def _callee_element(self, callee: H.HName | H.HMember, scope: Scope, ctx: BodyContext) -> Optional[Element]:
		"""Resolve the callee of an invocation, recording it and its static type."""
		element: Optional[Element]
		if isinstance(callee, H.HName):
			element = self._lookup_read(callee.name, scope, ctx)
			if element is None:
				self._warn(f"Undefined name '{callee.name}'.", callee.loc, code="undefined_identifier")
		else:
			static_cls = self._class_target(callee.target, scope, ctx)
			if static_cls is not None:
				element = (
					static_cls.lookup_method(callee.name, static=True)
					or static_cls.constructors.get(callee.name)
					or static_cls.lookup_getter(callee.name, static=True)
				)
			else:
				cls = self.program.class_of_type(self._expr(callee.target, scope, ctx))
				element = None
				if cls is not None:
					element = cls.lookup_method(callee.name, static=False) or cls.lookup_getter(callee.name, static=False)
			if element is None:
				logger.debug("unresolved method '%s' at %s", callee.name, callee.loc)
		if element is None:
			self.program.expr_types[callee.node_id] = self._unknown
			return None
		self.program.record(callee, element)
		self.program.expr_types[callee.node_id] = self._type_of(element)
		return element

	def _class_target(self, target: H.HExpr, scope: Scope, ctx: BodyContext) -> Optional[ClassElement]:
		"""A receiver naming a class directly (static member or named constructor access)."""
		if not isinstance(target, H.HName):
			return None
		element = self._lookup_read(target.name, scope, ctx)
		if not isinstance(element, ClassElement):
			return None
		self.program.record(target, element)
		self.program.expr_types[target.node_id] = self._core_or_dynamic("Type")
		return element

	def _binary(self, node: H.HBinary, scope: Scope, ctx: BodyContext) -> TypeId:
		left = self._expr(node.left, scope, ctx)
		self._expr(node.right, scope, ctx)
		if node.op in ("&&", "||"):
			return self._core_or_dynamic("bool")
		if node.op in ("==", "!="):
			self._apply_operator(node, left, "==")
			return self._core_or_dynamic("bool")
		return self._apply_operator(node, left, node.op)

	def _unary(self, node: H.HUnary, scope: Scope, ctx: BodyContext) -> TypeId:
		if node.op == "!":
			self._expr(node.operand, scope, ctx)
			return self._core_or_dynamic("bool")
		if node.op in ("++", "--"):
			operand = self._assign_target(node, node.operand, scope, ctx, compound=True)
			self._apply_operator(node, operand, node.op[0])
			return operand
		operand = self._expr(node.operand, scope, ctx)
		return self._apply_operator(node, operand, "unary-" if node.op == "-" else node.op)

	def _assign(self, node: H.HAssign, scope: Scope, ctx: BodyContext) -> TypeId:
		compound = node.op != "="
		target = self._assign_target(node, node.target, scope, ctx, compound=compound)
		value = self._expr(node.value, scope, ctx)
		if compound and node.op != "??=":
			return self._apply_operator(node, target, node.op[:-1])
		return value

	def _assign_target(self, owner: H.HExpr, target: H.HExpr, scope: Scope, ctx: BodyContext, *, compound: bool) -> TypeId:
		"""
		Resolve an assignment/increment target. The write accessor (and for
		compound forms the read accessor) is recorded on `owner`, never on the
		target node, so the target is not mistaken for a plain read.
		"""
		write: Optional[Element] = None
		read: Optional[Element] = None
		if isinstance(target, H.HName):
			write = self._lookup_write(target.name, scope, ctx)
			if compound:
				read = self._lookup_read(target.name, scope, ctx)
			if write is None and read is None:
				self._warn(f"Undefined name '{target.name}'.", target.loc, code="undefined_identifier")
		elif isinstance(target, H.HMember):
			static_cls = self._class_target(target.target, scope, ctx)
			cls = static_cls or self.program.class_of_type(self._expr(target.target, scope, ctx))
			static = True if static_cls is not None else False
			if cls is not None:
				write = cls.lookup_setter(target.name, static=static)
				if compound:
					read = cls.lookup_getter(target.name, static=static)
		elif isinstance(target, H.HIndex):
			cls = self.program.class_of_type(self._expr(target.target, scope, ctx))
			self._expr(target.index, scope, ctx)
			if cls is not None:
				write = cls.lookup_method("[]=", static=False)
				if compound:
					read = cls.lookup_method("[]", static=False)
		if write is not None:
			self.program.write_elements[owner.node_id] = write
		if read is not None:
			self.program.read_elements[owner.node_id] = read
		if read is not None:
			ty = self._type_of(read) if not isinstance(target, H.HIndex) else self._return_type(read)
		elif write is not None:
			ty = self._written_type(write)
		else:
			ty = self._dynamic
		self.program.expr_types[target.node_id] = ty
		return ty

	def _lambda(self, node: H.HLambda, scope: Scope, ctx: BodyContext) -> TypeId:
		inner = scope.child()
		param_types: List[TypeId] = []
		for idx, param in enumerate(node.params):
			self._resolve_metadata(param.metadata, scope, ctx)
			ty = self._type(param.type, ctx.library)
			element = ParameterElement(
				name=param.name,
				kind=ElementKind.PARAMETER,
				library=ctx.library,
				metadata=param.metadata,
				declaration=param,
				span=param.loc,
				type_id=ty,
				index=idx,
			)
			self.program.declared[param.node_id] = element
			inner.declare(param.name, element)
			param_types.append(ty)
		if isinstance(node.body, H.HBlock):
			self._block(node.body, inner, ctx)
			ret = self._dynamic
		else:
			ret = self._expr(node.body, inner, ctx)
		return self.types.new_function(param_types, ret)

	# --- lookup helpers ------------------------------------------------------------------------

	def _lookup_read(self, name: str, scope: Scope, ctx: BodyContext) -> Optional[Element]:
		found = scope.lookup(name)
		if found is not None:
			return found
		if ctx.cls is not None:
			member = ctx.cls.lookup_getter(name) or ctx.cls.lookup_method(name)
			if member is not None and self._member_visible(member, ctx):
				return member
		return lookup_library_name(ctx.library, name)

	def _lookup_write(self, name: str, scope: Scope, ctx: BodyContext) -> Optional[Element]:
		found = scope.lookup(name)
		if found is not None:
			return found if isinstance(found, (VariableElement, ParameterElement)) else None
		if ctx.cls is not None:
			member = ctx.cls.lookup_setter(name)
			if member is not None and self._member_visible(member, ctx):
				return member
		setter = lookup_library_name(ctx.library, f"{name}=")
		if setter is not None:
			return setter
		found = lookup_library_name(ctx.library, name)
		return found if isinstance(found, VariableElement) else None

	@staticmethod
	def _member_visible(member: Element, ctx: BodyContext) -> bool:
		return not ctx.is_static or bool(getattr(member, "is_static", False))

	def _apply_operator(self, node: H.HExpr, receiver: TypeId, name: str) -> TypeId:
		cls = self.program.class_of_type(receiver)
		op = cls.lookup_method(name, static=False) if cls is not None else None
		if op is None:
			return self._dynamic
		self.program.operators[node.node_id] = op
		return op.return_type if op.return_type is not None else self._dynamic

	def _type_of(self, element: Element) -> TypeId:
		if isinstance(element, (VariableElement, ParameterElement)):
			return element.type_id if element.type_id is not None else self._dynamic
		if isinstance(element, ExecutableElement):
			if element.kind is ElementKind.GETTER:
				return self._return_type(element)
			return element.type_id if element.type_id is not None else self._dynamic
		if isinstance(element, ClassElement):
			return self._core_or_dynamic("Type")
		return self._dynamic

	def _return_type(self, element: Element) -> TypeId:
		if isinstance(element, ExecutableElement) and element.return_type is not None:
			return element.return_type
		return self._type_of(element) if not isinstance(element, ExecutableElement) else self._dynamic

	def _written_type(self, element: Element) -> TypeId:
		if isinstance(element, ExecutableElement):
			# setter value / `[]=` value parameter
			if element.params:
				ty = element.params[-1].type_id
				return ty if ty is not None else self._dynamic
			return self._dynamic
		return self._type_of(element)

	def _core_or_dynamic(self, name: str) -> TypeId:
		ty = self.types.core_type(name)
		return ty if ty is not None else self._dynamic

	def _object_type(self) -> TypeId:
		ty = self.types.object_type()
		return ty if ty is not None else self._dynamic

	def _warn(self, message: str, span: Span, *, code: str) -> None:
		report(self.diagnostics, message, span=span, phase="resolve", severity="warning", code=code)


__all__ = ["Resolver", "resolve_workspace"]
