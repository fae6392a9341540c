# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
TypeTable subtyping and Span helpers.
"""

from types import SimpleNamespace

from throwlint.core.span import Span
from throwlint.core.types_core import TypeKind, TypeTable


def _hierarchy():
	table = TypeTable()
	obj = table.new_class("Object", "dart:core")
	table.mark_object(obj)
	exc = table.new_class("Exception", "dart:core")
	table.register_core("Exception", exc)
	fmt = table.new_class("FormatException", "dart:core")
	table.set_supertypes(fmt, [exc])
	mine = table.new_class("MyException", "lib/main.dart")
	table.set_supertypes(mine, [fmt, mine])
	return table, obj, exc, fmt, mine


def test_class_subtyping_is_reflexive_and_transitive():
	table, obj, exc, fmt, mine = _hierarchy()
	assert table.is_subtype(mine, mine)
	assert table.is_subtype(mine, fmt)
	assert table.is_subtype(mine, exc)
	assert table.is_subtype(mine, obj)
	assert not table.is_subtype(exc, fmt)
	# self-edges are dropped when recording supertypes
	assert table.supertypes(mine) == [fmt]
	assert table.all_supertypes(mine) == [fmt, exc, obj]


def test_special_types():
	table, obj, exc, _fmt, _mine = _hierarchy()
	dyn = table.ensure_dynamic()
	never = table.ensure_never()
	assert table.ensure_dynamic() == dyn
	assert table.is_subtype(exc, dyn)
	assert table.is_subtype(never, exc)
	assert not table.is_subtype(dyn, exc)
	assert table.get(table.ensure_void()).kind is TypeKind.VOID


def test_function_types_are_cached_and_structural():
	table, obj, exc, fmt, _mine = _hierarchy()
	wide = table.new_function([fmt], exc)
	assert table.new_function([fmt], exc) == wide
	narrow = table.new_function([exc], fmt)
	assert table.is_subtype(narrow, wide)
	assert not table.is_subtype(wide, narrow)
	assert table.is_subtype(narrow, obj)
	assert table.display_name(wide) == "Exception Function(FormatException)"


def test_lookup_helpers():
	table, _obj, exc, fmt, mine = _hierarchy()
	assert table.find_class("MyException") == mine
	assert table.find_class("MyException", "dart:core") is None
	assert table.core_type("Exception") == exc
	assert table.library_of(fmt) == "dart:core"
	assert table.library_of(12345) is None
	assert table.display_name(12345) == "<invalid>"


def test_span_helpers():
	span = Span(line=2, column=3, offset=10, end_offset=15)
	assert span.length == 5
	assert Span().length is None
	pinned = span.with_file("lib/a.dart")
	assert pinned.file == "lib/a.dart"
	assert (pinned.line, pinned.offset) == (2, 10)
	assert str(pinned) == "lib/a.dart:2:3"
	assert str(Span()) == "<unknown location>"


def test_span_from_lark_meta():
	meta = SimpleNamespace(empty=False, line=1, column=5, end_line=1, end_column=9, start_pos=4, end_pos=8)
	span = Span.from_meta(meta, "lib/a.dart")
	assert (span.line, span.column, span.offset, span.end_offset) == (1, 5, 4, 8)
	assert Span.from_meta(SimpleNamespace(empty=True), "lib/a.dart") == Span(file="lib/a.dart")
