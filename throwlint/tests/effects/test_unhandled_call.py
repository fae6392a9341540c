# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Invocation sites: `unhandled_exception_call`.

Covers plain calls, accessors, operators, constructors, intrinsic SDK
throwers, and calls through parameters or variables declared with @Throws.
"""

from throwlint.driver import LintConfig
from throwlint.effects import UNHANDLED_EXCEPTION_CALL, IntrinsicTable, OriginKind
from throwlint.test_support import MAIN, THROWABLE_IMPORT, findings, lint

_PRELUDE = THROWABLE_IMPORT + """
class MyException implements Exception {}
"""


def _span(result, src: str, text: str) -> None:
	assert result.span.offset == src.rindex(text)
	assert result.span.length == len(text)


def test_call_unhandled():
	src = _PRELUDE + """
@Throws([MyException])
void dangerous() {}

void f() {
  dangerous();
}
"""
	out = findings(src)
	assert len(out) == 1
	assert out[0].code == UNHANDLED_EXCEPTION_CALL
	assert out[0].origin is OriginKind.CALL
	assert out[0].message == (
		"Unhandled 'MyException' from call to 'dangerous'. Catch it or declare it with @Throws."
	)
	_span(out[0], src, "dangerous()")


def test_call_propagated_via_annotation():
	src = _PRELUDE + """
@Throws([MyException])
void dangerous() {}

@Throws([MyException])
void f() {
  dangerous();
}
"""
	assert findings(src) == []


def test_call_handled_in_try_catch():
	src = _PRELUDE + """
@Throws([MyException])
void dangerous() {}

void f() {
  try {
    dangerous();
  } on MyException catch (_) {}
}
"""
	assert findings(src) == []


def test_call_handled_generic_catch():
	src = _PRELUDE + """
@Throws([MyException])
void dangerous() {}

void f() {
  try {
    dangerous();
  } catch (_) {}
}
"""
	assert findings(src) == []


def test_getter_unhandled():
	src = _PRELUDE + """
class Service {
  @Throws([MyException])
  int get value => 0;
}

void f(Service s) {
  s.value;
}
"""
	out = findings(src)
	assert [f.origin_description for f in out] == ["Service.value"]
	_span(out[0], src, "s.value")


def test_setter_unhandled():
	src = _PRELUDE + """
class Service {
  @Throws([MyException])
  set value(int v) {}
}

void f(Service s) {
  s.value = 1;
}
"""
	out = findings(src)
	assert len(out) == 1
	_span(out[0], src, "s.value = 1")


def test_abstract_method_unhandled():
	src = _PRELUDE + """
abstract class Base {
  @Throws([MyException])
  void run();
}

void f(Base b) {
  b.run();
}
"""
	out = findings(src)
	assert [f.origin_description for f in out] == ["Base.run"]
	_span(out[0], src, "b.run()")


def test_inherited_method_uses_declaring_class_annotation():
	src = _PRELUDE + """
class Base {
  @Throws([MyException])
  void run() {}
}

class Derived extends Base {}

void f(Derived d) {
  d.run();
}
"""
	assert [f.origin_description for f in findings(src)] == ["Base.run"]


def test_sdk_thrower_unhandled():
	src = """
void f() {
  int.parse('x');
}
"""
	out = findings(src)
	assert [f.message for f in out] == [
		"Unhandled 'FormatException' from call to 'int.parse'. Catch it or declare it with @Throws."
	]
	_span(out[0], src, "int.parse('x')")


def test_sdk_getter_through_subtype_receiver():
	"""`List` inherits `first` from `Iterable`; the intrinsic entry follows the declaring class."""
	src = """
void f(List l) {
  l.first;
}
"""
	out = findings(src)
	assert [(f.effect_name, f.origin_description) for f in out] == [("StateError", "Iterable.first")]


def test_sdk_thrower_in_other_library():
	src = """
import 'dart:convert';

void f() {
  jsonDecode('{}');
  json.decode('{}');
}
"""
	out = findings(src)
	assert [f.origin_description for f in out] == ["jsonDecode", "JsonCodec.decode"]


def test_sdk_thrower_handled_by_supertype_clause():
	src = """
void f() {
  try {
    int.parse('x');
  } on Exception catch (e) {}
}
"""
	assert findings(src) == []


def test_operator_unhandled():
	src = _PRELUDE + """
class MyList {
  @Throws([MyException])
  int operator [](int index) => 0;
}

void f(MyList l) {
  l[0];
}
"""
	out = findings(src)
	assert [f.origin_description for f in out] == ["MyList.[]"]
	_span(out[0], src, "l[0]")


def test_binary_and_index_set_operators():
	src = _PRELUDE + """
class Money {
  @Throws([MyException])
  Money operator +(Money other) => this;

  @Throws([MyException])
  void operator []=(int index, int value) {}
}

void f(Money a, Money b) {
  a + b;
  a[0] = 1;
}
"""
	out = findings(src)
	assert [f.origin_description for f in out] == ["Money.+", "Money.[]="]
	_span(out[0], src, "a + b")
	_span(out[1], src, "a[0] = 1")


def test_compound_assignment_checks_getter_setter_and_operator():
	src = _PRELUDE + """
class Counter {
  @Throws([MyException])
  int get count => 0;

  set count(int value) {}
}

void f(Counter c) {
  c.count += 1;
}
"""
	out = findings(src)
	assert [f.origin_description for f in out] == ["Counter.count"]
	_span(out[0], src, "c.count += 1")


def test_unnamed_and_named_constructors():
	src = _PRELUDE + """
class Connection {
  @Throws([MyException])
  Connection();

  @Throws([MyException])
  Connection.open(String host);
}

void f() {
  Connection();
  Connection.open('db');
}
"""
	out = findings(src)
	assert [f.origin_description for f in out] == ["Connection.new", "Connection.open"]
	_span(out[0], src, "Connection()")
	_span(out[1], src, "Connection.open('db')")


def test_explicit_new_and_const_creation():
	src = _PRELUDE + """
class Connection {
  @Throws([MyException])
  Connection();

  @Throws([MyException])
  const Connection.cached();
}

void f() {
  new Connection();
  var c = const Connection.cached();
}
"""
	result = lint(src)
	assert result.diagnostics and all(d.phase == "lint" for d in result.diagnostics)
	out = result.findings[MAIN]
	assert [f.origin_description for f in out] == ["Connection.new", "Connection.cached"]
	_span(out[0], src, "new Connection()")
	_span(out[1], src, "const Connection.cached()")


def test_increment_reports_each_effect_type_once():
	"""Getter and setter of `x++` declaring the same type give one finding."""
	src = _PRELUDE + """
class Counter {
  @Throws([MyException])
  int get count => 0;

  @Throws([MyException])
  set count(int value) {}
}

void f(Counter c) {
  c.count++;
  c.count += 1;
}
"""
	out = findings(src)
	assert [(f.effect_name, f.origin_description) for f in out] == [
		("MyException", "Counter.count"),
		("MyException", "Counter.count"),
	]
	_span(out[0], src, "c.count++")
	_span(out[1], src, "c.count += 1")


def test_explicit_annotation_overrides_intrinsic_table():
	"""A declaration's own @Throws replaces its intrinsic entry; it does not add to it."""
	lib = THROWABLE_IMPORT + """
class Parser {
  @Throws([ArgumentError])
  static int parse(String s) => 0;
}
"""
	table = IntrinsicTable({"lib/parser.dart": {"Parser.parse": ["FormatException"]}})
	use = """import 'parser.dart';

void f() {
  Parser.parse('1');
}
"""
	out = findings(use, extra={"lib/parser.dart": lib}, config=LintConfig(intrinsics=table))
	assert [f.effect_name for f in out] == ["ArgumentError"]


def test_intrinsic_entry_applies_to_unannotated_user_member():
	lib = """
class Parser {
  static int parse(String s) => 0;
}
"""
	table = IntrinsicTable({"lib/parser.dart": {"Parser.parse": ["FormatException"]}})
	use = """import 'parser.dart';

void f() {
  Parser.parse('1');
}
"""
	out = findings(use, extra={"lib/parser.dart": lib}, config=LintConfig(intrinsics=table))
	assert [(f.effect_name, f.origin_description) for f in out] == [("FormatException", "Parser.parse")]


def test_multiple_declared_effects_report_separately():
	src = _PRELUDE + """
class OtherException implements Exception {}

@Throws([MyException, OtherException])
void dangerous() {}

@Throws([MyException])
void f() {
  dangerous();
}
"""
	out = findings(src)
	assert [f.effect_name for f in out] == ["OtherException"]


def test_repeated_annotations_are_unioned():
	src = _PRELUDE + """
class OtherException implements Exception {}

@Throws([MyException])
@Throws([OtherException])
void dangerous() {}

void f() {
  dangerous();
}
"""
	assert [f.effect_name for f in findings(src)] == ["MyException", "OtherException"]


def test_parameter_invocation():
	src = _PRELUDE + """
void f(@Throws([MyException]) void Function() callback) {
  callback();
}
"""
	out = findings(src)
	assert len(out) == 1
	assert out[0].origin is OriginKind.PARAMETER_INVOCATION
	assert out[0].message == (
		"Unhandled 'MyException' from call to 'callback'. Catch it or declare it with @Throws."
	)


def test_variable_invocation_through_field():
	src = _PRELUDE + """
class Holder {
  @Throws([MyException])
  late void Function() action;

  void go() {
    action();
    this.action();
  }
}
"""
	out = findings(src)
	assert [f.origin for f in out] == [OriginKind.VARIABLE_INVOCATION] * 2
	assert [f.origin_description for f in out] == ["action", "action"]


def test_variable_invocation_through_local_and_top_level_variables():
	src = _PRELUDE + """
@Throws([MyException])
void dangerous() {}

@Throws([MyException])
void Function() shared = dangerous;

void f() {
  @Throws([MyException])
  void Function() local = dangerous;
  local();
  shared();
}
"""
	out = findings(src)
	assert [(f.origin, f.origin_description) for f in out] == [
		(OriginKind.VARIABLE_INVOCATION, "local"),
		(OriginKind.VARIABLE_INVOCATION, "shared"),
	]
	_span(out[0], src, "local()")
	_span(out[1], src, "shared()")


def test_undeclared_local_variable_invocation_is_silent():
	src = _PRELUDE + """
void f() {
  void Function() local = () {};
  local();
}
"""
	assert findings(src) == []


def test_function_literal_argument_inherits_parameter_declaration():
	src = _PRELUDE + """
@Throws([MyException])
void dangerous() {}

void run(@Throws([MyException]) void Function() body) {
  try {
    body();
  } on MyException catch (_) {}
}

void f() {
  run(() {
    dangerous();
  });
}
"""
	assert findings(src) == []


def test_handler_outside_function_literal_does_not_protect_it():
	src = _PRELUDE + """
@Throws([MyException])
void dangerous() {}

void run(void Function() body) {}

void f() {
  try {
    run(() {
      dangerous();
    });
  } on MyException catch (_) {}
}
"""
	out = findings(src)
	assert [f.origin_description for f in out] == ["dangerous"]


def test_function_literal_falls_back_to_enclosing_declaration():
	src = _PRELUDE + """
@Throws([MyException])
void dangerous() {}

void run(void Function() body) {}

@Throws([MyException])
void f() {
  run(() => dangerous());
}
"""
	assert findings(src) == []


def test_local_function_is_its_own_boundary():
	src = _PRELUDE + """
@Throws([MyException])
void dangerous() {}

@Throws([MyException])
void f() {
  void helper() {
    dangerous();
  }
  helper();
}
"""
	out = findings(src)
	assert [f.origin_description for f in out] == ["dangerous"]


def test_unresolved_callee_produces_nothing():
	src = """
void f(dynamic d) {
  d.whatever();
}
"""
	assert findings(src) == []
