# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Engine-level queries on a resolved program, plus the end-to-end scenarios the
lint rules are built around.
"""

from throwlint.effects import EffectAnalysis, IntrinsicTable
from throwlint.hir import hir_nodes as H
from throwlint.test_support import (
	MAIN,
	THROWABLE_IMPORT,
	analysis_for,
	find_call,
	find_function,
	find_node,
	findings,
	resolve,
)

_PRELUDE = THROWABLE_IMPORT + """
class MyException implements Exception {}
class OtherException implements Exception {}
class SubException extends MyException {}
"""


def _type(analysis: EffectAnalysis, name: str):
	ty = analysis.program.type_system.find_class(name, MAIN)
	if ty is None:
		ty = analysis.program.type_system.core_type(name)
	assert ty is not None, name
	return ty


def _element(analysis: EffectAnalysis, unit: H.HUnit, name: str):
	return analysis.program.declared_element(find_function(unit, name))


def _names(analysis: EffectAnalysis, types) -> list:
	return [analysis.display_name(t) for t in types]


# --- scenarios ---------------------------------------------------------------------


def test_scenario_undeclared_direct_raise():
	src = _PRELUDE + """
void f() {
  throw MyException();
}
"""
	assert [f.effect_name for f in findings(src)] == ["MyException"]


def test_scenario_raise_declared_with_supertype():
	src = _PRELUDE + """
@Throws([Exception])
void f() {
  throw MyException();
}
"""
	assert findings(src) == []


def test_scenario_handler_clause_exact_and_sibling():
	handled = _PRELUDE + """
@Throws([MyException])
void g() {}

void f() {
  try {
    g();
  } on MyException catch (_) {}
}
"""
	assert findings(handled) == []
	sibling = handled.replace("on MyException catch", "on OtherException catch")
	assert [f.effect_name for f in findings(sibling)] == ["MyException"]


def test_scenario_callback_parameter_invocation():
	bare = _PRELUDE + """
void f(@Throws([MyException]) void Function() cb) {
  cb();
}
"""
	assert len(findings(bare)) == 1
	declared = bare.replace("void f(", "@Throws([MyException])\nvoid f(")
	assert findings(declared) == []


def test_scenario_assignment_loss():
	bare = _PRELUDE + """
@Throws([MyException])
late void Function() source;

late void Function() target;

void f() {
  target = source;
}
"""
	out = findings(bare)
	assert [(f.code, f.effect_name) for f in out] == [("throws_info_lost_in_assignment", "MyException")]
	predeclared = bare.replace("late void Function() target;", "@Throws([Exception])\nlate void Function() target;")
	assert findings(predeclared) == []


# --- effective effects -------------------------------------------------------------


def test_effective_effects_of_annotated_function():
	analysis, unit = analysis_for(_PRELUDE + """
@Throws([MyException, OtherException, MyException])
void g() {}
""")
	effects = analysis.effective_effects(_element(analysis, unit, "g"))
	assert _names(analysis, effects) == ["MyException", "OtherException"]


def test_effective_effects_of_none_is_empty():
	analysis, _unit = analysis_for("void g() {}")
	assert analysis.effective_effects(None) == []


def test_effective_effects_result_is_a_copy():
	analysis, unit = analysis_for(_PRELUDE + """
@Throws([MyException])
void g() {}
""")
	element = _element(analysis, unit, "g")
	first = analysis.effective_effects(element)
	first.clear()
	assert _names(analysis, analysis.effective_effects(element)) == ["MyException"]


def test_malformed_entries_are_skipped():
	"""Entries that do not evaluate to a type list are ignored; valid ones still count."""
	analysis, unit = analysis_for(_PRELUDE + """
const notAList = 1;

@Throws(notAList)
@Throws([MyException, 'text', 3])
void g() {}

@Throws(notAList)
void h() {}
""")
	assert _names(analysis, analysis.effective_effects(_element(analysis, unit, "g"))) == ["MyException"]
	assert analysis.effective_effects(_element(analysis, unit, "h")) == []


def test_throws_class_from_another_library_is_not_recognized():
	analysis, unit = analysis_for("""
class MyException implements Exception {}

class Throws {
  final List types;
  const Throws(this.types);
}

@Throws([MyException])
void g() {}
""")
	assert analysis.effective_effects(_element(analysis, unit, "g")) == []


def test_other_annotations_are_ignored():
	analysis, unit = analysis_for(_PRELUDE + """
class Base {
  void run() {}
}

class Impl extends Base {
  @override
  @Throws([MyException])
  void run() {}
}
""")
	run = find_node(unit, H.HFunctionDecl, lambda fn: fn.name == "run" and fn.metadata != [])
	effects = analysis.effective_effects(analysis.program.declared_element(run))
	assert _names(analysis, effects) == ["MyException"]


def test_annotation_through_exported_library():
	"""`Throws` reached through a re-export is still the real annotation class."""
	program, units, diags = resolve({
		"lib/reexport.dart": "export 'package:throwable/throwable.dart';\n",
		MAIN: """import 'reexport.dart';

class MyException implements Exception {}

@Throws([MyException])
void g() {}
""",
	})
	assert diags == []
	analysis = EffectAnalysis(program)
	element = program.declared_element(find_function(units[MAIN], "g"))
	assert _names(analysis, analysis.effective_effects(element)) == ["MyException"]


def test_explicit_declaration_takes_precedence_over_intrinsic_entry():
	program, units, _ = resolve({MAIN: _PRELUDE + """
@Throws([MyException])
void g() {}

void h() {}
"""})
	table = IntrinsicTable({MAIN: {"g": ["OtherException"], "h": ["OtherException"]}})
	analysis = EffectAnalysis(program, intrinsics=table)
	g = program.declared_element(find_function(units[MAIN], "g"))
	h = program.declared_element(find_function(units[MAIN], "h"))
	assert _names(analysis, analysis.effective_effects(g)) == ["MyException"]
	assert _names(analysis, analysis.effective_effects(h)) == ["OtherException"]


def test_intrinsic_names_that_do_not_resolve_are_dropped():
	program, units, _ = resolve({MAIN: "void h() {}\n"})
	analysis = EffectAnalysis(program, intrinsics=IntrinsicTable({MAIN: {"h": ["NoSuchType", "StateError"]}}))
	h = program.declared_element(find_function(units[MAIN], "h"))
	assert _names(analysis, analysis.effective_effects(h)) == ["StateError"]


# --- handling / propagation -------------------------------------------------------------


def test_is_handled_locally_for_supertype_and_catch_all_clauses():
	analysis, unit = analysis_for(_PRELUDE + """
@Throws([SubException])
void g() {}

void typed() {
  try {
    g();
  } on MyException catch (_) {}
}

void untyped() {
  try {
    g();
  } catch (_) {}
}

void sibling() {
  try {
    g();
  } on OtherException catch (_) {}
}
""")
	sub = _type(analysis, "SubException")
	for name, expected in (("typed", True), ("untyped", True), ("sibling", False)):
		call = find_call(find_function(unit, name), "g")
		assert analysis.is_handled_locally(call, sub) is expected, name


def test_handler_outside_declaration_boundary_is_never_consulted():
	src = _PRELUDE + """
void f() {
  try {
    void helper() {
      throw MyException();
    }
    helper();
  } on MyException catch (_) {}
}
"""
	analysis, unit = analysis_for(src)
	throw = find_node(unit, H.HThrow)
	assert analysis.is_handled_locally(throw, _type(analysis, "MyException")) is False
	assert [f.effect_name for f in findings(src)] == ["MyException"]


def test_unresolved_clause_type_acts_as_catch_all():
	analysis, unit = analysis_for(_PRELUDE + """
@Throws([MyException])
void g() {}

void f() {
  try {
    g();
  } on NotDeclaredAnywhere catch (_) {}
}
""")
	call = find_call(unit, "g")
	assert analysis.is_handled_locally(call, _type(analysis, "MyException")) is True


def test_is_declared_by_enclosing_without_boundary():
	analysis, unit = analysis_for(_PRELUDE + """
final value = throw MyException();
""")
	throw = find_node(unit, H.HThrow)
	assert analysis.is_declared_by_enclosing(throw, _type(analysis, "MyException")) is False


def test_is_declared_by_enclosing_is_subtype_closed():
	analysis, unit = analysis_for(_PRELUDE + """
@Throws([MyException])
void f() {
  throw SubException();
  throw OtherException();
}
""")
	throws = [n for n in unit.declarations[-1].body.statements]
	sub_site = throws[0].expr
	other_site = throws[1].expr
	assert analysis.is_declared_by_enclosing(sub_site, _type(analysis, "SubException")) is True
	assert analysis.is_declared_by_enclosing(other_site, _type(analysis, "OtherException")) is False


def test_unhandled_effects_and_first_unhandled_effect():
	analysis, unit = analysis_for(_PRELUDE + """
@Throws([MyException, OtherException])
void g() {}

@Throws([MyException])
void partial() {
  g();
}

@Throws([Exception])
void covered() {
  g();
}
""")
	partial_call = find_call(find_function(unit, "partial"), "g")
	covered_call = find_call(find_function(unit, "covered"), "g")
	assert _names(analysis, analysis.unhandled_effects(partial_call)) == ["OtherException"]
	assert analysis.display_name(analysis.first_unhandled_effect(partial_call)) == "OtherException"
	assert analysis.unhandled_effects(covered_call) == []
	assert analysis.first_unhandled_effect(covered_call) is None


def test_lost_effects_empty_source_is_always_empty():
	analysis, unit = analysis_for(_PRELUDE + """
void plain() {}

late void Function() target;

void f() {
  target = plain;
}
""")
	assign = find_node(unit, H.HAssign)
	assert analysis.lost_effects(assign) == []


def test_lost_effects_query():
	analysis, unit = analysis_for(_PRELUDE + """
@Throws([MyException, OtherException])
void g() {}

@Throws([OtherException])
late void Function() target;

void f() {
  target = g;
}
""")
	assign = find_node(unit, H.HAssign)
	assert _names(analysis, analysis.lost_effects(assign)) == ["MyException"]
