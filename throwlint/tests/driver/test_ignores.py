# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Ignore comments: parsing, matching and their effect on lint runs.
"""

from throwlint.core.diagnostics import Diagnostic
from throwlint.core.span import Span
from throwlint.ignores import ALL_LINTS, IgnoreInfo, filter_ignored
from throwlint.parser import parse_source
from throwlint.test_support import THROWABLE_IMPORT, findings, lint


def _ignores(src: str) -> IgnoreInfo:
	unit, diags = parse_source(src, "lib/a.dart")
	assert diags == [], diags
	return IgnoreInfo.of(unit)


def test_parse_same_line_and_next_line():
	info = _ignores("""void f() {
  a(); // ignore: unhandled_exception_call
  // ignore: Unhandled_Throw_In_Body, throws_info_lost_in_assignment
  b();
}
""")
	assert info.line_codes == {
		2: {"unhandled_exception_call"},
		4: {"unhandled_throw_in_body", "throws_info_lost_in_assignment"},
	}
	assert info.file_codes == set()


def test_parse_for_file():
	info = _ignores("// ignore_for_file: unhandled_exception_call, type=lint\n")
	assert info.file_codes == {"unhandled_exception_call", ALL_LINTS}
	assert info.line_codes == {}


def test_directives_inside_strings_are_not_comments():
	info = _ignores("""void f() {
  print("// ignore_for_file: type=lint");
  print('x // ignore: unhandled_exception_call');
}
""")
	assert info.file_codes == set()
	assert info.line_codes == {}


def test_other_comments_are_skipped():
	info = _ignores("""// a note about ignore: unhandled_exception_call
/* ignore_for_file: type=lint */
void f() {}
""")
	assert info == IgnoreInfo()


def test_is_ignored():
	info = IgnoreInfo(file_codes={"unhandled_throw_in_body"}, line_codes={4: {"unhandled_exception_call"}})
	assert info.is_ignored("UNHANDLED_THROW_IN_BODY", 1)
	assert info.is_ignored("unhandled_exception_call", 4)
	assert not info.is_ignored("unhandled_exception_call", 5)
	assert not info.is_ignored("unhandled_exception_call", None)


def test_type_lint_only_covers_lints():
	info = IgnoreInfo(line_codes={2: {ALL_LINTS}})
	assert info.is_ignored("unhandled_exception_call", 2)
	assert not info.is_ignored("undefined_identifier", 2, is_lint=False)


def test_filter_ignored_keeps_uncoded_diagnostics():
	info = IgnoreInfo(file_codes={"undefined_identifier"})
	diags = [
		Diagnostic(message="a", code="undefined_identifier", phase="resolve", span=Span(line=1)),
		Diagnostic(message="b", code=None, phase="resolve", span=Span(line=1)),
	]
	assert [d.message for d in filter_ignored(diags, info)] == ["b"]


_SOURCE = THROWABLE_IMPORT + """
class MyException implements Exception {}

@Throws([MyException])
void dangerous() {}

void f() {
  dangerous(); // ignore: unhandled_exception_call
  // ignore: unhandled_exception_call
  dangerous();
  dangerous();
}
"""


def test_line_ignores_suppress_findings():
	out = findings(_SOURCE)
	assert len(out) == 1
	assert out[0].span.line == 12


def test_file_ignore_suppresses_all_findings_of_a_code():
	assert findings("// ignore_for_file: unhandled_exception_call\n" + _SOURCE) == []
	assert findings("// ignore_for_file: type=lint\n" + _SOURCE) == []


def test_ignores_apply_to_resolve_warnings():
	result = lint("""
void f() {
  // ignore: undefined_identifier
  nowhere();
  elsewhere();
}
""")
	assert [d.message for d in result.diagnostics] == ["Undefined name 'elsewhere'."]


def test_directive_in_string_literal_does_not_suppress_findings():
	out = findings(THROWABLE_IMPORT + """
class MyException implements Exception {}

void f() {
  print("// ignore_for_file: type=lint");
  throw MyException();
}
""")
	assert [f.code for f in out] == ["unhandled_throw_in_body"]
