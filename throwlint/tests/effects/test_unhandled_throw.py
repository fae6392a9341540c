# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Throw and rethrow sites: `unhandled_throw_in_body`.

Spans are asserted exactly: a throw finding covers the throw expression
without its `;`, a rethrow finding covers the `rethrow` keyword.
"""

from throwlint.effects import UNHANDLED_THROW_IN_BODY
from throwlint.test_support import THROWABLE_IMPORT, findings


def _span(result, src: str, text: str) -> None:
	assert result.span.offset == src.index(text)
	assert result.span.length == len(text)


def test_throw_unhandled_reports_the_throw_expression():
	"""A bare throw of an Exception subtype outside any handler is one finding."""
	src = """
class MyException implements Exception {}

void f() {
  throw MyException();
}
"""
	out = findings(src)
	assert len(out) == 1
	assert out[0].code == UNHANDLED_THROW_IN_BODY
	assert out[0].message == "Unhandled throw of 'MyException'. Catch it or declare it with @Throws."
	_span(out[0], src, "throw MyException()")


def test_throw_declared_in_annotation():
	src = THROWABLE_IMPORT + """
class MyException implements Exception {}

@Throws([MyException])
void f() {
  throw MyException();
}
"""
	assert findings(src) == []


def test_throw_handled_by_typed_clause():
	src = """
class MyException implements Exception {}

void f() {
  try {
    throw MyException();
  } on MyException catch (_) {}
}
"""
	assert findings(src) == []


def test_throw_handled_by_catch_all():
	src = """
class MyException implements Exception {}

void f() {
  try {
    throw MyException();
  } catch (_) {}
}
"""
	assert findings(src) == []


def test_throw_of_subtype_declared_with_supertype():
	"""Declaration coverage is subtype-closed."""
	src = THROWABLE_IMPORT + """
class MyException implements Exception {}

@Throws([Exception])
void f() {
  throw MyException();
}
"""
	assert findings(src) == []


def test_rethrow_is_never_handled_by_its_own_clause():
	src = """
class MyException implements Exception {}

void f() {
  try {
    throw MyException();
  } on MyException catch (_) {
    rethrow;
  }
}
"""
	out = findings(src)
	assert [f.message for f in out] == ["Unhandled rethrow of 'MyException'. Declare it with @Throws."]
	_span(out[0], src, "rethrow")


def test_rethrow_handled_by_outer_try():
	src = """
class MyException implements Exception {}

void f() {
  try {
    try {
      throw MyException();
    } on MyException catch (_) {
      rethrow;
    }
  } on Exception catch (_) {}
}
"""
	assert findings(src) == []


def test_rethrow_from_untyped_clause_is_object():
	"""An untyped clause rethrows `Object`, covered only by Object-level declarations."""
	src = THROWABLE_IMPORT + """
class MyException implements Exception {}

@Throws([Exception])
void f() {
  try {
    throw MyException();
  } catch (e) {
    rethrow;
  }
}

@Throws([Object])
void g() {
  try {
    throw MyException();
  } catch (e) {
    rethrow;
  }
}
"""
	out = findings(src)
	assert [f.effect_name for f in out] == ["Object"]
	assert out[0].span.offset == src.index("rethrow")


def test_multiple_throws_some_unhandled():
	"""Exception and Error roots are both effect-relevant; each throw reports separately."""
	src = """
class MyException implements Exception {}

class MyError extends Error {}

void f() {
  throw MyException();
  throw MyError();
}
"""
	out = findings(src)
	assert [f.effect_name for f in out] == ["MyException", "MyError"]
	_span(out[0], src, "throw MyException()")
	_span(out[1], src, "throw MyError()")


def test_throw_of_non_exception_value_is_ignored():
	src = """
class Plain {}

void f() {
  throw Plain();
  throw 'oops';
  throw 42;
}
"""
	assert findings(src) == []


def test_clause_for_unrelated_type_does_not_handle():
	src = """
class MyException implements Exception {}
class OtherException implements Exception {}

void f() {
  try {
    throw MyException();
  } on OtherException catch (_) {}
}
"""
	assert [f.effect_name for f in findings(src)] == ["MyException"]


def test_second_clause_matches_in_order():
	src = """
class MyException implements Exception {}
class OtherException implements Exception {}

void f() {
  try {
    throw MyException();
  } on OtherException catch (_) {
  } on MyException {
  }
}
"""
	assert findings(src) == []


def test_throw_inside_catch_body_is_not_protected_by_that_try():
	src = """
class MyException implements Exception {}

void f() {
  try {
    print('x');
  } catch (_) {
    throw MyException();
  }
}
"""
	assert len(findings(src)) == 1


def test_throw_inside_finally_is_not_protected():
	src = """
class MyException implements Exception {}

void f() {
  try {
    print('x');
  } catch (_) {
  } finally {
    throw MyException();
  }
}
"""
	assert len(findings(src)) == 1


def test_nested_try_outer_handler_catches():
	"""Every enclosing try up to the declaration boundary is consulted."""
	src = """
class MyException implements Exception {}
class OtherException implements Exception {}

void f() {
  try {
    if (true) {
      try {
        throw MyException();
      } on OtherException catch (_) {}
    }
  } on MyException catch (_) {}
}
"""
	assert findings(src) == []


def test_top_level_initializer_has_no_boundary():
	src = """
class MyException implements Exception {}

final value = throw MyException();
"""
	assert len(findings(src)) == 1
