"""
throwlint.core: shared primitives used by the host front-end and the effect engine.

Modules:
  - span: Span source locations
  - diagnostics: Diagnostic records + report helper
  - types_core: TypeId/TypeTable (nominal subtype relation)
  - types_protocol: TypeSystem / ProgramView protocols consumed by the engine
  - elements: resolved declaration model
"""

__all__ = [
	"span",
	"diagnostics",
	"types_core",
	"types_protocol",
	"elements",
]
