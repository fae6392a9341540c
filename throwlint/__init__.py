# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
throwlint: checked-exception analysis for `@Throws` annotated code.

Pipeline placement:
  source → parser (HIR) → resolver (ResolvedProgram) → effects (findings) → driver/cli

Most callers only need `lint_sources` / `lint_paths`; the engine itself lives
in `throwlint.effects` and can run over any `ProgramView`.
"""

from .driver import LintConfig, LintResult, lint_paths, lint_sources

__version__ = "0.1.0"

__all__ = ["LintConfig", "LintResult", "lint_paths", "lint_sources", "__version__"]
