# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Command line interface.

  python -m throwlint [--json] [--disable CODE] [--intrinsics FILE]
                      [--no-sdk-intrinsics] [-v] FILE...

Exit codes: 0 clean, 1 findings or error diagnostics, 2 usage/config errors.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from throwlint.core.diagnostics import Diagnostic
from throwlint.driver import LintConfig, lint_paths
from throwlint.effects import LINT_CODES, IntrinsicTable, IntrinsicTableError


def _diag_to_json(diag: Diagnostic) -> dict:
	"""Render a Diagnostic to a structured JSON-friendly dict."""
	return {
		"phase": diag.phase,
		"code": diag.code,
		"message": diag.message,
		"severity": diag.severity,
		"file": diag.span.file,
		"line": diag.span.line,
		"column": diag.span.column,
		"notes": list(diag.notes),
	}


def _format(diag: Diagnostic) -> str:
	line = diag.span.line if diag.span.line is not None else "?"
	col = diag.span.column if diag.span.column is not None else "?"
	code = f" [{diag.code}]" if diag.code else ""
	return f"{diag.span.file or '?'}:{line}:{col}: {diag.severity}: {diag.message}{code}"


def _build_parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(prog="throwlint", description="Checked-exception linter for @Throws annotated code")
	parser.add_argument("source", type=Path, nargs="+", help="Source file(s) to lint")
	parser.add_argument("--json", action="store_true", help="Emit diagnostics as JSON")
	parser.add_argument(
		"--disable",
		action="append",
		default=[],
		choices=LINT_CODES,
		metavar="CODE",
		help=f"Disable a lint code (repeatable; one of: {', '.join(LINT_CODES)})",
	)
	parser.add_argument("--intrinsics", type=Path, help="JSON intrinsic table overlaid on the bundled one")
	parser.add_argument(
		"--no-sdk-intrinsics",
		action="store_true",
		help="Do not use the bundled table of known SDK throwers",
	)
	parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging to stderr")
	return parser


def main(argv: list[str] | None = None) -> int:
	args = _build_parser().parse_args(argv)
	if args.verbose:
		logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

	try:
		extra = IntrinsicTable.from_json(args.intrinsics) if args.intrinsics is not None else None
	except IntrinsicTableError as err:
		print(f"throwlint: error: {err}", file=sys.stderr)
		return 2
	config = LintConfig(
		disabled=frozenset(args.disable),
		intrinsics=extra,
		use_sdk_intrinsics=not args.no_sdk_intrinsics,
	)
	try:
		result = lint_paths(args.source, config)
	except OSError as err:
		print(f"throwlint: error: {err}", file=sys.stderr)
		return 2

	exit_code = 1 if result.has_errors or result.has_findings else 0
	if args.json:
		payload = {
			"exit_code": exit_code,
			"diagnostics": [_diag_to_json(d) for d in result.diagnostics],
		}
		print(json.dumps(payload))
	else:
		for diag in result.diagnostics:
			print(_format(diag), file=sys.stderr)
	return exit_code


__all__ = ["main"]
