# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Bundled library sources the analyzed programs can import.

They are written in the analyzed language itself and go through the same
parser/resolver as user code. `dart:core` is imported implicitly by every
library.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict

CORE_URI = "dart:core"
CONVERT_URI = "dart:convert"
THROWABLE_URI = "package:throwable/throwable.dart"

SDK_FILES: Dict[str, str] = {
	CORE_URI: "core.dart",
	CONVERT_URI: "convert.dart",
	THROWABLE_URI: "throwable.dart",
}


def sdk_sources() -> Dict[str, str]:
	"""Map of library uri to source text for every bundled library."""
	here = Path(__file__)
	return {uri: here.with_name(fname).read_text(encoding="utf-8") for uri, fname in SDK_FILES.items()}


__all__ = ["CORE_URI", "CONVERT_URI", "THROWABLE_URI", "SDK_FILES", "sdk_sources"]
