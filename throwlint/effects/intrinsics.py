# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Intrinsic effect table.

Well-known standard operations whose effects are not expressed through
`@Throws` metadata. The table maps `(library uri, qualified member name)` to
the names of the effect types the member can produce; names are resolved to
types by the registry, from the member's own library.

Tables are immutable values. The bundled default is built once per process;
callers can load another one from JSON and overlay it with `merged`.

JSON shape:

  {
    "version": "1",
    "libraries": {
      "dart:core": {"int.parse": ["FormatException"]}
    }
  }
"""

from __future__ import annotations

import json
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple, Union

DEFAULT_VERSION = "1"


class IntrinsicTableError(ValueError):
	"""Raised when an intrinsic table file is malformed."""


_Entries = Mapping[str, Mapping[str, Tuple[str, ...]]]


class IntrinsicTable:
	"""Immutable `(library, member) -> effect type names` lookup."""

	__slots__ = ("_version", "_libraries")

	def __init__(self, libraries: Mapping[str, Mapping[str, Any]], version: str = DEFAULT_VERSION) -> None:
		frozen = {}
		for lib, members in libraries.items():
			frozen[lib] = MappingProxyType({member: tuple(names) for member, names in members.items()})
		self._libraries: _Entries = MappingProxyType(frozen)
		self._version = version

	@property
	def version(self) -> str:
		return self._version

	def lookup(self, library: str, member: str) -> Tuple[str, ...]:
		"""Effect type names for `member` of `library`; empty when unknown."""
		members = self._libraries.get(library)
		if members is None:
			return ()
		return members.get(member, ())

	def libraries(self) -> Tuple[str, ...]:
		return tuple(self._libraries)

	def entries(self) -> _Entries:
		return self._libraries

	def merged(self, other: "IntrinsicTable") -> "IntrinsicTable":
		"""New table with `other`'s entries overriding ours member by member."""
		combined = {lib: dict(members) for lib, members in self._libraries.items()}
		for lib, members in other.entries().items():
			combined.setdefault(lib, {}).update(members)
		return IntrinsicTable(combined, version=other.version)

	@classmethod
	def empty(cls) -> "IntrinsicTable":
		return cls({})

	@classmethod
	def from_mapping(cls, data: Any, *, source: str = "<mapping>") -> "IntrinsicTable":
		"""Validate a decoded JSON document and build a table from it."""
		if not isinstance(data, dict):
			raise IntrinsicTableError(f"{source}: top-level value must be an object")
		version = data.get("version", DEFAULT_VERSION)
		if not isinstance(version, str):
			raise IntrinsicTableError(f"{source}: 'version' must be a string")
		libraries = data.get("libraries")
		if not isinstance(libraries, dict):
			raise IntrinsicTableError(f"{source}: 'libraries' must be an object")
		for lib, members in libraries.items():
			if not isinstance(members, dict):
				raise IntrinsicTableError(f"{source}: entries of library '{lib}' must be an object")
			for member, names in members.items():
				if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
					raise IntrinsicTableError(f"{source}: '{lib}' member '{member}' must map to a list of type names")
		return cls(libraries, version=version)

	@classmethod
	def from_json(cls, path: Union[str, Path]) -> "IntrinsicTable":
		path = Path(path)
		try:
			data = json.loads(path.read_text(encoding="utf-8"))
		except OSError as err:
			raise IntrinsicTableError(f"{path}: cannot read intrinsic table: {err}") from err
		except json.JSONDecodeError as err:
			raise IntrinsicTableError(f"{path}: invalid JSON: {err}") from err
		return cls.from_mapping(data, source=str(path))

	def __eq__(self, other: object) -> bool:
		if not isinstance(other, IntrinsicTable):
			return NotImplemented
		return self._version == other._version and _plain(self._libraries) == _plain(other._libraries)

	def __hash__(self) -> int:
		return hash((self._version, tuple(sorted(self._libraries))))

	def __repr__(self) -> str:
		count = sum(len(m) for m in self._libraries.values())
		return f"IntrinsicTable(version={self._version!r}, members={count})"


def _plain(entries: _Entries) -> dict:
	return {lib: dict(members) for lib, members in entries.items()}


_SDK_THROWERS = {
	"dart:core": {
		"Iterable.first": ["StateError"],
		"Iterable.last": ["StateError"],
		"Iterable.single": ["StateError"],
		"Iterable.reduce": ["StateError"],
		"int.parse": ["FormatException"],
		"double.parse": ["FormatException"],
		"Uri.parse": ["FormatException"],
	},
	"dart:convert": {
		"jsonDecode": ["FormatException"],
		"JsonCodec.decode": ["FormatException"],
	},
}

_default: Optional[IntrinsicTable] = None


def default_intrinsics() -> IntrinsicTable:
	"""The bundled table of known SDK throwers (built once per process)."""
	global _default
	if _default is None:
		_default = IntrinsicTable(_SDK_THROWERS, version=DEFAULT_VERSION)
	return _default


__all__ = ["IntrinsicTable", "IntrinsicTableError", "default_intrinsics", "DEFAULT_VERSION"]
