"""
throwlint.hir: syntax tree of the analyzed language.

Modules:
  - hir_nodes: H-prefixed node dataclasses
  - hir_utils: traversal, NodeId assignment, parent links
"""

__all__ = ["hir_nodes", "hir_utils"]
