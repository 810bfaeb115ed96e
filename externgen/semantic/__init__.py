"""Semantic model adapters consumed by the declaration walker."""

from __future__ import annotations

from .base import SemanticModel
from .tree_sitter import TREE_SITTER_AVAILABLE, TreeSitterSemanticModel

__all__ = [
    "SemanticModel",
    "TREE_SITTER_AVAILABLE",
    "TreeSitterSemanticModel",
]
