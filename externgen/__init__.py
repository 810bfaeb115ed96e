"""Extract the stable qualified names declared by TypeScript declaration files."""

from __future__ import annotations

from .models import Accessibility, Declaration, DeclarationKind, SymbolFlags, TypeRef
from .runner import ExternRunner, RunResult, derive_output_path
from .semantic import SemanticModel, TreeSitterSemanticModel
from .sink import NameSink
from .walker import DeclarationWalker, WalkStats

__version__ = "0.1.0"

__all__ = [
    "Accessibility",
    "Declaration",
    "DeclarationKind",
    "DeclarationWalker",
    "ExternRunner",
    "NameSink",
    "RunResult",
    "SemanticModel",
    "SymbolFlags",
    "TreeSitterSemanticModel",
    "TypeRef",
    "WalkStats",
    "derive_output_path",
]
