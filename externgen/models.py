"""Core data models shared across externgen components."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Dict, List, Optional


class SymbolFlags(enum.Flag):
    """What a declaration is. Merged declarations union their flags."""

    NONE = 0
    VARIABLE = 1 << 0
    PROPERTY = 1 << 1
    FUNCTION = 1 << 2
    METHOD = 1 << 3
    CLASS = 1 << 4
    INTERFACE = 1 << 5
    MODULE = 1 << 6
    ENUM = 1 << 7
    ENUM_MEMBER = 1 << 8
    TYPE_ALIAS = 1 << 9
    ALIAS = 1 << 10
    PROTOTYPE = 1 << 11

    VALUE = VARIABLE | PROPERTY
    TYPE = CLASS | INTERFACE | MODULE
    STRUCTURED = CLASS | INTERFACE


class DeclarationKind(enum.Enum):
    VALUE = "value"
    TYPE = "type"
    OTHER = "other"


class Accessibility(enum.Enum):
    PUBLIC = "public"
    PRIVATE = "private"
    PROTECTED = "protected"


@dataclass
class TypeRef:
    """Syntactic shape of a type annotation, resolved lazily by the model.

    ``kind`` is ``"reference"`` for named types (``name`` holds the dotted name
    without type arguments), ``"array"`` for ``T[]`` (``element`` holds ``T``)
    and ``"other"`` for everything else (primitives, unions, literals).
    """

    kind: str
    name: Optional[str] = None
    element: Optional["TypeRef"] = None
    scope: Optional["Declaration"] = field(default=None, repr=False)

    @property
    def is_array(self) -> bool:
        return self.kind == "array"


@dataclass(eq=False)
class Declaration:
    """A named entity in the semantic model.

    Equality and hashing are by identity: two discovery edges may lead to the
    same declaration and must be recognised as such.
    """

    name: str
    flags: SymbolFlags = SymbolFlags.NONE
    accessibility: Accessibility = Accessibility.PUBLIC
    is_static: bool = False
    alias_target: Optional[str] = None
    import_target: Optional[TypeRef] = None
    type_ref: Optional[TypeRef] = None
    heritage: List[TypeRef] = field(default_factory=list)
    exports: Dict[str, "Declaration"] = field(default_factory=dict)
    members: Dict[str, "Declaration"] = field(default_factory=dict)
    parent: Optional["Declaration"] = field(default=None, repr=False)

    @property
    def kind(self) -> DeclarationKind:
        if self.flags & SymbolFlags.VALUE:
            return DeclarationKind.VALUE
        if self.flags & SymbolFlags.TYPE:
            return DeclarationKind.TYPE
        return DeclarationKind.OTHER

    @property
    def is_prototype_artifact(self) -> bool:
        return bool(self.flags & SymbolFlags.PROTOTYPE)

    @property
    def is_structured(self) -> bool:
        return bool(self.flags & SymbolFlags.STRUCTURED)


@dataclass
class VisitState:
    """Per-walk scratch record for one declaration."""

    qualified_name: Optional[str] = None
    visited: bool = False


__all__ = [
    "Accessibility",
    "Declaration",
    "DeclarationKind",
    "SymbolFlags",
    "TypeRef",
    "VisitState",
]
