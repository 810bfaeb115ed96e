"""Tree-sitter powered semantic model for TypeScript declaration files."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set, Union

from .base import SemanticModel
from ..errors import SemanticModelError
from ..logging import get_logger
from ..models import Accessibility, Declaration, SymbolFlags, TypeRef

try:  # pragma: no cover - optional dependency
    from tree_sitter import Parser
    from tree_sitter_language_pack import get_language

    TREE_SITTER_AVAILABLE = True
except ModuleNotFoundError:  # pragma: no cover - optional dependency
    Parser = None  # type: ignore[assignment]
    get_language = None  # type: ignore[assignment]
    TREE_SITTER_AVAILABLE = False


_LANGUAGE_KEY = "typescript"
_PARSERS: Dict[str, "Parser"] = {}

_CLASS_NODES = {"class_declaration", "abstract_class_declaration", "class"}
_MODULE_NODES = {"module", "internal_module"}
_VARIABLE_NODES = {"variable_declaration", "lexical_declaration"}
_FUNCTION_NODES = {"function_signature", "function_declaration", "generator_function_declaration"}
_FIELD_NODES = {"public_field_definition", "property_signature", "field_definition"}
_METHOD_NODES = {"method_signature", "method_definition", "abstract_method_signature"}
_HERITAGE_CLAUSES = {"extends_clause", "extends_type_clause"}
_REFERENCE_NODES = {
    "identifier",
    "type_identifier",
    "nested_identifier",
    "nested_type_identifier",
    "member_expression",
}


@dataclass
class _Scope:
    """Binding target for one statement block."""

    owner: Optional[Declaration]
    locals: Dict[str, Declaration]
    exports: Optional[Dict[str, Declaration]]
    ambient: bool


class TreeSitterSemanticModel(SemanticModel):
    """Binds a ``.d.ts`` source into declarations using tree-sitter."""

    def __init__(
        self, source: Union[str, bytes], *, name: str = "<source>", ambient: bool = True
    ) -> None:
        self.name = name
        self.logger = get_logger("semantic")
        self._source = source.encode("utf-8") if isinstance(source, str) else source
        self._roots: Dict[str, Declaration] = {}
        self._locals: Dict[Declaration, Dict[str, Declaration]] = {}

        tree = _get_parser().parse(self._source)
        root = tree.root_node
        if root.has_error:
            line = _first_error_line(root)
            raise SemanticModelError(f"{name}:{line}: syntax error in declaration file")

        top = _Scope(owner=None, locals=self._roots, exports=None, ambient=ambient)
        self._bind_block(root, top)
        self.logger.debug("Bound %d root declarations from %s", len(self._roots), name)

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "TreeSitterSemanticModel":
        file_path = Path(path)
        try:
            source = file_path.read_bytes()
        except OSError as exc:
            raise SemanticModelError(f"Cannot read {file_path}: {exc.strerror or exc}") from exc
        return cls(source, name=str(file_path), ambient=file_path.name.endswith(".d.ts"))

    @classmethod
    def from_source(cls, text: str, *, name: str = "<source>") -> "TreeSitterSemanticModel":
        return cls(text, name=name)

    # SemanticModel contract

    def roots(self) -> List[Declaration]:
        return list(self._roots.values())

    def own_name(self, node: Declaration) -> str:
        return node.alias_target or node.name

    def exports_of(self, node: Declaration) -> List[Declaration]:
        return list(node.exports.values())

    def members_of(self, node: Declaration) -> List[Declaration]:
        return list(node.members.values())

    def declared_type_of(self, node: Declaration) -> Optional[TypeRef]:
        type_ref = node.type_ref
        if type_ref is not None and type_ref.is_array:
            return type_ref.element
        return type_ref

    def is_structured_type(self, type_ref: TypeRef) -> bool:
        target = self.resolve(type_ref)
        return target is not None and target.is_structured

    def properties_of(self, type_ref: TypeRef) -> List[Declaration]:
        target = self.resolve(type_ref)
        if target is None or not target.is_structured:
            return []
        properties: Dict[str, Declaration] = {}
        seen: Set[Declaration] = set()
        pending = [target]
        while pending:
            current = pending.pop(0)
            if current in seen:
                continue
            seen.add(current)
            for name, member in current.members.items():
                properties.setdefault(name, member)
            for base_ref in current.heritage:
                base = self.resolve(base_ref)
                if base is not None and base.is_structured:
                    pending.append(base)
        return list(properties.values())

    # Resolution

    def resolve(self, type_ref: Optional[TypeRef]) -> Optional[Declaration]:
        """Return the declaration a reference type names, if it is bound here."""
        if type_ref is None or type_ref.kind != "reference" or not type_ref.name:
            return None
        return self._resolve_name(type_ref.name, type_ref.scope, set())

    def _resolve_name(
        self, dotted: str, scope: Optional[Declaration], seen: Set[int]
    ) -> Optional[Declaration]:
        head, *rest = dotted.split(".")
        current = self._follow(self._lookup(head, scope), seen)
        for segment in rest:
            if current is None:
                return None
            current = self._follow(current.exports.get(segment), seen)
        return current

    def _follow(self, declaration: Optional[Declaration], seen: Set[int]) -> Optional[Declaration]:
        """Replace an ``import X = A.B`` alias with the declaration it names."""
        if declaration is None or declaration.import_target is None:
            return declaration
        if id(declaration) in seen:
            return None
        seen.add(id(declaration))
        target = declaration.import_target
        return self._resolve_name(target.name or "", target.scope, seen)

    def _lookup(self, name: str, scope: Optional[Declaration]) -> Optional[Declaration]:
        while scope is not None:
            table = self._locals.get(scope)
            if table is not None and name in table:
                return table[name]
            scope = scope.parent
        return self._roots.get(name)

    # Binding

    def _bind_block(self, node, scope: _Scope) -> None:  # type: ignore[no-untyped-def]
        for child in node.named_children:
            self._bind_statement(child, scope, exported=scope.ambient)

    def _bind_statement(self, node, scope: _Scope, *, exported: bool) -> None:  # type: ignore[no-untyped-def]
        kind = node.type
        if kind == "ambient_declaration":
            self._bind_ambient(node, scope, exported=exported)
        elif kind == "export_statement":
            self._bind_export(node, scope)
        elif kind == "expression_statement":
            for child in node.named_children:
                if child.type in _MODULE_NODES:
                    self._bind_module(child, scope, exported=exported, ambient=scope.ambient)
        elif kind in _MODULE_NODES:
            self._bind_module(node, scope, exported=exported, ambient=scope.ambient)
        elif kind in _VARIABLE_NODES:
            self._bind_variables(node, scope, exported=exported)
        elif kind in _FUNCTION_NODES:
            name = self._field_text(node, "name")
            if name:
                self._declare(scope, name, SymbolFlags.FUNCTION, exported=exported)
        elif kind in _CLASS_NODES:
            self._bind_class(node, scope, exported=exported)
        elif kind == "interface_declaration":
            self._bind_interface(node, scope, exported=exported)
        elif kind == "enum_declaration":
            self._bind_enum(node, scope, exported=exported)
        elif kind == "type_alias_declaration":
            name = self._field_text(node, "name")
            if name:
                self._declare(scope, name, SymbolFlags.TYPE_ALIAS, exported=exported)
        elif kind == "import_alias":
            self._bind_import_alias(node, scope, exported=exported)

    def _bind_ambient(self, node, scope: _Scope, *, exported: bool) -> None:  # type: ignore[no-untyped-def]
        if any(child.type == "global" for child in node.children):
            for child in node.named_children:
                if child.type == "statement_block":
                    self._bind_block(child, self._global_scope())
            return
        for child in node.named_children:
            if child.type in _MODULE_NODES:
                self._bind_module(child, scope, exported=exported, ambient=True)
            else:
                self._bind_statement(child, scope, exported=exported)

    def _bind_export(self, node, scope: _Scope) -> None:  # type: ignore[no-untyped-def]
        if any(child.type == "=" for child in node.children):
            target = next(iter(node.named_children), None)
            if target is not None and scope.owner is not None:
                scope.owner.alias_target = self._text(target).strip()
                scope.owner.flags |= SymbolFlags.ALIAS
            elif target is not None:
                self.logger.debug("Ignoring file-level export = %s", self._text(target))
            return
        declaration = node.child_by_field_name("declaration")
        if declaration is not None:
            self._bind_statement(declaration, scope, exported=True)
            return
        for clause in node.named_children:
            if clause.type != "export_clause":
                continue
            for specifier in clause.named_children:
                name = self._field_text(specifier, "name")
                alias = self._field_text(specifier, "alias")
                existing = scope.locals.get(name) if name else None
                if existing is None or scope.exports is None:
                    continue
                if alias and alias != name:
                    renamed = Declaration(
                        name=alias,
                        flags=SymbolFlags.ALIAS,
                        import_target=TypeRef("reference", name=name, scope=scope.owner),
                        parent=scope.owner,
                    )
                    scope.exports.setdefault(alias, renamed)
                else:
                    scope.exports.setdefault(name, existing)

    def _bind_import_alias(self, node, scope: _Scope, *, exported: bool) -> None:  # type: ignore[no-untyped-def]
        # import Name = Target;  the grammar gives neither part a field name.
        parts = [child for child in node.named_children if child.type in _REFERENCE_NODES]
        if len(parts) < 2 or parts[0].type != "identifier":
            return
        declaration = self._declare(
            scope, self._text(parts[0]).strip(), SymbolFlags.ALIAS, exported=exported
        )
        declaration.import_target = TypeRef(
            "reference", name=_compact(self._text(parts[1])), scope=scope.owner
        )

    def _bind_module(self, node, scope: _Scope, *, exported: bool, ambient: bool) -> None:  # type: ignore[no-untyped-def]
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return
        if name_node.type == "string":
            # Quoted module names live in their own key space.
            name = _unquote(self._text(name_node))
            segments = [(name, f"\"{name}\"")]
        else:
            segments = [(part.strip(), part.strip()) for part in self._text(name_node).split(".")]

        current = scope
        for index, (segment, key) in enumerate(segments):
            declaration = self._declare(
                current,
                segment,
                SymbolFlags.MODULE,
                exported=exported if index == 0 else True,
                key=key,
            )
            current = self._module_scope(declaration, ambient=ambient)

        body = node.child_by_field_name("body")
        if body is not None:
            self._bind_block(body, current)

    def _module_scope(self, declaration: Declaration, *, ambient: bool) -> _Scope:
        table = self._locals.setdefault(declaration, {})
        return _Scope(owner=declaration, locals=table, exports=declaration.exports, ambient=ambient)

    def _bind_variables(self, node, scope: _Scope, *, exported: bool) -> None:  # type: ignore[no-untyped-def]
        for declarator in node.named_children:
            if declarator.type != "variable_declarator":
                continue
            name_node = declarator.child_by_field_name("name")
            if name_node is None or name_node.type != "identifier":
                continue
            declaration = self._declare(
                scope, self._text(name_node), SymbolFlags.VARIABLE, exported=exported
            )
            if declaration.type_ref is None:
                declaration.type_ref = self._annotation(declarator, scope.owner)

    def _bind_class(self, node, scope: _Scope, *, exported: bool) -> None:  # type: ignore[no-untyped-def]
        name = self._field_text(node, "name")
        if not name:
            return
        declaration = self._declare(scope, name, SymbolFlags.CLASS, exported=exported)
        if "prototype" not in declaration.exports:
            declaration.exports["prototype"] = Declaration(
                name="prototype", flags=SymbolFlags.PROTOTYPE, parent=declaration
            )
        for child in node.children:
            if child.type == "class_heritage":
                declaration.heritage.extend(self._heritage(child, scope.owner))
        body = node.child_by_field_name("body")
        if body is not None:
            self._bind_members(body, declaration, scope.owner)

    def _bind_interface(self, node, scope: _Scope, *, exported: bool) -> None:  # type: ignore[no-untyped-def]
        name = self._field_text(node, "name")
        if not name:
            return
        declaration = self._declare(scope, name, SymbolFlags.INTERFACE, exported=exported)
        declaration.heritage.extend(self._heritage(node, scope.owner))
        body = node.child_by_field_name("body")
        if body is not None:
            self._bind_members(body, declaration, scope.owner)

    def _bind_enum(self, node, scope: _Scope, *, exported: bool) -> None:  # type: ignore[no-untyped-def]
        name = self._field_text(node, "name")
        if not name:
            return
        declaration = self._declare(scope, name, SymbolFlags.ENUM, exported=exported)
        body = node.child_by_field_name("body")
        if body is None:
            return
        for child in body.named_children:
            if child.type == "enum_assignment":
                member_name = self._field_text(child, "name")
            elif child.type in {"property_identifier", "string"}:
                member_name = self._text(child)
            else:
                continue
            member_name = _unquote(member_name or "")
            if member_name and member_name not in declaration.exports:
                declaration.exports[member_name] = Declaration(
                    name=member_name, flags=SymbolFlags.ENUM_MEMBER, parent=declaration
                )

    def _bind_members(self, body, owner: Declaration, scope_owner: Optional[Declaration]) -> None:  # type: ignore[no-untyped-def]
        for child in body.named_children:
            if child.type in _FIELD_NODES:
                flags = SymbolFlags.PROPERTY
                type_ref = self._annotation(child, scope_owner)
            elif child.type in _METHOD_NODES:
                tokens = {token.type for token in child.children}
                if "get" in tokens or "set" in tokens:
                    flags = SymbolFlags.PROPERTY
                    type_ref = self._annotation(child, scope_owner, field_name="return_type")
                else:
                    flags = SymbolFlags.METHOD
                    type_ref = None
            else:
                continue

            name_node = child.child_by_field_name("name")
            if name_node is None or name_node.type == "computed_property_name":
                continue
            name = _unquote(self._text(name_node))
            if not name or name == "constructor":
                continue

            is_static = any(token.type == "static" for token in child.children)
            table = owner.exports if is_static else owner.members
            member = table.get(name)
            if member is None:
                member = Declaration(
                    name=name,
                    flags=flags,
                    accessibility=self._accessibility(child, name_node),
                    is_static=is_static,
                    parent=owner,
                )
                table[name] = member
            else:
                member.flags |= flags
            if member.type_ref is None:
                member.type_ref = type_ref

    def _declare(
        self,
        scope: _Scope,
        name: str,
        flags: SymbolFlags,
        *,
        exported: bool,
        key: Optional[str] = None,
    ) -> Declaration:
        key = key or name
        declaration = scope.locals.get(key)
        if declaration is None:
            declaration = Declaration(name=name, flags=flags, parent=scope.owner)
            scope.locals[key] = declaration
        else:
            declaration.flags |= flags
        if exported and scope.exports is not None:
            scope.exports.setdefault(key, declaration)
        return declaration

    def _global_scope(self) -> _Scope:
        return _Scope(owner=None, locals=self._roots, exports=None, ambient=True)

    # Syntax helpers

    def _accessibility(self, member, name_node) -> Accessibility:  # type: ignore[no-untyped-def]
        if name_node.type == "private_property_identifier":
            return Accessibility.PRIVATE
        for child in member.children:
            if child.type == "accessibility_modifier":
                text = self._text(child).strip()
                if text == "private":
                    return Accessibility.PRIVATE
                if text == "protected":
                    return Accessibility.PROTECTED
        return Accessibility.PUBLIC

    def _annotation(
        self, node, scope_owner: Optional[Declaration], *, field_name: str = "type"
    ) -> Optional[TypeRef]:  # type: ignore[no-untyped-def]
        annotation = node.child_by_field_name(field_name)
        if annotation is None:
            return None
        if annotation.type == "type_annotation":
            inner = next(iter(annotation.named_children), None)
            if inner is None:
                return None
            annotation = inner
        return self._type(annotation, scope_owner)

    def _type(self, node, scope_owner: Optional[Declaration]) -> TypeRef:  # type: ignore[no-untyped-def]
        kind = node.type
        if kind in {"type_identifier", "nested_type_identifier"}:
            return TypeRef("reference", name=_compact(self._text(node)), scope=scope_owner)
        if kind == "generic_type":
            name_node = node.child_by_field_name("name")
            if name_node is not None:
                return self._type(name_node, scope_owner)
        if kind == "array_type":
            element = next(iter(node.named_children), None)
            if element is not None:
                return TypeRef("array", element=self._type(element, scope_owner), scope=scope_owner)
        if kind in {"parenthesized_type", "readonly_type"}:
            inner = next(iter(node.named_children), None)
            if inner is not None:
                return self._type(inner, scope_owner)
        return TypeRef("other", scope=scope_owner)

    def _heritage(self, node, scope_owner: Optional[Declaration]) -> Iterable[TypeRef]:  # type: ignore[no-untyped-def]
        for clause in node.children:
            if clause.type not in _HERITAGE_CLAUSES:
                continue
            for child in clause.named_children:
                if child.type in _REFERENCE_NODES:
                    yield TypeRef("reference", name=_compact(self._text(child)), scope=scope_owner)
                elif child.type == "generic_type":
                    yield self._type(child, scope_owner)

    def _field_text(self, node, field_name: str) -> Optional[str]:  # type: ignore[no-untyped-def]
        child = node.child_by_field_name(field_name)
        return self._text(child) if child is not None else None

    def _text(self, node) -> str:  # type: ignore[no-untyped-def]
        return self._source[node.start_byte : node.end_byte].decode("utf-8", errors="ignore")


def _get_parser() -> "Parser":
    parser = _PARSERS.get(_LANGUAGE_KEY)
    if parser is not None:
        return parser
    if not TREE_SITTER_AVAILABLE:
        raise SemanticModelError(
            "tree-sitter is not installed; install tree-sitter and tree-sitter-language-pack"
        )
    language = get_language(_LANGUAGE_KEY)
    parser = Parser()
    if hasattr(parser, "set_language"):
        parser.set_language(language)
    else:
        parser.language = language
    _PARSERS[_LANGUAGE_KEY] = parser
    return parser


def _first_error_line(root) -> int:  # type: ignore[no-untyped-def]
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node.start_point[0] + 1
        stack.extend(reversed(node.children))
    return root.start_point[0] + 1


def _unquote(text: str) -> str:
    if len(text) >= 2 and text[0] == text[-1] and text[0] in {'"', "'", "`"}:
        return text[1:-1]
    return text


def _compact(text: str) -> str:
    return "".join(text.split())


__all__ = ["TreeSitterSemanticModel", "TREE_SITTER_AVAILABLE"]
