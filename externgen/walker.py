"""Depth-first walker that assigns qualified names to reachable declarations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Set, Tuple

from .logging import get_logger
from .models import Accessibility, Declaration, DeclarationKind, VisitState
from .semantic.base import SemanticModel

Emit = Callable[[str], None]


@dataclass
class WalkStats:
    """Counters collected over one walk."""

    expanded: int = 0
    emitted: int = 0
    reentries: int = 0
    suppressed: int = 0


class DeclarationWalker:
    """Visits every declaration reachable from the model roots.

    The walk is iterative over an explicit LIFO stack. Each declaration has its
    children enumerated at most once; reaching an already visited declaration
    again emits it under the new address instead of expanding it twice, so a
    shared type is protected at every path that leads to it.

    Stack frames carry ``(node, name)`` rather than reading the name back from
    scratch state. A node pushed from ``n`` and ``n.q`` therefore prints as
    ``n.q.x`` and ``n.x`` (not ``n.q.x`` twice), and a self-typed property
    stops at ``root.parent.parent``. Tests pin both outputs.

    Scratch state lives in a side table owned by the walker, never on the
    declarations themselves, so several walks may share one model.
    """

    def __init__(self, model: SemanticModel) -> None:
        self.model = model
        self.logger = get_logger("walker")
        self.stats = WalkStats()
        self._state: Dict[Declaration, VisitState] = {}

    def walk(self, emit: Emit) -> WalkStats:
        """Run the traversal, calling ``emit`` once per emitted qualified name."""
        self.stats = WalkStats()
        self._state = {}

        stack: List[Tuple[Declaration, str]] = []
        for root in self.model.roots():
            name = self.model.own_name(root)
            self._scratch(root).qualified_name = name
            stack.append((root, name))

        while stack:
            node, name = stack.pop()
            state = self._scratch(node)
            if state.visited:
                # Pushed from two edges before its first expansion.
                self.stats.reentries += 1
                self._emit(node, name, emit)
                continue

            children = self.discover_children(node)
            self.stats.expanded += 1
            if not children:
                self._emit(node, name, emit)
            else:
                for child in children:
                    child_name = f"{name}.{self.model.own_name(child)}"
                    child_state = self._scratch(child)
                    child_state.qualified_name = child_name
                    if not child_state.visited:
                        stack.append((child, child_name))
                    else:
                        self.stats.reentries += 1
                        self._emit(child, child_name, emit)
            state.visited = True

        self.logger.debug(
            "Walk finished: %d expanded, %d emitted, %d re-entries, %d suppressed",
            self.stats.expanded,
            self.stats.emitted,
            self.stats.reentries,
            self.stats.suppressed,
        )
        return self.stats

    def discover_children(self, node: Declaration) -> List[Declaration]:
        """Union exports, members and public typed properties, in that order."""
        children: List[Declaration] = []
        seen: Set[Declaration] = set()

        def _add(candidate: Declaration) -> None:
            if candidate not in seen:
                seen.add(candidate)
                children.append(candidate)

        for child in self.model.exports_of(node):
            _add(child)
        for child in self.model.members_of(node):
            _add(child)

        if node.kind is DeclarationKind.VALUE:
            type_ref = self.model.declared_type_of(node)
            if type_ref is not None and self.model.is_structured_type(type_ref):
                for prop in self.model.properties_of(type_ref):
                    if prop.accessibility is Accessibility.PUBLIC:
                        _add(prop)
        return children

    def qualified_name(self, node: Declaration) -> Optional[str]:
        """Return the last qualified name assigned to ``node`` during the walk."""
        state = self._state.get(node)
        return state.qualified_name if state is not None else None

    def _scratch(self, node: Declaration) -> VisitState:
        state = self._state.get(node)
        if state is None:
            state = VisitState()
            self._state[node] = state
        return state

    def _emit(self, node: Declaration, name: str, emit: Emit) -> None:
        if self.model.is_prototype_artifact(node):
            self.stats.suppressed += 1
            return
        self.stats.emitted += 1
        emit(name)


__all__ = ["DeclarationWalker", "WalkStats"]
