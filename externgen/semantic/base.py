"""Base classes for semantic model adapters."""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..models import Declaration, TypeRef


class SemanticModel(ABC):
    """Read-only view over a bound declaration surface.

    The walker only ever talks to this contract; it never mutates the
    declarations a model hands out.
    """

    @abstractmethod
    def roots(self) -> List[Declaration]:
        """Return the top-level declarations in declaration order."""

    @abstractmethod
    def own_name(self, node: Declaration) -> str:
        """Return the node's name, or its alias target's name for ``export =``."""

    @abstractmethod
    def exports_of(self, node: Declaration) -> List[Declaration]:
        """Return the direct exports of a module-like node."""

    @abstractmethod
    def members_of(self, node: Declaration) -> List[Declaration]:
        """Return the direct structural members of a node, unfiltered."""

    @abstractmethod
    def declared_type_of(self, node: Declaration) -> Optional[TypeRef]:
        """Return the declared type of a value, array types unwrapped one level."""

    @abstractmethod
    def is_structured_type(self, type_ref: TypeRef) -> bool:
        """Return True when the type denotes a class or interface."""

    @abstractmethod
    def properties_of(self, type_ref: TypeRef) -> List[Declaration]:
        """Return every member of a structured type, whatever its accessibility."""

    def is_prototype_artifact(self, node: Declaration) -> bool:
        return node.is_prototype_artifact
