"""Shared type definitions for the library surface model.

Provides the records produced by type metadata providers and the provider
protocol consumed by the classifier and scanner.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import cached_property
from typing import Dict, Iterable, List, Optional, Protocol, Tuple, runtime_checkable

from .signatures import MethodSignature

# Compiler generated members (lambda bodies, accessors) carry '$' in their names
GENERATED_NAME_MARKER = "$"


# =============================================================================
# Core Data Structures
# =============================================================================

@dataclass(frozen=True)
class Operation:
    """A method declared directly by a type.

    Attributes:
        name: Method name
        parameters: Parameter types in declaration order (reflection naming)
        return_type: Declared return type (reflection naming, ``void`` allowed)
        is_static: Declared static
        is_default: Interface method with a body (neither abstract nor static)
        is_synthetic: Compiler generated (synthetic or bridge)
        is_abstract: Declared abstract
        is_public: Declared public
    """
    name: str
    parameters: Tuple[str, ...] = ()
    return_type: str = "void"
    is_static: bool = False
    is_default: bool = False
    is_synthetic: bool = False
    is_abstract: bool = False
    is_public: bool = True

    @property
    def signature(self) -> MethodSignature:
        return MethodSignature.from_operation(self)

    @property
    def has_generated_name(self) -> bool:
        return GENERATED_NAME_MARKER in self.name


@dataclass(frozen=True)
class TypeRecord:
    """Metadata for one resolved type of the candidate surface."""
    name: str
    is_interface: bool = False
    is_public: bool = True
    operations: Tuple[Operation, ...] = field(default_factory=tuple)

    @cached_property
    def is_contract_type(self) -> bool:
        """Whether the type is a single-abstract-method interface (memoized)."""
        from .classifier import is_contract_type
        return is_contract_type(self)


# =============================================================================
# Type Aliases
# =============================================================================

QualifiedName = str
SignatureMap = Dict[QualifiedName, List[MethodSignature]]


# =============================================================================
# Protocol Definitions
# =============================================================================

@runtime_checkable
class TypeMetadataProvider(Protocol):
    """Protocol for anything that can describe a type by its qualified name.

    ``resolve`` returns ``None`` when the type cannot be found or read; it must
    not raise for a missing or malformed type.
    """

    def resolve(self, name: QualifiedName) -> Optional[TypeRecord]:
        """Return the type record for ``name`` or None when unresolvable."""
        ...

    def type_names(self) -> Iterable[QualifiedName]:
        """Every type name the provider knows about."""
        ...
