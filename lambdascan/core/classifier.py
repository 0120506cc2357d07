"""Classification of contract (functional interface) types."""

from typing import Iterable, Iterator, List, Optional, Tuple
import logging

from ..performance.parallel import ParallelExecutor
from .types import Operation, TypeMetadataProvider, TypeRecord

logger = logging.getLogger(__name__)


def is_abstract_candidate(operation: Operation) -> bool:
    """Operations that count towards the single-abstract-method rule."""
    return not (
        operation.is_synthetic
        or operation.has_generated_name
        or operation.is_default
        or operation.is_static
    )


def is_contract_type(record: TypeRecord) -> bool:
    """Determine whether a type is a contract (functional interface) type.

    A contract type is an interface with exactly one declared operation left
    once synthetic, default and static operations are ignored; instances of
    such a type can be written as lambda expressions.
    """
    if not record.is_interface:
        return False

    remaining = sum(1 for op in record.operations if is_abstract_candidate(op))
    return remaining == 1


def classify(provider: TypeMetadataProvider, type_name: str) -> bool:
    """Resolve and classify a single type; unresolvable types are not contract types."""
    record = provider.resolve(type_name)
    if record is None:
        logger.warning(f"Class not found: {type_name}")
        return False
    return record.is_contract_type


class ContractTypeSet:
    """Sorted, immutable set of contract type names."""

    def __init__(self, names: Iterable[str] = ()):
        self._names: Tuple[str, ...] = tuple(sorted(set(names)))
        self._lookup = frozenset(self._names)

    def __contains__(self, name: object) -> bool:
        return name in self._lookup

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ContractTypeSet):
            return self._names == other._names
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._names)

    def __repr__(self) -> str:
        return f"ContractTypeSet({list(self._names)!r})"

    @property
    def names(self) -> Tuple[str, ...]:
        return self._names


def build_contract_types(
    provider: TypeMetadataProvider,
    candidates: Iterable[str],
    executor: Optional[ParallelExecutor] = None
) -> ContractTypeSet:
    """Classify every candidate type and collect the contract types.

    Args:
        provider: Type metadata provider
        candidates: Candidate type names
        executor: Optional executor for the classification fan-out

    Returns:
        ContractTypeSet of the qualifying names
    """
    candidates: List[str] = list(candidates)

    def qualifies(name: str) -> bool:
        return classify(provider, name)

    if executor is not None:
        found = executor.filter(qualifies, candidates)
    else:
        found = [name for name in candidates if qualifies(name)]

    return ContractTypeSet(found)
