"""Candidate surface scanner.

Finds the methods of each candidate type that accept a contract type as a
parameter (and so can be called with a lambda expression) and the methods
that return the designated source type.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional
import logging

from ..performance.parallel import ParallelExecutor
from .classifier import ContractTypeSet
from .signatures import ARRAY_MARKER, MethodSignature
from .types import Operation, SignatureMap, TypeMetadataProvider, TypeRecord

logger = logging.getLogger(__name__)

STREAM_TYPE = "java.util.stream.Stream"


@dataclass
class TypeScan:
    """Matches found in a single type."""
    type_name: str
    parameter_role: List[MethodSignature] = field(default_factory=list)
    return_role: List[MethodSignature] = field(default_factory=list)


@dataclass
class ScanResult:
    """Result mappings of one scan pass.

    Each type name is written at most once per mapping, and only with a
    non-empty list.
    """
    parameter_role: SignatureMap = field(default_factory=dict)
    return_role: SignatureMap = field(default_factory=dict)
    unresolved: List[str] = field(default_factory=list)

    def record(self, scan: TypeScan) -> None:
        """Store the matches of one type."""
        if scan.type_name in self.parameter_role or scan.type_name in self.return_role:
            raise ValueError(f"Type already recorded in this scan: {scan.type_name}")
        if scan.parameter_role:
            self.parameter_role[scan.type_name] = list(scan.parameter_role)
        if scan.return_role:
            self.return_role[scan.type_name] = list(scan.return_role)

    @property
    def parameter_method_count(self) -> int:
        return sum(len(methods) for methods in self.parameter_role.values())

    @property
    def return_method_count(self) -> int:
        return sum(len(methods) for methods in self.return_role.values())


class SurfaceScanner:
    """Scan candidate types for lambda-accepting and source-returning methods."""

    def __init__(
        self,
        provider: TypeMetadataProvider,
        contract_types: ContractTypeSet,
        source_type: str = STREAM_TYPE,
        public_only: bool = False,
        executor: Optional[ParallelExecutor] = None
    ):
        self.provider = provider
        self.contract_types = contract_types
        self.source_type = source_type
        self.public_only = public_only
        self.executor = executor

    def parameter_matcher(self, target: Optional[str] = None) -> Callable[[str], bool]:
        """Predicate for parameter types.

        Args:
            target: Single contract type to look for; None matches every
                contract type

        Returns:
            Function testing a parameter type name
        """
        if target is not None:
            def matches(type_name: str) -> bool:
                return type_name == target
        else:
            def matches(type_name: str) -> bool:
                return type_name in self.contract_types
        return matches

    def has_contract_parameter(
        self,
        signature: MethodSignature,
        target: Optional[str] = None
    ) -> bool:
        """Whether any non-array parameter of the signature is a matching contract type."""
        matches = self.parameter_matcher(target)
        return any(
            matches(p) for p in signature.parameters
            if not p.startswith(ARRAY_MARKER)
        )

    def returns_source(self, operation: Operation) -> bool:
        """Whether the operation's declared return type is exactly the source type."""
        return operation.return_type == self.source_type

    def _eligible_operations(self, record: TypeRecord) -> List[Operation]:
        return [
            op for op in record.operations
            if not op.has_generated_name and (op.is_public or not self.public_only)
        ]

    def scan_record(self, record: TypeRecord, target: Optional[str] = None) -> TypeScan:
        """Find matching methods in a resolved type."""
        operations = self._eligible_operations(record)
        scan = TypeScan(type_name=record.name)

        # Overloads differing only in return type collapse to one signature
        seen = set()
        for op in operations:
            signature = op.signature
            if signature in seen:
                continue
            if self.has_contract_parameter(signature, target):
                seen.add(signature)
                scan.parameter_role.append(signature)

        scan.return_role = [op.signature for op in operations if self.returns_source(op)]
        return scan

    def scan_type(self, type_name: str, target: Optional[str] = None) -> Optional[TypeScan]:
        """Resolve and scan a single type; None when it cannot be resolved."""
        record = self.provider.resolve(type_name)
        if record is None:
            logger.warning(f"Class not found: {type_name}")
            return None
        scan = self.scan_record(record, target)
        # Record under the requested name so results line up with the candidate list
        scan.type_name = type_name
        return scan

    def scan(self, type_names: Iterable[str], target: Optional[str] = None) -> ScanResult:
        """Run one scan pass over the given types.

        Args:
            type_names: Types to scan; processed in sorted order
            target: Single contract type to search for, or None for all

        Returns:
            Fresh ScanResult for this pass
        """
        names = sorted(set(type_names))

        def work(name: str) -> Optional[TypeScan]:
            return self.scan_type(name, target)

        if self.executor is not None:
            scans = self.executor.map(work, names)
        else:
            scans = [work(name) for name in names]

        result = ScanResult()
        for name, scan in zip(names, scans):
            if scan is None:
                result.unresolved.append(name)
                continue
            result.record(scan)

        logger.debug(
            f"Scanned {len(names)} types: {len(result.parameter_role)} with lambda parameters, "
            f"{len(result.return_role)} returning {self.source_type}"
        )
        return result
