"""Analysis facade tying the baseline, classifier and scanner together."""

from typing import Iterable, List, Optional, Sequence
import logging

from ..performance.parallel import ParallelExecutor
from .baseline import BaselineIndex
from .classifier import ContractTypeSet, build_contract_types
from .scanner import STREAM_TYPE, ScanResult, SurfaceScanner
from .signatures import MethodSignature
from .types import TypeMetadataProvider

logger = logging.getLogger(__name__)


class UnknownContractTypeError(ValueError):
    """Raised when asked to search for a type that is not a contract type."""

    def __init__(self, names: Sequence[str]):
        self.names = list(names)
        super().__init__(
            f"Not a functional interface: {', '.join(self.names)}"
        )


class LibraryAnalyser:
    """Compare a candidate library surface against its baseline.

    The contract type set is built once on construction from the candidate
    types. Every ``analyse_*``/``find_*`` call runs one independent scan pass
    and returns its own ``ScanResult``.
    """

    def __init__(
        self,
        provider: TypeMetadataProvider,
        baseline: BaselineIndex,
        candidates: Iterable[str],
        source_type: str = STREAM_TYPE,
        public_only: bool = False,
        executor: Optional[ParallelExecutor] = None
    ):
        """
        Initialize the analyser.

        Args:
            provider: Metadata provider for candidate types
            baseline: Index of the baseline library surface
            candidates: Candidate type names
            source_type: Return type marking a source-role method
            public_only: Ignore non-public methods while scanning
            executor: Optional executor for the data-parallel passes
        """
        self.provider = provider
        self.baseline = baseline
        self.candidates: List[str] = sorted(set(candidates))
        self.executor = executor

        self.contract_types: ContractTypeSet = build_contract_types(
            provider, self.candidates, executor
        )
        logger.info(f"Found {len(self.contract_types)} functional interfaces")

        self.scanner = SurfaceScanner(
            provider,
            self.contract_types,
            source_type=source_type,
            public_only=public_only,
            executor=executor,
        )

    def is_new_class(self, type_name: str) -> bool:
        """Is this type new relative to the baseline?"""
        return self.baseline.is_new_type(type_name)

    def is_new_method(self, type_name: str, signature: MethodSignature) -> bool:
        """Is this method new relative to the baseline?"""
        return self.baseline.is_new_operation(type_name, signature)

    def validate_contract_types(self, names: Iterable[str]) -> None:
        """Reject any requested name that is not a contract type.

        Raises:
            UnknownContractTypeError: If one or more names are not contract types
        """
        unknown = [name for name in names if name not in self.contract_types]
        if unknown:
            raise UnknownContractTypeError(unknown)

    def analyse_all_types(self) -> ScanResult:
        """Scan every candidate type for lambda parameters and source methods."""
        return self.scanner.scan(self.candidates)

    def analyse_type(self, type_name: str) -> ScanResult:
        """Scan a single type, which need not be a candidate."""
        return self.scanner.scan([type_name])

    def find_use_of_contract_type(self, type_name: str) -> ScanResult:
        """Scan every candidate for methods taking one specific contract type.

        Raises:
            UnknownContractTypeError: If the type is not a contract type
        """
        self.validate_contract_types([type_name])
        logger.info(f"Searching for methods that can use {type_name}")
        return self.scanner.scan(self.candidates, target=type_name)
