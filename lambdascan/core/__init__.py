"""Core analysis engine: signatures, classification, baseline and scanning."""

from .analysis import LibraryAnalyser, UnknownContractTypeError
from .baseline import BaselineIndex
from .classifier import ContractTypeSet, build_contract_types, is_contract_type
from .scanner import ScanResult, SurfaceScanner
from .signatures import MethodSignature
from .types import Operation, TypeMetadataProvider, TypeRecord

__all__ = [
    "BaselineIndex",
    "ContractTypeSet",
    "LibraryAnalyser",
    "MethodSignature",
    "Operation",
    "ScanResult",
    "SurfaceScanner",
    "TypeMetadataProvider",
    "TypeRecord",
    "UnknownContractTypeError",
    "build_contract_types",
    "is_contract_type",
]
