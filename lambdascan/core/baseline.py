"""Baseline index: the types and method signatures of the earlier library version."""

from pathlib import Path
from typing import Dict, FrozenSet, Iterable, Iterator, Set, Union
import logging

from .signatures import MethodSignature

logger = logging.getLogger(__name__)

FIELD_DELIMITER = ","


class BaselineIndex:
    """Mapping of type name to the set of signatures that existed in the baseline.

    Records are ``typeName[,methodName,paramType1,paramType2,...]``, one per
    line. Commas inside fields cannot be escaped. A record with only a type
    name registers the type with no methods.

    Parsing is lenient: trailing empty fields are dropped, blank records and
    records without a type name are skipped and counted.
    """

    def __init__(self, detect_new_types: bool = False):
        self._types: Dict[str, Set[MethodSignature]] = {}
        self.detect_new_types = detect_new_types
        self.skipped_records = 0

    @classmethod
    def from_lines(cls, lines: Iterable[str], detect_new_types: bool = False) -> "BaselineIndex":
        """Build an index from an iterable of records."""
        index = cls(detect_new_types=detect_new_types)
        for line in lines:
            index.add_record(line)
        return index

    @classmethod
    def from_file(cls, path: Union[str, Path], detect_new_types: bool = False) -> "BaselineIndex":
        """Build an index from a baseline file; raises OSError if it cannot be read."""
        path = Path(path)
        with open(path, "r", encoding="utf-8") as f:
            index = cls.from_lines(f, detect_new_types=detect_new_types)
        if index.skipped_records:
            logger.warning(f"Skipped {index.skipped_records} unusable records in {path}")
        return index

    def add_record(self, line: str) -> None:
        """Parse one record and add it to the index."""
        fields = line.rstrip("\r\n").split(FIELD_DELIMITER)
        while fields and not fields[-1]:
            fields.pop()

        if not fields or not fields[0]:
            self.skipped_records += 1
            logger.debug(f"Skipping baseline record without a type name: {line!r}")
            return

        signatures = self._types.setdefault(fields[0], set())
        if len(fields) > 1:
            signatures.add(MethodSignature(fields[1], fields[2:]))

    def __contains__(self, type_name: object) -> bool:
        return type_name in self._types

    def __len__(self) -> int:
        return len(self._types)

    def __iter__(self) -> Iterator[str]:
        return iter(self._types)

    def signatures(self, type_name: str) -> FrozenSet[MethodSignature]:
        """Signatures recorded for a type (empty when the type is unknown)."""
        return frozenset(self._types.get(type_name, ()))

    def is_new_operation(self, type_name: str, signature: MethodSignature) -> bool:
        """Check whether a method is absent from the baseline.

        Args:
            type_name: Qualified name of the declaring type
            signature: Signature to look for

        Returns:
            True if the type is unknown or has no structurally equal signature
        """
        known = self._types.get(type_name)
        if known is None:
            return True
        return signature not in known

    def is_new_type(self, type_name: str) -> bool:
        """Check whether a type is new.

        Type novelty is reported only when ``detect_new_types`` is enabled;
        otherwise every type is treated as existing.
        """
        if not self.detect_new_types:
            return False
        return type_name not in self._types
