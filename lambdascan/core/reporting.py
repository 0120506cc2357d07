"""Report generation for library surface analysis."""

import json
from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Optional, Set, TextIO

from .baseline import BaselineIndex
from .scanner import ScanResult
from .signatures import MethodSignature
from .types import SignatureMap

FUNCTIONAL_INTERFACES_TITLE = "Functional Interfaces"
LAMBDA_PARAMETERS_TITLE = "Methods that can use Lambda expressions for parameters"
STREAM_SOURCES_TITLE = "Stream sources"


@dataclass
class ReportStats:
    """Counts accumulated while writing a grouped listing."""
    operations: int = 0
    new_operations: int = 0
    types: int = 0
    new_types: int = 0


def format_usage_stats(stats: ReportStats) -> str:
    """Statistics line for the lambda parameter listing."""
    return (
        f"Lambda usage: {stats.operations} methods (of which "
        f"{stats.new_operations} are new) in {stats.types} classes"
    )


def format_source_stats(stats: ReportStats) -> str:
    """Statistics line for the stream source listing."""
    return (
        f"Stream sources/intermediate operations: {stats.operations} methods "
        f"in {stats.types} classes"
    )


class ReportFormatter:
    """Helpers for the plain text layout."""

    @staticmethod
    def section_header(title: str) -> List[str]:
        return [title, "=" * len(title)]

    @staticmethod
    def group_header(name: str) -> List[str]:
        return [name, "-" * len(name)]


class Reporter:
    """Write analysis results as a plain text report.

    Sections are written as they are requested, in call order. Novelty
    markers are appended only when ``mark_new`` is set, but novelty is
    always counted for the statistics. Type group headers carry the marker
    when the baseline reports the type as new (see ``detect_new_types``).
    """

    def __init__(
        self,
        stream: TextIO,
        baseline: BaselineIndex,
        mark_new: bool = False,
        marker: str = "NEW",
        excluded_namespace: Optional[str] = None
    ):
        self.stream = stream
        self.baseline = baseline
        self.mark_new = mark_new
        self.marker = marker
        self.excluded_namespace = excluded_namespace

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self) -> None:
        self.stream.flush()

    def is_listed(self, type_name: str) -> bool:
        """Whether a type survives the namespace exclusion."""
        if not self.excluded_namespace:
            return True
        return not type_name.startswith(self.excluded_namespace)

    def listed_types(self, mapping: SignatureMap) -> List[str]:
        return sorted(name for name in mapping if self.is_listed(name))

    def _suffix(self, is_new: bool) -> str:
        return f" {self.marker}" if self.mark_new and is_new else ""

    def _writeln(self, line: str = "") -> None:
        self.stream.write(line + "\n")

    def write_contract_types(self, contract_types: Iterable[str]) -> int:
        """Write the functional interface listing.

        Returns:
            Number of types listed
        """
        names = sorted(contract_types)
        for line in ReportFormatter.section_header(FUNCTIONAL_INTERFACES_TITLE):
            self._writeln(line)
        self._writeln()
        for name in names:
            self._writeln(name + self._suffix(name not in self.baseline))
        self._writeln()
        return len(names)

    def write_parameter_role(self, result: ScanResult) -> ReportStats:
        """Write the methods that accept contract types, grouped by type."""
        return self._write_grouped(LAMBDA_PARAMETERS_TITLE, result.parameter_role)

    def write_return_role(self, result: ScanResult) -> ReportStats:
        """Write the methods returning the source type, grouped by type."""
        return self._write_grouped(STREAM_SOURCES_TITLE, result.return_role)

    def _write_grouped(self, title: str, mapping: SignatureMap) -> ReportStats:
        stats = ReportStats()
        for line in ReportFormatter.section_header(title):
            self._writeln(line)
        self._writeln()

        for type_name in self.listed_types(mapping):
            is_new_type = self.baseline.is_new_type(type_name)
            stats.types += 1
            stats.new_types += int(is_new_type)
            for line in ReportFormatter.group_header(type_name + self._suffix(is_new_type)):
                self._writeln(line)
            for signature in mapping[type_name]:
                is_new = self.baseline.is_new_operation(type_name, signature)
                stats.operations += 1
                stats.new_operations += int(is_new)
                self._writeln(signature.render() + self._suffix(is_new))
            self._writeln()

        return stats


class JsonReporter(Reporter):
    """Collect the requested sections into a single JSON document.

    The document is written when the reporter is closed.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.document: Dict[str, Any] = {}
        self._new_types: Set[str] = set()

    def close(self) -> None:
        self.document["new_types"] = sorted(self._new_types)
        json.dump(self.document, self.stream, indent=2)
        self.stream.write("\n")
        super().close()

    def write_contract_types(self, contract_types: Iterable[str]) -> int:
        names = sorted(contract_types)
        self.document["functional_interfaces"] = [
            {"type": name, "new": name not in self.baseline} for name in names
        ]
        return len(names)

    def write_parameter_role(self, result: ScanResult) -> ReportStats:
        entries, stats = self._collect(result.parameter_role)
        # One pass per requested contract type; keep every pass
        self.document.setdefault("lambda_parameters", []).append(entries)
        self.document.setdefault("stats", {}).setdefault("lambda_parameters", []).append(asdict(stats))
        return stats

    def write_return_role(self, result: ScanResult) -> ReportStats:
        entries, stats = self._collect(result.return_role)
        self.document["stream_sources"] = entries
        self.document.setdefault("stats", {})["stream_sources"] = asdict(stats)
        return stats

    def _collect(self, mapping: SignatureMap):
        stats = ReportStats()
        entries: Dict[str, List[Dict[str, Any]]] = {}
        for type_name in self.listed_types(mapping):
            stats.types += 1
            if self.baseline.is_new_type(type_name):
                stats.new_types += 1
                self._new_types.add(type_name)
            entries[type_name] = []
            for signature in mapping[type_name]:
                is_new = self.baseline.is_new_operation(type_name, signature)
                stats.operations += 1
                stats.new_operations += int(is_new)
                entries[type_name].append(self._signature_entry(signature, is_new))
        return entries, stats

    @staticmethod
    def _signature_entry(signature: MethodSignature, is_new: bool) -> Dict[str, Any]:
        return {
            "name": signature.name,
            "parameters": list(signature.parameters),
            "display": signature.render(),
            "new": is_new,
        }


REPORTERS = {
    "text": Reporter,
    "json": JsonReporter,
}


def create_reporter(fmt: str, stream: TextIO, baseline: BaselineIndex, **kwargs) -> Reporter:
    """Instantiate the reporter for a format name."""
    try:
        reporter_cls = REPORTERS[fmt]
    except KeyError:
        raise ValueError(f"Unsupported report format: {fmt}") from None
    return reporter_cls(stream, baseline, **kwargs)
