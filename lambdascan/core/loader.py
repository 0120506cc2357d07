"""Candidate surface enumeration from archive entries."""

from typing import Iterable, List, Optional, Sequence
import logging

from ..performance.parallel import ParallelExecutor
from .providers import CLASS_SUFFIX, entry_to_type_name

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE_PREFIXES = ("java", "org")


def is_candidate_entry(entry: str, prefixes: Sequence[str] = DEFAULT_NAMESPACE_PREFIXES) -> bool:
    """Check whether an archive entry is a top-level class under one of the prefixes.

    Args:
        entry: Archive entry path, e.g. ``java/util/List.class``
        prefixes: Namespace roots matched against the start of the path

    Returns:
        True for top-level class entries under a namespace root
    """
    if not entry.endswith(CLASS_SUFFIX):
        return False
    if not any(entry.startswith(prefix) for prefix in prefixes):
        return False
    # Nested classes ('$') and package-info/module-info ('-') are not candidates
    return "$" not in entry and "-" not in entry


def collect_candidate_types(
    entries: Iterable[str],
    prefixes: Sequence[str] = DEFAULT_NAMESPACE_PREFIXES,
    executor: Optional[ParallelExecutor] = None
) -> List[str]:
    """Collect candidate type names from archive entry names.

    Args:
        entries: Archive entry paths
        prefixes: Namespace roots to keep
        executor: Optional executor for the filtering fan-out

    Returns:
        Sorted, deduplicated qualified type names
    """
    entries = list(entries)
    prefixes = tuple(prefixes)

    def keep(entry: str) -> bool:
        return is_candidate_entry(entry, prefixes)

    if executor is not None:
        kept = executor.filter(keep, entries)
    else:
        kept = [entry for entry in entries if keep(entry)]

    names = sorted({entry_to_type_name(entry) for entry in kept})
    logger.debug(f"Kept {len(names)} of {len(entries)} archive entries")
    return names
