"""Type metadata providers.

``ArchiveTypeProvider`` reads compiled classes out of a jar/zip archive;
``InMemoryTypeProvider`` serves prebuilt records (precomputed indexes, tests).
"""

import logging
import threading
import zipfile
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from .classfile import ClassFormatError, parse_class
from .types import QualifiedName, TypeRecord

logger = logging.getLogger(__name__)

CLASS_SUFFIX = ".class"


def entry_to_type_name(entry: str) -> str:
    """``java/util/List.class`` -> ``java.util.List``"""
    return entry[:-len(CLASS_SUFFIX)].replace("/", ".")


def type_name_to_entry(name: str) -> str:
    """``java.util.List`` -> ``java/util/List.class``"""
    return name.replace(".", "/") + CLASS_SUFFIX


class ArchiveTypeProvider:
    """Resolve types by parsing class files stored in an archive.

    The archive is opened on construction, so a missing or corrupt archive
    raises ``OSError`` / ``zipfile.BadZipFile`` immediately. Parsed records are
    cached; reads from the underlying zip are serialised so the provider can be
    shared by worker threads.
    """

    def __init__(self, archive_path: Union[str, Path]):
        self.archive_path = Path(archive_path)
        self._zip = zipfile.ZipFile(self.archive_path)
        self._lock = threading.Lock()
        self._cache: Dict[QualifiedName, Optional[TypeRecord]] = {}

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self) -> None:
        self._zip.close()

    def entry_names(self) -> List[str]:
        """All entry names in archive order."""
        return self._zip.namelist()

    def type_names(self) -> Iterable[QualifiedName]:
        return [
            entry_to_type_name(entry)
            for entry in self.entry_names()
            if entry.endswith(CLASS_SUFFIX)
        ]

    def resolve(self, name: QualifiedName) -> Optional[TypeRecord]:
        with self._lock:
            if name in self._cache:
                return self._cache[name]
            data = self._read_entry(type_name_to_entry(name))

        record = None
        if data is not None:
            try:
                record = parse_class(data)
            except ClassFormatError as e:
                logger.warning(f"Malformed class file for {name}: {e}")

        with self._lock:
            self._cache[name] = record
        return record

    def _read_entry(self, entry: str) -> Optional[bytes]:
        try:
            return self._zip.read(entry)
        except KeyError:
            return None
        except (zipfile.BadZipFile, OSError) as e:
            logger.warning(f"Could not read {entry} from {self.archive_path}: {e}")
            return None


class InMemoryTypeProvider:
    """Provider backed by a dictionary of already built type records."""

    def __init__(self, records: Iterable[TypeRecord] = ()):
        self._records: Dict[QualifiedName, TypeRecord] = {
            record.name: record for record in records
        }

    def add(self, record: TypeRecord) -> None:
        self._records[record.name] = record

    def type_names(self) -> Iterable[QualifiedName]:
        return list(self._records)

    def resolve(self, name: QualifiedName) -> Optional[TypeRecord]:
        return self._records.get(name)
