"""
Shared fixtures for lambdascan tests.

Provides a small class file assembler so tests can build real jar archives
without a Java toolchain.
"""

import logging
import struct
import zipfile
from pathlib import Path
from typing import Dict, List, Tuple

import pytest

ACC_PUBLIC = 0x0001
ACC_PRIVATE = 0x0002
ACC_STATIC = 0x0008
ACC_SUPER = 0x0020
ACC_BRIDGE = 0x0040
ACC_INTERFACE = 0x0200
ACC_ABSTRACT = 0x0400
ACC_SYNTHETIC = 0x1000


class ClassFileBuilder:
    """Assemble minimal but valid JVM class files."""

    def __init__(self, name: str, interface: bool = False, public: bool = True):
        self.name = name
        self.interface = interface
        self.public = public
        self.methods: List[Tuple[int, str, str]] = []
        self.with_long_constant = False
        self._pool: List[bytes] = []
        self._indexes: Dict[Tuple, int] = {}
        self._next_index = 1

    def method(self, name: str, descriptor: str, flags: int = ACC_PUBLIC) -> "ClassFileBuilder":
        self.methods.append((flags, name, descriptor))
        return self

    def abstract(self, name: str, descriptor: str) -> "ClassFileBuilder":
        return self.method(name, descriptor, ACC_PUBLIC | ACC_ABSTRACT)

    def default(self, name: str, descriptor: str) -> "ClassFileBuilder":
        return self.method(name, descriptor, ACC_PUBLIC)

    def static(self, name: str, descriptor: str) -> "ClassFileBuilder":
        return self.method(name, descriptor, ACC_PUBLIC | ACC_STATIC)

    def _add(self, key: Tuple, payload: bytes, slots: int = 1) -> int:
        if key in self._indexes:
            return self._indexes[key]
        index = self._next_index
        self._pool.append(payload)
        self._indexes[key] = index
        self._next_index += slots
        return index

    def _utf8(self, value: str) -> int:
        encoded = value.encode("utf-8")
        return self._add(("utf8", value), struct.pack(">BH", 1, len(encoded)) + encoded)

    def _class(self, internal_name: str) -> int:
        name_index = self._utf8(internal_name)
        return self._add(("class", internal_name), struct.pack(">BH", 7, name_index))

    def build(self) -> bytes:
        this_class = self._class(self.name.replace(".", "/"))
        super_class = self._class("java/lang/Object")
        if self.with_long_constant:
            self._add(("long",), struct.pack(">Bq", 5, 42), slots=2)
        code_name = self._utf8("Code")

        method_bytes = b""
        for flags, name, descriptor in self.methods:
            name_index = self._utf8(name)
            descriptor_index = self._utf8(descriptor)
            if flags & ACC_ABSTRACT:
                attributes = struct.pack(">H", 0)
            else:
                body = b"\x00\x01\x00\x01\x00\x00\x00\x01\xb1\x00\x00\x00\x00"
                attributes = struct.pack(">HHI", 1, code_name, len(body)) + body
            method_bytes += struct.pack(">HHH", flags, name_index, descriptor_index) + attributes

        access = ACC_PUBLIC if self.public else 0
        access |= (ACC_INTERFACE | ACC_ABSTRACT) if self.interface else ACC_SUPER

        return b"".join([
            struct.pack(">IHH", 0xCAFEBABE, 0, 52),
            struct.pack(">H", self._next_index),
            *self._pool,
            struct.pack(">HHH", access, this_class, super_class),
            struct.pack(">H", 0),  # interfaces
            struct.pack(">H", 0),  # fields
            struct.pack(">H", len(self.methods)),
            method_bytes,
            struct.pack(">H", 0),  # class attributes
        ])


def write_jar(path: Path, classes: List[ClassFileBuilder], extra_entries: Dict[str, bytes] = None) -> Path:
    """Write builders (and raw extra entries) into a jar at path."""
    with zipfile.ZipFile(path, "w") as jar:
        jar.writestr("META-INF/MANIFEST.MF", "Manifest-Version: 1.0\n")
        for builder in classes:
            jar.writestr(builder.name.replace(".", "/") + ".class", builder.build())
        for entry, data in (extra_entries or {}).items():
            jar.writestr(entry, data)
    return path


@pytest.fixture
def class_builder():
    """The ClassFileBuilder class."""
    return ClassFileBuilder


@pytest.fixture
def sample_jar(tmp_path):
    """A jar with a small java.* surface.

    * java.util.function.Consumer  - functional interface
    * java.util.function.Supplier  - functional interface (plus a default method)
    * java.util.Comparator2        - two abstract methods, not functional
    * java.util.Foo                - class using Consumer, returning Stream
    * java.util.stream.StreamSupport2 - class in the stream package
    """
    consumer = ClassFileBuilder("java.util.function.Consumer", interface=True)
    consumer.abstract("accept", "(Ljava/lang/Object;)V")
    consumer.default("andThen", "(Ljava/util/function/Consumer;)Ljava/util/function/Consumer;")

    supplier = ClassFileBuilder("java.util.function.Supplier", interface=True)
    supplier.abstract("get", "()Ljava/lang/Object;")
    supplier.static("empty", "()Ljava/util/function/Supplier;")

    comparator = ClassFileBuilder("java.util.Comparator2", interface=True)
    comparator.abstract("compare", "(Ljava/lang/Object;Ljava/lang/Object;)I")
    comparator.abstract("reversed", "()Ljava/util/Comparator2;")

    foo = ClassFileBuilder("java.util.Foo")
    foo.method("<init>", "()V")
    foo.method("bar", "(I)V")
    foo.method("baz", "(Ljava/util/function/Consumer;)V")
    foo.method("all", "([Ljava/util/function/Consumer;)V")
    foo.method("stream", "()Ljava/util/stream/Stream;")
    foo.method("lambda$baz$0", "(Ljava/util/function/Consumer;)V", ACC_PRIVATE | ACC_STATIC | ACC_SYNTHETIC)

    stream_support = ClassFileBuilder("java.util.stream.StreamSupport2")
    stream_support.method("stream", "(Ljava/util/function/Supplier;)Ljava/util/stream/Stream;", ACC_PUBLIC | ACC_STATIC)

    inner = ClassFileBuilder("java.util.Foo$Inner")
    inner.method("run", "(Ljava/util/function/Consumer;)V")

    return write_jar(
        tmp_path / "rt.jar",
        [consumer, supplier, comparator, foo, stream_support, inner],
        extra_entries={
            "java/util/package-info.class": b"\xca\xfe\xba\xbe",
            "com/example/Other.class": b"\xca\xfe\xba\xbe",
        },
    )


@pytest.fixture
def baseline_file(tmp_path):
    """Baseline listing in which Foo.bar(int) and Supplier already exist."""
    path = tmp_path / "baseline.csv"
    path.write_text(
        "java.util.Foo,bar,int\n"
        "java.util.function.Supplier\n"
        "java.util.function.Supplier,get\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture(autouse=True)
def reset_lambdascan_logger():
    """Undo CLI logging setup so caplog sees records in every test."""
    yield
    logger = logging.getLogger("lambdascan")
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
