"""JVM class file reader.

Reads just enough of the class file format (JVMS chapter 4) to describe a
type: its access flags, its binary name and the name, descriptor and access
flags of every declared method. Method bodies and attributes are skipped.
"""

import struct
from typing import List, Optional, Tuple

from .types import Operation, TypeRecord

MAGIC = 0xCAFEBABE

# Class access flags
ACC_PUBLIC = 0x0001
ACC_INTERFACE = 0x0200

# Method access flags
ACC_STATIC = 0x0008
ACC_BRIDGE = 0x0040
ACC_ABSTRACT = 0x0400
ACC_SYNTHETIC = 0x1000

# Constant pool tags
CONSTANT_UTF8 = 1
CONSTANT_INTEGER = 3
CONSTANT_FLOAT = 4
CONSTANT_LONG = 5
CONSTANT_DOUBLE = 6
CONSTANT_CLASS = 7
CONSTANT_STRING = 8
CONSTANT_FIELDREF = 9
CONSTANT_METHODREF = 10
CONSTANT_INTERFACE_METHODREF = 11
CONSTANT_NAME_AND_TYPE = 12
CONSTANT_METHOD_HANDLE = 15
CONSTANT_METHOD_TYPE = 16
CONSTANT_DYNAMIC = 17
CONSTANT_INVOKE_DYNAMIC = 18
CONSTANT_MODULE = 19
CONSTANT_PACKAGE = 20

# Payload size in bytes of every fixed-size constant pool entry
_FIXED_ENTRY_SIZES = {
    CONSTANT_INTEGER: 4,
    CONSTANT_FLOAT: 4,
    CONSTANT_LONG: 8,
    CONSTANT_DOUBLE: 8,
    CONSTANT_CLASS: 2,
    CONSTANT_STRING: 2,
    CONSTANT_FIELDREF: 4,
    CONSTANT_METHODREF: 4,
    CONSTANT_INTERFACE_METHODREF: 4,
    CONSTANT_NAME_AND_TYPE: 4,
    CONSTANT_METHOD_HANDLE: 3,
    CONSTANT_METHOD_TYPE: 2,
    CONSTANT_DYNAMIC: 4,
    CONSTANT_INVOKE_DYNAMIC: 4,
    CONSTANT_MODULE: 2,
    CONSTANT_PACKAGE: 2,
}

BASE_TYPES = {
    "B": "byte",
    "C": "char",
    "D": "double",
    "F": "float",
    "I": "int",
    "J": "long",
    "S": "short",
    "Z": "boolean",
    "V": "void",
}

# Not reported by reflection as declared methods
_SPECIAL_METHODS = {"<init>", "<clinit>"}


class ClassFormatError(ValueError):
    """Raised when class file bytes cannot be decoded."""


class _Reader:
    """Sequential big-endian reader over class file bytes."""

    def __init__(self, data: bytes):
        self.data = data
        self.offset = 0

    def read(self, fmt: str) -> Tuple[int, ...]:
        size = struct.calcsize(fmt)
        if self.offset + size > len(self.data):
            raise ClassFormatError(f"Truncated class file at offset {self.offset}")
        values = struct.unpack_from(fmt, self.data, self.offset)
        self.offset += size
        return values

    def u1(self) -> int:
        return self.read(">B")[0]

    def u2(self) -> int:
        return self.read(">H")[0]

    def u4(self) -> int:
        return self.read(">I")[0]

    def raw(self, length: int) -> bytes:
        if self.offset + length > len(self.data):
            raise ClassFormatError(f"Truncated class file at offset {self.offset}")
        chunk = self.data[self.offset:self.offset + length]
        self.offset += length
        return chunk

    def skip(self, length: int) -> None:
        self.raw(length)


def decode_modified_utf8(raw: bytes) -> str:
    """Decode the modified UTF-8 used for class file strings."""
    # NUL is stored as the two byte sequence C0 80
    try:
        return raw.replace(b"\xc0\x80", b"\x00").decode("utf-8", "surrogatepass")
    except UnicodeDecodeError as e:
        raise ClassFormatError(f"Invalid UTF8 constant: {e}") from e


def descriptor_to_type_name(descriptor: str) -> str:
    """Convert a field descriptor to a reflection style type name.

    ``I`` -> ``int``, ``Ljava/lang/String;`` -> ``java.lang.String``,
    ``[Ljava/lang/String;`` -> ``[Ljava.lang.String;``, ``[[I`` -> ``[[I``.
    """
    if descriptor.startswith("["):
        return descriptor.replace("/", ".")
    if descriptor.startswith("L") and descriptor.endswith(";"):
        return descriptor[1:-1].replace("/", ".")
    if descriptor in BASE_TYPES:
        return BASE_TYPES[descriptor]
    raise ClassFormatError(f"Invalid field descriptor: {descriptor!r}")


def parse_method_descriptor(descriptor: str) -> Tuple[List[str], str]:
    """Split a method descriptor into parameter type names and return type name.

    Args:
        descriptor: Method descriptor such as ``(I[Ljava/lang/String;)V``

    Returns:
        Tuple of (parameter type names, return type name)
    """
    if not descriptor.startswith("("):
        raise ClassFormatError(f"Invalid method descriptor: {descriptor!r}")

    parameters: List[str] = []
    index = 1
    while index < len(descriptor) and descriptor[index] != ")":
        end = _field_descriptor_end(descriptor, index)
        parameters.append(descriptor_to_type_name(descriptor[index:end]))
        index = end

    if index >= len(descriptor):
        raise ClassFormatError(f"Unterminated method descriptor: {descriptor!r}")

    return parameters, descriptor_to_type_name(descriptor[index + 1:])


def _field_descriptor_end(descriptor: str, start: int) -> int:
    index = start
    while index < len(descriptor) and descriptor[index] == "[":
        index += 1
    if index >= len(descriptor):
        raise ClassFormatError(f"Invalid method descriptor: {descriptor!r}")
    if descriptor[index] == "L":
        semicolon = descriptor.find(";", index)
        if semicolon < 0:
            raise ClassFormatError(f"Invalid method descriptor: {descriptor!r}")
        return semicolon + 1
    return index + 1


class ClassFileParser:
    """Parse class file bytes into a ``TypeRecord``."""

    def parse(self, data: bytes) -> TypeRecord:
        reader = _Reader(data)

        magic = reader.u4()
        if magic != MAGIC:
            raise ClassFormatError(f"Bad magic number: {magic:#x}")
        reader.skip(4)  # minor and major version

        constants = self._read_constant_pool(reader)

        access_flags = reader.u2()
        this_class = reader.u2()
        reader.skip(2)  # super_class
        interfaces_count = reader.u2()
        reader.skip(2 * interfaces_count)

        name = self._class_name(constants, this_class)
        is_interface = bool(access_flags & ACC_INTERFACE)

        self._skip_members(reader)  # fields
        operations = self._read_methods(reader, constants, is_interface)

        return TypeRecord(
            name=name,
            is_interface=is_interface,
            is_public=bool(access_flags & ACC_PUBLIC),
            operations=tuple(operations),
        )

    def _read_constant_pool(self, reader: _Reader) -> List[Optional[object]]:
        count = reader.u2()
        constants: List[Optional[object]] = [None] * count
        index = 1
        while index < count:
            tag = reader.u1()
            if tag == CONSTANT_UTF8:
                length = reader.u2()
                constants[index] = decode_modified_utf8(reader.raw(length))
            elif tag == CONSTANT_CLASS:
                constants[index] = ("class", reader.u2())
            elif tag in _FIXED_ENTRY_SIZES:
                reader.skip(_FIXED_ENTRY_SIZES[tag])
            else:
                raise ClassFormatError(f"Unknown constant pool tag {tag} at index {index}")

            # Long and double constants take two slots
            index += 2 if tag in (CONSTANT_LONG, CONSTANT_DOUBLE) else 1
        return constants

    def _utf8(self, constants: List[Optional[object]], index: int) -> str:
        value = constants[index] if 0 < index < len(constants) else None
        if not isinstance(value, str):
            raise ClassFormatError(f"Constant {index} is not a UTF8 entry")
        return value

    def _class_name(self, constants: List[Optional[object]], index: int) -> str:
        entry = constants[index] if 0 < index < len(constants) else None
        if not isinstance(entry, tuple) or entry[0] != "class":
            raise ClassFormatError(f"Constant {index} is not a class entry")
        return self._utf8(constants, entry[1]).replace("/", ".")

    def _skip_members(self, reader: _Reader) -> None:
        count = reader.u2()
        for _ in range(count):
            reader.skip(6)  # access_flags, name_index, descriptor_index
            self._skip_attributes(reader)

    def _skip_attributes(self, reader: _Reader) -> None:
        count = reader.u2()
        for _ in range(count):
            reader.skip(2)
            reader.skip(reader.u4())

    def _read_methods(
        self,
        reader: _Reader,
        constants: List[Optional[object]],
        is_interface: bool
    ) -> List[Operation]:
        operations = []
        count = reader.u2()
        for _ in range(count):
            flags = reader.u2()
            name = self._utf8(constants, reader.u2())
            descriptor = self._utf8(constants, reader.u2())
            self._skip_attributes(reader)

            if name in _SPECIAL_METHODS:
                continue

            parameters, return_type = parse_method_descriptor(descriptor)
            is_static = bool(flags & ACC_STATIC)
            is_abstract = bool(flags & ACC_ABSTRACT)
            operations.append(Operation(
                name=name,
                parameters=tuple(parameters),
                return_type=return_type,
                is_static=is_static,
                is_default=is_interface and not is_abstract and not is_static,
                is_synthetic=bool(flags & (ACC_SYNTHETIC | ACC_BRIDGE)),
                is_abstract=is_abstract,
                is_public=bool(flags & ACC_PUBLIC),
            ))
        return operations


def parse_class(data: bytes) -> TypeRecord:
    """Parse class file bytes; raises ClassFormatError on malformed input."""
    return ClassFileParser().parse(data)
