"""Method signatures: name plus ordered parameter types."""

from __future__ import annotations

from typing import Iterable, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from .types import Operation


ARRAY_MARKER = "["

# Element codes used by JVM array type names ("[I", "[Ljava.lang.String;")
PRIMITIVE_ARRAY_NAMES = {
    "Z": "boolean",
    "B": "byte",
    "C": "char",
    "D": "double",
    "F": "float",
    "I": "int",
    "J": "long",
    "S": "short",
}


class MethodSignature:
    """Immutable method signature used for structural comparison.

    Two signatures are equal when their names match and their parameter
    types match element by element, in declaration order. The return type
    is not part of a signature, so overloads that differ only
    in return type (covariant overrides, bridge pairs) compare equal.

    Parameter types use JVM reflection naming: ``int``, ``java.lang.String``,
    ``[I``, ``[Ljava.lang.String;``.
    """

    __slots__ = ("_name", "_parameters")

    def __init__(self, name: str, parameters: Iterable[str] = ()):
        self._name = name
        self._parameters: Tuple[str, ...] = tuple(parameters)

    @classmethod
    def from_operation(cls, operation: "Operation") -> "MethodSignature":
        """Build the signature of a declared operation."""
        return cls(operation.name, operation.parameters)

    @property
    def name(self) -> str:
        return self._name

    @property
    def parameters(self) -> Tuple[str, ...]:
        return self._parameters

    @property
    def arity(self) -> int:
        """Number of parameters."""
        return len(self._parameters)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MethodSignature):
            return NotImplemented
        return self._name == other._name and self._parameters == other._parameters

    def __hash__(self) -> int:
        return hash((self._name, self._parameters))

    def __repr__(self) -> str:
        return f"MethodSignature({self._name!r}, {list(self._parameters)!r})"

    def __str__(self) -> str:
        return self.render()

    def render(self) -> str:
        """Human readable form, e.g. ``forEach(Consumer)``."""
        params = ", ".join(display_type(p) for p in self._parameters)
        return f"{self._name}({params})"


def display_type(type_name: str) -> str:
    """Convert a reflection type name to its short display form.

    Examples:
        ``[I`` -> ``int[]``, ``[Ljava.util.Map$Entry;`` -> ``Map.Entry[]``,
        ``java.util.function.Function`` -> ``Function``, ``int`` -> ``int``.
    """
    if type_name.startswith(ARRAY_MARKER):
        element = type_name[1:]
        code = element[:1]

        if code in PRIMITIVE_ARRAY_NAMES and len(element) == 1:
            return PRIMITIVE_ARRAY_NAMES[code] + "[]"
        if code == "L" and element.endswith(";") and len(element) > 2:
            return _short_name(element[1:-1]) + "[]"
        # Anything else, nested arrays included, gets the generic marker
        return "[]"

    return _short_name(type_name)


def _short_name(qualified_name: str) -> str:
    # Inner classes use '$' in binary names; show them with '.'
    return qualified_name.rsplit(".", 1)[-1].replace("$", ".")
