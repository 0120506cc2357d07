"""Tests for the method signature model."""

import pytest
from hypothesis import given, strategies as st

from lambdascan.core.signatures import MethodSignature, display_type
from lambdascan.core.types import Operation


names = st.text(min_size=1, max_size=12)
parameter_lists = st.lists(st.sampled_from([
    "int", "long", "[I", "java.lang.String", "[Ljava.lang.String;",
    "java.util.function.Function", "java.util.Map$Entry",
]), max_size=5)


class TestSignatureEquality:
    """Structural equality and hashing."""

    def test_equal_signatures(self):
        assert MethodSignature("f", ["int", "int"]) == MethodSignature("f", ["int", "int"])

    def test_parameter_type_differs(self):
        assert MethodSignature("f", ["int"]) != MethodSignature("f", ["long"])

    def test_name_differs(self):
        assert MethodSignature("f", []) != MethodSignature("g", [])

    def test_parameter_order_matters(self):
        assert MethodSignature("f", ["int", "long"]) != MethodSignature("f", ["long", "int"])

    def test_array_is_not_its_element_type(self):
        assert MethodSignature("f", ["[I"]) != MethodSignature("f", ["int"])

    def test_not_equal_to_other_types(self):
        assert MethodSignature("f", []) != ("f", ())

    def test_return_type_ignored(self):
        """Operations differing only in return type have equal signatures."""
        first = Operation("map", ("java.util.function.Function",), "java.util.stream.Stream")
        second = Operation("map", ("java.util.function.Function",), "java.lang.Object")
        assert first.signature == second.signature
        assert len({first.signature, second.signature}) == 1

    def test_arity(self):
        assert MethodSignature("f", ["int", "long"]).arity == 2
        assert MethodSignature("f").arity == 0

    @given(names, parameter_lists)
    def test_equal_signatures_hash_equal(self, name, parameters):
        first = MethodSignature(name, parameters)
        second = MethodSignature(name, list(parameters))
        assert first == second
        assert hash(first) == hash(second)

    @given(names, parameter_lists, names, parameter_lists)
    def test_equality_is_symmetric(self, name1, params1, name2, params2):
        first = MethodSignature(name1, params1)
        second = MethodSignature(name2, params2)
        assert (first == second) == (second == first)
        assert (first == second) == (name1 == name2 and params1 == params2)

    @given(names, parameter_lists)
    def test_equality_is_reflexive(self, name, parameters):
        signature = MethodSignature(name, parameters)
        assert signature == signature

    def test_equality_is_transitive(self):
        a = MethodSignature("f", ["int"])
        b = MethodSignature("f", ("int",))
        c = MethodSignature("f", iter(["int"]))
        assert a == b and b == c and a == c


class TestRender:
    """Human readable rendering."""

    @pytest.mark.parametrize("token,expected", [
        ("[Z", "boolean[]"),
        ("[B", "byte[]"),
        ("[C", "char[]"),
        ("[D", "double[]"),
        ("[F", "float[]"),
        ("[I", "int[]"),
        ("[J", "long[]"),
        ("[S", "short[]"),
    ])
    def test_primitive_arrays(self, token, expected):
        assert display_type(token) == expected

    def test_object_array(self):
        assert display_type("[Ljava.lang.String;") == "String[]"

    def test_inner_class_array(self):
        assert display_type("[Ljava.util.Map$Entry;") == "Map.Entry[]"

    def test_multidimensional_array_uses_generic_marker(self):
        assert display_type("[[I") == "[]"
        assert display_type("[[Ljava.lang.Object;") == "[]"
        assert MethodSignature("deepEquals", ["[[I", "[I"]).render() == "deepEquals([], int[])"

    def test_unrecognised_array_code(self):
        assert display_type("[Q") == "[]"
        assert display_type("[") == "[]"

    def test_qualified_name(self):
        assert display_type("java.util.function.Function") == "Function"

    def test_inner_class(self):
        assert display_type("java.util.Map$Entry") == "Map.Entry"

    def test_primitive_unchanged(self):
        assert display_type("int") == "int"

    def test_render_signature(self):
        signature = MethodSignature(
            "compute",
            ["java.lang.Object", "java.util.function.BiFunction", "[I"],
        )
        assert signature.render() == "compute(Object, BiFunction, int[])"
        assert str(signature) == signature.render()

    def test_render_no_parameters(self):
        assert MethodSignature("stream").render() == "stream()"
