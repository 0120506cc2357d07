"""Tests for contract type classification."""

import logging

from lambdascan.core.classifier import (
    ContractTypeSet,
    build_contract_types,
    classify,
    is_contract_type,
)
from lambdascan.core.providers import InMemoryTypeProvider
from lambdascan.core.types import Operation, TypeRecord
from lambdascan.performance.parallel import ParallelExecutor


def interface(name, *operations):
    return TypeRecord(name=name, is_interface=True, operations=tuple(operations))


class TestIsContractType:
    """The single abstract method rule."""

    def test_single_abstract_method(self):
        record = interface("java.lang.Runnable", Operation("run"))
        assert is_contract_type(record)

    def test_default_and_static_methods_ignored(self):
        record = interface(
            "java.util.function.Function",
            Operation("apply", ("java.lang.Object",), "java.lang.Object", is_abstract=True),
            Operation("andThen", ("java.util.function.Function",), "java.util.function.Function", is_default=True),
            Operation("identity", (), "java.util.function.Function", is_static=True),
        )
        assert is_contract_type(record)

    def test_two_abstract_methods(self):
        record = interface(
            "java.util.Iterator",
            Operation("hasNext", (), "boolean", is_abstract=True),
            Operation("next", (), "java.lang.Object", is_abstract=True),
        )
        assert not is_contract_type(record)

    def test_class_is_never_contract_type(self):
        record = TypeRecord(name="java.lang.Thread", operations=(Operation("run"),))
        assert not is_contract_type(record)

    def test_interface_without_methods(self):
        assert not is_contract_type(interface("java.io.Serializable"))

    def test_synthetic_and_generated_methods_ignored(self):
        record = interface(
            "java.util.function.Predicate",
            Operation("test", ("java.lang.Object",), "boolean", is_abstract=True),
            Operation("bridge", ("java.lang.Object",), "boolean", is_synthetic=True),
            Operation("lambda$negate$0", ("java.lang.Object",), "boolean"),
        )
        assert is_contract_type(record)

    def test_result_is_memoized_on_record(self):
        record = interface("java.lang.Runnable", Operation("run"))
        assert record.is_contract_type is record.is_contract_type
        assert record.is_contract_type


class TestClassify:
    """Resolving and classifying by name."""

    def test_unresolved_type_is_not_contract(self, caplog):
        provider = InMemoryTypeProvider()
        with caplog.at_level(logging.WARNING, logger="lambdascan"):
            assert not classify(provider, "java.util.Missing")
        assert "Class not found: java.util.Missing" in caplog.text

    def test_resolved_type(self):
        provider = InMemoryTypeProvider([interface("java.lang.Runnable", Operation("run"))])
        assert classify(provider, "java.lang.Runnable")


class TestBuildContractTypes:
    """Building the contract type set."""

    def setup_method(self):
        self.provider = InMemoryTypeProvider([
            interface("java.util.function.Supplier", Operation("get", (), "java.lang.Object", is_abstract=True)),
            interface("java.lang.Runnable", Operation("run", is_abstract=True)),
            interface(
                "java.util.Iterator",
                Operation("hasNext", (), "boolean", is_abstract=True),
                Operation("next", (), "java.lang.Object", is_abstract=True),
            ),
            TypeRecord(name="java.util.ArrayList", operations=(Operation("clear"),)),
        ])
        self.candidates = [
            "java.util.function.Supplier",
            "java.util.Iterator",
            "java.lang.Runnable",
            "java.util.ArrayList",
            "java.util.Missing",
        ]

    def test_sequential(self):
        result = build_contract_types(self.provider, self.candidates)
        assert result.names == ("java.lang.Runnable", "java.util.function.Supplier")

    def test_parallel_matches_sequential(self):
        with ParallelExecutor(max_workers=4, chunk_size=1) as executor:
            parallel = build_contract_types(self.provider, self.candidates, executor)
        assert parallel == build_contract_types(self.provider, self.candidates)

    def test_membership(self):
        result = build_contract_types(self.provider, self.candidates)
        assert "java.lang.Runnable" in result
        assert "java.util.Iterator" not in result
        assert len(result) == 2
        assert list(result) == ["java.lang.Runnable", "java.util.function.Supplier"]


class TestContractTypeSet:
    """Set semantics."""

    def test_sorted_and_deduplicated(self):
        types = ContractTypeSet(["b", "a", "b"])
        assert types.names == ("a", "b")

    def test_equality_and_hash(self):
        assert ContractTypeSet(["a", "b"]) == ContractTypeSet(["b", "a"])
        assert hash(ContractTypeSet(["a", "b"])) == hash(ContractTypeSet(["b", "a"]))
        assert ContractTypeSet(["a"]) != ContractTypeSet(["b"])
