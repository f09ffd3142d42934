"""Tests for the schema_delta exception hierarchy."""

import pytest

from schema_delta.errors import (
    EnrichmentError,
    InvalidOperation,
    InvalidPath,
    InvariantViolation,
    NotFound,
    PartitionViolation,
    PatchApplyError,
    SchemaDeltaError,
)


class TestErrorHierarchy:
    def test_not_found_is_a_key_error_with_plain_message(self):
        error = NotFound("Node 'x' not found", key="x")
        assert isinstance(error, KeyError)
        assert isinstance(error, SchemaDeltaError)
        assert str(error) == "Node 'x' not found"
        assert error.key == "x"

    @pytest.mark.parametrize("error_class", [InvalidPath, InvalidOperation])
    def test_argument_errors_are_value_errors(self, error_class):
        assert issubclass(error_class, ValueError)
        assert issubclass(error_class, SchemaDeltaError)

    def test_enrichment_error_carries_path_and_operations(self):
        error = EnrichmentError("No schema for ref", "/properties/file", operations=["op"])
        assert error.path == "/properties/file"
        assert error.operations == ["op"]
        assert str(error) == "No schema for ref at '/properties/file'"

    def test_patch_apply_error_names_the_operation(self):
        error = PatchApplyError("Member 'a' not found", {"op": "remove", "path": "/a"})
        assert str(error) == "Member 'a' not found (remove '/a')"

    def test_partition_violation_is_an_assertion(self):
        error = PartitionViolation("n1", "moved", "added")
        assert isinstance(error, InvariantViolation)
        assert isinstance(error, AssertionError)
        assert not isinstance(error, SchemaDeltaError)
        assert (error.node_id, error.first_bucket, error.second_bucket) == ("n1", "moved", "added")
