"""Patch operations: building, generation, enrichment, replay and description."""

from schema_delta.patch.operations import (
    AddOperation,
    BaseOperation,
    MoveOperation,
    PatchOperation,
    RemoveOperation,
    ReplaceOperation,
    dump_operations,
    parse_operations,
)
from schema_delta.patch.builder import UNSET, PatchBuilder
from schema_delta.patch.ordering import order_additions, order_removals
from schema_delta.patch.generator import PatchGenerator
from schema_delta.patch.defaults import generate_default_value
from schema_delta.patch.enricher import PatchEnricher
from schema_delta.patch.apply import apply_operation, apply_patches, apply_schema_patches
from schema_delta.patch.describe import (
    PatchDescription,
    PropertyChange,
    TypeChange,
    describe_patches,
)

__all__ = [
    # Operations
    "AddOperation",
    "BaseOperation",
    "MoveOperation",
    "PatchOperation",
    "RemoveOperation",
    "ReplaceOperation",
    "dump_operations",
    "parse_operations",
    # Building
    "UNSET",
    "PatchBuilder",
    # Generation
    "order_additions",
    "order_removals",
    "PatchGenerator",
    # Enrichment
    "generate_default_value",
    "PatchEnricher",
    # Replay
    "apply_operation",
    "apply_patches",
    "apply_schema_patches",
    # Description
    "PatchDescription",
    "PropertyChange",
    "TypeChange",
    "describe_patches",
]
