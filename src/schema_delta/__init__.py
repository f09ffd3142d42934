"""schema-delta - identity-based diffs and JSON patches for schema trees"""

# Package version
__version__ = "0.1.0"

from schema_delta.config import SchemaDeltaConfig
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
from schema_delta.path import Path, json_pointer_to_path
from schema_delta.tree import SchemaTree, parse_schema, serialize_tree
from schema_delta.engine import build_patches
from schema_delta.diff.session import SchemaDiff

__all__ = [
    "__version__",
    "SchemaDeltaConfig",
    "EnrichmentError",
    "InvalidOperation",
    "InvalidPath",
    "InvariantViolation",
    "NotFound",
    "PartitionViolation",
    "PatchApplyError",
    "SchemaDeltaError",
    "Path",
    "json_pointer_to_path",
    "SchemaTree",
    "parse_schema",
    "serialize_tree",
    "build_patches",
    "SchemaDiff",
]
