"""Default data values for JSON Schema declarations."""

from typing import Any, Mapping

from schema_delta.errors import NotFound

DEFAULT_STRING = ""
DEFAULT_NUMBER = 0
DEFAULT_BOOLEAN = False

_PRIMITIVE_DEFAULTS = {
    "string": DEFAULT_STRING,
    "number": DEFAULT_NUMBER,
    "integer": DEFAULT_NUMBER,
    "boolean": DEFAULT_BOOLEAN,
}


def generate_default_value(
    schema: Mapping[str, Any] | None,
    ref_schemas: Mapping[str, Mapping[str, Any]] | None = None,
    array_item_count: int = 0,
) -> Any:
    """Build the value a new data row gets for a schema.

    Args:
        schema: JSON Schema declaration as produced by serialize_node.
        ref_schemas: Referenced schema id -> JSON Schema, used for ``$ref``.
        array_item_count: Number of default elements generated for arrays.

    Returns:
        The declared ``default`` if present, otherwise ``""`` / ``0`` /
        ``False`` for primitives, a list for arrays, and an object with one
        entry per property for objects.

    Raises:
        NotFound: If a ``$ref`` target is missing from ref_schemas.
    """
    if schema is None:
        return {}
    return _generate(schema, ref_schemas or {}, array_item_count, ())


def _generate(
    schema: Mapping[str, Any],
    ref_schemas: Mapping[str, Mapping[str, Any]],
    array_item_count: int,
    resolving: tuple[str, ...],
) -> Any:
    if schema.get("default") is not None:
        return schema["default"]

    if "$ref" in schema:
        ref = schema["$ref"]
        if ref in resolving:
            # Self-referencing schema: stop at an empty object
            return {}
        target = ref_schemas.get(ref)
        if target is None:
            raise NotFound(f"Referenced schema {ref!r} not found", key=ref)
        return _generate(target, ref_schemas, array_item_count, resolving + (ref,))

    schema_type = schema.get("type")
    if schema_type == "object":
        return {
            name: _generate(child, ref_schemas, array_item_count, resolving)
            for name, child in (schema.get("properties") or {}).items()
        }
    if schema_type == "array":
        items = schema.get("items")
        if not array_item_count or items is None:
            return []
        return [_generate(items, ref_schemas, array_item_count, resolving) for _ in range(array_item_count)]

    return _PRIMITIVE_DEFAULTS.get(schema_type)
