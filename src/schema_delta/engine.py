"""One-call pipeline: snapshots in, ordered patch operations out."""

from typing import Any, Mapping, Optional

from loguru import logger

from schema_delta.config import SchemaDeltaConfig
from schema_delta.diff.coalescer import coalesce_changes
from schema_delta.diff.collector import collect_changes
from schema_delta.diff.index import NodePathIndex
from schema_delta.patch.enricher import PatchEnricher
from schema_delta.patch.generator import PatchGenerator
from schema_delta.patch.operations import BaseOperation
from schema_delta.tree.tree import SchemaTree


def build_patches(
    base_tree: SchemaTree,
    current_tree: SchemaTree,
    *,
    enrich: Optional[bool] = None,
    ref_schemas: Optional[Mapping[str, Mapping[str, Any]]] = None,
    config: Optional[SchemaDeltaConfig] = None,
    index: Optional[NodePathIndex] = None,
) -> list[BaseOperation]:
    """Diff two snapshots and compile the result into patch operations.

    Args:
        base_tree: The saved snapshot the patch applies to.
        current_tree: The snapshot the patch should produce.
        enrich: Append data-scope defaults for added fields. Defaults to
            ``config.enrich_defaults``.
        ref_schemas: Referenced schema id -> JSON Schema, for ref defaults.
        config: Settings; ``SchemaDeltaConfig()`` when omitted.
        index: Prebuilt path index of base_tree, reused across calls.

    Raises:
        EnrichmentError: If enrichment needs a referenced schema that is missing.
    """
    config = config or SchemaDeltaConfig()
    if enrich is None:
        enrich = config.enrich_defaults

    changes = collect_changes(base_tree, current_tree, index)
    coalesced = coalesce_changes(changes)
    operations = PatchGenerator(base_tree, current_tree).generate(coalesced)

    if enrich and operations:
        operations = PatchEnricher(current_tree, ref_schemas).enrich(operations)

    logger.debug(f"Built {len(operations)} operations (enrich={enrich})")
    return operations
