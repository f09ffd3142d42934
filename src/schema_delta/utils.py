"""Utility helpers for schema-delta."""

import sys
import uuid
from typing import Optional

from loguru import logger

from schema_delta.config import SchemaDeltaConfig


def setup_logging(
    log_level: Optional[str] = None,
    config: Optional[SchemaDeltaConfig] = None,
) -> None:
    """Configure loguru to write to stderr at the requested level.

    The library itself never calls this; applications and tests opt in.
    """
    level = log_level or (config or SchemaDeltaConfig()).log_level
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
        "<cyan>{name}</cyan> - <level>{message}</level>",
        backtrace=False,
    )
    logger.debug(f"Logging configured at level {level}")


def mint_node_id(prefix: str = "") -> str:
    """Mint a fresh opaque node id."""
    return f"{prefix}{uuid.uuid4()}"
