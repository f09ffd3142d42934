"""
Exceptions raised by the schema diff and patch engine.
"""


class SchemaDeltaError(Exception):
    """Base exception for all recoverable schema-delta errors."""

    pass


class NotFound(SchemaDeltaError, KeyError):
    """Raised when a node id or path does not exist in a tree."""

    def __init__(self, message: str, key: str | None = None):
        self.key = key
        super().__init__(message)

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message
        return str(self.args[0]) if self.args else ""


class InvalidPath(SchemaDeltaError, ValueError):
    """Raised when a JSON Pointer cannot be parsed into a schema path."""

    pass


class InvalidOperation(SchemaDeltaError, ValueError):
    """Raised when a patch operation is built from invalid arguments."""

    pass


class EnrichmentError(SchemaDeltaError):
    """Raised when a default data value cannot be derived for an added node.

    The operations generated before enrichment are kept on the exception so the
    caller can decide whether to apply them without data defaults.
    """

    def __init__(self, message: str, path: str, operations: list | None = None):
        self.path = path
        self.operations = list(operations or [])
        super().__init__(f"{message} at {path!r}")


class PatchApplyError(SchemaDeltaError):
    """Raised when an operation cannot be replayed onto a document."""

    def __init__(self, message: str, operation: dict | None = None):
        self.operation = operation
        location = ""
        if operation is not None:
            location = f" ({operation.get('op')} {operation.get('path')!r})"
        super().__init__(f"{message}{location}")


class InvariantViolation(AssertionError):
    """Raised when an internal consistency check of the engine fails.

    This is a programming error in change collection or patch scheduling, not a
    condition a caller can recover from.
    """

    def __init__(self, message: str, node_id: str | None = None):
        self.node_id = node_id
        super().__init__(message)


class PartitionViolation(InvariantViolation):
    """Raised when a node id lands in more than one change bucket."""

    def __init__(self, node_id: str, first_bucket: str, second_bucket: str):
        self.first_bucket = first_bucket
        self.second_bucket = second_bucket
        super().__init__(
            f"Node {node_id!r} classified as both {first_bucket!r} and {second_bucket!r}",
            node_id,
        )
