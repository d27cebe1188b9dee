"""Exceptions raised by schemapack."""


class SchemapackError(Exception):
    """Base class for schemapack errors."""
    pass


class UnknownSchemaKeyError(SchemapackError, KeyError):
    """Raised when a $ref is requested for a key that was not built."""

    def __init__(self, key: str, known_keys: frozenset[str]):
        self.key = key
        self.known_keys = known_keys
        known = ", ".join(sorted(known_keys)) or "<none>"
        super().__init__(f"Unknown schema key '{key}'. Known keys: {known}")

    def __str__(self) -> str:
        # KeyError would repr() the message
        return self.args[0]


class ModelImportError(SchemapackError):
    """Raised when a model mapping cannot be imported from a reference."""
    pass
