"""Combined JSON Schema generation from Pydantic models.

This package combines named models into a single JSON Schema document with
an ``$id``, converts it through Pydantic's schema generator, and formats
``$ref`` pointers into the resulting document.
"""

from .builder import (
    BuildJsonSchemasResult,
    JsonSchemaBuilder,
    RefFormatter,
    SchemaRef,
    build_json_schemas,
    create_build_json_schemas,
)
from .validator import check_schema_compliance

__all__ = [
    "BuildJsonSchemasResult",
    "JsonSchemaBuilder",
    "RefFormatter",
    "SchemaRef",
    "build_json_schemas",
    "create_build_json_schemas",
    "check_schema_compliance",
]
