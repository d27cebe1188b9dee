"""schemapack - Combined JSON Schema documents from Pydantic models.

schemapack combines named Pydantic models into one JSON Schema document with
an ``$id`` and hands out ``$ref`` pointers into it, for API documentation
generators and contract validators.
"""

__version__ = "0.1.0"
__description__ = "Combined JSON Schema documents from Pydantic models"

from schemapack.config import BuildOptions
from schemapack.errors import ModelImportError, SchemapackError, UnknownSchemaKeyError
from schemapack.schemas import (
    BuildJsonSchemasResult,
    JsonSchemaBuilder,
    RefFormatter,
    SchemaRef,
    build_json_schemas,
    create_build_json_schemas,
)

__all__ = [
    "__version__",
    "__description__",
    "BuildOptions",
    "BuildJsonSchemasResult",
    "JsonSchemaBuilder",
    "RefFormatter",
    "SchemaRef",
    "build_json_schemas",
    "create_build_json_schemas",
    "SchemapackError",
    "UnknownSchemaKeyError",
    "ModelImportError",
]
