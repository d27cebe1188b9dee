"""Combined JSON Schema documents with $ref helpers for named models."""

import logging
from collections.abc import Iterable, Mapping
from typing import Any, NamedTuple, NotRequired, TypedDict

from ..config import BuildOptions, coerce_options
from ..errors import UnknownSchemaKeyError
from .composite import combine_models
from .converter import SchemaConverter

logger = logging.getLogger(__name__)

# "$ref" is not an identifier, so the functional form is required
SchemaRef = TypedDict("SchemaRef", {"$ref": str, "description": NotRequired[str]})


class RefFormatter:
    """Formats ``$ref`` records pointing at properties of one built document."""

    def __init__(self, schema_id: str, keys: Iterable[str]):
        self.schema_id = schema_id
        self.keys = frozenset(keys)

    def __call__(self, key: str) -> SchemaRef:
        if key not in self.keys:
            raise UnknownSchemaKeyError(key, self.keys)
        return {"$ref": f"{self.schema_id}#/properties/{key}"}

    def __repr__(self) -> str:
        return f"RefFormatter(schema_id={self.schema_id!r}, keys={sorted(self.keys)!r})"


class BuildJsonSchemasResult(NamedTuple):
    """The combined document (always exactly one) and its $ref formatter."""
    schemas: list[dict[str, Any]]
    ref: RefFormatter


def build_json_schemas(
    models: Mapping[str, Any],
    opts: BuildOptions | Mapping[str, Any] | None = None,
) -> BuildJsonSchemasResult:
    """Combine named models into one JSON Schema document.

    Every model becomes a required property of a single object schema whose
    ``$id`` is ``opts["$id"]`` (default ``"Schema"``). Internal paths are always
    anchored at ``"{$id}#"``; a caller-supplied ``basePath`` is ignored.

    Args:
        models: Mapping of property name to a type Pydantic can validate
        opts: BuildOptions or a mapping of option keys (``$id``, ``target``, ...)

    Returns:
        BuildJsonSchemasResult with a one-element ``schemas`` list and a
        ``ref`` callable producing ``{"$ref": "{$id}#/properties/{key}"}``
    """
    options = coerce_options(opts)
    schema_id = options.effective_id

    logger.debug(
        f"Building JSON schema {schema_id!r} from {len(models)} model(s) "
        f"(strategy={options.ref_strategy.value})"
    )

    composite = combine_models(models, additional_properties=options.additional_properties)
    converter = SchemaConverter(options, base_path=[f"{schema_id}#"])

    json_schema = {
        "$id": schema_id,
        **converter.convert(composite),
    }

    return BuildJsonSchemasResult(
        schemas=[json_schema],
        ref=RefFormatter(schema_id, models.keys()),
    )


class JsonSchemaBuilder:
    """build_json_schemas with default options bound.

    Per-call options are shallow-merged over the defaults: every field set in
    the call wins, untouched defaults are kept.
    """

    def __init__(self, default_options: BuildOptions | Mapping[str, Any] | None = None):
        # Re-validated so later changes to the caller's mapping have no effect
        self.defaults = BuildOptions(**coerce_options(default_options).explicit_options())

    def __call__(
        self,
        models: Mapping[str, Any],
        opts: BuildOptions | Mapping[str, Any] | None = None,
    ) -> BuildJsonSchemasResult:
        return build_json_schemas(models, self.defaults.merged_with(opts))

    def __repr__(self) -> str:
        return f"JsonSchemaBuilder(defaults={self.defaults.explicit_options()!r})"


def create_build_json_schemas(
    default_options: BuildOptions | Mapping[str, Any] | None = None,
) -> JsonSchemaBuilder:
    """Return a build_json_schemas variant with ``default_options`` pre-bound."""
    return JsonSchemaBuilder(default_options)
