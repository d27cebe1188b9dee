"""JSON Schema conversion of composite models on top of Pydantic."""

import logging
from typing import Any

from pydantic import BaseModel, TypeAdapter

from ..config import BuildOptions, NameStrategy, RefStrategy, Target

logger = logging.getLogger(__name__)

# Pydantic always emits its named definitions under this key
PYDANTIC_DEFS_KEY = "$defs"

SCHEMA_URIS = {
    Target.JSON_SCHEMA_7: "http://json-schema.org/draft-07/schema#",
    Target.JSON_SCHEMA_2019_09: "https://json-schema.org/draft/2019-09/schema#",
    Target.JSON_SCHEMA_2020_12: "https://json-schema.org/draft/2020-12/schema",
}

NULL_SCHEMA = {"type": "null"}

# Keywords whose value maps names to subschemas
SCHEMA_MAP_KEYWORDS = frozenset({"properties", "patternProperties", "definitions", "$defs", "dependentSchemas"})

# Keywords holding instance data rather than subschemas
DATA_KEYWORDS = frozenset({"const", "default", "enum", "examples"})


class SchemaConverter:
    """Converts a composite model into a JSON Schema document.

    Generated references are absolute paths anchored at ``base_path``, e.g.
    ``Schema#/definitions/User`` for the base path ``["Schema#"]``.
    """

    def __init__(self, options: BuildOptions, base_path: list[str]):
        self.options = options
        self.base_path = list(base_path)

    @property
    def ref_prefix(self) -> str:
        return "/".join([*self.base_path, self.options.definition_path]) + "/"

    @property
    def ref_template(self) -> str:
        # Pydantic fills the template with str.format, so literal braces are doubled
        escaped = self.ref_prefix.replace("{", "{{").replace("}", "}}")
        return escaped + "{model}"

    def convert(self, composite: type[BaseModel]) -> dict[str, Any]:
        """Convert the composite model according to the options.

        Errors raised by Pydantic while generating the schema propagate
        unchanged.
        """
        options = self.options

        main = composite.model_json_schema(
            ref_template=self.ref_template,
            schema_generator=options.schema_generator,
            mode=options.mode,
        )
        pool = main.pop(PYDANTIC_DEFS_KEY, {})
        main.pop("title", None)

        named = self._convert_named_definitions(pool)
        main, definitions = self._apply_ref_strategy(main, pool, named)

        combined = self._apply_target(self._combine(main, definitions))

        if options.post_process is not None:
            combined = options.post_process(combined)

        logger.debug(
            f"Converted schema with {len(definitions)} definition(s) "
            f"(strategy={options.ref_strategy.value}, target={options.target.value})"
        )
        return combined

    def _convert_named_definitions(self, pool: dict[str, Any]) -> dict[str, Any]:
        """Convert the extra ``definitions`` option, merging nested defs into ``pool``."""
        named = {}
        for name, validator in self.options.definitions.items():
            schema = TypeAdapter(validator).json_schema(
                ref_template=self.ref_template,
                schema_generator=self.options.schema_generator,
                mode=self.options.mode,
            )
            pool.update(schema.pop(PYDANTIC_DEFS_KEY, {}))
            named[name] = schema
        return named

    def _apply_ref_strategy(
        self,
        main: dict[str, Any],
        pool: dict[str, Any],
        named: dict[str, Any],
    ) -> tuple[dict[str, Any], dict[str, Any]]:
        strategy = self.options.ref_strategy

        if strategy == RefStrategy.ROOT:
            return main, {**pool, **named}

        keep_recursive = strategy == RefStrategy.SEEN
        retained: set[str] = set()

        main = self._inline(main, pool, (), [], keep_recursive, retained)
        named = {
            name: self._inline(schema, pool, (), [self.options.definition_path, name], keep_recursive, retained)
            for name, schema in named.items()
        }

        # Definitions kept for recursive references may reach further ones
        kept: dict[str, Any] = {}
        while retained - set(kept):
            for name in sorted(retained - set(kept)):
                kept[name] = self._inline(
                    pool[name], pool, (name,), [self.options.definition_path, name], keep_recursive, retained
                )

        return main, {**kept, **named}

    def _definition_name(self, ref: Any) -> str | None:
        if isinstance(ref, str) and ref.startswith(self.ref_prefix):
            return ref[len(self.ref_prefix):]
        return None

    def _inline(
        self,
        node: Any,
        pool: dict[str, Any],
        stack: tuple[str, ...],
        path: list[str],
        keep_recursive: bool,
        retained: set[str],
    ) -> Any:
        """Replace internal references by copies of their definitions."""
        if isinstance(node, list):
            return [
                self._inline(item, pool, stack, path + [str(index)], keep_recursive, retained)
                for index, item in enumerate(node)
            ]
        if not isinstance(node, dict):
            return node

        name = self._definition_name(node.get("$ref"))
        if name is None or name not in pool:
            return {
                key: self._inline(value, pool, stack, path + [key], keep_recursive, retained)
                for key, value in node.items()
            }

        siblings = {
            key: self._inline(value, pool, stack, path + [key], keep_recursive, retained)
            for key, value in node.items()
            if key != "$ref"
        }

        if name in stack:
            if keep_recursive:
                retained.add(name)
                return {"$ref": node["$ref"], **siblings}
            logger.warning(f"Recursive reference detected at #/{'/'.join(path)}; defaulting to any")
            return {}

        resolved = self._inline(pool[name], pool, stack + (name,), path, keep_recursive, retained)
        return {**resolved, **siblings}

    def _combine(self, main: dict[str, Any], definitions: dict[str, Any]) -> dict[str, Any]:
        name = self.options.name
        definition_path = self.options.definition_path

        if name is not None and self.options.name_strategy == NameStrategy.TITLE:
            main["title"] = name
            name = None

        if name is None:
            if definitions:
                return {**main, definition_path: definitions}
            return main

        return {
            "$ref": self.ref_prefix + name,
            definition_path: {**definitions, name: main},
        }

    def _apply_target(self, combined: dict[str, Any]) -> dict[str, Any]:
        target = self.options.target
        if target == Target.OPENAPI_3:
            return to_openapi(combined, SCHEMA_MAP_KEYWORDS | {self.options.definition_path})
        return {**combined, "$schema": SCHEMA_URIS[target]}


def to_openapi(node: Any, schema_maps: frozenset[str] = SCHEMA_MAP_KEYWORDS) -> Any:
    """Rewrite JSON Schema null unions and constants into OpenAPI 3.0 form."""
    if isinstance(node, list):
        return [to_openapi(item, schema_maps) for item in node]
    if not isinstance(node, dict):
        return node

    rewritten = {}
    for key, value in node.items():
        if key in DATA_KEYWORDS:
            rewritten[key] = value
        elif key in schema_maps and isinstance(value, dict):
            rewritten[key] = {name: to_openapi(schema, schema_maps) for name, schema in value.items()}
        else:
            rewritten[key] = to_openapi(value, schema_maps)

    if "const" in rewritten:
        rewritten["enum"] = [rewritten.pop("const")]

    variants = rewritten.get("anyOf")
    if isinstance(variants, list) and NULL_SCHEMA in variants:
        rest = [variant for variant in variants if variant != NULL_SCHEMA]
        others = {key: value for key, value in rewritten.items() if key != "anyOf"}
        if len(rest) == 1:
            rewritten = {**rest[0], **others}
        else:
            rewritten = {**others, "anyOf": rest}
        rewritten["nullable"] = True

    return rewritten
