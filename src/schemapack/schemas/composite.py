"""Combination of named validators into one object-shaped Pydantic model."""

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, create_model

logger = logging.getLogger(__name__)

COMPOSITE_MODEL_NAME = "CompositeSchema"


def combine_models(
    models: Mapping[str, Any],
    additional_properties: bool = False,
) -> type[BaseModel]:
    """Build a model with one required property per key.

    Keys become property names verbatim through field aliases, so they do not
    need to be valid Python identifiers. Each validator is used as-is for its
    property.

    Args:
        models: Mapping of property name to a type Pydantic can validate
        additional_properties: Whether unknown properties are accepted

    Returns:
        Dynamically created Pydantic model class
    """
    fields: dict[str, Any] = {}
    for index, (key, validator) in enumerate(models.items()):
        if not isinstance(key, str) or not key:
            raise TypeError(f"Model keys must be non-empty strings, got: {key!r}")
        fields[f"field_{index}"] = (validator, Field(alias=key))

    logger.debug(f"Combining {len(fields)} model(s) into {COMPOSITE_MODEL_NAME}")

    return create_model(
        COMPOSITE_MODEL_NAME,
        __config__=ConfigDict(extra="allow" if additional_properties else "forbid"),
        **fields,
    )
