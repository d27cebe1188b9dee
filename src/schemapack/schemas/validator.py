"""Meta-schema compliance checks for generated documents."""

import logging
from typing import Any

import jsonschema
from jsonschema.exceptions import SchemaError

logger = logging.getLogger(__name__)


def check_schema_compliance(document: dict[str, Any]) -> list[str]:
    """Validate a generated document against the meta-schema of its dialect.

    The dialect is taken from ``$schema``; documents without one (OpenAPI
    output) are checked as Draft 7.

    Args:
        document: Generated JSON Schema document

    Returns:
        List of compliance errors (empty if the document is valid)
    """
    validator_class = jsonschema.validators.validator_for(document, default=jsonschema.Draft7Validator)
    schema_id = document.get("$id", "<no $id>")

    try:
        validator_class.check_schema(document)
    except SchemaError as e:
        location = "/".join(str(part) for part in e.path) or "root"
        error_msg = f"Schema {schema_id} is invalid at {location}: {e.message}"
        logger.debug(error_msg)
        return [error_msg]

    logger.debug(f"Schema {schema_id} is valid ({validator_class.__name__})")
    return []
