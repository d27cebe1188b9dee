"""Import of model mappings from ``package.module:attribute`` references."""

import importlib
import logging
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from .errors import ModelImportError

logger = logging.getLogger(__name__)


def load_models(reference: str, search_path: Path | None = None) -> Mapping[str, Any]:
    """Import a mapping of models from a reference.

    The attribute may be a mapping of key to model, or a function returning
    one.

    Args:
        reference: ``package.module:ATTRIBUTE`` (dotted attribute access allowed)
        search_path: Directory made importable while importing, if given

    Returns:
        Mapping of key to model

    Raises:
        ModelImportError: If the module or attribute cannot be resolved, or the
            attribute is not a mapping with string keys
    """
    module_name, _, attribute = reference.partition(":")
    if not module_name or not attribute:
        raise ModelImportError(f"Invalid model reference '{reference}'. Expected 'package.module:ATTRIBUTE'")

    added_path = None
    if search_path is not None and str(search_path) not in sys.path:
        added_path = str(search_path)
        sys.path.insert(0, added_path)

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ModelImportError(f"Cannot import module '{module_name}': {e}") from e
    finally:
        if added_path is not None and added_path in sys.path:
            sys.path.remove(added_path)

    target: Any = module
    for part in attribute.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as e:
            raise ModelImportError(f"Module '{module_name}' has no attribute '{attribute}'") from e

    if callable(target) and not isinstance(target, type):
        target = target()

    if not isinstance(target, Mapping):
        raise ModelImportError(
            f"'{reference}' must be a mapping of names to models, got {type(target).__name__}"
        )

    invalid_keys = [key for key in target if not isinstance(key, str)]
    if invalid_keys:
        raise ModelImportError(f"'{reference}' has non-string keys: {invalid_keys!r}")

    logger.debug(f"Loaded {len(target)} model(s) from {reference}")
    return target
