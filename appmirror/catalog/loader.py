"""
Catalog Loader — Load and validate catalog YAML files.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError as PydanticValidationError

from ..validation import ValidationError, validate_path_exists
from .models import Catalog, CatalogFile


def load_yaml(path: Path) -> Dict[str, Any]:
    """Load a YAML file and return its contents."""
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_catalog(path: Optional[Path] = None) -> Catalog:
    """
    Load a catalog from a YAML file.

    Args:
        path: Catalog file. When None, the built-in catalog is returned.

    Returns:
        Frozen Catalog

    Raises:
        ValidationError: If the file is missing, not YAML, or fails the schema
    """
    if path is None:
        return Catalog()

    path = Path(path)
    validate_path_exists(path, "Catalog file")

    try:
        data = load_yaml(path)
    except yaml.YAMLError as e:
        raise ValidationError(f"Invalid YAML in catalog: {e}", details={"path": str(path)})

    if not isinstance(data, dict):
        raise ValidationError(
            "Catalog must be a mapping",
            details={"path": str(path), "type": type(data).__name__},
        )

    try:
        model = CatalogFile(**data)
    except PydanticValidationError as e:
        raise ValidationError(
            f"Catalog does not match schema: {e.error_count()} error(s)",
            details={"path": str(path), "errors": e.errors()},
        )

    return Catalog.from_file_model(model)
