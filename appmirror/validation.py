"""
Validation — Input validation and error handling utilities.

Provides consistent validation patterns for on-disk mirror artifacts
and configuration files.

## Usage

    from appmirror.validation import validate_json_file

    try:
        data = validate_json_file(config_path, "config.json")
    except ValidationError as e:
        print(f"Validation failed: {e}")
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional


class ValidationError(Exception):
    """Raised when validation fails."""

    def __init__(self, message: str, field: Optional[str] = None, details: Optional[Dict] = None):
        self.message = message
        self.field = field
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.field:
            return f"{self.field}: {self.message}"
        return self.message


class ConfigurationError(Exception):
    """Raised when configuration is missing or invalid."""
    pass


def validate_path_exists(path: Path, description: str = "Path") -> None:
    """Validate that a path exists."""
    if not path.exists():
        raise ValidationError(f"{description} does not exist: {path}")


def validate_file_readable(path: Path, description: str = "File") -> bytes:
    """Validate that a file exists and is readable. Returns its bytes."""
    if not path.exists():
        raise ValidationError(f"{description} is missing", details={"path": str(path)})

    if not path.is_file():
        raise ValidationError(f"{description} is not a file: {path}")

    try:
        return path.read_bytes()
    except OSError as e:
        raise ValidationError(f"{description} cannot be read: {e}", details={"path": str(path)})


def parse_json_bytes(content: bytes, description: str = "JSON document") -> Any:
    """Parse UTF-8 JSON content, raising ValidationError when malformed."""
    try:
        return json.loads(content.decode("utf-8"))
    except UnicodeDecodeError as e:
        raise ValidationError(
            f"{description} is not valid UTF-8",
            details={"error": str(e)},
        )
    except json.JSONDecodeError as e:
        raise ValidationError(
            f"Invalid JSON in {description}: {e.msg} (line {e.lineno})",
            details={"error": str(e), "line": e.lineno},
        )


def validate_json_file(path: Path, description: str = "JSON file") -> Any:
    """Validate and load a JSON file."""
    content = validate_file_readable(path, description)
    try:
        return parse_json_bytes(content, description)
    except ValidationError as e:
        e.details.setdefault("path", str(path))
        raise
