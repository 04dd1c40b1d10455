"""JSON Schema validation for placement records and work lists.

This module loads the bundled JSON Schemas and validates documents before
they are turned into typed objects.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Any

import jsonschema
from jsonschema import ValidationError

# Schemas ship inside the package
SCHEMA_DIR = Path(__file__).parent / "schemas"
PLACEMENT_SCHEMA = "placement.schema.json"
WORKLIST_SCHEMA = "worklist.schema.json"


@lru_cache(maxsize=None)
def load_schema(name: str) -> dict[str, Any]:
    """Load a JSON schema from the package.

    Args:
        name: File name inside the schema directory

    Returns:
        Dictionary containing the JSON Schema.

    Raises:
        FileNotFoundError: If schema file doesn't exist
        json.JSONDecodeError: If schema is invalid JSON
    """
    path = SCHEMA_DIR / name
    if not path.exists():
        raise FileNotFoundError(f"Schema file not found: {path}")

    with path.open("r", encoding="utf-8") as f:
        return json.load(f)  # type: ignore[no-any-return]


def _describe(e: ValidationError) -> str:
    error_path = " -> ".join(str(p) for p in e.path) if e.path else "root"
    error_msg = f"Validation error at {error_path}: {e.message}"

    # Add context if available
    if e.instance:
        error_msg += f"\nInvalid value: {e.instance}"

    return error_msg


def validate_placement(record: dict[str, Any]) -> None:
    """Validate a groundcover record against the placement schema.

    Raises:
        ValidationError: If the record doesn't conform to the schema
    """
    jsonschema.validate(instance=record, schema=load_schema(PLACEMENT_SCHEMA))


def validate_placement_with_error_details(record: dict[str, Any]) -> tuple[bool, str | None]:
    """Validate a groundcover record and return detailed error information.

    Returns:
        Tuple of (is_valid, error_message). error_message is None if valid.
    """
    try:
        validate_placement(record)
        return True, None
    except ValidationError as e:
        return False, _describe(e)
    except (FileNotFoundError, json.JSONDecodeError) as e:
        return False, f"Schema error: {e}"


def validate_worklist(document: dict[str, Any]) -> None:
    """Validate a work list document.

    Args:
        document: The parsed work list

    Raises:
        ValidationError: If the document doesn't conform to the schema
        FileNotFoundError: If schema file is missing
        json.JSONDecodeError: If schema is invalid
    """
    jsonschema.validate(instance=document, schema=load_schema(WORKLIST_SCHEMA))


def validate_worklist_with_error_details(document: dict[str, Any]) -> tuple[bool, str | None]:
    """Validate a work list and return detailed error information.

    This is a convenience wrapper that catches validation errors and
    returns user-friendly error messages.

    Args:
        document: The parsed work list

    Returns:
        Tuple of (is_valid, error_message). error_message is None if valid.
    """
    try:
        validate_worklist(document)
        return True, None
    except ValidationError as e:
        return False, _describe(e)
    except (FileNotFoundError, json.JSONDecodeError) as e:
        return False, f"Schema error: {e}"
