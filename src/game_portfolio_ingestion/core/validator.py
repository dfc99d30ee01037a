"""JSON Schema validation for the game catalog.

This module loads the formal JSON Schema and validates the catalog document
before it is written.
"""

import json
from pathlib import Path
from typing import Any

import jsonschema
from jsonschema import ValidationError

from .types import Catalog

# Schema ships inside the package so installed copies can find it
SCHEMA_PATH = Path(__file__).parent / "schemas" / "catalog.schema.json"


def load_schema() -> dict[str, Any]:
    """Load the JSON schema from disk.

    Returns:
        Dictionary containing the JSON Schema.

    Raises:
        FileNotFoundError: If schema file doesn't exist
        json.JSONDecodeError: If schema is invalid JSON
    """
    if not SCHEMA_PATH.exists():
        raise FileNotFoundError(f"Schema file not found: {SCHEMA_PATH}")

    with SCHEMA_PATH.open("r", encoding="utf-8") as f:
        return json.load(f)  # type: ignore[no-any-return]


def validate_catalog(catalog: Catalog) -> None:
    """Validate a catalog document against the JSON Schema.

    Raises:
        ValidationError: If the document doesn't conform to the schema
        FileNotFoundError: If schema file is missing
    """
    schema = load_schema()
    jsonschema.validate(instance=catalog, schema=schema)


def validate_catalog_with_error_details(catalog: Catalog) -> tuple[bool, str | None]:
    """Validate a catalog and return detailed error information.

    Returns:
        Tuple of (is_valid, error_message). error_message is None if valid.
    """
    try:
        validate_catalog(catalog)
        return True, None
    except ValidationError as e:
        error_path = " -> ".join(str(p) for p in e.path) if e.path else "root"
        error_msg = f"Validation error at {error_path}: {e.message}"

        if e.instance:
            error_msg += f"\nInvalid value: {e.instance}"

        return False, error_msg
    except (FileNotFoundError, json.JSONDecodeError) as e:
        return False, f"Schema error: {e}"
