# schema.py
from __future__ import annotations
import copy
from typing import Any, Dict, Mapping, Optional

from clarion.clarioncore.errors import SchemaShapeError


def enforce_schema_compliance(schema: Dict[str, Any]) -> Dict[str, Any]:
    """
    Rewrite a JSON schema in place for strict structured output:
      - every object node gets `additionalProperties: false`
      - `required` lists every declared property, in declaration order
    Recursion always descends into `properties` and `items`, whatever the
    node type. Returns the same dict for convenience.
    """
    if schema.get("type") == "object":
        schema["additionalProperties"] = False
        properties = schema.get("properties")
        if isinstance(properties, dict):
            schema["required"] = list(properties.keys())

    properties = schema.get("properties")
    if isinstance(properties, dict):
        for child in properties.values():
            if isinstance(child, dict):
                enforce_schema_compliance(child)

    items = schema.get("items")
    if isinstance(items, dict):
        enforce_schema_compliance(items)

    return schema


def extract_output_schema(output_schema: Optional[Mapping[str, Any]]) -> Optional[Dict[str, Any]]:
    """
    Pull the JSON schema out of a run request's `output_schema` and return a
    strictified deep copy. Accepts `{"schema": {...}}` or a bare schema.
    Returns None when no schema was supplied.
    """
    if not output_schema:
        return None
    if not isinstance(output_schema, Mapping):
        raise SchemaShapeError(
            f"output_schema must be an object, got {type(output_schema).__name__}"
        )

    nested = output_schema.get("schema")
    if isinstance(nested, Mapping):
        actual = nested
    elif "schema" not in output_schema and "type" in output_schema:
        actual = output_schema
    else:
        raise SchemaShapeError(
            "output_schema format is incorrect, expected a nested 'schema' object"
        )
    if not actual:
        return None

    return enforce_schema_compliance(copy.deepcopy(dict(actual)))
