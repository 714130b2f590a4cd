import pytest

from clarion.clarioncore.ai_clients.schema import (
    enforce_schema_compliance,
    extract_output_schema,
)
from clarion.clarioncore.errors import SchemaShapeError


def _nested():
    return {
        "type": "object",
        "properties": {
            "summary": {"type": "string"},
            "file_changes": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "action": {"type": "string"},
                        "path": {"type": "string"},
                        "meta": {
                            "type": "object",
                            "properties": {"lines": {"type": "integer"}},
                        },
                    },
                    "required": ["action"],
                },
            },
        },
    }


def test_every_object_is_closed_and_fully_required():
    schema = enforce_schema_compliance(_nested())

    assert schema["additionalProperties"] is False
    assert schema["required"] == ["summary", "file_changes"]

    item = schema["properties"]["file_changes"]["items"]
    assert item["additionalProperties"] is False
    assert item["required"] == ["action", "path", "meta"]

    meta = item["properties"]["meta"]
    assert meta["additionalProperties"] is False
    assert meta["required"] == ["lines"]


def test_non_object_nodes_untouched():
    schema = enforce_schema_compliance(_nested())
    assert "additionalProperties" not in schema["properties"]["summary"]
    assert "required" not in schema["properties"]["file_changes"]


def test_object_without_properties_gets_closed_only():
    schema = enforce_schema_compliance({"type": "object"})
    assert schema == {"type": "object", "additionalProperties": False}


def test_extract_nested_schema_is_a_copy():
    original = {"schema": _nested()}
    out = extract_output_schema(original)

    assert out["required"] == ["summary", "file_changes"]
    # caller's schema is left alone
    assert "additionalProperties" not in original["schema"]


def test_extract_bare_schema():
    out = extract_output_schema({"type": "object", "properties": {"a": {"type": "string"}}})
    assert out["required"] == ["a"]


@pytest.mark.parametrize("value", [None, {}, {"schema": {}}])
def test_extract_empty_returns_none(value):
    assert extract_output_schema(value) is None


@pytest.mark.parametrize(
    "value",
    [
        {"schema": "not a dict"},
        {"foo": "bar"},
        {"schema": ["type", "object"], "type": "object"},
    ],
)
def test_extract_bad_shape_raises(value):
    with pytest.raises(SchemaShapeError):
        extract_output_schema(value)
