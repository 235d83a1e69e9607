"""Tests for hookgen.parser.resolver."""

from __future__ import annotations

import pytest

from hookgen.exceptions import SpecParseError
from hookgen.parser.resolver import resolve_component, resolve_pointer


# ---------------------------------------------------------------------------
# resolve_pointer
# ---------------------------------------------------------------------------


class TestResolvePointer:
    """Test single JSON Pointer resolution."""

    def test_resolves_schema_ref(self) -> None:
        root = {"components": {"schemas": {"Pet": {"type": "object"}}}}
        assert resolve_pointer("#/components/schemas/Pet", root) == {"type": "object"}

    def test_resolves_list_index(self) -> None:
        root = {"servers": [{"url": "a"}, {"url": "b"}]}
        assert resolve_pointer("#/servers/1", root) == {"url": "b"}

    def test_missing_key_raises(self) -> None:
        with pytest.raises(SpecParseError, match="key 'Missing' not found"):
            resolve_pointer("#/components/schemas/Missing", {"components": {"schemas": {}}})

    def test_external_ref_raises(self) -> None:
        with pytest.raises(SpecParseError, match="External \\$ref not supported"):
            resolve_pointer("other.yaml#/components/schemas/Pet", {})

    def test_invalid_list_index_raises(self) -> None:
        with pytest.raises(SpecParseError, match="invalid array index"):
            resolve_pointer("#/servers/x", {"servers": []})

    def test_json_pointer_escaping(self) -> None:
        root = {"paths": {"/users/{id}": {"get": {"summary": "Get"}}}}
        result = resolve_pointer("#/paths/~1users~1{id}/get", root)
        assert result == {"summary": "Get"}


# ---------------------------------------------------------------------------
# resolve_component
# ---------------------------------------------------------------------------


class TestResolveComponent:
    """Test following component-level refs (parameters, bodies, responses)."""

    def test_non_ref_passthrough(self) -> None:
        param = {"name": "limit", "in": "query"}
        assert resolve_component(param, {}) is param

    def test_resolves_parameter_ref(self) -> None:
        root = {"components": {"parameters": {"Limit": {"name": "limit", "in": "query"}}}}
        result = resolve_component({"$ref": "#/components/parameters/Limit"}, root)
        assert result["name"] == "limit"

    def test_follows_chained_refs(self) -> None:
        root = {
            "components": {
                "responses": {
                    "NotFound": {"$ref": "#/components/responses/Error"},
                    "Error": {"description": "Error"},
                }
            }
        }
        result = resolve_component({"$ref": "#/components/responses/NotFound"}, root)
        assert result == {"description": "Error"}

    def test_circular_chain_raises(self) -> None:
        root = {
            "components": {
                "parameters": {
                    "A": {"$ref": "#/components/parameters/B"},
                    "B": {"$ref": "#/components/parameters/A"},
                }
            }
        }
        with pytest.raises(SpecParseError, match="Circular \\$ref chain"):
            resolve_component({"$ref": "#/components/parameters/A"}, root)

    def test_does_not_mutate_document(self) -> None:
        root = {"components": {"requestBodies": {"Body": {"required": True}}}}
        resolve_component({"$ref": "#/components/requestBodies/Body"}, root)
        assert root == {"components": {"requestBodies": {"Body": {"required": True}}}}
