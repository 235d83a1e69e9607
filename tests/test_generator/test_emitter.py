"""Tests for hookgen.generator.emitter.

Covers:
- The complete hooks file for a single-endpoint group
- Query hooks for GET/HEAD, mutation hooks with invalidation otherwise
- Minimal imports: only symbols and types the hooks actually use
- Parameter interfaces: naming, de-duplication, collision handling
- Request/response type selection
- Per-endpoint failure isolation and path placeholder diagnostics
- Custom templates, template fallback, and deterministic output
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import pytest

from hookgen.exceptions import TemplateError
from hookgen.generator.classifier import classify_endpoints
from hookgen.generator.emitter import (
    SymbolTracker,
    emit_artifact,
    emit_artifacts,
    file_stem,
    used_symbols,
)
from hookgen.generator.types import Resolution
from hookgen.models import Artifact, GeneratorConfig
from hookgen.parser.extractor import build_registry


def _emit(document: dict[str, Any], config: Optional[GeneratorConfig] = None) -> dict[str, Artifact]:
    return emit_artifacts(classify_endpoints(document), build_registry(document), config)


def _document(paths: dict[str, Any], schemas: Optional[dict[str, Any]] = None) -> dict[str, Any]:
    return {
        "openapi": "3.0.3",
        "info": {"title": "Test", "version": "1.0.0"},
        "paths": paths,
        "components": {"schemas": schemas or {}},
    }


def _json(schema: dict[str, Any]) -> dict[str, Any]:
    return {"content": {"application/json": {"schema": schema}}}


def _ok(schema: dict[str, Any]) -> dict[str, Any]:
    return {"200": {"description": "OK", **_json(schema)}}


USER_BINDINGS = """\
// User API Hooks
import { useQuery } from '@tanstack/react-query';
import axios from 'axios';
import type { User } from './user.types';

export interface GetUserParams {
  id: number;
}

/**
 * Get a user
 * GET /users/{id}
 */
export const useGetUser = (params: GetUserParams) => {
  return useQuery({
    queryKey: ['userController_getUser', params],
    queryFn: async () => {
      const { data } = await axios.get<User>(`/users/${params.id}`);
      return data;
    },
  });
};
"""

USER_TYPES = """\
export interface User {
  id: number;
  name: string;
  email?: string | null;
}
"""


# ------------------------------------------------------------------ #
# End-to-end: the users document
# ------------------------------------------------------------------ #


class TestUserArtifact:
    """One tagged GET endpoint returning a referenced schema."""

    @pytest.fixture()
    def artifact(self, users_raw: dict[str, Any]) -> Artifact:
        return _emit(users_raw)["User"]

    def test_bindings(self, artifact: Artifact) -> None:
        assert artifact.bindings == USER_BINDINGS

    def test_types(self, artifact: Artifact) -> None:
        assert artifact.types == USER_TYPES

    def test_metadata(self, artifact: Artifact) -> None:
        assert artifact.file_stem == "user"
        assert artifact.type_names == ["User"]
        assert artifact.imported_types == ["User"]
        assert artifact.imports == ["useQuery", "axios"]
        assert artifact.diagnostics == []

    def test_no_mutation_imports_without_writes(self, artifact: Artifact) -> None:
        assert "useMutation" not in artifact.bindings
        assert "useQueryClient" not in artifact.bindings

    def test_idempotent(self, users_raw: dict[str, Any]) -> None:
        first = _emit(users_raw)["User"]
        second = _emit(users_raw)["User"]
        assert first.bindings == second.bindings
        assert first.types == second.types


# ------------------------------------------------------------------ #
# The shop document: writes, closures, untagged endpoints
# ------------------------------------------------------------------ #


class TestShopArtifacts:
    @pytest.fixture()
    def artifacts(self, shop_raw: dict[str, Any]) -> dict[str, Artifact]:
        return _emit(shop_raw)

    def test_one_artifact_per_tag(self, artifacts: dict[str, Artifact]) -> None:
        assert list(artifacts) == ["Orders", "Catalog", "General"]
        assert [a.file_stem for a in artifacts.values()] == ["orders", "catalog", "general"]

    def test_orders_closure(self, artifacts: dict[str, Artifact]) -> None:
        assert artifacts["Orders"].type_names == [
            "Order",
            "NewOrder",
            "LineItem",
            "Customer",
            "OrderBase",
            "Product",
        ]
        assert "Unused" not in artifacts["Orders"].types

    def test_orders_imports(self, artifacts: dict[str, Artifact]) -> None:
        bindings = artifacts["Orders"].bindings
        assert (
            "import { useQuery, useMutation, useQueryClient } from '@tanstack/react-query';"
            in bindings
        )
        assert "import type { Order, NewOrder } from './orders.types';" in bindings
        assert artifacts["Orders"].imported_types == ["Order", "NewOrder"]

    def test_query_params_interface(self, artifacts: dict[str, Artifact]) -> None:
        bindings = artifacts["Orders"].bindings
        assert (
            "export interface ListOrdersParams {\n"
            "  /** Maximum number of orders */\n"
            "  limit?: number;\n"
            "}\n"
        ) in bindings
        assert (
            "const { data } = await axios.get<Order[]>(`/orders`, "
            "{ params: { limit: params.limit } });"
        ) in bindings

    def test_mutation_with_body(self, artifacts: dict[str, Artifact]) -> None:
        expected = """\
/**
 * Create an order
 * POST /orders
 */
export const useCreateOrder = () => {
  const queryClient = useQueryClient();
  return useMutation({
    mutationFn: async (body: NewOrder) => {
      const { data } = await axios.post<Order>(`/orders`, body);
      return data;
    },
    onSuccess: () => {
      queryClient.invalidateQueries({ queryKey: ['orderController_createOrder'] });
    },
  });
};
"""
        assert expected in artifacts["Orders"].bindings

    def test_synthesized_delete(self, artifacts: dict[str, Artifact]) -> None:
        bindings = artifacts["Orders"].bindings
        assert "export interface DeleteOrdersOrderIdParams {\n  orderId: string;\n}\n" in bindings
        assert " * DELETE /orders/{orderId}\n * @deprecated\n */" in bindings
        assert "mutationFn: async (params: DeleteOrdersOrderIdParams) => {" in bindings
        assert "axios.delete<unknown>(`/orders/${params.orderId}`)" in bindings
        assert "queryKey: ['delete__orders__orderId_']" in bindings

    def test_catalog_is_read_only(self, artifacts: dict[str, Artifact]) -> None:
        catalog = artifacts["Catalog"]
        assert catalog.imports == ["useQuery", "axios"]
        assert "useMutation" not in catalog.bindings
        assert "useQueryClient" not in catalog.bindings
        assert catalog.type_names == ["Category", "Section"]
        assert catalog.imported_types == ["Category"]
        assert "export const useListCategories = () => {" in catalog.bindings
        assert "queryKey: ['listCategories']," in catalog.bindings

    def test_untagged_group_without_types(self, artifacts: dict[str, Artifact]) -> None:
        general = artifacts["General"]
        assert general.types == ""
        assert general.imported_types == []
        assert "import type" not in general.bindings
        assert "export const useGetHealth = () => {" in general.bindings
        assert "axios.get<{\n  status?: string;\n}>(`/health`)" in general.bindings

    def test_parallel_output_matches_serial(self, shop_raw: dict[str, Any]) -> None:
        serial = _emit(shop_raw, GeneratorConfig(workers=1))
        parallel = _emit(shop_raw, GeneratorConfig(workers=4))
        assert list(parallel) == list(serial)
        for tag in serial:
            assert parallel[tag].bindings == serial[tag].bindings
            assert parallel[tag].types == serial[tag].types


# ------------------------------------------------------------------ #
# Hook shapes per method
# ------------------------------------------------------------------ #


class TestHookShapes:
    def test_head_is_a_query(self) -> None:
        doc = _document({"/ping": {"head": {"operationId": "ping", "responses": {}}}})
        bindings = _emit(doc)["General"].bindings
        assert "return useQuery({" in bindings
        assert "axios.head<unknown>(`/ping`)" in bindings

    def test_params_and_body(self) -> None:
        doc = _document(
            {
                "/users/{id}": {
                    "put": {
                        "operationId": "updateUser",
                        "parameters": [{"name": "id", "in": "path", "schema": {"type": "integer"}}],
                        "requestBody": _json({"type": "object", "properties": {"name": {"type": "string"}}}),
                        "responses": {},
                    }
                }
            }
        )
        bindings = _emit(doc)["General"].bindings
        assert (
            "mutationFn: async ({ params, body }: { params: UpdateUserParams; "
            "body?: {\n  name?: string;\n} }) => {"
        ) in bindings
        assert "axios.put<unknown>(`/users/${params.id}`, body)" in bindings

    def test_query_params_without_body_on_patch(self) -> None:
        doc = _document(
            {
                "/jobs": {
                    "patch": {
                        "operationId": "touchJobs",
                        "parameters": [{"name": "dry-run", "in": "query", "schema": {"type": "boolean"}}],
                        "responses": {},
                    }
                }
            }
        )
        bindings = _emit(doc)["General"].bindings
        assert "  dryRun?: boolean;" in bindings
        assert (
            "axios.patch<unknown>(`/jobs`, undefined, { params: { \"dry-run\": params.dryRun } })"
            in bindings
        )

    def test_trace_uses_generic_request(self) -> None:
        doc = _document({"/x": {"trace": {"operationId": "traceX", "responses": {}}}})
        bindings = _emit(doc)["General"].bindings
        assert "axios.request<unknown>({ method: 'TRACE', url: `/x` })" in bindings

    def test_get_never_sends_body(self) -> None:
        doc = _document(
            {
                "/search": {
                    "get": {
                        "operationId": "search",
                        "requestBody": _json({"type": "string"}),
                        "responses": _ok({"type": "string"}),
                    }
                }
            }
        )
        bindings = _emit(doc)["General"].bindings
        assert "axios.get<string>(`/search`);" in bindings

    def test_vendor_json_media_type(self) -> None:
        doc = _document(
            {
                "/x": {
                    "get": {
                        "operationId": "getX",
                        "responses": {
                            "200": {
                                "description": "OK",
                                "content": {"application/vnd.api+json": {"schema": {"type": "integer"}}},
                            }
                        },
                    }
                }
            }
        )
        assert "axios.get<number>(`/x`)" in _emit(doc)["General"].bindings

    def test_non_json_response_is_unknown(self) -> None:
        doc = _document(
            {
                "/x": {
                    "get": {
                        "operationId": "getX",
                        "responses": {
                            "200": {"description": "OK", "content": {"text/plain": {"schema": {"type": "string"}}}}
                        },
                    }
                }
            }
        )
        assert "axios.get<unknown>(`/x`)" in _emit(doc)["General"].bindings

    def test_success_codes_from_config(self) -> None:
        doc = _document(
            {
                "/x": {
                    "post": {
                        "operationId": "makeX",
                        "responses": {
                            "200": {"description": "OK", **_json({"type": "string"})},
                            "201": {"description": "Created", **_json({"type": "integer"})},
                        },
                    }
                }
            }
        )
        default = _emit(doc)["General"].bindings
        custom = _emit(doc, GeneratorConfig(success_codes=["201"]))["General"].bindings
        assert "axios.post<string>(`/x`)" in default
        assert "axios.post<number>(`/x`)" in custom

    def test_custom_libraries(self, users_raw: dict[str, Any]) -> None:
        config = GeneratorConfig(query_library="react-query", http_library="@/lib/axios")
        bindings = _emit(users_raw, config)["User"].bindings
        assert "import { useQuery } from 'react-query';" in bindings
        assert "import axios from '@/lib/axios';" in bindings


# ------------------------------------------------------------------ #
# Parameter interfaces
# ------------------------------------------------------------------ #


class TestParamInterfaces:
    def test_identical_shapes_are_shared(self) -> None:
        param = [{"name": "id", "in": "path", "schema": {"type": "integer"}}]
        doc = _document(
            {
                "/a/{id}": {"get": {"operationId": "getA", "parameters": param, "responses": {}}},
                "/b/{id}": {"get": {"operationId": "getB", "parameters": param, "responses": {}}},
            }
        )
        bindings = _emit(doc)["General"].bindings
        assert bindings.count("export interface") == 1
        assert "export const useGetB = (params: GetAParams) => {" in bindings

    def test_name_does_not_shadow_schema(self) -> None:
        doc = _document(
            {
                "/users/{id}": {
                    "get": {
                        "operationId": "getUser",
                        "parameters": [{"name": "id", "in": "path", "schema": {"type": "string"}}],
                        "responses": _ok({"$ref": "#/components/schemas/GetUserParams"}),
                    }
                }
            },
            {"GetUserParams": {"type": "object", "properties": {"x": {"type": "string"}}}},
        )
        bindings = _emit(doc)["General"].bindings
        assert "export interface GetUserParams2 {" in bindings
        assert "export const useGetUser = (params: GetUserParams2) => {" in bindings
        assert "import type { GetUserParams } from './general.types';" in bindings

    def test_header_and_cookie_params_not_emitted(self) -> None:
        doc = _document(
            {
                "/x": {
                    "get": {
                        "operationId": "getX",
                        "parameters": [{"name": "X-Trace", "in": "header", "schema": {"type": "string"}}],
                        "responses": {},
                    }
                }
            }
        )
        bindings = _emit(doc)["General"].bindings
        assert "export interface" not in bindings
        assert "export const useGetX = () => {" in bindings

    def test_colliding_param_names_get_distinct_fields(self) -> None:
        doc = _document(
            {
                "/u/{user_id}": {
                    "get": {
                        "operationId": "g",
                        "parameters": [
                            {"name": "user_id", "in": "path", "required": True, "schema": {"type": "string"}},
                            {"name": "userId", "in": "query", "schema": {"type": "integer"}},
                        ],
                        "responses": {},
                    }
                }
            }
        )
        bindings = _emit(doc)["General"].bindings
        assert "export interface GParams {\n  userId: string;\n  userId2?: number;\n}" in bindings
        assert (
            "axios.get<unknown>(`/u/${params.userId}`, { params: { userId: params.userId2 } })"
            in bindings
        )

    def test_colliding_schema_identifiers(self) -> None:
        doc = _document(
            {
                "/p": {
                    "get": {
                        "operationId": "getPages",
                        "responses": _ok(
                            {
                                "oneOf": [
                                    {"$ref": "#/components/schemas/Page[User]"},
                                    {"$ref": "#/components/schemas/Page_User_"},
                                ]
                            }
                        ),
                    }
                }
            },
            {"Page[User]": {"type": "string"}, "Page_User_": {"type": "number"}},
        )
        artifact = _emit(doc)["General"]
        assert artifact.types == (
            "export type Page_User_2 = string;\n\nexport type Page_User_ = number;\n"
        )
        assert artifact.imported_types == ["Page_User_2", "Page_User_"]
        assert "axios.get<Page_User_2 | Page_User_>(`/p`)" in artifact.bindings


# ------------------------------------------------------------------ #
# Diagnostics and failure isolation
# ------------------------------------------------------------------ #


class TestDiagnostics:
    def test_undeclared_path_placeholder(self) -> None:
        doc = _document({"/items/{itemId}": {"get": {"operationId": "getItem", "responses": {}}}})
        artifact = _emit(doc)["General"]
        assert "axios.get<unknown>(`/items/{itemId}`)" in artifact.bindings
        assert any("path placeholder 'itemId'" in d for d in artifact.diagnostics)

    def test_unresolvable_ref_reported(self) -> None:
        doc = _document(
            {"/x": {"get": {"operationId": "getX", "responses": _ok({"$ref": "#/components/schemas/Gone"})}}}
        )
        artifact = _emit(doc)["General"]
        assert "axios.get<unknown>(`/x`)" in artifact.bindings
        assert any("Unresolvable $ref" in d for d in artifact.diagnostics)

    def test_failed_endpoint_does_not_sink_group(
        self, users_raw: dict[str, Any], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def boom(*args: Any, **kwargs: Any) -> str:
            raise RuntimeError("boom")

        monkeypatch.setattr("hookgen.generator.emitter._GroupEmitter._url_expr", boom)
        artifact = _emit(users_raw)["User"]
        assert "// Failed to generate hook for userController_getUser: boom" in artifact.bindings
        assert artifact.diagnostics == ["GET /users/{id}: boom"]
        assert artifact.imports == []
        assert artifact.types == USER_TYPES


# ------------------------------------------------------------------ #
# Custom templates
# ------------------------------------------------------------------ #


class TestCustomTemplates:
    def test_template_output_and_scanned_imports(
        self, users_raw: dict[str, Any], tmp_path: Path
    ) -> None:
        template = tmp_path / "hooks.ts.j2"
        template.write_text(
            "// {{ tag | pascal_case }} from {{ file_stem }}\n"
            "{% for hook in hooks %}{{ hook }}{% endfor %}",
            encoding="utf-8",
        )
        artifact = _emit(users_raw, GeneratorConfig(hooks_template=str(template)))["User"]
        assert artifact.bindings.startswith("// User from user\n/**\n * Get a user")
        assert artifact.imports == ["useQuery", "axios"]
        assert artifact.imported_types == ["User"]

    def test_fallback_on_missing_template(self, users_raw: dict[str, Any], tmp_path: Path) -> None:
        config = GeneratorConfig(hooks_template=str(tmp_path / "missing.j2"))
        artifact = _emit(users_raw, config)["User"]
        assert artifact.bindings == USER_BINDINGS
        assert any(d.startswith("Template fallback:") for d in artifact.diagnostics)

    def test_strict_template_raises(self, users_raw: dict[str, Any], tmp_path: Path) -> None:
        config = GeneratorConfig(hooks_template=str(tmp_path / "missing.j2"), template_fallback=False)
        with pytest.raises(TemplateError, match="Failed to compile template"):
            _emit(users_raw, config)

    def test_fallback_on_template_runtime_error(
        self, users_raw: dict[str, Any], tmp_path: Path
    ) -> None:
        template = tmp_path / "hooks.j2"
        template.write_text("{{ 1 // 0 }}", encoding="utf-8")
        artifact = _emit(users_raw, GeneratorConfig(hooks_template=str(template)))["User"]
        assert artifact.bindings == USER_BINDINGS
        assert any("ZeroDivisionError" in d for d in artifact.diagnostics)

    def test_fallback_on_undecodable_template(
        self, users_raw: dict[str, Any], tmp_path: Path
    ) -> None:
        template = tmp_path / "hooks.j2"
        template.write_bytes(b"\xff\xfe\xfa")
        artifact = _emit(users_raw, GeneratorConfig(hooks_template=str(template)))["User"]
        assert artifact.bindings == USER_BINDINGS


# ------------------------------------------------------------------ #
# Helpers
# ------------------------------------------------------------------ #


class TestHelpers:
    def test_file_stem(self) -> None:
        assert file_stem("User Admin") == "userAdmin"
        assert file_stem("!!!") == "api"

    def test_colliding_stems(self) -> None:
        doc = _document(
            {
                "/a": {"get": {"operationId": "a", "tags": ["user"], "responses": {}}},
                "/b": {"get": {"operationId": "b", "tags": ["User"], "responses": {}}},
            }
        )
        artifacts = _emit(doc)
        assert [a.file_stem for a in artifacts.values()] == ["user", "user2"]

    def test_used_symbols_whole_words(self) -> None:
        text = "const x: UserList = useQueryClient();"
        assert used_symbols(text, ["User", "UserList", "useQuery", "useQueryClient"]) == [
            "UserList",
            "useQueryClient",
        ]

    def test_symbol_tracker(self) -> None:
        tracker = SymbolTracker()
        assert tracker.use("axios") == "axios"
        assert tracker.use_type(Resolution("User[]", refs=("User",))) == "User[]"
        other = SymbolTracker()
        other.use("useQuery")
        tracker.merge(other)
        assert tracker.library == {"axios", "useQuery"}
        assert tracker.types == {"User"}

    def test_emit_artifact_defaults(self, users_raw: dict[str, Any]) -> None:
        tagged = classify_endpoints(users_raw)
        artifact = emit_artifact("User", tagged["User"], build_registry(users_raw))
        assert artifact.bindings == USER_BINDINGS
