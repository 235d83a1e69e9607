"""Turn tag groups into hook and type artifacts.

For each tag group the emitter:

1. collects the schemas the group's endpoints use directly and closes them
   over ``$ref`` (:mod:`hookgen.generator.closure`);
2. renders one type definition per schema in the closure, in discovery
   order (:mod:`hookgen.generator.types`);
3. renders, per endpoint, an optional parameter interface and one React
   Query hook. ``GET``/``HEAD`` endpoints become ``useQuery`` hooks keyed
   by ``[operationId, params]``; every other method becomes a
   ``useMutation`` hook that invalidates ``[operationId]`` on success;
4. writes the import header last, from the symbols the renderer recorded
   while writing the hooks.

Symbol usage is tracked while the hooks are written, so the import list is
exactly what the body uses. Output from a custom template is not written
by the emitter; its imports are recovered with a whole-word scan
(:func:`used_symbols`).

A failure while rendering one endpoint is logged, recorded as a diagnostic
and replaced by a comment; the rest of the group is still emitted.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Optional

from hookgen.exceptions import TemplateError
from hookgen.generator.classifier import assign_binding_names, is_read_style, operation_id
from hookgen.generator.closure import closure, directly_used_schemas
from hookgen.generator.naming import (
    param_identifier,
    property_key,
    to_camel_case,
    to_pascal_case,
    unique_names,
)
from hookgen.generator.templates import compile_template
from hookgen.generator.types import (
    UNKNOWN,
    Resolution,
    TypeDefinition,
    jsdoc,
    render_type_definition,
    resolve,
)
from hookgen.models import (
    Artifact,
    Endpoint,
    EndpointParameter,
    GeneratorConfig,
    HTTPMethod,
    ParameterLocation,
    Registry,
    SchemaNode,
)

logger = logging.getLogger(__name__)

USE_QUERY = "useQuery"
USE_MUTATION = "useMutation"
USE_QUERY_CLIENT = "useQueryClient"
HTTP_CLIENT = "axios"

QUERY_SYMBOLS = (USE_QUERY, USE_MUTATION, USE_QUERY_CLIENT)
"""Query-library entry points, in import order."""

_PATH_PLACEHOLDER_RE = re.compile(r"\{([^{}]+)\}")
_JSON_MEDIA_RE = re.compile(r"^application/(?:[\w.-]+\+)?json$")

_NO_BODY_METHODS = frozenset({HTTPMethod.GET, HTTPMethod.HEAD, HTTPMethod.DELETE})
_AXIOS_URL_CONFIG = frozenset({"get", "delete", "head", "options"})
_AXIOS_URL_DATA_CONFIG = frozenset({"post", "put", "patch"})


class SymbolTracker:
    """Records the imported symbols a rendered block actually writes."""

    def __init__(self) -> None:
        self.library: set[str] = set()
        self.types: set[str] = set()

    def use(self, symbol: str) -> str:
        """Record a library symbol and return it for interpolation."""
        self.library.add(symbol)
        return symbol

    def use_type(self, resolution: Resolution) -> str:
        """Record the schema types behind *resolution* and return its expression."""
        self.types.update(resolution.refs)
        return resolution.type_expr

    def merge(self, other: SymbolTracker) -> None:
        self.library |= other.library
        self.types |= other.types


def used_symbols(text: str, candidates: Iterable[str]) -> list[str]:
    """Return the *candidates* that occur in *text* as whole words.

    A word boundary here is anything that cannot be part of a TypeScript
    identifier, so ``User`` does not match inside ``UserList``.
    """
    found: list[str] = []
    for symbol in candidates:
        if symbol in found:
            continue
        pattern = rf"(?<![A-Za-z0-9_$]){re.escape(symbol)}(?![A-Za-z0-9_$])"
        if re.search(pattern, text):
            found.append(symbol)
    return found


def _ts_string(value: str) -> str:
    """Single-quoted TypeScript string literal."""
    escaped = value.replace("\\", "\\\\").replace("'", "\\'").replace("\n", "\\n")
    return f"'{escaped}'"


def file_stem(tag: str) -> str:
    """Return the file stem for *tag* (``"User Admin"`` -> ``"userAdmin"``)."""
    return to_camel_case(tag) or "api"


def _json_schema(content: Mapping[str, SchemaNode]) -> Optional[SchemaNode]:
    """Pick the JSON schema from a content map, preferring ``application/json``."""
    if "application/json" in content:
        return content["application/json"]
    for media_type, node in content.items():
        if _JSON_MEDIA_RE.match(media_type.split(";")[0].strip().lower()):
            return node
    return None


def _param_fields(
    path_params: list[EndpointParameter], query_params: list[EndpointParameter]
) -> tuple[dict[str, str], dict[str, str]]:
    """Map path and query parameter names to distinct params-object fields.

    Path parameters claim their camelCase names first; a query parameter
    that lands on a taken name is suffixed (``user_id`` + ``userId`` ->
    ``userId``, ``userId2``).
    """
    params = path_params + query_params
    fields = unique_names(param_identifier(p.name) for p in params)
    path = dict(zip((p.name for p in path_params), fields))
    query = dict(zip((p.name for p in query_params), fields[len(path_params):]))
    return path, query


@dataclass
class _EndpointContext:
    """Everything the hook renderer needs for one endpoint."""

    endpoint: Endpoint
    op_id: str
    name: str
    response: Resolution
    body: Optional[Resolution] = None
    path_params: list[EndpointParameter] = field(default_factory=list)
    query_params: list[EndpointParameter] = field(default_factory=list)
    params_type: Optional[str] = None
    path_fields: dict[str, str] = field(default_factory=dict)
    query_fields: dict[str, str] = field(default_factory=dict)


@dataclass
class _EmittedEndpoint:
    op_id: str
    name: str
    hook: str
    interface: Optional[str]
    tracker: SymbolTracker
    diagnostics: list[str]


class _GroupEmitter:
    """Emits one tag group. Not shared between groups."""

    def __init__(
        self,
        tag: str,
        stem: str,
        endpoints: list[Endpoint],
        registry: Registry,
        config: GeneratorConfig,
    ) -> None:
        self.tag = tag
        self.stem = stem
        self.endpoints = endpoints
        self.registry = registry
        self.config = config
        self.diagnostics: list[str] = []
        self.tracker = SymbolTracker()
        self._taken_names: set[str] = set()
        self._interfaces_by_shape: dict[tuple[str, ...], str] = {}

    def emit(self) -> Artifact:
        names = closure(directly_used_schemas(self.endpoints, self.registry), self.registry)
        definitions = self._type_definitions(names)
        self._taken_names.update(d.identifier for d in definitions)

        interfaces: list[str] = []
        hooks: list[str] = []
        emitted: list[_EmittedEndpoint] = []
        binding_names = assign_binding_names(self.endpoints)
        for endpoint, name in zip(self.endpoints, binding_names):
            op_id = operation_id(endpoint)
            try:
                result = self._emit_endpoint(endpoint, op_id, name)
            except Exception as exc:  # one endpoint must not sink the group
                message = f"{endpoint.method.value.upper()} {endpoint.path}: {exc}"
                logger.warning("Failed to generate hook for %s", message)
                self.diagnostics.append(message)
                hooks.append(f"// Failed to generate hook for {op_id}: {exc}\n")
                continue
            emitted.append(result)
            self.tracker.merge(result.tracker)
            self.diagnostics.extend(result.diagnostics)
            if result.interface:
                interfaces.append(result.interface)
            hooks.append(result.hook)

        types_text = "\n".join(d.text for d in definitions)
        identifiers = [d.identifier for d in definitions]
        imports = [s for s in (*QUERY_SYMBOLS, HTTP_CLIENT) if s in self.tracker.library]
        imported_types = [d.identifier for d in definitions if d.name in self.tracker.types]
        bindings = self._assemble(imports, imported_types, interfaces, hooks)

        if self.config.hooks_template:
            context = self._template_context(
                definitions, identifiers, interfaces, hooks, emitted, imports, imported_types
            )
            try:
                bindings = compile_template(self.config.hooks_template, context)
            except TemplateError as exc:
                if not self.config.template_fallback:
                    raise
                logger.warning("%s; using the built-in hook renderer", exc)
                self.diagnostics.append(f"Template fallback: {exc}")
            else:
                imports = used_symbols(bindings, (*QUERY_SYMBOLS, HTTP_CLIENT))
                imported_types = used_symbols(bindings, identifiers)

        for message in self.diagnostics:
            logger.debug("[%s] %s", self.tag, message)

        return Artifact(
            tag=self.tag,
            file_stem=self.stem,
            types=types_text,
            bindings=bindings,
            type_names=names,
            imported_types=imported_types,
            imports=imports,
            diagnostics=self.diagnostics,
        )

    def _type_definitions(self, names: list[str]) -> list[TypeDefinition]:
        definitions: list[TypeDefinition] = []
        for name in names:
            node = self.registry.get(name)
            if node is None:
                self.diagnostics.append(f"Schema '{name}' is not defined")
                continue
            definition = render_type_definition(name, node, self.registry)
            self.diagnostics.extend(f"{name}: {d}" for d in definition.diagnostics)
            definitions.append(definition)
        return definitions

    def _claim(self, name: str) -> str:
        candidate, counter = name, 2
        while candidate in self._taken_names:
            candidate = f"{name}{counter}"
            counter += 1
        self._taken_names.add(candidate)
        return candidate

    # --- per endpoint ---

    def _emit_endpoint(self, endpoint: Endpoint, op_id: str, name: str) -> _EmittedEndpoint:
        tracker = SymbolTracker()
        diagnostics: list[str] = []
        where = f"{endpoint.method.value.upper()} {endpoint.path}"

        ctx = _EndpointContext(
            endpoint=endpoint,
            op_id=op_id,
            name=name,
            response=self._response_type(endpoint),
            body=self._body_type(endpoint),
            path_params=[p for p in endpoint.parameters if p.location == ParameterLocation.PATH],
            query_params=[p for p in endpoint.parameters if p.location == ParameterLocation.QUERY],
        )
        ctx.path_fields, ctx.query_fields = _param_fields(ctx.path_params, ctx.query_params)
        for resolution in (ctx.response, ctx.body):
            if resolution is not None:
                diagnostics.extend(f"{where}: {d}" for d in resolution.diagnostics)

        interface_text: Optional[str] = None
        shape: tuple[str, ...] = ()
        if ctx.path_params or ctx.query_params:
            field_lines: list[str] = []
            fields = [*ctx.path_fields.values(), *ctx.query_fields.values()]
            for param, ident in zip(ctx.path_params + ctx.query_params, fields):
                resolution = resolve(param.schema_, self.registry, depth=1)
                diagnostics.extend(
                    f"{where} parameter '{param.name}': {d}" for d in resolution.diagnostics
                )
                comment = jsdoc(param.description, "  ")
                if comment:
                    field_lines.append(comment)
                optional = "" if param.required else "?"
                field_lines.append(
                    f"  {ident}{optional}: {tracker.use_type(resolution)};"
                )
            shape = tuple(field_lines)
            existing = self._interfaces_by_shape.get(shape)
            if existing is not None:
                ctx.params_type = existing
            else:
                ctx.params_type = self._claim(f"{name[3:]}Params")
                body = "\n".join(field_lines)
                interface_text = f"export interface {ctx.params_type} {{\n{body}\n}}\n"

        hook = self._render_hook(ctx, tracker, diagnostics)
        if interface_text is not None:
            self._interfaces_by_shape[shape] = ctx.params_type
        return _EmittedEndpoint(op_id, name, hook, interface_text, tracker, diagnostics)

    def _response_type(self, endpoint: Endpoint) -> Resolution:
        for code in self.config.success_codes:
            response = endpoint.responses.get(code)
            if response is None:
                continue
            node = _json_schema(response.content)
            if node is not None:
                return resolve(node, self.registry)
        return Resolution(UNKNOWN)

    def _body_type(self, endpoint: Endpoint) -> Optional[Resolution]:
        if endpoint.method in _NO_BODY_METHODS or endpoint.request_body is None:
            return None
        node = _json_schema(endpoint.request_body.content)
        if node is None:
            return None
        return resolve(node, self.registry)

    def _url_expr(self, ctx: _EndpointContext, diagnostics: list[str]) -> str:
        declared = ctx.path_fields

        def substitute(match: re.Match[str]) -> str:
            placeholder = match.group(1)
            if placeholder not in declared:
                diagnostics.append(
                    f"{ctx.endpoint.method.value.upper()} {ctx.endpoint.path}: "
                    f"path placeholder '{placeholder}' has no declared parameter"
                )
                return match.group(0)
            return f"${{params.{declared[placeholder]}}}"

        escaped = ctx.endpoint.path.replace("\\", "\\\\").replace("`", "\\`")
        return f"`{_PATH_PLACEHOLDER_RE.sub(substitute, escaped)}`"

    def _request_config(self, ctx: _EndpointContext) -> Optional[str]:
        if not ctx.query_params:
            return None
        pairs = ", ".join(
            f"{property_key(name)}: params.{ident}" for name, ident in ctx.query_fields.items()
        )
        return f"{{ params: {{ {pairs} }} }}"

    def _axios_call(
        self,
        ctx: _EndpointContext,
        tracker: SymbolTracker,
        url: str,
        body_expr: Optional[str],
        config_expr: Optional[str],
    ) -> str:
        method = ctx.endpoint.method.value
        response_type = tracker.use_type(ctx.response)
        client = tracker.use(HTTP_CLIENT)
        if method in _AXIOS_URL_CONFIG:
            args = [url] + ([config_expr] if config_expr else [])
            return f"{client}.{method}<{response_type}>({', '.join(args)})"
        if method in _AXIOS_URL_DATA_CONFIG:
            args = [url]
            if body_expr or config_expr:
                args.append(body_expr or "undefined")
            if config_expr:
                args.append(config_expr)
            return f"{client}.{method}<{response_type}>({', '.join(args)})"
        spread = f", ...{config_expr}" if config_expr else ""
        data = f", data: {body_expr}" if body_expr else ""
        return (
            f"{client}.request<{response_type}>"
            f"({{ method: {_ts_string(method.upper())}, url: {url}{data}{spread} }})"
        )

    def _hook_comment(self, ctx: _EndpointContext) -> list[str]:
        endpoint = ctx.endpoint
        lines: list[str] = []
        for text in (endpoint.summary, endpoint.description):
            if text and text.strip() and text.strip() not in lines:
                lines.append(text.strip())
        body = [line for text in lines for line in text.replace("*/", "*\\/").splitlines()]
        body.append(f"{endpoint.method.value.upper()} {endpoint.path}")
        if endpoint.deprecated:
            body.append("@deprecated")
        return ["/**", *(f" * {line}".rstrip() for line in body), " */"]

    def _render_hook(
        self, ctx: _EndpointContext, tracker: SymbolTracker, diagnostics: list[str]
    ) -> str:
        url = self._url_expr(ctx, diagnostics)
        config_expr = self._request_config(ctx)
        lines = self._hook_comment(ctx)
        op_literal = _ts_string(ctx.op_id)

        if is_read_style(ctx.endpoint.method):
            signature = f"params: {ctx.params_type}" if ctx.params_type else ""
            key = f"[{op_literal}, params]" if ctx.params_type else f"[{op_literal}]"
            call = self._axios_call(ctx, tracker, url, None, config_expr)
            lines += [
                f"export const {ctx.name} = ({signature}) => {{",
                f"  return {tracker.use(USE_QUERY)}({{",
                f"    queryKey: {key},",
                "    queryFn: async () => {",
                f"      const {{ data }} = await {call};",
                "      return data;",
                "    },",
                "  });",
                "};",
            ]
            return "\n".join(lines) + "\n"

        body_type = tracker.use_type(ctx.body) if ctx.body is not None else None
        body_required = bool(ctx.endpoint.request_body and ctx.endpoint.request_body.required)
        body_mark = "" if body_required else "?"
        if ctx.params_type and body_type:
            variables = f"{{ params, body }}: {{ params: {ctx.params_type}; body{body_mark}: {body_type} }}"
        elif ctx.params_type:
            variables = f"params: {ctx.params_type}"
        elif body_type:
            variables = f"body{body_mark}: {body_type}"
        else:
            variables = ""
        call = self._axios_call(ctx, tracker, url, "body" if body_type else None, config_expr)
        lines += [
            f"export const {ctx.name} = () => {{",
            f"  const queryClient = {tracker.use(USE_QUERY_CLIENT)}();",
            f"  return {tracker.use(USE_MUTATION)}({{",
            f"    mutationFn: async ({variables}) => {{",
            f"      const {{ data }} = await {call};",
            "      return data;",
            "    },",
            "    onSuccess: () => {",
            f"      queryClient.invalidateQueries({{ queryKey: [{op_literal}] }});",
            "    },",
            "  });",
            "};",
        ]
        return "\n".join(lines) + "\n"

    # --- assembly ---

    def _assemble(
        self,
        imports: list[str],
        imported_types: list[str],
        interfaces: list[str],
        hooks: list[str],
    ) -> str:
        header = [f"// {to_pascal_case(self.tag) or 'Api'} API Hooks"]
        query_symbols = [s for s in QUERY_SYMBOLS if s in imports]
        if query_symbols:
            header.append(
                f"import {{ {', '.join(query_symbols)} }} from {_ts_string(self.config.query_library)};"
            )
        if HTTP_CLIENT in imports:
            header.append(f"import {HTTP_CLIENT} from {_ts_string(self.config.http_library)};")
        if imported_types:
            header.append(
                f"import type {{ {', '.join(imported_types)} }} "
                f"from {_ts_string(f'./{self.stem}.types')};"
            )
        sections = ["\n".join(header) + "\n", *interfaces, *hooks]
        return "\n".join(sections)

    def _template_context(
        self,
        definitions: list[TypeDefinition],
        identifiers: list[str],
        interfaces: list[str],
        hooks: list[str],
        emitted: list[_EmittedEndpoint],
        imports: list[str],
        imported_types: list[str],
    ) -> dict[str, Any]:
        by_op = {e.op_id: e for e in emitted}
        endpoints = []
        for endpoint in self.endpoints:
            op_id = operation_id(endpoint)
            result = by_op.get(op_id)
            endpoints.append(
                {
                    "path": endpoint.path,
                    "method": endpoint.method.value.upper(),
                    "operation_id": op_id,
                    "binding_name": result.name if result else None,
                    "summary": endpoint.summary,
                    "description": endpoint.description,
                    "read_style": is_read_style(endpoint.method),
                }
            )
        return {
            "tag": self.tag,
            "file_stem": self.stem,
            "query_library": self.config.query_library,
            "http_library": self.config.http_library,
            "endpoints": endpoints,
            "type_names": identifiers,
            "type_definitions": [d.text for d in definitions],
            "imported_types": imported_types,
            "imports": imports,
            "param_interfaces": interfaces,
            "hooks": hooks,
        }


def emit_artifact(
    tag: str,
    endpoints: list[Endpoint],
    registry: Registry,
    config: Optional[GeneratorConfig] = None,
    stem: Optional[str] = None,
) -> Artifact:
    """Emit the artifact for a single tag group.

    Args:
        tag: The group's tag.
        endpoints: The group's endpoints, in emission order.
        registry: Schema lookup.
        config: Generator settings; defaults apply when omitted.
        stem: File stem for the group. Derived from *tag* when omitted.

    Raises:
        TemplateError: If a custom template fails and ``template_fallback``
            is disabled.
    """
    config = config or GeneratorConfig()
    return _GroupEmitter(tag, stem or file_stem(tag), endpoints, registry, config).emit()


def emit_artifacts(
    tagged: Mapping[str, list[Endpoint]],
    registry: Registry,
    config: Optional[GeneratorConfig] = None,
) -> dict[str, Artifact]:
    """Emit one artifact per tag group.

    Groups share nothing but the read-only *registry*, so with
    ``config.workers > 1`` they are emitted on a thread pool. The result
    always follows the order of *tagged*. Tags whose stems collide get a
    numeric suffix (``user``, ``user2``).
    """
    config = config or GeneratorConfig()
    tags = list(tagged)
    stems = unique_names(file_stem(tag) for tag in tags)

    def run(index: int) -> Artifact:
        tag = tags[index]
        return emit_artifact(tag, tagged[tag], registry, config, stems[index])

    if config.workers > 1 and len(tags) > 1:
        with ThreadPoolExecutor(max_workers=config.workers) as pool:
            results = list(pool.map(run, range(len(tags))))
    else:
        results = [run(i) for i in range(len(tags))]

    return dict(zip(tags, results))


def generate_type_definitions(registry: Registry) -> str:
    """Render every schema in *registry* into one standalone types file.

    Returns an empty string when the registry is empty.
    """
    if not registry:
        return ""
    parts = ["// Generated TypeScript types\n"]
    for name, node in registry.items():
        definition = render_type_definition(name, node, registry)
        for message in definition.diagnostics:
            logger.debug("[types] %s: %s", name, message)
        parts.append(definition.text)
    return "\n".join(parts)
