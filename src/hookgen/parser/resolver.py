"""Follow internal ``$ref`` JSON Reference pointers in OpenAPI documents.

Two kinds of references appear in a document and they are treated
differently:

* **Schema references** (``#/components/schemas/...``) are *never* inlined.
  They stay :class:`~hookgen.models.RefNode` instances and are looked up by
  name in the :class:`~hookgen.models.Registry`, which is what keeps
  self-referencing types finite.
* **Component references** to parameters, request bodies and responses
  (``#/components/parameters/...`` and friends) are plain indirections.
  :func:`resolve_component` follows them so the extractor sees the real
  object.

Only internal references (those starting with ``#/``) are supported.
External file or URL references raise
:class:`~hookgen.exceptions.SpecParseError`.
"""

from __future__ import annotations

from typing import Any

from hookgen.exceptions import SpecParseError

# Bound on chained component refs (a ref whose target is another ref).
_MAX_CHAIN = 32


def resolve_pointer(ref: str, root: dict[str, Any]) -> Any:
    """Resolve a single ``$ref`` string against the root document.

    Parses JSON Pointer references like ``#/components/parameters/Limit``
    and navigates the root dict to locate the referenced value.  Handles
    RFC 6901 JSON Pointer escaping (``~0`` for ``~``, ``~1`` for ``/``).

    Args:
        ref: The ``$ref`` string (e.g., ``"#/components/parameters/Limit"``).
        root: The root document to resolve against.

    Returns:
        The value found at the referenced path.

    Raises:
        SpecParseError: If the reference is external (does not start with
            ``#/``), or if any segment in the pointer path does not exist
            in the document.
    """
    if not ref.startswith("#/"):
        raise SpecParseError(
            f"External $ref not supported: {ref}. "
            "Only internal references (#/...) are handled."
        )

    segments = ref[2:].split("/")

    current: Any = root
    for segment in segments:
        segment = segment.replace("~1", "/").replace("~0", "~")

        if isinstance(current, dict):
            if segment not in current:
                raise SpecParseError(
                    f"Cannot resolve $ref '{ref}': "
                    f"key '{segment}' not found at path"
                )
            current = current[segment]
        elif isinstance(current, list):
            try:
                index = int(segment)
                current = current[index]
            except (ValueError, IndexError) as exc:
                raise SpecParseError(
                    f"Cannot resolve $ref '{ref}': "
                    f"invalid array index '{segment}'"
                ) from exc
        else:
            raise SpecParseError(
                f"Cannot resolve $ref '{ref}': "
                f"cannot navigate into {type(current).__name__}"
            )

    return current


def resolve_component(obj: Any, root: dict[str, Any]) -> Any:
    """Follow a component-level ``$ref`` until a concrete object is reached.

    Non-ref values are returned unchanged. A chain of refs is followed,
    and a chain that revisits a ref (or exceeds a fixed length) is
    reported as an error.

    Args:
        obj: A parameter, request body or response object, possibly a
            ``{"$ref": "#/components/..."}`` dict.
        root: The root document.

    Returns:
        The referenced object.

    Raises:
        SpecParseError: If a pointer cannot be resolved or the chain is
            circular.
    """
    seen: set[str] = set()
    while isinstance(obj, dict) and isinstance(obj.get("$ref"), str):
        ref = obj["$ref"]
        if ref in seen or len(seen) >= _MAX_CHAIN:
            raise SpecParseError(f"Circular $ref chain at '{ref}'")
        seen.add(ref)
        obj = resolve_pointer(ref, root)
    return obj
