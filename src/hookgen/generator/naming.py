"""Identifier helpers shared by the type resolver, classifier and emitter.

Everything that turns an OpenAPI name (schema name, tag, operation id,
parameter name) into a TypeScript identifier goes through this module so
references and definitions always agree on spelling.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable

_WORD_SPLIT_RE = re.compile(r"[^A-Za-z0-9]+")
_IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")
_INVALID_IDENTIFIER_CHARS_RE = re.compile(r"[^A-Za-z0-9_$]")


def to_pascal_case(text: str) -> str:
    """Convert *text* to PascalCase.

    Splits on any run of non-alphanumeric characters and upper-cases the
    first letter of each word; the rest of each word is kept as written.

    Example::

        to_pascal_case("getUser")        # -> "GetUser"
        to_pascal_case("user profile")   # -> "UserProfile"
        to_pascal_case("get__users_id")  # -> "GetUsersId"
    """
    return "".join(word[:1].upper() + word[1:] for word in _WORD_SPLIT_RE.split(text) if word)


def to_camel_case(text: str) -> str:
    """Convert *text* to camelCase (PascalCase with a lower-cased first letter)."""
    pascal = to_pascal_case(text)
    return pascal[:1].lower() + pascal[1:]


def is_identifier(name: str) -> bool:
    """Return ``True`` if *name* is a valid (ASCII) TypeScript identifier."""
    return bool(_IDENTIFIER_RE.match(name))


def type_identifier(name: str) -> str:
    """Turn a schema name into a TypeScript type identifier.

    Invalid characters become ``_`` and a leading digit gets a ``_``
    prefix, so ``"Page[User]"`` becomes ``"Page_User_"``.
    """
    ident = _INVALID_IDENTIFIER_CHARS_RE.sub("_", name)
    if not ident or ident[0].isdigit():
        ident = f"_{ident}"
    return ident


def type_identifiers(names: Iterable[str]) -> dict[str, str]:
    """Map schema names to distinct TypeScript type identifiers.

    Names that are already valid identifiers keep their spelling. The rest
    go through :func:`type_identifier` in input order and are suffixed when
    they land on a taken identifier, so ``"Page[User]"`` next to a schema
    literally named ``"Page_User_"`` becomes ``"Page_User_2"``.
    """
    names = list(names)
    taken = {name for name in names if is_identifier(name)}
    result: dict[str, str] = {}
    for name in names:
        if is_identifier(name):
            result[name] = name
            continue
        base = type_identifier(name)
        candidate, counter = base, 2
        while candidate in taken:
            candidate = f"{base}{counter}"
            counter += 1
        taken.add(candidate)
        result[name] = candidate
    return result


def param_identifier(name: str) -> str:
    """Turn a parameter name into the camelCase property used in params objects."""
    ident = to_camel_case(name)
    if not ident:
        return "param"
    if ident[0].isdigit():
        ident = f"_{ident}"
    return ident


def property_key(name: str) -> str:
    """Return *name* as an object-type key, quoting it when it is not an identifier."""
    if is_identifier(name):
        return name
    return json.dumps(name, ensure_ascii=False)


def unique_names(names: Iterable[str]) -> list[str]:
    """Make *names* unique, suffixing later duplicates with 2, 3, ...

    The first occurrence of a name keeps it. Suffixes skip any value that
    is already taken, so the result is deterministic for a given input
    order.

    Example::

        unique_names(["useGetUser", "useList", "useGetUser"])
        # -> ["useGetUser", "useList", "useGetUser2"]
    """
    names = list(names)
    taken = set(names)
    seen: set[str] = set()
    result: list[str] = []
    for name in names:
        if name not in seen:
            seen.add(name)
            result.append(name)
            continue
        counter = 2
        while f"{name}{counter}" in taken or f"{name}{counter}" in seen:
            counter += 1
        candidate = f"{name}{counter}"
        seen.add(candidate)
        result.append(candidate)
    return result
