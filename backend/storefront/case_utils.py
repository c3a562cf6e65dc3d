# Overview: Key-naming conversion between storage (snake_case) and payload (camelCase) dicts.

from __future__ import annotations

import re
from typing import Any, Callable

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")


def camel_to_snake(key: str) -> str:
    """firstName -> first_name; keys already in snake_case are returned as-is."""
    return _CAMEL_BOUNDARY.sub(r"_\1", key).lower()


def snake_to_camel(key: str) -> str:
    """first_name -> firstName; keys without underscores are returned as-is."""
    head, *rest = key.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def convert_to_case(converter: Callable[[str], str], obj: Any) -> Any:
    """
    Rename the keys of a dict (or of every dict in a list) with `converter`.

    Only top-level keys are renamed; values are left untouched.
    """
    if isinstance(obj, list):
        return [convert_to_case(converter, item) for item in obj]
    if isinstance(obj, dict):
        return {converter(k): v for k, v in obj.items()}
    return obj
