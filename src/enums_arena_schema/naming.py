from __future__ import annotations

import re

_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_WORD_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")


def snake_case(name: str) -> str:
    """ListAB -> list_ab, HTTPServer -> http_server, Mock1 -> mock1."""
    out = _ACRONYM_BOUNDARY.sub(r"\1_\2", name)
    out = _WORD_BOUNDARY.sub(r"\1_\2", out)
    out = out.replace("-", "_")
    return re.sub(r"_+", "_", out).strip("_").lower()


def alloc_name(variant: str) -> str:
    return f"alloc_{snake_case(variant)}"


def get_name(variant: str) -> str:
    return f"get_{snake_case(variant)}"


def get_mut_name(variant: str) -> str:
    return f"get_{snake_case(variant)}_mut"


__all__ = ["snake_case", "alloc_name", "get_name", "get_mut_name"]
