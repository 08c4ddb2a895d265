"""Flatten nested Feathers query mappings into URL query items."""

from __future__ import annotations

import json
from typing import Any, List, Mapping, Tuple

from .service import SELECT_ALIASES, SubqueryKind, subquery_kind

QueryItem = Tuple[str, str]


def stringify(value: Any) -> str:
    """Render a query value the way it appears on the query string."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value, separators=(",", ":"), default=str)


def _is_string_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(v, str) for v in value)


def encode_query_items(parameters: Mapping[str, Any]) -> List[QueryItem]:
    """
    Expand a parameter mapping into ordered (name, value) pairs.

    - nested mapping: ``key[sub]=v`` per sub-key, or ``key[sub][i]=v`` for
      array operators holding a list of strings (other values are skipped)
    - select key with a list of strings: ``key[i]=v``
    - anything else: ``key=v``
    """
    items: List[QueryItem] = []

    for key, value in parameters.items():
        if isinstance(value, Mapping):
            for nested_key, nested_value in value.items():
                if subquery_kind(nested_key) is SubqueryKind.ARRAY:
                    if not _is_string_list(nested_value):
                        continue
                    for index, element in enumerate(nested_value):
                        items.append((f"{key}[{nested_key}][{index}]", element))
                else:
                    items.append((f"{key}[{nested_key}]", stringify(nested_value)))
        elif key in SELECT_ALIASES and _is_string_list(value):
            for index, prop in enumerate(value):
                items.append((f"{key}[{index}]", prop))
        else:
            items.append((key, stringify(value)))

    return items


__all__ = ["QueryItem", "encode_query_items", "stringify"]
