"""Service call descriptions and the query dialect they carry."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, Iterable, Optional, Tuple, Union

SELECT_KEY = "$select"
SELECT_ALIASES = frozenset({SELECT_KEY, "select"})


class SubqueryKind(str, Enum):
    ARRAY = "array"
    SINGLE_VALUE = "single_value"
    SORT = "sort"


_ARRAY_OPERATORS = frozenset({"$in", "$nin"})


def subquery_kind(key: str) -> SubqueryKind:
    """Classify a nested query key."""
    if key in _ARRAY_OPERATORS:
        return SubqueryKind.ARRAY
    if key == "$sort":
        return SubqueryKind.SORT
    return SubqueryKind.SINGLE_VALUE


class SortOrder(int, Enum):
    ASCENDING = 1
    DESCENDING = -1


@dataclass(frozen=True)
class Query:
    """
    Immutable query builder.

    Each builder method returns a new Query; ``serialize()`` produces the
    nested mapping understood by Feathers servers, e.g.
    ``{"age": {"$gt": 18}, "$sort": {"name": 1}, "$limit": 10}``.
    A property takes either an equality value or operator filters, not both.
    """

    properties: Tuple[Tuple[str, Any], ...] = ()
    subqueries: Tuple[Tuple[str, str, Any], ...] = ()
    sorts: Tuple[Tuple[str, int], ...] = ()
    limit_value: Optional[int] = None
    skip_value: Optional[int] = None
    selected: Tuple[str, ...] = ()

    def _with(self, **changes: Any) -> "Query":
        values = {
            "properties": self.properties,
            "subqueries": self.subqueries,
            "sorts": self.sorts,
            "limit_value": self.limit_value,
            "skip_value": self.skip_value,
            "selected": self.selected,
        }
        values.update(changes)
        return Query(**values)

    def _subquery(self, prop: str, operator: str, value: Any) -> "Query":
        if any(p == prop for p, _ in self.properties):
            raise ValueError(f"{prop!r} already has an equality filter")
        return self._with(subqueries=self.subqueries + ((prop, operator, value),))

    def eq(self, prop: str, value: Any) -> "Query":
        if any(p == prop for p, _, _ in self.subqueries):
            raise ValueError(f"{prop!r} already has operator filters")
        return self._with(properties=self.properties + ((prop, value),))

    def ne(self, prop: str, value: Any) -> "Query":
        return self._subquery(prop, "$ne", value)

    def gt(self, prop: str, value: Any) -> "Query":
        return self._subquery(prop, "$gt", value)

    def gte(self, prop: str, value: Any) -> "Query":
        return self._subquery(prop, "$gte", value)

    def lt(self, prop: str, value: Any) -> "Query":
        return self._subquery(prop, "$lt", value)

    def lte(self, prop: str, value: Any) -> "Query":
        return self._subquery(prop, "$lte", value)

    def in_(self, prop: str, values: Iterable[Any]) -> "Query":
        # Set operators travel as strings on the query string.
        return self._subquery(prop, "$in", [str(v) for v in values])

    def nin(self, prop: str, values: Iterable[Any]) -> "Query":
        return self._subquery(prop, "$nin", [str(v) for v in values])

    def sort(self, prop: str, order: SortOrder = SortOrder.ASCENDING) -> "Query":
        return self._with(sorts=self.sorts + ((prop, int(order)),))

    def limit(self, value: int) -> "Query":
        if value < 0:
            raise ValueError("limit must be non-negative")
        return self._with(limit_value=value)

    def skip(self, value: int) -> "Query":
        if value < 0:
            raise ValueError("skip must be non-negative")
        return self._with(skip_value=value)

    def select(self, *props: str) -> "Query":
        return self._with(selected=self.selected + tuple(props))

    def serialize(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for prop, value in self.properties:
            out[prop] = value
        for prop, operator, value in self.subqueries:
            nested = out.get(prop)
            if not isinstance(nested, dict):
                nested = {}
                out[prop] = nested
            nested[operator] = value
        if self.sorts:
            out["$sort"] = {prop: order for prop, order in self.sorts}
        if self.limit_value is not None:
            out["$limit"] = self.limit_value
        if self.skip_value is not None:
            out["$skip"] = self.skip_value
        if self.selected:
            out[SELECT_KEY] = list(self.selected)
        return out


# --- Call descriptions ----------------------------------------------------- #


@dataclass(frozen=True)
class Find:
    query: Optional[Query] = None

    name: ClassVar[str] = "find"


@dataclass(frozen=True)
class Get:
    id: Optional[Union[str, int]]
    query: Optional[Query] = None

    name: ClassVar[str] = "get"


@dataclass(frozen=True)
class Create:
    data: Dict[str, Any] = field(default_factory=dict)
    query: Optional[Query] = None

    name: ClassVar[str] = "create"


@dataclass(frozen=True)
class Update:
    id: Optional[Union[str, int]]
    data: Dict[str, Any] = field(default_factory=dict)
    query: Optional[Query] = None

    name: ClassVar[str] = "update"


@dataclass(frozen=True)
class Patch:
    id: Optional[Union[str, int]]
    data: Dict[str, Any] = field(default_factory=dict)
    query: Optional[Query] = None

    name: ClassVar[str] = "patch"


@dataclass(frozen=True)
class Remove:
    id: Optional[Union[str, int]]
    query: Optional[Query] = None

    name: ClassVar[str] = "remove"


ServiceMethod = Union[Find, Get, Create, Update, Patch, Remove]

_HTTP_METHODS: Dict[type, str] = {
    Find: "GET",
    Get: "GET",
    Create: "POST",
    Update: "PUT",
    Patch: "PATCH",
    Remove: "DELETE",
}


def http_method(call: ServiceMethod) -> str:
    try:
        return _HTTP_METHODS[type(call)]
    except KeyError:
        raise TypeError(f"Unsupported service method: {call!r}") from None


def call_id(call: ServiceMethod) -> Optional[str]:
    if isinstance(call, (Get, Update, Patch, Remove)) and call.id is not None:
        return str(call.id)
    return None


def call_parameters(call: ServiceMethod) -> Optional[Dict[str, Any]]:
    query = call.query
    return query.serialize() if query is not None else None


def call_data(call: ServiceMethod) -> Optional[Dict[str, Any]]:
    if isinstance(call, (Create, Update, Patch)):
        return call.data
    return None


__all__ = [
    "Query",
    "SortOrder",
    "SubqueryKind",
    "subquery_kind",
    "SELECT_KEY",
    "SELECT_ALIASES",
    "ServiceMethod",
    "Find",
    "Get",
    "Create",
    "Update",
    "Patch",
    "Remove",
    "http_method",
    "call_id",
    "call_parameters",
    "call_data",
]

