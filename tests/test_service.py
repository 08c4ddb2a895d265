import pytest
from feathers_rest.core.service import (
    Create,
    Find,
    Get,
    Patch,
    Query,
    Remove,
    SortOrder,
    SubqueryKind,
    Update,
    call_data,
    call_id,
    call_parameters,
    http_method,
    subquery_kind,
)


@pytest.mark.parametrize(
    "call,expected",
    [
        (Find(), "GET"),
        (Get(id="1"), "GET"),
        (Create(data={}), "POST"),
        (Update(id="1", data={}), "PUT"),
        (Patch(id="1", data={}), "PATCH"),
        (Remove(id="1"), "DELETE"),
    ],
)
def test_http_method_mapping(call, expected):
    assert http_method(call) == expected


def test_http_method_rejects_unknown_call():
    with pytest.raises(TypeError):
        http_method(object())


def test_call_id_only_for_identified_variants():
    assert call_id(Find()) is None
    assert call_id(Create(data={"a": 1})) is None
    assert call_id(Get(id=42)) == "42"
    assert call_id(Remove(id=None)) is None
    assert call_id(Patch(id="abc", data={})) == "abc"


def test_call_data_only_for_mutating_variants():
    body = {"text": "hi"}
    assert call_data(Create(data=body)) == body
    assert call_data(Update(id="1", data=body)) == body
    assert call_data(Patch(id=None, data=body)) == body
    assert call_data(Get(id="1")) is None
    assert call_data(Remove(id="1")) is None


def test_call_parameters_serializes_query():
    assert call_parameters(Find()) is None
    assert call_parameters(Find(query=Query().limit(5))) == {"$limit": 5}


def test_variant_names():
    assert [c.name for c in (Find, Get, Create, Update, Patch, Remove)] == [
        "find",
        "get",
        "create",
        "update",
        "patch",
        "remove",
    ]


def test_query_serialize_full():
    query = (
        Query()
        .eq("done", False)
        .gt("age", 18)
        .lt("age", 65)
        .in_("role", ["admin", 7])
        .sort("name")
        .sort("age", SortOrder.DESCENDING)
        .limit(10)
        .skip(20)
        .select("name", "age")
    )
    assert query.serialize() == {
        "done": False,
        "age": {"$gt": 18, "$lt": 65},
        "role": {"$in": ["admin", "7"]},
        "$sort": {"name": 1, "age": -1},
        "$limit": 10,
        "$skip": 20,
        "$select": ["name", "age"],
    }


def test_query_builders_are_immutable():
    base = Query()
    limited = base.limit(3)
    assert base.serialize() == {}
    assert limited.serialize() == {"$limit": 3}


def test_query_rejects_negative_paging():
    with pytest.raises(ValueError):
        Query().limit(-1)
    with pytest.raises(ValueError):
        Query().skip(-5)


def test_subquery_kind():
    assert subquery_kind("$in") is SubqueryKind.ARRAY
    assert subquery_kind("$nin") is SubqueryKind.ARRAY
    assert subquery_kind("$sort") is SubqueryKind.SORT
    assert subquery_kind("$gt") is SubqueryKind.SINGLE_VALUE
    assert subquery_kind("name") is SubqueryKind.SINGLE_VALUE


def test_query_rejects_mixing_equality_and_operators():
    with pytest.raises(ValueError):
        Query().eq("age", 3).gt("age", 1)
    with pytest.raises(ValueError):
        Query().lt("age", 9).eq("age", 3)
    assert Query().gt("age", 1).lt("age", 9).serialize() == {
        "age": {"$gt": 1, "$lt": 9}
    }
