import pytest

from adminkit.dto import (
    BindError,
    GeneralDelDto,
    ObjectById,
    ObjectDeleteReq,
    ObjectGetReq,
    Pagination,
    order_by,
    paginate,
)


def test_pagination_defaults():
    p = Pagination()
    assert p.page_index == 1
    assert p.page_size == 10


def test_pagination_from_query():
    p = Pagination.from_query({"pageIndex": "3", "pageSize": "20"})
    assert (p.page_index, p.page_size) == (3, 20)


def test_pagination_from_query_invalid():
    with pytest.raises(BindError):
        Pagination.from_query({"pageIndex": "abc"})


def test_first_page_has_no_offset():
    assert Pagination(page_index=1, page_size=25).offset() == 0


def test_paginate_never_negative():
    window = paginate(20, 0)
    assert window.offset == 0
    assert window.limit == 20


def test_paginate_consecutive_pages_are_adjacent():
    first = paginate(15, 2)
    second = paginate(15, 3)
    assert second.offset - first.offset == first.limit


def test_general_del_dto_ids():
    assert GeneralDelDto(ids=[1, -2, 3]).get_ids() == [1, 3]
    assert GeneralDelDto().get_ids() == [0]
    assert GeneralDelDto(id=5).get_ids() == [5, 5]


def test_object_by_id_get():
    req = ObjectById().bind("GET", {"id": "7"})
    assert req.get_id() == 7


def test_object_by_id_delete_with_ids():
    req = ObjectById().bind("DELETE", {"id": "7"}, {"ids": [1, 2]})
    assert req.get_id() == [1, 2, 7]


def test_object_by_id_delete_without_ids():
    req = ObjectById().bind("DELETE", {"id": "7"}, {})
    assert req.ids == [7]
    assert req.get_id() == [7, 7]


def test_object_by_id_invalid_uri():
    with pytest.raises(BindError):
        ObjectById().bind("GET", {"id": "x"})


def test_object_get_req():
    assert ObjectGetReq().bind({"id": "4"}).get_id() == 4
    with pytest.raises(BindError):
        ObjectGetReq().bind({"id": "four"})


def test_object_delete_req():
    assert ObjectDeleteReq().bind({"ids": [1, 2]}).get_id() == [1, 2]
    assert ObjectDeleteReq().bind({}).get_id() == []
    with pytest.raises(BindError):
        ObjectDeleteReq().bind({"ids": "x"})


def test_order_by():
    assert order_by("name", True) == '"name" DESC'
    assert order_by("name", False) == '"name"'