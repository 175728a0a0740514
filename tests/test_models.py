from datetime import datetime

from adminkit.models import ControlBy, MenuType, Migration, Page, Response


def test_menu_type_values():
    assert MenuType.DIRECTORY.value == "M"
    assert MenuType.MENU.value == "C"
    assert MenuType.BUTTON.value == "F"
    assert MenuType("F") is MenuType.BUTTON


def test_migration_table_and_time():
    before = datetime.now()
    m = Migration(version="1599190683659")
    assert Migration.table_name == "sys_migration"
    assert m.version == "1599190683659"
    assert m.apply_time >= before


def test_response_return_ok():
    res = Response(msg="done")
    assert res.return_ok() is res
    assert res.code == 200


def test_response_return_error():
    res = Response().return_error(403)
    assert res.code == 403


def test_response_to_dict():
    res = Response(data=[1], msg="m", request_id="r").return_ok()
    assert res.to_dict() == {"code": 200, "data": [1], "msg": "m", "requestId": "r"}


def test_page_to_dict():
    page = Page(list=["a"], count=1, page_index=2, page_size=3)
    assert page.to_dict() == {"list": ["a"], "count": 1, "pageIndex": 2, "pageSize": 3}


def test_control_by_assignment():
    by = ControlBy()
    by.create_by = 7
    assert (by.create_by, by.update_by) == (7, 0)