import sqlite3

import pytest

from adminkit.permission import (
    PERMISSION_KEY,
    DataPermission,
    load_data_permission,
    permission_filter,
    permission_from_context,
)


@pytest.fixture
def conn():
    db = sqlite3.connect(":memory:")
    db.execute("CREATE TABLE sys_user (user_id INTEGER, role_id INTEGER, dept_id INTEGER)")
    db.execute("CREATE TABLE sys_role (role_id INTEGER, data_scope TEXT)")
    db.execute("INSERT INTO sys_user VALUES (1, 3, 7)")
    db.execute("INSERT INTO sys_user VALUES (2, 99, 8)")
    db.execute("INSERT INTO sys_role VALUES (3, '3')")
    yield db
    db.close()


def test_load_existing_user(conn):
    p = load_data_permission(conn, 1)
    assert p == DataPermission(data_scope="3", user_id=1, dept_id=7, role_id=3)


def test_load_user_without_role(conn):
    p = load_data_permission(conn, 2)
    assert p.role_id == 0
    assert p.data_scope == ""
    assert p.dept_id == 8


def test_load_unknown_user(conn):
    assert load_data_permission(conn, 42) == DataPermission()


def test_load_error_is_raised():
    db = sqlite3.connect(":memory:")
    with pytest.raises(RuntimeError, match="获取用户数据出错"):
        load_data_permission(db, 1)


def test_filter_disabled():
    assert permission_filter("t", DataPermission(data_scope="5", user_id=1), False) is None


@pytest.mark.parametrize("scope", ["", "1", "9"])
def test_filter_all_rows(scope):
    assert permission_filter("t", DataPermission(data_scope=scope), True) is None


def test_filter_role_scope():
    cond = permission_filter("tb", DataPermission(data_scope="2", role_id=4), True)
    assert cond.sql.startswith("tb.create_by in (select sys_user.user_id from sys_role_dept")
    assert cond.params == (4,)


def test_filter_dept_scope():
    cond = permission_filter("tb", DataPermission(data_scope="3", dept_id=6), True)
    assert "where dept_id = ?" in cond.sql
    assert cond.params == (6,)


def test_filter_dept_tree_scope():
    cond = permission_filter("tb", DataPermission(data_scope="4", dept_id=7), True)
    assert "dept_path like ?" in cond.sql
    assert cond.params == ("%/7/%",)


def test_filter_own_rows():
    cond = permission_filter("tb", DataPermission(data_scope="5", user_id=11), True)
    assert cond.sql == "tb.create_by = ?"
    assert cond.params == (11,)


def test_filters_work_in_sqlite(conn):
    conn.execute("CREATE TABLE tb (id INTEGER, create_by INTEGER)")
    conn.executemany("INSERT INTO tb VALUES (?, ?)", [(1, 1), (2, 2), (3, 1)])
    cond = permission_filter("tb", DataPermission(data_scope="3", dept_id=7), True)
    rows = conn.execute(f"SELECT id FROM tb WHERE {cond.sql} ORDER BY id", cond.params).fetchall()
    assert [r[0] for r in rows] == [1, 3]


def test_permission_from_context():
    p = DataPermission(data_scope="5", user_id=3)
    assert permission_from_context({PERMISSION_KEY: p}) is p


def test_permission_from_context_missing_or_wrong_type():
    assert permission_from_context({}) == DataPermission()
    assert permission_from_context({PERMISSION_KEY: "x"}) == DataPermission()