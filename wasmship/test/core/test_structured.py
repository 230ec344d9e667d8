from __future__ import annotations

from wasmship.core.structured import (
    as_obj_list,
    as_str_dict,
    get_bool,
    get_float,
    get_int,
    get_str,
    get_str_list,
    get_table,
    is_str_dict,
)


def test_is_str_dict() -> None:
    assert is_str_dict({"a": 1})
    assert is_str_dict({})
    assert not is_str_dict({1: "a"})
    assert not is_str_dict(["a"])


def test_as_helpers() -> None:
    assert as_str_dict({"k": "v"}) == {"k": "v"}
    assert as_str_dict("nope") is None
    assert as_obj_list([1, "a"]) == [1, "a"]
    assert as_obj_list({"a": 1}) is None


def test_get_str_strips_and_rejects_blank() -> None:
    table: dict[str, object] = {"a": "  x  ", "b": "   ", "c": 3}
    assert get_str(table, "a") == "x"
    assert get_str(table, "b") is None
    assert get_str(table, "c") is None
    assert get_str(table, "missing") is None


def test_get_int_rejects_bool() -> None:
    table: dict[str, object] = {"n": 4, "flag": True, "f": 1.5}
    assert get_int(table, "n") == 4
    assert get_int(table, "flag") is None
    assert get_int(table, "f") is None


def test_get_float_accepts_int() -> None:
    table: dict[str, object] = {"n": 4, "f": 1.5, "flag": False}
    assert get_float(table, "n") == 4.0
    assert get_float(table, "f") == 1.5
    assert get_float(table, "flag") is None


def test_get_bool() -> None:
    assert get_bool({"v": True}, "v") is True
    assert get_bool({"v": 1}, "v") is None


def test_get_table() -> None:
    assert get_table({"build": {"target": "x"}}, "build") == {"target": "x"}
    assert get_table({"build": "x"}, "build") is None


def test_get_str_list() -> None:
    assert get_str_list({"v": [" -Oz ", "--strip-debug"]}, "v") == ["-Oz", "--strip-debug"]
    assert get_str_list({"v": ["ok", 3]}, "v") is None
    assert get_str_list({"v": ["ok", " "]}, "v") is None
    assert get_str_list({}, "v") is None
