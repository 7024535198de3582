from fisio.util import (
    ABSENT,
    ensure_period,
    fmt_percent,
    fmt_value,
    is_absent,
    join_enumeration,
    split_head_tail,
)


def test_absent_values():
    assert is_absent(None)
    assert is_absent("  ")
    assert is_absent("--")
    assert not is_absent("0")


def test_fmt_value_units_once():
    assert fmt_value("", "L/min") is ABSENT
    assert fmt_value(None) is ABSENT
    assert fmt_value("3", "L/min") == "3 L/min"
    assert fmt_value("3 l/min", "L/min") == "3 l/min"
    assert fmt_value("450ml", "mL") == "450ml"
    assert fmt_percent("95") == "95%"
    assert fmt_percent("95 %") == "95 %"
    assert fmt_value(" 88 ") == "88"


def test_split_head_tail_leaves_input_alone():
    items = ["a", "b", "c"]
    head, last = split_head_tail(items)
    assert head == ("a", "b") and last == "c"
    assert items == ["a", "b", "c"]
    assert split_head_tail([]) == ((), None)


def test_join_enumeration():
    assert join_enumeration([]) == ""
    assert join_enumeration(["a"]) == "a"
    assert join_enumeration(["a", "b", "c"]) == "a, b e c"


def test_ensure_period():
    assert ensure_period("Texto") == "Texto."
    assert ensure_period("Texto.") == "Texto."
    assert ensure_period("") == ""
