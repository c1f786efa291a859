import pytest

from caja.denominations import (
    DENOMINATIONS,
    counts_from_json,
    counts_to_json,
    normalize_delta,
    parse_draft_quantity,
    total_cents,
)
from caja.errors import InvalidMovementError, MalformedStateError


def test_denominations_are_largest_first():
    assert DENOMINATIONS == (1000, 500, 200, 100, 50, 20, 10, 5)


def test_normalize_orders_and_drops_zeros():
    delta = normalize_delta({5: 1, "1000": 2, 50: 0})
    assert delta == {1000: 2, 5: 1}
    assert list(delta) == [1000, 5]


def test_normalize_merges_int_and_string_keys():
    assert normalize_delta({"500": 1, 500: 2}) == {500: 3}


def test_normalize_respects_custom_set():
    assert normalize_delta({25: 2}, allowed=(100, 25)) == {25: 2}
    with pytest.raises(InvalidMovementError):
        normalize_delta({500: 1}, allowed=(100, 25))


@pytest.mark.parametrize("bad", [{"7": 1}, {True: 1}, {None: 1}, {"1e3": 1}])
def test_normalize_rejects_unknown_keys(bad):
    with pytest.raises(InvalidMovementError):
        normalize_delta(bad)


def test_total_cents():
    assert total_cents({}) == 0
    assert total_cents({1000: 2, 500: 1}) == 250000
    assert total_cents({5: 3}) == 1500


def test_counts_to_json_uses_string_keys_largest_first():
    assert counts_to_json({5: 1, 1000: 2}) == '{"1000": 2, "5": 1}'


def test_counts_from_json():
    assert counts_from_json('{"5": 1, "1000": 2}') == {1000: 2, 5: 1}
    assert counts_from_json("{}") == {}
    assert counts_from_json("") == {}
    assert counts_from_json(None) == {}


@pytest.mark.parametrize(
    "text",
    ["{oops", "[1, 2]", '{"abc": 1}', '{"100": -1}', '{"100": 1.5}', '{"100": "2"}', '{"0": 1}'],
)
def test_counts_from_json_rejects_malformed(text):
    with pytest.raises(MalformedStateError):
        counts_from_json(text)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("3", 3),
        (" 12 ", 12),
        ("2x", 2),
        ("", 0),
        (None, 0),
        ("abc", 0),
        ("-4", 0),
        (7, 7),
    ],
)
def test_parse_draft_quantity(text, expected):
    assert parse_draft_quantity(text) == expected
