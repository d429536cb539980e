import pytest

from api.security.validators import (
    parse_accuracy,
    parse_float,
    parse_int,
    sanitize_mode,
    sanitize_player_name,
    validate_request_body_size,
)


@pytest.mark.parametrize("value, expected", [
    (80, 80),
    ("80", 80),
    (" 80 ", 80),
    ("80.9", 80),
    (80.9, 80),
    (-3.5, -3),
    ("1e3", 1000),
])
def test_parse_int_coerces_numbers(value, expected):
    assert parse_int(value) == expected


@pytest.mark.parametrize("value", [None, True, False, "", "fast", "nan", float("inf"), [80], {"v": 1}])
def test_parse_int_rejects_non_numbers(value):
    assert parse_int(value) is None


def test_parse_float():
    assert parse_float("95.5") == 95.5
    assert parse_float(90) == 90.0
    assert parse_float("inf") is None


@pytest.mark.parametrize("value, expected", [
    ("95.5%", 95.5),
    (" 87% ", 87.0),
    ("100", 100.0),
    (42.25, 42.25),
])
def test_parse_accuracy_strips_percent(value, expected):
    assert parse_accuracy(value) == expected


def test_parse_accuracy_rejects_bare_percent():
    assert parse_accuracy("%") is None


def test_sanitize_mode():
    assert sanitize_mode(" flick ") == "flick"
    assert sanitize_mode("") is None
    assert sanitize_mode("flick:all") is None
    assert sanitize_mode(None) is None
    assert sanitize_mode(3) is None


def test_sanitize_player_name_keeps_text_verbatim():
    assert sanitize_player_name("<Hiro>") == "<Hiro>"
    assert sanitize_player_name("ひろし") == "ひろし"
    assert sanitize_player_name("Ann Lee") == "Ann Lee"
    assert sanitize_player_name(" Alice") is None
    assert sanitize_player_name("Alice\t") is None
    assert sanitize_player_name("a\nb") is None
    assert sanitize_player_name("x" * 51) is None


def test_request_body_size():
    assert validate_request_body_size(0) == (True, "")
    assert validate_request_body_size(100)[0] is True
    assert validate_request_body_size(10_000)[0] is False
