"""Tests for formatting helpers."""

import pytest

from macdiskutil.utils.format import TermColors, bytes_to_human_readable, colorize, parse_size_spec


@pytest.mark.parametrize(
    "spec, expected",
    [
        ("110g", 110 * 1000**3),
        ("1.5T", 1500 * 1000**3),
        ("500000000b", 500000000),
        ("1000s", 512000),
        ("42", 42),
        ("2 M", 2000000),
    ],
)
def test_parse_size_spec(spec, expected):
    assert parse_size_spec(spec) == expected


def test_parse_percentage():
    assert parse_size_spec("20%", 1000) == 200
    with pytest.raises(ValueError):
        parse_size_spec("20%")


@pytest.mark.parametrize("spec", ["", "g", "10x", "ten gigs"])
def test_parse_invalid(spec):
    with pytest.raises(ValueError):
        parse_size_spec(spec)


def test_bytes_to_human_readable():
    assert bytes_to_human_readable(999) == "999 B"
    assert bytes_to_human_readable(1000000) == "1.00 MB"
    assert bytes_to_human_readable(251000193024) == "251.00 GB"


def test_colorize():
    assert colorize("msg", TermColors.ERROR, enabled=False) == "msg"
    assert colorize("msg", TermColors.ERROR) == f"{TermColors.ERROR}msg{TermColors.ENDC}"
