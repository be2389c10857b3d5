from __future__ import annotations

import pytest

from company_intel.utils.text import (
    contains_suspicious_term,
    format_currency,
    is_valid_url,
    sanitize_text,
)


def test_sanitize_text_strips_control_characters_and_whitespace():
    assert sanitize_text("  Acme\x00\tConsulting \n SA ") == "Acme Consulting SA"
    assert sanitize_text("Capgemini", max_length=3) == "Cap"


@pytest.mark.parametrize(
    ("amount", "expected"),
    [(2_500_000, "€2.5M"), (1_200_000_000, "€1.2B"), (45_000, "€45.0K"), (950, "€950")],
)
def test_format_currency(amount, expected):
    assert format_currency(amount) == expected


def test_is_valid_url():
    assert is_valid_url("https://www.capgemini.com")
    assert not is_valid_url("capgemini.com")
    assert not is_valid_url(None)


def test_contains_suspicious_term_is_case_insensitive_substring():
    terms = ["test", "demo", "xxx"]

    assert contains_suspicious_term("My TEST company", terms)
    assert contains_suspicious_term("Demonstration SA", terms)
    assert not contains_suspicious_term("Capgemini", terms)
