"""Tests for templated computed fields."""

import pytest

from apprecon.core_engine.exceptions import ConfigurationError, RuleTemplateError
from apprecon.core_engine.records import MISSING
from apprecon.core_engine.templating import default_if_missing, render_expression, yes_no


@pytest.mark.parametrize(
    ["template", "record", "expected"],
    [
        ("{{ Name | upper }}", {"Name": "word"}, "WORD"),
        ("{{ Folder }}\\{{ Name }}", {"Name": "Word", "Folder": "Office"}, "Office\\Word"),
        ("{{ Owner }}", {"Name": "Word"}, ""),
        ("{{ Owner | upper }}", {"Name": "Word"}, ""),
        ("{{ Owner }}", {"Owner": MISSING}, ""),
        ("{{ Owner | default_if_missing('nobody') }}", {"Owner": None}, "nobody"),
        ("{{ Enabled | yes_no }}", {"Enabled": False}, "No"),
        ("<{{ Name }}>", {"Name": "A & B"}, "<A & B>"),
    ],
)
def test_render_expression(template: str, record: dict, expected: str):
    """Templates are rendered with the record's fields, absent fields are empty."""
    assert render_expression(template, record) == expected


def test_raise_in_template():
    """Templates can raise configuration errors explicitly."""
    with pytest.raises(RuleTemplateError, match="no owner"):
        render_expression("{{ raise('no owner') if not Owner }}", {})


def test_template_errors_are_configuration_errors():
    """Template syntax errors are configuration errors."""
    with pytest.raises(ConfigurationError):
        render_expression("{% if %}", {})


def test_filters():
    """The filters handle missing values."""
    assert default_if_missing(MISSING, "x") == "x"
    assert default_if_missing(0, "x") == 0
    assert yes_no(True) == "Yes"
    assert yes_no(MISSING) == ""
