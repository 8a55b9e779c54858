"""Templated computed fields.

Computed fields declared in configuration files can't carry a Python callable,
so they are given as jinja2 templates instead. The record being projected
provides the template variables, e.g. `{{ Name | upper }}`.

"""

from functools import lru_cache
from typing import NoReturn

import jinja2

from apprecon.core_engine.exceptions import RuleTemplateError
from apprecon.core_engine.records import MISSING
from apprecon.core_engine.type_hints import Record, Template, Value


class MissingFieldUndefined(jinja2.Undefined):
    """Render fields that are absent from the record as empty strings."""

    def __str__(self):
        return ""


def _raise_rule_templating_error(message: str) -> NoReturn:
    """Raise a configuration error from a template."""
    raise RuleTemplateError(message)


def default_if_missing(value: Value, default: Value = "") -> Value:
    """Replace a missing or null value with a default."""
    if value is MISSING or value is None or isinstance(value, jinja2.Undefined):
        return default
    return value


def yes_no(value: Value, yes: str = "Yes", no: str = "No") -> str:
    """Render a flag as 'Yes'/'No'."""
    if value is MISSING or isinstance(value, jinja2.Undefined):
        return ""
    return yes if value else no


ENVIRONMENT = jinja2.Environment(
    autoescape=jinja2.select_autoescape(default_for_string=False),
    undefined=MissingFieldUndefined,
)
ENVIRONMENT.globals["repr"] = repr
ENVIRONMENT.globals["str"] = str
ENVIRONMENT.globals["raise"] = _raise_rule_templating_error
ENVIRONMENT.filters["default_if_missing"] = default_if_missing
ENVIRONMENT.filters["yes_no"] = yes_no


@lru_cache(maxsize=256)
def compile_expression(template: Template) -> jinja2.Template:
    """Compile a computed field template, raising a `RuleTemplateError` if it
    isn't valid jinja.

    """
    try:
        return ENVIRONMENT.from_string(template)
    except jinja2.TemplateSyntaxError as err:
        raise RuleTemplateError(f"Invalid computed field template {template!r}: {err}") from err


def render_expression(template: Template, record: Record) -> str:
    """Render a computed field template with the fields of `record`."""
    variables = {
        key: ("" if value is MISSING else value)
        for key, value in record.items()
        if isinstance(key, str)
    }
    try:
        return compile_expression(template).render(variables)
    except jinja2.TemplateError as err:
        raise RuleTemplateError(f"Unable to render computed field {template!r}: {err}") from err
