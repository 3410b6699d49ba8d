"""
Template engine for per-row email personalization.

Templates use {name} placeholders. Substitution is plain string
replacement driven by the row's keys, so a placeholder with no matching
column passes through untouched.
"""
import re
from typing import Dict, Iterable, List, Tuple

from app.models.template import EmailTemplate, TEMPLATE_SEPARATOR

VARIABLE_PATTERN = re.compile(r"\{([^}]+)\}")


def find_variables(template: str) -> List[str]:
    """
    Find placeholder names in a template.

    Returns:
        Distinct names in first-occurrence order
    """
    variables = []
    for match in VARIABLE_PATTERN.finditer(template or ""):
        name = match.group(1)
        if name not in variables:
            variables.append(name)
    return variables


def render(template: str, row_values: Dict[str, str]) -> str:
    """
    Substitute a row's values into a template.

    Every occurrence of {key} is replaced for each key in the row, in the
    row's own key order. Values are inserted literally.

    Args:
        template: Pattern containing {name} placeholders
        row_values: Column name -> cell value

    Returns:
        Rendered string
    """
    rendered = template
    for key, value in row_values.items():
        rendered = rendered.replace("{" + key + "}", "" if value is None else str(value))
    return rendered


def split_template(combined: str) -> Tuple[str, str]:
    """Split 'subject\\n---\\nbody' into (subject, body)."""
    template = EmailTemplate.from_combined(combined or "")
    return template.subject, template.body


def join_template(subject: str, body: str) -> str:
    return f"{subject}{TEMPLATE_SEPARATOR}{body}"


def find_template_variables(template: EmailTemplate) -> List[str]:
    """Variables across subject then body, first occurrence wins."""
    variables = find_variables(template.subject)
    for name in find_variables(template.body):
        if name not in variables:
            variables.append(name)
    return variables


def unknown_variables(template: EmailTemplate, headers: Iterable[str]) -> List[str]:
    """Variables no sheet column will fill."""
    available = set(headers)
    return [name for name in find_template_variables(template) if name not in available]


def render_template(template: EmailTemplate, row_values: Dict[str, str]) -> Tuple[str, str]:
    """Render subject and body against one row."""
    return render(template.subject, row_values), render(template.body, row_values)
