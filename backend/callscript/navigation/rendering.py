# /callscript/navigation/rendering.py

"""
Renderer-side placeholder substitution.

Step content keeps its bracket tokens in the store and in the navigation
session. They are only filled in here, at display time, with the data of the
call being handled.
"""

import html
import re
from typing import Optional

from callscript.config.settings import settings

OPERATOR_NAME_TOKEN = re.compile(r"\[Nome do operador\]", re.IGNORECASE)
CUSTOMER_FIRST_NAME_TOKEN = re.compile(r"\[Primeiro nome do cliente\]", re.IGNORECASE)
CUSTOMER_FULL_NAME_TOKEN = re.compile(r"\[Nome completo do cliente\]", re.IGNORECASE)
CUSTOMER_CPF_TOKEN = re.compile(r"\[CPF do cliente\]", re.IGNORECASE)


def operator_first_name(full_name: Optional[str]) -> str:
    """First whitespace-delimited token of the operator's full name."""
    if not full_name:
        return ""
    parts = full_name.split()
    return parts[0] if parts else ""


def _strong(value: str) -> str:
    return f"<strong>{html.escape(value)}</strong>"


def render_content(
    content: Optional[str],
    operator_name: str,
    customer_first_name: Optional[str] = None,
    customer_full_name: Optional[str] = None,
    line_breaks: bool = True,
) -> str:
    """
    Substitute the placeholder tokens of a step's content.

    Args:
        content: Raw step content
        operator_name: Operator's full name; only the first name is shown
        customer_first_name: Free text typed by the operator for this call
        customer_full_name: Full name, falling back to the first name
        line_breaks: Convert newlines to ``<br>``

    Returns:
        The HTML fragment the operator screen displays
    """
    first_name = (customer_first_name or "").strip() or settings.default_customer_name
    full_name = (customer_full_name or "").strip() or first_name

    # Callables keep backslashes in names from being read as group references.
    rendered = content or ""
    rendered = OPERATOR_NAME_TOKEN.sub(lambda _: _strong(operator_first_name(operator_name)), rendered)
    rendered = CUSTOMER_FIRST_NAME_TOKEN.sub(lambda _: _strong(first_name), rendered)
    rendered = CUSTOMER_FULL_NAME_TOKEN.sub(lambda _: _strong(full_name), rendered)
    rendered = CUSTOMER_CPF_TOKEN.sub(lambda _: _strong(settings.cpf_mask), rendered)
    if line_breaks:
        rendered = rendered.replace("\n", "<br>")
    return rendered


def highlight_title(title: str, query: Optional[str]) -> str:
    """Wrap every case-insensitive occurrence of ``query`` in ``<mark>``."""
    if not query or query.lower() not in title.lower():
        return title
    pattern = re.compile(f"({re.escape(query)})", re.IGNORECASE)
    return pattern.sub(r"<mark>\1</mark>", title)
