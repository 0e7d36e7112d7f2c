# /callscript/navigation/validator.py

"""
Pure validation functions for imported script data.

This module checks raw step/button records before they are turned into
ScriptStep models, and checks a loaded script graph for authoring mistakes
(dangling button targets, unreachable steps, bad product entry points).

All functions are:
- Pure (no side effects)
- Deterministic (same input = same output)
- No store access
- No logging
"""

from typing import Any, Dict, Iterable, List, Optional, TypedDict

from callscript.models.script import Product, ScriptStep
from callscript.navigation.graph import (
    check_product_entry,
    find_dangling_references,
    find_unreachable_steps,
)

# Button target that ends the call in imported scripts
TERMINAL_TARGET = "fim"


class ValidationResult(TypedDict):
    """Result of a validation check."""
    is_valid: bool
    error_code: Optional[str]
    message: Optional[str]


class GraphReport(TypedDict):
    """Outcome of a whole-graph check. Warnings never block an import."""
    is_valid: bool
    entry_errors: List[str]
    dangling_references: List[Dict[str, str]]
    unreachable_steps: List[str]


def _ok() -> ValidationResult:
    return {
        "is_valid": True,
        "error_code": None,
        "message": None
    }


def _fail(error_code: str, message: str) -> ValidationResult:
    return {
        "is_valid": False,
        "error_code": error_code,
        "message": message
    }


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_button(raw_button: Any, step_id: str = "?", index: int = 0) -> ValidationResult:
    """
    Validate one raw button record: ``{"label": str, "next": str, "primary"?: bool}``.

    Args:
        raw_button: The decoded JSON value
        step_id: Owning step id, used in messages
        index: Position of the button in the step

    Returns:
        ValidationResult with is_valid=True if the button can be imported
    """
    if not isinstance(raw_button, dict):
        return _fail("BUTTON_NOT_OBJECT", f"Button {index} of step '{step_id}' is not an object")

    if _is_blank(raw_button.get("label")):
        return _fail("EMPTY_BUTTON_LABEL", f"Button {index} of step '{step_id}' has no label")

    target = raw_button.get("next")
    if target is not None and not isinstance(target, str):
        return _fail(
            "INVALID_BUTTON_TARGET",
            f"Button {index} of step '{step_id}' has a non-string target: {target!r}"
        )
    if _is_blank(target):
        return _fail(
            "EMPTY_BUTTON_TARGET",
            f"Button {index} of step '{step_id}' has no target (use '{TERMINAL_TARGET}' to end the call)"
        )

    primary = raw_button.get("primary")
    if primary is not None and not isinstance(primary, bool):
        return _fail("INVALID_PRIMARY_FLAG", f"Button {index} of step '{step_id}' has a non-boolean 'primary'")

    return _ok()


def validate_step_record(raw_step: Any, key: str = "?") -> ValidationResult:
    """
    Validate one raw step record: ``{"id", "title", "body", "buttons": [...]}``.

    Args:
        raw_step: The decoded JSON value
        key: The record's key inside the product mapping

    Returns:
        ValidationResult with is_valid=True if the step and all its buttons are importable
    """
    if not isinstance(raw_step, dict):
        return _fail("STEP_NOT_OBJECT", f"Entry '{key}' is not an object")

    step_id = raw_step.get("id")
    if _is_blank(step_id) or not isinstance(step_id, str):
        return _fail("EMPTY_STEP_ID", f"Entry '{key}' has no id")

    if _is_blank(raw_step.get("title")):
        return _fail("EMPTY_STEP_TITLE", f"Step '{step_id}' has no title")

    body = raw_step.get("body", "")
    if body is not None and not isinstance(body, str):
        return _fail("INVALID_STEP_BODY", f"Step '{step_id}' has a non-text body")

    buttons = raw_step.get("buttons", [])
    if not isinstance(buttons, list):
        return _fail("BUTTONS_NOT_LIST", f"Step '{step_id}' buttons must be a list")

    for index, raw_button in enumerate(buttons):
        button_result = validate_button(raw_button, step_id, index)
        if not button_result["is_valid"]:
            return button_result

    return _ok()


def validate_product_entry(product: Product, steps: Iterable[ScriptStep]) -> ValidationResult:
    """
    Validate that a product's script_id resolves to a step of that product.

    Returns:
        ValidationResult with is_valid=True if the product can start a session
    """
    if _is_blank(product.script_id):
        return _fail("EMPTY_SCRIPT_ID", f"Product '{product.id}' has no entry step")

    problem = check_product_entry(product, steps)
    if problem is not None:
        return _fail("INVALID_ENTRY_STEP", problem)

    return _ok()


def validate_script_graph(steps: Iterable[ScriptStep], products: Iterable[Product]) -> GraphReport:
    """
    Check a loaded script for authoring mistakes.

    Entry errors make the report invalid because the product cannot start a
    session. Dangling references and unreachable steps are reported as
    warnings: the navigation session tolerates both at runtime.
    """
    steps = list(steps)
    products = list(products)

    entry_errors = []
    for product in products:
        result = validate_product_entry(product, steps)
        if not result["is_valid"]:
            entry_errors.append(result["message"])

    dangling = [
        {"step_id": step_id, "button_id": button_id, "next_step_id": target}
        for step_id, button_id, target in find_dangling_references(steps)
    ]

    return {
        "is_valid": not entry_errors,
        "entry_errors": entry_errors,
        "dangling_references": dangling,
        "unreachable_steps": find_unreachable_steps(steps, products),
    }
