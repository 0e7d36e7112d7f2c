# /callscript/navigation/importer.py

"""
Bulk script import.

Accepts the admin JSON format ``{"marcas": {PRODUCT: {key: step, ...}}}``,
validates every record, and converts accepted records into ScriptStep and
Product models. Malformed records are quarantined in ``ImportResult.rejected``
and never reach the step store.
"""

import logging
import re
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field

from callscript.models.script import Product, ScriptButton, ScriptStep, TabulationInfo
from callscript.navigation.validator import TERMINAL_TARGET, validate_step_record
from callscript.services.product_resolver import InMemoryProductResolver
from callscript.services.step_store import InMemoryStepStore
from callscript.utils.metrics import script_import_counter

logger = logging.getLogger(__name__)


class ScriptImportError(ValueError):
    """The payload as a whole is not a script export."""


class RejectedEntry(BaseModel):
    product: str
    key: str
    error_code: str
    message: str


class ImportResult(BaseModel):
    products: List[Product] = Field(default_factory=list)
    steps: List[ScriptStep] = Field(default_factory=list)
    rejected: List[RejectedEntry] = Field(default_factory=list)
    product_count: int = 0

    @property
    def step_count(self) -> int:
        return len(self.steps)


def product_id_for(product_name: str) -> str:
    return "prod-" + re.sub(r"\s+", "-", product_name.strip().lower())


def _button_variant(label: str, primary: bool) -> str:
    if primary:
        return "default"
    return "secondary" if "VOLTAR" in label.upper() else "default"


def _build_step(
    raw_step: Dict[str, Any],
    order: int,
    product_id: str,
    tabulations: Mapping[str, Mapping[str, str]],
) -> ScriptStep:
    step_id = raw_step["id"].strip()
    buttons = []
    for index, raw_button in enumerate(raw_step.get("buttons") or []):
        target = raw_button["next"].strip()
        primary = bool(raw_button.get("primary", False))
        buttons.append(
            ScriptButton(
                id=f"{step_id}-btn-{index}",
                label=raw_button["label"],
                next_step_id=None if target == TERMINAL_TARGET else target,
                order=index + 1,
                primary=primary,
                variant=_button_variant(raw_button["label"], primary),
            )
        )

    tabulation = tabulations.get(step_id)
    return ScriptStep(
        id=step_id,
        title=raw_step["title"],
        content=raw_step.get("body") or "",
        order=order,
        buttons=buttons,
        product_id=product_id,
        tabulation_info=TabulationInfo(**tabulation) if tabulation else None,
    )


def parse_script_payload(
    payload: Any,
    tabulations: Optional[Mapping[str, Mapping[str, str]]] = None,
) -> ImportResult:
    """
    Convert an import payload into models without touching any store.

    Raises:
        ScriptImportError: if the payload has no ``marcas`` mapping
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("marcas"), dict):
        raise ScriptImportError(
            "Invalid script format. Expected: { marcas: { PRODUTO: { step_key: {...} } } }"
        )

    tabulations = tabulations or {}
    result = ImportResult()

    for product_name, raw_steps in payload["marcas"].items():
        if not isinstance(raw_steps, dict):
            result.rejected.append(
                RejectedEntry(
                    product=str(product_name),
                    key="*",
                    error_code="PRODUCT_NOT_OBJECT",
                    message=f"Product '{product_name}' must map step keys to steps",
                )
            )
            continue

        product_id = product_id_for(product_name)
        product_steps: List[ScriptStep] = []
        seen_ids = set()

        for key, raw_step in raw_steps.items():
            validation = validate_step_record(raw_step, key)
            if validation["is_valid"] and raw_step["id"].strip() in seen_ids:
                validation = {
                    "is_valid": False,
                    "error_code": "DUPLICATE_STEP_ID",
                    "message": f"Step id '{raw_step['id']}' appears more than once in '{product_name}'",
                }
            if not validation["is_valid"]:
                result.rejected.append(
                    RejectedEntry(
                        product=product_name,
                        key=str(key),
                        error_code=validation["error_code"],
                        message=validation["message"],
                    )
                )
                continue

            step = _build_step(raw_step, len(product_steps) + 1, product_id, tabulations)
            seen_ids.add(step.id)
            product_steps.append(step)

        if not product_steps:
            logger.warning(f"Product {product_name} has no importable steps. Skipping.")
            continue

        result.steps.extend(product_steps)
        result.products.append(
            Product(
                id=product_id,
                name=product_name,
                # The first step of an exported product is its entry point.
                script_id=product_steps[0].id,
                category=product_name.lower(),
            )
        )

    return result


def import_script(
    payload: Any,
    step_store: InMemoryStepStore,
    product_resolver: InMemoryProductResolver,
    tabulations: Optional[Mapping[str, Mapping[str, str]]] = None,
) -> ImportResult:
    """
    Parse ``payload`` and write accepted steps and products to the stores.

    Re-importing a product replaces it: ``product_count`` counts only new ones.
    """
    try:
        result = parse_script_payload(payload, tabulations)
    except ScriptImportError:
        script_import_counter.labels(status="invalid").inc()
        raise

    new_products = 0
    for product in result.products:
        if product_resolver.find_by_name(product.name) is None:
            new_products += 1
    result.product_count = new_products

    step_store.upsert_steps(result.steps)
    product_resolver.upsert_products(result.products)

    if result.rejected:
        for entry in result.rejected:
            logger.warning(
                f"Quarantined script entry {entry.product}/{entry.key}: {entry.error_code} - {entry.message}"
            )
        script_import_counter.labels(status="partial").inc()
    else:
        script_import_counter.labels(status="success").inc()

    logger.info(
        f"Imported {result.step_count} steps for {len(result.products)} products "
        f"({result.product_count} new, {len(result.rejected)} rejected)."
    )
    return result
