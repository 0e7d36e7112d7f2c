# /callscript/navigation/graph.py

"""
Script graph analysis.

The script graph is never materialised for navigation: the session resolves
one edge at a time through the step store. These helpers build a temporary
view of a loaded step set for administrative checks only.
"""

from collections import deque
from typing import Dict, Iterable, List, Optional, Tuple

from callscript.models.script import Product, ScriptStep


def _index(steps: Iterable[ScriptStep]) -> Dict[str, List[ScriptStep]]:
    # Ids are logically scoped per product, so one id may map to several steps.
    index: Dict[str, List[ScriptStep]] = {}
    for step in steps:
        index.setdefault(step.id, []).append(step)
    return index


def _resolve(index: Dict[str, List[ScriptStep]], step_id: str, product_id: Optional[str]) -> Optional[ScriptStep]:
    candidates = index.get(step_id, [])
    if product_id is None:
        return candidates[0] if candidates else None
    return next((step for step in candidates if step.belongs_to(product_id)), None)


def successors(step: ScriptStep) -> List[str]:
    """Targets of a step's non-terminal buttons, in display order."""
    return [button.next_step_id for button in step.sorted_buttons() if button.next_step_id is not None]


def find_dangling_references(steps: Iterable[ScriptStep]) -> List[Tuple[str, str, str]]:
    """Return ``(step_id, button_id, next_step_id)`` for every button whose target does not resolve."""
    steps = list(steps)
    index = _index(steps)
    dangling = []
    for step in steps:
        for button in step.sorted_buttons():
            if button.next_step_id is None:
                continue
            if _resolve(index, button.next_step_id, step.product_id) is None:
                dangling.append((step.id, button.id, button.next_step_id))
    return dangling


def reachable_from(entry_id: str, steps: Iterable[ScriptStep], product_id: Optional[str] = None) -> List[str]:
    """Breadth-first walk over button edges. Cycles are expected and visited once."""
    index = _index(steps)
    entry = _resolve(index, entry_id, product_id)
    if entry is None:
        return []

    seen = {entry.id}
    order = [entry.id]
    queue = deque([entry])
    while queue:
        step = queue.popleft()
        for target in successors(step):
            if target in seen:
                continue
            next_step = _resolve(index, target, product_id)
            if next_step is None:
                continue
            seen.add(target)
            order.append(target)
            queue.append(next_step)
    return order


def find_unreachable_steps(steps: Iterable[ScriptStep], products: Iterable[Product]) -> List[str]:
    """Ids of steps not reachable from any product's entry step."""
    steps = list(steps)
    reachable = set()
    for product in products:
        reachable.update(reachable_from(product.script_id, steps, product.id))
    return sorted({step.id for step in steps} - reachable)


def check_product_entry(product: Product, steps: Iterable[ScriptStep]) -> Optional[str]:
    """Describe why ``product`` cannot start a session, or return None."""
    matches = [step for step in steps if step.id == product.script_id]
    if not matches:
        return f"Entry step '{product.script_id}' of product '{product.id}' does not exist"
    if not any(step.belongs_to(product.id) for step in matches):
        owners = ", ".join(sorted({str(step.product_id) for step in matches}))
        return f"Entry step '{product.script_id}' of product '{product.id}' belongs to another product ({owners})"
    return None
