# /callscript/services/step_store.py

import logging
from typing import Awaitable, Callable, Dict, Iterable, List, Optional, Union

from callscript.models.script import ScriptStep

# Read side of the script graph. The navigation session resolves every
# transition through this interface, one lookup at a time, instead of
# materialising a product's whole graph.

logger = logging.getLogger(__name__)

StoreListener = Callable[[], None]


class StoreNotifier:
    """
    Publish/subscribe "store updated" signal for long-lived consumers that
    cache step or product lists (admin screens, product pickers).
    """

    def __init__(self):
        self._listeners: List[StoreListener] = []

    def subscribe(self, listener: StoreListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: StoreListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def notify_update(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception as e:
                # One broken subscriber must not stop the others from refreshing.
                logger.error(f"Store update listener {listener!r} failed: {e}", exc_info=True)


class StepStore:
    """
    Interface consumed by the navigation session. Implementations may return
    plain values or awaitables; callers settle either.
    """

    def get_step_by_id(
        self, step_id: str, product_id: Optional[str] = None
    ) -> Union[Optional[ScriptStep], Awaitable[Optional[ScriptStep]]]:
        raise NotImplementedError

    def get_all_steps(self) -> Union[List[ScriptStep], Awaitable[List[ScriptStep]]]:
        raise NotImplementedError


class InMemoryStepStore(StepStore, StoreNotifier):
    """Dict-backed step store used by the service and the tests."""

    def __init__(self, steps: Optional[Iterable[ScriptStep]] = None):
        StoreNotifier.__init__(self)
        self._steps: Dict[str, ScriptStep] = {}
        if steps:
            for step in steps:
                self._steps[step.id] = step

    async def get_step_by_id(self, step_id: str, product_id: Optional[str] = None) -> Optional[ScriptStep]:
        if not step_id:
            return None
        if product_id:
            # Restrict to the product's steps before matching by id.
            candidates = (step for step in self._steps.values() if step.belongs_to(product_id))
            return next((step for step in candidates if step.id == step_id), None)
        return self._steps.get(step_id)

    async def get_all_steps(self) -> List[ScriptStep]:
        return sorted(self._steps.values(), key=lambda step: step.order)

    async def get_steps_by_product(self, product_id: str) -> List[ScriptStep]:
        steps = [step for step in self._steps.values() if step.product_id == product_id]
        return sorted(steps, key=lambda step: step.order)

    def upsert_steps(self, steps: Iterable[ScriptStep]) -> int:
        count = 0
        for step in steps:
            self._steps[step.id] = step
            count += 1
        if count:
            logger.info(f"Stored {count} script steps.")
            self.notify_update()
        return count

    def remove_step(self, step_id: str) -> bool:
        removed = self._steps.pop(step_id, None) is not None
        if removed:
            self.notify_update()
        return removed

    def clear(self) -> None:
        self._steps.clear()
        self.notify_update()

    def __len__(self) -> int:
        return len(self._steps)


# Globally accessible instance
step_store = InMemoryStepStore()
