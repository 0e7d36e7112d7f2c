# /callscript/navigation/session.py

"""
Navigation session state machine.

Tracks the operator's position inside one product's script graph:
- ``start`` resolves the product's entry step and opens the session
- ``advance`` follows a button edge (``None`` ends the call)
- ``go_back`` undoes exactly the last transition using the history stack
- ``jump_to_step_by_title_search`` moves to the first step whose title matches
- ``reset`` is the single way back to the unconfigured state

Every lookup goes through the injected step store / product resolver, which
may be synchronous or asynchronous. State is applied only after a lookup has
settled, and only if no newer request was issued meanwhile (last write wins),
so a session is never observed half-way through a transition.

Content is passed through verbatim; placeholder substitution belongs to the
renderer.
"""

import inspect
from typing import Any, List, Optional
from uuid import uuid4

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from callscript.models.script import AttendanceConfig, ScriptStep
from callscript.navigation.errors import (
    EntryStepNotFoundError,
    IncompleteConfigurationError,
    ProductNotFoundError,
)
from callscript.services.product_resolver import ProductResolver
from callscript.services.step_store import StepStore
from callscript.utils.metrics import dangling_reference_counter, navigation_transitions_counter

log = structlog.get_logger(__name__)


class SessionSnapshot(BaseModel):
    """Immutable, read-only view of a navigation session."""
    session_id: str
    is_active: bool
    can_go_back: bool
    current_step: Optional[ScriptStep] = None
    history: List[str] = Field(default_factory=list)
    attendance_config: Optional[AttendanceConfig] = None
    search_query: str = ""

    model_config = ConfigDict(frozen=True)


async def settle(result: Any) -> Any:
    """Await ``result`` if the collaborator returned an awaitable."""
    if inspect.isawaitable(result):
        return await result
    return result


def make_attendance_config(
    attendance_type: Optional[str],
    person_type: Optional[str],
    product_id: Optional[str],
) -> AttendanceConfig:
    """
    Build the frozen configuration snapshot from a raw operator selection.

    Raises:
        IncompleteConfigurationError: if a field is missing, blank or not a known value
    """
    fields = {
        "attendance_type": attendance_type,
        "person_type": person_type,
        "product_id": product_id,
    }
    missing = [name for name, value in fields.items() if value is None or not str(value).strip()]
    if missing:
        raise IncompleteConfigurationError(
            f"Missing attendance selection: {', '.join(missing)}", missing=missing
        )
    try:
        return AttendanceConfig(**fields)
    except ValidationError as e:
        raise IncompleteConfigurationError(f"Invalid attendance selection: {e}") from e


class NavigationSession:

    def __init__(
        self,
        step_store: StepStore,
        product_resolver: ProductResolver,
        session_id: Optional[str] = None,
    ):
        self.step_store = step_store
        self.product_resolver = product_resolver
        self.session_id = session_id or uuid4().hex
        self._current_step: Optional[ScriptStep] = None
        self._history: List[str] = []
        self._attendance_config: Optional[AttendanceConfig] = None
        self._search_query: str = ""
        self._request_seq = 0
        self.log = log.bind(session_id=self.session_id)

    # ==================== Read accessors ====================

    @property
    def current_step(self) -> Optional[ScriptStep]:
        return self._current_step

    @property
    def history(self) -> List[str]:
        return list(self._history)

    @property
    def is_active(self) -> bool:
        return self._current_step is not None and bool(self._history)

    @property
    def can_go_back(self) -> bool:
        return len(self._history) > 1

    @property
    def attendance_config(self) -> Optional[AttendanceConfig]:
        return self._attendance_config

    @property
    def search_query(self) -> str:
        return self._search_query

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            session_id=self.session_id,
            is_active=self.is_active,
            can_go_back=self.can_go_back,
            current_step=self._current_step,
            history=list(self._history),
            attendance_config=self._attendance_config,
            search_query=self._search_query,
        )

    # ==================== Request ordering ====================

    def _next_request(self) -> int:
        self._request_seq += 1
        return self._request_seq

    def _is_stale(self, token: int, operation: str) -> bool:
        if token != self._request_seq:
            self.log.info("navigation.stale_result_discarded", operation=operation)
            navigation_transitions_counter.labels(operation=operation, outcome="stale").inc()
            return True
        return False

    def _product_scope(self) -> Optional[str]:
        if self._attendance_config is None:
            return None
        return self._attendance_config.product_id

    async def _find_step(self, step_id: str) -> Optional[ScriptStep]:
        """
        Resolve a step within the product of the step on screen, then within
        the configured product. A title search may have left them different.
        """
        scopes: List[Optional[str]] = []
        if self._current_step is not None and self._current_step.product_id:
            scopes.append(self._current_step.product_id)
        configured = self._product_scope()
        if configured and configured not in scopes:
            scopes.append(configured)
        for scope in scopes or [None]:
            step = await settle(self.step_store.get_step_by_id(step_id, scope))
            if step is not None:
                return step
        return None

    # ==================== Operations ====================

    async def start(self, config: AttendanceConfig) -> bool:
        """
        Open a session at the entry step of the configured product.

        Returns False only when a newer request superseded this one.

        Raises:
            IncompleteConfigurationError: a selection field is blank
            ProductNotFoundError: the product id does not resolve
            EntryStepNotFoundError: the product's script_id does not resolve
        """
        if config is None or not config.product_id.strip():
            raise IncompleteConfigurationError("Missing attendance selection: product_id")

        token = self._next_request()
        product = await settle(self.product_resolver.get_product_by_id(config.product_id))
        if self._is_stale(token, "start"):
            return False
        if product is None:
            navigation_transitions_counter.labels(operation="start", outcome="product_not_found").inc()
            self.log.warning("navigation.product_not_found", product_id=config.product_id)
            raise ProductNotFoundError(
                f"Product '{config.product_id}' not found", product_id=config.product_id
            )

        entry_step = await settle(self.step_store.get_step_by_id(product.script_id, product.id))
        if self._is_stale(token, "start"):
            return False
        if entry_step is None:
            navigation_transitions_counter.labels(operation="start", outcome="entry_not_found").inc()
            self.log.warning(
                "navigation.entry_step_not_found", product_id=product.id, script_id=product.script_id
            )
            raise EntryStepNotFoundError(
                f"Entry step '{product.script_id}' of product '{product.id}' not found",
                product_id=product.id,
                script_id=product.script_id,
            )

        self._current_step = entry_step
        self._history = [entry_step.id]
        self._attendance_config = config
        self._search_query = ""
        navigation_transitions_counter.labels(operation="start", outcome="applied").inc()
        self.log.info("navigation.started", product_id=product.id, step_id=entry_step.id)
        return True

    async def advance(self, next_step_id: Optional[str]) -> bool:
        """
        Follow a button edge. An empty target ends the call and resets the session.
        A target that does not resolve leaves the session untouched.
        """
        if not next_step_id:
            self.reset()
            return True
        if not self.is_active:
            self.log.debug("navigation.advance_ignored_inactive", next_step_id=next_step_id)
            return False

        token = self._next_request()
        step = await self._find_step(next_step_id)
        if self._is_stale(token, "advance"):
            return False
        if step is None:
            dangling_reference_counter.inc()
            navigation_transitions_counter.labels(operation="advance", outcome="dangling").inc()
            self.log.warning(
                "navigation.dangling_reference",
                from_step_id=self._current_step.id if self._current_step else None,
                next_step_id=next_step_id,
                product_id=self._product_scope(),
            )
            return False

        self._current_step = step
        self._history.append(step.id)
        self._search_query = ""
        navigation_transitions_counter.labels(operation="advance", outcome="applied").inc()
        self.log.debug("navigation.advanced", step_id=step.id, depth=len(self._history))
        return True

    async def go_back(self) -> bool:
        """Undo the last transition. A no-op at the entry step."""
        if not self.can_go_back:
            self.log.debug("navigation.back_at_root")
            return False

        token = self._next_request()
        previous_id = self._history[-2]
        step = await self._find_step(previous_id)
        if self._is_stale(token, "go_back"):
            return False
        if step is None:
            # History is left unpopped so current_step keeps matching its top.
            navigation_transitions_counter.labels(operation="go_back", outcome="missing").inc()
            self.log.error("navigation.history_step_missing", step_id=previous_id)
            return False

        self._history.pop()
        self._current_step = step
        self._search_query = ""
        navigation_transitions_counter.labels(operation="go_back", outcome="applied").inc()
        self.log.debug("navigation.went_back", step_id=step.id, depth=len(self._history))
        return True

    async def jump_to_step_by_title_search(self, query: str) -> bool:
        """
        Record the search query and jump to the first step whose title contains it.

        The match replaces the current step without extending history, so a
        later ``go_back`` returns relative to the history top, not to the step
        shown before the search.
        """
        self._search_query = query or ""
        if not self.is_active or not self._search_query.strip():
            return False

        token = self._next_request()
        steps = await settle(self.step_store.get_all_steps())
        if self._is_stale(token, "search"):
            return False

        needle = self._search_query.lower()
        match = next((step for step in steps or [] if needle in step.title.lower()), None)
        if match is None:
            navigation_transitions_counter.labels(operation="search", outcome="miss").inc()
            self.log.debug("navigation.search_miss", query=self._search_query)
            return False

        self._current_step = match
        navigation_transitions_counter.labels(operation="search", outcome="applied").inc()
        self.log.debug("navigation.search_jump", step_id=match.id, query=self._search_query)
        return True

    async def refresh_current_step(self) -> bool:
        """Re-read the displayed step so admin edits show up without moving."""
        if self._current_step is None:
            return False
        # Read-only: it must not cancel a navigation request in flight.
        token = self._request_seq
        step = await self._find_step(self._current_step.id)
        if token != self._request_seq or step is None:
            return False
        self._current_step = step
        return True

    def reset(self) -> None:
        """End the session. Also invalidates any lookup still in flight."""
        was_active = self.is_active
        self._next_request()
        self._current_step = None
        self._history = []
        self._attendance_config = None
        self._search_query = ""
        if was_active:
            navigation_transitions_counter.labels(operation="reset", outcome="applied").inc()
            self.log.info("navigation.reset")
