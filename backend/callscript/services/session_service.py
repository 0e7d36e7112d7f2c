# /callscript/services/session_service.py

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from callscript.models.script import AttendanceConfig
from callscript.navigation.errors import IncompleteConfigurationError, ProductNotFoundError
from callscript.navigation.session import NavigationSession, settle
from callscript.services.product_resolver import ProductResolver, product_resolver
from callscript.services.step_store import StepStore, step_store
from callscript.utils.metrics import active_sessions_gauge

# Keeps one navigation session per logged-in operator, together with the
# per-call data the renderer needs (operator and customer names).

logger = logging.getLogger(__name__)


@dataclass
class OperatorSession:
    operator_id: str
    navigation: NavigationSession
    operator_name: str = ""
    customer_first_name: Optional[str] = None
    customer_full_name: Optional[str] = None

    def clear_customer(self) -> None:
        self.customer_first_name = None
        self.customer_full_name = None


class OperatorSessionRegistry:

    def __init__(self, step_store: StepStore, product_resolver: ProductResolver):
        self.step_store = step_store
        self.product_resolver = product_resolver
        self._sessions: Dict[str, OperatorSession] = {}

    def get(self, operator_id: str) -> Optional[OperatorSession]:
        return self._sessions.get(operator_id)

    def get_or_create(self, operator_id: str, operator_name: Optional[str] = None) -> OperatorSession:
        session = self._sessions.get(operator_id)
        if session is None:
            session = OperatorSession(
                operator_id=operator_id,
                navigation=NavigationSession(self.step_store, self.product_resolver, session_id=operator_id),
            )
            self._sessions[operator_id] = session
            logger.info(f"Created navigation session for operator {operator_id}.")
        if operator_name:
            session.operator_name = operator_name
        return session

    async def start(
        self, operator_id: str, config: AttendanceConfig, operator_name: Optional[str] = None
    ) -> OperatorSession:
        session = self.get_or_create(operator_id, operator_name)
        applied = await session.navigation.start(config)
        if applied:
            session.clear_customer()
        self._update_gauge()
        return session

    async def select_product(self, operator_id: str, product_id: str) -> OperatorSession:
        """
        Product shortcut: end the current call and start the chosen product.

        The previous attendance selection is reused when the product accepts
        it; otherwise the product's own first attendance and person types are used.
        """
        session = self.get_or_create(operator_id)
        product = await settle(self.product_resolver.get_product_by_id(product_id))
        if product is None:
            raise ProductNotFoundError(f"Product '{product_id}' not found", product_id=product_id)

        previous = session.navigation.attendance_config
        if previous is not None and product.is_eligible(previous.attendance_type, previous.person_type):
            attendance_type, person_type = previous.attendance_type, previous.person_type
        elif product.attendance_types and product.person_types:
            attendance_type = sorted(product.attendance_types, key=lambda value: value.value)[0]
            person_type = sorted(product.person_types, key=lambda value: value.value)[0]
        else:
            raise IncompleteConfigurationError(
                f"Product '{product_id}' has no attendance or person types", product_id=product_id
            )

        config = AttendanceConfig(attendance_type=attendance_type, person_type=person_type, product_id=product.id)
        # Start on a fresh session first; the current call survives a failed start.
        replacement = NavigationSession(self.step_store, self.product_resolver, session_id=operator_id)
        await replacement.start(config)
        session.navigation.reset()
        session.navigation = replacement
        session.clear_customer()
        self._update_gauge()
        logger.info(f"Operator {operator_id} switched to product {product.id}.")
        return session

    def set_customer(
        self, operator_id: str, first_name: Optional[str], full_name: Optional[str] = None
    ) -> OperatorSession:
        session = self.get_or_create(operator_id)
        session.customer_first_name = first_name
        session.customer_full_name = full_name
        return session

    def reset(self, operator_id: str) -> Optional[OperatorSession]:
        session = self._sessions.get(operator_id)
        if session is not None:
            session.navigation.reset()
            session.clear_customer()
            self._update_gauge()
        return session

    def force_logout(self, operator_id: str) -> bool:
        """End the operator's call and forget the session."""
        session = self._sessions.pop(operator_id, None)
        if session is None:
            return False
        session.navigation.reset()
        session.clear_customer()
        self._update_gauge()
        logger.info(f"Operator {operator_id} was logged out.")
        return True

    def reset_all(self) -> int:
        """Log every operator out. Returns how many sessions were dropped."""
        count = len(self._sessions)
        for session in self._sessions.values():
            session.navigation.reset()
            session.clear_customer()
        self._sessions.clear()
        self._update_gauge()
        return count

    def active_count(self) -> int:
        return sum(1 for session in self._sessions.values() if session.navigation.is_active)

    def _update_gauge(self) -> None:
        active_sessions_gauge.set(self.active_count())

    def __len__(self) -> int:
        return len(self._sessions)


# Globally accessible instance
session_registry = OperatorSessionRegistry(step_store, product_resolver)
