# /callscript/utils/dependencies.py

from fastapi import HTTPException, status

from callscript.services.product_resolver import InMemoryProductResolver, product_resolver
from callscript.services.session_service import OperatorSession, OperatorSessionRegistry, session_registry
from callscript.services.step_store import InMemoryStepStore, step_store

# FastAPI dependency providers. Routes receive the stores through Depends so
# tests can swap them with app.dependency_overrides.


def get_step_store() -> InMemoryStepStore:
    return step_store


def get_product_resolver() -> InMemoryProductResolver:
    return product_resolver


def get_session_registry() -> OperatorSessionRegistry:
    return session_registry


def require_operator_session(operator_id: str, registry: OperatorSessionRegistry) -> OperatorSession:
    session = registry.get(operator_id)
    if session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No session for this operator")
    return session
