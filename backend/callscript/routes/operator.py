# /callscript/routes/operator.py

import logging
from fastapi import APIRouter, Depends, HTTPException, status

from callscript.config.settings import settings
from callscript.models.api import (
    AdvanceRequest, APIResponse, ButtonView, CustomerRequest, ProductSelectRequest,
    SearchRequest, SessionView, StartSessionRequest, StepView,
)
from callscript.models.script import AttendanceType, PersonType
from callscript.navigation.errors import ConfigurationError
from callscript.navigation.rendering import highlight_title, render_content
from callscript.navigation.session import make_attendance_config
from callscript.services.product_resolver import InMemoryProductResolver
from callscript.services.session_service import OperatorSession, OperatorSessionRegistry
from callscript.utils.dependencies import (
    get_product_resolver, get_session_registry, require_operator_session,
)

# Endpoints driving the operator's call screen. Every response carries the
# full session view so the screen can re-render from a single payload.

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/operator",
    tags=["Operator"],
)


def build_session_view(session: OperatorSession) -> SessionView:
    navigation = session.navigation
    step = navigation.current_step
    step_view = None
    if step is not None:
        step_view = StepView(
            id=step.id,
            title=step.title,
            highlighted_title=highlight_title(step.title, navigation.search_query),
            content=step.content,
            rendered_content=render_content(
                step.content,
                session.operator_name,
                session.customer_first_name,
                session.customer_full_name,
            ),
            buttons=[
                ButtonView(
                    id=button.id,
                    label=button.label,
                    next_step_id=button.next_step_id,
                    primary=button.primary,
                    variant=button.variant,
                )
                for button in step.sorted_buttons()
            ],
            tabulation_info=step.tabulation_info,
        )

    config = navigation.attendance_config
    return SessionView(
        operator_id=session.operator_id,
        is_active=navigation.is_active,
        can_go_back=navigation.can_go_back,
        history=navigation.history,
        search_query=navigation.search_query,
        attendance_config=config.model_dump(mode="json") if config else None,
        current_step=step_view,
    )


def _session_response(session: OperatorSession, message: str) -> APIResponse:
    return APIResponse(
        success=True,
        message=message,
        data=build_session_view(session).model_dump(mode="json"),
        version=settings.api_version
    )


def _configuration_failed(error: ConfigurationError) -> HTTPException:
    logger.warning(f"Could not start attendance: {error}")
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail={"message": error.operator_message, "error": str(error)},
    )


@router.get("/products", response_model=APIResponse)
async def list_eligible_products(
    attendance_type: AttendanceType,
    person_type: PersonType,
    resolver: InMemoryProductResolver = Depends(get_product_resolver),
):
    """Products offered on the configuration screen for this selection."""
    products = await resolver.get_eligible_products(attendance_type, person_type)
    return APIResponse(
        success=True,
        message="Products retrieved" if products else "Nenhum produto disponível para esta combinação.",
        data={"products": [{"id": product.id, "name": product.name} for product in products]},
        version=settings.api_version
    )


@router.post("/sessions/{operator_id}/start", response_model=APIResponse)
async def start_session(
    operator_id: str,
    body: StartSessionRequest,
    registry: OperatorSessionRegistry = Depends(get_session_registry),
):
    try:
        config = make_attendance_config(body.attendance_type, body.person_type, body.product_id)
        session = await registry.start(operator_id, config, operator_name=body.operator_name)
    except ConfigurationError as e:
        raise _configuration_failed(e)
    return _session_response(session, "Attendance started")


@router.get("/sessions/{operator_id}", response_model=APIResponse)
async def get_session(
    operator_id: str,
    registry: OperatorSessionRegistry = Depends(get_session_registry),
):
    session = require_operator_session(operator_id, registry)
    await session.navigation.refresh_current_step()
    return _session_response(session, "Session retrieved")


@router.post("/sessions/{operator_id}/advance", response_model=APIResponse)
async def advance(
    operator_id: str,
    body: AdvanceRequest,
    registry: OperatorSessionRegistry = Depends(get_session_registry),
):
    session = require_operator_session(operator_id, registry)
    applied = await session.navigation.advance(body.next_step_id)
    if applied and not session.navigation.is_active:
        session.clear_customer()
        return _session_response(session, "Attendance finished")
    return _session_response(session, "Step changed" if applied else "Transition ignored")


@router.post("/sessions/{operator_id}/back", response_model=APIResponse)
async def go_back(
    operator_id: str,
    registry: OperatorSessionRegistry = Depends(get_session_registry),
):
    session = require_operator_session(operator_id, registry)
    applied = await session.navigation.go_back()
    return _session_response(session, "Went back" if applied else "Transition ignored")


@router.post("/sessions/{operator_id}/search", response_model=APIResponse)
async def search(
    operator_id: str,
    body: SearchRequest,
    registry: OperatorSessionRegistry = Depends(get_session_registry),
):
    session = require_operator_session(operator_id, registry)
    found = await session.navigation.jump_to_step_by_title_search(body.query)
    return _session_response(session, "Step found" if found else "No results")


@router.post("/sessions/{operator_id}/reset", response_model=APIResponse)
async def reset_session(
    operator_id: str,
    registry: OperatorSessionRegistry = Depends(get_session_registry),
):
    require_operator_session(operator_id, registry)
    session = registry.reset(operator_id)
    return _session_response(session, "Back to start")


@router.post("/sessions/{operator_id}/product", response_model=APIResponse)
async def select_product(
    operator_id: str,
    body: ProductSelectRequest,
    registry: OperatorSessionRegistry = Depends(get_session_registry),
):
    """Shortcut that switches the call straight to another product's script."""
    try:
        session = await registry.select_product(operator_id, body.product_id)
    except ConfigurationError as e:
        raise _configuration_failed(e)
    return _session_response(session, "Product selected")


@router.post("/sessions/{operator_id}/customer", response_model=APIResponse)
async def set_customer(
    operator_id: str,
    body: CustomerRequest,
    registry: OperatorSessionRegistry = Depends(get_session_registry),
):
    require_operator_session(operator_id, registry)
    session = registry.set_customer(operator_id, body.first_name, body.full_name)
    return _session_response(session, "Customer updated")
